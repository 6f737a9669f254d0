"""Shared pytest configuration and fixtures for the caregiver matching tests."""

import hashlib
import math
import re
import threading
import time

import numpy as np
import pytest

from ai.embeddings import EmbeddingError
from be import models
from be.records import CaregiverCandidate, PatientQuery

_WORD = re.compile(r"[a-z0-9]+")


class HashingEmbedder:
    """Deterministic bag-of-words embedder standing in for the real model."""

    def __init__(self, dim: int = 256):
        self.dim = dim
        self.calls = 0
        self.texts: list[str] = []

    def _vector(self, text: str) -> list[float]:
        vec = [0.0] * self.dim
        for token in _WORD.findall(text.lower()):
            idx = int(hashlib.md5(token.encode("utf-8")).hexdigest(), 16) % self.dim
            vec[idx] += 1.0
        norm = math.sqrt(sum(v * v for v in vec))
        return [v / norm for v in vec] if norm else vec

    def embed(self, text: str) -> list[float]:
        self.calls += 1
        self.texts.append(text)
        return self._vector(text)

    def embed_batch(self, texts):
        self.calls += 1
        self.texts.extend(texts)
        return [self._vector(t) for t in texts]


class ConstantEmbedder:
    """Returns the same unit vector for every text."""

    def __init__(self, vector=(1.0, 0.0, 0.0)):
        self.vector = list(vector)
        self.calls = 0

    def embed(self, text):
        self.calls += 1
        return list(self.vector)

    def embed_batch(self, texts):
        self.calls += 1
        return [list(self.vector) for _ in texts]


class FailingEmbedder:
    """Embeds the patient fine, then fails on the caregiver batch."""

    def __init__(self, exc: Exception | None = None):
        self.exc = exc or EmbeddingError("Failed to compute embeddings: boom")

    def embed(self, text):
        return [1.0, 0.0]

    def embed_batch(self, texts):
        raise self.exc


class SlowEmbedder(HashingEmbedder):
    """Hashing embedder whose batch call blocks for ``delay`` seconds."""

    def __init__(self, delay: float):
        super().__init__()
        self.delay = delay

    def embed_batch(self, texts):
        time.sleep(self.delay)
        return super().embed_batch(texts)


class FakeSentenceTransformer:
    """Minimal stand-in for ``sentence_transformers.SentenceTransformer``."""

    instances = 0
    lock = threading.Lock()

    def __init__(self, model_name, device="cpu", load_delay=0.0):
        with FakeSentenceTransformer.lock:
            FakeSentenceTransformer.instances += 1
        if load_delay:
            time.sleep(load_delay)
        self.model_name = model_name
        self.device = device
        self.encoded: list[list[str]] = []

    def get_sentence_embedding_dimension(self):
        return 3

    def encode(self, texts, batch_size=32, show_progress_bar=False,
               convert_to_numpy=True, normalize_embeddings=True):
        self.encoded.append(list(texts))
        rows = [[float(len(t)), 1.0, 0.0] for t in texts]
        arr = np.asarray(rows, dtype=np.float32)
        if normalize_embeddings:
            arr = arr / np.linalg.norm(arr, axis=1, keepdims=True)
        return arr


@pytest.fixture(autouse=True)
def reset_fake_model_counter():
    FakeSentenceTransformer.instances = 0
    yield


@pytest.fixture
def hashing_embedder():
    return HashingEmbedder()


@pytest.fixture
def constant_embedder():
    return ConstantEmbedder()


@pytest.fixture
def dementia_patient():
    return PatientQuery(
        condition="Dementia",
        years="3",
        schedule="Full-time",
        description="Needs help with daily routines and memory support",
        location="Accra",
    )


@pytest.fixture
def accra_dementia_caregiver():
    return CaregiverCandidate(
        id=1,
        type="nurse",
        bio="Dedicated caregiver with expertise in dementia care and memory support.",
        education_level="Tertiary",
        schedule="Full-time",
        location="Accra",
        qualifications=("Dementia Care Certificate",),
    )


@pytest.fixture
def tamale_unrelated_caregiver():
    return CaregiverCandidate(
        id=2,
        type="individual",
        bio="Enjoys cooking, gardening and driving.",
        education_level="JHS",
        schedule="week-ends",
        location="Tamale",
    )


def make_user(user_id, fullname, role="caregiver", location=None, photo_url=None):
    return models.User(
        id=user_id,
        email=f"user{user_id}@example.com",
        fullname=fullname,
        role=role,
        location=location,
        photo_url=photo_url,
    )


def make_caregiver_profile(profile_id, user, *, bio=None, schedule="Full-time",
                           qualifications=(), verification=None,
                           is_active=True, is_available=True, is_verified=True):
    profile = models.CaregiverProfile(
        id=profile_id,
        user_id=user.id,
        type="nurse",
        bio=bio,
        education_level="Tertiary",
        schedule=schedule,
        is_active=is_active,
        is_available=is_available,
        is_verified=is_verified,
    )
    profile.user = user
    profile.qualifications = [
        models.Qualification(id=profile_id * 10 + i, title=title, file_url=f"/uploads/qual-{profile_id}-{i}.pdf")
        for i, title in enumerate(qualifications)
    ]
    profile.verification = verification
    return profile


@pytest.fixture
def user_factory():
    return make_user


@pytest.fixture
def caregiver_factory():
    return make_caregiver_profile


@pytest.fixture
def fake_model_cls():
    return FakeSentenceTransformer


@pytest.fixture
def failing_embedder():
    return FailingEmbedder


@pytest.fixture
def hashing_embedder_cls():
    return HashingEmbedder


@pytest.fixture
def slow_embedder():
    return SlowEmbedder
