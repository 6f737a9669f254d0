"""Matching pipeline: Patient → Caregivers with semantic and location scoring.

Each candidate is scored as a weighted blend of embedding similarity between
the two text summaries and rule-based location proximity, then ranked.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Sequence

import numpy as np

from ai.embeddings import EmbeddingError, EmbeddingProvider
from be.location import location_similarity
from be.pipelines.profile_text import caregiver_text, patient_text
from be.records import CaregiverCandidate, PatientQuery, ScoredCaregiver

logger = logging.getLogger(__name__)

SEMANTIC_WEIGHT = 0.7
LOCATION_WEIGHT = 0.3


class MatchingError(Exception):
    """Raised when matching pipeline fails."""
    pass


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0.0 if either has zero norm.

    Raises:
        ValueError: If the vectors differ in length
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError("Vectors must have the same length")

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def combine_scores(semantic_score: float, location_score: float) -> float:
    """Blend the two components, clamped into [0, 1]."""
    combined = SEMANTIC_WEIGHT * semantic_score + LOCATION_WEIGHT * location_score
    return min(1.0, max(0.0, combined))


def rank(scored: list[tuple[int, ScoredCaregiver]]) -> list[ScoredCaregiver]:
    """Sort by score descending; equal scores keep their input position."""
    return [s for _, s in sorted(scored, key=lambda item: (-item[1].score, item[0]))]


async def match_caregiver_profiles(
    patient: PatientQuery,
    caregivers: Sequence[CaregiverCandidate],
    *,
    embedder: EmbeddingProvider,
    min_score: float = 0.0,
) -> list[ScoredCaregiver]:
    """Score and rank caregivers for a single patient.

    Workflow:
    1. Summarize and embed the patient once
    2. Summarize all caregivers and embed them in one batch
    3. Compute semantic (cosine) and location scores per caregiver
    4. Combine as 0.7 * semantic + 0.3 * location
    5. Drop caregivers below ``min_score`` and sort the rest

    One failing embedding fails the whole call; there are no partial results.

    Args:
        patient: Patient being matched
        caregivers: Eligible caregivers, in the order ties should keep
        embedder: Embedding provider (injected so tests can use a fake)
        min_score: Inclusive lower bound on the combined score

    Returns:
        Scored caregivers, best first

    Raises:
        MatchingError: If embedding or scoring fails
        ValueError: If min_score is outside [0, 1]
    """
    if not 0.0 <= min_score <= 1.0:
        raise ValueError("min_score must be between 0.0 and 1.0")

    if not caregivers:
        logger.info("No caregivers provided, returning empty match list")
        return []

    try:
        logger.info(f"Starting caregiver matching for {len(caregivers)} candidates")

        query_text = patient_text(patient)
        logger.debug(f"Patient text: {query_text}")
        patient_embedding = await asyncio.to_thread(embedder.embed, query_text)

        texts = [caregiver_text(c) for c in caregivers]
        caregiver_embeddings = await asyncio.to_thread(embedder.embed_batch, texts)
        if len(caregiver_embeddings) != len(caregivers):
            raise MatchingError(
                f"Embedder returned {len(caregiver_embeddings)} vectors for {len(caregivers)} caregivers"
            )

        scored: list[tuple[int, ScoredCaregiver]] = []
        for idx, (caregiver, embedding) in enumerate(zip(caregivers, caregiver_embeddings)):
            semantic_score = cosine_similarity(patient_embedding, embedding)
            location_score = location_similarity(patient.location, caregiver.location)
            final_score = combine_scores(semantic_score, location_score)

            logger.debug(
                f"Caregiver {caregiver.id}: semantic={semantic_score:.4f} "
                f"location={location_score:.2f} final={final_score:.4f}"
            )

            if final_score < min_score:
                logger.debug(f"Caregiver {caregiver.id} filtered out (below min_score {min_score})")
                continue

            scored.append((
                idx,
                ScoredCaregiver(
                    candidate=caregiver,
                    score=final_score,
                    semantic_score=semantic_score,
                    location_score=location_score,
                ),
            ))

        ranked = rank(scored)
        logger.info(
            f"Matched {len(ranked)} of {len(caregivers)} caregivers "
            f"(top score: {ranked[0].score if ranked else 0:.4f})"
        )
        return ranked

    except MatchingError:
        raise
    except EmbeddingError as e:
        logger.error(f"Embedding failed during matching: {e}")
        raise MatchingError(f"Failed to match caregivers: {e}") from e
    except Exception as e:
        logger.error(f"Matching failed: {e}", exc_info=True)
        raise MatchingError(f"Matching pipeline failed: {e}") from e
