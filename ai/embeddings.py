"""Embedding service for patient and caregiver summaries.

Wraps sentence-transformers with a lazily loaded, process-wide model,
batching, an LRU cache keyed by text, and proper error handling.
"""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Protocol, Sequence

from sentence_transformers import SentenceTransformer
from tenacity import Retrying, stop_after_attempt, wait_exponential

from be.config import settings

logger = logging.getLogger(__name__)


class EmbeddingError(Exception):
    """Raised when the model cannot be loaded or inference fails."""
    pass


class ModelState(str, Enum):
    """Lifecycle of the shared model handle."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    DISPOSED = "disposed"


class EmbeddingProvider(Protocol):
    """Anything that turns text into comparable vectors."""

    def embed(self, text: str) -> list[float]: ...

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]: ...


def _validate(texts: Sequence[str]) -> None:
    for t in texts:
        if not isinstance(t, str):
            raise ValueError("All items in texts must be strings")
        if not t.strip():
            raise ValueError("Cannot embed an empty string")


class SentenceTransformerEmbedder:
    """Sentence-transformers backed provider.

    The model is loaded on first use behind a single lock and then shared
    by every caller. Inference is serialized as well; torch modules are not
    guaranteed to be safe for concurrent ``encode`` calls.
    """

    def __init__(
        self,
        model_name: str | None = None,
        *,
        device: str | None = None,
        batch_size: int | None = None,
        normalize: bool | None = None,
        cache_size: int | None = None,
        load_attempts: int | None = None,
        load_wait: Any = None,
        model_factory: Callable[..., Any] | None = None,
    ) -> None:
        self.model_name = model_name or settings.embeddings.model_name
        self.device = device or settings.embeddings.device
        self.batch_size = batch_size or settings.embeddings.batch_size
        self.normalize = settings.embeddings.normalize_embeddings if normalize is None else normalize
        self.cache_size = settings.embeddings.cache_size if cache_size is None else cache_size
        self.load_attempts = load_attempts or settings.embeddings.load_attempts
        self._load_wait = load_wait or wait_exponential(multiplier=1, min=2, max=10)
        self._model_factory = model_factory

        self._model: Any = None
        self._state = ModelState.UNINITIALIZED
        self._init_lock = threading.Lock()
        self._infer_lock = threading.Lock()
        self._cache: OrderedDict[str, tuple[float, ...]] = OrderedDict()

    @property
    def state(self) -> ModelState:
        return self._state

    def _build_model(self) -> Any:
        factory = self._model_factory or SentenceTransformer
        return factory(self.model_name, device=self.device)

    def _ensure_model(self) -> Any:
        """Return the loaded model, loading it exactly once."""
        # dispose() may clear the model between the state check and the read
        model = self._model
        if model is not None and self._state is ModelState.READY:
            return model

        with self._init_lock:
            if self._model is not None and self._state is ModelState.READY:
                return self._model

            self._state = ModelState.LOADING
            logger.info(f"Loading embedding model: {self.model_name} on device: {self.device}")
            try:
                retrying = Retrying(
                    stop=stop_after_attempt(self.load_attempts),
                    wait=self._load_wait,
                    reraise=True,
                )
                model = retrying(self._build_model)
            except Exception as e:
                self._state = ModelState.UNINITIALIZED
                logger.error(f"Failed to load embedding model: {e}")
                raise EmbeddingError(f"Model loading failed: {e}") from e

            self._model = model
            self._state = ModelState.READY
            logger.info(f"Model loaded successfully. Embedding dim: {self.dimension}")
            return model

    @property
    def dimension(self) -> int:
        if self._model is not None and hasattr(self._model, "get_sentence_embedding_dimension"):
            return int(self._model.get_sentence_embedding_dimension())
        return settings.embeddings.dim

    def load(self) -> None:
        """Load the model now instead of on the first request."""
        self._ensure_model()

    def dispose(self) -> None:
        """Release the model and cached vectors. A later call loads it again."""
        with self._init_lock, self._infer_lock:
            if self._model is not None:
                logger.info(f"Disposing embedding model: {self.model_name}")
            self._model = None
            self._cache.clear()
            self._state = ModelState.DISPOSED

    def _cache_get(self, text: str) -> tuple[float, ...] | None:
        vector = self._cache.get(text)
        if vector is not None:
            self._cache.move_to_end(text)
        return vector

    def _cache_put(self, text: str, vector: tuple[float, ...]) -> None:
        if self.cache_size <= 0:
            return
        self._cache[text] = vector
        self._cache.move_to_end(text)
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Compute embeddings for a batch of texts.

        Args:
            texts: Non-empty strings

        Returns:
            One vector per text, in input order

        Raises:
            EmbeddingError: If the model cannot be loaded or encoding fails
            ValueError: If any text is empty or not a string
        """
        text_list = list(texts)
        if not text_list:
            return []
        _validate(text_list)

        model = self._ensure_model()

        with self._infer_lock:
            vectors: dict[str, tuple[float, ...]] = {}
            for t in text_list:
                cached = self._cache_get(t)
                if cached is not None:
                    vectors[t] = cached
            missing = list(dict.fromkeys(t for t in text_list if t not in vectors))

            if missing:
                logger.debug(
                    f"Encoding {len(missing)} texts ({len(text_list) - len(missing)} from cache)"
                )
                try:
                    encoded = model.encode(
                        missing,
                        batch_size=self.batch_size,
                        show_progress_bar=False,
                        convert_to_numpy=True,
                        normalize_embeddings=self.normalize,
                    )
                except Exception as e:
                    logger.error(f"Embedding computation failed: {e}")
                    raise EmbeddingError(f"Failed to compute embeddings: {e}") from e

                for t, row in zip(missing, encoded.tolist()):
                    vector = tuple(float(x) for x in row)
                    vectors[t] = vector
                    self._cache_put(t, vector)

        return [list(vectors[t]) for t in text_list]

    def embed(self, text: str) -> list[float]:
        """Convenience wrapper to embed a single text."""
        return self.embed_batch([text])[0]

    def model_info(self) -> dict[str, str | int]:
        """Describe the configured model without forcing a load."""
        return {
            "model_name": self.model_name,
            "dimension": self.dimension,
            "device": self.device,
            "state": self._state.value,
            "cached_vectors": len(self._cache),
        }


@lru_cache(maxsize=1)
def get_embedder() -> SentenceTransformerEmbedder:
    """Process-wide embedder built from settings."""
    return SentenceTransformerEmbedder()
