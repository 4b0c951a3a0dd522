"""
Batch embedding of texts through an external embedding function.

The embedding model itself is opaque: ``embed_fn`` takes a list of strings
and returns one vector per string. This module handles batching, pacing
between batches and retrying rate-limited batches with exponential backoff.
"""

import logging
import time
from typing import Callable, Optional, Sequence

from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .errors import ValidationError
from .loader import EmbeddingSet, as_matrix

logger = logging.getLogger(__name__)

EmbedFn = Callable[[list[str]], Sequence[Sequence[float]]]

MAX_TEXTS = 2000
DEFAULT_BATCH_SIZE = 50

RETRYABLE_ERROR_PATTERNS = [
    "rate limit",
    "429",
    "503",
    "timeout",
    "timed out",
    "temporarily",
]


class RateLimitError(Exception):
    """Raised by an embed function when the service asks us to slow down."""


def should_retry_exception(exc: BaseException) -> bool:
    """Return True if *exc* looks like a transient error worth retrying."""
    if isinstance(exc, (RateLimitError, TimeoutError, ConnectionError)):
        return True
    message = str(exc).lower()
    return any(pattern in message for pattern in RETRYABLE_ERROR_PATTERNS)


def validate_texts(texts: Sequence[str]) -> list[str]:
    if not isinstance(texts, (list, tuple)):
        raise ValidationError("texts must be a list of strings")
    if not texts:
        raise ValidationError("texts must not be empty")
    if len(texts) > MAX_TEXTS:
        raise ValidationError(f"too many texts ({len(texts)}), maximum {MAX_TEXTS} allowed")
    if any(not isinstance(t, str) or not t.strip() for t in texts):
        raise ValidationError("all texts must be non-empty strings")
    return list(texts)


def embed_texts(
    texts: Sequence[str],
    embed_fn: EmbedFn,
    ids: Optional[Sequence[str]] = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_retries: int = 6,
    initial_wait: float = 1.0,
    max_wait: float = 30.0,
    delay: float = 0.1,
) -> EmbeddingSet:
    """
    Embed texts in batches.

    Args:
        texts: Texts to embed
        embed_fn: External embedding function (list of texts -> list of vectors)
        ids: Optional identifier per text
        batch_size: Texts per embed_fn call
        max_retries: Attempts per batch before giving up
        initial_wait: First backoff wait in seconds
        max_wait: Upper bound on a single backoff wait
        delay: Pause between consecutive batches

    Returns:
        EmbeddingSet with one row per text
    """
    texts = validate_texts(texts)
    if ids is not None and len(ids) != len(texts):
        raise ValidationError(f"got {len(ids)} ids for {len(texts)} texts")
    if batch_size < 1:
        raise ValidationError(f"batch_size must be positive, got {batch_size}")

    @retry(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=initial_wait, min=initial_wait, max=max_wait),
        retry=retry_if_exception(should_retry_exception),
        reraise=True,
    )
    def _embed_batch(batch: list[str]):
        return list(embed_fn(batch))

    vectors = []
    for start in range(0, len(texts), batch_size):
        batch = texts[start:start + batch_size]
        batch_vectors = _embed_batch(batch)
        if len(batch_vectors) != len(batch):
            raise ValidationError(
                f"embedding count mismatch: got {len(batch_vectors)} vectors for {len(batch)} texts"
            )
        vectors.extend(batch_vectors)
        logger.debug("Embedded %d/%d texts", len(vectors), len(texts))

        if delay and start + batch_size < len(texts):
            time.sleep(delay)

    return EmbeddingSet(
        vectors=as_matrix(vectors),
        ids=list(ids) if ids is not None else None,
        texts=texts,
        metadata={"format": "embedded"},
    )
