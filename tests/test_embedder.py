"""
Tests for batched embedding with retries.
"""

import numpy as np
import pytest

from guided_cluster.embedder import RateLimitError, embed_texts, should_retry_exception
from guided_cluster.errors import ValidationError

NO_WAIT = {"initial_wait": 0.0, "max_wait": 0.0, "delay": 0.0}


class FakeEmbedder:
    """Embeds a text as [len(text), batch_number]; can fail the first calls."""

    def __init__(self, fail_count: int = 0, error: Exception = None):
        self.fail_count = fail_count
        self.error = error or RateLimitError("rate limit exceeded")
        self.calls = []

    def __call__(self, texts):
        self.calls.append(list(texts))
        if len(self.calls) <= self.fail_count:
            raise self.error
        return [[float(len(t)), float(len(self.calls))] for t in texts]


def test_batches_and_order():
    embed = FakeEmbedder()
    texts = [f"text {i}" for i in range(7)]

    result = embed_texts(texts, embed, ids=[f"id{i}" for i in range(7)], batch_size=3, **NO_WAIT)

    assert [len(c) for c in embed.calls] == [3, 3, 1]
    assert result.vectors.shape == (7, 2)
    assert result.identifiers[0] == "id0"
    assert result.texts == texts
    np.testing.assert_array_equal(result.vectors[:, 1], [1, 1, 1, 2, 2, 2, 3])


def test_rate_limited_batch_is_retried():
    embed = FakeEmbedder(fail_count=2)
    result = embed_texts(["a", "b"], embed, max_retries=3, **NO_WAIT)

    assert len(embed.calls) == 3
    assert result.n_vectors == 2


def test_retries_exhausted_reraises():
    embed = FakeEmbedder(fail_count=10)
    with pytest.raises(RateLimitError):
        embed_texts(["a"], embed, max_retries=2, **NO_WAIT)
    assert len(embed.calls) == 2


def test_permanent_error_not_retried():
    embed = FakeEmbedder(fail_count=1, error=PermissionError("invalid api key"))
    with pytest.raises(PermissionError):
        embed_texts(["a"], embed, **NO_WAIT)
    assert len(embed.calls) == 1


def test_count_mismatch_rejected():
    with pytest.raises(ValidationError, match="mismatch"):
        embed_texts(["a", "b"], lambda texts: [[1.0]], **NO_WAIT)


def test_uneven_dimensions_rejected():
    def embed(texts):
        return [[1.0] * (i + 1) for i, _ in enumerate(texts)]

    with pytest.raises(ValidationError):
        embed_texts(["a", "b"], embed, **NO_WAIT)


@pytest.mark.parametrize("texts", [[], ["ok", "  "], ["ok", 3], ["x"] * 2001])
def test_invalid_texts_rejected(texts):
    with pytest.raises(ValidationError):
        embed_texts(texts, FakeEmbedder(), **NO_WAIT)


def test_should_retry_exception():
    assert should_retry_exception(RateLimitError())
    assert should_retry_exception(TimeoutError())
    assert should_retry_exception(RuntimeError("HTTP 429 Too Many Requests"))
    assert not should_retry_exception(ValueError("bad input"))
