"""
Z-score standardization of the selected embedding columns.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StandardizedData:
    """Reduced matrix with each column rescaled, plus the per-column moments."""
    values: np.ndarray  # Shape: (n_samples, n_selected)
    means: np.ndarray
    stds: np.ndarray


def standardize(vectors: np.ndarray, selected_dimensions: Sequence[int]) -> StandardizedData:
    """
    Extract the selected columns and z-score each one.

    The standard deviation is the sample one (N - 1 denominator). A column
    whose std is zero, or undefined for a single row, is kept as-is:
    neither centered nor scaled.

    Args:
        vectors: (N, D) embedding matrix
        selected_dimensions: Column indices to keep, in output order

    Returns:
        StandardizedData with the (N, len(selected_dimensions)) matrix
    """
    reduced = np.asarray(vectors, dtype=np.float64)[:, list(selected_dimensions)]
    n_rows = reduced.shape[0]

    means = reduced.mean(axis=0) if n_rows else np.full(reduced.shape[1], np.nan)
    if n_rows > 1:
        stds = reduced.std(axis=0, ddof=1)
    else:
        stds = np.full(reduced.shape[1], np.nan)

    # ptp guards against rounding noise in the mean of a constant column
    constant = np.ptp(reduced, axis=0) == 0 if n_rows else np.ones(reduced.shape[1], dtype=bool)
    scale = np.isfinite(stds) & (stds > 0) & ~constant
    if n_rows > 1:
        stds[constant] = 0.0
    values = reduced.copy()
    values[:, scale] = (reduced[:, scale] - means[scale]) / stds[scale]

    if not scale.all():
        logger.debug("Left %d constant column(s) unscaled", int(np.sum(~scale)))

    return StandardizedData(values=values, means=means, stds=stds)
