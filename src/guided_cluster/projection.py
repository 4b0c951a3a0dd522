"""
2D projection of the standardized matrix for scatter plots.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .errors import ComputationError

logger = logging.getLogger(__name__)

DEGENERATE_VARIANCE = (1.0, 0.0)


@dataclass(frozen=True)
class Projection:
    """Projected points and the share of variance carried by each axis."""
    points: np.ndarray  # Shape: (n_samples, 2)
    explained_variance: tuple[float, float]
    total_variance_explained: float


def _degenerate(points: np.ndarray) -> Projection:
    return Projection(
        points=points,
        explained_variance=DEGENERATE_VARIANCE,
        total_variance_explained=sum(DEGENERATE_VARIANCE),
    )


def project(values: np.ndarray) -> Projection:
    """
    Project rows onto the first two principal directions.

    The coordinates are the first two columns of U from the SVD of the
    column-centered matrix, i.e. unit-norm left singular vectors that are
    not scaled by their singular values. Explained variance is computed
    from the eigenvalues s**2 / (N - 1) of every singular value.

    With no rows or no columns, point i is (i, 0). With a single column,
    point i is (value, i * 0.1). Both report explained variance (1.0, 0.0).
    """
    values = np.asarray(values, dtype=np.float64)
    if values.ndim == 1:
        values = values.reshape(-1, 1)
    n_rows, n_cols = values.shape

    if n_rows == 0 or n_cols == 0:
        points = np.column_stack([np.arange(n_rows, dtype=np.float64), np.zeros(n_rows)])
        return _degenerate(points)

    if n_cols < 2:
        points = np.column_stack([
            np.nan_to_num(values[:, 0]),
            np.arange(n_rows, dtype=np.float64) * 0.1,
        ])
        return _degenerate(points)

    centered = values - values.mean(axis=0)

    try:
        u, singular_values, _ = np.linalg.svd(centered, full_matrices=False)
    except np.linalg.LinAlgError as e:
        raise ComputationError("projection", str(e)) from e

    points = np.zeros((n_rows, 2))
    n_components = min(2, u.shape[1])
    points[:, :n_components] = u[:, :n_components]

    if n_rows < 2:
        return _degenerate(points)

    eigenvalues = singular_values ** 2 / (n_rows - 1)
    total_variance = float(eigenvalues.sum())
    if not np.isfinite(total_variance) or total_variance <= 0:
        logger.debug("Zero total variance, reporting degenerate explained variance")
        return _degenerate(points)

    padded = np.zeros(2)
    padded[:min(2, len(eigenvalues))] = eigenvalues[:2]
    explained = (float(padded[0] / total_variance), float(padded[1] / total_variance))

    logger.debug(
        "PCA over %d samples x %d dimensions: PC1 %.2f%%, PC2 %.2f%%",
        n_rows, n_cols, explained[0] * 100, explained[1] * 100,
    )
    return Projection(
        points=points,
        explained_variance=explained,
        total_variance_explained=explained[0] + explained[1],
    )
