"""
K-means clustering of the standardized matrix.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from sklearn.cluster import KMeans

from .errors import ComputationError, ValidationError

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
# sklearn random_state bound
MAX_SEED = 2**32 - 1


@dataclass(frozen=True)
class ClusterResult:
    """Result of clustering."""
    labels: np.ndarray
    n_clusters: int
    centers: np.ndarray
    sizes: list[int]
    n_iter: int
    seed: int


def check_seed(seed) -> None:
    """Raise ValidationError unless seed is None or an int in [0, MAX_SEED]."""
    if seed is None:
        return
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
        raise ValidationError(f"seed must be an integer or None, got {seed!r}")
    if not 0 <= seed <= MAX_SEED:
        raise ValidationError(f"seed must be between 0 and {MAX_SEED}, got {seed}")


def draw_seed() -> int:
    """Fresh entropy-derived seed that fits sklearn's random_state range."""
    return int(np.random.SeedSequence().entropy % (MAX_SEED + 1))


def cluster(
    values: np.ndarray,
    k: int,
    seed: Optional[int] = None,
    max_iter: int = MAX_ITERATIONS,
) -> ClusterResult:
    """
    Partition rows into k clusters with Lloyd's K-means.

    Initial centroids are k distinct rows picked at random; refinement stops
    when assignments no longer change or after ``max_iter`` iterations.

    Args:
        values: (N, d) standardized matrix
        k: Number of clusters, 1 <= k <= N
        seed: Seed for centroid initialization. None draws a fresh one,
            which is logged and stored on the result.
        max_iter: Iteration cap

    Returns:
        ClusterResult with labels in [0, k) and (k, d) centers
    """
    n_rows = len(values)
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1:
        raise ValidationError(f"number of clusters must be a positive integer, got {k!r}")
    if k > n_rows:
        raise ValidationError(f"number of clusters ({k}) exceeds number of samples ({n_rows})")
    check_seed(seed)

    if seed is None:
        seed = draw_seed()
        logger.debug("Drew K-means seed %d", seed)

    clusterer = KMeans(
        n_clusters=k,
        init="random",
        n_init=1,
        max_iter=max_iter,
        tol=0.0,
        algorithm="lloyd",
        random_state=seed,
    )
    try:
        labels = clusterer.fit_predict(values)
    except ValueError as e:
        raise ComputationError("clustering", str(e)) from e

    labels = labels.astype(int)
    sizes = np.bincount(labels, minlength=k).tolist()
    logger.info("K-means converged in %d iteration(s), sizes %s", clusterer.n_iter_, sizes)

    return ClusterResult(
        labels=labels,
        n_clusters=k,
        centers=clusterer.cluster_centers_,
        sizes=sizes,
        n_iter=int(clusterer.n_iter_),
        seed=int(seed),
    )
