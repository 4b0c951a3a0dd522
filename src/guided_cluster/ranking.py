"""
Rank embedding dimensions by how well they separate labeled groups.
"""

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Mapping, Sequence

import numpy as np
from scipy import stats

from .errors import ComputationError, ValidationError

logger = logging.getLogger(__name__)

SIGNIFICANCE_LEVEL = 0.05


@dataclass(frozen=True)
class DimensionStat:
    """Separability score of one embedding dimension."""
    dimension: int
    p_value: float
    statistic: float

    @property
    def significant(self) -> bool:
        return self.p_value < SIGNIFICANCE_LEVEL


def group_rows(labels: Mapping[str, str], ids: Sequence[str]) -> dict[str, list[int]]:
    """
    Map each label to the row indices carrying it.

    Groups appear in the order of their first labeled row. Rows whose
    identifier is missing from ``labels`` or maps to an empty label are
    left out.
    """
    groups: dict[str, list[int]] = {}
    for index, identifier in enumerate(ids):
        label = labels.get(identifier)
        if label:
            groups.setdefault(label, []).append(index)
    return groups


def welch_ttest(group1: np.ndarray, group2: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Two-sided Welch's t-test, column by column.

    Args:
        group1: (n1, d) samples of the first group
        group2: (n2, d) samples of the second group

    Returns:
        (p_values, abs_statistics), each of shape (d,). Columns where either
        group has fewer than 2 samples, or where the test is undefined
        (zero variance in both groups), get p = 1 and statistic = 0.
    """
    d = group1.shape[1]
    p_values = np.ones(d)
    statistics = np.zeros(d)

    if len(group1) < 2 or len(group2) < 2:
        return p_values, statistics

    with np.errstate(divide="ignore", invalid="ignore"):
        t, p = stats.ttest_ind(group1, group2, axis=0, equal_var=False)

    t = np.atleast_1d(np.asarray(t, dtype=np.float64))
    p = np.atleast_1d(np.asarray(p, dtype=np.float64))
    # a column constant across both groups carries no signal
    flat = np.ptp(np.vstack([group1, group2]), axis=0) == 0
    defined = np.isfinite(p) & ~flat
    p_values[defined] = np.clip(p[defined], 0.0, 1.0)
    statistics[defined] = np.abs(t[defined])
    return p_values, statistics


def score_dimensions(vectors: np.ndarray, groups: dict[str, list[int]]) -> tuple[np.ndarray, np.ndarray]:
    """
    Best (smallest) p-value per dimension over every pair of groups.

    Pairs are visited in group order; a later pair only replaces the current
    best on a strictly smaller p-value.
    """
    n_dims = vectors.shape[1]
    best_p = np.ones(n_dims)
    best_stat = np.zeros(n_dims)

    for (name1, rows1), (name2, rows2) in combinations(groups.items(), 2):
        p, t = welch_ttest(vectors[rows1], vectors[rows2])
        better = p < best_p
        best_p[better] = p[better]
        best_stat[better] = t[better]
        logger.debug(
            "Pair %r/%r: %d dimensions with p < %.2f",
            name1, name2, int(np.sum(p < SIGNIFICANCE_LEVEL)), SIGNIFICANCE_LEVEL,
        )

    return best_p, best_stat


def rank_dimensions(
    vectors: np.ndarray,
    labels: Mapping[str, str],
    ids: Sequence[str],
    top_n: int,
) -> tuple[list[int], list[DimensionStat]]:
    """
    Select the dimensions that best separate the labeled groups.

    Every dimension is scored by a Welch's t-test between every pair of
    groups and keeps its smallest p-value. Dimensions are sorted by that
    p-value (stable, so ties keep dimension order) and the first
    ``min(top_n, D)`` are returned.

    Args:
        vectors: (N, D) embedding matrix
        labels: Partial mapping of identifier -> group name
        ids: Identifier of each row
        top_n: Number of dimensions to keep

    Returns:
        (selected_dimensions, dimension_stats)
    """
    if len(vectors) != len(ids):
        raise ValidationError(
            f"embeddings and identifiers must have the same length "
            f"({len(vectors)} != {len(ids)})"
        )
    if top_n < 1:
        raise ValidationError(f"number of dimensions must be positive, got {top_n}")

    groups = group_rows(labels, ids)
    if len(groups) < 2:
        raise ValidationError("need at least 2 labeled groups")

    logger.info(
        "Ranking %d dimensions across %d groups (%s)",
        vectors.shape[1], len(groups),
        ", ".join(f"{name}={len(rows)}" for name, rows in groups.items()),
    )

    try:
        p_values, statistics = score_dimensions(vectors, groups)
    except (ValueError, FloatingPointError) as e:
        raise ComputationError("ranking", str(e)) from e

    order = np.argsort(p_values, kind="stable")[:min(top_n, vectors.shape[1])]

    dimension_stats = [
        DimensionStat(
            dimension=int(dim),
            p_value=float(p_values[dim]),
            statistic=float(statistics[dim]),
        )
        for dim in order
    ]
    return [s.dimension for s in dimension_stats], dimension_stats
