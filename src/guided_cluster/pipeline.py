"""
End-to-end analysis: rank dimensions, standardize, cluster and project.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

import numpy as np

from .clustering import ClusterResult, cluster
from .config import AnalysisConfig
from .errors import ValidationError
from .loader import as_matrix
from .projection import Projection, project
from .ranking import DimensionStat, rank_dimensions
from .standardize import standardize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PointRecord:
    """One row of the scatter plot."""
    x: float
    y: float
    identifier: str
    cluster: int
    label: Optional[str] = None


@dataclass(frozen=True)
class ClusterItem:
    identifier: str
    label: Optional[str] = None


@dataclass(frozen=True)
class ClusterGroup:
    """Members of one cluster, in row order."""
    id: int
    items: tuple[ClusterItem, ...]

    @property
    def size(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class AnalysisResult:
    """Everything a front end needs to show one analysis run."""
    cluster_assignments: tuple[int, ...]
    points: tuple[PointRecord, ...]
    explained_variance: tuple[float, float]
    total_variance_explained: float
    selected_dimensions: tuple[int, ...]
    dimension_stats: tuple[DimensionStat, ...]
    clusters: tuple[ClusterGroup, ...]
    num_clusters: int
    num_dimensions: int
    total_samples: int
    labeled_samples: int
    seed: int

    def to_dict(self) -> dict[str, Any]:
        """Render the response shape consumed by the presentation layer."""
        return {
            "clusterAssignments": list(self.cluster_assignments),
            "visualization": {
                "points": [
                    {
                        "x": p.x,
                        "y": p.y,
                        "identifier": p.identifier,
                        "cluster": p.cluster,
                        "label": p.label,
                    }
                    for p in self.points
                ],
                "explainedVariance": list(self.explained_variance),
                "totalVarianceExplained": self.total_variance_explained,
            },
            "statistics": self.statistics_dict(),
            "clusters": self.clusters_list(),
        }

    def statistics_dict(self) -> dict[str, Any]:
        return {
            "selectedDimensions": list(self.selected_dimensions),
            "dimensionStats": [
                {
                    "dimension": s.dimension,
                    "pValue": s.p_value,
                    "significance": "significant" if s.significant else "not significant",
                }
                for s in self.dimension_stats
            ],
            "numClusters": self.num_clusters,
            "numDimensions": self.num_dimensions,
            "totalSamples": self.total_samples,
            "labeledSamples": self.labeled_samples,
        }

    def clusters_list(self) -> list[dict[str, Any]]:
        return [
            {
                "id": group.id,
                "items": [{"identifier": i.identifier, "label": i.label} for i in group.items],
                "size": group.size,
            }
            for group in self.clusters
        ]


def assemble_result(
    ids: Sequence[str],
    labels: Mapping[str, str],
    config: AnalysisConfig,
    dimension_stats: Sequence[DimensionStat],
    clustering: ClusterResult,
    projection: Projection,
) -> AnalysisResult:
    """Merge the outputs of every stage into one AnalysisResult."""
    assignments = tuple(int(c) for c in clustering.labels)
    row_labels = [labels.get(identifier) or None for identifier in ids]

    points = tuple(
        PointRecord(
            x=float(x),
            y=float(y),
            identifier=identifier,
            cluster=assignments[i],
            label=row_labels[i],
        )
        for i, (identifier, (x, y)) in enumerate(zip(ids, projection.points))
    )

    clusters = tuple(
        ClusterGroup(
            id=cluster_id,
            items=tuple(
                ClusterItem(identifier=identifier, label=row_labels[i])
                for i, identifier in enumerate(ids)
                if assignments[i] == cluster_id
            ),
        )
        for cluster_id in range(config.num_clusters)
    )

    return AnalysisResult(
        cluster_assignments=assignments,
        points=points,
        explained_variance=projection.explained_variance,
        total_variance_explained=projection.total_variance_explained,
        selected_dimensions=tuple(s.dimension for s in dimension_stats),
        dimension_stats=tuple(dimension_stats),
        clusters=clusters,
        num_clusters=config.num_clusters,
        num_dimensions=config.num_dimensions,
        total_samples=len(ids),
        labeled_samples=sum(1 for label in row_labels if label is not None),
        seed=clustering.seed,
    )


def validate_inputs(vectors, labels: Mapping[str, str], ids: Sequence[str]) -> np.ndarray:
    """Check the boundary invariants and return the embeddings as a matrix."""
    matrix = as_matrix(vectors)

    if len(matrix) != len(ids):
        raise ValidationError(
            f"embeddings and identifiers must have the same length "
            f"({len(matrix)} != {len(ids)})"
        )
    if matrix.size == 0:
        raise ValidationError("embeddings must not be empty")
    if not np.all(np.isfinite(matrix)):
        raise ValidationError("embeddings must contain only finite numbers")
    if len({label for label in labels.values() if label}) < 2:
        raise ValidationError("need at least 2 labeled groups")

    return matrix


def run_analysis(
    vectors,
    labels: Mapping[str, str],
    ids: Sequence[str],
    config: AnalysisConfig,
) -> AnalysisResult:
    """
    Cluster embeddings using the dimensions that best separate labeled groups.

    Args:
        vectors: (N, D) embeddings, as an array or a sequence of equal-length rows
        labels: Partial mapping of identifier -> group name
        ids: Identifier of each row
        config: Dimension count, cluster count and K-means seed

    Returns:
        AnalysisResult
    """
    matrix = validate_inputs(vectors, labels, ids)
    logger.info(
        "Analyzing %d samples x %d dimensions (%d dimensions, %d clusters)",
        matrix.shape[0], matrix.shape[1], config.num_dimensions, config.num_clusters,
    )

    selected, dimension_stats = rank_dimensions(matrix, labels, ids, config.num_dimensions)
    standardized = standardize(matrix, selected)
    clustering = cluster(standardized.values, config.num_clusters, seed=config.seed)
    projection = project(standardized.values)

    return assemble_result(ids, labels, config, dimension_stats, clustering, projection)


def analyze_embeddings(embeddings, labels: Mapping[str, str], config: AnalysisConfig) -> AnalysisResult:
    """Run the analysis on a loaded EmbeddingSet."""
    return run_analysis(embeddings.vectors, labels, embeddings.identifiers, config)
