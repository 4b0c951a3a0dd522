"""
guided-cluster: Cluster text embeddings guided by a few human labels.

Rank embedding dimensions by how well they separate labeled groups,
cluster on the most discriminative ones and project the result to 2D.
"""

__version__ = "0.1.0"

from .config import AnalysisConfig
from .errors import AnalysisError, ComputationError, ValidationError
from .loader import load_embeddings, EmbeddingSet
from .labeling import load_labels, select_for_labeling
from .ranking import rank_dimensions, DimensionStat
from .standardize import standardize, StandardizedData
from .clustering import cluster, ClusterResult
from .projection import project, Projection
from .pipeline import run_analysis, analyze_embeddings, AnalysisResult

__all__ = [
    "AnalysisConfig",
    "AnalysisError",
    "ComputationError",
    "ValidationError",
    "load_embeddings",
    "EmbeddingSet",
    "load_labels",
    "select_for_labeling",
    "rank_dimensions",
    "DimensionStat",
    "standardize",
    "StandardizedData",
    "cluster",
    "ClusterResult",
    "project",
    "Projection",
    "run_analysis",
    "analyze_embeddings",
    "AnalysisResult",
]
