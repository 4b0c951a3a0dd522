"""
Analysis configuration.

Values come from keyword arguments, or from the environment via
``AnalysisConfig.from_env()``:

    GUIDED_CLUSTER_NUM_DIMENSIONS   number of discriminative dimensions to keep
    GUIDED_CLUSTER_NUM_CLUSTERS     number of K-means clusters
    GUIDED_CLUSTER_SEED             K-means seed (unset = fresh entropy per run)
"""

import os
from dataclasses import dataclass
from typing import Optional

from .clustering import check_seed
from .errors import ValidationError

DEFAULT_NUM_DIMENSIONS = 50
DEFAULT_NUM_CLUSTERS = 3

# Slider bounds of the labeling front end. Not enforced by the pipeline.
UI_DIMENSION_RANGE = (10, 100)
UI_CLUSTER_RANGE = (2, 6)


def _positive_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise ValidationError(f"{name} must be a positive integer, got {value}")
    return value


@dataclass(frozen=True)
class AnalysisConfig:
    """Parameters for one analysis run."""
    num_dimensions: int = DEFAULT_NUM_DIMENSIONS
    num_clusters: int = DEFAULT_NUM_CLUSTERS
    seed: Optional[int] = None

    def __post_init__(self):
        _positive_int("num_dimensions", self.num_dimensions)
        _positive_int("num_clusters", self.num_clusters)
        check_seed(self.seed)

    @classmethod
    def from_env(cls, **overrides) -> "AnalysisConfig":
        """Build a config from environment variables; non-None overrides win."""
        values = {
            "num_dimensions": _env_int("GUIDED_CLUSTER_NUM_DIMENSIONS", DEFAULT_NUM_DIMENSIONS),
            "num_clusters": _env_int("GUIDED_CLUSTER_NUM_CLUSTERS", DEFAULT_NUM_CLUSTERS),
            "seed": _env_int("GUIDED_CLUSTER_SEED", None),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {raw!r}")
