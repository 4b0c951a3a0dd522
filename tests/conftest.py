"""
Shared fixtures for the guided-cluster tests.
"""

import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def two_group_data(rng):
    """
    20 rows x 10 dimensions. Rows 0-9 are group A, rows 10-19 group B;
    dimensions 0 and 1 are shifted by +5 for group B.
    """
    vectors = rng.standard_normal((20, 10))
    vectors[10:, 0] += 5.0
    vectors[10:, 1] += 5.0
    ids = [f"r{i}" for i in range(20)]
    labels = {ids[i]: "A" for i in range(10)}
    labels.update({ids[i]: "B" for i in range(10, 20)})
    return vectors, labels, ids
