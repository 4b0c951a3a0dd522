"""
Tests for the SVD projection.
"""

import numpy as np
import pytest

from guided_cluster.errors import ComputationError
from guided_cluster.projection import project


# ------------------------------------------------------------------
# Degenerate inputs
# ------------------------------------------------------------------


def test_no_rows():
    result = project(np.zeros((0, 3)))
    assert result.points.shape == (0, 2)
    assert result.explained_variance == (1.0, 0.0)
    assert result.total_variance_explained == 1.0


def test_no_columns():
    result = project(np.zeros((4, 0)))
    np.testing.assert_array_equal(result.points, [[0, 0], [1, 0], [2, 0], [3, 0]])
    assert result.explained_variance == (1.0, 0.0)


def test_single_column_jitter():
    result = project(np.array([[2.0], [-1.0], [0.5]]))
    np.testing.assert_allclose(result.points, [[2.0, 0.0], [-1.0, 0.1], [0.5, 0.2]])
    assert result.explained_variance == (1.0, 0.0)


def test_zero_variance_matrix():
    result = project(np.full((5, 3), 2.0))
    assert result.points.shape == (5, 2)
    assert result.explained_variance == (1.0, 0.0)


# ------------------------------------------------------------------
# SVD path
# ------------------------------------------------------------------


def test_points_are_left_singular_vectors(rng):
    values = rng.standard_normal((25, 5))
    result = project(values)

    centered = values - values.mean(axis=0)
    u, s, _ = np.linalg.svd(centered, full_matrices=False)

    np.testing.assert_allclose(np.abs(result.points[:, 0]), np.abs(u[:, 0]))
    np.testing.assert_allclose(np.abs(result.points[:, 1]), np.abs(u[:, 1]))
    np.testing.assert_allclose(np.linalg.norm(result.points, axis=0), [1.0, 1.0])


def test_explained_variance_uses_all_components(rng):
    values = rng.standard_normal((25, 5)) * np.array([5.0, 3.0, 1.0, 0.5, 0.1])
    result = project(values)

    centered = values - values.mean(axis=0)
    s = np.linalg.svd(centered, compute_uv=False)
    eigenvalues = s ** 2 / (len(values) - 1)
    expected = eigenvalues[:2] / eigenvalues.sum()

    np.testing.assert_allclose(result.explained_variance, expected)
    assert result.total_variance_explained == pytest.approx(expected.sum())
    assert result.explained_variance[0] >= result.explained_variance[1]


def test_spread_does_not_depend_on_scale(rng):
    values = rng.standard_normal((15, 3))
    small = project(values)
    large = project(values * 100.0)

    np.testing.assert_allclose(np.abs(small.points), np.abs(large.points), atol=1e-10)
    np.testing.assert_allclose(small.explained_variance, large.explained_variance)


def test_single_row():
    result = project(np.array([[1.0, 2.0, 3.0]]))
    assert result.points.shape == (1, 2)
    assert result.points[0, 1] == 0.0
    assert result.explained_variance == (1.0, 0.0)


def test_svd_failure_wrapped(monkeypatch, rng):
    def broken_svd(*args, **kwargs):
        raise np.linalg.LinAlgError("SVD did not converge")

    monkeypatch.setattr(np.linalg, "svd", broken_svd)
    with pytest.raises(ComputationError) as excinfo:
        project(rng.standard_normal((6, 3)))
    assert excinfo.value.stage == "projection"
