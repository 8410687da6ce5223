#!/usr/bin/env python3
"""Tests for the fixed-length Vector and Matrix types."""

import numpy as np
import pytest

from tube_analysis.algorithms import Matrix, Vector
from tube_analysis.exceptions import DimensionError


def test_vector_arithmetic():
    a = Vector([1.0, 2.0, 3.0])
    b = Vector([0.5, 0.5, 0.5])
    assert a + b == Vector([1.5, 2.5, 3.5])
    assert a - b == Vector([0.5, 1.5, 2.5])
    assert a * 2 == Vector([2.0, 4.0, 6.0])
    assert 2 * a == Vector([2.0, 4.0, 6.0])
    assert -a == Vector([-1.0, -2.0, -3.0])
    assert a.dot(b) == pytest.approx(3.0)
    assert Vector([3.0, 4.0]).norm() == pytest.approx(5.0)


def test_vector_length_mismatch():
    with pytest.raises(DimensionError):
        Vector([1.0, 2.0]) + Vector([1.0, 2.0, 3.0])
    with pytest.raises(DimensionError):
        Vector([1.0, 2.0]).dot(Vector([1.0]))


def test_vector_requires_1d():
    with pytest.raises(DimensionError):
        Vector([[1.0, 2.0], [3.0, 4.0]])


def test_vector_is_finite():
    assert Vector([1.0, 2.0]).is_finite()
    assert not Vector([1.0, np.nan]).is_finite()
    assert not Vector([np.inf]).is_finite()


def test_matrix_vector_product():
    m = Matrix([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    assert m.shape == (3, 2)
    assert m @ Vector([1.0, 1.0]) == Vector([3.0, 7.0, 11.0])
    with pytest.raises(DimensionError):
        m @ Vector([1.0, 1.0, 1.0])


def test_matrix_product_and_transpose():
    a = Matrix([[1.0, 2.0], [3.0, 4.0]])
    b = Matrix([[0.0, 1.0], [1.0, 0.0]])
    assert a @ b == Matrix([[2.0, 1.0], [4.0, 3.0]])
    assert a.T == Matrix([[1.0, 3.0], [2.0, 4.0]])
    with pytest.raises(DimensionError):
        a @ Matrix([[1.0, 2.0, 3.0]])


def test_matrix_inverse():
    a = Matrix([[4.0, 7.0], [2.0, 6.0]])
    product = (a @ a.inverse()).to_numpy()
    np.testing.assert_allclose(product, np.eye(2), atol=1e-12)

    with pytest.raises(DimensionError):
        Matrix([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]).inverse()
    with pytest.raises(np.linalg.LinAlgError):
        Matrix([[1.0, 2.0], [2.0, 4.0]]).inverse()


def test_matrix_orthogonality():
    c, s = np.cos(0.3), np.sin(0.3)
    assert Matrix([[c, -s], [s, c]]).is_orthogonal()
    assert Matrix.identity(3).is_orthogonal()
    assert not Matrix([[1.0, 1.0], [0.0, 1.0]]).is_orthogonal()
    assert not Matrix([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]).is_orthogonal()


def test_matrix_from_columns_and_flatten():
    m = Matrix.from_columns([Vector([1.0, 2.0]), Vector([3.0, 4.0])])
    assert m == Matrix([[1.0, 3.0], [2.0, 4.0]])
    assert m.column(1) == Vector([3.0, 4.0])
    assert m.flatten() == Vector([1.0, 3.0, 2.0, 4.0])

    with pytest.raises(DimensionError):
        Matrix.from_columns([Vector([1.0, 2.0]), Vector([1.0])])
    with pytest.raises(DimensionError):
        Matrix.from_columns([])
