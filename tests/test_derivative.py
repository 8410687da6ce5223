#!/usr/bin/env python3
"""Finite difference Jacobians and Hessians against analytic values."""

import numpy as np
import pytest

from tube_analysis.algorithms import Matrix, Vector, derivative
from tube_analysis.algorithms.config import EPS
from tube_analysis.algorithms.derivative import stepsize
from tube_analysis.exceptions import DimensionError


A = np.array([[1.0, 2.0, -1.0], [0.5, 0.0, 3.0]])


def linear(x):
    return Vector(A @ x.to_numpy())


@pytest.mark.parametrize("order", [1, 2, 4])
def test_linear_jacobian(order):
    J, H = derivative(linear, [0.3, -1.2, 2.0], order=order)
    assert H is None
    assert J.shape == (2, 3)
    np.testing.assert_allclose(J.to_numpy(), A, atol=1e-6)


@pytest.mark.parametrize("order, tolerance", [(1, 2e-2), (2, 1e-4), (4, 1e-8)])
def test_order_accuracy(order, tolerance):
    """Error of d/dx exp(x) at 1 with h = 0.01 shrinks with the order."""
    J, _ = derivative(lambda x: np.exp(x[0]), [1.0], order=order, h=0.01)
    assert abs(J[0, 0] - np.e) < tolerance


def test_scalar_hessian():
    # f = x^2 + 3xy + 2y^2
    def f(x):
        return x[0] ** 2 + 3 * x[0] * x[1] + 2 * x[1] ** 2

    J, H = derivative(f, [1.0, -0.5], order=2, hessian=True)
    np.testing.assert_allclose(J.to_numpy(), [[0.5, 1.0]], atol=1e-6)
    assert H.shape == (2, 2)
    np.testing.assert_allclose(H.to_numpy(), [[2.0, 3.0], [3.0, 4.0]], atol=1e-4)


def test_vector_hessian_layout():
    """Row i*n + j of H is the derivative of J[i, j]."""
    def f(x):
        return [x[0] * x[1], x[1] ** 2]

    _, H = derivative(f, [2.0, 3.0], order=2, hessian=True)
    expected = np.array([
        [0.0, 1.0],   # d J00 = d(x1)
        [1.0, 0.0],   # d J01 = d(x0)
        [0.0, 0.0],   # d J10 = d(0)
        [0.0, 2.0],   # d J11 = d(2 x1)
    ])
    np.testing.assert_allclose(H.to_numpy(), expected, atol=1e-4)


def test_rotated_directions():
    c, s = np.cos(0.5), np.sin(0.5)
    q = Matrix([[c, -s], [s, c]])
    J, _ = derivative(lambda x: x[0] + 2 * x[1], [0.0, 0.0], q=q)
    # derivative along column j of q is grad . q[:, j]
    np.testing.assert_allclose(J.to_numpy(), [[c + 2 * s, -s + 2 * c]], atol=1e-8)


def test_non_orthogonal_directions():
    with pytest.raises(DimensionError):
        derivative(linear, [0.0, 0.0, 0.0], q=Matrix([[1.0, 1.0, 0.0],
                                                      [0.0, 1.0, 0.0],
                                                      [0.0, 0.0, 1.0]]))
    with pytest.raises(DimensionError):
        derivative(linear, [0.0, 0.0, 0.0], q=Matrix.identity(2))


def test_unsupported_order():
    with pytest.raises(ValueError):
        derivative(linear, [0.0, 0.0, 0.0], order=3)
    with pytest.raises(ValueError):
        stepsize(3)


def test_default_stepsizes():
    assert stepsize(1) == pytest.approx(np.sqrt(EPS))
    assert stepsize(2) == pytest.approx(EPS ** (1 / 3))
    assert stepsize(4) == pytest.approx(EPS ** (1 / 4))
    assert stepsize(1, first=False) == pytest.approx(EPS ** (1 / 3))
    assert stepsize(2, first=False) == pytest.approx(EPS ** (1 / 4))
    assert stepsize(4, first=False) == pytest.approx(EPS ** (1 / 6))


def test_changing_output_length():
    calls = []

    def f(x):
        calls.append(1)
        return [1.0] * len(calls)

    with pytest.raises(DimensionError):
        derivative(f, [0.0], order=2)


@pytest.mark.parametrize("a", [-3.0, 0.0, 0.7, 25.0])
def test_square(a):
    J2, _ = derivative(lambda x: x[0] ** 2, [a], order=2)
    J1, _ = derivative(lambda x: x[0] ** 2, [a], order=1)
    assert J2[0, 0] == pytest.approx(2 * a, abs=1e-6)
    assert J1[0, 0] == pytest.approx(2 * a, abs=1e-4)


def test_accuracy_improves_with_order():
    errors = []
    for order in (1, 2, 4):
        J, _ = derivative(lambda x: np.sin(x[0]), [0.8], order=order, h=0.05)
        errors.append(abs(J[0, 0] - np.cos(0.8)))
    assert errors[0] > errors[1] > errors[2]
