"""
Finite difference Jacobian and Hessian of vector valued functions.

Step sizes follow the classical table for double precision [1]_: for an
order-k difference the optimal first derivative step is EPS^(1/(k+1)) and
the second derivative step EPS^(1/(k+2)).

References
----------
.. [1] Scilab optimization module, ``derivative.sci``
.. [2] J.F. Bonnans et al., "Numerical Optimization", Springer (2006)
"""

from typing import Callable, Optional, Sequence, Tuple, Union

import numpy as np

from ..exceptions import DimensionError
from .config import EPS
from .vector import Matrix, Vector

VectorFunction = Callable[[Vector], Union[Vector, Sequence[float], float]]

SUPPORTED_ORDERS = (1, 2, 4)


def stepsize(order: int, first: bool = True) -> float:
    """
    Default finite difference step.

    Parameters
    ----------
    order : int
        Difference order (1, 2 or 4)
    first : bool
        True for the first derivative step, False for the step used by the
        nested pass that computes the Hessian

    Returns
    -------
    h : float
        Step size
    """
    if order == 1:
        return np.sqrt(EPS) if first else EPS ** (1 / 3)
    if order == 2:
        return EPS ** (1 / 3) if first else EPS ** (1 / 4)
    if order == 4:
        return EPS ** (1 / 4) if first else EPS ** (1 / 6)
    raise ValueError(f"Unsupported order: {order} (use one of {SUPPORTED_ORDERS})")


def _evaluate(f: VectorFunction, x: Vector, m: Optional[int] = None) -> Vector:
    """Evaluate f and wrap its value as a Vector of fixed length."""
    value = f(x)
    if not isinstance(value, Vector):
        value = Vector(np.atleast_1d(np.asarray(value, dtype=float)))
    if m is not None and len(value) != m:
        raise DimensionError(f"Function returned {len(value)} values, expected {m}")
    return value


def first_derivative(
    f: VectorFunction,
    x: Vector,
    order: int,
    h: float,
    q: Matrix,
    fx: Optional[Vector] = None
) -> Matrix:
    """
    Jacobian of f at x by finite differences along the columns of q.

    Parameters
    ----------
    f : callable
        Function R^n -> R^m
    x : Vector
        Evaluation point (length n)
    order : int
        1 = forward, 2 = central, 4 = fourth-order central difference
    h : float
        Step size
    q : Matrix
        n x n orthogonal matrix; column j is the j-th differentiation direction
    fx : Vector, optional
        f(x) if already known (saves one evaluation for order 1)

    Returns
    -------
    J : Matrix
        m x n matrix, column j holds the derivative along q[:, j]
    """
    n = len(x)
    f0 = fx if fx is not None else _evaluate(f, x)
    m = len(f0)

    columns = []
    for j in range(n):
        delta = q.column(j) * h
        if order == 1:
            df = (_evaluate(f, x + delta, m) - f0) / h
        elif order == 2:
            df = (_evaluate(f, x + delta, m) - _evaluate(f, x - delta, m)) / (2 * h)
        elif order == 4:
            delta2 = delta * 2
            fph = _evaluate(f, x + delta, m)
            fmh = _evaluate(f, x - delta, m)
            fp2h = _evaluate(f, x + delta2, m)
            fm2h = _evaluate(f, x - delta2, m)
            # (f(x-2h) - 8 f(x-h) + 8 f(x+h) - f(x+2h)) / 12h
            df = ((fm2h - fmh * 8) + (fph * 8 - fp2h)) / (12 * h)
        else:
            raise ValueError(f"Unsupported order: {order} (use one of {SUPPORTED_ORDERS})")
        columns.append(df)

    return Matrix.from_columns(columns)


def derivative(
    f: VectorFunction,
    x: Union[Vector, Sequence[float]],
    order: int = 2,
    h: Optional[float] = None,
    q: Optional[Matrix] = None,
    fx: Optional[Vector] = None,
    hessian: bool = False
) -> Tuple[Matrix, Optional[Matrix]]:
    """
    Jacobian (and optionally Hessian) of f at x.

    Parameters
    ----------
    f : callable
        Function R^n -> R^m, receives a Vector and returns a Vector,
        a sequence of floats or a scalar
    x : Vector or sequence of float
        Evaluation point
    order : int
        Finite difference order: 1, 2 or 4 (default: 2)
    h : float, optional
        Step size. If None, ``stepsize(order)`` is used for the Jacobian and
        ``stepsize(order, first=False)`` for the Hessian.
    q : Matrix, optional
        Orthogonal direction matrix (default: identity)
    fx : Vector, optional
        Known value f(x), reused by order 1 differences
    hessian : bool
        Also compute the Hessian (default: False)

    Returns
    -------
    J : Matrix
        m x n Jacobian
    H : Matrix or None
        (m*n) x n Hessian, row i*n + j holds the derivative of J[i, j].
        For a scalar function (m = 1) this is the usual n x n Hessian.

    Raises
    ------
    DimensionError
        If q is not orthogonal or has the wrong size
    ValueError
        If order is not supported
    """
    if order not in SUPPORTED_ORDERS:
        raise ValueError(f"Unsupported order: {order} (use one of {SUPPORTED_ORDERS})")
    if not isinstance(x, Vector):
        x = Vector(x)
    n = len(x)

    if q is not None:
        if q.shape != (n, n):
            raise DimensionError(f"Directions matrix must be {n}x{n}, got {q.rows}x{q.cols}")
        if not q.is_orthogonal():
            raise DimensionError("Directions matrix is not orthogonal")
    else:
        q = Matrix.identity(n)

    step = h if h is not None else stepsize(order, first=True)
    J = first_derivative(f, x, order, step, q, fx)

    if not hessian:
        return J, None

    step2 = h if h is not None else stepsize(order, first=False)

    def flattened_jacobian(z: Vector) -> Vector:
        return first_derivative(f, z, order, step2, q).flatten()

    H = first_derivative(flattened_jacobian, x, order, step2, q)
    return J, H


__all__ = [
    'stepsize',
    'first_derivative',
    'derivative',
]
