"""
Levenberg-Marquardt minimization of nonlinear least squares problems.

Minimizes F(x) = R(x)^T R(x) / 2 for a residual function R: R^n -> R^m.
The damping parameter v acts as an implicit trust region: trial points
solve (J^T J + v I) s = -J^T R and are accepted or rejected from the ratio
of actual to predicted reduction [1]_.

Failure semantics:
- Exhausting ``kmax`` outer iterations returns ``converged=False`` with the
  last accepted point.
- More than 50 rejected trial points within one outer iteration raises
  TooManyIterations; callers treat it as a failed fit.

References
----------
.. [1] C.T. Kelley, "Iterative Methods for Optimization", SIAM (1999),
       Algorithm 3.3.4 (trtestlm) and Algorithm 3.3.5 (levmar)
"""

import math
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple, Union

import numpy as np

from ..exceptions import DimensionError, TooManyIterations
from ..trace import GradientEntry, JacobianEntry, ResidualEntry, Trace
from .config import (
    LM_INNER_ITERATIONS, LM_MU0, LM_MU_HIGH, LM_MU_LOW, LM_V0, LM_W_DOWN, LM_W_UP,
    LevenbergMarquardtConfig,
)
from .derivative import derivative
from .vector import Matrix, Vector

ResidualFunction = Callable[[Vector], Union[Vector, Sequence[float]]]


@dataclass
class LevenbergMarquardtResult:
    """
    Result of a Levenberg-Marquardt run.

    Attributes
    ----------
    converged : bool
        Gradient norm is finite and reached the tolerance within kmax iterations
    x : Vector
        Last accepted point
    iterations : int
        Number of outer iterations performed
    fx : float
        Objective value F(x) = R^T R / 2 at x
    gradient_norm : float
        ||J^T R|| at x
    trace : Trace or None
        Diagnostics, if a trace was supplied
    """
    converged: bool
    x: Vector
    iterations: int
    fx: float
    gradient_norm: float
    trace: Optional[Trace] = None


class _Objective:
    """Residual evaluation with fixed output length and trace bookkeeping."""

    def __init__(self, residuals: ResidualFunction, trace: Optional[Trace]):
        self.residuals = residuals
        self.trace = trace
        self.m: Optional[int] = None

    def residual_vector(self, x: Vector) -> Vector:
        r = self.residuals(x)
        if not isinstance(r, Vector):
            r = Vector(np.atleast_1d(np.asarray(r, dtype=float)))
        if self.m is None:
            self.m = len(r)
        elif len(r) != self.m:
            raise DimensionError(f"Residual function returned {len(r)} values, expected {self.m}")
        return r

    def __call__(self, x: Vector, record: bool = True) -> Tuple[Vector, float]:
        r = self.residual_vector(x)
        fx = r.dot(r) / 2
        if self.trace is not None:
            if record:
                self.trace.residuals.append(ResidualEntry(r=r.to_numpy(), x=x.to_numpy(), fx=fx))
            self.trace.function_calls += 1
        return r, fx


def _trial_point(xc: Vector, jac: Matrix, jac_t: Matrix, gradc: Vector, v: float) -> Vector:
    """Solve (J^T J + v I) s = -g and return xc + s."""
    hc = jac_t @ jac + Matrix.identity(len(xc)) * v
    return xc - hc.inverse() @ gradc


def _trtestlm(
    objective: _Objective,
    xc: Vector,
    fc: float,
    jac: Matrix,
    jac_t: Matrix,
    gradc: Vector,
    xt: Vector,
    rt: Vector,
    ft: float,
    v: float
) -> Tuple[Vector, Vector, float, float]:
    """
    Test trial points until one is accepted (Kelley, Algorithm 3.3.4).

    Returns
    -------
    x, R(x), F(x), v : accepted point, its residual and objective, new damping

    Raises
    ------
    TooManyIterations
        If no trial point is accepted within 50 iterations
    """
    iteration = 0
    while iteration <= LM_INNER_ITERATIONS:
        iteration += 1
        # actual and predicted reduction
        ared = fc - ft
        st = xt - xc
        pred = -gradc.dot(st) / 2
        with np.errstate(divide='ignore', invalid='ignore'):
            ratio = float(np.float64(ared) / np.float64(pred))

        if ratio < LM_MU0:
            # reject, increase damping and recompute the trial point
            v = max(LM_W_UP * v, LM_V0)
            xt = _trial_point(xc, jac, jac_t, gradc, v)
            rt, ft = objective(xt, record=False)
            continue

        if ratio < LM_MU_LOW:
            v = max(LM_W_UP * v, LM_V0)
        elif ratio > LM_MU_HIGH:
            v = v * LM_W_DOWN
            if v < LM_V0:
                v = 0.0
        return xt, rt, ft, v

    raise TooManyIterations("Too many iterations")


def levenberg_marquardt(
    residuals: ResidualFunction,
    x0: Union[Vector, Sequence[float]],
    config: LevenbergMarquardtConfig = LevenbergMarquardtConfig(),
    trace: Optional[Trace] = None
) -> LevenbergMarquardtResult:
    """
    Minimize R(x)^T R(x) / 2 with the Levenberg-Marquardt method.

    Parameters
    ----------
    residuals : callable
        Residual function R(x); receives a Vector, returns a Vector or a
        sequence of floats. The output length must not change between calls.
    x0 : Vector or sequence of float
        Starting point
    config : LevenbergMarquardtConfig
        Iteration cap, gradient tolerance and Jacobian difference order
    trace : Trace, optional
        Collector for residuals, jacobians, gradients and accepted points

    Returns
    -------
    LevenbergMarquardtResult

    Raises
    ------
    TooManyIterations
        If a trial acceptance loop rejects more than 50 trial points
    numpy.linalg.LinAlgError
        If the damped normal matrix is singular
    """
    xc = x0 if isinstance(x0, Vector) else Vector(x0)
    objective = _Objective(residuals, trace)
    if trace is not None:
        trace.tolerance = config.tolerance

    def compute_jacobian(x: Vector, rx: Vector) -> Matrix:
        J, _ = derivative(objective.residual_vector, x, order=config.jacobian_order,
                          fx=rx if config.jacobian_order == 1 else None)
        if trace is not None:
            trace.jacobians.append(JacobianEntry(x=x.to_numpy(), jacobian=J.to_numpy()))
        return J

    def record_gradient(x: Vector, g: Vector, modulus: float) -> None:
        if trace is not None:
            trace.gradients.append(GradientEntry(x=x.to_numpy(), gradc=g.to_numpy(), modulus=modulus))

    iteration = 0
    if trace is not None:
        trace.history.append(xc.to_numpy())

    rc, fc = objective(xc)
    jac = compute_jacobian(xc, rc)
    jac_t = jac.T
    gradc = jac_t @ rc
    modulus = gradc.norm()
    record_gradient(xc, gradc, modulus)

    v = modulus
    while math.isfinite(modulus) and modulus > config.tolerance and iteration <= config.kmax:
        iteration += 1
        xt = _trial_point(xc, jac, jac_t, gradc, v)
        rt, ft = objective(xt)
        xc, rc, fc, v = _trtestlm(objective, xc, fc, jac, jac_t, gradc, xt, rt, ft, v)

        if trace is not None:
            trace.history.append(xc.to_numpy())

        jac = compute_jacobian(xc, rc)
        jac_t = jac.T
        gradc = jac_t @ rc
        modulus = gradc.norm()
        record_gradient(xc, gradc, modulus)

    if trace is not None:
        trace.iterations += iteration

    return LevenbergMarquardtResult(
        converged=math.isfinite(modulus) and iteration <= config.kmax,
        x=xc,
        iterations=iteration,
        fx=fc,
        gradient_norm=modulus,
        trace=trace,
    )


__all__ = [
    'LevenbergMarquardtResult',
    'levenberg_marquardt',
]
