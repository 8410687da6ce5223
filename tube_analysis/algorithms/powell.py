"""
Powell's direction-set minimization with Brent line searches.

Derivative-free minimizer for small unconstrained problems. Each outer
iteration line-minimizes along every direction of the set, then possibly
replaces the direction of largest decrease by the net displacement of the
iteration [1]_. The direction set is reset to the coordinate basis every n
iterations to avoid linear dependence.

Line searches bracket the minimum with ``mnbrak`` and refine it with
``brent``. Failures inside a line search are captured in the ``warn`` field
of the result; ``powell`` itself never raises them.

References
----------
.. [1] W.H. Press et al., "Numerical Recipes in C", 2nd ed. (1992),
       Chapters 10.1 (mnbrak), 10.2 (brent) and 10.5 (powell, linmin)
"""

import math
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from ..exceptions import SolverError, TooManyIterations
from ..trace import Trace
from .config import (
    BRENT_ITERATIONS, BRENT_TOLERANCE, CGOLD, GLIMIT, GOLD, TINY, ZEPS,
    PowellConfig,
)
from .vector import Vector

ObjectiveFunction = Callable[[Vector], float]
LineFunction = Callable[[float], float]


@dataclass
class PowellResult:
    """
    Result of a Powell run.

    Attributes
    ----------
    converged : bool
        Termination test satisfied within the iteration cap
    x : Vector
        Best point found
    fx : float
        Objective value at x
    iterations : int
        Number of outer iterations performed
    trace : Trace or None
        Diagnostics, if a trace was supplied
    warn : Exception or None
        Exception raised by a line search, if any
    """
    converged: bool
    x: Vector
    fx: float
    iterations: int
    trace: Optional[Trace] = None
    warn: Optional[BaseException] = None


# =============================================================================
# Line Search
# =============================================================================

def mnbrak(ax: float, bx: float, f: LineFunction) -> Tuple[float, float, float]:
    """
    Bracket a minimum of a one-dimensional function.

    Starting from the points ax and bx, searches downhill and returns
    (ax, bx, cx) with bx between ax and cx and f(bx) below f(ax) and f(cx).

    Parameters
    ----------
    ax, bx : float
        Initial points
    f : callable
        Function of one variable

    Returns
    -------
    ax, bx, cx : float
        Bracketing triplet
    """
    fa = f(ax)
    fb = f(bx)
    if fb > fa:
        # go downhill from a to b
        ax, bx = bx, ax
        fa, fb = fb, fa

    cx = bx + GOLD * (bx - ax)
    fc = f(cx)

    while fb > fc:
        # parabolic extrapolation from a, b, c
        r = (bx - ax) * (fb - fc)
        q = (bx - cx) * (fb - fa)
        qr = q - r
        u = bx - ((bx - cx) * q - (bx - ax) * r) / (2.0 * math.copysign(max(abs(qr), TINY), qr))
        ulim = bx + GLIMIT * (cx - bx)

        if (bx - u) * (u - cx) > 0.0:
            # parabolic u is between b and c
            fu = f(u)
            if fu < fc:
                # minimum between b and c
                return bx, u, cx
            if fu > fb:
                # minimum between a and u
                return ax, bx, u
            u = cx + GOLD * (cx - bx)
            fu = f(u)
        elif (cx - u) * (u - ulim) > 0.0:
            # parabolic u is between c and its allowed limit
            fu = f(u)
            if fu < fc:
                bx, cx, u = cx, u, u + GOLD * (u - cx)
                fb, fc, fu = fc, fu, f(u)
        elif (u - ulim) * (ulim - cx) >= 0.0:
            u = ulim
            fu = f(u)
        else:
            u = cx + GOLD * (cx - bx)
            fu = f(u)

        # eliminate oldest point
        ax, bx, cx = bx, cx, u
        fa, fb, fc = fb, fc, fu

    return ax, bx, cx


def brent(
    ax: float,
    bx: float,
    cx: float,
    f: LineFunction,
    tol: float = BRENT_TOLERANCE
) -> Tuple[float, float]:
    """
    Isolate a bracketed minimum with Brent's method.

    Parameters
    ----------
    ax, bx, cx : float
        Bracketing triplet as returned by ``mnbrak``
    f : callable
        Function of one variable
    tol : float
        Fractional precision of the abscissa (default: 2e-4)

    Returns
    -------
    xmin, fmin : float
        Abscissa of the minimum and the function value there

    Raises
    ------
    TooManyIterations
        If the minimum is not isolated within 500 iterations
    """
    e = 0.0
    d = 0.0
    a = min(ax, cx)
    b = max(ax, cx)
    x = w = v = bx
    fx = fw = fv = f(x)

    for _ in range(1, BRENT_ITERATIONS):
        xm = 0.5 * (a + b)
        tol1 = tol * abs(x) + ZEPS
        tol2 = 2.0 * tol1
        if abs(x - xm) <= tol2 - 0.5 * (b - a):
            return x, fx

        if abs(e) > tol1:
            # trial parabolic fit
            r = (x - w) * (fx - fv)
            q = (x - v) * (fx - fw)
            p = (x - v) * q - (x - w) * r
            q = 2.0 * (q - r)
            if q > 0.0:
                p = -p
            q = abs(q)
            etemp = e
            e = d
            if abs(p) >= abs(0.5 * q * etemp) or p <= q * (a - x) or p >= q * (b - x):
                # golden section step
                e = a - x if x >= xm else b - x
                d = CGOLD * e
            else:
                d = p / q
                u = x + d
                if u - a < tol2 or b - u < tol2:
                    d = math.copysign(tol1, xm - x)
        else:
            e = a - x if x >= xm else b - x
            d = CGOLD * e

        u = x + d if abs(d) >= tol1 else x + math.copysign(tol1, d)
        fu = f(u)

        if fu <= fx:
            if u >= x:
                a = x
            else:
                b = x
            v, w, x = w, x, u
            fv, fw, fx = fw, fx, fu
        else:
            if u < x:
                a = u
            else:
                b = u
            if fu <= fw or w == x:
                v, w = w, u
                fv, fw = fw, fu
            elif fu <= fv or v == x or v == w:
                v = u
                fv = fu

    raise TooManyIterations("Too many iterations in brent")


def linmin(p: NDArray[np.float64], xi: NDArray[np.float64], f: ObjectiveFunction) -> float:
    """
    Minimize f from p along direction xi.

    On return p holds the minimum along the line and xi the displacement
    actually moved (both updated in place).

    Returns
    -------
    fret : float
        Objective value at the new p
    """
    pcom = p.copy()
    xicom = xi.copy()

    def f1dim(t: float) -> float:
        return f(Vector(pcom + t * xicom))

    ax, bx, cx = mnbrak(0.0, 1.0, f1dim)
    xmin, fret = brent(ax, bx, cx, f1dim)

    xi *= xmin
    p += xi
    return fret


# =============================================================================
# Powell
# =============================================================================

def powell(
    objective: ObjectiveFunction,
    x0: Union[Vector, Sequence[float]],
    config: PowellConfig = PowellConfig(),
    trace: Optional[Trace] = None
) -> PowellResult:
    """
    Minimize a scalar function with Powell's direction-set method.

    Parameters
    ----------
    objective : callable
        Function to minimize; receives a Vector and returns a float
    x0 : Vector or sequence of float
        Starting point
    config : PowellConfig
        Termination thresholds and iteration cap
    trace : Trace, optional
        Collector for accepted points and objective values

    Returns
    -------
    PowellResult
        ``converged`` is False when the iteration cap is exhausted or a line
        search fails; in the latter case the exception is in ``warn``.
    """
    p = np.array(x0.to_numpy() if isinstance(x0, Vector) else x0, dtype=float)
    n = p.shape[0]
    xi = np.eye(n)

    fret = float(objective(Vector(p)))
    pt = p.copy()
    iteration = 0

    def result(converged: bool, warn: Optional[BaseException] = None) -> PowellResult:
        if trace is not None:
            trace.iterations += iteration
        return PowellResult(
            converged=converged, x=Vector(p), fx=fret, iterations=iteration,
            trace=trace, warn=warn,
        )

    try:
        while iteration <= config.iterations:
            iteration += 1
            fp = fret
            ibig = 0
            delta = 0.0

            for i in range(n):
                xit = xi[:, i].copy()
                fptt = fret
                fret = linmin(p, xit, objective)
                # largest decrease so far
                if fptt - fret > delta:
                    delta = fptt - fret
                    ibig = i

            if trace is not None:
                trace.history.append(p.copy())
                trace.function_values.append(fret)

            if 2.0 * (fp - fret) <= (config.relative_threshold * (abs(fp) + abs(fret))
                                     + config.absolute_threshold):
                return result(True)

            # extrapolated point and average direction moved
            ptt = 2.0 * p - pt
            xit = p - pt
            pt = p.copy()

            fptt = float(objective(Vector(ptt)))
            if fptt < fp:
                t = (2.0 * (fp - 2.0 * fret + fptt) * (fp - fret - delta) ** 2
                     - delta * (fp - fptt) ** 2)
                if t < 0.0:
                    fret = linmin(p, xit, objective)
                    xi[:, ibig] = xi[:, n - 1]
                    xi[:, n - 1] = xit

            if iteration % n == 0:
                xi = np.eye(n)
    except (SolverError, ArithmeticError, ValueError) as e:
        return result(False, warn=e)

    return result(False)


__all__ = [
    'PowellResult',
    'mnbrak',
    'brent',
    'linmin',
    'powell',
]
