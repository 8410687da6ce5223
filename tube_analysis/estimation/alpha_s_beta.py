"""
Take-over parameters (alpha_s, beta) of the Derk models.

At low plate voltage the screen current ratio r = is * 1e-3 * kg2 / Ipk
follows the take-over function:

- Derk:  r - 1 = alpha_s / (1 + beta * ep), so
  1 / (r - 1) = (beta / alpha_s) * ep + 1 / alpha_s
- DerkE: r - 1 = alpha_s * exp(-(beta * ep)^1.5), so
  ln(r - 1) = -beta^1.5 * ep^1.5 + ln(alpha_s)

Each series gives a line (slope, intercept) fitted with Powell's method
over its lowest plate voltage points.
"""

from typing import List, Optional, Tuple

import numpy as np

from ..algorithms.config import PowellConfig
from ..algorithms.powell import powell
from ..data import MeasurementFile
from ..initial import Initial
from ..models.ipk import ipk
from ..trace import Trace
from .config import ALPHA_S_BETA_POINTS, ALPHA_S_BETA_START, DEFAULT_ALPHA_S, DEFAULT_BETA
from .kg2 import KG2_TYPES


def _fit_line(x: np.ndarray, y: np.ndarray) -> Optional[Tuple[float, float]]:
    def sse(p) -> float:
        d = y - (p[0] * x + p[1])
        return float(np.sum(d * d))

    result = powell(sse, list(ALPHA_S_BETA_START), PowellConfig(iterations=500))
    if not result.converged:
        return None
    return result.x[0], result.x[1]


def estimate_alpha_s_beta(
    initial: Initial,
    files: List[MeasurementFile],
    maximum_plate_dissipation: float,
    exponential: bool = False,
    trace: Optional[Trace] = None
) -> None:
    """
    Estimate alpha_s and beta from low plate voltage screen currents.

    Parameters
    ----------
    initial : Initial
        Parameter bag (modified in place)
    files : list of MeasurementFile
        Measurement files (series are sorted in place)
    maximum_plate_dissipation : float
        Plate dissipation limit [W]
    exponential : bool
        Use the DerkE take-over function (default: Derk)
    trace : Trace, optional
        Receives the per-series lines under ``'alpha_s'`` and ``'beta'``

    Raises
    ------
    InsufficientParameters
        If kp, mu, kvb, ex or kg2 is unset
    """
    if initial.alpha_s is not None and initial.beta is not None:
        return
    initial.require('alpha_s and beta', 'kp', 'mu', 'kvb', 'ex', 'kg2')
    kg2 = initial.kg2

    if trace is not None:
        trace.start_estimate('alpha_s')
        trace.start_estimate('beta')

    slopes = []
    intercepts = []
    for f in files:
        if f.measurement_type not in KG2_TYPES:
            continue
        for series in f.series:
            series.sort_by('ep')
            x = []
            y = []
            for p in series.points:
                if p.is_ == 0 or p.es == 0 or p.ip * p.ep * 1e-3 >= maximum_plate_dissipation:
                    continue
                current = ipk(p.eg + f.offset, p.es, initial.kp, initial.mu, initial.kvb, initial.ex)
                if current <= 0:
                    continue
                ratio = p.is_ * 1e-3 * kg2 / current
                if exponential:
                    if ratio <= 1:
                        continue
                    x.append(p.ep ** 1.5)
                    y.append(np.log(ratio - 1))
                else:
                    if ratio == 1:
                        continue
                    x.append(p.ep)
                    y.append(1.0 / (ratio - 1))
                if len(x) >= ALPHA_S_BETA_POINTS:
                    break

            if len(x) < 2:
                continue
            line = _fit_line(np.array(x), np.array(y))
            if line is None:
                continue
            slope, intercept = line
            slopes.append(slope)
            intercepts.append(intercept)
            if trace is not None:
                eg = (series.eg or 0.0) + f.offset
                trace.add_average('alpha_s', file=f.name, a=slope, b=intercept, eg=eg)
                trace.add_average('beta', file=f.name, a=slope, b=intercept, eg=eg)

    count = len(slopes)
    alpha_s, beta = DEFAULT_ALPHA_S, DEFAULT_BETA
    if count > 0:
        if exponential:
            alpha_s = float(np.exp(np.mean(intercepts)))
            beta = float(abs(np.mean(slopes)) ** (2.0 / 3.0))
        elif sum(intercepts) != 0:
            alpha_s = abs(count / sum(intercepts))
            beta = abs(alpha_s * sum(slopes) / count)

    if initial.alpha_s is None:
        initial.alpha_s = alpha_s
    if initial.beta is None:
        initial.beta = beta


__all__ = ['estimate_alpha_s_beta']
