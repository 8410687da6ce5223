"""
Koren kp estimation.

With E1 recovered from the measured current, E1 = (I * kg1 / 1000)^(1/ex),
and ep^2 >> kvb the Koren effective voltage reads

    E1 / ep = ln(1 + exp(kp * x)) / kp,    x = 1/mu + eg/ep

Near cutoff (kp * x < 0) this is close to exp(kp * x) / kp, i.e.
ln(E1 / ep) is linear in x with slope kp. The regression seeds a one
dimensional Powell fit of the exact expression.
"""

from typing import List, Optional

import numpy as np
from scipy.stats import linregress

from ..algorithms.config import PowellConfig
from ..algorithms.powell import powell
from ..data import TRIODE_PLATE_TYPES, MeasurementFile
from ..initial import Initial
from ..trace import Trace
from .config import (
    DEFAULT_KP, ESTIMATOR_POWELL_ITERATIONS, ESTIMATOR_POWELL_THRESHOLD, KP_MAX_POINTS,
    KP_MIN_POINTS,
)


def log_softplus(z: np.ndarray) -> np.ndarray:
    """ln(ln(1 + exp(z))), accurate for large negative z."""
    z = np.asarray(z, dtype=float)
    with np.errstate(all='ignore'):
        return np.where(z < -30.0, z, np.log(np.logaddexp(0.0, z)))


def _series_kp(x: np.ndarray, y: np.ndarray) -> Optional[float]:
    """Fit kp to ln(E1/ep) = ln(ln(1 + exp(kp x)) / kp) for one series."""
    seed = DEFAULT_KP
    if np.ptp(x) > 0:
        slope = float(linregress(x, y).slope)
        if np.isfinite(slope) and slope > 0:
            seed = slope

    def sse(p) -> float:
        kp = abs(p[0])
        with np.errstate(all='ignore'):
            d = y - (log_softplus(kp * x) - np.log(kp))
            value = float(np.sum(d * d))
        return value if np.isfinite(value) else 1e300

    result = powell(sse, [seed], PowellConfig(
        relative_threshold=ESTIMATOR_POWELL_THRESHOLD, iterations=ESTIMATOR_POWELL_ITERATIONS))
    kp = abs(result.x[0])
    if result.converged and np.isfinite(kp) and kp > 0:
        return kp
    return None


def estimate_kp(
    initial: Initial,
    files: List[MeasurementFile],
    maximum_plate_dissipation: float,
    trace: Optional[Trace] = None
) -> None:
    """
    Estimate kp from the near cutoff points of triode plate characteristics.

    Per series the (up to) 6 lowest-current points within the dissipation
    limit are used; series results are averaged. Default: 10.

    Points are ranked by current rather than plate voltage because kp only
    shapes the curve where kp * x < 0; well above cutoff ln(E1 / ep) loses
    its kp dependence. On a plate characteristic the lowest currents are the
    lowest plate voltages of the series.

    Raises
    ------
    InsufficientParameters
        If mu, ex or kg1 is unset
    """
    if initial.kp is not None:
        return
    initial.require('kp', 'mu', 'ex', 'kg1')
    mu, ex, kg1 = initial.mu, initial.ex, initial.kg1

    if trace is not None:
        trace.start_estimate('kp')

    values = []
    for f in files:
        if f.measurement_type not in TRIODE_PLATE_TYPES:
            continue
        for series in f.series:
            series.sort_by('ep')
            candidates = [
                p for p in series.points
                if p.ep > 0 and p.total_current > 0
                and p.ep * p.total_current * 1e-3 < maximum_plate_dissipation
            ]
            candidates.sort(key=lambda p: p.total_current)
            selected = candidates[:KP_MAX_POINTS]
            if len(selected) < KP_MIN_POINTS:
                continue

            ep = np.array([p.ep for p in selected])
            eg = np.array([p.eg for p in selected]) + f.offset
            current = np.array([p.total_current for p in selected])
            e1 = (current * kg1 / 1000.0) ** (1.0 / ex)
            x = 1.0 / mu + eg / ep
            y = np.log(e1 / ep)

            kp = _series_kp(x, y)
            if kp is None:
                continue
            values.append(kp)
            if trace is not None:
                trace.add_average('kp', file=f.name, kp=kp, eg=(series.eg or 0.0) + f.offset)

    initial.kp = float(np.mean(values)) if values else DEFAULT_KP


__all__ = [
    'log_softplus',
    'estimate_kp',
]
