"""
Koren kvb estimation (triodes only).

Solving the Koren triode equation for kvb at one point:

    L = kp * E1 / ep
    z = ln(exp(L) - 1)                  (inverse of ln(1 + exp(z)))
    sqrt(kvb + ep^2) = eg / (z / kp - 1 / mu)

kvb matters most where ep^2 is comparable to kvb, so the lowest plate
voltage points above cutoff are used. When no point admits the inversion
a small grid of candidates is ranked by the triode model error.
"""

from typing import List, Optional

import numpy as np

from ..data import TRIODE_PLATE_TYPES, TRIODE_TYPES, MeasurementFile
from ..initial import Initial
from ..models.errors import model_error, select_points
from ..models.parameters import TriodeParameters
from ..trace import Trace
from .config import DEFAULT_KVB, KVB_CANDIDATES, KVB_MAX_POINTS


def kvb_from_point(
    ep: float,
    eg: float,
    current: float,
    mu: float,
    ex: float,
    kg1: float,
    kp: float
) -> Optional[float]:
    """
    Closed form kvb for one triode point.

    Parameters
    ----------
    ep, eg : float
        Plate and grid voltage (including offset) [V]
    current : float
        Cathode current [mA]
    mu, ex, kg1, kp : float
        Koren parameters

    Returns
    -------
    kvb : float or None
        None if the point does not admit a positive, finite kvb
    """
    if ep <= 0 or current <= 0 or eg >= 0:
        return None
    with np.errstate(all='ignore'):
        e1 = (current * kg1 / 1000.0) ** (1.0 / ex)
        big_l = kp * e1 / ep
        z = np.log(np.expm1(big_l))
        denominator = z / kp - 1.0 / mu
        if not np.isfinite(denominator) or denominator >= 0:
            return None
        s = eg / denominator
        kvb = s * s - ep * ep
    if not np.isfinite(kvb) or kvb <= 0:
        return None
    return float(kvb)


def best_kvb_candidate(
    initial: Initial,
    files: List[MeasurementFile],
    maximum_plate_dissipation: float
) -> Optional[float]:
    """Candidate kvb with the lowest triode RMSE, None without triode points."""
    points = select_points(files, True, maximum_plate_dissipation)
    if len(points) == 0:
        return None
    best, best_rmse = None, np.inf
    for candidate in KVB_CANDIDATES:
        parameters = TriodeParameters(
            mu=initial.mu, ex=initial.ex, kg1=initial.kg1, kp=initial.kp, kvb=candidate)
        rmse = model_error(points, parameters).rmse
        if rmse < best_rmse:
            best, best_rmse = candidate, rmse
    return best


def estimate_kvb(
    initial: Initial,
    files: List[MeasurementFile],
    maximum_plate_dissipation: float,
    trace: Optional[Trace] = None
) -> None:
    """
    Estimate kvb for triodes.

    Per series at most 5 points above cutoff (ep / mu > -eg, lowest plate
    voltage first) are inverted; valid values are averaged per series and
    then across series. Fallbacks: the best candidate of
    50, 100, 200, 400, 800, 3200 when triode points exist, else 1000.

    Raises
    ------
    InsufficientParameters
        If kp, mu, ex or kg1 is unset
    """
    if initial.kvb is not None:
        return
    initial.require('kvb', 'kp', 'mu', 'ex', 'kg1')
    mu, ex, kg1, kp = initial.mu, initial.ex, initial.kg1, initial.kp

    if trace is not None:
        trace.start_estimate('kvb')

    series_values = []
    for f in files:
        if f.measurement_type not in TRIODE_PLATE_TYPES:
            continue
        for series in f.series:
            series.sort_by('ep')
            values = []
            for p in series.points:
                current = p.total_current
                eg = p.eg + f.offset
                if p.ep * current * 1e-3 > maximum_plate_dissipation or p.ep / mu <= -eg:
                    continue
                kvb = kvb_from_point(p.ep, eg, current, mu, ex, kg1, kp)
                if kvb is not None:
                    values.append(kvb)
                    if len(values) >= KVB_MAX_POINTS:
                        break
            if values:
                average = float(np.mean(values))
                series_values.append(average)
                if trace is not None:
                    trace.add_average('kvb', file=f.name, kvb=average, eg=(series.eg or 0.0) + f.offset)

    if series_values:
        initial.kvb = float(np.mean(series_values))
        return

    triode_files = [f for f in files if f.measurement_type in TRIODE_TYPES]
    candidate = best_kvb_candidate(initial, triode_files, maximum_plate_dissipation)
    initial.kvb = candidate if candidate is not None else DEFAULT_KVB
    if trace is not None:
        trace.estimates['kvb']['candidate'] = candidate


__all__ = [
    'kvb_from_point',
    'best_kvb_candidate',
    'estimate_kvb',
]
