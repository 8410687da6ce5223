"""
Koren exponent (ex) and plate current scaling (kg1) estimation.

Well above cutoff E1 ~ ep / mu + eg and the Koren triode current becomes

    ln(I * 1e-3) = ex * ln(ep / mu + eg) - ln(kg1)

so a log-log regression over the high plate voltage points of each plate
characteristic gives ex (slope) and kg1 (exp(-intercept)).
"""

from typing import List, Optional

import numpy as np
from scipy.stats import linregress

from ..data import TRIODE_PLATE_TYPES, MeasurementFile
from ..initial import Initial
from ..trace import Trace
from .config import DEFAULT_EX, DEFAULT_KG1, EX_KG1_MAX_POINTS, EX_KG1_MIN_POINTS


def estimate_ex_kg1(
    initial: Initial,
    files: List[MeasurementFile],
    maximum_plate_dissipation: float,
    trace: Optional[Trace] = None
) -> None:
    """
    Estimate ex and kg1 from triode plate characteristics.

    Per series, up to 6 points are taken walking down from the highest
    plate voltage: points above the dissipation limit or without current
    are skipped, and the walk stops at the first point failing the
    Derk-Reefman condition ep / mu > -eg. Series with fewer than 3 points
    or a non-positive slope are ignored; the results of the remaining
    series are averaged.

    Raises
    ------
    InsufficientParameters
        If mu is unset
    """
    if initial.ex is not None and initial.kg1 is not None:
        return
    initial.require('ex and kg1', 'mu')
    mu = initial.mu

    if trace is not None:
        trace.start_estimate('ex')
        trace.start_estimate('kg1')

    ex_values = []
    kg1_values = []
    for f in files:
        if f.measurement_type not in TRIODE_PLATE_TYPES:
            continue
        for series in f.series:
            series.sort_by('ep')
            x = []
            y = []
            for p in reversed(series.points):
                current = p.total_current
                if current <= 0 or p.ep * current * 1e-3 >= maximum_plate_dissipation:
                    continue
                eg = p.eg + f.offset
                if p.ep / mu <= -eg:
                    break
                x.append(np.log(p.ep / mu + eg))
                y.append(np.log(current * 1e-3))
                if len(x) >= EX_KG1_MAX_POINTS:
                    break

            if len(x) < EX_KG1_MIN_POINTS or np.ptp(x) == 0:
                continue
            fit = linregress(x, y)
            ex = float(fit.slope)
            kg1 = float(np.exp(-fit.intercept))
            if ex <= 0 or not np.isfinite(kg1):
                continue
            ex_values.append(ex)
            kg1_values.append(kg1)
            if trace is not None:
                eg = (series.eg or 0.0) + f.offset
                trace.add_average('ex', file=f.name, ex=ex, eg=eg)
                trace.add_average('kg1', file=f.name, kg1=kg1, eg=eg)

    if initial.ex is None:
        initial.ex = float(np.mean(ex_values)) if ex_values else DEFAULT_EX
    if initial.kg1 is None:
        initial.kg1 = float(np.mean(kg1_values)) if kg1_values else DEFAULT_KG1


__all__ = ['estimate_ex_kg1']
