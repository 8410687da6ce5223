"""
Derk saturation slope (a) estimation.

In saturation the Derk plate current grows linearly with the plate voltage,
dip/dep = 1000 * Ipk * a / kg1, so

    a = kg1 * delta(ip) * 1e-3 / (Ipk * delta(ep))
"""

from typing import List, Optional

import numpy as np

from ..data import MeasurementFile, MeasurementType
from ..initial import Initial
from ..models.ipk import ipk
from ..trace import Trace
from .config import A_MAX_PAIRS, DEFAULT_A

A_TYPES = frozenset({
    MeasurementType.IPIS_VA_VG_VS_VH,
    MeasurementType.IPIS_VA_VS_VG_VH,
})
"""Pentode plate characteristics."""


def estimate_a(
    initial: Initial,
    files: List[MeasurementFile],
    maximum_plate_dissipation: float,
    trace: Optional[Trace] = None
) -> None:
    """
    Estimate a from the plate current slope at high plate voltage.

    Walking down from the highest plate voltage, adjacent point pairs
    inside the dissipation limit with a positive slope contribute (at most
    3 per series). The estimate is the mean weighted by the plate voltage
    span of each pair. Default: 0.001.

    Raises
    ------
    InsufficientParameters
        If mu, kp, kg1, ex or kvb is unset
    """
    if initial.a is not None:
        return
    initial.require('a', 'mu', 'kp', 'kg1', 'ex', 'kvb')

    if trace is not None:
        trace.start_estimate('a')

    values = []
    weights = []
    for f in files:
        if f.measurement_type not in A_TYPES:
            continue
        for series in f.series:
            series.sort_by('ep')
            usable = [p for p in series.points if p.ip * p.ep * 1e-3 < maximum_plate_dissipation]
            pairs = 0
            for upper, lower in zip(reversed(usable), reversed(usable[:-1])):
                dep = upper.ep - lower.ep
                dip = upper.ip - lower.ip
                if dep <= 0 or dip <= 0:
                    continue
                current = ipk(lower.eg + f.offset, lower.es, initial.kp, initial.mu, initial.kvb, initial.ex)
                if current <= 0:
                    continue
                a = initial.kg1 * dip * 1e-3 / (current * dep)
                values.append(a)
                weights.append(dep)
                if trace is not None:
                    trace.add_average('a', file=f.name, a=a, eg=(series.eg or 0.0) + f.offset)
                pairs += 1
                if pairs >= A_MAX_PAIRS:
                    break

    initial.a = float(np.average(values, weights=weights)) if values else DEFAULT_A


__all__ = [
    'A_TYPES',
    'estimate_a',
]
