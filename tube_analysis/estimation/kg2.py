"""
Screen current scaling (kg2) estimation for pentodes.

At high plate voltage the screen current approaches 1000 * Ipk / kg2.
"""

from typing import List, Optional

import numpy as np

from ..data import MeasurementFile, MeasurementType
from ..initial import Initial
from ..models.ipk import ipk
from ..trace import Trace
from .config import DEFAULT_KG2

KG2_TYPES = frozenset({
    MeasurementType.IPIS_VA_VG_VS_VH,
    MeasurementType.IPIS_VA_VS_VG_VH,
    MeasurementType.IPIS_VAVS_VG_VH,
})
"""Plate characteristics with a measured screen current."""


def estimate_kg2(
    initial: Initial,
    files: List[MeasurementFile],
    maximum_plate_dissipation: float,
    trace: Optional[Trace] = None
) -> None:
    """
    Estimate kg2 = 1000 * Ipk / is at the highest usable plate voltage.

    One point per series: the highest plate voltage point with
    (ip + is) * ep within the dissipation limit, a positive screen current
    and a positive Koren current. Default: 1000.

    Raises
    ------
    InsufficientParameters
        If kp, mu, kvb or ex is unset
    """
    if initial.kg2 is not None:
        return
    initial.require('kg2', 'kp', 'mu', 'kvb', 'ex')

    if trace is not None:
        trace.start_estimate('kg2')

    values = []
    for f in files:
        if f.measurement_type not in KG2_TYPES:
            continue
        for series in f.series:
            series.sort_by('ep')
            for p in reversed(series.points):
                if p.total_current * p.ep / 1000.0 >= maximum_plate_dissipation or p.is_ <= 0:
                    continue
                current = ipk(p.eg + f.offset, p.es, initial.kp, initial.mu, initial.kvb, initial.ex)
                if current > 0:
                    kg2 = abs(current * 1000.0 / p.is_)
                    values.append(kg2)
                    if trace is not None:
                        trace.add_average('kg2', file=f.name, kg2=kg2)
                    break

    initial.kg2 = float(np.mean(values)) if values else DEFAULT_KG2


__all__ = [
    'KG2_TYPES',
    'estimate_kg2',
]
