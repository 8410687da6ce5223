"""
Amplification factor (mu) estimation.

Near cutoff the Koren current depends on the grid voltage and the control
voltage (plate for triodes, screen for pentodes) only through
c / mu + eg. Points of equal current therefore satisfy

    mu = -delta(c) / delta(eg)

The estimator interpolates, in every series, the point where the cathode
current crosses a small fraction of the maximum current and applies the
relation to pairs of such contour points with neighbouring grid voltages.
"""

from typing import Dict, List, Optional, Tuple

import numpy as np

from ..data import MeasurementFile, MeasurementType
from ..initial import Initial
from ..trace import Trace
from .config import DEFAULT_MU, MU_CURRENT_THRESHOLD, MU_MAX, MU_MIN

# swept voltage of each series and the voltage acting as control voltage
_SWEEP_AXES: Dict[MeasurementType, Tuple[str, str]] = {
    MeasurementType.IP_VA_VG_VH: ('ep', 'ep'),
    MeasurementType.IPIS_VAVS_VG_VH: ('ep', 'ep'),
    MeasurementType.IP_VG_VA_VH: ('eg', 'ep'),
    MeasurementType.IPIS_VG_VAVS_VH: ('eg', 'ep'),
    MeasurementType.IPIS_VS_VG_VA_VH: ('es', 'es'),
    MeasurementType.IPIS_VG_VA_VS_VH: ('eg', 'es'),
}


def _plausible(mu: float) -> bool:
    return np.isfinite(mu) and MU_MIN < mu < MU_MAX


def contour_points(files: List[MeasurementFile], current: float) -> List[Dict[str, float]]:
    """
    Interpolate the points where the cathode current crosses ``current``.

    Series are sorted in place by their swept voltage. At most one point
    per series is returned (the first upward crossing), and only at a
    negative grid voltage.

    Returns
    -------
    points : list of dict
        Keys ``eg`` (including offset), ``c`` (control voltage),
        ``control`` ('ep' or 'es') and ``file``
    """
    points = []
    for f in files:
        axes = _SWEEP_AXES.get(f.measurement_type)
        if axes is None:
            continue
        swept, control = axes
        for series in f.series:
            series.sort_by(swept)
            previous = None
            for p in series.points:
                if previous is not None and previous.total_current < current <= p.total_current:
                    t = (current - previous.total_current) / (p.total_current - previous.total_current)
                    eg = previous.eg + t * (p.eg - previous.eg) + f.offset
                    c0 = getattr(previous, control)
                    c = c0 + t * (getattr(p, control) - c0)
                    if eg < 0:
                        points.append({'eg': eg, 'c': c, 'control': control, 'file': f.name})
                    break
                previous = p
    return points


def estimate_mu(initial: Initial, files: List[MeasurementFile], trace: Optional[Trace] = None) -> None:
    """
    Estimate mu from equal-current contour points.

    Sets ``initial.mu`` if it is unset. Pairs of contour points with the
    same control kind, ordered by |eg|, give mu = -delta(c)/delta(eg); values
    outside (1, 200) are discarded. Without pairs, single points give the
    cruder -c/eg; without points the default 50 is used.

    Parameters
    ----------
    initial : Initial
        Parameter bag (modified in place)
    files : list of MeasurementFile
        Measurement files (series are sorted in place)
    trace : Trace, optional
        Receives the contour points and pair estimates under ``'mu'``
    """
    if initial.mu is not None:
        return

    maximum = max((p.total_current for f in files for p in f.points()), default=0.0)
    current = MU_CURRENT_THRESHOLD * maximum
    points = contour_points(files, current) if maximum > 0 else []

    if trace is not None:
        trace.start_estimate('mu', max_current=maximum, current=current, points=points)

    estimates = []
    for control in ('ep', 'es'):
        group = sorted((p for p in points if p['control'] == control), key=lambda p: abs(p['eg']))
        for p1, p2 in zip(group, group[1:]):
            deg = p2['eg'] - p1['eg']
            if deg == 0:
                continue
            mu = -(p2['c'] - p1['c']) / deg
            if _plausible(mu):
                estimates.append(mu)
                if trace is not None:
                    trace.add_average('mu', mu=mu, eg1=p1['eg'], eg2=p2['eg'], control=control)

    if not estimates:
        # single point estimate, assumes the contour passes c = 0 at eg = 0
        for p in points:
            mu = -p['c'] / p['eg']
            if _plausible(mu):
                estimates.append(mu)
                if trace is not None:
                    trace.add_average('mu', mu=mu, eg1=p['eg'], eg2=None, control=p['control'])

    initial.mu = float(np.mean(estimates)) if estimates else DEFAULT_MU


__all__ = [
    'contour_points',
    'estimate_mu',
]
