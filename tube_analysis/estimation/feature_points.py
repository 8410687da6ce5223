"""
Feature points of screen current versus plate voltage.

Secondary emission shows up as a dip and recovery of the screen current
at low plate voltage. Interior points of a series sorted by plate voltage
are classified from backward/forward slopes and central second
differences:

- Local Minimum: slope changes from negative to positive
- Local Maximum: slope changes from positive to negative
- Inflection Point: second difference changes sign across the point

Slopes and second differences with magnitude below ``eps`` are noise.

Inflection points are feature points too: a monotonic series whose
curvature changes sign (an S-shaped shoulder, the onset of secondary
emission before a dip develops) yields one Inflection Point. Linear,
constant and purely convex or concave series yield none.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

import numpy as np

from ..data import Point
from .config import FEATURE_POINT_EPS


class FeatureKind(str, Enum):
    """Classification of a screen current feature point."""
    LOCAL_MINIMUM = 'Local Minimum'
    LOCAL_MAXIMUM = 'Local Maximum'
    INFLECTION_POINT = 'Inflection Point'


@dataclass
class FeaturePoint:
    """Classified point and its position in the series."""
    kind: FeatureKind
    index: int
    point: Point


def find_feature_points(points: Sequence[Point], eps: float = FEATURE_POINT_EPS) -> List[FeaturePoint]:
    """
    Classify the interior points of a series.

    Parameters
    ----------
    points : sequence of Point
        Series points sorted ascending by plate voltage (distinct ep)
    eps : float
        Noise threshold for slopes and second differences (default: 1e-6)

    Returns
    -------
    features : list of FeaturePoint
        Ordered by index; a point gets at most one classification
    """
    n = len(points)
    if n < 3:
        return []

    ep = np.array([p.ep for p in points], dtype=float)
    current = np.array([p.is_ for p in points], dtype=float)
    with np.errstate(divide='ignore', invalid='ignore'):
        slope = np.diff(current) / np.diff(ep)

    # interior points k = 1 .. n-2: backward slope[k-1], forward slope[k]
    d2 = np.full(n, np.nan)
    kinds = {}
    for k in range(1, n - 1):
        backward, forward = slope[k - 1], slope[k]
        with np.errstate(divide='ignore', invalid='ignore'):
            d2[k] = 2.0 * (forward - backward) / (ep[k + 1] - ep[k - 1])
        if backward < -eps and forward > eps:
            kinds[k] = FeatureKind.LOCAL_MINIMUM
        elif backward > eps and forward < -eps:
            kinds[k] = FeatureKind.LOCAL_MAXIMUM

    for k in range(2, n - 2):
        if k in kinds:
            continue
        before, after = d2[k - 1], d2[k + 1]
        if abs(before) > eps and abs(after) > eps and before * after < 0:
            kinds[k] = FeatureKind.INFLECTION_POINT

    return [FeaturePoint(kind=kinds[k], index=k, point=points[k]) for k in sorted(kinds)]


__all__ = [
    'FeatureKind',
    'FeaturePoint',
    'find_feature_points',
]
