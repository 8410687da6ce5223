"""
Secondary emission parameters (s, alpha_p, lambda, v, w) of the Derk models.

The plate voltage where secondary emission fades out is modelled as

    ep_max = es / lambda - v * eg - w

One feature point per pentode plate characteristic (the first local
maximum or inflection point of the screen current) gives an observed
ep_max. A small Powell fit of the relation above over these points
gives v and w; s follows in closed form from the excess screen current
at each feature point.
"""

from typing import Dict, List, Optional

import numpy as np

from ..algorithms.config import PowellConfig
from ..algorithms.powell import powell
from ..data import MeasurementFile, MeasurementType
from ..initial import Initial
from ..models.derk import derk_take_over, derke_take_over
from ..models.ipk import ipk
from ..trace import Trace
from .config import (
    DEFAULT_ALPHA_P, DEFAULT_S, ESTIMATOR_POWELL_ITERATIONS, ESTIMATOR_POWELL_THRESHOLD,
)
from .feature_points import FeatureKind, find_feature_points


def secondary_emission_points(files: List[MeasurementFile]) -> List[Dict[str, float]]:
    """
    First local maximum or inflection point of each IPIS_VA_VG_VS_VH series.

    Returns
    -------
    points : list of dict
        Keys ``ep``, ``eg`` (including offset), ``es``, ``ip``, ``is``,
        ``epmax`` and ``kind``
    """
    points = []
    for f in files:
        if f.measurement_type != MeasurementType.IPIS_VA_VG_VS_VH:
            continue
        for series in f.series:
            series.sort_by('ep')
            for feature in find_feature_points(series.points):
                if feature.kind == FeatureKind.LOCAL_MINIMUM:
                    continue
                p = feature.point
                points.append({
                    'ep': p.ep,
                    'eg': p.eg + f.offset,
                    'es': p.es,
                    'ip': p.ip,
                    'is': p.is_,
                    'epmax': p.ep,
                    'kind': feature.kind.value,
                })
                break
    return points


def _fit_v_w(points: List[Dict[str, float]], lambda_: float):
    es = np.array([p['es'] for p in points])
    eg = np.array([p['eg'] for p in points])
    epmax = np.array([p['epmax'] for p in points])

    def sse(x) -> float:
        d = es / lambda_ - x[0] * eg - x[1] - epmax
        return float(np.sum(d * d))

    return powell(sse, [0.0, 0.0], PowellConfig(
        relative_threshold=ESTIMATOR_POWELL_THRESHOLD, iterations=ESTIMATOR_POWELL_ITERATIONS))


def estimate_secondary_emission(
    initial: Initial,
    files: List[MeasurementFile],
    secondary_emission: bool,
    exponential: bool = False,
    trace: Optional[Trace] = None
) -> None:
    """
    Estimate the secondary emission parameters.

    When ``secondary_emission`` is False, s, alpha_p, lambda_, v and w are
    set to 0 without fitting. Otherwise lambda_ defaults to mu and alpha_p
    to 0.05; v and w come from the feature point fit (0 when it fails) and
    s is the average of the non-negative per point values (default 0.05).

    Parameters
    ----------
    initial : Initial
        Parameter bag (modified in place)
    files : list of MeasurementFile
        Measurement files (series are sorted in place)
    secondary_emission : bool
        Secondary emission enabled
    exponential : bool
        DerkE take-over function (default: Derk)
    trace : Trace, optional
        Receives feature points, v, w and s under ``'secondary_emission'``

    Raises
    ------
    InsufficientParameters
        If a prerequisite of s is unset
    """
    if not secondary_emission:
        initial.s = 0.0
        initial.alpha_p = 0.0
        initial.lambda_ = 0.0
        initial.v = 0.0
        initial.w = 0.0
        return

    if initial.lambda_ is None:
        initial.require('lambda', 'mu')
        initial.lambda_ = initial.mu
    if initial.alpha_p is None:
        initial.alpha_p = DEFAULT_ALPHA_P
    if initial.v is not None and initial.w is not None and initial.s is not None:
        return

    points = secondary_emission_points(files)
    entry = trace.start_estimate('secondary_emission', points=points) if trace is not None else None

    if initial.v is None or initial.w is None:
        v, w = 0.0, 0.0
        if points:
            result = _fit_v_w(points, initial.lambda_)
            if result.converged:
                v, w = result.x[0], result.x[1]
        if initial.v is None:
            initial.v = v
        if initial.w is None:
            initial.w = w
        if entry is not None:
            entry['v'] = initial.v
            entry['w'] = initial.w

    if initial.s is None:
        initial.require('s', 'kp', 'mu', 'kvb', 'ex', 'kg2', 'alpha_s', 'beta')
        take_over = derke_take_over if exponential else derk_take_over
        values = []
        for p in points:
            current = ipk(p['eg'], p['es'], initial.kp, initial.mu, initial.kvb, initial.ex)
            if current <= 0:
                continue
            with np.errstate(all='ignore'):
                psec = (p['is'] * 1e-3 * initial.kg2 / current
                        - (1.0 + initial.alpha_s * take_over(p['ep'], initial.beta)))
                s = psec / (p['ep'] * (1.0 + np.tanh(-initial.alpha_p * (p['ep'] - p['epmax']))))
            if np.isfinite(s) and s >= 0:
                values.append(float(s))
                if trace is not None:
                    trace.add_average('secondary_emission', s=float(s), ep=p['ep'])
        initial.s = float(np.mean(values)) if values else DEFAULT_S
        if entry is not None:
            entry['s'] = initial.s


__all__ = [
    'secondary_emission_points',
    'estimate_secondary_emission',
]
