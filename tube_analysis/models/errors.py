"""
Point selection, residual vectors and SSE/RMSE evaluators for the models.

Only points inside the safe operating area take part in a fit:

- triode models use triode measurement types, points with positive cathode
  current and ep * (ip + is) <= maximum plate dissipation; the model plate
  current is compared with the measured cathode current
- pentode models use pentode measurement types and points with
  ep * ip <= maximum plate dissipation; plate and screen currents are
  compared separately

Non-finite values never reach an optimizer: residual vectors replace them
with ``RESIDUAL_SENTINEL`` and a non-finite SSE is reported as
``ERROR_SENTINEL``.
"""

import sys
from dataclasses import dataclass
from typing import Iterable, List, Type

import numpy as np
from numpy.typing import NDArray

from ..data import PENTODE_TYPES, TRIODE_TYPES, MeasurementFile
from .parameters import (
    DerkEParameters, DerkParameters, ModelParameters, PentodeParameters, TriodeParameters,
)

RESIDUAL_SENTINEL = 1e100
"""Replacement for non-finite residual vector entries."""

ERROR_SENTINEL = sys.float_info.max / 2
"""SSE/RMSE reported for parameter sets producing non-finite currents."""


@dataclass
class PointArrays:
    """
    Selected measurement points as flat arrays.

    Grid voltages include the file calibration offset.
    """
    ep: NDArray[np.float64]
    eg: NDArray[np.float64]
    es: NDArray[np.float64]
    ip: NDArray[np.float64]
    is_: NDArray[np.float64]

    def __len__(self) -> int:
        return self.ep.shape[0]


@dataclass
class ModelError:
    """Sum of squared residuals and root mean square error [mA]."""
    sse: float
    rmse: float


def select_points(
    files: Iterable[MeasurementFile],
    triode: bool,
    maximum_plate_dissipation: float
) -> PointArrays:
    """
    Collect the points a model family is fitted against.

    Parameters
    ----------
    files : iterable of MeasurementFile
        Measurement files
    triode : bool
        Select for a triode model (True) or a pentode model (False)
    maximum_plate_dissipation : float
        Plate dissipation limit [W]

    Returns
    -------
    PointArrays
    """
    rows: List[tuple] = []
    types = TRIODE_TYPES if triode else PENTODE_TYPES
    for f in files:
        if f.measurement_type not in types:
            continue
        offset = f.offset
        for p in f.points():
            if triode:
                total = p.ip + p.is_
                if total <= 0 or p.ep * total * 1e-3 > maximum_plate_dissipation:
                    continue
            elif p.ep * p.ip * 1e-3 > maximum_plate_dissipation:
                continue
            rows.append((p.ep, p.eg + offset, p.es, p.ip, p.is_))

    data = np.array(rows, dtype=float).reshape(-1, 5)
    return PointArrays(
        ep=data[:, 0].copy(),
        eg=data[:, 1].copy(),
        es=data[:, 2].copy(),
        ip=data[:, 3].copy(),
        is_=data[:, 4].copy(),
    )


def _raw_residuals(points: PointArrays, parameters: ModelParameters) -> NDArray[np.float64]:
    with np.errstate(all='ignore'):
        currents = parameters.currents(points.ep, points.eg, points.es)
        if parameters.TRIODE:
            return np.asarray(currents.ip, dtype=float) - (points.ip + points.is_)
        return np.concatenate([
            np.asarray(currents.ip, dtype=float) - points.ip,
            np.asarray(currents.is_, dtype=float) - points.is_,
        ])


def model_residuals(points: PointArrays, parameters: ModelParameters) -> NDArray[np.float64]:
    """
    Residual vector (model minus measurement) [mA].

    Length is n for triode models and 2n for pentode models (plate
    residuals followed by screen residuals).
    """
    r = _raw_residuals(points, parameters)
    return np.nan_to_num(r, nan=RESIDUAL_SENTINEL, posinf=RESIDUAL_SENTINEL,
                         neginf=-RESIDUAL_SENTINEL)


def model_error(points: PointArrays, parameters: ModelParameters) -> ModelError:
    """
    SSE and RMSE over the selected points.

    RMSE divides by the number of points. Without points both are 0.
    """
    n = len(points)
    if n == 0:
        return ModelError(sse=0.0, rmse=0.0)
    r = _raw_residuals(points, parameters)
    with np.errstate(all='ignore'):
        sse = float(np.sum(r * r))
    if not np.isfinite(sse):
        return ModelError(sse=ERROR_SENTINEL, rmse=ERROR_SENTINEL)
    return ModelError(sse=sse, rmse=float(np.sqrt(sse / n)))


def _error_for(cls: Type[ModelParameters]):
    def error(files, parameters, maximum_plate_dissipation: float) -> ModelError:
        if not isinstance(parameters, cls):
            raise TypeError(f"Expected {cls.__name__}, got {type(parameters).__name__}")
        points = select_points(files, cls.TRIODE, maximum_plate_dissipation)
        return model_error(points, parameters)
    return error


koren_triode_error = _error_for(TriodeParameters)
koren_triode_error.__doc__ = "Koren triode SSE/RMSE over triode measurement files."

koren_pentode_error = _error_for(PentodeParameters)
koren_pentode_error.__doc__ = "Koren pentode SSE/RMSE over pentode measurement files."

derk_error = _error_for(DerkParameters)
derk_error.__doc__ = "Derk SSE/RMSE over pentode measurement files."

derke_error = _error_for(DerkEParameters)
derke_error.__doc__ = "DerkE SSE/RMSE over pentode measurement files."


__all__ = [
    'RESIDUAL_SENTINEL',
    'ERROR_SENTINEL',
    'PointArrays',
    'ModelError',
    'select_points',
    'model_residuals',
    'model_error',
    'koren_triode_error',
    'koren_pentode_error',
    'derk_error',
    'derke_error',
]
