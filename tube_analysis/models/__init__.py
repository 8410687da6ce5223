"""
Vacuum tube models (Koren triode/pentode, Derk, DerkE) and their error functions.
"""

from .ipk import Currents, ipk
from .koren import koren_triode, koren_pentode
from .derk import derk, derke
from .parameters import (
    ModelParameters,
    TriodeParameters,
    PentodeParameters,
    DerkParameters,
    DerkEParameters,
)
from .errors import (
    PointArrays,
    ModelError,
    select_points,
    model_residuals,
    model_error,
    koren_triode_error,
    koren_pentode_error,
    derk_error,
    derke_error,
)

__all__ = [
    'Currents',
    'ipk',
    'koren_triode',
    'koren_pentode',
    'derk',
    'derke',
    'ModelParameters',
    'TriodeParameters',
    'PentodeParameters',
    'DerkParameters',
    'DerkEParameters',
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
