"""
Koren cathode current, the building block shared by all tube models.

All model functions are vectorized: voltages may be scalars or numpy
arrays, scalar input gives a float result.

References
----------
.. [1] N. Koren, "Improved vacuum tube models for SPICE simulations" (1996)
.. [2] D. Reefman, "Spice models for vacuum tubes using the uTracer" (2016)
"""

from typing import NamedTuple, Union

import numpy as np
from numpy.typing import NDArray

ArrayLike = Union[float, NDArray[np.float64]]


class Currents(NamedTuple):
    """Plate and screen current [mA]."""
    ip: ArrayLike
    is_: ArrayLike


def as_result(value: NDArray[np.float64]) -> ArrayLike:
    """Unwrap 0-d arrays to float."""
    return float(value) if np.ndim(value) == 0 else value


def koren_e1(e: ArrayLike, eg: ArrayLike, kp: float, mu: float, kvb: float) -> NDArray[np.float64]:
    """
    Koren effective voltage E1.

    E1 = e * ln(1 + exp(kp * (1/mu + eg / sqrt(kvb + e^2)))) / kp

    with e the plate voltage (triode) or screen voltage (pentode).
    ``ln(1 + exp(z))`` is evaluated with ``logaddexp`` so large arguments do
    not overflow.
    """
    e = np.asarray(e, dtype=float)
    eg = np.asarray(eg, dtype=float)
    with np.errstate(all='ignore'):
        return e * np.logaddexp(0.0, kp * (1.0 / mu + eg / np.sqrt(kvb + e * e))) / kp


def koren_power(e1: NDArray[np.float64], ex: float) -> NDArray[np.float64]:
    """E1^ex where E1 > 0, else 0 (also for non-finite E1)."""
    with np.errstate(all='ignore'):
        positive = e1 > 0
        return np.where(positive, np.power(np.where(positive, e1, 1.0), ex), 0.0)


def ipk(eg: ArrayLike, es: ArrayLike, kp: float, mu: float, kvb: float, ex: float) -> ArrayLike:
    """
    Koren cathode current term for pentodes (without 1000/kg scaling).

    Parameters
    ----------
    eg : float or ndarray
        Control grid voltage [V]
    es : float or ndarray
        Screen grid voltage [V]
    kp, mu, kvb, ex : float
        Koren parameters

    Returns
    -------
    ipk : float or ndarray
        E1^ex, or 0 where E1 <= 0
    """
    return as_result(koren_power(koren_e1(es, eg, kp, mu, kvb), ex))


__all__ = [
    'Currents',
    'koren_e1',
    'koren_power',
    'ipk',
]
