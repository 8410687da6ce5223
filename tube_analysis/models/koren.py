"""
Norman Koren triode and (new) pentode models.
"""

import numpy as np

from .ipk import ArrayLike, Currents, as_result, koren_e1, koren_power


def koren_triode(
    ep: ArrayLike,
    eg: ArrayLike,
    kp: float,
    mu: float,
    kvb: float,
    ex: float,
    kg1: float
) -> ArrayLike:
    """
    Koren triode plate current.

    ip = 1000 * E1^ex / kg1, with E1 evaluated at the plate voltage.

    Parameters
    ----------
    ep : float or ndarray
        Plate voltage [V]
    eg : float or ndarray
        Grid voltage including calibration offset [V]
    kp, mu, kvb, ex, kg1 : float
        Koren triode parameters

    Returns
    -------
    ip : float or ndarray
        Plate current [mA], 0 where E1 <= 0
    """
    with np.errstate(all='ignore'):
        ip = 1000.0 * koren_power(koren_e1(ep, eg, kp, mu, kvb), ex) / kg1
    return as_result(ip)


def koren_pentode(
    ep: ArrayLike,
    eg: ArrayLike,
    es: ArrayLike,
    kp: float,
    mu: float,
    kvb: float,
    ex: float,
    kg1: float,
    kg2: float
) -> Currents:
    """
    Koren "new" pentode model.

    ip = 1000 * Ipk * atan(ep / kvb) / kg1
    is = 1000 * Ipk / kg2

    with Ipk the Koren current evaluated at the screen voltage.
    """
    i = koren_power(koren_e1(es, eg, kp, mu, kvb), ex)
    ep = np.asarray(ep, dtype=float)
    with np.errstate(all='ignore'):
        ip = 1000.0 * i * np.arctan(ep / kvb) / kg1
        is_ = 1000.0 * i / kg2
    return Currents(as_result(ip), as_result(is_ + np.zeros_like(ip)))


__all__ = [
    'koren_triode',
    'koren_pentode',
]
