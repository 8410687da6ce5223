"""
Derk Reefman pentode models with space charge and secondary emission.

Two variants differ only in the function describing the plate current
take-over at low plate voltage:

- Derk:  1 / (1 + beta * ep)
- DerkE: exp(-(beta * ep)^1.5)

Secondary emission adds a term s * ep * (1 + tanh(-alpha_p * (ep - ep_max)))
with ep_max = es / lambda - v * eg - w, moving current from the plate to
the screen.

References
----------
.. [1] D. Reefman, "Spice models for vacuum tubes using the uTracer" (2016),
       sections 4.3 - 4.5
"""

from typing import Callable

import numpy as np

from .ipk import ArrayLike, Currents, as_result, koren_e1, koren_power

TakeOver = Callable[[np.ndarray, float], np.ndarray]


def derk_take_over(ep: np.ndarray, beta: float) -> np.ndarray:
    """Derk take-over function 1 / (1 + beta * ep)."""
    return 1.0 / (1.0 + beta * ep)


def derke_take_over(ep: np.ndarray, beta: float) -> np.ndarray:
    """DerkE take-over function exp(-beta * ep * sqrt(|beta * ep|))."""
    return np.exp(-beta * ep * np.sqrt(np.abs(beta * ep)))


def secondary_emission_term(
    ep: ArrayLike,
    eg: ArrayLike,
    es: ArrayLike,
    s: float,
    alpha_p: float,
    lambda_: float,
    v: float,
    w: float
) -> np.ndarray:
    """Secondary emission current factor s * ep * (1 + tanh(-alpha_p * (ep - ep_max)))."""
    ep = np.asarray(ep, dtype=float)
    with np.errstate(all='ignore'):
        ep_max = np.asarray(es, dtype=float) / lambda_ - v * np.asarray(eg, dtype=float) - w
        return s * ep * (1.0 + np.tanh(-alpha_p * (ep - ep_max)))


def _reefman_pentode(
    take_over: TakeOver,
    ep, eg, es,
    kp, mu, kvb, ex, kg1, kg2, a, alpha_s, beta,
    secondary_emission, s, alpha_p, lambda_, v, w
) -> Currents:
    i = koren_power(koren_e1(es, eg, kp, mu, kvb), ex)
    ep = np.asarray(ep, dtype=float)
    with np.errstate(all='ignore'):
        if secondary_emission:
            se = secondary_emission_term(ep, eg, es, s, alpha_p, lambda_, v, w)
        else:
            se = 0.0
        # alpha follows from the current split at ep = 0, it is not fitted
        alpha = 1.0 - kg1 * (1.0 + alpha_s) / kg2
        h = take_over(ep, beta)
        ip = 1000.0 * i * (1.0 / kg1 - 1.0 / kg2 + a * ep / kg1 - se / kg2
                           - h * (alpha / kg1 + alpha_s / kg2))
        is_ = 1000.0 * i * (1.0 + alpha_s * h + se) / kg2
    return Currents(as_result(ip), as_result(is_))


def derk(
    ep: ArrayLike,
    eg: ArrayLike,
    es: ArrayLike,
    kp: float,
    mu: float,
    kvb: float,
    ex: float,
    kg1: float,
    kg2: float,
    a: float,
    alpha_s: float,
    beta: float,
    secondary_emission: bool = False,
    s: float = 0.0,
    alpha_p: float = 0.0,
    lambda_: float = 1.0,
    v: float = 0.0,
    w: float = 0.0
) -> Currents:
    """
    Derk pentode model.

    Parameters
    ----------
    ep, eg, es : float or ndarray
        Plate, grid (including offset) and screen voltages [V]
    kp, mu, kvb, ex : float
        Koren current parameters
    kg1, kg2 : float
        Plate and screen current scaling
    a : float
        Plate voltage slope in saturation
    alpha_s, beta : float
        Take-over amplitude and rate
    secondary_emission : bool
        Include the secondary emission term
    s, alpha_p, lambda_, v, w : float
        Secondary emission parameters (ignored when disabled)

    Returns
    -------
    Currents
        Plate and screen current [mA]
    """
    return _reefman_pentode(
        derk_take_over, ep, eg, es, kp, mu, kvb, ex, kg1, kg2, a, alpha_s, beta,
        secondary_emission, s, alpha_p, lambda_, v, w)


def derke(
    ep: ArrayLike,
    eg: ArrayLike,
    es: ArrayLike,
    kp: float,
    mu: float,
    kvb: float,
    ex: float,
    kg1: float,
    kg2: float,
    a: float,
    alpha_s: float,
    beta: float,
    secondary_emission: bool = False,
    s: float = 0.0,
    alpha_p: float = 0.0,
    lambda_: float = 1.0,
    v: float = 0.0,
    w: float = 0.0
) -> Currents:
    """DerkE pentode model, same parameters as :func:`derk`."""
    return _reefman_pentode(
        derke_take_over, ep, eg, es, kp, mu, kvb, ex, kg1, kg2, a, alpha_s, beta,
        secondary_emission, s, alpha_p, lambda_, v, w)


__all__ = [
    'derk_take_over',
    'derke_take_over',
    'secondary_emission_term',
    'derk',
    'derke',
]
