"""
Synthetic measurement generation for testing and demonstration.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..data import MeasurementFile, MeasurementType, Point, Series
from ..models.parameters import ModelParameters, PentodeParameters, TriodeParameters

logger = logging.getLogger(__name__)

DEMO_TRIODE = TriodeParameters(mu=100.0, ex=1.4, kg1=1060.0, kp=600.0, kvb=300.0)
"""12AX7-like Koren triode used by the demo."""

DEMO_PENTODE = PentodeParameters(mu=19.2, ex=1.35, kg1=600.0, kp=135.0, kvb=24.0, kg2=4500.0)
"""EL84-like Koren pentode used by the demo."""

DEMO_DISSIPATION = {'koren-triode': 2.0}
"""Plate dissipation limits [W] for the demo tubes (pentode families use PENTODE_DEMO_DISSIPATION)."""

PENTODE_DEMO_DISSIPATION = 15.0


def demo_dissipation(model: str) -> float:
    """Plate dissipation limit [W] suited to the synthetic tube of a model family."""
    return DEMO_DISSIPATION.get(model, PENTODE_DEMO_DISSIPATION)


def _noisy(values: np.ndarray, noise: float, rng: np.random.Generator) -> np.ndarray:
    if noise <= 0:
        return values
    return values * (1.0 + noise * rng.standard_normal(values.shape))


def generate_plate_characteristics(
    parameters: ModelParameters,
    eg_values: Sequence[float],
    ep_max: float,
    n_points: int = 31,
    es: Optional[float] = None,
    noise: float = 0.0,
    name: str = 'synthetic',
    seed: Optional[int] = None
) -> MeasurementFile:
    """
    Plate characteristics (plate voltage swept, one series per grid voltage).

    Parameters
    ----------
    parameters : ModelParameters
        Model used to compute the currents
    eg_values : sequence of float
        Grid voltage of each series [V]
    ep_max : float
        Highest plate voltage [V]; the sweep starts at ep_max / (n_points - 1)
    n_points : int
        Points per series
    es : float, optional
        Constant screen voltage [V]. None means triode connection: the screen
        is tied to the plate (pentode models) or absent (triode model).
    noise : float
        Relative Gaussian noise on the currents (0.01 = 1%)
    name : str
        File name
    seed : int, optional
        Seed for the noise generator

    Returns
    -------
    MeasurementFile
        Tagged IP_VA_VG_VH, IPIS_VAVS_VG_VH or IPIS_VA_VG_VS_VH
    """
    rng = np.random.default_rng(seed)
    ep = np.linspace(ep_max / (n_points - 1), ep_max, n_points)

    if parameters.TRIODE:
        measurement_type = MeasurementType.IP_VA_VG_VH
    elif es is None:
        measurement_type = MeasurementType.IPIS_VAVS_VG_VH
    else:
        measurement_type = MeasurementType.IPIS_VA_VG_VS_VH

    series = []
    for eg in eg_values:
        screen = ep if es is None else np.full_like(ep, es)
        ip, is_ = parameters.currents(ep, np.full_like(ep, eg), screen)
        ip = _noisy(np.asarray(ip, dtype=float), noise, rng)
        is_ = _noisy(np.asarray(is_, dtype=float), noise, rng)
        points = [
            Point(ep=float(ep[k]), eg=float(eg), ip=float(ip[k]), is_=float(is_[k]),
                  es=0.0 if parameters.TRIODE else float(screen[k]), index=k + 1)
            for k in range(n_points)
        ]
        series.append(Series(points=points, eg=float(eg)))

    return MeasurementFile(
        name=name,
        series=series,
        measurement_type=measurement_type,
        es=es if measurement_type == MeasurementType.IPIS_VA_VG_VS_VH else None,
    )


def generate_synthetic_data(
    model: str = 'koren-triode',
    noise: float = 0.0,
    seed: Optional[int] = None
) -> Tuple[List[MeasurementFile], ModelParameters]:
    """
    Generate a demo measurement set for a model family.

    Triode models get one plate characteristic. Pentode families get a
    triode-connected plate characteristic (for mu, ex, kg1 and kp) plus
    plate characteristics at two screen voltages.

    Returns
    -------
    files : list of MeasurementFile
        Synthetic measurements
    parameters : ModelParameters
        Parameters the data was generated from
    """
    logger.info("=" * 60)
    logger.info("Generating synthetic data")
    logger.info("=" * 60)

    if model == 'koren-triode':
        parameters: ModelParameters = DEMO_TRIODE
        files = [generate_plate_characteristics(
            parameters, eg_values=[0.0, -0.5, -1.0, -1.5, -2.0, -2.5, -3.0], ep_max=300.0,
            noise=noise, name='synthetic-triode', seed=seed)]
    else:
        parameters = DEMO_PENTODE
        files = [
            generate_plate_characteristics(
                parameters, eg_values=[0.0, -2.0, -4.0, -6.0, -8.0, -10.0], ep_max=300.0,
                noise=noise, name='synthetic-triode-connected', seed=seed),
        ]
        for k, es in enumerate((200.0, 250.0)):
            files.append(generate_plate_characteristics(
                parameters, eg_values=[0.0, -2.0, -4.0, -6.0, -8.0], ep_max=400.0, es=es,
                noise=noise, name=f'synthetic-pentode-{es:.0f}V',
                seed=None if seed is None else seed + k + 1))

    logger.info(f"Model: {parameters.LABEL}")
    logger.info(f"Parameters: {parameters}")
    logger.info(f"Files: {len(files)}, points: {sum(f.n_points for f in files)}, noise: {noise:.1%}")
    return files, parameters


__all__ = [
    'DEMO_TRIODE',
    'DEMO_PENTODE',
    'demo_dissipation',
    'generate_plate_characteristics',
    'generate_synthetic_data',
]
