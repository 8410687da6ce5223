"""
Estimation chains producing a complete ``Initial`` for each model family.

Stages run in dependency order; every stage only fills unset fields, so a
caller may pre-seed any parameter in ``initial``.
"""

from typing import List, Optional

from ..data import TRIODE_TYPES, MeasurementFile
from ..initial import Initial
from ..trace import Trace
from .a import estimate_a
from .alpha_s_beta import estimate_alpha_s_beta
from .config import DEFAULT_EX, DEFAULT_KG1, DEFAULT_KP, DEFAULT_KVB, DEFAULT_MU, PENTODE_KVB
from .ex_kg1 import estimate_ex_kg1
from .kg2 import estimate_kg2
from .kp import estimate_kp
from .kvb import estimate_kvb
from .mu import estimate_mu
from .secondary_emission import estimate_secondary_emission


def estimate_triode_parameters(
    files: List[MeasurementFile],
    maximum_plate_dissipation: float,
    trace: Optional[Trace] = None,
    initial: Optional[Initial] = None
) -> Initial:
    """
    Initial Koren triode parameters (mu, ex, kg1, kp, kvb).

    mu uses all files, the remaining stages only triode measurements.
    Without triode measurements the unset fields get their defaults.
    """
    initial = initial if initial is not None else Initial()
    triode_files = [f for f in files if f.measurement_type in TRIODE_TYPES]
    if not triode_files:
        defaults = {'mu': DEFAULT_MU, 'ex': DEFAULT_EX, 'kg1': DEFAULT_KG1, 'kp': DEFAULT_KP,
                    'kvb': DEFAULT_KVB}
        for name, value in defaults.items():
            if getattr(initial, name) is None:
                setattr(initial, name, value)
        return initial

    estimate_mu(initial, files, trace)
    estimate_ex_kg1(initial, triode_files, maximum_plate_dissipation, trace)
    estimate_kp(initial, triode_files, maximum_plate_dissipation, trace)
    estimate_kvb(initial, triode_files, maximum_plate_dissipation, trace)
    return initial


def estimate_pentode_parameters(
    files: List[MeasurementFile],
    maximum_plate_dissipation: float,
    trace: Optional[Trace] = None,
    initial: Optional[Initial] = None
) -> Initial:
    """Initial Koren pentode parameters (mu, ex, kg1, kp, kvb, kg2)."""
    initial = initial if initial is not None else Initial()
    estimate_mu(initial, files, trace)
    estimate_ex_kg1(initial, files, maximum_plate_dissipation, trace)
    estimate_kp(initial, files, maximum_plate_dissipation, trace)
    # kvb cannot be separated from kp in pentode measurements
    if initial.kvb is None:
        initial.kvb = PENTODE_KVB
    estimate_kg2(initial, files, maximum_plate_dissipation, trace)
    return initial


def estimate_derk_parameters(
    files: List[MeasurementFile],
    maximum_plate_dissipation: float,
    secondary_emission: bool,
    exponential: bool = False,
    trace: Optional[Trace] = None,
    initial: Optional[Initial] = None
) -> Initial:
    """
    Initial Derk (or DerkE, with ``exponential=True``) parameters.

    Runs the pentode chain, then a, alpha_s/beta and the secondary
    emission parameters.
    """
    initial = estimate_pentode_parameters(files, maximum_plate_dissipation, trace, initial)
    estimate_a(initial, files, maximum_plate_dissipation, trace)
    estimate_alpha_s_beta(initial, files, maximum_plate_dissipation, exponential, trace)
    estimate_secondary_emission(initial, files, secondary_emission, exponential, trace)
    return initial


__all__ = [
    'estimate_triode_parameters',
    'estimate_pentode_parameters',
    'estimate_derk_parameters',
]
