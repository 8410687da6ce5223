"""
SPICE sub-circuit text for fitted tube models.

The generated text is meant to be pasted into a SPICE library. Triodes
reference an external ``TriodeK`` Koren triode sub-circuit; the Koren
pentode is written as a self-contained behavioral sub-circuit; the Derk
models reference ``DerkPentode`` / ``DerkEPentode`` sub-circuits.
"""

import re
from typing import Dict, Optional

from .fitting.config import TubeModel
from .fitting.results import FittedParameters

GRID_RESISTANCE = 2000
"""Grid stopper resistance RGI [Ohm] passed to the triode sub-circuit."""

TRIODE_CAPACITANCES = ('CCG', 'CGP', 'CCP')
"""Inter-electrode capacitances of the triode sub-circuit [pF]."""

_PENTODE_BODY = """\
* Anode Screen-Grid Control-Grid Cathode
E1 7 0 VALUE={{V(G2,C)*LOG(1+EXP(KP*(1/MU+V(G1,C)/V(G2,C))))/KP}}
RE1 7 0 1G
G1 A C VALUE={{IF(V(7)>=0, 1000*PWR(V(7),EX)*ATAN(V(A,C)/KVB)/KG1, 0)}}
G2 G2 C VALUE={{IF(V(7)>=0, 1000*PWR(V(7),EX)/KG2, 0)}}
RCP A C 1G
RCS G2 C 1G
.PARAM MU={mu:.6f} EX={ex:.6f} KG1={kg1:.6f} KG2={kg2:.6f} KP={kp:.6f} KVB={kvb:.6f}"""


def spice_name(name: str) -> str:
    """Sub-circuit name: upper case, non-alphanumerics replaced by '_'."""
    return re.sub(r'[^A-Z0-9]', '_', name.upper())


def _header(fitted: FittedParameters, tube_name: str) -> str:
    return (f"* {tube_name} {fitted.parameters.LABEL} Model\n"
            f"* RMSE: {fitted.rmse:.6e} mA\n"
            f"* Calculated on: {fitted.calculated_on.isoformat(timespec='seconds')}")


def triode_spice_model(
    fitted: FittedParameters,
    tube_name: str = 'TRIODE',
    capacitances: Optional[Dict[str, float]] = None
) -> str:
    """
    Koren triode sub-circuit with pins P (plate), G (grid), K (cathode).

    Parameters
    ----------
    fitted : FittedParameters
        Koren triode fit
    tube_name : str
        Tube name used for the sub-circuit and comments
    capacitances : dict, optional
        CCG, CGP and CCP in pF (missing values are written as 0)
    """
    p = fitted.parameters
    capacitances = capacitances or {}
    caps = ' '.join(f"{c}={capacitances.get(c, 0)}" for c in TRIODE_CAPACITANCES)
    name = spice_name(tube_name)
    return '\n'.join([
        _header(fitted, tube_name),
        f".SUBCKT {name} P G K",
        f"X1 P G K TriodeK MU={p.mu:.3f} EX={p.ex:.3f} KG1={p.kg1:.6f} KP={p.kp:.6f} "
        f"KVB={p.kvb:.6f} {caps} RGI={GRID_RESISTANCE}",
        f".ENDS {name}",
    ])


def pentode_spice_model(fitted: FittedParameters, tube_name: str = 'PENTODE') -> str:
    """Koren pentode behavioral sub-circuit with pins A, G2, G1 and C."""
    p = fitted.parameters
    name = spice_name(tube_name)
    return '\n'.join([
        _header(fitted, tube_name),
        f".SUBCKT {name} A G2 G1 C",
        _PENTODE_BODY.format(mu=p.mu, ex=p.ex, kg1=p.kg1, kg2=p.kg2, kp=p.kp, kvb=p.kvb),
        f".ENDS {name}",
    ])


def derk_spice_model(fitted: FittedParameters, tube_name: str = 'PENTODE') -> str:
    """Derk (or DerkE) sub-circuit with pins P, G2, G1 and K."""
    p = fitted.parameters
    name = spice_name(tube_name)
    model = 'DerkEPentode' if fitted.model == TubeModel.DERKE else 'DerkPentode'
    names = p.NAMES if p.secondary_emission else tuple(
        n for n in p.NAMES if n not in p.SECONDARY_EMISSION_NAMES)
    values = ' '.join(f"{spice_name(n.rstrip('_'))}={getattr(p, n):.6g}" for n in names)
    return '\n'.join([
        _header(fitted, tube_name),
        f".SUBCKT {name} P G2 G1 K",
        f"X1 P G2 G1 K {model} {values}",
        f".ENDS {name}",
    ])


def spice_model(fitted: FittedParameters, tube_name: Optional[str] = None) -> str:
    """
    SPICE text for any fitted model family.

    Raises
    ------
    ValueError
        For an unknown model family
    """
    model = TubeModel(fitted.model)
    if model == TubeModel.KOREN_TRIODE:
        return triode_spice_model(fitted, tube_name or 'TRIODE')
    if model == TubeModel.KOREN_PENTODE:
        return pentode_spice_model(fitted, tube_name or 'PENTODE')
    if model in (TubeModel.DERK, TubeModel.DERKE):
        return derk_spice_model(fitted, tube_name or 'PENTODE')
    raise ValueError(f"No SPICE model for {model}")


__all__ = [
    'spice_name',
    'triode_spice_model',
    'pentode_spice_model',
    'derk_spice_model',
    'spice_model',
]
