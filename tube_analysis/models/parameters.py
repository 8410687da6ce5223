"""
Typed parameter sets for each tube model family.

Each parameter set knows its ordered parameter names (the order used for
optimizer vectors), how to evaluate its model, and whether it is fitted
against triode or pentode measurements.
"""

from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Dict, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from ..initial import Initial
from .derk import derk, derke
from .ipk import ArrayLike, Currents
from .koren import koren_pentode, koren_triode


class ModelParameters:
    """Common behaviour of the parameter dataclasses."""

    NAMES: ClassVar[Tuple[str, ...]] = ()
    TRIODE: ClassVar[bool] = False
    LABEL: ClassVar[str] = ''

    def values(self) -> NDArray[np.float64]:
        """Parameter values in ``NAMES`` order."""
        return np.array([getattr(self, name) for name in self.NAMES], dtype=float)

    @classmethod
    def from_values(cls, values: Sequence[float], **extra: Any) -> 'ModelParameters':
        """Build a parameter set from values in ``NAMES`` order."""
        if len(values) != len(cls.NAMES):
            raise ValueError(f"{cls.__name__} expects {len(cls.NAMES)} values, got {len(values)}")
        return cls(**dict(zip(cls.NAMES, (float(v) for v in values))), **extra)

    @classmethod
    def from_initial(cls, initial: Initial, **extra: Any) -> 'ModelParameters':
        """Build a parameter set from a complete ``Initial``."""
        missing = [name for name in cls.NAMES if getattr(initial, name) is None]
        if missing:
            raise ValueError(f"Initial values missing for {', '.join(missing)}")
        return cls(**{name: float(getattr(initial, name)) for name in cls.NAMES}, **extra)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def currents(self, ep: ArrayLike, eg: ArrayLike, es: ArrayLike = 0.0) -> Currents:
        raise NotImplementedError

    def __str__(self) -> str:
        return ', '.join(f"{name.rstrip('_')}={getattr(self, name):.6g}" for name in self.NAMES)


@dataclass
class TriodeParameters(ModelParameters):
    """Norman Koren triode model parameters."""
    mu: float
    ex: float
    kg1: float
    kp: float
    kvb: float

    NAMES: ClassVar[Tuple[str, ...]] = ('mu', 'ex', 'kg1', 'kp', 'kvb')
    TRIODE: ClassVar[bool] = True
    LABEL: ClassVar[str] = 'Norman Koren Triode'

    def currents(self, ep: ArrayLike, eg: ArrayLike, es: ArrayLike = 0.0) -> Currents:
        ip = koren_triode(ep, eg, self.kp, self.mu, self.kvb, self.ex, self.kg1)
        return Currents(ip, np.zeros_like(ip) if np.ndim(ip) else 0.0)


@dataclass
class PentodeParameters(ModelParameters):
    """Norman Koren (new) pentode model parameters."""
    mu: float
    ex: float
    kg1: float
    kp: float
    kvb: float
    kg2: float

    NAMES: ClassVar[Tuple[str, ...]] = ('mu', 'ex', 'kg1', 'kp', 'kvb', 'kg2')
    LABEL: ClassVar[str] = 'Norman Koren Pentode'

    def currents(self, ep: ArrayLike, eg: ArrayLike, es: ArrayLike = 0.0) -> Currents:
        return koren_pentode(ep, eg, es, self.kp, self.mu, self.kvb, self.ex, self.kg1, self.kg2)


@dataclass
class DerkParameters(ModelParameters):
    """
    Derk pentode model parameters.

    The secondary emission fields (s, alpha_p, lambda_, v, w) are only used
    when ``secondary_emission`` is True.
    """
    mu: float
    ex: float
    kg1: float
    kp: float
    kvb: float
    kg2: float
    a: float
    alpha_s: float
    beta: float
    s: float = 0.0
    alpha_p: float = 0.0
    lambda_: float = 0.0
    v: float = 0.0
    w: float = 0.0
    secondary_emission: bool = False

    NAMES: ClassVar[Tuple[str, ...]] = (
        'mu', 'ex', 'kg1', 'kp', 'kvb', 'kg2', 'a', 'alpha_s', 'beta',
        's', 'alpha_p', 'lambda_', 'v', 'w',
    )
    SECONDARY_EMISSION_NAMES: ClassVar[Tuple[str, ...]] = ('s', 'alpha_p', 'lambda_', 'v', 'w')
    LABEL: ClassVar[str] = 'Derk'

    def _model_arguments(self):
        return (self.kp, self.mu, self.kvb, self.ex, self.kg1, self.kg2, self.a, self.alpha_s,
                self.beta, self.secondary_emission, self.s, self.alpha_p, self.lambda_,
                self.v, self.w)

    def currents(self, ep: ArrayLike, eg: ArrayLike, es: ArrayLike = 0.0) -> Currents:
        return derk(ep, eg, es, *self._model_arguments())


@dataclass
class DerkEParameters(DerkParameters):
    """DerkE pentode model parameters (exponential take-over)."""

    LABEL: ClassVar[str] = 'DerkE'

    def currents(self, ep: ArrayLike, eg: ArrayLike, es: ArrayLike = 0.0) -> Currents:
        return derke(ep, eg, es, *self._model_arguments())


__all__ = [
    'ModelParameters',
    'TriodeParameters',
    'PentodeParameters',
    'DerkParameters',
    'DerkEParameters',
]
