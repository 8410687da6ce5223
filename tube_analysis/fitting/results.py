"""
Fit request, progress events and results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..data import MeasurementFile
from ..models.parameters import ModelParameters
from ..trace import Trace
from .config import DEFAULT_EG_OFFSET, DEFAULT_MAXIMUM_PLATE_DISSIPATION, Algorithm, TubeModel


@dataclass
class FitRequest:
    """
    One fit invocation.

    Attributes
    ----------
    files : list of MeasurementFile
        Classified measurement files (series may be re-sorted in place)
    model : TubeModel
        Model family to fit
    maximum_plate_dissipation : float
        Plate dissipation limit [W]; points beyond it are ignored
    algorithm : Algorithm
        Optimizer (0 = Levenberg-Marquardt, 1 = Powell)
    eg_offset : float
        Grid offset [V] for files whose own offset is unset
    secondary_emission : bool
        Fit the secondary emission terms (Derk models only)
    trace_enabled : bool
        Collect a diagnostic Trace
    """
    files: List[MeasurementFile]
    model: TubeModel
    maximum_plate_dissipation: float = DEFAULT_MAXIMUM_PLATE_DISSIPATION
    algorithm: Algorithm = Algorithm.LEVENBERG_MARQUARDT
    eg_offset: float = DEFAULT_EG_OFFSET
    secondary_emission: bool = False
    trace_enabled: bool = False


@dataclass
class FittedParameters:
    """
    Final fit result: non-negative parameters, RMSE and completion time.

    Attributes
    ----------
    model : TubeModel
        Model family
    parameters : ModelParameters
        Fitted values
    rmse : float
        Root mean square error over the fitted points [mA]
    calculated_on : datetime
        Completion timestamp (local time, timezone aware)
    iterations : int
        Optimizer iterations (summed over stages)
    """
    model: TubeModel
    parameters: ModelParameters
    rmse: float
    calculated_on: datetime
    iterations: int = 0

    def __str__(self) -> str:
        return f"{self.parameters.LABEL}: {self.parameters}, RMSE={self.rmse:.4e} mA"


@dataclass
class FitEvent:
    """
    Message emitted by the fit orchestration.

    ``type`` is 'log' (progress text), 'succeeded' (with parameters) or
    'failed' (with an error text). Exactly one terminal event ends a fit.
    """
    type: str
    text: str = ''
    parameters: Optional[FittedParameters] = None
    trace: Optional[Trace] = None

    @property
    def terminal(self) -> bool:
        return self.type in ('succeeded', 'failed')


@dataclass
class FitOutcome:
    """Result of the synchronous fit wrapper."""
    success: bool
    parameters: Optional[FittedParameters] = None
    trace: Optional[Trace] = None
    messages: List[str] = field(default_factory=list)
    error: Optional[str] = None


__all__ = [
    'FitRequest',
    'FittedParameters',
    'FitEvent',
    'FitOutcome',
]
