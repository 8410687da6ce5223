"""
Tube model fitting: optimizer selection, reparameterization and results.
"""

from .config import Algorithm, TubeModel
from .reparameterize import Reparameterize, free_indices
from .results import FitRequest, FitEvent, FittedParameters, FitOutcome
from .orchestration import run_fit, fit_tube_model

__all__ = [
    'Algorithm',
    'TubeModel',
    'Reparameterize',
    'free_indices',
    'FitRequest',
    'FitEvent',
    'FittedParameters',
    'FitOutcome',
    'run_fit',
    'fit_tube_model',
]
