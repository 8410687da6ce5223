"""
Tube Analysis Toolkit
=====================

Parameter extraction for vacuum tube SPICE models from measured
characteristics.

Modules:
- io: uTracer file loading and synthetic data generation
- algorithms: Finite differences, Levenberg-Marquardt and Powell optimizers
- models: Koren triode/pentode and Derk/DerkE models, error functions
- estimation: Initial parameter estimation from measurements
- fitting: Fit orchestration and results
- spice: SPICE sub-circuit export
- visualization: Plotting

Version is imported from tube_analysis.version (single source of truth).
"""

from .version import __version__, __version_info__, get_version_string

# Exceptions
from .exceptions import (
    TubeAnalysisError,
    DimensionError,
    EstimationError,
    InsufficientParameters,
    SolverError,
    TooManyIterations,
    ParseError,
)

# Data model
from .data import MeasurementType, Point, Series, MeasurementFile
from .initial import Initial
from .trace import Trace

# I/O
from .io import load_utd, parse_utd, classify_measurement, generate_synthetic_data

# Algorithms
from .algorithms import (
    Vector,
    Matrix,
    derivative,
    levenberg_marquardt,
    powell,
    LevenbergMarquardtConfig,
    PowellConfig,
)

# Models
from .models import (
    koren_triode,
    koren_pentode,
    derk,
    derke,
    TriodeParameters,
    PentodeParameters,
    DerkParameters,
    DerkEParameters,
    koren_triode_error,
    koren_pentode_error,
    derk_error,
    derke_error,
)

# Estimation
from .estimation import (
    estimate_triode_parameters,
    estimate_pentode_parameters,
    estimate_derk_parameters,
    find_feature_points,
)

# Fitting
from .fitting import (
    Algorithm,
    TubeModel,
    FitRequest,
    FitEvent,
    FittedParameters,
    FitOutcome,
    run_fit,
    fit_tube_model,
)

# Export
from .spice import spice_model

# Visualization
from .visualization import plot_measurement, plot_optimization_history

__all__ = [
    # Version
    '__version__',
    '__version_info__',
    'get_version_string',
    # Exceptions
    'TubeAnalysisError',
    'DimensionError',
    'EstimationError',
    'InsufficientParameters',
    'SolverError',
    'TooManyIterations',
    'ParseError',
    # Data model
    'MeasurementType',
    'Point',
    'Series',
    'MeasurementFile',
    'Initial',
    'Trace',
    # I/O
    'load_utd',
    'parse_utd',
    'classify_measurement',
    'generate_synthetic_data',
    # Algorithms
    'Vector',
    'Matrix',
    'derivative',
    'levenberg_marquardt',
    'powell',
    'LevenbergMarquardtConfig',
    'PowellConfig',
    # Models
    'koren_triode',
    'koren_pentode',
    'derk',
    'derke',
    'TriodeParameters',
    'PentodeParameters',
    'DerkParameters',
    'DerkEParameters',
    'koren_triode_error',
    'koren_pentode_error',
    'derk_error',
    'derke_error',
    # Estimation
    'estimate_triode_parameters',
    'estimate_pentode_parameters',
    'estimate_derk_parameters',
    'find_feature_points',
    # Fitting
    'Algorithm',
    'TubeModel',
    'FitRequest',
    'FitEvent',
    'FittedParameters',
    'FitOutcome',
    'run_fit',
    'fit_tube_model',
    # Export
    'spice_model',
    # Visualization
    'plot_measurement',
    'plot_optimization_history',
]
