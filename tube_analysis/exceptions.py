"""
Exception hierarchy for the Tube Analysis Toolkit.

Only two kinds of failures leave the numerical core as exceptions:
missing estimator prerequisites and solver failures inside the
Levenberg-Marquardt trial loop. Degenerate measurement data falls back
to documented defaults and non-convergence is reported through result
objects instead.
"""


class TubeAnalysisError(Exception):
    """Base exception for tube analysis errors."""
    pass


class DimensionError(TubeAnalysisError, ValueError):
    """Vector/matrix dimensions do not match the operation."""
    pass


class EstimationError(TubeAnalysisError):
    """Base exception for parameter estimation errors."""
    pass


class InsufficientParameters(EstimationError):
    """An estimator prerequisite is not available in ``Initial``."""
    pass


class SolverError(TubeAnalysisError):
    """Base exception for optimizer failures."""
    pass


class TooManyIterations(SolverError):
    """An inner optimizer loop exceeded its iteration cap."""
    pass


class ParseError(TubeAnalysisError):
    """Measurement file cannot be parsed."""
    pass


__all__ = [
    'TubeAnalysisError',
    'DimensionError',
    'EstimationError',
    'InsufficientParameters',
    'SolverError',
    'TooManyIterations',
    'ParseError',
]
