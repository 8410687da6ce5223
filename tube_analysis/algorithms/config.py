"""
Configuration structs for the optimizers.

All fields have documented defaults; configs are frozen dataclasses and are
passed by value, use ``dataclasses.replace`` to derive a variant.

References
----------
.. [1] C.T. Kelley, "Iterative Methods for Optimization", SIAM (1999),
       Algorithms 3.3.4 and 3.3.5
.. [2] W.H. Press et al., "Numerical Recipes in C", 2nd ed. (1992),
       Chapters 10.1, 10.2 and 10.5
"""

from dataclasses import dataclass

EPS = 2.220446049250313e-16
"""Machine epsilon for IEEE 754 double precision."""


# =============================================================================
# Levenberg-Marquardt
# =============================================================================

@dataclass(frozen=True)
class LevenbergMarquardtConfig:
    """
    Levenberg-Marquardt settings.

    Attributes
    ----------
    kmax : int
        Maximum number of outer iterations (default: 100)
    tolerance : float
        Termination threshold on the gradient norm ||J^T R|| (default: 1e-6)
    jacobian_order : int
        Finite difference order for the Jacobian: 1 (forward, reuses R(x)),
        2 (central) or 4 (default: 2)
    """
    kmax: int = 100
    tolerance: float = 1e-6
    jacobian_order: int = 2


LM_INNER_ITERATIONS = 50
"""Maximum trial points tested per outer iteration before giving up."""

LM_MU0 = 0.1
"""Reject the trial point when actual/predicted reduction is below this ratio."""

LM_MU_LOW = 0.25
"""Accept but increase damping when the ratio is below this value."""

LM_MU_HIGH = 0.75
"""Accept and decrease damping when the ratio is above this value."""

LM_W_UP = 2.0
"""Damping growth factor."""

LM_W_DOWN = 0.5
"""Damping reduction factor."""

LM_V0 = 0.001
"""Damping floor; damping below it is set to zero (pure Gauss-Newton)."""


# =============================================================================
# Powell
# =============================================================================

@dataclass(frozen=True)
class PowellConfig:
    """
    Powell direction-set settings.

    Attributes
    ----------
    relative_threshold : float
        Fractional decrease of the objective that counts as no progress
        (default: 1e-6)
    absolute_threshold : float
        Absolute term added to the termination test, protects against
        objectives converging to zero (default: EPS)
    iterations : int
        Maximum number of outer iterations (default: 100)
    """
    relative_threshold: float = 1e-6
    absolute_threshold: float = EPS
    iterations: int = 100


GOLD = 1.618034
"""Default ratio by which successive bracketing intervals are magnified."""

GLIMIT = 100.0
"""Maximum magnification allowed for a parabolic-fit step in mnbrak."""

TINY = 1e-20
"""Prevents division by zero in the parabolic extrapolation."""

BRENT_ITERATIONS = 500
"""Maximum iterations of Brent's line search."""

BRENT_TOLERANCE = 2.0e-4
"""Fractional precision of the line minimum."""

ZEPS = 1e-10
"""Protects Brent's tolerance against a minimum at exactly zero."""

CGOLD = 0.381966
"""Golden section ratio used by Brent's method."""


__all__ = [
    'EPS',
    'LevenbergMarquardtConfig',
    'PowellConfig',
]
