"""
Optimizer settings per tube model family.

Values are applied by the fit orchestration; the optimizers themselves
use the general defaults of ``algorithms.config``.
"""

from enum import Enum, IntEnum

from ..algorithms.config import LevenbergMarquardtConfig, PowellConfig


class Algorithm(IntEnum):
    """Optimizer selector (0 = Levenberg-Marquardt, 1 = Powell)."""
    LEVENBERG_MARQUARDT = 0
    POWELL = 1


class TubeModel(str, Enum):
    """Tube model family."""
    KOREN_TRIODE = 'koren-triode'
    KOREN_PENTODE = 'koren-pentode'
    DERK = 'derk'
    DERKE = 'derke'


# =============================================================================
# Levenberg-Marquardt
# =============================================================================

TRIODE_LM_CONFIG = LevenbergMarquardtConfig(kmax=500, tolerance=1e-5)
"""
Levenberg-Marquardt settings for the Koren triode.

Triode residuals are plate currents in mA; a gradient norm of 1e-5
is reached within a few dozen iterations on clean data.
"""

PENTODE_LM_CONFIG = LevenbergMarquardtConfig(kmax=500, tolerance=1e-4)
"""
Levenberg-Marquardt settings for the pentode families.

Pentode fits have twice the residuals and up to 14 parameters, the
tolerance is relaxed accordingly.
"""

# =============================================================================
# Powell
# =============================================================================

POWELL_CONFIG = PowellConfig(iterations=500)
"""Powell settings for all families (default thresholds, 500 iterations)."""

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_MAXIMUM_PLATE_DISSIPATION = 1.0
"""Default plate dissipation limit [W] when none is given."""

DEFAULT_EG_OFFSET = 0.0
"""Default grid voltage calibration offset [V]."""
