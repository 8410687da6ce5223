"""
Defaults and thresholds for the initial parameter estimators.

Defaults are used when no measurement point satisfies an estimator's
applicability and quality filters. They are typical values for small
signal and power tubes and do not depend on the tube family.

References
----------
.. [1] N. Koren, "Improved vacuum tube models for SPICE simulations" (1996)
.. [2] D. Reefman, "Spice models for vacuum tubes using the uTracer" (2016)
"""

# =============================================================================
# Default Values
# =============================================================================

DEFAULT_MU = 50.0
"""
Default amplification factor.

Between a 12AX7 (mu ~ 100) and a 12AU7 (mu ~ 20).
"""

DEFAULT_EX = 1.3
"""
Default Koren exponent.

Close to the Child-Langmuir 3/2 law, slightly lowered as found for real tubes [1].
"""

DEFAULT_KG1 = 1000.0
"""Default plate current scaling factor."""

DEFAULT_KP = 10.0
"""Default Koren kp (shape of the cutoff knee)."""

DEFAULT_KVB = 1000.0
"""Default Koren kvb [V^2] for triodes."""

PENTODE_KVB = 100.0
"""
Fixed kvb [V^2] for pentodes and tetrodes.

The screen voltage hardly varies in pentode measurements, so kvb cannot
be separated from kp and is not estimated.
"""

DEFAULT_KG2 = 1000.0
"""Default screen current scaling factor."""

DEFAULT_A = 0.001
"""Default plate current slope in saturation [1/V]."""

DEFAULT_ALPHA_S = 5.0
"""Default take-over amplitude of the Derk models."""

DEFAULT_BETA = 0.001
"""Default take-over rate of the Derk models [1/V]."""

DEFAULT_S = 0.05
"""Default secondary emission strength."""

DEFAULT_ALPHA_P = 0.05
"""Default sharpness of the secondary emission transition [1/V]."""

# =============================================================================
# Amplification Factor
# =============================================================================

MU_CURRENT_THRESHOLD = 0.05
"""
Contour current used to estimate mu, as fraction of the maximum current.

At 5% of the maximum current the tube is close to cutoff but the current
is still well above the measurement noise.
"""

MU_MIN = 1.0
"""Lower bound (exclusive) of physically plausible mu values."""

MU_MAX = 200.0
"""Upper bound (exclusive) of physically plausible mu values."""

# =============================================================================
# Point Caps
# =============================================================================

EX_KG1_MAX_POINTS = 6
"""Number of high plate voltage points per series used for ex and kg1."""

EX_KG1_MIN_POINTS = 3
"""Minimum number of points needed for the ex/kg1 regression."""

KP_MAX_POINTS = 6
"""Number of near cutoff points per series used for kp."""

KP_MIN_POINTS = 2
"""Minimum number of points needed for the kp regression."""

KVB_MAX_POINTS = 5
"""Maximum number of points per series used for the closed form kvb."""

KVB_CANDIDATES = (50.0, 100.0, 200.0, 400.0, 800.0, 3200.0)
"""Candidate kvb values [V^2] tested when no point admits the closed form."""

A_MAX_PAIRS = 3
"""Maximum number of adjacent point pairs per series used for a."""

ALPHA_S_BETA_POINTS = 4
"""Number of low plate voltage points per series used for alpha_s and beta."""

ALPHA_S_BETA_START = (5.0, 0.05)
"""Starting point (slope, intercept) of the alpha_s/beta line fit."""

# =============================================================================
# Secondary Emission
# =============================================================================

FEATURE_POINT_EPS = 1e-6
"""Slope and curvature magnitude below which changes are treated as noise."""

ESTIMATOR_POWELL_ITERATIONS = 500
"""Iteration cap of the small Powell fits inside estimators."""

ESTIMATOR_POWELL_THRESHOLD = 1e-4
"""Relative termination threshold of the small Powell fits inside estimators."""
