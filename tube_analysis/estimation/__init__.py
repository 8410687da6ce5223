"""
Initial parameter estimation from classified measurements.
"""

from .mu import estimate_mu
from .ex_kg1 import estimate_ex_kg1
from .kp import estimate_kp
from .kvb import estimate_kvb
from .kg2 import estimate_kg2
from .a import estimate_a
from .alpha_s_beta import estimate_alpha_s_beta
from .feature_points import FeatureKind, FeaturePoint, find_feature_points
from .secondary_emission import estimate_secondary_emission
from .pipelines import (
    estimate_triode_parameters,
    estimate_pentode_parameters,
    estimate_derk_parameters,
)

__all__ = [
    'estimate_mu',
    'estimate_ex_kg1',
    'estimate_kp',
    'estimate_kvb',
    'estimate_kg2',
    'estimate_a',
    'estimate_alpha_s_beta',
    'FeatureKind',
    'FeaturePoint',
    'find_feature_points',
    'estimate_secondary_emission',
    'estimate_triode_parameters',
    'estimate_pentode_parameters',
    'estimate_derk_parameters',
]
