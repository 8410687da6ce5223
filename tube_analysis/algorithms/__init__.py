"""
Numerical algorithms: vector types, finite differences and optimizers.
"""

from .vector import Vector, Matrix
from .config import EPS, LevenbergMarquardtConfig, PowellConfig
from .derivative import derivative, stepsize
from .levenberg_marquardt import LevenbergMarquardtResult, levenberg_marquardt
from .powell import PowellResult, powell

__all__ = [
    'Vector',
    'Matrix',
    'EPS',
    'LevenbergMarquardtConfig',
    'PowellConfig',
    'derivative',
    'stepsize',
    'LevenbergMarquardtResult',
    'levenberg_marquardt',
    'PowellResult',
    'powell',
]
