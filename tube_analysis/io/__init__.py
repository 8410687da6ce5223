"""
I/O module for loading and generating tube measurements.
"""

from .utd import load_utd, parse_utd, classify_measurement
from .synthetic import generate_plate_characteristics, generate_synthetic_data

__all__ = [
    'load_utd',
    'parse_utd',
    'classify_measurement',
    'generate_plate_characteristics',
    'generate_synthetic_data',
]
