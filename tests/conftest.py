"""Shared fixtures for the tube analysis tests."""

import os
import sys

import matplotlib
matplotlib.use('Agg')

import pytest

# Ensure the package is importable without installation
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tube_analysis.io import generate_synthetic_data
from tube_analysis.io.synthetic import DEMO_TRIODE, generate_plate_characteristics


@pytest.fixture
def triode_files():
    """Noiseless synthetic triode plate characteristics (eg = 0 .. -3 V)."""
    files, _ = generate_synthetic_data('koren-triode', noise=0.0)
    return files


@pytest.fixture
def triode_file():
    """One short noiseless triode file, cheap enough for optimizer runs."""
    return generate_plate_characteristics(
        DEMO_TRIODE, eg_values=[0.0, -1.0, -2.0], ep_max=300.0, n_points=16)


@pytest.fixture
def pentode_files():
    """Noiseless synthetic triode-connected plus pentode characteristics."""
    files, _ = generate_synthetic_data('koren-pentode', noise=0.0)
    return files


def utd_text(header, rows):
    """Build uTracer export text from a header list and row tuples."""
    lines = ['  '.join(header)]
    for row in rows:
        lines.append('  '.join(str(v) for v in row))
    return '\n'.join(lines) + '\n'


@pytest.fixture
def make_utd():
    return utd_text
