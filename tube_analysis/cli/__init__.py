"""
CLI module for tube model fitting.

This module provides the command-line interface components:
- logging: Custom log formatters and setup
- parser: Argument parsing
- data_handling: Measurement loading
- handlers: Fit, export and plot workflow handlers
- utils: Helper functions and dataclasses

The main entry point is in the root tubefit.py script.
"""

from .logging import setup_logging, log_separator
from .parser import parse_arguments, build_parser
from .data_handling import load_measurements
from .handlers import run_model_fit, run_spice_export, run_plots
from .utils import TubeFitError, LoadedMeasurements, save_figure, write_text_file

__all__ = [
    # Logging
    'setup_logging',
    'log_separator',
    # Parser
    'parse_arguments',
    'build_parser',
    # Data handling
    'load_measurements',
    # Handlers
    'run_model_fit',
    'run_spice_export',
    'run_plots',
    # Utils
    'TubeFitError',
    'LoadedMeasurements',
    'save_figure',
    'write_text_file',
]
