#!/usr/bin/env python3
"""
Vacuum Tube Model Fitting
=========================

CLI tool for extracting SPICE model parameters from measured tube
characteristics.

Version: Imported from tube_analysis.version (single source of truth)

Features:
- uTracer .utd loading with automatic measurement classification
- Norman Koren triode and pentode models, Derk and DerkE pentode models
- Initial parameter estimation from the measurements
- Levenberg-Marquardt and Powell optimization
- SPICE sub-circuit export

Usage:
    tubefit                                   # synthetic triode demo
    tubefit 12AX7.utd                         # Koren triode fit
    tubefit EL84-*.utd --model koren-pentode  # Koren pentode fit
    tubefit EL84-*.utd --model derk --secondary-emission --algorithm powell
    tubefit 12AX7.utd --spice 12AX7.lib --tube-name 12AX7

    tubefit --help                            # help
"""

import argparse
import logging
import sys

import matplotlib.pyplot as plt

from tube_analysis import get_version_string
from tube_analysis.cli import (
    TubeFitError,
    load_measurements,
    log_separator,
    parse_arguments,
    run_model_fit,
    run_plots,
    run_spice_export,
    setup_logging,
)

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = parse_arguments(argv)
    setup_logging(args)

    try:
        _run_analysis(args)
    except TubeFitError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        return 130
    return 0


def _run_analysis(args: argparse.Namespace) -> None:
    """Run the full fitting pipeline."""
    log_separator(60)
    logger.info(f"Tube Model Fitting ({get_version_string()})")
    log_separator(60)

    data = load_measurements(args)
    outcome = run_model_fit(data, args)
    run_spice_export(outcome, args)
    run_plots(data, outcome, args)

    if not args.no_show:
        plt.show()

    log_separator(60)
    logger.info("Analysis complete")
    log_separator(60)


if __name__ == "__main__":
    sys.exit(main())
