"""
Argument parsing for the tubefit CLI.

Provides structured argument parsing with logical grouping:
- Input/Output options
- Model fitting options
- Export options
"""

import argparse
from typing import List, Optional

from ..fitting.config import DEFAULT_EG_OFFSET, DEFAULT_MAXIMUM_PLATE_DISSIPATION, TubeModel
from ..version import get_version_string

ALGORITHMS = {'lm': 0, 'powell': 1}
"""CLI names of the optimizers and their Algorithm values."""


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description=f'Vacuum tube model fitting ({get_version_string()})',
        usage='tubefit [files ...] [options]',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tubefit                                  Synthetic triode demo
  tubefit --model koren-pentode            Synthetic pentode demo
  tubefit 12AX7.utd --max-dissipation 1.2  Fit a Koren triode
  tubefit EL84-*.utd --model derk --algorithm powell --spice EL84.lib
        """
    )

    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {get_version_string()}')

    # ==========================================================================
    # Input/Output Group
    # ==========================================================================
    io_group = parser.add_argument_group('Input/Output')

    io_group.add_argument('files', nargs='*', default=[],
                          help='uTracer measurement files (.utd). '
                               'Without files, synthetic data is used.')
    io_group.add_argument('--noise', type=float, default=0.0,
                          help='Relative noise of the synthetic demo data (default: 0)')
    io_group.add_argument('--save', '-s', type=str, default=None,
                          help='Save plots to files with this prefix')
    io_group.add_argument('--format', '-f', type=str, default='png',
                          choices=['png', 'pdf', 'svg', 'eps'],
                          help='Output format for saved plots (default: png)')
    io_group.add_argument('--no-show', action='store_true',
                          help='Do not display plots (useful with --save)')
    io_group.add_argument('--verbose', '-v', action='count', default=0,
                          help='Show debug messages on stderr')
    io_group.add_argument('--quiet', '-q', action='store_true',
                          help='Quiet mode - hide INFO messages, show only warnings and errors')

    # ==========================================================================
    # Model Fitting Group
    # ==========================================================================
    fit_group = parser.add_argument_group('Model Fitting')

    fit_group.add_argument('--model', '-m', type=str, default=TubeModel.KOREN_TRIODE.value,
                           choices=[m.value for m in TubeModel],
                           help='Tube model family (default: koren-triode)')
    fit_group.add_argument('--algorithm', '-a', type=str, default='lm',
                           choices=sorted(ALGORITHMS),
                           help='Optimizer: lm (Levenberg-Marquardt, default) or powell')
    fit_group.add_argument('--max-dissipation', type=float, default=None, metavar='WATTS',
                           help='Ignore points above this plate dissipation '
                                f'(default: {DEFAULT_MAXIMUM_PLATE_DISSIPATION} W, '
                                'or the demo tube rating for synthetic data)')
    fit_group.add_argument('--eg-offset', type=float, default=DEFAULT_EG_OFFSET, metavar='VOLTS',
                           help='Grid voltage offset added to every point (default: 0)')
    fit_group.add_argument('--secondary-emission', action='store_true',
                           help='Fit the secondary emission terms (Derk models only)')
    fit_group.add_argument('--trace', action='store_true',
                           help='Collect optimizer diagnostics and plot the objective history')

    # ==========================================================================
    # Export Group
    # ==========================================================================
    export_group = parser.add_argument_group('Export')

    export_group.add_argument('--spice', type=str, default=None, metavar='FILE',
                              help='Write the fitted model as a SPICE sub-circuit')
    export_group.add_argument('--tube-name', type=str, default=None,
                              help='Tube name for the SPICE sub-circuit')

    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns
    -------
    args : argparse.Namespace
        Parsed command line arguments
    """
    return build_parser().parse_args(argv)
