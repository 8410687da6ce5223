"""
Custom logging configuration for the tubefit CLI.

Provides formatters and handlers for clean CLI output:
- INFO: no prefix (clean output)
- WARNING: "! " prefix
- ERROR: "!! " prefix
- DEBUG: "[DEBUG] " prefix
"""

import argparse
import logging
import sys


# =============================================================================
# Custom Formatters
# =============================================================================

class PrefixFormatter(logging.Formatter):
    """Formatter that prepends a fixed prefix to the bare message."""

    def __init__(self, prefix: str = ''):
        super().__init__()
        self.prefix = prefix

    def format(self, record):
        return f"{self.prefix}{record.getMessage()}"


class LevelFilter(logging.Filter):
    """Filter that accepts only specific log levels."""

    def __init__(self, levels):
        super().__init__()
        self.levels = levels if isinstance(levels, (list, tuple)) else [levels]

    def filter(self, record):
        return record.levelno in self.levels


# =============================================================================
# Setup Functions
# =============================================================================

def _handler(stream, level: int, prefix: str, only: bool = True) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    if only:
        handler.addFilter(LevelFilter(level))
    handler.setFormatter(PrefixFormatter(prefix))
    return handler


def setup_logging(args: argparse.Namespace) -> None:
    """
    Configure logging based on command line arguments.

    Output behavior:
    - Default: INFO + WARNING on stdout, ERROR on stderr
    - Quiet (-q): WARNING on stdout, ERROR on stderr (no INFO)
    - Verbose (-v): DEBUG on stderr + default behavior

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments with 'quiet' and 'verbose' attributes
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # filtered per handler
    root_logger.handlers.clear()

    if not args.quiet:
        root_logger.addHandler(_handler(sys.stdout, logging.INFO, ''))
    root_logger.addHandler(_handler(sys.stdout, logging.WARNING, '! '))
    root_logger.addHandler(_handler(sys.stderr, logging.ERROR, '!! ', only=False))
    if args.verbose >= 1:
        root_logger.addHandler(_handler(sys.stderr, logging.DEBUG, '[DEBUG] '))

    # matplotlib font manager chatter at DEBUG
    logging.getLogger('matplotlib').setLevel(logging.WARNING)


def log_separator(length: int = 50, char: str = "=") -> None:
    """
    Log a separator line for visual clarity.

    Parameters
    ----------
    length : int
        Length of separator line (default: 50)
    char : str
        Character to use for separator (default: "=")
    """
    logging.getLogger(__name__).info(char * length)
