"""
Utility functions and dataclasses for the tubefit CLI.

Contains:
- Exception classes
- Data containers (dataclasses)
- Helper functions (save_figure, write_text_file)
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import matplotlib.pyplot as plt

from ..data import MeasurementFile
from ..models.parameters import ModelParameters

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================

class TubeFitError(Exception):
    """Base exception for CLI errors."""
    pass


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class LoadedMeasurements:
    """
    Container for loaded tube measurements.

    Attributes
    ----------
    files : list of MeasurementFile
        Classified measurement files
    title : str
        File names, or "Synthetic data"
    reference : ModelParameters or None
        Parameters the synthetic data was generated from
    maximum_plate_dissipation : float or None
        Rating suggested by the data source [W] (used when --max-dissipation is unset)
    """
    files: List[MeasurementFile]
    title: str
    reference: Optional[ModelParameters] = None
    maximum_plate_dissipation: Optional[float] = None


# =============================================================================
# Helper Functions
# =============================================================================

def save_figure(
    fig: Optional[plt.Figure],
    prefix: Optional[str],
    suffix: str,
    fmt: str = 'png'
) -> None:
    """
    Save figure to file if fig and prefix are provided.

    Parameters
    ----------
    fig : Figure or None
        Matplotlib figure to save
    prefix : str or None
        File prefix (from --save argument)
    suffix : str
        File suffix (e.g., 'fit', 'history')
    fmt : str
        Output format: 'png', 'pdf', 'svg', 'eps' (default: 'png')
    """
    if fig is None or prefix is None:
        return

    filepath = f"{prefix}_{suffix}.{fmt}"
    try:
        if fmt == 'png':
            fig.savefig(filepath, dpi=150, bbox_inches='tight')
        else:
            fig.savefig(filepath, bbox_inches='tight')
        logger.info(f"Saved: {filepath}")
    except OSError as e:
        logger.error(f"Error saving figure: {e}")


def write_text_file(path: str, text: str) -> None:
    """
    Write a text file, converting I/O errors to TubeFitError.
    """
    try:
        with open(path, 'w', encoding='utf-8') as fh:
            fh.write(text + '\n')
    except OSError as e:
        raise TubeFitError(f"Cannot write '{path}': {e}") from e
    logger.info(f"Saved: {path}")
