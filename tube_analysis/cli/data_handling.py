"""
Measurement loading for the tubefit CLI.

Contains:
- load_measurements: Load .utd files or generate synthetic data
"""

import argparse
import logging
import os

from .utils import LoadedMeasurements, TubeFitError
from ..data import MeasurementType
from ..exceptions import ParseError
from ..io import generate_synthetic_data, load_utd
from ..io.synthetic import demo_dissipation

logger = logging.getLogger(__name__)


def load_measurements(args: argparse.Namespace) -> LoadedMeasurements:
    """
    Load measurement files or generate synthetic data.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments. Uses:
        - args.files: Input file paths (empty for synthetic)
        - args.model: Model family (selects the synthetic tube)
        - args.noise: Synthetic noise level

    Returns
    -------
    LoadedMeasurements
        Container with classified files and a title

    Raises
    ------
    TubeFitError
        If a file does not exist, cannot be parsed, or no file is classified
    """
    if not args.files:
        files, reference = generate_synthetic_data(args.model, noise=args.noise, seed=42)
        return LoadedMeasurements(files=files, title="Synthetic data", reference=reference,
                                  maximum_plate_dissipation=demo_dissipation(args.model))

    files = []
    for path in args.files:
        if not os.path.exists(path):
            raise TubeFitError(f"File '{path}' does not exist!")
        try:
            f = load_utd(path)
        except ParseError as e:
            raise TubeFitError(f"Error loading file: {e}") from e

        if f.measurement_type == MeasurementType.UNKNOWN:
            logger.warning(f"{f.name}: measurement type not recognized, file ignored")
            continue
        logger.info(f"{f.name}: {f.measurement_type.value}, "
                    f"{len(f.series)} series, {f.n_points} points")
        files.append(f)

    if not files:
        raise TubeFitError("No usable measurement files")

    return LoadedMeasurements(files=files, title=', '.join(f.name for f in files))
