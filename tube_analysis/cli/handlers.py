"""
Workflow handlers for the tubefit CLI.

Each handler function corresponds to a step in the pipeline:
- run_model_fit: Estimate and optimize the selected model
- run_spice_export: Write the SPICE sub-circuit
- run_plots: Measured-versus-model and optimizer history figures
"""

import argparse
import logging
from typing import List

import matplotlib.pyplot as plt

from .logging import log_separator
from .parser import ALGORITHMS
from .utils import LoadedMeasurements, TubeFitError, save_figure, write_text_file
from ..fitting import Algorithm, FitOutcome, FitRequest, TubeModel, fit_tube_model
from ..fitting.config import DEFAULT_MAXIMUM_PLATE_DISSIPATION
from ..spice import spice_model
from ..visualization import plot_measurement, plot_optimization_history

logger = logging.getLogger(__name__)


# =============================================================================
# Model Fitting
# =============================================================================

def _maximum_plate_dissipation(data: LoadedMeasurements, args: argparse.Namespace) -> float:
    if args.max_dissipation is not None:
        return args.max_dissipation
    if data.maximum_plate_dissipation is not None:
        return data.maximum_plate_dissipation
    return DEFAULT_MAXIMUM_PLATE_DISSIPATION


def run_model_fit(data: LoadedMeasurements, args: argparse.Namespace) -> FitOutcome:
    """
    Fit the selected model to the loaded measurements.

    Parameters
    ----------
    data : LoadedMeasurements
        Classified measurement files
    args : argparse.Namespace
        CLI arguments (uses: model, algorithm, max_dissipation, eg_offset,
        secondary_emission, trace)

    Returns
    -------
    FitOutcome
        Successful fit

    Raises
    ------
    TubeFitError
        If the fit fails
    """
    model = TubeModel(args.model)
    if args.secondary_emission and model not in (TubeModel.DERK, TubeModel.DERKE):
        logger.warning("--secondary-emission only applies to the Derk models, ignored")

    request = FitRequest(
        files=data.files,
        model=model,
        maximum_plate_dissipation=_maximum_plate_dissipation(data, args),
        algorithm=Algorithm(ALGORITHMS[args.algorithm]),
        eg_offset=args.eg_offset,
        secondary_emission=args.secondary_emission,
        trace_enabled=args.trace,
    )

    log_separator(60)
    logger.info(f"Model fit: {model.value}, {args.algorithm}, "
                f"maximum plate dissipation {request.maximum_plate_dissipation} W")
    log_separator(60)

    outcome = fit_tube_model(request)
    if not outcome.success:
        raise TubeFitError(f"Fit failed: {outcome.error}")

    fitted = outcome.parameters
    logger.info("")
    logger.info(f"{fitted.parameters.LABEL} Model parameters:")
    for name, value in zip(fitted.parameters.NAMES, fitted.parameters.values()):
        logger.info(f"  {name.rstrip('_'):>8} = {value:.6g}")
    logger.info(f"  {'RMSE':>8} = {fitted.rmse:.4e} mA")

    if data.reference is not None:
        logger.debug(f"Synthetic reference: {data.reference}")

    return outcome


# =============================================================================
# SPICE Export
# =============================================================================

def run_spice_export(outcome: FitOutcome, args: argparse.Namespace) -> None:
    """Write the SPICE sub-circuit if --spice is given."""
    if args.spice is None:
        return
    text = spice_model(outcome.parameters, args.tube_name)
    write_text_file(args.spice, text)
    logger.debug(text)


# =============================================================================
# Plots
# =============================================================================

def run_plots(
    data: LoadedMeasurements,
    outcome: FitOutcome,
    args: argparse.Namespace
) -> List[plt.Figure]:
    """
    Plot every file against the fitted model and, with --trace, the history.

    Returns
    -------
    figures : list of Figure
        Created figures (saved when --save is given)
    """
    figures = []
    parameters = outcome.parameters.parameters
    for k, f in enumerate(data.files, start=1):
        fig = plot_measurement(f, parameters)
        suffix = 'fit' if len(data.files) == 1 else f'fit_{k}'
        save_figure(fig, args.save, suffix, args.format)
        figures.append(fig)

    if args.trace and outcome.trace is not None:
        fig = plot_optimization_history(outcome.trace)
        save_figure(fig, args.save, 'history', args.format)
        figures.append(fig)

    return figures
