"""
Fit orchestration: estimation, optimization and result packaging.

``run_fit`` is a generator of FitEvent objects: progress texts ('log')
followed by exactly one terminal 'succeeded' or 'failed' event. It does no
logging itself; ``fit_tube_model`` consumes the stream, logs the progress
and returns a FitOutcome.

Usage:
    from tube_analysis.fitting import FitRequest, TubeModel, fit_tube_model

    outcome = fit_tube_model(FitRequest(files, TubeModel.KOREN_TRIODE))
    if outcome.success:
        print(outcome.parameters)
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Type

import numpy as np

from ..algorithms.levenberg_marquardt import levenberg_marquardt
from ..algorithms.powell import powell
from ..algorithms.vector import Vector
from ..data import MeasurementFile, apply_eg_offset
from ..estimation.pipelines import (
    estimate_derk_parameters, estimate_pentode_parameters, estimate_triode_parameters,
)
from ..exceptions import SolverError
from ..initial import Initial
from ..models.errors import PointArrays, model_error, model_residuals, select_points
from ..models.parameters import (
    DerkEParameters, DerkParameters, ModelParameters, PentodeParameters, TriodeParameters,
)
from ..trace import Trace
from .config import (
    PENTODE_LM_CONFIG, POWELL_CONFIG, TRIODE_LM_CONFIG, Algorithm, TubeModel,
)
from .reparameterize import Reparameterize, free_indices
from .results import FitEvent, FitOutcome, FitRequest, FittedParameters

logger = logging.getLogger(__name__)

Estimator = Callable[[List[MeasurementFile], FitRequest, Optional[Trace]], Initial]


@dataclass(frozen=True)
class ModelFamily:
    """Everything the orchestration needs to know about one model family."""
    parameters: Type[ModelParameters]
    estimate: Estimator
    powell_stages: Tuple[Optional[Tuple[str, ...]], ...] = (None,)


_DERK_FIRST_STAGE = ('kg1', 'kg2', 'a', 'alpha_s', 'beta', 's', 'alpha_p', 'lambda_', 'v', 'w')

FAMILIES: Dict[TubeModel, ModelFamily] = {
    TubeModel.KOREN_TRIODE: ModelFamily(
        TriodeParameters,
        lambda files, request, trace: estimate_triode_parameters(
            files, request.maximum_plate_dissipation, trace)),
    TubeModel.KOREN_PENTODE: ModelFamily(
        PentodeParameters,
        lambda files, request, trace: estimate_pentode_parameters(
            files, request.maximum_plate_dissipation, trace)),
    TubeModel.DERK: ModelFamily(
        DerkParameters,
        lambda files, request, trace: estimate_derk_parameters(
            files, request.maximum_plate_dissipation, request.secondary_emission,
            exponential=False, trace=trace),
        powell_stages=(_DERK_FIRST_STAGE, None)),
    TubeModel.DERKE: ModelFamily(
        DerkEParameters,
        lambda files, request, trace: estimate_derk_parameters(
            files, request.maximum_plate_dissipation, request.secondary_emission,
            exponential=True, trace=trace),
        powell_stages=(_DERK_FIRST_STAGE, None)),
}
"""Model family registry. A Powell stage of None frees all parameters."""


def _extra_arguments(cls: Type[ModelParameters], request: FitRequest) -> Dict[str, bool]:
    if issubclass(cls, DerkParameters):
        return {'secondary_emission': request.secondary_emission}
    return {}


def _excluded(cls: Type[ModelParameters], request: FitRequest) -> Tuple[str, ...]:
    if issubclass(cls, DerkParameters) and not request.secondary_emission:
        return cls.SECONDARY_EMISSION_NAMES
    return ()


def _optimize_lm(
    cls: Type[ModelParameters],
    reference: ModelParameters,
    points: PointArrays,
    request: FitRequest,
    trace: Optional[Trace]
) -> Tuple[bool, ModelParameters, int, str]:
    extra = _extra_arguments(cls, request)
    free = free_indices(reference.values(), cls.NAMES, _excluded(cls, request))
    residuals = Reparameterize(
        lambda values: Vector(model_residuals(points, cls.from_values(values, **extra))),
        reference.values(), free)
    config = TRIODE_LM_CONFIG if cls.TRIODE else PENTODE_LM_CONFIG

    result = levenberg_marquardt(residuals, residuals.initial_factors(), config, trace)
    fitted = cls.from_values(residuals.parameters(result.x), **extra)
    if not result.converged:
        return False, fitted, result.iterations, (
            f"Levenberg-Marquardt did not converge in {result.iterations} iterations "
            f"(gradient norm {result.gradient_norm:.4e})")
    return True, fitted, result.iterations, ''


def _optimize_powell(
    family: ModelFamily,
    reference: ModelParameters,
    points: PointArrays,
    request: FitRequest,
    trace: Optional[Trace]
) -> Iterator[FitEvent]:
    """Run the Powell stages; the generator returns (success, parameters, iterations, error)."""
    cls = family.parameters
    extra = _extra_arguments(cls, request)
    excluded = _excluded(cls, request)
    iterations = 0

    for stage, names in enumerate(family.powell_stages, start=1):
        free = free_indices(reference.values(), cls.NAMES, excluded)
        if names is not None:
            free = [i for i in free if cls.NAMES[i] in names]
        sse = Reparameterize(
            lambda values: model_error(points, cls.from_values(values, **extra)).sse,
            reference.values(), free)

        result = powell(sse, sse.initial_factors(), POWELL_CONFIG, trace)
        iterations += result.iterations
        if not result.converged:
            reason = f": {result.warn}" if result.warn is not None else ''
            return False, reference, iterations, (
                f"Powell did not converge in {result.iterations} iterations{reason}")

        reference = cls.from_values(sse.parameters(result.x), **extra)
        if len(family.powell_stages) > 1:
            rmse = model_error(points, reference).rmse
            yield FitEvent('log', f"{stage}. {cls.LABEL} Model parameters: {reference}, "
                                  f"Root Mean Square Error: {rmse:.6e}, iterations: {result.iterations}")

    return True, reference, iterations, ''


def run_fit(request: FitRequest) -> Iterator[FitEvent]:
    """
    Fit a tube model, yielding progress and one terminal event.

    Parameters
    ----------
    request : FitRequest
        Files, model family and settings

    Yields
    ------
    FitEvent
        'log' events, then 'succeeded' (with FittedParameters and the
        optional trace) or 'failed'

    Raises
    ------
    InsufficientParameters
        If an estimator prerequisite is missing (programming error in the
        estimation chain)
    """
    family = FAMILIES[TubeModel(request.model)]
    cls = family.parameters
    algorithm = Algorithm(request.algorithm)
    trace = Trace() if request.trace_enabled else None
    files = apply_eg_offset(request.files, request.eg_offset)

    yield FitEvent('log', f"Estimating initial {cls.LABEL} Model parameters")
    initial = family.estimate(files, request, trace)
    reference = cls.from_initial(initial, **_extra_arguments(cls, request))

    points = select_points(files, cls.TRIODE, request.maximum_plate_dissipation)
    if len(points) == 0:
        yield FitEvent('failed', f"No measurement points usable for the {cls.LABEL} Model "
                                 f"within {request.maximum_plate_dissipation} W", trace=trace)
        return

    rmse = model_error(points, reference).rmse
    yield FitEvent('log', f"Initial {cls.LABEL} Model parameters: {reference}, "
                          f"Root Mean Square Error: {rmse:.6e}")

    if algorithm == Algorithm.LEVENBERG_MARQUARDT:
        yield FitEvent('log', f"Optimizing {cls.LABEL} Model parameters using the "
                              f"Levenberg-Marquardt algorithm")
        try:
            success, fitted, iterations, error = _optimize_lm(cls, reference, points, request, trace)
        except (SolverError, np.linalg.LinAlgError) as e:
            yield FitEvent('failed', f"Levenberg-Marquardt failed: {e}", trace=trace)
            return
    else:
        yield FitEvent('log', f"Optimizing {cls.LABEL} Model parameters using the Powell algorithm")
        success, fitted, iterations, error = yield from _optimize_powell(
            family, reference, points, request, trace)

    if not success:
        yield FitEvent('failed', error, trace=trace)
        return

    rmse = model_error(points, fitted).rmse
    yield FitEvent('log', f"{cls.LABEL} Model parameters: {fitted}, "
                          f"Root Mean Square Error: {rmse:.6e}, iterations: {iterations}")
    yield FitEvent('succeeded', parameters=FittedParameters(
        model=TubeModel(request.model),
        parameters=fitted,
        rmse=rmse,
        calculated_on=datetime.now().astimezone(),
        iterations=iterations,
    ), trace=trace)


def fit_tube_model(request: FitRequest) -> FitOutcome:
    """
    Run a fit synchronously.

    Progress texts are logged at INFO level and collected in
    ``FitOutcome.messages``.
    """
    messages = []
    for event in run_fit(request):
        if event.type == 'log':
            logger.info(event.text)
            messages.append(event.text)
        elif event.type == 'succeeded':
            return FitOutcome(success=True, parameters=event.parameters, trace=event.trace,
                              messages=messages)
        else:
            logger.warning(f"Fit failed: {event.text}")
            return FitOutcome(success=False, trace=event.trace, messages=messages, error=event.text)
    raise RuntimeError("Fit event stream ended without a terminal event")


__all__ = [
    'ModelFamily',
    'FAMILIES',
    'run_fit',
    'fit_tube_model',
]
