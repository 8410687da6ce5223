#!/usr/bin/env python3
"""Fit orchestration: reparameterization, event streams and fitted results."""

import logging

import numpy as np
import pytest

from tube_analysis.algorithms import Vector
from tube_analysis.fitting import (
    Algorithm,
    FitRequest,
    Reparameterize,
    TubeModel,
    fit_tube_model,
    free_indices,
    run_fit,
)
from tube_analysis.io.synthetic import DEMO_TRIODE
from tube_analysis.models import DerkParameters, TriodeParameters
from tube_analysis.trace import Trace


# ---------------------------------------------------------------------------
# Reparameterization
# ---------------------------------------------------------------------------

def test_free_indices():
    names = ('mu', 'ex', 'kg1', 'kp')
    assert free_indices([1.0, 2.0, 3.0, 4.0], names) == [0, 1, 2, 3]
    # zero references cannot be scaled
    assert free_indices([1.0, 0.0, 3.0, 4.0], names) == [0, 2, 3]
    assert free_indices([1.0, 2.0, 3.0, 4.0], names, exclude=('kg1',)) == [0, 1, 3]


def test_zero_secondary_emission_estimates_are_held_fixed(caplog):
    names = DerkParameters.NAMES
    reference = [1.0] * len(names)
    reference[names.index('v')] = 0.0
    reference[names.index('w')] = 0.0

    with caplog.at_level(logging.DEBUG, logger='tube_analysis.fitting.reparameterize'):
        free = free_indices(reference, names)

    assert names.index('v') not in free
    assert names.index('w') not in free
    assert len(free) == len(names) - 2
    messages = [record.getMessage() for record in caplog.records]
    assert any("Parameter v" in m and "held fixed" in m for m in messages)
    assert any("Parameter w" in m and "held fixed" in m for m in messages)


def test_reparameterize_scales_free_parameters():
    r = Reparameterize(lambda p: p, [2.0, -3.0, 4.0], free=[0, 2])
    assert r.n_free == 2
    assert r.initial_factors() == Vector([1.0, 1.0])
    np.testing.assert_allclose(r(Vector([1.0, 1.0])), [2.0, 3.0, 4.0])
    np.testing.assert_allclose(r(Vector([0.5, 2.0])), [1.0, 3.0, 8.0])
    # negative factors still give non-negative parameters
    np.testing.assert_allclose(r.parameters([-1.0, -0.25]), [2.0, 3.0, 1.0])


def test_reparameterize_all_free_by_default():
    r = Reparameterize(lambda p: float(p.sum()), [1.0, 2.0])
    assert r.free == [0, 1]
    assert r(Vector([2.0, 2.0])) == 6.0


# ---------------------------------------------------------------------------
# Event stream
# ---------------------------------------------------------------------------

def assert_event_stream(events):
    assert events, "no events"
    assert events[0].type == 'log'
    assert events[-1].terminal
    assert sum(1 for e in events if e.terminal) == 1
    for e in events[:-1]:
        assert e.type == 'log'
        assert e.text


def test_triode_fit_levenberg_marquardt(triode_file):
    request = FitRequest(files=[triode_file], model=TubeModel.KOREN_TRIODE,
                         maximum_plate_dissipation=2.0)
    events = list(run_fit(request))
    assert_event_stream(events)

    final = events[-1]
    assert final.type == 'succeeded', final.text
    fitted = final.parameters
    assert fitted.model == TubeModel.KOREN_TRIODE
    assert isinstance(fitted.parameters, TriodeParameters)
    assert fitted.rmse < 0.05
    assert np.all(fitted.parameters.values() >= 0)
    assert fitted.calculated_on.tzinfo is not None
    assert final.trace is None


def test_triode_fit_recovers_currents(triode_file):
    outcome = fit_tube_model(FitRequest(files=[triode_file], model=TubeModel.KOREN_TRIODE,
                                        maximum_plate_dissipation=2.0))
    assert outcome.success, outcome.error
    fitted = outcome.parameters.parameters
    ep = np.array([100.0, 200.0, 300.0])
    np.testing.assert_allclose(fitted.currents(ep, -1.0).ip, DEMO_TRIODE.currents(ep, -1.0).ip,
                               atol=0.1)
    assert outcome.messages[0].startswith("Estimating initial")


def test_triode_fit_powell(triode_file):
    request = FitRequest(files=[triode_file], model=TubeModel.KOREN_TRIODE,
                         maximum_plate_dissipation=2.0, algorithm=Algorithm.POWELL,
                         trace_enabled=True)
    events = list(run_fit(request))
    assert_event_stream(events)

    final = events[-1]
    assert isinstance(final.trace, Trace)
    assert final.trace.iterations > 0
    if final.type == 'succeeded':
        initial_rmse = float(events[1].text.rsplit(': ', 1)[1])
        assert final.parameters.rmse <= initial_rmse * (1 + 1e-6)


def test_no_usable_points(triode_file):
    request = FitRequest(files=[triode_file], model=TubeModel.KOREN_TRIODE,
                         maximum_plate_dissipation=1e-9)
    events = list(run_fit(request))
    assert_event_stream(events)
    assert events[-1].type == 'failed'
    assert "No measurement points" in events[-1].text

    outcome = fit_tube_model(request)
    assert not outcome.success
    assert outcome.parameters is None
    assert "No measurement points" in outcome.error


def test_pentode_model_ignores_triode_files(triode_file):
    request = FitRequest(files=[triode_file], model=TubeModel.KOREN_PENTODE,
                         maximum_plate_dissipation=100.0)
    events = list(run_fit(request))
    assert events[-1].type == 'failed'


def test_global_offset_does_not_modify_files(triode_file):
    request = FitRequest(files=[triode_file], model=TubeModel.KOREN_TRIODE,
                         maximum_plate_dissipation=2.0, eg_offset=0.1)
    list(run_fit(request))
    assert triode_file.eg_offset is None


def test_koren_pentode_fit(pentode_files):
    request = FitRequest(files=pentode_files, model=TubeModel.KOREN_PENTODE,
                         maximum_plate_dissipation=15.0)
    events = list(run_fit(request))
    assert_event_stream(events)
    if events[-1].type == 'succeeded':
        assert events[-1].parameters.model == TubeModel.KOREN_PENTODE
        assert np.isfinite(events[-1].parameters.rmse)


def test_derk_fit_without_secondary_emission(pentode_files):
    request = FitRequest(files=pentode_files, model=TubeModel.DERK,
                         maximum_plate_dissipation=15.0)
    events = list(run_fit(request))
    assert_event_stream(events)
    if events[-1].type == 'succeeded':
        fitted = events[-1].parameters.parameters
        assert isinstance(fitted, DerkParameters)
        assert not fitted.secondary_emission
        # disabled secondary emission parameters stay at zero
        for name in DerkParameters.SECONDARY_EMISSION_NAMES:
            assert getattr(fitted, name) == 0.0


@pytest.mark.parametrize("model", list(TubeModel))
def test_every_model_terminates(model, pentode_files):
    request = FitRequest(files=pentode_files, model=model, maximum_plate_dissipation=15.0)
    outcome = fit_tube_model(request)
    assert outcome.success == (outcome.error is None)
    assert outcome.messages
