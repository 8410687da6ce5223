#!/usr/bin/env python3
"""Initial parameter estimation: prerequisites, defaults and synthetic data."""

import re

import numpy as np
import pytest

from tube_analysis.estimation import (
    estimate_a,
    estimate_alpha_s_beta,
    estimate_derk_parameters,
    estimate_ex_kg1,
    estimate_kg2,
    estimate_kp,
    estimate_kvb,
    estimate_mu,
    estimate_pentode_parameters,
    estimate_secondary_emission,
    estimate_triode_parameters,
)
from tube_analysis.estimation.config import (
    DEFAULT_A, DEFAULT_ALPHA_P, DEFAULT_ALPHA_S, DEFAULT_BETA, DEFAULT_EX, DEFAULT_KG1,
    DEFAULT_KG2, DEFAULT_KP, DEFAULT_KVB, DEFAULT_MU, DEFAULT_S, PENTODE_KVB,
)
from tube_analysis.exceptions import InsufficientParameters
from tube_analysis.initial import Initial
from tube_analysis.io import generate_plate_characteristics
from tube_analysis.io.synthetic import DEMO_PENTODE, DEMO_TRIODE
from tube_analysis.models import (
    DerkEParameters,
    DerkParameters,
    TriodeParameters,
    koren_triode_error,
)
from tube_analysis.trace import Trace


# ---------------------------------------------------------------------------
# Prerequisites
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("estimator, message", [
    (estimate_ex_kg1, "Cannot estimate ex and kg1 without mu"),
    (estimate_kp, "Cannot estimate kp without mu, ex and kg1"),
    (estimate_kvb, "Cannot estimate kvb without kp, mu, ex and kg1"),
    (estimate_kg2, "Cannot estimate kg2 without kp, mu, kvb and ex"),
    (estimate_a, "Cannot estimate a without mu, kp, kg1, ex and kvb"),
    (estimate_alpha_s_beta, "Cannot estimate alpha_s and beta without kp, mu, kvb, ex and kg2"),
])
def test_missing_prerequisites(estimator, message):
    with pytest.raises(InsufficientParameters, match=re.escape(message)):
        estimator(Initial(), [], 1.0)


def test_secondary_emission_prerequisites():
    with pytest.raises(InsufficientParameters, match="without mu"):
        estimate_secondary_emission(Initial(), [], True)
    with pytest.raises(InsufficientParameters, match="Cannot estimate s without"):
        estimate_secondary_emission(Initial(mu=10.0), [], True)


def test_set_fields_are_kept():
    initial = Initial(mu=42.0, ex=1.5, kg1=800.0, kp=300.0, kvb=250.0, kg2=2000.0,
                      a=0.01, alpha_s=3.0, beta=0.02)
    before = initial.as_dict()
    estimate_mu(initial, [])
    estimate_ex_kg1(initial, [], 1.0)
    estimate_kp(initial, [], 1.0)
    estimate_kvb(initial, [], 1.0)
    estimate_kg2(initial, [], 1.0)
    estimate_a(initial, [], 1.0)
    estimate_alpha_s_beta(initial, [], 1.0)
    assert initial.as_dict() == before


def test_set_field_skips_prerequisite_check():
    # kp is set, so the missing mu, ex and kg1 do not matter
    initial = Initial(kp=5.0)
    estimate_kp(initial, [], 1.0)
    assert initial.kp == 5.0


# ---------------------------------------------------------------------------
# Defaults without measurements
# ---------------------------------------------------------------------------

def test_triode_defaults_keep_seeded_fields():
    initial = Initial(mu=42.0, kp=300.0)
    result = estimate_triode_parameters([], 1.0, initial=initial)
    assert result is initial
    assert result.mu == 42.0
    assert result.kp == 300.0
    assert result.ex == DEFAULT_EX
    assert result.kg1 == DEFAULT_KG1
    assert result.kvb == DEFAULT_KVB


def test_triode_defaults():
    initial = estimate_triode_parameters([], 1.0)
    assert initial.mu == DEFAULT_MU
    assert initial.ex == DEFAULT_EX
    assert initial.kg1 == DEFAULT_KG1
    assert initial.kp == DEFAULT_KP
    assert initial.kvb == DEFAULT_KVB


def test_pentode_defaults():
    initial = estimate_pentode_parameters([], 1.0)
    assert initial.mu == DEFAULT_MU
    assert initial.ex == DEFAULT_EX
    assert initial.kg1 == DEFAULT_KG1
    assert initial.kp == DEFAULT_KP
    assert initial.kvb == PENTODE_KVB
    assert initial.kg2 == DEFAULT_KG2


def test_derk_defaults():
    initial = estimate_derk_parameters([], 1.0, secondary_emission=False)
    assert initial.a == DEFAULT_A
    assert initial.alpha_s == DEFAULT_ALPHA_S
    assert initial.beta == DEFAULT_BETA
    for name in ('s', 'alpha_p', 'lambda_', 'v', 'w'):
        assert getattr(initial, name) == 0.0


def test_derk_defaults_with_secondary_emission():
    initial = estimate_derk_parameters([], 1.0, secondary_emission=True)
    assert initial.lambda_ == initial.mu
    assert initial.alpha_p == DEFAULT_ALPHA_P
    assert initial.v == 0.0
    assert initial.w == 0.0
    assert initial.s == DEFAULT_S


def test_secondary_emission_disabled_overrides():
    initial = Initial(s=0.3, alpha_p=0.1, lambda_=2.0, v=0.1, w=0.2)
    estimate_secondary_emission(initial, [], False)
    assert (initial.s, initial.alpha_p, initial.lambda_, initial.v, initial.w) == (0.0,) * 5


# ---------------------------------------------------------------------------
# Synthetic measurements
# ---------------------------------------------------------------------------

def test_mu_from_synthetic_triode(triode_files):
    trace = Trace()
    initial = Initial()
    estimate_mu(initial, triode_files, trace)
    assert initial.mu == pytest.approx(100.0, rel=0.2)
    entry = trace.estimates['mu']
    assert entry['max_current'] > 0
    assert len(entry['average']) > 0


def test_triode_pipeline_on_synthetic_data(triode_files):
    trace = Trace()
    initial = estimate_triode_parameters(triode_files, 2.0, trace)
    for name in ('mu', 'ex', 'kg1', 'kp', 'kvb'):
        value = getattr(initial, name)
        assert value is not None
        assert np.isfinite(value)
        assert value > 0
    assert 1.0 < initial.ex < 2.0
    for name in ('mu', 'ex', 'kg1'):
        assert name in trace.estimates


def test_triode_initial_guess_is_usable(triode_files):
    initial = estimate_triode_parameters(triode_files, 2.0)
    error = koren_triode_error(triode_files, TriodeParameters.from_initial(initial), 2.0)
    assert np.isfinite(error.rmse)


def test_pentode_pipeline_on_synthetic_data(pentode_files):
    initial = estimate_pentode_parameters(pentode_files, 15.0)
    for name in ('mu', 'ex', 'kg1', 'kp', 'kg2'):
        value = getattr(initial, name)
        assert np.isfinite(value)
        assert value > 0
    assert initial.kvb == PENTODE_KVB
    # contour estimates outside (1, 200) are discarded
    assert 1.0 < initial.mu < 200.0


def test_derk_pipeline_on_synthetic_data(pentode_files):
    initial = estimate_derk_parameters(pentode_files, 15.0, secondary_emission=False)
    assert all(value is not None for value in initial.as_dict().values())
    assert np.isfinite(initial.a)
    assert np.isfinite(initial.alpha_s)
    assert np.isfinite(initial.beta)
    assert initial.s == 0.0


# ---------------------------------------------------------------------------
# Pre-seeded pipelines
# ---------------------------------------------------------------------------

def test_triode_pipeline_keeps_seeded_fields(triode_files):
    initial = Initial(mu=100.0, kvb=250.0)
    result = estimate_triode_parameters(triode_files, 2.0, initial=initial)
    assert result is initial
    assert result.mu == 100.0
    assert result.kvb == 250.0
    assert all(getattr(result, name) is not None for name in ('ex', 'kg1', 'kp'))


def test_pentode_pipeline_keeps_seeded_fields(pentode_files):
    initial = Initial(kvb=55.0, kg2=3000.0)
    result = estimate_pentode_parameters(pentode_files, 15.0, initial=initial)
    assert result is initial
    assert result.kvb == 55.0
    assert result.kg2 == 3000.0
    assert all(getattr(result, name) is not None for name in ('mu', 'ex', 'kg1', 'kp'))


def test_derk_pipeline_keeps_seeded_fields(pentode_files):
    initial = Initial(mu=20.0, a=0.02, alpha_s=3.0)
    result = estimate_derk_parameters(pentode_files, 15.0, secondary_emission=False,
                                      initial=initial)
    assert result is initial
    assert result.mu == 20.0
    assert result.a == 0.02
    assert result.alpha_s == 3.0
    assert result.beta is not None


# ---------------------------------------------------------------------------
# Recovery of known parameters
# ---------------------------------------------------------------------------
#
# Each estimator runs on noiseless data generated from known parameters,
# with its prerequisites set to the generating values.

NO_DISSIPATION_LIMIT = 1e6

DERK_TRUE = dict(mu=19.2, ex=1.35, kg1=600.0, kp=135.0, kvb=24.0, kg2=4500.0,
                 a=0.002, alpha_s=3.0)


def derk_files(parameters):
    return [generate_plate_characteristics(
        parameters, eg_values=[0.0, -2.0, -4.0], ep_max=400.0, es=250.0, name='derk')]


def test_kvb_recovery(triode_files):
    t = DEMO_TRIODE
    initial = Initial(mu=t.mu, ex=t.ex, kg1=t.kg1, kp=t.kp)
    trace = Trace()
    estimate_kvb(initial, triode_files, NO_DISSIPATION_LIMIT, trace)
    assert initial.kvb == pytest.approx(t.kvb, rel=1e-3)
    # the closed form was used, not the candidate grid
    assert 'candidate' not in trace.estimates['kvb']
    assert len(trace.estimates['kvb']['average']) > 0


def test_kg2_recovery(pentode_files):
    p = DEMO_PENTODE
    initial = Initial(mu=p.mu, ex=p.ex, kp=p.kp, kvb=p.kvb)
    estimate_kg2(initial, pentode_files, NO_DISSIPATION_LIMIT)
    assert initial.kg2 == pytest.approx(p.kg2, rel=1e-6)


def test_a_recovery():
    parameters = DerkParameters(**DERK_TRUE, beta=0.2)
    initial = Initial(mu=parameters.mu, ex=parameters.ex, kg1=parameters.kg1,
                      kp=parameters.kp, kvb=parameters.kvb)
    estimate_a(initial, derk_files(parameters), NO_DISSIPATION_LIMIT)
    # the take-over term still adds a small slope at the highest plate voltages
    assert initial.a == pytest.approx(parameters.a, rel=0.05)


@pytest.mark.parametrize("cls, beta, exponential", [
    (DerkParameters, 0.2, False),
    (DerkEParameters, 0.05, True),
])
def test_alpha_s_beta_recovery(cls, beta, exponential):
    parameters = cls(**DERK_TRUE, beta=beta)
    initial = Initial(mu=parameters.mu, ex=parameters.ex, kp=parameters.kp,
                      kvb=parameters.kvb, kg2=parameters.kg2)
    estimate_alpha_s_beta(initial, derk_files(parameters), NO_DISSIPATION_LIMIT, exponential)
    assert initial.alpha_s == pytest.approx(parameters.alpha_s, rel=0.05)
    assert initial.beta == pytest.approx(beta, rel=0.05)


def test_kp_recovery_from_near_cutoff_points():
    # with kvb ~ 0 the near cutoff relation used by the estimator is exact
    parameters = TriodeParameters(mu=100.0, ex=1.4, kg1=1060.0, kp=600.0, kvb=1e-9)
    files = [generate_plate_characteristics(
        parameters, eg_values=[-0.5, -1.0, -1.5, -2.0], ep_max=300.0, name='sharp-knee')]
    initial = Initial(mu=parameters.mu, ex=parameters.ex, kg1=parameters.kg1)
    trace = Trace()
    estimate_kp(initial, files, NO_DISSIPATION_LIMIT, trace)
    assert initial.kp == pytest.approx(parameters.kp, rel=1e-3)
    assert len(trace.estimates['kp']['average']) == 4
