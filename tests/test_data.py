#!/usr/bin/env python3
"""Measurement data model, initial parameter bag and synthetic data."""

import numpy as np
import pytest

from tube_analysis.data import MeasurementFile, MeasurementType, Point, Series, apply_eg_offset
from tube_analysis.exceptions import InsufficientParameters
from tube_analysis.initial import Initial
from tube_analysis.io import generate_plate_characteristics, generate_synthetic_data
from tube_analysis.io.synthetic import DEMO_PENTODE, DEMO_TRIODE
from tube_analysis.visualization import plot_measurement, plot_optimization_history
from tube_analysis.trace import Trace


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

def test_point_total_current():
    assert Point(ep=250.0, eg=-8.0, ip=48.0, is_=5.5, es=250.0).total_current == 53.5
    assert Point(ep=100.0, eg=-1.0, ip=1.2).total_current == 1.2


def test_series_sort():
    s = Series(points=[Point(ep=e, eg=-1.0, ip=1.0) for e in (300.0, 100.0, 200.0)])
    s.sort_by('ep')
    assert [p.ep for p in s.points] == [100.0, 200.0, 300.0]


def test_apply_eg_offset():
    s = Series(points=[Point(ep=100.0, eg=-1.0, ip=1.0)])
    unset = MeasurementFile('unset', [s], MeasurementType.IP_VA_VG_VH)
    own = MeasurementFile('own', [s], MeasurementType.IP_VA_VG_VH, eg_offset=-0.3)

    result = apply_eg_offset([unset, own], 0.2)
    assert result[0].offset == 0.2
    assert result[0].series is unset.series
    assert result[1] is own
    assert result[1].offset == -0.3
    # input files are not modified
    assert unset.eg_offset is None
    assert unset.offset == 0.0


def test_initial_require():
    initial = Initial(mu=100.0)
    initial.require('ex and kg1', 'mu')
    with pytest.raises(InsufficientParameters, match="Cannot estimate kvb without kp and lambda"):
        initial.require('kvb', 'kp', 'lambda_')
    assert str(initial) == "mu=100"


# ---------------------------------------------------------------------------
# Synthetic data
# ---------------------------------------------------------------------------

def test_synthetic_triode():
    files, parameters = generate_synthetic_data('koren-triode')
    assert parameters is DEMO_TRIODE
    f = files[0]
    assert f.measurement_type == MeasurementType.IP_VA_VG_VH
    assert len(f.series) == 7
    assert f.n_points == 7 * 31
    p = f.series[0].points[-1]
    assert p.ep == 300.0
    assert p.ip == pytest.approx(DEMO_TRIODE.currents(300.0, 0.0).ip)
    assert p.is_ == 0.0
    assert p.es == 0.0
    assert f.eg_offset is None


def test_synthetic_pentode():
    files, parameters = generate_synthetic_data('koren-pentode')
    assert parameters is DEMO_PENTODE
    connected, pentode = files[0], files[1]
    assert connected.measurement_type == MeasurementType.IPIS_VAVS_VG_VH
    assert all(p.es == p.ep for p in connected.points())
    assert pentode.measurement_type == MeasurementType.IPIS_VA_VG_VS_VH
    assert pentode.es == 200.0
    assert all(p.es == 200.0 for p in pentode.points())
    assert any(p.is_ > 0 for p in pentode.points())


def test_synthetic_noise_is_reproducible():
    a = generate_plate_characteristics(DEMO_TRIODE, [0.0, -1.0], 300.0, noise=0.01, seed=7)
    b = generate_plate_characteristics(DEMO_TRIODE, [0.0, -1.0], 300.0, noise=0.01, seed=7)
    clean = generate_plate_characteristics(DEMO_TRIODE, [0.0, -1.0], 300.0)
    ia = np.array([p.ip for p in a.points()])
    ib = np.array([p.ip for p in b.points()])
    ic = np.array([p.ip for p in clean.points()])
    np.testing.assert_array_equal(ia, ib)
    assert not np.array_equal(ia, ic)
    np.testing.assert_allclose(ia, ic, rtol=0.1)


# ---------------------------------------------------------------------------
# Plots
# ---------------------------------------------------------------------------

def test_plot_measurement(triode_file):
    fig = plot_measurement(triode_file, DEMO_TRIODE, title='demo')
    ax = fig.axes[0]
    assert ax.get_title() == 'demo'
    assert len(ax.lines) > 0


def test_plot_history():
    trace = Trace(function_values=[10.0, 1.0, 0.1])
    fig = plot_optimization_history(trace)
    assert len(fig.axes[0].lines) == 1
    fig = plot_optimization_history(Trace())
    assert len(fig.axes) == 1
