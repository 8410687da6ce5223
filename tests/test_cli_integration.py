#!/usr/bin/env python3
"""
Integration tests for CLI workflow.

Tests end-to-end CLI workflows including:
1. Argument parsing
2. Synthetic data and .utd file loading
3. Model fitting through the CLI handlers
4. SPICE export and plot saving
5. The tubefit entry point and its exit codes

These tests verify that the complete fitting pipeline works correctly
when invoked through the CLI interface.
"""

import argparse
import logging

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import pytest

from tube_analysis.data import MeasurementType
from tube_analysis.fitting import TubeModel


def create_test_args(**kwargs) -> argparse.Namespace:
    """
    Create argparse.Namespace with default CLI arguments.

    Override defaults by passing keyword arguments.
    """
    defaults = {
        # Input/Output
        'files': [],
        'noise': 0.0,
        'save': None,
        'format': 'png',
        'no_show': True,  # Always disable show in tests
        'verbose': 0,
        'quiet': True,

        # Model Fitting
        'model': 'koren-triode',
        'algorithm': 'lm',
        'max_dissipation': None,
        'eg_offset': 0.0,
        'secondary_emission': False,
        'trace': False,

        # Export
        'spice': None,
        'tube_name': None,
    }
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


@pytest.fixture(autouse=True)
def restore_logging():
    """setup_logging replaces the root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    plt.close('all')


# =============================================================================
# Test 1: Argument Parsing
# =============================================================================

def test_parse_defaults():
    from tube_analysis.cli import parse_arguments

    args = parse_arguments([])
    expected = create_test_args(no_show=False, quiet=False)
    for name, value in vars(expected).items():
        assert getattr(args, name) == value, name


def test_parse_options():
    from tube_analysis.cli import parse_arguments

    args = parse_arguments([
        'a.utd', 'b.utd', '-m', 'derk', '-a', 'powell', '--max-dissipation', '12',
        '--eg-offset', '-0.2', '--secondary-emission', '--trace', '--spice', 'el84.lib',
        '--tube-name', 'EL84', '-s', 'out', '-f', 'pdf', '--no-show', '-vv',
    ])
    assert args.files == ['a.utd', 'b.utd']
    assert args.model == 'derk'
    assert args.algorithm == 'powell'
    assert args.max_dissipation == 12.0
    assert args.eg_offset == -0.2
    assert args.secondary_emission
    assert args.trace
    assert args.spice == 'el84.lib'
    assert args.tube_name == 'EL84'
    assert args.save == 'out'
    assert args.format == 'pdf'
    assert args.no_show
    assert args.verbose == 2


def test_parse_rejects_unknown_model():
    from tube_analysis.cli import parse_arguments

    with pytest.raises(SystemExit):
        parse_arguments(['--model', 'koren-tetrode'])
    with pytest.raises(SystemExit):
        parse_arguments(['--algorithm', 'simplex'])


# =============================================================================
# Test 2: Data Loading
# =============================================================================

def test_synthetic_triode_data():
    from tube_analysis.cli import load_measurements

    data = load_measurements(create_test_args())
    assert data.title == "Synthetic data"
    assert len(data.files) == 1
    assert data.files[0].measurement_type == MeasurementType.IP_VA_VG_VH
    assert data.reference is not None
    assert data.maximum_plate_dissipation == 2.0


def test_synthetic_pentode_data():
    from tube_analysis.cli import load_measurements

    data = load_measurements(create_test_args(model='derk', noise=0.01))
    types = [f.measurement_type for f in data.files]
    assert types == [MeasurementType.IPIS_VAVS_VG_VH, MeasurementType.IPIS_VA_VG_VS_VH,
                     MeasurementType.IPIS_VA_VG_VS_VH]
    assert data.maximum_plate_dissipation == 15.0


def test_load_utd_files(tmp_path, make_utd):
    from tube_analysis.cli import load_measurements

    header = ['Point', 'Curve', 'Ia (mA)', 'Va (V)', 'Vg (V)']
    rows = [(k + 1, c, 0.5 + k, 50.0 * (k % 4 + 1), -float(c)) for k, c in
            enumerate([1, 1, 1, 1, 2, 2, 2, 2])]
    good = tmp_path / "triode.utd"
    good.write_text(make_utd(header, rows))
    # constant plate and grid voltages cannot be classified
    flat = tmp_path / "flat.utd"
    flat.write_text(make_utd(header, [(1, 1, 1.0, 100.0, -1.0), (2, 1, 1.1, 100.0, -1.0)]))

    data = load_measurements(create_test_args(files=[str(good), str(flat)]))
    assert [f.name for f in data.files] == ['triode']
    assert data.title == 'triode'
    assert data.maximum_plate_dissipation is None


def test_missing_file():
    from tube_analysis.cli import TubeFitError, load_measurements

    with pytest.raises(TubeFitError, match="does not exist"):
        load_measurements(create_test_args(files=['/nonexistent/12AX7.utd']))


def test_unparseable_file(tmp_path):
    from tube_analysis.cli import TubeFitError, load_measurements

    path = tmp_path / "empty.utd"
    path.write_text("")
    with pytest.raises(TubeFitError, match="Error loading file"):
        load_measurements(create_test_args(files=[str(path)]))


# =============================================================================
# Test 3: Fitting, Export and Plots
# =============================================================================

def test_triode_workflow(tmp_path):
    from tube_analysis.cli import load_measurements, run_model_fit, run_plots, run_spice_export

    spice_path = tmp_path / "12ax7.lib"
    prefix = str(tmp_path / "demo")
    args = create_test_args(spice=str(spice_path), tube_name='12AX7', save=prefix, trace=True)

    data = load_measurements(args)
    outcome = run_model_fit(data, args)
    assert outcome.success
    assert outcome.parameters.model == TubeModel.KOREN_TRIODE
    assert outcome.trace is not None

    run_spice_export(outcome, args)
    text = spice_path.read_text()
    assert ".SUBCKT 12AX7 P G K" in text
    assert "TriodeK" in text

    figures = run_plots(data, outcome, args)
    assert len(figures) == 2
    assert (tmp_path / "demo_fit.png").exists()
    assert (tmp_path / "demo_history.png").exists()


def test_fit_failure_raises():
    from tube_analysis.cli import TubeFitError, load_measurements, run_model_fit

    args = create_test_args(max_dissipation=1e-9)
    data = load_measurements(args)
    with pytest.raises(TubeFitError, match="Fit failed"):
        run_model_fit(data, args)


def test_spice_export_skipped_without_path(tmp_path):
    from tube_analysis.cli import load_measurements, run_model_fit, run_spice_export

    args = create_test_args()
    outcome = run_model_fit(load_measurements(args), args)
    run_spice_export(outcome, args)
    assert list(tmp_path.iterdir()) == []


def test_write_text_file_error(tmp_path):
    from tube_analysis.cli import TubeFitError, write_text_file

    with pytest.raises(TubeFitError, match="Cannot write"):
        write_text_file(str(tmp_path / "missing" / "model.lib"), "* text")


# =============================================================================
# Test 4: Entry Point
# =============================================================================

def test_main_synthetic(tmp_path):
    import tubefit

    spice_path = tmp_path / "demo.lib"
    assert tubefit.main(['--no-show', '-q', '--spice', str(spice_path)]) == 0
    assert spice_path.exists()


def test_main_missing_file():
    import tubefit

    assert tubefit.main(['--no-show', '-q', '/nonexistent/12AX7.utd']) == 1
