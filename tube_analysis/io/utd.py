"""
uTracer ``.utd`` file loading and measurement classification.

A ``.utd`` file is a text table with one header line. Columns are separated
by tabs or by two or more spaces (single spaces occur inside the header
names). The ``Curve`` column identifies the series a row belongs to.

Classification looks at which voltages stay constant within each series
and over the whole file and assigns a MeasurementType tag.
"""

import logging
import os
import re
from typing import Dict, List, Optional

import numpy as np

from ..data import MeasurementFile, MeasurementType, Point, Series
from ..exceptions import ParseError

logger = logging.getLogger(__name__)

COLUMNS = {
    'Point': 'index',
    'Ia (mA)': 'ip',
    'Vg (V)': 'eg',
    'Va (V)': 'ep',
    'Vs (V)': 'es',
    'Is (mA)': 'is_',
    'Vf (V)': 'eh',
}
"""Header names and the Point fields they fill."""

SERIES_COLUMN = 'Curve'

REQUIRED_FIELDS = ('ip', 'eg', 'ep')

CONSTANT_TOLERANCE = 0.01
"""A voltage is constant when its standard deviation is at most 1% of |mean|."""

_SEPARATOR = re.compile(r'\t|\s{2,}')

VOLTAGES = ('ep', 'eg', 'es', 'eh')


# =============================================================================
# Parsing
# =============================================================================

def _split(line: str) -> List[str]:
    return [token for token in _SEPARATOR.split(line.strip()) if token]


def parse_utd(text: str, name: str = 'measurement') -> MeasurementFile:
    """
    Parse ``.utd`` text into a classified MeasurementFile.

    Parameters
    ----------
    text : str
        File contents
    name : str
        Name stored on the returned file

    Returns
    -------
    MeasurementFile
        Series in order of first appearance, classified

    Raises
    ------
    ParseError
        If the header lacks required columns or no valid row remains
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise ParseError(f"{name}: no data rows")

    headers = _split(lines[0])
    positions: Dict[str, int] = {}
    series_position: Optional[int] = None
    for j, header in enumerate(headers):
        if header in COLUMNS:
            positions[COLUMNS[header]] = j
        elif header == SERIES_COLUMN:
            series_position = j

    missing = [f for f in REQUIRED_FIELDS if f not in positions]
    if missing:
        raise ParseError(f"{name}: missing column(s) for {', '.join(missing)}")

    needed = max(list(positions.values()) + [series_position or 0]) + 1
    series: Dict[str, Series] = {}
    dropped = 0

    for line in lines[1:]:
        tokens = _split(line)
        if len(tokens) < needed:
            dropped += 1
            continue
        try:
            values = {f: float(tokens[j]) for f, j in positions.items()}
        except ValueError:
            dropped += 1
            continue
        if not all(np.isfinite(v) for v in values.values()):
            dropped += 1
            continue

        key = tokens[series_position] if series_position is not None else ''
        index = values.pop('index', None)
        point = Point(
            ep=values['ep'],
            eg=values['eg'],
            ip=values['ip'],
            is_=values.get('is_', 0.0),
            es=values.get('es', 0.0),
            eh=values.get('eh'),
            index=int(index) if index is not None else None,
        )
        series.setdefault(key, Series()).points.append(point)

    if not series:
        raise ParseError(f"{name}: no valid data rows")
    if dropped:
        logger.debug(f"{name}: dropped {dropped} malformed row(s)")

    f = MeasurementFile(name=name, series=list(series.values()))
    return classify_measurement(f)


def load_utd(filename: str) -> MeasurementFile:
    """
    Load and classify a ``.utd`` file.

    Raises
    ------
    ParseError
        If the file cannot be read or parsed
    """
    try:
        with open(filename, 'r', encoding='utf-8', errors='ignore') as fh:
            text = fh.read()
    except OSError as e:
        raise ParseError(f"Error reading file {filename}: {e}") from e

    name = os.path.splitext(os.path.basename(filename))[0]
    f = parse_utd(text, name)
    logger.debug(f"Parsed {f.n_points} points in {len(f.series)} series from {filename} "
                 f"({f.measurement_type.value})")
    return f


# =============================================================================
# Classification
# =============================================================================

def _voltage(point: Point, voltage: str) -> float:
    value = getattr(point, voltage)
    return 0.0 if value is None else value


def _constant(values: np.ndarray) -> bool:
    if len(values) < 2:
        return False
    return bool(np.std(values, ddof=1) <= CONSTANT_TOLERANCE * abs(np.mean(values)))


def _equivalent(mean1: float, mean2: float) -> bool:
    return abs(mean1 - mean2) <= CONSTANT_TOLERANCE * mean1


def classify_measurement(f: MeasurementFile) -> MeasurementFile:
    """
    Assign the measurement type and the constant voltages of a file.

    A voltage is "held in series" when it is constant inside every series and
    "held in file" when it is constant over all points. The swept voltage
    varies in the file and within series; the stepped voltage is held in
    series but varies in the file. Heater sweeps are not supported and stay
    UNKNOWN.

    The file is modified in place and returned.
    """
    f.measurement_type = MeasurementType.UNKNOWN
    points = list(f.points())
    if not points:
        return f

    in_series = {v: True for v in VOLTAGES}
    for s in f.series:
        for v in VOLTAGES:
            values = np.array([_voltage(p, v) for p in s.points])
            if _constant(values):
                setattr(s, v, float(np.mean(values)))
            else:
                in_series[v] = False

    in_file = {}
    mean = {}
    for v in VOLTAGES:
        values = np.array([_voltage(p, v) for p in points])
        in_file[v] = _constant(values)
        mean[v] = float(np.mean(values))

    screen_current = any(p.is_ != 0 for p in points)

    if not (in_series['eh'] and in_file['eh']):
        return f

    tag = MeasurementType.UNKNOWN
    if in_series['es'] and in_file['es']:
        if in_series['eg'] and not in_file['eg'] and not in_file['ep']:
            tag = (MeasurementType.IPIS_VA_VG_VS_VH if screen_current
                   else MeasurementType.IP_VA_VG_VH)
        elif in_series['ep'] and not in_file['ep'] and not in_file['eg']:
            tag = (MeasurementType.IPIS_VG_VA_VS_VH if screen_current
                   else MeasurementType.IP_VG_VA_VH)
        if screen_current and tag != MeasurementType.UNKNOWN:
            f.es = mean['es']
    elif in_series['ep'] and in_file['ep']:
        if in_series['eg'] and not in_file['eg'] and not in_file['es']:
            tag = MeasurementType.IPIS_VS_VG_VA_VH
            f.ep = mean['ep']
    elif in_series['eg'] and in_file['eg']:
        if in_series['es'] and not in_file['es'] and not in_file['ep']:
            tag = MeasurementType.IPIS_VA_VS_VG_VH
            f.eg = mean['eg']
    elif _equivalent(mean['ep'], mean['es']):
        if in_series['ep'] and not in_file['ep'] and not in_file['eg']:
            tag = MeasurementType.IPIS_VG_VAVS_VH
        elif in_series['eg'] and not in_file['eg'] and not in_file['ep']:
            tag = MeasurementType.IPIS_VAVS_VG_VH

    if tag != MeasurementType.UNKNOWN:
        f.eh = mean['eh']
    f.measurement_type = tag
    return f


__all__ = [
    'COLUMNS',
    'SERIES_COLUMN',
    'parse_utd',
    'load_utd',
    'classify_measurement',
]
