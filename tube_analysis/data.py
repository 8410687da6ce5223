"""
Measurement data containers.

A measurement is organised as files, series and points:

- ``Point``: one sample (voltages in V, currents in mA)
- ``Series``: points sharing an approximately constant independent voltage
- ``MeasurementFile``: named collection of series with a measurement type tag

The measurement type tag names the measured currents first, then the swept
voltage, then the voltage stepped between series, then the voltages held
constant. For example ``IPIS_VA_VG_VS_VH`` is plate and screen current versus
plate voltage, one series per grid voltage, with screen and heater voltages
constant.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class MeasurementType(str, Enum):
    """Classification of which voltage is swept and which are held."""
    IP_VA_VG_VH = 'IP_VA_VG_VH'
    IP_VG_VA_VH = 'IP_VG_VA_VH'
    IPIS_VAVS_VG_VH = 'IPIS_VAVS_VG_VH'
    IPIS_VG_VAVS_VH = 'IPIS_VG_VAVS_VH'
    IPIS_VA_VG_VS_VH = 'IPIS_VA_VG_VS_VH'
    IPIS_VA_VS_VG_VH = 'IPIS_VA_VS_VG_VH'
    IPIS_VG_VA_VS_VH = 'IPIS_VG_VA_VS_VH'
    IPIS_VS_VG_VA_VH = 'IPIS_VS_VG_VA_VH'
    UNKNOWN = 'UNKNOWN'


# =============================================================================
# Measurement Type Groups
# =============================================================================

TRIODE_TYPES = frozenset({
    MeasurementType.IP_VA_VG_VH,
    MeasurementType.IP_VG_VA_VH,
    MeasurementType.IPIS_VAVS_VG_VH,
    MeasurementType.IPIS_VG_VAVS_VH,
})
"""Triode curves, including pentodes measured in triode connection (Va = Vs)."""

PENTODE_TYPES = frozenset({
    MeasurementType.IPIS_VA_VG_VS_VH,
    MeasurementType.IPIS_VA_VS_VG_VH,
    MeasurementType.IPIS_VG_VA_VS_VH,
    MeasurementType.IPIS_VS_VG_VA_VH,
})
"""Pentode/tetrode curves with independent plate and screen voltages."""

TRIODE_PLATE_TYPES = frozenset({
    MeasurementType.IP_VA_VG_VH,
    MeasurementType.IPIS_VAVS_VG_VH,
})
"""Triode plate characteristics (plate voltage swept, one series per grid voltage)."""


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class Point:
    """
    One measurement sample.

    Attributes
    ----------
    ep : float
        Plate voltage [V]
    eg : float
        Control grid voltage [V] (without file offset)
    ip : float
        Plate current [mA]
    is_ : float
        Screen current [mA] (0 for triodes)
    es : float
        Screen voltage [V] (0 for triodes)
    eh : float or None
        Heater voltage [V]
    index : int or None
        Point number in the source file
    """
    ep: float
    eg: float
    ip: float
    is_: float = 0.0
    es: float = 0.0
    eh: Optional[float] = None
    index: Optional[int] = None

    @property
    def total_current(self) -> float:
        """Cathode current ip + is [mA]."""
        return self.ip + self.is_


@dataclass
class Series:
    """
    Points sharing one approximately constant independent voltage.

    The constant voltages found by the classifier are stored in
    ``ep``, ``eg``, ``es`` and ``eh`` (None when the voltage varies).
    """
    points: List[Point] = field(default_factory=list)
    eg: Optional[float] = None
    ep: Optional[float] = None
    es: Optional[float] = None
    eh: Optional[float] = None

    def sort_by(self, attribute: str = 'ep') -> None:
        """Sort points in place, ascending by a voltage attribute."""
        self.points.sort(key=lambda p: getattr(p, attribute))


@dataclass
class MeasurementFile:
    """
    Named collection of series with a measurement type tag.

    Attributes
    ----------
    name : str
        File name (used in traces and plot titles)
    series : list of Series
        Measured curves
    measurement_type : MeasurementType
        Classification of the measurement
    eg_offset : float or None
        Grid voltage calibration offset [V]; None means "use the global fallback"
    ep, eg, es, eh : float or None
        Voltages constant over the whole file
    """
    name: str
    series: List[Series] = field(default_factory=list)
    measurement_type: MeasurementType = MeasurementType.UNKNOWN
    eg_offset: Optional[float] = None
    ep: Optional[float] = None
    eg: Optional[float] = None
    es: Optional[float] = None
    eh: Optional[float] = None

    @property
    def offset(self) -> float:
        """Grid voltage offset applied to every point [V]."""
        return self.eg_offset if self.eg_offset is not None else 0.0

    def points(self):
        """Iterate over all points of all series."""
        for series in self.series:
            yield from series.points

    @property
    def n_points(self) -> int:
        return sum(len(s.points) for s in self.series)


def apply_eg_offset(files: List[MeasurementFile], eg_offset: float) -> List[MeasurementFile]:
    """
    Fill unset per-file grid offsets with a global fallback.

    Files that already carry an offset are returned unchanged. Series
    objects are shared with the input, so in-place sorting done later
    by estimators is visible to the caller.
    """
    result = []
    for f in files:
        if f.eg_offset is None:
            f = MeasurementFile(
                name=f.name,
                series=f.series,
                measurement_type=f.measurement_type,
                eg_offset=eg_offset,
                ep=f.ep, eg=f.eg, es=f.es, eh=f.eh,
            )
        result.append(f)
    return result


__all__ = [
    'MeasurementType',
    'TRIODE_TYPES',
    'PENTODE_TYPES',
    'TRIODE_PLATE_TYPES',
    'Point',
    'Series',
    'MeasurementFile',
    'apply_eg_offset',
]
