"""
Visualization functions for tube measurements and fits.
"""

from typing import Optional

import numpy as np
import matplotlib.pyplot as plt

from ..data import MeasurementFile, MeasurementType
from ..models.parameters import ModelParameters
from ..trace import Trace

PLOT_GRID_ALPHA = 0.3

_X_AXIS = {
    MeasurementType.IP_VA_VG_VH: ('ep', 'Plate voltage [V]'),
    MeasurementType.IPIS_VAVS_VG_VH: ('ep', 'Plate voltage (Va = Vs) [V]'),
    MeasurementType.IPIS_VA_VG_VS_VH: ('ep', 'Plate voltage [V]'),
    MeasurementType.IPIS_VA_VS_VG_VH: ('ep', 'Plate voltage [V]'),
    MeasurementType.IP_VG_VA_VH: ('eg', 'Grid voltage [V]'),
    MeasurementType.IPIS_VG_VAVS_VH: ('eg', 'Grid voltage [V]'),
    MeasurementType.IPIS_VG_VA_VS_VH: ('eg', 'Grid voltage [V]'),
    MeasurementType.IPIS_VS_VG_VA_VH: ('es', 'Screen voltage [V]'),
}


def _series_label(f: MeasurementFile, series) -> str:
    if f.measurement_type == MeasurementType.IPIS_VA_VS_VG_VH and series.es is not None:
        return f"Vs={series.es:g} V"
    if series.eg is not None:
        return f"Vg={series.eg + f.offset:g} V"
    if series.ep is not None:
        return f"Va={series.ep:g} V"
    return ''


def plot_measurement(
    f: MeasurementFile,
    parameters: Optional[ModelParameters] = None,
    title: Optional[str] = None,
    figsize: tuple = (10, 6)
) -> plt.Figure:
    """
    Plot measured currents of a file, optionally with model curves.

    Parameters
    ----------
    f : MeasurementFile
        Classified measurement
    parameters : ModelParameters, optional
        Fitted model evaluated at the measured voltages (drawn as lines)
    title : str, optional
        Custom plot title
    figsize : tuple, optional
        Figure size (default: (10, 6))

    Returns
    -------
    fig : matplotlib.figure.Figure
        Plate current (and screen current, when measured) per series
    """
    x_name, x_label = _X_AXIS.get(f.measurement_type, ('ep', 'Plate voltage [V]'))
    screen = any(p.is_ != 0 for p in f.points())

    fig, ax = plt.subplots(figsize=figsize)
    for k, series in enumerate(f.series):
        points = sorted(series.points, key=lambda p: getattr(p, x_name))
        if not points:
            continue
        color = f"C{k % 10}"
        x = np.array([getattr(p, x_name) for p in points])
        if x_name == 'eg':
            x = x + f.offset
        label = _series_label(f, series)

        ax.plot(x, [p.ip for p in points], 'o', color=color, markersize=4, label=label or None)
        if screen:
            ax.plot(x, [p.is_ for p in points], 's', color=color, markersize=3, alpha=0.6)

        if parameters is not None:
            ep = np.array([p.ep for p in points])
            eg = np.array([p.eg for p in points]) + f.offset
            es = np.array([p.es for p in points])
            ip, is_ = parameters.currents(ep, eg, es)
            ax.plot(x, ip, '-', color=color, linewidth=1.5)
            if parameters.TRIODE:
                # triode-connected pentodes are fitted on the cathode current
                if any(p.is_ != 0 for p in points):
                    ax.plot(x, [p.total_current for p in points], 'x', color=color, markersize=4)
            else:
                ax.plot(x, is_, '--', color=color, linewidth=1)

    ax.set_xlabel(x_label)
    ax.set_ylabel("Current [mA]")
    if title:
        ax.set_title(title)
    elif parameters is not None:
        ax.set_title(f"{f.name}: {parameters.LABEL} Model")
    else:
        ax.set_title(f"{f.name} ({f.measurement_type.value})")
    if f.series:
        ax.legend(loc='best', fontsize='small')
    ax.grid(True, alpha=PLOT_GRID_ALPHA)

    plt.tight_layout()
    return fig


def plot_optimization_history(trace: Trace, title: str = "Optimization history") -> plt.Figure:
    """
    Plot the objective value per optimizer iteration.

    Powell runs record ``function_values``; Levenberg-Marquardt runs record
    residual evaluations, whose ``fx`` is plotted instead.
    """
    if trace.function_values:
        values = np.asarray(trace.function_values, dtype=float)
        label = 'Sum of squared errors (Powell)'
    else:
        values = np.asarray([entry.fx for entry in trace.residuals], dtype=float)
        label = 'F(x) (Levenberg-Marquardt)'

    fig, ax = plt.subplots(figsize=(8, 5))
    if len(values) == 0:
        ax.text(0.5, 0.5, "No optimizer history recorded", ha='center', va='center',
                transform=ax.transAxes)
    else:
        positive = values > 0
        if np.all(positive):
            ax.semilogy(np.arange(len(values)), values, 'o-', markersize=3, label=label)
        else:
            ax.plot(np.arange(len(values)), values, 'o-', markersize=3, label=label)
        ax.legend(loc='best')
    ax.set_xlabel("Evaluation")
    ax.set_ylabel("Objective")
    ax.set_title(title)
    ax.grid(True, alpha=PLOT_GRID_ALPHA, which='both')

    plt.tight_layout()
    return fig


__all__ = [
    'PLOT_GRID_ALPHA',
    'plot_measurement',
    'plot_optimization_history',
]
