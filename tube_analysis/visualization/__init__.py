"""
Visualization module for tube analysis.
"""

from .plots import plot_measurement, plot_optimization_history

__all__ = [
    'plot_measurement',
    'plot_optimization_history',
]
