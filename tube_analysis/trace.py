"""
Optional diagnostic collector for one fit invocation.

A Trace is created by the caller and passed explicitly to estimators and
optimizers; it is never global and never shared between fits.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
from numpy.typing import NDArray


@dataclass
class ResidualEntry:
    """Residual vector and objective value at one evaluated point."""
    r: NDArray[np.float64]
    x: NDArray[np.float64]
    fx: float


@dataclass
class JacobianEntry:
    """Jacobian matrix evaluated at a point."""
    x: NDArray[np.float64]
    jacobian: NDArray[np.float64]


@dataclass
class GradientEntry:
    """Gradient and its Euclidean norm at a point."""
    x: NDArray[np.float64]
    gradc: NDArray[np.float64]
    modulus: float


@dataclass
class Trace:
    """
    Append-only record of optimizer and estimator diagnostics.

    Attributes
    ----------
    iterations : int
        Total optimizer iterations over all runs using this trace
    history : list of ndarray
        Accepted points, one per iteration
    function_values : list of float
        Objective values after each Powell iteration
    residuals : list of ResidualEntry
        Residual evaluations of the Levenberg-Marquardt outer loop
    jacobians : list of JacobianEntry
        Jacobians computed by Levenberg-Marquardt
    gradients : list of GradientEntry
        Gradients computed by Levenberg-Marquardt
    function_calls : int
        Number of residual function evaluations
    tolerance : float or None
        Gradient tolerance of the last Levenberg-Marquardt run
    estimates : dict
        Per-estimator intermediate data, keyed by parameter name. Each entry
        holds an ``average`` list with the per-series contributions plus any
        estimator specific values.
    """
    iterations: int = 0
    history: List[NDArray[np.float64]] = field(default_factory=list)
    function_values: List[float] = field(default_factory=list)
    residuals: List[ResidualEntry] = field(default_factory=list)
    jacobians: List[JacobianEntry] = field(default_factory=list)
    gradients: List[GradientEntry] = field(default_factory=list)
    function_calls: int = 0
    tolerance: Optional[float] = None
    estimates: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def start_estimate(self, name: str, **values: Any) -> Dict[str, Any]:
        """Create (or reset) the estimate entry for a parameter."""
        entry = {'average': []}
        entry.update(values)
        self.estimates[name] = entry
        return entry

    def add_average(self, name: str, **values: Any) -> None:
        """Append one per-series contribution to an estimate entry."""
        self.estimates.setdefault(name, {'average': []})['average'].append(values)


__all__ = [
    'ResidualEntry',
    'JacobianEntry',
    'GradientEntry',
    'Trace',
]
