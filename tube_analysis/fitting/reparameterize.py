"""
Multiplicative reparameterization of model parameters.

Optimizers search over factors instead of physical values:

    parameter[i] = |reference[i] * factor[j]|    for free parameter i (j-th free)
    parameter[i] = |reference[i]|                for fixed parameters

Every factor vector starts at ones, all physical values stay non-negative
and parameters of very different magnitudes (kg1 ~ 1000, beta ~ 0.001)
are searched on the same scale.
"""

import logging
from typing import Callable, Generic, Iterable, List, Optional, Sequence, TypeVar

import numpy as np
from numpy.typing import NDArray

from ..algorithms.vector import Vector

logger = logging.getLogger(__name__)

T = TypeVar('T')


def free_indices(
    reference: Sequence[float],
    names: Sequence[str],
    exclude: Iterable[str] = ()
) -> List[int]:
    """
    Indices of parameters the optimizer may change.

    Parameters with a zero reference cannot be scaled and are fixed, as are
    the parameters named in ``exclude``. A zero estimate therefore stays
    zero for the whole fit; with secondary emission enabled this happens to
    v and w when no screen current feature point was found.
    """
    excluded = set(exclude)
    free = []
    for i, (value, name) in enumerate(zip(reference, names)):
        if name in excluded:
            continue
        if value == 0:
            logger.debug(f"Parameter {name} has a zero initial value and is held fixed")
            continue
        free.append(i)
    return free


class Reparameterize(Generic[T]):
    """
    Wrap a function of physical parameters as a function of factors.

    Parameters
    ----------
    function : callable
        Function of the full physical parameter vector
    reference : sequence of float
        Reference parameter values (the estimated initial guess)
    free : sequence of int, optional
        Indices of the free parameters (default: all)

    Examples
    --------
    >>> r = Reparameterize(lambda p: float(p.sum()), [2.0, 3.0], free=[1])
    >>> r(Vector([2.0]))
    8.0
    """

    def __init__(
        self,
        function: Callable[[NDArray[np.float64]], T],
        reference: Sequence[float],
        free: Optional[Sequence[int]] = None
    ):
        self.function = function
        self.reference = np.abs(np.array(reference, dtype=float))
        self.free = list(range(len(self.reference))) if free is None else list(free)

    @property
    def n_free(self) -> int:
        return len(self.free)

    def initial_factors(self) -> Vector:
        return Vector.ones(self.n_free)

    def parameters(self, factors) -> NDArray[np.float64]:
        """Physical parameter vector for a factor vector."""
        values = self.reference.copy()
        values[self.free] = np.abs(self.reference[self.free] * np.asarray(factors, dtype=float))
        return values

    def __call__(self, factors) -> T:
        return self.function(self.parameters(factors))


__all__ = [
    'free_indices',
    'Reparameterize',
]
