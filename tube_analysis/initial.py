"""
Partially populated bag of model parameters built by the estimators.
"""

from dataclasses import dataclass, fields
from typing import Dict, Optional

from .exceptions import InsufficientParameters


@dataclass
class Initial:
    """
    Initial guesses for the tube model parameters.

    Every field starts unset (None). Each estimator fills only the fields
    that are still unset and reads fields set by earlier stages.
    """
    # triode
    mu: Optional[float] = None
    ex: Optional[float] = None
    kg1: Optional[float] = None
    kp: Optional[float] = None
    kvb: Optional[float] = None
    # pentode
    kg2: Optional[float] = None
    # derk
    a: Optional[float] = None
    alpha_s: Optional[float] = None
    beta: Optional[float] = None
    # secondary emission
    s: Optional[float] = None
    alpha_p: Optional[float] = None
    lambda_: Optional[float] = None
    v: Optional[float] = None
    w: Optional[float] = None

    def require(self, what: str, *names: str) -> None:
        """
        Raise InsufficientParameters unless all named fields are set.

        Parameters
        ----------
        what : str
            Name of the quantity being estimated (used in the message)
        *names : str
            Prerequisite field names
        """
        if any(getattr(self, name) is None for name in names):
            raise InsufficientParameters(
                f"Cannot estimate {what} without {_join(names)}")

    def as_dict(self) -> Dict[str, Optional[float]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def __str__(self) -> str:
        return ', '.join(f"{k}={v:.6g}" for k, v in self.as_dict().items() if v is not None)


def _join(names) -> str:
    names = [n.rstrip('_') for n in names]
    if len(names) == 1:
        return names[0]
    return ', '.join(names[:-1]) + ' and ' + names[-1]


__all__ = ['Initial']
