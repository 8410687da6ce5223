"""
Dimension-checked dense vector and matrix types.

Thin wrappers around numpy arrays whose shape is fixed at construction.
Every binary operation checks dimensions and raises DimensionError on a
mismatch instead of broadcasting, so an optimizer run keeps one problem
size from start to end.

Both types implement ``__array__`` and can be passed to numpy functions.
"""

from typing import Iterable, Iterator, Sequence, Union

import numpy as np
import scipy.linalg
from numpy.typing import NDArray

from ..exceptions import DimensionError

Number = Union[int, float, np.floating]


class Vector:
    """
    One-dimensional vector of fixed length.

    Parameters
    ----------
    values : iterable of float
        Vector components (copied)
    """

    __slots__ = ('_data',)

    # numpy defers binary operators to this class
    __array_ufunc__ = None

    def __init__(self, values: Union[Iterable[float], NDArray]):
        data = np.array(values, dtype=float)
        if data.ndim != 1:
            raise DimensionError(f"Vector requires 1-D data, got shape {data.shape}")
        self._data = data

    @classmethod
    def ones(cls, n: int) -> 'Vector':
        return cls(np.ones(n))

    # -- container protocol ------------------------------------------------

    def __len__(self) -> int:
        return self._data.shape[0]

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self) -> Iterator[float]:
        return (float(v) for v in self._data)

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self._data.copy()
        return self._data.astype(dtype)

    def to_numpy(self) -> NDArray[np.float64]:
        """Return a copy of the data as ndarray."""
        return self._data.copy()

    def copy(self) -> 'Vector':
        return Vector(self._data)

    # -- arithmetic --------------------------------------------------------

    def _check(self, other: 'Vector') -> None:
        if not isinstance(other, Vector):
            raise TypeError(f"Expected Vector, got {type(other).__name__}")
        if len(other) != len(self):
            raise DimensionError(f"Vector length mismatch: {len(self)} != {len(other)}")

    def __add__(self, other: 'Vector') -> 'Vector':
        self._check(other)
        return Vector(self._data + other._data)

    def __sub__(self, other: 'Vector') -> 'Vector':
        self._check(other)
        return Vector(self._data - other._data)

    def __mul__(self, scalar: Number) -> 'Vector':
        if isinstance(scalar, (Vector, Matrix)):
            return NotImplemented
        return Vector(self._data * float(scalar))

    __rmul__ = __mul__

    def __truediv__(self, scalar: Number) -> 'Vector':
        return Vector(self._data / float(scalar))

    def __neg__(self) -> 'Vector':
        return Vector(-self._data)

    def dot(self, other: 'Vector') -> float:
        """Inner product."""
        self._check(other)
        return float(self._data @ other._data)

    def norm(self) -> float:
        """Euclidean norm."""
        return float(np.linalg.norm(self._data))

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self._data)))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return len(self) == len(other) and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Vector({np.array2string(self._data, separator=', ')})"


class Matrix:
    """
    Dense two-dimensional matrix of fixed shape.

    Parameters
    ----------
    values : array_like
        Matrix rows (copied)
    """

    __slots__ = ('_data',)

    __array_ufunc__ = None

    def __init__(self, values: Union[Sequence[Sequence[float]], NDArray]):
        data = np.array(values, dtype=float)
        if data.ndim != 2:
            raise DimensionError(f"Matrix requires 2-D data, got shape {data.shape}")
        self._data = data

    @classmethod
    def identity(cls, n: int) -> 'Matrix':
        return cls(np.eye(n))

    @classmethod
    def from_columns(cls, columns: Sequence[Vector]) -> 'Matrix':
        """Build a matrix from equally sized column vectors."""
        if not columns:
            raise DimensionError("Cannot build a matrix without columns")
        m = len(columns[0])
        for c in columns:
            if len(c) != m:
                raise DimensionError(f"Column length mismatch: {len(c)} != {m}")
        return cls(np.column_stack([c.to_numpy() for c in columns]))

    # -- shape ---------------------------------------------------------------

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self):
        return self._data.shape

    def __getitem__(self, index):
        value = self._data[index]
        return float(value) if np.ndim(value) == 0 else value.copy()

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self._data.copy()
        return self._data.astype(dtype)

    def to_numpy(self) -> NDArray[np.float64]:
        return self._data.copy()

    def column(self, j: int) -> Vector:
        return Vector(self._data[:, j])

    def flatten(self) -> Vector:
        """Row-major flattening into a vector of length rows * cols."""
        return Vector(self._data.ravel())

    # -- algebra -------------------------------------------------------------

    def _check_same_shape(self, other: 'Matrix') -> None:
        if not isinstance(other, Matrix):
            raise TypeError(f"Expected Matrix, got {type(other).__name__}")
        if other.shape != self.shape:
            raise DimensionError(f"Matrix shape mismatch: {self.shape} != {other.shape}")

    def __add__(self, other: 'Matrix') -> 'Matrix':
        self._check_same_shape(other)
        return Matrix(self._data + other._data)

    def __sub__(self, other: 'Matrix') -> 'Matrix':
        self._check_same_shape(other)
        return Matrix(self._data - other._data)

    def __mul__(self, scalar: Number) -> 'Matrix':
        if isinstance(scalar, (Vector, Matrix)):
            return NotImplemented
        return Matrix(self._data * float(scalar))

    __rmul__ = __mul__

    def __matmul__(self, other: Union['Matrix', Vector]) -> Union['Matrix', Vector]:
        if isinstance(other, Vector):
            if len(other) != self.cols:
                raise DimensionError(
                    f"Cannot multiply {self.rows}x{self.cols} matrix by vector of length {len(other)}")
            return Vector(self._data @ other.to_numpy())
        if isinstance(other, Matrix):
            if other.rows != self.cols:
                raise DimensionError(
                    f"Cannot multiply {self.rows}x{self.cols} by {other.rows}x{other.cols}")
            return Matrix(self._data @ other._data)
        return NotImplemented

    @property
    def T(self) -> 'Matrix':
        return self.transpose()

    def transpose(self) -> 'Matrix':
        return Matrix(self._data.T)

    def inverse(self) -> 'Matrix':
        """
        Dense inverse of a square matrix.

        Raises
        ------
        DimensionError
            If the matrix is not square
        numpy.linalg.LinAlgError
            If the matrix is singular
        """
        if self.rows != self.cols:
            raise DimensionError(f"Cannot invert non-square {self.rows}x{self.cols} matrix")
        return Matrix(scipy.linalg.inv(self._data))

    def is_orthogonal(self, atol: float = 1e-12) -> bool:
        """True if M @ M.T equals the identity within ``atol``."""
        if self.rows != self.cols:
            return False
        return bool(np.allclose(self._data @ self._data.T, np.eye(self.rows), rtol=0.0, atol=atol))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Matrix({np.array2string(self._data, separator=', ')})"


__all__ = ['Vector', 'Matrix']
