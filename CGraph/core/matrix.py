"""
Matrix Container
================

A fixed-shape numeric matrix backed by a row-major NumPy buffer.

The shape is fixed at construction. Arithmetic operators return new
matrices; compound assignments (``+=``, ``-=``, ``*=``, ``/=``) write into the
existing buffer so that every holder of a reference observes the change.
Shape and element-type rules are validated before any work is done and
reported through :mod:`CGraph.errors`.
"""

import operator
from typing import Any, Callable, Iterator, Optional, Tuple

import numpy as np

from ..backends.numba_backend import default_backend
from ..config import get_config
from ..errors import (
    IndexOutOfRangeError,
    InvalidShapeOperationError,
    ShapeMismatchError,
    TypeNotConvertibleError,
)
from ..utils.dtypes import (
    DTypeLike,
    cast_scalar,
    check_scalar,
    element_dtype,
    fit_scalar,
    require_convertible,
)
from .rng import Distribution, default_distribution, resolve_generator, sample


def _resolve_dtype(dtype: Optional[DTypeLike]) -> np.dtype:
    if dtype is None:
        return get_config().dtype
    return element_dtype(dtype)


def _check_dimension(value: Any, name: str) -> int:
    try:
        value = operator.index(value)
    except TypeError as e:
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}") from e
    if value < 1:
        raise InvalidShapeOperationError(f"{name} must be positive, got {value}")
    return value


def _check_index(value: Any, bound: int, axis: str) -> int:
    try:
        index = operator.index(value)
    except TypeError as e:
        raise TypeError(
            f"Matrix {axis} index must be an integer, got {type(value).__name__}"
        ) from e
    if not 0 <= index < bound:
        raise IndexOutOfRangeError(f"{axis} index {index} out of range [0, {bound})")
    return index


def _format_element(value: Any, precision: int) -> str:
    item = value.item() if isinstance(value, np.generic) else value
    if isinstance(item, (float, complex)):
        return format(item, f".{precision}g")
    return str(item)


class Matrix:
    """
    A matrix of numeric elements with a fixed number of rows and columns.

    Example:
        >>> a = Matrix(2, 2, 1.0, 2.0, 2.0, 1.0)
        >>> b = Matrix.identity(2)
        >>> a * b == a
        True
        >>> print(a + b)
        [[ 2, 2 ]
         [ 2, 2 ]]
    """

    # Keep NumPy from absorbing a Matrix into ufuncs; reflected operators win.
    __array_ufunc__ = None
    __hash__ = None  # type: ignore[assignment]

    _data: np.ndarray

    def __init__(
        self, rows: int, cols: int, *elements: Any, dtype: Optional[DTypeLike] = None
    ) -> None:
        """
        Create a zero-filled matrix, or fill it row-major from ``elements``.

        Args:
            rows: Number of rows.
            cols: Number of columns.
            *elements: Exactly ``rows * cols`` scalars, or none for zeros.
            dtype: Element type, defaults to ``MatrixConfig.default_dtype``.
        """
        rows = _check_dimension(rows, "rows")
        cols = _check_dimension(cols, "cols")
        resolved = _resolve_dtype(dtype)

        data = np.zeros((rows, cols), dtype=resolved)
        if elements:
            if len(elements) != rows * cols:
                raise ShapeMismatchError(
                    f"A {rows}x{cols} matrix needs {rows * cols} elements, got {len(elements)}"
                )
            casting = get_config().scalar_casting
            flat = data.reshape(-1)
            for idx, element in enumerate(elements):
                check_scalar(element)
                require_convertible(element, resolved, casting, "element")
                flat[idx] = cast_scalar(element, resolved)
        self._data = data

    @classmethod
    def _wrap(cls, data: np.ndarray) -> "Matrix":
        obj = cls.__new__(cls)
        obj._data = data
        return obj

    # --- Factories ---

    @classmethod
    def zeros(cls, rows: int, cols: int, dtype: Optional[DTypeLike] = None) -> "Matrix":
        return cls(rows, cols, dtype=dtype)

    @classmethod
    def identity(
        cls, rows: int, cols: Optional[int] = None, dtype: Optional[DTypeLike] = None
    ) -> "Matrix":
        """Square identity matrix; a non-square shape is rejected."""
        rows = _check_dimension(rows, "rows")
        cols = rows if cols is None else _check_dimension(cols, "cols")
        if rows != cols:
            raise InvalidShapeOperationError(
                f"Identity is only defined for square matrices, got {rows}x{cols}"
            )
        return cls._wrap(np.eye(rows, dtype=_resolve_dtype(dtype)))

    @classmethod
    def constant(
        cls, rows: int, cols: int, value: Any, dtype: Optional[DTypeLike] = None
    ) -> "Matrix":
        """Matrix with every element set to ``value``."""
        rows = _check_dimension(rows, "rows")
        cols = _check_dimension(cols, "cols")
        resolved = _resolve_dtype(dtype)
        check_scalar(value)
        require_convertible(value, resolved, get_config().scalar_casting, "value")
        return cls._wrap(np.full((rows, cols), cast_scalar(value, resolved), dtype=resolved))

    @classmethod
    def ones(cls, rows: int, cols: int, dtype: Optional[DTypeLike] = None) -> "Matrix":
        return cls.constant(rows, cols, 1, dtype=dtype)

    @classmethod
    def random(
        cls,
        rows: int,
        cols: int,
        distribution: Optional[Distribution] = None,
        generator: Optional[np.random.Generator] = None,
        dtype: Optional[DTypeLike] = None,
    ) -> "Matrix":
        """
        Fill every element with an independent draw from ``distribution``.

        Args:
            rows: Number of rows.
            cols: Number of columns.
            distribution: Frozen scipy.stats distribution or ``f(generator)``.
                Defaults to uniform on [0, 1), floating element types only.
            generator: Random generator. Defaults to the process-wide shared
                generator, which is never reseeded.
            dtype: Element type.
        """
        rows = _check_dimension(rows, "rows")
        cols = _check_dimension(cols, "cols")
        resolved = _resolve_dtype(dtype)
        if distribution is None:
            if resolved.kind not in "fc":
                raise TypeNotConvertibleError(
                    f"The default uniform distribution needs a floating element type, "
                    f"got {resolved}; pass a distribution explicitly"
                )
            distribution = default_distribution()

        samples = sample(distribution, resolve_generator(generator), (rows, cols))
        return cls._wrap(samples.reshape(rows, cols).astype(resolved))

    @classmethod
    def from_array(cls, array: Any, dtype: Optional[DTypeLike] = None) -> "Matrix":
        """Copy a two-dimensional array-like into a new matrix."""
        arr = np.array(array)
        if arr.ndim != 2:
            raise InvalidShapeOperationError(
                f"Matrix.from_array expects 2-D input, got {arr.ndim}-D"
            )
        _check_dimension(arr.shape[0], "rows")
        _check_dimension(arr.shape[1], "cols")
        resolved = element_dtype(arr.dtype if dtype is None else dtype)
        return cls._wrap(arr.astype(resolved))

    # --- Shape ---

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self._data.shape

    @property
    def size(self) -> int:
        return self._data.size

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def is_square(self) -> bool:
        return self.rows == self.cols

    @property
    def is_vector(self) -> bool:
        """True for row and column vectors."""
        return self.rows == 1 or self.cols == 1

    # --- Element access ---

    def _locate(self, key: Any) -> Tuple[int, int]:
        if isinstance(key, tuple):
            if len(key) != 2:
                raise TypeError("Matrix indices take the form m[i, j] or m[i]")
            return (
                _check_index(key[0], self.rows, "row"),
                _check_index(key[1], self.cols, "column"),
            )
        if not self.is_vector:
            raise InvalidShapeOperationError(
                f"Single-index access needs a row or column vector, "
                f"got a {self.rows}x{self.cols} matrix"
            )
        index = _check_index(key, self.size, "vector")
        return (0, index) if self.rows == 1 else (index, 0)

    def __getitem__(self, key: Any) -> Any:
        return self._data[self._locate(key)]

    def __setitem__(self, key: Any, value: Any) -> None:
        i, j = self._locate(key)
        check_scalar(value)
        require_convertible(value, self.dtype, get_config().scalar_casting, "element")
        self._data[i, j] = cast_scalar(value, self.dtype)

    def __iter__(self) -> Iterator[Any]:
        """Iterate over the elements in row-major order."""
        return iter(self._data.reshape(-1))

    # --- Conversions ---

    def astype(self, dtype: DTypeLike) -> "Matrix":
        """Explicit element-wise conversion; truncates like a cast."""
        return Matrix._wrap(self._data.astype(element_dtype(dtype)))

    def copy(self) -> "Matrix":
        return Matrix._wrap(self._data.copy())

    def __copy__(self) -> "Matrix":
        return self.copy()

    def __deepcopy__(self, memo: dict) -> "Matrix":
        return self.copy()

    def to_numpy(self) -> np.ndarray:
        """Return a copy of the elements as a 2-D NumPy array."""
        return self._data.copy()

    def __array__(self, dtype: Any = None, copy: Optional[bool] = None) -> np.ndarray:
        if copy is False:
            if dtype is not None and np.dtype(dtype) != self.dtype:
                raise ValueError(
                    f"Cannot convert a {self.dtype} matrix to {np.dtype(dtype)} without a copy"
                )
            return self._data
        return self._data.astype(dtype) if dtype is not None else self._data.copy()

    def readonly_view(self) -> "Matrix":
        """A matrix sharing this buffer that rejects writes."""
        view = self._data.view()
        view.flags.writeable = False
        return Matrix._wrap(view)

    def assign(self, other: "Matrix") -> "Matrix":
        """Copy ``other``'s elements into this matrix's buffer."""
        if not isinstance(other, Matrix):
            raise TypeNotConvertibleError(
                f"Cannot assign {type(other).__name__} to a Matrix"
            )
        self._require_same_shape(other, "=")
        require_convertible(other.dtype, self.dtype, get_config().scalar_casting, "matrix")
        np.copyto(self._data, other._data, casting="unsafe")
        return self

    def item(self) -> Any:
        """Decay a 1x1 matrix to its single element."""
        if self.size != 1:
            raise InvalidShapeOperationError(
                f"Only a 1x1 matrix decays to a scalar, got {self.rows}x{self.cols}"
            )
        return self._data[0, 0]

    def __float__(self) -> float:
        return float(self.item())

    def __int__(self) -> int:
        return int(self.item())

    def __complex__(self) -> complex:
        return complex(self.item())

    def transpose(self) -> "Matrix":
        return Matrix._wrap(self._data.T.copy())

    @property
    def T(self) -> "Matrix":
        return self.transpose()

    # --- Arithmetic ---

    def _require_same_shape(self, other: "Matrix", symbol: str) -> None:
        if self.shape != other.shape:
            raise ShapeMismatchError(
                f"Operator '{symbol}' needs equal shapes, got "
                f"{self.rows}x{self.cols} and {other.rows}x{other.cols}"
            )

    def _product(self, other: "Matrix") -> "Matrix":
        if self.cols != other.rows:
            raise ShapeMismatchError(
                f"Matrix product needs inner dimensions to agree, got "
                f"{self.rows}x{self.cols} and {other.rows}x{other.cols}"
            )
        dtype = np.result_type(self.dtype, other.dtype)
        return Matrix._wrap(default_backend.matmul(self._data, other._data, dtype))

    def _elementwise(self, other: "Matrix", ufunc: Callable, symbol: str) -> "Matrix":
        self._require_same_shape(other, symbol)
        return Matrix._wrap(ufunc(self._data, other._data))

    def _scalar(self, scalar: Any, ufunc: Callable, reflected: bool = False) -> "Matrix":
        check_scalar(scalar)
        # an out-of-range Python int never widens the element type
        scalar = fit_scalar(scalar, self.dtype, get_config().scalar_casting)
        if reflected:
            return Matrix._wrap(ufunc(scalar, self._data))
        return Matrix._wrap(ufunc(self._data, scalar))

    def _inplace(self, other: Any, ufunc: Callable, symbol: str) -> "Matrix":
        casting = get_config().scalar_casting
        if isinstance(other, Matrix):
            self._require_same_shape(other, symbol)
            require_convertible(other.dtype, self.dtype, casting, "operand")
            ufunc(self._data, other._data, out=self._data, casting="unsafe")
        else:
            check_scalar(other)
            require_convertible(other, self.dtype, casting, "scalar")
            other = fit_scalar(other, self.dtype, casting)
            ufunc(self._data, other, out=self._data, casting="unsafe")
        return self

    def __add__(self, other: Any) -> "Matrix":
        if isinstance(other, Matrix):
            return self._elementwise(other, np.add, "+")
        return self._scalar(other, np.add)

    def __radd__(self, other: Any) -> "Matrix":
        return self._scalar(other, np.add, reflected=True)

    def __sub__(self, other: Any) -> "Matrix":
        if isinstance(other, Matrix):
            return self._elementwise(other, np.subtract, "-")
        return self._scalar(other, np.subtract)

    def __rsub__(self, other: Any) -> "Matrix":
        return self._scalar(other, np.subtract, reflected=True)

    def __mul__(self, other: Any) -> "Matrix":
        if isinstance(other, Matrix):
            return self._product(other)
        return self._scalar(other, np.multiply)

    def __rmul__(self, other: Any) -> "Matrix":
        return self._scalar(other, np.multiply, reflected=True)

    def __matmul__(self, other: Any) -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return self._product(other)

    def __truediv__(self, other: Any) -> "Matrix":
        if isinstance(other, Matrix):
            return NotImplemented
        return self._scalar(other, np.true_divide)

    def __rtruediv__(self, other: Any) -> "Matrix":
        if isinstance(other, Matrix):
            return NotImplemented
        return self._scalar(other, np.true_divide, reflected=True)

    def __iadd__(self, other: Any) -> "Matrix":
        return self._inplace(other, np.add, "+=")

    def __isub__(self, other: Any) -> "Matrix":
        return self._inplace(other, np.subtract, "-=")

    def __imul__(self, other: Any) -> "Matrix":
        if isinstance(other, Matrix):
            if other.shape != (self.cols, self.cols):
                raise ShapeMismatchError(
                    f"In-place product needs a {self.cols}x{self.cols} operand, "
                    f"got {other.rows}x{other.cols}"
                )
            require_convertible(other.dtype, self.dtype, get_config().scalar_casting, "operand")
            np.copyto(self._data, self._product(other)._data, casting="unsafe")
            return self
        return self._inplace(other, np.multiply, "*=")

    def __itruediv__(self, other: Any) -> "Matrix":
        if isinstance(other, Matrix):
            raise TypeError("In-place division by a matrix is not defined")
        return self._inplace(other, np.true_divide, "/=")

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    def allclose(self, other: "Matrix", rtol: float = 1e-05, atol: float = 1e-08) -> bool:
        """Element-wise comparison within a tolerance; False for different shapes."""
        return self.shape == other.shape and bool(
            np.allclose(self._data, other._data, rtol=rtol, atol=atol)
        )

    # --- Rendering ---

    def __str__(self) -> str:
        precision = get_config().print_precision
        lines = []
        for i, row in enumerate(self._data):
            cells = ", ".join(_format_element(value, precision) for value in row)
            lines.append(("" if i == 0 else " ") + f"[ {cells} ]")
        return "[" + "\n".join(lines) + "]"

    def __repr__(self) -> str:
        return f"Matrix(rows={self.rows}, cols={self.cols}, dtype={self.dtype})"


def row_vector(size: int, *elements: Any, dtype: Optional[DTypeLike] = None) -> Matrix:
    """A 1 x size matrix."""
    return Matrix(1, size, *elements, dtype=dtype)


def col_vector(size: int, *elements: Any, dtype: Optional[DTypeLike] = None) -> Matrix:
    """A size x 1 matrix."""
    return Matrix(size, 1, *elements, dtype=dtype)


__all__ = ["Matrix", "row_vector", "col_vector"]
