"""
Concrete n-dimensional Tensor implementation (NumPy CPU backend).

A `Tensor` owns a flat, row-major buffer of ``float64`` or ``int64`` values
together with its shape and stride. It has pure value semantics and no graph
awareness: the autograd engine wraps tensors in `Variable` objects.

Design notes
------------
- The buffer is always a private, contiguous 1-D ``np.ndarray``; tensors never
  share storage with each other (no views at the storage level).
- Every operation returns a fresh tensor, except the explicit in-place
  accumulators ``set``, ``add_at`` and ``scatter_add``.
- Operation families are implemented in mixins under
  ``revgrad.infrastructure.tensor.mixins``; this module provides storage,
  construction, and element access.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np

from ...domain._errors import ShapeError
from ...domain._random import IRandomSource
from .._random import resolve_source
from ._shape_and_indexing import as_shape, compute_stride, shape_size
from .mixins import _TensorAllMixin

Number = Union[int, float]


def _resolve_dtype(arr: np.ndarray, dtype: Any) -> np.dtype:
    if dtype is not None:
        dt = np.dtype(dtype)
        if dt.kind in "biu":
            return np.dtype(np.int64)
        return np.dtype(np.float64)
    if arr.dtype.kind in "biu":
        return np.dtype(np.int64)
    return np.dtype(np.float64)


class Tensor(_TensorAllMixin):
    """
    N-dimensional numeric container with row-major strides.

    Parameters
    ----------
    shape : Sequence[int]
        Dimension sizes. An empty sequence denotes a scalar.
    data : array-like
        Elements in row-major order. ``len(data)`` must equal the product of
        `shape`.
    dtype : numpy dtype-like, optional
        ``float64`` or ``int64``. Inferred from `data` when omitted
        (integers and booleans become ``int64``, everything else
        ``float64``).

    Raises
    ------
    ShapeError
        If the number of elements does not match the shape.
    """

    __array_priority__ = 100

    def __init__(self, shape: Sequence[int], data: Any, dtype: Any = None) -> None:
        shape_ = as_shape(shape)
        arr = np.array(data)
        dt = _resolve_dtype(arr, dtype)
        buf = np.ascontiguousarray(arr.astype(dt, copy=False).reshape(-1))

        if buf.size != shape_size(shape_):
            raise ShapeError(
                f"data of length {buf.size} does not fit shape {shape_}",
                shapes=(shape_,),
            )

        self._shape: Tuple[int, ...] = shape_
        self._stride: Tuple[int, ...] = compute_stride(shape_)
        self._data: np.ndarray = buf

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def new(cls, shape: Sequence[int], data: Any) -> "Tensor":
        """
        Construct a tensor from a shape and flat row-major data.
        """
        return cls(shape, data)

    @classmethod
    def scalar(cls, value: Number) -> "Tensor":
        return cls((), [value])

    @classmethod
    def full(cls, shape: Sequence[int], value: Number, dtype: Any = np.float64) -> "Tensor":
        shape_ = as_shape(shape)
        return cls(shape_, np.full(shape_size(shape_), value), dtype=dtype)

    @classmethod
    def zeros(cls, shape: Sequence[int], dtype: Any = np.float64) -> "Tensor":
        return cls.full(shape, 0, dtype=dtype)

    @classmethod
    def ones(cls, shape: Sequence[int], dtype: Any = np.float64) -> "Tensor":
        return cls.full(shape, 1, dtype=dtype)

    @classmethod
    def zero_like(cls, v: "Tensor") -> "Tensor":
        return cls.full(v.shape, 0, dtype=v.dtype)

    @classmethod
    def one_like(cls, v: "Tensor") -> "Tensor":
        return cls.full(v.shape, 1, dtype=v.dtype)

    @classmethod
    def rand(cls, shape: Sequence[int], src: Optional[IRandomSource] = None) -> "Tensor":
        """
        Tensor of samples drawn uniformly from ``[0, 1)``.

        Parameters
        ----------
        shape : Sequence[int]
            Output shape.
        src : IRandomSource, optional
            Random source. A fresh non-deterministic source is used when
            omitted.
        """
        shape_ = as_shape(shape)
        return cls._wrap(np.asarray(resolve_source(src).uniform(shape_), dtype=np.float64))

    @classmethod
    def randn(cls, shape: Sequence[int], src: Optional[IRandomSource] = None) -> "Tensor":
        """
        Tensor of standard-normal samples.
        """
        shape_ = as_shape(shape)
        return cls._wrap(np.asarray(resolve_source(src).normal(shape_), dtype=np.float64))

    @classmethod
    def arange(cls, start: Number, stop: Optional[Number] = None, step: Number = 1) -> "Tensor":
        """
        1-D tensor of evenly spaced values in ``[start, stop)``.

        With a single argument the range is ``[0, start)``.
        """
        if stop is None:
            start, stop = 0, start
        return cls._wrap(np.arange(start, stop, step))

    @classmethod
    def linspace(cls, start: float, stop: float, n: int) -> "Tensor":
        """
        1-D tensor of `n` evenly spaced values from `start` to `stop`
        inclusive.
        """
        return cls._wrap(np.linspace(start, stop, int(n), dtype=np.float64))

    @classmethod
    def from_numpy(cls, arr: Any) -> "Tensor":
        """
        Build a tensor holding a copy of the given array-like.
        """
        return cls._wrap(np.asarray(arr))

    @classmethod
    def _wrap(cls, arr: np.ndarray) -> "Tensor":
        arr = np.asarray(arr)
        return cls(arr.shape, arr)

    def _coerce(self, other: Any) -> "Tensor":
        if isinstance(other, Tensor):
            return other
        if isinstance(other, (int, float, np.integer, np.floating)):
            return type(self).scalar(other)
        return type(self).from_numpy(other)

    def _view(self) -> np.ndarray:
        # Shaped view over the private buffer; writes go through to storage.
        return self._data.reshape(self._shape)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def shape(self) -> Tuple[int, ...]:
        return self._shape

    @property
    def stride(self) -> Tuple[int, ...]:
        return self._stride

    @property
    def data(self) -> np.ndarray:
        """
        The flat row-major buffer (read it; do not resize it).
        """
        return self._data

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def ndim(self) -> int:
        return len(self._shape)

    @property
    def size(self) -> int:
        return int(self._data.size)

    def num_dims(self) -> int:
        return self.ndim

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------
    def ravel(self, *coord: int) -> int:
        """
        Convert a multi-index into a flat row-major index.

        Raises
        ------
        ShapeError
            If the coordinate has the wrong length or a component is
            negative or out of range.
        """
        if len(coord) == 1 and isinstance(coord[0], (tuple, list)):
            coord = tuple(coord[0])
        if len(coord) != self.ndim:
            raise ShapeError(
                f"coordinate {tuple(coord)} has {len(coord)} components for shape {self.shape}",
                shapes=(self.shape,),
            )

        index = 0
        for axis, (c, d, s) in enumerate(zip(coord, self._shape, self._stride)):
            c = int(c)
            if c < 0 or c >= d:
                raise ShapeError(
                    f"coordinate {tuple(coord)} out of range for shape {self.shape}",
                    shapes=(self.shape,),
                    axis=axis,
                )
            index += c * s
        return index

    def unravel(self, index: int) -> Tuple[int, ...]:
        """
        Convert a flat row-major index into a multi-index.

        Raises
        ------
        ShapeError
            If `index` is outside ``[0, size)``.
        """
        index = int(index)
        if index < 0 or index >= self.size:
            raise ShapeError(
                f"flat index {index} out of range for shape {self.shape}",
                shapes=(self.shape,),
            )

        coord = []
        for s in self._stride:
            coord.append(index // s)
            index %= s
        return tuple(coord)

    def at(self, *coord: int) -> Number:
        """
        Return the element at the given coordinate as a Python number.
        """
        return self._data[self.ravel(*coord)].item()

    def set(self, coord: Sequence[int], value: Number) -> None:
        """
        Overwrite the element at `coord` in place.
        """
        self._data[self.ravel(*coord)] = value

    def add_at(self, coord: Sequence[int], value: Number) -> None:
        """
        Add `value` into the element at `coord` in place.
        """
        self._data[self.ravel(*coord)] += value

    def item(self) -> Number:
        """
        Return the only element of a one-element tensor.

        Raises
        ------
        ShapeError
            If the tensor does not hold exactly one element.
        """
        if self.size != 1:
            raise ShapeError(f"item() requires one element, got shape {self.shape}", shapes=(self.shape,))
        return self._data[0].item()

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------
    def to_numpy(self) -> np.ndarray:
        """
        Return a shaped copy of the data as a NumPy array.
        """
        return self._view().copy()

    def tolist(self) -> Any:
        return self._view().tolist()

    def copy(self) -> "Tensor":
        return type(self)(self._shape, self._data, dtype=self.dtype)

    def astype(self, dtype: Any) -> "Tensor":
        return type(self)(self._shape, self._data, dtype=dtype)

    def __len__(self) -> int:
        if self.ndim == 0:
            raise TypeError("len() of a scalar tensor")
        return self._shape[0]

    def __repr__(self) -> str:
        return f"tensor(shape={list(self._shape)}, data={self._view().tolist()})"
