"""
Reduction operations for the Tensor implementation.

This module defines :class:`TensorMixinReduction`, implementing ``sum``,
``max``, ``min``, ``mean``, ``variance``, ``std``, ``argmax``, and
``argmin``.

Axis semantics
--------------
- ``axes=None`` or an empty sequence reduces every axis, producing a scalar
  (shape ``()``) unless ``keepdims`` is set.
- Negative axes are taken modulo the rank; duplicate axes raise `ShapeError`.
- ``variance``/``std`` are population statistics (no Bessel correction).
- ``argmax``/``argmin`` return ``int64`` tensors and resolve ties to the
  first occurrence along the scanned axis.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import numpy as np

from ....domain._errors import ShapeError
from .._shape_and_indexing import Axes, normalize_axes, normalize_axis

if TYPE_CHECKING:  # pragma: no cover
    from .._tensor import Tensor


class TensorMixinReduction:
    """
    Reduction operations for the concrete Tensor implementation.
    """

    def _reduce(self: "Tensor", fn, axes: Axes, keepdims: bool, name: str) -> "Tensor":
        axes_ = normalize_axes(axes, self.ndim)
        if self.size == 0 and name in ("max", "min"):
            raise ShapeError(f"{name} of an empty tensor {self.shape}", shapes=(self.shape,))
        return self._wrap(np.asarray(fn(self._view(), axis=axes_, keepdims=keepdims)))

    def sum(self: "Tensor", axes: Axes = None, keepdims: bool = False) -> "Tensor":
        """
        Sum of elements along `axes`.

        Parameters
        ----------
        axes : int, Sequence[int] or None, optional
            Axes to reduce. None or empty reduces all axes.
        keepdims : bool, optional
            Whether to retain reduced axes with size 1. Defaults to False.

        Returns
        -------
        Tensor
            The reduced tensor. Integer tensors keep ``int64``.
        """
        return self._reduce(np.sum, axes, keepdims, "sum")

    def max(self: "Tensor", axes: Axes = None, keepdims: bool = False) -> "Tensor":
        """
        Maximum along `axes`.

        Raises
        ------
        ShapeError
            If the tensor is empty or an axis is invalid.
        """
        return self._reduce(np.max, axes, keepdims, "max")

    def min(self: "Tensor", axes: Axes = None, keepdims: bool = False) -> "Tensor":
        """
        Minimum along `axes`.

        Raises
        ------
        ShapeError
            If the tensor is empty or an axis is invalid.
        """
        return self._reduce(np.min, axes, keepdims, "min")

    def mean(self: "Tensor", axes: Axes = None, keepdims: bool = False) -> "Tensor":
        """
        Arithmetic mean along `axes` (always ``float64``).
        """
        return self._reduce(np.mean, axes, keepdims, "mean")

    def variance(self: "Tensor", axes: Axes = None, keepdims: bool = False) -> "Tensor":
        """
        Population variance ``mean((x - mean(x))**2)`` along `axes`.
        """
        return self._reduce(np.var, axes, keepdims, "variance")

    def std(self: "Tensor", axes: Axes = None, keepdims: bool = False) -> "Tensor":
        """
        Population standard deviation along `axes`.
        """
        return self._reduce(np.std, axes, keepdims, "std")

    def argmax(self: "Tensor", axis: Optional[int] = None) -> "Tensor":
        """
        Indices of the maximum values along `axis`.

        Parameters
        ----------
        axis : int or None, optional
            Axis to scan. None scans the flattened tensor and returns a
            scalar flat index.

        Returns
        -------
        Tensor
            ``int64`` tensor of indices (first occurrence on ties).
        """
        return self._arg(np.argmax, axis, "argmax")

    def argmin(self: "Tensor", axis: Optional[int] = None) -> "Tensor":
        """
        Indices of the minimum values along `axis` (first occurrence on ties).
        """
        return self._arg(np.argmin, axis, "argmin")

    def _arg(self: "Tensor", fn, axis: Optional[int], name: str) -> "Tensor":
        if self.size == 0:
            raise ShapeError(f"{name} of an empty tensor {self.shape}", shapes=(self.shape,))
        if axis is None:
            return self._wrap(np.asarray(fn(self._view()), dtype=np.int64))

        ax = normalize_axis(axis, self.ndim)
        return self._wrap(np.asarray(fn(self._view(), axis=ax), dtype=np.int64))
