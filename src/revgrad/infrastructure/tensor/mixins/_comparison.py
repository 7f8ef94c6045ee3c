"""
Elementwise and whole-tensor comparison operations.

Elementwise comparisons broadcast their operands and return ``int64``
indicator tensors (1 where the relation holds, 0 elsewhere). The ``*_all``
variants return a Python ``bool`` and require identical shapes.

Closeness is the strict test ``|a - b| < atol + rtol * |b|`` with defaults
``atol=1e-8`` and ``rtol=1e-5``. With both tolerances zero nothing is close,
not even equal elements; use `equal` for exact comparison.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

import numpy as np

from .._shape_and_indexing import broadcast_shapes

if TYPE_CHECKING:  # pragma: no cover
    from .._tensor import Tensor

ATOL = 1e-8
RTOL = 1e-5


class TensorMixinComparison:
    """
    Comparison operations for the concrete Tensor implementation.
    """

    def equal(self: "Tensor", other: Union["Tensor", int, float]) -> "Tensor":
        """
        Elementwise exact equality as an ``int64`` indicator tensor.
        """
        w = self._coerce(other)
        broadcast_shapes(self.shape, w.shape)
        return self._wrap((self._view() == w._view()).astype(np.int64))

    def is_close(
        self: "Tensor",
        other: Union["Tensor", int, float],
        atol: float = ATOL,
        rtol: float = RTOL,
    ) -> "Tensor":
        """
        Elementwise closeness as an ``int64`` indicator tensor.

        Parameters
        ----------
        other : Tensor or number
            Reference values (``b`` in the tolerance formula).
        atol : float, optional
            Absolute tolerance. Defaults to 1e-8.
        rtol : float, optional
            Relative tolerance applied to ``|b|``. Defaults to 1e-5.
        """
        w = self._coerce(other)
        broadcast_shapes(self.shape, w.shape)
        a, b = self._view(), w._view()
        close = np.abs(a - b) < atol + rtol * np.abs(b)
        return self._wrap(close.astype(np.int64))

    def equal_all(self: "Tensor", other: "Tensor") -> bool:
        """
        True if both tensors have the same shape and identical elements.
        """
        w = self._coerce(other)
        return self.shape == w.shape and bool(np.array_equal(self._view(), w._view()))

    def is_close_all(
        self: "Tensor",
        other: "Tensor",
        atol: float = ATOL,
        rtol: float = RTOL,
    ) -> bool:
        """
        True if both tensors have the same shape and every element is close.
        """
        w = self._coerce(other)
        if self.shape != w.shape:
            return False
        return bool(np.all(self.is_close(w, atol, rtol)._view() == 1))
