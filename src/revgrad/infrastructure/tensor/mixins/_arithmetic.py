"""
Broadcasting binary arithmetic and batched matrix multiplication.

This module defines :class:`TensorMixinArithmetic`, which implements the
binary operations of the Tensor algebra (``add``, ``sub``, ``mul``, ``div``,
``matmul``) together with the Python operator protocol that delegates to
them.

All operations return fresh tensors; operands are never mutated. Operand
shapes are validated with the broadcasting rule before any numerical work so
that incompatible shapes surface as `ShapeError` rather than a NumPy error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Union

import numpy as np

from ....domain._errors import ShapeError
from .._shape_and_indexing import broadcast_shapes

if TYPE_CHECKING:  # pragma: no cover
    from .._tensor import Tensor

Number = Union[int, float]


class TensorMixinArithmetic:
    """
    Binary arithmetic operations for the concrete Tensor implementation.

    Notes
    -----
    - Methods assume the host class provides ``_view()``, ``_wrap()``, and
      ``_coerce()``.
    - ``int64`` operands stay ``int64`` for ``add``/``sub``/``mul``; ``div``
      always produces ``float64``.
    """

    def _binary(
        self: "Tensor",
        other: Union["Tensor", Number],
        op: Callable[[np.ndarray, np.ndarray], np.ndarray],
    ) -> "Tensor":
        w = self._coerce(other)
        broadcast_shapes(self.shape, w.shape)
        return self._wrap(op(self._view(), w._view()))

    def add(self: "Tensor", other: Union["Tensor", Number]) -> "Tensor":
        """
        Elementwise ``self + other`` with broadcasting.
        """
        return self._binary(other, np.add)

    def sub(self: "Tensor", other: Union["Tensor", Number]) -> "Tensor":
        """
        Elementwise ``self - other`` with broadcasting.
        """
        return self._binary(other, np.subtract)

    def mul(self: "Tensor", other: Union["Tensor", Number]) -> "Tensor":
        """
        Elementwise ``self * other`` with broadcasting.
        """
        return self._binary(other, np.multiply)

    def div(self: "Tensor", other: Union["Tensor", Number]) -> "Tensor":
        """
        Elementwise true division ``self / other`` with broadcasting.

        Notes
        -----
        Division by zero follows IEEE-754 (``inf``/``nan``) as in NumPy.
        """
        return self._binary(other, np.true_divide)

    def matmul(self: "Tensor", other: "Tensor") -> "Tensor":
        """
        Batched matrix multiplication.

        Both operands must have at least two dimensions. Leading (batch)
        dimensions are broadcast while the trailing two dimensions are kept,
        and the inner dimensions must agree.

        Parameters
        ----------
        other : Tensor
            Right-hand operand of shape ``(..., k, n)``.

        Returns
        -------
        Tensor
            Tensor of shape ``batch + (m, n)`` where ``batch`` is the
            broadcast of both operands' leading dimensions.

        Raises
        ------
        ShapeError
            If an operand has fewer than two dimensions, the batch shapes do
            not broadcast, or ``self.shape[-1] != other.shape[-2]``.
        """
        w = self._coerce(other)
        if self.ndim < 2 or w.ndim < 2:
            raise ShapeError(
                f"matmul requires operands with ndim >= 2, got {self.shape} and {w.shape}",
                shapes=(self.shape, w.shape),
            )
        if self.shape[-1] != w.shape[-2]:
            raise ShapeError(
                f"matmul inner dimensions differ: {self.shape} @ {w.shape}",
                shapes=(self.shape, w.shape),
            )

        s0, s1 = broadcast_shapes(self.shape, w.shape, keep_last=2)
        a = np.broadcast_to(self._view(), s0)
        b = np.broadcast_to(w._view(), s1)
        return self._wrap(np.matmul(a, b))

    # ------------------------------------------------------------------
    # Operator protocol
    # ------------------------------------------------------------------
    def __add__(self, other):
        return self.add(other)

    def __radd__(self, other):
        return self._coerce(other).add(self)

    def __sub__(self, other):
        return self.sub(other)

    def __rsub__(self, other):
        return self._coerce(other).sub(self)

    def __mul__(self, other):
        return self.mul(other)

    def __rmul__(self, other):
        return self._coerce(other).mul(self)

    def __truediv__(self, other):
        return self.div(other)

    def __rtruediv__(self, other):
        return self._coerce(other).div(self)

    def __matmul__(self, other):
        return self.matmul(other)

    def __neg__(self):
        return self.neg()

    def __pow__(self, p):
        return self.pow(p)
