"""
Elementwise unary and tensor-scalar operations.

This module defines :class:`TensorMixinUnary`, covering the elementwise
transcendental functions (``exp``, ``log``, ``sin``, ``cos``, ``tanh``,
``sqrt``), power, clamping, and the tensor-with-constant helpers
(``add_c``, ``sub_c``, ``mul_c``) used throughout the operation library.

Transcendental functions always produce ``float64`` tensors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Union

import numpy as np

if TYPE_CHECKING:  # pragma: no cover
    from .._tensor import Tensor

Number = Union[int, float]


class TensorMixinUnary:
    """
    Elementwise unary operations for the concrete Tensor implementation.
    """

    def _float_map(self: "Tensor", fn: Callable[[np.ndarray], np.ndarray]) -> "Tensor":
        return self._wrap(fn(self._view().astype(np.float64, copy=False)))

    def neg(self: "Tensor") -> "Tensor":
        """
        Elementwise negation.
        """
        return self._wrap(np.negative(self._view()))

    def add_c(self: "Tensor", c: Number) -> "Tensor":
        """
        Add the constant `c` to every element.
        """
        return self._wrap(self._view() + c)

    def sub_c(self: "Tensor", c: Number) -> "Tensor":
        """
        Subtract the constant `c` from every element.
        """
        return self._wrap(self._view() - c)

    def mul_c(self: "Tensor", c: Number) -> "Tensor":
        """
        Multiply every element by the constant `c`.
        """
        return self._wrap(self._view() * c)

    def pow(self: "Tensor", p: Number) -> "Tensor":
        """
        Raise every element to the power `p`.

        Parameters
        ----------
        p : int or float
            Exponent. The result is ``float64``.

        Returns
        -------
        Tensor
            Tensor of ``x ** p``.
        """
        return self._float_map(lambda a: np.power(a, float(p)))

    def exp(self: "Tensor") -> "Tensor":
        return self._float_map(np.exp)

    def log(self: "Tensor") -> "Tensor":
        return self._float_map(np.log)

    def sin(self: "Tensor") -> "Tensor":
        return self._float_map(np.sin)

    def cos(self: "Tensor") -> "Tensor":
        return self._float_map(np.cos)

    def tanh(self: "Tensor") -> "Tensor":
        return self._float_map(np.tanh)

    def sqrt(self: "Tensor") -> "Tensor":
        return self._float_map(np.sqrt)

    def abs(self: "Tensor") -> "Tensor":
        return self._wrap(np.abs(self._view()))

    def clip(self: "Tensor", lo: Number, hi: Number) -> "Tensor":
        """
        Clamp every element into ``[lo, hi]``.
        """
        return self._wrap(np.clip(self._view(), lo, hi))

    def maximum_c(self: "Tensor", c: Number) -> "Tensor":
        """
        Elementwise ``max(x, c)``.
        """
        return self._wrap(np.maximum(self._view(), c))

    def greater_c(self: "Tensor", c: Number) -> "Tensor":
        """
        ``float64`` indicator of ``x > c``.
        """
        return self.mask(lambda a: a > c)

    def mask(self: "Tensor", pred: Callable[[np.ndarray], np.ndarray]) -> "Tensor":
        """
        Return a ``float64`` indicator tensor of ``pred`` applied elementwise.

        Parameters
        ----------
        pred : Callable[[np.ndarray], np.ndarray]
            Vectorized predicate returning a boolean array, for example
            ``lambda a: a > 0``.

        Returns
        -------
        Tensor
            Tensor holding 1.0 where the predicate holds and 0.0 elsewhere.
        """
        return self._wrap(np.asarray(pred(self._view()), dtype=np.float64))
