"""
Differentiable matrix products: batched ``matmul`` and the fused ``linear``.

``ᵀ`` below denotes swapping the last two axes.

- ``matmul(x, w)``: ``dx = gy @ wᵀ``, ``dw = xᵀ @ gy``, each summed back to
  the operand shape when the batch dimensions were broadcast.
- ``linear(x, w, b)``: ``y = x @ w + b`` with the bias gradient reduced to
  the bias shape.
"""

from __future__ import annotations

from typing import Any, List, Optional

from ...domain._function import Forwarder
from ..autograd._function import Function
from ..autograd._variable import Variable
from ._shape import sum_to, swap_last


class MatMul(Forwarder):
    """
    Batched matrix multiplication with broadcast batch dimensions.
    """

    def forward(self, x: Variable, w: Variable) -> List[Variable]:
        self.x, self.w = x, w
        return [Variable(x.data.matmul(w.data))]

    def backward(self, gy: Variable) -> List[Variable]:
        gx = sum_to(matmul(gy, swap_last(self.w)), self.x.shape)
        gw = sum_to(matmul(swap_last(self.x), gy), self.w.shape)
        return [gx, gw]


class Linear(Forwarder):
    """
    Affine map ``y = x @ w (+ b)``.

    Backward:

        dx = gy @ wᵀ
        dw = xᵀ @ gy
        db = sum_to(gy, b.shape)
    """

    def forward(self, x: Variable, w: Variable, b: Optional[Variable] = None) -> List[Variable]:
        self.x, self.w, self.b_shape = x, w, None if b is None else b.shape
        y = x.data.matmul(w.data)
        if b is not None:
            y = y.add(b.data)
        return [Variable(y)]

    def backward(self, gy: Variable) -> List[Variable]:
        gx = sum_to(matmul(gy, swap_last(self.w)), self.x.shape)
        gw = sum_to(matmul(swap_last(self.x), gy), self.w.shape)
        if self.b_shape is None:
            return [gx, gw]
        return [gx, gw, sum_to(gy, self.b_shape)]


def matmul(x: Any, w: Any) -> Variable:
    """
    Differentiable batched matrix product ``x @ w``.
    """
    return Function(MatMul()).apply_first(x, w)


def linear(x: Any, w: Any, b: Optional[Any] = None) -> Variable:
    """
    Differentiable affine map ``x @ w + b``; `b` may be omitted.
    """
    if b is None:
        return Function(Linear()).apply_first(x, w)
    return Function(Linear()).apply_first(x, w, b)
