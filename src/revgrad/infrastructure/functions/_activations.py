"""
Differentiable activation functions: ``sigmoid``, ``relu``, ``softmax``.

Notes
-----
- ``sigmoid`` is evaluated as ``0.5 + 0.5 * tanh(0.5 * x)``, which does not
  overflow for large ``|x|``.
- ``softmax`` subtracts the maximum along its axis before exponentiating.
"""

from __future__ import annotations

import weakref
from typing import Any, List

from ...domain._function import Forwarder
from ..autograd._function import Function
from ..autograd._variable import Variable
from ._arithmetic import mul, sub
from ._reduction import sum


class Sigmoid(Forwarder):
    """
    Logistic sigmoid; ``dx = gy * y * (1 - y)``.
    """

    def forward(self, x: Variable) -> List[Variable]:
        self.x = x
        y = Variable(x.data.mul_c(0.5).tanh().mul_c(0.5).add_c(0.5))
        self.y = weakref.ref(y)
        return [y]

    def backward(self, gy: Variable) -> List[Variable]:
        y = self.y()
        if y is None:
            y = sigmoid(self.x)
        return [mul(mul(gy, y), sub(1.0, y))]


class ReLU(Forwarder):
    """
    Rectified linear unit ``max(x, 0)``; ``dx = gy * 1[x > 0]``.
    """

    def forward(self, x: Variable) -> List[Variable]:
        self.mask = x.data.greater_c(0.0)
        return [Variable(x.data.maximum_c(0.0))]

    def backward(self, gy: Variable) -> List[Variable]:
        return [mul(gy, Variable(self.mask))]


class Softmax(Forwarder):
    """
    Softmax along `axis` (default 1, i.e. row-wise for ``(N, C)`` inputs).

    Backward:

        gx = y * gy
        dx = gx - y * sum(gx, axis, keepdims=True)
    """

    def __init__(self, axis: int = 1) -> None:
        self.axis = axis

    def forward(self, x: Variable) -> List[Variable]:
        self.x = x
        shifted = x.data.sub(x.data.max(self.axis, keepdims=True))
        e = shifted.exp()
        y = Variable(e.div(e.sum(self.axis, keepdims=True)))
        self.y = weakref.ref(y)
        return [y]

    def backward(self, gy: Variable) -> List[Variable]:
        y = self.y()
        if y is None:
            y = softmax(self.x, self.axis)
        gx = mul(y, gy)
        return [sub(gx, mul(y, sum(gx, self.axis, keepdims=True)))]


def sigmoid(x: Any) -> Variable:
    return Function(Sigmoid()).apply_first(x)


def relu(x: Any) -> Variable:
    return Function(ReLU()).apply_first(x)


def softmax(x: Any, axis: int = 1) -> Variable:
    """
    Differentiable, numerically stable softmax along `axis`.
    """
    return Function(Softmax(axis)).apply_first(x)
