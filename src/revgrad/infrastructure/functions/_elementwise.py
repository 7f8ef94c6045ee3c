"""
Differentiable elementwise transcendental functions and clipping.

Operations whose derivative is most cheaply expressed through their own
output (`exp`, `tanh`) keep a weak reference to that output variable. The
reference cannot be dead while backward runs through the node, since the
output is then held either by the caller (the root) or by a consumer's
inputs.
"""

from __future__ import annotations

import weakref
from typing import Any, List

from ...domain._function import Forwarder
from ..autograd._function import Function
from ..autograd._variable import Variable
from ._arithmetic import mul, neg, sub


class Exp(Forwarder):
    """
    Elementwise exponential: ``y = exp(x)``; ``dx = gy * y``.
    """

    def forward(self, x: Variable) -> List[Variable]:
        self.x = x
        y = Variable(x.data.exp())
        self.y = weakref.ref(y)
        return [y]

    def backward(self, gy: Variable) -> List[Variable]:
        y = self.y()
        if y is None:
            y = exp(self.x)
        return [mul(gy, y)]


class Log(Forwarder):
    """
    Natural logarithm: ``y = log(x)``; ``dx = gy / x``.
    """

    def forward(self, x: Variable) -> List[Variable]:
        self.x = x
        return [Variable(x.data.log())]

    def backward(self, gy: Variable) -> List[Variable]:
        from ._arithmetic import div

        return [div(gy, self.x)]


class Sin(Forwarder):
    """
    Sine: ``y = sin(x)``; ``dx = gy * cos(x)``.
    """

    def forward(self, x: Variable) -> List[Variable]:
        self.x = x
        return [Variable(x.data.sin())]

    def backward(self, gy: Variable) -> List[Variable]:
        return [mul(gy, cos(self.x))]


class Cos(Forwarder):
    """
    Cosine: ``y = cos(x)``; ``dx = -gy * sin(x)``.
    """

    def forward(self, x: Variable) -> List[Variable]:
        self.x = x
        return [Variable(x.data.cos())]

    def backward(self, gy: Variable) -> List[Variable]:
        return [mul(gy, neg(sin(self.x)))]


class Tanh(Forwarder):
    """
    Hyperbolic tangent: ``y = tanh(x)``; ``dx = gy * (1 - y**2)``.
    """

    def forward(self, x: Variable) -> List[Variable]:
        self.x = x
        y = Variable(x.data.tanh())
        self.y = weakref.ref(y)
        return [y]

    def backward(self, gy: Variable) -> List[Variable]:
        y = self.y()
        if y is None:
            y = tanh(self.x)
        return [mul(gy, sub(1.0, mul(y, y)))]


class Clip(Forwarder):
    """
    Clamp into ``[lo, hi]``; the gradient passes only where
    ``lo <= x <= hi``.
    """

    def __init__(self, lo: float, hi: float) -> None:
        self.lo, self.hi = float(lo), float(hi)

    def forward(self, x: Variable) -> List[Variable]:
        self.mask = x.data.mask(lambda a: (a >= self.lo) & (a <= self.hi))
        return [Variable(x.data.clip(self.lo, self.hi))]

    def backward(self, gy: Variable) -> List[Variable]:
        return [mul(gy, Variable(self.mask))]


def exp(x: Any) -> Variable:
    return Function(Exp()).apply_first(x)


def log(x: Any) -> Variable:
    return Function(Log()).apply_first(x)


def sin(x: Any) -> Variable:
    return Function(Sin()).apply_first(x)


def cos(x: Any) -> Variable:
    return Function(Cos()).apply_first(x)


def tanh(x: Any) -> Variable:
    return Function(Tanh()).apply_first(x)


def clip(x: Any, lo: float, hi: float) -> Variable:
    """
    Differentiable clamp of `x` into ``[lo, hi]``.
    """
    return Function(Clip(lo, hi)).apply_first(x)
