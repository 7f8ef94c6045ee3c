"""
Differentiable arithmetic operations.

This module contains the broadcasting binary operations (`add`, `sub`,
`mul`, `div`), negation, and powers. Each operation is a `Forwarder`
subclass paired with a functional wrapper that builds the graph node.

Backward rules reduce the upstream gradient back to each operand's shape with
`sum_to` whenever the operands were broadcast against each other.
"""

from __future__ import annotations

from typing import Any, List

from ...domain._function import Forwarder
from ..autograd._function import Function
from ..autograd._variable import Variable


def _reduce_to_operands(gx0: Variable, gx1: Variable, s0, s1) -> List[Variable]:
    from ._shape import sum_to

    if s0 != s1:
        gx0, gx1 = sum_to(gx0, s0), sum_to(gx1, s1)
    return [gx0, gx1]


class Neg(Forwarder):
    """
    Elementwise negation: ``y = -x``; ``dx = -gy``.
    """

    def forward(self, x: Variable) -> List[Variable]:
        return [Variable(x.data.neg())]

    def backward(self, gy: Variable) -> List[Variable]:
        return [neg(gy)]


class Add(Forwarder):
    """
    Broadcasting addition: ``y = x0 + x1``.

    Backward:

        dx0 = sum_to(gy, x0.shape)
        dx1 = sum_to(gy, x1.shape)
    """

    def forward(self, x0: Variable, x1: Variable) -> List[Variable]:
        self.x0_shape, self.x1_shape = x0.shape, x1.shape
        return [Variable(x0.data.add(x1.data))]

    def backward(self, gy: Variable) -> List[Variable]:
        return _reduce_to_operands(gy, gy, self.x0_shape, self.x1_shape)


class Sub(Forwarder):
    """
    Broadcasting subtraction: ``y = x0 - x1``.
    """

    def forward(self, x0: Variable, x1: Variable) -> List[Variable]:
        self.x0_shape, self.x1_shape = x0.shape, x1.shape
        return [Variable(x0.data.sub(x1.data))]

    def backward(self, gy: Variable) -> List[Variable]:
        return _reduce_to_operands(gy, neg(gy), self.x0_shape, self.x1_shape)


class Mul(Forwarder):
    """
    Broadcasting multiplication: ``y = x0 * x1``.

    Backward:

        dx0 = sum_to(gy * x1, x0.shape)
        dx1 = sum_to(gy * x0, x1.shape)
    """

    def forward(self, x0: Variable, x1: Variable) -> List[Variable]:
        self.x0, self.x1 = x0, x1
        return [Variable(x0.data.mul(x1.data))]

    def backward(self, gy: Variable) -> List[Variable]:
        return _reduce_to_operands(
            mul(gy, self.x1), mul(gy, self.x0), self.x0.shape, self.x1.shape
        )


class Div(Forwarder):
    """
    Broadcasting division: ``y = x0 / x1``.

    Backward:

        dx0 = sum_to(gy / x1, x0.shape)
        dx1 = sum_to(gy * (-x0 / x1**2), x1.shape)
    """

    def forward(self, x0: Variable, x1: Variable) -> List[Variable]:
        self.x0, self.x1 = x0, x1
        return [Variable(x0.data.div(x1.data))]

    def backward(self, gy: Variable) -> List[Variable]:
        x0, x1 = self.x0, self.x1
        gx0 = div(gy, x1)
        gx1 = mul(gy, div(neg(x0), pow(x1, 2)))
        return _reduce_to_operands(gx0, gx1, x0.shape, x1.shape)


class Pow(Forwarder):
    """
    Elementwise power with a constant exponent: ``y = x ** c``.

    Backward:

        dx = gy * c * x ** (c - 1)
    """

    def __init__(self, c: float) -> None:
        self.c = float(c)

    def forward(self, x: Variable) -> List[Variable]:
        self.x = x
        return [Variable(x.data.pow(self.c))]

    def backward(self, gy: Variable) -> List[Variable]:
        return [mul(gy, mul(pow(self.x, self.c - 1), self.c))]


class Square(Forwarder):
    """
    Elementwise square: ``y = x ** 2``; ``dx = 2 * x * gy``.
    """

    def forward(self, x: Variable) -> List[Variable]:
        self.x = x
        return [Variable(x.data.mul(x.data))]

    def backward(self, gy: Variable) -> List[Variable]:
        return [mul(gy, mul(self.x, 2.0))]


def neg(x: Any) -> Variable:
    return Function(Neg()).apply_first(x)


def add(x0: Any, x1: Any) -> Variable:
    """
    Differentiable broadcasting ``x0 + x1``.
    """
    return Function(Add()).apply_first(x0, x1)


def sub(x0: Any, x1: Any) -> Variable:
    """
    Differentiable broadcasting ``x0 - x1``.
    """
    return Function(Sub()).apply_first(x0, x1)


def mul(x0: Any, x1: Any) -> Variable:
    """
    Differentiable broadcasting ``x0 * x1``.
    """
    return Function(Mul()).apply_first(x0, x1)


def div(x0: Any, x1: Any) -> Variable:
    """
    Differentiable broadcasting ``x0 / x1``.
    """
    return Function(Div()).apply_first(x0, x1)


def pow(x: Any, c: float) -> Variable:
    """
    Differentiable ``x ** c`` for a constant exponent `c`.
    """
    return Function(Pow(c)).apply_first(x)


def square(x: Any) -> Variable:
    return Function(Square()).apply_first(x)
