"""
Differentiable reductions: ``sum``, ``mean``, ``variance``, ``max``, ``min``.

For a partial reduction without ``keepdims`` the upstream gradient is first
reshaped to insert size-1 axes at the reduced positions, and only then
broadcast back to the input shape. Broadcasting directly would be ambiguous
when several axes are reduced.

``max``/``min`` route the gradient through an indicator mask built with
``is_close(x, y)``, so exact ties share the gradient.
"""

from __future__ import annotations

import builtins
from typing import Any, List

from ...domain._function import Forwarder
from ..autograd._function import Function
from ..autograd._variable import Variable
from ..tensor._shape_and_indexing import Axes, keep_dims_shape, normalize_axes, shape_size
from ._arithmetic import mul, sub
from ._shape import broadcast_to, reshape


class _Reduce(Forwarder):
    """
    Shared bookkeeping for reductions over an axis set.
    """

    def __init__(self, axes: Axes = None, keepdims: bool = False) -> None:
        self.axes = axes
        self.keepdims = bool(keepdims)

    def _prepare(self, x: Variable) -> None:
        self.x_shape = x.shape
        self.axes_ = normalize_axes(self.axes, x.ndim)
        self.count = shape_size(x.shape[a] for a in self.axes_)

    def _expand(self, gy: Variable) -> Variable:
        gy = reshape(gy, keep_dims_shape(self.x_shape, self.axes_))
        return broadcast_to(gy, self.x_shape)


class Sum(_Reduce):
    """
    Sum along `axes` (all axes when empty); backward broadcasts `gy` back.
    """

    def forward(self, x: Variable) -> List[Variable]:
        self._prepare(x)
        return [Variable(x.data.sum(self.axes_, keepdims=self.keepdims))]

    def backward(self, gy: Variable) -> List[Variable]:
        return [self._expand(gy)]


class Mean(_Reduce):
    """
    Mean along `axes`; ``dx = broadcast(gy) / count``.
    """

    def forward(self, x: Variable) -> List[Variable]:
        self._prepare(x)
        return [Variable(x.data.mean(self.axes_, keepdims=self.keepdims))]

    def backward(self, gy: Variable) -> List[Variable]:
        return [mul(self._expand(gy), 1.0 / builtins.max(self.count, 1))]


class Variance(_Reduce):
    """
    Population variance along `axes`: ``mean((x - mu)**2)``.

    Backward:

        dx = broadcast(gy) * 2 / count * (x - mu)
    """

    def forward(self, x: Variable) -> List[Variable]:
        self._prepare(x)
        self.x = x
        return [Variable(x.data.variance(self.axes_, keepdims=self.keepdims))]

    def backward(self, gy: Variable) -> List[Variable]:
        mu = mean(self.x, self.axes_, keepdims=True)
        centered = sub(self.x, mu)
        return [mul(mul(self._expand(gy), centered), 2.0 / builtins.max(self.count, 1))]


class _Extremum(_Reduce):
    def _reduce(self, x: Variable):
        raise NotImplementedError

    def forward(self, x: Variable) -> List[Variable]:
        self._prepare(x)
        y = self._reduce(x)
        y_kd = y.reshape(keep_dims_shape(self.x_shape, self.axes_))
        self.mask = x.data.is_close(y_kd.broadcast_to(self.x_shape)).astype(float)
        out = y if self.keepdims else y.reshape(
            tuple(d for i, d in enumerate(self.x_shape) if i not in self.axes_)
        )
        return [Variable(out)]

    def backward(self, gy: Variable) -> List[Variable]:
        return [mul(self._expand(gy), Variable(self.mask))]


class Max(_Extremum):
    """
    Maximum along `axes`; the gradient flows to every element close to it.
    """

    def _reduce(self, x: Variable):
        return x.data.max(self.axes_, keepdims=True)


class Min(_Extremum):
    """
    Minimum along `axes`; the gradient flows to every element close to it.
    """

    def _reduce(self, x: Variable):
        return x.data.min(self.axes_, keepdims=True)


def sum(x: Any, axes: Axes = None, keepdims: bool = False) -> Variable:
    """
    Differentiable sum along `axes` (all axes when None or empty).
    """
    return Function(Sum(axes, keepdims)).apply_first(x)


def mean(x: Any, axes: Axes = None, keepdims: bool = False) -> Variable:
    """
    Differentiable mean along `axes` (all axes when None or empty).
    """
    return Function(Mean(axes, keepdims)).apply_first(x)


def variance(x: Any, axes: Axes = None, keepdims: bool = False) -> Variable:
    """
    Differentiable population variance along `axes`.
    """
    return Function(Variance(axes, keepdims)).apply_first(x)


def max(x: Any, axes: Axes = None, keepdims: bool = False) -> Variable:
    """
    Differentiable maximum along `axes` (global maximum by default).
    """
    return Function(Max(axes, keepdims)).apply_first(x)


def min(x: Any, axes: Axes = None, keepdims: bool = False) -> Variable:
    """
    Differentiable minimum along `axes` (global minimum by default).
    """
    return Function(Min(axes, keepdims)).apply_first(x)
