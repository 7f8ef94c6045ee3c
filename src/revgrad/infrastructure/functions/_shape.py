"""
Differentiable shape and indexing operations.

Operations
----------
- ``reshape`` / ``transpose``: structural; backward applies the inverse.
- ``broadcast_to`` / ``sum_to``: mutual duals used to undo broadcasting.
- ``concat`` / ``split``: mutual duals along one axis.
- ``get_item`` / ``get_item_grad``: gather and its scatter-add adjoint, both
  along the same axis.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Union

import numpy as np

from ...domain._errors import ConfigurationError
from ...domain._function import Forwarder
from ..autograd._function import Function
from ..autograd._variable import Variable, as_variable
from ..tensor import Tensor
from ..tensor._shape_and_indexing import normalize_axis, normalize_permutation


def _as_shape(shape: Union[int, Sequence[int]]) -> tuple:
    if isinstance(shape, int):
        return (shape,)
    return tuple(int(d) for d in shape)


def _as_indices(indices: Union[int, Sequence[int]]) -> List[int]:
    if isinstance(indices, (int, np.integer)):
        return [int(indices)]
    if isinstance(indices, (Variable, Tensor)):
        data = indices.data if isinstance(indices, Variable) else indices
        return [int(i) for i in data.to_numpy().reshape(-1)]
    return [int(i) for i in indices]


class Reshape(Forwarder):
    """
    Size-preserving reshape; backward reshapes `gy` to the input shape.
    """

    def __init__(self, shape: Sequence[int]) -> None:
        self.shape = _as_shape(shape)

    def forward(self, x: Variable) -> List[Variable]:
        self.x_shape = x.shape
        return [Variable(x.data.reshape(self.shape))]

    def backward(self, gy: Variable) -> List[Variable]:
        return [reshape(gy, self.x_shape)]


class Transpose(Forwarder):
    """
    Axis permutation; backward applies the inverse permutation.
    """

    def __init__(self, axes: Optional[Sequence[int]] = None) -> None:
        self.axes = None if axes is None else tuple(int(a) for a in axes)

    def forward(self, x: Variable) -> List[Variable]:
        self.perm = normalize_permutation(self.axes, x.ndim)
        return [Variable(x.data.transpose(self.perm))]

    def backward(self, gy: Variable) -> List[Variable]:
        inverse = tuple(int(i) for i in np.argsort(self.perm))
        return [transpose(gy, inverse)]


class BroadcastTo(Forwarder):
    """
    Expand `x` to `shape`; backward sums `gy` back with `sum_to`.
    """

    def __init__(self, shape: Sequence[int]) -> None:
        self.shape = _as_shape(shape)

    def forward(self, x: Variable) -> List[Variable]:
        self.x_shape = x.shape
        return [Variable(x.data.broadcast_to(self.shape))]

    def backward(self, gy: Variable) -> List[Variable]:
        return [sum_to(gy, self.x_shape)]


class SumTo(Forwarder):
    """
    Sum `x` along its broadcast axes down to `shape`; backward broadcasts.
    """

    def __init__(self, shape: Sequence[int]) -> None:
        self.shape = _as_shape(shape)

    def forward(self, x: Variable) -> List[Variable]:
        self.x_shape = x.shape
        return [Variable(x.data.sum_to(self.shape))]

    def backward(self, gy: Variable) -> List[Variable]:
        return [broadcast_to(gy, self.x_shape)]


class Concat(Forwarder):
    """
    Join inputs along `axis`; backward splits `gy` into the input sizes.
    """

    def __init__(self, axis: int = 0) -> None:
        self.axis = axis

    def forward(self, *xs: Variable) -> List[Variable]:
        if len(xs) == 0:
            raise ConfigurationError("concat requires at least one variable")
        self.ax = normalize_axis(self.axis, xs[0].ndim)
        self.sizes = [x.shape[self.ax] for x in xs]
        return [Variable(Tensor.concat([x.data for x in xs], self.ax))]

    def backward(self, gy: Variable) -> List[Variable]:
        return split(gy, self.sizes, self.ax)


class Split(Forwarder):
    """
    Slice `x` into pieces along `axis`.

    Backward concatenates the piece gradients; a piece without a gradient
    contributes zeros.
    """

    def __init__(self, sizes: Union[int, Sequence[int]], axis: int = 0) -> None:
        self.sizes = sizes
        self.axis = axis

    def forward(self, x: Variable) -> List[Variable]:
        self.ax = normalize_axis(self.axis, x.ndim)
        pieces = x.data.split(self.sizes, self.ax)
        self.shapes = [p.shape for p in pieces]
        return [Variable(p) for p in pieces]

    def backward(self, *gys: Optional[Variable]) -> List[Variable]:
        filled = [
            gy if gy is not None else Variable(Tensor.zeros(shape))
            for gy, shape in zip(gys, self.shapes)
        ]
        return [concat(filled, self.ax)]


class GetItem(Forwarder):
    """
    Gather slices of `x` at `indices` along `axis`.

    Backward scatters `gy` into zeros shaped like `x` along the same axis
    (repeated indices accumulate).
    """

    def __init__(self, indices: Union[int, Sequence[int]], axis: int = 0) -> None:
        self.indices = _as_indices(indices)
        self.axis = axis

    def forward(self, x: Variable) -> List[Variable]:
        self.x_shape = x.shape
        return [Variable(x.data.take(self.indices, self.axis))]

    def backward(self, gy: Variable) -> List[Variable]:
        return [get_item_grad(gy, self.indices, self.x_shape, self.axis)]


class GetItemGrad(Forwarder):
    """
    Scatter-add `gy` into zeros of `in_shape`; the adjoint of `GetItem`.

    Its own backward is the gather `GetItem`, which makes `get_item`
    differentiable to any order.
    """

    def __init__(
        self, indices: Sequence[int], in_shape: Sequence[int], axis: int = 0
    ) -> None:
        self.indices = _as_indices(indices)
        self.in_shape = _as_shape(in_shape)
        self.axis = axis

    def forward(self, gy: Variable) -> List[Variable]:
        out = Tensor.zeros(self.in_shape)
        out.scatter_add(gy.data, self.indices, self.axis)
        return [Variable(out)]

    def backward(self, ggx: Variable) -> List[Variable]:
        return [get_item(ggx, self.indices, self.axis)]


def reshape(x: Any, shape: Union[int, Sequence[int]]) -> Variable:
    """
    Differentiable reshape. Always records a new node, even for the same shape.
    """
    x = as_variable(x)
    return Function(Reshape(shape)).apply_first(x)


def transpose(x: Any, axes: Optional[Sequence[int]] = None) -> Variable:
    """
    Differentiable axis permutation. ``axes=None`` reverses the axes.
    """
    return Function(Transpose(axes)).apply_first(x)


def swap_last(x: Any) -> Variable:
    """
    Transpose the last two axes (the matrix transpose of a batch).
    """
    x = as_variable(x)
    perm = list(range(x.ndim))
    perm[-1], perm[-2] = perm[-2], perm[-1]
    return transpose(x, perm)


def broadcast_to(x: Any, shape: Sequence[int]) -> Variable:
    """
    Differentiable broadcast. Returns `x` unchanged when the shape matches.
    """
    x = as_variable(x)
    if x.shape == _as_shape(shape):
        return x
    return Function(BroadcastTo(shape)).apply_first(x)


def sum_to(x: Any, shape: Sequence[int]) -> Variable:
    """
    Differentiable reduction along broadcast axes down to `shape`.
    Returns `x` unchanged when the shape matches.
    """
    x = as_variable(x)
    if x.shape == _as_shape(shape):
        return x
    return Function(SumTo(shape)).apply_first(x)


def concat(xs: Sequence[Any], axis: int = 0) -> Variable:
    """
    Differentiable concatenation along `axis`.

    Raises
    ------
    ConfigurationError
        If `xs` is empty.
    """
    if len(xs) == 0:
        raise ConfigurationError("concat requires at least one variable")
    return Function(Concat(axis)).apply_first(*xs)


def split(x: Any, sizes: Union[int, Sequence[int]], axis: int = 0) -> List[Variable]:
    """
    Differentiable split into pieces along `axis`.

    Parameters
    ----------
    sizes : int or Sequence[int]
        Number of equal pieces, or the size of each piece.
    """
    return Function(Split(sizes, axis)).apply(x)


def get_item(x: Any, indices: Union[int, Sequence[int]], axis: int = 0) -> Variable:
    """
    Differentiable gather of `indices` along `axis`.

    The gathered axis is kept: ``get_item(x, 1)`` on a ``(3, 4)`` input
    returns shape ``(1, 4)``.
    """
    return Function(GetItem(indices, axis)).apply_first(x)


def get_item_grad(
    gy: Any, indices: Sequence[int], in_shape: Sequence[int], axis: int = 0
) -> Variable:
    """
    Differentiable scatter-add of `gy` into zeros of `in_shape`.
    """
    return Function(GetItemGrad(indices, in_shape, axis)).apply_first(gy)
