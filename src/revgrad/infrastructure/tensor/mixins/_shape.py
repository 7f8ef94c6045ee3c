"""
Shape, structural, and gather/scatter operations.

This module defines :class:`TensorMixinShape`, which implements the
operations that change the logical shape of a tensor or compose tensors
structurally:

- ``reshape``, ``flatten``, ``squeeze``, ``expand``, ``transpose``, ``flip``
- ``tile``, ``repeat``, ``tril``
- ``concat``, ``split``
- ``take`` (gather) and ``scatter_add`` (in-place scatter)
- ``broadcast``, ``broadcast_to``, ``sum_to``
- ``onehot``

Design notes
------------
- Tensors own their buffers, so every operation except ``scatter_add``
  returns a fresh tensor holding a copy of the data.
- Tensor construction goes through the host class (``self._wrap`` /
  ``cls._wrap``) to avoid importing the concrete Tensor here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple, Union

import numpy as np

from ....domain._errors import ConfigurationError, ShapeError
from .._shape_and_indexing import (
    Axes,
    as_shape,
    broadcast_shapes,
    check_broadcast_to,
    normalize_axes,
    normalize_axis,
    normalize_indices,
    normalize_permutation,
    shape_size,
    sum_to_axes,
)

if TYPE_CHECKING:  # pragma: no cover
    from .._tensor import Tensor


def _shape_args(shape: tuple) -> Tuple[int, ...]:
    # Accept both f(2, 3) and f((2, 3)).
    if len(shape) == 1 and isinstance(shape[0], (tuple, list)):
        return tuple(shape[0])
    return tuple(shape)


def _index_list(indices) -> List[int]:
    if hasattr(indices, "to_numpy"):
        indices = indices.to_numpy()
    return [int(i) for i in np.asarray(indices).reshape(-1)]


class TensorMixinShape:
    """
    Shape and structural operations for the concrete Tensor implementation.
    """

    # ------------------------------------------------------------------
    # Shape transforms
    # ------------------------------------------------------------------
    def reshape(self: "Tensor", *shape) -> "Tensor":
        """
        Return a tensor with the same elements and a new shape.

        One dimension may be ``-1``, in which case it is inferred.

        Raises
        ------
        ShapeError
            If the new shape does not hold the same number of elements.
        """
        dims = [int(d) for d in _shape_args(shape)]
        if dims.count(-1) > 1:
            raise ShapeError(f"only one dimension may be -1, got {tuple(dims)}", shapes=(dims,))
        if -1 in dims:
            known = shape_size(d for d in dims if d != -1)
            if known == 0 or self.size % known != 0:
                raise ShapeError(
                    f"cannot reshape {self.shape} to {tuple(dims)}",
                    shapes=(self.shape, dims),
                )
            dims[dims.index(-1)] = self.size // known

        new_shape = as_shape(dims)
        if shape_size(new_shape) != self.size:
            raise ShapeError(
                f"cannot reshape {self.shape} to {new_shape}",
                shapes=(self.shape, new_shape),
            )
        return type(self)(new_shape, self.data, dtype=self.dtype)

    def flatten(self: "Tensor") -> "Tensor":
        """
        Return a 1-D tensor holding every element in row-major order.
        """
        return self.reshape(self.size)

    def squeeze(self: "Tensor", axes: Axes = None) -> "Tensor":
        """
        Remove size-1 axes.

        Parameters
        ----------
        axes : int, Sequence[int] or None, optional
            Axes to remove. None removes every size-1 axis.

        Raises
        ------
        ShapeError
            If a requested axis does not have size 1.
        """
        if axes is None:
            return self.reshape(tuple(d for d in self.shape if d != 1))

        axes_ = normalize_axes(axes, self.ndim)
        for ax in axes_:
            if self.shape[ax] != 1:
                raise ShapeError(
                    f"cannot squeeze axis={ax} with size {self.shape[ax]}",
                    shapes=(self.shape,),
                    axis=ax,
                )
        return self.reshape(tuple(d for i, d in enumerate(self.shape) if i not in axes_))

    def expand(self: "Tensor", axis: int) -> "Tensor":
        """
        Insert a size-1 axis at position `axis` (``-1`` appends).
        """
        ax = normalize_axis(axis, self.ndim + 1)
        shape = list(self.shape)
        shape.insert(ax, 1)
        return self.reshape(tuple(shape))

    def transpose(self: "Tensor", *axes) -> "Tensor":
        """
        Permute the axes. With no arguments the axes are reversed.

        Raises
        ------
        ShapeError
            If `axes` is not a permutation of the tensor's axes.
        """
        perm = normalize_permutation(_shape_args(axes), self.ndim)
        return self._wrap(np.transpose(self._view(), perm))

    @property
    def T(self: "Tensor") -> "Tensor":
        return self.transpose()

    def flip(self: "Tensor", axes: Axes = None) -> "Tensor":
        """
        Reverse the order of elements along `axes` (all axes by default).
        """
        axes_ = normalize_axes(axes, self.ndim)
        return self._wrap(np.flip(self._view(), axis=axes_))

    def tile(self: "Tensor", n: int, axis: int = 0) -> "Tensor":
        """
        Concatenate `n` copies of the tensor along `axis`.

        A scalar tile produces a 1-D tensor of length `n`.

        Raises
        ------
        ConfigurationError
            If ``n < 1``.
        """
        if n < 1:
            raise ConfigurationError(f"tile count must be >= 1, got {n}")
        if self.ndim == 0:
            return type(self).full((n,), self.item(), dtype=self.dtype)

        ax = normalize_axis(axis, self.ndim)
        reps = [1] * self.ndim
        reps[ax] = int(n)
        return self._wrap(np.tile(self._view(), reps))

    def repeat(self: "Tensor", n: int, axis: int = 0) -> "Tensor":
        """
        Repeat each element `n` times along `axis`.

        Raises
        ------
        ConfigurationError
            If ``n < 1``.
        """
        if n < 1:
            raise ConfigurationError(f"repeat count must be >= 1, got {n}")
        if self.ndim == 0:
            return type(self).full((n,), self.item(), dtype=self.dtype)

        ax = normalize_axis(axis, self.ndim)
        return self._wrap(np.repeat(self._view(), int(n), axis=ax))

    def tril(self: "Tensor", k: int = 0) -> "Tensor":
        """
        Zero the elements above the `k`-th diagonal of the last two axes.

        Tensors with fewer than two dimensions are returned as a copy.
        """
        if self.ndim < 2:
            return self.copy()
        return self._wrap(np.tril(self._view(), k))

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------
    @classmethod
    def concat(cls, tensors: Sequence["Tensor"], axis: int = 0) -> "Tensor":
        """
        Join tensors along an existing axis.

        Raises
        ------
        ConfigurationError
            If `tensors` is empty.
        ShapeError
            If ranks differ or a non-concatenated axis does not match.
        """
        if len(tensors) == 0:
            raise ConfigurationError("concat requires at least one tensor")

        first = tensors[0]
        ndim = first.ndim
        ax = normalize_axis(axis, ndim)
        for t in tensors[1:]:
            if t.ndim != ndim:
                raise ShapeError(
                    f"concat rank mismatch: {first.shape} vs {t.shape}",
                    shapes=(first.shape, t.shape),
                )
            for i in range(ndim):
                if i != ax and t.shape[i] != first.shape[i]:
                    raise ShapeError(
                        f"concat shape mismatch on axis={i}: {first.shape} vs {t.shape}",
                        shapes=(first.shape, t.shape),
                        axis=i,
                    )
        return cls._wrap(np.concatenate([t._view() for t in tensors], axis=ax))

    def split(self: "Tensor", sizes: Union[int, Sequence[int]], axis: int = 0) -> List["Tensor"]:
        """
        Split the tensor into pieces along `axis`.

        Parameters
        ----------
        sizes : int or Sequence[int]
            Either the number of equal pieces or the explicit size of each
            piece. Explicit sizes must sum to the axis length.
        axis : int, optional
            Axis to split. Defaults to 0.

        Returns
        -------
        list[Tensor]
            The pieces in order.

        Raises
        ------
        ShapeError
            If the axis cannot be divided as requested.
        """
        ax = normalize_axis(axis, self.ndim)
        dim = self.shape[ax]

        if isinstance(sizes, int):
            if sizes < 1 or dim % sizes != 0:
                raise ShapeError(
                    f"axis={ax} of size {dim} is not divisible into {sizes} pieces",
                    shapes=(self.shape,),
                    axis=ax,
                )
            sizes = [dim // sizes] * sizes

        sizes = [int(s) for s in sizes]
        if any(s < 0 for s in sizes) or sum(sizes) != dim:
            raise ShapeError(
                f"split sizes {tuple(sizes)} do not sum to axis={ax} size {dim}",
                shapes=(self.shape,),
                axis=ax,
            )

        bounds = np.cumsum(sizes)[:-1]
        return [self._wrap(p) for p in np.split(self._view(), bounds, axis=ax)]

    # ------------------------------------------------------------------
    # Gather / scatter
    # ------------------------------------------------------------------
    def take(self: "Tensor", indices, axis: int = 0) -> "Tensor":
        """
        Gather slices along `axis` at the given indices.

        Negative indices count from the end of the axis. The output has the
        input shape with ``shape[axis]`` replaced by ``len(indices)``.

        Raises
        ------
        ShapeError
            If `axis` or any index is out of range.
        """
        ax = normalize_axis(axis, self.ndim)
        idx = normalize_indices(_index_list(indices), self.shape[ax], ax)
        return self._wrap(np.take(self._view(), np.asarray(idx, dtype=np.int64), axis=ax))

    def scatter_add(self: "Tensor", src: "Tensor", indices, axis: int = 0) -> "Tensor":
        """
        Add the slices of `src` into this tensor at `indices` along `axis`.

        This is the only in-place operation of the algebra. Repeated indices
        accumulate.

        Parameters
        ----------
        src : Tensor
            Values to add. ``src.shape[axis]`` must equal ``len(indices)`` and
            every other axis must match this tensor.
        indices : Sequence[int]
            Destination positions along `axis`.
        axis : int, optional
            Axis to scatter along. Defaults to 0.

        Returns
        -------
        Tensor
            ``self``, after modification.

        Raises
        ------
        ShapeError
            If shapes or indices are incompatible.
        """
        ax = normalize_axis(axis, self.ndim)
        idx_list = _index_list(indices)
        if src.ndim != self.ndim or src.shape[ax] != len(idx_list):
            raise ShapeError(
                f"scatter_add source {src.shape} does not match {len(idx_list)} indices "
                f"on axis={ax} of {self.shape}",
                shapes=(self.shape, src.shape),
                axis=ax,
            )
        for i in range(self.ndim):
            if i != ax and src.shape[i] != self.shape[i]:
                raise ShapeError(
                    f"scatter_add shape mismatch on axis={i}: {self.shape} vs {src.shape}",
                    shapes=(self.shape, src.shape),
                    axis=i,
                )

        idx = np.asarray(normalize_indices(idx_list, self.shape[ax], ax), dtype=np.int64)
        target = np.moveaxis(self._view(), ax, 0)
        values = np.moveaxis(src._view().astype(self.dtype, copy=False), ax, 0)
        np.add.at(target, idx, values)
        return self

    # ------------------------------------------------------------------
    # Broadcasting
    # ------------------------------------------------------------------
    @staticmethod
    def broadcast(v: "Tensor", w: "Tensor", keep_last: int = 0) -> Tuple["Tensor", "Tensor"]:
        """
        Broadcast two tensors against each other.

        Parameters
        ----------
        v, w : Tensor
            Operands.
        keep_last : int, optional
            Number of trailing dimensions exempt from broadcasting (2 for
            matmul). Defaults to 0.

        Returns
        -------
        tuple[Tensor, Tensor]
            Both operands expanded to their broadcast shapes.
        """
        s0, s1 = broadcast_shapes(v.shape, w.shape, keep_last)
        return v.broadcast_to(s0), w.broadcast_to(s1)

    def broadcast_to(self: "Tensor", *shape) -> "Tensor":
        """
        Expand the tensor to `shape`. Expansion only; never reduces.

        Raises
        ------
        ShapeError
            If the tensor cannot be expanded to `shape`.
        """
        target = as_shape(_shape_args(shape))
        check_broadcast_to(self.shape, target)
        return self._wrap(np.broadcast_to(self._view(), target))

    def sum_to(self: "Tensor", *shape) -> "Tensor":
        """
        Sum along the broadcast axes so that the result has `shape`.

        This is the dual of ``broadcast_to``: axes where `shape` (left-padded
        with 1s) has size 1 are summed, then the result is reshaped.
        """
        target = as_shape(_shape_args(shape))
        axes = sum_to_axes(self.shape, target)
        out = self.sum(axes, keepdims=True) if axes else self
        return out.reshape(target)

    @classmethod
    def onehot(cls, labels, num_classes: int) -> "Tensor":
        """
        Build an ``(N, num_classes)`` one-hot ``float64`` tensor from labels.

        Raises
        ------
        ShapeError
            If a label is outside ``[0, num_classes)``.
        """
        idx = _index_list(labels)
        for i in idx:
            if i < 0 or i >= num_classes:
                raise ShapeError(f"label {i} out of range for {num_classes} classes", axis=1)
        out = np.zeros((len(idx), int(num_classes)), dtype=np.float64)
        out[np.arange(len(idx)), idx] = 1.0
        return cls._wrap(out)
