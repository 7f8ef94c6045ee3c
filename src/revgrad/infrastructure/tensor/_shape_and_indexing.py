"""
Shape, stride, axis, and broadcasting helpers for the Tensor implementation.

These helpers operate purely on shape tuples and integer indices; they never
touch tensor data. Every validation failure is reported as a `ShapeError`
naming the offending shape(s) or axis.

Conventions
-----------
- Shapes are tuples of non-negative ints; ``()`` denotes a scalar.
- Strides are row-major (C order): the last axis has stride 1 and
  ``stride[i] = stride[i + 1] * shape[i + 1]``.
- Negative axes are taken modulo the rank. Duplicate axes are rejected.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple, Union

from ...domain._errors import ShapeError

Shape = Tuple[int, ...]
Axes = Union[None, int, Sequence[int]]


def as_shape(shape: Iterable[int]) -> Shape:
    """
    Normalize a shape-like iterable into a tuple of non-negative ints.

    Raises
    ------
    ShapeError
        If any dimension is negative.
    """
    out = tuple(int(d) for d in shape)
    for d in out:
        if d < 0:
            raise ShapeError(f"negative dimension in shape {out}", shapes=(out,))
    return out


def shape_size(shape: Sequence[int]) -> int:
    """
    Return the number of elements described by `shape` (1 for a scalar).
    """
    n = 1
    for d in shape:
        n *= int(d)
    return n


def compute_stride(shape: Sequence[int]) -> Shape:
    """
    Return the row-major stride of `shape`.
    """
    ndim = len(shape)
    if ndim == 0:
        return ()

    stride = [1] * ndim
    for i in range(ndim - 2, -1, -1):
        stride[i] = stride[i + 1] * int(shape[i + 1])
    return tuple(stride)


def normalize_axis(axis: int, ndim: int) -> int:
    """
    Map a possibly negative `axis` into ``[0, ndim)``.

    Raises
    ------
    ShapeError
        If `axis` is out of range for the rank.
    """
    ax = int(axis)
    if ax < 0:
        ax += ndim
    if ax < 0 or ax >= ndim:
        raise ShapeError(f"axis={axis} out of range for ndim={ndim}", axis=axis)
    return ax


def normalize_axes(axes: Axes, ndim: int) -> Shape:
    """
    Normalize an axis specification into a sorted tuple of unique axes.

    ``None`` and the empty sequence both select every axis.

    Raises
    ------
    ShapeError
        If an axis is out of range or appears more than once.
    """
    if axes is None:
        return tuple(range(ndim))
    if isinstance(axes, int):
        axes = (axes,)
    if len(axes) == 0:
        return tuple(range(ndim))

    seen = []
    for a in axes:
        ax = normalize_axis(a, ndim)
        if ax in seen:
            raise ShapeError(f"duplicate axis={ax} in {tuple(axes)}", axis=ax)
        seen.append(ax)
    return tuple(sorted(seen))


def normalize_permutation(axes: Optional[Sequence[int]], ndim: int) -> Shape:
    """
    Normalize a transpose permutation. ``None``/empty reverses the axes.

    Raises
    ------
    ShapeError
        If `axes` is not a permutation of ``range(ndim)``.
    """
    if axes is None or len(axes) == 0:
        return tuple(range(ndim - 1, -1, -1))
    if len(axes) != ndim:
        raise ShapeError(
            f"axes {tuple(axes)} do not match ndim={ndim}", shapes=(tuple(axes),)
        )

    out = []
    for a in axes:
        ax = normalize_axis(a, ndim)
        if ax in out:
            raise ShapeError(f"duplicate axis={ax} in {tuple(axes)}", axis=ax)
        out.append(ax)
    return tuple(out)


def normalize_indices(indices: Sequence[int], dim: int, axis: int) -> Shape:
    """
    Normalize gather/scatter indices along an axis of length `dim`.

    Negative indices count from the end of the axis.

    Raises
    ------
    ShapeError
        If an index falls outside the axis.
    """
    out = []
    for idx in indices:
        i = int(idx)
        if i < 0:
            i += dim
        if i < 0 or i >= dim:
            raise ShapeError(
                f"index {idx} out of range for axis={axis} with size {dim}",
                axis=axis,
            )
        out.append(i)
    return tuple(out)


def broadcast_shapes(
    s0: Sequence[int], s1: Sequence[int], keep_last: int = 0
) -> Tuple[Shape, Shape]:
    """
    Compute the broadcast target shapes of two operands.

    Leading dimensions are padded with 1s and size-1 axes are replicated to
    match the counterpart. The trailing `keep_last` dimensions of each
    operand are exempt from broadcasting and appended back unchanged.

    Parameters
    ----------
    s0, s1 : Sequence[int]
        Operand shapes.
    keep_last : int, optional
        Number of trailing dimensions left untouched. Defaults to 0.

    Returns
    -------
    tuple[Shape, Shape]
        Target shapes for the first and second operand.

    Raises
    ------
    ShapeError
        If the shapes cannot be broadcast together.
    """
    s0, s1 = tuple(s0), tuple(s1)
    n = int(keep_last)
    if len(s0) < n or len(s1) < n:
        raise ShapeError(
            f"shapes {s0} and {s1} have fewer than {n} dimensions", shapes=(s0, s1)
        )

    head0, tail0 = s0[: len(s0) - n], s0[len(s0) - n :]
    head1, tail1 = s1[: len(s1) - n], s1[len(s1) - n :]

    ndim = max(len(head0), len(head1))
    head0 = (1,) * (ndim - len(head0)) + head0
    head1 = (1,) * (ndim - len(head1)) + head1

    shape = []
    for d0, d1 in zip(head0, head1):
        if d0 == d1 or d1 == 1:
            shape.append(d0)
        elif d0 == 1:
            shape.append(d1)
        else:
            raise ShapeError(
                f"shapes {s0} and {s1} are not broadcastable", shapes=(s0, s1)
            )

    return tuple(shape) + tail0, tuple(shape) + tail1


def check_broadcast_to(src: Sequence[int], shape: Sequence[int]) -> None:
    """
    Check that `src` expands to `shape` without reducing any axis.

    Raises
    ------
    ShapeError
        If `shape` has fewer dimensions than `src` or an axis of `src` is
        neither 1 nor equal to the target.
    """
    src, shape = tuple(src), tuple(shape)
    if len(shape) < len(src):
        raise ShapeError(
            f"cannot broadcast shape {src} to smaller rank {shape}",
            shapes=(src, shape),
        )

    diff = len(shape) - len(src)
    for i, d in enumerate(src):
        if d != 1 and d != shape[i + diff]:
            raise ShapeError(
                f"cannot broadcast shape {src} to {shape}", shapes=(src, shape)
            )


def sum_to_axes(src: Sequence[int], shape: Sequence[int]) -> Shape:
    """
    Return the axes of `src` that must be summed to reduce it to `shape`.

    `shape` is left-padded with 1s to the rank of `src`; an axis is summed
    where the padded target has size 1 and the source is larger.

    Raises
    ------
    ShapeError
        If `shape` has more dimensions than `src` or a non-summed axis does
        not match.
    """
    src, shape = tuple(src), tuple(shape)
    if len(shape) > len(src):
        raise ShapeError(
            f"cannot sum shape {src} to larger rank {shape}", shapes=(src, shape)
        )

    padded = (1,) * (len(src) - len(shape)) + shape
    axes = []
    for i, (s, t) in enumerate(zip(src, padded)):
        if t == 1 and s != 1:
            axes.append(i)
        elif t != s:
            raise ShapeError(f"cannot sum shape {src} to {shape}", shapes=(src, shape))
    return tuple(axes)


def keep_dims_shape(shape: Sequence[int], axes: Sequence[int]) -> Shape:
    """
    Return `shape` with every axis in `axes` replaced by 1.
    """
    return tuple(1 if i in axes else int(d) for i, d in enumerate(shape))
