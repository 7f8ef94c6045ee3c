"""
Error taxonomy for revgrad.

This module defines the exceptions raised by the tensor algebra, the autograd
engine, and the layer/optimizer stack. Errors are raised eagerly at the point
of detection; the library never catches and recovers from them.

Hierarchy
---------
- ``RevgradError``: common base for every library-specific failure.
- ``ShapeError``: rank/axis out of range, non-broadcastable operands, size
  mismatches, out-of-range coordinates or indices.
- ``ConfigurationError``: invalid hyperparameters or option values.
- ``StateError``: an object is used in a state that no longer supports the
  requested operation (e.g., backward on an unchained graph).

``ShapeError`` and ``ConfigurationError`` also derive from ``ValueError`` and
``StateError`` derives from ``RuntimeError`` so that callers relying on the
builtin exception types keep working.
"""

from __future__ import annotations

from typing import Optional, Sequence


class RevgradError(Exception):
    """
    Base class for all revgrad-specific exceptions.
    """


class ShapeError(RevgradError, ValueError):
    """
    Raised when tensor shapes or axes are incompatible with an operation.

    Attributes
    ----------
    shapes : tuple[tuple[int, ...], ...]
        The offending shape(s), if known.
    axis : int or None
        The offending axis, if the failure concerns a specific axis.
    """

    def __init__(
        self,
        message: str,
        *,
        shapes: Sequence[Sequence[int]] = (),
        axis: Optional[int] = None,
    ) -> None:
        """
        Initialize the ShapeError.

        Parameters
        ----------
        message : str
            Human-readable description of the failure.
        shapes : Sequence[Sequence[int]], optional
            Shapes involved in the failure. Defaults to an empty tuple.
        axis : int or None, optional
            Axis involved in the failure. Defaults to None.
        """
        super().__init__(message)
        self.shapes = tuple(tuple(int(d) for d in s) for s in shapes)
        self.axis = axis


class ConfigurationError(RevgradError, ValueError):
    """
    Raised when an operation, layer, or optimizer receives an invalid
    hyperparameter (e.g., a dropout ratio of 1.0 or a non-positive order).
    """


class StateError(RevgradError, RuntimeError):
    """
    Raised when an object is used in a state that forbids the operation.

    Examples include calling ``backward()`` on a variable whose graph was cut
    by ``unchain_backward()``.
    """
