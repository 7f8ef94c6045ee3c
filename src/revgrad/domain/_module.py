"""
Layer interface definitions.

This module defines the domain-level interface for neural network layers
using structural subtyping via `typing.Protocol`. Any object implementing the
required methods is considered a valid layer, independent of inheritance.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol, Sequence, runtime_checkable

from ._parameter import IParameter


@runtime_checkable
class ILayer(Protocol):
    """
    Domain-level layer interface.

    A layer is a composable unit of computation holding named trainable
    parameters. Optimizers and training loops rely on `parameters` to
    discover what to update and on `clear_grads` to reset accumulated
    gradients between steps.
    """

    def forward(self, *inputs: Any) -> Sequence[Any]:
        """
        Execute the forward computation and return the output variables.
        """
        ...

    def parameters(self) -> Dict[str, IParameter]:
        """
        Return the named parameters of the layer, ordered lexicographically
        by their dotted path.
        """
        ...

    def clear_grads(self) -> None:
        """
        Clear the gradient of every parameter.
        """
        ...
