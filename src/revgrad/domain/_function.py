"""
Forwarder interface definitions.

A *forwarder* is the operation-specific half of a graph node: it computes the
outputs of an operation from its input variables and, later, the gradients of
the inputs from the gradients of the outputs. The generic half (input/output
bookkeeping, generation numbers, creator wiring) lives in the infrastructure
`Function` class, which owns exactly one forwarder.

Forwarders are instantiated once per application, so any state stored on the
instance during `forward` (saved inputs, shapes, masks) is private to that
node of the graph.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence


class Forwarder(ABC):
    """
    Abstract base class for differentiable operations.

    Subclasses implement both `forward` and `backward`. Values needed for the
    backward pass are stored as attributes on the forwarder instance.

    Notes
    -----
    - `forward` may compute its outputs at the tensor level; it runs outside
      of graph recording.
    - `backward` must express its gradients with differentiable variable
      operations so that a graph is recorded when higher-order derivatives
      are requested.
    """

    @abstractmethod
    def forward(self, *inputs: Any) -> Sequence[Any]:
        """
        Compute the output variable(s) of the operation.

        Parameters
        ----------
        *inputs : Variable
            Input variables of the operation.

        Returns
        -------
        Sequence[Variable]
            Output variables. Single-output operations return a one-element
            sequence.
        """
        ...

    @abstractmethod
    def backward(self, *grad_outputs: Optional[Any]) -> Sequence[Any]:
        """
        Compute gradients with respect to the inputs.

        Parameters
        ----------
        *grad_outputs : Variable or None
            Gradient of the loss with respect to each output. Entries may be
            None for outputs that no longer exist or never received a
            gradient (only relevant to multi-output operations).

        Returns
        -------
        Sequence[Variable]
            One gradient variable per input, in input order, each with the
            shape of the corresponding input.
        """
        ...

    @property
    def name(self) -> str:
        """
        Short operation name used in graph dumps (the class name).
        """
        return type(self).__name__
