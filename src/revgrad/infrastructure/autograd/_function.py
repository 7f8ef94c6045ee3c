"""
Graph node binding a forwarder to its inputs and outputs.

A `Function` is created for every application of a differentiable operation.
It runs its forwarder and, when `Config.enable_backprop` is set, records:

- strong references to the input variables (needed by backward),
- weak references to the output variables, so that outputs are freed as
  soon as the user drops them,
- its generation, ``max(input.generation)``.

Each output then points back to the function through its ``creator`` link
with ``generation = function.generation + 1``.
"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

from ...domain._errors import ShapeError
from ...domain._function import Forwarder
from ._config import Config

if TYPE_CHECKING:  # pragma: no cover
    from ._variable import Variable


class Function:
    """
    One node of the computation graph.

    Parameters
    ----------
    forwarder : Forwarder
        Operation-specific forward/backward implementation. A forwarder
        instance must not be shared between functions.

    Attributes
    ----------
    inputs : list[Variable]
        Input variables (empty when the graph was not recorded).
    outputs : list[weakref.ref]
        Weak references to the output variables.
    generation : int
        Topological rank used to order backward traversal.
    """

    def __init__(self, forwarder: Forwarder) -> None:
        if not isinstance(forwarder, Forwarder):
            raise TypeError(f"expected a Forwarder, got {type(forwarder).__name__}")

        self.forwarder = forwarder
        self.inputs: List["Variable"] = []
        self.outputs: List[weakref.ref] = []
        self.generation = 0

    def apply(self, *inputs: Any) -> List["Variable"]:
        """
        Run the forwarder and record the graph when backprop is enabled.

        Parameters
        ----------
        *inputs : Variable or array-like
            Inputs of the operation. Non-variable inputs are wrapped as
            constant variables.

        Returns
        -------
        list[Variable]
            The output variables.
        """
        from ._variable import as_variable

        xs = [as_variable(x) for x in inputs]
        ys = list(self.forwarder.forward(*xs))

        if Config.enable_backprop:
            self.generation = max((x.generation for x in xs), default=0)
            for y in ys:
                y.set_creator(self)
            self.inputs = xs
            self.outputs = [weakref.ref(y) for y in ys]

        return ys

    def apply_first(self, *inputs: Any) -> "Variable":
        """
        Apply the function and return its first output.
        """
        return self.apply(*inputs)[0]

    def output_variables(self) -> List[Optional["Variable"]]:
        """
        Dereference the outputs; entries are None for collected outputs.
        """
        return [ref() for ref in self.outputs]

    def backward(self, *grad_outputs: Optional["Variable"]) -> List[Optional["Variable"]]:
        """
        Compute input gradients from output gradients via the forwarder.

        Raises
        ------
        ShapeError
            If the forwarder returns the wrong number of gradients or a
            gradient whose shape differs from its input.
        """
        gxs = list(self.forwarder.backward(*grad_outputs))
        if len(gxs) != len(self.inputs):
            raise ShapeError(
                f"{self.name} returned {len(gxs)} gradients for {len(self.inputs)} inputs"
            )

        for x, gx in zip(self.inputs, gxs):
            if gx is not None and gx.shape != x.shape:
                raise ShapeError(
                    f"{self.name} produced gradient of shape {gx.shape} for input {x.shape}",
                    shapes=(gx.shape, x.shape),
                )
        return gxs

    @property
    def name(self) -> str:
        return self.forwarder.name

    def __repr__(self) -> str:
        return f"{self.name}(generation={self.generation})"
