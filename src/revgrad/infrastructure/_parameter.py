"""
Concrete trainable parameter implementation.

A `Parameter` is a leaf `Variable` that layers register automatically and
optimizers update in place. It adds no behavior of its own; its type is what
`Layer.__setattr__` keys on when discovering trainable state.
"""

from __future__ import annotations

from .autograd._variable import Variable


class Parameter(Variable):
    """
    Trainable leaf variable.

    Notes
    -----
    - Optimizers replace ``data`` with the updated tensor and leave the graph
      links untouched.
    - Parameters are created as leaves; they never carry a creator.
    """

    def __repr__(self) -> str:
        return f"parameter(shape={list(self.shape)}, name={self.name!r})"
