"""
Domain-level optimizer contracts for revgrad.

This module defines the `IOptimizer` protocol, which specifies the minimal
interface required for optimizer implementations (SGD, Momentum, Adam, AdamW),
and the `Hook` callable type applied to parameters before each update.

Notes
-----
- Optimizers consume the ``parameters -> grads`` contract of the autograd
  engine; they never build graphs themselves.
- Hooks run over the parameters that currently hold a gradient, in the order
  they were registered, before the update rule is applied.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Protocol, runtime_checkable

from ._parameter import IParameter

Hook = Callable[[List[IParameter]], None]


@runtime_checkable
class IOptimizer(Protocol):
    """
    Optimizer interface contract.

    Required methods
    ----------------
    - `step()` applies one optimization update to managed parameters.
    - `zero_grad()` clears gradients for managed parameters.
    """

    def step(self) -> None:
        """
        Apply one optimization step.

        Implementations skip parameters whose ``grad`` is None.
        """
        ...

    def zero_grad(self) -> None:
        """
        Clear gradients for all managed parameters.
        """
        ...

    @property
    def params(self) -> Iterable[IParameter]:
        """
        Return the parameters managed by this optimizer.
        """
        ...
