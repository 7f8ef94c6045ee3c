"""
Shared optimizer machinery.

`Optimizer` implements the parts every update rule needs:

- resolving the managed parameters from a layer or an explicit iterable
- selecting the parameters that currently hold a gradient
- running hooks (weight decay, gradient clipping) over them, in order
- clearing gradients

Concrete optimizers implement `update_one(p)` and, when they carry
per-step state (Adam's iteration counter), `_begin_step()`.

Design notes
------------
- When constructed from a layer, parameters are re-read on every step so
  that lazily initialised weights (``Linear`` infers its input size on the
  first forward) are picked up.
- Parameters with ``grad is None`` are skipped to support partial graphs and
  frozen weights.
- Updates replace ``p.data`` with a new tensor; graph links are untouched.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Union

from ...domain._errors import ConfigurationError
from ...domain._module import ILayer
from ...domain._optimizers import Hook
from ..tensor import Tensor
from .._parameter import Parameter


class Optimizer:
    """
    Base class for gradient-based optimizers.

    Parameters
    ----------
    target : ILayer or Iterable[Parameter]
        Layer whose parameters are optimized, or the parameters themselves.
    hooks : Sequence[Hook], optional
        Callables applied to the list of parameters holding a gradient,
        before each update.
    """

    def __init__(
        self,
        target: Union[ILayer, Iterable[Parameter]],
        *,
        hooks: Sequence[Hook] = (),
    ) -> None:
        if isinstance(target, ILayer):
            self._layer = target
            self._params: List[Parameter] = []
        else:
            self._layer = None
            self._params = list(target)

        self.hooks: List[Hook] = []
        for hook in hooks:
            self.add_hook(hook)

    @property
    def params(self) -> List[Parameter]:
        """
        Return the parameters managed by this optimizer.
        """
        if self._layer is not None:
            return list(self._layer.parameters().values())
        return list(self._params)

    def add_hook(self, hook: Hook) -> None:
        """
        Append a hook run before every update.

        Raises
        ------
        ConfigurationError
            If `hook` is not callable.
        """
        if not callable(hook):
            raise ConfigurationError(f"hook must be callable, got {type(hook).__name__}")
        self.hooks.append(hook)

    def zero_grad(self) -> None:
        """
        Clear gradients for all managed parameters.
        """
        for p in self.params:
            p.cleargrad()

    def step(self) -> None:
        """
        Apply one update to every parameter that holds a gradient.
        """
        params = [p for p in self.params if p.grad is not None]
        for hook in self.hooks:
            hook(params)

        self._begin_step()
        for p in params:
            self.update_one(p)

    def _begin_step(self) -> None:
        """
        Advance per-step state before parameters are updated.
        """

    def update_one(self, p: Parameter) -> None:
        """
        Update a single parameter from its gradient.
        """
        raise NotImplementedError


def _state_for(state: Dict[Parameter, Tensor], p: Parameter) -> Tensor:
    """
    Return the zero-initialised state tensor for `p`, creating it if needed.
    """
    if p not in state:
        state[p] = Tensor.zero_like(p.data)
    return state[p]


def _check_positive(name: str, value: float) -> float:
    value = float(value)
    if value <= 0.0:
        raise ConfigurationError(f"{name} must be > 0, got {value}")
    return value


def _check_unit_interval(name: str, value: float) -> float:
    value = float(value)
    if not 0.0 <= value < 1.0:
        raise ConfigurationError(f"{name} must be in [0, 1), got {value}")
    return value
