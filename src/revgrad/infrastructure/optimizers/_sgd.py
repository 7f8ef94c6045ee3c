"""
Stochastic gradient descent, plain and with momentum.

Update rules
------------
SGD, for each parameter ``p`` with gradient ``g``:

    p <- p - lr * g

Momentum, with a per-parameter velocity ``v`` starting at zero:

    v <- momentum * v - lr * g
    p <- p + v
"""

from __future__ import annotations

from typing import Dict, Iterable, Sequence, Union

from ...domain._module import ILayer
from ...domain._optimizers import Hook
from .._parameter import Parameter
from ..tensor import Tensor
from ._base import Optimizer, _check_positive, _check_unit_interval, _state_for


class SGD(Optimizer):
    """
    Stochastic gradient descent.

    Parameters
    ----------
    target : ILayer or Iterable[Parameter]
        Layer or parameters to optimize.
    lr : float, optional
        Learning rate. Must be > 0. Defaults to 0.01.
    hooks : Sequence[Hook], optional
        Hooks run before each update.

    Raises
    ------
    ConfigurationError
        If ``lr <= 0``.
    """

    def __init__(
        self,
        target: Union[ILayer, Iterable[Parameter]],
        *,
        lr: float = 0.01,
        hooks: Sequence[Hook] = (),
    ) -> None:
        super().__init__(target, hooks=hooks)
        self.lr = _check_positive("lr", lr)

    def update_one(self, p: Parameter) -> None:
        p.data = p.data.sub(p.grad.data.mul_c(self.lr))


class Momentum(Optimizer):
    """
    SGD with classical momentum.

    Parameters
    ----------
    target : ILayer or Iterable[Parameter]
        Layer or parameters to optimize.
    lr : float, optional
        Learning rate. Must be > 0. Defaults to 0.01.
    momentum : float, optional
        Velocity decay in ``[0, 1)``. Defaults to 0.9.
    hooks : Sequence[Hook], optional
        Hooks run before each update.
    """

    def __init__(
        self,
        target: Union[ILayer, Iterable[Parameter]],
        *,
        lr: float = 0.01,
        momentum: float = 0.9,
        hooks: Sequence[Hook] = (),
    ) -> None:
        super().__init__(target, hooks=hooks)
        self.lr = _check_positive("lr", lr)
        self.momentum = _check_unit_interval("momentum", momentum)

        # parameter -> velocity
        self._vs: Dict[Parameter, Tensor] = {}

    def update_one(self, p: Parameter) -> None:
        v = _state_for(self._vs, p)
        v = v.mul_c(self.momentum).sub(p.grad.data.mul_c(self.lr))
        self._vs[p] = v
        p.data = p.data.add(v)
