"""
Adam and AdamW optimizers.

Adam maintains exponentially decaying averages of past gradients (first
moment) and past squared gradients (second moment). Bias correction is folded
into the step size.

Update rule
-----------
At iteration ``t`` (counted per optimizer, starting at 1):

    m <- m + (1 - beta1) * (g - m)
    v <- v + (1 - beta2) * (g**2 - v)

    lr_t = alpha * sqrt(1 - beta2**t) / (1 - beta1**t)

    p <- p - lr_t * m / (sqrt(v) + eps)

AdamW additionally applies decoupled weight decay, scaled by the same step
size:

    p <- p - lr_t * (m / (sqrt(v) + eps) + weight_decay * p)
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, Sequence, Union

from ...domain._errors import ConfigurationError
from ...domain._module import ILayer
from ...domain._optimizers import Hook
from .._parameter import Parameter
from ..tensor import Tensor
from ._base import Optimizer, _check_positive, _state_for


class Adam(Optimizer):
    """
    Adam optimizer.

    Parameters
    ----------
    target : ILayer or Iterable[Parameter]
        Layer or parameters to optimize.
    alpha : float, optional
        Base step size. Must be > 0. Defaults to 0.001.
    beta1, beta2 : float, optional
        Moment decay rates, each in ``(0, 1)``. Default to 0.9 and 0.999.
    eps : float, optional
        Denominator stabiliser. Must be > 0. Defaults to 1e-8.
    hooks : Sequence[Hook], optional
        Hooks run before each update.

    Notes
    -----
    - The iteration counter advances once per `step()`, even for
      parameters that had no gradient on that step.
    - Moment state is created lazily, keyed by parameter identity.
    """

    def __init__(
        self,
        target: Union[ILayer, Iterable[Parameter]],
        *,
        alpha: float = 0.001,
        beta1: float = 0.9,
        beta2: float = 0.999,
        eps: float = 1e-8,
        hooks: Sequence[Hook] = (),
    ) -> None:
        super().__init__(target, hooks=hooks)
        self.alpha = _check_positive("alpha", alpha)
        self.beta1 = float(beta1)
        self.beta2 = float(beta2)
        self.eps = _check_positive("eps", eps)

        if not (0.0 < self.beta1 < 1.0) or not (0.0 < self.beta2 < 1.0):
            raise ConfigurationError(
                f"betas must be in (0,1), got {(self.beta1, self.beta2)}"
            )

        self.iter = 0
        self._ms: Dict[Parameter, Tensor] = {}
        self._vs: Dict[Parameter, Tensor] = {}

    @property
    def lr(self) -> float:
        """
        Bias-corrected step size for the current iteration.
        """
        t = max(self.iter, 1)
        fix1 = 1.0 - math.pow(self.beta1, t)
        fix2 = 1.0 - math.pow(self.beta2, t)
        return self.alpha * math.sqrt(fix2) / fix1

    def _begin_step(self) -> None:
        self.iter += 1

    def _direction(self, p: Parameter) -> Tensor:
        g = p.grad.data
        m = _state_for(self._ms, p)
        v = _state_for(self._vs, p)

        m = m.add(g.sub(m).mul_c(1.0 - self.beta1))
        v = v.add(g.mul(g).sub(v).mul_c(1.0 - self.beta2))
        self._ms[p] = m
        self._vs[p] = v

        return m.div(v.sqrt().add_c(self.eps))

    def update_one(self, p: Parameter) -> None:
        p.data = p.data.sub(self._direction(p).mul_c(self.lr))


class AdamW(Adam):
    """
    Adam with decoupled weight decay.

    Parameters
    ----------
    weight_decay : float, optional
        Decay coefficient. Must be >= 0. Defaults to 0.01.

    Other parameters are as for `Adam`.
    """

    def __init__(
        self,
        target: Union[ILayer, Iterable[Parameter]],
        *,
        alpha: float = 0.001,
        beta1: float = 0.9,
        beta2: float = 0.999,
        eps: float = 1e-8,
        weight_decay: float = 0.01,
        hooks: Sequence[Hook] = (),
    ) -> None:
        super().__init__(target, alpha=alpha, beta1=beta1, beta2=beta2, eps=eps, hooks=hooks)
        self.weight_decay = float(weight_decay)
        if self.weight_decay < 0.0:
            raise ConfigurationError(f"weight_decay must be >= 0, got {self.weight_decay}")

    def update_one(self, p: Parameter) -> None:
        direction = self._direction(p).add(p.data.mul_c(self.weight_decay))
        p.data = p.data.sub(direction.mul_c(self.lr))
