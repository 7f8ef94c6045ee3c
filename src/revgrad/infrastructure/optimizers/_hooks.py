"""
Gradient hooks run by optimizers before each update.

A hook is any callable taking the list of parameters that hold a gradient.
The two built-ins rewrite ``p.grad`` in place:

- `WeightDecay(rate)`: ``g <- g + rate * p`` (coupled L2 regularisation).
- `ClipGrad(max_norm)`: when the global L2 norm of all gradients exceeds
  `max_norm`, every gradient is scaled by ``max_norm / (norm + 1e-6)``.
"""

from __future__ import annotations

import math
from typing import List

from ...domain._errors import ConfigurationError
from .._parameter import Parameter
from ..autograd._variable import Variable


class WeightDecay:
    """
    Add ``rate * p`` to every gradient.

    Raises
    ------
    ConfigurationError
        If `rate` is negative.
    """

    def __init__(self, rate: float) -> None:
        self.rate = float(rate)
        if self.rate < 0.0:
            raise ConfigurationError(f"weight decay rate must be >= 0, got {self.rate}")

    def __call__(self, params: List[Parameter]) -> None:
        for p in params:
            p.grad = Variable(p.grad.data.add(p.data.mul_c(self.rate)))


class ClipGrad:
    """
    Rescale gradients so that their global L2 norm is at most `max_norm`.

    Raises
    ------
    ConfigurationError
        If `max_norm` is not positive.
    """

    def __init__(self, max_norm: float) -> None:
        self.max_norm = float(max_norm)
        if self.max_norm <= 0.0:
            raise ConfigurationError(f"max_norm must be > 0, got {self.max_norm}")

    def __call__(self, params: List[Parameter]) -> None:
        total = 0.0
        for p in params:
            g = p.grad.data
            total += float(g.mul(g).sum().item())

        rate = self.max_norm / (math.sqrt(total) + 1e-6)
        if rate >= 1.0:
            return

        for p in params:
            p.grad = Variable(p.grad.data.mul_c(rate))
