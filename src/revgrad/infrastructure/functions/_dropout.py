"""
Inverted dropout.

In training mode (``Config.train``) each element is kept when a uniform
sample exceeds `ratio`, and kept elements are scaled by ``1 / (1 - ratio)``
so that the expected activation is unchanged. In test mode the input passes
through untouched.
"""

from __future__ import annotations

from typing import Any, List, Optional

from ...domain._errors import ConfigurationError
from ...domain._function import Forwarder
from ...domain._random import IRandomSource
from ..autograd._config import Config
from ..autograd._function import Function
from ..autograd._variable import Variable
from ..tensor import Tensor
from ._arithmetic import mul


class Dropout(Forwarder):
    """
    Randomly zero elements with probability `ratio` during training.

    Parameters
    ----------
    ratio : float
        Drop probability in ``[0, 1)``.
    src : IRandomSource, optional
        Source of the uniform mask samples.

    Raises
    ------
    ConfigurationError
        If `ratio` is outside ``[0, 1)``.
    """

    def __init__(self, ratio: float = 0.5, src: Optional[IRandomSource] = None) -> None:
        if not 0.0 <= ratio < 1.0:
            raise ConfigurationError(f"dropout ratio must be in [0, 1), got {ratio}")
        self.ratio = float(ratio)
        self.src = src
        self.mask = None

    def forward(self, x: Variable) -> List[Variable]:
        if not Config.train:
            self.mask = None
            return [Variable(x.data.copy())]

        scale = 1.0 / (1.0 - self.ratio)
        self.mask = Tensor.rand(x.shape, self.src).greater_c(self.ratio).mul_c(scale)
        return [Variable(x.data.mul(self.mask))]

    def backward(self, gy: Variable) -> List[Variable]:
        if self.mask is None:
            return [gy]
        return [mul(gy, Variable(self.mask))]


def dropout(x: Any, ratio: float = 0.5, src: Optional[IRandomSource] = None) -> Variable:
    """
    Differentiable inverted dropout (identity outside training mode).
    """
    return Function(Dropout(ratio, src)).apply_first(x)
