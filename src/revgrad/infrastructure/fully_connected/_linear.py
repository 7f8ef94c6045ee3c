"""
Fully connected layer with lazy input-size inference.

`Linear` computes ``y = x @ W + b`` with ``W`` laid out
``(in_size, out_size)``. When `in_size` is not given at construction time,
the weight is materialised on the first forward pass from the trailing
dimension of the input.

Design notes
------------
- The weight is drawn with the ``xavier`` initializer (standard normal
  scaled by ``1 / sqrt(in_size)``); the bias starts at zero.
- 1-D inputs are treated as a single row, so ``Linear(3)(Variable.new(1))``
  yields a ``(1, 3)`` output.
- Parameter materialisation happens exactly once.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ...domain._errors import ConfigurationError, ShapeError
from ...domain._random import IRandomSource
from .._module import Layer
from .._parameter import Parameter
from ..autograd._variable import Variable, as_variable
from ..functions import linear, reshape
from ..utils.weight_initializer import WeightInitializer

logger = logging.getLogger(__name__)


class Linear(Layer):
    """
    Affine layer ``y = x @ w + b``.

    Parameters
    ----------
    out_size : int
        Number of output features.
    in_size : int, optional
        Number of input features. Inferred on first forward when omitted.
    no_bias : bool, optional
        Drop the bias term. Defaults to False.
    rng : IRandomSource, optional
        Source used to sample the weight.

    Raises
    ------
    ConfigurationError
        If `out_size` or `in_size` is not positive.
    """

    def __init__(
        self,
        out_size: int,
        in_size: Optional[int] = None,
        no_bias: bool = False,
        rng: Optional[IRandomSource] = None,
    ) -> None:
        super().__init__()
        if out_size < 1:
            raise ConfigurationError(f"out_size must be >= 1, got {out_size}")
        if in_size is not None and in_size < 1:
            raise ConfigurationError(f"in_size must be >= 1, got {in_size}")

        self.out_size = int(out_size)
        self.in_size = in_size
        self.rng = rng
        self._init = WeightInitializer("xavier")

        self.w: Optional[Parameter] = None
        if in_size is not None:
            self._init_w()

        self.b: Optional[Parameter] = None
        if not no_bias:
            self.b = Parameter(WeightInitializer("zeros")((self.out_size,)), name="b")

    def _init_w(self) -> None:
        self.w = Parameter(self._init((self.in_size, self.out_size), self.rng), name="w")
        logger.debug("initialised %s weight with shape %s", type(self).__name__, self.w.shape)

    def forward(self, *xs: Variable) -> List[Variable]:
        x = as_variable(xs[0])
        if x.ndim == 0:
            raise ShapeError("Linear expects at least a 1-D input", shapes=(x.shape,))
        if x.ndim == 1:
            x = reshape(x, (1, x.shape[0]))

        if self.w is None:
            self.in_size = x.shape[-1]
            self._init_w()
        elif x.shape[-1] != self.in_size:
            raise ShapeError(
                f"Linear expects {self.in_size} input features, got {x.shape[-1]}",
                shapes=(x.shape, self.w.shape),
            )

        return [linear(x, self.w, self.b)]

    def __repr__(self) -> str:
        return f"Linear(in_size={self.in_size}, out_size={self.out_size})"
