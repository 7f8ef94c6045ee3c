"""
Xavier weight initializers.

Implemented variants
--------------------
- ``xavier``:
    Standard-normal samples scaled by ``1 / sqrt(fan_in)``. This is what
    `Linear` uses.
- ``xavier_uniform``:
    ``U(-bound, +bound)`` with ``bound = sqrt(3 / fan_in)``, which has the
    same variance as ``xavier``.
"""

import math

from ....domain._random import IRandomSource
from ....domain.utils._weight_initialization import _calculate_fan_in
from ...tensor._tensor import Tensor
from ._base import WeightInitializer


@WeightInitializer.register_initializer("xavier")
def xavier(shape: tuple, src: IRandomSource) -> Tensor:
    """
    Sample ``N(0, 1) / sqrt(fan_in)`` weights.

    Parameters
    ----------
    shape:
        Weight shape ``(in_size, out_size)``.
    src:
        Random source for the normal samples.

    Returns
    -------
    Tensor
        A new ``float64`` tensor.
    """
    scale = 1.0 / math.sqrt(float(_calculate_fan_in(shape)))
    return Tensor.randn(shape, src).mul_c(scale)


@WeightInitializer.register_initializer("xavier_uniform")
def xavier_uniform(shape: tuple, src: IRandomSource) -> Tensor:
    """
    Sample ``U(-sqrt(3 / fan_in), +sqrt(3 / fan_in))`` weights.
    """
    bound = math.sqrt(3.0 / float(_calculate_fan_in(shape)))
    return Tensor.rand(shape, src).mul_c(2.0 * bound).add_c(-bound)
