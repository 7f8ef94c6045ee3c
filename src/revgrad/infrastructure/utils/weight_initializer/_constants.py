"""
Constant weight initializers.

Provided initializers
---------------------
- ``zeros``: all elements zero (the default bias initializer).
- ``ones``: all elements one.

The random source is accepted for a uniform signature and ignored.
"""

from ....domain._random import IRandomSource
from ...tensor._tensor import Tensor
from ._base import WeightInitializer


@WeightInitializer.register_initializer("zeros")
def zeros(shape: tuple, src: IRandomSource) -> Tensor:
    return Tensor.zeros(shape)


@WeightInitializer.register_initializer("ones")
def ones(shape: tuple, src: IRandomSource) -> Tensor:
    return Tensor.ones(shape)
