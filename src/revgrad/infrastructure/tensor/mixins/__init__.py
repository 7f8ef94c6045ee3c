"""
Tensor operation mixins.

Each mixin groups one family of Tensor operations. The concrete `Tensor`
class inherits from `_TensorAllMixin`, which aggregates all of them.
"""

from ._arithmetic import TensorMixinArithmetic
from ._comparison import TensorMixinComparison
from ._reduction import TensorMixinReduction
from ._shape import TensorMixinShape
from ._unary import TensorMixinUnary


class _TensorAllMixin(
    TensorMixinArithmetic,
    TensorMixinUnary,
    TensorMixinReduction,
    TensorMixinShape,
    TensorMixinComparison,
):
    pass


__all__ = [
    TensorMixinArithmetic.__name__,
    TensorMixinComparison.__name__,
    TensorMixinReduction.__name__,
    TensorMixinShape.__name__,
    TensorMixinUnary.__name__,
    _TensorAllMixin.__name__,
]
