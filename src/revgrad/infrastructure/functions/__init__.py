"""
Differentiable operation library.

Every operation is a `Forwarder` subclass paired with a functional wrapper
that applies it through a `Function`, recording a graph node when backprop is
enabled. Backward rules are written with these same wrappers, so gradients
are themselves differentiable.

Typical usage:

    from revgrad.infrastructure import functions as F

    y = F.sum(F.square(F.exp(x)))
    y.backward()
"""

from ._activations import ReLU, Sigmoid, Softmax, relu, sigmoid, softmax
from ._arithmetic import (
    Add,
    Div,
    Mul,
    Neg,
    Pow,
    Square,
    Sub,
    add,
    div,
    mul,
    neg,
    pow,
    square,
    sub,
)
from ._dropout import Dropout, dropout
from ._elementwise import Clip, Cos, Exp, Log, Sin, Tanh, clip, cos, exp, log, sin, tanh
from ._losses import (
    Accuracy,
    MeanSquaredError,
    SoftmaxCrossEntropy,
    accuracy,
    argmax,
    mean_squared_error,
    softmax_cross_entropy,
)
from ._matmul import Linear, MatMul, linear, matmul
from ._reduction import Max, Mean, Min, Sum, Variance, max, mean, min, sum, variance
from ._shape import (
    BroadcastTo,
    Concat,
    GetItem,
    GetItemGrad,
    Reshape,
    Split,
    SumTo,
    Transpose,
    broadcast_to,
    concat,
    get_item,
    get_item_grad,
    reshape,
    split,
    sum_to,
    swap_last,
    transpose,
)

__all__ = [
    # forwarders
    "Accuracy",
    "Add",
    "BroadcastTo",
    "Clip",
    "Concat",
    "Cos",
    "Div",
    "Dropout",
    "Exp",
    "GetItem",
    "GetItemGrad",
    "Linear",
    "Log",
    "MatMul",
    "Max",
    "Mean",
    "MeanSquaredError",
    "Min",
    "Mul",
    "Neg",
    "Pow",
    "ReLU",
    "Reshape",
    "Sigmoid",
    "Sin",
    "Softmax",
    "SoftmaxCrossEntropy",
    "Split",
    "Square",
    "Sub",
    "Sum",
    "SumTo",
    "Tanh",
    "Transpose",
    "Variance",
    # functional wrappers
    "accuracy",
    "add",
    "argmax",
    "broadcast_to",
    "clip",
    "concat",
    "cos",
    "div",
    "dropout",
    "exp",
    "get_item",
    "get_item_grad",
    "linear",
    "log",
    "matmul",
    "max",
    "mean",
    "mean_squared_error",
    "min",
    "mul",
    "neg",
    "pow",
    "relu",
    "reshape",
    "sigmoid",
    "sin",
    "softmax",
    "softmax_cross_entropy",
    "split",
    "square",
    "sub",
    "sum",
    "sum_to",
    "swap_last",
    "tanh",
    "transpose",
    "variance",
]
