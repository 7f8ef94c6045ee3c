"""
revgrad: a reverse-mode automatic differentiation engine on NumPy.

Typical usage:

    from revgrad import Variable, F

    x = Variable.new(0.5)
    y = F.square(F.exp(F.square(x)))
    y.backward()
    x.grad  # variable([3.297442541400256])
"""

from .domain import ConfigurationError, RevgradError, ShapeError, StateError
from .infrastructure import functions as F
from .infrastructure._module import Layer
from .infrastructure._numerical import numerical_diff, numerical_grad
from .infrastructure._parameter import Parameter
from .infrastructure._random import RandomSource
from .infrastructure.autograd import (
    Config,
    Function,
    Variable,
    as_variable,
    no_grad,
    test_mode,
    using_config,
)
from .infrastructure.fully_connected import Linear
from .infrastructure.graph import get_dot_graph
from .infrastructure.models import MLP, LSTMModel, Model
from .infrastructure.optimizers import SGD, Adam, AdamW, ClipGrad, Momentum, WeightDecay
from .infrastructure.recurrent import LSTM, RNN
from .infrastructure.tensor import Tensor

__version__ = "0.1.0a0"

__all__ = [
    "Adam",
    "AdamW",
    "ClipGrad",
    "Config",
    "ConfigurationError",
    "F",
    "Function",
    "LSTM",
    "LSTMModel",
    "Layer",
    "Linear",
    "MLP",
    "Model",
    "Momentum",
    "Parameter",
    "RNN",
    "RandomSource",
    "RevgradError",
    "SGD",
    "ShapeError",
    "StateError",
    "Tensor",
    "Variable",
    "WeightDecay",
    "as_variable",
    "get_dot_graph",
    "no_grad",
    "numerical_diff",
    "numerical_grad",
    "test_mode",
    "using_config",
]
