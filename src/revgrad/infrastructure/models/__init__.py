from ._lstm_model import LSTMModel
from ._mlp import MLP
from ._models import Model

__all__ = [
    LSTMModel.__name__,
    MLP.__name__,
    Model.__name__,
]
