from ._lstm_module import LSTM
from ._rnn_module import RNN

__all__ = [
    LSTM.__name__,
    RNN.__name__,
]
