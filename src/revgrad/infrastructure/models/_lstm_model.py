"""
Sequence regressor: an `LSTM` followed by a `Linear` read-out.
"""

from __future__ import annotations

from typing import List, Optional

from ...domain._random import IRandomSource
from ..autograd._variable import Variable
from ..fully_connected import Linear
from ..recurrent import LSTM
from ._models import Model


class LSTMModel(Model):
    """
    ``y_t = Linear(LSTM(x_t))`` over one time step per call.

    Parameters
    ----------
    hidden_size : int
        LSTM hidden size.
    out_size : int
        Read-out size.
    rng : IRandomSource, optional
        Source shared by both layers for weight initialisation.

    Notes
    -----
    The recurrent state persists between calls; use `reset_state()` between
    independent sequences.
    """

    def __init__(self, hidden_size: int, out_size: int, rng: Optional[IRandomSource] = None) -> None:
        super().__init__()
        self.lstm = LSTM(hidden_size, rng=rng)
        self.fc = Linear(out_size, rng=rng)

    def forward(self, *xs: Variable) -> List[Variable]:
        return [self.fc(self.lstm(xs[0]))]
