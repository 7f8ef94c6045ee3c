"""
Elman recurrent layer.

`RNN` carries one hidden state across calls:

    h_0 = tanh(x2h(x))                      (first step)
    h_t = tanh(x2h(x) + h2h(h_{t-1}))       (later steps)

The hidden state is a graph variable, so gradients flow through every step
since the last `reset_state()` (or since the last `unchain_backward()` cut
during truncated BPTT).
"""

from __future__ import annotations

from typing import List, Optional

from ...domain._errors import ConfigurationError, StateError
from ...domain._random import IRandomSource
from .._module import Layer
from ..autograd._variable import Variable
from ..fully_connected import Linear
from ..functions import add, tanh


class RNN(Layer):
    """
    Single-layer tanh RNN.

    Parameters
    ----------
    hidden_size : int
        Size of the hidden state.
    in_size : int, optional
        Input feature size; inferred on the first call when omitted.
    rng : IRandomSource, optional
        Source used to initialise both weight matrices.

    Notes
    -----
    ``h2h`` has no bias; the input projection ``x2h`` carries it.
    """

    def __init__(
        self,
        hidden_size: int,
        in_size: Optional[int] = None,
        rng: Optional[IRandomSource] = None,
    ) -> None:
        super().__init__()
        if hidden_size < 1:
            raise ConfigurationError(f"hidden_size must be >= 1, got {hidden_size}")

        self.hidden_size = int(hidden_size)
        self.x2h = Linear(hidden_size, in_size=in_size, rng=rng)
        self.h2h = Linear(hidden_size, in_size=hidden_size, no_bias=True, rng=rng)
        self.h: Optional[Variable] = None

    @property
    def state(self) -> Variable:
        """
        Current hidden state.

        Raises
        ------
        StateError
            If no step has run since construction or the last reset.
        """
        if self.h is None:
            raise StateError("RNN hidden state is not set; call the layer first")
        return self.h

    def reset_state(self) -> None:
        self.h = None
        super().reset_state()

    def forward(self, *xs: Variable) -> List[Variable]:
        if self.h is None:
            h_new = tanh(self.x2h(xs[0]))
        else:
            h_new = tanh(add(self.x2h(xs[0]), self.h2h(self.h)))

        self.h = h_new
        return [h_new]
