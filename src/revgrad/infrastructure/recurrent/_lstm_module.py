"""
Long short-term memory layer.

`LSTM` keeps a hidden state ``h`` and a cell state ``c`` across calls. Each
gate is a sum of an input projection (``x2*``, with bias) and a recurrent
projection (``h2*``, without bias):

    f = sigmoid(x2f(x) + h2f(h))
    i = sigmoid(x2i(x) + h2i(h))
    o = sigmoid(x2o(x) + h2o(h))
    u = tanh(x2u(x) + h2u(h))

    c' = f * c + i * u
    h' = o * tanh(c')

On the first step after construction or `reset_state()` there is no state
yet: the recurrent projections are skipped and ``c' = i * u``. The ``h2*``
weights therefore receive no gradient from a single-step graph.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from ...domain._errors import ConfigurationError, StateError
from ...domain._random import IRandomSource
from .._module import Layer
from ..autograd._variable import Variable
from ..fully_connected import Linear
from ..functions import add, mul, sigmoid, tanh

_GATES = ("f", "i", "o", "u")


class LSTM(Layer):
    """
    Single-layer LSTM.

    Parameters
    ----------
    hidden_size : int
        Size of the hidden and cell states.
    in_size : int, optional
        Input feature size; inferred on the first call when omitted.
    rng : IRandomSource, optional
        Source used to initialise all eight weight matrices.
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
        for g in _GATES:
            setattr(self, f"x2{g}", Linear(hidden_size, in_size=in_size, rng=rng))
        for g in _GATES:
            setattr(self, f"h2{g}", Linear(hidden_size, in_size=hidden_size, no_bias=True, rng=rng))

        self.h: Optional[Variable] = None
        self.c: Optional[Variable] = None

    @property
    def state(self) -> Tuple[Variable, Variable]:
        """
        Current ``(h, c)`` pair.

        Raises
        ------
        StateError
            If no step has run since construction or the last reset.
        """
        if self.h is None or self.c is None:
            raise StateError("LSTM state is not set; call the layer first")
        return self.h, self.c

    def reset_state(self) -> None:
        self.h = None
        self.c = None
        super().reset_state()

    def _gate(self, name: str, x: Variable) -> Variable:
        z = getattr(self, f"x2{name}")(x)
        if self.h is not None:
            z = add(z, getattr(self, f"h2{name}")(self.h))
        return z

    def forward(self, *xs: Variable) -> List[Variable]:
        x = xs[0]
        f = sigmoid(self._gate("f", x))
        i = sigmoid(self._gate("i", x))
        o = sigmoid(self._gate("o", x))
        u = tanh(self._gate("u", x))

        if self.c is None:
            c_new = mul(i, u)
        else:
            c_new = add(mul(f, self.c), mul(i, u))

        h_new = mul(o, tanh(c_new))

        self.h, self.c = h_new, c_new
        return [h_new]
