"""
Multi-layer perceptron.

`MLP` stacks one `Linear` per entry of `out_sizes` and applies the
activation between consecutive layers (never after the last one):

    y = L_n(act(...act(L_1(x))))

Layers are registered as ``l0``, ``l1``, ... so their parameters appear as
``l0.w``, ``l0.b``, and so on.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from ...domain._errors import ConfigurationError
from ...domain._random import IRandomSource
from ..autograd._variable import Variable
from ..fully_connected import Linear
from ..functions import sigmoid
from ._models import Model


class MLP(Model):
    """
    Fully connected feed-forward network.

    Parameters
    ----------
    out_sizes : Sequence[int]
        Output size of each layer, in order. Input sizes are inferred.
    activation : Callable[[Variable], Variable], optional
        Applied after every layer but the last. Defaults to `sigmoid`.
    rng : IRandomSource, optional
        Source shared by all layers for weight initialisation.

    Raises
    ------
    ConfigurationError
        If `out_sizes` is empty.
    """

    def __init__(
        self,
        out_sizes: Sequence[int],
        activation: Callable[[Variable], Variable] = sigmoid,
        rng: Optional[IRandomSource] = None,
    ) -> None:
        super().__init__()
        if len(out_sizes) == 0:
            raise ConfigurationError("MLP needs at least one layer")

        self.activation = activation
        self.layers: List[Linear] = []
        for i, out_size in enumerate(out_sizes):
            layer = Linear(out_size, rng=rng)
            setattr(self, f"l{i}", layer)
            self.layers.append(layer)

    def forward(self, *xs: Variable) -> List[Variable]:
        x = xs[0]
        for layer in self.layers[:-1]:
            x = self.activation(layer(x))
        return [self.layers[-1](x)]
