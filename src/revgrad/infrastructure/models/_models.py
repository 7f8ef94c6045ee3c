"""
Base class for complete networks.

`Model` is a semantic specialization of `Layer` for top-level networks. It
keeps every `Layer` behavior (registration, ordered parameters, gradient
clearing, state reset) and adds inference and inspection helpers:

- `predict` runs a forward pass with graph recording and training-only
  behavior (dropout) switched off.
- `plot` renders the graph of one forward pass as DOT text.
"""

from __future__ import annotations

from typing import Any

from .._module import Layer
from ..autograd._config import no_grad, test_mode
from ..autograd._variable import Variable
from ..graph import get_dot_graph


class Model(Layer):
    """
    Base class for top-level models.

    Subclasses build their layers in ``__init__`` and implement `forward`.
    """

    def predict(self, *xs: Any) -> Variable:
        """
        Forward pass under ``no_grad()`` and ``test_mode()``.

        Returns
        -------
        Variable
            The first output, with no creator attached.
        """
        with no_grad(), test_mode():
            return self.forward(*xs)[0]

    def plot(self, *xs: Any, verbose: bool = False) -> str:
        """
        Run a forward pass and return its computation graph as DOT text.

        Parameters
        ----------
        *xs : Any
            Model inputs.
        verbose : bool, optional
            Include variable data in node labels. Defaults to False.
        """
        y = self.forward(*xs)[0]
        return get_dot_graph(y, verbose=verbose)
