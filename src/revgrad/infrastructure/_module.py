"""
Infrastructure layer base class.

This module provides a concrete `Layer` implementation that satisfies the
domain-level `ILayer` protocol. It implements common conveniences used by
neural network layers, including:

- implicit parameter and sublayer registration on attribute assignment
- recursive, lexicographically ordered parameter traversal (`parameters`)
- gradient clearing and recurrent state reset across the whole tree
- `__call__` forwarding to `forward`, unwrapping single outputs

Concrete layers (Linear, RNN, LSTM, models) subclass `Layer` and implement
`forward`.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Union

from ._parameter import Parameter
from .autograd._variable import Variable


class Layer:
    """
    Infrastructure base class for layers.

    Attributes
    ----------
    _parameters : Dict[str, Parameter]
        Parameters assigned directly on this layer.
    _layers : Dict[str, Layer]
        Child layers assigned directly on this layer.

    Notes
    -----
    - Assigning a `Parameter` or `Layer` to an attribute registers it, e.g.:
          self.w = Parameter(...)
          self.l1 = Linear(10)
    - Assigning None to a registered name unregisters it. This is how lazily
      initialised parameters start out.
    - `parameters()` flattens the tree into dotted names (``"l1.w"``) sorted
      lexicographically, so iteration order does not depend on assignment
      order.
    """

    def __init__(self) -> None:
        super().__setattr__("_parameters", {})
        super().__setattr__("_layers", {})

    def __setattr__(self, name: str, value: Any) -> None:
        if name in {"_parameters", "_layers"}:
            super().__setattr__(name, value)
            return

        self._parameters.pop(name, None)
        self._layers.pop(name, None)

        if isinstance(value, Parameter):
            self._parameters[name] = value
        elif isinstance(value, Layer):
            self._layers[name] = value

        super().__setattr__(name, value)

    def _named_parameters(self, prefix: str = "") -> Iterator[tuple]:
        base = prefix + "." if prefix else ""

        for name, p in self._parameters.items():
            yield (f"{base}{name}", p)

        for child_name, child in self._layers.items():
            yield from child._named_parameters(f"{base}{child_name}")

    def parameters(self) -> Dict[str, Parameter]:
        """
        Return every parameter of this layer and its sublayers.

        Returns
        -------
        Dict[str, Parameter]
            Mapping from dotted path to parameter, ordered lexicographically
            by path.
        """
        return dict(sorted(self._named_parameters(), key=lambda kv: kv[0]))

    def params(self) -> Iterator[Parameter]:
        """
        Iterate over the parameters in `parameters()` order.
        """
        yield from self.parameters().values()

    def clear_grads(self) -> None:
        """
        Clear the gradient of every parameter in the tree.
        """
        for p in self.params():
            p.cleargrad()

    def reset_state(self) -> None:
        """
        Reset recurrent state in every sublayer.

        Stateless layers inherit this recursion unchanged; stateful layers
        override it to clear their own state and then call ``super()``.
        """
        for child in self._layers.values():
            child.reset_state()

    def forward(self, *xs: Variable) -> List[Variable]:
        """
        Execute the forward computation of the layer.

        Subclasses must implement this and return a list of outputs.
        """
        raise NotImplementedError

    def __call__(self, *xs: Any) -> Union[Variable, List[Variable]]:
        """
        Call the layer as a function, delegating to `forward`.

        A single output is returned as-is; several are returned as a list.
        """
        outputs = list(self.forward(*xs))
        return outputs[0] if len(outputs) == 1 else outputs

    def __repr__(self) -> str:
        children = ", ".join(self._layers)
        return f"{type(self).__name__}({children})"
