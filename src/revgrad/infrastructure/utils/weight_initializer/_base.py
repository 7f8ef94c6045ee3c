"""
Weight initializer registry and dispatch utilities.

This module defines the concrete `WeightInitializer` used by layers to build
their initial weights from a registered strategy name.

Design
------
- Initializers are registered by string name via a decorator-based registry.
- Each initializer is a callable ``(shape, src) -> Tensor``; `src` is an
  `IRandomSource` (a fresh one is created when omitted).
- The dispatcher resolves an initializer by name at construction time and
  invokes it via `__call__`.

Usage example
-------------
Registering an initializer:

    @WeightInitializer.register_initializer("xavier")
    def xavier(shape, src): ...

Applying an initializer:

    init = WeightInitializer("xavier")
    w = init((in_size, out_size), rng)
"""

from __future__ import annotations

from typing import Callable, ClassVar, Dict, Optional, Sequence, TypeVar

from ....domain._errors import ConfigurationError
from ....domain._random import IRandomSource
from ....domain.utils._weight_initialization import _WeightInitializer
from ..._random import resolve_source
from ...tensor._tensor import Tensor

T = TypeVar("T", bound=Callable[..., Tensor])


class WeightInitializer(_WeightInitializer):
    """
    Registry-backed weight initializer dispatcher.

    Raises
    ------
    ConfigurationError
        If `initializer_name` is not registered.
    """

    INITIALIZERS: ClassVar[Dict[str, Callable[..., Tensor]]] = {}

    def __init__(self, initializer_name: str) -> None:
        try:
            self._initializer: Callable[..., Tensor] = self.INITIALIZERS[initializer_name]
        except KeyError as e:
            available = ", ".join(sorted(self.INITIALIZERS)) or "<none>"
            raise ConfigurationError(
                f"Unsupported initializer name: {initializer_name!r}. "
                f"Available: {available}"
            ) from e
        self.name = initializer_name

    @classmethod
    def register_initializer(cls, name: str, *, overwrite: bool = False) -> Callable[[T], T]:
        """
        Decorator to register a weight initializer under `name`.

        Parameters
        ----------
        name:
            Registry key used to retrieve the initializer later.
        overwrite:
            If False (default), raises if `name` is already registered.
        """
        if not isinstance(name, str) or not name:
            raise ConfigurationError("Initializer name must be a non-empty string")

        def decorator(func: T) -> T:
            if not overwrite and name in cls.INITIALIZERS:
                raise ConfigurationError(f"Initializer already registered: {name!r}")
            cls.INITIALIZERS[name] = func
            return func

        return decorator

    @classmethod
    def available(cls) -> tuple:
        """Return registered initializer names (sorted)."""
        return tuple(sorted(cls.INITIALIZERS))

    def __call__(self, shape: Sequence[int], src: Optional[IRandomSource] = None) -> Tensor:
        return self._initializer(tuple(shape), resolve_source(src))
