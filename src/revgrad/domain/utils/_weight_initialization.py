"""
Abstract interfaces and utilities for weight initialization.

This module defines the abstract base class for weight initializer
dispatchers, along with a helper computing fan-in from a weight shape.

Weight matrices in revgrad are laid out ``(in_size, out_size)`` so that a
layer computes ``x @ W``. Fan-in is therefore the leading dimension.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Sequence


class _WeightInitializer(ABC):
    """
    Abstract base class for weight initializer dispatchers.

    Design notes
    ------------
    - Initializers are identified by string names.
    - Each initializer is a callable ``(shape, src) -> Tensor`` that returns
      a freshly allocated tensor.
    """

    INITIALIZERS: Dict[str, Callable] = {}

    @classmethod
    @abstractmethod
    def register_initializer(cls, name: str, *, overwrite: bool = False) -> Callable:
        """
        Return a decorator registering an initializer under `name`.
        """
        ...

    @classmethod
    @abstractmethod
    def available(cls) -> tuple:
        """
        Return the sorted names of all registered initializers.
        """
        ...

    @abstractmethod
    def __call__(self, shape: Sequence[int], src: Optional[Any] = None) -> Any:
        """
        Build an initialized tensor of `shape`, drawing from `src`.
        """
        ...


def _calculate_fan_in(shape: tuple) -> int:
    """
    Compute the fan-in of an ``(in_size, out_size)`` weight shape.

    Parameters
    ----------
    shape:
        Shape of the weight tensor.

    Returns
    -------
    int
        Number of inputs feeding one output unit (at least 1).
    """
    if len(shape) == 0:
        return 1
    return max(1, int(shape[0]))
