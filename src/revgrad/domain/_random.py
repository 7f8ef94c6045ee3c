"""
Domain-level pseudo-random source contract.

Random tensor factories, dropout masks, and weight initializers draw their
samples from an explicitly passed source satisfying `IRandomSource`. There is
no global random state in revgrad.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

import numpy as np


@runtime_checkable
class IRandomSource(Protocol):
    """
    Capability to yield uniform and standard-normal floating-point samples.

    Implementations may be deterministic (seeded) or draw from OS entropy.
    """

    def uniform(self, size: Sequence[int]) -> np.ndarray:
        """
        Return samples drawn uniformly from ``[0, 1)`` with the given shape.
        """
        ...

    def normal(self, size: Sequence[int]) -> np.ndarray:
        """
        Return standard-normal samples with the given shape.
        """
        ...
