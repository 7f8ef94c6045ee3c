"""
NumPy-backed pseudo-random source.

`RandomSource` implements the domain `IRandomSource` protocol on top of a
`numpy.random.Generator` (PCG64). A source created without a seed draws its
state from OS entropy; a seeded source is fully deterministic.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ..domain._random import IRandomSource


class RandomSource:
    """
    Pseudo-random source yielding uniform and standard-normal samples.

    Parameters
    ----------
    seed : int or None, optional
        Seed for the underlying generator. None draws OS entropy.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = np.random.default_rng(seed)

    @classmethod
    def const(cls, *seeds: int) -> "RandomSource":
        """
        Build a deterministic source from one or more integer seeds.

        Omitting every seed is equivalent to ``const(0)``.
        """
        return cls(list(seeds) if seeds else 0)

    def uniform(self, size: Sequence[int]) -> np.ndarray:
        return self._rng.random(tuple(size))

    def normal(self, size: Sequence[int]) -> np.ndarray:
        return self._rng.standard_normal(tuple(size))


def resolve_source(src: Optional[IRandomSource]) -> IRandomSource:
    """
    Return `src`, or a fresh non-deterministic source when it is None.
    """
    if src is None:
        return RandomSource()
    if not isinstance(src, IRandomSource):
        raise TypeError(f"expected an IRandomSource, got {type(src).__name__}")
    return src
