"""
N-dimensional tensor algebra (NumPy CPU backend).

Public API
----------
- ``Tensor``: the concrete tensor class.
"""

from ._tensor import Tensor

__all__ = [
    Tensor.__name__,
]
