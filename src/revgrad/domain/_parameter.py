"""
Trainable parameter interface definitions.

This module defines the domain-level interface for trainable parameters used
by optimization algorithms. A parameter is a leaf graph node whose data is
updated in place by an optimizer using its accumulated gradient.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class IParameter(Protocol):
    """
    Domain-level interface for trainable parameters.

    Notes
    -----
    - ``grad`` is itself a variable (or None) so that gradients may take part
      in higher-order graphs.
    - Optimizers skip parameters whose ``grad`` is None.
    """

    data: Any
    grad: Optional[Any]

    def cleargrad(self) -> None:
        """
        Reset the gradient slot to None.
        """
        ...
