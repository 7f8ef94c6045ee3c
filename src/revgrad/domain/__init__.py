"""
Domain-level contracts: errors, protocols, and abstract base classes.
"""

from ._errors import ConfigurationError, RevgradError, ShapeError, StateError
from ._function import Forwarder
from ._module import ILayer
from ._optimizers import Hook, IOptimizer
from ._parameter import IParameter
from ._random import IRandomSource

__all__ = [
    "ConfigurationError",
    "Forwarder",
    "Hook",
    "ILayer",
    "IOptimizer",
    "IParameter",
    "IRandomSource",
    "RevgradError",
    "ShapeError",
    "StateError",
]
