"""
Autograd engine: mode flags, graph variables, and graph functions.
"""

from ._config import Config, ConfigScope, no_grad, test_mode, using_config
from ._function import Function
from ._variable import Variable, as_variable

__all__ = [
    Config.__name__,
    ConfigScope.__name__,
    Function.__name__,
    Variable.__name__,
    as_variable.__name__,
    no_grad.__name__,
    test_mode.__name__,
    using_config.__name__,
]
