"""
Process-wide autograd mode flags and their scoped switches.

`Config.enable_backprop` controls whether applying an operation records a
graph node. `Config.train` selects training behaviour for mode-dependent
operations such as dropout. Both flags start out True.

`no_grad()` and `test_mode()` flip a flag and return a `ConfigScope` handle.
Calling `end()` on the handle, or leaving the ``with`` block it was used in,
restores the previous value on every exit path, including exceptions.

Example
-------
    with no_grad():
        y = square(x)          # no creator is recorded

    scope = test_mode()
    try:
        y = dropout(x)         # identity in test mode
    finally:
        scope.end()
"""

from __future__ import annotations

from typing import Any, Optional

from ...domain._errors import ConfigurationError


class Config:
    """
    Global autograd mode flags.

    Attributes
    ----------
    enable_backprop : bool
        When False, operations compute their outputs without recording
        creators or retaining inputs.
    train : bool
        When False, training-only behaviour (dropout masks) is disabled.
    """

    enable_backprop: bool = True
    train: bool = True


_FLAGS = ("enable_backprop", "train")


class ConfigScope:
    """
    Handle restoring a `Config` flag to its previous value.

    Parameters
    ----------
    name : str
        Flag name on `Config`.
    value : bool
        Value to hold while the scope is active.

    Notes
    -----
    - `end()` is idempotent; only the first call restores the flag.
    - Scopes must be released in reverse order of acquisition when nested.
    """

    def __init__(self, name: str, value: bool) -> None:
        if name not in _FLAGS:
            raise ConfigurationError(f"unknown config flag {name!r}; expected one of {_FLAGS}")

        self.name = name
        self._previous: Optional[bool] = getattr(Config, name)
        self._active = True
        setattr(Config, name, bool(value))

    def end(self) -> None:
        """
        Restore the previous flag value.
        """
        if not self._active:
            return
        setattr(Config, self.name, self._previous)
        self._active = False

    def __enter__(self) -> "ConfigScope":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.end()


def using_config(name: str, value: bool) -> ConfigScope:
    """
    Set a `Config` flag and return the scope that restores it.
    """
    return ConfigScope(name, value)


def no_grad() -> ConfigScope:
    """
    Disable graph recording until the returned scope ends.
    """
    return using_config("enable_backprop", False)


def test_mode() -> ConfigScope:
    """
    Switch to inference behaviour until the returned scope ends.
    """
    return using_config("train", False)


# Keep pytest from collecting the helper above as a test function.
test_mode.__test__ = False
