"""Exceptions raised by OptionLock."""

from __future__ import annotations


class OptionLockError(RuntimeError):
    """Base class for OptionLock errors."""


class HostShapeError(OptionLockError):
    """The host UI tree does not have the shape OptionLock expects.

    Raised when a required container or the distinguished item cannot be
    located. This indicates an incompatible host version; there is no
    degraded mode, so initialization must abort.
    """

    def __init__(self, message: str, *, container: str = "", item: str = ""):
        super().__init__(message)
        self.container = container
        self.item = item
