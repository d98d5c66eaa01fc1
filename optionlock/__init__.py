"""OptionLock — keep a host application's UI locked down while no unlocked document is open."""

__version__ = "0.1.0"
