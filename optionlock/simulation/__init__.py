"""Scenario simulation — drive OptionLock against an in-memory host."""
