"""Host layer — the UI items, containers and documents OptionLock governs.

OptionLock never owns the host UI tree. This package models only the
surface it needs:
- Items with an observable ``enabled`` flag
- Containers that can be enumerated (tray menu, main menu, toolbars)
- A document manager with per-document open/lock state
"""
