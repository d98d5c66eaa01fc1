"""Host data models: observable UI items, containers, and documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

Handler = Callable[..., None]


class EnabledChanged:
    """A change-notification channel.

    Handlers are called synchronously, in subscription order, as
    ``handler(sender, *args)``. Firing iterates over a snapshot so a
    handler may unsubscribe itself (or others) while being dispatched.
    """

    def __init__(self) -> None:
        self._handlers: list[Handler] = []

    def subscribe(self, handler: Handler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: Handler) -> None:
        """Remove one registration of ``handler``; a no-op if absent."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def fire(self, sender: Any, *args: Any) -> None:
        for handler in list(self._handlers):
            handler(sender, *args)

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def __contains__(self, handler: Handler) -> bool:
        return handler in self._handlers


@dataclass(eq=False)
class MenuItem:
    """A host-owned UI control with an observable enabled flag.

    Writing ``enabled`` fires ``enabled_changed`` when the value changes.
    Some hosts also fire on identical writes; ``notify_on_same_value``
    reproduces that.
    """

    name: str
    initial_enabled: bool = True
    notify_on_same_value: bool = False
    enabled_changed: EnabledChanged = field(default_factory=EnabledChanged, repr=False)
    write_count: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._enabled = self.initial_enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        value = bool(value)
        self.write_count += 1
        changed = value != self._enabled
        self._enabled = value
        if changed or self.notify_on_same_value:
            self.enabled_changed.fire(self)


@dataclass(eq=False)
class DropDownItem(MenuItem):
    """A top-level menu entry holding a drop-down of child items."""

    drop_down_items: list[MenuItem] = field(default_factory=list)


@dataclass
class Container:
    """An enumerable collection of items (tray menu, main menu, toolbar)."""

    name: str
    items: list[Any] = field(default_factory=list)

    def find(self, item_name: str) -> MenuItem | None:
        for item in self.items:
            if isinstance(item, MenuItem) and item.name == item_name:
                return item
        return None


@dataclass
class Document:
    """An open document (database) tab in the host."""

    name: str
    is_open: bool = True
    locked: bool = False


@dataclass
class DocumentManager:
    """Enumerates the host's document tabs."""

    documents: list[Document] = field(default_factory=list)

    def get(self, name: str) -> Document | None:
        for doc in self.documents:
            if doc.name == name:
                return doc
        return None

    def __len__(self) -> int:
        return len(self.documents)
