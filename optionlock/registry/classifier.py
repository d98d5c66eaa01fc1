"""Classification — sort host UI items into governed groups.

Every item found in the tray menu, the main menu drop-downs and the main
toolbar lands in exactly one group. The allow-list names the exceptions;
any item it does not mention is governed as an unlocked-document item, so
items added by future host versions are locked down rather than silently
left alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import yaml

from optionlock.exceptions import HostShapeError
from optionlock.host.models import Container, DropDownItem, MenuItem

logger = logging.getLogger(__name__)


class ItemGroup(Enum):
    """Which rule governs an item."""

    UNLOCKED_DB = "unlocked_db"  # Enabled only while an unlocked document exists
    NO_DOC = "no_doc"  # Enabled while no document is open, or one is unlocked
    DISTINGUISHED = "distinguished"  # Host's has-docs indicator; read, never written
    UNGOVERNED = "ungoverned"  # Never touched


@dataclass
class ContainerRules:
    """Allow-list entries for one container."""

    exempt: list[str] = field(default_factory=list)
    no_doc: list[str] = field(default_factory=list)
    distinguished: list[str] = field(default_factory=list)

    def classify(self, name: str) -> ItemGroup:
        if name in self.exempt:
            return ItemGroup.UNGOVERNED
        if name in self.distinguished:
            return ItemGroup.DISTINGUISHED
        if name in self.no_doc:
            return ItemGroup.NO_DOC
        return ItemGroup.UNLOCKED_DB


@dataclass
class AllowList:
    """Classification rules for every container OptionLock walks."""

    tray: ContainerRules = field(default_factory=ContainerRules)
    main_menu: ContainerRules = field(default_factory=ContainerRules)
    toolbar: ContainerRules = field(default_factory=ContainerRules)
    toolbar_key: str = "m_toolMain"

    def rules(self) -> dict[str, ContainerRules]:
        return {"tray": self.tray, "main_menu": self.main_menu, "toolbar": self.toolbar}


DEFAULT_ALLOW_LIST = AllowList(
    tray=ContainerRules(
        exempt=["m_ctxTrayTray", "m_ctxTrayLock", "m_ctxTrayFileExit"],
    ),
    main_menu=ContainerRules(
        exempt=[
            "m_menuFileExit",
            "m_menuHelpContents",
            "m_menuHelpWebsite",
            "m_menuHelpDonate",
            "m_menuHelpAbout",
        ],
        no_doc=["m_menuFileOpen", "m_menuFileRecent"],
        distinguished=["m_menuFileLock"],
    ),
    toolbar=ContainerRules(
        exempt=["m_tbLockWorkspace"],
        no_doc=["m_tbOpenDatabase"],
    ),
)


@dataclass
class Classification:
    """Result of walking the host UI tree."""

    unlocked_db_items: list[MenuItem] = field(default_factory=list)
    no_doc_items: list[MenuItem] = field(default_factory=list)
    distinguished: MenuItem | None = None
    ungoverned: list[MenuItem] = field(default_factory=list)
    _groups: dict[MenuItem, ItemGroup] = field(default_factory=dict, repr=False)

    def add(self, group: ItemGroup, item: MenuItem) -> None:
        """Record ``item`` in ``group``.

        An item reachable from more than one container is kept once. If the
        containers disagree about its group, the host shape is ambiguous.
        """
        previous = self._groups.get(item)
        if previous == group:
            return
        if previous is not None:
            raise HostShapeError(
                f"Item '{item.name}' classified as both {previous.value} and {group.value}",
                item=item.name,
            )
        self._groups[item] = group

        if group == ItemGroup.UNLOCKED_DB:
            self.unlocked_db_items.append(item)
        elif group == ItemGroup.NO_DOC:
            self.no_doc_items.append(item)
        elif group == ItemGroup.DISTINGUISHED:
            if self.distinguished is not None and self.distinguished is not item:
                raise HostShapeError(
                    f"More than one distinguished item: "
                    f"'{self.distinguished.name}' and '{item.name}'",
                    item=item.name,
                )
            self.distinguished = item
        else:
            self.ungoverned.append(item)


def classify_host(host, allow_list: AllowList | None = None) -> Classification:
    """Walk the host's tray menu, main menu and main toolbar and classify each item.

    Raises:
        HostShapeError: a container or document event source is missing, an
            item lands in two groups, or no distinguished item exists.
    """
    allow_list = allow_list or DEFAULT_ALLOW_LIST
    result = Classification()

    for event in ("file_opened", "file_closed"):
        if getattr(host, event, None) is None:
            raise HostShapeError(f"Host event source '{event}' not found", container=event)

    tray = _require_container(getattr(host, "tray_menu", None), "tray")
    for item in tray.items:
        if isinstance(item, MenuItem):
            result.add(allow_list.tray.classify(item.name), item)

    main_menu = _require_container(getattr(host, "main_menu", None), "main_menu")
    for top in main_menu.items:
        if isinstance(top, DropDownItem):
            for item in top.drop_down_items:
                if isinstance(item, MenuItem):
                    result.add(allow_list.main_menu.classify(item.name), item)

    index_of_control = getattr(host, "index_of_control", None)
    controls = getattr(host, "controls", None)
    index = index_of_control(allow_list.toolbar_key) if index_of_control else -1
    if controls is None or not 0 <= index < len(controls):
        raise HostShapeError(
            f"Toolbar '{allow_list.toolbar_key}' not found in host controls",
            container=allow_list.toolbar_key,
        )
    toolbar = _require_container(controls[index], allow_list.toolbar_key)
    for item in toolbar.items:
        if isinstance(item, MenuItem):
            result.add(allow_list.toolbar.classify(item.name), item)

    if result.distinguished is None:
        expected = ", ".join(
            name for rules in allow_list.rules().values() for name in rules.distinguished
        )
        raise HostShapeError(
            f"Distinguished item not found (expected one of: {expected or 'none configured'})",
            item=expected,
        )

    logger.debug(
        "classified host: %d unlocked-db, %d no-doc, %d ungoverned, distinguished=%s",
        len(result.unlocked_db_items),
        len(result.no_doc_items),
        len(result.ungoverned),
        result.distinguished.name,
    )
    return result


def load_allow_list(path: str | Path) -> AllowList:
    """Load an allow-list from a YAML file.

    Expected shape::

        toolbar_key: m_toolMain
        tray:
          exempt: [m_ctxTrayTray]
        main_menu:
          no_doc: [m_menuFileOpen]
          distinguished: [m_menuFileLock]
        toolbar:
          exempt: [m_tbLockWorkspace]
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError("Allow-list must be a mapping")

    unknown = set(data) - {"tray", "main_menu", "toolbar", "toolbar_key"}
    if unknown:
        raise ValueError(f"Unknown allow-list keys: {sorted(unknown)}")

    allow_list = AllowList(toolbar_key=data.get("toolbar_key", "m_toolMain"))
    for container in ("tray", "main_menu", "toolbar"):
        setattr(allow_list, container, _parse_rules(container, data.get(container) or {}))
    return allow_list


def _parse_rules(container: str, data: dict) -> ContainerRules:
    if not isinstance(data, dict):
        raise ValueError(f"Rules for '{container}' must be a mapping")

    unknown = set(data) - {"exempt", "no_doc", "distinguished"}
    if unknown:
        raise ValueError(f"Unknown keys for '{container}': {sorted(unknown)}")

    rules = ContainerRules()
    for key in ("exempt", "no_doc", "distinguished"):
        names = data.get(key, [])
        if not isinstance(names, list):
            raise ValueError(f"'{container}.{key}' must be a list of item names")
        setattr(rules, key, [str(n) for n in names])
    return rules


def _require_container(container, name: str) -> Container:
    if container is None:
        raise HostShapeError(f"Host container '{name}' not found", container=name)
    return container
