"""Host layouts — describe a host UI tree by item names and build it in memory."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from optionlock.host.models import Container, DropDownItem, MenuItem
from optionlock.host.simulated import SimulatedHost


class HostLayout(BaseModel):
    """Item names per container.

    ``main_menu`` maps each top-level drop-down to its child item names;
    ``toolbars`` maps each top-level control key to its item names.
    """

    tray: list[str] = Field(default_factory=list)
    main_menu: dict[str, list[str]] = Field(default_factory=dict)
    toolbars: dict[str, list[str]] = Field(default_factory=dict)
    has_docs_item: str = "m_menuFileLock"
    refresh_items: list[str] = Field(default_factory=list)


DEFAULT_LAYOUT = HostLayout(
    tray=[
        "m_ctxTrayTray",
        "m_ctxTrayGenPw",
        "m_ctxTrayOptions",
        "m_ctxTrayLock",
        "m_ctxTrayFileExit",
    ],
    main_menu={
        "m_menuFile": [
            "m_menuFileNew",
            "m_menuFileOpen",
            "m_menuFileRecent",
            "m_menuFileClose",
            "m_menuFileSave",
            "m_menuFilePrint",
            "m_menuFileLock",
            "m_menuFileExit",
        ],
        "m_menuEdit": ["m_menuEditFind", "m_menuEditSelectAll"],
        "m_menuTools": ["m_menuToolsPwGenerator", "m_menuToolsOptions", "m_menuToolsPlugins"],
        "m_menuHelp": [
            "m_menuHelpContents",
            "m_menuHelpWebsite",
            "m_menuHelpDonate",
            "m_menuHelpAbout",
        ],
    },
    toolbars={
        "m_toolMain": [
            "m_tbNewDatabase",
            "m_tbOpenDatabase",
            "m_tbSaveDatabase",
            "m_tbFind",
            "m_tbLockWorkspace",
        ],
    },
    refresh_items=["m_menuFileClose", "m_menuToolsOptions"],
)


def build_host(layout: HostLayout | None = None) -> SimulatedHost:
    """Build a document-less in-memory host from a layout."""
    layout = layout or DEFAULT_LAYOUT

    def item(name: str) -> MenuItem:
        # With no documents open the has-docs item starts disabled.
        return MenuItem(name=name, initial_enabled=name != layout.has_docs_item)

    tray = Container(name="tray", items=[item(n) for n in layout.tray])
    main_menu = Container(
        name="main_menu",
        items=[
            DropDownItem(name=top, drop_down_items=[item(n) for n in children])
            for top, children in layout.main_menu.items()
        ],
    )
    controls = [
        Container(name=key, items=[item(n) for n in names])
        for key, names in layout.toolbars.items()
    ]

    return SimulatedHost(
        tray_menu=tray,
        main_menu=main_menu,
        controls=controls,
        has_docs_item_name=layout.has_docs_item,
        refresh_item_names=list(layout.refresh_items),
    )


def load_layout(path: str | Path) -> HostLayout:
    """Load a host layout from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return HostLayout.model_validate(data)
