"""Tests for host UI classification and allow-list loading."""

import tempfile

import pytest
import yaml

from optionlock.exceptions import HostShapeError
from optionlock.host.layout import DEFAULT_LAYOUT, HostLayout, build_host
from optionlock.registry.classifier import (
    DEFAULT_ALLOW_LIST,
    AllowList,
    ContainerRules,
    ItemGroup,
    classify_host,
    load_allow_list,
)


def _names(items) -> set[str]:
    return {i.name for i in items}


def _write_yaml(data) -> str:
    f = tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False)
    yaml.dump(data, f)
    f.close()
    return f.name


# --- Rules ---


def test_unmentioned_item_is_unlocked_db():
    assert ContainerRules().classify("m_menuSomethingNew") == ItemGroup.UNLOCKED_DB


def test_exempt_wins_over_other_lists():
    rules = ContainerRules(exempt=["x"], no_doc=["x"], distinguished=["x"])
    assert rules.classify("x") == ItemGroup.UNGOVERNED


# --- Default host ---


def test_classify_default_host():
    result = classify_host(build_host())

    assert result.distinguished.name == "m_menuFileLock"
    assert _names(result.no_doc_items) == {
        "m_menuFileOpen",
        "m_menuFileRecent",
        "m_tbOpenDatabase",
    }
    assert {
        "m_ctxTrayTray",
        "m_ctxTrayLock",
        "m_ctxTrayFileExit",
        "m_menuFileExit",
        "m_menuHelpAbout",
        "m_tbLockWorkspace",
    } <= _names(result.ungoverned)
    assert {"m_menuFileClose", "m_menuToolsOptions", "m_ctxTrayOptions", "m_tbFind"} <= _names(
        result.unlocked_db_items
    )


def test_groups_are_disjoint():
    result = classify_host(build_host())
    a = _names(result.unlocked_db_items)
    b = _names(result.no_doc_items)
    u = _names(result.ungoverned)
    assert not (a & b) and not (a & u) and not (b & u)
    assert result.distinguished.name not in a | b | u


def test_future_item_is_governed():
    layout = DEFAULT_LAYOUT.model_copy(deep=True)
    layout.main_menu["m_menuTools"].append("m_menuToolsShinyNewThing")
    result = classify_host(build_host(layout))
    assert "m_menuToolsShinyNewThing" in _names(result.unlocked_db_items)


def test_non_toolbar_controls_ignored():
    layout = DEFAULT_LAYOUT.model_copy(deep=True)
    layout.toolbars["m_statusBar"] = ["m_statusText"]
    result = classify_host(build_host(layout))
    all_names = (
        _names(result.unlocked_db_items) | _names(result.no_doc_items) | _names(result.ungoverned)
    )
    assert "m_statusText" not in all_names


# --- Host shape mismatches ---


def test_missing_toolbar_raises():
    layout = DEFAULT_LAYOUT.model_copy(deep=True)
    layout.toolbars = {}
    with pytest.raises(HostShapeError) as exc:
        classify_host(build_host(layout))
    assert exc.value.container == "m_toolMain"


def test_missing_distinguished_item_raises():
    layout = DEFAULT_LAYOUT.model_copy(deep=True)
    layout.main_menu["m_menuFile"].remove("m_menuFileLock")
    with pytest.raises(HostShapeError):
        classify_host(build_host(layout))


def test_missing_container_raises():
    host = build_host()
    host.tray_menu = None
    with pytest.raises(HostShapeError) as exc:
        classify_host(host)
    assert exc.value.container == "tray"


class _MenusOnlyHost:
    """A host exposing menus and document events but no toolbar controls."""

    def __init__(self, host):
        self.tray_menu = host.tray_menu
        self.main_menu = host.main_menu
        self.file_opened = host.file_opened
        self.file_closed = host.file_closed


def test_missing_controls_surface_raises():
    with pytest.raises(HostShapeError) as exc:
        classify_host(_MenusOnlyHost(build_host()))
    assert exc.value.container == "m_toolMain"


def test_missing_document_events_raise():
    host = build_host()
    del host.file_closed
    with pytest.raises(HostShapeError) as exc:
        classify_host(host)
    assert exc.value.container == "file_closed"


def test_item_in_two_groups_raises():
    host = build_host()
    host.tray_menu.items.append(host.find_item("m_tbOpenDatabase"))
    with pytest.raises(HostShapeError) as exc:
        classify_host(host)
    assert exc.value.item == "m_tbOpenDatabase"


def test_item_in_two_containers_with_same_group_kept_once():
    host = build_host()
    host.tray_menu.items.append(host.find_item("m_tbFind"))
    result = classify_host(host)
    assert [i.name for i in result.unlocked_db_items].count("m_tbFind") == 1


def test_two_distinguished_items_raise():
    allow_list = AllowList(
        main_menu=ContainerRules(distinguished=["m_menuFileLock"]),
        toolbar=ContainerRules(distinguished=["m_tbLockWorkspace"]),
    )
    with pytest.raises(HostShapeError):
        classify_host(build_host(), allow_list)


# --- Allow-list loading ---


def test_load_allow_list_from_yaml():
    path = _write_yaml(
        {
            "toolbar_key": "m_toolAlt",
            "main_menu": {
                "exempt": ["m_menuFileExit"],
                "distinguished": ["m_menuFileLock"],
            },
        }
    )
    allow_list = load_allow_list(path)
    assert allow_list.toolbar_key == "m_toolAlt"
    assert allow_list.main_menu.distinguished == ["m_menuFileLock"]
    assert allow_list.tray.exempt == []


def test_loaded_allow_list_classifies_custom_layout():
    layout = HostLayout(
        tray=["tray_quit"],
        main_menu={"file": ["file_open", "file_lock", "file_save"]},
        toolbars={"main_bar": ["bar_find"]},
        has_docs_item="file_lock",
    )
    path = _write_yaml(
        {
            "toolbar_key": "main_bar",
            "tray": {"exempt": ["tray_quit"]},
            "main_menu": {"no_doc": ["file_open"], "distinguished": ["file_lock"]},
        }
    )
    result = classify_host(build_host(layout), load_allow_list(path))
    assert _names(result.no_doc_items) == {"file_open"}
    assert _names(result.unlocked_db_items) == {"file_save", "bar_find"}


def test_load_allow_list_rejects_unknown_keys():
    with pytest.raises(ValueError):
        load_allow_list(_write_yaml({"sidebar": {}}))
    with pytest.raises(ValueError):
        load_allow_list(_write_yaml({"tray": {"hidden": ["x"]}}))


def test_load_allow_list_rejects_non_list():
    with pytest.raises(ValueError):
        load_allow_list(_write_yaml({"tray": {"exempt": "m_ctxTrayTray"}}))


def test_default_allow_list_has_single_distinguished_item():
    names = [n for r in DEFAULT_ALLOW_LIST.rules().values() for n in r.distinguished]
    assert names == ["m_menuFileLock"]
