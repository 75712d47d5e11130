import io
import sys
from types import SimpleNamespace

import pytest

from keal.arguments import Arguments
from keal.entry import Label
from keal.manager import PluginManager
from keal.matching import Matcher, Pattern
from keal.plugin import ActionKind
from keal.usage import Usage


def make_config(**overrides):
    values = dict(plugin_overrides={}, plugin_configs={}, default_plugins=[], terminal_path="xterm")
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def env(tmp_path, monkeypatch):
    for var in ("XDG_CURRENT_DESKTOP", "SWAYSOCK", "XDG_DATA_HOME"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.setenv("XDG_DATA_DIRS", str(tmp_path / "data"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path


@pytest.fixture
def dmenu_manager(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("apple\nbanana\ncherry\n"))
    manager = PluginManager(config=make_config(), usage=Usage(path=tmp_path / "usage.cbor"))
    manager.load_plugins(Arguments(dmenu=True))
    return manager


def names(entries):
    return [entry.name for entry in entries]


def test_dmenu_lists_single_plugin(dmenu_manager):
    assert [plugin.name for _, plugin in dmenu_manager.list_plugins()] == ["Dmenu"]


def test_dmenu_empty_pattern_keeps_order(dmenu_manager):
    entries = dmenu_manager.get_entries(Matcher(), Pattern.parse(""), 10, False)
    assert names(entries) == ["apple", "banana", "cherry"]
    assert all(entry.label.plugin_index == 0 for entry in entries)


def test_dmenu_filters_and_truncates(dmenu_manager):
    assert names(dmenu_manager.get_entries(Matcher(), Pattern.parse("ban"), 10, False)) == ["banana"]
    assert len(dmenu_manager.get_entries(Matcher(), Pattern.parse(""), 2, False)) == 2


def test_dmenu_update_input_returns_query(dmenu_manager):
    query, action = dmenu_manager.update_input("ch", True)
    assert query == "ch"
    assert action.kind is ActionKind.NONE
    assert dmenu_manager.current() is None


def test_dmenu_launch_prints_and_counts_usage(dmenu_manager):
    action = dmenu_manager.launch("", Label(1))
    assert action.kind is ActionKind.PRINT_AND_CLOSE
    assert action.value == "banana"
    assert dmenu_manager.usage.get("Dmenu", "banana") == 1


def test_dmenu_launch_without_selection_prints_query(dmenu_manager):
    action = dmenu_manager.launch("typed", None)
    assert action.kind is ActionKind.PRINT_AND_CLOSE
    assert action.value == "typed"


def test_usage_sorting_puts_used_entry_first(dmenu_manager):
    dmenu_manager.launch("", Label(2))
    assert names(dmenu_manager.get_entries(Matcher(), Pattern.parse(""), 10, True))[0] == "cherry"
    assert names(dmenu_manager.get_entries(Matcher(), Pattern.parse(""), 10, False))[0] == "apple"


def test_builtin_plugins_loaded(env):
    manager = PluginManager(config=make_config())
    manager.load_plugins(Arguments())
    assert [prefix for prefix, _ in manager.list_plugins()] == ["app", "ls", "sm"]


def test_prefix_selects_plugin_and_list_entries(env):
    manager = PluginManager(config=make_config())
    manager.load_plugins(Arguments())
    query, action = manager.update_input("ls ", True)
    assert query == ""
    assert action.kind is ActionKind.NONE
    assert manager.current().name == "List"
    assert manager.usage.get("List", "ls") == 1

    entries = manager.get_entries(Matcher(), Pattern.parse(""), 10, False)
    assert names(entries) == ["app", "ls", "sm"]
    launched = manager.launch("", entries[2].label)
    assert launched.kind is ActionKind.CHANGE_INPUT
    assert launched.value == "sm "


def test_switching_and_leaving_plugin(env):
    manager = PluginManager(config=make_config())
    manager.load_plugins(Arguments())
    manager.update_input("ls x", True)
    manager.update_input("sm x", True)
    assert manager.current().name == "Session Manager"
    query, _ = manager.update_input("plain", True)
    assert query == "plain"
    assert manager.current() is None


def test_kill_clears_current(env):
    manager = PluginManager(config=make_config())
    manager.load_plugins(Arguments())
    manager.update_input("ls ", True)
    assert manager.current().name == "List"
    manager.kill()
    assert manager.current() is None


def test_prefix_override_moves_plugin(env):
    override = SimpleNamespace(prefix="list", icon=None, comment="all plugins")
    manager = PluginManager(config=make_config(plugin_overrides={"List": override}))
    manager.load_plugins(Arguments())
    plugins = dict(manager.list_plugins())
    assert [prefix for prefix, _ in manager.list_plugins()] == ["app", "sm", "list"]
    assert plugins["list"].prefix == "list"
    assert plugins["list"].comment == "all plugins"


def test_unknown_override_is_reported(env, capsys):
    override = SimpleNamespace(prefix=None, icon=None, comment=None)
    manager = PluginManager(config=make_config(plugin_overrides={"Nope": override}))
    manager.load_plugins(Arguments())
    assert "unknown plugin in override: Nope" in capsys.readouterr().err


def test_plugin_config_values(env, capsys):
    configs = {"Session Manager": {"reboot": "my-reboot", "bogus": "x"}}
    manager = PluginManager(config=make_config(plugin_configs=configs))
    manager.load_plugins(Arguments())
    session = dict(manager.list_plugins())["sm"]
    assert session.config["reboot"] == "my-reboot"
    assert "bogus" not in session.config
    assert "unknown configuration option: bogus" in capsys.readouterr().err


def test_default_session_plugin_launch(env):
    manager = PluginManager(config=make_config(default_plugins=["sm"]))
    manager.load_plugins(Arguments())
    entries = manager.get_entries(Matcher(), Pattern.parse(""), 10, True)
    assert names(entries) == ["Suspend", "Hibernate", "Reboot", "Power off"]
    action = manager.launch("", entries[2].label)
    assert action.kind is ActionKind.EXEC
    assert action.value.argv() == ["sh", "-c", "systemctl reboot"]
    assert manager.usage.get("Session Manager", "Reboot") == 1


def test_unknown_default_plugin_reported(env, capsys):
    manager = PluginManager(config=make_config(default_plugins=["zzz"]))
    manager.load_plugins(Arguments())
    assert "unknown default plugin in configuration: zzz" in capsys.readouterr().err
    assert manager.launch("", None).kind is ActionKind.NONE