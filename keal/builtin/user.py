"""Plugins provided by the user as programs that speak a line protocol."""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Flag
from pathlib import Path
from typing import TYPE_CHECKING, Any

from more_itertools import peekable

from keal.entry import Entry
from keal.icon import Icon, IconName, icon_path
from keal.ini import Ini
from keal.plugin import Action, ActionKind, Plugin, PluginExecution
from keal.xdg import XdgError, config_dir

if TYPE_CHECKING:
    from keal.config import Config
    from keal.matching import Matcher, Pattern


class PluginProtocolError(RuntimeError):
    """Raised when a plugin program writes something the protocol does not allow."""


class _Events(Flag):
    NONE = 0
    ENTER = 1
    SHIFT_ENTER = 2
    QUERY = 4


_EVENT_NAMES = {
    "enter": _Events.ENTER,
    "shift-enter": _Events.SHIFT_ENTER,
    "query": _Events.QUERY,
}


@dataclass
class _PluginEntry:
    name: str
    comment: str | None = None
    icon: Icon | IconName | None = None


def read_entry_from_stream(
    lines: Iterable[str],
    cwd: str | os.PathLike[str] | None = None,
) -> tuple[str, Icon | IconName | None, str | None]:
    """Read one entry's `name:`, `icon:` and `comment:` lines.

    Reading stops before the next `name` line or an `end` line. `lines` should
    be a more_itertools.peekable so the caller keeps the line looked ahead at.
    """
    if not isinstance(lines, peekable):
        lines = peekable(lines)

    name = ""
    icon: Icon | IconName | None = None
    comment: str | None = None

    for line in lines:
        key, sep, value = line.partition(":")
        if sep and key == "name":
            name = value
        elif sep and key == "icon":
            icon = icon_path(value, cwd)
        elif sep and key == "comment":
            comment = value
        elif line:
            print(f"unknown descriptor in input: `{line}`", file=sys.stderr)

        upcoming = lines.peek(None)
        if upcoming is not None and (upcoming.startswith("name") or upcoming == "end"):
            break

    return name, icon, comment


def get_user_plugins() -> list[tuple[str, Plugin]] | None:
    """Load every plugin under the config plugins directory; None if it does not exist."""
    try:
        root = config_dir() / "plugins"
    except XdgError:
        return None
    try:
        directories = sorted(entry for entry in root.iterdir() if entry.is_dir())
    except OSError:
        return None

    plugins: list[tuple[str, Plugin]] = []
    for directory in directories:
        try:
            ini = Ini.from_file(directory / "config.ini", "#;")
        except (OSError, UnicodeDecodeError):
            continue
        plugin = UserPlugin.create(directory, ini)
        if plugin is not None:
            plugins.append((plugin.prefix, plugin))
    return plugins


class UserPlugin(PluginExecution):
    """A running plugin program, talked to through its standard input and output."""

    def __init__(self, process: subprocess.Popen[str], cwd: Path) -> None:
        self._process = process
        self._stdin = process.stdin
        self._stdout = peekable(line.removesuffix("\n") for line in process.stdout)
        self._events = _Events.NONE
        self.cwd = cwd
        self.entries: list[_PluginEntry] = []

    @staticmethod
    def create(plugin_path: str | os.PathLike[str], ini: Ini) -> Plugin | None:
        """Build a plugin from its config.ini; None if required keys are missing."""
        plugin_path = Path(plugin_path)
        config_section = ini.remove_section("config")
        config = config_section.to_dict() if config_section is not None else {}
        section = ini.remove_section("plugin")
        if section is None:
            return None
        keys = section.to_dict()

        exec_name = keys.pop("exec", None)
        if exec_name is None:
            return None
        exec_path = plugin_path / exec_name
        name = keys.pop("name", None)
        if name is None:
            return None
        icon_value = keys.pop("icon", None)
        icon = icon_path(icon_value, plugin_path) if icon_value is not None else None
        comment = keys.pop("comment", None)
        prefix = keys.pop("prefix", None)
        if prefix is None:
            return None

        def generate(plugin: Plugin, _manager: Any) -> UserPlugin:
            cwd = exec_path.parent
            process = subprocess.Popen(
                [str(exec_path)],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                cwd=cwd,
                text=True,
                encoding="utf-8",
            )
            execution = UserPlugin(process, cwd)
            try:
                execution._start(plugin)
            except BaseException:
                execution.close()
                raise
            return execution

        return Plugin(
            name=name,
            prefix=prefix,
            generator=generate,
            icon=icon,
            comment=comment,
            config=config,
        )

    def _start(self, plugin: Plugin) -> None:
        for value in plugin.config.values():
            self._write(f"{value}\n")
        self._read_events()
        self.entries = self._read_choice_list()

    def _write(self, text: str) -> None:
        self._stdin.write(text)
        self._stdin.flush()

    def _next_line(self, expected: str) -> str:
        try:
            return next(self._stdout)
        except StopIteration:
            raise PluginProtocolError(f"plugin closed its output, expected {expected}") from None

    def _read_events(self) -> None:
        line = self._next_line("subscribed events")
        key, sep, events = line.partition(":")
        if not sep or key != "events":
            raise PluginProtocolError(f"expected subscribed events, got `{line}`")
        for event in events.split(" "):
            flag = _EVENT_NAMES.get(event)
            if flag is None:
                raise PluginProtocolError(f"unknown event `{event}`")
            self._events |= flag

    def _read_action(self) -> Action:
        line = self._next_line("an action")
        key, sep, action = line.partition(":")
        if not sep or key != "action":
            raise PluginProtocolError(f"expected action, got `{line}`")

        kind, sep, value = action.partition(":")
        if sep and kind == "change_input":
            return Action(ActionKind.CHANGE_INPUT, value)
        if sep and kind == "change_query":
            return Action(ActionKind.CHANGE_QUERY, value)
        if sep and kind == "update":
            try:
                index = int(value)
            except ValueError:
                raise PluginProtocolError(f"invalid index for update action: `{value}`") from None
            updated = self._read_choice_list()
            if not updated:
                raise PluginProtocolError("expected one element for update action")
            self.entries[index] = updated[-1]
            return Action()

        if action == "fork":
            return Action(ActionKind.FORK)
        if action == "wait_and_close":
            return Action(ActionKind.WAIT_AND_CLOSE)
        if action == "update_all":
            self.entries = self._read_choice_list()
            return Action()
        if action == "none":
            return Action()
        raise PluginProtocolError(f"unknown action `{action}`")

    def _read_choice_list(self) -> list[_PluginEntry]:
        entries: list[_PluginEntry] = []
        while self._stdout:
            if self._stdout.peek() == "end":
                next(self._stdout)
                break
            name, icon, comment = read_entry_from_stream(self._stdout, self.cwd)
            entries.append(_PluginEntry(name=name, comment=comment, icon=icon))
        return entries

    def finished(self) -> bool:
        return self._process.poll() is not None

    def wait(self) -> None:
        self._process.wait()

    def close(self) -> None:
        """Kill the program if it is still running and release its pipes."""
        if self._process.poll() is None:
            try:
                self._process.kill()
            except OSError:
                pass
        for pipe in (self._process.stdin, self._process.stdout):
            if pipe is not None:
                try:
                    pipe.close()
                except OSError:
                    pass

    def __enter__(self) -> UserPlugin:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        process = getattr(self, "_process", None)
        if process is not None and process.poll() is None:
            self.close()

    def send_query(self, config: Config, query: str) -> Action:
        if not self._events & _Events.QUERY:
            return Action()
        self._write(f"query\n{query}\n")
        return self._read_action()

    def send_enter(self, config: Config, query: str, index: int | None) -> Action:
        if not self._events & _Events.ENTER:
            return Action()
        if index is None:
            return Action()
        self._write(f"enter\n{index}\n")
        return self._read_action()

    def get_entries(self, config: Config, matcher: Matcher, pattern: Pattern) -> list[Entry]:
        found = (
            Entry.match(matcher, pattern, entry.name, entry.icon, entry.comment, index)
            for index, entry in enumerate(self.entries)
        )
        return [entry for entry in found if entry is not None]

    def get_name(self, index: int) -> str:
        return self.entries[index].name