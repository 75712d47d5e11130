"""Plugin that offers choices piped in on standard input."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TextIO

from more_itertools import peekable

from keal.arguments import Protocol
from keal.builtin.user import read_entry_from_stream
from keal.entry import Entry
from keal.icon import Icon, IconName, icon_path
from keal.plugin import Action, ActionKind, Plugin, PluginExecution

if TYPE_CHECKING:
    from keal.config import Config
    from keal.matching import Matcher, Pattern


@dataclass(frozen=True)
class DmenuEntry:
    """One choice read from standard input."""

    name: str
    icon: Icon | IconName | None = None
    comment: str | None = None

    @classmethod
    def from_rofi_extended(cls, line: str) -> DmenuEntry | None:
        """Parse a line of rofi's extended dmenu protocol.

        An icon is given by appending `\\0icon\\x1f<icon>` to the name; any
        other text after the NUL makes the line invalid.
        """
        name, nul, rest = line.partition("\0")
        if not nul:
            return cls(name=line)
        key, sep, icon = rest.partition("\x1f")
        if not sep or key != "icon":
            return None
        return cls(name=name, icon=icon_path(icon))

    @classmethod
    def from_keal(cls, lines: Iterable[str]) -> DmenuEntry:
        """Read one entry written with the plugin protocol from a peekable of lines."""
        name, icon, comment = read_entry_from_stream(lines, None)
        return cls(name=name, icon=icon, comment=comment)


def _read_entries(protocol: Protocol, stream: Iterable[str]) -> list[DmenuEntry]:
    lines = peekable(line.removesuffix("\n") for line in stream)
    entries: list[DmenuEntry] = []
    while lines:
        if protocol is Protocol.ROFI_EXTENDED:
            entry = DmenuEntry.from_rofi_extended(next(lines))
            if entry is None:
                continue
        else:
            entry = DmenuEntry.from_keal(lines)
        entries.append(entry)
    return entries


class DmenuPlugin(PluginExecution):
    """Execution offering the piped-in choices; choosing one prints it."""

    def __init__(self, entries: list[DmenuEntry]) -> None:
        self.entries = entries

    @staticmethod
    def create(protocol: Protocol, stream: TextIO | Iterable[str] | None = None) -> Plugin:
        """Build the dmenu plugin; choices are read from `stream` (default stdin) when started."""

        def generate(_plugin: Plugin, _manager: Any) -> DmenuPlugin:
            source = sys.stdin if stream is None else stream
            return DmenuPlugin(_read_entries(protocol, source))

        # The NUL prefix cannot be typed, so this plugin is never selected by prefix.
        return Plugin(name="Dmenu", prefix="\0", generator=generate)

    def finished(self) -> bool:
        return False

    def wait(self) -> None:
        return None

    def send_query(self, config: Config, query: str) -> Action:
        return Action()

    def send_enter(self, config: Config, query: str, index: int | None) -> Action:
        if index is None:
            return Action(ActionKind.PRINT_AND_CLOSE, query)
        return Action(ActionKind.PRINT_AND_CLOSE, self.entries[index].name)

    def get_entries(self, config: Config, matcher: Matcher, pattern: Pattern) -> list[Entry]:
        found = (
            Entry.match(matcher, pattern, entry.name, entry.icon, entry.comment, index)
            for index, entry in enumerate(self.entries)
        )
        return [entry for entry in found if entry is not None]

    def get_name(self, index: int) -> str:
        return self.entries[index].name