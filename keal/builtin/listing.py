"""Plugin that lists the loaded plugins."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from keal.entry import Entry
from keal.icon import Icon, IconName
from keal.plugin import Action, ActionKind, Plugin, PluginExecution

if TYPE_CHECKING:
    from keal.config import Config
    from keal.matching import Matcher, Pattern


@dataclass(frozen=True)
class _ListEntry:
    name: str
    icon: Icon | IconName | None
    comment: str | None


class ListPlugin(PluginExecution):
    """Execution offering one entry per loaded plugin, named by its prefix."""

    def __init__(self, entries: list[_ListEntry]) -> None:
        self.entries = entries

    @staticmethod
    def create() -> Plugin:
        """Build the plugin-listing plugin."""

        def generate(_plugin: Plugin, manager: Any) -> ListPlugin:
            entries = [
                _ListEntry(
                    name=prefix,
                    icon=plugin.icon,
                    comment=(
                        f"{plugin.name} ({plugin.comment})"
                        if plugin.comment is not None
                        else plugin.name
                    ),
                )
                for prefix, plugin in manager.list_plugins()
            ]
            return ListPlugin(entries)

        return Plugin(
            name="List",
            prefix="ls",
            generator=generate,
            comment="List loaded keal plugins",
        )

    def finished(self) -> bool:
        return False

    def wait(self) -> None:
        return None

    def send_query(self, config: Config, query: str) -> Action:
        return Action()

    def send_enter(self, config: Config, query: str, index: int | None) -> Action:
        if index is None:
            return Action()
        return Action(ActionKind.CHANGE_INPUT, f"{self.entries[index].name} ")

    def get_entries(self, config: Config, matcher: Matcher, pattern: Pattern) -> list[Entry]:
        found = (
            Entry.match(matcher, pattern, entry.name, entry.icon, entry.comment, index)
            for index, entry in enumerate(self.entries)
        )
        return [entry for entry in found if entry is not None]

    def get_name(self, index: int) -> str:
        return self.entries[index].name