"""Plugin for logging out, suspending, rebooting and powering off."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from keal.entry import Entry
from keal.icon import Icon, IconName
from keal.plugin import Action, ActionKind, Command, Plugin, PluginExecution

if TYPE_CHECKING:
    from keal.config import Config
    from keal.matching import Matcher, Pattern

_LOG_OUT_COMMANDS = {
    "Unity": "gnome-session-quit --logout",
    "Pantheon": "gnome-session-quit --logout",
    "GNOME": "gnome-session-quit --logout",
    "kde-plasma": "qdbus org.kde.ksmserver /KSMServer logout 0 0 0",
    "KDE": "qdbus org.kde.ksmserver /KSMServer logout 0 0 0",
    "X-Cinnamon": "cinnamon-session-quit --logout",
    "Cinnamon": "cinnamon-session-quit --logout",
    "MATE": "mate-session-save --logout-dialog",
    "XFCE": "xfce4-session-logout --logout",
}

_ACTIONS = (
    ("Log Out", "log_out"),
    ("Suspend", "suspend"),
    ("Hibernate", "hibernate"),
    ("Reboot", "reboot"),
    ("Power off", "poweroff"),
)


def detect_log_out_command(environ: Mapping[str, str] | None = None) -> str:
    """Work out the log-out command for the running desktop; empty if unknown."""
    env = os.environ if environ is None else environ
    desktop = env.get("XDG_CURRENT_DESKTOP")
    if desktop is None:
        return ""
    command = _LOG_OUT_COMMANDS.get(desktop)
    if command is not None:
        return command
    if "SWAYSOCK" in env:
        return "swaymsg exit"
    print("session manager: failted to auto-detect environment", file=sys.stderr)
    return ""


@dataclass(frozen=True)
class _SessionEntry:
    name: str
    command: str
    icon: Icon | IconName | None = None


class SessionPlugin(PluginExecution):
    """Execution offering the session actions that have a command configured."""

    def __init__(self, entries: list[_SessionEntry]) -> None:
        self.entries = entries

    @staticmethod
    def create(environ: Mapping[str, str] | None = None) -> Plugin:
        """Build the session plugin, with its commands as configurable options."""

        def generate(plugin: Plugin, _manager: Any) -> SessionPlugin:
            entries = [
                _SessionEntry(name=name, command=plugin.config[key])
                for name, key in _ACTIONS
                if plugin.config[key]
            ]
            return SessionPlugin(entries)

        return Plugin(
            name="Session Manager",
            prefix="sm",
            generator=generate,
            comment="Manage current session",
            config={
                "log_out": detect_log_out_command(environ),
                "suspend": "systemctl suspend",
                "hibernate": "systemctl hibernate",
                "reboot": "systemctl reboot",
                "poweroff": "systemctl poweroff",
            },
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
        return Action(ActionKind.EXEC, Command("sh", ["-c", self.entries[index].command]))

    def get_entries(self, config: Config, matcher: Matcher, pattern: Pattern) -> list[Entry]:
        found = (
            Entry.match(matcher, pattern, entry.name, entry.icon, None, index)
            for index, entry in enumerate(self.entries)
        )
        return [entry for entry in found if entry is not None]

    def get_name(self, index: int) -> str:
        return self.entries[index].name