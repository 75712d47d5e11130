"""Plugin that lists and launches desktop applications."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from keal.entry import Entry, Label
from keal.icon import Icon, IconName, icon_path
from keal.ini import Ini
from keal.plugin import Action, ActionKind, Command, Plugin, PluginExecution
from keal.xdg import xdg_directories

if TYPE_CHECKING:
    from keal.config import Config
    from keal.matching import Matcher, Pattern

_IGNORED_CODES = frozenset("fFuUdDnNvm")


def parse_exec_key(
    exec_: str,
    name: str,
    location: str | os.PathLike[str],
    icon: Icon | IconName | None,
) -> str:
    """Expand the field codes of a desktop file's Exec key.

    File and URL arguments and deprecated codes are dropped, `%%` becomes `%`,
    `%c` the application name, `%k` the desktop file location and `%i`
    `--icon <icon>` when there is an icon. Unknown codes are dropped.
    """
    out: list[str] = []
    chars = iter(exec_)
    for char in chars:
        if char != "%":
            out.append(char)
            continue
        code = next(chars, None)
        if code is None or code in _IGNORED_CODES:
            continue
        if code == "%":
            out.append("%")
        elif code == "i":
            if isinstance(icon, IconName) and icon.name:
                out.append(f"--icon {icon.name}")
            elif isinstance(icon, Icon) and str(icon.path):
                out.append(f"--icon {icon.path}")
        elif code == "c":
            out.append(name)
        elif code == "k":
            out.append(os.fspath(location))
    return "".join(out)


def _listed(value: str, current_desktop: Sequence[str]) -> bool:
    return any(desktop in current_desktop for desktop in value.split(";") if desktop)


@dataclass
class DesktopEntry:
    """An application described by a .desktop file."""

    name: str
    exec: str
    comment: str | None = None
    icon: Icon | IconName | None = None
    to_match: str = ""
    path: str | None = None
    terminal: bool = False

    @classmethod
    def from_ini(
        cls,
        ini: Ini,
        location: str | os.PathLike[str],
        current_desktop: Sequence[str],
    ) -> DesktopEntry | None:
        """Build an entry from a parsed desktop file; None if it should not be shown.

        The "Desktop Entry" section is removed from `ini`.
        """
        section = ini.remove_section("Desktop Entry")
        if section is None:
            return None
        keys = section.to_dict()

        if keys.get("Type") != "Application":
            return None
        if keys.get("NoDisplay") == "true":
            return None
        only_show_in = keys.get("OnlyShowIn")
        if only_show_in is not None and not _listed(only_show_in, current_desktop):
            return None
        not_show_in = keys.get("NotShowIn")
        if not_show_in is not None and _listed(not_show_in, current_desktop):
            return None

        name = keys.get("Name")
        exec_ = keys.get("Exec")
        if name is None or exec_ is None:
            return None

        comment = keys.get("Comment")
        icon_value = keys.get("Icon")
        icon = icon_path(icon_value) if icon_value is not None else None
        to_match = "".join(
            [
                name,
                keys.get("GenericName", ""),
                keys.get("Categories", ""),
                keys.get("Keywords", ""),
                comment or "",
            ]
        )

        return cls(
            name=name,
            exec=parse_exec_key(exec_, name, location, icon),
            comment=comment,
            icon=icon,
            to_match=to_match,
            path=keys.get("Path"),
            terminal=keys.get("Terminal") == "true",
        )


def _desktop_files(root: Path) -> Iterator[Path]:
    """Yield every .desktop file below `root`, following links without looping."""
    if root.is_file():
        if root.suffix == ".desktop":
            yield root
        return

    seen: set[str] = set()
    for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
        real = os.path.realpath(dirpath)
        if real in seen:
            dirnames[:] = []
            continue
        seen.add(real)
        for filename in filenames:
            path = Path(dirpath) / filename
            if path.suffix == ".desktop":
                yield path


def _load_entries(current_desktop: Sequence[str], roots: Iterable[Path]) -> list[DesktopEntry]:
    entries: list[DesktopEntry] = []
    for root in roots:
        for path in _desktop_files(root):
            try:
                ini = Ini.from_file(path, "#")
            except (OSError, UnicodeDecodeError):
                continue
            entry = DesktopEntry.from_ini(ini, path, current_desktop)
            if entry is not None:
                entries.append(entry)
    return entries


class ApplicationPlugin(PluginExecution):
    """Execution that offers every application found in the XDG directories."""

    def __init__(self, entries: list[DesktopEntry]) -> None:
        self.entries = entries

    @staticmethod
    def create(current_desktop: str) -> Plugin:
        """Build the applications plugin; `current_desktop` is $XDG_CURRENT_DESKTOP."""

        def generate(_plugin: Plugin, _manager: Any) -> ApplicationPlugin:
            desktops = current_desktop.split(":")
            return ApplicationPlugin(_load_entries(desktops, xdg_directories("applications")))

        return Plugin(
            name="Applications",
            prefix="app",
            generator=generate,
            comment="Launch applications on the system",
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
        app = self.entries[index]
        if app.terminal:
            command = Command(config.terminal_path, ["-e", "sh", "-c", app.exec])
        else:
            command = Command("sh", ["-c", app.exec])
        if app.path is not None:
            command.cwd = app.path
        return Action(ActionKind.EXEC, command)

    def get_entries(self, config: Config, matcher: Matcher, pattern: Pattern) -> list[Entry]:
        found: list[Entry] = []
        for index, app in enumerate(self.entries):
            score = pattern.score(app.name, matcher)
            if score is None:
                if app.comment is not None:
                    score = pattern.score(app.comment, matcher)
                else:
                    score = pattern.score(app.to_match, matcher)
            if score is None:
                continue
            found.append(
                Entry(
                    name=app.name,
                    icon=app.icon,
                    comment=app.comment,
                    score=score,
                    label=Label(index),
                )
            )
        return found

    def get_name(self, index: int) -> str:
        return self.entries[index].name