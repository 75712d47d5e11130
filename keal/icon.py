"""Icon references and the cache that resolves icon names to files."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from keal.timing import log_time
from keal.xdg import xdg_directories

PIXMAPS_DIR = Path("/usr/share/pixmaps")


@dataclass(frozen=True)
class Icon:
    """A concrete icon file; `svg` tells vector images apart from raster ones."""

    path: Path
    svg: bool = False

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> Icon:
        """Wrap a path, marking it as SVG when its extension is `svg`."""
        path = Path(path)
        return cls(path=path, svg=path.suffix == ".svg")


@dataclass(frozen=True)
class IconName:
    """An icon identifier still to be looked up in an IconCache."""

    name: str


def _process_cwd() -> Path | None:
    try:
        return Path.cwd()
    except OSError:
        return None


def _is_dot_relative(value: str) -> bool:
    return value.split("/", 1)[0] == "."


def icon_path(value: str, cwd: str | os.PathLike[str] | None = None) -> Icon | IconName:
    """Interpret an icon value from a desktop file or plugin.

    Absolute paths and paths starting with `./` (resolved against `cwd`, or the
    process working directory) become files; anything else is an icon name.
    """
    base = Path(cwd) if cwd is not None else _process_cwd()

    if Path(value).is_absolute():
        return Icon.from_path(value)
    if _is_dot_relative(value) and base is not None:
        return Icon.from_path(base / value)
    return IconName(value)


def _walk_files(root: Path) -> Iterator[Path]:
    """Yield every regular file below `root`, following symbolic links once."""
    if root.is_file():
        yield root
        return

    seen: set[str] = set()
    for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
        real = os.path.realpath(dirpath)
        if real in seen:
            dirnames[:] = []
            continue
        seen.add(real)
        dirnames[:] = [d for d in dirnames if os.path.realpath(os.path.join(dirpath, d)) not in seen]
        for filename in filenames:
            path = Path(dirpath) / filename
            if path.is_file():
                yield path


def _is_utf8(name: str) -> bool:
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


@dataclass
class IconCache:
    """Maps icon names to the first file found for them."""

    icons: dict[str, Icon] = field(default_factory=dict)

    @classmethod
    def load(cls, icon_themes: Iterable[str]) -> IconCache:
        """Scan the given themes in every XDG icon directory, then the pixmaps directory."""
        log_time("loading icon cache")

        data_dirs = xdg_directories("icons")
        search = [directory / theme for theme in icon_themes for directory in data_dirs]
        search.append(PIXMAPS_DIR)

        cache = cls()
        for directory in search:
            for path in _walk_files(directory):
                name = path.stem
                if not _is_utf8(name) or name in cache.icons:
                    continue
                cache.icons[name] = Icon.from_path(path)

        log_time("finished loading icon cache")
        return cache

    def get(self, icon: Icon | IconName) -> Icon | None:
        """Resolve an icon name, or return a concrete icon unchanged."""
        if isinstance(icon, IconName):
            return self.icons.get(icon.name)
        return icon