"""A small INI reader that keeps key order within sections."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Section:
    """The keys of one INI section, in the order they first appeared."""

    keys: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, str]:
        """Return the keys as a new dictionary."""
        return dict(self.keys)

    def items(self) -> Iterator[tuple[str, str]]:
        """Iterate over (key, value) pairs."""
        return iter(self.keys.items())


class Ini:
    """A parsed INI document: global keys plus named sections."""

    def __init__(self) -> None:
        self._globals: dict[str, str] = {}
        self._sections: dict[str, Section] = {}

    @classmethod
    def from_file(cls, path: str | os.PathLike[str], comment_chars: Iterable[str] = "#;") -> Ini:
        """Read and parse a file; raises OSError if it cannot be read."""
        return cls.from_string(Path(path).read_text(encoding="utf-8"), comment_chars)

    @classmethod
    def from_string(cls, text: str, comment_chars: Iterable[str] = "#;") -> Ini:
        """Parse text; any of `comment_chars` starts a comment running to the end of the line."""
        ini = cls()
        chars = tuple(comment_chars)
        current: tuple[str, Section] | None = None

        for raw_line in text.split("\n"):
            line = raw_line.removesuffix("\r")
            cut = min((i for c in chars if (i := line.find(c)) >= 0), default=len(line))
            content = line[:cut].strip()
            if not content:
                continue

            if content.startswith("[") and content.endswith("]"):
                if current is not None:
                    ini._sections[current[0]] = current[1]
                current = (content[1:-1], Section())
            elif "=" in content:
                name, value = content.split("=", 1)
                keys = current[1].keys if current is not None else ini._globals
                keys[name.strip()] = value.strip()

        if current is not None:
            ini._sections[current[0]] = current[1]
        return ini

    def globals(self) -> Iterator[tuple[str, str]]:
        """Iterate over keys that appear before any section."""
        return iter(self._globals.items())

    def sections(self) -> Iterator[tuple[str, Section]]:
        """Iterate over (name, section) pairs."""
        return iter(list(self._sections.items()))

    def section(self, name: str) -> Section | None:
        """Return the named section, or None."""
        return self._sections.get(name)

    def section_items(self, name: str) -> Iterator[tuple[str, str]]:
        """Iterate over the keys of a section; empty if it does not exist."""
        found = self._sections.get(name)
        return found.items() if found is not None else iter(())

    def remove_section(self, name: str) -> Section | None:
        """Remove and return the named section, or None."""
        return self._sections.pop(name, None)