"""Launcher configuration read from config.ini."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from keal.ini import Ini
from keal.xdg import XdgError, config_dir


def parse_bool(value: str) -> bool:
    """Parse exactly "true" or "false"."""
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValueError("invalid boolean")


def parse_float(value: str) -> float:
    """Parse a number, without surrounding whitespace or digit separators."""
    if value != value.strip() or "_" in value:
        raise ValueError("couldn't parse number")
    try:
        return float(value)
    except ValueError:
        raise ValueError("couldn't parse number") from None


def parse_list(value: str) -> list[str]:
    """Split a comma separated value, keeping every item as written."""
    return value.split(",")


@dataclass
class Override:
    """User changes to a plugin's prefix, icon or comment."""

    prefix: str | None = None
    icon: str | None = None
    comment: str | None = None


class FrontendConfig:
    """Receives the INI sections a frontend claims; this one claims none."""

    def sections(self) -> tuple[str, ...]:
        """Names of the INI sections this frontend reads."""
        return ()

    def add_field(self, name: str, value: str) -> None:
        """Use one field from a claimed section."""


def _report(name: str, error: ValueError, value: str) -> None:
    print(f"error with field `{name}`: {error}: `{value}`", file=sys.stderr)


_KEAL_FIELDS: dict[str, Callable[[str], Any]] = {
    "font": str,
    "font_size": parse_float,
    "icon_theme": parse_list,
    "usage_frequency": parse_bool,
    "terminal_path": str,
    "placeholder_text": str,
    "default_plugins": parse_list,
}

_OVERRIDE_FIELDS = frozenset({"prefix", "icon", "comment"})


@dataclass
class Config:
    """Settings shared by every frontend."""

    font: str = ""
    font_size: float = 0.0
    icon_theme: list[str] = field(default_factory=list)
    usage_frequency: bool = False
    terminal_path: str = ""
    placeholder_text: str = ""
    default_plugins: list[str] = field(default_factory=list)
    plugin_overrides: dict[str, Override] = field(default_factory=dict)
    plugin_configs: dict[str, dict[str, str]] = field(default_factory=dict)

    def add_from_string(self, frontend: FrontendConfig, content: str) -> None:
        """Apply the settings found in INI text on top of the current ones."""
        ini = Ini.from_string(content, "#;")

        for name, value in ini.section_items("keal"):
            parser = _KEAL_FIELDS.get(name)
            if parser is None:
                continue
            try:
                setattr(self, name, parser(value))
            except ValueError as error:
                _report(name, error, value)

        for section_name in frontend.sections():
            section = ini.remove_section(section_name)
            if section is not None:
                for name, value in section.items():
                    frontend.add_field(name, value)

        for full_name, section in ini.sections():
            plugin, dot, kind = full_name.rpartition(".")
            if not dot:
                continue
            if kind == "plugin":
                self.plugin_overrides[plugin] = Override(
                    **{k: v for k, v in section.items() if k in _OVERRIDE_FIELDS}
                )
            elif kind == "config":
                self.plugin_configs[plugin] = section.to_dict()
            else:
                print(f"unknown plugin configuration kind: `{plugin}.{kind}`", file=sys.stderr)

    @classmethod
    def load(cls, frontend: FrontendConfig) -> Config:
        """Build the configuration, applying the user's config.ini when present."""
        config = cls()
        try:
            path = config_dir() / "config.ini"
        except XdgError:
            return config
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return config
        config.add_from_string(frontend, content)
        return config


_current: Config | None = None


def init_config(frontend: FrontendConfig) -> Config:
    """Load the configuration once and keep it."""
    global _current
    if _current is None:
        _current = Config.load(frontend)
    return _current


def config() -> Config:
    """Return the loaded configuration."""
    if _current is None:
        raise RuntimeError("config should have been initialized in main")
    return _current