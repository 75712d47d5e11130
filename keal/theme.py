"""Colours and font settings of the launcher window, read from the configuration."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from keal.config import FrontendConfig, parse_bool, parse_float


@dataclass(frozen=True)
class Color:
    """An RGBA colour with channels between 0 and 1."""

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 0.0


class FontWeight(Enum):
    THIN = "thin"
    EXTRA_LIGHT = "extralight"
    LIGHT = "light"
    NORMAL = "regular"
    MEDIUM = "medium"
    SEMIBOLD = "semibold"
    BOLD = "bold"
    EXTRA_BOLD = "extrabold"
    BLACK = "black"


class FontStretch(Enum):
    ULTRA_CONDENSED = "ultracondensed"
    EXTRA_CONDENSED = "extracondensed"
    CONDENSED = "condensed"
    SEMI_CONDENSED = "semicondensed"
    NORMAL = "normal"
    SEMI_EXPANDED = "semiexpanded"
    EXPANDED = "expanded"
    EXTRA_EXPANDED = "extraexpanded"
    ULTRA_EXPANDED = "ultraexpanded"


class TextShaping(Enum):
    BASIC = "basic"
    ADVANCED = "advanced"


_HEX = frozenset("0123456789abcdefABCDEF")


def _channel(raw: bytes, start: int) -> int | None:
    """Parse the two bytes at `start` as a hexadecimal byte; None if absent or invalid."""
    chunk = raw[start:start + 2]
    if len(chunk) != 2:
        return None
    try:
        text = chunk.decode("utf-8")
    except UnicodeDecodeError:
        return None
    digits = text[1:] if text.startswith("+") else text
    if not digits or not set(digits) <= _HEX:
        return None
    return int(digits, 16)


def parse_color(value: str) -> Color:
    """Parse `rrggbb` or `rrggbbaa` hexadecimal; alpha defaults to opaque."""
    raw = value.encode("utf-8")
    channels = []
    for start, label in ((0, "red"), (2, "green"), (4, "blue")):
        channel = _channel(raw, start)
        if channel is None:
            raise ValueError(f"invalid color code, mistyped or missing {label} channel")
        channels.append(channel)

    alpha = 255
    if len(raw) >= 8:
        parsed = _channel(raw, 6)
        if parsed is None:
            try:
                raw[6:8].decode("utf-8")
            except UnicodeDecodeError:
                parsed = 255
            else:
                raise ValueError("invalid color code, mistyped alpha channel")
        alpha = parsed

    r, g, b = channels
    return Color(r / 255.0, g / 255.0, b / 255.0, alpha / 255.0)


def _enum_parser(kind: type[Enum], what: str) -> Callable[[str], Any]:
    def parse(value: str) -> Any:
        try:
            return kind(value)
        except ValueError:
            raise ValueError(f"unknown {what}") from None

    return parse


def parse_font_weight(value: str) -> FontWeight:
    """Parse a font weight name such as `regular` or `bold`."""
    return _enum_parser(FontWeight, "font weight")(value)


def parse_font_stretch(value: str) -> FontStretch:
    """Parse a font stretch name such as `normal` or `condensed`."""
    return _enum_parser(FontStretch, "font stretch")(value)


def parse_text_shaping(value: str) -> TextShaping:
    """Parse `basic` or `advanced`."""
    return _enum_parser(TextShaping, "text shaping")(value)


_FIELDS: dict[str, Callable[[str], Any]] = {
    "background": parse_color,
    "input_placeholder": parse_color,
    "input_selection": parse_color,
    "input_background": parse_color,
    "text": parse_color,
    "matched_text": parse_color,
    "selected_matched_text": parse_color,
    "comment": parse_color,
    "choice_background": parse_color,
    "selected_choice_background": parse_color,
    "hovered_choice_background": parse_color,
    "pressed_choice_background": parse_color,
    "scrollbar_enabled": parse_bool,
    "scrollbar": parse_color,
    "hovered_scrollbar": parse_color,
    "scrollbar_border_radius": parse_float,
}


@dataclass
class Theme(FrontendConfig):
    """Appearance settings taken from the `keal` and `colors` sections."""

    font_weight: FontWeight = FontWeight.NORMAL
    font_stretch: FontStretch = FontStretch.NORMAL
    text_shaping: TextShaping = TextShaping.BASIC

    background: Color = field(default_factory=Color)

    input_placeholder: Color = field(default_factory=Color)
    input_selection: Color = field(default_factory=Color)
    input_background: Color = field(default_factory=Color)

    text: Color = field(default_factory=Color)
    matched_text: Color = field(default_factory=Color)
    selected_matched_text: Color = field(default_factory=Color)
    comment: Color = field(default_factory=Color)

    choice_background: Color = field(default_factory=Color)
    selected_choice_background: Color = field(default_factory=Color)
    hovered_choice_background: Color = field(default_factory=Color)
    pressed_choice_background: Color = field(default_factory=Color)

    scrollbar_enabled: bool = False
    scrollbar: Color = field(default_factory=Color)
    hovered_scrollbar: Color = field(default_factory=Color)
    scrollbar_border_radius: float = 0.0

    def sections(self) -> tuple[str, ...]:
        """The INI sections this theme reads."""
        return ("keal", "colors")

    def add_field(self, name: str, value: str) -> None:
        """Set a known field from its text; bad values are reported and ignored."""
        parser = _FIELDS.get(name)
        if parser is None:
            return
        try:
            parsed = parser(value)
        except (ValueError, TypeError) as error:
            print(f"error with field `{name}`: {error}: `{value}`", file=sys.stderr)
            return
        setattr(self, name, parsed)