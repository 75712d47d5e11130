import pytest

from keal.theme import (
    Color,
    FontStretch,
    FontWeight,
    TextShaping,
    Theme,
    parse_color,
    parse_font_stretch,
    parse_font_weight,
    parse_text_shaping,
)


def test_parse_opaque_color():
    assert parse_color("ff0000") == Color(1.0, 0.0, 0.0, 1.0)


def test_parse_color_with_alpha():
    color = parse_color("00ff0000")
    assert color == Color(0.0, 1.0, 0.0, 0.0)


def test_parse_color_uppercase():
    assert parse_color("FFFFFF") == Color(1.0, 1.0, 1.0, 1.0)


@pytest.mark.parametrize(
    "value, channel",
    [("zz0000", "red"), ("ff", "green"), ("ffff", "blue"), ("ff00zz", "blue")],
)
def test_parse_color_errors(value, channel):
    with pytest.raises(ValueError, match=channel):
        parse_color(value)


def test_parse_color_bad_alpha():
    with pytest.raises(ValueError, match="alpha"):
        parse_color("000000zz")


def test_enum_parsers():
    assert parse_font_weight("regular") is FontWeight.NORMAL
    assert parse_font_weight("bold") is FontWeight.BOLD
    assert parse_font_stretch("ultracondensed") is FontStretch.ULTRA_CONDENSED
    assert parse_text_shaping("advanced") is TextShaping.ADVANCED


@pytest.mark.parametrize(
    "parser, message",
    [
        (parse_font_weight, "unknown font weight"),
        (parse_font_stretch, "unknown font stretch"),
        (parse_text_shaping, "unknown text shaping"),
    ],
)
def test_enum_parser_errors(parser, message):
    with pytest.raises(ValueError, match=message):
        parser("nonsense")


def test_theme_sections():
    assert Theme().sections() == ("keal", "colors")


def test_theme_add_fields():
    theme = Theme()
    theme.add_field("background", "ffffff")
    theme.add_field("scrollbar_enabled", "true")
    theme.add_field("scrollbar_border_radius", "2.5")
    assert theme.background == Color(1.0, 1.0, 1.0, 1.0)
    assert theme.scrollbar_enabled is True
    assert theme.scrollbar_border_radius == 2.5


def test_theme_bad_value_is_reported_and_ignored(capsys):
    theme = Theme()
    theme.add_field("text", "nope")
    assert theme.text == Color()
    assert "error with field `text`" in capsys.readouterr().err


def test_theme_unknown_field_ignored():
    theme = Theme()
    theme.add_field("unrelated", "ffffff")
    assert theme == Theme()