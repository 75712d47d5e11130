import pytest

import keal.arguments as arguments_module
from keal.arguments import (
    Arguments,
    ExitRequested,
    Protocol,
    UnknownFlagError,
    arguments,
    help_text,
    init_arguments,
    parse_arguments,
    version_text,
)


@pytest.fixture
def fresh_state(monkeypatch):
    monkeypatch.setattr(arguments_module, "_current", None)


def test_defaults_without_flags():
    parsed = parse_arguments([])
    assert parsed == Arguments(dmenu=False, protocol=Protocol.ROFI_EXTENDED, timings=False)


def test_short_flags():
    parsed = parse_arguments(["-d", "-k", "--timings"])
    assert parsed.dmenu is True
    assert parsed.protocol is Protocol.KEAL
    assert parsed.timings is True


def test_long_flags():
    parsed = parse_arguments(["--dmenu", "--keal"])
    assert parsed.dmenu is True
    assert parsed.protocol is Protocol.KEAL
    assert parsed.timings is False


def test_unknown_flag():
    with pytest.raises(UnknownFlagError) as info:
        parse_arguments(["-d", "--nope"])
    assert info.value.flag == "--nope"


@pytest.mark.parametrize("flag", ["-h", "--help"])
def test_help_exits(flag, capsys):
    with pytest.raises(ExitRequested):
        parse_arguments([flag, "--nope"])
    out = capsys.readouterr().out
    assert out == help_text() + "\n"
    assert out.startswith("usage: keal [options...]\n")


@pytest.mark.parametrize("flag", ["-v", "--version"])
def test_version_exits(flag, capsys):
    with pytest.raises(ExitRequested):
        parse_arguments([flag])
    out = capsys.readouterr().out
    assert out == version_text() + "\n"
    assert out.startswith("keal: version ")


def test_help_lists_every_option():
    text = help_text()
    assert "  -h, --help    Show this help and exit" in text
    assert "      --timings Show how long the different keal systems take to start up" in text


def test_arguments_before_init(fresh_state):
    with pytest.raises(RuntimeError):
        arguments()


def test_init_keeps_first_value(fresh_state):
    first = init_arguments(["-d"])
    second = init_arguments([])
    assert first.dmenu is True
    assert second is first
    assert arguments() is first


def test_init_rejects_unknown_flag(fresh_state):
    with pytest.raises(UnknownFlagError):
        init_arguments(["-x"])
    with pytest.raises(RuntimeError):
        arguments()