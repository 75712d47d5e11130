"""Command-line options of the launcher."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

VERSION = "0.1.0"


class Protocol(Enum):
    """Protocol used to read choices in dmenu mode."""

    ROFI_EXTENDED = "rofi-extended"
    KEAL = "keal"


@dataclass(frozen=True)
class Arguments:
    """Options given on the command line."""

    dmenu: bool = False
    protocol: Protocol = Protocol.ROFI_EXTENDED
    timings: bool = False


class ExitRequested(Exception):
    """Raised once --help or --version has been printed."""


class UnknownFlagError(ValueError):
    """Raised for a command-line flag that is not recognised."""

    def __init__(self, flag: str) -> None:
        super().__init__(f"unknown flag `{flag}`")
        self.flag = flag


_current: Arguments | None = None


def help_text() -> str:
    """Return the usage text shown by --help."""
    return "\n".join(
        [
            "usage: keal [options...]",
            "",
            "options:",
            "  -h, --help    Show this help and exit",
            "  -v, --version Show the current version of keal",
            "  -d, --dmenu   Launch keal in dmenu mode (pipe choices into it)",
            "  -k, --keal    In dmenu mode, use the same protocol as plugins, "
            "instead of the default rofi extended dmenu protocol",
            "      --timings Show how long the different keal systems take to start up",
        ]
    )


def version_text() -> str:
    """Return the line shown by --version."""
    return f"keal: version {VERSION}"


def parse_arguments(argv: Sequence[str] | None = None) -> Arguments:
    """Parse command-line flags (without the program name)."""
    if argv is None:
        argv = sys.argv[1:]

    dmenu = False
    protocol = Protocol.ROFI_EXTENDED
    timings = False

    for arg in argv:
        match arg:
            case "--dmenu" | "-d":
                dmenu = True
            case "--keal" | "-k":
                protocol = Protocol.KEAL
            case "--timings":
                timings = True
            case "--help" | "-h":
                print(help_text())
                raise ExitRequested()
            case "--version" | "-v":
                print(version_text())
                raise ExitRequested()
            case _:
                raise UnknownFlagError(arg)

    return Arguments(dmenu=dmenu, protocol=protocol, timings=timings)


def init_arguments(argv: Sequence[str] | None = None) -> Arguments:
    """Parse the arguments and store them, unless some are stored already."""
    global _current
    parsed = parse_arguments(argv)
    if _current is None:
        _current = parsed
    return _current


def arguments() -> Arguments:
    """Return the stored arguments."""
    if _current is None:
        raise RuntimeError("arguments should have been initialized in main")
    return _current