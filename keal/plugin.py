"""Plugins, their running executions and the actions they request."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING, Any

from keal.icon import Icon, IconName

if TYPE_CHECKING:
    from keal.config import Config
    from keal.entry import Entry
    from keal.matching import Matcher, Pattern


class ActionKind(Enum):
    """What the frontend should do after a plugin handled an event."""

    NONE = auto()
    CHANGE_INPUT = auto()
    CHANGE_QUERY = auto()
    EXEC = auto()
    PRINT_AND_CLOSE = auto()
    FORK = auto()
    WAIT_AND_CLOSE = auto()


@dataclass
class Command:
    """A program to run, with its arguments, extra environment and directory."""

    program: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    cwd: str | Path | None = None

    def argv(self) -> list[str]:
        """The full argument vector, program first."""
        return [self.program, *self.args]


@dataclass(frozen=True)
class Action:
    """An action kind with its payload: text, a Command, or nothing."""

    kind: ActionKind = ActionKind.NONE
    value: str | Command | None = None


class PluginExecution(ABC):
    """A running instance of a plugin."""

    @abstractmethod
    def finished(self) -> bool:
        """Whether the plugin is done executing."""

    @abstractmethod
    def wait(self) -> None:
        """Wait for the plugin to finish executing."""

    @abstractmethod
    def send_query(self, config: Config, query: str) -> Action:
        """Tell the plugin the query changed."""

    @abstractmethod
    def send_enter(self, config: Config, query: str, index: int | None) -> Action:
        """Tell the plugin an entry (or none) was chosen."""

    @abstractmethod
    def get_entries(self, config: Config, matcher: Matcher, pattern: Pattern) -> list[Entry]:
        """Entries of this plugin that match the pattern."""

    @abstractmethod
    def get_name(self, index: int) -> str:
        """Name of the entry at `index`."""


PluginGenerator = Callable[["Plugin", Any], PluginExecution]


@dataclass
class Plugin:
    """A loaded plugin, able to start executions of itself."""

    name: str
    prefix: str
    generator: PluginGenerator
    icon: Icon | IconName | None = None
    comment: str | None = None
    config: dict[str, str] = field(default_factory=dict)

    def generate(self, manager: Any) -> PluginExecution:
        """Start a new execution of this plugin."""
        return self.generator(self, manager)