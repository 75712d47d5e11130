"""Drives the plugin manager from a stream of UI events."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TypeVar, Union

from keal.arguments import Arguments
from keal.arguments import arguments as global_arguments
from keal.entry import Entry, Label
from keal.manager import PluginManager
from keal.matching import Matcher, Pattern
from keal.plugin import Action
from keal.timing import log_time

T = TypeVar("T")


@dataclass(frozen=True)
class UpdateInput:
    """The input field changed; `from_user` tells user typing from plugin actions."""

    text: str
    from_user: bool


@dataclass(frozen=True)
class Launch:
    """An entry (or none) was chosen."""

    label: Label | None


@dataclass(frozen=True)
class EntriesMessage:
    """New entries to display."""

    entries: list[Entry]


@dataclass(frozen=True)
class ActionMessage:
    """An action the frontend should carry out."""

    action: Action


Event = Union[UpdateInput, Launch]
Message = Union[EntriesMessage, ActionMessage]


@dataclass
class Data:
    """State used to regenerate entries and highlight matches."""

    matcher: Matcher
    query: str = ""
    pattern: Pattern = field(default_factory=Pattern)


class AsyncManager:
    """Shares a plugin manager and match data between the UI and a worker."""

    def __init__(
        self,
        matcher: Matcher,
        num_entries: int,
        sort_by_usage: bool,
        manager: PluginManager | None = None,
        arguments: Arguments | None = None,
    ) -> None:
        self._manager = manager if manager is not None else PluginManager()
        self._manager_lock = threading.Lock()
        self._data = Data(matcher=matcher)
        self._data_lock = threading.Lock()
        self._arguments = arguments
        self.num_entries = num_entries
        self.sort_by_usage = sort_by_usage

    def subscription(self, events: Iterable[Event]) -> Iterator[Message]:
        """Load the plugins, then answer each event with the messages it produces."""
        arguments = self._arguments if self._arguments is not None else global_arguments()
        log_time("locking sync manager")
        with self._manager_lock:
            log_time("loading plugins")
            self._manager.load_plugins(arguments)

        for event in events:
            if isinstance(event, UpdateInput):
                with self._manager_lock:
                    query, action = self._manager.update_input(event.text, event.from_user)
                    with self._data_lock:
                        data = self._data
                        data.pattern.reparse(query)
                        data.query = query
                        entries = self._manager.get_entries(
                            data.matcher, data.pattern, self.num_entries, self.sort_by_usage
                        )
                yield EntriesMessage(entries)
                yield ActionMessage(action)
            elif isinstance(event, Launch):
                with self._manager_lock:
                    with self._data_lock:
                        query = self._data.query
                    action = self._manager.launch(query, event.label)
                yield ActionMessage(action)
            else:
                raise TypeError(f"unknown event: {event!r}")

    def with_manager(self, f: Callable[[PluginManager], T]) -> T:
        """Run `f` on the plugin manager while holding its lock (may change entries)."""
        with self._manager_lock:
            return f(self._manager)

    def use_manager(self, f: Callable[[PluginManager], T]) -> T:
        """Run `f` on the plugin manager to read from it, holding its lock."""
        with self._manager_lock:
            return f(self._manager)

    @contextmanager
    def get_data(self) -> Iterator[Data]:
        """Hold the match data; do not use the manager at the same time."""
        with self._data_lock:
            yield self._data