"""The plugin manager: loads plugins, routes input to them and ranks their entries."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from typing import Any

from keal.arguments import Arguments
from keal.builtin.application import ApplicationPlugin
from keal.builtin.dmenu import DmenuPlugin
from keal.builtin.listing import ListPlugin
from keal.builtin.session import SessionPlugin
from keal.builtin.user import get_user_plugins
from keal.config import config as global_config
from keal.entry import Entry, Label
from keal.icon import icon_path
from keal.matching import Matcher, Pattern
from keal.plugin import Action, ActionKind, Plugin, PluginExecution
from keal.timing import log_time
from keal.usage import Usage
from keal.xdg import XdgError, config_dir


def _dispose(execution: PluginExecution) -> None:
    close = getattr(execution, "close", None)
    if callable(close):
        close()


class PluginManager:
    """Holds the loaded plugins, the default ones and the one selected by prefix."""

    def __init__(self, config: Any = None, usage: Usage | None = None) -> None:
        # (prefix, plugin) pairs; a plugin's position is its plugin index
        self._plugins: list[tuple[str, Plugin]] = []
        self._default_plugins: list[tuple[int, PluginExecution]] = []
        self._current: tuple[int, PluginExecution] | None = None
        self._config = config
        self.usage = usage if usage is not None else Usage()

    @property
    def config(self) -> Any:
        """The configuration given at construction, or the global one."""
        return self._config if self._config is not None else global_config()

    def _index_of_prefix(self, prefix: str) -> int | None:
        return next((i for i, (key, _) in enumerate(self._plugins) if key == prefix), None)

    def _index_of_name(self, name: str) -> int | None:
        return next((i for i, (_, plugin) in enumerate(self._plugins) if plugin.name == name), None)

    def _insert(self, prefix: str, plugin: Plugin) -> int:
        """Insert under `prefix`, replacing in place if the prefix exists; return the index."""
        index = self._index_of_prefix(prefix)
        if index is not None:
            self._plugins[index] = (prefix, plugin)
            return index
        self._plugins.append((prefix, plugin))
        return len(self._plugins) - 1

    def _swap_remove(self, index: int) -> tuple[str, Plugin]:
        """Remove the item at `index`, moving the last item into its place."""
        removed = self._plugins[index]
        last = self._plugins.pop()
        if index < len(self._plugins):
            self._plugins[index] = last
        return removed

    def _add_default_plugin(self, index: int) -> None:
        plugin = self._plugins[index][1]
        self._default_plugins.append((index, plugin.generate(self)))

    def load_plugins(self, arguments: Arguments) -> None:
        """Load the dmenu plugin, or the user and built-in plugins with their configuration."""
        if arguments.dmenu:
            dmenu = DmenuPlugin.create(arguments.protocol)
            self._plugins = [(dmenu.prefix, dmenu)]
            self._add_default_plugin(0)
            return

        self.usage = Usage.load()
        self._plugins = []
        for prefix, plugin in get_user_plugins() or []:
            self._insert(prefix, plugin)

        log_time("loading application plugin")
        applications = ApplicationPlugin.create(os.environ.get("XDG_CURRENT_DESKTOP", ""))
        self._insert(applications.prefix, applications)

        log_time("loading list plugin")
        listing = ListPlugin.create()
        self._insert(listing.prefix, listing)

        log_time("loading session manager plugin")
        session = SessionPlugin.create()
        self._insert(session.prefix, session)

        log_time("loading plugin overrides")
        cfg = self.config
        try:
            icon_base = config_dir()
        except XdgError:
            icon_base = None

        for name, override in cfg.plugin_overrides.items():
            index = self._index_of_name(name)
            if index is None:
                print(f"unknown plugin in override: {name}", file=sys.stderr)
                continue
            if override.prefix is not None:
                _, plugin = self._swap_remove(index)
                plugin.prefix = override.prefix
                index = self._insert(override.prefix, plugin)

            plugin = self._plugins[index][1]
            if override.icon is not None:
                plugin.icon = icon_path(override.icon, icon_base)
            if override.comment is not None:
                plugin.comment = override.comment

        log_time("loading plugin configs")
        for name, values in cfg.plugin_configs.items():
            index = self._index_of_name(name)
            if index is None:
                print(f"unknown plugin in config: {name}", file=sys.stderr)
                continue
            plugin = self._plugins[index][1]
            for option, value in values.items():
                if option in plugin.config:
                    plugin.config[option] = value
                else:
                    print(
                        f"unknown configuration option: {option}, in config of plugin {name}",
                        file=sys.stderr,
                    )

        log_time("loading user default plugins")
        for prefix in cfg.default_plugins:
            index = self._index_of_prefix(prefix)
            if index is None:
                print(f"unknown default plugin in configuration: {prefix}", file=sys.stderr)
                continue
            self._add_default_plugin(index)
        log_time("finished loading user default plugins")

    def list_plugins(self) -> Iterator[tuple[str, Plugin]]:
        """Iterate over (prefix, plugin) pairs in plugin-index order."""
        return iter(list(self._plugins))

    def get_entries(self, matcher: Matcher, pattern: Pattern, n: int, sort_by_usage: bool) -> list[Entry]:
        """The best `n` matching entries, by score and optionally by usage."""
        cfg = self.config
        sources = [self._current] if self._current is not None else self._default_plugins

        entries = [
            entry.labelled(index)
            for index, execution in sources
            for entry in execution.get_entries(cfg, matcher, pattern)
        ]

        if sort_by_usage:
            def key(entry: Entry) -> tuple[int, int]:
                plugin = self._plugins[entry.label.plugin_index][1]
                uses = self.usage.get(plugin.name, entry.name)
                return -entry.score, -(uses if uses is not None else -1)

            entries.sort(key=key)
        else:
            entries.sort(key=lambda entry: -entry.score)

        return entries[:n]

    def update_input(self, text: str, from_user: bool) -> tuple[str, Action]:
        """Take a new input value; return the query left after any prefix, and the resulting action.

        `from_user` is false when the change came from a plugin action, in which
        case it is not sent back to plugins as a query.
        """
        name, sep, remainder = text.partition(" ")
        found = self._index_of_prefix(name) if sep else None

        if found is not None:
            plugin = self._plugins[found][1]
            if self._current is None:
                self.usage.add_use("List", plugin.prefix)
                execution = plugin.generate(self)
                action = execution.send_query(self.config, remainder)
                self._current = (found, execution)
                return remainder, action

            current_index, execution = self._current
            if execution.finished() or found != current_index:
                _dispose(execution)
                self._current = (found, plugin.generate(self))
            elif from_user:
                return remainder, execution.send_query(self.config, remainder)
            return remainder, Action()

        self.kill()
        if from_user:
            for _, execution in self._default_plugins:
                action = execution.send_query(self.config, text)
                if action.kind is not ActionKind.NONE:
                    return text, action
        return text, Action()

    def launch(self, query: str, selected: Label | None) -> Action:
        """Send an enter event for the selected entry (or none) to the plugin it belongs to."""
        cfg = self.config
        index = selected.index if selected is not None else None

        if self._current is not None:
            plugin_index, execution = self._current
        elif len(self._default_plugins) == 1:
            plugin_index, execution = self._default_plugins[0]
        elif selected is not None:
            match = next(
                ((i, e) for i, e in self._default_plugins if i == selected.plugin_index),
                None,
            )
            if match is None:
                return Action()
            plugin_index, execution = match
        else:
            return Action()

        if index is not None:
            self.usage.add_use(self._plugins[plugin_index][1].name, execution.get_name(index))
        return execution.send_enter(cfg, query, index)

    def kill(self) -> None:
        """Stop the plugin selected by prefix, if any."""
        if self._current is not None:
            _dispose(self._current[1])
        self._current = None

    def current(self) -> Plugin | None:
        """The plugin selected by prefix, if any."""
        if self._current is None:
            return None
        return self._plugins[self._current[0]][1]

    def wait(self) -> None:
        """Wait for the plugin selected by prefix to finish."""
        if self._current is not None:
            self._current[1].wait()