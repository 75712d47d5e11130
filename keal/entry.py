"""Entries that plugins hand to the plugin manager."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from keal.icon import Icon, IconName
from keal.matching import Matcher, Pattern


@dataclass(frozen=True)
class Label:
    """Where an entry came from: the plugin and its position within that plugin."""

    index: int
    plugin_index: int = 0

    def with_plugin(self, plugin_index: int) -> Label:
        """Return the same label attributed to another plugin."""
        return replace(self, plugin_index=plugin_index)


@dataclass(frozen=True)
class Entry:
    """A candidate shown in the list, with its fuzzy matching score."""

    name: str
    icon: Icon | IconName | None = None
    comment: str | None = None
    score: int = 0
    label: Label = field(default_factory=lambda: Label(0))

    @classmethod
    def match(
        cls,
        matcher: Matcher,
        pattern: Pattern,
        name: str,
        icon: Icon | IconName | None,
        comment: str | None,
        index: int,
    ) -> Entry | None:
        """Score name and comment against the pattern; None if neither matches.

        A name-only match counts double, so it ranks like a match on both.
        """
        name_score = pattern.score(name, matcher)
        comment_score = pattern.score(comment, matcher) if comment is not None else None

        if name_score is not None:
            score = name_score + comment_score if comment_score is not None else 2 * name_score
        elif comment_score is not None:
            score = comment_score
        else:
            return None

        return cls(name=name, icon=icon, comment=comment, score=score, label=Label(index))

    def labelled(self, plugin_index: int) -> Entry:
        """Return this entry attributed to the given plugin."""
        return replace(self, label=self.label.with_plugin(plugin_index))