"""Splitting an entry name into matched and unmatched runs for highlighting."""

from __future__ import annotations

from collections.abc import Iterator
from itertools import groupby

from keal.matching import Matcher, Pattern


def match_spans(item: str, matcher: Matcher, pattern: Pattern) -> Iterator[tuple[str, bool]]:
    """Yield maximal runs of `item` with whether each run was matched by `pattern`."""
    matched = set(pattern.indices(item, matcher))
    for is_match, run in groupby(enumerate(item), key=lambda pair: pair[0] in matched):
        yield "".join(char for _, char in run), is_match