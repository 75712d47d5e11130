"""Fuzzy matching of queries against entry names."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto

SCORE_MATCH = 16
PENALTY_GAP_START = 3
PENALTY_GAP_EXTENSION = 1
BONUS_BOUNDARY = SCORE_MATCH // 2
BONUS_CAMEL = BONUS_BOUNDARY - PENALTY_GAP_EXTENSION
BONUS_CONSECUTIVE = PENALTY_GAP_START + PENALTY_GAP_EXTENSION
BONUS_FIRST_CHAR_MULTIPLIER = 2

_DELIMITERS = frozenset("/,:;|-_.")


class _CharClass(Enum):
    WHITESPACE = auto()
    DELIMITER = auto()
    NON_WORD = auto()
    LOWER = auto()
    UPPER = auto()
    LETTER = auto()
    NUMBER = auto()


_WORD = frozenset({_CharClass.LOWER, _CharClass.UPPER, _CharClass.LETTER, _CharClass.NUMBER})


def _char_class(char: str) -> _CharClass:
    if char.isspace():
        return _CharClass.WHITESPACE
    if char.islower():
        return _CharClass.LOWER
    if char.isupper():
        return _CharClass.UPPER
    if char.isdigit():
        return _CharClass.NUMBER
    if char.isalpha():
        return _CharClass.LETTER
    if char in _DELIMITERS:
        return _CharClass.DELIMITER
    return _CharClass.NON_WORD


def _bonus(previous: _CharClass, current: _CharClass) -> int:
    if current in _WORD:
        if previous is _CharClass.WHITESPACE:
            return BONUS_BOUNDARY + 2
        if previous is _CharClass.DELIMITER:
            return BONUS_BOUNDARY + 1
        if previous is _CharClass.NON_WORD:
            return BONUS_BOUNDARY
        if previous is _CharClass.LOWER and current is _CharClass.UPPER:
            return BONUS_CAMEL
        if previous is not _CharClass.NUMBER and current is _CharClass.NUMBER:
            return BONUS_CAMEL
        return 0
    if current is _CharClass.WHITESPACE:
        return BONUS_BOUNDARY + 2
    return BONUS_BOUNDARY


def _fold(text: str) -> str:
    """Lower-case character by character, keeping the length unchanged."""
    return "".join(low if len(low := char.lower()) == 1 else char for char in text)


def _bonuses(text: str) -> list[int]:
    classes = [_char_class(char) for char in text]
    previous = [_CharClass.WHITESPACE, *classes[:-1]]
    return [_bonus(p, c) for p, c in zip(previous, classes)]


class Matcher:
    """Scores how well a needle matches a haystack, ignoring case."""

    def fuzzy_match(self, haystack: str, needle: str) -> int | None:
        """Score of the best fuzzy alignment, or None if `needle` is not a subsequence."""
        found = self.fuzzy_indices(haystack, needle)
        return None if found is None else found[0]

    def fuzzy_indices(self, haystack: str, needle: str) -> tuple[int, list[int]] | None:
        """Score and matched character positions of the best fuzzy alignment."""
        hay = _fold(haystack)
        ndl = _fold(needle)
        if not ndl:
            return 0, []
        if len(ndl) > len(hay):
            return None

        bonuses = _bonuses(haystack)
        rows: list[list[int | None]] = []
        preds: list[list[int]] = []
        previous_row: list[int | None] = []

        for i, needle_char in enumerate(ndl):
            row: list[int | None] = [None] * len(hay)
            pred = [-1] * len(hay)
            gap_best: int | None = None
            gap_k = -1

            for j, (hay_char, bonus) in enumerate(zip(hay, bonuses)):
                if i > 0 and j >= 2:
                    if gap_best is not None:
                        gap_best -= PENALTY_GAP_EXTENSION
                    candidate = previous_row[j - 2]
                    if candidate is not None and (gap_best is None or candidate - PENALTY_GAP_START > gap_best):
                        gap_best = candidate - PENALTY_GAP_START
                        gap_k = j - 2

                if hay_char != needle_char:
                    continue

                if i == 0:
                    row[j] = SCORE_MATCH + bonus * BONUS_FIRST_CHAR_MULTIPLIER
                    continue

                best: int | None = None
                best_k = -1
                if j >= 1 and previous_row[j - 1] is not None:
                    best = previous_row[j - 1] + BONUS_CONSECUTIVE
                    best_k = j - 1
                if gap_best is not None and (best is None or gap_best > best):
                    best = gap_best
                    best_k = gap_k
                if best is None:
                    continue
                row[j] = best + SCORE_MATCH + bonus
                pred[j] = best_k

            rows.append(row)
            preds.append(pred)
            previous_row = row

        finals = [(score, j) for j, score in enumerate(previous_row) if score is not None]
        if not finals:
            return None
        score, end = max(finals, key=lambda pair: (pair[0], -pair[1]))

        positions = [end]
        for pred in reversed(preds[1:]):
            positions.append(pred[positions[-1]])
        positions.reverse()
        return max(score, 0), positions

    def _span_score(self, haystack: str, start: int, length: int) -> int:
        bonuses = _bonuses(haystack)[start:start + length]
        if not bonuses:
            return 0
        first, *rest = bonuses
        return (
            SCORE_MATCH + first * BONUS_FIRST_CHAR_MULTIPLIER
            + sum(SCORE_MATCH + BONUS_CONSECUTIVE + bonus for bonus in rest)
        )

    def _span_match(self, haystack: str, needle: str, starts: list[int]) -> tuple[int, list[int]] | None:
        if not starts:
            return None
        best = max(starts, key=lambda start: (self._span_score(haystack, start, len(needle)), -start))
        return self._span_score(haystack, best, len(needle)), list(range(best, best + len(needle)))


class _AtomKind(Enum):
    FUZZY = auto()
    SUBSTRING = auto()
    PREFIX = auto()
    POSTFIX = auto()
    EXACT = auto()


@dataclass(frozen=True)
class _Atom:
    text: str
    kind: _AtomKind
    negative: bool = False

    def match(self, haystack: str, matcher: Matcher) -> tuple[int, list[int]] | None:
        if self.kind is _AtomKind.FUZZY:
            return matcher.fuzzy_indices(haystack, self.text)

        hay = _fold(haystack)
        needle = _fold(self.text)
        if self.kind is _AtomKind.SUBSTRING:
            starts = [m.start() for m in re.finditer(f"(?={re.escape(needle)})", hay)]
        elif self.kind is _AtomKind.PREFIX:
            starts = [0] if hay.startswith(needle) else []
        elif self.kind is _AtomKind.POSTFIX:
            starts = [len(hay) - len(needle)] if hay.endswith(needle) else []
        else:
            starts = [0] if hay == needle else []
        return matcher._span_match(haystack, needle, starts)


_SPLIT = re.compile(r"(?<!\\)\s+")
_ESCAPE = re.compile(r"\\([\s!^'$\\])")


def _parse_atom(raw: str) -> _Atom | None:
    text = raw
    negative = False
    kind = _AtomKind.FUZZY

    if text.startswith("!"):
        negative = True
        kind = _AtomKind.SUBSTRING
        text = text[1:]
    if text.startswith("^"):
        kind = _AtomKind.PREFIX
        text = text[1:]
    elif text.startswith("'"):
        kind = _AtomKind.SUBSTRING
        text = text[1:]
    if text.endswith("$") and not text.endswith("\\$"):
        kind = _AtomKind.EXACT if kind is _AtomKind.PREFIX else _AtomKind.POSTFIX
        text = text[:-1]

    text = _ESCAPE.sub(r"\1", text)
    if not text:
        return None
    return _Atom(text=text, kind=kind, negative=negative)


def _parse_atoms(text: str) -> list[_Atom]:
    atoms = (_parse_atom(raw) for raw in _SPLIT.split(text.strip()) if raw)
    return [atom for atom in atoms if atom is not None]


@dataclass
class Pattern:
    """A query split on whitespace into atoms that must all match.

    Atoms are fuzzy by default; `'text` matches a substring, `^text` a prefix,
    `text$` a suffix, `^text$` the whole item, and `!text` must not appear.
    A backslash escapes a space or one of these markers.
    """

    atoms: list[_Atom] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> Pattern:
        """Build a pattern from query text."""
        return cls(_parse_atoms(text))

    def reparse(self, text: str) -> None:
        """Replace this pattern's atoms with those of new query text."""
        self.atoms = _parse_atoms(text)

    def _matches(self, haystack: str, matcher: Matcher) -> tuple[int, list[int]] | None:
        total = 0
        positions: list[int] = []
        for atom in self.atoms:
            found = atom.match(haystack, matcher)
            if atom.negative:
                if found is not None:
                    return None
                continue
            if found is None:
                return None
            total += found[0]
            positions.extend(found[1])
        return total, positions

    def score(self, haystack: str, matcher: Matcher) -> int | None:
        """Sum of the atom scores, or None if any atom rejects the haystack."""
        found = self._matches(haystack, matcher)
        return None if found is None else found[0]

    def indices(self, haystack: str, matcher: Matcher) -> list[int]:
        """Matched character positions, atom by atom; empty if there is no match."""
        found = self._matches(haystack, matcher)
        return [] if found is None else found[1]