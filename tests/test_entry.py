import pytest

from keal.entry import Entry, Label
from keal.icon import IconName
from keal.matching import Matcher, Pattern


@pytest.fixture
def matcher():
    return Matcher()


def test_name_only_match_counts_double(matcher):
    pattern = Pattern.parse("fire")
    entry = Entry.match(matcher, pattern, "firefox", None, "web browser", 3)
    assert entry is not None
    assert entry.score == 2 * pattern.score("firefox", matcher)
    assert entry.label == Label(3)


def test_name_and_comment_scores_add(matcher):
    pattern = Pattern.parse("fox")
    entry = Entry.match(matcher, pattern, "firefox", None, "a fox browser", 0)
    assert entry.score == pattern.score("firefox", matcher) + pattern.score("a fox browser", matcher)


def test_comment_only_match(matcher):
    pattern = Pattern.parse("browser")
    entry = Entry.match(matcher, pattern, "firefox", IconName("firefox"), "web browser", 1)
    assert entry.score == pattern.score("web browser", matcher)
    assert entry.icon == IconName("firefox")
    assert entry.comment == "web browser"


def test_no_match_returns_none(matcher):
    assert Entry.match(matcher, Pattern.parse("zzz"), "firefox", None, "web browser", 0) is None


def test_no_comment_and_no_name_match(matcher):
    assert Entry.match(matcher, Pattern.parse("zzz"), "firefox", None, None, 0) is None


def test_labelled_keeps_index(matcher):
    entry = Entry.match(matcher, Pattern.parse(""), "firefox", None, None, 4)
    labelled = entry.labelled(2)
    assert labelled.label == Label(index=4, plugin_index=2)
    assert entry.label.plugin_index == Label(4).plugin_index
    assert labelled.name == entry.name


def test_label_with_plugin():
    assert Label(7).with_plugin(1) == Label(index=7, plugin_index=1)