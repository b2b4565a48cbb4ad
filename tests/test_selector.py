"""Tests for deterministic best-pair selection."""

import pytest

from subtok import select_best
from subtok.errors import TrainingError


def test_highest_count_wins():
    """The pair with the strictly highest count is chosen."""
    tally = {("a", "b"): 1, ("a", "a"): 3, ("b", "c"): 2}
    assert select_best(tally) == ("a", "a")


def test_tie_broken_lexicographically():
    """Ties go to the lexicographically smaller pair."""
    tally = {("z", "y"): 5, ("a", "c"): 5, ("a", "b"): 5, ("q", "q"): 1}
    assert select_best(tally) == ("a", "b")


def test_tie_break_compares_left_then_right():
    """The left symbol decides before the right one."""
    tally = {("ab", "a"): 2, ("a", "zz"): 2}
    assert select_best(tally) == ("a", "zz")


def test_independent_of_insertion_order():
    """Selection does not depend on tally iteration order."""
    items = [(("n", "e"), 4), (("e", "w"), 4), (("l", "o"), 4), (("o", "w"), 2)]
    forward = dict(items)
    backward = dict(reversed(items))
    assert select_best(forward) == select_best(backward) == ("e", "w")


def test_empty_tally_stops():
    """An empty tally yields no pair."""
    assert select_best({}) is None


def test_min_count_threshold():
    """Pairs below the threshold do not qualify."""
    tally = {("a", "b"): 2}
    assert select_best(tally, min_count=2) == ("a", "b")
    assert select_best(tally, min_count=3) is None


def test_invalid_min_count():
    """A threshold below 1 is rejected."""
    with pytest.raises(TrainingError):
        select_best({("a", "b"): 1}, min_count=0)
