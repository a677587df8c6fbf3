from typing import List

import pytest

from practice_bot.services.models import MatchingPair, Notification, Severity, Side
from practice_bot.services.pairing import PairingAutomaton


@pytest.fixture
def notices() -> List[Notification]:
    return []


@pytest.fixture
def automaton(notices) -> PairingAutomaton:
    return PairingAutomaton(pairable_count=2, notify=notices.append)


def test_selecting_same_left_item_twice_toggles_it_off(automaton, notices) -> None:
    automaton.select("A", Side.left)
    automaton.select("A", Side.left)
    assert automaton.pending_left is None
    assert automaton.pending_right is None
    assert automaton.committed == ()
    assert notices == []


def test_left_then_right_commits_pair(automaton, notices) -> None:
    assert automaton.select("A", Side.left) is None
    pair = automaton.select("1", Side.right)
    assert pair == MatchingPair("A", "1")
    assert automaton.committed == (MatchingPair("A", "1"),)
    assert automaton.pending_left is None and automaton.pending_right is None
    assert notices[-1] == Notification("Pair created successfully!", Severity.success)


def test_right_then_left_commits_pair(automaton) -> None:
    automaton.select("1", Side.right)
    assert automaton.select("A", Side.left) == MatchingPair("A", "1")


def test_new_selection_on_same_side_replaces_pending(automaton) -> None:
    automaton.select("A", Side.left)
    automaton.select("B", Side.left)
    assert automaton.pending_left == "B"
    assert automaton.select("1", Side.right) == MatchingPair("B", "1")


def test_duplicate_pair_is_rejected(notices) -> None:
    automaton = PairingAutomaton(pairable_count=3, notify=notices.append)
    automaton.load([MatchingPair("A", "1")])
    automaton.select("A", Side.left)
    assert automaton.select("1", Side.right) is None
    assert automaton.committed == (MatchingPair("A", "1"),)
    assert automaton.pending_left is None and automaton.pending_right is None
    assert notices[-1] == Notification("This pair already exists!", Severity.info)


def test_all_matched_notification(automaton, notices) -> None:
    automaton.select("A", Side.left)
    automaton.select("1", Side.right)
    automaton.select("B", Side.left)
    automaton.select("2", Side.right)
    assert automaton.all_matched
    assert [n.message for n in notices] == [
        "Pair created successfully!",
        "Pair created successfully!",
        "All pairs matched for this section!",
    ]


def test_committed_items_are_disabled(automaton) -> None:
    automaton.select("A", Side.left)
    automaton.select("1", Side.right)
    assert automaton.is_disabled("A", Side.left)
    assert automaton.is_disabled("1", Side.right)
    assert not automaton.is_disabled("1", Side.left)
    assert not automaton.is_disabled("B", Side.left)


def test_undo_removes_last_pair_and_reenables_items(automaton, notices) -> None:
    automaton.load([MatchingPair("A", "1"), MatchingPair("B", "2")])
    assert automaton.undo_last_pair() == MatchingPair("B", "2")
    assert automaton.committed == (MatchingPair("A", "1"),)
    assert not automaton.is_disabled("B", Side.left)
    assert notices == [Notification("Last pair removed", Severity.info)]


def test_undo_on_empty_is_noop(automaton, notices) -> None:
    assert automaton.undo_last_pair() is None
    assert notices == []


def test_clear_all_pairs(automaton, notices) -> None:
    automaton.load([MatchingPair("A", "1"), MatchingPair("B", "2")])
    automaton.select("C", Side.left)
    assert automaton.clear_all_pairs() is True
    assert automaton.committed == ()
    assert automaton.pending_left is None
    assert notices == [Notification("All pairs cleared!", Severity.info)]
    assert automaton.clear_all_pairs() is False
    assert len(notices) == 1


def test_load_resets_pending_selections(automaton) -> None:
    automaton.select("A", Side.left)
    automaton.load([MatchingPair("B", "2")], pairable_count=5)
    assert automaton.pending_left is None
    assert automaton.pairable_count == 5
    assert automaton.committed == (MatchingPair("B", "2"),)
