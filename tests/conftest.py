"""
Shared fixtures for practice engine tests.
"""

from typing import Any, Callable, Dict, List, Optional

import pytest

from practice_bot.services.models import SessionEvent
from practice_bot.services.question_engine import QuestionEngine
from practice_bot.services.question_loader import parse_practice_document
from practice_bot.services.state import PracticeSession


class FakeTicker:
    """Ticker that only fires when the test says so."""

    def __init__(self):
        self.callback: Optional[Callable[[], None]] = None
        self.scheduled = 0
        self.cancelled = 0

    @property
    def active(self) -> bool:
        return self.callback is not None

    def schedule(self, callback: Callable[[], None]) -> None:
        self.cancel()
        self.callback = callback
        self.scheduled += 1

    def cancel(self) -> None:
        if self.callback is not None:
            self.cancelled += 1
            self.callback = None

    def fire(self) -> None:
        callback = self.callback
        assert callback is not None, "no tick scheduled"
        self.callback = None
        callback()


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def mc_question(
    question_id: str,
    text: str,
    answers: List[tuple],
    allow_multiple: bool = False,
    time_limit: Optional[int] = None,
    points: float = 1,
    hint: str = "",
) -> Dict[str, Any]:
    return {
        "question_id": question_id,
        "question_text": text,
        "hint": hint,
        "time_limit": time_limit,
        "allow_multiple_answers": allow_multiple,
        "points": points,
        "answers": [{"answer_text": label, "correct": correct} for label, correct in answers],
    }


def matching_entry(
    entry_id: str,
    left: str,
    right: str,
    left_type: str = "TEXT",
    right_type: str = "TEXT",
    points: float = 1,
) -> Dict[str, Any]:
    return {
        "id": entry_id,
        "points": points,
        "item_a": {"content": left, "matching_type": left_type},
        "item_b": {"content": right, "matching_type": right_type},
    }


def make_raw_document(
    choice: Optional[List[Dict[str, Any]]] = None,
    matching: Optional[List[Dict[str, Any]]] = None,
    matching_time_limit: Optional[int] = None,
) -> Dict[str, Any]:
    return {
        "multiple_choice_quiz": {"questions": choice or []},
        "matching_quiz": {"time_limit": matching_time_limit, "questions": matching or []},
    }


@pytest.fixture
def ticker() -> FakeTicker:
    return FakeTicker()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def events() -> List[SessionEvent]:
    return []


@pytest.fixture
def capital_questions():
    raw = make_raw_document(
        choice=[
            mc_question("q1", "Capital of France?", [("Paris", True), ("Rome", False), ("Berlin", False)]),
            mc_question("q2", "Answer to everything?", [("7", False), ("42", True)]),
        ]
    )
    return QuestionEngine(seed=1).normalize(parse_practice_document(raw))


@pytest.fixture
def mixed_questions():
    raw = make_raw_document(
        choice=[
            mc_question("q1", "Capital of France?", [("Paris", True), ("Rome", False)], time_limit=3),
            mc_question(
                "q2",
                "Pick the primes",
                [("2", True), ("3", True), ("4", False)],
                allow_multiple=True,
            ),
        ],
        matching=[
            matching_entry("m1", "Japan", "Tokyo"),
            matching_entry("m2", "Kenya", "Nairobi"),
            matching_entry("m3", "Cat", "cat.png", right_type="IMAGE"),
        ],
    )
    return QuestionEngine(seed=7).normalize(parse_practice_document(raw))


@pytest.fixture
def make_session(ticker, clock, events):
    def factory(questions, **kwargs) -> PracticeSession:
        return PracticeSession(
            questions,
            ticker=ticker,
            clock=clock,
            listener=events.append,
            **kwargs,
        )

    return factory
