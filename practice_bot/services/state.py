from __future__ import annotations

import functools
import logging
import time
import uuid
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import EmptyDocumentError, SessionCompletedError, StaleQuestionError, UnknownOptionError
from .models import (
    AnswerValue,
    MatchingPair,
    Notification,
    Phase,
    ProgressUpdate,
    Question,
    QuestionKind,
    ResultReport,
    SessionEvent,
    SessionFinished,
    Severity,
    Side,
    SubmittedAnswer,
    TimerTick,
)
from .pairing import PairingAutomaton
from .question_engine import is_correct
from .scoring import round_percent, summarize
from .timer import AsyncioTicker, Ticker

logger = logging.getLogger(__name__)

EventListener = Callable[[SessionEvent], None]


class PracticeSession:
    """Drives one learner through an ordered list of practice questions.

    The session owns the editing surface of the active question (selected
    choices or the pairing automaton), the per-question countdown and the map
    of submitted answers. Every navigation saves the outgoing answer before
    the index moves and before the next countdown is scheduled.
    """

    def __init__(
        self,
        questions: Sequence[Question],
        *,
        ticker: Optional[Ticker] = None,
        listener: Optional[EventListener] = None,
        clock: Callable[[], float] = time.monotonic,
        log: Optional[logging.Logger] = None,
        session_id: Optional[str] = None,
    ):
        if not questions:
            raise EmptyDocumentError("Cannot start a practice session without questions")
        ids = [question.id for question in questions]
        if len(set(ids)) != len(ids):
            raise ValueError("Question ids must be unique within a session")
        self.questions: Tuple[Question, ...] = tuple(questions)
        self.session_id = session_id or uuid.uuid4().hex
        self.listener = listener
        self.log = log or logger
        self._ticker = ticker or AsyncioTicker()
        self._clock = clock
        self._index = 0
        self._phase = Phase.in_progress
        self._answers: Dict[str, SubmittedAnswer] = {}
        self._remaining: Optional[int] = None
        self._timer_generation = 0
        self._focus_started = clock()
        self._report: Optional[ResultReport] = None
        self._selected: List[str] = []
        self._pairing = PairingAutomaton(notify=self._emit)
        self._enter_question()

    # -- read-only state -------------------------------------------------

    @property
    def index(self) -> int:
        return self._index

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_completed(self) -> bool:
        return self._phase == Phase.completed

    @property
    def current_question(self) -> Question:
        return self.questions[self._index]

    @property
    def is_last(self) -> bool:
        return self._index == len(self.questions) - 1

    @property
    def remaining(self) -> Optional[int]:
        return self._remaining

    @property
    def answers(self) -> Mapping[str, SubmittedAnswer]:
        return MappingProxyType(self._answers)

    @property
    def selected_choices(self) -> Tuple[str, ...]:
        return tuple(self._selected)

    @property
    def pairing(self) -> PairingAutomaton:
        return self._pairing

    @property
    def report(self) -> Optional[ResultReport]:
        return self._report

    @property
    def timer_active(self) -> bool:
        return self._ticker.active

    def progress(self) -> ProgressUpdate:
        return ProgressUpdate(
            index=self._index,
            total=self.total,
            answered=len(self._answers),
            percent_answered=round_percent(len(self._answers), self.total),
        )

    # -- commands --------------------------------------------------------

    def select_choice(self, question_id: str, text: str) -> Tuple[str, ...]:
        question = self._ensure_editable(question_id)
        if question.kind != QuestionKind.choice:
            raise UnknownOptionError(f"Question {question.id!r} has no choices")
        if text not in {choice.text for choice in question.choices}:
            raise UnknownOptionError(f"Unknown choice {text!r} for question {question.id!r}")
        if not question.allow_multiple:
            self._selected = [text]
        elif text in self._selected:
            self._selected.remove(text)
        else:
            self._selected.append(text)
        return self.selected_choices

    def select_matching_item(
        self,
        content: str,
        side: Union[Side, str],
        question_id: Optional[str] = None,
    ) -> Optional[MatchingPair]:
        question = self._ensure_matching(question_id)
        side = Side(side)
        column = question.left_items if side == Side.left else question.right_items
        if content not in {item.content for item in column}:
            raise UnknownOptionError(f"Unknown {side.value} item {content!r} for question {question.id!r}")
        if self._pairing.is_disabled(content, side):
            self._pairing.reject_disabled()
            return None
        return self._pairing.select(content, side)

    def undo_last_pair(self, question_id: Optional[str] = None) -> Optional[MatchingPair]:
        self._ensure_matching(question_id)
        return self._pairing.undo_last_pair()

    def clear_all_pairs(self, question_id: Optional[str] = None) -> bool:
        self._ensure_matching(question_id)
        return self._pairing.clear_all_pairs()

    def go_to_next(self) -> bool:
        if self.is_completed:
            return False
        if self.is_last:
            self.finish()
            return True
        self._leave_question()
        self._index += 1
        self.log.debug("Session %s moved to question %d/%d", self.session_id, self._index + 1, self.total)
        self._enter_question()
        return True

    def go_to_previous(self) -> bool:
        if self.is_completed or self._index == 0:
            return False
        self._leave_question()
        self._index -= 1
        self.log.debug("Session %s moved back to question %d/%d", self.session_id, self._index + 1, self.total)
        self._enter_question()
        return True

    def finish(self) -> ResultReport:
        if self._report is not None:
            return self._report
        self._leave_question()
        self._phase = Phase.completed
        self._report = summarize(self.questions, self._answers)
        self.log.info(
            "Session %s finished: %d/%d correct (%d%%)",
            self.session_id,
            self._report.correct_count,
            self._report.total_count,
            self._report.percentage,
        )
        severity = Severity.success if self._report.percentage >= 70 else Severity.info
        self._emit(Notification(f"Practice completed! Score: {self._report.percentage}%", severity))
        self._emit(SessionFinished(report=self._report))
        return self._report

    def restart(self) -> None:
        self._stop_timer()
        self._answers.clear()
        self._index = 0
        self._phase = Phase.in_progress
        self._report = None
        self.log.info("Session %s restarted", self.session_id)
        self._emit(Notification("Practice restarted!", Severity.info))
        self._enter_question()

    # -- internals -------------------------------------------------------

    def _emit(self, event: SessionEvent) -> None:
        if self.listener is not None:
            self.listener(event)

    def _ensure_editable(self, question_id: Optional[str]) -> Question:
        if self.is_completed:
            raise SessionCompletedError()
        question = self.current_question
        if question_id is not None and question_id != question.id:
            raise StaleQuestionError(question_id, question.id)
        return question

    def _ensure_matching(self, question_id: Optional[str]) -> Question:
        question = self._ensure_editable(question_id)
        if question.kind != QuestionKind.matching:
            raise UnknownOptionError(f"Question {question.id!r} is not a matching question")
        return question

    def _current_value(self) -> AnswerValue:
        if self.current_question.kind == QuestionKind.matching:
            return self._pairing.committed
        return frozenset(self._selected)

    def _save_answer(self) -> SubmittedAnswer:
        question = self.current_question
        value = self._current_value()
        now = self._clock()
        elapsed = max(0.0, now - self._focus_started)
        self._focus_started = now
        previous = self._answers.get(question.id)
        answer = SubmittedAnswer(
            question_id=question.id,
            kind=question.kind,
            value=value,
            is_correct=is_correct(question, value),
            time_spent=(previous.time_spent if previous else 0) + elapsed,
        )
        self._answers[question.id] = answer
        self.log.debug(
            "Saved answer for %s: correct=%s, %d item(s), %.1fs",
            question.id,
            answer.is_correct,
            len(value),
            answer.time_spent,
        )
        return answer

    def _leave_question(self) -> None:
        self._stop_timer()
        self._save_answer()

    def _enter_question(self) -> None:
        self._hydrate()
        self._focus_started = self._clock()
        self._start_timer()
        self._emit(self.progress())

    def _hydrate(self) -> None:
        question = self.current_question
        saved = self._answers.get(question.id)
        if question.kind == QuestionKind.choice:
            chosen = saved.value if saved else frozenset()
            self._selected = [choice.text for choice in question.choices if choice.text in chosen]
            self._pairing.load((), pairable_count=0)
            return
        self._selected = []
        self._pairing.load(saved.value if saved else (), pairable_count=question.pairable_count)

    def _stop_timer(self) -> None:
        self._timer_generation += 1
        self._ticker.cancel()
        self._remaining = None

    def _start_timer(self) -> None:
        self._stop_timer()
        question = self.current_question
        if not question.time_limit:
            return
        self._remaining = question.time_limit
        self._schedule_tick()

    def _schedule_tick(self) -> None:
        self._ticker.schedule(functools.partial(self._on_tick, self._timer_generation))

    def _on_tick(self, generation: int) -> None:
        if generation != self._timer_generation or self.is_completed or self._remaining is None:
            return
        self._remaining = max(0, self._remaining - 1)
        self._emit(TimerTick(question_id=self.current_question.id, remaining=self._remaining))
        if self._remaining > 0:
            self._schedule_tick()
            return
        self.log.info("Time is up for %s in session %s", self.current_question.id, self.session_id)
        self._emit(Notification("Time's up for this question!", Severity.info))
        self.go_to_next()
