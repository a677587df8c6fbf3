from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple, Union


class QuestionKind(str, Enum):
    choice = "choice"
    matching = "matching"


class ContentType(str, Enum):
    text = "TEXT"
    image = "IMAGE"


class Side(str, Enum):
    left = "left"
    right = "right"


class Phase(str, Enum):
    in_progress = "in_progress"
    completed = "completed"


class Severity(str, Enum):
    success = "success"
    info = "info"
    warning = "warning"
    error = "error"


class AnswerStatus(str, Enum):
    correct = "correct"
    incorrect = "incorrect"
    unanswered = "unanswered"


@dataclass(frozen=True)
class Choice:
    text: str
    is_correct: bool = False


@dataclass(frozen=True)
class MatchingItem:
    content: str
    content_type: ContentType = ContentType.text


@dataclass(frozen=True)
class MatchingPair:
    left: str
    right: str


@dataclass(frozen=True)
class PairTypeFilter:
    left_type: ContentType
    right_type: ContentType

    @property
    def key(self) -> str:
        return f"{self.left_type.value[0]}{self.right_type.value[0]}".lower()

    @property
    def label(self) -> str:
        return f"{self.left_type.value.title()} ↔ {self.right_type.value.title()}"


# Raw document pools, as delivered by the quiz service.


@dataclass
class RawChoiceQuestion:
    question_id: str
    text: str
    answers: List[Choice]
    allow_multiple: bool = False
    points: float = 0
    time_limit: Optional[int] = None
    hint: Optional[str] = None


@dataclass
class RawMatchingQuestion:
    id: str
    item_a: MatchingItem
    item_b: MatchingItem
    points: float = 0

    @property
    def pair_filter(self) -> PairTypeFilter:
        return PairTypeFilter(self.item_a.content_type, self.item_b.content_type)


@dataclass
class PracticeDocument:
    choice_questions: List[RawChoiceQuestion] = field(default_factory=list)
    matching_questions: List[RawMatchingQuestion] = field(default_factory=list)
    matching_time_limit: Optional[int] = None
    title: str = ""

    def is_empty(self) -> bool:
        return not self.choice_questions and not self.matching_questions


@dataclass(frozen=True)
class Question:
    id: str
    kind: QuestionKind
    prompt: str
    points: float = 0
    time_limit: Optional[int] = None
    hint: Optional[str] = None
    choices: Tuple[Choice, ...] = ()
    allow_multiple: bool = False
    left_items: Tuple[MatchingItem, ...] = ()
    right_items: Tuple[MatchingItem, ...] = ()
    pair_filter: Optional[PairTypeFilter] = None
    correct_pairs: FrozenSet[MatchingPair] = frozenset()

    @property
    def is_timed(self) -> bool:
        return bool(self.time_limit)

    @property
    def pairable_count(self) -> int:
        return min(len(self.left_items), len(self.right_items))


ChoiceValue = FrozenSet[str]
MatchingValue = Tuple[MatchingPair, ...]
AnswerValue = Union[ChoiceValue, MatchingValue]


@dataclass
class SubmittedAnswer:
    question_id: str
    kind: QuestionKind
    value: AnswerValue
    is_correct: bool
    time_spent: float = 0

    @property
    def is_empty(self) -> bool:
        return not self.value


@dataclass
class QuestionReport:
    question: Question
    submitted: Optional[AnswerValue]
    correct_value: AnswerValue
    is_correct: bool
    status: AnswerStatus
    time_spent: float = 0


@dataclass
class ResultReport:
    correct_count: int
    total_count: int
    percentage: int
    questions: List[QuestionReport] = field(default_factory=list)
    answered_count: int = 0
    earned_points: float = 0
    max_points: float = 0

    @property
    def performance_label(self) -> str:
        if self.percentage >= 90:
            return "Excellent"
        if self.percentage >= 80:
            return "Very good"
        if self.percentage >= 70:
            return "Good"
        if self.percentage >= 60:
            return "Fair"
        return "Keep practising"


# Events delivered to the UI collaborator.


@dataclass(frozen=True)
class Notification:
    message: str
    severity: Severity = Severity.info


@dataclass(frozen=True)
class ProgressUpdate:
    index: int
    total: int
    answered: int
    percent_answered: int


@dataclass(frozen=True)
class TimerTick:
    question_id: str
    remaining: int


@dataclass(frozen=True)
class SessionFinished:
    report: ResultReport


SessionEvent = Union[Notification, ProgressUpdate, TimerTick, SessionFinished]
