from __future__ import annotations


class PracticeError(Exception):
    """Base class for errors raised by the practice engine."""


class EmptyDocumentError(PracticeError):
    """The practice document is missing or holds no questions."""


class StaleQuestionError(PracticeError, ValueError):
    def __init__(self, question_id: str, current_id: str):
        super().__init__(f"Question {question_id!r} is not active (current: {current_id!r})")
        self.question_id = question_id
        self.current_id = current_id


class UnknownOptionError(PracticeError, ValueError):
    pass


class SessionCompletedError(PracticeError, RuntimeError):
    def __init__(self) -> None:
        super().__init__("Practice session is already completed")
