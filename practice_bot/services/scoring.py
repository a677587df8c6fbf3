from __future__ import annotations

from typing import List, Mapping, Sequence

from .models import AnswerStatus, QuestionReport, Question, ResultReport, SubmittedAnswer
from .question_engine import correct_value


def round_percent(part: int, whole: int) -> int:
    """Percentage rounded half up, 0 for an empty whole."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def _question_report(question: Question, answer: SubmittedAnswer | None) -> QuestionReport:
    if answer is not None and answer.is_correct:
        status = AnswerStatus.correct
    elif answer is None or answer.is_empty:
        status = AnswerStatus.unanswered
    else:
        status = AnswerStatus.incorrect
    return QuestionReport(
        question=question,
        submitted=answer.value if answer is not None else None,
        correct_value=correct_value(question),
        is_correct=bool(answer and answer.is_correct),
        status=status,
        time_spent=answer.time_spent if answer is not None else 0,
    )


def summarize(
    questions: Sequence[Question],
    answers: Mapping[str, SubmittedAnswer],
) -> ResultReport:
    reports: List[QuestionReport] = [
        _question_report(question, answers.get(question.id)) for question in questions
    ]
    correct_count = sum(1 for report in reports if report.is_correct)
    total_count = len(questions)
    return ResultReport(
        correct_count=correct_count,
        total_count=total_count,
        percentage=round_percent(correct_count, total_count),
        questions=reports,
        answered_count=sum(1 for report in reports if report.status != AnswerStatus.unanswered),
        earned_points=sum(report.question.points for report in reports if report.is_correct),
        max_points=sum(question.points for question in questions),
    )
