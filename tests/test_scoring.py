import pytest

from practice_bot.services.models import AnswerStatus, MatchingPair, QuestionKind, SubmittedAnswer
from practice_bot.services.scoring import round_percent, summarize


def answer(question, value, correct, spent=5.0):
    return SubmittedAnswer(
        question_id=question.id,
        kind=question.kind,
        value=value,
        is_correct=correct,
        time_spent=spent,
    )


@pytest.mark.parametrize(
    "part,whole,expected",
    [(0, 0, 0), (1, 2, 50), (2, 3, 67), (1, 3, 33), (1, 8, 13), (3, 3, 100), (0, 5, 0)],
)
def test_round_percent(part, whole, expected) -> None:
    assert round_percent(part, whole) == expected


def test_empty_session_scores_zero() -> None:
    report = summarize([], {})
    assert report.total_count == 0
    assert report.percentage == 0
    assert report.questions == []


def test_missing_answers_count_as_incorrect(mixed_questions) -> None:
    q1 = mixed_questions[0]
    report = summarize(mixed_questions, {q1.id: answer(q1, frozenset({"Paris"}), True)})
    assert report.correct_count == 1
    assert report.total_count == 4
    assert report.percentage == 25
    assert report.answered_count == 1
    statuses = [item.status for item in report.questions]
    assert statuses == [
        AnswerStatus.correct,
        AnswerStatus.unanswered,
        AnswerStatus.unanswered,
        AnswerStatus.unanswered,
    ]
    assert report.questions[1].submitted is None


def test_report_keeps_unanswered_apart_from_incorrect(mixed_questions) -> None:
    q1, q2 = mixed_questions[:2]
    report = summarize(
        mixed_questions,
        {
            q1.id: answer(q1, frozenset(), False),
            q2.id: answer(q2, frozenset({"2"}), False),
        },
    )
    assert report.questions[0].status == AnswerStatus.unanswered
    assert report.questions[0].submitted == frozenset()
    assert report.questions[1].status == AnswerStatus.incorrect
    assert report.correct_count == 0


def test_correct_empty_selection_counts_as_correct(mixed_questions) -> None:
    q2 = mixed_questions[1]
    report = summarize([q2], {q2.id: answer(q2, frozenset(), True)})
    assert report.questions[0].status == AnswerStatus.correct
    assert report.correct_count == 1
    assert report.answered_count == 1


def test_report_carries_correct_values_and_points(mixed_questions) -> None:
    matching = next(q for q in mixed_questions if q.id == "matching-tt")
    pairs = (MatchingPair("Japan", "Tokyo"), MatchingPair("Kenya", "Nairobi"))
    report = summarize(mixed_questions, {matching.id: answer(matching, pairs, True, spent=12)})
    item = report.questions[2]
    assert item.question.kind == QuestionKind.matching
    assert item.is_correct
    assert item.time_spent == 12
    assert set(item.correct_value) == set(pairs)
    assert report.questions[1].correct_value == frozenset({"2", "3"})
    assert report.earned_points == matching.points == 2
    assert report.max_points == 5


@pytest.mark.parametrize(
    "percentage,label",
    [(95, "Excellent"), (80, "Very good"), (70, "Good"), (60, "Fair"), (10, "Keep practising")],
)
def test_performance_label(percentage, label) -> None:
    report = summarize([], {})
    report.percentage = percentage
    assert report.performance_label == label
