from __future__ import annotations

from typing import List, Optional

from aiogram.types import InlineKeyboardButton
from aiogram.utils.keyboard import InlineKeyboardBuilder

from ..services.models import (
    AnswerStatus,
    AnswerValue,
    ContentType,
    MatchingItem,
    MatchingPair,
    Question,
    QuestionKind,
    ResultReport,
    Side,
)
from ..services.state import PracticeSession
from ..services.text_utils import format_seconds

STATUS_MARKS = {
    AnswerStatus.correct: "✅",
    AnswerStatus.incorrect: "❌",
    AnswerStatus.unanswered: "➖",
}
NO_ANSWER = "no answer"


def column_label(side: Side, index: int) -> str:
    if side == Side.left:
        return str(index + 1)
    return chr(ord("A") + index) if index < 26 else f"#{index + 1}"


def item_text(item: MatchingItem) -> str:
    if item.content_type == ContentType.image:
        return f"[image] {item.content}"
    return item.content


def format_points(points: float) -> str:
    return f"{points:g}"


def format_answer_text(question: Question, value: Optional[AnswerValue]) -> str:
    if not value:
        return NO_ANSWER
    if question.kind == QuestionKind.matching:
        return "\n".join(f"{pair.left} → {pair.right}" for pair in value if isinstance(pair, MatchingPair))
    texts = [choice.text for choice in question.choices if choice.text in value]
    return "; ".join(texts) if texts else NO_ANSWER


def _choice_lines(session: PracticeSession, question: Question) -> List[str]:
    hint = "several answers" if question.allow_multiple else "one answer"
    lines = [f"Choose {hint}:"]
    selected = set(session.selected_choices)
    for idx, choice in enumerate(question.choices, start=1):
        mark = "☑️" if choice.text in selected else "▫️"
        lines.append(f"{mark} {idx}. {choice.text}")
    return lines


def _matching_lines(session: PracticeSession, question: Question) -> List[str]:
    pairing = session.pairing
    lines = ["Column A:"]
    for idx, item in enumerate(question.left_items):
        if pairing.is_disabled(item.content, Side.left):
            mark = "🔗"
        elif pairing.pending_left == item.content:
            mark = "▶"
        else:
            mark = "▫️"
        lines.append(f"{mark} {column_label(Side.left, idx)}. {item_text(item)}")
    lines.append("")
    lines.append("Column B:")
    for idx, item in enumerate(question.right_items):
        if pairing.is_disabled(item.content, Side.right):
            mark = "🔗"
        elif pairing.pending_right == item.content:
            mark = "▶"
        else:
            mark = "▫️"
        lines.append(f"{mark} {column_label(Side.right, idx)}. {item_text(item)}")
    lines.append("")
    committed = pairing.committed
    lines.append(f"Pairs ({len(committed)}/{question.pairable_count}):")
    if not committed:
        lines.append("—")
    for pair in committed:
        lines.append(f"{pair.left} → {pair.right}")
    return lines


def build_question_text(
    session: PracticeSession,
    title: str = "",
    notice: Optional[str] = None,
) -> str:
    question = session.current_question
    progress = session.progress()
    header = f"Question {progress.index + 1}/{progress.total}"
    if title:
        header = f"{title} • {header}"
    lines = [
        header,
        f"Answered: {progress.answered}/{progress.total} ({progress.percent_answered}%)",
        f"Points: {format_points(question.points)}",
    ]
    if session.remaining is not None:
        lines.append(f"⏱ Time left: {format_seconds(session.remaining)}")
    if notice:
        lines.append(f"🔔 {notice}")
    lines.append("")
    lines.append(question.prompt)
    if question.hint:
        lines.append(f"💡 Hint: {question.hint}")
    lines.append("")
    if question.kind == QuestionKind.matching:
        lines.extend(_matching_lines(session, question))
    else:
        lines.extend(_choice_lines(session, question))
    return "\n".join(lines)


def build_keyboard(session: PracticeSession) -> InlineKeyboardBuilder:
    question = session.current_question
    builder = InlineKeyboardBuilder()
    if question.kind == QuestionKind.choice:
        selected = set(session.selected_choices)
        buttons = [
            InlineKeyboardButton(
                text=f"{'☑️' if choice.text in selected else '▫️'} {idx + 1}",
                callback_data=f"ch|{idx}|{question.id}",
            )
            for idx, choice in enumerate(question.choices)
        ]
        for start in range(0, len(buttons), 4):
            builder.row(*buttons[start : start + 4])
    else:
        for side, items in ((Side.left, question.left_items), (Side.right, question.right_items)):
            code = "L" if side == Side.left else "R"
            buttons = [
                InlineKeyboardButton(
                    text=column_label(side, idx),
                    callback_data=f"item|{code}|{idx}|{question.id}",
                )
                for idx in range(len(items))
            ]
            for start in range(0, len(buttons), 6):
                builder.row(*buttons[start : start + 6])
        builder.row(
            InlineKeyboardButton(text="↩️ Undo last pair", callback_data=f"pair|undo|{question.id}"),
            InlineKeyboardButton(text="🧹 Clear pairs", callback_data=f"pair|clear|{question.id}"),
        )
    add_navigation_buttons(builder, session)
    return builder


def add_navigation_buttons(builder: InlineKeyboardBuilder, session: PracticeSession) -> None:
    buttons: List[InlineKeyboardButton] = []
    if session.index > 0:
        buttons.append(InlineKeyboardButton(text="◀️ Back", callback_data="nav|prev"))
    if session.is_last:
        buttons.append(InlineKeyboardButton(text="🏁 Finish", callback_data="nav|finish"))
    else:
        buttons.append(InlineKeyboardButton(text="Next ▶️", callback_data="nav|next"))
    builder.row(*buttons)


def build_summary(report: ResultReport, title: str = "") -> str:
    heading = f"Results: {title}" if title else "Results"
    lines: List[str] = [
        heading,
        f"Score: {report.correct_count}/{report.total_count} correct ({report.percentage}%) — "
        f"{report.performance_label}",
        f"Points: {format_points(report.earned_points)}/{format_points(report.max_points)}",
        f"Answered: {report.answered_count}/{report.total_count}",
    ]

    def inline_answer(text: str) -> str:
        return text.replace("\n", "; ")

    for idx, item in enumerate(report.questions, start=1):
        lines.append("")
        lines.append(f"{idx}. {STATUS_MARKS[item.status]} {item.question.prompt}")
        lines.append(f"Your answer: {inline_answer(format_answer_text(item.question, item.submitted))}")
        if not item.is_correct:
            lines.append(
                f"Correct answer: {inline_answer(format_answer_text(item.question, item.correct_value))}"
            )
        if item.time_spent:
            lines.append(f"Time spent: {format_seconds(int(item.time_spent))}")
    return "\n".join(lines)
