from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any, List, Mapping, Optional

from .errors import EmptyDocumentError
from .models import (
    Choice,
    ContentType,
    MatchingItem,
    PracticeDocument,
    RawChoiceQuestion,
    RawMatchingQuestion,
)
from .text_utils import html_to_text

logger = logging.getLogger(__name__)


def _make_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def _time_limit(raw: Any) -> Optional[int]:
    if raw in (None, ""):
        return None
    seconds = int(raw)
    return seconds if seconds > 0 else None


def _points(raw: Any) -> float:
    if raw in (None, ""):
        return 0
    return max(0.0, float(raw))


def _content_type(raw: Any) -> ContentType:
    value = str(raw or ContentType.text.value).upper()
    return ContentType(value)


def _matching_item(raw: Mapping[str, Any]) -> MatchingItem:
    return MatchingItem(
        content=str(raw.get("content") or "").strip(),
        content_type=_content_type(raw.get("matching_type")),
    )


def _load_choice_questions(section: Mapping[str, Any]) -> List[RawChoiceQuestion]:
    questions: List[RawChoiceQuestion] = []
    for position, raw in enumerate(section.get("questions") or [], start=1):
        # Image-only prompts strip down to nothing.
        text = html_to_text(raw.get("question_text")) or f"Question {position}"
        answers: List[Choice] = []
        for answer in raw.get("answers") or []:
            answer_text = (answer.get("answer_text") or "").strip()
            if not answer_text:
                continue
            answers.append(Choice(text=answer_text, is_correct=bool(answer.get("correct"))))
        if not answers:
            logger.warning("Choice question %r has no answers", text[:40])
        questions.append(
            RawChoiceQuestion(
                question_id=str(raw.get("question_id") or _make_id("mc")),
                text=text,
                answers=answers,
                allow_multiple=bool(raw.get("allow_multiple_answers")),
                points=_points(raw.get("points")),
                time_limit=_time_limit(raw.get("time_limit")),
                hint=html_to_text(raw.get("hint")) or None,
            )
        )
    return questions


def _load_matching_questions(section: Mapping[str, Any]) -> List[RawMatchingQuestion]:
    questions: List[RawMatchingQuestion] = []
    for raw in section.get("questions") or []:
        item_a = raw.get("item_a") or {}
        item_b = raw.get("item_b") or {}
        questions.append(
            RawMatchingQuestion(
                id=str(raw.get("id") or _make_id("mq")),
                item_a=_matching_item(item_a),
                item_b=_matching_item(item_b),
                points=_points(raw.get("points")),
            )
        )
    return questions


def parse_practice_document(data: Optional[Mapping[str, Any]]) -> PracticeDocument:
    if not data:
        raise EmptyDocumentError("Practice document is missing")
    choice_section = data.get("multiple_choice_quiz") or {}
    matching_section = data.get("matching_quiz") or {}
    title = ""
    quiz_info = data.get("quiz")
    if isinstance(quiz_info, Mapping):
        title = (quiz_info.get("name") or "").strip()
    document = PracticeDocument(
        choice_questions=_load_choice_questions(choice_section),
        matching_questions=_load_matching_questions(matching_section),
        matching_time_limit=_time_limit(matching_section.get("time_limit")),
        title=title,
    )
    if document.is_empty():
        raise EmptyDocumentError("Practice document has no questions")
    logger.info(
        "Loaded practice document: %d choice, %d matching entries",
        len(document.choice_questions),
        len(document.matching_questions),
    )
    return document


def load_practice_document(path: Path) -> PracticeDocument:
    if not path.exists():
        raise EmptyDocumentError(f"Practice document not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    return parse_practice_document(data)
