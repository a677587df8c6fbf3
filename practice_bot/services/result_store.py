from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from ..config import ResultStoreConfig
from .models import AnswerValue, MatchingPair, QuestionReport, ResultReport

logger = logging.getLogger(__name__)


def _value_payload(value: Optional[AnswerValue]) -> Any:
    if value is None:
        return None
    items = list(value)
    if items and isinstance(items[0], MatchingPair):
        return [asdict(pair) for pair in items]
    return sorted(items)


def _question_payload(report: QuestionReport) -> Dict[str, Any]:
    return {
        "id": report.question.id,
        "kind": report.question.kind.value,
        "prompt": report.question.prompt,
        "points": report.question.points,
        "status": report.status.value,
        "is_correct": report.is_correct,
        "user_answer": _value_payload(report.submitted),
        "correct_answer": _value_payload(report.correct_value),
        "time_spent": round(report.time_spent, 2),
    }


def build_payload(
    report: ResultReport,
    session_id: str,
    user_id: int,
    title: str = "",
) -> Dict[str, Any]:
    questions: List[Dict[str, Any]] = [_question_payload(item) for item in report.questions]
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "session_id": session_id,
        "user_id": user_id,
        "title": title,
        "correct_count": report.correct_count,
        "total_count": report.total_count,
        "percentage": report.percentage,
        "earned_points": report.earned_points,
        "max_points": report.max_points,
        "questions": questions,
    }


class ResultStore(Protocol):
    def append(
        self,
        report: ResultReport,
        session_id: str,
        user_id: int,
        title: str = "",
    ) -> None: ...


class FileResultStore:
    def __init__(self, path: Path):
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.path.touch()

    def append(
        self,
        report: ResultReport,
        session_id: str,
        user_id: int,
        title: str = "",
    ) -> None:
        payload = build_payload(report, session_id, user_id, title)
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(payload, ensure_ascii=False) + "\n")
        logger.debug("Stored practice result %s in %s", session_id, self.path)


class NullResultStore:
    """Used when result logging is switched off."""

    def append(
        self,
        report: ResultReport,
        session_id: str,
        user_id: int,
        title: str = "",
    ) -> None:
        logger.debug("Result logging disabled, dropping report for session %s", session_id)


def build_result_store(config: ResultStoreConfig) -> ResultStore:
    if config.backend == "none":
        return NullResultStore()
    if config.backend != "file":
        logger.warning("Unknown results backend %r, falling back to file", config.backend)
    return FileResultStore(config.file_path)
