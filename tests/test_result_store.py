import json
from pathlib import Path

from practice_bot.config import ResultStoreConfig
from practice_bot.services.models import Side
from practice_bot.services.result_store import (
    FileResultStore,
    NullResultStore,
    build_payload,
    build_result_store,
)


def finished_report(make_session, questions):
    session = make_session(questions)
    session.select_choice("q1", "Paris")
    session.go_to_next()
    session.go_to_next()
    session.select_matching_item("Japan", Side.left)
    session.select_matching_item("Tokyo", Side.right)
    return session, session.finish()


def test_payload_serializes_choice_and_matching_answers(make_session, mixed_questions) -> None:
    session, report = finished_report(make_session, mixed_questions)
    payload = build_payload(report, session_id=session.session_id, user_id=42, title="Quiz")
    assert payload["user_id"] == 42
    assert payload["correct_count"] == 1
    assert payload["total_count"] == 4
    first, second, third, fourth = payload["questions"]
    assert first["user_answer"] == ["Paris"]
    assert first["status"] == "correct"
    assert second["user_answer"] == []
    assert second["correct_answer"] == ["2", "3"]
    assert third["user_answer"] == [{"left": "Japan", "right": "Tokyo"}]
    assert {"left": "Kenya", "right": "Nairobi"} in third["correct_answer"]
    assert fourth["user_answer"] is None
    assert fourth["status"] == "unanswered"


def test_file_store_appends_json_lines(tmp_path: Path, make_session, mixed_questions) -> None:
    path = tmp_path / "nested" / "results.jsonl"
    store = FileResultStore(path)
    session, report = finished_report(make_session, mixed_questions)
    store.append(report, session_id=session.session_id, user_id=1)
    store.append(report, session_id=session.session_id, user_id=2)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert json.loads(lines[1])["user_id"] == 2
    assert json.loads(lines[0])["questions"][2]["user_answer"] == [{"left": "Japan", "right": "Tokyo"}]


def test_build_result_store_backends(tmp_path: Path) -> None:
    path = tmp_path / "results.jsonl"
    assert isinstance(build_result_store(ResultStoreConfig(backend="file", file_path=path)), FileResultStore)
    assert path.exists()
    assert isinstance(build_result_store(ResultStoreConfig(backend="none", file_path=path)), NullResultStore)
    assert isinstance(build_result_store(ResultStoreConfig(backend="redis", file_path=path)), FileResultStore)
