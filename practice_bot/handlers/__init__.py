from __future__ import annotations

from aiogram import Dispatcher

from ..services.models import PracticeDocument
from ..services.question_engine import QuestionEngine
from ..services.result_store import ResultStore
from . import practice


def register_handlers(
    dp: Dispatcher,
    question_engine: QuestionEngine,
    document: PracticeDocument,
    result_store: ResultStore,
    tick_interval: float = 1.0,
) -> None:
    practice.setup_dependencies(
        question_engine=question_engine,
        document=document,
        result_store=result_store,
        tick_interval=tick_interval,
    )
    dp.include_router(practice.router)
