from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from ..services.errors import (
    EmptyDocumentError,
    PracticeError,
    SessionCompletedError,
    StaleQuestionError,
    UnknownOptionError,
)
from ..services.models import PracticeDocument, QuestionKind, Side
from ..services.question_engine import QuestionEngine
from ..services.result_store import ResultStore
from ..services.state import PracticeSession
from ..services.timer import AsyncioTicker
from .states import PracticeStates
from .view import PracticeView

logger = logging.getLogger(__name__)

router = Router(name="practice")

QUESTION_ENGINE: QuestionEngine | None = None
DOCUMENT: PracticeDocument | None = None
RESULT_STORE: ResultStore | None = None
TICK_INTERVAL = 1.0


def setup_dependencies(
    question_engine: QuestionEngine,
    document: PracticeDocument,
    result_store: ResultStore,
    tick_interval: float = 1.0,
) -> None:
    global QUESTION_ENGINE, DOCUMENT, RESULT_STORE, TICK_INTERVAL
    QUESTION_ENGINE = question_engine
    DOCUMENT = document
    RESULT_STORE = result_store
    TICK_INTERVAL = tick_interval


def get_engine() -> QuestionEngine:
    if QUESTION_ENGINE is None:
        raise RuntimeError("Question engine is not configured")
    return QUESTION_ENGINE


def get_document() -> PracticeDocument:
    if DOCUMENT is None:
        raise EmptyDocumentError("Practice document is not configured")
    return DOCUMENT


def get_result_store() -> ResultStore:
    if RESULT_STORE is None:
        raise RuntimeError("Result store is not configured")
    return RESULT_STORE


def find_session(data: Dict[str, Any]) -> Optional[Tuple[PracticeSession, PracticeView]]:
    session = data.get("session")
    view = data.get("view")
    if not isinstance(session, PracticeSession) or not isinstance(view, PracticeView):
        return None
    return session, view


def error_text(exc: PracticeError) -> str:
    if isinstance(exc, StaleQuestionError):
        return "This question is already closed."
    if isinstance(exc, SessionCompletedError):
        return "Practice is finished. Press «Practice again» to restart."
    if isinstance(exc, UnknownOptionError):
        return "This option is not available here."
    return "Something went wrong. Send /start to begin again."


async def run_command(
    callback: CallbackQuery,
    state: FSMContext,
    action: Callable[[PracticeSession], object],
) -> None:
    found = find_session(await state.get_data())
    if found is None:
        await callback.answer("Send /start to begin a practice session.")
        return
    session, view = found
    try:
        with view.command():
            action(session)
    except PracticeError as exc:
        logger.info("Rejected command in session %s: %s", session.session_id, exc)
        await callback.answer(error_text(exc))
        return
    await callback.answer(view.pop_notice())
    await view.refresh()


async def stop_existing(state: FSMContext) -> None:
    found = find_session(await state.get_data())
    if found is None:
        return
    session, view = found
    if not session.is_completed:
        # Finishing cancels the countdown; the abandoned report is not shown or stored.
        with view.command():
            session.finish()
    view.session = None
    await state.clear()


@router.message(Command("start"))
async def cmd_start(message: Message, state: FSMContext) -> None:
    await stop_existing(state)
    document = get_document()
    questions = get_engine().normalize(document)
    view = PracticeView(
        bot=message.bot,
        chat_id=message.chat.id,
        user_id=message.from_user.id if message.from_user else 0,
        result_store=get_result_store(),
        title=document.title,
    )
    try:
        session = PracticeSession(
            questions,
            ticker=AsyncioTicker(interval=TICK_INTERVAL),
            listener=view.handle_event,
        )
    except EmptyDocumentError:
        await message.answer("There are no practice questions yet. Please contact your instructor.")
        return
    view.session = session
    await state.set_state(PracticeStates.answering)
    await state.update_data(session=session, view=view)
    kinds = [question.kind for question in questions]
    await message.answer(
        "Practice session started!\n"
        f"{kinds.count(QuestionKind.choice)} multiple-choice and "
        f"{kinds.count(QuestionKind.matching)} matching sections. "
        "Timed questions move on automatically when the time runs out."
    )
    await view.render()


@router.message(Command("restart"), PracticeStates.answering)
async def cmd_restart(message: Message, state: FSMContext) -> None:
    found = find_session(await state.get_data())
    if found is None:
        await message.answer("Send /start to begin a practice session.")
        return
    session, view = found
    with view.command():
        session.restart()
    view.message_id = None
    await view.refresh()


@router.callback_query(F.data.startswith("ch|"), PracticeStates.answering)
async def handle_choice(callback: CallbackQuery, state: FSMContext) -> None:
    _, raw_index, question_id = callback.data.split("|", 2)

    def action(session: PracticeSession) -> None:
        question = session.current_question
        if question.id != question_id:
            raise StaleQuestionError(question_id, question.id)
        index = int(raw_index)
        if not 0 <= index < len(question.choices):
            raise UnknownOptionError(f"Choice index {index} out of range")
        session.select_choice(question_id, question.choices[index].text)

    await run_command(callback, state, action)


@router.callback_query(F.data.startswith("item|"), PracticeStates.answering)
async def handle_matching_item(callback: CallbackQuery, state: FSMContext) -> None:
    _, code, raw_index, question_id = callback.data.split("|", 3)
    side = Side.left if code == "L" else Side.right

    def action(session: PracticeSession) -> None:
        question = session.current_question
        if question.id != question_id:
            raise StaleQuestionError(question_id, question.id)
        items = question.left_items if side == Side.left else question.right_items
        index = int(raw_index)
        if not 0 <= index < len(items):
            raise UnknownOptionError(f"Item index {index} out of range")
        session.select_matching_item(items[index].content, side, question_id=question_id)

    await run_command(callback, state, action)


@router.callback_query(F.data.startswith("pair|"), PracticeStates.answering)
async def handle_pairs(callback: CallbackQuery, state: FSMContext) -> None:
    _, action_name, question_id = callback.data.split("|", 2)
    if action_name == "undo":
        await run_command(callback, state, lambda session: session.undo_last_pair(question_id))
    elif action_name == "clear":
        await run_command(callback, state, lambda session: session.clear_all_pairs(question_id))
    else:
        await callback.answer()


NAVIGATION: Dict[str, Callable[[PracticeSession], object]] = {
    "next": PracticeSession.go_to_next,
    "prev": PracticeSession.go_to_previous,
    "finish": PracticeSession.finish,
    "restart": PracticeSession.restart,
}


@router.callback_query(F.data.startswith("nav|"), PracticeStates.answering)
async def handle_navigation(callback: CallbackQuery, state: FSMContext) -> None:
    _, direction = callback.data.split("|", 1)
    action = NAVIGATION.get(direction)
    if action is None:
        await callback.answer()
        return
    await run_command(callback, state, action)


@router.callback_query(PracticeStates.answering)
async def handle_unknown_callback(callback: CallbackQuery) -> None:
    await callback.answer()


@router.callback_query()
async def handle_stale_callback(callback: CallbackQuery) -> None:
    await callback.answer("Send /start to begin a practice session.")
