from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Set

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest
from aiogram.utils.keyboard import InlineKeyboardBuilder

from ..services.models import (
    Notification,
    ProgressUpdate,
    ResultReport,
    SessionEvent,
    SessionFinished,
    TimerTick,
)
from ..services.result_store import ResultStore
from ..services.state import PracticeSession
from ..services.text_utils import chunk_text_for_telegram
from .rendering import build_keyboard, build_question_text, build_summary

logger = logging.getLogger(__name__)


def should_refresh_timer(remaining: int) -> bool:
    # Editing on every tick would hit Telegram's edit rate limits.
    return remaining <= 5 or remaining % 10 == 0


class PracticeView:
    """Keeps one chat message in sync with a practice session.

    Session events that arrive outside of a handled command (countdown ticks,
    timer-driven advances) schedule a refresh on the running loop.
    """

    def __init__(
        self,
        bot: Bot,
        chat_id: int,
        user_id: int,
        result_store: ResultStore,
        title: str = "",
    ):
        self.bot = bot
        self.chat_id = chat_id
        self.user_id = user_id
        self.result_store = result_store
        self.title = title
        self.session: Optional[PracticeSession] = None
        self.message_id: Optional[int] = None
        self.notices: List[Notification] = []
        self._finished: Optional[ResultReport] = None
        self._in_command = False
        self._tasks: Set[asyncio.Task] = set()

    @contextmanager
    def command(self) -> Iterator[None]:
        self._in_command = True
        try:
            yield
        finally:
            self._in_command = False

    def handle_event(self, event: SessionEvent) -> None:
        if isinstance(event, Notification):
            self.notices.append(event)
            return
        if isinstance(event, SessionFinished):
            self._finished = event.report
        elif isinstance(event, TimerTick):
            if self._in_command or not should_refresh_timer(event.remaining):
                return
            self._spawn(self.render())
            return
        elif not isinstance(event, ProgressUpdate):
            return
        if not self._in_command and self.session is not None:
            self._spawn(self.refresh())

    def pop_notice(self) -> Optional[str]:
        if not self.notices:
            return None
        text = " ".join(notice.message for notice in self.notices)
        self.notices.clear()
        return text

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Practice view update failed for chat %s", self.chat_id, exc_info=exc)

    async def refresh(self) -> None:
        if self._finished is not None:
            report, self._finished = self._finished, None
            await self.show_results(report)
            return
        await self.render()

    async def render(self) -> None:
        session = self.session
        if session is None or session.is_completed:
            return
        text = build_question_text(session, title=self.title, notice=self.pop_notice())
        markup = build_keyboard(session).as_markup()
        if self.message_id is None:
            sent = await self.bot.send_message(self.chat_id, text, reply_markup=markup)
            self.message_id = sent.message_id
            return
        try:
            await self.bot.edit_message_text(
                chat_id=self.chat_id,
                message_id=self.message_id,
                text=text,
                reply_markup=markup,
            )
        except TelegramBadRequest as exc:
            if "message is not modified" not in str(exc):
                raise

    async def show_results(self, report: ResultReport) -> None:
        session = self.session
        notice = self.pop_notice()
        if self.message_id is not None:
            await self.bot.edit_message_text(
                chat_id=self.chat_id,
                message_id=self.message_id,
                text=notice or "Practice complete! Building your report...",
                reply_markup=None,
            )
            self.message_id = None
        chunks = chunk_text_for_telegram(build_summary(report, title=self.title))
        restart = InlineKeyboardBuilder()
        restart.button(text="🔄 Practice again", callback_data="nav|restart")
        for idx, chunk in enumerate(chunks):
            markup = restart.as_markup() if idx == len(chunks) - 1 else None
            await self.bot.send_message(self.chat_id, chunk, reply_markup=markup)
        if session is not None:
            self.result_store.append(
                report,
                session_id=session.session_id,
                user_id=self.user_id,
                title=self.title,
            )
