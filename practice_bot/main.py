from __future__ import annotations

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage

from .config import load_config
from .handlers import register_handlers
from .services.question_engine import QuestionEngine
from .services.question_loader import load_practice_document
from .services.result_store import build_result_store


async def main() -> None:
    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if not config.token:
        raise RuntimeError("BOT_TOKEN is not set. Add it to .env.")
    document = load_practice_document(config.practice.document_path)
    question_engine = QuestionEngine(seed=config.practice.seed)
    result_store = build_result_store(config.result_store)
    # Sessions hold live countdown handles, so they stay in process memory.
    dp = Dispatcher(storage=MemoryStorage())
    register_handlers(
        dp=dp,
        question_engine=question_engine,
        document=document,
        result_store=result_store,
        tick_interval=config.practice.tick_interval,
    )
    bot = Bot(token=config.token)
    await dp.start_polling(bot)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
