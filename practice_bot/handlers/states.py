from __future__ import annotations

from aiogram.fsm.state import State, StatesGroup


class PracticeStates(StatesGroup):
    answering = State()
