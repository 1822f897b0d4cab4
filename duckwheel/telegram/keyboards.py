"""Keyboard helpers for DuckWheel bots."""

from __future__ import annotations

from typing import Iterable

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from ..domain.models import WheelLevel

CALLBACK_PREFIX = "duckwheel"

LEVEL_LABELS = {
    WheelLevel.BASIC: "Базовое",
    WheelLevel.ADVANCED: "Продвинутое",
    WheelLevel.EPIC: "Эпическое",
    WheelLevel.LEGENDARY: "Легендарное",
}


def spin_callback(level: WheelLevel) -> str:
    return f"{CALLBACK_PREFIX}:spin:{level.value}"


def spin_again_keyboard(level: WheelLevel) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="🔄 Крутить ещё", callback_data=spin_callback(level))],
            [InlineKeyboardButton(text="🦆 Баланс", callback_data=f"{CALLBACK_PREFIX}:balance")],
        ]
    )


def welcome_keyboard(levels: Iterable[WheelLevel]) -> InlineKeyboardMarkup:
    buttons = [
        [
            InlineKeyboardButton(
                text=f"🎡 {LEVEL_LABELS.get(level, level.value)}",
                callback_data=spin_callback(level),
            )
        ]
        for level in levels
    ]
    buttons.append(
        [
            InlineKeyboardButton(text="🦆 Баланс", callback_data=f"{CALLBACK_PREFIX}:balance"),
            InlineKeyboardButton(text="🎁 Призы", callback_data=f"{CALLBACK_PREFIX}:prizes"),
        ]
    )
    return InlineKeyboardMarkup(inline_keyboard=buttons)
