"""Telegram integration helpers."""

from .aiogram_router import build_router
from .filters import AdminFilter
from .keyboards import spin_again_keyboard, welcome_keyboard

__all__ = [
    "build_router",
    "AdminFilter",
    "spin_again_keyboard",
    "welcome_keyboard",
]
