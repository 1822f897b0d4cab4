"""aiogram filters for DuckWheel bots."""

from __future__ import annotations

from aiogram.filters import BaseFilter
from aiogram.types import CallbackQuery, Message

from ..config import DuckWheelConfig


class AdminFilter(BaseFilter):
    """Pass only updates sent by the Telegram ids listed in the admin config."""

    def __init__(self, config: DuckWheelConfig) -> None:
        self._admins = set(config.admin.admin_ids)

    async def __call__(self, event: Message | CallbackQuery) -> bool:
        user = event.from_user
        return bool(user and user.id in self._admins)
