"""Player-centric read models."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from .exceptions import InvalidInput, UserNotFound
from .models import DuckHistoryEntry, ShopOrder, SpinLogEntry, User, UserOverview, UserWinSummary
from ..storage.base import DuckHistoryStore, OrderStore, SpinLogStore, UserStore

logger = logging.getLogger(__name__)


class PlayerService:
    """Expose read operations for player state and history."""

    def __init__(
        self,
        user_store: UserStore,
        spin_log_store: SpinLogStore,
        order_store: OrderStore,
        duck_history_store: DuckHistoryStore,
    ) -> None:
        self._users = user_store
        self._spin_log = spin_log_store
        self._orders = order_store
        self._duck_history = duck_history_store

    async def fetch(self, user_id: str) -> User:
        if not user_id:
            raise InvalidInput("userId is required")
        user = await self._users.get(user_id)
        if user is None:
            raise UserNotFound(f"User {user_id} not found")
        return user

    async def register(self, user_id: str, name: str) -> User:
        """Return the stored user, creating an empty account on first contact."""
        user = await self._users.get(user_id)
        if user is not None:
            return user
        user = User(user_id=user_id, name=name or user_id, updated_at=datetime.now(timezone.utc))
        await self._users.save(user)
        logger.info("Registered user %s (%s)", user_id, user.name)
        return user

    async def spin_history(self, user_id: str | None = None) -> Sequence[SpinLogEntry]:
        return await self._spin_log.list(user_id)

    async def orders(self, user_id: str | None = None) -> Sequence[ShopOrder]:
        return await self._orders.list(user_id)

    async def duck_history(self, user_id: str) -> list[DuckHistoryEntry]:
        """Manual balance adjustments for a user, newest first."""
        if not user_id:
            raise InvalidInput("userId is required")
        entries = list(await self._duck_history.list(user_id))
        entries.sort(key=lambda entry: entry.created_at, reverse=True)
        return entries

    async def users_overview(self) -> list[UserOverview]:
        """Leaderboard: richest first, each with their prizes won."""
        users = await self._users.list()
        logs = await self._spin_log.list()
        overview = [
            UserOverview(
                user_id=user.user_id,
                name=user.name,
                balance=user.balance,
                total_earned=user.total_earned,
                wins=tuple(summarize_wins(log for log in logs if log.user_id == user.user_id)),
            )
            for user in users
        ]
        overview.sort(key=lambda item: (-item.balance, item.name))
        return overview


def summarize_wins(logs) -> list[UserWinSummary]:
    """Group spin logs by prize; most frequent first, ties by latest win."""
    grouped: dict[str, UserWinSummary] = {}
    for log in logs:
        if not log.prize_name:
            continue
        key = log.prize_id or f"{log.prize_name}:{int(log.rarity)}"
        existing = grouped.get(key)
        if existing is None:
            grouped[key] = UserWinSummary(
                prize_id=log.prize_id,
                prize_name=log.prize_name,
                rarity=log.rarity,
                count=1,
                last_won_at=log.created_at,
            )
            continue
        grouped[key] = UserWinSummary(
            prize_id=existing.prize_id,
            prize_name=existing.prize_name,
            rarity=existing.rarity,
            count=existing.count + 1,
            last_won_at=max(existing.last_won_at, log.created_at),
        )
    wins = list(grouped.values())
    wins.sort(key=lambda win: (-win.count, -win.last_won_at.timestamp()))
    return wins
