"""In-memory storage backend for DuckWheel."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Mapping, Sequence

from ..domain.models import (
    DuckHistoryEntry,
    OrderStatus,
    Prize,
    ShopOrder,
    SpinLogEntry,
    User,
    WheelLevel,
    WheelSetting,
)
from .base import DuckHistoryStore, OrderStore, PrizeStore, SettingsStore, SpinLogStore, UserStore


class InMemoryUserStore(UserStore):
    def __init__(self) -> None:
        self._records: dict[str, User] = {}

    async def list(self) -> Sequence[User]:
        return list(self._records.values())

    async def get(self, user_id: str) -> User | None:
        return self._records.get(user_id)

    async def save(self, user: User) -> None:
        self._records[user.user_id] = user


class InMemoryPrizeStore(PrizeStore):
    def __init__(self) -> None:
        self._records: dict[str, Prize] = {}

    async def list(self) -> Sequence[Prize]:
        return list(self._records.values())

    async def get(self, prize_id: str) -> Prize | None:
        return self._records.get(prize_id)

    async def save(self, prize: Prize) -> None:
        self._records[prize.prize_id] = prize


class InMemorySettingsStore(SettingsStore):
    def __init__(self) -> None:
        self._records: dict[WheelLevel, WheelSetting] = {}

    async def list(self) -> Mapping[WheelLevel, WheelSetting]:
        return dict(self._records)

    async def get(self, level: WheelLevel) -> WheelSetting | None:
        return self._records.get(level)

    async def save(self, setting: WheelSetting) -> None:
        self._records[setting.level] = setting


class InMemorySpinLogStore(SpinLogStore):
    def __init__(self) -> None:
        self._entries: list[SpinLogEntry] = []

    async def append(self, entry: SpinLogEntry) -> None:
        self._entries.append(entry)

    async def list(self, user_id: str | None = None) -> Sequence[SpinLogEntry]:
        return [entry for entry in self._entries if user_id is None or entry.user_id == user_id]


class InMemoryOrderStore(OrderStore):
    def __init__(self) -> None:
        self._orders: list[ShopOrder] = []

    async def append(self, order: ShopOrder) -> None:
        self._orders.append(order)

    async def list(self, user_id: str | None = None) -> Sequence[ShopOrder]:
        return [order for order in self._orders if user_id is None or order.user_id == user_id]

    async def update_status(
        self, order_id: str, status: OrderStatus, now: datetime | None = None
    ) -> ShopOrder | None:
        for idx, order in enumerate(self._orders):
            if order.order_id == order_id:
                updated = replace(
                    order, status=status, updated_at=now or datetime.now(timezone.utc)
                )
                self._orders[idx] = updated
                return updated
        return None


class InMemoryDuckHistoryStore(DuckHistoryStore):
    def __init__(self) -> None:
        self._entries: list[DuckHistoryEntry] = []

    async def append(self, entry: DuckHistoryEntry) -> None:
        self._entries.append(entry)

    async def list(self, user_id: str | None = None) -> Sequence[DuckHistoryEntry]:
        return [entry for entry in self._entries if user_id is None or entry.user_id == user_id]
