"""Storage abstractions used by the DuckWheel services."""

from __future__ import annotations

from datetime import datetime
from typing import Mapping, Protocol, Sequence

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


class UserStore(Protocol):
    async def list(self) -> Sequence[User]:
        ...

    async def get(self, user_id: str) -> User | None:
        ...

    async def save(self, user: User) -> None:
        ...


class PrizeStore(Protocol):
    async def list(self) -> Sequence[Prize]:
        ...

    async def get(self, prize_id: str) -> Prize | None:
        ...

    async def save(self, prize: Prize) -> None:
        ...


class SettingsStore(Protocol):
    async def list(self) -> Mapping[WheelLevel, WheelSetting]:
        ...

    async def get(self, level: WheelLevel) -> WheelSetting | None:
        ...

    async def save(self, setting: WheelSetting) -> None:
        ...


class SpinLogStore(Protocol):
    async def append(self, entry: SpinLogEntry) -> None:
        ...

    async def list(self, user_id: str | None = None) -> Sequence[SpinLogEntry]:
        ...


class OrderStore(Protocol):
    async def append(self, order: ShopOrder) -> None:
        ...

    async def list(self, user_id: str | None = None) -> Sequence[ShopOrder]:
        ...

    async def update_status(
        self, order_id: str, status: OrderStatus, now: datetime | None = None
    ) -> ShopOrder | None:
        ...


class DuckHistoryStore(Protocol):
    async def append(self, entry: DuckHistoryEntry) -> None:
        ...

    async def list(self, user_id: str | None = None) -> Sequence[DuckHistoryEntry]:
        ...
