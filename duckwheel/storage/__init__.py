"""Storage backends for DuckWheel."""

from .base import (
    DuckHistoryStore,
    OrderStore,
    PrizeStore,
    SettingsStore,
    SpinLogStore,
    UserStore,
)
from .memory import (
    InMemoryDuckHistoryStore,
    InMemoryOrderStore,
    InMemoryPrizeStore,
    InMemorySettingsStore,
    InMemorySpinLogStore,
    InMemoryUserStore,
)
from .sqlalchemy import AsyncSQLAlchemyStorage

__all__ = [
    "DuckHistoryStore",
    "OrderStore",
    "PrizeStore",
    "SettingsStore",
    "SpinLogStore",
    "UserStore",
    "InMemoryDuckHistoryStore",
    "InMemoryOrderStore",
    "InMemoryPrizeStore",
    "InMemorySettingsStore",
    "InMemorySpinLogStore",
    "InMemoryUserStore",
    "AsyncSQLAlchemyStorage",
]
