"""Top level application object for DuckWheel."""

from __future__ import annotations

from random import Random
from typing import Any

from .admin.service import AdminService
from .config import DuckWheelConfig
from .domain.locks import UserLocks
from .domain.player import PlayerService
from .domain.wheel import WheelService
from .storage.base import (
    DuckHistoryStore,
    OrderStore,
    PrizeStore,
    SettingsStore,
    SpinLogStore,
    UserStore,
)
from .storage.memory import (
    InMemoryDuckHistoryStore,
    InMemoryOrderStore,
    InMemoryPrizeStore,
    InMemorySettingsStore,
    InMemorySpinLogStore,
    InMemoryUserStore,
)
from .storage.sqlalchemy import AsyncSQLAlchemyStorage


class WheelApp:
    """Central dependency container used by the HTTP API, bot and CLI."""

    def __init__(
        self,
        config: DuckWheelConfig,
        *,
        user_store: UserStore | None = None,
        prize_store: PrizeStore | None = None,
        settings_store: SettingsStore | None = None,
        spin_log_store: SpinLogStore | None = None,
        order_store: OrderStore | None = None,
        duck_history_store: DuckHistoryStore | None = None,
        rng: Random | None = None,
    ) -> None:
        self.config = config
        self._rng = rng or (Random(config.rng_seed) if config.rng_seed is not None else None)
        self.user_locks = UserLocks()

        self._sqlalchemy_storage: AsyncSQLAlchemyStorage | None = None
        (
            self.user_store,
            self.prize_store,
            self.settings_store,
            self.spin_log_store,
            self.order_store,
            self.duck_history_store,
        ) = self._wire_storage(
            user_store,
            prize_store,
            settings_store,
            spin_log_store,
            order_store,
            duck_history_store,
        )

        self.wheel_service = WheelService(
            self.user_store,
            self.prize_store,
            self.settings_store,
            self.spin_log_store,
            self.order_store,
            rng=self._rng,
            locks=self.user_locks,
        )
        self.player_service = PlayerService(
            self.user_store,
            self.spin_log_store,
            self.order_store,
            self.duck_history_store,
        )
        self.admin_service = AdminService(
            self.user_store,
            self.prize_store,
            self.settings_store,
            self.order_store,
            self.duck_history_store,
            locks=self.user_locks,
        )

    def _wire_storage(self, *stores):
        if all(store is not None for store in stores):
            return stores

        (
            user_store,
            prize_store,
            settings_store,
            spin_log_store,
            order_store,
            duck_history_store,
        ) = stores
        backend = self.config.storage.backend
        if backend == "memory":
            return (
                user_store or InMemoryUserStore(),
                prize_store or InMemoryPrizeStore(),
                settings_store or InMemorySettingsStore(),
                spin_log_store or InMemorySpinLogStore(),
                order_store or InMemoryOrderStore(),
                duck_history_store or InMemoryDuckHistoryStore(),
            )
        if backend == "sqlalchemy":
            dsn = self.config.storage.resolve_dsn()
            if not dsn:
                raise ValueError("SQLAlchemy backend requires a DSN")
            storage = AsyncSQLAlchemyStorage(dsn, echo=self.config.storage.echo_sql)
            self._sqlalchemy_storage = storage
            return (
                user_store or storage.user_store(),
                prize_store or storage.prize_store(),
                settings_store or storage.settings_store(),
                spin_log_store or storage.spin_log_store(),
                order_store or storage.order_store(),
                duck_history_store or storage.duck_history_store(),
            )
        raise ValueError(f"Unsupported storage backend {backend}")

    async def snapshot(self) -> dict[str, Any]:
        """Export current configuration for debugging."""
        settings = await self.settings_store.list()
        return {
            "storage": self.config.storage.backend,
            "levels": sorted(level.value for level in settings),
            "prizes": [prize.prize_id for prize in await self.prize_store.list()],
            "users": len(await self.user_store.list()),
        }

    async def init_backend(self) -> None:
        """Initialize storage backend resources (e.g., database tables)."""
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.init_models()

    async def close(self) -> None:
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.dispose()
