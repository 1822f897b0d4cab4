"""SQLAlchemy storage backend for DuckWheel."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Mapping, Sequence

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..domain.models import (
    DuckHistoryEntry,
    OrderStatus,
    Prize,
    Rarity,
    ShopOrder,
    SpinLogEntry,
    User,
    WheelLevel,
    WheelSetting,
)
from ..loaders.rows import (
    dump_wheel_setting,
    parse_rarity_upgrades,
    parse_series_bonus_type,
    parse_weights_overrides,
    to_timestamp,
)
from .base import DuckHistoryStore, OrderStore, PrizeStore, SettingsStore, SpinLogStore, UserStore


class Base(DeclarativeBase):
    pass


class UserTable(Base):
    __tablename__ = "duckwheel_users"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), default="")
    balance: Mapped[float] = mapped_column(Float, default=0)
    total_earned: Mapped[float] = mapped_column(Float, default=0)
    spins_total: Mapped[int] = mapped_column(Integer, default=0)
    last_result: Mapped[str | None] = mapped_column(String(255), nullable=True)
    luck_modifier: Mapped[float] = mapped_column(Float, default=0.0)
    role: Mapped[str] = mapped_column(String(16), default="user")
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class PrizeTable(Base):
    __tablename__ = "duckwheel_prizes"

    prize_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(String(1024), default="")
    rarity: Mapped[int] = mapped_column(Integer, default=1)
    base_weight: Mapped[float] = mapped_column(Float, default=0)
    direct_buy_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    direct_buy_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    remove_after_win: Mapped[bool] = mapped_column(Boolean, default=False)
    removed_from_wheel: Mapped[bool] = mapped_column(Boolean, default=False)
    # Keeps list() in insertion order, which the weighted draw depends on.
    position: Mapped[int] = mapped_column(Integer, default=0)


class WheelSettingTable(Base):
    __tablename__ = "duckwheel_wheel_settings"

    level: Mapped[str] = mapped_column(String(16), primary_key=True)
    spin_cost: Mapped[float] = mapped_column(Float)
    rarity_upgrades: Mapped[dict] = mapped_column(JSON, default=dict)
    pity_step: Mapped[float] = mapped_column(Float, default=0.0)
    pity_max: Mapped[float] = mapped_column(Float, default=0.0)
    weights_overrides: Mapped[dict] = mapped_column(JSON, default=dict)
    series_bonus_every: Mapped[int] = mapped_column(Integer, default=0)
    series_bonus_type: Mapped[str | None] = mapped_column(String(16), nullable=True)


class SpinLogTable(Base):
    __tablename__ = "duckwheel_spin_log"

    log_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    bet_level: Mapped[str] = mapped_column(String(16))
    prize_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    prize_name: Mapped[str] = mapped_column(String(255))
    rarity: Mapped[int] = mapped_column(Integer)
    balance_before: Mapped[float] = mapped_column(Float)
    balance_after: Mapped[float] = mapped_column(Float)
    luck_modifier_before: Mapped[float] = mapped_column(Float)
    luck_modifier_after: Mapped[float] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class ShopOrderTable(Base):
    __tablename__ = "duckwheel_shop_orders"

    order_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    prize_id: Mapped[str] = mapped_column(String(64))
    price: Mapped[float] = mapped_column(Float)
    status: Mapped[str] = mapped_column(String(16), default="created")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class DuckHistoryTable(Base):
    __tablename__ = "duckwheel_duck_history"

    entry_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    amount: Mapped[float] = mapped_column(Float)
    note: Mapped[str] = mapped_column(String(1024))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class AsyncSQLAlchemyStorage:
    """Bundle of async stores backed by SQLAlchemy."""

    def __init__(self, dsn: str, *, echo: bool = False) -> None:
        self._engine = create_async_engine(dsn, echo=echo, future=True)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            yield session

    async def init_models(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    def user_store(self) -> "AsyncSQLAlchemyUserStore":
        return AsyncSQLAlchemyUserStore(self._session_factory)

    def prize_store(self) -> "AsyncSQLAlchemyPrizeStore":
        return AsyncSQLAlchemyPrizeStore(self._session_factory)

    def settings_store(self) -> "AsyncSQLAlchemySettingsStore":
        return AsyncSQLAlchemySettingsStore(self._session_factory)

    def spin_log_store(self) -> "AsyncSQLAlchemySpinLogStore":
        return AsyncSQLAlchemySpinLogStore(self._session_factory)

    def order_store(self) -> "AsyncSQLAlchemyOrderStore":
        return AsyncSQLAlchemyOrderStore(self._session_factory)

    def duck_history_store(self) -> "AsyncSQLAlchemyDuckHistoryStore":
        return AsyncSQLAlchemyDuckHistoryStore(self._session_factory)


class AsyncSQLAlchemyUserStore(UserStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list(self) -> Sequence[User]:
        async with self._session_factory() as session:
            rows = (await session.execute(select(UserTable))).scalars().all()
            return [_user_from_row(row) for row in rows]

    async def get(self, user_id: str) -> User | None:
        async with self._session_factory() as session:
            row = await session.get(UserTable, user_id)
            return _user_from_row(row) if row else None

    async def save(self, user: User) -> None:
        async with self._session_factory() as session:
            await session.merge(
                UserTable(
                    user_id=user.user_id,
                    name=user.name,
                    balance=user.balance,
                    total_earned=user.total_earned,
                    spins_total=user.spins_total,
                    last_result=user.last_result,
                    luck_modifier=user.luck_modifier,
                    role=user.role,
                    updated_at=user.updated_at,
                )
            )
            await session.commit()


class AsyncSQLAlchemyPrizeStore(PrizeStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list(self) -> Sequence[Prize]:
        async with self._session_factory() as session:
            stmt = select(PrizeTable).order_by(PrizeTable.position, PrizeTable.prize_id)
            rows = (await session.execute(stmt)).scalars().all()
            return [_prize_from_row(row) for row in rows]

    async def get(self, prize_id: str) -> Prize | None:
        async with self._session_factory() as session:
            row = await session.get(PrizeTable, prize_id)
            return _prize_from_row(row) if row else None

    async def save(self, prize: Prize) -> None:
        async with self._session_factory() as session:
            row = await session.get(PrizeTable, prize.prize_id)
            if row is None:
                count = await session.scalar(select(func.count()).select_from(PrizeTable))
                row = PrizeTable(prize_id=prize.prize_id, position=count or 0)
                session.add(row)
            row.name = prize.name
            row.description = prize.description
            row.rarity = int(prize.rarity)
            row.base_weight = prize.base_weight
            row.direct_buy_enabled = prize.direct_buy_enabled
            row.direct_buy_price = prize.direct_buy_price
            row.active = prize.active
            row.remove_after_win = prize.remove_after_win
            row.removed_from_wheel = prize.removed_from_wheel
            await session.commit()


class AsyncSQLAlchemySettingsStore(SettingsStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list(self) -> Mapping[WheelLevel, WheelSetting]:
        async with self._session_factory() as session:
            rows = (await session.execute(select(WheelSettingTable))).scalars().all()
            settings = [_setting_from_row(row) for row in rows]
            return {setting.level: setting for setting in settings}

    async def get(self, level: WheelLevel) -> WheelSetting | None:
        async with self._session_factory() as session:
            row = await session.get(WheelSettingTable, WheelLevel(level).value)
            return _setting_from_row(row) if row else None

    async def save(self, setting: WheelSetting) -> None:
        payload = dump_wheel_setting(setting)
        async with self._session_factory() as session:
            await session.merge(
                WheelSettingTable(
                    level=setting.level.value,
                    spin_cost=setting.spin_cost,
                    rarity_upgrades=payload["rarityUpgrades"],
                    pity_step=setting.pity_step,
                    pity_max=setting.pity_max,
                    weights_overrides=payload["weightsOverrides"],
                    series_bonus_every=setting.series_bonus_every,
                    series_bonus_type=payload["seriesBonusType"],
                )
            )
            await session.commit()


class AsyncSQLAlchemySpinLogStore(SpinLogStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, entry: SpinLogEntry) -> None:
        async with self._session_factory() as session:
            session.add(
                SpinLogTable(
                    log_id=entry.log_id,
                    user_id=entry.user_id,
                    bet_level=entry.bet_level.value,
                    prize_id=entry.prize_id,
                    prize_name=entry.prize_name,
                    rarity=int(entry.rarity),
                    balance_before=entry.balance_before,
                    balance_after=entry.balance_after,
                    luck_modifier_before=entry.luck_modifier_before,
                    luck_modifier_after=entry.luck_modifier_after,
                    created_at=entry.created_at,
                )
            )
            await session.commit()

    async def list(self, user_id: str | None = None) -> Sequence[SpinLogEntry]:
        async with self._session_factory() as session:
            stmt = select(SpinLogTable).order_by(SpinLogTable.created_at)
            if user_id is not None:
                stmt = stmt.where(SpinLogTable.user_id == user_id)
            rows = (await session.execute(stmt)).scalars().all()
            return [
                SpinLogEntry(
                    log_id=row.log_id,
                    user_id=row.user_id,
                    bet_level=WheelLevel(row.bet_level),
                    prize_id=row.prize_id,
                    prize_name=row.prize_name,
                    rarity=Rarity(row.rarity),
                    balance_before=row.balance_before,
                    balance_after=row.balance_after,
                    luck_modifier_before=row.luck_modifier_before,
                    luck_modifier_after=row.luck_modifier_after,
                    created_at=to_timestamp(row.created_at),
                )
                for row in rows
            ]


class AsyncSQLAlchemyOrderStore(OrderStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, order: ShopOrder) -> None:
        async with self._session_factory() as session:
            session.add(
                ShopOrderTable(
                    order_id=order.order_id,
                    user_id=order.user_id,
                    prize_id=order.prize_id,
                    price=order.price,
                    status=order.status,
                    created_at=order.created_at,
                    updated_at=order.updated_at,
                )
            )
            await session.commit()

    async def list(self, user_id: str | None = None) -> Sequence[ShopOrder]:
        async with self._session_factory() as session:
            stmt = select(ShopOrderTable).order_by(ShopOrderTable.created_at)
            if user_id is not None:
                stmt = stmt.where(ShopOrderTable.user_id == user_id)
            rows = (await session.execute(stmt)).scalars().all()
            return [_order_from_row(row) for row in rows]

    async def update_status(
        self, order_id: str, status: OrderStatus, now: datetime | None = None
    ) -> ShopOrder | None:
        async with self._session_factory() as session:
            row = await session.get(ShopOrderTable, order_id)
            if row is None:
                return None
            row.status = status
            row.updated_at = now or datetime.now(timezone.utc)
            await session.commit()
            return _order_from_row(row)


class AsyncSQLAlchemyDuckHistoryStore(DuckHistoryStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, entry: DuckHistoryEntry) -> None:
        async with self._session_factory() as session:
            session.add(
                DuckHistoryTable(
                    entry_id=entry.entry_id,
                    user_id=entry.user_id,
                    amount=entry.amount,
                    note=entry.note,
                    created_at=entry.created_at,
                )
            )
            await session.commit()

    async def list(self, user_id: str | None = None) -> Sequence[DuckHistoryEntry]:
        async with self._session_factory() as session:
            stmt = select(DuckHistoryTable).order_by(DuckHistoryTable.created_at)
            if user_id is not None:
                stmt = stmt.where(DuckHistoryTable.user_id == user_id)
            rows = (await session.execute(stmt)).scalars().all()
            return [
                DuckHistoryEntry(
                    entry_id=row.entry_id,
                    user_id=row.user_id,
                    amount=row.amount,
                    note=row.note,
                    created_at=to_timestamp(row.created_at),
                )
                for row in rows
            ]


def _user_from_row(row: UserTable) -> User:
    return User(
        user_id=row.user_id,
        name=row.name,
        balance=row.balance,
        total_earned=row.total_earned,
        spins_total=row.spins_total,
        last_result=row.last_result,
        luck_modifier=row.luck_modifier,
        role=row.role,
        updated_at=to_timestamp(row.updated_at),
    )


def _prize_from_row(row: PrizeTable) -> Prize:
    return Prize(
        prize_id=row.prize_id,
        name=row.name,
        description=row.description,
        rarity=Rarity(row.rarity),
        base_weight=row.base_weight,
        direct_buy_enabled=row.direct_buy_enabled,
        direct_buy_price=row.direct_buy_price,
        active=row.active,
        remove_after_win=row.remove_after_win,
        removed_from_wheel=row.removed_from_wheel,
    )


def _setting_from_row(row: WheelSettingTable) -> WheelSetting:
    return WheelSetting(
        level=WheelLevel(row.level),
        spin_cost=row.spin_cost,
        rarity_upgrades=parse_rarity_upgrades(row.rarity_upgrades),
        pity_step=row.pity_step,
        pity_max=row.pity_max,
        weights_overrides=parse_weights_overrides(row.weights_overrides),
        series_bonus_every=row.series_bonus_every,
        series_bonus_type=parse_series_bonus_type(row.series_bonus_type),
    )


def _order_from_row(row: ShopOrderTable) -> ShopOrder:
    return ShopOrder(
        order_id=row.order_id,
        user_id=row.user_id,
        prize_id=row.prize_id,
        price=row.price,
        status=row.status,
        created_at=to_timestamp(row.created_at),
        updated_at=to_timestamp(row.updated_at),
    )
