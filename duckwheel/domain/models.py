"""Wheel domain models: users, prizes, level settings and audit rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Literal, Mapping


class Rarity(IntEnum):
    COMMON = 1
    RARE = 2
    EPIC = 3
    LEGENDARY = 4


class WheelLevel(str, Enum):
    BASIC = "basic"
    ADVANCED = "advanced"
    EPIC = "epic"
    LEGENDARY = "legendary"


class SeriesBonusType(str, Enum):
    FREE_SPIN = "freeSpin"
    LUCK = "+luck"


UserRole = Literal["user", "admin"]
OrderStatus = Literal["created", "approved", "delivered"]

ORDER_STATUSES: tuple[str, ...] = ("created", "approved", "delivered")
IDENTITY_UPGRADES: Mapping[Rarity, Rarity] = {rarity: rarity for rarity in Rarity}


@dataclass(frozen=True, slots=True)
class User:
    """Player account holding the duck balance and pity state."""

    user_id: str
    name: str
    updated_at: datetime
    balance: float = 0
    total_earned: float = 0
    spins_total: int = 0
    last_result: str | None = None
    luck_modifier: float = 0.0
    role: UserRole = "user"


@dataclass(frozen=True, slots=True)
class Prize:
    """Wheel prize definition.

    ``base_weight`` is shown in admin tooling only; drawing odds come from the
    prize's effective rarity.
    """

    prize_id: str
    name: str
    description: str = ""
    rarity: Rarity = Rarity.COMMON
    base_weight: float = 0
    direct_buy_enabled: bool = False
    direct_buy_price: float | None = None
    active: bool = True
    remove_after_win: bool = False
    removed_from_wheel: bool = False

    @property
    def is_available(self) -> bool:
        return self.active and not (self.remove_after_win and self.removed_from_wheel)


@dataclass(frozen=True, slots=True)
class WheelSetting:
    """Per-level economy rules."""

    level: WheelLevel
    spin_cost: float
    pity_step: float = 0.0
    pity_max: float = 0.0
    rarity_upgrades: Mapping[Rarity, Rarity] = field(default_factory=lambda: dict(IDENTITY_UPGRADES))
    weights_overrides: Mapping[Rarity, float] | None = None
    series_bonus_every: int = 0
    series_bonus_type: SeriesBonusType | None = None


@dataclass(frozen=True, slots=True)
class SpinResult:
    rarity: Rarity
    balance_before: float
    balance_after: float
    luck_before: float
    luck_after: float
    prize: Prize | None = None
    free_spin_awarded: bool = False
    series_bonus_applied: bool = False


@dataclass(frozen=True, slots=True)
class SpinLogEntry:
    log_id: str
    user_id: str
    bet_level: WheelLevel
    prize_name: str
    rarity: Rarity
    balance_before: float
    balance_after: float
    luck_modifier_before: float
    luck_modifier_after: float
    created_at: datetime
    prize_id: str | None = None


@dataclass(frozen=True, slots=True)
class ShopOrder:
    order_id: str
    user_id: str
    prize_id: str
    price: float
    created_at: datetime
    updated_at: datetime
    status: OrderStatus = "created"


@dataclass(frozen=True, slots=True)
class DuckHistoryEntry:
    entry_id: str
    user_id: str
    amount: float
    note: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class UserWinSummary:
    prize_name: str
    rarity: Rarity
    count: int
    last_won_at: datetime
    prize_id: str | None = None


@dataclass(frozen=True, slots=True)
class UserOverview:
    user_id: str
    name: str
    balance: float
    total_earned: float
    wins: tuple[UserWinSummary, ...] = ()
