"""Economy engine: spin outcomes, direct purchases and balance adjustments.

Every function here is pure. Inputs are never mutated; callers persist the
returned records themselves and must serialise calls per user.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from random import Random
from typing import Sequence
from uuid import uuid4

from .bonuses import series_bonus
from .exceptions import (
    DirectPriceNotSet,
    DirectPurchaseNotAllowed,
    InsufficientBalance,
    InvalidInput,
    NoPrizesAvailable,
    PrizeUnavailable,
)
from .models import (
    DuckHistoryEntry,
    Prize,
    Rarity,
    ShopOrder,
    SpinLogEntry,
    SpinResult,
    User,
    WheelSetting,
)
from .rng import RandomSource, create_rng, default_rng, pick_weighted
from .weights import WeightedPrize, compute_weights


@dataclass(frozen=True, slots=True)
class SpinOutcome:
    result: SpinResult
    next_user: User
    log_entry: SpinLogEntry


@dataclass(frozen=True, slots=True)
class PurchaseOutcome:
    order: ShopOrder
    next_user: User


@dataclass(frozen=True, slots=True)
class BalanceAdjustment:
    next_user: User
    entry: DuckHistoryEntry


def ensure_balance(user: User, cost: float) -> None:
    if user.balance < cost:
        raise InsufficientBalance(user.balance, cost)


def apply_pity(rarity: Rarity, level: WheelSetting, luck_before: float) -> float:
    """Common draws bank one pity step; any rarer draw clears all banked luck."""
    if rarity == Rarity.COMMON:
        return min(level.pity_max, luck_before + level.pity_step)
    return 0.0


def resolve_rng(rng: RandomSource | Random | None = None, seed: str | int | None = None) -> RandomSource:
    if isinstance(rng, Random):
        return rng.random
    if rng is not None:
        return rng
    if seed:
        return create_rng(seed)
    return default_rng()


def spin(
    user: User,
    level: WheelSetting,
    prizes: Sequence[Prize],
    *,
    rng: RandomSource | Random | None = None,
    seed: str | int | None = None,
    now: datetime | None = None,
) -> SpinOutcome:
    now = now or datetime.now(timezone.utc)
    ensure_balance(user, level.spin_cost)

    pool = compute_weights(prizes, level, user.luck_modifier)
    if not pool:
        raise NoPrizesAvailable(f"No prizes available for level {level.level.value}")

    selected: WeightedPrize = pick_weighted(pool, lambda item: item.weight, resolve_rng(rng, seed))

    balance_before = user.balance
    luck_before = user.luck_modifier
    balance_after = balance_before - level.spin_cost
    spins_total = user.spins_total + 1
    luck_after = apply_pity(selected.effective_rarity, level, luck_before)

    bonus = series_bonus(level, spins_total, luck_after)
    if bonus.applied:
        balance_after += bonus.balance_refund
        if bonus.luck_increase > 0:
            luck_after = min(level.pity_max, luck_after + bonus.luck_increase)

    next_user = replace(
        user,
        balance=balance_after,
        spins_total=spins_total,
        last_result=selected.prize.name,
        luck_modifier=luck_after,
        updated_at=now,
    )
    log_entry = SpinLogEntry(
        log_id=str(uuid4()),
        user_id=user.user_id,
        bet_level=level.level,
        prize_id=selected.prize.prize_id,
        prize_name=selected.prize.name,
        rarity=selected.effective_rarity,
        balance_before=balance_before,
        balance_after=balance_after,
        luck_modifier_before=luck_before,
        luck_modifier_after=luck_after,
        created_at=now,
    )
    result = SpinResult(
        prize=selected.prize,
        rarity=selected.effective_rarity,
        balance_before=balance_before,
        balance_after=balance_after,
        luck_before=luck_before,
        luck_after=luck_after,
        free_spin_awarded=bonus.free_spin_awarded,
        series_bonus_applied=bonus.applied,
    )
    return SpinOutcome(result=result, next_user=next_user, log_entry=log_entry)


def purchase(user: User, prize: Prize, *, now: datetime | None = None) -> PurchaseOutcome:
    now = now or datetime.now(timezone.utc)
    if not prize.direct_buy_enabled:
        raise DirectPurchaseNotAllowed(f"Prize {prize.prize_id} cannot be bought directly")
    if not prize.is_available:
        raise PrizeUnavailable(f"Prize {prize.prize_id} is no longer available")
    price = prize.direct_buy_price
    if not isinstance(price, (int, float)) or isinstance(price, bool) or math.isnan(price):
        raise DirectPriceNotSet(f"Prize {prize.prize_id} has no direct price")
    ensure_balance(user, price)

    next_user = replace(user, balance=user.balance - price, updated_at=now)
    order = ShopOrder(
        order_id=str(uuid4()),
        user_id=user.user_id,
        prize_id=prize.prize_id,
        price=price,
        status="created",
        created_at=now,
        updated_at=now,
    )
    return PurchaseOutcome(order=order, next_user=next_user)


def adjust_balance(
    user: User, amount: float, note: str, *, now: datetime | None = None
) -> BalanceAdjustment:
    """Credit (or debit, for negative ``amount``) ducks and record a ledger entry."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount):
        raise InvalidInput("Amount must be a finite number")
    if not note or not note.strip():
        raise InvalidInput("Note is required")
    if amount < 0:
        ensure_balance(user, -amount)
    now = now or datetime.now(timezone.utc)
    next_user = replace(
        user,
        balance=user.balance + amount,
        total_earned=user.total_earned + amount,
        updated_at=now,
    )
    entry = DuckHistoryEntry(
        entry_id=str(uuid4()),
        user_id=user.user_id,
        amount=amount,
        note=note.strip(),
        created_at=now,
    )
    return BalanceAdjustment(next_user=next_user, entry=entry)
