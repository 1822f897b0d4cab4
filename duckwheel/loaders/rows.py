"""Coerce loosely typed persisted rows into domain entities and back.

Rows arrive the way flat stores keep them: numbers and booleans may be
strings, rarity maps may be JSON-encoded strings. Everything is converted
here so the economy engine only ever sees typed, validated records.
"""

from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from typing import Any, Mapping

from ..domain.models import (
    IDENTITY_UPGRADES,
    ORDER_STATUSES,
    DuckHistoryEntry,
    Prize,
    Rarity,
    SeriesBonusType,
    ShopOrder,
    SpinLogEntry,
    SpinResult,
    User,
    UserOverview,
    WheelLevel,
    WheelSetting,
)

_TRUTHY = {"true", "1", "yes"}
_ROLES = ("user", "admin")


def to_number(value: Any, *, field: str = "value") -> float:
    if isinstance(value, bool):
        raise ValueError(f"Cannot parse number for '{field}' from boolean")
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return 0
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return 0
        try:
            number = float(trimmed)
        except ValueError as exc:
            raise ValueError(f"Cannot parse number for '{field}' from value '{value}'") from exc
        if math.isnan(number):
            raise ValueError(f"Cannot parse number for '{field}' from value '{value}'")
        return int(number) if number.is_integer() else number
    raise ValueError(f"Cannot parse number for '{field}' from {type(value).__name__}")


def to_optional_number(value: Any, *, field: str = "value") -> float | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_number(value, field=field)


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value == 1
    return str(value).strip().lower() in _TRUTHY


def to_rarity(value: Any, *, field: str = "rarity") -> Rarity:
    number = to_number(value, field=field)
    try:
        return Rarity(int(number)) if float(number).is_integer() else Rarity(number)
    except ValueError as exc:
        raise ValueError(f"Invalid rarity '{value}' for '{field}'") from exc


def to_timestamp(value: Any, *, field: str = "timestamp") -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Cannot parse timestamp for '{field}' from value '{value}'") from exc
    else:
        raise ValueError(f"Missing timestamp for '{field}'")
    if parsed.tzinfo is None or parsed.tzinfo.utcoffset(parsed) is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _decode_map(raw: Any, field: str) -> Mapping[Any, Any]:
    if raw is None or raw == "":
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Cannot parse JSON for '{field}' from value '{raw}'") from exc
    if not isinstance(raw, Mapping):
        raise ValueError(f"'{field}' must be an object")
    return raw


def _rarity_key(key: Any) -> Rarity | None:
    try:
        number = float(key)
    except (TypeError, ValueError):
        return None
    if not number.is_integer() or not 1 <= number <= 4:
        return None
    return Rarity(int(number))


def parse_rarity_upgrades(raw: Any) -> dict[Rarity, Rarity]:
    """Identity map patched with every valid ``rarity -> rarity`` entry in ``raw``."""
    upgrades = dict(IDENTITY_UPGRADES)
    for key, value in _decode_map(raw, "rarityUpgrades").items():
        source = _rarity_key(key)
        target = _rarity_key(value)
        if source is not None and target is not None:
            upgrades[source] = target
    return upgrades


def parse_weights_overrides(raw: Any) -> dict[Rarity, float]:
    overrides: dict[Rarity, float] = {}
    for key, value in _decode_map(raw, "weightsOverrides").items():
        rarity = _rarity_key(key)
        if rarity is None:
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            continue
        if not math.isnan(number):
            overrides[rarity] = number
    return overrides


def parse_series_bonus_type(raw: Any) -> SeriesBonusType | None:
    if not raw:
        return None
    try:
        return SeriesBonusType(raw)
    except ValueError:
        return None


def parse_level(raw: Any) -> WheelLevel:
    try:
        return WheelLevel(str(raw).strip())
    except ValueError as exc:
        raise ValueError(f"Unknown wheel level '{raw}'") from exc


def parse_user(row: Mapping[str, Any]) -> User:
    role = row.get("role") or "user"
    if role not in _ROLES:
        raise ValueError(f"User '{row.get('userId')}' has invalid role '{role}'")
    return User(
        user_id=str(row["userId"]),
        name=str(row.get("name", "")),
        balance=to_number(row.get("balance"), field="balance"),
        total_earned=to_number(row.get("totalEarned"), field="totalEarned"),
        spins_total=int(to_number(row.get("spinsTotal"), field="spinsTotal")),
        last_result=row.get("lastResult") or None,
        luck_modifier=float(to_number(row.get("luckModifier"), field="luckModifier")),
        role=role,
        updated_at=to_timestamp(row.get("updatedAt"), field="updatedAt"),
    )


def parse_prize(row: Mapping[str, Any]) -> Prize:
    return Prize(
        prize_id=str(row["prizeId"]),
        name=str(row.get("name", "")),
        description=str(row.get("description") or ""),
        rarity=to_rarity(row.get("rarity")),
        base_weight=to_number(row.get("baseWeight"), field="baseWeight"),
        direct_buy_enabled=to_bool(row.get("directBuyEnabled")),
        direct_buy_price=to_optional_number(row.get("directBuyPrice"), field="directBuyPrice"),
        active=to_bool(row.get("active")),
        remove_after_win=to_bool(row.get("removeAfterWin")),
        removed_from_wheel=to_bool(row.get("removedFromWheel")),
    )


def parse_wheel_setting(row: Mapping[str, Any]) -> WheelSetting:
    return WheelSetting(
        level=parse_level(row.get("level")),
        spin_cost=to_number(row.get("spinCost"), field="spinCost"),
        rarity_upgrades=parse_rarity_upgrades(row.get("rarityUpgrades")),
        pity_step=float(to_number(row.get("pityStep"), field="pityStep")),
        pity_max=float(to_number(row.get("pityMax"), field="pityMax")),
        weights_overrides=parse_weights_overrides(row.get("weightsOverrides")),
        series_bonus_every=int(to_number(row.get("seriesBonusEvery"), field="seriesBonusEvery")),
        series_bonus_type=parse_series_bonus_type(row.get("seriesBonusType")),
    )


def parse_spin_log(row: Mapping[str, Any]) -> SpinLogEntry:
    return SpinLogEntry(
        log_id=str(row["logId"]),
        user_id=str(row["userId"]),
        bet_level=parse_level(row.get("betLevel")),
        prize_id=row.get("prizeId") or None,
        prize_name=str(row.get("prizeName", "")),
        rarity=to_rarity(row.get("rarity")),
        balance_before=to_number(row.get("balanceBefore"), field="balanceBefore"),
        balance_after=to_number(row.get("balanceAfter"), field="balanceAfter"),
        luck_modifier_before=float(to_number(row.get("luckModifierBefore"), field="luckModifierBefore")),
        luck_modifier_after=float(to_number(row.get("luckModifierAfter"), field="luckModifierAfter")),
        created_at=to_timestamp(row.get("createdAt"), field="createdAt"),
    )


def parse_shop_order(row: Mapping[str, Any]) -> ShopOrder:
    status = row.get("status")
    if status not in ORDER_STATUSES:
        raise ValueError(f"Order '{row.get('orderId')}' has invalid status '{status}'")
    return ShopOrder(
        order_id=str(row["orderId"]),
        user_id=str(row["userId"]),
        prize_id=str(row["prizeId"]),
        price=to_number(row.get("price"), field="price"),
        status=status,
        created_at=to_timestamp(row.get("createdAt"), field="createdAt"),
        updated_at=to_timestamp(row.get("updatedAt"), field="updatedAt"),
    )


def parse_duck_history(row: Mapping[str, Any]) -> DuckHistoryEntry:
    return DuckHistoryEntry(
        entry_id=str(row["entryId"]),
        user_id=str(row["userId"]),
        amount=to_number(row.get("amount"), field="amount"),
        note=str(row.get("note", "")),
        created_at=to_timestamp(row.get("createdAt"), field="createdAt"),
    )


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _rarity_map(mapping: Mapping[Rarity, Any] | None) -> dict[str, Any]:
    return {
        str(int(key)): int(value) if isinstance(value, Rarity) else value
        for key, value in (mapping or {}).items()
    }


def dump_user(user: User) -> dict[str, Any]:
    return {
        "userId": user.user_id,
        "name": user.name,
        "balance": user.balance,
        "totalEarned": user.total_earned,
        "spinsTotal": user.spins_total,
        "lastResult": user.last_result,
        "luckModifier": user.luck_modifier,
        "role": user.role,
        "updatedAt": _iso(user.updated_at),
    }


def dump_prize(prize: Prize) -> dict[str, Any]:
    return {
        "prizeId": prize.prize_id,
        "name": prize.name,
        "description": prize.description,
        "rarity": int(prize.rarity),
        "baseWeight": prize.base_weight,
        "directBuyEnabled": prize.direct_buy_enabled,
        "directBuyPrice": prize.direct_buy_price,
        "active": prize.active,
        "removeAfterWin": prize.remove_after_win,
        "removedFromWheel": prize.removed_from_wheel,
    }


def dump_wheel_setting(setting: WheelSetting) -> dict[str, Any]:
    return {
        "level": setting.level.value,
        "spinCost": setting.spin_cost,
        "rarityUpgrades": _rarity_map(setting.rarity_upgrades),
        "pityStep": setting.pity_step,
        "pityMax": setting.pity_max,
        "weightsOverrides": _rarity_map(setting.weights_overrides),
        "seriesBonusEvery": setting.series_bonus_every,
        "seriesBonusType": setting.series_bonus_type.value if setting.series_bonus_type else None,
    }


def dump_spin_result(result: SpinResult) -> dict[str, Any]:
    return {
        "prize": dump_prize(result.prize) if result.prize else None,
        "rarity": int(result.rarity),
        "balanceBefore": result.balance_before,
        "balanceAfter": result.balance_after,
        "luckBefore": result.luck_before,
        "luckAfter": result.luck_after,
        "freeSpinAwarded": result.free_spin_awarded,
        "seriesBonusApplied": result.series_bonus_applied,
    }


def dump_user_overview(overview: UserOverview) -> dict[str, Any]:
    return {
        "userId": overview.user_id,
        "name": overview.name,
        "balance": overview.balance,
        "totalEarned": overview.total_earned,
        "wins": [
            {
                "prizeId": win.prize_id,
                "prizeName": win.prize_name,
                "rarity": int(win.rarity),
                "count": win.count,
                "lastWonAt": _iso(win.last_won_at),
            }
            for win in overview.wins
        ],
    }


def dump_spin_log(entry: SpinLogEntry) -> dict[str, Any]:
    return {
        "logId": entry.log_id,
        "userId": entry.user_id,
        "betLevel": entry.bet_level.value,
        "prizeId": entry.prize_id,
        "prizeName": entry.prize_name,
        "rarity": int(entry.rarity),
        "balanceBefore": entry.balance_before,
        "balanceAfter": entry.balance_after,
        "luckModifierBefore": entry.luck_modifier_before,
        "luckModifierAfter": entry.luck_modifier_after,
        "createdAt": _iso(entry.created_at),
    }


def dump_shop_order(order: ShopOrder) -> dict[str, Any]:
    return {
        "orderId": order.order_id,
        "userId": order.user_id,
        "prizeId": order.prize_id,
        "price": order.price,
        "status": order.status,
        "createdAt": _iso(order.created_at),
        "updatedAt": _iso(order.updated_at),
    }


def dump_duck_history(entry: DuckHistoryEntry) -> dict[str, Any]:
    return {
        "entryId": entry.entry_id,
        "userId": entry.user_id,
        "amount": entry.amount,
        "note": entry.note,
        "createdAt": _iso(entry.created_at),
    }
