"""Validation utilities for DuckWheel deployments."""

from __future__ import annotations

from .app import WheelApp
from .domain.models import WheelLevel
from .domain.weights import compute_weights


async def validate_app(app: WheelApp) -> list[str]:
    """Return list of configuration problems found in the app's stores."""
    errors: list[str] = []

    settings = await app.settings_store.list()
    prizes = list(await app.prize_store.list())

    for level in WheelLevel:
        if level not in settings:
            errors.append(f"Wheel level '{level.value}' is not configured.")

    for level, setting in settings.items():
        owner = f"Level '{level.value}'"
        if setting.spin_cost <= 0:
            errors.append(f"{owner} has non-positive spinCost '{setting.spin_cost}'.")
        if setting.pity_step < 0:
            errors.append(f"{owner} has negative pityStep '{setting.pity_step}'.")
        if setting.pity_max < 0:
            errors.append(f"{owner} has negative pityMax '{setting.pity_max}'.")
        if setting.series_bonus_every < 0:
            errors.append(f"{owner} has negative seriesBonusEvery '{setting.series_bonus_every}'.")
        if setting.series_bonus_every and setting.series_bonus_type is None:
            errors.append(f"{owner} sets seriesBonusEvery without a seriesBonusType.")
        for source, target in (setting.rarity_upgrades or {}).items():
            if target < source:
                errors.append(
                    f"{owner} downgrades rarity {int(source)} to {int(target)}."
                )
        for rarity, multiplier in (setting.weights_overrides or {}).items():
            if multiplier < 0:
                errors.append(f"{owner} has negative weight override for rarity {int(rarity)}.")

        weighted = compute_weights(prizes, setting, 0.0)
        if not weighted:
            errors.append(f"{owner} has no prizes available on the wheel.")
        elif sum(item.weight for item in weighted) <= 0:
            errors.append(f"{owner} gives every available prize zero weight.")

    for prize in prizes:
        if prize.direct_buy_enabled:
            if prize.direct_buy_price is None:
                errors.append(f"Prize '{prize.prize_id}' allows direct purchase without a price.")
            elif prize.direct_buy_price <= 0:
                errors.append(
                    f"Prize '{prize.prize_id}' has non-positive directBuyPrice "
                    f"'{prize.direct_buy_price}'."
                )

    for user in await app.user_store.list():
        if user.balance < 0:
            errors.append(f"User '{user.user_id}' has negative balance '{user.balance}'.")
        if user.luck_modifier < 0:
            errors.append(f"User '{user.user_id}' has negative luckModifier '{user.luck_modifier}'.")

    return errors


__all__ = ["validate_app"]
