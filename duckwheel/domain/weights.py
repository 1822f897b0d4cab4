"""Probability weights for wheel prizes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from .models import Prize, Rarity, WheelSetting

RARITY_BASE_WEIGHTS: Mapping[Rarity, float] = {
    Rarity.COMMON: 60,
    Rarity.RARE: 25,
    Rarity.EPIC: 10,
    Rarity.LEGENDARY: 5,
}

# Luck can suppress common prizes but never below this share of their base weight.
COMMON_LUCK_FLOOR = 0.1


@dataclass(frozen=True, slots=True)
class WeightedPrize:
    prize: Prize
    effective_rarity: Rarity
    weight: float


def effective_rarity(prize: Prize, level: WheelSetting) -> Rarity:
    upgrades = level.rarity_upgrades or {}
    return Rarity(upgrades.get(prize.rarity, prize.rarity))


def rarity_weight(rarity: Rarity, level: WheelSetting, luck_modifier: float) -> float:
    base = RARITY_BASE_WEIGHTS.get(rarity, 0)
    override = 1.0
    if level.weights_overrides is not None:
        value = level.weights_overrides.get(rarity)
        if value is not None:
            override = float(value)
    if rarity == Rarity.COMMON:
        luck_multiplier = max(COMMON_LUCK_FLOOR, 1 - luck_modifier)
    else:
        luck_multiplier = 1 + luck_modifier
    return base * override * luck_multiplier


def build_prize_pool(prizes: Iterable[Prize], level: WheelSetting) -> list[tuple[Prize, Rarity]]:
    """Available prizes paired with their effective rarity, in input order."""
    return [(prize, effective_rarity(prize, level)) for prize in prizes if prize.is_available]


def compute_weights(
    prizes: Iterable[Prize], level: WheelSetting, luck_modifier: float
) -> list[WeightedPrize]:
    return [
        WeightedPrize(
            prize=prize,
            effective_rarity=rarity,
            weight=rarity_weight(rarity, level, luck_modifier),
        )
        for prize, rarity in build_prize_pool(prizes, level)
    ]
