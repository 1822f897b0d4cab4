"""Strategies controlling periodic series bonuses."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping

from .models import SeriesBonusType, WheelSetting


@dataclass(frozen=True, slots=True)
class BonusOutcome:
    balance_refund: float = 0
    luck_increase: float = 0.0
    applied: bool = False
    free_spin_awarded: bool = False


NO_BONUS = BonusOutcome()


class SeriesBonusStrategy(ABC):
    """Define what a player receives when a series milestone is reached."""

    @abstractmethod
    def apply(self, *, level: WheelSetting, luck_modifier: float) -> BonusOutcome:
        """Return the bonus granted for the current milestone spin."""


@dataclass(slots=True)
class FreeSpinBonus(SeriesBonusStrategy):
    """Refund the spin cost, making the milestone spin free."""

    def apply(self, *, level: WheelSetting, luck_modifier: float) -> BonusOutcome:
        return BonusOutcome(balance_refund=level.spin_cost, applied=True, free_spin_awarded=True)


@dataclass(slots=True)
class LuckBonus(SeriesBonusStrategy):
    """Add up to one pity step of luck, bounded by the level's pity ceiling."""

    def apply(self, *, level: WheelSetting, luck_modifier: float) -> BonusOutcome:
        room = max(0.0, level.pity_max - luck_modifier)
        if room <= 0:
            return NO_BONUS
        return BonusOutcome(luck_increase=min(room, level.pity_step), applied=True)


SERIES_BONUSES: Mapping[SeriesBonusType, SeriesBonusStrategy] = {
    SeriesBonusType.FREE_SPIN: FreeSpinBonus(),
    SeriesBonusType.LUCK: LuckBonus(),
}


def series_bonus(level: WheelSetting, spins_total: int, luck_modifier: float) -> BonusOutcome:
    """Evaluate the level's series bonus for the post-increment spin counter."""
    if not level.series_bonus_every or level.series_bonus_every <= 0:
        return NO_BONUS
    if spins_total % level.series_bonus_every != 0:
        return NO_BONUS
    strategy = SERIES_BONUSES.get(level.series_bonus_type) if level.series_bonus_type else None
    if strategy is None:
        return NO_BONUS
    return strategy.apply(level=level, luck_modifier=luck_modifier)
