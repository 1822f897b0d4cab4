"""Economy simulation helpers."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Sequence

from ..domain.economy import spin
from ..domain.exceptions import InsufficientBalance, NoPrizesAvailable
from ..domain.models import Prize, Rarity, User, WheelSetting
from ..domain.rng import RandomSource, create_rng, default_rng


@dataclass(slots=True)
class SimulationResult:
    level: str
    spins: int = 0
    ducks_spent: float = 0
    free_spins: int = 0
    luck_bonuses: int = 0
    final_luck: float = 0.0
    stopped_early: bool = False
    rarities: Counter = field(default_factory=Counter)
    prizes: Counter = field(default_factory=Counter)

    def share(self, rarity: Rarity) -> float:
        return self.rarities[rarity] / self.spins if self.spins else 0.0


class EconomySimulator:
    """Monte-Carlo run of the real spin engine against one level.

    One-time prizes leave the pool once won, just as they do in production.
    """

    def __init__(self, prizes: Sequence[Prize], *, rng: RandomSource | None = None) -> None:
        self._prizes = list(prizes)
        self._rng = rng

    def simulate(
        self,
        level: WheelSetting,
        *,
        spins: int = 1000,
        balance: float | None = None,
        seed: str | None = None,
    ) -> SimulationResult:
        rng = self._rng or (create_rng(seed) if seed else default_rng())
        now = datetime.now(timezone.utc)
        starting_balance = balance if balance is not None else level.spin_cost * spins
        user = User(user_id="simulation", name="Simulation", balance=starting_balance, updated_at=now)
        prizes = list(self._prizes)
        result = SimulationResult(level=level.level.value)

        for _ in range(spins):
            try:
                outcome = spin(user, level, prizes, rng=rng, now=now)
            except (InsufficientBalance, NoPrizesAvailable):
                result.stopped_early = True
                break
            result.spins += 1
            result.ducks_spent += outcome.result.balance_before - outcome.result.balance_after
            result.rarities[outcome.result.rarity] += 1
            prize = outcome.result.prize
            if prize is not None:
                result.prizes[prize.prize_id] += 1
                if prize.remove_after_win:
                    prizes = [
                        replace(item, removed_from_wheel=True) if item.prize_id == prize.prize_id else item
                        for item in prizes
                    ]
            if outcome.result.free_spin_awarded:
                result.free_spins += 1
            elif outcome.result.series_bonus_applied:
                result.luck_bonuses += 1
            user = outcome.next_user

        result.final_luck = user.luck_modifier
        return result
