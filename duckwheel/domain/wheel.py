"""Wheel service: load state, run the economy engine, persist the outcome."""

from __future__ import annotations

import logging
from dataclasses import replace
from random import Random

from .economy import PurchaseOutcome, SpinOutcome, purchase, spin
from .exceptions import InvalidInput, LevelNotFound, PrizeNotFound, UserNotFound
from .locks import UserLocks
from .models import Prize, User, WheelLevel, WheelSetting
from .weights import WeightedPrize, compute_weights
from ..storage.base import OrderStore, PrizeStore, SettingsStore, SpinLogStore, UserStore

logger = logging.getLogger(__name__)


class WheelService:
    """Spin and direct-purchase operations over the configured stores.

    Writes for a given user are serialised with an in-process lock; running
    several processes against one database needs locking in the store.
    """

    def __init__(
        self,
        user_store: UserStore,
        prize_store: PrizeStore,
        settings_store: SettingsStore,
        spin_log_store: SpinLogStore,
        order_store: OrderStore,
        *,
        rng: Random | None = None,
        locks: UserLocks | None = None,
    ) -> None:
        self._users = user_store
        self._prizes = prize_store
        self._settings = settings_store
        self._spin_log = spin_log_store
        self._orders = order_store
        self._rng = rng
        self._locks = locks if locks is not None else UserLocks()

    async def spin(
        self, user_id: str, level: WheelLevel | str, *, seed: str | None = None
    ) -> SpinOutcome:
        async with self._locks.hold(user_id):
            user = await self._load_user(user_id)
            setting = await self._load_level(level)
            prizes = list(await self._prizes.list())

            outcome = spin(user, setting, prizes, rng=None if seed else self._rng, seed=seed)

            prize = outcome.result.prize
            if prize is not None and prize.remove_after_win and not prize.removed_from_wheel:
                claimed = await self._claim_one_time_prize(prize)
                outcome = replace(outcome, result=replace(outcome.result, prize=claimed))

            await self._users.save(outcome.next_user)
            await self._spin_log.append(outcome.log_entry)

        logger.info(
            "User %s spun %s: %s (rarity %s), balance %s -> %s, luck %.2f -> %.2f",
            user_id,
            setting.level.value,
            outcome.log_entry.prize_name,
            int(outcome.result.rarity),
            outcome.result.balance_before,
            outcome.result.balance_after,
            outcome.result.luck_before,
            outcome.result.luck_after,
        )
        return outcome

    async def buy(self, user_id: str, prize_id: str) -> PurchaseOutcome:
        async with self._locks.hold(user_id):
            user = await self._load_user(user_id)
            prize = await self._prizes.get(prize_id)
            if prize is None:
                raise PrizeNotFound(f"Prize {prize_id} not found")

            outcome = purchase(user, prize)

            if prize.remove_after_win and not prize.removed_from_wheel:
                await self._claim_one_time_prize(prize)
            await self._users.save(outcome.next_user)
            await self._orders.append(outcome.order)

        logger.info(
            "User %s bought %s for %s (order %s)",
            user_id,
            prize_id,
            outcome.order.price,
            outcome.order.order_id,
        )
        return outcome

    async def prize_weights(
        self, level: WheelLevel | str, luck_modifier: float = 0.0
    ) -> list[WeightedPrize]:
        setting = await self._load_level(level)
        return compute_weights(await self._prizes.list(), setting, luck_modifier)

    async def _claim_one_time_prize(self, prize: Prize) -> Prize:
        claimed = replace(prize, removed_from_wheel=True)
        await self._prizes.save(claimed)
        logger.info("One-time prize %s removed from the wheel", prize.prize_id)
        return claimed

    async def _load_user(self, user_id: str) -> User:
        if not user_id:
            raise InvalidInput("userId is required")
        user = await self._users.get(user_id)
        if user is None:
            raise UserNotFound(f"User {user_id} not found")
        return user

    async def _load_level(self, level: WheelLevel | str) -> WheelSetting:
        try:
            key = WheelLevel(level)
        except ValueError as exc:
            raise LevelNotFound(f"Wheel level {level} is not configured") from exc
        setting = await self._settings.get(key)
        if setting is None:
            raise LevelNotFound(f"Wheel level {key.value} is not configured")
        return setting
