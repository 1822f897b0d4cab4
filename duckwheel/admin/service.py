"""Administrative operations for DuckWheel."""

from __future__ import annotations

import logging

from ..domain.economy import BalanceAdjustment, adjust_balance
from ..domain.exceptions import InvalidInput, UserNotFound
from ..domain.locks import UserLocks
from ..domain.models import ORDER_STATUSES, OrderStatus, Prize, ShopOrder, WheelSetting
from ..storage.base import DuckHistoryStore, OrderStore, PrizeStore, SettingsStore, UserStore

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        user_store: UserStore,
        prize_store: PrizeStore,
        settings_store: SettingsStore,
        order_store: OrderStore,
        duck_history_store: DuckHistoryStore,
        *,
        locks: UserLocks | None = None,
    ) -> None:
        self._users = user_store
        self._prizes = prize_store
        self._settings = settings_store
        self._orders = order_store
        self._duck_history = duck_history_store
        self._locks = locks if locks is not None else UserLocks()

    async def add_ducks(self, user_id: str, amount: float, note: str) -> BalanceAdjustment:
        if not user_id:
            raise InvalidInput("userId is required")
        async with self._locks.hold(user_id):
            user = await self._users.get(user_id)
            if user is None:
                raise UserNotFound(f"User {user_id} not found")
            adjustment = adjust_balance(user, amount, note)
            await self._users.save(adjustment.next_user)
            await self._duck_history.append(adjustment.entry)
        logger.info(
            "Adjusted balance of %s by %s (%s); balance now %s",
            user_id,
            amount,
            adjustment.entry.note,
            adjustment.next_user.balance,
        )
        return adjustment

    async def save_prize(self, prize: Prize) -> None:
        if prize.direct_buy_enabled and prize.direct_buy_price is None:
            logger.warning("Prize %s allows direct purchase but has no price", prize.prize_id)
        await self._prizes.save(prize)
        logger.info("Saved prize %s (%s)", prize.prize_id, prize.name)

    async def save_setting(self, setting: WheelSetting) -> None:
        await self._settings.save(setting)
        logger.info("Saved wheel setting for level %s", setting.level.value)

    async def update_order_status(self, order_id: str, status: OrderStatus) -> ShopOrder:
        if status not in ORDER_STATUSES:
            raise InvalidInput(f"Unknown order status '{status}'")
        order = await self._orders.update_status(order_id, status)
        if order is None:
            raise InvalidInput(f"Order {order_id} not found")
        logger.info("Order %s moved to %s", order_id, status)
        return order
