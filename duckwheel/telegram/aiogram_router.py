"""Factory helpers to wire DuckWheel services into aiogram."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message, User as TelegramUser

from ..domain.economy import PurchaseOutcome, SpinOutcome
from ..domain.exceptions import DuckWheelError, InsufficientBalance
from ..domain.models import Prize, Rarity, User, WheelLevel
from .api_utils import acknowledge, edit, reply
from .keyboards import CALLBACK_PREFIX, LEVEL_LABELS, spin_again_keyboard, welcome_keyboard

if TYPE_CHECKING:
    from ..app import WheelApp

logger = logging.getLogger(__name__)

RARITY_LABELS = {
    Rarity.COMMON: "обычный",
    Rarity.RARE: "редкий",
    Rarity.EPIC: "эпический",
    Rarity.LEGENDARY: "легендарный",
}

ERROR_MESSAGES = {
    "NO_PRIZES_AVAILABLE": "На этом колесе сейчас нет призов.",
    "INVALID_WEIGHT_DISTRIBUTION": "Колесо настроено неверно, сообщи администратору.",
    "DIRECT_PURCHASE_NOT_ALLOWED": "Этот приз нельзя купить напрямую.",
    "DIRECT_PRICE_NOT_SET": "У этого приза не указана цена.",
    "USER_NOT_FOUND": "Ты ещё не зарегистрирован. Нажми /start.",
    "LEVEL_NOT_FOUND": "Такого колеса нет. Доступны: basic, advanced, epic, legendary.",
    "PRIZE_NOT_FOUND": "Приз не найден. Посмотри список командой /prizes.",
    "INVALID_INPUT": "Некорректный запрос.",
}


def build_router(app: "WheelApp", *, default_level: WheelLevel = WheelLevel.BASIC) -> Router:
    router = Router()
    wheel = app.wheel_service
    players = app.player_service

    @router.message(Command("start"))
    async def handle_start(message: Message) -> None:
        user = message.from_user
        if not user:
            return
        account = await players.register(str(user.id), display_name(user))
        levels = await app.settings_store.list()
        await reply(
            message,
            render_help_message(app.config.app_name, account),
            reply_markup=welcome_keyboard(level for level in WheelLevel if level in levels),
        )

    @router.message(Command("help"))
    async def handle_help(message: Message) -> None:
        await reply(message, render_help_message(app.config.app_name))

    @router.message(Command("balance"))
    async def handle_balance(message: Message) -> None:
        user = message.from_user
        if not user:
            return
        try:
            account = await players.fetch(str(user.id))
        except DuckWheelError as exc:
            await reply(message, format_error(exc))
            return
        await reply(message, format_balance_message(account))

    @router.callback_query(F.data == f"{CALLBACK_PREFIX}:balance")
    async def handle_balance_callback(callback: CallbackQuery) -> None:
        try:
            account = await players.fetch(str(callback.from_user.id))
        except DuckWheelError as exc:
            await acknowledge(callback, format_error(exc), show_alert=True)
            return
        await acknowledge(callback)
        await reply(callback.message, format_balance_message(account))

    @router.message(Command("prizes"))
    async def handle_prizes(message: Message) -> None:
        await reply(message, format_prizes_message(await app.prize_store.list()))

    @router.callback_query(F.data == f"{CALLBACK_PREFIX}:prizes")
    async def handle_prizes_callback(callback: CallbackQuery) -> None:
        await acknowledge(callback)
        await reply(callback.message, format_prizes_message(await app.prize_store.list()))

    @router.message(Command("spin"))
    async def handle_spin(message: Message, command: CommandObject) -> None:
        user = message.from_user
        if not user:
            return
        level = extract_level(command.args, default_level)
        if level is None:
            await reply(message, ERROR_MESSAGES["LEVEL_NOT_FOUND"])
            return
        try:
            outcome = await wheel.spin(str(user.id), level)
        except DuckWheelError as exc:
            logger.info("Spin for %s refused: %s", user.id, exc.code)
            await reply(message, format_error(exc))
            return
        await reply(message, format_spin_message(outcome, level), reply_markup=spin_again_keyboard(level))

    @router.callback_query(F.data.startswith(f"{CALLBACK_PREFIX}:spin:"))
    async def handle_spin_again(callback: CallbackQuery) -> None:
        level = extract_level(callback.data.rsplit(":", 1)[-1], None)
        if level is None:
            await acknowledge(callback, ERROR_MESSAGES["LEVEL_NOT_FOUND"], show_alert=True)
            return
        try:
            outcome = await wheel.spin(str(callback.from_user.id), level)
        except DuckWheelError as exc:
            logger.info("Spin for %s refused: %s", callback.from_user.id, exc.code)
            await acknowledge(callback, format_error(exc), show_alert=True)
            return
        await acknowledge(callback)
        await edit(
            callback.message,
            format_spin_message(outcome, level),
            reply_markup=spin_again_keyboard(level),
        )

    @router.message(Command("buy"))
    async def handle_buy(message: Message, command: CommandObject) -> None:
        user = message.from_user
        if not user:
            return
        prize_id = (command.args or "").strip()
        if not prize_id:
            await reply(message, "Использование: /buy <prize_id>")
            return
        try:
            outcome = await wheel.buy(str(user.id), prize_id)
        except DuckWheelError as exc:
            logger.info("Purchase of %s by %s refused: %s", prize_id, user.id, exc.code)
            await reply(message, format_error(exc))
            return
        prize = await app.prize_store.get(prize_id)
        await reply(message, format_purchase_message(outcome, prize))

    return router


def display_name(user: TelegramUser) -> str:
    return user.full_name or user.username or str(user.id)


def extract_level(text: str | None, default: WheelLevel | None) -> WheelLevel | None:
    if not text or not text.strip():
        return default
    try:
        return WheelLevel(text.strip().split()[0].lower())
    except ValueError:
        return None


def format_ducks(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else f"{amount:.2f}"


def render_help_message(app_name: str, user: User | None = None) -> str:
    lines = [f"🦆 {app_name}"]
    if user is not None:
        lines.append(f"Привет, {user.name}! На счету {format_ducks(user.balance)} уток.")
    lines.extend(
        [
            "",
            "Команды:",
            "• /spin [basic|advanced|epic|legendary] — крутить колесо",
            "• /prizes — список призов",
            "• /buy <prize_id> — купить приз напрямую",
            "• /balance — баланс и удача",
            "• /help — показать это сообщение",
        ]
    )
    return "\n".join(lines)


def format_balance_message(user: User) -> str:
    lines = [
        f"👤 {user.name}",
        f"🦆 Баланс: {format_ducks(user.balance)}",
        f"💰 Заработано всего: {format_ducks(user.total_earned)}",
        f"🎡 Прокруток: {user.spins_total}",
        f"🍀 Удача: {user.luck_modifier:.2f}",
    ]
    if user.last_result:
        lines.append(f"🎁 Последний приз: {user.last_result}")
    return "\n".join(lines)


def format_prizes_message(prizes: Iterable[Prize]) -> str:
    available = [prize for prize in prizes if prize.is_available]
    if not available:
        return "Призов пока нет."
    lines = ["🎁 Призы:"]
    for prize in sorted(available, key=lambda item: (-int(item.rarity), item.name)):
        line = f"• {prize.name} [{RARITY_LABELS[prize.rarity]}]"
        if prize.direct_buy_enabled and prize.direct_buy_price is not None:
            line += f" — {format_ducks(prize.direct_buy_price)} 🦆, /buy {prize.prize_id}"
        if prize.remove_after_win:
            line += " (единственный экземпляр)"
        lines.append(line)
    return "\n".join(lines)


def format_spin_message(outcome: SpinOutcome, level: WheelLevel) -> str:
    result = outcome.result
    prize_name = result.prize.name if result.prize else "ничего"
    lines = [
        f"🎡 Колесо: {LEVEL_LABELS.get(level, level.value)}",
        f"🎁 Выпало: {prize_name} [{RARITY_LABELS[result.rarity]}]",
        f"🦆 Баланс: {format_ducks(result.balance_before)} → {format_ducks(result.balance_after)}",
        f"🍀 Удача: {result.luck_before:.2f} → {result.luck_after:.2f}",
    ]
    if result.free_spin_awarded:
        lines.append("🎉 Бонус серии: этот спин бесплатный!")
    elif result.series_bonus_applied:
        lines.append("✨ Бонус серии: удача повышена!")
    return "\n".join(lines)


def format_purchase_message(outcome: PurchaseOutcome, prize: Prize | None) -> str:
    name = prize.name if prize else outcome.order.prize_id
    return "\n".join(
        [
            f"🛒 Заказ {outcome.order.order_id} оформлен: {name}",
            f"🦆 Списано {format_ducks(outcome.order.price)}, осталось {format_ducks(outcome.next_user.balance)}",
        ]
    )


def format_error(exc: DuckWheelError) -> str:
    if isinstance(exc, InsufficientBalance):
        return (
            f"Недостаточно уток: нужно {format_ducks(exc.required)}, "
            f"на счету {format_ducks(exc.balance)}."
        )
    return ERROR_MESSAGES.get(exc.code, "Что-то пошло не так. Попробуй позже.")
