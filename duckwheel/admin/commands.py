"""Admin command wiring for aiogram."""

from __future__ import annotations

from typing import TYPE_CHECKING

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from ..domain.exceptions import DuckWheelError
from ..telegram.filters import AdminFilter

if TYPE_CHECKING:
    from ..app import WheelApp

ADD_DUCKS_USAGE = "Использование: /addducks <user_id> <amount> <комментарий>"
ORDER_STATUS_USAGE = "Использование: /orderstatus <order_id> <created|approved|delivered>"


def build_admin_router(app: "WheelApp") -> Router:
    router = Router()
    router.message.filter(AdminFilter(app.config))
    service = app.admin_service

    @router.message(Command("addducks"))
    async def handle_add_ducks(message: Message, command: CommandObject) -> None:
        parsed = parse_add_ducks(command.args)
        if parsed is None:
            await message.answer(ADD_DUCKS_USAGE)
            return
        user_id, amount, note = parsed
        try:
            adjustment = await service.add_ducks(user_id, amount, note)
        except DuckWheelError as exc:
            await message.answer(f"Не получилось: {exc}")
            return
        await message.answer(
            f"Баланс {adjustment.next_user.name} изменён на {amount:g}. "
            f"Теперь {adjustment.next_user.balance:g} уток."
        )

    @router.message(Command("orderstatus"))
    async def handle_order_status(message: Message, command: CommandObject) -> None:
        parts = (command.args or "").split()
        if len(parts) != 2:
            await message.answer(ORDER_STATUS_USAGE)
            return
        try:
            order = await service.update_order_status(parts[0], parts[1])
        except DuckWheelError as exc:
            await message.answer(f"Не получилось: {exc}")
            return
        await message.answer(f"Заказ {order.order_id}: {order.status}.")

    return router


def parse_add_ducks(args: str | None) -> tuple[str, float, str] | None:
    """Split ``<user_id> <amount> <note...>``; the note may contain spaces."""
    parts = (args or "").split(maxsplit=2)
    if len(parts) < 3:
        return None
    try:
        amount = float(parts[1])
    except ValueError:
        return None
    return parts[0], amount, parts[2].strip()
