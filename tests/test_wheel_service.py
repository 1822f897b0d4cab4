import asyncio

import pytest

from duckwheel.domain.exceptions import (
    InsufficientBalance,
    InvalidInput,
    LevelNotFound,
    NoPrizesAvailable,
    PrizeNotFound,
    UserNotFound,
)
from duckwheel.domain.locks import UserLocks
from duckwheel.domain.models import Prize, Rarity, WheelLevel
from duckwheel.testing import UserFactory, memory_app, wheel_setting  # noqa: F401

RETREAT = Prize(
    prize_id="retreat",
    name="Ретрит",
    rarity=Rarity.LEGENDARY,
    direct_buy_enabled=True,
    direct_buy_price=30,
    remove_after_win=True,
)
MUG = Prize(prize_id="mug", name="Кружка", rarity=Rarity.COMMON, direct_buy_enabled=True, direct_buy_price=5)


async def _prepare(app, *prizes, balance=100):
    await app.settings_store.save(wheel_setting(spin_cost=10))
    for prize in prizes:
        await app.prize_store.save(prize)
    user = UserFactory().build("42", balance=balance)
    await app.user_store.save(user)
    return user


@pytest.mark.asyncio()
async def test_spin_persists_user_and_log(memory_app):
    await _prepare(memory_app, MUG)
    outcome = await memory_app.wheel_service.spin("42", "basic", seed="duck")

    stored = await memory_app.user_store.get("42")
    assert stored == outcome.next_user
    assert stored.balance == 90
    logs = await memory_app.spin_log_store.list("42")
    assert [entry.prize_id for entry in logs] == ["mug"]


@pytest.mark.asyncio()
async def test_one_time_prize_leaves_wheel_after_win(memory_app):
    await _prepare(memory_app, RETREAT)
    outcome = await memory_app.wheel_service.spin("42", WheelLevel.BASIC, seed="duck")

    assert outcome.result.prize.prize_id == "retreat"
    assert outcome.result.prize.removed_from_wheel
    assert (await memory_app.prize_store.get("retreat")).removed_from_wheel
    with pytest.raises(NoPrizesAvailable):
        await memory_app.wheel_service.spin("42", WheelLevel.BASIC)
    assert (await memory_app.user_store.get("42")).balance == 90


@pytest.mark.asyncio()
async def test_spin_rejects_unknown_user_and_level(memory_app):
    await _prepare(memory_app, MUG)
    with pytest.raises(UserNotFound):
        await memory_app.wheel_service.spin("nobody", "basic")
    with pytest.raises(InvalidInput):
        await memory_app.wheel_service.spin("", "basic")
    with pytest.raises(LevelNotFound):
        await memory_app.wheel_service.spin("42", "epic")
    with pytest.raises(LevelNotFound):
        await memory_app.wheel_service.spin("42", "mega")


@pytest.mark.asyncio()
async def test_failed_spin_leaves_state_untouched(memory_app):
    await _prepare(memory_app, MUG, balance=5)
    with pytest.raises(InsufficientBalance):
        await memory_app.wheel_service.spin("42", "basic")
    assert (await memory_app.user_store.get("42")).balance == 5
    assert await memory_app.spin_log_store.list() == []


@pytest.mark.asyncio()
async def test_buy_creates_order_and_claims_one_time_prize(memory_app):
    await _prepare(memory_app, RETREAT, MUG)
    outcome = await memory_app.wheel_service.buy("42", "retreat")

    assert outcome.order.status == "created"
    assert outcome.order.price == 30
    assert (await memory_app.user_store.get("42")).balance == 70
    assert [order.order_id for order in await memory_app.order_store.list("42")] == [outcome.order.order_id]
    assert (await memory_app.prize_store.get("retreat")).removed_from_wheel
    with pytest.raises(PrizeNotFound):
        await memory_app.wheel_service.buy("42", "missing")


@pytest.mark.asyncio()
async def test_prize_weights_follow_luck(memory_app):
    await _prepare(memory_app, MUG, RETREAT)
    plain = {item.prize.prize_id: item.weight for item in await memory_app.wheel_service.prize_weights("basic")}
    lucky = {item.prize.prize_id: item.weight for item in await memory_app.wheel_service.prize_weights("basic", 0.5)}
    assert plain == {"mug": 60, "retreat": 5}
    assert lucky["mug"] == pytest.approx(30)
    assert lucky["retreat"] == pytest.approx(7.5)


@pytest.mark.asyncio()
async def test_user_locks_serialise_and_forget_idle_users():
    locks = UserLocks()
    order = []

    async def worker(name: str) -> None:
        async with locks.hold("42"):
            order.append(f"{name}-in")
            await asyncio.sleep(0)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"), worker("c"))

    assert order == ["a-in", "a-out", "b-in", "b-out", "c-in", "c-out"]
    assert "42" not in locks
    assert len(locks) == 0


@pytest.mark.asyncio()
async def test_lock_released_when_operation_fails(memory_app):
    await _prepare(memory_app, MUG, balance=5)
    with pytest.raises(InsufficientBalance):
        await memory_app.wheel_service.spin("42", "basic")
    with pytest.raises(UserNotFound):
        await memory_app.admin_service.add_ducks("nobody", 5, "gift")
    assert len(memory_app.user_locks) == 0
