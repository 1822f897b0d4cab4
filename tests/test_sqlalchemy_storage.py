import asyncio
from datetime import timezone
from pathlib import Path

import pytest

from duckwheel.app import WheelApp
from duckwheel.config import DuckWheelConfig, StorageConfig
from duckwheel.domain.exceptions import InsufficientBalance
from duckwheel.domain.models import Prize, Rarity, SeriesBonusType, WheelLevel
from duckwheel.testing import UserFactory, wheel_setting


def _sqlite_app(tmp_path: Path) -> WheelApp:
    dsn = f"sqlite+aiosqlite:///{tmp_path / 'wheel.db'}"
    return WheelApp(DuckWheelConfig(storage=StorageConfig(backend="sqlalchemy", dsn=dsn)))


@pytest.mark.asyncio()
async def test_spin_and_buy_round_trip_through_sqlite(tmp_path: Path):
    app = _sqlite_app(tmp_path)
    await app.init_backend()
    try:
        upgrades = {rarity: rarity for rarity in Rarity} | {Rarity.COMMON: Rarity.RARE}
        await app.settings_store.save(
            wheel_setting(
                spin_cost=10,
                rarity_upgrades=upgrades,
                weights_overrides={Rarity.RARE: 2},
                series_bonus_every=3,
                series_bonus_type=SeriesBonusType.LUCK,
            )
        )
        await app.prize_store.save(Prize(prize_id="b", name="B"))
        await app.prize_store.save(
            Prize(prize_id="a", name="A", direct_buy_enabled=True, direct_buy_price=5, remove_after_win=True)
        )
        await app.user_store.save(UserFactory().build("1", balance=50))

        setting = await app.settings_store.get(WheelLevel.BASIC)
        assert setting.rarity_upgrades[Rarity.COMMON] == Rarity.RARE
        assert setting.weights_overrides == {Rarity.RARE: 2}
        assert setting.series_bonus_type == SeriesBonusType.LUCK
        assert [prize.prize_id for prize in await app.prize_store.list()] == ["b", "a"]

        outcome = await app.wheel_service.spin("1", "basic", seed="db")
        stored = await app.user_store.get("1")
        assert stored.balance == 40
        assert stored.updated_at.tzinfo == timezone.utc
        logs = await app.spin_log_store.list("1")
        assert logs[0].log_id == outcome.log_entry.log_id
        assert logs[0].rarity == Rarity.RARE

        if outcome.result.prize.prize_id != "a":
            purchase = await app.wheel_service.buy("1", "a")
            assert (await app.user_store.get("1")).balance == 35
            updated = await app.order_store.update_status(purchase.order.order_id, "approved")
            assert updated.status == "approved"
        assert (await app.prize_store.get("a")).removed_from_wheel
    finally:
        await app.close()


async def _prepare_single_prize(app: WheelApp, balance: float) -> None:
    await app.init_backend()
    await app.settings_store.save(wheel_setting(spin_cost=10))
    await app.prize_store.save(Prize(prize_id="mug", name="Кружка"))
    await app.user_store.save(UserFactory().build("1", balance=balance))


@pytest.mark.asyncio()
async def test_concurrent_spins_never_overspend(tmp_path: Path):
    app = _sqlite_app(tmp_path)
    try:
        await _prepare_single_prize(app, balance=30)
        results = await asyncio.gather(
            *(app.wheel_service.spin("1", "basic") for _ in range(5)),
            return_exceptions=True,
        )
        succeeded = [result for result in results if not isinstance(result, Exception)]
        refused = [result for result in results if isinstance(result, InsufficientBalance)]

        assert len(succeeded) == 3
        assert len(refused) == 2
        stored = await app.user_store.get("1")
        assert stored.balance == 0
        assert stored.spins_total == 3
        assert len(await app.spin_log_store.list("1")) == 3
        assert len(app.user_locks) == 0
    finally:
        await app.close()


@pytest.mark.asyncio()
async def test_admin_credit_during_spin_is_kept(tmp_path: Path):
    app = _sqlite_app(tmp_path)
    try:
        await _prepare_single_prize(app, balance=100)
        await asyncio.gather(
            app.wheel_service.spin("1", "basic", seed="x"),
            app.admin_service.add_ducks("1", 50, "gift"),
        )

        stored = await app.user_store.get("1")
        assert stored.balance == 140
        assert stored.total_earned == 150
        assert [entry.amount for entry in await app.duck_history_store.list("1")] == [50]
    finally:
        await app.close()
