import pytest

from duckwheel.domain.models import Prize, Rarity, WheelLevel
from duckwheel.testing import UserFactory, memory_app, wheel_setting  # noqa: F401
from duckwheel.validators import validate_app


async def _configure(app, **overrides):
    for level in WheelLevel:
        await app.settings_store.save(wheel_setting(level, **overrides))
    await app.prize_store.save(Prize(prize_id="mug", name="Mug", rarity=Rarity.COMMON))


@pytest.mark.asyncio()
async def test_validate_app_success(memory_app):
    await _configure(memory_app)
    await memory_app.user_store.save(UserFactory().build("1"))
    assert await validate_app(memory_app) == []


@pytest.mark.asyncio()
async def test_validate_app_detects_missing_levels(memory_app):
    await memory_app.settings_store.save(wheel_setting(WheelLevel.BASIC))
    await memory_app.prize_store.save(Prize(prize_id="mug", name="Mug"))
    issues = await validate_app(memory_app)
    assert "Wheel level 'epic' is not configured." in issues
    assert not any("'basic'" in issue for issue in issues)


@pytest.mark.asyncio()
async def test_validate_app_detects_bad_rules(memory_app):
    await _configure(memory_app)
    await memory_app.settings_store.save(
        wheel_setting(
            WheelLevel.EPIC,
            spin_cost=0,
            series_bonus_every=3,
            weights_overrides={Rarity.COMMON: 0},
            rarity_upgrades={Rarity.COMMON: Rarity.COMMON, Rarity.RARE: Rarity.COMMON, Rarity.EPIC: Rarity.EPIC, Rarity.LEGENDARY: Rarity.LEGENDARY},
        )
    )
    issues = await validate_app(memory_app)
    assert "Level 'epic' has non-positive spinCost '0'." in issues
    assert "Level 'epic' sets seriesBonusEvery without a seriesBonusType." in issues
    assert "Level 'epic' downgrades rarity 2 to 1." in issues
    assert "Level 'epic' gives every available prize zero weight." in issues


@pytest.mark.asyncio()
async def test_validate_app_detects_prize_and_user_problems(memory_app):
    await _configure(memory_app)
    await memory_app.prize_store.save(Prize(prize_id="cap", name="Cap", direct_buy_enabled=True))
    await memory_app.user_store.save(UserFactory().build("1", balance=-5))
    issues = await validate_app(memory_app)
    assert "Prize 'cap' allows direct purchase without a price." in issues
    assert "User '1' has negative balance '-5'." in issues


@pytest.mark.asyncio()
async def test_validate_app_detects_empty_wheel(memory_app):
    for level in WheelLevel:
        await memory_app.settings_store.save(wheel_setting(level))
    await memory_app.prize_store.save(Prize(prize_id="off", name="Off", active=False))
    issues = await validate_app(memory_app)
    assert "Level 'basic' has no prizes available on the wheel." in issues
