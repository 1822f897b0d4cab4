import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from duckwheel.domain.models import Rarity, SeriesBonusType, WheelLevel
from duckwheel.loaders import load_seed_from_json, parse_seed_dict, validate_seed_dict
from duckwheel.loaders.rows import (
    dump_user,
    dump_wheel_setting,
    parse_prize,
    parse_rarity_upgrades,
    parse_user,
    parse_weights_overrides,
    parse_wheel_setting,
    to_bool,
    to_number,
    to_timestamp,
)
from duckwheel.testing import memory_app  # noqa: F401

SEED_FILE = Path(__file__).resolve().parents[1] / "examples" / "seed.json"


def _minimal_seed() -> dict:
    return {
        "settings": [{"level": "basic", "spinCost": 3, "pityStep": 0.05, "pityMax": 0.25}],
        "prizes": [{"prizeId": "mug", "name": "Mug", "rarity": 1, "active": True}],
        "users": [{"userId": "u1", "name": "U", "balance": 5, "updatedAt": "2024-01-01T00:00:00Z"}],
    }


def test_parse_seed_dict_reads_example_file():
    definition = parse_seed_dict(json.loads(SEED_FILE.read_text(encoding="utf-8")))
    levels = {setting.level: setting for setting in definition.settings}
    assert set(levels) == set(WheelLevel)
    assert levels[WheelLevel.EPIC].series_bonus_type == SeriesBonusType.FREE_SPIN
    assert levels[WheelLevel.ADVANCED].rarity_upgrades[Rarity.COMMON] == Rarity.RARE
    retreat = next(prize for prize in definition.prizes if prize.prize_id == "prize-retreat")
    assert retreat.remove_after_win and not retreat.removed_from_wheel
    assert {user.user_id for user in definition.users} == {"duck-admin", "duck-alex", "duck-maria"}


def test_validate_seed_dict_reports_problems():
    data = _minimal_seed()
    data["settings"].append({"level": "basic", "spinCost": 0, "pityStep": 0, "pityMax": 0})
    data["prizes"].append({"prizeId": "cap", "name": "Cap", "rarity": 7, "directBuyEnabled": True})
    data["users"][0]["balance"] = -1
    errors = validate_seed_dict(data)
    assert "Level 'basic' defined multiple times." in errors
    assert "Level 'basic' 'spinCost' must be positive." in errors
    assert "Prize 'cap' has invalid rarity '7'." in errors
    assert "Prize 'cap' must define 'directBuyPrice'." in errors
    assert any("balance cannot be negative" in error for error in errors)


def test_parse_seed_dict_raises_on_invalid_seed():
    with pytest.raises(ValueError):
        parse_seed_dict({"settings": []})


@pytest.mark.asyncio()
async def test_load_seed_from_json_fills_stores(memory_app, tmp_path: Path):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps(_minimal_seed()), encoding="utf-8")
    await load_seed_from_json(memory_app, path)

    assert (await memory_app.settings_store.get(WheelLevel.BASIC)).spin_cost == 3
    assert (await memory_app.prize_store.get("mug")).is_available
    assert (await memory_app.user_store.get("u1")).balance == 5


def test_row_coercions():
    assert to_number("12") == 12
    assert to_number(" 2.5 ") == 2.5
    assert to_number("") == 0
    assert to_number(None) == 0
    with pytest.raises(ValueError):
        to_number("abc")
    assert to_bool("TRUE") and to_bool(1) and to_bool("yes")
    assert not to_bool("false") and not to_bool(None) and not to_bool(0)


def test_to_timestamp_normalizes_to_utc():
    assert to_timestamp("2024-03-01T10:00:00Z") == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)
    assert to_timestamp("2024-03-01T10:00:00").tzinfo == timezone.utc
    with pytest.raises(ValueError):
        to_timestamp("")


def test_rarity_maps_accept_json_strings_and_skip_garbage():
    upgrades = parse_rarity_upgrades('{"1": 2, "9": 3, "2": "x"}')
    assert upgrades == {Rarity.COMMON: Rarity.RARE, Rarity.RARE: Rarity.RARE, Rarity.EPIC: Rarity.EPIC, Rarity.LEGENDARY: Rarity.LEGENDARY}
    assert parse_weights_overrides({"3": "1.5", "4": "nope", "0": 2}) == {Rarity.EPIC: 1.5}
    assert parse_rarity_upgrades("") == parse_rarity_upgrades(None)
    with pytest.raises(ValueError):
        parse_weights_overrides("{broken")


def test_sheet_style_rows_round_trip_through_dump():
    setting = parse_wheel_setting(
        {
            "level": "legendary",
            "spinCost": "25",
            "rarityUpgrades": '{"1":2,"2":3,"3":4}',
            "pityStep": "0.12",
            "pityMax": "0.6",
            "seriesBonusEvery": "5",
            "seriesBonusType": "freeSpin",
        }
    )
    dumped = dump_wheel_setting(setting)
    assert dumped["rarityUpgrades"] == {"1": 2, "2": 3, "3": 4, "4": 4}
    assert dumped["spinCost"] == 25
    assert dumped["seriesBonusType"] == "freeSpin"

    user = parse_user({"userId": 7, "name": "Seven", "balance": "10", "updatedAt": "2024-01-01T00:00:00Z"})
    assert dump_user(user)["updatedAt"] == "2024-01-01T00:00:00Z"
    assert dump_user(user)["userId"] == "7"


def test_parse_prize_rejects_unknown_rarity():
    with pytest.raises(ValueError):
        parse_prize({"prizeId": "x", "name": "X", "rarity": 5})
