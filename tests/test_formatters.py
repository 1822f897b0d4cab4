from datetime import datetime, timezone

from duckwheel.domain.economy import spin
from duckwheel.domain.exceptions import InsufficientBalance, LevelNotFound
from duckwheel.domain.models import Prize, Rarity, SeriesBonusType, User, WheelLevel
from duckwheel.telegram.aiogram_router import (
    extract_level,
    format_balance_message,
    format_error,
    format_prizes_message,
    format_spin_message,
)
from duckwheel.testing import wheel_setting

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_format_spin_message_shows_prize_balance_and_bonus():
    user = User(user_id="1", name="Утка", balance=20, spins_total=3, updated_at=NOW)
    level = wheel_setting(spin_cost=5, series_bonus_every=4, series_bonus_type=SeriesBonusType.FREE_SPIN)
    outcome = spin(user, level, [Prize(prize_id="mug", name="Кружка", rarity=Rarity.RARE)], rng=lambda: 0.1)
    text = format_spin_message(outcome, WheelLevel.BASIC)
    assert "Кружка [редкий]" in text
    assert "20 → 20" in text
    assert "бесплатный" in text


def test_format_balance_message_formats_fractional_ducks():
    user = User(user_id="1", name="Утка", balance=12.5, total_earned=40, luck_modifier=0.15, updated_at=NOW)
    text = format_balance_message(user)
    assert "Баланс: 12.50" in text
    assert "Заработано всего: 40" in text
    assert "Удача: 0.15" in text


def test_format_prizes_message_lists_available_prizes_rarest_first():
    prizes = [
        Prize(prize_id="mug", name="Кружка", direct_buy_enabled=True, direct_buy_price=10),
        Prize(prize_id="trip", name="Поездка", rarity=Rarity.LEGENDARY, remove_after_win=True),
        Prize(prize_id="off", name="Снятый", active=False),
    ]
    text = format_prizes_message(prizes)
    lines = text.splitlines()
    assert lines[1].startswith("• Поездка [легендарный]")
    assert "/buy mug" in lines[2]
    assert "Снятый" not in text
    assert format_prizes_message([]) == "Призов пока нет."


def test_format_error_messages():
    assert "нужно 10" in format_error(InsufficientBalance(3, 10))
    assert "Такого колеса нет" in format_error(LevelNotFound("x"))


def test_extract_level():
    assert extract_level(None, WheelLevel.BASIC) == WheelLevel.BASIC
    assert extract_level(" Epic ", WheelLevel.BASIC) == WheelLevel.EPIC
    assert extract_level("mega", WheelLevel.BASIC) is None
