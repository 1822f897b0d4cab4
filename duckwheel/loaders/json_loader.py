"""Load users, prizes and wheel settings from JSON seed files."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Sequence, TYPE_CHECKING

from ..domain.models import Prize, User, WheelLevel, WheelSetting
from .rows import parse_prize, parse_user, parse_wheel_setting, to_number

if TYPE_CHECKING:
    from ..app import WheelApp


@dataclass(slots=True)
class SeedDefinition:
    users: Sequence[User]
    prizes: Sequence[Prize]
    settings: Sequence[WheelSetting]


async def load_seed_from_json(app: "WheelApp", path: str | Path) -> SeedDefinition:
    """Load a seed file and save every entity into the app's stores."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    definition = parse_seed_dict(data)
    for setting in definition.settings:
        await app.settings_store.save(setting)
    for prize in definition.prizes:
        await app.prize_store.save(prize)
    for user in definition.users:
        await app.user_store.save(user)
    return definition


def parse_seed_dict(data: dict[str, Any]) -> SeedDefinition:
    """Parse a JSON dict (already decoded) into domain objects."""
    errors = validate_seed_dict(data)
    if errors:
        raise ValueError(_format_errors("Seed validation failed", errors))
    return SeedDefinition(
        users=tuple(parse_user(entry) for entry in data.get("users", [])),
        prizes=tuple(parse_prize(entry) for entry in data.get("prizes", [])),
        settings=tuple(parse_wheel_setting(entry) for entry in data.get("settings", [])),
    )


def validate_seed_file(path: str | Path) -> list[str]:
    """Validate seed JSON file and return a list of errors."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return validate_seed_dict(data)


def validate_seed_dict(data: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    if not isinstance(data, dict):
        return ["Seed must be a JSON object."]

    settings_raw = data.get("settings")
    if not isinstance(settings_raw, list) or not settings_raw:
        errors.append("Seed must contain non-empty 'settings' array.")
    else:
        levels: set[str] = set()
        for idx, entry in enumerate(settings_raw, start=1):
            if not isinstance(entry, dict):
                errors.append(f"Setting #{idx} must be an object.")
                continue
            level = entry.get("level")
            try:
                WheelLevel(level)
            except ValueError:
                errors.append(f"Setting #{idx} has unknown level '{level}'.")
                continue
            if level in levels:
                errors.append(f"Level '{level}' defined multiple times.")
            levels.add(level)
            _check_number(errors, entry, "spinCost", f"Level '{level}'", positive=True)
            _check_number(errors, entry, "pityStep", f"Level '{level}'")
            _check_number(errors, entry, "pityMax", f"Level '{level}'")
            _check_number(errors, entry, "seriesBonusEvery", f"Level '{level}'", required=False)

    prizes_raw = data.get("prizes", [])
    if not isinstance(prizes_raw, list):
        errors.append("'prizes' must be an array.")
    else:
        prize_ids: set[str] = set()
        for idx, entry in enumerate(prizes_raw, start=1):
            if not isinstance(entry, dict):
                errors.append(f"Prize #{idx} must be an object.")
                continue
            prize_id = entry.get("prizeId")
            if not isinstance(prize_id, str) or not prize_id.strip():
                errors.append(f"Prize #{idx} must define non-empty 'prizeId'.")
                continue
            if prize_id in prize_ids:
                errors.append(f"Prize id '{prize_id}' defined multiple times.")
            prize_ids.add(prize_id)
            if not isinstance(entry.get("name"), str) or not entry["name"].strip():
                errors.append(f"Prize '{prize_id}' must define non-empty 'name'.")
            rarity = entry.get("rarity")
            if str(rarity) not in {"1", "2", "3", "4"}:
                errors.append(f"Prize '{prize_id}' has invalid rarity '{rarity}'.")
            if str(entry.get("directBuyEnabled", "")).strip().lower() in {"true", "1", "yes"}:
                _check_number(
                    errors, entry, "directBuyPrice", f"Prize '{prize_id}'", positive=True
                )

    users_raw = data.get("users", [])
    if not isinstance(users_raw, list):
        errors.append("'users' must be an array.")
    else:
        user_ids: set[str] = set()
        for idx, entry in enumerate(users_raw, start=1):
            if not isinstance(entry, dict):
                errors.append(f"User #{idx} must be an object.")
                continue
            user_id = entry.get("userId")
            if not isinstance(user_id, str) or not user_id.strip():
                errors.append(f"User #{idx} must define non-empty 'userId'.")
                continue
            if user_id in user_ids:
                errors.append(f"User id '{user_id}' defined multiple times.")
            user_ids.add(user_id)
            if entry.get("role", "user") not in {"user", "admin"}:
                errors.append(f"User '{user_id}' has invalid role '{entry.get('role')}'.")
            if not entry.get("updatedAt"):
                errors.append(f"User '{user_id}' must define 'updatedAt'.")
            balance = _check_number(errors, entry, "balance", f"User '{user_id}'")
            if balance is not None and balance < 0:
                errors.append(f"User '{user_id}' balance cannot be negative.")

    return errors


def _check_number(
    errors: list[str],
    entry: dict[str, Any],
    key: str,
    owner: str,
    *,
    positive: bool = False,
    required: bool = True,
) -> float | None:
    if key not in entry or entry[key] in (None, ""):
        if required:
            errors.append(f"{owner} must define '{key}'.")
        return None
    try:
        value = to_number(entry[key], field=key)
    except ValueError:
        errors.append(f"{owner} has non-numeric '{key}' value '{entry[key]}'.")
        return None
    if positive and value <= 0:
        errors.append(f"{owner} '{key}' must be positive.")
    elif value < 0:
        errors.append(f"{owner} '{key}' cannot be negative.")
    return value


def _format_errors(prefix: str, errors: Iterable[str]) -> str:
    formatted = "\n".join(f"- {err}" for err in errors)
    return f"{prefix}:\n{formatted}"
