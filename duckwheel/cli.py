"""Command line helpers for DuckWheel."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .app import WheelApp
from .config import DuckWheelConfig, configure_logging
from .diagnostics.economy_simulator import EconomySimulator
from .domain.models import Rarity, WheelLevel
from .loaders import load_seed_from_json, parse_seed_dict, validate_seed_file
from .validators import validate_app

console = Console()
logger = logging.getLogger(__name__)


def run_simulate() -> None:
    parser = argparse.ArgumentParser(description="DuckWheel economy simulator")
    parser.add_argument("seed_file", help="Seed JSON with prizes and wheel settings")
    parser.add_argument("level", choices=[level.value for level in WheelLevel])
    parser.add_argument("--spins", type=int, default=1000, help="Количество прокруток")
    parser.add_argument("--balance", type=float, default=None, help="Стартовый баланс уток")
    parser.add_argument("--seed", default=None, help="Сид генератора для воспроизводимости")
    args = parser.parse_args()

    configure_logging(DuckWheelConfig.from_env())
    definition = parse_seed_dict(json.loads(Path(args.seed_file).read_text(encoding="utf-8")))
    settings = {setting.level: setting for setting in definition.settings}
    setting = settings.get(WheelLevel(args.level))
    if setting is None:
        console.print(f"Уровень '{args.level}' не описан в файле.", style="red")
        sys.exit(1)

    simulator = EconomySimulator(definition.prizes)
    result = simulator.simulate(setting, spins=args.spins, balance=args.balance, seed=args.seed)

    console.print(f"[bold]{result.level}[/bold]: {result.spins} прокруток, потрачено {result.ducks_spent:g} уток")
    if result.stopped_early:
        console.print("Симуляция остановлена досрочно: закончились утки или призы.", style="yellow")
    table = Table(show_header=True, header_style="bold")
    table.add_column("Rarity")
    table.add_column("Wins")
    table.add_column("Share")
    for rarity in Rarity:
        table.add_row(rarity.name.lower(), str(result.rarities[rarity]), f"{result.share(rarity):.2%}")
    console.print(table)

    prizes = Table(show_header=True, header_style="bold")
    prizes.add_column("Prize")
    prizes.add_column("Wins")
    for prize_id, count in result.prizes.most_common():
        prizes.add_row(prize_id, str(count))
    console.print(prizes)
    console.print(
        f"Бесплатных спинов: {result.free_spins}, бонусов удачи: {result.luck_bonuses}, "
        f"итоговая удача: {result.final_luck:.2f}"
    )


def run_validate() -> None:
    parser = argparse.ArgumentParser(description="DuckWheel validator")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--seed-file", help="Path to seed JSON file for validation")
    group.add_argument(
        "--storage",
        action="store_true",
        help="Validate the stores configured through DUCKWHEEL_* variables",
    )
    args = parser.parse_args()
    config = DuckWheelConfig.from_env()
    configure_logging(config)

    if args.seed_file:
        errors = validate_seed_file(Path(args.seed_file))
        if errors:
            _print_problems("Ошибки в файле:", errors)
            sys.exit(1)
        console.print("Файл валиден ✅")
        return

    issues = asyncio.run(_validate_storage(config))
    if issues:
        _print_problems("Обнаружены ошибки конфигурации:", issues)
        sys.exit(1)
    console.print("Конфигурация колеса валидна ✅")


def run_seed() -> None:
    parser = argparse.ArgumentParser(description="Load a DuckWheel seed file into storage")
    parser.add_argument("seed_file", help="Seed JSON with users, prizes and wheel settings")
    args = parser.parse_args()
    config = DuckWheelConfig.from_env()
    configure_logging(config)

    errors = validate_seed_file(Path(args.seed_file))
    if errors:
        _print_problems("Ошибки в файле:", errors)
        sys.exit(1)
    definition = asyncio.run(_seed(config, Path(args.seed_file)))
    console.print(
        f"Загружено: {len(definition.settings)} уровней, "
        f"{len(definition.prizes)} призов, {len(definition.users)} пользователей ✅"
    )


def run_serve() -> None:
    import uvicorn

    from .api import create_app

    parser = argparse.ArgumentParser(description="Run the DuckWheel HTTP API")
    parser.add_argument("--seed-file", default=None, help="Seed JSON loaded on startup")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    args = parser.parse_args()
    config = DuckWheelConfig.from_env()
    configure_logging(config)

    app = WheelApp(config)
    logger.info("Starting %s on %s:%s", config.app_name, args.host or config.http.host, args.port or config.http.port)
    uvicorn.run(
        create_app(app, seed_file=Path(args.seed_file) if args.seed_file else None),
        host=args.host or config.http.host,
        port=args.port or config.http.port,
        log_level=config.log_level.lower(),
    )


def run_bot() -> None:
    parser = argparse.ArgumentParser(description="Run the DuckWheel Telegram bot")
    parser.add_argument("--seed-file", default=None, help="Seed JSON loaded on startup")
    args = parser.parse_args()
    config = DuckWheelConfig.from_env()
    configure_logging(config)
    if not config.bot_token:
        console.print("DUCKWHEEL_BOT_TOKEN не задан.", style="red")
        sys.exit(1)
    asyncio.run(_poll(config, Path(args.seed_file) if args.seed_file else None))


async def _poll(config: DuckWheelConfig, seed_file: Path | None) -> None:
    from aiogram import Bot, Dispatcher

    from .admin import build_admin_router
    from .telegram import build_router

    app = WheelApp(config)
    await app.init_backend()
    if seed_file:
        await load_seed_from_json(app, seed_file)
    bot = Bot(config.bot_token)
    dp = Dispatcher()
    dp.include_router(build_admin_router(app))
    dp.include_router(build_router(app))
    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()
        await app.close()


async def _validate_storage(config: DuckWheelConfig) -> list[str]:
    app = WheelApp(config)
    await app.init_backend()
    try:
        return await validate_app(app)
    finally:
        await app.close()


async def _seed(config: DuckWheelConfig, path: Path):
    app = WheelApp(config)
    await app.init_backend()
    try:
        return await load_seed_from_json(app, path)
    finally:
        await app.close()


def _print_problems(title: str, problems: list[str]) -> None:
    console.print(title, style="red")
    for problem in problems:
        console.print(f"- {problem}")
