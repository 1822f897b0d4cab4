"""Пример: колесо в памяти, несколько прокруток, покупка и симуляция экономики."""

from __future__ import annotations

import asyncio
from pathlib import Path

from duckwheel import DuckWheelConfig, WheelApp
from duckwheel.config import configure_logging
from duckwheel.diagnostics import EconomySimulator
from duckwheel.loaders import load_seed_from_json

SEED_FILE = Path(__file__).with_name("seed.json")


async def main() -> None:
    config = DuckWheelConfig.from_env()
    configure_logging(config)
    app = WheelApp(config)
    await app.init_backend()
    definition = await load_seed_from_json(app, SEED_FILE)

    for attempt in range(3):
        outcome = await app.wheel_service.spin("duck-alex", "basic", seed=f"demo-{attempt}")
        prize = outcome.result.prize
        print(
            f"Спин {attempt + 1}: {prize.name if prize else '—'}, "
            f"баланс {outcome.result.balance_before} → {outcome.result.balance_after}"
        )

    purchase = await app.wheel_service.buy("duck-alex", "prize-stickers")
    print(f"Заказ {purchase.order.order_id}: осталось {purchase.next_user.balance} уток")

    epic = next(setting for setting in definition.settings if setting.level.value == "epic")
    result = EconomySimulator(definition.prizes).simulate(epic, spins=500, seed="demo")
    print(f"Эпическое колесо, 500 спинов: бесплатных {result.free_spins}, итоговая удача {result.final_luck:.2f}")

    await app.close()


if __name__ == "__main__":
    asyncio.run(main())
