"""Configuration models for DuckWheel."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Literal


StorageBackend = Literal["memory", "sqlalchemy"]

DEFAULT_APP_NAME = "Колесо уточечной удачи"


@dataclass(slots=True)
class StorageConfig:
    """Configure how users, prizes, spin logs and orders are persisted."""

    backend: StorageBackend = "memory"
    dsn: str | None = None
    echo_sql: bool = False

    def resolve_dsn(self) -> str | None:
        if self.dsn:
            return self.dsn
        if self.backend == "sqlalchemy":
            return "sqlite+aiosqlite:///./duckwheel.db"
        return None


@dataclass(slots=True)
class AdminConfig:
    """Who may change balances, prizes and wheel settings."""

    # Shared secret for admin HTTP endpoints; empty disables the check.
    auth_secret: str = ""
    # Telegram user ids allowed to run admin chat commands.
    admin_ids: set[int] = field(default_factory=set)


@dataclass(slots=True)
class HttpConfig:
    host: str = "127.0.0.1"
    port: int = 4000


@dataclass(slots=True)
class DuckWheelConfig:
    """Top-level configuration container."""

    app_name: str = DEFAULT_APP_NAME
    bot_token: str = ""
    storage: StorageConfig = field(default_factory=StorageConfig)
    admin: AdminConfig = field(default_factory=AdminConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    rng_seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "DuckWheelConfig":
        """Create config from environment variables prefixed with DUCKWHEEL_."""
        prefix = "DUCKWHEEL_"
        storage_backend = os.getenv(f"{prefix}STORAGE_BACKEND", "memory")
        if storage_backend not in {"memory", "sqlalchemy"}:
            raise ValueError(f"Unsupported {prefix}STORAGE_BACKEND '{storage_backend}'")

        admin_ids = {
            int(_id.strip())
            for _id in os.getenv(f"{prefix}ADMIN_IDS", "").split(",")
            if _id.strip()
        }

        return cls(
            app_name=os.getenv(f"{prefix}APP_NAME", DEFAULT_APP_NAME) or DEFAULT_APP_NAME,
            bot_token=os.getenv(f"{prefix}BOT_TOKEN", ""),
            storage=StorageConfig(
                backend=storage_backend,
                dsn=os.getenv(f"{prefix}STORAGE_DSN"),
                echo_sql=_env_flag(f"{prefix}STORAGE_ECHO_SQL"),
            ),
            admin=AdminConfig(
                auth_secret=os.getenv(f"{prefix}AUTH_SECRET", ""),
                admin_ids=admin_ids,
            ),
            http=HttpConfig(
                host=os.getenv(f"{prefix}HTTP_HOST", "127.0.0.1"),
                port=int(os.getenv(f"{prefix}HTTP_PORT", "4000")),
            ),
            rng_seed=(
                int(os.getenv(f"{prefix}RNG_SEED")) if os.getenv(f"{prefix}RNG_SEED") else None
            ),
            log_level=os.getenv(f"{prefix}LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(config: DuckWheelConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}
