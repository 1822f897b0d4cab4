"""Pytest fixtures for DuckWheel."""

from __future__ import annotations

import pytest

from ..app import WheelApp
from ..config import AdminConfig, DuckWheelConfig


@pytest.fixture()
def memory_app() -> WheelApp:
    return app_fixture()


def app_fixture(auth_secret: str = "", **kwargs) -> WheelApp:
    """Helper for ad-hoc tests where pytest is not available."""
    config = DuckWheelConfig(bot_token="test", admin=AdminConfig(auth_secret=auth_secret), **kwargs)
    return WheelApp(config)
