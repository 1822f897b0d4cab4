"""Testing utilities for DuckWheel."""

from .factory import PrizeFactory, UserFactory, wheel_setting
from .fixtures import app_fixture, memory_app

__all__ = [
    "PrizeFactory",
    "UserFactory",
    "wheel_setting",
    "app_fixture",
    "memory_app",
]
