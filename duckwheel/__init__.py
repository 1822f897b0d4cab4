"""DuckWheel public API."""

from .app import WheelApp
from .config import DuckWheelConfig
from .domain import compute_weights, create_rng, pick_weighted, purchase, spin

__all__ = [
    "WheelApp",
    "DuckWheelConfig",
    "compute_weights",
    "create_rng",
    "pick_weighted",
    "purchase",
    "spin",
]
