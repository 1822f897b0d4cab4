"""Seedable random sources and weighted selection."""

from __future__ import annotations

import random
from typing import Callable, Sequence, TypeVar

from .exceptions import InvalidWeightDistribution

T = TypeVar("T")

RandomSource = Callable[[], float]

DEFAULT_SEED = 0x7391DCEA
_MASK32 = 0xFFFFFFFF
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def hash_seed(seed: str | int) -> int:
    """Fold a seed into an unsigned 32-bit integer (31-multiplier string hash)."""
    normalized = _to_base36(seed) if isinstance(seed, int) else seed
    h = 0
    for char in normalized:
        h = (31 * h + ord(char)) & _MASK32
    return h


def create_rng(seed: str | int | None = None) -> RandomSource:
    """Return a deterministic xorshift32 generator producing floats in [0, 1).

    Identical seeds replay identical sequences. A missing, empty or zero seed
    (or one hashing to zero) uses ``DEFAULT_SEED`` so the state never
    collapses to all zeros.
    """
    state = (hash_seed(seed) if seed else DEFAULT_SEED) or DEFAULT_SEED

    def _next() -> float:
        nonlocal state
        state ^= (state << 13) & _MASK32
        state ^= state >> 17
        state ^= (state << 5) & _MASK32
        return state / (_MASK32 + 1)

    return _next


def default_rng() -> RandomSource:
    return random.random


def pick_weighted(
    items: Sequence[T],
    weight_fn: Callable[[T], float],
    rng: RandomSource | None = None,
) -> T:
    """Draw one item with probability proportional to ``weight_fn(item)``.

    Negative weights count as zero and zero-weight items are never drawn. The
    scan runs in the given order, so the result is reproducible for a seeded
    ``rng``.
    """
    if not items:
        raise ValueError("Cannot pick from an empty sequence")
    rng = rng or default_rng()
    weights = [max(0.0, float(weight_fn(item))) for item in items]
    total = sum(weights)
    if total <= 0:
        raise InvalidWeightDistribution("Total weight must be positive")
    threshold = rng() * total
    cumulative = 0.0
    last_positive = items[-1]
    for item, weight in zip(items, weights):
        if weight <= 0:
            continue
        cumulative += weight
        last_positive = item
        if threshold <= cumulative:
            return item
    return last_positive


def deterministic_picker(
    items: Sequence[T],
    weight_fn: Callable[[T], float],
    seed: str | int | None = None,
) -> Callable[[], T]:
    """Build a callable that replays the first seeded pick on every call."""

    def _pick() -> T:
        return pick_weighted(items, weight_fn, create_rng(seed))

    return _pick


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return sign + "".join(reversed(digits))
