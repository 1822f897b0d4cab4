"""Domain models and the economy engine."""

from .bonuses import BonusOutcome, FreeSpinBonus, LuckBonus, SeriesBonusStrategy
from .economy import (
    BalanceAdjustment,
    PurchaseOutcome,
    SpinOutcome,
    adjust_balance,
    purchase,
    spin,
)
from .exceptions import (
    DirectPriceNotSet,
    DirectPurchaseNotAllowed,
    DuckWheelError,
    InsufficientBalance,
    InvalidInput,
    InvalidWeightDistribution,
    LevelNotFound,
    NoPrizesAvailable,
    PrizeNotFound,
    PrizeUnavailable,
    UserNotFound,
)
from .models import (
    DuckHistoryEntry,
    Prize,
    Rarity,
    SeriesBonusType,
    ShopOrder,
    SpinLogEntry,
    SpinResult,
    User,
    UserOverview,
    UserWinSummary,
    WheelLevel,
    WheelSetting,
)
from .rng import create_rng, deterministic_picker, pick_weighted
from .weights import RARITY_BASE_WEIGHTS, WeightedPrize, compute_weights

__all__ = [
    "BonusOutcome",
    "FreeSpinBonus",
    "LuckBonus",
    "SeriesBonusStrategy",
    "BalanceAdjustment",
    "PurchaseOutcome",
    "SpinOutcome",
    "adjust_balance",
    "purchase",
    "spin",
    "DirectPriceNotSet",
    "DirectPurchaseNotAllowed",
    "DuckWheelError",
    "InsufficientBalance",
    "InvalidInput",
    "InvalidWeightDistribution",
    "LevelNotFound",
    "NoPrizesAvailable",
    "PrizeNotFound",
    "PrizeUnavailable",
    "UserNotFound",
    "DuckHistoryEntry",
    "Prize",
    "Rarity",
    "SeriesBonusType",
    "ShopOrder",
    "SpinLogEntry",
    "SpinResult",
    "User",
    "UserOverview",
    "UserWinSummary",
    "WheelLevel",
    "WheelSetting",
    "create_rng",
    "deterministic_picker",
    "pick_weighted",
    "RARITY_BASE_WEIGHTS",
    "WeightedPrize",
    "compute_weights",
]
