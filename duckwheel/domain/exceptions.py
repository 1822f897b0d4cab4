"""Exceptions raised by DuckWheel domain services."""


class DuckWheelError(RuntimeError):
    """Base class for domain exceptions."""

    code = "DUCKWHEEL_ERROR"


class InsufficientBalance(DuckWheelError):
    """Raised when a balance cannot cover a spin or purchase."""

    code = "INSUFFICIENT_BALANCE"

    def __init__(self, balance: float, required: float) -> None:
        super().__init__(f"Insufficient balance: have {balance}, need {required}")
        self.balance = balance
        self.required = required


class NoPrizesAvailable(DuckWheelError):
    """Raised when the wheel has no eligible prizes."""

    code = "NO_PRIZES_AVAILABLE"


class InvalidWeightDistribution(DuckWheelError):
    """Raised when weights of a non-empty pool sum to zero or less."""

    code = "INVALID_WEIGHT_DISTRIBUTION"


class DirectPurchaseNotAllowed(DuckWheelError):
    code = "DIRECT_PURCHASE_NOT_ALLOWED"


class PrizeUnavailable(DirectPurchaseNotAllowed):
    """Raised when buying an inactive or already claimed one-time prize."""


class DirectPriceNotSet(DuckWheelError):
    code = "DIRECT_PRICE_NOT_SET"


class UserNotFound(DuckWheelError):
    code = "USER_NOT_FOUND"


class LevelNotFound(DuckWheelError):
    code = "LEVEL_NOT_FOUND"


class PrizeNotFound(DuckWheelError):
    code = "PRIZE_NOT_FOUND"


class InvalidInput(DuckWheelError):
    code = "INVALID_INPUT"
