"""Engine exceptions."""

from __future__ import annotations

from structured_trade.types import StakeError


class StructuredTradeError(Exception):
    """Base engine error."""


class InvalidPriceError(StructuredTradeError, ValueError):
    """Raised when a price is non-finite or not positive."""


class StakeRejectedError(StructuredTradeError):
    """Raised when opening with a stake the validator rejects."""

    def __init__(self, reason: StakeError, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or reason.value)


class LifecycleError(StructuredTradeError):
    """Invalid transition of the position state machine."""


class PositionAlreadyOpenError(LifecycleError):
    def __init__(self) -> None:
        super().__init__("position_already_open")


class NoOpenPositionError(LifecycleError):
    def __init__(self) -> None:
        super().__init__("no_open_position")


class PriceFeedError(StructuredTradeError):
    """Raised when a price feed cannot produce a quote."""
