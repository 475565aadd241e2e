"""Stake validation rules gating order placement."""

from __future__ import annotations

import math

from structured_trade.config import Settings
from structured_trade.types import StakeCheckResult, StakeError

MIN_STAKE = 10
MAX_STAKE = 99_999

_MESSAGES = {
    StakeError.BELOW_MINIMUM: f"Minimum stake is ${MIN_STAKE}",
    StakeError.ABOVE_MAXIMUM: f"Maximum stake is ${MAX_STAKE:,}",
    StakeError.INSUFFICIENT_BALANCE: "Exceeds available balance",
}


def stake_error_message(error: StakeError) -> str:
    """User-facing text for a stake error."""
    return _MESSAGES[error]


def validate_stake(stake: float, available_balance: float) -> StakeCheckResult:
    """Check stake bounds then balance. First failure wins."""
    error = _first_failure(float(stake), float(available_balance))
    if error is None:
        return StakeCheckResult(allowed=True)
    return StakeCheckResult(allowed=False, error=error, message=stake_error_message(error))


def _first_failure(stake: float, available_balance: float) -> StakeError | None:
    # NaN compares false against every bound.
    if math.isnan(stake) or stake < MIN_STAKE:
        return StakeError.BELOW_MINIMUM
    if stake > MAX_STAKE:
        return StakeError.ABOVE_MAXIMUM
    if stake > available_balance:
        return StakeError.INSUFFICIENT_BALANCE
    return None


class StakeValidator:
    """Validates stakes against the configured available balance."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    @property
    def available_balance(self) -> float:
        return self._settings.available_balance

    def validate(self, stake: float) -> StakeCheckResult:
        return validate_stake(stake, self.available_balance)
