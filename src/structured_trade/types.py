"""Shared domain types for the structured trade engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Direction(str, Enum):
    """Side of the bet."""

    LONG = "long"
    SHORT = "short"


class PositionStatus(str, Enum):
    """Lifecycle state of the position manager."""

    FLAT = "flat"
    OPEN = "open"


class StakeError(str, Enum):
    """Reasons a stake is rejected, in check order."""

    BELOW_MINIMUM = "below_minimum"
    ABOVE_MAXIMUM = "above_maximum"
    INSUFFICIENT_BALANCE = "insufficient_balance"


@dataclass(frozen=True, slots=True)
class PricedContract:
    """Contract terms derived from direction, risk level and current price."""

    direction: Direction
    risk_level: int
    current_price: float
    price_gap_pct: float
    strike_price: float
    target_roi: float
    multiplier: float
    win_probability: float


@dataclass(frozen=True, slots=True)
class Position:
    """The single open bet held by the position manager."""

    direction: Direction
    risk_level: int
    entry_price: float
    strike_price: float
    stake: float
    target_roi: float
    multiplier: float
    win_probability: float
    opened_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class LiveValuation:
    """Mark-to-market view of the open position."""

    pnl: float = 0.0
    pnl_percent: float = 0.0
    current_multiplier: float = 1.0
    progress: float = 0.0
    last_price: float | None = None

    @property
    def target_reached(self) -> bool:
        """Advisory only; the position is never settled automatically."""
        return self.progress >= 100.0


@dataclass(frozen=True, slots=True)
class StakeCheckResult:
    """Result of stake validation."""

    allowed: bool
    error: StakeError | None = None
    message: str | None = None


@dataclass(slots=True)
class OrderPreview:
    """Quote shown before the user confirms an order."""

    contract: PricedContract
    stake: float
    stake_check: StakeCheckResult
    potential_payout: float
    win_chance: str

    @property
    def is_valid(self) -> bool:
        return self.stake_check.allowed


@dataclass(slots=True)
class OrderResult:
    """Outcome of one order execution attempt."""

    status: str
    position: Position | None = None
    stake_error: StakeError | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "opened"
