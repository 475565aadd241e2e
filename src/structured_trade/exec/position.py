"""Position lifecycle manager for the single open structured trade."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from structured_trade.errors import (
    InvalidPriceError,
    NoOpenPositionError,
    PositionAlreadyOpenError,
    StakeRejectedError,
)
from structured_trade.pricing.contract import ensure_valid_price, price_contract
from structured_trade.risk.rules import StakeValidator
from structured_trade.types import Direction, LiveValuation, Position, PositionStatus
from structured_trade.utils.logging import get_logger, log_position_event

_FLAT_VALUATION = LiveValuation()


def compute_valuation(position: Position, price: float) -> LiveValuation:
    """Mark a position to the given price.

    Progress is clamped to ``[0, 100]`` and the multiplier interpolates
    linearly between 1.0 and the full contract multiplier.
    """
    if position.direction is Direction.LONG:
        price_diff = price - position.entry_price
    else:
        price_diff = position.entry_price - price

    pnl_percent = (price_diff / position.entry_price) * 100
    pnl = position.stake * (pnl_percent / 100)

    target_diff = abs(position.strike_price - position.entry_price)
    raw_progress = max(0.0, price_diff) / target_diff if target_diff > 0 else 0.0
    current_multiplier = 1 + position.target_roi * min(1.0, raw_progress)

    return LiveValuation(
        pnl=pnl,
        pnl_percent=pnl_percent,
        current_multiplier=current_multiplier,
        progress=min(100.0, raw_progress * 100),
        last_price=price,
    )


class PositionManager:
    """Owns at most one position and its live valuation.

    Not thread safe. Ticks and user actions are expected on one thread.
    """

    def __init__(self, validator: StakeValidator, *, contract_window_hours: int = 24) -> None:
        self._validator = validator
        self._window = timedelta(hours=contract_window_hours)
        self._position: Position | None = None
        self._valuation: LiveValuation = _FLAT_VALUATION
        self._logger = get_logger("structured_trade.exec.position")

    @property
    def position(self) -> Position | None:
        return self._position

    @property
    def status(self) -> PositionStatus:
        return PositionStatus.FLAT if self._position is None else PositionStatus.OPEN

    @property
    def is_open(self) -> bool:
        return self._position is not None

    def open(
        self,
        direction: Direction,
        risk_level: int,
        stake: float,
        current_price: float,
    ) -> Position:
        """Open a position at the current price."""
        if self._position is not None:
            raise PositionAlreadyOpenError()
        price = ensure_valid_price(current_price)
        check = self._validator.validate(stake)
        if not check.allowed and check.error is not None:
            raise StakeRejectedError(check.error, check.message)

        contract = price_contract(direction, risk_level, price)
        opened_at = datetime.now(timezone.utc)
        position = Position(
            direction=contract.direction,
            risk_level=contract.risk_level,
            entry_price=price,
            strike_price=contract.strike_price,
            stake=float(stake),
            target_roi=contract.target_roi,
            multiplier=contract.multiplier,
            win_probability=contract.win_probability,
            opened_at=opened_at,
            expires_at=opened_at + self._window,
        )
        self._position = position
        self._valuation = compute_valuation(position, price)
        log_position_event(
            self._logger,
            "position_opened",
            direction=position.direction.value,
            entry_price=position.entry_price,
            strike_price=position.strike_price,
            stake=position.stake,
            multiplier=round(position.multiplier, 4),
        )
        return position

    def close(self) -> dict[str, Any]:
        """Discard the open position. No settlement is performed."""
        active = self._position
        if active is None:
            raise NoOpenPositionError()

        valuation = self._valuation
        self._position = None
        self._valuation = _FLAT_VALUATION
        log_position_event(
            self._logger,
            "position_closed",
            direction=active.direction.value,
            entry_price=active.entry_price,
            last_price=valuation.last_price,
            pnl=round(valuation.pnl, 2),
        )
        return {
            "action": "close",
            "direction": active.direction.value,
            "stake": active.stake,
            "entry_price": active.entry_price,
            "strike_price": active.strike_price,
            "last_price": valuation.last_price,
            "pnl": valuation.pnl,
            "pnl_percent": valuation.pnl_percent,
            "current_multiplier": valuation.current_multiplier,
            "progress": valuation.progress,
            "status": "closed",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def on_price_tick(self, new_price: float) -> LiveValuation | None:
        """Recompute the live valuation. Returns None while flat."""
        position = self._position
        if position is None:
            return None
        try:
            price = ensure_valid_price(new_price)
        except InvalidPriceError:
            self._logger.warning(
                "price_tick_ignored",
                price=repr(new_price),
                last_price=self._valuation.last_price,
            )
            return self._valuation
        self._valuation = compute_valuation(position, price)
        return self._valuation

    def live_pnl(self) -> LiveValuation:
        return self._valuation
