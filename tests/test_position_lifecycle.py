from __future__ import annotations

import math
from dataclasses import FrozenInstanceError
from datetime import UTC, datetime, timedelta

import pytest

from structured_trade.config import Settings
from structured_trade.errors import (
    InvalidPriceError,
    NoOpenPositionError,
    PositionAlreadyOpenError,
    StakeRejectedError,
)
from structured_trade.exec.position import PositionManager, compute_valuation
from structured_trade.risk.rules import StakeValidator
from structured_trade.types import Direction, LiveValuation, Position, PositionStatus, StakeError


def _manager(balance: float = 10_000.0) -> PositionManager:
    return PositionManager(StakeValidator(Settings(available_balance=balance)))


def _position(direction: Direction, entry: float, strike: float, stake: float, roi: float) -> Position:
    now = datetime.now(UTC)
    return Position(
        direction=direction,
        risk_level=50,
        entry_price=entry,
        strike_price=strike,
        stake=stake,
        target_roi=roi,
        multiplier=1 + roi,
        win_probability=45.0,
        opened_at=now,
        expires_at=now + timedelta(hours=24),
    )


def test_valuation_favorable_half_way() -> None:
    position = _position(Direction.LONG, 100.0, 110.0, 1_000.0, 0.5)
    valuation = compute_valuation(position, 105.0)
    assert valuation.pnl_percent == pytest.approx(5.0)
    assert valuation.pnl == pytest.approx(50.0)
    assert valuation.current_multiplier == pytest.approx(1.25)
    assert valuation.progress == pytest.approx(50.0)
    assert not valuation.target_reached


def test_valuation_adverse_clamps_progress() -> None:
    position = _position(Direction.LONG, 100.0, 110.0, 1_000.0, 0.5)
    valuation = compute_valuation(position, 95.0)
    assert valuation.pnl == pytest.approx(-50.0)
    assert valuation.progress == 0.0
    assert valuation.current_multiplier == pytest.approx(1.0)


def test_valuation_overshoot_caps_multiplier() -> None:
    position = _position(Direction.LONG, 100.0, 110.0, 1_000.0, 0.5)
    valuation = compute_valuation(position, 130.0)
    assert valuation.progress == pytest.approx(100.0)
    assert valuation.current_multiplier == pytest.approx(1.5)
    assert valuation.pnl == pytest.approx(300.0)
    assert valuation.target_reached


def test_valuation_short_direction() -> None:
    position = _position(Direction.SHORT, 100.0, 90.0, 1_000.0, 0.5)
    down = compute_valuation(position, 95.0)
    assert down.pnl == pytest.approx(50.0)
    assert down.progress == pytest.approx(50.0)
    up = compute_valuation(position, 105.0)
    assert up.pnl == pytest.approx(-50.0)
    assert up.progress == 0.0


def test_valuation_degenerate_target_distance() -> None:
    position = _position(Direction.LONG, 100.0, 100.0, 1_000.0, 0.5)
    valuation = compute_valuation(position, 120.0)
    assert valuation.progress == 0.0
    assert valuation.current_multiplier == pytest.approx(1.0)
    assert valuation.pnl == pytest.approx(200.0)


def test_open_tick_close_cycle() -> None:
    manager = _manager()
    assert manager.status is PositionStatus.FLAT

    position = manager.open(Direction.LONG, 20, 1_000, 64_230.50)
    assert manager.status is PositionStatus.OPEN
    assert position.entry_price == pytest.approx(64_230.50)
    assert position.strike_price == pytest.approx(64_230.50 * 1.012)
    assert position.multiplier == pytest.approx(1.176)
    assert position.expires_at - position.opened_at == timedelta(hours=24)

    opened = manager.live_pnl()
    assert opened.pnl == 0.0
    assert opened.current_multiplier == pytest.approx(1.0)

    valuation = manager.on_price_tick(position.strike_price)
    assert valuation is not None
    assert valuation.progress == pytest.approx(100.0)
    assert valuation.current_multiplier == pytest.approx(1.176)
    # Reaching the target never settles the position.
    assert manager.is_open

    summary = manager.close()
    assert summary["status"] == "closed"
    assert summary["pnl"] == pytest.approx(1_000 * 0.012)
    assert manager.status is PositionStatus.FLAT
    assert manager.position is None
    assert manager.live_pnl() == LiveValuation()


def test_open_twice_fails() -> None:
    manager = _manager()
    manager.open(Direction.SHORT, 40, 100, 2_000.0)
    with pytest.raises(PositionAlreadyOpenError):
        manager.open(Direction.LONG, 10, 100, 2_000.0)
    assert manager.position is not None
    assert manager.position.direction is Direction.SHORT


def test_close_while_flat_fails() -> None:
    with pytest.raises(NoOpenPositionError):
        _manager().close()


def test_open_rejects_invalid_stake() -> None:
    manager = _manager(balance=100)
    with pytest.raises(StakeRejectedError) as exc_info:
        manager.open(Direction.LONG, 20, 500, 100.0)
    assert exc_info.value.reason is StakeError.INSUFFICIENT_BALANCE
    assert manager.status is PositionStatus.FLAT


def test_open_rejects_invalid_price() -> None:
    manager = _manager()
    with pytest.raises(InvalidPriceError):
        manager.open(Direction.LONG, 20, 500, math.nan)
    assert not manager.is_open


def test_tick_while_flat_is_noop() -> None:
    manager = _manager()
    assert manager.on_price_tick(123.0) is None
    assert manager.live_pnl() == LiveValuation()


def test_live_pnl_is_idempotent() -> None:
    manager = _manager()
    manager.open(Direction.LONG, 50, 1_000, 100.0)
    manager.on_price_tick(101.0)
    first = manager.live_pnl()
    second = manager.live_pnl()
    assert first == second


@pytest.mark.parametrize("bad_tick", [math.nan, math.inf, 0.0, -5.0])
def test_malformed_tick_keeps_last_valuation(bad_tick: float) -> None:
    manager = _manager()
    manager.open(Direction.LONG, 50, 1_000, 100.0)
    good = manager.on_price_tick(102.0)
    after = manager.on_price_tick(bad_tick)
    assert after == good
    assert manager.live_pnl() == good
    assert manager.live_pnl().last_price == pytest.approx(102.0)


def test_reopen_after_close() -> None:
    manager = _manager()
    manager.open(Direction.LONG, 0, 50, 100.0)
    manager.close()
    position = manager.open(Direction.SHORT, 100, 50, 200.0)
    assert position.direction is Direction.SHORT
    assert position.strike_price == pytest.approx(200.0 * 0.948)


def test_opened_position_is_immutable() -> None:
    manager = _manager()
    position = manager.open(Direction.LONG, 20, 1_000, 100.0)
    with pytest.raises(FrozenInstanceError):
        position.entry_price = 0.0  # type: ignore[misc]
    with pytest.raises(FrozenInstanceError):
        manager.position.direction = Direction.SHORT  # type: ignore[union-attr, misc]
    valuation = manager.on_price_tick(101.0)
    assert valuation is not None
    assert valuation.pnl == pytest.approx(10.0)
