from __future__ import annotations

import math

import pytest

from structured_trade.config import Settings
from structured_trade.exec.orders import execute_order, preview_order
from structured_trade.exec.position import PositionManager
from structured_trade.risk.rules import StakeValidator
from structured_trade.types import Direction, StakeError


def _setup(balance: float = 10_000.0) -> tuple[PositionManager, StakeValidator]:
    validator = StakeValidator(Settings(available_balance=balance))
    return PositionManager(validator), validator


def test_execute_order_opens_position() -> None:
    manager, validator = _setup()
    result = execute_order(
        manager,
        validator,
        direction=Direction.LONG,
        risk_level=20,
        stake=1_000,
        current_price=64_230.50,
    )
    assert result.ok
    assert result.status == "opened"
    assert result.position is manager.position
    assert result.position is not None
    assert result.position.entry_price == pytest.approx(64_230.50)


def test_execute_order_returns_validator_error_unchanged() -> None:
    manager, validator = _setup(balance=100)
    result = execute_order(
        manager,
        validator,
        direction=Direction.LONG,
        risk_level=20,
        stake=500,
        current_price=100.0,
    )
    assert not result.ok
    assert result.status == "stake_rejected"
    assert result.stake_error is StakeError.INSUFFICIENT_BALANCE
    assert result.message == "Exceeds available balance"
    assert manager.position is None


def test_execute_order_second_position_rejected() -> None:
    manager, validator = _setup()
    kwargs = {"direction": Direction.SHORT, "risk_level": 50, "stake": 100, "current_price": 500.0}
    assert execute_order(manager, validator, **kwargs).ok
    second = execute_order(manager, validator, **kwargs)
    assert second.status == "position_already_open"
    assert second.position is None


def test_execute_order_invalid_price() -> None:
    manager, validator = _setup()
    result = execute_order(
        manager,
        validator,
        direction=Direction.LONG,
        risk_level=20,
        stake=100,
        current_price=math.inf,
    )
    assert result.status == "invalid_price"
    assert not manager.is_open


def test_preview_does_not_open() -> None:
    manager, validator = _setup()
    preview = preview_order(
        validator,
        direction=Direction.LONG,
        risk_level=20,
        stake=1_000,
        current_price=64_230.50,
    )
    assert preview.is_valid
    assert preview.potential_payout == pytest.approx(1_176.0)
    assert preview.win_chance == "High Chance"
    assert not manager.is_open


def test_preview_reports_stake_error() -> None:
    _, validator = _setup()
    preview = preview_order(
        validator,
        direction=Direction.SHORT,
        risk_level=100,
        stake=5,
        current_price=100.0,
    )
    assert not preview.is_valid
    assert preview.stake_check.error is StakeError.BELOW_MINIMUM
    assert preview.win_chance == "Low Chance"
