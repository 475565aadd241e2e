"""Order execution: validate a stake, then open the position."""

from __future__ import annotations

from structured_trade.errors import InvalidPriceError, PositionAlreadyOpenError, StakeRejectedError
from structured_trade.exec.position import PositionManager
from structured_trade.pricing.contract import potential_payout, price_contract, win_chance_label
from structured_trade.risk.rules import StakeValidator
from structured_trade.types import Direction, OrderPreview, OrderResult
from structured_trade.utils.logging import get_logger, log_order_execution, log_risk_event


def preview_order(
    validator: StakeValidator,
    *,
    direction: Direction,
    risk_level: int,
    stake: float,
    current_price: float,
) -> OrderPreview:
    """Quote an order without touching position state."""
    contract = price_contract(direction, risk_level, current_price)
    return OrderPreview(
        contract=contract,
        stake=float(stake),
        stake_check=validator.validate(stake),
        potential_payout=potential_payout(stake, contract),
        win_chance=win_chance_label(contract.win_probability),
    )


def execute_order(
    manager: PositionManager,
    validator: StakeValidator,
    *,
    direction: Direction,
    risk_level: int,
    stake: float,
    current_price: float,
) -> OrderResult:
    """Open a position from user input, returning the outcome as a value."""
    logger = get_logger("structured_trade.exec.orders")
    side = Direction(direction)

    check = validator.validate(stake)
    if not check.allowed:
        log_risk_event(
            logger,
            event_type="stake_rejected",
            action="block_order",
            reason=check.error.value if check.error else None,
            stake=stake,
            available_balance=validator.available_balance,
        )
        result = OrderResult(
            status="stake_rejected",
            stake_error=check.error,
            message=check.message,
        )
    else:
        try:
            position = manager.open(side, risk_level, stake, current_price)
        except PositionAlreadyOpenError as exc:
            result = OrderResult(status="position_already_open", message=str(exc))
        except InvalidPriceError as exc:
            result = OrderResult(status="invalid_price", message=str(exc))
        except StakeRejectedError as exc:
            result = OrderResult(
                status="stake_rejected",
                stake_error=exc.reason,
                message=str(exc),
            )
        else:
            result = OrderResult(status="opened", position=position)

    log_order_execution(
        logger,
        direction=side.value,
        risk_level=risk_level,
        stake=stake,
        price=result.position.entry_price if result.position else None,
        status=result.status,
    )
    return result
