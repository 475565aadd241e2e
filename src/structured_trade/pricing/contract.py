"""Contract pricing: strike, target ROI, multiplier and win probability.

All functions are pure. Risk level is clamped to ``[0, 100]``::

    price_gap   = 0.002 + (risk / 100) * 0.05          # 0.2% .. 5.2%
    target_roi  = 0.1 + (risk / 100) ** 2 * 1.9         # 10% .. 200%
    win_prob    = max(20, 65 - risk * 0.4)              # 65% .. 20%
"""

from __future__ import annotations

import math

from structured_trade.errors import InvalidPriceError
from structured_trade.types import Direction, PricedContract

MIN_RISK_LEVEL = 0
MAX_RISK_LEVEL = 100

_BASE_GAP = 0.002
_GAP_SPAN = 0.05
_BASE_ROI = 0.1
_ROI_SPAN = 1.9
_WIN_PROB_START = 65.0
_WIN_PROB_DECAY = 0.4
_WIN_PROB_FLOOR = 20.0


def clamp_risk_level(risk_level: int) -> int:
    """Clamp risk level into the supported range."""
    return int(max(MIN_RISK_LEVEL, min(MAX_RISK_LEVEL, risk_level)))


def ensure_valid_price(price: float) -> float:
    """Return price as float, raising for non-finite or non-positive values."""
    try:
        value = float(price)
    except (TypeError, ValueError) as exc:
        raise InvalidPriceError(f"invalid_price: {price!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise InvalidPriceError(f"invalid_price: {price!r}")
    return value


def price_gap_percentage(risk_level: int) -> float:
    """Distance from current price to strike, as a fraction."""
    risk = clamp_risk_level(risk_level)
    return _BASE_GAP + (risk / 100) * _GAP_SPAN


def target_roi(risk_level: int) -> float:
    """Return achieved at full maturity; convex in risk level."""
    risk = clamp_risk_level(risk_level)
    return _BASE_ROI + (risk / 100) ** 2 * _ROI_SPAN


def win_probability(risk_level: int) -> float:
    """Heuristic success estimate in percent. Display only."""
    risk = clamp_risk_level(risk_level)
    return max(_WIN_PROB_FLOOR, _WIN_PROB_START - risk * _WIN_PROB_DECAY)


def strike_price(direction: Direction, risk_level: int, current_price: float) -> float:
    """Target price on the favorable side of current price."""
    price = ensure_valid_price(current_price)
    gap = price_gap_percentage(risk_level)
    if Direction(direction) is Direction.LONG:
        return price * (1 + gap)
    return price * (1 - gap)


def price_contract(direction: Direction, risk_level: int, current_price: float) -> PricedContract:
    """Price a contract for the given inputs."""
    side = Direction(direction)
    price = ensure_valid_price(current_price)
    risk = clamp_risk_level(risk_level)
    roi = target_roi(risk)
    return PricedContract(
        direction=side,
        risk_level=risk,
        current_price=price,
        price_gap_pct=price_gap_percentage(risk),
        strike_price=strike_price(side, risk, price),
        target_roi=roi,
        multiplier=1 + roi,
        win_probability=win_probability(risk),
    )


def potential_payout(stake: float, contract: PricedContract) -> float:
    """Stake times the full multiplier."""
    return float(stake) * contract.multiplier


def win_chance_label(probability: float) -> str:
    if probability >= 50:
        return "High Chance"
    if probability >= 35:
        return "Medium Chance"
    return "Low Chance"
