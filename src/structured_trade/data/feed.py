"""Price sources driving the position manager."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

import numpy as np

from structured_trade.config import Settings


class PriceSource(Protocol):
    """Anything exposing a current price that advances on tick."""

    @property
    def current_price(self) -> float:
        """Most recent price."""

    def tick(self) -> float:
        """Advance to the next price and return it."""


class SequencePriceSource:
    """Deterministic replay of a fixed price sequence.

    The first value is the current price before any tick. Once exhausted the
    last value is repeated.
    """

    def __init__(self, prices: Iterable[float]) -> None:
        self._prices = [float(p) for p in prices]
        if not self._prices:
            raise ValueError("price_sequence_empty")
        self._index = 0

    @property
    def current_price(self) -> float:
        return self._prices[self._index]

    @property
    def exhausted(self) -> bool:
        return self._index >= len(self._prices) - 1

    def tick(self) -> float:
        if not self.exhausted:
            self._index += 1
        return self.current_price


class RandomWalkPriceSource:
    """Simulated ticker moving by a uniform step around the last price."""

    _MIN_PRICE = 0.01
    _CHANGE_DRIFT = 0.1

    def __init__(
        self,
        initial_price: float,
        *,
        step: float = 50.0,
        change_pct: float = 0.0,
        seed: int | None = None,
    ) -> None:
        if initial_price <= 0:
            raise ValueError("initial_price_must_be_positive")
        if step <= 0:
            raise ValueError("step_must_be_positive")
        self._price = float(initial_price)
        self._step = float(step)
        self._change_pct = float(change_pct)
        self._rng = np.random.default_rng(seed)

    @classmethod
    def from_settings(cls, settings: Settings, seed: int | None = None) -> RandomWalkPriceSource:
        return cls(
            settings.initial_price,
            step=settings.random_walk_step,
            change_pct=settings.initial_change_pct,
            seed=seed,
        )

    @property
    def current_price(self) -> float:
        return self._price

    @property
    def change_pct(self) -> float:
        """Decorative 24h change shown next to the price."""
        return self._change_pct

    def tick(self) -> float:
        move = (float(self._rng.random()) - 0.5) * self._step
        self._price = max(self._MIN_PRICE, self._price + move)
        self._change_pct += (float(self._rng.random()) - 0.5) * self._CHANGE_DRIFT
        return self._price
