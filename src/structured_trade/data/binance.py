"""Binance futures ticker as a live price source."""

from __future__ import annotations

import math
from typing import Any

from binance.client import Client  # type: ignore[import-untyped]
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from structured_trade.config import Settings
from structured_trade.errors import PriceFeedError
from structured_trade.utils.logging import get_logger


class BinancePriceSource:
    """Read-only last-price feed for one futures symbol."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._symbol = settings.symbol
        self._logger = get_logger("structured_trade.data.binance")
        try:
            # Client pings the exchange on construction.
            self._client = Client(
                api_key=settings.binance_api_key or None,
                api_secret=settings.binance_api_secret or None,
                testnet=settings.binance_testnet,
            )
        except Exception as exc:  # noqa: BLE001 - normalize client/transport errors.
            raise PriceFeedError(f"client_init_failed: {exc}") from exc
        self._price = self._fetch_price()

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def current_price(self) -> float:
        return self._price

    def tick(self) -> float:
        """Fetch the latest price. Keeps the previous price on failure."""
        try:
            self._price = self._fetch_price()
        except PriceFeedError as exc:
            self._logger.warning(
                "price_fetch_failed",
                symbol=self._symbol,
                error=str(exc),
                kept_price=self._price,
            )
        return self._price

    @retry(
        retry=retry_if_exception_type(PriceFeedError),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    def _fetch_price(self) -> float:
        try:
            payload: dict[str, Any] = self._client.futures_symbol_ticker(symbol=self._symbol)
        except Exception as exc:  # noqa: BLE001 - normalize client/transport errors.
            raise PriceFeedError(f"ticker_request_failed: {exc}") from exc

        raw = payload.get("price") if isinstance(payload, dict) else None
        try:
            price = float(raw) if raw is not None else math.nan
        except (TypeError, ValueError):
            price = math.nan
        if not math.isfinite(price) or price <= 0:
            raise PriceFeedError(f"invalid_ticker_price: {raw!r}")
        return price
