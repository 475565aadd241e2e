"""Structured trade engine: priced directional bets with live valuation."""

__version__ = "0.1.0"
