"""
Service-level exceptions.

The API layer maps these to HTTP status codes; nothing below the routes
knows about HTTP.
"""

from typing import List


class PredictionError(Exception):
    """Base class for prediction service errors."""


class InvalidSeriesError(PredictionError, ValueError):
    """Series is empty or otherwise unusable for a prediction method."""


class SymbolNotFoundError(PredictionError, LookupError):
    """Requested symbol is not in the market data store."""

    def __init__(self, symbol: str, available: List[str]):
        self.symbol = symbol
        self.available = list(available)
        super().__init__(
            "Stock symbol not found in our database. "
            f"Available symbols: {', '.join(self.available)}"
        )


class MarketDataError(PredictionError):
    """Static market data file is missing or malformed."""
