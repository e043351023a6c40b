"""
Static Market Data Service.

Serves the bundled stock snapshot (name, current price, daily change and
price/volume history) for the symbols the dashboard knows about.
No live feed: the file is read once per repository.
"""

import json
import logging
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from stockcast.config.settings import settings
from stockcast.schemas import (
    ObservationSchema, StockInfoResponse,
    MarketOverviewItem, MarketOverviewResponse,
    ComparisonPoint, ComparisonResponse
)
from stockcast.services.exceptions import MarketDataError, SymbolNotFoundError

logger = logging.getLogger(__name__)


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().upper()


class StockDataRepository:
    """
    Read-only access to the stock data file.

    File layout (keyed by symbol):
        {"AAPL": {"name": ..., "symbol": ..., "currentPrice": ...,
                  "change": ..., "changePercent": ...,
                  "historical": [{"date": ..., "price": ..., "volume": ...}]}}
    """

    def __init__(self, data_path: Optional[Path] = None):
        self.data_path = Path(data_path or settings.STOCK_DATA_PATH)
        self._stocks: Optional[Dict[str, dict]] = None

    def _load(self) -> Dict[str, dict]:
        if self._stocks is not None:
            return self._stocks

        try:
            raw = json.loads(self.data_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load stock data from {self.data_path}: {e}")
            raise MarketDataError(f"Stock data unavailable: {e}") from e

        if not isinstance(raw, dict):
            logger.error(f"Stock data in {self.data_path} is not a symbol mapping")
            raise MarketDataError("Stock data must be a mapping of symbol to record")

        self._stocks = {normalize_symbol(symbol): record for symbol, record in raw.items()}
        logger.info(f"Loaded {len(self._stocks)} symbols from {self.data_path}")
        return self._stocks

    def list_symbols(self) -> List[str]:
        return list(self._load().keys())

    def get_stock(self, symbol: str) -> StockInfoResponse:
        """
        Look up one symbol (case-insensitive).

        Raises:
            SymbolNotFoundError: unknown symbol
            MarketDataError: record is malformed
        """
        stocks = self._load()
        key = normalize_symbol(symbol)
        if key not in stocks:
            logger.info(f"Unknown symbol requested: {symbol!r}")
            raise SymbolNotFoundError(key, list(stocks.keys()))

        record = stocks[key]
        try:
            return StockInfoResponse(
                name=record["name"],
                symbol=record.get("symbol", key),
                current_price=record["currentPrice"],
                change=record["change"],
                change_percent=record["changePercent"],
                historical=record["historical"]
            )
        except (KeyError, TypeError, ValidationError) as e:
            logger.error(f"Malformed stock record for {key}: {e}")
            raise MarketDataError(f"Malformed stock record for {key}") from e

    def get_series(self, symbol: str) -> List[ObservationSchema]:
        return self.get_stock(symbol).historical

    def market_overview(self) -> MarketOverviewResponse:
        """Current price, daily change and last volume for every symbol."""
        stocks = [self.get_stock(symbol) for symbol in self.list_symbols()]
        total_price = sum(s.current_price for s in stocks)

        items = []
        for stock in stocks:
            last_volume = stock.historical[-1].volume if stock.historical else 0
            items.append(MarketOverviewItem(
                symbol=stock.symbol,
                name=stock.name,
                current_price=stock.current_price,
                change_percent=stock.change_percent,
                volume=last_volume,
                price_share=round(stock.current_price / total_price, 4) if total_price else 0.0
            ))

        return MarketOverviewResponse(
            generated_at=datetime.utcnow(),
            total_symbols=len(items),
            advancing=sum(1 for i in items if i.change_percent >= 0),
            declining=sum(1 for i in items if i.change_percent < 0),
            items=items
        )

    def compare(self, symbols: Optional[List[str]] = None) -> ComparisonResponse:
        """
        Percent change from each symbol's first price, aligned by day index.

        Symbols with shorter history drop out of later points.
        """
        if symbols:
            keys = [normalize_symbol(s) for s in symbols if s.strip()]
        else:
            keys = self.list_symbols()

        histories = {key: self.get_series(key) for key in keys}
        max_length = max((len(h) for h in histories.values()), default=0)

        points = []
        for i in range(max_length):
            changes = {}
            point_date = None
            for key, history in histories.items():
                if i >= len(history):
                    continue
                first_price = history[0].price
                changes[key] = round((history[i].price - first_price) / first_price * 100, 4)
                if point_date is None:
                    point_date = history[i].date
            points.append(ComparisonPoint(day_index=i, date=point_date, changes=changes))

        return ComparisonResponse(symbols=list(histories.keys()), points=points)


@lru_cache()
def get_repository() -> StockDataRepository:
    """Shared repository, loaded once per process."""
    return StockDataRepository()
