# Services module
from stockcast.services.exceptions import (
    PredictionError, InvalidSeriesError, SymbolNotFoundError, MarketDataError
)
from stockcast.services.market_data import StockDataRepository, get_repository
from stockcast.services.csv_upload import SeriesUploadService, SeriesParseResult
from stockcast.services.forecasting import ForecasterService, predict_all, summarize_predictions

__all__ = [
    "PredictionError",
    "InvalidSeriesError",
    "SymbolNotFoundError",
    "MarketDataError",
    "StockDataRepository",
    "get_repository",
    "SeriesUploadService",
    "SeriesParseResult",
    "ForecasterService",
    "predict_all",
    "summarize_predictions"
]
