# Schemas module
from stockcast.schemas.schemas import (
    ObservationSchema,
    PredictRequest, PredictionResultSchema, PredictionSummary, PredictionResponse,
    StockInfoResponse, MarketOverviewItem, MarketOverviewResponse,
    ComparisonPoint, ComparisonResponse,
    SeriesUploadResponse,
    Algorithm, Trend, ConfidenceLevel
)

__all__ = [
    "ObservationSchema",
    "PredictRequest", "PredictionResultSchema", "PredictionSummary", "PredictionResponse",
    "StockInfoResponse", "MarketOverviewItem", "MarketOverviewResponse",
    "ComparisonPoint", "ComparisonResponse",
    "SeriesUploadResponse",
    "Algorithm", "Trend", "ConfidenceLevel"
]
