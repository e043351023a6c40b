"""
Pydantic Schemas for API validation and serialization.

These schemas define the contract between frontend and backend:
- Request validation (observations, prediction requests)
- Response serialization (predictions, consensus, market data)
- CSV upload results
"""

from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator
from enum import Enum


# ============== Enums ==============

class Algorithm(str, Enum):
    """Prediction methods, in the order they are always reported."""
    MOVING_AVERAGE = "Moving Average"
    LINEAR_REGRESSION = "Linear Regression"
    ARIMA_STYLE = "ARIMA-Style"
    VOLUME_WEIGHTED = "Volume Weighted"


class Trend(str, Enum):
    """Direction of a forecast."""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class ConfidenceLevel(str, Enum):
    """Coarse confidence bucket for display."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ============== Series ==============

class ObservationSchema(BaseModel):
    """
    Single price/volume sample.
    Everything the predictor consumes converts to this.
    """
    date: date
    price: float = Field(..., gt=0)
    volume: int = Field(..., ge=0)

    @field_validator('date', mode='before')
    @classmethod
    def parse_date(cls, v):
        """Parse various date formats."""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, date):
            return v
        if isinstance(v, str):
            for fmt in ['%Y-%m-%d', '%d-%m-%Y', '%d/%m/%Y', '%m/%d/%Y', '%Y/%m/%d']:
                try:
                    return datetime.strptime(v.strip(), fmt).date()
                except ValueError:
                    continue
            raise ValueError(f"Cannot parse date: {v}")
        return v

    class Config:
        from_attributes = True


# ============== Prediction ==============

class PredictRequest(BaseModel):
    """
    Request to run all predictors.
    An explicit series wins over a symbol lookup.
    """
    symbol: Optional[str] = Field(None, min_length=1, max_length=10)
    series: Optional[List[ObservationSchema]] = Field(None, min_length=1)
    period: Optional[int] = Field(None, ge=1, le=250)


class PredictionResultSchema(BaseModel):
    """Output of one prediction method."""
    algorithm: Algorithm
    predicted_price: float
    confidence: float = Field(..., ge=0, le=1)
    confidence_level: ConfidenceLevel
    next_day_prediction: float
    trend: Trend

    class Config:
        from_attributes = True


class PredictionSummary(BaseModel):
    """Consensus across all methods."""
    average_prediction: float
    average_next_day_prediction: float
    average_confidence: float
    bullish_signals: int
    bearish_signals: int
    neutral_signals: int
    total_signals: int
    consensus_trend: Trend


class PredictionResponse(BaseModel):
    """Response with all predictions for one series."""
    symbol: Optional[str] = None
    generated_at: datetime
    last_price: float
    data_points: int
    predictions: List[PredictionResultSchema]
    summary: PredictionSummary
    insights: List[str] = []


# ============== Market Data ==============

class StockInfoResponse(BaseModel):
    """Static stock record with its history."""
    name: str
    symbol: str
    current_price: float
    change: float
    change_percent: float
    historical: List[ObservationSchema]


class MarketOverviewItem(BaseModel):
    """One row of the market overview."""
    symbol: str
    name: str
    current_price: float
    change_percent: float
    volume: int
    price_share: float  # current_price / sum of all current prices


class MarketOverviewResponse(BaseModel):
    generated_at: datetime
    total_symbols: int
    advancing: int
    declining: int
    items: List[MarketOverviewItem]


class ComparisonPoint(BaseModel):
    """Percent change from first day, per symbol, at one day index."""
    day_index: int
    date: date
    changes: Dict[str, float]


class ComparisonResponse(BaseModel):
    symbols: List[str]
    points: List[ComparisonPoint]


# ============== CSV Upload ==============

class SeriesUploadResponse(BaseModel):
    """Response after CSV series upload."""
    success: bool
    rows_processed: int
    rows_failed: int
    errors: List[str] = []
    column_mapping: Dict[str, str] = {}
    prediction: Optional[PredictionResponse] = None
