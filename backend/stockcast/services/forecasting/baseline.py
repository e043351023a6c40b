"""
Baseline Prediction Models.

Start simple, stay boring:
1. Moving average of the last N closes, with simulated next-day noise
2. Volume weighted average price with high-volume momentum

Every other method gets compared against these two.
"""

import logging
import pandas as pd
import numpy as np
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from stockcast.schemas import Algorithm, Trend, ConfidenceLevel
from stockcast.services.exceptions import InvalidSeriesError

logger = logging.getLogger(__name__)

SERIES_COLUMNS = ['date', 'price', 'volume']


@dataclass(frozen=True)
class PredictionResult:
    """Output of a single prediction method."""
    algorithm: Algorithm
    predicted_price: float
    confidence: float
    next_day_prediction: float
    trend: Trend

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return confidence_level(self.confidence)


def _as_record(observation: Any) -> dict:
    if isinstance(observation, Mapping):
        return {col: observation[col] for col in SERIES_COLUMNS}
    return {col: getattr(observation, col) for col in SERIES_COLUMNS}


def to_frame(series: Iterable[Any]) -> pd.DataFrame:
    """
    Convert a series of observations to a DataFrame.

    Accepts a DataFrame with ['date', 'price', 'volume'] columns, or any
    iterable of mappings / objects exposing those keys. The caller's data is
    never modified; a new frame is always returned.

    Raises:
        InvalidSeriesError: if the series is empty or lacks a column
    """
    if isinstance(series, pd.DataFrame):
        missing = [col for col in SERIES_COLUMNS if col not in series.columns]
        if missing:
            raise InvalidSeriesError(f"Series is missing columns: {', '.join(missing)}")
        data = series[SERIES_COLUMNS].copy()
    else:
        try:
            records = [_as_record(obs) for obs in series]
        except (KeyError, AttributeError) as e:
            raise InvalidSeriesError(f"Observation is missing field {e}") from e
        data = pd.DataFrame.from_records(records, columns=SERIES_COLUMNS)

    if len(data) == 0:
        raise InvalidSeriesError("Series is empty: at least one observation is required")

    data['price'] = data['price'].astype(float)
    data['volume'] = data['volume'].astype(float)
    return data.reset_index(drop=True)


def calculate_volatility(prices: np.ndarray) -> float:
    """Population standard deviation of prices (not annualized)."""
    return float(np.std(prices))


def confidence_level(confidence: float) -> ConfidenceLevel:
    if confidence >= 0.8:
        return ConfidenceLevel.HIGH
    if confidence >= 0.6:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def classify_move(first: float, last: float, threshold: float) -> Trend:
    """
    Label the move from *first* to *last*.

    Moves smaller than *threshold* (absolute price units) are neutral.
    """
    if abs(last - first) < threshold:
        return Trend.NEUTRAL
    return Trend.BULLISH if last > first else Trend.BEARISH


class BaselineForecaster:
    """
    Simple baseline prediction models.
    Stateless apart from a private copy of the series.
    """

    DEFAULT_PERIOD = 10
    DEFAULT_VOLUME_WINDOW = 10
    TREND_LOOKBACK = 5
    NEUTRAL_THRESHOLD = 1.0
    MOMENTUM_FACTOR = 0.3
    VOLUME_CONFIDENCE = 0.75

    def __init__(self, data):
        """
        Initialize with a price series.

        Args:
            data: DataFrame with columns ['date', 'price', 'volume'], or a
                  sequence of observations
        """
        self.data = to_frame(data)

    def moving_average_predict(
        self,
        period: int = DEFAULT_PERIOD,
        rng: Optional[Any] = None
    ) -> PredictionResult:
        """
        Moving average of the last *period* prices.

        Next-day prediction adds uniform noise of +/- one volatility around
        the mean. Pass *rng* (anything with ``.random()`` returning [0, 1))
        to pin the draw; otherwise a fresh numpy generator is used.
        """
        if period < 1:
            raise ValueError(f"period must be positive, got {period}")

        prices = self.data['price'].tail(period).to_numpy()
        average = float(prices.mean())

        recent_prices = prices[-self.TREND_LOOKBACK:]
        trend = classify_move(recent_prices[0], recent_prices[-1], self.NEUTRAL_THRESHOLD)

        if rng is None:
            rng = np.random.default_rng()
        volatility = calculate_volatility(prices)
        next_day = average + (rng.random() - 0.5) * volatility * 2

        return PredictionResult(
            algorithm=Algorithm.MOVING_AVERAGE,
            predicted_price=average,
            confidence=min(0.85, 0.6 + period / 20),
            next_day_prediction=float(next_day),
            trend=trend
        )

    def volume_weighted_predict(self, window: int = DEFAULT_VOLUME_WINDOW) -> PredictionResult:
        """
        Volume weighted average price over the last *window* observations.

        Momentum comes from observations traded above the window's mean
        volume: their average price pulls the next-day prediction.
        """
        if window < 1:
            raise ValueError(f"window must be positive, got {window}")

        recent = self.data.tail(window)
        prices = recent['price'].to_numpy()
        volumes = recent['volume'].to_numpy()
        total_volume = volumes.sum()

        if total_volume == 0:
            logger.debug("Zero volume in window, using simple mean price")
            weighted_price = float(prices.mean())
        else:
            weighted_price = float(np.dot(prices, volumes) / total_volume)

        high_volume_prices = prices[volumes > total_volume / len(recent)]
        if len(high_volume_prices) == 0:
            # Flat volume: no momentum signal
            avg_high_volume_price = weighted_price
        else:
            avg_high_volume_price = float(high_volume_prices.mean())

        next_day = weighted_price + (avg_high_volume_price - weighted_price) * self.MOMENTUM_FACTOR

        return PredictionResult(
            algorithm=Algorithm.VOLUME_WEIGHTED,
            predicted_price=weighted_price,
            confidence=self.VOLUME_CONFIDENCE,
            next_day_prediction=next_day,
            trend=classify_move(weighted_price, avg_high_volume_price, self.NEUTRAL_THRESHOLD)
        )


def moving_average_predict(
    series,
    period: int = BaselineForecaster.DEFAULT_PERIOD,
    rng: Optional[Any] = None
) -> PredictionResult:
    return BaselineForecaster(series).moving_average_predict(period=period, rng=rng)


def volume_weighted_predict(
    series,
    window: int = BaselineForecaster.DEFAULT_VOLUME_WINDOW
) -> PredictionResult:
    return BaselineForecaster(series).volume_weighted_predict(window=window)
