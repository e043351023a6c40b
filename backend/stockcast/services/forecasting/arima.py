"""
ARIMA-Style Prediction.

Not a fitted ARIMA model: one round of differencing plus an AR(1)-like
pull of the last change towards the mean change, scaled by the lag-1
autocorrelation of the differences.

Needs at least 3 prices. Shorter series fall back to the moving average.
"""

import logging
import numpy as np
from typing import Any, Optional

from stockcast.schemas import Algorithm, Trend
from stockcast.services.forecasting.baseline import (
    BaselineForecaster, PredictionResult, calculate_volatility, to_frame
)

logger = logging.getLogger(__name__)


def calculate_correlation(x: np.ndarray, y: np.ndarray) -> float:
    """
    Pearson correlation of the first min(len(x), len(y)) elements.

    Returns 0 when either side has no variance or there is no data.
    """
    n = min(len(x), len(y))
    if n == 0:
        return 0.0

    dx = x[:n] - x[:n].mean()
    dy = y[:n] - y[:n].mean()
    denominator = np.sqrt((dx * dx).sum() * (dy * dy).sum())
    if denominator == 0:
        return 0.0
    return float((dx * dy).sum() / denominator)


class ARIMAStyleForecaster:
    """
    Differenced autoregressive heuristic.

    predicted_diff = mean_diff + corr * (last_diff - mean_diff)

    Requirements:
    - Minimum 3 prices (2 differences) for the lag correlation
    - Falls back to the moving average result, label included
    """

    MIN_POINTS = 3
    DAMPING_FACTOR = 0.7
    TREND_THRESHOLD = 0.5

    def __init__(self, data):
        self.data = to_frame(data)

    def can_use_arima(self) -> bool:
        return len(self.data) >= self.MIN_POINTS

    def get_model_used(self) -> Algorithm:
        """Return which method produces the result for this series."""
        return Algorithm.ARIMA_STYLE if self.can_use_arima() else Algorithm.MOVING_AVERAGE

    def predict(self, rng: Optional[Any] = None) -> PredictionResult:
        if not self.can_use_arima():
            logger.debug(
                f"ARIMA-style needs {self.MIN_POINTS} points, got {len(self.data)}; "
                f"falling back to moving average"
            )
            return BaselineForecaster(self.data).moving_average_predict(rng=rng)

        prices = self.data['price'].to_numpy()
        differences = np.diff(prices)

        # Autoregressive component
        lag1 = differences[:-1]
        lag0 = differences[1:]
        correlation = calculate_correlation(lag1, lag0)
        mean_diff = differences.mean()

        predicted_diff = float(mean_diff + correlation * (differences[-1] - mean_diff))
        predicted_price = float(prices[-1]) + predicted_diff
        next_day = predicted_price + predicted_diff * self.DAMPING_FACTOR

        volatility = calculate_volatility(prices)
        confidence = max(0.4, min(0.9, 0.8 - volatility / 10))

        if predicted_diff > self.TREND_THRESHOLD:
            trend = Trend.BULLISH
        elif predicted_diff < -self.TREND_THRESHOLD:
            trend = Trend.BEARISH
        else:
            trend = Trend.NEUTRAL

        return PredictionResult(
            algorithm=Algorithm.ARIMA_STYLE,
            predicted_price=predicted_price,
            confidence=confidence,
            next_day_prediction=next_day,
            trend=trend
        )


def arima_style_predict(series, rng: Optional[Any] = None) -> PredictionResult:
    return ARIMAStyleForecaster(series).predict(rng=rng)
