"""
Linear Regression Prediction.

Ordinary least squares over the whole series, x = day index, y = price.
Closed-form two-parameter fit; no sklearn, no statsmodels.
"""

import logging
import numpy as np

from stockcast.schemas import Algorithm, Trend
from stockcast.services.forecasting.baseline import PredictionResult, to_frame

logger = logging.getLogger(__name__)


class LinearRegressionForecaster:
    """
    Fits ``price = slope * index + intercept`` and extrapolates.

    The "current" prediction is already one step past the last observation
    (x = n); the next-day prediction is x = n + 1.

    Confidence is R² clamped to [MIN_CONFIDENCE, MAX_CONFIDENCE]. A flat
    series has no variance to explain and is reported at MAX_CONFIDENCE.
    """

    MIN_CONFIDENCE = 0.3
    MAX_CONFIDENCE = 0.95

    def __init__(self, data):
        self.data = to_frame(data)

    def fit(self):
        """
        Return (slope, intercept, r_squared) for the series.
        """
        y = self.data['price'].to_numpy()
        n = len(y)
        x = np.arange(n, dtype=float)

        sum_x = x.sum()
        sum_y = y.sum()
        sum_xy = (x * y).sum()
        sum_xx = (x * x).sum()

        denominator = n * sum_xx - sum_x * sum_x
        if denominator == 0 or y.max() == y.min():
            # Single point or identical prices: flat line through the mean
            logger.debug(f"Degenerate regression input (n={n}), using flat fit")
            return 0.0, float(sum_y / n), 1.0

        slope = (n * sum_xy - sum_x * sum_y) / denominator
        intercept = (sum_y - slope * sum_x) / n

        y_mean = sum_y / n
        total_sum_squares = ((y - y_mean) ** 2).sum()
        residual_sum_squares = ((y - (slope * x + intercept)) ** 2).sum()
        r_squared = 1 - residual_sum_squares / total_sum_squares

        return float(slope), float(intercept), float(r_squared)

    def predict(self) -> PredictionResult:
        slope, intercept, r_squared = self.fit()
        n = len(self.data)

        if slope > 0:
            trend = Trend.BULLISH
        elif slope < 0:
            trend = Trend.BEARISH
        else:
            trend = Trend.NEUTRAL

        return PredictionResult(
            algorithm=Algorithm.LINEAR_REGRESSION,
            predicted_price=slope * n + intercept,
            confidence=max(self.MIN_CONFIDENCE, min(self.MAX_CONFIDENCE, r_squared)),
            next_day_prediction=slope * (n + 1) + intercept,
            trend=trend
        )


def linear_regression_predict(series) -> PredictionResult:
    return LinearRegressionForecaster(series).predict()
