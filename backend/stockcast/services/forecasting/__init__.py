# Forecasting module
from stockcast.services.forecasting.baseline import (
    BaselineForecaster, PredictionResult, to_frame, calculate_volatility, confidence_level,
    moving_average_predict, volume_weighted_predict
)
from stockcast.services.forecasting.regression import LinearRegressionForecaster, linear_regression_predict
from stockcast.services.forecasting.arima import ARIMAStyleForecaster, arima_style_predict, calculate_correlation
from stockcast.services.forecasting.forecaster import ForecasterService, predict_all, summarize_predictions

__all__ = [
    "BaselineForecaster",
    "PredictionResult",
    "to_frame",
    "calculate_volatility",
    "confidence_level",
    "moving_average_predict",
    "volume_weighted_predict",
    "LinearRegressionForecaster",
    "linear_regression_predict",
    "ARIMAStyleForecaster",
    "arima_style_predict",
    "calculate_correlation",
    "ForecasterService",
    "predict_all",
    "summarize_predictions"
]
