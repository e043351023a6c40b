"""
Forecaster Service - Orchestrates the prediction methods.

Runs every method over one series in a fixed order, then adds a vote-based
consensus and short insights for retail investors.
"""

import logging
import numpy as np
from collections import Counter
from datetime import datetime
from typing import Any, List, Optional, Sequence

from stockcast.config.settings import settings
from stockcast.schemas import (
    PredictionResponse, PredictionResultSchema, PredictionSummary, Trend
)
from stockcast.services.forecasting.baseline import BaselineForecaster, PredictionResult, to_frame
from stockcast.services.forecasting.regression import LinearRegressionForecaster
from stockcast.services.forecasting.arima import ARIMAStyleForecaster
from stockcast.services.market_data import StockDataRepository

logger = logging.getLogger(__name__)


def predict_all(
    series,
    period: int = BaselineForecaster.DEFAULT_PERIOD,
    rng: Optional[Any] = None,
    window: int = BaselineForecaster.DEFAULT_VOLUME_WINDOW
) -> List[PredictionResult]:
    """
    Run every method over *series*.

    Always returns four results in the order: Moving Average, Linear
    Regression, ARIMA-Style, Volume Weighted. *rng* feeds the moving
    average noise (and the ARIMA-style fallback, if taken).
    """
    data = to_frame(series)
    baseline = BaselineForecaster(data)

    return [
        baseline.moving_average_predict(period=period, rng=rng),
        LinearRegressionForecaster(data).predict(),
        ARIMAStyleForecaster(data).predict(rng=rng),
        baseline.volume_weighted_predict(window=window)
    ]


def summarize_predictions(results: Sequence[PredictionResult]) -> PredictionSummary:
    """
    Consensus view across methods.

    The consensus trend is the label with the most votes; a tie for first
    place is neutral.
    """
    if not results:
        return PredictionSummary(
            average_prediction=0.0,
            average_next_day_prediction=0.0,
            average_confidence=0.0,
            bullish_signals=0,
            bearish_signals=0,
            neutral_signals=0,
            total_signals=0,
            consensus_trend=Trend.NEUTRAL
        )

    votes = Counter(r.trend for r in results)
    ranked = votes.most_common()
    if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
        consensus = Trend.NEUTRAL
    else:
        consensus = ranked[0][0]

    return PredictionSummary(
        average_prediction=float(np.mean([r.predicted_price for r in results])),
        average_next_day_prediction=float(np.mean([r.next_day_prediction for r in results])),
        average_confidence=float(np.mean([r.confidence for r in results])),
        bullish_signals=votes[Trend.BULLISH],
        bearish_signals=votes[Trend.BEARISH],
        neutral_signals=votes[Trend.NEUTRAL],
        total_signals=len(results),
        consensus_trend=consensus
    )


class ForecasterService:
    """
    Main prediction service.

    Resolves a symbol (or takes a raw series), runs all methods and wraps
    the results with a consensus summary and plain-English insights.
    """

    def __init__(self, repository: StockDataRepository):
        self.repository = repository

    def _make_rng(self) -> np.random.Generator:
        # RANDOM_SEED=None draws fresh OS entropy
        return np.random.default_rng(settings.RANDOM_SEED)

    def forecast_symbol(self, symbol: str, period: Optional[int] = None) -> PredictionResponse:
        """
        Predict from the stored history of *symbol*.

        Raises:
            SymbolNotFoundError: unknown symbol
        """
        stock = self.repository.get_stock(symbol)
        return self.forecast_series(stock.historical, symbol=stock.symbol, period=period)

    def forecast_series(
        self,
        series,
        symbol: Optional[str] = None,
        period: Optional[int] = None,
        rng: Optional[Any] = None
    ) -> PredictionResponse:
        """
        Predict from an explicit series.

        Raises:
            InvalidSeriesError: empty series
        """
        data = to_frame(series)
        period = period or settings.MOVING_AVERAGE_PERIOD
        if rng is None:
            rng = self._make_rng()

        results = predict_all(data, period=period, rng=rng, window=settings.VOLUME_WINDOW)
        last_price = float(data['price'].iloc[-1])
        logger.info(
            f"Predicted {symbol or 'custom series'} from {len(data)} points "
            f"(period={period})"
        )

        return PredictionResponse(
            symbol=symbol,
            generated_at=datetime.utcnow(),
            last_price=last_price,
            data_points=len(data),
            predictions=[PredictionResultSchema.model_validate(r) for r in results],
            summary=summarize_predictions(results),
            insights=self.generate_insights(symbol, results, last_price)
        )

    def generate_insights(
        self,
        symbol: Optional[str],
        results: Sequence[PredictionResult],
        last_price: float
    ) -> List[str]:
        """
        Generate natural language insights from prediction results.
        Target audience: retail investors, not quants.
        """
        if not results:
            return ["Not enough data to generate predictions yet."]

        summary = summarize_predictions(results)
        name = symbol or "this series"
        insights = []

        # Insight 1: Consensus vs last close
        average = summary.average_prediction
        if last_price:
            move_pct = (average - last_price) / last_price * 100
            insights.append(
                f"Average prediction for {name} is ${average:.2f}, "
                f"{move_pct:+.1f}% vs the last close of ${last_price:.2f}."
            )
        else:
            insights.append(f"Average prediction for {name} is ${average:.2f}.")

        # Insight 2: Votes
        insights.append(
            f"{summary.bullish_signals}/{summary.total_signals} methods signal a bullish trend."
        )

        # Insight 3: Most confident method
        best = max(results, key=lambda r: r.confidence)
        insights.append(
            f"Most confident method: {best.algorithm.value} ({best.confidence:.0%}), "
            f"predicting ${best.predicted_price:.2f}."
        )

        # Insight 4: Disagreement
        if summary.bullish_signals and summary.bearish_signals:
            insights.append(
                "Heads up: methods disagree on direction. Treat this forecast with caution."
            )

        return insights
