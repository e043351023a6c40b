"""
Tests for the baseline methods: moving average and volume weighted.
"""

import copy

import numpy as np
import pandas as pd
import pytest

from stockcast.schemas import Algorithm, ConfidenceLevel, ObservationSchema, Trend
from stockcast.services.exceptions import InvalidSeriesError
from stockcast.services.forecasting.baseline import (
    BaselineForecaster, confidence_level, moving_average_predict, to_frame,
    volume_weighted_predict
)

from conftest import FixedRandom, make_series


class TestMovingAverage:

    def test_mean_of_window(self, fixed_random):
        result = moving_average_predict(make_series([10, 20, 30]), period=3, rng=fixed_random)

        assert result.algorithm == Algorithm.MOVING_AVERAGE
        assert result.algorithm == "Moving Average"
        assert result.predicted_price == pytest.approx(20.0)
        assert result.confidence == pytest.approx(0.75)

    def test_uses_only_last_period_prices(self, fixed_random):
        series = make_series(list(range(1, 21)))

        result = moving_average_predict(series, period=10, rng=fixed_random)

        assert result.predicted_price == pytest.approx(np.mean(range(11, 21)))

    def test_short_series_uses_all_points(self, fixed_random):
        result = moving_average_predict(make_series([10, 20]), period=10, rng=fixed_random)

        assert result.predicted_price == pytest.approx(15.0)
        assert result.confidence == pytest.approx(0.85)

    def test_confidence_grows_with_period_and_caps(self, sample_series, fixed_random):
        short = moving_average_predict(sample_series, period=2, rng=fixed_random)
        long = moving_average_predict(sample_series, period=12, rng=fixed_random)

        assert short.confidence == pytest.approx(0.7)
        assert long.confidence == pytest.approx(0.85)

    def test_bullish_trend(self, fixed_random):
        result = moving_average_predict(make_series([100, 101, 102, 103, 104, 105]), rng=fixed_random)
        assert result.trend == Trend.BULLISH

    def test_bearish_trend(self, fixed_random):
        result = moving_average_predict(make_series([105, 104, 103, 102, 101, 100]), rng=fixed_random)
        assert result.trend == Trend.BEARISH

    def test_small_move_is_neutral(self, fixed_random):
        result = moving_average_predict(
            make_series([100.0, 100.5, 100.2, 100.4, 100.9]), rng=fixed_random
        )
        assert result.trend == Trend.NEUTRAL

    def test_trend_looks_at_last_five_prices_only(self, fixed_random):
        # Big drop early in the window, flat at the end
        result = moving_average_predict(
            make_series([150, 140, 100, 100.2, 100.1, 100.3, 100.4]), rng=fixed_random
        )
        assert result.trend == Trend.NEUTRAL

    def test_midpoint_draw_predicts_mean(self, fixed_random):
        result = moving_average_predict(make_series([10, 20, 30]), period=3, rng=fixed_random)

        assert result.next_day_prediction == pytest.approx(result.predicted_price)
        assert fixed_random.calls == 1

    def test_noise_scaled_by_volatility(self):
        prices = [10, 20, 30]
        result = moving_average_predict(make_series(prices), period=3, rng=FixedRandom(0.75))

        volatility = np.std(prices)
        assert result.next_day_prediction == pytest.approx(20 + 0.5 * volatility)

    def test_seeded_generator_is_reproducible(self, sample_series):
        first = moving_average_predict(sample_series, rng=np.random.default_rng(42))
        second = moving_average_predict(sample_series, rng=np.random.default_rng(42))

        assert first == second

    def test_only_next_day_varies_between_calls(self, sample_series):
        first = moving_average_predict(sample_series)
        second = moving_average_predict(sample_series)

        assert first.predicted_price == second.predicted_price
        assert first.confidence == second.confidence
        assert first.trend == second.trend

    def test_next_day_stays_within_one_volatility(self, sample_series):
        prices = [obs["price"] for obs in sample_series][-10:]
        volatility = np.std(prices)

        for seed in range(20):
            result = moving_average_predict(sample_series, rng=np.random.default_rng(seed))
            assert abs(result.next_day_prediction - result.predicted_price) <= volatility

    def test_non_positive_period_rejected(self, sample_series):
        with pytest.raises(ValueError):
            moving_average_predict(sample_series, period=0)

    def test_empty_series_rejected(self):
        with pytest.raises(InvalidSeriesError):
            moving_average_predict([])

    def test_input_not_mutated(self, sample_series, fixed_random):
        before = copy.deepcopy(sample_series)
        moving_average_predict(sample_series, rng=fixed_random)
        assert sample_series == before


class TestVolumeWeighted:

    def test_weighted_price_and_momentum(self):
        result = volume_weighted_predict(make_series([10, 20], volumes=[1, 3]))

        assert result.algorithm == Algorithm.VOLUME_WEIGHTED
        assert result.predicted_price == pytest.approx(17.5)
        assert result.next_day_prediction == pytest.approx(17.5 + 2.5 * 0.3)
        assert result.trend == Trend.BULLISH
        assert result.confidence == pytest.approx(0.75)

    def test_high_volume_below_vwap_is_bearish(self):
        result = volume_weighted_predict(make_series([10, 20], volumes=[3, 1]))

        assert result.predicted_price == pytest.approx(12.5)
        assert result.next_day_prediction == pytest.approx(11.75)
        assert result.trend == Trend.BEARISH

    def test_equal_volumes_have_no_momentum(self):
        result = volume_weighted_predict(make_series([10, 12, 15, 11], volumes=[500] * 4))

        assert result.predicted_price == pytest.approx(12.0)
        assert result.next_day_prediction == result.predicted_price
        assert result.trend == Trend.NEUTRAL

    def test_zero_volume_falls_back_to_mean(self):
        result = volume_weighted_predict(make_series([10, 20, 30], volumes=[0, 0, 0]))

        assert result.predicted_price == pytest.approx(20.0)
        assert result.next_day_prediction == pytest.approx(20.0)
        assert result.trend == Trend.NEUTRAL

    def test_small_momentum_is_neutral(self):
        result = volume_weighted_predict(make_series([10, 10.5], volumes=[1, 3]))
        assert result.trend == Trend.NEUTRAL

    def test_window_is_last_ten_observations(self):
        prices = [1000, 1000] + [10] * 10
        volumes = [10_000_000, 10_000_000] + [100] * 10

        result = volume_weighted_predict(make_series(prices, volumes))

        assert result.predicted_price == pytest.approx(10.0)

    def test_deterministic(self, sample_series):
        assert volume_weighted_predict(sample_series) == volume_weighted_predict(sample_series)


class TestSeriesInput:

    def test_accepts_dataframe(self):
        df = pd.DataFrame({"date": ["2024-01-02", "2024-01-03"], "price": [10, 20], "volume": [1, 1]})

        result = BaselineForecaster(df).moving_average_predict(rng=FixedRandom())

        assert result.predicted_price == pytest.approx(15.0)
        assert list(df["price"]) == [10, 20]

    def test_accepts_observation_models(self, fixed_random):
        series = [ObservationSchema(**obs) for obs in make_series([10, 20, 30])]

        result = moving_average_predict(series, period=3, rng=fixed_random)

        assert result.predicted_price == pytest.approx(20.0)

    def test_missing_field_rejected(self):
        with pytest.raises(InvalidSeriesError):
            to_frame([{"date": "2024-01-02", "price": 10.0}])

    def test_dataframe_missing_column_rejected(self):
        with pytest.raises(InvalidSeriesError):
            to_frame(pd.DataFrame({"date": ["2024-01-02"], "price": [1.0]}))


@pytest.mark.parametrize("confidence, expected", [
    (0.95, ConfidenceLevel.HIGH),
    (0.8, ConfidenceLevel.HIGH),
    (0.75, ConfidenceLevel.MEDIUM),
    (0.6, ConfidenceLevel.MEDIUM),
    (0.4, ConfidenceLevel.LOW),
])
def test_confidence_level(confidence, expected):
    assert confidence_level(confidence) == expected
