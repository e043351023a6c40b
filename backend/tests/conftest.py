"""
Shared fixtures for the prediction service tests.
"""

import json
from datetime import date, timedelta

import pytest

from stockcast.services.market_data import StockDataRepository


class FixedRandom:
    """Stands in for a numpy Generator: always draws the same value."""

    def __init__(self, value: float = 0.5):
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


def make_series(prices, volumes=None, start=date(2024, 1, 2)):
    """Build a list of observation dicts, one calendar day apart."""
    if volumes is None:
        volumes = [1_000_000] * len(prices)
    return [
        {"date": (start + timedelta(days=i)).isoformat(), "price": float(p), "volume": int(v)}
        for i, (p, v) in enumerate(zip(prices, volumes))
    ]


@pytest.fixture
def fixed_random():
    return FixedRandom(0.5)


@pytest.fixture
def linear_series():
    """price_i = 100 + 2i for i = 0..9"""
    return make_series([100 + 2 * i for i in range(10)])


@pytest.fixture
def constant_series():
    return make_series([50.0] * 10)


@pytest.fixture
def sample_series():
    """Noisy upward series with uneven volume."""
    prices = [101.2, 102.5, 101.9, 103.4, 104.1, 103.8, 105.6, 106.2, 105.9, 107.3, 108.0, 107.1]
    volumes = [1200, 900, 1500, 800, 2100, 950, 1700, 1100, 600, 2500, 1300, 1000]
    return make_series(prices, volumes)


@pytest.fixture
def stock_data_file(tmp_path):
    """Small two-symbol data file with histories of different lengths."""
    data = {
        "aaa": {
            "name": "Triple A Corp",
            "symbol": "AAA",
            "currentPrice": 12.0,
            "change": 1.0,
            "changePercent": 9.09,
            "historical": make_series([10.0, 11.0, 12.0]),
        },
        "BBB": {
            "name": "Double B Ltd",
            "symbol": "BBB",
            "currentPrice": 36.0,
            "change": -4.0,
            "changePercent": -10.0,
            "historical": make_series([50.0, 40.0]),
        },
    }
    path = tmp_path / "stock_data.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def repository(stock_data_file):
    return StockDataRepository(stock_data_file)
