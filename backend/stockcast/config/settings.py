"""
Application settings and configuration.
"""

from pathlib import Path
from pydantic_settings import BaseSettings
from typing import Optional


BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application configuration using environment variables."""

    APP_NAME: str = "Stock Price Prediction API"
    LOG_LEVEL: str = "INFO"

    # Static market data
    STOCK_DATA_PATH: Path = BASE_DIR / "data" / "stock_data.json"
    DEFAULT_SYMBOL: str = "AAPL"

    # Prediction defaults
    MOVING_AVERAGE_PERIOD: int = 10
    VOLUME_WINDOW: int = 10
    RANDOM_SEED: Optional[int] = None  # None = fresh entropy per request

    # CSV upload
    MAX_UPLOAD_ERRORS: int = 10

    # API
    API_PREFIX: str = "/api"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
