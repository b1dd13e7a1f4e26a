import os
from pathlib import Path
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv


dotenv_path = Path(__file__).resolve().parents[2] / '.env'
load_dotenv(dotenv_path)


class Settings(BaseSettings):
    """Process-wide configuration. Built once and handed to every component."""

    model_config = SettingsConfigDict(extra='ignore', case_sensitive=True)

    API_NAME: str = "Market Insight Aggregation Service"
    API_DESCRIPTION: str = "Quotes, fundamentals, news, sentiment and earnings behind one endpoint"
    API_VERSION: str = "1.0.0"

    # Provider credentials. A missing key disables that provider, nothing more.
    FMP_KEY: Optional[str] = None
    NEWS_API_KEY: Optional[str] = None
    FINNHUB_KEY: Optional[str] = None
    ALPHA_VANTAGE_KEY: Optional[str] = None
    POLYGON_KEY: Optional[str] = None
    IEX_KEY: Optional[str] = None

    # Upstream base URLs
    YAHOO_CHART_URL: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    COINGECKO_URL: str = "https://api.coingecko.com/api/v3"
    BASE_FMP_URL: str = "https://financialmodelingprep.com/api/v3"
    NEWS_API_URL: str = "https://newsapi.org/v2/everything"
    FINNHUB_URL: str = "https://finnhub.io/api/v1"
    ALPHA_VANTAGE_URL: str = "https://www.alphavantage.co/query"
    POLYGON_URL: str = "https://api.polygon.io"

    # Per-call timeouts, seconds
    QUOTE_TIMEOUT: float = 10.0
    CHART_TIMEOUT: float = 15.0
    PROFILE_TIMEOUT: float = 10.0
    NEWS_API_TIMEOUT: float = 12.0
    NEWS_TIMEOUT: float = 10.0
    EARNINGS_TIMEOUT: float = 10.0
    CRYPTO_METRICS_TIMEOUT: float = 8.0
    QUICK_ANALYZE_TIMEOUT: float = 6.0

    # Policy caps
    NEWS_MAX_ARTICLES: int = 25
    NEWS_DEFAULT_LIMIT: int = 20
    EARNINGS_HISTORY_QUARTERS: int = 4
    NEWS_API_PAGE_SIZE: int = 20
    FINNHUB_NEWS_LIMIT: int = 15
    ALPHA_VANTAGE_NEWS_LIMIT: int = 15
    POLYGON_NEWS_LIMIT: int = 15
    NEWS_LOOKBACK_DAYS: int = 7
    CHART_LOOKBACK_DAYS: int = 365

    # Upper bound on in-flight upstream requests across all adapters
    MAX_CONCURRENT_UPSTREAM_CALLS: int = 20

    # Fixed-window limiter applied per client IP
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_POINTS: int = 50
    RATE_LIMIT_WINDOW: int = 60

    CORS_ORIGINS: List[str] = Field(default_factory=lambda: [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ])

    ENV_STATE: str = os.getenv("ENV_STATE", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "text")

    HOST: str = "0.0.0.0"
    PORT: int = 3001
    UVICORN_WORKERS: int = 1
    UVICORN_RELOAD: bool = False

    def provider_status(self) -> dict:
        """Which upstream credentials are configured."""
        return {
            "news_api": bool(self.NEWS_API_KEY),
            "fmp": bool(self.FMP_KEY),
            "finnhub": bool(self.FINNHUB_KEY),
            "alpha_vantage": bool(self.ALPHA_VANTAGE_KEY),
            "polygon": bool(self.POLYGON_KEY),
            "iex": bool(self.IEX_KEY),
        }


# Avoid having to re-read the .env file and create the Settings object every time you access it
@lru_cache()
def get_settings() -> Settings:
    return Settings()
