"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class QuoteSettings(BaseSettings):
    """Remote quote provider and local CSV cache settings."""

    model_config = SettingsConfigDict(env_prefix="QUOTES_")

    api_key: SecretStr = SecretStr("demo")
    base_url: str = "https://www.alphavantage.co/query"
    cache_dir: str = "data/quotes"
    timeout_seconds: float = 30.0
    max_retries: int = 3
    retry_base_delay: float = 1.0


class PortfolioSettings(BaseSettings):
    """Portfolio storage and validation settings."""

    model_config = SettingsConfigDict(env_prefix="PORTFOLIO_")

    storage_dir: str = "data/portfolios"
    ticker_list_path: str = "tickerSymbols.csv"
    weight_tolerance: Decimal = Decimal("1e-9")  # max |sum(weights) - 1| for rebalance


class ChartSettings(BaseSettings):
    """Text performance chart settings."""

    model_config = SettingsConfigDict(env_prefix="CHART_")

    max_bars: int = 50  # widest bar, in asterisks
    scales: list[int] = [500, 1000, 2000]  # preferred units per asterisk, smallest first


class ApiSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "127.0.0.1"
    port: int = 8080
    enabled: bool = False  # console menu when disabled


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "WARNING"
    log_format: str = "console"
    quotes: QuoteSettings = QuoteSettings()
    portfolio: PortfolioSettings = PortfolioSettings()
    chart: ChartSettings = ChartSettings()
    api: ApiSettings = ApiSettings()
