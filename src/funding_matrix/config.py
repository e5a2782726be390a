"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExchangeSettings(BaseSettings):
    """Public market-data endpoints and transport limits for every venue."""

    model_config = SettingsConfigDict(env_prefix="EXCHANGES_")

    enabled: list[str] = ["binance", "bybit", "hyperliquid", "lighter", "aster"]
    request_timeout_seconds: float = 10.0

    binance_base_url: str = "https://fapi.binance.com"
    bybit_base_url: str = "https://api.bybit.com"
    hyperliquid_base_url: str = "https://api.hyperliquid.xyz"
    lighter_base_url: str = "https://mainnet.zklighter.elliot.ai"
    aster_base_url: str = "https://fapi.asterdex.com"

    # Aster funding interval inference (one extra request per uncached symbol)
    aster_interval_ttl_seconds: float = 86400.0  # 24h
    aster_inference_concurrency: int = 8


class AggregationSettings(BaseSettings):
    """Polling cycle guard and trigger authentication."""

    model_config = SettingsConfigDict(env_prefix="AGGREGATION_")

    lock_key: str = "update-funding"
    lock_timeout_seconds: float = 300.0  # self-heal after a crashed cycle
    cron_secret: SecretStr = SecretStr("")  # empty disables trigger auth


class StatisticsSettings(BaseSettings):
    """Spread history statistics configuration.

    The profitability threshold is expressed in percent of the hourly
    spread (0.01 means 0.01%), matching the unit of spread_percent.
    """

    model_config = SettingsConfigDict(env_prefix="STATISTICS_")

    profitability_threshold_pct: Decimal = Decimal("0.01")
    default_lookback_hours: int = 6
    max_lookback_hours: int = 720  # 30 days
    price_match_tolerance_ms: int = 60_000


class StorageSettings(BaseSettings):
    """Snapshot database location."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    db_path: str = "data/funding.db"


class ServerSettings(BaseSettings):
    """HTTP trigger server configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = "0.0.0.0"
    port: int = 8080


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    exchanges: ExchangeSettings = ExchangeSettings()
    aggregation: AggregationSettings = AggregationSettings()
    statistics: StatisticsSettings = StatisticsSettings()
    storage: StorageSettings = StorageSettings()
    server: ServerSettings = ServerSettings()
