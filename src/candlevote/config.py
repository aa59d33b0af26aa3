"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

#: Curated default panel, in evaluation order.
DEFAULT_ACTIVE_STRATEGIES: list[str] = [
    "engulfing",
    "three_white_soldiers",
    "strong_candle",
    "three_valleys_peaks",
    "mhi",
]


class AnalysisSettings(BaseSettings):
    """Strategy panel and candle window parameters.

    All fields configurable via ANALYSIS_ environment variable prefix.
    ``active_strategies`` takes a JSON list of strategy ids.
    """

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_")

    window_size: int = Field(default=20, ge=1, le=20)  # Max candles handed to the rules
    bar_interval_seconds: int = Field(default=60, gt=0)  # One candle = 1 minute
    timezone: str = "UTC"  # Clock used for best-hour/best-day bonuses
    active_strategies: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ACTIVE_STRATEGIES)
    )


class StorageSettings(BaseSettings):
    """SQLite result store location."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    db_path: str = "data/candlevote.db"


class ApiSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

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
    log_format: str = "console"  # "console" or "json" (LOG_FORMAT)
    analysis: AnalysisSettings = AnalysisSettings()
    storage: StorageSettings = StorageSettings()
    api: ApiSettings = ApiSettings()
