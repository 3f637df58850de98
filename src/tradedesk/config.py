"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExchangeSettings(BaseSettings):
    """Binance USD-M futures connection settings."""

    model_config = SettingsConfigDict(env_prefix="BINANCE_")

    api_key: SecretStr = SecretStr("")
    api_secret: SecretStr = SecretStr("")
    base_url: str = "https://fapi.binance.com"
    request_timeout: float = 10.0  # seconds, applied per request


class PnlSettings(BaseSettings):
    """Daily P&L aggregation parameters.

    Binance refuses userTrades windows longer than 7 days, so history is
    fetched in chunks of at most ``max_days_per_request`` days.
    All fields configurable via PNL_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="PNL_")

    max_days_per_request: int = 7
    chunk_delay_seconds: float = 0.1  # pause between sequential chunk requests
    trades_limit: int = 1000  # Binance max per userTrades call
    default_days: int = 30
    max_days: int = 365

    @field_validator("trades_limit")
    @classmethod
    def _clamp_trades_limit(cls, value: int) -> int:
        return max(1, min(value, 1000))


class TableStoreSettings(BaseSettings):
    """Remote table-storage backend (Azure Functions proxy) for bot config records."""

    model_config = SettingsConfigDict(env_prefix="TABLE_STORE_")

    base_url: str = "https://trading-bot-app-v3.azurewebsites.net/api"
    function_key: SecretStr = SecretStr("")  # sent as ?code=
    request_timeout: float = 10.0
    user_agent: str = "TradingApp/1.0"


class DashboardSettings(BaseSettings):
    """Dashboard server configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

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
    use_mock_data: bool = False
    exchange: ExchangeSettings = ExchangeSettings()
    pnl: PnlSettings = PnlSettings()
    table_store: TableStoreSettings = TableStoreSettings()
    dashboard: DashboardSettings = DashboardSettings()
