"""Bot configuration records kept in the remote table store.

Two record kinds:
  - ATR multiples (``/tp_sl``): take-profit / trailing-stop ladder rows,
    keyed by a partition label (e.g. "tp", "tsl") and a numeric RowKey.
  - Trading configs (``/trading_configs``): per-symbol leverage and sizing,
    keyed by symbol (PartitionKey == RowKey == symbol).

Table entities carry PascalCase system fields (PartitionKey, RowKey,
Timestamp); the derived ``id``/``row``/``created_at``/``updated_at`` fields
are filled in for dashboard clients.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ChartInterval(str, Enum):
    """Candle intervals accepted by the bot (Binance kline notation)."""

    M1 = "1m"
    M3 = "3m"
    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1h"
    H2 = "2h"
    H4 = "4h"
    H6 = "6h"
    H8 = "8h"
    H12 = "12h"
    D1 = "1d"
    D3 = "3d"
    W1 = "1w"


class AtrMultiple(BaseModel):
    """An ATR-multiple row as stored, plus derived dashboard fields."""

    model_config = ConfigDict(extra="allow")

    PartitionKey: str
    RowKey: str
    atr_multiple: float
    close_fraction: float
    Timestamp: str | None = None
    id: str | None = None
    row: int | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @model_validator(mode="after")
    def _derive_fields(self) -> "AtrMultiple":
        self.id = self.id or self.RowKey
        if self.row is None and self.RowKey.isdigit():
            self.row = int(self.RowKey)
        self.created_at = self.created_at or self.Timestamp
        self.updated_at = self.updated_at or self.Timestamp
        return self


class AtrMultipleCreate(BaseModel):
    PartitionKey: str = Field(min_length=1)
    atr_multiple: float = Field(ge=0.1, le=10)
    close_fraction: float = Field(ge=0.01, le=1)
    row: int | None = Field(default=None, ge=1)


class AtrMultipleUpdate(BaseModel):
    PartitionKey: str | None = Field(default=None, min_length=1)
    atr_multiple: float | None = Field(default=None, ge=0.1, le=10)
    close_fraction: float | None = Field(default=None, ge=0.01, le=1)


class TradingConfig(BaseModel):
    """A per-symbol trading configuration row."""

    model_config = ConfigDict(extra="allow")

    PartitionKey: str
    RowKey: str
    leverage: int
    wallet_allocation: float
    chart_time_interval: str
    atr_candles: int
    Timestamp: str | None = None
    id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @model_validator(mode="after")
    def _derive_fields(self) -> "TradingConfig":
        self.id = self.id or self.RowKey
        self.created_at = self.created_at or self.Timestamp
        self.updated_at = self.updated_at or self.Timestamp
        return self


class TradingConfigCreate(BaseModel):
    symbol: str = Field(min_length=1)
    leverage: int = Field(default=10, ge=1, le=125)
    wallet_allocation: float = Field(default=0.1, ge=0.01, le=1)
    chart_time_interval: ChartInterval = ChartInterval.M15
    atr_candles: int = Field(default=14, ge=1, le=100)


class TradingConfigUpdate(BaseModel):
    leverage: int | None = Field(default=None, ge=1, le=125)
    wallet_allocation: float | None = Field(default=None, ge=0.01, le=1)
    chart_time_interval: ChartInterval | None = None
    atr_candles: int | None = Field(default=None, ge=1, le=100)
