"""Bot configuration records (ATR multiples, trading configs) in the remote table store."""

from tradedesk.records.client import TableStoreClient
from tradedesk.records.models import (
    AtrMultiple,
    AtrMultipleCreate,
    AtrMultipleUpdate,
    ChartInterval,
    TradingConfig,
    TradingConfigCreate,
    TradingConfigUpdate,
)

__all__ = [
    "AtrMultiple",
    "AtrMultipleCreate",
    "AtrMultipleUpdate",
    "ChartInterval",
    "TableStoreClient",
    "TradingConfig",
    "TradingConfigCreate",
    "TradingConfigUpdate",
]
