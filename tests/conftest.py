"""Shared test fixtures for the futures dashboard backend."""

from datetime import datetime, timezone

import pytest

from tradedesk.config import AppSettings, ExchangeSettings, PnlSettings, TableStoreSettings
from tradedesk.exchange.types import Credential

# 2025-03-15 12:00:00 UTC -- mid-day so +/- a few hours stays on the same date
NOW_MS = int(datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc).timestamp() * 1000)


@pytest.fixture
def now() -> int:
    """Frozen current time in Unix ms."""
    return NOW_MS


@pytest.fixture
def fixed_clock(now: int):
    """Clock frozen at NOW_MS."""
    return lambda: now


@pytest.fixture
def credential() -> Credential:
    return Credential(key="test-api-key", secret="test-api-secret")


@pytest.fixture
def pnl_settings() -> PnlSettings:
    """Aggregator settings with no inter-chunk delay."""
    return PnlSettings(chunk_delay_seconds=0.0)


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (live mode, dummy API keys)."""
    return AppSettings(
        log_level="DEBUG",
        use_mock_data=False,
        exchange=ExchangeSettings(
            api_key="test-api-key",  # type: ignore[arg-type]
            api_secret="test-api-secret",  # type: ignore[arg-type]
        ),
        pnl=PnlSettings(chunk_delay_seconds=0.0),
        table_store=TableStoreSettings(
            base_url="https://tables.example.test/api",
            function_key="test-function-key",  # type: ignore[arg-type]
        ),
    )
