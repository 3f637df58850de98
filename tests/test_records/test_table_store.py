"""Tests for TableStoreClient proxying and error mapping.

HTTP goes through httpx.MockTransport; handlers record requests and
route on method + path.
"""

import json

import httpx
import pytest

from tradedesk.config import TableStoreSettings
from tradedesk.exceptions import TableStoreError
from tradedesk.records.client import TIMEOUT_MESSAGE, TableStoreClient
from tradedesk.records.models import (
    AtrMultipleCreate,
    AtrMultipleUpdate,
    ChartInterval,
    TradingConfigCreate,
    TradingConfigUpdate,
)

ATR_ROWS = [
    {"PartitionKey": "tp", "RowKey": "1", "atr_multiple": 1.5, "close_fraction": 0.5,
     "Timestamp": "2025-03-01T10:00:00Z"},
    {"PartitionKey": "tp", "RowKey": "2", "atr_multiple": 3.0, "close_fraction": 0.5,
     "Timestamp": "2025-03-02T10:00:00Z"},
]

CONFIG_ROWS = [
    {"PartitionKey": "BTCUSDT", "RowKey": "BTCUSDT", "leverage": 10,
     "wallet_allocation": 0.2, "chart_time_interval": "15m", "atr_candles": 14},
]


@pytest.fixture
def settings() -> TableStoreSettings:
    return TableStoreSettings(
        base_url="https://tables.example.test/api",
        function_key="secret-code",  # type: ignore[arg-type]
    )


class Router:
    """MockTransport handler keyed by (method, path)."""

    def __init__(self, routes: dict) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.routes[(request.method, request.url.path)]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def sent_json(self, index: int) -> dict:
        return json.loads(self.requests[index].content)


def _client(settings: TableStoreSettings, router: Router) -> TableStoreClient:
    return TableStoreClient(settings, transport=httpx.MockTransport(router))


class TestAtrMultiples:
    @pytest.mark.asyncio
    async def test_list_accepts_envelope(self, settings) -> None:
        router = Router({("GET", "/api/tp_sl"): httpx.Response(200, json={"records": ATR_ROWS})})
        client = _client(settings, router)

        records = await client.list_atr_multiples()

        assert [r.id for r in records] == ["1", "2"]
        assert records[1].row == 2
        assert records[0].created_at == "2025-03-01T10:00:00Z"
        await client.close()

    @pytest.mark.asyncio
    async def test_list_accepts_bare_array(self, settings) -> None:
        router = Router({("GET", "/api/tp_sl"): httpx.Response(200, json=ATR_ROWS)})
        client = _client(settings, router)

        assert len(await client.list_atr_multiples()) == 2
        await client.close()

    @pytest.mark.asyncio
    async def test_function_key_sent_as_code(self, settings) -> None:
        router = Router({("GET", "/api/tp_sl"): httpx.Response(200, json=[])})
        client = _client(settings, router)

        await client.list_atr_multiples()

        request = router.requests[0]
        assert request.url.params["code"] == "secret-code"
        assert request.headers["User-Agent"] == "TradingApp/1.0"
        await client.close()

    @pytest.mark.asyncio
    async def test_unexpected_body_is_502(self, settings) -> None:
        router = Router({("GET", "/api/tp_sl"): httpx.Response(200, json={"rows": []})})
        client = _client(settings, router)

        with pytest.raises(TableStoreError) as exc_info:
            await client.list_atr_multiples()
        assert exc_info.value.status_code == 502
        await client.close()

    @pytest.mark.asyncio
    async def test_get_missing_is_404(self, settings) -> None:
        router = Router({("GET", "/api/tp_sl"): httpx.Response(200, json=ATR_ROWS)})
        client = _client(settings, router)

        with pytest.raises(TableStoreError) as exc_info:
            await client.get_atr_multiple("99")
        assert exc_info.value.status_code == 404
        await client.close()

    @pytest.mark.asyncio
    async def test_create_assigns_next_row(self, settings) -> None:
        router = Router({
            ("GET", "/api/tp_sl"): httpx.Response(200, json=ATR_ROWS),
            ("POST", "/api/tp_sl"): httpx.Response(201, json={}),
        })
        client = _client(settings, router)

        record = await client.create_atr_multiple(
            AtrMultipleCreate(PartitionKey="tsl", atr_multiple=2.0, close_fraction=0.25)
        )

        assert router.sent_json(1) == {
            "PartitionKey": "tsl",
            "RowKey": "3",
            "atr_multiple": 2.0,
            "close_fraction": 0.25,
        }
        assert record.row == 3
        await client.close()

    @pytest.mark.asyncio
    async def test_create_with_explicit_row_skips_listing(self, settings) -> None:
        router = Router({("POST", "/api/tp_sl"): httpx.Response(201)})
        client = _client(settings, router)

        record = await client.create_atr_multiple(
            AtrMultipleCreate(PartitionKey="tp", atr_multiple=1.0, close_fraction=1.0, row=7)
        )

        assert len(router.requests) == 1
        assert record.id == "7"
        await client.close()

    @pytest.mark.asyncio
    async def test_partial_update_fills_from_current(self, settings) -> None:
        router = Router({
            ("GET", "/api/tp_sl"): httpx.Response(200, json=ATR_ROWS),
            ("PUT", "/api/tp_sl/2"): httpx.Response(200, json={"message": "updated"}),
        })
        client = _client(settings, router)

        record = await client.update_atr_multiple("2", AtrMultipleUpdate(atr_multiple=4.0))

        sent = router.sent_json(1)
        assert sent["atr_multiple"] == 4.0
        assert sent["close_fraction"] == 0.5
        assert sent["PartitionKey"] == "tp"
        assert record.updated_at is not None
        await client.close()

    @pytest.mark.asyncio
    async def test_delete(self, settings) -> None:
        router = Router({("DELETE", "/api/tp_sl/1"): httpx.Response(204)})
        client = _client(settings, router)

        assert await client.delete_atr_multiple("1") is None
        await client.close()


class TestTradingConfigs:
    @pytest.mark.asyncio
    async def test_create_uses_symbol_as_keys(self, settings) -> None:
        router = Router({("POST", "/api/trading_configs"): httpx.Response(200, json={})})
        client = _client(settings, router)

        record = await client.create_trading_config(
            TradingConfigCreate(symbol="ETHUSDT", chart_time_interval=ChartInterval.H1)
        )

        sent = router.sent_json(0)
        assert sent["PartitionKey"] == sent["RowKey"] == "ETHUSDT"
        assert sent["chart_time_interval"] == "1h"
        assert sent["leverage"] == 10
        assert record.id == "ETHUSDT"
        await client.close()

    @pytest.mark.asyncio
    async def test_partial_update_refetches_record(self, settings) -> None:
        router = Router({
            ("PUT", "/api/trading_configs/BTCUSDT"): httpx.Response(200, json={"ok": True}),
            ("GET", "/api/trading_configs"): httpx.Response(200, json=CONFIG_ROWS),
        })
        client = _client(settings, router)

        record = await client.update_trading_config("BTCUSDT", TradingConfigUpdate(leverage=5))

        assert router.sent_json(0) == {"PartitionKey": "BTCUSDT", "RowKey": "BTCUSDT", "leverage": 5}
        assert record.RowKey == "BTCUSDT"
        assert len(router.requests) == 2
        await client.close()

    @pytest.mark.asyncio
    async def test_upstream_status_passes_through(self, settings) -> None:
        router = Router({
            ("DELETE", "/api/trading_configs/BTCUSDT"): httpx.Response(409, text="conflict"),
        })
        client = _client(settings, router)

        with pytest.raises(TableStoreError) as exc_info:
            await client.delete_trading_config("BTCUSDT")

        assert exc_info.value.status_code == 409
        assert str(exc_info.value) == (
            "Failed to delete trading configuration: 409 Conflict - conflict"
        )
        await client.close()

    @pytest.mark.asyncio
    async def test_timeout_is_408(self, settings) -> None:
        router = Router({("GET", "/api/trading_configs"): httpx.ReadTimeout("slow")})
        client = _client(settings, router)

        with pytest.raises(TableStoreError) as exc_info:
            await client.list_trading_configs()

        assert exc_info.value.status_code == 408
        assert str(exc_info.value) == TIMEOUT_MESSAGE
        await client.close()

    @pytest.mark.asyncio
    async def test_network_error_is_500(self, settings) -> None:
        router = Router({("GET", "/api/trading_configs"): httpx.ConnectError("refused")})
        client = _client(settings, router)

        with pytest.raises(TableStoreError) as exc_info:
            await client.list_trading_configs()

        assert exc_info.value.status_code == 500
        await client.close()


class TestModelValidation:
    def test_leverage_bounds(self) -> None:
        with pytest.raises(ValueError):
            TradingConfigCreate(symbol="BTCUSDT", leverage=200)

    def test_unknown_interval_rejected(self) -> None:
        with pytest.raises(ValueError):
            TradingConfigCreate(symbol="BTCUSDT", chart_time_interval="7m")

    def test_atr_multiple_bounds(self) -> None:
        with pytest.raises(ValueError):
            AtrMultipleCreate(PartitionKey="tp", atr_multiple=0.05, close_fraction=0.5)
