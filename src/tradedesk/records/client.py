"""HTTP client for the configuration table store (Azure Functions endpoints).

Plain list/get/create/update/delete proxying for ATR multiples and trading
configs. Authentication is the function key passed as the ``code`` query
parameter. Every failure is raised as TableStoreError carrying the HTTP
status the dashboard should answer with.
"""

from datetime import datetime, timezone
from typing import Any

import httpx

from tradedesk.config import TableStoreSettings
from tradedesk.exceptions import TableStoreError
from tradedesk.logging import get_logger
from tradedesk.records.models import (
    AtrMultiple,
    AtrMultipleCreate,
    AtrMultipleUpdate,
    TradingConfig,
    TradingConfigCreate,
    TradingConfigUpdate,
)

logger = get_logger(__name__)

TIMEOUT_MESSAGE = "Request timeout - table store took too long to respond"

_TRADING_CONFIG_FIELDS = frozenset(
    {"leverage", "wallet_allocation", "chart_time_interval", "atr_candles"}
)


def _extract_records(payload: Any) -> list[dict]:
    """Accept either a bare array or a ``{"records": [...]}`` envelope."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("records"), list):
        return payload["records"]
    raise TableStoreError("Invalid response format from table store", status_code=502)


def _as_dict(payload: Any) -> dict:
    return payload if isinstance(payload, dict) else {}


class TableStoreClient:
    """CRUD access to ATR-multiple and trading-config records.

    Args:
        settings: Base URL, function key, timeout, and User-Agent.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: TableStoreSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._http = httpx.AsyncClient(
            base_url=settings.base_url.rstrip("/"),
            timeout=settings.request_timeout,
            headers={
                "Content-Type": "application/json",
                "User-Agent": settings.user_agent,
            },
            transport=transport,
        )

    async def close(self) -> None:
        await self._http.aclose()

    # ──────────────────────────────────────────────
    # ATR multiples (/tp_sl)
    # ──────────────────────────────────────────────

    async def list_atr_multiples(self) -> list[AtrMultiple]:
        payload = await self._request("GET", "/tp_sl", action="fetch ATR multiples")
        records = [AtrMultiple.model_validate(r) for r in _extract_records(payload)]
        logger.info("atr_multiples_listed", count=len(records))
        return records

    async def get_atr_multiple(self, record_id: str) -> AtrMultiple:
        """Find one ATR multiple by RowKey (the endpoint has no single-row GET)."""
        for record in await self.list_atr_multiples():
            if record.RowKey == record_id:
                return record
        raise TableStoreError("ATR multiple not found", status_code=404)

    async def create_atr_multiple(self, data: AtrMultipleCreate) -> AtrMultiple:
        """Create a row; without an explicit ``row`` the next free number is used."""
        row = data.row
        if row is None:
            existing = await self.list_atr_multiples()
            row = max((r.row or 0 for r in existing), default=0) + 1

        body = {
            "PartitionKey": data.PartitionKey,
            "RowKey": str(row),
            "atr_multiple": data.atr_multiple,
            "close_fraction": data.close_fraction,
        }
        result = await self._request(
            "POST", "/tp_sl", json=body, action="create ATR multiple"
        )
        logger.info("atr_multiple_created", row_key=body["RowKey"])
        return AtrMultiple.model_validate({**body, **_as_dict(result)})

    async def update_atr_multiple(
        self, record_id: str, data: AtrMultipleUpdate
    ) -> AtrMultiple:
        body = {"RowKey": record_id, **data.model_dump(exclude_none=True)}
        if not {"PartitionKey", "atr_multiple", "close_fraction"} <= body.keys():
            current = await self.get_atr_multiple(record_id)
            body = {
                "PartitionKey": current.PartitionKey,
                "atr_multiple": current.atr_multiple,
                "close_fraction": current.close_fraction,
                **body,
            }
        result = await self._request(
            "PUT", f"/tp_sl/{record_id}", json=body, action="update ATR multiple"
        )
        logger.info("atr_multiple_updated", row_key=record_id)
        merged = {**body, **_as_dict(result)}
        merged["updated_at"] = datetime.now(timezone.utc).isoformat()
        return AtrMultiple.model_validate(merged)

    async def delete_atr_multiple(self, record_id: str) -> None:
        await self._request(
            "DELETE", f"/tp_sl/{record_id}", action="delete ATR multiple"
        )
        logger.info("atr_multiple_deleted", row_key=record_id)

    # ──────────────────────────────────────────────
    # Trading configs (/trading_configs)
    # ──────────────────────────────────────────────

    async def list_trading_configs(self) -> list[TradingConfig]:
        payload = await self._request(
            "GET", "/trading_configs", action="fetch trading configurations"
        )
        records = [TradingConfig.model_validate(r) for r in _extract_records(payload)]
        logger.info("trading_configs_listed", count=len(records))
        return records

    async def get_trading_config(self, symbol: str) -> TradingConfig:
        for record in await self.list_trading_configs():
            if record.RowKey == symbol:
                return record
        raise TableStoreError(f"Trading configuration not found: {symbol}", status_code=404)

    async def create_trading_config(self, data: TradingConfigCreate) -> TradingConfig:
        body = {
            "PartitionKey": data.symbol,
            "RowKey": data.symbol,
            "leverage": data.leverage,
            "wallet_allocation": data.wallet_allocation,
            "chart_time_interval": data.chart_time_interval.value,
            "atr_candles": data.atr_candles,
        }
        result = await self._request(
            "POST", "/trading_configs", json=body, action="create trading configuration"
        )
        logger.info("trading_config_created", symbol=data.symbol)
        return TradingConfig.model_validate({**body, **_as_dict(result)})

    async def update_trading_config(
        self, symbol: str, data: TradingConfigUpdate
    ) -> TradingConfig:
        body = {
            "PartitionKey": symbol,
            "RowKey": symbol,
            **data.model_dump(exclude_none=True, mode="json"),
        }
        result = await self._request(
            "PUT",
            f"/trading_configs/{symbol}",
            json=body,
            action="update trading configuration",
        )
        logger.info("trading_config_updated", symbol=symbol)
        merged = {**body, **_as_dict(result)}
        if not _TRADING_CONFIG_FIELDS <= merged.keys():
            return await self.get_trading_config(symbol)
        return TradingConfig.model_validate(merged)

    async def delete_trading_config(self, symbol: str) -> Any:
        result = await self._request(
            "DELETE", f"/trading_configs/{symbol}", action="delete trading configuration"
        )
        logger.info("trading_config_deleted", symbol=symbol)
        return result

    # ──────────────────────────────────────────────
    # Transport
    # ──────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        json: dict | None = None,
    ) -> Any:
        """Send one request; return the parsed JSON body (None when empty)."""
        params = {"code": self._settings.function_key.get_secret_value()}
        try:
            response = await self._http.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            logger.warning("table_store_timeout", method=method, path=path)
            raise TableStoreError(TIMEOUT_MESSAGE, status_code=408) from e
        except httpx.TransportError as e:
            logger.error("table_store_transport_error", method=method, path=path, error=str(e))
            raise TableStoreError(f"Failed to {action}: {e}", status_code=500) from e

        if not response.is_success:
            body = response.text
            logger.error(
                "table_store_error",
                method=method,
                path=path,
                status=response.status_code,
                body=body,
            )
            raise TableStoreError(
                f"Failed to {action}: {response.status_code} "
                f"{response.reason_phrase} - {body}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TableStoreError(
                "Invalid response format from table store", status_code=502
            ) from e
