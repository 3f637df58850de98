"""Proxy CRUD endpoints for bot configuration records.

ATR multiples live under ``/atr-multiples`` (collection) and ``/tp_sl/{id}``
(single row); trading configs under ``/trading_configs[/{symbol}]``.
TableStoreError statuses pass straight through to the client.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from tradedesk.exceptions import TableStoreError
from tradedesk.records.models import (
    AtrMultipleCreate,
    AtrMultipleUpdate,
    TradingConfigCreate,
    TradingConfigUpdate,
)

log = structlog.get_logger(__name__)

router = APIRouter()


async def _respond(call: Awaitable[Any]) -> JSONResponse:
    """Await a table-store call and wrap the outcome in the JSON envelope."""
    try:
        data = await call
    except TableStoreError as e:
        log.error("table_store_request_failed", error=str(e), status=e.status_code)
        return JSONResponse(
            content={"success": False, "error": str(e)},
            status_code=e.status_code,
        )
    return JSONResponse(content={"success": True, "data": jsonable_encoder(data)})


# ---------------------------------------------------------------------------
# ATR multiples
# ---------------------------------------------------------------------------


@router.get("/atr-multiples")
async def list_atr_multiples(request: Request) -> JSONResponse:
    return await _respond(request.app.state.table_store.list_atr_multiples())


@router.post("/atr-multiples")
async def create_atr_multiple(request: Request, body: AtrMultipleCreate) -> JSONResponse:
    return await _respond(request.app.state.table_store.create_atr_multiple(body))


@router.get("/tp_sl/{record_id}")
async def get_atr_multiple(request: Request, record_id: str) -> JSONResponse:
    return await _respond(request.app.state.table_store.get_atr_multiple(record_id))


@router.put("/tp_sl/{record_id}")
async def update_atr_multiple(
    request: Request, record_id: str, body: AtrMultipleUpdate
) -> JSONResponse:
    return await _respond(
        request.app.state.table_store.update_atr_multiple(record_id, body)
    )


@router.delete("/tp_sl/{record_id}")
async def delete_atr_multiple(request: Request, record_id: str) -> JSONResponse:
    return await _respond(request.app.state.table_store.delete_atr_multiple(record_id))


# ---------------------------------------------------------------------------
# Trading configs
# ---------------------------------------------------------------------------


@router.get("/trading_configs")
async def list_trading_configs(request: Request) -> JSONResponse:
    table_store = request.app.state.table_store
    try:
        configs = await table_store.list_trading_configs()
    except TableStoreError as e:
        log.error("table_store_request_failed", error=str(e), status=e.status_code)
        return JSONResponse(
            content={"success": False, "error": str(e)}, status_code=e.status_code
        )
    return JSONResponse(
        content={
            "success": True,
            "data": jsonable_encoder(configs),
            "count": len(configs),
        }
    )


@router.post("/trading_configs")
async def create_trading_config(request: Request, body: TradingConfigCreate) -> JSONResponse:
    return await _respond(request.app.state.table_store.create_trading_config(body))


@router.get("/trading_configs/{symbol}")
async def get_trading_config(request: Request, symbol: str) -> JSONResponse:
    return await _respond(request.app.state.table_store.get_trading_config(symbol))


@router.put("/trading_configs/{symbol}")
async def update_trading_config(
    request: Request, symbol: str, body: TradingConfigUpdate
) -> JSONResponse:
    return await _respond(
        request.app.state.table_store.update_trading_config(symbol, body)
    )


@router.delete("/trading_configs/{symbol}")
async def delete_trading_config(request: Request, symbol: str) -> JSONResponse:
    return await _respond(request.app.state.table_store.delete_trading_config(symbol))
