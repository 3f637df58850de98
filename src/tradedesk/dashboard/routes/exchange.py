"""JSON endpoints for futures account state and the daily P&L series.

Every response uses the ``{"success": bool, "data"|"error": ...}`` envelope.
Exchange failures answer 400 (the upstream error text is preserved),
malformed upstream data 502, and an unreachable exchange on /ping 503.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from tradedesk import mock_data
from tradedesk.account import AccountSnapshot, todays_pnl
from tradedesk.exceptions import ConfigurationError, DataShapeError, UpstreamRequestError
from tradedesk.exchange.types import ApiResult, now_ms
from tradedesk.pnl.aggregator import DailyPnlResult

log = structlog.get_logger(__name__)

router = APIRouter()


def _use_mock(request: Request) -> bool:
    return request.app.state.settings.use_mock_data


def _now_ms(request: Request) -> int:
    clock = getattr(request.app.state, "clock", now_ms)
    return clock()


def _result_response(result: ApiResult) -> JSONResponse:
    return JSONResponse(content=result.to_dict(), status_code=200 if result.success else 400)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(content={"success": False, "error": message}, status_code=status_code)


async def _load_snapshot(request: Request) -> AccountSnapshot:
    if _use_mock(request):
        return AccountSnapshot.from_raw(mock_data.mock_account_info(_now_ms(request)))
    return await request.app.state.account_service.get_snapshot()


@router.get("/account")
async def get_account(request: Request) -> JSONResponse:
    """Balances, non-empty assets, and open positions."""
    try:
        snapshot = await _load_snapshot(request)
    except (ConfigurationError, UpstreamRequestError) as e:
        return _error(str(e), 400)
    except DataShapeError as e:
        log.error("account_snapshot_bad_shape", error=str(e))
        return _error(str(e), 502)
    return JSONResponse(content={"success": True, "data": snapshot.to_dict()})


@router.get("/trades")
async def get_trades(
    request: Request, symbol: str | None = None, limit: int = 50
) -> JSONResponse:
    """Most recent trade executions."""
    if _use_mock(request):
        return JSONResponse(
            content={"success": True, "data": mock_data.mock_user_trades(_now_ms(request))}
        )
    client = request.app.state.exchange_client
    result = await client.get_user_trades(symbol=symbol, limit=limit)
    return _result_response(result)


@router.get("/orders")
async def get_open_orders(request: Request, symbol: str | None = None) -> JSONResponse:
    """Open orders for one symbol or the whole account."""
    if _use_mock(request):
        return JSONResponse(
            content={"success": True, "data": mock_data.mock_open_orders(_now_ms(request))}
        )
    client = request.app.state.exchange_client
    return _result_response(await client.get_open_orders(symbol=symbol))


@router.get("/income")
async def get_income(
    request: Request,
    symbol: str | None = None,
    incomeType: str | None = None,
    startTime: int | None = None,
    endTime: int | None = None,
    limit: int = 1000,
) -> JSONResponse:
    """Income history (realized P&L, commissions, funding fees)."""
    client = request.app.state.exchange_client
    result = await client.get_income_history(
        symbol=symbol,
        income_type=incomeType,
        start_time=startTime,
        end_time=endTime,
        limit=limit,
    )
    return _result_response(result)


@router.get("/ping")
async def ping(request: Request) -> JSONResponse:
    """Unsigned connectivity check."""
    result = await request.app.state.exchange_client.ping()
    if result.success:
        return JSONResponse(
            content={"success": True, "data": True, "message": "Binance API is reachable"}
        )
    return _error(result.error or "Failed to connect to Binance API", 503)


async def _daily_pnl(request: Request, days: int) -> DailyPnlResult:
    if _use_mock(request):
        today = datetime.fromtimestamp(_now_ms(request) / 1000, tz=timezone.utc).date()
        return DailyPnlResult(
            success=True,
            series=mock_data.mock_daily_pnl(days, today),
            chunks_requested=0,
        )
    return await request.app.state.aggregator.daily_pnl(days)


@router.get("/daily-pnl-percentage")
async def get_daily_pnl_percentage(request: Request, days: int | None = None) -> JSONResponse:
    """Gap-filled daily P&L series for the trailing ``days`` UTC days."""
    pnl_settings = request.app.state.settings.pnl
    days = pnl_settings.default_days if days is None else days
    if days <= 0 or days > pnl_settings.max_days:
        return _error(f"days must be between 1 and {pnl_settings.max_days}", 400)

    result = await _daily_pnl(request, days)
    if not result.success:
        log.error("daily_pnl_request_failed", days=days, error=result.error)
    return JSONResponse(content=result.to_dict(), status_code=200 if result.success else 400)


@router.get("/today")
async def get_todays_pnl(request: Request) -> JSONResponse:
    """Today's absolute and percentage P&L against the current wallet balance."""
    try:
        snapshot = await _load_snapshot(request)
    except (ConfigurationError, UpstreamRequestError) as e:
        return _error(str(e), 400)
    except DataShapeError as e:
        return _error(str(e), 502)

    result = await _daily_pnl(request, 1)
    if not result.success:
        return _error(result.error or "Failed to calculate daily P&L", 400)

    today_entry = result.series[-1] if result.series else None
    return JSONResponse(content={"success": True, "data": todays_pnl(snapshot, today_entry)})
