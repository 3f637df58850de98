"""Signed REST gateway for the Binance USD-M futures API via httpx async.

Every private call is stamped with a millisecond timestamp, signed with
HMAC-SHA256 over the canonical query string, and sent with the API key
header. Results come back as ApiResult values; this class never raises
across its boundary and never retries (retry policy belongs to callers).
"""

from typing import Any

import httpx

from tradedesk.config import ExchangeSettings
from tradedesk.exchange.signing import Params, build_signed_request
from tradedesk.exchange.types import ApiResult, Clock, Credential, ErrorKind, now_ms
from tradedesk.logging import get_logger

logger = get_logger(__name__)

API_KEY_HEADER = "X-MBX-APIKEY"
MISSING_CREDENTIALS = "Binance API credentials are not configured"


class SignedApiClient:
    """Authenticated client for the futures REST API.

    Holds only the immutable credential and a pooled httpx.AsyncClient, so a
    single instance can be shared by concurrent requests.

    Args:
        credential: Key pair used for signing.
        base_url: API host, e.g. ``https://fapi.binance.com``.
        timeout: Fixed per-request timeout in seconds.
        clock: Source of the request timestamp (Unix ms). Injectable for tests.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        credential: Credential,
        base_url: str = "https://fapi.binance.com",
        timeout: float = 10.0,
        clock: Clock = now_ms,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credential = credential
        self._clock = clock
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ExchangeSettings,
        clock: Clock = now_ms,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SignedApiClient":
        credential = Credential(
            key=settings.api_key.get_secret_value(),
            secret=settings.api_secret.get_secret_value(),
        )
        return cls(
            credential,
            base_url=settings.base_url,
            timeout=settings.request_timeout,
            clock=clock,
            transport=transport,
        )

    @property
    def has_credentials(self) -> bool:
        return self._credential.is_complete

    async def close(self) -> None:
        """Release pooled HTTP connections."""
        await self._http.aclose()

    async def call(
        self,
        method: str,
        path: str,
        params: Params | None = None,
        credential: Credential | None = None,
    ) -> ApiResult:
        """Issue one signed request and normalize the outcome.

        Args:
            method: HTTP method (GET for every endpoint used here).
            path: API path starting with ``/fapi/``.
            params: Ordered request parameters without timestamp/signature.
            credential: Overrides the client's own credential for this call.

        Returns:
            ApiResult with parsed JSON on 2xx, otherwise a tagged failure.
        """
        cred = credential or self._credential
        if not cred.is_complete:
            logger.error("signed_request_not_configured", path=path)
            return ApiResult.fail(ErrorKind.CONFIGURATION, MISSING_CREDENTIALS)

        try:
            request = build_signed_request(method, path, params, cred, self._clock())
        except ValueError as e:
            return ApiResult.fail(ErrorKind.INVALID_REQUEST, str(e))

        try:
            response = await self._http.request(
                request.method,
                request.url,
                headers={API_KEY_HEADER: cred.key},
            )
        except httpx.TimeoutException as e:
            logger.warning("signed_request_timeout", path=path, error=str(e))
            return ApiResult.fail(ErrorKind.TIMEOUT, f"Request timed out: {path}")
        except httpx.TransportError as e:
            logger.warning("signed_request_transport_error", path=path, error=str(e))
            return ApiResult.fail(ErrorKind.TRANSPORT, str(e) or type(e).__name__)

        return self._normalize(path, response)

    async def ping(self) -> ApiResult:
        """Unsigned connectivity check against ``/fapi/v1/ping``."""
        try:
            response = await self._http.get("/fapi/v1/ping")
        except httpx.TimeoutException:
            return ApiResult.fail(ErrorKind.TIMEOUT, "Request timed out: /fapi/v1/ping")
        except httpx.TransportError as e:
            return ApiResult.fail(ErrorKind.TRANSPORT, str(e) or type(e).__name__)

        if response.is_success:
            return ApiResult.ok(True, status_code=response.status_code)
        return ApiResult.fail(
            ErrorKind.UPSTREAM,
            f"Binance API unreachable: {response.status_code} {response.reason_phrase}",
            status_code=response.status_code,
        )

    # ──────────────────────────────────────────────
    # Endpoint helpers
    # ──────────────────────────────────────────────

    async def get_account_info(self) -> ApiResult:
        """Futures account balances, assets, and positions."""
        return await self.call("GET", "/fapi/v2/account")

    async def get_user_trades(
        self,
        symbol: str | None = None,
        start_time: int | None = None,
        end_time: int | None = None,
        limit: int = 50,
    ) -> ApiResult:
        """Trade executions, optionally bounded to ``[start_time, end_time]``.

        Binance rejects windows wider than 7 days; callers chunk longer ranges.
        """
        return await self.call(
            "GET",
            "/fapi/v1/userTrades",
            {
                "symbol": symbol,
                "startTime": start_time,
                "endTime": end_time,
                "limit": limit,
            },
        )

    async def get_income_history(
        self,
        symbol: str | None = None,
        income_type: str | None = None,
        start_time: int | None = None,
        end_time: int | None = None,
        limit: int = 1000,
    ) -> ApiResult:
        """Income records (REALIZED_PNL, COMMISSION, FUNDING_FEE, ...)."""
        return await self.call(
            "GET",
            "/fapi/v1/income",
            {
                "symbol": symbol,
                "incomeType": income_type,
                "startTime": start_time,
                "endTime": end_time,
                "limit": limit,
            },
        )

    async def get_open_orders(self, symbol: str | None = None) -> ApiResult:
        """Currently open orders, for one symbol or all."""
        return await self.call("GET", "/fapi/v1/openOrders", {"symbol": symbol})

    @staticmethod
    def _normalize(path: str, response: httpx.Response) -> ApiResult:
        if not response.is_success:
            body = response.text
            logger.error(
                "signed_request_failed",
                path=path,
                status=response.status_code,
                reason=response.reason_phrase,
                body=body,
            )
            return ApiResult.fail(
                ErrorKind.UPSTREAM,
                f"{response.status_code} {response.reason_phrase} - {body}",
                status_code=response.status_code,
            )

        try:
            data: Any = response.json()
        except ValueError:
            logger.error("signed_request_bad_json", path=path, status=response.status_code)
            return ApiResult.fail(
                ErrorKind.DATA_SHAPE,
                f"Response from {path} is not valid JSON",
                status_code=response.status_code,
            )

        logger.debug(
            "signed_request_ok",
            path=path,
            records=len(data) if isinstance(data, list) else None,
        )
        return ApiResult.ok(data, status_code=response.status_code)
