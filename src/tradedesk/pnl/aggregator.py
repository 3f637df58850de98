"""Daily percentage P&L aggregation over chunked trade history.

Binance serves at most 7 days of userTrades per request, so the trailing
``days`` window is split into 7-day chunks, fetched sequentially (most recent
first) with a short pause between requests to stay inside the rate budget.
Executions from every successful chunk are folded into per-UTC-date buckets
and expanded into a gap-filled series of exactly ``days`` entries.

Each execution contributes its own return percentage
(realized P&L / (qty * price) * 100); a day's percentage is the SUM of
those returns, not a time-weighted portfolio return.

Failure policy:
  - A failed chunk (timeout, transport, upstream, bad body) is logged and
    skipped; the series then reflects only the chunks that succeeded.
  - Missing or rejected credentials abort the whole aggregation with an
    error result, because the account cannot be queried at all.
"""

import asyncio
import math
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from tradedesk.config import PnlSettings
from tradedesk.exchange.client import MISSING_CREDENTIALS, SignedApiClient
from tradedesk.exchange.types import ApiResult, Clock, ErrorKind, now_ms
from tradedesk.logging import get_logger
from tradedesk.models import DailyBucket, DailyPnlEntry, TradeExecution

logger = get_logger(__name__)

DAY_MS = 24 * 60 * 60 * 1000

# Upstream statuses meaning the API key itself was refused
_REJECTED_KEY_STATUSES = frozenset({401, 403})


@dataclass(frozen=True)
class ChunkWindow:
    """One bounded history request, ``[start_ms, end_ms]``."""

    index: int
    start_ms: int
    end_ms: int


@dataclass
class DailyPnlResult:
    """Outcome of one aggregation call.

    ``status`` distinguishes a confirmed series from one built on missing
    data: "complete" when every chunk was fetched, "partial" when some were
    skipped, "unavailable" when none succeeded (the series is zero-filled
    but is not evidence of zero trades).
    """

    success: bool
    series: list[DailyPnlEntry] = field(default_factory=list)
    error: str | None = None
    error_kind: ErrorKind | None = None
    chunks_requested: int = 0
    chunks_failed: int = 0

    @property
    def status(self) -> str:
        if not self.success:
            return "error"
        if self.chunks_failed == 0:
            return "complete"
        if self.chunks_failed < self.chunks_requested:
            return "partial"
        return "unavailable"

    @classmethod
    def failure(cls, kind: ErrorKind, error: str) -> "DailyPnlResult":
        return cls(success=False, error=error, error_kind=kind)

    def to_dict(self) -> dict:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "data": [entry.to_dict() for entry in self.series],
            "status": self.status,
            "chunksRequested": self.chunks_requested,
            "chunksFailed": self.chunks_failed,
        }


def plan_chunks(days: int, now: int, max_days_per_request: int = 7) -> list[ChunkWindow]:
    """Split the trailing ``days`` window ending at ``now`` into request chunks.

    Chunk ``i`` ends at ``now - i * max_days`` and starts ``max_days`` earlier,
    clamped so no chunk reaches before ``now - days``. Most recent first.
    """
    window_start = now - days * DAY_MS
    span = max_days_per_request * DAY_MS
    count = math.ceil(days / max_days_per_request)

    chunks = []
    for i in range(count):
        end = now - i * span
        start = max(end - span, window_start)
        chunks.append(ChunkWindow(index=i, start_ms=start, end_ms=end))
    return chunks


def bucket_executions(executions: Iterable[TradeExecution]) -> dict[str, DailyBucket]:
    """Fold executions into one DailyBucket per UTC date."""
    buckets: dict[str, DailyBucket] = {}
    for execution in executions:
        day = execution.date
        bucket = buckets.get(day)
        if bucket is None:
            bucket = buckets[day] = DailyBucket(date=day)
        bucket.add(execution)
    return buckets


def assemble_series(
    buckets: dict[str, DailyBucket], days: int, today: date
) -> list[DailyPnlEntry]:
    """Build exactly ``days`` chronological entries ending on ``today``.

    Days without a bucket are zero-filled.
    """
    series = []
    for offset in range(days - 1, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        bucket = buckets.get(day)
        series.append(
            DailyPnlEntry.from_bucket(bucket) if bucket else DailyPnlEntry(date=day)
        )
    return series


def parse_executions(payload: object) -> list[TradeExecution] | None:
    """Convert a userTrades payload to executions; None if it is not a list."""
    if not isinstance(payload, list):
        return None
    executions = []
    for raw in payload:
        if not isinstance(raw, dict):
            continue
        execution = TradeExecution.from_raw(raw)
        if execution is not None:
            executions.append(execution)
    return executions


class DailyPnlAggregator:
    """Computes the trailing-N-day percentage P&L series for one account.

    Holds no per-call state, so concurrent calls do not interfere.

    Args:
        client: Signed gateway used to fetch trade executions.
        settings: Chunk size, inter-chunk delay, and request limit.
        clock: Current time in Unix ms. Injectable for deterministic tests.
        sleep: Coroutine used for the inter-chunk pause.
    """

    def __init__(
        self,
        client: SignedApiClient,
        settings: PnlSettings,
        clock: Clock = now_ms,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._settings = settings
        self._clock = clock
        self._sleep = sleep

    async def daily_pnl(self, days: int) -> DailyPnlResult:
        """Return the gap-filled daily P&L series for the trailing ``days``.

        ``days`` must be an int in ``1..settings.max_days``; anything else is
        an INVALID_REQUEST failure and nothing is fetched.
        """
        max_days = self._settings.max_days
        if (
            isinstance(days, bool)
            or not isinstance(days, int)
            or days <= 0
            or days > max_days
        ):
            return DailyPnlResult.failure(
                ErrorKind.INVALID_REQUEST, f"days must be an integer between 1 and {max_days}"
            )
        if not self._client.has_credentials:
            logger.error("daily_pnl_not_configured")
            return DailyPnlResult.failure(ErrorKind.CONFIGURATION, MISSING_CREDENTIALS)

        now = self._clock()
        chunks = plan_chunks(days, now, self._settings.max_days_per_request)
        executions: list[TradeExecution] = []
        failed = 0

        for chunk in chunks:
            result = await self._fetch_chunk(chunk, len(chunks))
            if _is_fatal(result):
                logger.error(
                    "daily_pnl_aborted",
                    chunk=chunk.index + 1,
                    kind=result.error_kind,
                    error=result.error,
                )
                return DailyPnlResult.failure(
                    ErrorKind.CONFIGURATION, result.error or MISSING_CREDENTIALS
                )

            parsed = parse_executions(result.data) if result.success else None
            if parsed is None:
                failed += 1
                logger.warning(
                    "daily_pnl_chunk_failed",
                    chunk=chunk.index + 1,
                    total=len(chunks),
                    kind=result.error_kind or ErrorKind.DATA_SHAPE,
                    error=result.error or "userTrades response is not a list",
                )
            else:
                executions.extend(parsed)

            if chunk.index < len(chunks) - 1:
                await self._sleep(self._settings.chunk_delay_seconds)

        today = datetime.fromtimestamp(now / 1000, tz=timezone.utc).date()
        if not executions:
            logger.info("daily_pnl_no_trades", days=days, chunks_failed=failed)
            return DailyPnlResult(
                success=True,
                series=assemble_series({}, days, today),
                chunks_requested=len(chunks),
                chunks_failed=failed,
            )

        buckets = bucket_executions(executions)
        series = assemble_series(buckets, days, today)

        logger.info(
            "daily_pnl_calculated",
            days=days,
            executions=len(executions),
            active_days=sum(1 for entry in series if entry.trade_count),
            chunks_failed=failed,
        )
        return DailyPnlResult(
            success=True,
            series=series,
            chunks_requested=len(chunks),
            chunks_failed=failed,
        )

    async def _fetch_chunk(self, chunk: ChunkWindow, total: int) -> ApiResult:
        logger.debug(
            "daily_pnl_fetching_chunk",
            chunk=chunk.index + 1,
            total=total,
            start=chunk.start_ms,
            end=chunk.end_ms,
        )
        return await self._client.get_user_trades(
            start_time=chunk.start_ms,
            end_time=chunk.end_ms,
            limit=self._settings.trades_limit,
        )


def _is_fatal(result: ApiResult) -> bool:
    if result.success:
        return False
    if result.error_kind == ErrorKind.CONFIGURATION:
        return True
    return (
        result.error_kind == ErrorKind.UPSTREAM
        and result.status_code in _REJECTED_KEY_STATUSES
    )
