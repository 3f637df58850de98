"""Daily P&L aggregation from chunked trade-execution history."""

from tradedesk.pnl.aggregator import (
    ChunkWindow,
    DailyPnlAggregator,
    DailyPnlResult,
    assemble_series,
    bucket_executions,
    plan_chunks,
)

__all__ = [
    "ChunkWindow",
    "DailyPnlAggregator",
    "DailyPnlResult",
    "assemble_series",
    "bucket_executions",
    "plan_chunks",
]
