"""Shared data models for the futures dashboard backend.

All monetary values use Decimal. Upstream numeric fields arrive as strings
and pass through safe_decimal exactly once, at ingestion.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Context, Decimal, InvalidOperation, localcontext
from typing import Any

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Arithmetic on upstream values: overflow yields Infinity instead of raising
_UNTRAPPED = Context(traps=[])


def safe_decimal(value: Any) -> Decimal:
    """Parse an upstream numeric field into a finite Decimal.

    Fallback contract: None, empty strings, unparseable text, booleans, NaN
    and infinities all become ``Decimal("0")``. Never raises.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not result.is_finite():
        return ZERO
    return result


def _finite_or_zero(value: Decimal) -> Decimal:
    return value if value.is_finite() else ZERO


def utc_date(timestamp_ms: int) -> str:
    """Return the UTC calendar date (YYYY-MM-DD) of a millisecond timestamp."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).date().isoformat()


@dataclass(frozen=True)
class TradeExecution:
    """One fill (full or partial) of an order, as reported by userTrades."""

    symbol: str
    executed_qty: Decimal
    price: Decimal
    realized_pnl: Decimal
    time_ms: int
    trade_id: str = ""

    @classmethod
    def from_raw(cls, raw: dict) -> "TradeExecution | None":
        """Build from a raw userTrades record.

        Returns None when the record has no usable execution time (missing,
        non-positive, or outside the representable calendar), since it
        cannot be assigned to a day. Invalid numeric fields become 0.
        """
        time_value = safe_decimal(raw.get("time"))
        if time_value <= 0:
            return None
        time_ms = int(time_value)
        try:
            utc_date(time_ms)
        except (OverflowError, OSError, ValueError):
            return None
        return cls(
            symbol=str(raw.get("symbol", "")),
            executed_qty=safe_decimal(raw.get("qty")),
            price=safe_decimal(raw.get("price")),
            realized_pnl=safe_decimal(raw.get("realizedPnl")),
            time_ms=time_ms,
            trade_id=str(raw.get("id", "")),
        )

    @property
    def initial_investment(self) -> Decimal:
        """Notional of this fill: quantity times execution price (0 on overflow)."""
        with localcontext(_UNTRAPPED):
            return _finite_or_zero(self.executed_qty * self.price)

    @property
    def return_percentage(self) -> Decimal:
        """Realized P&L as a percentage of this fill's notional.

        Zero when nothing was realized, the notional is not positive, or the
        result is not a finite number.
        """
        investment = self.initial_investment
        if self.realized_pnl == 0 or investment <= 0:
            return ZERO
        with localcontext(_UNTRAPPED):
            return _finite_or_zero(self.realized_pnl / investment * HUNDRED)

    @property
    def date(self) -> str:
        return utc_date(self.time_ms)


@dataclass
class DailyBucket:
    """Accumulator for all executions on one UTC calendar date."""

    date: str
    percentage_sum: Decimal = ZERO
    absolute_pnl_sum: Decimal = ZERO
    execution_count: int = 0

    def add(self, execution: TradeExecution) -> None:
        """Accumulate one execution; a sum that would overflow keeps its prior value."""
        with localcontext(_UNTRAPPED):
            percentage_sum = self.percentage_sum + execution.return_percentage
            pnl_sum = self.absolute_pnl_sum + execution.realized_pnl
        if percentage_sum.is_finite():
            self.percentage_sum = percentage_sum
        if pnl_sum.is_finite():
            self.absolute_pnl_sum = pnl_sum
        self.execution_count += 1


@dataclass(frozen=True)
class DailyPnlEntry:
    """One day of the gap-filled daily P&L series."""

    date: str
    pnl: Decimal = ZERO  # quote-currency units
    percentage_pnl: Decimal = ZERO  # percentage points, already x100
    trade_count: int = 0

    @classmethod
    def from_bucket(cls, bucket: DailyBucket) -> "DailyPnlEntry":
        return cls(
            date=bucket.date,
            pnl=bucket.absolute_pnl_sum,
            percentage_pnl=bucket.percentage_sum,
            trade_count=bucket.execution_count,
        )

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "pnl": str(self.pnl),
            "percentagePnl": str(self.percentage_pnl),
            "tradeCount": self.trade_count,
        }
