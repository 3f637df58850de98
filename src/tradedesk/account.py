"""Account snapshot: balances, assets, and open positions from /fapi/v2/account.

Unlike the daily P&L series, a snapshot with missing totals would show the
user wrong balances, so malformed responses raise DataShapeError instead of
degrading to zeros.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from tradedesk.exceptions import ConfigurationError, DataShapeError, UpstreamRequestError
from tradedesk.exchange.client import MISSING_CREDENTIALS, SignedApiClient
from tradedesk.exchange.types import ErrorKind
from tradedesk.logging import get_logger
from tradedesk.models import HUNDRED, ZERO, DailyPnlEntry, safe_decimal

logger = get_logger(__name__)

REQUIRED_TOTALS = (
    "totalWalletBalance",
    "totalUnrealizedProfit",
    "totalMarginBalance",
    "availableBalance",
)


@dataclass(frozen=True)
class AssetBalance:
    asset: str
    wallet_balance: Decimal
    unrealized_profit: Decimal
    margin_balance: Decimal
    available_balance: Decimal

    def to_dict(self) -> dict:
        return {
            "asset": self.asset,
            "walletBalance": str(self.wallet_balance),
            "unrealizedProfit": str(self.unrealized_profit),
            "marginBalance": str(self.margin_balance),
            "availableBalance": str(self.available_balance),
        }


@dataclass(frozen=True)
class OpenPosition:
    symbol: str
    position_side: str
    position_amt: Decimal
    entry_price: Decimal
    unrealized_profit: Decimal
    leverage: int
    notional: Decimal

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "positionSide": self.position_side,
            "positionAmt": str(self.position_amt),
            "entryPrice": str(self.entry_price),
            "unrealizedProfit": str(self.unrealized_profit),
            "leverage": self.leverage,
            "notional": str(self.notional),
        }


@dataclass(frozen=True)
class AccountSnapshot:
    """Parsed futures account state shown on the dashboard."""

    total_wallet_balance: Decimal
    total_unrealized_pnl: Decimal
    total_margin_balance: Decimal
    available_balance: Decimal
    assets: list[AssetBalance] = field(default_factory=list)
    positions: list[OpenPosition] = field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: object) -> "AccountSnapshot":
        """Parse a /fapi/v2/account body.

        Zero-balance assets and flat positions are dropped.

        Raises:
            DataShapeError: If the body is not an object, a required total
                is missing, or assets/positions are not lists.
        """
        if not isinstance(raw, dict):
            raise DataShapeError("Account response is not a JSON object")
        missing = [name for name in REQUIRED_TOTALS if name not in raw]
        if missing:
            raise DataShapeError(f"Account response missing fields: {', '.join(missing)}")

        raw_assets = raw.get("assets", [])
        raw_positions = raw.get("positions", [])
        if not isinstance(raw_assets, list) or not isinstance(raw_positions, list):
            raise DataShapeError("Account assets/positions must be lists")

        assets = [
            AssetBalance(
                asset=str(a.get("asset", "")),
                wallet_balance=safe_decimal(a.get("walletBalance")),
                unrealized_profit=safe_decimal(a.get("unrealizedProfit")),
                margin_balance=safe_decimal(a.get("marginBalance")),
                available_balance=safe_decimal(a.get("availableBalance")),
            )
            for a in raw_assets
            if isinstance(a, dict)
        ]
        positions = [
            OpenPosition(
                symbol=str(p.get("symbol", "")),
                position_side=str(p.get("positionSide", "BOTH")),
                position_amt=safe_decimal(p.get("positionAmt")),
                entry_price=safe_decimal(p.get("entryPrice")),
                unrealized_profit=safe_decimal(p.get("unrealizedProfit")),
                leverage=int(safe_decimal(p.get("leverage"))),
                notional=safe_decimal(p.get("notional")),
            )
            for p in raw_positions
            if isinstance(p, dict)
        ]

        return cls(
            total_wallet_balance=safe_decimal(raw["totalWalletBalance"]),
            total_unrealized_pnl=safe_decimal(raw["totalUnrealizedProfit"]),
            total_margin_balance=safe_decimal(raw["totalMarginBalance"]),
            available_balance=safe_decimal(raw["availableBalance"]),
            assets=[a for a in assets if a.wallet_balance != 0 or a.unrealized_profit != 0],
            positions=[p for p in positions if p.position_amt != 0],
        )

    def to_dict(self) -> dict:
        return {
            "totalWalletBalance": str(self.total_wallet_balance),
            "totalUnrealizedProfit": str(self.total_unrealized_pnl),
            "totalMarginBalance": str(self.total_margin_balance),
            "availableBalance": str(self.available_balance),
            "assets": [a.to_dict() for a in self.assets],
            "positions": [p.to_dict() for p in self.positions],
        }


def todays_pnl(snapshot: AccountSnapshot, today_entry: DailyPnlEntry | None) -> dict:
    """Summarize today's performance for the dashboard header card.

    Uses the summed per-execution percentage when today's entry has trades;
    otherwise falls back to P&L relative to the start-of-day wallet balance.
    """
    pnl = today_entry.pnl if today_entry else ZERO
    start_of_day = snapshot.total_wallet_balance - pnl

    if today_entry is not None and today_entry.trade_count > 0:
        percentage = today_entry.percentage_pnl
    elif start_of_day > 0:
        percentage = pnl / start_of_day * HUNDRED
    else:
        percentage = ZERO

    return {
        "date": today_entry.date if today_entry else None,
        "pnl": str(pnl),
        "percentagePnl": str(percentage),
        "tradeCount": today_entry.trade_count if today_entry else 0,
        "startOfDayBalance": str(start_of_day),
        "totalWalletBalance": str(snapshot.total_wallet_balance),
    }


class AccountService:
    """Fetches and parses account state through the signed gateway."""

    def __init__(self, client: SignedApiClient) -> None:
        self._client = client

    async def get_snapshot(self) -> AccountSnapshot:
        """Fetch and parse the current account snapshot.

        Raises:
            ConfigurationError: If no API credentials are configured.
            UpstreamRequestError: If the gateway call failed.
            DataShapeError: If the response is malformed.
        """
        result = await self._client.get_account_info()
        if result.error_kind == ErrorKind.CONFIGURATION:
            raise ConfigurationError(result.error or MISSING_CREDENTIALS)
        if not result.success:
            raise UpstreamRequestError(
                result.error or "Failed to fetch account information",
                kind=result.error_kind,
                status_code=result.status_code,
            )
        snapshot = AccountSnapshot.from_raw(result.data)
        logger.info(
            "account_snapshot_fetched",
            assets=len(snapshot.assets),
            positions=len(snapshot.positions),
        )
        return snapshot
