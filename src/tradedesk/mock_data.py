"""Canned exchange data served when ``USE_MOCK_DATA`` is enabled.

Shapes match the live Binance responses so the same parsing path runs in
both modes. The daily series is pseudo-random but seeded, so repeated
requests for the same day render the same chart.
"""

import random
from datetime import date, timedelta
from decimal import Decimal

from tradedesk.models import DailyPnlEntry


def mock_account_info(now_ms: int) -> dict:
    return {
        "totalWalletBalance": "12500.50",
        "totalUnrealizedProfit": "250.75",
        "totalMarginBalance": "12751.25",
        "availableBalance": "10000.50",
        "updateTime": now_ms,
        "assets": [
            {
                "asset": "USDT",
                "walletBalance": "12500.50",
                "unrealizedProfit": "250.75",
                "marginBalance": "12751.25",
                "availableBalance": "10000.50",
            },
        ],
        "positions": [
            {
                "symbol": "BTCUSDT",
                "positionSide": "LONG",
                "positionAmt": "0.5",
                "entryPrice": "42000.50",
                "unrealizedProfit": "150.25",
                "leverage": "10",
                "notional": "21075.375",
            },
            {
                "symbol": "ETHUSDT",
                "positionSide": "LONG",
                "positionAmt": "3.0",
                "entryPrice": "2500.00",
                "unrealizedProfit": "100.50",
                "leverage": "5",
                "notional": "7620.30",
            },
        ],
    }


def mock_user_trades(now_ms: int) -> list[dict]:
    return [
        {
            "symbol": "BTCUSDT",
            "id": 1,
            "orderId": 12345,
            "side": "BUY",
            "qty": "0.5",
            "price": "42000.50",
            "commission": "4.20",
            "commissionAsset": "USDT",
            "time": now_ms - 3_600_000,
            "positionSide": "LONG",
            "buyer": True,
            "maker": False,
            "realizedPnl": "0.00",
        },
        {
            "symbol": "ETHUSDT",
            "id": 2,
            "orderId": 12346,
            "side": "SELL",
            "qty": "3.0",
            "price": "2540.00",
            "commission": "3.75",
            "commissionAsset": "USDT",
            "time": now_ms - 7_200_000,
            "positionSide": "LONG",
            "buyer": False,
            "maker": True,
            "realizedPnl": "120.00",
        },
    ]


def mock_open_orders(now_ms: int) -> list[dict]:
    return [
        {
            "orderId": 1,
            "symbol": "BTCUSDT",
            "price": "49000",
            "origQty": "0.1",
            "side": "BUY",
            "status": "NEW",
            "time": now_ms - 5_000,
            "type": "LIMIT",
        },
        {
            "orderId": 2,
            "symbol": "ETHUSDT",
            "price": "3100",
            "origQty": "1",
            "side": "SELL",
            "status": "NEW",
            "time": now_ms - 15_000,
            "type": "LIMIT",
        },
    ]


def mock_daily_pnl(days: int, today: date) -> list[DailyPnlEntry]:
    """Seeded series with percentages in [-5, 5] and 1-10 trades per day."""
    rng = random.Random(today.toordinal())
    series = []
    for offset in range(days - 1, -1, -1):
        percentage = Decimal(str(round((rng.random() - 0.5) * 10, 4)))
        series.append(
            DailyPnlEntry(
                date=(today - timedelta(days=offset)).isoformat(),
                pnl=percentage * 1000,
                percentage_pnl=percentage,
                trade_count=rng.randint(1, 10),
            )
        )
    return series
