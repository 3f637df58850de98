"""Entry point for the futures dashboard backend.

Wires components together and serves the FastAPI dashboard with uvicorn.
The lifespan context manager publishes components on ``app.state`` at
startup and closes the pooled HTTP clients at shutdown.

Component wiring order (in build_components):
1. AppSettings (configuration)
2. Logging setup
3. SignedApiClient (signed Binance gateway)
4. DailyPnlAggregator (chunked daily P&L)
5. AccountService (account snapshot parsing)
6. TableStoreClient (configuration records)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from tradedesk.account import AccountService
from tradedesk.config import AppSettings
from tradedesk.dashboard.app import create_dashboard_app
from tradedesk.exchange.client import SignedApiClient
from tradedesk.logging import get_logger, setup_logging
from tradedesk.pnl.aggregator import DailyPnlAggregator
from tradedesk.records.client import TableStoreClient


def build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all backend components from settings.

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    logger = get_logger("tradedesk.main")

    exchange_client = SignedApiClient.from_settings(settings.exchange)
    if not exchange_client.has_credentials and not settings.use_mock_data:
        logger.warning(
            "no_api_keys_configured",
            note="Ping works. Account, trades, orders, income and daily P&L will fail.",
        )

    aggregator = DailyPnlAggregator(exchange_client, settings.pnl)
    account_service = AccountService(exchange_client)
    table_store = TableStoreClient(settings.table_store)

    return {
        "exchange_client": exchange_client,
        "aggregator": aggregator,
        "account_service": account_service,
        "table_store": table_store,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Publish components on app.state; close HTTP clients on shutdown."""
    logger = get_logger("tradedesk.main")
    components = app.state.components

    app.state.exchange_client = components["exchange_client"]
    app.state.aggregator = components["aggregator"]
    app.state.account_service = components["account_service"]
    app.state.table_store = components["table_store"]

    logger.info("lifespan_started", mock_data=app.state.settings.use_mock_data)

    yield

    await components["exchange_client"].close()
    await components["table_store"].close()
    logger.info("tradedesk_stopped")


async def run() -> None:
    """Load settings, build components, and serve the dashboard."""
    settings = AppSettings()
    setup_logging(settings.log_level)
    logger = get_logger("tradedesk.main")

    components = build_components(settings)

    app = create_dashboard_app(lifespan=lifespan)
    app.state.settings = settings
    app.state.components = components

    logger.info(
        "starting_dashboard",
        host=settings.dashboard.host,
        port=settings.dashboard.port,
    )

    config = uvicorn.Config(
        app,
        host=settings.dashboard.host,
        port=settings.dashboard.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
