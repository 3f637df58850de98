"""FastAPI dashboard application factory.

The dashboard is a JSON API consumed by the presentation layer. Route
handlers read their collaborators from ``app.state`` (wired by main.py's
lifespan, or directly by tests).
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from tradedesk.dashboard.routes import exchange, records


def create_dashboard_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI dashboard application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to inject startup/shutdown logic.

    Returns:
        Configured FastAPI application with exchange and records routes.
    """
    app = FastAPI(
        title="Futures Trading Dashboard",
        lifespan=lifespan,
    )

    app.include_router(exchange.router, prefix="/api/binance")
    app.include_router(records.router, prefix="/api")

    return app
