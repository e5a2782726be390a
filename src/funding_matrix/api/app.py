"""FastAPI application factory for the trigger and read endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from funding_matrix.api.routes import cron, funding


def create_app(lifespan: Any = None) -> FastAPI:
    """Create the API application.

    Route handlers read `orchestrator` and `history_service` from app.state;
    main.py's lifespan (or a test) is responsible for setting them.
    """
    app = FastAPI(title="Funding Rate Spread Matrix", lifespan=lifespan)
    app.include_router(cron.router, prefix="/api", tags=["cron"])
    app.include_router(funding.router, prefix="/api", tags=["funding"])

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app
