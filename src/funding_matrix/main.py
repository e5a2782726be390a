"""Entry point for the funding rate aggregator.

Wires all components, then serves the trigger/read API with uvicorn. The
aggregation cycle itself is driven by an external scheduler calling
GET /api/cron/update-funding on a fixed cadence.

Component wiring order (in _build_components):
1. AppSettings (configuration)
2. Logging setup
3. JsonHttpClient (shared aiohttp session, per-request timeout)
4. Exchange adapters (enabled venues)
5. SnapshotDatabase + SqliteSnapshotStore (persistence)
6. ExecutionGuard (single-flight lock table)
7. AggregationOrchestrator
8. SpreadHistoryService (read path)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from funding_matrix.analytics.history import SpreadHistoryService
from funding_matrix.api.app import create_app
from funding_matrix.config import AppSettings
from funding_matrix.data.database import SnapshotDatabase
from funding_matrix.data.store import SqliteSnapshotStore
from funding_matrix.exchange import JsonHttpClient, build_adapters
from funding_matrix.guard import ExecutionGuard
from funding_matrix.logging import get_logger, setup_logging
from funding_matrix.orchestrator import AggregationOrchestrator


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build the dependency graph. Connections are opened in the lifespan."""
    logger = get_logger("funding_matrix.main")

    http = JsonHttpClient(timeout_seconds=settings.exchanges.request_timeout_seconds)
    adapters = build_adapters(settings.exchanges, http)

    database = SnapshotDatabase(settings.storage.db_path)
    store = SqliteSnapshotStore(database)

    guard = ExecutionGuard(timeout_seconds=settings.aggregation.lock_timeout_seconds)
    orchestrator = AggregationOrchestrator(
        adapters=adapters,
        store=store,
        guard=guard,
        settings=settings.aggregation,
    )
    history_service = SpreadHistoryService(store, settings.statistics)

    if not settings.aggregation.cron_secret.get_secret_value():
        logger.warning(
            "cron_secret_not_configured",
            note="Trigger endpoint accepts unauthenticated requests.",
        )

    return {
        "http": http,
        "adapters": adapters,
        "database": database,
        "store": store,
        "guard": guard,
        "orchestrator": orchestrator,
        "history_service": history_service,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the HTTP session and database on startup, close them on shutdown."""
    logger = get_logger("funding_matrix.main")
    components = app.state.components

    app.state.orchestrator = components["orchestrator"]
    app.state.history_service = components["history_service"]

    await components["http"].connect()
    await components["database"].connect()
    logger.info(
        "lifespan_started",
        exchanges=[a.exchange.value for a in components["adapters"]],
    )

    try:
        yield
    finally:
        await components["database"].close()
        await components["http"].close()
        logger.info("funding_matrix_stopped")


async def run() -> None:
    """Load settings, build components and serve the API."""
    settings = AppSettings()
    setup_logging(settings.log_level)
    logger = get_logger("funding_matrix.main")

    app = create_app(lifespan=lifespan)
    app.state.settings = settings
    app.state.components = _build_components(settings)

    logger.info("starting_server", host=settings.server.host, port=settings.server.port)
    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level="warning",
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
