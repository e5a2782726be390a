"""Funding spread read endpoints: live matrix and persisted history."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from funding_matrix.analytics.history import SpreadHistoryService
from funding_matrix.api.serializers import (
    price_history_to_dict,
    spread_history_to_dict,
    spread_to_dict,
)
from funding_matrix.market_data.spread_matrix import build_spread_matrix
from funding_matrix.models import ExchangeId
from funding_matrix.orchestrator import AggregationOrchestrator

log = structlog.get_logger(__name__)

router = APIRouter()


def _venue_pair(exchange_a: str, exchange_b: str) -> tuple[ExchangeId, ExchangeId]:
    try:
        pair = ExchangeId(exchange_a.lower()), ExchangeId(exchange_b.lower())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"unknown exchange: {e}") from e
    if pair[0] == pair[1]:
        raise HTTPException(status_code=400, detail="exchange_a and exchange_b must differ")
    return pair


@router.get("/funding/multi-spreads")
async def multi_spreads(request: Request) -> JSONResponse:
    """Fetch every venue now and return the spread matrix (nothing is persisted)."""
    orchestrator: AggregationOrchestrator = request.app.state.orchestrator
    fetched = await orchestrator.fetch_all()
    spreads = build_spread_matrix(fetched.all_rates)
    if fetched.errors:
        log.info("multi_spreads_partial", failed=[e.value for e in fetched.errors])
    return JSONResponse(
        content={
            "success": True,
            "data": [spread_to_dict(s) for s in spreads],
            "count": len(spreads),
            "exchange_records": fetched.exchange_counts,
            "errors": list(fetched.errors.values()),
        }
    )


@router.get("/funding/history/{symbol}")
async def spread_history(
    request: Request,
    symbol: str,
    hours: int | None = Query(default=None),
    exchange_a: str = Query(default="binance"),
    exchange_b: str = Query(default="lighter"),
) -> JSONResponse:
    """Funding spread samples and statistics for one symbol and venue pair."""
    history_service: SpreadHistoryService = request.app.state.history_service
    venue_a, venue_b = _venue_pair(exchange_a, exchange_b)
    history = await history_service.get_spread_history(symbol.upper(), venue_a, venue_b, hours)
    body = {"success": True, **spread_history_to_dict(history)}
    if history.statistics is None:
        body["message"] = "No historical data available for this symbol"
    return JSONResponse(content=body)


@router.get("/funding/price-history/{symbol}")
async def price_history(
    request: Request,
    symbol: str,
    hours: int | None = Query(default=None),
    exchange_a: str = Query(default="binance"),
    exchange_b: str = Query(default="hyperliquid"),
) -> JSONResponse:
    """Mark-price spread history between two venues."""
    history_service: SpreadHistoryService = request.app.state.history_service
    venue_a, venue_b = _venue_pair(exchange_a, exchange_b)
    history = await history_service.get_price_history(symbol.upper(), venue_a, venue_b, hours)
    return JSONResponse(content={"success": True, **price_history_to_dict(history)})
