"""Scheduler trigger endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from funding_matrix.api.serializers import cycle_result_to_dict
from funding_matrix.orchestrator import AggregationOrchestrator, CycleStatus

log = structlog.get_logger(__name__)

router = APIRouter()

_STATUS_CODES = {
    CycleStatus.COMPLETED: 200,
    CycleStatus.SKIPPED: 409,
    CycleStatus.FAILED: 500,
    CycleStatus.UNAUTHORIZED: 401,
}


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


@router.get("/cron/update-funding")
async def update_funding(request: Request) -> JSONResponse:
    """Run one aggregation cycle. Invoked by the external scheduler."""
    orchestrator: AggregationOrchestrator = request.app.state.orchestrator
    result = await orchestrator.run_cycle(token=_bearer_token(request))

    body = cycle_result_to_dict(result)
    if result.status is CycleStatus.UNAUTHORIZED:
        body = {"success": False, "status": result.status.value, "error": "Unauthorized"}
    elif result.status is CycleStatus.SKIPPED:
        body["message"] = "Aggregation already running, trigger skipped"
    log.debug("cron_trigger_handled", status=result.status.value)
    return JSONResponse(content=body, status_code=_STATUS_CODES[result.status])


@router.get("/cron/lock-status")
async def lock_status(request: Request) -> JSONResponse:
    """Current single-flight lock state for the aggregation job."""
    orchestrator: AggregationOrchestrator = request.app.state.orchestrator
    status = orchestrator.guard.status(orchestrator.lock_key)
    if status is None:
        return JSONResponse(content={"key": orchestrator.lock_key, "locked": False, "age_seconds": None})
    return JSONResponse(
        content={
            "key": status.key,
            "locked": status.locked,
            "age_seconds": round(status.age_seconds),
        }
    )
