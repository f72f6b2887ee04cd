"""Liveness endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request

from ...schemas import HealthCheckResponse

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=HealthCheckResponse, summary="Liveness probe")
async def healthcheck(request: Request) -> HealthCheckResponse:
    store = getattr(request.app.state, "document_store", None)
    database = "ok" if store is not None and store.initialized else "unavailable"
    return HealthCheckResponse(status="ok", database=database)
