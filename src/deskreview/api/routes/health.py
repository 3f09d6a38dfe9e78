"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(request: Request) -> JSONResponse:
    if getattr(request.app.state, "services", None) is None:
        return JSONResponse(status_code=503, content={"status": "starting"})
    return JSONResponse(content={"status": "ready"})
