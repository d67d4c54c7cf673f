"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from svgsketch.engine.registry import get_registry
from svgsketch.models.responses import HandlerInfo, HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        handlers_registered=get_registry().count,
    )


@router.get("/handlers", response_model=list[HandlerInfo])
async def handlers() -> list[HandlerInfo]:
    return [
        HandlerInfo(element=spec.kind.value, description=spec.description)
        for spec in get_registry().all()
    ]
