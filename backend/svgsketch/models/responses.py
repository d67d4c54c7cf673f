"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    handlers_registered: int = 0


class HandlerInfo(BaseModel):
    element: str
    description: str = ""


class SketchResponse(BaseModel):
    svg: str | None = None
    png_base64: str | None = None
    width: float = 0.0
    height: float = 0.0
    elements_drawn: int = 0
    elements_failed: int = 0
    elements_skipped: int = 0
    processing_time_ms: float = 0.0
    errors: list[str] = Field(default_factory=list)
