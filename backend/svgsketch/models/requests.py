"""API request models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from svgsketch.config import settings
from svgsketch.engine.config import FillStyle, SketchConfig


class SketchOptions(BaseModel):
    roughness: float = Field(default=1.0, ge=0)
    bowing: float = Field(default=1.0, ge=0)
    seed: int | None = None
    fill_style: FillStyle = FillStyle.HACHURE
    disable_multi_stroke: bool | None = None
    randomize: bool = True
    pencil_filter: bool = False
    sketch_patterns: bool = True
    font_family: str | None = Field(
        default_factory=lambda: settings.default_font_family,
        description="Font substituted for text; null keeps the source font",
    )
    background_color: str | None = None
    curve_step_count: int = Field(default=9, ge=1)

    def to_config(self) -> SketchConfig:
        return SketchConfig(
            max_reference_depth=settings.max_reference_depth,
            **self.model_dump(),
        )


class SketchRequest(BaseModel):
    svg: str = Field(..., description="Raw SVG code")
    options: SketchOptions = Field(default_factory=SketchOptions)
    output: Literal["svg", "png"] = Field(default="svg", description="Output format")
