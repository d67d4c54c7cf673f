"""Render configuration — the flat options of one sketch pass."""

from __future__ import annotations

import enum
from dataclasses import dataclass, fields, replace
from typing import Any

from svgsketch.engine.errors import InvalidTargetError


class RenderMode(str, enum.Enum):
    SVG = "svg"
    RASTER = "raster"


class FillStyle(str, enum.Enum):
    HACHURE = "hachure"
    SOLID = "solid"
    ZIGZAG = "zigzag"
    CROSS_HATCH = "cross-hatch"
    DOTS = "dots"
    DASHED = "dashed"
    ZIGZAG_LINE = "zigzag-line"


@dataclass(frozen=True)
class SketchConfig:
    """Controls the hand-drawn look and the post-processing of a pass."""

    # Sketch engine defaults (Rough.js-compatible ranges)
    roughness: float = 1.0
    bowing: float = 1.0
    seed: int | None = None
    fill_style: FillStyle = FillStyle.HACHURE
    # None = randomized per element when `randomize` is on
    disable_multi_stroke: bool | None = None
    curve_step_count: int = 9

    # Per-element pen randomization
    randomize: bool = True

    # Post-processing
    pencil_filter: bool = False
    sketch_patterns: bool = True

    # None keeps the source font-family
    font_family: str | None = "Comic Sans MS, cursive"
    background_color: str | None = None

    # Guard for use/marker/image re-entry
    max_reference_depth: int = 32

    def validate(self) -> SketchConfig:
        if self.roughness < 0:
            raise InvalidTargetError(f"roughness must be >= 0, got {self.roughness}")
        if self.bowing < 0:
            raise InvalidTargetError(f"bowing must be >= 0, got {self.bowing}")
        if self.curve_step_count < 1:
            raise InvalidTargetError(f"curve_step_count must be >= 1, got {self.curve_step_count}")
        if self.max_reference_depth < 1:
            raise InvalidTargetError(
                f"max_reference_depth must be >= 1, got {self.max_reference_depth}"
            )
        if not isinstance(self.fill_style, FillStyle):
            raise InvalidTargetError(f"Unknown fill style: {self.fill_style!r}")
        return self

    def with_overrides(self, **overrides: Any) -> SketchConfig:
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise InvalidTargetError(f"Unknown sketch options: {sorted(unknown)}")
        if "fill_style" in overrides and not isinstance(overrides["fill_style"], FillStyle):
            try:
                overrides["fill_style"] = FillStyle(overrides["fill_style"])
            except ValueError as e:
                raise InvalidTargetError(f"Unknown fill style: {overrides['fill_style']!r}") from e
        return replace(self, **overrides).validate()
