"""Pen randomization — per-element hachure angle, gap and fill weight.

Range tables are keyed by fill style. The angle leans with the aspect ratio
of the element's bounding box; weight and gap shrink for small elements.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from svgsketch.engine.config import FillStyle

if TYPE_CHECKING:
    from svgsketch.engine.context import RenderContext

Range = tuple[float, float]

# Aspect ratio (w / h) thresholds for flat and tall shapes
FLAT_ASPECT_RATIO = 0.25
TALL_ASPECT_RATIO = 6.0
# sqrt(w * h) below this is a "small" shape
SMALL_SIDE_LENGTH = 45.0


@dataclass(frozen=True)
class AngleRanges:
    normal: Range
    horizontal: Range
    vertical: Range


@dataclass(frozen=True)
class SizeRanges:
    normal: Range
    small: Range


@dataclass(frozen=True)
class PenConfiguration:
    angle: AngleRanges
    weight: SizeRanges
    gap: SizeRanges


@dataclass(frozen=True)
class Pen:
    angle: float
    weight: float
    gap: float


ZERO_PEN = Pen(angle=0.0, weight=0.0, gap=0.0)

_DEFAULT_ANGLES = AngleRanges(normal=(-30, -50), horizontal=(-50, -75), vertical=(-30, -15))

DEFAULT_PEN = PenConfiguration(
    angle=_DEFAULT_ANGLES,
    weight=SizeRanges(normal=(1, 3), small=(0.5, 1.7)),
    gap=SizeRanges(normal=(2, 5), small=(1, 3)),
)

# Uniform ranges regardless of shape
LEGACY_PEN = PenConfiguration(
    angle=AngleRanges(normal=(-30, -50), horizontal=(-30, -50), vertical=(-30, -50)),
    weight=SizeRanges(normal=(0.5, 3), small=(0.5, 3)),
    gap=SizeRanges(normal=(3, 5), small=(3, 5)),
)

_PEN_CONFIGURATIONS: dict[FillStyle, PenConfiguration] = {
    FillStyle.ZIGZAG: PenConfiguration(
        angle=_DEFAULT_ANGLES,
        weight=SizeRanges(normal=(0.5, 3), small=(0.5, 2)),
        gap=SizeRanges(normal=(2, 6), small=(2, 5)),
    ),
    FillStyle.CROSS_HATCH: PenConfiguration(
        angle=_DEFAULT_ANGLES,
        weight=SizeRanges(normal=(1, 3), small=(0.5, 1.3)),
        gap=SizeRanges(normal=(4, 8), small=(2, 5)),
    ),
    FillStyle.DOTS: LEGACY_PEN,
}
_PEN_CONFIGURATIONS[FillStyle.ZIGZAG_LINE] = _PEN_CONFIGURATIONS[FillStyle.ZIGZAG]


def pen_configuration(fill_style: FillStyle) -> PenConfiguration:
    return _PEN_CONFIGURATIONS.get(fill_style, DEFAULT_PEN)


def create_pen(ctx: RenderContext, width: float, height: float) -> Pen:
    """Draw a fresh pen for an element whose bounding box is ``width`` × ``height``."""
    fill_style = ctx.config.fill_style
    if fill_style is FillStyle.SOLID:
        return ZERO_PEN

    config = pen_configuration(fill_style)
    side_length = math.sqrt(max(0.0, width * height))
    small = side_length < SMALL_SIDE_LENGTH

    angle_range = config.angle.normal
    if height > 0:
        aspect_ratio = width / height
        if aspect_ratio < FLAT_ASPECT_RATIO:
            angle_range = config.angle.horizontal
        elif aspect_ratio > TALL_ASPECT_RATIO:
            angle_range = config.angle.vertical

    return Pen(
        angle=ctx.random(*angle_range),
        gap=ctx.random(*(config.gap.small if small else config.gap.normal)),
        weight=ctx.random(*(config.weight.small if small else config.weight.normal)),
    )
