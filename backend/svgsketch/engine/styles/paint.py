"""Style Resolver — element paint and stroke geometry → StyleConfig.

A StyleConfig is the fully resolved, solid-color draw request handed to the
sketch engine. It is computed fresh per element per pass.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element

from svgsketch.engine.config import FillStyle
from svgsketch.engine.styles.attributes import (
    effective_attribute,
    effective_opacity,
    get_id_from_url,
    own_opacity,
)
from svgsketch.engine.styles.colors import BLACK, Color, gradient_to_color, parse_color
from svgsketch.engine.styles.pens import create_pen
from svgsketch.engine.transform import Transform
from svgsketch.engine.units import to_pixels
from svgsketch.svg.parser import local_name

if TYPE_CHECKING:
    from svgsketch.engine.context import RenderContext

logger = logging.getLogger(__name__)

_DASH_SPLIT_RE = re.compile(r"[\s,]+")
GRADIENT_TAGS = ("linearGradient", "radialGradient")
# Dashes below this length disappear in the sketch
MIN_DASH_LENGTH = 0.5


@dataclass
class StyleConfig:
    fill: str | None = None
    stroke: str = "none"
    stroke_width: float = 0.0
    stroke_line_dash: list[float] | None = None
    stroke_line_dash_offset: float | None = None
    stroke_linecap: str | None = None

    # Sketch engine options
    fill_style: FillStyle = FillStyle.HACHURE
    roughness: float = 1.0
    bowing: float = 1.0
    fill_weight: float | None = None
    hachure_angle: float | None = None
    hachure_gap: float | None = None
    disable_multi_stroke: bool = False
    preserve_vertices: bool = False
    curve_step_count: int = 9
    seed: int | None = None

    extra: dict[str, str] = field(default_factory=dict)

    @property
    def has_fill(self) -> bool:
        return bool(self.fill) and self.fill != "none"

    @property
    def has_stroke(self) -> bool:
        return self.stroke != "none" and self.stroke_width > 0


def parse_fill_url(ctx: RenderContext, url: str, opacity: float) -> str | None:
    """Resolve a ``url(#id)`` paint to a solid color.

    Gradients are flattened once and memoized in the IdIndex; patterns and
    unknown targets yield None (painted by a pattern proxy or not at all).
    """
    element_id = get_id_from_url(url)
    if not element_id:
        return "transparent"
    entry = ctx.id_index.get(element_id)
    if entry is None:
        logger.debug("Unresolved paint reference %r", url)
        return None
    if isinstance(entry, str):
        return entry
    if local_name(entry) in GRADIENT_TAGS:
        color = gradient_to_color(entry, opacity, ctx.id_index.element)
        ctx.id_index.memoize(element_id, color)
        return color
    return None


def _solid_paint(ctx: RenderContext, element: Element, value: str, opacity: float) -> str:
    color: Color | None
    if value.lower() == "currentcolor":
        color = parse_color(effective_attribute(ctx, element, "color"))
    else:
        color = parse_color(value)
    if color is None:
        logger.debug("Unparseable paint %r, using black", value)
        color = BLACK
    return color.with_alpha(opacity * color.a).to_css()


def resolve_paint(
    ctx: RenderContext, element: Element, value: str | None, opacity: float
) -> str | None:
    """Paint value → CSS color, ``"none"``, or None for no paint."""
    if not value:
        return None
    if "url" in value:
        return parse_fill_url(ctx, value, opacity)
    if value == "none":
        return "none"
    return _solid_paint(ctx, element, value, opacity)


def resolve_style(
    ctx: RenderContext,
    element: Element,
    transform: Transform | None,
    bounds: tuple[float, float] = (0.0, 0.0),
) -> StyleConfig:
    """Resolve the StyleConfig of ``element`` drawn under ``transform``.

    ``bounds`` is the (width, height) of the element's transformed bounding
    box, used to pick the pen.
    """
    config = ctx.config
    style = StyleConfig(
        fill_style=config.fill_style,
        roughness=config.roughness,
        bowing=config.bowing,
        curve_step_count=config.curve_step_count,
        seed=config.seed,
        disable_multi_stroke=bool(config.disable_multi_stroke),
    )

    scale = transform.stroke_scale if transform is not None else 1.0
    element_opacity = effective_opacity(ctx, element)

    fill = effective_attribute(ctx, element, "fill") or "black"
    fill_opacity = element_opacity * own_opacity(ctx, element, "fill-opacity")
    fill_paint = resolve_paint(ctx, element, fill, fill_opacity)
    style.fill = None if fill_paint == "none" else fill_paint

    stroke = effective_attribute(ctx, element, "stroke")
    stroke_opacity = element_opacity * own_opacity(ctx, element, "stroke-opacity")
    style.stroke = resolve_paint(ctx, element, stroke, stroke_opacity) or "none"

    stroke_width = effective_attribute(ctx, element, "stroke-width")
    if stroke_width:
        style.stroke_width = to_pixels(ctx, element, "stroke-width", stroke_width) * scale

    dash_array = effective_attribute(ctx, element, "stroke-dasharray")
    if dash_array and dash_array != "none":
        style.stroke_line_dash = [
            max(MIN_DASH_LENGTH, to_pixels(ctx, element, "stroke-dasharray", dash) * scale)
            for dash in _DASH_SPLIT_RE.split(dash_array.strip())
            if dash
        ]

    dash_offset = effective_attribute(ctx, element, "stroke-dashoffset")
    if dash_offset:
        style.stroke_line_dash_offset = (
            to_pixels(ctx, element, "stroke-dashoffset", dash_offset) * scale
        )

    # Unstroked fills get an outline in the fill color
    if style.fill and style.stroke == "none":
        style.stroke = style.fill
        style.stroke_width = 1.0

    if config.randomize:
        pen = create_pen(ctx, *bounds)
        style.fill_weight = pen.weight
        style.hachure_angle = pen.angle
        style.hachure_gap = pen.gap
        if config.disable_multi_stroke is None:
            style.disable_multi_stroke = bool(ctx.rng.random() > 0.3)

    return style
