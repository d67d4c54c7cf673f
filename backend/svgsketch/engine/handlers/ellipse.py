"""<ellipse> — native ellipse under cheap transforms, Bézier path otherwise."""

from __future__ import annotations

from xml.etree.ElementTree import Element

from svgsketch.engine.context import RenderContext
from svgsketch.engine.registry import ElementKind, handler
from svgsketch.engine.styles.paint import resolve_style
from svgsketch.engine.styles.pattern import append_pattern_paint, shape_proxy
from svgsketch.engine.transform import Transform
from svgsketch.engine.units import length
from svgsketch.sketch.base import sketch_path
from svgsketch.utils.geometry import bbox_size, cubic_path_from_points, ellipse_bezier_points


@handler(ElementKind.ELLIPSE, description="Ellipse via native primitive or cubic Bézier path")
def draw_ellipse(ctx: RenderContext, ellipse: Element, transform: Transform) -> None:
    cx = length(ctx, ellipse, "cx")
    cy = length(ctx, ellipse, "cy")
    rx = length(ctx, ellipse, "rx")
    ry = length(ctx, ellipse, "ry")
    if rx <= 0 or ry <= 0:
        return

    if transform.is_translation_only:
        center_x, center_y = transform.apply(cx, cy)
        corner_x, corner_y = transform.apply(cx + rx, cy + ry)
        width = 2 * (corner_x - center_x)
        height = 2 * (corner_y - center_y)
        style = resolve_style(ctx, ellipse, transform, (width, height))
        style.preserve_vertices = True
        drawable = ctx.engine.ellipse(center_x, center_y, width, height, style)
    else:
        points = transform.apply_points(ellipse_bezier_points(cx, cy, rx, ry))
        style = resolve_style(ctx, ellipse, transform, bbox_size(points))
        drawable = sketch_path(ctx.engine, cubic_path_from_points(points), style)

    ctx.sink.append(ellipse, drawable)
    append_pattern_paint(
        ctx, ellipse, lambda: shape_proxy(ellipse, transform, ("cx", "cy", "rx", "ry"))
    )
