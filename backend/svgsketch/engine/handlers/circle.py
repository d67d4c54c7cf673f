"""<circle> — native circle under cheap transforms, Bézier path otherwise."""

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


@handler(ElementKind.CIRCLE, description="Circle via native primitive or cubic Bézier path")
def draw_circle(ctx: RenderContext, circle: Element, transform: Transform) -> None:
    cx = length(ctx, circle, "cx")
    cy = length(ctx, circle, "cy")
    r = length(ctx, circle, "r")
    if r <= 0:
        return

    if transform.is_translation_only:
        center_x, center_y = transform.apply(cx, cy)
        # A point on the bounding box gives the transformed radius
        radius_x, _ = transform.apply(cx + r, cy + r)
        diameter = 2 * (radius_x - center_x)
        style = resolve_style(ctx, circle, transform, (diameter, diameter))
        style.preserve_vertices = True
        drawable = ctx.engine.circle(center_x, center_y, diameter, style)
    else:
        points = transform.apply_points(ellipse_bezier_points(cx, cy, r, r))
        style = resolve_style(ctx, circle, transform, bbox_size(points))
        drawable = sketch_path(ctx.engine, cubic_path_from_points(points), style)

    ctx.sink.append(circle, drawable)
    append_pattern_paint(ctx, circle, lambda: shape_proxy(circle, transform, ("cx", "cy", "r")))
