"""<polyline> — optional fill pass, then the open stroked line."""

from __future__ import annotations

from dataclasses import replace
from xml.etree.ElementTree import Element

from svgsketch.engine.context import RenderContext
from svgsketch.engine.markers import place_markers
from svgsketch.engine.registry import ElementKind, handler
from svgsketch.engine.styles.paint import resolve_style
from svgsketch.engine.transform import Transform
from svgsketch.utils.geometry import bbox_size, parse_points


@handler(ElementKind.POLYLINE, description="Open polyline, filled as a polygon when painted")
def draw_polyline(ctx: RenderContext, polyline: Element, transform: Transform) -> None:
    points = parse_points(polyline.get("points"))
    if len(points) == 0:
        return
    transformed = transform.apply_points(points)
    coords = [(float(x), float(y)) for x, y in transformed]
    style = resolve_style(ctx, polyline, transform, bbox_size(transformed))

    if style.has_fill:
        fill_style = replace(style, stroke="none")
        ctx.sink.append(polyline, ctx.engine.polygon(coords, fill_style))
    ctx.sink.append(polyline, ctx.engine.linear_path(coords, style))

    place_markers(ctx, polyline, [(float(x), float(y)) for x, y in points], transform)
