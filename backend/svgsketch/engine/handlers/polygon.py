"""<polygon>"""

from __future__ import annotations

from xml.etree.ElementTree import Element

from svgsketch.engine.context import RenderContext
from svgsketch.engine.markers import place_markers
from svgsketch.engine.registry import ElementKind, handler
from svgsketch.engine.styles.paint import resolve_style
from svgsketch.engine.styles.pattern import append_pattern_paint, shape_proxy
from svgsketch.engine.transform import Transform
from svgsketch.utils.geometry import bbox_size, parse_points


@handler(ElementKind.POLYGON, description="Closed polygon with markers")
def draw_polygon(ctx: RenderContext, polygon: Element, transform: Transform) -> None:
    points = parse_points(polygon.get("points"))
    if len(points) == 0:
        return
    transformed = transform.apply_points(points)
    style = resolve_style(ctx, polygon, transform, bbox_size(transformed))
    coords = [(float(x), float(y)) for x, y in transformed]
    ctx.sink.append(polygon, ctx.engine.polygon(coords, style))
    append_pattern_paint(ctx, polygon, lambda: shape_proxy(polygon, transform, ("points",)))

    # The closing vertex repeats the first one
    vertices = [(float(x), float(y)) for x, y in points]
    vertices.append(vertices[0])
    place_markers(ctx, polygon, vertices, transform)
