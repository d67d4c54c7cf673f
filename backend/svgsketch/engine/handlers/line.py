"""<line>"""

from __future__ import annotations

from xml.etree.ElementTree import Element

from svgsketch.engine.context import RenderContext
from svgsketch.engine.markers import place_markers
from svgsketch.engine.registry import ElementKind, handler
from svgsketch.engine.styles.paint import resolve_style
from svgsketch.engine.transform import Transform
from svgsketch.engine.units import length
from svgsketch.utils.geometry import points_equal


@handler(ElementKind.LINE, description="Straight line with markers")
def draw_line(ctx: RenderContext, line: Element, transform: Transform) -> None:
    p1 = (length(ctx, line, "x1"), length(ctx, line, "y1"))
    p2 = (length(ctx, line, "x2"), length(ctx, line, "y2"))
    tp1 = transform.apply(*p1)
    tp2 = transform.apply(*p2)
    if points_equal(tp1, tp2, tol=0.0):
        return

    style = resolve_style(ctx, line, transform, (abs(tp2[0] - tp1[0]), abs(tp2[1] - tp1[1])))
    ctx.sink.append(line, ctx.engine.line(tp1[0], tp1[1], tp2[0], tp2[1], style))
    place_markers(ctx, line, [p1, p2], transform)
