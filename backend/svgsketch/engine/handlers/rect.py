"""<rect> — native rectangle or explicit (rounded) path.

Radii clamp to ``[0, side/2]``; one given radius implies the other. The path
form approximates each rounded corner with a single cubic and forces square
line caps so the outline does not leak past the rectangle bounds.
"""

from __future__ import annotations

from xml.etree.ElementTree import Element

import numpy as np

from svgsketch.engine.context import RenderContext
from svgsketch.engine.registry import ElementKind, handler
from svgsketch.engine.styles.paint import resolve_style
from svgsketch.engine.styles.pattern import append_pattern_paint, shape_proxy
from svgsketch.engine.transform import Transform
from svgsketch.engine.units import length, optional_length
from svgsketch.sketch.base import sketch_path
from svgsketch.utils.geometry import BEZIER_CIRCLE_FACTOR, bbox_size, fmt, polygon_path

RECT_ATTRIBUTES = ("x", "y", "width", "height", "rx", "ry")


def clamp_radii(
    rx: float | None, ry: float | None, width: float, height: float
) -> tuple[float, float]:
    """Effective corner radii; negative values count as unset.

    A single given radius stays circular and clamps to half the shorter
    side; two radii clamp to half their own side each.
    """
    if rx is not None and rx < 0:
        rx = None
    if ry is not None and ry < 0:
        ry = None
    if rx is None and ry is None:
        return (0.0, 0.0)
    if rx is None or ry is None:
        radius = min(rx if ry is None else ry, min(width, height) / 2)
        return (radius, radius)
    return (min(rx, width / 2), min(ry, height / 2))


def rounded_rect_path(
    x: float, y: float, width: float, height: float, rx: float, ry: float, transform: Transform
) -> str:
    k = BEZIER_CIRCLE_FACTOR
    right, bottom = x + width, y + height
    # Start, then (line end, c1, c2, corner end) per side, clockwise
    local = np.array(
        [
            (x + rx, y),
            (right - rx, y),
            (right - rx + k * rx, y), (right, y + ry - k * ry), (right, y + ry),
            (right, bottom - ry),
            (right, bottom - ry + k * ry), (right - rx + k * rx, bottom), (right - rx, bottom),
            (x + rx, bottom),
            (x + rx - k * rx, bottom), (x, bottom - ry + k * ry), (x, bottom - ry),
            (x, y + ry),
            (x, y + ry - k * ry), (x + rx - k * rx, y), (x + rx, y),
        ],
        dtype=np.float64,
    )
    p = transform.apply_points(local)

    def pt(i: int) -> str:
        return f"{fmt(p[i, 0])} {fmt(p[i, 1])}"

    return (
        f"M{pt(0)} L{pt(1)} C{pt(2)} {pt(3)} {pt(4)} L{pt(5)} C{pt(6)} {pt(7)} {pt(8)} "
        f"L{pt(9)} C{pt(10)} {pt(11)} {pt(12)} L{pt(13)} C{pt(14)} {pt(15)} {pt(16)} Z"
    )


@handler(ElementKind.RECT, description="Rectangle with clamped corner radii")
def draw_rect(ctx: RenderContext, rect: Element, transform: Transform) -> None:
    x = length(ctx, rect, "x")
    y = length(ctx, rect, "y")
    width = length(ctx, rect, "width")
    height = length(ctx, rect, "height")
    if width <= 0 or height <= 0:
        return

    rx, ry = clamp_radii(
        optional_length(ctx, rect, "rx"), optional_length(ctx, rect, "ry"), width, height
    )

    if transform.is_translation_only and not rx and not ry:
        left, top = transform.apply(x, y)
        style = resolve_style(ctx, rect, transform, (width, height))
        drawable = ctx.engine.rectangle(left, top, width, height, style)
    else:
        corners = transform.apply_points(
            np.array(
                [(x, y), (x + width, y), (x + width, y + height), (x, y + height)],
                dtype=np.float64,
            )
        )
        if rx and ry:
            d = rounded_rect_path(x, y, width, height, rx, ry, transform)
        else:
            d = polygon_path(corners)
        style = resolve_style(ctx, rect, transform, bbox_size(corners))
        style.stroke_linecap = "square"
        drawable = sketch_path(ctx.engine, d, style)

    ctx.sink.append(rect, drawable)
    append_pattern_paint(ctx, rect, lambda: shape_proxy(rect, transform, RECT_ATTRIBUTES))
