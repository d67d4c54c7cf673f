"""Marker Placer — start/mid/end marker instances along a vertex sequence.

Placement matrix per instance::

    element transform · translate(vertex) · rotate(angle) · scale(stroke scale)

With ``orient="auto"`` the angle follows the path: the segment direction at
open ends, the bisector of the incoming and outgoing directions at interior
vertices and at the joint of a closed path.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Sequence
from xml.etree.ElementTree import Element

from svgsketch.engine.errors import ReferenceDepthError
from svgsketch.engine.processor import process_root
from svgsketch.engine.styles.attributes import effective_attribute, get_id_from_url
from svgsketch.engine.transform import Transform
from svgsketch.engine.units import to_pixels
from svgsketch.svg.parser import local_name
from svgsketch.utils.geometry import bisector_angle, get_angle, points_equal

if TYPE_CHECKING:
    from svgsketch.engine.context import RenderContext

logger = logging.getLogger(__name__)

Point = tuple[float, float]

_ANGLE_RE = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)\s*(deg)?\s*$")

AUTO = "auto"
AUTO_START_REVERSE = "auto-start-reverse"


def marker_element(ctx: RenderContext, element: Element, attribute: str) -> Element | None:
    value = effective_attribute(ctx, element, attribute)
    if not value or value == "none":
        return None
    marker = ctx.id_index.element(get_id_from_url(value))
    if marker is None or local_name(marker) != "marker":
        return None
    return marker


def fixed_orientation(marker: Element) -> float:
    """Numeric ``orient`` in degrees; 0 when auto or unparseable."""
    match = _ANGLE_RE.match(marker.get("orient") or "")
    return float(match.group(1)) if match else 0.0


def is_closed(points: Sequence[Point]) -> bool:
    return len(points) > 2 and points_equal(points[0], points[-1])


def _closing_bisector(points: Sequence[Point]) -> float:
    return bisector_angle(get_angle(points[-2], points[-1]), get_angle(points[0], points[1]))


def start_angle(marker: Element, points: Sequence[Point]) -> float:
    orient = (marker.get("orient") or "").strip()
    if len(points) < 2 or orient not in (AUTO, AUTO_START_REVERSE):
        return fixed_orientation(marker)
    angle = _closing_bisector(points) if is_closed(points) else get_angle(points[0], points[1])
    return angle + 180 if orient == AUTO_START_REVERSE else angle


def end_angle(marker: Element, points: Sequence[Point]) -> float:
    orient = (marker.get("orient") or "").strip()
    if len(points) < 2 or orient not in (AUTO, AUTO_START_REVERSE):
        return fixed_orientation(marker)
    if is_closed(points):
        return _closing_bisector(points)
    return get_angle(points[-2], points[-1])


def mid_angle(marker: Element, points: Sequence[Point], index: int) -> float:
    orient = (marker.get("orient") or "").strip()
    if orient not in (AUTO, AUTO_START_REVERSE):
        return fixed_orientation(marker)
    prev_pt, loc, next_pt = points[index - 1], points[index], points[index + 1]
    return bisector_angle(get_angle(prev_pt, loc), get_angle(loc, next_pt))


def marker_scale(ctx: RenderContext, element: Element, marker: Element) -> float:
    """Effective stroke width for ``markerUnits="strokeWidth"`` (default), else 1."""
    units = marker.get("markerUnits")
    if units and units != "strokeWidth":
        return 1.0
    stroke_width = effective_attribute(ctx, element, "stroke-width")
    if not stroke_width:
        return 1.0
    return to_pixels(ctx, element, "stroke-width", stroke_width)


def placement(
    transform: Transform | None, location: Point, angle: float, scale: float
) -> Transform:
    local = Transform.translation(*location).rotate(angle).scale(scale)
    return transform.multiply(local) if transform is not None else local


def place_markers(
    ctx: RenderContext,
    element: Element,
    points: Sequence[Point],
    transform: Transform | None,
) -> int:
    """Draw the markers of ``element``; returns the number of instances placed.

    ``points`` are the element's vertices in its local coordinate system.
    """
    if not points:
        return 0

    placed = 0
    start = marker_element(ctx, element, "marker-start")
    if start is not None:
        matrix = placement(
            transform, points[0], start_angle(start, points), marker_scale(ctx, element, start)
        )
        placed += _draw_marker(ctx, start, matrix)

    end = marker_element(ctx, element, "marker-end")
    if end is not None:
        matrix = placement(
            transform, points[-1], end_angle(end, points), marker_scale(ctx, element, end)
        )
        placed += _draw_marker(ctx, end, matrix)

    mid = marker_element(ctx, element, "marker-mid")
    if mid is not None and len(points) > 2:
        scale = marker_scale(ctx, element, mid)
        for i in range(1, len(points) - 1):
            matrix = placement(transform, points[i], mid_angle(mid, points, i), scale)
            placed += _draw_marker(ctx, mid, matrix)

    return placed


def _draw_marker(ctx: RenderContext, marker: Element, matrix: Transform) -> int:
    try:
        marker_ctx = ctx.enter_reference(f"marker#{marker.get('id')}")
    except ReferenceDepthError as e:
        logger.warning("Skipping marker %s: %s", marker.get("id"), e)
        return 0
    process_root(marker_ctx, marker, matrix)
    return 1
