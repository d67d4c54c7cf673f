"""RoughSketchEngine — a compact hand-drawn shape generator.

Outlines are drawn as jittered, slightly bowed cubic strokes (twice unless
multi-stroke is disabled). Fills are computed with shapely: hachure lines are
clipped against the shape polygon at the pen's angle and gap, then rendered
according to the fill style.

Line perturbation follows the well-known Rough.js model: a random offset of
at most ``MAX_RANDOMNESS_OFFSET * roughness`` per control point, scaled down
for long lines, and a perpendicular bow of ``bowing`` at the midpoint.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from xml.etree.ElementTree import Element

import numpy as np
from shapely.affinity import rotate
from shapely.geometry import LineString, MultiLineString, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.validation import make_valid
from svgpathtools import Line, parse_path

from svgsketch.engine.config import FillStyle
from svgsketch.engine.errors import PathDataError
from svgsketch.engine.styles.paint import StyleConfig
from svgsketch.output.svg_sink import svg_element
from svgsketch.utils.geometry import fmt

logger = logging.getLogger(__name__)

Point = tuple[float, float]

MAX_RANDOMNESS_OFFSET = 2.0
DEFAULT_HACHURE_ANGLE = -41.0
MIN_HACHURE_GAP = 0.5
MAX_HACHURE_LINES = 1000
MAX_CURVE_SAMPLES = 64


def _iter_lines(geometry: BaseGeometry) -> Iterator[LineString]:
    if geometry.is_empty:
        return
    if geometry.geom_type == "LineString":
        yield geometry  # type: ignore[misc]
    elif hasattr(geometry, "geoms"):
        for part in geometry.geoms:
            yield from _iter_lines(part)


def _polygonal(geometry: BaseGeometry) -> BaseGeometry:
    if geometry.geom_type in ("Polygon", "MultiPolygon"):
        return geometry
    polygons: list[Polygon] = []
    for part in getattr(geometry, "geoms", []):
        if part.geom_type == "Polygon":
            polygons.append(part)
        elif part.geom_type == "MultiPolygon":
            polygons.extend(part.geoms)
    return MultiPolygon(polygons)


def _to_polygon_geometry(rings: Sequence[Sequence[Point]]) -> BaseGeometry | None:
    """Combine closed rings with even-odd semantics."""
    combined: BaseGeometry | None = None
    for ring in rings:
        if len(ring) < 3:
            continue
        polygon = _polygonal(make_valid(Polygon(ring)))
        combined = polygon if combined is None else _polygonal(combined.symmetric_difference(polygon))
    if combined is None or combined.is_empty or combined.area <= 0:
        return None
    return combined


class _Pencil:
    """Per-shape random state plus the stroke primitives built on it."""

    def __init__(self, rng: np.random.Generator, style: StyleConfig) -> None:
        self.rng = rng
        self.style = style

    def _random(self) -> float:
        return float(self.rng.random())

    def offset(self, amount: float, gain: float = 1.0) -> float:
        """Random value in [-amount, amount] scaled by roughness."""
        return self.style.roughness * gain * (self._random() * 2 * amount - amount)

    def line_ops(self, x1: float, y1: float, x2: float, y2: float, overlay: bool) -> list[str]:
        length = math.hypot(x2 - x1, y2 - y1)
        if length < 200:
            gain = 1.0
        elif length > 500:
            gain = 0.4
        else:
            gain = -0.0016668 * length + 1.233334

        amount = MAX_RANDOMNESS_OFFSET
        if amount * amount * 100 > length * length:
            amount = length / 10
        if overlay:
            amount /= 2

        diverge = 0.2 + self._random() * 0.2
        mid_x = self.offset(self.style.bowing * MAX_RANDOMNESS_OFFSET * (y2 - y1) / 200, gain)
        mid_y = self.offset(self.style.bowing * MAX_RANDOMNESS_OFFSET * (x1 - x2) / 200, gain)

        def jitter() -> float:
            return self.offset(amount, gain)

        if self.style.preserve_vertices:
            sx, sy, ex, ey = x1, y1, x2, y2
        else:
            sx, sy = x1 + jitter(), y1 + jitter()
            ex, ey = x2 + jitter(), y2 + jitter()
        c1x = mid_x + x1 + (x2 - x1) * diverge + jitter()
        c1y = mid_y + y1 + (y2 - y1) * diverge + jitter()
        c2x = mid_x + x1 + 2 * (x2 - x1) * diverge + jitter()
        c2y = mid_y + y1 + 2 * (y2 - y1) * diverge + jitter()
        return [
            f"M{fmt(sx)} {fmt(sy)}",
            f"C{fmt(c1x)} {fmt(c1y)} {fmt(c2x)} {fmt(c2y)} {fmt(ex)} {fmt(ey)}",
        ]

    def double_line_ops(self, p: Point, q: Point, single: bool = False) -> list[str]:
        ops = self.line_ops(p[0], p[1], q[0], q[1], overlay=False)
        if not (single or self.style.disable_multi_stroke):
            ops += self.line_ops(p[0], p[1], q[0], q[1], overlay=True)
        return ops

    def linear_ops(self, points: Sequence[Point], close: bool) -> list[str]:
        ops: list[str] = []
        for p, q in zip(points, points[1:]):
            ops += self.double_line_ops(p, q)
        if close and len(points) > 2:
            ops += self.double_line_ops(points[-1], points[0])
        return ops

    def curve_ops(self, points: Sequence[Point], closed: bool, amount: float) -> str:
        """Catmull-Rom spline through jittered ``points`` as cubic segments."""
        jittered = [
            (x + self.offset(amount), y + self.offset(amount)) for x, y in points
        ]
        if self.style.preserve_vertices and not closed and jittered:
            jittered[0], jittered[-1] = points[0], points[-1]
        n = len(jittered)
        if n < 2:
            return ""
        ops = [f"M{fmt(jittered[0][0])} {fmt(jittered[0][1])}"]
        last = n if closed else n - 1
        for i in range(last):
            p0 = jittered[(i - 1) % n] if closed or i > 0 else jittered[0]
            p1 = jittered[i % n]
            p2 = jittered[(i + 1) % n]
            p3 = jittered[(i + 2) % n] if closed or i + 2 < n else jittered[-1]
            b1 = (p1[0] + (p2[0] - p0[0]) / 6, p1[1] + (p2[1] - p0[1]) / 6)
            b2 = (p2[0] - (p3[0] - p1[0]) / 6, p2[1] - (p3[1] - p1[1]) / 6)
            ops.append(
                f"C{fmt(b1[0])} {fmt(b1[1])} {fmt(b2[0])} {fmt(b2[1])} {fmt(p2[0])} {fmt(p2[1])}"
            )
        if closed:
            ops.append("Z")
        return " ".join(ops)


def _ellipse_points(cx: float, cy: float, rx: float, ry: float, steps: int) -> list[Point]:
    angles = np.linspace(0, 2 * math.pi, steps, endpoint=False)
    return [(cx + rx * math.cos(a), cy + ry * math.sin(a)) for a in angles]


class RoughSketchEngine:
    """Hand-drawn SVG drawables for the primitive shape operations."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = np.random.default_rng(seed)

    def _pencil(self, style: StyleConfig) -> _Pencil:
        rng = np.random.default_rng(style.seed) if style.seed is not None else self._rng
        return _Pencil(rng, style)

    # Primitive operations

    def line(self, x1: float, y1: float, x2: float, y2: float, style: StyleConfig) -> Element | None:
        pencil = self._pencil(style)
        return self._compose(pencil, [], " ".join(pencil.double_line_ops((x1, y1), (x2, y2))))

    def linear_path(self, points: Sequence[Point], style: StyleConfig) -> Element | None:
        if len(points) < 2:
            return None
        pencil = self._pencil(style)
        return self._compose(pencil, [], " ".join(pencil.linear_ops(list(points), close=False)))

    def polygon(self, points: Sequence[Point], style: StyleConfig) -> Element | None:
        points = [tuple(p) for p in points]
        if len(points) < 2:
            return None
        pencil = self._pencil(style)
        fill = self._fill(pencil, [points], solid_d=self._jittered_polygon_d(pencil, points))
        return self._compose(pencil, fill, " ".join(pencil.linear_ops(points, close=True)))

    def rectangle(
        self, x: float, y: float, width: float, height: float, style: StyleConfig
    ) -> Element | None:
        return self.polygon(
            [(x, y), (x + width, y), (x + width, y + height), (x, y + height)], style
        )

    def ellipse(
        self, x: float, y: float, width: float, height: float, style: StyleConfig
    ) -> Element | None:
        rx, ry = abs(width) / 2, abs(height) / 2
        if rx == 0 or ry == 0:
            return None
        pencil = self._pencil(style)
        steps = max(style.curve_step_count, 4)
        outline_points = _ellipse_points(x, y, rx, ry, steps)
        amount = min(1.0, min(rx, ry) * 0.1)
        first = pencil.curve_ops(outline_points, closed=True, amount=amount)
        outline = first
        if not style.disable_multi_stroke:
            outline += " " + pencil.curve_ops(outline_points, closed=True, amount=amount * 1.5)
        precise = _ellipse_points(x, y, rx, ry, steps * 4)
        fill = self._fill(pencil, [precise], solid_d=first)
        return self._compose(pencil, fill, outline)

    def circle(self, x: float, y: float, diameter: float, style: StyleConfig) -> Element | None:
        return self.ellipse(x, y, diameter, diameter, style)

    def path(self, d: str, style: StyleConfig) -> Element | None:
        try:
            parsed = parse_path(d)
        except Exception as e:
            raise PathDataError(f"Cannot sketch path {d!r}: {e}") from e
        if len(parsed) == 0:
            return None
        pencil = self._pencil(style)
        ops: list[str] = []
        rings: list[list[Point]] = []
        for subpath in parsed.continuous_subpaths():
            ring: list[Point] = []
            for segment in subpath:
                start = (segment.start.real, segment.start.imag)
                end = (segment.end.real, segment.end.imag)
                if isinstance(segment, Line):
                    ops += pencil.double_line_ops(start, end)
                    samples = [start, end]
                else:
                    steps = min(
                        MAX_CURVE_SAMPLES,
                        max(style.curve_step_count, int(segment.length() / 10)),
                    )
                    samples = [
                        (pt.real, pt.imag)
                        for pt in (segment.point(t) for t in np.linspace(0, 1, steps + 1))
                    ]
                    ops.append(pencil.curve_ops(samples, closed=False, amount=0.5))
                    if not style.disable_multi_stroke:
                        ops.append(pencil.curve_ops(samples, closed=False, amount=0.75))
                ring.extend(samples if not ring else samples[1:])
            rings.append(ring)
        fill = self._fill(pencil, rings, solid_d=d)
        return self._compose(pencil, fill, " ".join(op for op in ops if op))

    # Fills

    def _jittered_polygon_d(self, pencil: _Pencil, points: Sequence[Point]) -> str:
        jittered = [
            (x + pencil.offset(MAX_RANDOMNESS_OFFSET / 2), y + pencil.offset(MAX_RANDOMNESS_OFFSET / 2))
            for x, y in points
        ]
        parts = [f"{'M' if i == 0 else 'L'}{fmt(x)} {fmt(y)}" for i, (x, y) in enumerate(jittered)]
        return " ".join(parts) + " Z"

    def _fill(
        self, pencil: _Pencil, rings: Sequence[Sequence[Point]], solid_d: str
    ) -> list[Element]:
        style = pencil.style
        if not style.has_fill:
            return []
        if style.fill_style is FillStyle.SOLID:
            return [svg_element("path", d=solid_d, stroke="none", fill=style.fill or "none")]

        geometry = _to_polygon_geometry(rings)
        if geometry is None:
            return []
        weight = style.fill_weight if style.fill_weight and style.fill_weight > 0 else max(style.stroke_width / 2, 0.5)
        gap = style.hachure_gap if style.hachure_gap and style.hachure_gap > 0 else max(style.stroke_width * 4, 4.0)
        angle = style.hachure_angle if style.hachure_angle is not None else DEFAULT_HACHURE_ANGLE

        segments = self._hachure_segments(geometry, angle, gap)
        if style.fill_style is FillStyle.CROSS_HATCH:
            segments += self._hachure_segments(geometry, angle + 90, gap)

        if style.fill_style is FillStyle.DOTS:
            return self._dots(pencil, segments, gap, weight)

        if style.fill_style is FillStyle.ZIGZAG:
            d = self._zigzag(pencil, geometry, segments, gap)
        elif style.fill_style is FillStyle.ZIGZAG_LINE:
            d = self._zigzag_lines(pencil, segments, gap)
        elif style.fill_style is FillStyle.DASHED:
            d = self._dashed(pencil, segments, gap)
        else:
            d = " ".join(
                " ".join(pencil.double_line_ops(p, q, single=True)) for p, q in segments
            )
        if not d:
            return []
        return [
            svg_element(
                "path", d=d, stroke=style.fill or "none", stroke_width=fmt(weight), fill="none"
            )
        ]

    def _hachure_segments(
        self, geometry: BaseGeometry, angle: float, gap: float
    ) -> list[tuple[Point, Point]]:
        origin = geometry.centroid
        rotated = rotate(geometry, -angle, origin=origin)
        minx, miny, maxx, maxy = rotated.bounds
        gap = max(gap, MIN_HACHURE_GAP, (maxy - miny) / MAX_HACHURE_LINES)
        scanlines = [
            LineString([(minx - 1, y), (maxx + 1, y)])
            for y in np.arange(miny + gap / 2, maxy, gap)
        ]
        if not scanlines:
            return []
        clipped = rotated.intersection(MultiLineString(scanlines))
        parts = sorted(
            (list(part.coords) for part in _iter_lines(clipped)),
            key=lambda coords: (round(coords[0][1], 6), min(coords[0][0], coords[-1][0])),
        )
        segments: list[tuple[Point, Point]] = []
        for coords in parts:
            back = rotate(LineString([coords[0], coords[-1]]), angle, origin=origin)
            (x1, y1), (x2, y2) = list(back.coords)
            segments.append(((x1, y1), (x2, y2)))
        return segments

    def _zigzag(
        self,
        pencil: _Pencil,
        geometry: BaseGeometry,
        segments: list[tuple[Point, Point]],
        gap: float,
    ) -> str:
        region = geometry.buffer(gap)
        ops: list[str] = []
        previous: Point | None = None
        for index, (p, q) in enumerate(segments):
            start, end = (p, q) if index % 2 == 0 else (q, p)
            if previous is not None and region.contains(LineString([previous, start])):
                ops += pencil.double_line_ops(previous, start, single=True)
            ops += pencil.double_line_ops(start, end, single=True)
            previous = end
        return " ".join(ops)

    def _zigzag_lines(
        self, pencil: _Pencil, segments: list[tuple[Point, Point]], gap: float
    ) -> str:
        ops: list[str] = []
        tooth = max(gap / 2, MIN_HACHURE_GAP)
        for p, q in segments:
            length = math.hypot(q[0] - p[0], q[1] - p[1])
            count = int(length // gap)
            if count < 1:
                ops += pencil.double_line_ops(p, q, single=True)
                continue
            ux, uy = (q[0] - p[0]) / length, (q[1] - p[1]) / length
            nx, ny = -uy * tooth, ux * tooth
            points = [p]
            for i in range(1, count + 1):
                t = i * length / (count + 1)
                sign = 1 if i % 2 else -1
                points.append((p[0] + ux * t + sign * nx, p[1] + uy * t + sign * ny))
            points.append(q)
            for a, b in zip(points, points[1:]):
                ops += pencil.double_line_ops(a, b, single=True)
        return " ".join(ops)

    def _dashed(self, pencil: _Pencil, segments: list[tuple[Point, Point]], gap: float) -> str:
        ops: list[str] = []
        dash = max(gap, 1.0)
        for p, q in segments:
            length = math.hypot(q[0] - p[0], q[1] - p[1])
            if length == 0:
                continue
            ux, uy = (q[0] - p[0]) / length, (q[1] - p[1]) / length
            t = 0.0
            while t < length:
                t_end = min(length, t + dash)
                ops += pencil.double_line_ops(
                    (p[0] + ux * t, p[1] + uy * t),
                    (p[0] + ux * t_end, p[1] + uy * t_end),
                    single=True,
                )
                t = t_end + gap
        return " ".join(ops)

    def _dots(
        self,
        pencil: _Pencil,
        segments: list[tuple[Point, Point]],
        gap: float,
        weight: float,
    ) -> list[Element]:
        style = pencil.style
        radius = max(weight / 2, 0.5)
        dots: list[str] = []
        for p, q in segments:
            length = math.hypot(q[0] - p[0], q[1] - p[1])
            count = max(1, int(length // gap))
            for i in range(count):
                t = (i + 0.5) / count
                cx = p[0] + (q[0] - p[0]) * t + pencil.offset(gap / 4)
                cy = p[1] + (q[1] - p[1]) * t + pencil.offset(gap / 4)
                dots.append(
                    f"M{fmt(cx - radius)} {fmt(cy)} "
                    f"A{fmt(radius)} {fmt(radius)} 0 1 0 {fmt(cx + radius)} {fmt(cy)} "
                    f"A{fmt(radius)} {fmt(radius)} 0 1 0 {fmt(cx - radius)} {fmt(cy)} Z"
                )
        if not dots:
            return []
        return [svg_element("path", d=" ".join(dots), stroke="none", fill=style.fill or "none")]

    # Output

    def _compose(self, pencil: _Pencil, fill: list[Element], outline: str) -> Element | None:
        style = pencil.style
        group = svg_element("g")
        for element in fill:
            group.append(element)
        if style.has_stroke and outline:
            stroke = svg_element(
                "path",
                d=outline,
                stroke=style.stroke,
                stroke_width=fmt(style.stroke_width),
                fill="none",
            )
            if style.stroke_line_dash:
                stroke.set("stroke-dasharray", " ".join(fmt(v) for v in style.stroke_line_dash))
            if style.stroke_line_dash_offset is not None:
                stroke.set("stroke-dashoffset", fmt(style.stroke_line_dash_offset))
            if style.stroke_linecap:
                stroke.set("stroke-linecap", style.stroke_linecap)
            group.append(stroke)
        if len(group) == 0:
            return None
        return group
