"""Path data — parse with svgpathtools, then transform and re-encode ``d`` strings.

Commands come out absolute and limited to M, L, C, Q, A and Z: svgpathtools
expands H/V into lines and S/T into explicit curves while parsing.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

import numpy as np
from svgpathtools import Arc, CubicBezier, Line, QuadraticBezier, parse_path

from svgsketch.engine.errors import PathDataError
from svgsketch.engine.transform import Transform
from svgsketch.utils.geometry import fmt, points_equal

_MOVETO_SPLIT_RE = re.compile(r"(?=[Mm])")
_CURVE_RE = re.compile(r"[CcSsQqTtAa]")

NORMALIZED_COMMANDS = frozenset("MLCQAZ")


@dataclass(frozen=True)
class PathCommand:
    command: str
    values: tuple[float, ...] = ()

    @property
    def end(self) -> tuple[float, float] | None:
        if len(self.values) < 2:
            return None
        return (self.values[-2], self.values[-1])


def _xy(point: complex) -> tuple[float, float]:
    return (float(point.real), float(point.imag))


def _segment_command(segment) -> PathCommand:
    end = _xy(segment.end)
    if isinstance(segment, Line):
        return PathCommand("L", end)
    if isinstance(segment, CubicBezier):
        return PathCommand("C", (*_xy(segment.control1), *_xy(segment.control2), *end))
    if isinstance(segment, QuadraticBezier):
        return PathCommand("Q", (*_xy(segment.control), *end))
    if isinstance(segment, Arc):
        return PathCommand(
            "A",
            (
                float(segment.radius.real),
                float(segment.radius.imag),
                float(segment.rotation),
                float(segment.large_arc),
                float(segment.sweep),
                *end,
            ),
        )
    raise PathDataError(f"Unsupported path segment {type(segment).__name__}")


def _subpath_chunks(d: str) -> list[str]:
    chunks = _MOVETO_SPLIT_RE.split(d.strip())
    if chunks[0].strip():
        raise PathDataError("Path data must begin with a moveto")
    return chunks[1:]


def parse_path_data(d: str | None) -> list[PathCommand]:
    """Parse ``d`` into absolute M/L/C/Q/A/Z commands.

    Each subpath is handed to svgpathtools on its own, starting from the
    current point of the previous one, so that moveto and closepath survive.
    Raises PathDataError for unparseable input.
    """
    if not d or not d.strip():
        return []
    commands: list[PathCommand] = []
    current = 0j
    for chunk in _subpath_chunks(d):
        try:
            path = parse_path(chunk, current_pos=current)
        except Exception as e:
            raise PathDataError(f"Invalid path data {chunk.strip()!r}: {e}") from e
        if len(path) == 0:
            # A lone moveto draws nothing
            continue
        start = path[0].start
        segments = list(path)
        closed = chunk.rstrip()[-1] in "Zz"
        # The line back to the start is drawn by Z itself
        if closed and isinstance(segments[-1], Line) and segments[-1].end == start:
            segments.pop()
        commands.append(PathCommand("M", _xy(start)))
        commands.extend(_segment_command(segment) for segment in segments)
        if closed:
            commands.append(PathCommand("Z"))
            current = start
        else:
            current = path[-1].end
    return commands


def _transform_arc(
    values: tuple[float, ...], transform: Transform
) -> tuple[float, ...]:
    rx, ry, rotation, large_arc, sweep, ex, ey = values
    nx, ny = transform.apply(ex, ey)
    if rx == 0 or ry == 0:
        return (rx, ry, rotation, large_arc, sweep, nx, ny)
    phi = math.radians(rotation)
    cos, sin = math.cos(phi), math.sin(phi)
    linear = np.array([[transform.a, transform.c], [transform.b, transform.d]])
    # Image of the unit circle under linear · R(phi) · diag(rx, ry)
    ellipse = linear @ np.array([[cos * abs(rx), -sin * abs(ry)], [sin * abs(rx), cos * abs(ry)]])
    u, s, _ = np.linalg.svd(ellipse)
    new_rotation = math.degrees(math.atan2(u[1, 0], u[0, 0]))
    if transform.determinant < 0:
        sweep = 1.0 - sweep
    return (float(s[0]), float(s[1]), new_rotation, large_arc, sweep, nx, ny)


def transform_commands(
    commands: list[PathCommand], transform: Transform | None
) -> list[PathCommand]:
    """Apply ``transform`` to normalized commands."""
    if transform is None or transform.is_identity:
        return list(commands)
    result: list[PathCommand] = []
    for cmd in commands:
        if cmd.command == "Z":
            result.append(cmd)
        elif cmd.command == "A":
            result.append(PathCommand("A", _transform_arc(cmd.values, transform)))
        else:
            values: list[float] = []
            for i in range(0, len(cmd.values), 2):
                values.extend(transform.apply(cmd.values[i], cmd.values[i + 1]))
            result.append(PathCommand(cmd.command, tuple(values)))
    return result


def encode(commands: list[PathCommand]) -> str:
    parts = []
    for cmd in commands:
        if cmd.command == "Z":
            parts.append("Z")
        else:
            parts.append(cmd.command + " ".join(fmt(v) for v in cmd.values))
    return " ".join(parts)


def vertices(commands: list[PathCommand]) -> list[tuple[float, float]]:
    """Marker vertices of normalized commands.

    Z adds the subpath start unless the subpath already returned there.
    """
    points: list[tuple[float, float]] = []
    subpath_start: tuple[float, float] | None = None
    for cmd in commands:
        if cmd.command == "Z":
            if subpath_start is not None and not (points and points_equal(points[-1], subpath_start)):
                points.append(subpath_start)
            continue
        end = cmd.end
        if end is None:
            continue
        points.append(end)
        if cmd.command == "M":
            subpath_start = end
    return points


def has_curves(d: str) -> bool:
    return bool(_CURVE_RE.search(d))


def normalized_path(d: str | None, transform: Transform | None = None) -> str:
    """Parse, transform and encode ``d``.

    Raises PathDataError for unparseable input or unresolved output.
    """
    encoded = encode(transform_commands(parse_path_data(d), transform))
    if "nan" in encoded or "inf" in encoded:
        raise PathDataError(f"Unresolved path data: {encoded!r}")
    return encoded
