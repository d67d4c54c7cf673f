"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import math
import re

import numpy as np
from numpy.typing import NDArray

_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

# Kappa: control point distance for a quarter-circle cubic Bézier
BEZIER_CIRCLE_FACTOR = 4 / 3 * (math.sqrt(2) - 1)


def fmt(value: float, digits: int = 4) -> str:
    """Compact number formatting for SVG attributes and path data."""
    text = f"{value:.{digits}f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def bbox(points: NDArray[np.float64]) -> tuple[float, float, float, float]:
    """Compute (xmin, ymin, xmax, ymax) bounding box."""
    if len(points) == 0:
        return (0.0, 0.0, 0.0, 0.0)
    return (
        float(np.min(points[:, 0])),
        float(np.min(points[:, 1])),
        float(np.max(points[:, 0])),
        float(np.max(points[:, 1])),
    )


def bbox_size(points: NDArray[np.float64]) -> tuple[float, float]:
    xmin, ymin, xmax, ymax = bbox(points)
    return (xmax - xmin, ymax - ymin)


def get_angle(p0: tuple[float, float], p1: tuple[float, float]) -> float:
    """Direction of the segment p0 → p1 in degrees."""
    return math.degrees(math.atan2(p1[1] - p0[1], p1[0] - p0[0]))


def bisector_angle(incoming: float, outgoing: float) -> float:
    """Angle halfway between two directions (degrees), taking the short way round."""
    delta = (outgoing - incoming + 180) % 360 - 180
    return incoming + delta / 2


def points_equal(p: tuple[float, float], q: tuple[float, float], tol: float = 1e-9) -> bool:
    return abs(p[0] - q[0]) <= tol and abs(p[1] - q[1]) <= tol


def parse_points(text: str | None) -> NDArray[np.float64]:
    """Parse a ``points`` attribute into an Nx2 array.

    Coordinates may be separated by whitespace and/or commas; an odd trailing
    coordinate is ignored.
    """
    if not text:
        return np.zeros((0, 2))
    values = [float(v) for v in _NUMBER_RE.findall(text)]
    n = len(values) // 2
    return np.array(values[: 2 * n], dtype=np.float64).reshape(n, 2)


def ellipse_bezier_points(
    cx: float, cy: float, rx: float, ry: float
) -> NDArray[np.float64]:
    """13 points of a closed 4-segment cubic Bézier approximation of an ellipse.

    Order: start, then (c1, c2, end) for each quarter, clockwise from the
    rightmost point.
    """
    kx = rx * BEZIER_CIRCLE_FACTOR
    ky = ry * BEZIER_CIRCLE_FACTOR
    return np.array(
        [
            (cx + rx, cy),
            (cx + rx, cy + ky), (cx + kx, cy + ry), (cx, cy + ry),
            (cx - kx, cy + ry), (cx - rx, cy + ky), (cx - rx, cy),
            (cx - rx, cy - ky), (cx - kx, cy - ry), (cx, cy - ry),
            (cx + kx, cy - ry), (cx + rx, cy - ky), (cx + rx, cy),
        ],
        dtype=np.float64,
    )


def cubic_path_from_points(points: NDArray[np.float64], close: bool = True) -> str:
    """``M p0 C p1 p2 p3 C ...`` from a start point and cubic control triples."""
    parts = [f"M{fmt(points[0, 0])} {fmt(points[0, 1])}"]
    for i in range(1, len(points) - 2, 3):
        c1, c2, end = points[i], points[i + 1], points[i + 2]
        parts.append(
            f"C{fmt(c1[0])} {fmt(c1[1])} {fmt(c2[0])} {fmt(c2[1])} {fmt(end[0])} {fmt(end[1])}"
        )
    if close:
        parts.append("Z")
    return " ".join(parts)


def polygon_path(points: NDArray[np.float64], close: bool = True) -> str:
    parts = [
        f"{'M' if i == 0 else 'L'}{fmt(x)} {fmt(y)}" for i, (x, y) in enumerate(points)
    ]
    if close and parts:
        parts.append("Z")
    return " ".join(parts)
