"""<path> — normalized, transformed and re-encoded before sketching."""

from __future__ import annotations

import logging
from xml.etree.ElementTree import Element

import numpy as np

from svgsketch.engine.context import RenderContext
from svgsketch.engine.errors import PathDataError
from svgsketch.engine.markers import place_markers
from svgsketch.engine.registry import ElementKind, handler
from svgsketch.engine.styles.paint import resolve_style
from svgsketch.engine.styles.pattern import append_pattern_paint, shape_proxy
from svgsketch.engine.transform import Transform
from svgsketch.sketch.base import sketch_path
from svgsketch.svg.path_data import encode, parse_path_data, transform_commands, vertices
from svgsketch.utils.geometry import bbox_size

logger = logging.getLogger(__name__)


@handler(ElementKind.PATH, description="Path data normalized to M/L/C/Q/A/Z")
def draw_path(ctx: RenderContext, path: Element, transform: Transform) -> None:
    try:
        commands = parse_path_data(path.get("d"))
    except PathDataError as e:
        logger.warning("Skipping path %s: %s", path.get("id") or "", e)
        return
    if not commands:
        return

    encoded = encode(transform_commands(commands, transform))
    if "nan" in encoded or "inf" in encoded:
        logger.warning("Skipping path %s: unresolved path data", path.get("id") or "")
        return

    # Vertices (local space) are used for the markers and, transformed, for the pen
    points = vertices(commands)
    transformed = transform.apply_points(np.array(points, dtype=np.float64).reshape(-1, 2))
    style = resolve_style(ctx, path, transform, bbox_size(transformed))
    ctx.sink.append(path, sketch_path(ctx.engine, encoded, style))
    append_pattern_paint(ctx, path, lambda: shape_proxy(path, transform, ("d", "fill-rule")))

    place_markers(ctx, path, points, transform)
