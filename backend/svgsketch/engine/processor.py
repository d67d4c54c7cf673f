"""Traversal Engine — iterative DFS over the source tree.

Each stack frame carries an element and its cumulative transform. Entering a
coordinate-system root (svg, symbol, marker) derives a context with the
root's viewport; every element is dispatched through the handler registry.

An exception while drawing one element is logged and counted; the traversal
continues with its siblings. An element whose own ``transform`` cannot be
parsed is counted the same way and its subtree is skipped.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element

from svgsketch.engine.clipping import apply_clip_path
from svgsketch.engine.context import Viewport
from svgsketch.engine.errors import TransformError
from svgsketch.engine.registry import ElementKind, load_handlers
from svgsketch.engine.transform import Transform, combine, combined_transform
from svgsketch.engine.units import length, optional_length
from svgsketch.svg.parser import local_name

if TYPE_CHECKING:
    from svgsketch.engine.context import RenderContext

logger = logging.getLogger(__name__)

_VIEWBOX_SPLIT_RE = re.compile(r"[\s,]+")

COORDINATE_ROOTS = frozenset({"svg", "symbol", "marker"})
# Instantiated only by <use> / marker properties
REFERENCE_ONLY = frozenset({"symbol", "marker"})
# Children are never walked by the main traversal
TERMINATORS = frozenset({"defs", "symbol", "marker", "svg", "clipPath", "pattern", "mask"})

# SVG default marker viewport
DEFAULT_MARKER_SIZE = 3.0


def parse_view_box(value: str | None) -> Viewport | None:
    """``"x y w h"`` → Viewport; None when absent, malformed or empty."""
    if not value:
        return None
    parts = [p for p in _VIEWBOX_SPLIT_RE.split(value.strip()) if p]
    if len(parts) != 4:
        return None
    try:
        x, y, w, h = (float(p) for p in parts)
    except ValueError:
        return None
    if w <= 0 or h <= 0:
        return None
    return Viewport(x, y, w, h)


def root_coordinate_system(
    ctx: RenderContext,
    root: Element,
    width: float | None,
    height: float | None,
) -> tuple[Transform, Viewport]:
    """Local transform and percentage viewport of a coordinate-system root."""
    tag = local_name(root)
    root_x = root_y = 0.0
    if tag == "symbol":
        root_x = length(ctx, root, "x")
        root_y = length(ctx, root, "y")
        width = width if width is not None else optional_length(ctx, root, "width")
        height = height if height is not None else optional_length(ctx, root, "height")
    elif tag == "marker":
        width = width if width is not None else length(ctx, root, "markerWidth", DEFAULT_MARKER_SIZE)
        height = (
            height if height is not None else length(ctx, root, "markerHeight", DEFAULT_MARKER_SIZE)
        )
    elif root is not ctx.document.root:
        # Nested svg: x/y resolve against the enclosing viewport
        root_x = length(ctx, root, "x")
        root_y = length(ctx, root, "y")

    view_box = parse_view_box(root.get("viewBox"))
    if view_box is not None and width is not None and height is not None:
        sx = width / view_box.w
        sy = height / view_box.h
        # Scaling from the center only (xMidYMid)
        matrix = Transform.translation(root_x + width * 0.5, root_y + height * 0.5)
        if root.get("preserveAspectRatio") == "none":
            matrix = matrix.scale(sx, sy)
        else:
            matrix = matrix.scale(min(sx, sy))
        matrix = matrix.translate(
            -(view_box.x + view_box.w * 0.5), -(view_box.y + view_box.h * 0.5)
        )
        viewport = view_box
    else:
        matrix = Transform.translation(root_x, root_y)
        if width is not None and height is not None:
            viewport = Viewport(root_x, root_y, width, height)
        else:
            viewport = ctx.viewport

    if tag == "marker":
        # Reference point lives in content coordinates, after the viewBox mapping
        matrix = matrix.translate(
            -length(ctx, root, "refX", viewport=viewport),
            -length(ctx, root, "refY", viewport=viewport),
        )
    return matrix, viewport


def process_root(
    ctx: RenderContext,
    root: Element,
    transform: Transform | None,
    width: float | None = None,
    height: float | None = None,
) -> None:
    """Draw ``root`` and its subtree.

    For svg/symbol/marker roots ``transform`` is the parent space and
    ``width``/``height`` may override the root's own size (as a <use> does);
    any other element is drawn as-is under ``transform``.
    """
    base = transform or Transform.identity()
    # (element, transform, resolved): unresolved frames still carry the parent transform
    frames: list[tuple[Element, Transform, bool]] = []

    if local_name(root) in COORDINATE_ROOTS:
        root_transform, viewport = root_coordinate_system(ctx, root, width, height)
        ctx = ctx.with_viewport(viewport)
        base = combine(base, root_transform)
        for child in reversed(ctx.document.children(root)):
            if local_name(child) in REFERENCE_ONLY:
                continue
            frames.append((child, base, False))
    else:
        frames.append((root, base, True))

    _walk(ctx, frames)


def _walk(ctx: RenderContext, stack: list[tuple[Element, Transform, bool]]) -> None:
    while stack:
        element, element_transform, resolved = stack.pop()
        if not resolved:
            try:
                element_transform = combined_transform(element, element_transform)
            except TransformError as e:
                # Without a placement the whole subtree is skipped
                _record_failure(ctx, element, e)
                continue
        _draw_safely(ctx, element, element_transform)

        if local_name(element) in TERMINATORS:
            continue
        for child in reversed(ctx.document.children(element)):
            stack.append((child, element_transform, False))


def draw_root(ctx: RenderContext, element: Element, transform: Transform | None) -> None:
    """Nested svg/symbol; its own width/height are used only when both are set."""
    width = optional_length(ctx, element, "width")
    height = optional_length(ctx, element, "height")
    if width is None or height is None:
        width = height = None
    process_root(ctx, element, transform, width, height)


def _describe(element: Element) -> str:
    element_id = element.get("id")
    return f"<{local_name(element)}{' #' + element_id if element_id else ''}>"


def _record_failure(ctx: RenderContext, element: Element, error: Exception) -> None:
    ctx.stats.failed += 1
    ctx.stats.errors.append(f"{_describe(element)}: {error}")
    logger.warning("  %s FAILED: %s", _describe(element), error)


def _draw_safely(ctx: RenderContext, element: Element, transform: Transform) -> None:
    try:
        draw_element(ctx, element, transform)
    except Exception as e:
        _record_failure(ctx, element, e)


def draw_element(ctx: RenderContext, element: Element, transform: Transform) -> None:
    """Dispatch one element to its handler, clip applied first."""
    if ctx.document.is_hidden(element):
        ctx.stats.skipped += 1
        return

    kind = ElementKind.of(local_name(element))
    spec = load_handlers().get(kind)
    if spec is None:
        return

    clip_ref = ctx.document.computed_style(element).get("clip-path") or element.get("clip-path")
    if clip_ref and clip_ref != "none":
        apply_clip_path(ctx, element, clip_ref, transform)

    logger.debug("  drawing %s", _describe(element))
    spec.fn(ctx, element, transform)
    ctx.stats.drawn += 1


def sketch_fragment(ctx: RenderContext, element: Element, **overrides) -> list[Element]:
    """Sketch the children of ``element`` outside the main output.

    ``overrides`` adjust the SketchConfig for the fragment. Defs created
    while sketching (clip paths, nested patterns) go to the main defs.
    """
    sink = ctx.sink.fragment()
    fragment_ctx = ctx.with_sink(sink).with_config(ctx.config.with_overrides(**overrides))
    identity = Transform.identity()
    _walk(
        fragment_ctx,
        [
            (child, identity, False)
            for child in reversed(ctx.document.children(element))
            if local_name(child) not in REFERENCE_ONLY
        ],
    )
    return sink.content()
