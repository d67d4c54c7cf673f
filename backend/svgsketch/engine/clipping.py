"""Clip Flattener — rewrites a source ``clipPath`` into an output clip container.

Clip shapes are not sketched: each supported child is re-emitted as a plain
shape carrying its full transform, so the sketch is clipped by the precise
source geometry.

Supported children: rect, circle, ellipse, polygon.
Branch terminators: defs, svg, clipPath, text.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional
from xml.etree.ElementTree import Element

from svgsketch.engine.errors import TransformError
from svgsketch.engine.styles.attributes import get_id_from_url
from svgsketch.engine.transform import Transform, combined_transform
from svgsketch.engine.units import length
from svgsketch.output.svg_sink import apply_transform, svg_element
from svgsketch.svg.parser import local_name
from svgsketch.utils.geometry import fmt

if TYPE_CHECKING:
    from svgsketch.engine.context import RenderContext

logger = logging.getLogger(__name__)

CLIP_TERMINATORS = frozenset({"defs", "svg", "clipPath", "text"})

ClipShapeFn = Callable[["RenderContext", Element], Optional[Element]]


def _rect_clip(ctx: RenderContext, rect: Element) -> Element | None:
    width = length(ctx, rect, "width")
    height = length(ctx, rect, "height")
    if width == 0 or height == 0:
        return None
    clip = svg_element(
        "rect",
        x=fmt(length(ctx, rect, "x")),
        y=fmt(length(ctx, rect, "y")),
        width=fmt(width),
        height=fmt(height),
    )
    for radius in ("rx", "ry"):
        value = length(ctx, rect, radius)
        if value:
            clip.set(radius, fmt(value))
    return clip


def _circle_clip(ctx: RenderContext, circle: Element) -> Element | None:
    r = length(ctx, circle, "r")
    if r == 0:
        return None
    return svg_element(
        "circle",
        cx=fmt(length(ctx, circle, "cx")),
        cy=fmt(length(ctx, circle, "cy")),
        r=fmt(r),
    )


def _ellipse_clip(ctx: RenderContext, ellipse: Element) -> Element | None:
    rx = length(ctx, ellipse, "rx")
    ry = length(ctx, ellipse, "ry")
    if rx == 0 or ry == 0:
        return None
    return svg_element(
        "ellipse",
        cx=fmt(length(ctx, ellipse, "cx")),
        cy=fmt(length(ctx, ellipse, "cy")),
        rx=fmt(rx),
        ry=fmt(ry),
    )


def _polygon_clip(ctx: RenderContext, polygon: Element) -> Element | None:
    points = polygon.get("points")
    if not points:
        return None
    return svg_element("polygon", points=points)


CLIP_SHAPES: dict[str, ClipShapeFn] = {
    "rect": _rect_clip,
    "circle": _circle_clip,
    "ellipse": _ellipse_clip,
    "polygon": _polygon_clip,
}


def clip_id_for(ctx: RenderContext, source_id: str) -> str:
    """Output clip ids are unique per use: ``<source id>_<defs child count>``."""
    return f"{source_id}_{len(ctx.sink.defs)}"


def apply_clip_path(
    ctx: RenderContext, owner: Element, clip_ref: str, transform: Transform | None
) -> str | None:
    """Flatten the clip path referenced by ``clip_ref`` for ``owner``.

    Returns the output clip id, or None when nothing clips the owner (missing
    reference or no supported clip shapes).
    """
    source_id = get_id_from_url(clip_ref)
    clip_path = ctx.id_index.element(source_id)
    if clip_path is None:
        logger.debug("Unresolved clip-path %r, drawing unclipped", clip_ref)
        return None

    base = transform or Transform.identity()
    clip_id = clip_id_for(ctx, source_id)
    container = ctx.sink.new_clip_container(clip_id)

    # Frames carry the parent transform; each element's own one is resolved when popped
    stack: list[tuple[Element, Transform]] = [
        (child, base) for child in reversed(ctx.document.children(clip_path))
    ]
    while stack:
        element, parent_transform = stack.pop()
        tag = local_name(element)
        try:
            element_transform = combined_transform(element, parent_transform)
        except TransformError as e:
            logger.warning("  clip <%s> FAILED: %s", tag, e)
            continue
        shape = CLIP_SHAPES.get(tag)
        if shape is not None:
            try:
                clip = shape(ctx, element)
            except Exception as e:
                logger.warning("  clip <%s> FAILED: %s", tag, e)
                clip = None
            if clip is not None:
                container.append(apply_transform(clip, element_transform))

        if tag in CLIP_TERMINATORS:
            continue
        for child in reversed(ctx.document.children(element)):
            stack.append((child, element_transform))

    if not ctx.sink.commit_clip(container):
        return None
    ctx.sink.set_clip(owner, clip_id)
    return clip_id
