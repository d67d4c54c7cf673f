"""<text> — re-hosted as a styled clone instead of being sketched.

The clone drops its own transform; a ``g.text-container`` wrapper carries
the global transform. Font and paint are resolved on the source and written
onto the clone (and its tspans) because the source stylesheet no longer
applies in the output document.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Iterator
from xml.etree.ElementTree import Element

from svgsketch.engine.context import RenderContext
from svgsketch.engine.registry import ElementKind, handler
from svgsketch.engine.styles.attributes import (
    effective_attribute,
    effective_opacity,
    get_id_from_url,
)
from svgsketch.engine.styles.paint import resolve_paint
from svgsketch.engine.styles.pattern import append_pattern_def
from svgsketch.engine.transform import Transform
from svgsketch.engine.units import font_size
from svgsketch.output.svg_sink import apply_transform, svg_element
from svgsketch.svg.parser import XML_NS, local_name
from svgsketch.svg.stylesheet import merge_style

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
XML_SPACE = f"{{{XML_NS}}}space"


def preserves_space(ctx: RenderContext, element: Element) -> bool:
    node: Element | None = element
    while node is not None:
        value = node.get(XML_SPACE) or node.get("xml:space")
        if value is not None:
            return value == "preserve"
        node = ctx.document.parent_of(node)
    return False


def _character_data(element: Element, root: Element) -> Iterator[tuple[Element, str]]:
    """(node, "text" | "tail") slots in document order."""
    yield element, "text"
    for child in element:
        yield from _character_data(child, root)
    if element is not root:
        yield element, "tail"


def normalize_whitespace(text: Element) -> None:
    """Collapse whitespace runs in ``text`` and its descendants in place,
    trimming the start and end of the whole content."""
    slots = [
        (node, slot) for node, slot in _character_data(text, text) if getattr(node, slot)
    ]
    for node, slot in slots:
        setattr(node, slot, _WHITESPACE_RE.sub(" ", getattr(node, slot)))
    if slots:
        node, slot = slots[0]
        setattr(node, slot, getattr(node, slot).lstrip())
        node, slot = slots[-1]
        setattr(node, slot, getattr(node, slot).rstrip())


def font_declarations(ctx: RenderContext, text: Element) -> dict[str, str]:
    declarations: dict[str, str] = {}
    for name in ("font-style", "font-weight", "font-size"):
        value = effective_attribute(ctx, text, name)
        if value:
            declarations[name] = value
    family = ctx.config.font_family or effective_attribute(ctx, text, "font-family")
    if family:
        declarations["font-family"] = family
    return declarations


def _text_paint(ctx: RenderContext, source: Element, value: str) -> str | None:
    if "url" not in value:
        return value
    paint_id = get_id_from_url(value)
    target = ctx.id_index.element(paint_id)
    if target is not None and local_name(target) == "pattern":
        append_pattern_def(ctx, paint_id)
        return value
    return resolve_paint(ctx, source, value, effective_opacity(ctx, source))


def copy_text_style(ctx: RenderContext, source: Element, target: Element) -> None:
    """Effective paint and alignment of ``source`` written onto ``target``."""
    stroke = effective_attribute(ctx, source, "stroke")
    if stroke:
        stroke_paint = _text_paint(ctx, source, stroke)
        if stroke_paint:
            target.set("stroke", stroke_paint)
        stroke_width = effective_attribute(ctx, source, "stroke-width")
        if stroke_width:
            target.set("stroke-width", stroke_width)
    fill = effective_attribute(ctx, source, "fill")
    if fill:
        fill_paint = _text_paint(ctx, source, fill)
        if fill_paint:
            target.set("fill", fill_paint)
    for name in ("text-anchor", "dominant-baseline"):
        value = effective_attribute(ctx, source, name)
        if value:
            target.set(name, value)


def fit_font_size(
    ctx: RenderContext, content: str, source_family: str, family: str, size: float
) -> float:
    """Largest size (1px steps) at which ``family`` is no wider than the source text."""
    measurer = ctx.measurer
    source_width = measurer.text_width(content, source_family, size)
    while size > 1 and measurer.text_width(content, family, size) > source_width:
        size -= 1
    return size


@handler(ElementKind.TEXT, description="Styled clone of the source text")
def draw_text(ctx: RenderContext, text: Element, transform: Transform) -> None:
    container = svg_element("g")
    container.set("class", "text-container")
    apply_transform(container, transform)

    clone = copy.deepcopy(text)
    clone.attrib.pop("transform", None)
    if not preserves_space(ctx, text):
        normalize_whitespace(clone)

    declarations = font_declarations(ctx, text)
    override = ctx.config.font_family
    if override and ctx.sink.clip_for(text):
        # A wider substitute font would run into the clip
        source_family = effective_attribute(ctx, text, "font-family") or ""
        size = font_size(ctx, text)
        content = "".join(clone.itertext())
        fitted = fit_font_size(ctx, content, source_family, override, size)
        if fitted < size:
            logger.debug("Shrinking clipped text from %gpx to %gpx", size, fitted)
            declarations["font-size"] = f"{fitted:g}px"

    clone.set("style", merge_style(clone.get("style"), declarations))
    copy_text_style(ctx, text, clone)

    # Children of the clone pair up with the source children by position
    for source_child, clone_child in zip(ctx.document.children(text), list(clone)):
        if local_name(clone_child) == "tspan":
            copy_text_style(ctx, source_child, clone_child)

    container.append(clone)
    ctx.sink.append(text, container)
