"""Pattern paint — sketch primitives take solid paint only.

A shape whose ``fill`` or ``stroke`` references a ``<pattern>`` is sketched
without that paint; an extra proxy shape painted only with the pattern is
appended after it, and the pattern itself is emitted into the output defs.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Callable
from xml.etree.ElementTree import Element

from svgsketch.engine.config import FillStyle
from svgsketch.engine.errors import ReferenceDepthError
from svgsketch.engine.processor import sketch_fragment
from svgsketch.engine.styles.attributes import effective_attribute, get_id_from_url
from svgsketch.engine.transform import Transform
from svgsketch.output.svg_sink import apply_transform, svg_element
from svgsketch.svg.parser import local_name

if TYPE_CHECKING:
    from svgsketch.engine.context import RenderContext

logger = logging.getLogger(__name__)

# Sketch values for pattern content
PATTERN_ROUGHNESS = 0.5


def pattern_paint_ids(ctx: RenderContext, element: Element) -> tuple[str | None, str | None]:
    """(fill pattern id, stroke pattern id) referenced by ``element`` itself."""

    def pattern_id(attribute: str) -> str | None:
        value = element.get(attribute)
        if not value or "url" not in value:
            return None
        element_id = get_id_from_url(value)
        target = ctx.id_index.element(element_id)
        if target is not None and local_name(target) == "pattern":
            return element_id
        return None

    return pattern_id("fill"), pattern_id("stroke")


def append_pattern_paint(
    ctx: RenderContext, source: Element, proxy_factory: Callable[[], Element]
) -> Element | None:
    """Append the pattern proxy of ``source`` if it uses pattern paint."""
    fill_id, stroke_id = pattern_paint_ids(ctx, source)
    if fill_id is None and stroke_id is None:
        return None

    proxy = proxy_factory()
    proxy.set("fill", f"url(#{fill_id})" if fill_id is not None else "none")
    proxy.set("stroke", f"url(#{stroke_id})" if stroke_id is not None else "none")
    proxy.set("stroke-width", effective_attribute(ctx, source, "stroke-width") or "0")

    appended = ctx.sink.append(source, proxy)
    append_pattern_def(ctx, fill_id)
    append_pattern_def(ctx, stroke_id)
    return appended


def append_pattern_def(ctx: RenderContext, pattern_id: str | None) -> None:
    """Emit the referenced pattern into the output defs once."""
    if pattern_id is None or ctx.sink.has_def(pattern_id):
        return
    pattern = ctx.id_index.element(pattern_id)
    if pattern is None:
        return

    if not ctx.config.sketch_patterns:
        ctx.sink.add_def(copy.deepcopy(pattern))
        return

    try:
        pattern_ctx = ctx.enter_reference(f"pattern#{pattern_id}")
    except ReferenceDepthError as e:
        logger.warning("Skipping pattern %s: %s", pattern_id, e)
        return
    sketched = sketch_fragment(
        pattern_ctx,
        pattern,
        fill_style=FillStyle.SOLID,
        roughness=PATTERN_ROUGHNESS,
    )
    # Shallow copy: the pattern's attributes with the sketched content
    target = Element(pattern.tag, dict(pattern.attrib))
    target.extend(sketched)
    ctx.sink.add_def(target)
    logger.debug("Sketched pattern %s (%d parts)", pattern_id, len(sketched))


def shape_proxy(
    source: Element, transform: Transform | None, attributes: tuple[str, ...]
) -> Element:
    """Untouched copy of the geometry of ``source`` placed under ``transform``."""
    proxy = svg_element(local_name(source))
    for name in attributes:
        value = source.get(name)
        if value is not None:
            proxy.set(name, value)
    return apply_transform(proxy, transform)
