"""<use> — instantiates the referenced element in the use's context.

The referenced subtree is drawn as if copied under the <use>: attribute
lookups reaching the referenced element continue at the <use> (see
UseContext). The derived context is dropped on return, so the previous
use-context is restored without bookkeeping.
"""

from __future__ import annotations

import logging
from xml.etree.ElementTree import Element

from svgsketch.engine.context import RenderContext, push_use_context
from svgsketch.engine.errors import ReferenceDepthError
from svgsketch.engine.processor import process_root
from svgsketch.engine.registry import ElementKind, handler
from svgsketch.engine.styles.attributes import get_id_from_url
from svgsketch.engine.transform import Transform, combined_transform
from svgsketch.engine.units import length, optional_length
from svgsketch.svg.parser import get_attr

logger = logging.getLogger(__name__)


@handler(ElementKind.USE, description="Instantiate a referenced element with use-context inheritance")
def draw_use(ctx: RenderContext, use: Element, transform: Transform) -> None:
    href = get_attr(use, "href")
    target_id = get_id_from_url(href)
    target = ctx.id_index.element(target_id)
    if target is None:
        logger.debug("Unresolved use reference %r", href)
        return

    try:
        use_ctx = ctx.enter_reference(f"use#{target_id}")
    except ReferenceDepthError as e:
        logger.warning("Skipping use of %s: %s", target_id, e)
        return

    # A use may override the size of a referenced svg/symbol
    width = height = None
    if use.get("width") and use.get("height"):
        width = optional_length(ctx, use, "width")
        height = optional_length(ctx, use, "height")

    placement = transform.translate(length(ctx, use, "x"), length(ctx, use, "y"))
    use_ctx = use_ctx.with_use_context(push_use_context(ctx.use_context, use, target))
    process_root(use_ctx, target, combined_transform(target, placement), width, height)
