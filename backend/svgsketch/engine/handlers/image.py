"""<image> — embedded SVG documents are sketched, other images placed as-is."""

from __future__ import annotations

import base64
import hashlib
import logging
import re
from urllib.parse import unquote
from xml.etree.ElementTree import Element

from svgsketch.engine.context import RenderContext
from svgsketch.engine.errors import ReferenceDepthError
from svgsketch.engine.processor import process_root
from svgsketch.engine.registry import ElementKind, handler
from svgsketch.engine.transform import Transform
from svgsketch.engine.units import length, optional_length
from svgsketch.svg.parser import get_attr, parse_svg

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:([^,]*),(.*)$", re.DOTALL)
SVG_MEDIA_TYPE = "image/svg+xml"


def decode_svg_data_url(href: str) -> str | None:
    """Text of a ``data:image/svg+xml`` URL, None for anything else."""
    if not href.startswith("data:") or SVG_MEDIA_TYPE not in href:
        return None
    match = _DATA_URL_RE.match(href)
    if match is None:
        return None
    meta, payload = match.group(1), match.group(2)
    if "base64" in meta:
        payload = base64.b64decode(payload).decode("utf-8")
    if "utf8" not in meta:
        payload = unquote(payload)
    return payload


@handler(ElementKind.IMAGE, description="Embedded SVG re-entry or untouched raster image")
def draw_image(ctx: RenderContext, image: Element, transform: Transform) -> None:
    href = get_attr(image, "href") or ""
    x = length(ctx, image, "x")
    y = length(ctx, image, "y")
    width = height = None
    if image.get("width") and image.get("height"):
        width = optional_length(ctx, image, "width")
        height = optional_length(ctx, image, "height")

    svg_text = decode_svg_data_url(href)
    if svg_text is None:
        ctx.sink.draw_image(image, href, transform, (x, y), (width, height))
        return

    digest = hashlib.sha1(href.encode("utf-8")).hexdigest()[:12]
    try:
        image_ctx = ctx.enter_reference(f"image#{digest}")
    except ReferenceDepthError as e:
        logger.warning("Skipping embedded svg image: %s", e)
        return
    document = parse_svg(svg_text)
    process_root(
        image_ctx.with_document(document),
        document.root,
        transform.translate(x, y),
        width,
        height,
    )
