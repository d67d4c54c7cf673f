"""Unit Converter — CSS-style dimensions to user-space pixels.

Grammar: a signed CSS number followed by an optional unit token
(``[a-z]*`` or ``%``); a missing unit means ``px``.

Reference frames:
  - absolute units (in, cm, mm, pt, pc, px) → fixed 96 DPI factors
  - ``%``            → the active viewport rectangle
  - vw/vh/vmin/vmax  → the real rendering viewport (output size)
  - em/ex            → the element's effective font-size (the parent's for
                       font-size itself)
  - rem              → the document root font-size
  - ch               → measured width of the "0" glyph

Anything else is a hard failure (DimensionError).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element

from svgsketch.engine.context import Viewport
from svgsketch.engine.errors import DimensionError
from svgsketch.engine.styles.attributes import effective_attribute, inherited_values

if TYPE_CHECKING:
    from svgsketch.engine.context import RenderContext

logger = logging.getLogger(__name__)

_DIMENSION_RE = re.compile(r"^([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)([a-zA-Z]*|%)$")

DPI = 96.0
ABSOLUTE_UNITS: dict[str, float] = {
    "in": DPI,
    "cm": DPI / 2.54,
    "mm": DPI / 25.4,
    "pt": DPI / 72,
    "pc": DPI / 6,
    "px": 1.0,
}

DEFAULT_FONT_SIZE = 16.0
VIEWPORT_UNITS = ("vw", "vh", "vmin", "vmax")
FONT_UNITS = ("em", "ex", "ch", "rem")

HORIZONTAL_ATTRIBUTES = frozenset({"x", "x1", "x2", "cx", "dx", "rx", "width", "refX", "markerWidth"})
VERTICAL_ATTRIBUTES = frozenset({"y", "y1", "y2", "cy", "dy", "ry", "height", "refY", "markerHeight"})


@dataclass(frozen=True)
class Dimension:
    value: float
    unit: str


def parse_dimension(text: str) -> Dimension:
    match = _DIMENSION_RE.match(text.strip())
    if match is None:
        raise DimensionError(f"Cannot parse dimension: {text!r}")
    return Dimension(float(match.group(1)), match.group(2).lower() or "px")


def is_absolute_unit(unit: str) -> bool:
    return unit in ABSOLUTE_UNITS


def absolute_to_pixels(value: float, unit: str) -> float:
    return value * ABSOLUTE_UNITS[unit]


def percentage_to_pixels(attribute: str, percentage: float, viewport: Viewport) -> float:
    """Horizontal attributes resolve against the width, vertical ones against
    the height, anything else against the normalized diagonal."""
    fraction = percentage / 100
    if attribute in HORIZONTAL_ATTRIBUTES:
        return fraction * viewport.w
    if attribute in VERTICAL_ATTRIBUTES:
        return fraction * viewport.h
    return fraction * viewport.normalized_diagonal


def viewport_length_to_pixels(value: float, unit: str, width: float, height: float) -> float:
    fraction = value / 100
    if unit == "vw":
        return fraction * width
    if unit == "vh":
        return fraction * height
    if unit == "vmin":
        return fraction * min(width, height)
    if unit == "vmax":
        return fraction * max(width, height)
    raise DimensionError(f"Not a viewport length unit: {unit}")


def to_pixels(
    ctx: RenderContext,
    element: Element | None,
    attribute: str,
    dimension: str,
    viewport: Viewport | None = None,
) -> float:
    """Convert ``dimension`` (value of ``attribute`` on ``element``) to px."""
    if attribute == "font-size":
        parent = ctx.document.parent_of(element) if element is not None else None
        return _font_size_value(ctx, dimension, font_size(ctx, parent), root_font_size(ctx))

    parsed = parse_dimension(dimension)
    if is_absolute_unit(parsed.unit):
        return absolute_to_pixels(parsed.value, parsed.unit)

    if parsed.unit == "%":
        return percentage_to_pixels(attribute, parsed.value, viewport or ctx.viewport)

    if parsed.unit in VIEWPORT_UNITS:
        width, height = ctx.output_size
        return viewport_length_to_pixels(parsed.value, parsed.unit, width, height)

    if parsed.unit in FONT_UNITS:
        return _font_relative_to_pixels(ctx, element, parsed.value, parsed.unit)

    raise DimensionError(f"Unsupported relative length unit: {parsed.unit!r}")


def length(
    ctx: RenderContext,
    element: Element,
    attribute: str,
    default: float = 0.0,
    viewport: Viewport | None = None,
) -> float:
    """Geometry attribute of ``element`` in px, ``default`` when not declared."""
    value = element.get(attribute)
    if value is None or not value.strip():
        return default
    return to_pixels(ctx, element, attribute, value, viewport)


def optional_length(
    ctx: RenderContext, element: Element, attribute: str, viewport: Viewport | None = None
) -> float | None:
    value = element.get(attribute)
    if value is None or not value.strip() or value.strip() == "auto":
        return None
    return to_pixels(ctx, element, attribute, value, viewport)


def _font_size_value(ctx: RenderContext, text: str, parent_size: float, root_size: float) -> float:
    """One declared font-size in px; relative sizes scale the parent's."""
    parsed = parse_dimension(text)
    if is_absolute_unit(parsed.unit):
        return absolute_to_pixels(parsed.value, parsed.unit)
    if parsed.unit == "%":
        return parsed.value / 100 * parent_size
    if parsed.unit == "em":
        return parsed.value * parent_size
    if parsed.unit == "ex":
        return parsed.value * parent_size * 0.5
    if parsed.unit == "rem":
        return parsed.value * root_size
    if parsed.unit in VIEWPORT_UNITS:
        width, height = ctx.output_size
        return viewport_length_to_pixels(parsed.value, parsed.unit, width, height)
    raise DimensionError(f"Unsupported font-size unit: {parsed.unit!r}")


def _cascade_font_size(ctx: RenderContext, declared: list[str], root_size: float) -> float:
    size = DEFAULT_FONT_SIZE
    for text in reversed(declared):
        try:
            size = _font_size_value(ctx, text, size, root_size)
        except DimensionError:
            # Keywords (inherit, larger, medium...) keep the parent size
            logger.debug("Unsupported font-size %r, keeping %gpx", text, size)
    return size


def root_font_size(ctx: RenderContext) -> float:
    root = ctx.document.root
    return _cascade_font_size(ctx, list(inherited_values(ctx, root, "font-size")), DEFAULT_FONT_SIZE)


def font_size(ctx: RenderContext, element: Element | None) -> float:
    """Effective font-size of ``element`` in px, 16 when nothing declares one."""
    if element is None:
        return DEFAULT_FONT_SIZE
    declared = list(inherited_values(ctx, element, "font-size"))
    return _cascade_font_size(ctx, declared, root_font_size(ctx))


def _font_relative_to_pixels(
    ctx: RenderContext, element: Element | None, value: float, unit: str
) -> float:
    if unit == "rem":
        return value * root_font_size(ctx)

    if unit == "ch":
        if element is None or ctx.document.parent_of(element) is None:
            return value
        family = effective_attribute(ctx, element, "font-family") or ""
        return value * ctx.measurer.text_width("0", family, font_size(ctx, element))

    if unit == "em":
        return value * font_size(ctx, element)
    return value * font_size(ctx, element) * 0.5
