"""Color parsing and gradient flattening.

Sketch primitives only accept solid paint, so gradients are reduced to a
single representative color: adjacent stops are averaged, weighted by their
offset span, and the resulting samples are averaged again (quadratic mean
per RGB channel, arithmetic mean for alpha).
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from xml.etree.ElementTree import Element

from PIL import ImageColor

from svgsketch.engine.styles.attributes import parse_opacity
from svgsketch.svg.stylesheet import local_tag, parse_declarations

logger = logging.getLogger(__name__)

# Number of offset percent units represented by one sample
GRADIENT_RESOLUTION = 10

_RGB_FUNC_RE = re.compile(
    r"^rgba?\(\s*([-\d.]+%?)\s*[,\s]\s*([-\d.]+%?)\s*[,\s]\s*([-\d.]+%?)\s*(?:[,/]\s*([-\d.]+%?)\s*)?\)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Color:
    """sRGB color; channels in [0, 255], alpha in [0, 1]."""

    r: float
    g: float
    b: float
    a: float = 1.0

    def with_alpha(self, alpha: float) -> Color:
        return replace(self, a=min(1.0, max(0.0, alpha)))

    def rgb(self) -> tuple[int, int, int]:
        return (_channel(self.r), _channel(self.g), _channel(self.b))

    def to_css(self) -> str:
        r, g, b = self.rgb()
        alpha = round(self.a, 2)
        if alpha >= 1:
            return f"#{r:02x}{g:02x}{b:02x}"
        return f"rgba({r}, {g}, {b}, {alpha:g})"


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)
TRANSPARENT = Color(0, 0, 0, 0.0)


def _channel(value: float) -> int:
    return int(min(255, max(0, round(value))))


def _component(text: str, scale: float) -> float:
    if text.endswith("%"):
        return float(text[:-1]) / 100 * scale
    return float(text)


def parse_color(text: str | None) -> Color | None:
    """Parse a CSS color; None for ``none``, ``currentColor`` and anything unknown."""
    if not text:
        return None
    text = text.strip()
    lowered = text.lower()
    if lowered in ("none", "currentcolor", "inherit"):
        return None
    if lowered == "transparent":
        return TRANSPARENT

    match = _RGB_FUNC_RE.match(text)
    if match:
        try:
            r, g, b = (_component(match.group(i), 255) for i in (1, 2, 3))
            a = _component(match.group(4), 1) if match.group(4) else 1.0
        except ValueError:
            return None
        return Color(r, g, b, min(1.0, max(0.0, a)))

    try:
        rgba = ImageColor.getrgb(text)
    except ValueError:
        logger.debug("Unknown color %r", text)
        return None
    if len(rgba) == 4:
        return Color(rgba[0], rgba[1], rgba[2], rgba[3] / 255)
    return Color(rgba[0], rgba[1], rgba[2])


def average_color(colors: Iterable[Color]) -> Color:
    """Quadratic mean per RGB channel, arithmetic mean of alpha."""
    samples = list(colors)
    if not samples:
        return TRANSPARENT
    count = len(samples)
    return Color(
        math.sqrt(sum(c.r * c.r for c in samples) / count),
        math.sqrt(sum(c.g * c.g for c in samples) / count),
        math.sqrt(sum(c.b * c.b for c in samples) / count),
        sum(c.a for c in samples) / count,
    )


def stop_color(stop: Element) -> Color:
    """``stop-color`` attribute, else the inline style declaration, else white."""
    value = stop.get("stop-color")
    declarations = parse_declarations(stop.get("style"))
    if not value:
        value = declarations.get("stop-color")
    color = parse_color(value) if value else None
    if color is None:
        color = WHITE
    stop_opacity = stop.get("stop-opacity") or declarations.get("stop-opacity")
    if stop_opacity:
        color = color.with_alpha(color.a * parse_opacity(stop_opacity))
    return color


def stop_offset(stop: Element) -> float:
    """Stop offset in percent; ``0.4`` and ``40%`` both give 40."""
    offset = (stop.get("offset") or "").strip()
    if not offset:
        return 0.0
    try:
        if offset.endswith("%"):
            return float(offset[:-1])
        return float(offset) * 100
    except ValueError:
        return 0.0


def gradient_stops(
    gradient: Element, resolve: Callable[[str], Element | None] | None = None
) -> list[Element]:
    """Stops of ``gradient``; a gradient without stops inherits its href target's."""
    seen: set[int] = set()
    current: Element | None = gradient
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        stops = [el for el in current.iter() if isinstance(el.tag, str) and local_tag(el.tag) == "stop"]
        if stops or resolve is None:
            return stops
        href = current.get("href") or current.get("{http://www.w3.org/1999/xlink}href")
        if not href or not href.startswith("#"):
            return stops
        current = resolve(href[1:])
    return []


def gradient_to_color(
    gradient: Element,
    opacity: float,
    resolve: Callable[[str], Element | None] | None = None,
) -> str:
    """Flatten a linear/radial gradient to a single CSS color string."""
    stops = gradient_stops(gradient, resolve)
    if not stops:
        return "transparent"
    if len(stops) == 1:
        return stop_color(stops[0]).with_alpha(opacity).to_css()

    samples: list[Color] = []
    previous: Color | None = None
    for stop in stops:
        current = stop_color(stop)
        combined = average_color([previous, current]) if previous is not None else current
        entries = max(1, int(stop_offset(stop) // GRADIENT_RESOLUTION))
        samples.extend([combined] * entries)
        previous = current

    return average_color(samples).with_alpha(opacity).to_css()
