"""SVG parser — facade over xml.etree.

Converts raw SVG text → SvgDocument: the read-only element tree plus the
lookups the render engine needs (parent links, computed style, ids).
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from xml.etree.ElementTree import Element

from svgsketch.engine.errors import SvgParseError
from svgsketch.svg.stylesheet import Stylesheet, local_tag, parse_declarations

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
XML_NS = "http://www.w3.org/XML/1998/namespace"

_NAMESPACED_ATTRS = {
    "href": f"{{{XLINK_NS}}}href",
    "xml:space": f"{{{XML_NS}}}space",
}

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)


def local_name(element: Element) -> str:
    """Tag name without namespace, e.g. ``{http://www.w3.org/2000/svg}rect`` → ``rect``."""
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    return local_tag(tag)


def get_attr(element: Element, name: str) -> str | None:
    """Raw attribute lookup; ``href`` also accepts ``xlink:href``."""
    value = element.get(name)
    if value is None and name in _NAMESPACED_ATTRS:
        value = element.get(_NAMESPACED_ATTRS[name])
    return value


class SvgDocument:
    """A parsed, read-only SVG tree."""

    def __init__(self, root: Element, raw: str = "") -> None:
        self.root = root
        self.raw = raw
        self.stylesheet = Stylesheet.from_root(root)
        self._parents: dict[Element, Element] = {
            child: parent for parent in root.iter() for child in parent
        }
        self._computed: dict[Element, dict[str, str]] = {}

    def parent_of(self, element: Element) -> Element | None:
        return self._parents.get(element)

    def children(self, element: Element) -> list[Element]:
        return [child for child in element if isinstance(child.tag, str)]

    def computed_style(self, element: Element) -> dict[str, str]:
        """Matched stylesheet rules overridden by the inline ``style`` attribute."""
        cached = self._computed.get(element)
        if cached is None:
            cached = self.stylesheet.matched_declarations(element)
            cached.update(parse_declarations(element.get("style")))
            self._computed[element] = cached
        return cached

    def iter_with_id(self) -> Iterator[tuple[str, Element]]:
        for element in self.root.iter():
            element_id = element.get("id")
            if element_id:
                yield element_id, element

    def is_hidden(self, element: Element) -> bool:
        style = self.computed_style(element)
        display = style.get("display") or element.get("display")
        visibility = style.get("visibility") or element.get("visibility")
        return display == "none" or visibility == "hidden"


def parse_svg(svg_text: str) -> SvgDocument:
    """Parse raw SVG text into an SvgDocument."""
    try:
        root = ET.fromstring(svg_text)
    except ET.ParseError as e:
        raise SvgParseError(f"Malformed SVG: {e}") from e
    if local_name(root) != "svg":
        raise SvgParseError(f"Root element must be <svg>, got <{local_name(root)}>")
    document = SvgDocument(root, raw=svg_text)
    logger.debug(
        "Parsed SVG: %d elements, %d style rules",
        sum(1 for _ in root.iter()),
        len(document.stylesheet),
    )
    return document
