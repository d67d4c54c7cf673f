"""SVG output sink — assembles the sketched document.

Each drawable is wrapped in its own ``<g>`` so that clip paths and the
pencil texture filter can be attached without touching sketch geometry.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from xml.etree.ElementTree import Element

from svgsketch.engine.transform import Transform
from svgsketch.svg.parser import SVG_NS, local_name

logger = logging.getLogger(__name__)

PENCIL_FILTER_ID = "pencilTextureFilter"


def svg_element(tag: str, **attrs: str) -> Element:
    """Create an element in the SVG namespace."""
    return Element(f"{{{SVG_NS}}}{tag}", {k.replace("_", "-"): v for k, v in attrs.items()})


def apply_transform(element: Element, transform: Transform | None) -> Element:
    """Place ``element`` in output space by setting its ``transform`` attribute."""
    if transform is not None and not transform.is_identity:
        element.set("transform", transform.to_svg())
    return element


def create_pencil_filter() -> Element:
    """Fractal noise texture masking the stroke alpha, like graphite on paper."""
    pencil = svg_element(
        "filter",
        id=PENCIL_FILTER_ID,
        x="0%",
        y="0%",
        width="100%",
        height="100%",
    )
    pencil.set("filterUnits", "objectBoundingBox")

    turbulence = ET.SubElement(pencil, f"{{{SVG_NS}}}feTurbulence")
    turbulence.set("type", "fractalNoise")
    turbulence.set("baseFrequency", "2")
    turbulence.set("numOctaves", "5")
    turbulence.set("stitchTiles", "stitch")
    turbulence.set("result", "f1")

    color_matrix = ET.SubElement(pencil, f"{{{SVG_NS}}}feColorMatrix")
    color_matrix.set("type", "matrix")
    color_matrix.set("values", "0 0 0 0 0, 0 0 0 0 0, 0 0 0 0 0, 0 0 0 -1.5 1.5")
    color_matrix.set("result", "f2")

    composite = ET.SubElement(pencil, f"{{{SVG_NS}}}feComposite")
    composite.set("operator", "in")
    composite.set("in", "SourceGraphic")
    composite.set("in2", "f2")
    composite.set("result", "f3")
    return pencil


class SvgSink:
    """Output document writer.

    Clip-path ids assigned to source elements are tracked here rather than
    written onto the read-only source tree.
    """

    def __init__(
        self,
        width: float,
        height: float,
        pencil_filter: bool = False,
        background_color: str | None = None,
        parent: SvgSink | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self.pencil_filter = pencil_filter
        self.background_color = background_color
        self.parent = parent
        self.root = svg_element("svg", width=_fmt(width), height=_fmt(height), version="1.1")
        self._defs: Element | None = None
        self._clip_ids: dict[Element, str] = {}
        self.drawn = 0

        if background_color:
            self.root.append(
                svg_element(
                    "rect",
                    x="0",
                    y="0",
                    width=_fmt(width),
                    height=_fmt(height),
                    fill=background_color,
                )
            )
        if pencil_filter:
            self.add_def(create_pencil_filter())

    # Defs

    @property
    def defs(self) -> Element:
        if self.parent is not None:
            return self.parent.defs
        if self._defs is None:
            self._defs = svg_element("defs")
            self.root.insert(0, self._defs)
        return self._defs

    def has_def(self, def_id: str) -> bool:
        if self.parent is not None:
            return self.parent.has_def(def_id)
        return self._defs is not None and any(
            child.get("id") == def_id for child in self._defs
        )

    def add_def(self, element: Element) -> None:
        self.defs.append(element)

    # Clip paths

    def new_clip_container(self, clip_id: str) -> Element:
        return svg_element("clipPath", id=clip_id)

    def commit_clip(self, container: Element) -> bool:
        """Emit a clip container; an empty one is dropped."""
        if len(container) == 0:
            logger.debug("Dropping empty clip path %s", container.get("id"))
            return False
        self.add_def(container)
        return True

    def set_clip(self, owner: Element, clip_id: str) -> None:
        self._clip_ids[owner] = clip_id

    def clip_for(self, owner: Element) -> str | None:
        return self._clip_ids.get(owner)

    # Drawables

    def wrap(self, source: Element, drawable: Element) -> Element:
        group = svg_element("g")
        clip_id = self.clip_for(source)
        if clip_id:
            group.set("clip-path", f"url(#{clip_id})")
        if self.pencil_filter and local_name(source) != "text":
            group.set("filter", f"url(#{PENCIL_FILTER_ID})")
        group.append(drawable)
        return group

    def append(self, source: Element, drawable: Element | None) -> Element | None:
        """Post-process ``drawable`` for ``source`` and add it to the output."""
        if drawable is None:
            return None
        group = self.wrap(source, drawable)
        self.root.append(group)
        self.drawn += 1
        return group

    def draw_image(
        self,
        source: Element,
        href: str,
        transform: Transform | None,
        position: tuple[float, float] = (0.0, 0.0),
        size: tuple[float | None, float | None] = (None, None),
    ) -> Element | None:
        """Place an external image untouched at its transformed location.

        The clone keeps its own x/y/width/height; ``position`` and ``size``
        are for sinks that draw pixels.
        """
        container = apply_transform(svg_element("g"), transform)
        container.append(Element(source.tag, dict(source.attrib)))
        return self.append(source, container)

    def fragment(self) -> SvgSink:
        """A detached sink for sketching a subtree; defs go to this sink's defs."""
        return SvgSink(self.width, self.height, parent=self)

    def content(self) -> list[Element]:
        """Top-level output elements except defs."""
        return [child for child in self.root if child is not self._defs]

    def tostring(self) -> str:
        return ET.tostring(self.root, encoding="unicode")


def _fmt(value: float) -> str:
    return f"{value:g}"
