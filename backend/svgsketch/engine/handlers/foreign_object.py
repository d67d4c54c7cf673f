"""<foreignObject> — cloned untouched, with its text styling carried over.

Stylesheet rules of the source no longer match once the tree is rebuilt, so
a fixed set of computed text properties is inlined on the container.
"""

from __future__ import annotations

import copy
from xml.etree.ElementTree import Element

from svgsketch.engine.context import RenderContext
from svgsketch.engine.registry import ElementKind, handler
from svgsketch.engine.styles.attributes import effective_attribute
from svgsketch.engine.transform import Transform
from svgsketch.output.svg_sink import apply_transform, svg_element
from svgsketch.svg.stylesheet import format_declarations

COPIED_PROPERTIES = ("color", "font-family", "font-size", "font-style", "font-variant", "font-weight")


@handler(ElementKind.FOREIGN_OBJECT, description="Best-effort clone of foreign content")
def draw_foreign_object(ctx: RenderContext, foreign: Element, transform: Transform) -> None:
    container = svg_element("g")
    declarations = {}
    for name in COPIED_PROPERTIES:
        value = effective_attribute(ctx, foreign, name)
        if value:
            declarations[name] = value
    if declarations:
        container.set("style", format_declarations(declarations))
    apply_transform(container, transform)
    container.append(copy.deepcopy(foreign))
    ctx.sink.append(foreign, container)
