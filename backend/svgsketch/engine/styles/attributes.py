"""Effective (inherited) presentation attributes.

Lookups walk from the element towards the document root. When the walk
reaches the element instantiated by a <use>, it continues at the <use>
itself and the active UseContext switches to its parent link.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterator
from xml.etree.ElementTree import Element

if TYPE_CHECKING:
    from svgsketch.engine.context import RenderContext, UseContext

_URL_ID_RES = (
    re.compile(r"url\(\s*['\"]?#([^'\")]+)['\"]?\s*\)"),
    re.compile(r"^#(.+)$"),
)


def _own_value(
    ctx: RenderContext, element: Element, name: str, use_context: UseContext | None
) -> str | None:
    # Across a use boundary only the raw attribute is trusted
    if use_context is None:
        value = ctx.document.computed_style(element).get(name) or element.get(name)
    else:
        value = element.get(name)
    if value is not None:
        value = value.strip()
    return value or None


def _parent_step(
    ctx: RenderContext, element: Element, use_context: UseContext | None
) -> tuple[Element | None, UseContext | None]:
    if use_context is not None and use_context.referenced is element:
        return use_context.root, use_context.parent
    return ctx.document.parent_of(element), use_context


def inherited_values(ctx: RenderContext, element: Element, name: str) -> Iterator[str]:
    """Declared values of ``name`` from ``element`` outwards to the document root."""
    current = ctx.use_context
    root = ctx.document.root
    node: Element | None = element
    while node is not None:
        value = _own_value(ctx, node, name, current)
        if value is not None:
            yield value
        if node is root:
            return
        node, current = _parent_step(ctx, node, current)


def effective_attribute(ctx: RenderContext, element: Element, name: str) -> str | None:
    """Inheritance-resolved value of ``name`` or None when nothing declares it."""
    return next(inherited_values(ctx, element, name), None)


def parse_opacity(value: str | None) -> float:
    """``0.5`` or ``50%`` → [0, 1]. Missing or unparseable means fully opaque."""
    if not value:
        return 1.0
    value = value.strip()
    try:
        if value.endswith("%"):
            opacity = float(value[:-1]) / 100
        else:
            opacity = float(value)
    except ValueError:
        return 1.0
    return min(1.0, max(0.0, opacity))


def effective_opacity(ctx: RenderContext, element: Element) -> float:
    """Product of the element's and all its (virtual) ancestors' ``opacity``."""
    current = ctx.use_context
    root = ctx.document.root
    opacity = 1.0
    node: Element | None = element
    while node is not None:
        value = _own_value(ctx, node, "opacity", current)
        if value is not None:
            opacity *= parse_opacity(value)
        if node is root:
            break
        node, current = _parent_step(ctx, node, current)
    return opacity


def own_opacity(ctx: RenderContext, element: Element, name: str) -> float:
    """Non-inherited opacity property such as ``fill-opacity``."""
    return parse_opacity(ctx.document.computed_style(element).get(name) or element.get(name))


def get_id_from_url(url: str | None) -> str | None:
    """``url(#id)``, ``url('#id')`` or ``#id`` → ``id``."""
    if not url:
        return None
    for pattern in _URL_ID_RES:
        match = pattern.search(url.strip())
        if match:
            return match.group(1)
    return None
