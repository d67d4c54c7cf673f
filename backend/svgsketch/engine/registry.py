"""Element handler registry — one handler function per supported element kind.

Usage:
    @handler(ElementKind.CIRCLE)
    def draw_circle(ctx: RenderContext, circle: Element, transform: Transform) -> None:
        ...

Adding support for a new element kind = one module in ``engine/handlers``
with the decorator. Tags without a kind map to ``ElementKind.UNSUPPORTED``.
"""

from __future__ import annotations

import enum
import importlib
import logging
import pkgutil
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable
from xml.etree.ElementTree import Element

if TYPE_CHECKING:
    from svgsketch.engine.context import RenderContext
    from svgsketch.engine.transform import Transform

logger = logging.getLogger(__name__)

HandlerFn = Callable[["RenderContext", Element, "Transform"], None]


class ElementKind(enum.Enum):
    SVG = "svg"
    SYMBOL = "symbol"
    RECT = "rect"
    PATH = "path"
    USE = "use"
    LINE = "line"
    CIRCLE = "circle"
    ELLIPSE = "ellipse"
    POLYLINE = "polyline"
    POLYGON = "polygon"
    TEXT = "text"
    IMAGE = "image"
    FOREIGN_OBJECT = "foreignObject"
    UNSUPPORTED = "unsupported"

    @classmethod
    def of(cls, tag: str) -> ElementKind:
        try:
            return cls(tag)
        except ValueError:
            return cls.UNSUPPORTED


@dataclass
class HandlerSpec:
    kind: ElementKind
    fn: HandlerFn
    description: str = ""


class HandlerRegistry:
    """Singleton registry of element handlers."""

    def __init__(self) -> None:
        self._handlers: dict[ElementKind, HandlerSpec] = {}

    def register(self, spec: HandlerSpec) -> None:
        if spec.kind in self._handlers:
            raise ValueError(f"Duplicate handler for <{spec.kind.value}>")
        if spec.kind is ElementKind.UNSUPPORTED:
            raise ValueError("Cannot register a handler for unsupported elements")
        self._handlers[spec.kind] = spec
        logger.debug("Registered handler for <%s>", spec.kind.value)

    def get(self, kind: ElementKind) -> HandlerSpec | None:
        return self._handlers.get(kind)

    def all(self) -> list[HandlerSpec]:
        return sorted(self._handlers.values(), key=lambda s: s.kind.value)

    @property
    def count(self) -> int:
        return len(self._handlers)


# Module-level singleton
_registry = HandlerRegistry()
_loaded = False


def get_registry() -> HandlerRegistry:
    return _registry


def handler(kind: ElementKind, description: str = ""):
    """Decorator to register an element handler."""

    def decorator(fn: HandlerFn) -> HandlerFn:
        _registry.register(HandlerSpec(kind=kind, fn=fn, description=description))
        return fn

    return decorator


def load_handlers() -> HandlerRegistry:
    """Import all handler modules so @handler decorators fire (idempotent)."""
    global _loaded
    if not _loaded:
        package = importlib.import_module("svgsketch.engine.handlers")
        for _, module_name, _ in pkgutil.iter_modules(package.__path__):
            importlib.import_module(f"{package.__name__}.{module_name}")
        _loaded = True
    return _registry
