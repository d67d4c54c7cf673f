"""svgsketch render engine — SVG semantics in, sketch draw requests out."""

from svgsketch.engine.registry import handler, ElementKind, get_registry
from svgsketch.engine.context import RenderContext, UseContext, Viewport
from svgsketch.engine.config import FillStyle, RenderMode, SketchConfig

__all__ = [
    "handler",
    "ElementKind",
    "get_registry",
    "RenderContext",
    "UseContext",
    "Viewport",
    "FillStyle",
    "RenderMode",
    "SketchConfig",
]
