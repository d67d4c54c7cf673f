"""Sketch engine contract — precise geometry in, hand-drawn drawables out."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Protocol, Sequence
from xml.etree.ElementTree import Element

from svgsketch.svg.path_data import has_curves

if TYPE_CHECKING:
    from svgsketch.engine.styles.paint import StyleConfig

Point = tuple[float, float]
Drawable = Element


class SketchEngine(Protocol):
    """Primitive shape operations; each returns a ``<g>`` or None when nothing is drawn."""

    def circle(self, x: float, y: float, diameter: float, style: StyleConfig) -> Drawable | None: ...

    def ellipse(
        self, x: float, y: float, width: float, height: float, style: StyleConfig
    ) -> Drawable | None: ...

    def rectangle(
        self, x: float, y: float, width: float, height: float, style: StyleConfig
    ) -> Drawable | None: ...

    def line(
        self, x1: float, y1: float, x2: float, y2: float, style: StyleConfig
    ) -> Drawable | None: ...

    def polygon(self, points: Sequence[Point], style: StyleConfig) -> Drawable | None: ...

    def linear_path(self, points: Sequence[Point], style: StyleConfig) -> Drawable | None: ...

    def path(self, d: str, style: StyleConfig) -> Drawable | None: ...


def sketch_path(engine: SketchEngine, d: str, style: StyleConfig) -> Drawable | None:
    """Sketch a path; curved paths keep their vertices to avoid disjoint joins."""
    if has_curves(d):
        style = replace(style, preserve_vertices=True)
    return engine.path(d, style)
