"""Nested <svg> and <symbol> roots."""

from __future__ import annotations

from xml.etree.ElementTree import Element

from svgsketch.engine.context import RenderContext
from svgsketch.engine.processor import draw_root
from svgsketch.engine.registry import ElementKind, handler
from svgsketch.engine.transform import Transform


@handler(ElementKind.SVG, description="Nested svg viewport")
def draw_svg(ctx: RenderContext, svg: Element, transform: Transform) -> None:
    draw_root(ctx, svg, transform)


@handler(ElementKind.SYMBOL, description="Symbol viewport")
def draw_symbol(ctx: RenderContext, symbol: Element, transform: Transform) -> None:
    draw_root(ctx, symbol, transform)
