"""Shared test fixtures."""

from __future__ import annotations

from xml.etree.ElementTree import Element

import numpy as np
import pytest

from svgsketch.engine.config import SketchConfig
from svgsketch.engine.context import IdIndex, RenderContext, RenderStats, Viewport
from svgsketch.output.svg_sink import SvgSink, svg_element
from svgsketch.svg.parser import parse_svg
from svgsketch.utils.text_metrics import TextMeasurer


SVG_HEADER = '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink"'

CIRCLE_SVG = f'''{SVG_HEADER} width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2">
  <circle cx="12" cy="12" r="10"/>
</svg>'''

SMILEY_SVG = f'''{SVG_HEADER} width="24" height="24" viewBox="0 0 24 24" fill="none" stroke="black" stroke-width="2" stroke-linecap="round" stroke-linejoin="round">
  <circle cx="12" cy="12" r="10"/>
  <circle cx="8" cy="9" r="1"/>
  <circle cx="16" cy="9" r="1"/>
  <path d="M8 14s1.5 2 4 2 4-2 4-2"/>
</svg>'''

FILLED_RECT_SVG = f'''{SVG_HEADER} width="100" height="100">
  <rect x="10" y="10" width="80" height="80" fill="#4ECDC4"/>
  <circle cx="50" cy="50" r="20" fill="#FF6B6B"/>
</svg>'''

GRADIENT_SVG = f'''{SVG_HEADER} width="100" height="100">
  <defs>
    <linearGradient id="g">
      <stop offset="0" stop-color="red"/>
      <stop offset="1" stop-color="blue"/>
    </linearGradient>
  </defs>
  <rect id="a" width="50" height="50" fill="url(#g)"/>
  <rect id="b" x="50" width="50" height="50" fill="url(#g)" opacity="0.5"/>
</svg>'''

USE_SVG = f'''{SVG_HEADER} width="100" height="100">
  <defs>
    <g id="shape"><rect id="inner" width="10" height="10"/></g>
  </defs>
  <g fill="green">
    <use id="u" href="#shape" x="20" y="30"/>
  </g>
</svg>'''

CLIP_SVG = f'''{SVG_HEADER} width="100" height="100">
  <defs>
    <clipPath id="c">
      <rect x="10" y="10" width="50" height="50" rx="5"/>
      <circle cx="5" cy="5" r="0"/>
      <text>ignored</text>
    </clipPath>
  </defs>
  <rect id="clipped" width="100" height="100" fill="red" clip-path="url(#c)"/>
</svg>'''

MARKER_SVG = f'''{SVG_HEADER} width="100" height="100">
  <defs>
    <marker id="arrow" markerWidth="10" markerHeight="10" refX="5" refY="5" orient="auto">
      <path d="M0 0 L10 5 L0 10 Z"/>
    </marker>
  </defs>
  <polyline points="0,0 10,0 10,10" fill="none" stroke="black"
            marker-start="url(#arrow)" marker-mid="url(#arrow)" marker-end="url(#arrow)"/>
</svg>'''

TEXT_SVG = f'''{SVG_HEADER} width="200" height="100">
  <text x="10" y="20" transform="translate(5 5)" font-family="Arial" font-size="12" fill="blue">
    Hello   <tspan fill="red">sketchy</tspan>   world
  </text>
</svg>'''


class RecordingEngine:
    """Sketch engine stand-in that records every primitive call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple, object]] = []

    def _record(self, name: str, args: tuple, style) -> Element:
        self.calls.append((name, args, style))
        group = svg_element("g")
        group.set("data-op", name)
        return group

    def circle(self, x, y, diameter, style):
        return self._record("circle", (x, y, diameter), style)

    def ellipse(self, x, y, width, height, style):
        return self._record("ellipse", (x, y, width, height), style)

    def rectangle(self, x, y, width, height, style):
        return self._record("rectangle", (x, y, width, height), style)

    def line(self, x1, y1, x2, y2, style):
        return self._record("line", (x1, y1, x2, y2), style)

    def polygon(self, points, style):
        return self._record("polygon", (list(points),), style)

    def linear_path(self, points, style):
        return self._record("linear_path", (list(points),), style)

    def path(self, d, style):
        return self._record("path", (d,), style)

    def names(self) -> list[str]:
        return [name for name, _, _ in self.calls]


def make_context(
    svg: str,
    engine: RecordingEngine | None = None,
    sink: SvgSink | None = None,
    size: tuple[float, float] = (100.0, 100.0),
    **options,
) -> RenderContext:
    """RenderContext over ``svg`` with a recording engine and a fresh SVG sink."""
    document = parse_svg(svg)
    options.setdefault("seed", 7)
    options.setdefault("randomize", False)
    options.setdefault("disable_multi_stroke", False)
    config = SketchConfig(**options)
    width, height = size
    return RenderContext(
        document=document,
        config=config,
        engine=engine or RecordingEngine(),
        sink=sink or SvgSink(width, height),
        id_index=IdIndex.collect(document),
        rng=np.random.default_rng(config.seed),
        measurer=TextMeasurer(),
        stats=RenderStats(),
        output_size=size,
        viewport=Viewport(0.0, 0.0, width, height),
    )


def by_id(ctx: RenderContext, element_id: str) -> Element:
    element = ctx.id_index.element(element_id)
    assert element is not None, element_id
    return element


@pytest.fixture
def engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture
def circle_svg() -> str:
    return CIRCLE_SVG


@pytest.fixture
def smiley_svg() -> str:
    return SMILEY_SVG
