"""Tests for color parsing, gradient flattening and style resolution."""

import pytest

from svgsketch.engine.config import FillStyle
from svgsketch.engine.styles.colors import Color, average_color, gradient_to_color, parse_color
from svgsketch.engine.styles.paint import parse_fill_url, resolve_style
from svgsketch.engine.styles.pens import ZERO_PEN, create_pen
from svgsketch.engine.transform import Transform
from svgsketch.svg.parser import parse_svg
from tests.conftest import GRADIENT_SVG, SVG_HEADER, by_id, make_context


def test_parse_color_forms():
    assert parse_color("#ff0000") == Color(255, 0, 0)
    assert parse_color("rgb(0, 128, 0)") == Color(0, 128, 0)
    assert parse_color("rgba(0, 0, 255, 0.5)") == Color(0, 0, 255, 0.5)
    assert parse_color("transparent").a == 0.0
    assert parse_color("none") is None
    assert parse_color("currentColor") is None
    assert parse_color("not-a-color") is None


def test_to_css():
    assert Color(255, 0, 0).to_css() == "#ff0000"
    assert Color(255, 0, 0, 0.5).to_css() == "rgba(255, 0, 0, 0.5)"


def test_average_color_is_quadratic_mean():
    mean = average_color([Color(255, 0, 0), Color(0, 0, 0)])
    assert mean.r == pytest.approx(255 / 2**0.5)


def test_gradient_flattening():
    doc = parse_svg(GRADIENT_SVG)
    gradient = next(el for el in doc.root.iter() if el.get("id") == "g")
    assert gradient_to_color(gradient, 1.0) == "#bc00ac"
    assert gradient_to_color(gradient, 0.5) == "rgba(188, 0, 172, 0.5)"


def test_gradient_without_stops_is_transparent():
    doc = parse_svg(f'{SVG_HEADER}><linearGradient id="empty"/></svg>')
    assert gradient_to_color(doc.root[0], 1.0) == "transparent"


def test_gradient_inherits_stops_through_href():
    svg = f'''{SVG_HEADER}>
      <linearGradient id="base"><stop offset="0" stop-color="#00ff00"/></linearGradient>
      <linearGradient id="derived" href="#base"/>
    </svg>'''
    ctx = make_context(svg)
    color = gradient_to_color(by_id(ctx, "derived"), 1.0, ctx.id_index.element)
    assert color == "#00ff00"


def test_stop_color_from_style_then_white():
    svg = f'''{SVG_HEADER}>
      <linearGradient id="g">
        <stop offset="0" style="stop-color: black"/>
        <stop offset="1"/>
      </linearGradient>
    </svg>'''
    doc = parse_svg(svg)
    # One black sample, then ten samples averaging black and white
    assert gradient_to_color(doc.root[0], 1.0) == "#acacac"


def test_gradient_color_memoized_in_index():
    ctx = make_context(GRADIENT_SVG)
    first = parse_fill_url(ctx, "url(#g)", 1.0)
    assert first == "#bc00ac"
    assert ctx.id_index.get("g") == "#bc00ac"
    # Later lookups reuse the memoized color regardless of opacity
    assert parse_fill_url(ctx, "url(#g)", 0.5) == "#bc00ac"


def test_memoized_gradient_still_inherited_through_href():
    svg = f'''{SVG_HEADER}>
      <linearGradient id="base">
        <stop offset="0" stop-color="red"/>
        <stop offset="1" stop-color="red"/>
      </linearGradient>
      <linearGradient id="derived" href="#base"/>
    </svg>'''
    ctx = make_context(svg)
    fills = [parse_fill_url(ctx, url, 1.0) for url in ("url(#base)", "url(#derived)")]
    assert fills == ["#ff0000", "#ff0000"]
    assert ctx.id_index.element("base") is not None


def test_unresolved_paint_reference():
    ctx = make_context(GRADIENT_SVG)
    assert parse_fill_url(ctx, "url(#missing)", 1.0) is None


def test_resolve_style_gradient_fill_and_outline():
    ctx = make_context(GRADIENT_SVG)
    style = resolve_style(ctx, by_id(ctx, "a"), Transform.identity())
    assert style.fill == "#bc00ac"
    # Unstroked fills are outlined in the fill color
    assert style.stroke == "#bc00ac"
    assert style.stroke_width == 1.0


def test_resolve_style_scales_stroke_and_dashes():
    svg = f'''{SVG_HEADER} width="10" height="10">
      <path id="p" d="M0 0 L1 1" fill="none" stroke="red" stroke-width="2"
            stroke-dasharray="4 0.1" stroke-dashoffset="1"/>
    </svg>'''
    ctx = make_context(svg)
    style = resolve_style(ctx, by_id(ctx, "p"), Transform.scaling(3))
    assert style.fill is None
    assert style.stroke == "#ff0000"
    assert style.stroke_width == pytest.approx(6.0)
    assert style.stroke_line_dash == pytest.approx([12.0, 0.5])
    assert style.stroke_line_dash_offset == pytest.approx(3.0)


def test_resolve_style_default_fill_is_black():
    svg = f'{SVG_HEADER} width="10" height="10"><rect id="r" width="1" height="1" fill-opacity="0.5"/></svg>'
    ctx = make_context(svg)
    style = resolve_style(ctx, by_id(ctx, "r"), Transform.identity())
    assert style.fill == "rgba(0, 0, 0, 0.5)"


def test_current_color_uses_color_property():
    svg = f'{SVG_HEADER} width="10" height="10" color="#123456"><rect id="r" width="1" height="1" fill="currentColor"/></svg>'
    ctx = make_context(svg)
    assert resolve_style(ctx, by_id(ctx, "r"), None).fill == "#123456"


def test_pen_randomization_ranges():
    ctx = make_context(GRADIENT_SVG, randomize=True)
    pen = create_pen(ctx, 200, 200)
    assert -50 <= pen.angle <= -30
    assert 2 <= pen.gap <= 5
    assert 1 <= pen.weight <= 3

    flat = create_pen(ctx, 10, 100)
    assert -75 <= flat.angle <= -50


def test_solid_fill_style_uses_zero_pen():
    ctx = make_context(GRADIENT_SVG, fill_style=FillStyle.SOLID)
    assert create_pen(ctx, 100, 100) == ZERO_PEN
