"""Tests for effective attribute resolution, including the use-context chain."""

import pytest

from svgsketch.engine.context import push_use_context
from svgsketch.engine.styles.attributes import (
    effective_attribute,
    effective_opacity,
    get_id_from_url,
    parse_opacity,
)
from tests.conftest import SVG_HEADER, USE_SVG, by_id, make_context


INHERIT_SVG = f'''{SVG_HEADER} width="100" height="100" stroke="black">
  <style>.warm {{ fill: orange }} #styled {{ stroke-width: 4 }}</style>
  <g fill="blue" opacity="0.5">
    <rect id="plain" width="10" height="10"/>
    <rect id="classy" class="warm" width="10" height="10"/>
    <rect id="styled" style="fill: purple" fill="red" opacity="50%" width="10" height="10"/>
  </g>
</svg>'''


def test_inherits_from_ancestors():
    ctx = make_context(INHERIT_SVG)
    rect = by_id(ctx, "plain")
    assert effective_attribute(ctx, rect, "fill") == "blue"
    assert effective_attribute(ctx, rect, "stroke") == "black"
    assert effective_attribute(ctx, rect, "marker-end") is None


def test_computed_style_beats_attribute():
    ctx = make_context(INHERIT_SVG)
    assert effective_attribute(ctx, by_id(ctx, "classy"), "fill") == "orange"
    styled = by_id(ctx, "styled")
    assert effective_attribute(ctx, styled, "fill") == "purple"
    assert effective_attribute(ctx, styled, "stroke-width") == "4"


def test_opacity_multiplies_along_chain():
    ctx = make_context(INHERIT_SVG)
    assert effective_opacity(ctx, by_id(ctx, "plain")) == pytest.approx(0.5)
    assert effective_opacity(ctx, by_id(ctx, "styled")) == pytest.approx(0.25)


def test_use_context_redirects_lookup_to_use_element():
    ctx = make_context(USE_SVG)
    use = by_id(ctx, "u")
    shape = by_id(ctx, "shape")
    inner = by_id(ctx, "inner")

    # Without a use-context the defs ancestors declare no fill
    assert effective_attribute(ctx, inner, "fill") is None

    use_ctx = ctx.with_use_context(push_use_context(None, use, shape))
    assert effective_attribute(use_ctx, inner, "fill") == "green"


def test_nested_use_contexts_unwind_in_order():
    svg = f'''{SVG_HEADER} width="10" height="10">
      <defs>
        <rect id="leaf" width="1" height="1"/>
        <g id="mid" stroke="red"><use id="inner-use" href="#leaf"/></g>
      </defs>
      <g fill="teal"><use id="outer-use" href="#mid"/></g>
    </svg>'''
    ctx = make_context(svg)
    outer = push_use_context(None, by_id(ctx, "outer-use"), by_id(ctx, "mid"))
    inner = push_use_context(outer, by_id(ctx, "inner-use"), by_id(ctx, "leaf"))
    use_ctx = ctx.with_use_context(inner)
    leaf = by_id(ctx, "leaf")
    assert effective_attribute(use_ctx, leaf, "stroke") == "red"
    assert effective_attribute(use_ctx, leaf, "fill") == "teal"
    assert inner.depth == 2


@pytest.mark.parametrize(
    "value, expected",
    [("0.5", 0.5), ("50%", 0.5), ("2", 1.0), ("-1", 0.0), ("", 1.0), ("bogus", 1.0)],
)
def test_parse_opacity(value, expected):
    assert parse_opacity(value) == pytest.approx(expected)


@pytest.mark.parametrize(
    "url, expected",
    [("url(#a)", "a"), ("url('#b')", "b"), ('url("#c")', "c"), ("#d", "d"), ("red", None), (None, None)],
)
def test_get_id_from_url(url, expected):
    assert get_id_from_url(url) == expected
