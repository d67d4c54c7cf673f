"""Tests for the hand-drawn sketch engine."""

import xml.etree.ElementTree as ET

from svgsketch.engine.config import FillStyle
from svgsketch.engine.styles.paint import StyleConfig
from svgsketch.sketch.base import sketch_path
from svgsketch.sketch.rough import RoughSketchEngine
from svgsketch.svg.parser import local_name
from tests.conftest import RecordingEngine


def _stroke_only(**kwargs) -> StyleConfig:
    return StyleConfig(fill=None, stroke="#000000", stroke_width=1.0, seed=3, **kwargs)


def _filled(fill_style: FillStyle, **kwargs) -> StyleConfig:
    return StyleConfig(
        fill="#ff0000", stroke="#000000", stroke_width=1.0, seed=3, fill_style=fill_style, **kwargs
    )


def _square():
    return [(0, 0), (100, 0), (100, 100), (0, 100)]


def test_line_is_double_stroked():
    group = RoughSketchEngine().line(0, 0, 100, 0, _stroke_only())
    paths = list(group)
    assert len(paths) == 1
    d = paths[0].get("d")
    assert d.count("M") == 2
    assert d.count("C") == 2
    assert paths[0].get("fill") == "none"


def test_single_stroke_when_multi_stroke_disabled():
    group = RoughSketchEngine().line(0, 0, 100, 0, _stroke_only(disable_multi_stroke=True))
    assert group[0].get("d").count("M") == 1


def test_same_seed_same_sketch():
    first = RoughSketchEngine().polygon(_square(), _filled(FillStyle.HACHURE))
    second = RoughSketchEngine().polygon(_square(), _filled(FillStyle.HACHURE))
    assert ET.tostring(first) == ET.tostring(second)


def test_preserve_vertices_keeps_endpoints():
    group = RoughSketchEngine().line(0, 0, 100, 0, _stroke_only(preserve_vertices=True))
    assert group[0].get("d").startswith("M0 0 ")


def test_solid_fill_precedes_outline():
    group = RoughSketchEngine().polygon(_square(), _filled(FillStyle.SOLID))
    fill, outline = list(group)
    assert fill.get("fill") == "#ff0000"
    assert fill.get("stroke") == "none"
    assert outline.get("stroke") == "#000000"


def test_hachure_lines_use_fill_color():
    group = RoughSketchEngine().polygon(_square(), _filled(FillStyle.HACHURE, hachure_gap=10))
    hachure = group[0]
    assert hachure.get("stroke") == "#ff0000"
    assert hachure.get("fill") == "none"
    # Roughly one line per gap across a 100px square
    assert 8 <= hachure.get("d").count("M") <= 16


def test_every_fill_style_produces_fill():
    engine = RoughSketchEngine()
    for fill_style in FillStyle:
        group = engine.polygon(_square(), _filled(fill_style, hachure_gap=10))
        assert len(group) == 2, fill_style


def test_cross_hatch_doubles_lines():
    engine = RoughSketchEngine()
    hachure = engine.polygon(_square(), _filled(FillStyle.HACHURE, hachure_gap=10))[0]
    cross = engine.polygon(_square(), _filled(FillStyle.CROSS_HATCH, hachure_gap=10))[0]
    assert cross.get("d").count("M") > hachure.get("d").count("M")


def test_nothing_to_draw_returns_none():
    style = StyleConfig(fill=None, stroke="none", stroke_width=0.0, seed=3)
    engine = RoughSketchEngine()
    assert engine.rectangle(0, 0, 10, 10, style) is None
    assert engine.ellipse(0, 0, 0, 10, _stroke_only()) is None
    assert engine.linear_path([(0, 0)], _stroke_only()) is None


def test_dash_array_passed_through():
    group = RoughSketchEngine().line(0, 0, 100, 0, _stroke_only(stroke_line_dash=[4.0, 2.0]))
    assert group[0].get("stroke-dasharray") == "4 2"


def test_path_with_curves_and_fill():
    group = RoughSketchEngine().path(
        "M0 0 C0 50 100 50 100 0 L100 100 L0 100 Z", _filled(FillStyle.SOLID)
    )
    fill, outline = list(group)
    assert local_name(fill) == "path"
    assert fill.get("d").startswith("M0 0 C")
    assert "C" in outline.get("d")


def test_sketch_path_preserves_vertices_for_curves():
    engine = RecordingEngine()
    sketch_path(engine, "M0 0 Q5 5 10 0", _stroke_only())
    sketch_path(engine, "M0 0 L10 0", _stroke_only())
    curved, straight = (style for _, _, style in engine.calls)
    assert curved.preserve_vertices
    assert not straight.preserve_vertices
