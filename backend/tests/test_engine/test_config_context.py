"""Tests for SketchConfig and the immutable RenderContext."""

import pytest

from svgsketch.engine.config import FillStyle, SketchConfig
from svgsketch.engine.context import IdIndex
from svgsketch.engine.errors import InvalidTargetError, ReferenceDepthError
from tests.conftest import GRADIENT_SVG, make_context


def test_defaults_validate():
    config = SketchConfig().validate()
    assert config.fill_style is FillStyle.HACHURE
    assert config.roughness == 1.0


@pytest.mark.parametrize(
    "overrides",
    [{"roughness": -0.1}, {"bowing": -1}, {"curve_step_count": 0}, {"max_reference_depth": 0}],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(InvalidTargetError):
        SketchConfig().with_overrides(**overrides)


def test_with_overrides():
    config = SketchConfig().with_overrides(fill_style="cross-hatch", roughness=2.5)
    assert config.fill_style is FillStyle.CROSS_HATCH
    assert config.roughness == 2.5


def test_with_overrides_rejects_unknown():
    with pytest.raises(InvalidTargetError):
        SketchConfig().with_overrides(sparkle=True)
    with pytest.raises(InvalidTargetError):
        SketchConfig().with_overrides(fill_style="crayon")


def test_enter_reference_tracks_chain():
    ctx = make_context(GRADIENT_SVG)
    inner = ctx.enter_reference("use#a")
    assert inner.depth == 1
    assert "use#a" in inner.active_refs
    # The parent context is untouched
    assert ctx.depth == 0
    assert not ctx.active_refs
    with pytest.raises(ReferenceDepthError):
        inner.enter_reference("use#a")
    assert inner.enter_reference("use#b").depth == 2


def test_enter_reference_depth_limit():
    ctx = make_context(GRADIENT_SVG, max_reference_depth=2)
    ctx = ctx.enter_reference("use#a").enter_reference("use#b")
    with pytest.raises(ReferenceDepthError):
        ctx.enter_reference("use#c")


def test_derived_contexts_share_stats():
    ctx = make_context(GRADIENT_SVG)
    derived = ctx.with_config(ctx.config.with_overrides(roughness=3))
    derived.stats.drawn += 1
    assert ctx.stats.drawn == 1
    assert ctx.config.roughness == 1.0


def test_id_index():
    ctx = make_context(GRADIENT_SVG)
    index = ctx.id_index
    assert "g" in index
    assert len(index) == 3
    assert index.element("a").get("width") == "50"
    assert index.get(None) is None
    index.memoize("g", "#bc00ac")
    assert index.get("g") == "#bc00ac"
    assert index.element("g").get("id") == "g"
    assert IdIndex().get("a") is None
