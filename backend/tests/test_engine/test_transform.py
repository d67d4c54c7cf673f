"""Tests for transform parsing, composition and classification."""

import math

import pytest

from svgsketch.engine.errors import TransformError
from svgsketch.engine.transform import (
    Transform,
    TransformKind,
    classify,
    combine,
    parse_transform,
)


def test_parse_empty_is_none():
    assert parse_transform(None) is None
    assert parse_transform("") is None


def test_parse_translate_single_argument():
    t = parse_transform("translate(5)")
    assert t.as_tuple() == (1.0, 0.0, 0.0, 1.0, 5.0, 0.0)


def test_parse_list_composes_left_to_right():
    t = parse_transform("translate(10, 20) scale(2)")
    assert t.apply(1, 1) == pytest.approx((12.0, 22.0))


def test_rotate_about_center():
    t = parse_transform("rotate(90 10 10)")
    assert t.apply(20, 10) == pytest.approx((10.0, 20.0))


def test_matrix_requires_six_values():
    with pytest.raises(ValueError):
        parse_transform("matrix(1 0 0 1)")


@pytest.mark.parametrize("value", ["matrix(1 0 0 1)", "translate()", "scale(1e)"])
def test_malformed_transform_raises_transform_error(value):
    with pytest.raises(TransformError):
        parse_transform(value)


def test_combine_without_local_returns_parent():
    parent = Transform.translation(3, 4)
    assert combine(parent, None) is parent


def test_combine_order():
    parent = Transform.scaling(2)
    local = Transform.translation(5, 0)
    assert combine(parent, local).apply(0, 0) == pytest.approx((10.0, 0.0))


def test_classification():
    assert classify(Transform.identity()) is TransformKind.IDENTITY
    assert classify(Transform.translation(1, 2)) is TransformKind.TRANSLATION
    assert classify(Transform.scaling(2)) is TransformKind.GENERAL
    assert classify(Transform.rotation(30)) is TransformKind.GENERAL


def test_stroke_scale_is_geometric_mean():
    assert Transform.scaling(2, 8).stroke_scale == pytest.approx(4.0)
    assert Transform.rotation(45).stroke_scale == pytest.approx(1.0)


def test_skew():
    t = parse_transform("skewX(45)")
    assert t.apply(0, 10) == pytest.approx((10.0, 10.0))
    assert math.isclose(t.determinant, 1.0)


def test_to_svg():
    assert Transform.translation(1.5, -2).to_svg() == "matrix(1,0,0,1,1.5,-2)"
