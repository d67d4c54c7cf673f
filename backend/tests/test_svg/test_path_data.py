"""Tests for path data parsing and normalization."""

import pytest

from svgsketch.engine.errors import PathDataError
from svgsketch.engine.transform import Transform
from svgsketch.svg.path_data import (
    NORMALIZED_COMMANDS,
    has_curves,
    normalized_path,
    parse_path_data,
    vertices,
)


def test_implicit_lineto_after_moveto():
    commands = parse_path_data("M0 0 10 10 20 0")
    assert [c.command for c in commands] == ["M", "L", "L"]
    assert commands[2].values == (20.0, 0.0)


def test_arc_keeps_radii_and_flags():
    commands = parse_path_data("M0 0 a5 5 0 1 1 10 0")
    assert commands[1].command == "A"
    assert commands[1].values == pytest.approx((5.0, 5.0, 0.0, 1.0, 1.0, 10.0, 0.0))


def test_must_start_with_moveto():
    with pytest.raises(PathDataError):
        parse_path_data("L10 10")


def test_garbage_raises():
    with pytest.raises(PathDataError):
        parse_path_data("M0 0 L foo")


def test_empty_path_data():
    assert parse_path_data(None) == []
    assert parse_path_data("   ") == []


def test_normalize_only_uses_reduced_command_set():
    commands = parse_path_data("m1 1 h10 v10 s5 5 10 0 t10 0 z")
    assert {c.command for c in commands} <= NORMALIZED_COMMANDS
    assert commands[0].values == (1.0, 1.0)
    assert commands[1].values == (11.0, 1.0)
    assert commands[2].values == (11.0, 11.0)
    assert commands[-1].command == "Z"


def test_relative_moveto_after_closepath_starts_at_subpath_start():
    commands = parse_path_data("M10 10 l5 0 l0 5 z m2 2 l1 0")
    moves = [c.values for c in commands if c.command == "M"]
    assert moves == [(10.0, 10.0), (12.0, 12.0)]


def test_smooth_cubic_reflects_control_point():
    commands = parse_path_data("M0 0 C0 10 10 10 10 0 S20 -10 20 0")
    assert commands[2].command == "C"
    assert commands[2].values[:2] == (10.0, -10.0)


def test_zero_radius_arc_is_line():
    commands = parse_path_data("M0 0 A0 5 0 0 1 10 0")
    assert commands[1].command == "L"


def test_normalized_path_applies_transform():
    assert normalized_path("M0 0 L10 0", Transform.translation(5, 5)) == "M5 5 L15 5"


def test_arc_radii_scale_with_transform():
    d = normalized_path("M0 0 A5 5 0 0 1 10 0", Transform.scaling(2))
    assert d == "M0 0 A10 10 0 0 1 20 0"


def test_mirroring_flips_sweep():
    d = normalized_path("M0 0 A5 5 0 0 1 10 0", Transform.scaling(-1, 1))
    assert d.endswith("0 0 0 -10 0")


def test_vertices_close_subpath():
    commands = parse_path_data("M0 0 L10 0 L10 10 Z")
    assert vertices(commands) == [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 0.0)]


def test_vertices_explicit_return_before_close():
    commands = parse_path_data("M0 0 L10 0 L10 10 L0 0 Z")
    assert vertices(commands) == [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 0.0)]


def test_has_curves():
    assert has_curves("M0 0 C1 1 2 2 3 3")
    assert not has_curves("M0 0 L1 1 Z")
