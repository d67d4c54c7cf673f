"""Tests for traversal, viewports and the per-element failure policy."""

from svgsketch.engine.processor import parse_view_box, process_root, sketch_fragment
from tests.conftest import SVG_HEADER, RecordingEngine, by_id, make_context


class ExplodingEngine(RecordingEngine):
    def circle(self, x, y, diameter, style):
        raise RuntimeError("pen broke")


def test_parse_view_box():
    box = parse_view_box("0 0 100 50")
    assert (box.x, box.y, box.w, box.h) == (0.0, 0.0, 100.0, 50.0)
    assert parse_view_box("0,0,10,10").w == 10.0
    assert parse_view_box("0 0 0 10") is None
    assert parse_view_box("0 0 10") is None
    assert parse_view_box(None) is None


def test_failure_isolated_to_element():
    svg = f'''{SVG_HEADER} width="100" height="100">
      <rect width="10" height="10"/>
      <circle id="boom" cx="5" cy="5" r="5"/>
      <rect x="20" width="10" height="10"/>
    </svg>'''
    engine = ExplodingEngine()
    ctx = make_context(svg, engine=engine)
    process_root(ctx, ctx.document.root, None, 100, 100)
    assert engine.names() == ["rectangle", "rectangle"]
    assert ctx.stats.failed == 1
    assert ctx.stats.drawn == 2
    assert ctx.stats.errors == ["<circle #boom>: pen broke"]


def test_hidden_element_skipped_children_walked():
    svg = f'''{SVG_HEADER} width="100" height="100">
      <g display="none"><rect width="10" height="10"/></g>
      <rect width="10" height="10" visibility="hidden"/>
    </svg>'''
    engine = RecordingEngine()
    ctx = make_context(svg, engine=engine)
    process_root(ctx, ctx.document.root, None, 100, 100)
    # The hidden group's children are still walked and drawn
    assert engine.names() == ["rectangle"]
    assert ctx.stats.skipped == 2


def test_root_view_box_centers_content():
    svg = f'''{SVG_HEADER} width="200" height="100" viewBox="0 0 100 100">
      <rect width="50%" height="10"/>
    </svg>'''
    engine = RecordingEngine()
    ctx = make_context(svg, engine=engine, size=(200.0, 100.0))
    process_root(ctx, ctx.document.root, None, 200, 100)
    assert engine.calls[0][1] == (50.0, 0.0, 50.0, 10.0)


def test_defs_and_symbols_not_drawn_directly():
    svg = f'''{SVG_HEADER} width="100" height="100">
      <defs><rect width="10" height="10"/></defs>
      <symbol id="s"><rect width="10" height="10"/></symbol>
      <clipPath id="c"><rect width="10" height="10"/></clipPath>
    </svg>'''
    engine = RecordingEngine()
    ctx = make_context(svg, engine=engine)
    process_root(ctx, ctx.document.root, None, 100, 100)
    assert engine.calls == []


def test_sketch_fragment_uses_overrides_and_detached_sink():
    svg = f'''{SVG_HEADER} width="100" height="100">
      <g id="group"><rect width="10" height="10"/><circle r="2"/></g>
    </svg>'''
    engine = RecordingEngine()
    ctx = make_context(svg, engine=engine)
    parts = sketch_fragment(ctx, by_id(ctx, "group"), roughness=0.25)
    assert len(parts) == 2
    assert [style.roughness for _, _, style in engine.calls] == [0.25, 0.25]
    assert ctx.sink.content() == []


def test_malformed_transform_isolated_to_element():
    svg = f'''{SVG_HEADER} width="100" height="100">
      <rect width="10" height="10"/>
      <rect id="bad" width="10" height="10" transform="matrix(1 0 0 1)"/>
      <rect x="20" width="10" height="10"/>
    </svg>'''
    engine = RecordingEngine()
    ctx = make_context(svg, engine=engine)
    process_root(ctx, ctx.document.root, None, 100, 100)
    assert engine.names() == ["rectangle", "rectangle"]
    assert [args[0] for _, args, _ in engine.calls] == [0.0, 20.0]
    assert ctx.stats.failed == 1
    assert ctx.stats.errors[0].startswith("<rect #bad>: Invalid transform")


def test_malformed_group_transform_skips_subtree():
    svg = f'''{SVG_HEADER} width="100" height="100">
      <g transform="translate()"><rect width="10" height="10"/><circle r="2"/></g>
      <g transform="scale(1e)"><rect width="10" height="10"/></g>
      <circle cx="5" cy="5" r="5"/>
    </svg>'''
    engine = RecordingEngine()
    ctx = make_context(svg, engine=engine)
    process_root(ctx, ctx.document.root, None, 100, 100)
    assert engine.names() == ["circle"]
    assert ctx.stats.failed == 2
