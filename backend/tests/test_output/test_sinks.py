"""Tests for the SVG and raster output sinks."""

import base64
import io

from PIL import Image

from svgsketch.engine.transform import Transform
from svgsketch.output.raster import RasterSink, load_image
from svgsketch.output.svg_sink import PENCIL_FILTER_ID, SvgSink, svg_element
from svgsketch.svg.parser import local_name


def _png_data_url(color=(255, 0, 0, 255), size=(2, 2)) -> str:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def test_background_rect_comes_first():
    sink = SvgSink(40, 20, background_color="white")
    first = sink.root[0]
    assert local_name(first) == "rect"
    assert first.get("fill") == "white"
    assert first.get("width") == "40"


def test_defs_created_lazily_and_placed_first():
    sink = SvgSink(10, 10)
    assert "defs" not in sink.tostring()
    sink.add_def(svg_element("clipPath", id="c_0"))
    assert local_name(sink.root[0]) == "defs"
    assert sink.has_def("c_0")
    assert not sink.has_def("other")


def test_pencil_filter_skips_text():
    sink = SvgSink(10, 10, pencil_filter=True)
    assert sink.has_def(PENCIL_FILTER_ID)
    shape = sink.append(svg_element("rect"), svg_element("g"))
    text = sink.append(svg_element("text"), svg_element("g"))
    assert shape.get("filter") == f"url(#{PENCIL_FILTER_ID})"
    assert text.get("filter") is None


def test_clip_side_channel():
    sink = SvgSink(10, 10)
    source = svg_element("rect")
    empty = sink.new_clip_container("c_0")
    assert not sink.commit_clip(empty)
    container = sink.new_clip_container("c_0")
    container.append(svg_element("rect", width="1", height="1"))
    assert sink.commit_clip(container)
    sink.set_clip(source, "c_0")
    group = sink.append(source, svg_element("g"))
    assert group.get("clip-path") == "url(#c_0)"
    assert source.get("clip-path") is None


def test_append_none_is_ignored():
    sink = SvgSink(10, 10)
    assert sink.append(svg_element("rect"), None) is None
    assert sink.drawn == 0


def test_fragment_shares_defs():
    sink = SvgSink(10, 10)
    fragment = sink.fragment()
    fragment.add_def(svg_element("pattern", id="p"))
    fragment.append(svg_element("rect"), svg_element("g"))
    assert sink.has_def("p")
    assert len(fragment.content()) == 1
    assert sink.content() == []


def test_svg_sink_places_image_clone():
    sink = SvgSink(10, 10)
    image = svg_element("image", href="photo.png", width="4", height="4")
    group = sink.draw_image(image, "photo.png", Transform.translation(2, 3))
    container = group[0]
    assert container.get("transform") == "matrix(1,0,0,1,2,3)"
    assert container[0].get("href") == "photo.png"


def test_load_image_from_data_url():
    image = load_image(_png_data_url(size=(3, 2)))
    assert image.size == (3, 2)
    assert image.mode == "RGBA"


def test_raster_background_and_shapes():
    sink = RasterSink(20, 10, background_color="#0000ff")
    sink.append(
        svg_element("rect"),
        svg_element("rect", x="0", y="0", width="10", height="10", fill="#ff0000"),
    )
    image = sink.finish()
    assert image.size == (20, 10)
    assert image.getpixel((5, 5))[:3] == (255, 0, 0)
    assert image.getpixel((15, 5))[:3] == (0, 0, 255)
    assert sink.wait() is image


def test_raster_images_composited_after_finish():
    sink = RasterSink(10, 10)
    href = _png_data_url(color=(0, 255, 0, 255), size=(2, 2))
    assert sink.draw_image(svg_element("image"), href, Transform.identity(), (0, 0), (10, 10)) is None
    sink.finish()
    image = sink.wait()
    assert image.getpixel((5, 5)) == (0, 255, 0, 255)


def test_raster_bad_image_is_skipped():
    sink = RasterSink(4, 4)
    sink.draw_image(svg_element("image"), "/nonexistent/picture.png", None)
    sink.finish()
    image = sink.wait()
    assert image.getpixel((1, 1)) == (0, 0, 0, 0)
