"""Svg2Sketch — facade running one sketch pass over a loaded SVG document.

Usage:
    sketcher = Svg2Sketch(RenderMode.SVG, SketchConfig(seed=42))
    sketcher.load(svg_text)
    result = sketcher.redraw()
    result.svg  # sketched SVG markup

Every redraw rebuilds the IdIndex, RNG, statistics and output sink; nothing
carries over between passes. Concurrent redraws on one instance are not
supported.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np
from PIL import Image

from svgsketch.engine.config import RenderMode, SketchConfig
from svgsketch.engine.context import IdIndex, RenderContext, RenderStats, Viewport
from svgsketch.engine.errors import DimensionError, InvalidTargetError
from svgsketch.engine.processor import parse_view_box, process_root
from svgsketch.engine.registry import load_handlers
from svgsketch.engine.units import to_pixels
from svgsketch.output.raster import RasterSink
from svgsketch.output.svg_sink import SvgSink
from svgsketch.sketch.base import SketchEngine
from svgsketch.sketch.rough import RoughSketchEngine
from svgsketch.svg.parser import SvgDocument, parse_svg
from svgsketch.utils.text_metrics import TextMeasurer

logger = logging.getLogger(__name__)

# CSS default size of a replaced element
DEFAULT_WIDTH = 300.0
DEFAULT_HEIGHT = 150.0


@dataclass
class RenderResult:
    svg: str | None
    image: Image.Image | None
    stats: RenderStats
    width: float = 0.0
    height: float = 0.0
    elapsed_ms: float = 0.0


class Svg2Sketch:
    """Converts a precise SVG drawing into a hand-sketched rendition."""

    def __init__(
        self,
        render_mode: RenderMode | str = RenderMode.SVG,
        config: SketchConfig | None = None,
        engine: SketchEngine | None = None,
        measurer: TextMeasurer | None = None,
    ) -> None:
        try:
            self.render_mode = RenderMode(render_mode)
        except ValueError as e:
            raise InvalidTargetError(f"Unknown render mode: {render_mode!r}") from e
        self.config = (config or SketchConfig()).validate()
        self.engine = engine or RoughSketchEngine(seed=self.config.seed)
        self.measurer = measurer or TextMeasurer()
        self._svg: SvgDocument | None = None
        load_handlers()

    @property
    def svg(self) -> SvgDocument | None:
        return self._svg

    @svg.setter
    def svg(self, document: SvgDocument) -> None:
        self._svg = document

    def load(self, svg_text: str) -> SvgDocument:
        self._svg = parse_svg(svg_text)
        return self._svg

    def _context(self, document: SvgDocument, sink: SvgSink, size: tuple[float, float]) -> RenderContext:
        width, height = size
        return RenderContext(
            document=document,
            config=self.config,
            engine=self.engine,
            sink=sink,
            id_index=IdIndex.collect(document),
            rng=np.random.default_rng(self.config.seed),
            measurer=self.measurer,
            stats=RenderStats(),
            output_size=(width, height),
            viewport=Viewport(0.0, 0.0, width, height),
        )

    def source_size(self, document: SvgDocument) -> tuple[float, float]:
        """Output size: width/height attributes, else the viewBox, else 300x150."""
        measure_ctx = self._context(document, SvgSink(0, 0), (0.0, 0.0))
        root = document.root
        view_box = parse_view_box(root.get("viewBox"))

        def axis(attribute: str, fallback: float) -> float:
            value = root.get(attribute)
            if value and not value.strip().endswith("%"):
                try:
                    return to_pixels(measure_ctx, root, attribute, value)
                except DimensionError as e:
                    logger.warning("Ignoring root %s=%r: %s", attribute, value, e)
            return fallback

        width = axis("width", view_box.w if view_box else DEFAULT_WIDTH)
        height = axis("height", view_box.h if view_box else DEFAULT_HEIGHT)
        return (width, height)

    def _sink(self, width: float, height: float) -> SvgSink:
        if self.render_mode is RenderMode.RASTER:
            return RasterSink(
                width,
                height,
                pencil_filter=self.config.pencil_filter,
                background_color=self.config.background_color,
            )
        return SvgSink(
            width,
            height,
            pencil_filter=self.config.pencil_filter,
            background_color=self.config.background_color,
        )

    def redraw(self, wait_for_images: bool = False) -> RenderResult:
        """Run a full sketch pass over the loaded document.

        Raster output returns once the vector layer is painted; images still
        loading are composited onto the returned surface as they arrive unless
        ``wait_for_images`` blocks until all of them are in.
        """
        if self._svg is None:
            raise InvalidTargetError("No source SVG loaded")
        start = time.perf_counter()
        document = self._svg

        width, height = self.source_size(document)
        sink = self._sink(width, height)
        ctx = self._context(document, sink, (width, height))
        logger.info(
            "Sketch pass: %gx%g, %d ids, mode=%s",
            width,
            height,
            len(ctx.id_index),
            self.render_mode.value,
        )

        process_root(ctx, document.root, None, width, height)

        image = None
        svg = None
        if isinstance(sink, RasterSink):
            image = sink.finish()
            if wait_for_images:
                image = sink.wait()
        else:
            svg = sink.tostring()

        elapsed = (time.perf_counter() - start) * 1000
        logger.info(
            "Sketch complete: %d elements drawn, %d failed in %.0fms",
            ctx.stats.drawn,
            ctx.stats.failed,
            elapsed,
        )
        return RenderResult(
            svg=svg,
            image=image,
            stats=ctx.stats,
            width=width,
            height=height,
            elapsed_ms=elapsed,
        )
