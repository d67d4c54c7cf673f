"""Raster output sink — sketch drawables composed as SVG, rasterized with CairoSVG.

External raster images are loaded off the traversal thread: ``draw_image``
returns immediately and the image is composited once it has loaded, either
straight onto the finished surface or queued until ``finish()`` creates it.
"""

from __future__ import annotations

import base64
import io
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from pathlib import Path
from xml.etree.ElementTree import Element

import cairosvg
import numpy as np
from PIL import Image, ImageColor

from svgsketch.engine.transform import Transform
from svgsketch.output.svg_sink import SvgSink

logger = logging.getLogger(__name__)

ImagePlacement = tuple[Transform, tuple[float, float], tuple[float | None, float | None]]


def load_image(href: str) -> Image.Image:
    """Open a ``data:`` URL or a local file as an RGBA image."""
    if href.startswith("data:"):
        meta, _, payload = href[5:].partition(",")
        if "base64" not in meta:
            raise ValueError("Only base64 data URLs are supported for raster images")
        data = base64.b64decode(payload)
        image = Image.open(io.BytesIO(data))
    else:
        path = Path(href[7:] if href.startswith("file://") else href)
        image = Image.open(path)
    image.load()
    return image.convert("RGBA")


def placement_matrix(
    image: Image.Image,
    transform: Transform,
    position: tuple[float, float],
    size: tuple[float | None, float | None],
) -> Transform:
    """Image pixel space → output space."""
    width, height = size
    sx = width / image.width if width else 1.0
    sy = height / image.height if height else 1.0
    return transform.translate(*position).scale(sx, sy)


class RasterSink(SvgSink):
    """Immediate-mode target producing a PIL image."""

    def __init__(
        self,
        width: float,
        height: float,
        pencil_filter: bool = False,
        background_color: str | None = None,
        max_workers: int = 4,
    ) -> None:
        # The background is painted on the surface, not into the vector layer
        super().__init__(width, height, pencil_filter=pencil_filter)
        self.fill_color = background_color
        self.surface: Image.Image | None = None
        self._executor = ThreadPoolExecutor(max_workers=max_workers)
        self._lock = threading.Lock()
        self._queued: list[tuple[Image.Image, ImagePlacement]] = []

    @property
    def pixel_size(self) -> tuple[int, int]:
        return (max(1, round(self.width)), max(1, round(self.height)))

    def draw_image(
        self,
        source: Element,
        href: str,
        transform: Transform | None,
        position: tuple[float, float] = (0.0, 0.0),
        size: tuple[float | None, float | None] = (None, None),
    ) -> Element | None:
        placement = (transform or Transform.identity(), position, size)
        future = self._executor.submit(load_image, href)
        future.add_done_callback(partial(self._on_loaded, href, placement))
        return None

    def _on_loaded(self, href: str, placement: ImagePlacement, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.warning("  image %s FAILED: %s", href[:64], error)
            return
        image = future.result()
        with self._lock:
            if self.surface is None:
                self._queued.append((image, placement))
                return
            self._composite(image, placement)

    def _composite(self, image: Image.Image, placement: ImagePlacement) -> None:
        transform, position, size = placement
        matrix = placement_matrix(image, transform, position, size)
        try:
            inverse = np.linalg.inv(matrix.as_matrix())
        except np.linalg.LinAlgError:
            logger.debug("Degenerate image transform, image not drawn")
            return
        layer = image.transform(
            self.surface.size,
            Image.Transform.AFFINE,
            (
                inverse[0, 0], inverse[0, 1], inverse[0, 2],
                inverse[1, 0], inverse[1, 1], inverse[1, 2],
            ),
            resample=Image.Resampling.BILINEAR,
        )
        self.surface.alpha_composite(layer)

    def rasterize(self) -> Image.Image:
        """Render the vector layer with CairoSVG."""
        width, height = self.pixel_size
        png_data = cairosvg.svg2png(
            bytestring=self.tostring().encode("utf-8"),
            output_width=width,
            output_height=height,
        )
        return Image.open(io.BytesIO(png_data)).convert("RGBA")

    def finish(self) -> Image.Image:
        """Paint background and vector layer; images already loaded are composited."""
        fill = ImageColor.getcolor(self.fill_color, "RGBA") if self.fill_color else (0, 0, 0, 0)
        surface = Image.new("RGBA", self.pixel_size, fill)
        surface.alpha_composite(self.rasterize())
        with self._lock:
            self.surface = surface
            for image, placement in self._queued:
                self._composite(image, placement)
            self._queued.clear()
        return surface

    def wait(self) -> Image.Image | None:
        """Block until every pending image load has been composited."""
        self._executor.shutdown(wait=True)
        return self.surface
