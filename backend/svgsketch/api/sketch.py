"""POST /api/sketch — one sketch pass over the submitted SVG."""

from __future__ import annotations

import base64
import io
import logging

from fastapi import APIRouter, HTTPException

from svgsketch.config import settings
from svgsketch.engine.config import RenderMode
from svgsketch.engine.errors import InvalidTargetError, SvgParseError
from svgsketch.engine.sketcher import Svg2Sketch
from svgsketch.models.requests import SketchRequest
from svgsketch.models.responses import SketchResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/sketch", response_model=SketchResponse)
def sketch(request: SketchRequest) -> SketchResponse:
    if len(request.svg.encode("utf-8")) > settings.max_svg_bytes:
        raise HTTPException(status_code=413, detail="SVG exceeds the configured size limit")

    mode = RenderMode.RASTER if request.output == "png" else RenderMode.SVG
    try:
        sketcher = Svg2Sketch(mode, request.options.to_config())
        sketcher.load(request.svg)
    except (SvgParseError, InvalidTargetError) as e:
        logger.warning("Rejected sketch request: %s", e)
        raise HTTPException(status_code=422, detail=str(e)) from e

    result = sketcher.redraw(wait_for_images=True)

    png_base64 = None
    if result.image is not None:
        buffer = io.BytesIO()
        result.image.save(buffer, format="PNG")
        png_base64 = base64.b64encode(buffer.getvalue()).decode("ascii")

    return SketchResponse(
        svg=result.svg,
        png_base64=png_base64,
        width=result.width,
        height=result.height,
        elements_drawn=result.stats.drawn,
        elements_failed=result.stats.failed,
        elements_skipped=result.stats.skipped,
        processing_time_ms=round(result.elapsed_ms, 1),
        errors=result.stats.errors,
    )
