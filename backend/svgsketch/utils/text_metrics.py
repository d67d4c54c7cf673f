"""Text measurement with Pillow fonts.

Used for the ``ch`` unit and for shrinking re-hosted text to its original
width. Font families are mapped to TrueType files on a best-effort basis;
Pillow's bundled default font is used when none is found.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from PIL import ImageFont

logger = logging.getLogger(__name__)

_GENERIC_FAMILIES = {
    "serif": ["DejaVuSerif.ttf", "LiberationSerif-Regular.ttf", "Times New Roman.ttf"],
    "sans-serif": ["DejaVuSans.ttf", "LiberationSans-Regular.ttf", "Arial.ttf"],
    "monospace": ["DejaVuSansMono.ttf", "LiberationMono-Regular.ttf", "Courier New.ttf"],
    "cursive": ["Comic Sans MS.ttf", "comic.ttf", "DejaVuSans.ttf"],
}


def _candidates(family: str) -> list[str]:
    names: list[str] = []
    for part in family.split(","):
        name = part.strip().strip("'\"")
        if not name:
            continue
        if name.lower() in _GENERIC_FAMILIES:
            names.extend(_GENERIC_FAMILIES[name.lower()])
        else:
            names.extend([f"{name}.ttf", f"{name.replace(' ', '')}.ttf"])
    names.extend(_GENERIC_FAMILIES["sans-serif"])
    return names


@lru_cache(maxsize=64)
def load_font(family: str, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    for candidate in _candidates(family):
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.debug("No TrueType font for %r, using Pillow default", family)
    return ImageFont.load_default(size)


class TextMeasurer:
    def text_width(self, text: str, family: str, size: float) -> float:
        if not text:
            return 0.0
        font = load_font(family or "sans-serif", max(1, round(size)))
        left, _, right, _ = font.getbbox(text)
        return float(right - left)
