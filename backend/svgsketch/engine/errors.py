"""Exception hierarchy for the sketch render engine."""

from __future__ import annotations


class SketchError(Exception):
    """Base class for all engine errors."""


class SvgParseError(SketchError):
    """The source document is not well-formed SVG."""


class DimensionError(SketchError, ValueError):
    """A length/percentage string cannot be converted to pixels."""


class PathDataError(SketchError):
    """Path data could not be parsed or re-encoded."""


class ReferenceDepthError(SketchError):
    """A use/marker/image reference chain is cyclic or too deep."""


class InvalidTargetError(SketchError, ValueError):
    """Render target or options are unusable; raised at construction time."""


class TransformError(SketchError, ValueError):
    """A ``transform`` attribute cannot be parsed."""
