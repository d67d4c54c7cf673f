"""RenderContext — the immutable state value threaded through one render pass.

Traversal-scoped values (viewport, use-context chain, active references) are
replaced, never mutated: a nested call receives a derived context and the
caller keeps its own, so every "push" is undone simply by returning.

Pass-scoped values (IdIndex, stats, RNG, output sink) are created fresh by
`Svg2Sketch.redraw()` and discarded with the pass.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Union
from xml.etree.ElementTree import Element

import numpy as np

from svgsketch.engine.config import SketchConfig
from svgsketch.engine.errors import ReferenceDepthError

if TYPE_CHECKING:
    from svgsketch.output.svg_sink import SvgSink
    from svgsketch.sketch.base import SketchEngine
    from svgsketch.svg.parser import SvgDocument
    from svgsketch.utils.text_metrics import TextMeasurer

logger = logging.getLogger(__name__)

_SQRT2 = math.sqrt(2)


@dataclass(frozen=True)
class Viewport:
    """Coordinate system against which percentages resolve."""

    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0

    @property
    def normalized_diagonal(self) -> float:
        return math.sqrt(self.w * self.w + self.h * self.h) / _SQRT2


@dataclass(frozen=True)
class UseContext:
    """One link of the virtual parent chain created by a <use> expansion.

    ``root`` is the <use> element, ``referenced`` the element it instantiates.
    Attribute lookups that reach ``referenced`` continue at ``root`` with
    ``parent`` as the active link.
    """

    root: Element
    referenced: Element
    parent: UseContext | None = None

    @property
    def depth(self) -> int:
        link, depth = self, 0
        while link is not None:
            depth += 1
            link = link.parent
        return depth


def push_use_context(current: UseContext | None, use: Element, referenced: Element) -> UseContext:
    return UseContext(root=use, referenced=referenced, parent=current)


IdEntry = Union[Element, str]


class IdIndex:
    """id → source element, plus the memoized flattened color of each gradient.

    Memoized colors sit beside the elements so that ``element()`` keeps
    answering for gradients that other gradients inherit from.
    """

    def __init__(self, entries: dict[str, Element] | None = None) -> None:
        self._entries: dict[str, Element] = dict(entries or {})
        self._colors: dict[str, str] = {}

    @classmethod
    def collect(cls, document: SvgDocument) -> IdIndex:
        return cls(dict(document.iter_with_id()))

    def get(self, element_id: str | None) -> IdEntry | None:
        """The memoized color for ``element_id`` if any, else its element."""
        if not element_id:
            return None
        color = self._colors.get(element_id)
        if color is not None:
            return color
        return self._entries.get(element_id)

    def element(self, element_id: str | None) -> Element | None:
        if not element_id:
            return None
        return self._entries.get(element_id)

    def memoize(self, element_id: str, color: str) -> None:
        self._colors[element_id] = color

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class RenderStats:
    drawn: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RenderContext:
    document: SvgDocument
    config: SketchConfig
    engine: SketchEngine
    sink: SvgSink
    id_index: IdIndex
    rng: np.random.Generator
    measurer: TextMeasurer
    stats: RenderStats
    # Size of the real rendering target (vw/vh/vmin/vmax reference)
    output_size: tuple[float, float] = (0.0, 0.0)
    viewport: Viewport = Viewport()
    use_context: UseContext | None = None
    active_refs: frozenset[str] = frozenset()
    depth: int = 0

    def with_viewport(self, viewport: Viewport) -> RenderContext:
        return replace(self, viewport=viewport)

    def with_use_context(self, use_context: UseContext | None) -> RenderContext:
        return replace(self, use_context=use_context)

    def with_document(self, document: SvgDocument) -> RenderContext:
        return replace(self, document=document, id_index=IdIndex.collect(document), use_context=None)

    def with_config(self, config: SketchConfig) -> RenderContext:
        return replace(self, config=config)

    def with_sink(self, sink: SvgSink) -> RenderContext:
        return replace(self, sink=sink)

    def enter_reference(self, ref_key: str) -> RenderContext:
        """Derive a context for re-entering the traversal through a reference.

        Raises ReferenceDepthError on a cycle or when the chain gets too deep.
        """
        if ref_key in self.active_refs:
            raise ReferenceDepthError(f"Cyclic reference to {ref_key!r}")
        if self.depth >= self.config.max_reference_depth:
            raise ReferenceDepthError(
                f"Reference depth {self.depth} exceeds {self.config.max_reference_depth}"
            )
        return replace(self, active_refs=self.active_refs | {ref_key}, depth=self.depth + 1)

    def random(self, low: float, high: float) -> float:
        """Uniform random number between ``low`` and ``high`` (either order)."""
        return float(self.rng.random() * (high - low) + low)
