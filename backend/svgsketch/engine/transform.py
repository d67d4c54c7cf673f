"""Transform Composer — 2×3 affine matrices, composition and classification.

A transform is stored as the six SVG matrix coefficients::

    [a c e]
    [b d f]
    [0 0 1]

Composition is plain matrix multiplication: ``parent · local`` maps local space
into the parent's space.
"""

from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from svgsketch.engine.errors import TransformError
from svgsketch.utils.geometry import fmt

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

_TRANSFORM_RE = re.compile(r"(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)")
_ARGS_SPLIT_RE = re.compile(r"[\s,]+")


class TransformKind(enum.Enum):
    IDENTITY = "identity"
    TRANSLATION = "translation"
    GENERAL = "general"


@dataclass(frozen=True)
class Transform:
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> Transform:
        return cls()

    @classmethod
    def from_matrix(cls, m: NDArray[np.float64]) -> Transform:
        return cls(
            float(m[0, 0]), float(m[1, 0]), float(m[0, 1]),
            float(m[1, 1]), float(m[0, 2]), float(m[1, 2]),
        )

    @classmethod
    def translation(cls, tx: float, ty: float = 0.0) -> Transform:
        return cls(e=tx, f=ty)

    @classmethod
    def scaling(cls, sx: float, sy: float | None = None) -> Transform:
        return cls(a=sx, d=sx if sy is None else sy)

    @classmethod
    def rotation(cls, degrees: float) -> Transform:
        rad = math.radians(degrees)
        cos, sin = math.cos(rad), math.sin(rad)
        return cls(a=cos, b=sin, c=-sin, d=cos)

    @classmethod
    def skew_x(cls, degrees: float) -> Transform:
        return cls(c=math.tan(math.radians(degrees)))

    @classmethod
    def skew_y(cls, degrees: float) -> Transform:
        return cls(b=math.tan(math.radians(degrees)))

    def as_matrix(self) -> NDArray[np.float64]:
        return np.array(
            [[self.a, self.c, self.e], [self.b, self.d, self.f], [0.0, 0.0, 1.0]],
            dtype=np.float64,
        )

    def as_tuple(self) -> tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)

    def multiply(self, other: Transform) -> Transform:
        """Return ``self · other``."""
        return Transform.from_matrix(self.as_matrix() @ other.as_matrix())

    def translate(self, tx: float, ty: float = 0.0) -> Transform:
        return self.multiply(Transform.translation(tx, ty))

    def scale(self, sx: float, sy: float | None = None) -> Transform:
        return self.multiply(Transform.scaling(sx, sy))

    def rotate(self, degrees: float) -> Transform:
        return self.multiply(Transform.rotation(degrees))

    def apply(self, x: float, y: float) -> tuple[float, float]:
        return (self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    def apply_points(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Transform an Nx2 array of points."""
        if len(points) == 0:
            return points
        linear = np.array([[self.a, self.c], [self.b, self.d]])
        return points @ linear.T + np.array([self.e, self.f])

    @property
    def determinant(self) -> float:
        return self.a * self.d - self.c * self.b

    @property
    def kind(self) -> TransformKind:
        if self.is_identity:
            return TransformKind.IDENTITY
        if self.is_translation_only:
            return TransformKind.TRANSLATION
        return TransformKind.GENERAL

    @property
    def is_identity(self) -> bool:
        return self.as_tuple() == (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

    @property
    def is_translation_only(self) -> bool:
        """True when the matrix neither scales nor skews (identity included)."""
        return self.a == 1.0 and self.b == 0.0 and self.c == 0.0 and self.d == 1.0

    @property
    def stroke_scale(self) -> float:
        """Geometric mean of the axis scales, ``sqrt(|det|)``."""
        if self.is_identity:
            return 1.0
        return math.sqrt(abs(self.determinant))

    def to_svg(self) -> str:
        return "matrix(" + ",".join(fmt(v, 6) for v in self.as_tuple()) + ")"


def combine(parent: Transform, local: Transform | None) -> Transform:
    """Compose ``parent · local``; the parent is returned unchanged without a local transform."""
    if local is None:
        return parent
    return parent.multiply(local)


def classify(transform: Transform) -> TransformKind:
    return transform.kind


def parse_transform(value: str | None) -> Transform | None:
    """Consolidate an SVG ``transform`` list into one matrix. ``None`` if empty.

    Raises TransformError for malformed numbers or missing arguments.
    """
    if not value:
        return None
    result: Transform | None = None
    for name, raw_args in _TRANSFORM_RE.findall(value):
        try:
            args = [float(a) for a in _ARGS_SPLIT_RE.split(raw_args.strip()) if a]
            step = _transform_function(name, args)
        except (ValueError, IndexError) as e:
            raise TransformError(f"Invalid transform {value!r}: {e}") from e
        result = step if result is None else result.multiply(step)
    return result


def _transform_function(name: str, args: list[float]) -> Transform:
    if name == "matrix":
        if len(args) != 6:
            raise ValueError(f"matrix() expects 6 arguments, got {len(args)}")
        return Transform(*args)
    if name == "translate":
        return Transform.translation(args[0], args[1] if len(args) > 1 else 0.0)
    if name == "scale":
        return Transform.scaling(args[0], args[1] if len(args) > 1 else None)
    if name == "rotate":
        if len(args) >= 3:
            cx, cy = args[1], args[2]
            return Transform.translation(cx, cy).rotate(args[0]).translate(-cx, -cy)
        return Transform.rotation(args[0])
    if name == "skewX":
        return Transform.skew_x(args[0])
    return Transform.skew_y(args[0])


def element_transform(element: Element) -> Transform | None:
    return parse_transform(element.get("transform"))


def combined_transform(element: Element, parent: Transform) -> Transform:
    """The parent transform combined with the element's own ``transform`` attribute."""
    return combine(parent, element_transform(element))
