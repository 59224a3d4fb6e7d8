"""Transform lists — parse ``transform`` attributes into ordered affine operators.

Each operator can apply itself to a painter, undo itself, map a point, and
report its 2x3 matrix in canvas order (a, b, c, d, e, f).
"""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING

from svgraster.svg.properties import Property
from svgraster.utils.geometry import Point
from svgraster.utils.math_helpers import compress_spaces, to_number_array

if TYPE_CHECKING:
    from svgraster.engine.painter import Painter

logger = logging.getLogger(__name__)

Matrix = tuple[float, float, float, float, float, float]

IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

_PAREN_LETTER_RE = re.compile(r"\)([a-zA-Z])")
_PAREN_COMMA_RE = re.compile(r"\)(\s?,\s?)")
_SPLIT_RE = re.compile(r"\s(?=[a-z])")


def _operands(s: str) -> list[float]:
    """Operand list; junk tokens parse to NaN, an empty list has no operands."""
    return to_number_array(s) if s.strip() else []


def _num(values: list[float], i: int, default: float) -> float:
    """``values[i]``, or ``default`` when the operand is missing."""
    return values[i] if i < len(values) else default


def multiply(m1: Matrix, m2: Matrix) -> Matrix:
    """Compose so that ``m2`` is applied first, then ``m1``."""
    a1, b1, c1, d1, e1, f1 = m1
    a2, b2, c2, d2, e2, f2 = m2
    return (
        a1 * a2 + c1 * b2,
        b1 * a2 + d1 * b2,
        a1 * c2 + c1 * d2,
        b1 * c2 + d1 * d2,
        a1 * e2 + c1 * f2 + e1,
        b1 * e2 + d1 * f2 + f1,
    )


def invert(m: Matrix) -> Matrix | None:
    a, b, c, d, e, f = m
    det = a * d - b * c
    if det == 0 or not math.isfinite(det):
        return None
    return (
        d / det,
        -b / det,
        -c / det,
        a / det,
        (c * f - d * e) / det,
        (b * e - a * f) / det,
    )


class Translate:
    type = "translate"

    def __init__(self, s: str) -> None:
        v = _operands(s)
        self.x = _num(v, 0, 0.0)
        self.y = _num(v, 1, 0.0)

    def matrix(self) -> Matrix:
        return (1.0, 0.0, 0.0, 1.0, self.x, self.y)

    def apply(self, painter: "Painter") -> None:
        painter.translate(self.x, self.y)

    def unapply(self, painter: "Painter") -> None:
        painter.translate(-self.x, -self.y)

    def apply_to_point(self, p: Point) -> None:
        p.apply_transform(self.matrix())


class Rotate:
    type = "rotate"

    def __init__(self, s: str) -> None:
        v = _operands(s)
        self.angle = Property("angle", _num(v, 0, 0.0))
        self.cx = _num(v, 1, 0.0)
        self.cy = _num(v, 2, 0.0)

    def matrix(self) -> Matrix:
        a = self.angle.to_radians()
        cos_a, sin_a = math.cos(a), math.sin(a)
        m = multiply((1.0, 0.0, 0.0, 1.0, self.cx, self.cy), (cos_a, sin_a, -sin_a, cos_a, 0.0, 0.0))
        return multiply(m, (1.0, 0.0, 0.0, 1.0, -self.cx, -self.cy))

    def apply(self, painter: "Painter") -> None:
        painter.translate(self.cx, self.cy)
        painter.rotate(self.angle.to_radians())
        painter.translate(-self.cx, -self.cy)

    def unapply(self, painter: "Painter") -> None:
        painter.translate(self.cx, self.cy)
        painter.rotate(-1.0 * self.angle.to_radians())
        painter.translate(-self.cx, -self.cy)

    def apply_to_point(self, p: Point) -> None:
        p.apply_transform(self.matrix())


class Scale:
    type = "scale"

    def __init__(self, s: str) -> None:
        v = _operands(s)
        self.x = _num(v, 0, 1.0)
        self.y = _num(v, 1, self.x)

    def matrix(self) -> Matrix:
        return (self.x, 0.0, 0.0, self.y, 0.0, 0.0)

    def apply(self, painter: "Painter") -> None:
        painter.scale(self.x, self.y)

    def unapply(self, painter: "Painter") -> None:
        if self.x == 0 or self.y == 0:
            logger.debug("Cannot undo singular scale(%s, %s)", self.x, self.y)
            return
        painter.scale(1.0 / self.x, 1.0 / self.y)

    def apply_to_point(self, p: Point) -> None:
        p.apply_transform(self.matrix())


class MatrixTransform:
    type = "matrix"

    def __init__(self, s: str) -> None:
        v = _operands(s)
        self.m: Matrix = tuple(_num(v, i, IDENTITY[i]) for i in range(6))  # type: ignore[assignment]

    def matrix(self) -> Matrix:
        return self.m

    def apply(self, painter: "Painter") -> None:
        painter.transform(*self.m)

    def unapply(self, painter: "Painter") -> None:
        inverse = invert(self.m)
        if inverse is None:
            logger.debug("Cannot undo singular matrix %s", self.m)
            return
        painter.transform(*inverse)

    def apply_to_point(self, p: Point) -> None:
        p.apply_transform(self.m)


class SkewX(MatrixTransform):
    type = "skewX"

    def __init__(self, s: str) -> None:
        self.angle = Property("angle", s)
        self.m = (1.0, 0.0, math.tan(self.angle.to_radians()), 1.0, 0.0, 0.0)


class SkewY(MatrixTransform):
    type = "skewY"

    def __init__(self, s: str) -> None:
        self.angle = Property("angle", s)
        self.m = (1.0, math.tan(self.angle.to_radians()), 0.0, 1.0, 0.0, 0.0)


TRANSFORM_TYPES = {
    "translate": Translate,
    "rotate": Rotate,
    "scale": Scale,
    "matrix": MatrixTransform,
    "skewX": SkewX,
    "skewY": SkewY,
}


class Transform:
    """An ordered transform list, applied in source order."""

    def __init__(self, v: str) -> None:
        self.transforms: list = []
        data = compress_spaces(str(v or "")).strip()
        data = _PAREN_COMMA_RE.sub(") ", _PAREN_LETTER_RE.sub(r") \1", data))
        for item in _SPLIT_RE.split(data):
            if "(" not in item:
                if item.strip():
                    logger.warning("Malformed transform %r", item)
                continue
            name, _, rest = item.partition("(")
            name = name.strip()
            op = TRANSFORM_TYPES.get(name)
            if op is None:
                logger.warning("Unsupported transform type %r", name)
                continue
            self.transforms.append(op(rest.replace(")", "", 1)))

    def apply(self, painter: "Painter") -> None:
        for t in self.transforms:
            t.apply(painter)

    def unapply(self, painter: "Painter") -> None:
        for t in reversed(self.transforms):
            t.unapply(painter)

    def apply_to_point(self, p: Point) -> None:
        """Map a point from this transform's local space into the parent space."""
        p.apply_transform(self.matrix())

    def matrix(self) -> Matrix:
        m = IDENTITY
        for t in self.transforms:
            m = multiply(m, t.matrix())
        return m
