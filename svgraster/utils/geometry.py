"""Leaf-node geometry helpers — points and bounding boxes. No engine imports."""

from __future__ import annotations

import math
from typing import Optional


class Point:
    """Mutable 2D point; transforms are applied in place."""

    __slots__ = ("x", "y")

    def __init__(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def angle_to(self, p: "Point") -> float:
        return math.atan2(p.y - self.y, p.x - self.x)

    def apply_transform(self, m: list[float] | tuple[float, ...]) -> None:
        """Apply a canvas-order affine (a, b, c, d, e, f)."""
        xp = self.x * m[0] + self.y * m[2] + m[4]
        yp = self.x * m[1] + self.y * m[3] + m[5]
        self.x = xp
        self.y = yp

    def copy(self) -> "Point":
        return Point(self.x, self.y)

    def __iter__(self):
        yield self.x
        yield self.y

    def __repr__(self) -> str:
        return f"Point({self.x!r}, {self.y!r})"


class BoundingBox:
    """Axis-aligned box that stays NaN ("empty") until the first point lands.

    Curves contribute their endpoints plus interior extrema, so the box is
    tight rather than the control-polygon hull.
    """

    def __init__(
        self,
        x1: Optional[float] = None,
        y1: Optional[float] = None,
        x2: Optional[float] = None,
        y2: Optional[float] = None,
    ) -> None:
        self.x1 = math.nan
        self.y1 = math.nan
        self.x2 = math.nan
        self.y2 = math.nan
        self.add_point(x1, y1)
        self.add_point(x2, y2)

    @property
    def x(self) -> float:
        return self.x1

    @property
    def y(self) -> float:
        return self.y1

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def is_empty(self) -> bool:
        return math.isnan(self.x1) or math.isnan(self.y1)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x1, self.y1, self.x2, self.y2)

    def add_point(self, x: Optional[float], y: Optional[float]) -> None:
        if x is not None:
            if math.isnan(self.x1) or math.isnan(self.x2):
                self.x1 = x
                self.x2 = x
            if x < self.x1:
                self.x1 = x
            if x > self.x2:
                self.x2 = x

        if y is not None:
            if math.isnan(self.y1) or math.isnan(self.y2):
                self.y1 = y
                self.y2 = y
            if y < self.y1:
                self.y1 = y
            if y > self.y2:
                self.y2 = y

    def add_x(self, x: float) -> None:
        self.add_point(x, None)

    def add_y(self, y: float) -> None:
        self.add_point(None, y)

    def add_bounding_box(self, bb: Optional["BoundingBox"]) -> None:
        if bb is None:
            return
        self.add_point(bb.x1, bb.y1)
        self.add_point(bb.x2, bb.y2)

    def add_quadratic_curve(
        self, p0x: float, p0y: float, p1x: float, p1y: float, p2x: float, p2y: float
    ) -> None:
        """Degree-elevate the quadratic to a cubic and accumulate that."""
        cp1x = p0x + 2.0 / 3.0 * (p1x - p0x)
        cp1y = p0y + 2.0 / 3.0 * (p1y - p0y)
        cp2x = cp1x + 1.0 / 3.0 * (p2x - p0x)
        cp2y = cp1y + 1.0 / 3.0 * (p2y - p0y)
        self.add_bezier_curve(p0x, p0y, cp1x, cp1y, cp2x, cp2y, p2x, p2y)

    def add_bezier_curve(
        self,
        p0x: float,
        p0y: float,
        p1x: float,
        p1y: float,
        p2x: float,
        p2y: float,
        p3x: float,
        p3y: float,
    ) -> None:
        self.add_point(p0x, p0y)
        self.add_point(p3x, p3y)

        for axis, (p0, p1, p2, p3) in enumerate(((p0x, p1x, p2x, p3x), (p0y, p1y, p2y, p3y))):
            for t in _cubic_extrema(p0, p1, p2, p3):
                value = _cubic_at(t, p0, p1, p2, p3)
                if axis == 0:
                    self.add_x(value)
                else:
                    self.add_y(value)

    def add_arc(
        self,
        cx: float,
        cy: float,
        rx: float,
        ry: float,
        phi: float,
        theta1: float,
        dtheta: float,
    ) -> None:
        """Accumulate an elliptical arc given in center parameterization.

        ``phi`` is the x-axis rotation, the arc sweeps from ``theta1`` by
        ``dtheta`` (signed) radians.
        """
        cos_phi = math.cos(phi)
        sin_phi = math.sin(phi)

        def at(theta: float) -> tuple[float, float]:
            return (
                cx + rx * cos_phi * math.cos(theta) - ry * sin_phi * math.sin(theta),
                cy + rx * sin_phi * math.cos(theta) + ry * cos_phi * math.sin(theta),
            )

        self.add_point(*at(theta1))
        self.add_point(*at(theta1 + dtheta))

        # dx/dtheta = 0 and dy/dtheta = 0, each with a second root pi away
        theta_x = math.atan2(-ry * sin_phi, rx * cos_phi)
        theta_y = math.atan2(ry * cos_phi, rx * sin_phi)
        for base in (theta_x, theta_y):
            for candidate in (base, base + math.pi):
                if _angle_in_sweep(candidate, theta1, dtheta):
                    self.add_point(*at(candidate))

    def is_point_in_box(self, x: float, y: float) -> bool:
        return self.x1 <= x <= self.x2 and self.y1 <= y <= self.y2

    def __repr__(self) -> str:
        return f"BoundingBox({self.x1!r}, {self.y1!r}, {self.x2!r}, {self.y2!r})"


def _cubic_at(t: float, p0: float, p1: float, p2: float, p3: float) -> float:
    mt = 1 - t
    return mt**3 * p0 + 3 * mt**2 * t * p1 + 3 * mt * t**2 * p2 + t**3 * p3


def _cubic_extrema(p0: float, p1: float, p2: float, p3: float) -> list[float]:
    """Roots in (0, 1) of the derivative of a 1D cubic Bernstein polynomial."""
    b = 6 * p0 - 12 * p1 + 6 * p2
    a = -3 * p0 + 9 * p1 - 9 * p2 + 3 * p3
    c = 3 * p1 - 3 * p0

    roots: list[float] = []
    if a == 0:
        if b == 0:
            return roots
        t = -c / b
        if 0 < t < 1:
            roots.append(t)
        return roots

    b2ac = b**2 - 4 * c * a
    if b2ac < 0:
        return roots
    sqrt_b2ac = math.sqrt(b2ac)
    for t in ((-b + sqrt_b2ac) / (2 * a), (-b - sqrt_b2ac) / (2 * a)):
        if 0 < t < 1:
            roots.append(t)
    return roots


def _angle_in_sweep(angle: float, start: float, sweep: float) -> bool:
    """True if ``angle`` lies on the arc from ``start`` sweeping ``sweep``."""
    if math.isnan(sweep) or math.isnan(start):
        return False
    if abs(sweep) >= 2 * math.pi:
        return True
    tau = 2 * math.pi
    if sweep >= 0:
        return (angle - start) % tau <= sweep
    return (start - angle) % tau <= -sweep
