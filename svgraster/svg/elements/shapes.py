"""Basic shapes — rect, circle, ellipse, line, polyline, polygon."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Optional

from svgraster.engine.registry import element
from svgraster.svg.elements.base import Marker, PathElement
from svgraster.utils.geometry import BoundingBox, Point
from svgraster.utils.math_helpers import to_number_array

if TYPE_CHECKING:
    from svgraster.engine.context import RenderSession
    from svgraster.engine.painter import Painter

# Cubic control distance approximating a quarter circle
KAPPA = 4 * ((math.sqrt(2) - 1) / 3)


@element("rect")
class RectElement(PathElement):
    def radii(self) -> tuple[float, float]:
        """(rx, ry) with a missing radius copied from the other, clamped to half the size."""
        rx = self.attribute("rx").to_pixels("x")
        ry = self.attribute("ry").to_pixels("y")
        if self.attribute("rx").has_value() and not self.attribute("ry").has_value():
            ry = rx
        if self.attribute("ry").has_value() and not self.attribute("rx").has_value():
            rx = ry
        width = self.attribute("width").to_pixels("x")
        height = self.attribute("height").to_pixels("y")
        return min(rx, width / 2.0), min(ry, height / 2.0)

    def path(self, painter: Optional["Painter"] = None, recording: bool = False) -> BoundingBox:
        x = self.attribute("x").to_pixels("x")
        y = self.attribute("y").to_pixels("y")
        width = self.attribute("width").to_pixels("x")
        height = self.attribute("height").to_pixels("y")
        rx, ry = self.radii()

        if painter is not None:
            if not recording:
                painter.begin_path()
            painter.move_to(x + rx, y)
            painter.line_to(x + width - rx, y)
            painter.quadratic_curve_to(x + width, y, x + width, y + ry)
            painter.line_to(x + width, y + height - ry)
            painter.quadratic_curve_to(x + width, y + height, x + width - rx, y + height)
            painter.line_to(x + rx, y + height)
            painter.quadratic_curve_to(x, y + height, x, y + height - ry)
            painter.line_to(x, y + ry)
            painter.quadratic_curve_to(x, y, x + rx, y)
            painter.close_path()

        return BoundingBox(x, y, x + width, y + height)


@element("circle")
class CircleElement(PathElement):
    def path(self, painter: Optional["Painter"] = None, recording: bool = False) -> BoundingBox:
        cx = self.attribute("cx").to_pixels("x")
        cy = self.attribute("cy").to_pixels("y")
        r = self.attribute("r").to_pixels()

        if painter is not None:
            if not recording:
                painter.begin_path()
            painter.move_to(cx + r, cy)
            painter.arc(cx, cy, r, 0, math.pi * 2, True)
            painter.close_path()

        return BoundingBox(cx - r, cy - r, cx + r, cy + r)


@element("ellipse")
class EllipseElement(PathElement):
    def path(self, painter: Optional["Painter"] = None, recording: bool = False) -> BoundingBox:
        rx = self.attribute("rx").to_pixels("x")
        ry = self.attribute("ry").to_pixels("y")
        cx = self.attribute("cx").to_pixels("x")
        cy = self.attribute("cy").to_pixels("y")

        if painter is not None:
            if not recording:
                painter.begin_path()
            painter.move_to(cx, cy - ry)
            painter.bezier_curve_to(cx + KAPPA * rx, cy - ry, cx + rx, cy - KAPPA * ry, cx + rx, cy)
            painter.bezier_curve_to(cx + rx, cy + KAPPA * ry, cx + KAPPA * rx, cy + ry, cx, cy + ry)
            painter.bezier_curve_to(cx - KAPPA * rx, cy + ry, cx - rx, cy + KAPPA * ry, cx - rx, cy)
            painter.bezier_curve_to(cx - rx, cy - KAPPA * ry, cx - KAPPA * rx, cy - ry, cx, cy - ry)
            painter.close_path()

        return BoundingBox(cx - rx, cy - ry, cx + rx, cy + ry)


@element("line")
class LineElement(PathElement):
    def points(self) -> list[Point]:
        return [
            Point(self.attribute("x1").to_pixels("x"), self.attribute("y1").to_pixels("y")),
            Point(self.attribute("x2").to_pixels("x"), self.attribute("y2").to_pixels("y")),
        ]

    def path(self, painter: Optional["Painter"] = None, recording: bool = False) -> BoundingBox:
        p1, p2 = self.points()
        if painter is not None:
            if not recording:
                painter.begin_path()
            painter.move_to(p1.x, p1.y)
            painter.line_to(p2.x, p2.y)
        return BoundingBox(p1.x, p1.y, p2.x, p2.y)

    def markers(self) -> list[Marker]:
        p1, p2 = self.points()
        a = p1.angle_to(p2)
        return [(p1, a), (p2, a)]


def parse_points(value: Any) -> list[Point]:
    """``"x1,y1 x2,y2 ..."`` → points. A dangling odd coordinate is dropped."""
    if value is None or str(value).strip() == "":
        return []
    numbers = to_number_array(value)
    return [Point(numbers[i], numbers[i + 1]) for i in range(0, len(numbers) - 1, 2)]


@element("polyline")
class PolylineElement(PathElement):
    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        self.points = parse_points(self.attribute("points").value)

    def path(self, painter: Optional["Painter"] = None, recording: bool = False) -> BoundingBox:
        if painter is not None and not recording:
            painter.begin_path()
        if not self.points:
            return BoundingBox()
        first = self.points[0]
        bb = BoundingBox(first.x, first.y)
        if painter is not None:
            painter.move_to(first.x, first.y)
        for p in self.points[1:]:
            bb.add_point(p.x, p.y)
            if painter is not None:
                painter.line_to(p.x, p.y)
        return bb

    def markers(self) -> Optional[list[Marker]]:
        if not self.points:
            return None
        markers: list[Marker] = [
            (p, p.angle_to(q)) for p, q in zip(self.points, self.points[1:])
        ]
        last_angle = markers[-1][1] if markers else 0.0
        markers.append((self.points[-1], last_angle))
        return markers


@element("polygon")
class PolygonElement(PolylineElement):
    def path(self, painter: Optional["Painter"] = None, recording: bool = False) -> BoundingBox:
        bb = super().path(painter, recording)
        if painter is not None and self.points:
            painter.line_to(self.points[0].x, self.points[0].y)
            painter.close_path()
        return bb
