"""Paint servers and markers — gradients, stops, patterns, marker symbols."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

import cairocffi

from svgraster.engine.painter import Canvas
from svgraster.engine.registry import element
from svgraster.engine.transforms import Transform, invert
from svgraster.svg.elements.base import Element
from svgraster.svg.elements.structure import SvgElement
from svgraster.svg.properties import Property
from svgraster.utils.geometry import Point

if TYPE_CHECKING:
    from svgraster.engine.painter import Painter

logger = logging.getLogger(__name__)


class GradientElement(Element):
    """Shared stop handling, ``href`` inheritance and gradientTransform."""

    inherited_attributes = ("gradientUnits",)

    def stops(self) -> list["StopElement"]:
        return [child for child in self.children if isinstance(child, StopElement)]

    def gradient_units(self) -> str:
        return self.attribute("gradientUnits").value_or_default("objectBoundingBox")

    def inherit_stop_container(self, container: Element) -> None:
        for name in self.inherited_attributes:
            if not self.attribute(name).has_value() and container.attribute(name).has_value():
                self.attribute(name, True).value = container.attribute(name).value

    def get_gradient(self, painter: "Painter", element: Element) -> Optional[cairocffi.Gradient]:
        raise NotImplementedError

    def create_gradient(self, painter: "Painter", element: Element, opacity: Property) -> Any:
        """A cairo gradient for ``element``, or a colour string when degenerate."""
        container: Element = self
        href = self.href_attribute()
        if href.has_value():
            referenced = href.definition()
            if isinstance(referenced, GradientElement):
                container = referenced
                self.inherit_stop_container(referenced)
            else:
                logger.debug("Unresolved gradient reference %r", href.value)

        stops = container.stops() if isinstance(container, GradientElement) else []
        if not stops:
            logger.debug("Gradient %r has no stops", self.attribute("id").value)
            return None

        def with_opacity(color: str) -> str:
            if opacity.has_value():
                return Property("color", color).add_opacity(opacity).value
            return color

        gradient = self.get_gradient(painter, element)
        if gradient is None:
            return with_opacity(stops[-1].color)
        for stop in stops:
            painter.add_color_stop(gradient, stop.offset, with_opacity(stop.color))

        gradient_transform = self.attribute("gradientTransform")
        if gradient_transform.has_value():
            inverse = invert(Transform(gradient_transform.value).matrix())
            if inverse is None:
                logger.debug("Singular gradientTransform %r", gradient_transform.value)
            else:
                a, b, c, d, e, f = inverse
                gradient.set_matrix(cairocffi.Matrix(xx=a, yx=b, xy=c, yy=d, x0=e, y0=f))
        return gradient

    def _resolve(self, name: str, axis: Optional[str], bb: Any, origin: float, size: float) -> float:
        prop = self.attribute(name)
        if bb is not None:
            return origin + size * prop.num_value()
        return prop.to_pixels(axis)


@element("linearGradient")
class LinearGradientElement(GradientElement):
    inherited_attributes = ("gradientUnits", "x1", "y1", "x2", "y2")

    def get_gradient(self, painter: "Painter", element: Element) -> Optional[cairocffi.LinearGradient]:
        bb = None
        if self.gradient_units() == "objectBoundingBox":
            bb = element.bounding_box()
            if bb is None or bb.is_empty:
                return None

        if not any(self.attribute(n).has_value() for n in ("x1", "y1", "x2", "y2")):
            self.attribute("x1", True).value = 0
            self.attribute("y1", True).value = 0
            self.attribute("x2", True).value = 1
            self.attribute("y2", True).value = 0

        bx, by, bw, bh = (bb.x, bb.y, bb.width, bb.height) if bb is not None else (0, 0, 0, 0)
        x1 = self._resolve("x1", "x", bb, bx, bw)
        y1 = self._resolve("y1", "y", bb, by, bh)
        x2 = self._resolve("x2", "x", bb, bx, bw)
        y2 = self._resolve("y2", "y", bb, by, bh)

        if x1 == x2 and y1 == y2:
            return None
        return painter.create_linear_gradient(x1, y1, x2, y2)


@element("radialGradient")
class RadialGradientElement(GradientElement):
    inherited_attributes = ("gradientUnits", "cx", "cy", "r", "fx", "fy")

    def get_gradient(self, painter: "Painter", element: Element) -> Optional[cairocffi.RadialGradient]:
        bb = None
        if self.gradient_units() == "objectBoundingBox":
            bb = element.bounding_box()
            if bb is None or bb.is_empty:
                return None

        for name in ("cx", "cy", "r"):
            if not self.attribute(name).has_value():
                self.attribute(name, True).value = "50%"

        bx, by, bw, bh = (bb.x, bb.y, bb.width, bb.height) if bb is not None else (0, 0, 0, 0)
        cx = self._resolve("cx", "x", bb, bx, bw)
        cy = self._resolve("cy", "y", bb, by, bh)
        fx = self._resolve("fx", "x", bb, bx, bw) if self.attribute("fx").has_value() else cx
        fy = self._resolve("fy", "y", bb, by, bh) if self.attribute("fy").has_value() else cy

        if bb is not None:
            r = (bw + bh) / 2.0 * self.attribute("r").num_value()
        else:
            r = self.attribute("r").to_pixels()
        return painter.create_radial_gradient(fx, fy, 0, cx, cy, r)


@element("stop")
class StopElement(Element):
    @property
    def offset(self) -> float:
        offset = self.attribute("offset").num_value()
        if offset != offset:
            return 0.0
        return min(1.0, max(0.0, offset))

    @property
    def color(self) -> str:
        stop_color = self.style("stop-color")
        color = Property("stop-color", stop_color.value if stop_color.has_value() else "#000")
        stop_opacity = self.style("stop-opacity")
        if stop_opacity.has_value():
            color = color.add_opacity(stop_opacity)
        return color.value


@element("pattern")
class PatternElement(Element):
    """Renders its children into a tile used as a repeating paint."""

    def create_pattern(self, painter: "Painter", element: Element) -> Optional[cairocffi.SurfacePattern]:
        width = self.attribute("width").to_pixels("x", True)
        height = self.attribute("height").to_pixels("y", True)
        if not (width >= 1 and height >= 1):
            logger.debug("Skipping empty pattern %r", self.attribute("id").value)
            return None

        tile = SvgElement.synthesize(
            self.session,
            self.children,
            viewBox=self.attribute("viewBox").value,
            width=f"{width}px",
            height=f"{height}px",
            transform=self.attribute("patternTransform").value,
        )

        canvas = Canvas(width, height, self.session.max_virtual_pixels)
        tile_painter = canvas.painter
        if self.attribute("x").has_value() and self.attribute("y").has_value():
            tile_painter.translate(self.attribute("x").to_pixels("x", True), self.attribute("y").to_pixels("y", True))

        # a 3x3 grid of copies leaves no gaps at the edges once transformed
        with self.session.active_painter(tile_painter):
            for x in (-1, 0, 1):
                for y in (-1, 0, 1):
                    tile_painter.save()
                    tile.set_attribute("x", x * canvas.width)
                    tile.set_attribute("y", y * canvas.height)
                    tile.render(tile_painter)
                    tile_painter.restore()
        return painter.create_pattern(canvas, "repeat")

    def render(self, painter: "Painter") -> None:
        pass


@element("marker")
class MarkerElement(Element):
    """Drawn at path vertices through a temporary viewport."""

    def render_marker(self, painter: "Painter", point: Point, angle: Optional[float]) -> None:
        painter.save()
        try:
            painter.translate(point.x, point.y)
            orient = self.attribute("orient").value_or_default("auto")
            if orient == "auto":
                painter.rotate(angle or 0.0)
            else:
                painter.rotate(self.attribute("orient").to_radians())
            if self.attribute("markerUnits").value_or_default("strokeWidth") == "strokeWidth":
                painter.scale(painter.line_width, painter.line_width)

            temp = SvgElement.synthesize(
                self.session,
                self.children,
                viewBox=self.attribute("viewBox").value,
                refX=self.attribute("refX").value,
                refY=self.attribute("refY").value,
                width=self.attribute("markerWidth").value_or_default(3),
                height=self.attribute("markerHeight").value_or_default(3),
                fill=self.attribute("fill").value_or_default("black"),
                stroke=self.attribute("stroke").value_or_default("none"),
            )
            temp.render(painter)
        finally:
            painter.restore()

    def render(self, painter: "Painter") -> None:
        pass
