"""Clipping, masking and filter effects."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from svgraster.engine.painter import Canvas
from svgraster.engine.registry import element
from svgraster.engine.transforms import IDENTITY, Transform
from svgraster.svg.elements.base import Element
from svgraster.utils import rasterizer
from svgraster.utils.geometry import BoundingBox
from svgraster.utils.math_helpers import to_number_array

if TYPE_CHECKING:
    from svgraster.engine.context import RenderSession
    from svgraster.engine.painter import Painter

logger = logging.getLogger(__name__)


def _offscreen(painter: "Painter", max_virtual_pixels: int) -> Canvas:
    """A blank canvas the size of ``painter``'s, sharing its font."""
    canvas = Canvas(painter.canvas.width, painter.canvas.height, max_virtual_pixels)
    canvas.painter.font = painter.font
    return canvas


@element("clipPath")
class ClipPathElement(Element):
    """Intersects the clip with the union of its children's geometry."""

    def apply(self, painter: "Painter") -> None:
        painter.begin_path()
        for child in self.children:
            if not hasattr(child, "path"):
                continue
            matrix = painter.get_matrix()
            transform = child.style("transform", skip_ancestors=True)
            if transform.has_value():
                Transform(transform.value).apply(painter)
            child.path(painter, recording=True)
            painter.set_transform(*matrix)
        painter.clip(self.style("clip-rule").value)
        painter.begin_path()

    def render(self, painter: "Painter") -> None:
        pass


@element("mask")
class MaskElement(Element):
    """Keeps the target's pixels where the mask content is opaque."""

    def region(self) -> tuple[float, float, float, float]:
        x = self.attribute("x").to_pixels("x")
        y = self.attribute("y").to_pixels("y")
        width = self.attribute("width").to_pixels("x")
        height = self.attribute("height").to_pixels("y")
        if width == 0 and height == 0:
            bb = BoundingBox()
            for child in self.children:
                bb.add_bounding_box(child.bounding_box())
            if bb.is_empty:
                return (0.0, 0.0, 0.0, 0.0)
            x = math.floor(bb.x1)
            y = math.floor(bb.y1)
            width = math.floor(bb.width)
            height = math.floor(bb.height)
        return (x, y, width, height)

    def apply(self, painter: "Painter", target: Element) -> None:
        session = self.session
        x, y, width, height = self.region()
        matrix = painter.get_matrix()

        # the target renders itself below; its own mask must not recurse
        mask = target.style("mask", skip_ancestors=True)
        saved = mask.value
        mask.value = ""
        try:
            mask_canvas = _offscreen(painter, session.max_virtual_pixels)
            mask_painter = mask_canvas.painter
            mask_painter.set_transform(*matrix)
            if width > 0 and height > 0:
                mask_painter.rect(x, y, width, height)
                mask_painter.clip()
                mask_painter.begin_path()
            with session.active_painter(mask_painter):
                self.render_children(mask_painter)

            content = _offscreen(painter, session.max_virtual_pixels)
            content_painter = content.painter
            content_painter.set_transform(*matrix)
            with session.active_painter(content_painter):
                target.render(content_painter)

            content_painter.set_transform(*IDENTITY)
            content_painter.global_composite_operation = "destination-in"
            content_painter.draw_image(mask_canvas.surface, 0, 0)

            painter.save()
            painter.set_transform(*IDENTITY)
            painter.draw_image(content.surface, 0, 0)
            painter.restore()
        finally:
            mask.value = saved

    def render(self, painter: "Painter") -> None:
        pass


@element("filter")
class FilterElement(Element):
    """Renders the target offscreen, runs each primitive over the pixels, draws back."""

    def apply(self, painter: "Painter", target: Element) -> None:
        session = self.session
        bb = target.bounding_box()
        if bb is None or bb.is_empty or not (bb.width > 0 and bb.height > 0):
            logger.debug("Skipping filter on %r with empty bounds", target)
            return
        x = math.floor(bb.x1)
        y = math.floor(bb.y1)
        width = math.floor(bb.width)
        height = math.floor(bb.height)

        margin = 0
        for child in self.children:
            margin = max(margin, getattr(child, "extra_filter_distance", 0))
        full_width = width + 2 * margin
        full_height = height + 2 * margin

        filter_ = target.style("filter", skip_ancestors=True)
        saved = filter_.value
        filter_.value = ""
        try:
            canvas = Canvas(full_width, full_height, session.max_virtual_pixels)
            temp_painter = canvas.painter
            temp_painter.font = painter.font
            temp_painter.translate(-x + margin, -y + margin)
            with session.active_painter(temp_painter):
                target.render(temp_painter)

            for child in self.children:
                if hasattr(child, "apply_filter"):
                    child.apply_filter(canvas)

            painter.draw_image_region(
                canvas.surface,
                0,
                0,
                canvas.width,
                canvas.height,
                x - margin,
                y - margin,
                canvas.width,
                canvas.height,
            )
        finally:
            filter_.value = saved

    def render(self, painter: "Painter") -> None:
        pass


def _saturate(s: float) -> list[float]:
    return [
        0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s, 0, 0,
        0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s, 0, 0,
        0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s, 0, 0,
        0, 0, 0, 1, 0,
    ]


def _hue_rotate(degrees: float) -> list[float]:
    a = degrees * math.pi / 180.0
    cos_a, sin_a = math.cos(a), math.sin(a)

    def c(m1: float, m2: float, m3: float) -> float:
        return m1 + cos_a * m2 + sin_a * m3

    return [
        c(0.213, 0.787, -0.213), c(0.715, -0.715, -0.715), c(0.072, -0.072, 0.928), 0, 0,
        c(0.213, -0.213, 0.143), c(0.715, 0.285, 0.140), c(0.072, -0.072, -0.283), 0, 0,
        c(0.213, -0.213, -0.787), c(0.715, -0.715, 0.715), c(0.072, 0.928, 0.072), 0, 0,
        0, 0, 0, 1, 0,
    ]


@element("feColorMatrix")
class FeColorMatrixElement(Element):
    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        self.matrix = self._build_matrix()

    def _build_matrix(self) -> list[float]:
        values_attr = self.attribute("values")
        values = to_number_array(values_attr.value) if values_attr.has_value() else []
        first = values[0] if values and not math.isnan(values[0]) else None
        kind = self.attribute("type").value_or_default("matrix")
        if kind == "saturate":
            return _saturate(1.0 if first is None else first)
        if kind == "hueRotate":
            return _hue_rotate(0.0 if first is None else first)
        if kind == "luminanceToAlpha":
            return list(rasterizer.LUMINANCE_TO_ALPHA)
        if kind != "matrix":
            logger.warning("Unsupported feColorMatrix type %r", kind)
        if len(values) < 20:
            return list(rasterizer.IDENTITY_COLOR_MATRIX)
        return values[:20]

    def apply_filter(self, canvas: Canvas) -> None:
        rasterizer.apply_color_matrix(canvas.surface, self.matrix)


@element("feGaussianBlur")
class FeGaussianBlurElement(Element):
    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        deviation = to_number_array(self.attribute("stdDeviation").value)[0] if self.attribute(
            "stdDeviation"
        ).has_value() else 0.0
        self.blur_radius = 0 if not math.isfinite(deviation) or deviation < 0 else math.floor(deviation)
        self.extra_filter_distance = self.blur_radius

    def apply_filter(self, canvas: Canvas) -> None:
        rasterizer.box_blur(canvas.surface, self.blur_radius)


@element("feMorphology", "feComposite")
class UnsupportedFilterPrimitive(Element):
    def apply_filter(self, canvas: Canvas) -> None:
        logger.warning("Filter primitive <%s> is not implemented", self.type)
