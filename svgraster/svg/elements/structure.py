"""Structural elements — svg viewports, groups, symbols, use, style, image."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Optional

from svgraster.engine.registry import element
from svgraster.engine.resources import decode_raster, is_svg_bytes, svg_text
from svgraster.engine.viewport import apply_aspect_ratio
from svgraster.svg import styles
from svgraster.svg.elements.base import Element, RenderedElement
from svgraster.svg.paint import TRANSPARENT
from svgraster.svg.properties import Property
from svgraster.utils.geometry import BoundingBox
from svgraster.utils.math_helpers import to_number_array

if TYPE_CHECKING:
    from svgraster.engine.context import RenderSession
    from svgraster.engine.painter import Painter

logger = logging.getLogger(__name__)


@element("svg")
class SvgElement(RenderedElement):
    """A viewport: clips to its size and maps its viewBox onto it."""

    # True only for the document root, whose size is the canvas size
    root = False

    @classmethod
    def synthesize(cls, session: "RenderSession", children: list[Element], **attributes: Any) -> "SvgElement":
        """A detached viewport drawing ``children`` (which keep their own parents)."""
        temp = cls(session)
        temp.type = "svg"
        for name, value in attributes.items():
            temp.set_attribute(name, value)
        temp.children = children
        return temp

    def set_context(self, painter: "Painter") -> None:
        painter.stroke_style = TRANSPARENT
        painter.line_cap = "butt"
        painter.line_join = "miter"
        painter.miter_limit = 4

        super().set_context(painter)

        if not self.attribute("x").has_value():
            self.attribute("x", True).value = 0
        if not self.attribute("y").has_value():
            self.attribute("y", True).value = 0
        painter.translate(self.attribute("x").to_pixels("x"), self.attribute("y").to_pixels("y"))

        viewport = self.session.viewport
        width = viewport.width()
        height = viewport.height()

        if not self.attribute("width").has_value():
            self.attribute("width", True).value = "100%"
        if not self.attribute("height").has_value():
            self.attribute("height", True).value = "100%"
        if not self.root:
            width = self.attribute("width").to_pixels("x")
            height = self.attribute("height").to_pixels("y")

            x = y = 0.0
            if self.attribute("refX").has_value() and self.attribute("refY").has_value():
                x = -self.attribute("refX").to_pixels("x")
                y = -self.attribute("refY").to_pixels("y")

            if self.attribute("overflow").value_or_default("hidden") != "visible":
                painter.begin_path()
                painter.move_to(x, y)
                painter.line_to(width, y)
                painter.line_to(width, height)
                painter.line_to(x, height)
                painter.close_path()
                painter.clip()
        viewport.set_current(width, height)

        view_box = self.attribute("viewBox")
        if view_box.has_value():
            box = to_number_array(view_box.value)
            if len(box) < 4:
                logger.warning("Malformed viewBox %r", view_box.value)
                return
            min_x, min_y, vb_width, vb_height = box[:4]
            apply_aspect_ratio(
                self.session,
                painter,
                self.attribute("preserveAspectRatio").value,
                viewport.width(),
                vb_width,
                viewport.height(),
                vb_height,
                min_x,
                min_y,
                self.attribute("refX").value,
                self.attribute("refY").value,
            )
            viewport.remove_current()
            viewport.set_current(vb_width, vb_height)

    def clear_context(self, painter: "Painter") -> None:
        super().clear_context(painter)
        self.session.viewport.remove_current()


@element("g")
class GroupElement(RenderedElement):
    def bounding_box(self) -> BoundingBox:
        bb = BoundingBox()
        for child in self.children:
            bb.add_bounding_box(child.bounding_box())
        return bb


@element("defs")
class DefsElement(Element):
    def render(self, painter: "Painter") -> None:
        pass


@element("symbol")
class SymbolElement(RenderedElement):
    def render(self, painter: "Painter") -> None:
        pass


@element("title", "desc")
class DescriptiveElement(Element):
    """Metadata; carries nothing into the render tree."""

    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session)
        self.type = node.local_name if node is not None else ""


@element("style")
class StyleElement(Element):
    """Merges its stylesheet into the session and queues SVG @font-face loads."""

    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        if node is None:
            return
        css = "".join(node.etree_element.itertext())
        for font_face in styles.add_stylesheet(session, css):
            family, urls = styles.svg_font_sources(font_face)
            if not family:
                continue
            for url in urls:
                logger.debug("Loading SVG font %r from %s", family, url)
                session.pending_fonts.append((family, session.load(url, svg_text)))


@element("use")
class UseElement(RenderedElement):
    """Renders the referenced element in place, offset by x/y."""

    def referenced(self) -> Optional[Element]:
        return self.href_attribute().definition()

    @contextmanager
    def resolving(self) -> Iterator[Optional[Element]]:
        """Yield the target, or None when it is missing or would recurse.

        The session tracks every use currently being resolved, so a cycle
        through any number of elements is refused where it closes.
        """
        target = self.referenced()
        active = self.session.active_uses
        if target is not None and self in active:
            logger.warning("Ignoring recursive use of %r", self.href_attribute().value)
            target = None
        if target is None:
            yield None
            return
        active.add(self)
        try:
            yield target
        finally:
            active.discard(self)

    def set_context(self, painter: "Painter") -> None:
        super().set_context(painter)
        if self.attribute("x").has_value():
            painter.translate(self.attribute("x").to_pixels("x"), 0)
        if self.attribute("y").has_value():
            painter.translate(0, self.attribute("y").to_pixels("y"))

    def path(self, painter: Optional["Painter"] = None, recording: bool = False) -> Optional[BoundingBox]:
        with self.resolving() as target:
            if target is None or not hasattr(target, "path"):
                return None
            return target.path(painter, recording)

    def bounding_box(self) -> Optional[BoundingBox]:
        with self.resolving() as target:
            if target is None:
                return None
            return target.bounding_box()

    def render_children(self, painter: "Painter") -> None:
        with self.resolving() as target:
            if target is None:
                logger.debug("Unresolved use reference %r", self.href_attribute().value)
                return
            if target is self or self in list(target.iter()):
                logger.warning("Ignoring self-referencing use")
                return
            self._render_target(target, painter)

    def _render_target(self, target: Element, painter: "Painter") -> None:
        temp = target
        if target.type == "symbol":
            temp = SvgElement.synthesize(
                self.session,
                target.children,
                viewBox=target.attribute("viewBox").value,
                preserveAspectRatio=target.attribute("preserveAspectRatio").value,
                overflow=target.attribute("overflow").value,
            )
        elif target.type == "svg":
            # width/height overrides go on a copy, the definition is shared
            temp = SvgElement.synthesize(
                self.session,
                target.children,
                **{name: prop.value for name, prop in target.attributes.items()},
            )
            temp.styles = dict(target.styles)
        if temp.type == "svg":
            if self.attribute("width").has_value():
                temp.set_attribute("width", self.attribute("width").value)
            if self.attribute("height").has_value():
                temp.set_attribute("height", self.attribute("height").value)

        old_parent = temp.parent
        temp.parent = None
        try:
            temp.render(painter)
        finally:
            temp.parent = old_parent


def _decode_image(data: bytes) -> Any:
    if is_svg_bytes(data):
        return svg_text(data)
    return decode_raster(data)


@element("image")
class ImageElement(RenderedElement):
    """Raster images via Pillow, nested SVG documents via a child scheduler."""

    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        self.pending = None
        self._scheduler = None
        href = self.href_attribute().value
        if not href:
            return
        session.images.append(self)
        self.pending = session.load(str(href), _decode_image)

    @property
    def loaded(self) -> bool:
        return self.pending is None or self.pending.loaded

    def _box(self) -> tuple[float, float, float, float]:
        return (
            self.attribute("x").to_pixels("x"),
            self.attribute("y").to_pixels("y"),
            self.attribute("width").to_pixels("x"),
            self.attribute("height").to_pixels("y"),
        )

    def bounding_box(self) -> BoundingBox:
        x, y, width, height = self._box()
        return BoundingBox(x, y, x + width, y + height)

    def render_children(self, painter: "Painter") -> None:
        if self.pending is None or not self.pending.loaded:
            return
        content = self.pending.value
        if content is None:
            return
        x, y, width, height = self._box()
        if width == 0 or height == 0:
            return

        painter.save()
        try:
            if isinstance(content, str):
                self._draw_svg(painter, content, x, y, width, height)
            else:
                painter.translate(x, y)
                apply_aspect_ratio(
                    self.session,
                    painter,
                    self.attribute("preserveAspectRatio").value,
                    width,
                    content.get_width(),
                    height,
                    content.get_height(),
                    0,
                    0,
                )
                painter.draw_image(content, 0, 0)
        finally:
            painter.restore()

    def _draw_svg(self, painter: "Painter", markup: str, x: float, y: float, width: float, height: float) -> None:
        from svgraster.engine.config import RenderOptions
        from svgraster.engine.scheduler import RenderScheduler
        from svgraster.svg.parser import SvgLoadError, load_document

        if self._scheduler is None:
            options = RenderOptions(
                ignore_mouse=True,
                ignore_animation=True,
                ignore_dimensions=True,
                ignore_clear=True,
                offset_x=x,
                offset_y=y,
                scale_width=width,
                scale_height=height,
                base_url=self.session.options.base_url,
            )
            try:
                document = load_document(markup, options)
            except SvgLoadError as e:
                logger.warning("Nested SVG image failed to load: %s", e)
                self.pending = None
                return
            self._scheduler = RenderScheduler(document, painter.canvas)
        self._scheduler.draw(painter)
