"""Element base classes — attribute/style storage, the style cascade, rendering.

Element           attributes, cascaded styles, children, events
RenderedElement   + paint state (fill, stroke, font, transform, clip, opacity)
PathElement       + geometry: path(), bounding_box(), markers, hit-testing
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from svgraster.engine.registry import get_registry
from svgraster.engine.transforms import Transform
from svgraster.svg import styles
from svgraster.svg.paint import TRANSPARENT, resolve_paint_server
from svgraster.svg.properties import EMPTY_PROPERTY, Property, create_font
from svgraster.utils.geometry import BoundingBox, Point
from svgraster.utils.math_helpers import compress_spaces, to_number_array

if TYPE_CHECKING:
    from svgraster.engine.context import RenderSession
    from svgraster.engine.events import PointerEvent
    from svgraster.engine.painter import Painter

logger = logging.getLogger(__name__)

_XML_NAMESPACES = {
    "http://www.w3.org/1999/xlink": "xlink",
    "http://www.w3.org/XML/1998/namespace": "xml",
}

Marker = tuple[Point, Optional[float]]


def attribute_name(name: str) -> str:
    """``{xlink-ns}href`` → ``xlink:href``; other namespaces keep the local name."""
    if not name.startswith("{"):
        return name
    namespace, _, local = name[1:].partition("}")
    prefix = _XML_NAMESPACES.get(namespace)
    return f"{prefix}:{local}" if prefix else local


def create_element(session: "RenderSession", node: Any) -> "Element":
    """Build the registered element class for a ``cssselect2.ElementWrapper``."""
    cls = get_registry().get(node.local_name)
    if cls is None:
        logger.warning("Element <%s> not yet implemented", node.local_name)
        return UnknownElement(session, node)
    return cls(session, node)


class Element:
    """Any SVG element. Unknown tags use this class and render their children."""

    capture_text_nodes = False

    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        self.session = session
        self.node = node
        self.type = node.local_name if node is not None else ""
        self.attributes: dict[str, Property] = {}
        self.styles: dict[str, Property] = {}
        self.styles_specificity: dict[str, str] = {}
        self.children: list[Element] = []
        self.parent: Optional[Element] = None
        self.listeners: dict[str, list[Callable[["PointerEvent"], None]]] = {}
        self.animation_frozen = False
        self.animation_frozen_value: Any = ""

        if node is None:
            return

        for name, value in node.etree_element.attrib.items():
            self.set_attribute(attribute_name(name), value)

        self.add_styles_from_style_definition()

        inline = self.attribute("style")
        if inline.has_value():
            for name, value in styles.parse_declarations(str(inline.value)):
                self.styles[name] = Property(name, value, session)

        element_id = self.attribute("id")
        if element_id.has_value() and element_id.value not in session.definitions:
            session.definitions[element_id.value] = self

        self._add_children(node)

    def __repr__(self) -> str:
        element_id = self.attribute("id")
        suffix = f" id={element_id.value!r}" if element_id.has_value() else ""
        return f"<{type(self).__name__} {self.type}{suffix}>"

    def _add_children(self, node: Any) -> None:
        etree_element = node.etree_element
        wrappers = {id(w.etree_element): w for w in node.iter_children()}
        if self.capture_text_nodes:
            self._add_text_node(etree_element.text)
        for child in etree_element:
            wrapper = wrappers.get(id(child))
            if wrapper is not None:
                self.add_child(create_element(self.session, wrapper))
            if self.capture_text_nodes:
                self._add_text_node(child.tail)

    def _add_text_node(self, text: Optional[str]) -> None:
        if text and compress_spaces(text).strip() != "":
            tspan = get_registry().get("tspan")
            self.add_child(tspan.from_text(self.session, text))

    # ── attributes / styles ──

    def set_attribute(self, name: str, value: Any) -> Property:
        prop = Property(name, value, self.session)
        self.attributes[name] = prop
        return prop

    def attribute(self, name: str, create: bool = False) -> Property:
        a = self.attributes.get(name)
        if a is not None:
            return a
        if create:
            return self.set_attribute(name, "")
        return EMPTY_PROPERTY

    def href_attribute(self) -> Property:
        for name, prop in self.attributes.items():
            if name == "href" or name.endswith(":href"):
                return prop
        return EMPTY_PROPERTY

    def style(self, name: str, create: bool = False, skip_ancestors: bool = False) -> Property:
        """Resolve a style: own cache, own attribute, then ancestors."""
        s = self.styles.get(name)
        if s is not None:
            return s

        a = self.attribute(name)
        if a.has_value():
            self.styles[name] = a
            return a

        if not skip_ancestors and self.parent is not None:
            ps = self.parent.style(name)
            if ps.has_value():
                return ps

        if create:
            s = Property(name, "", self.session)
            self.styles[name] = s
            return s
        return EMPTY_PROPERTY

    def add_styles_from_style_definition(self) -> None:
        styles.apply_matching_styles(self)

    # ── tree ──

    def add_child(self, child: "Element") -> None:
        child.parent = self
        if child.type != "title":
            self.children.append(child)

    def iter(self):
        yield self
        for child in self.children:
            yield from child.iter()

    # ── events ──

    def on(self, kind: str, listener: Callable[["PointerEvent"], None]) -> None:
        self.listeners.setdefault(kind, []).append(listener)

    def handle_event(self, event: "PointerEvent") -> None:
        for listener in self.listeners.get(event.kind, []):
            listener(event)

    # ── rendering ──

    def bounding_box(self) -> Optional[BoundingBox]:
        return None

    def render(self, painter: "Painter") -> None:
        if self.style("display").value == "none":
            return
        if self.style("visibility").value == "hidden":
            return

        painter.save()
        try:
            mask = self.style("mask", skip_ancestors=True)
            filter_ = self.style("filter", skip_ancestors=True)
            if mask.has_value():
                definition = mask.definition()
                if definition is not None:
                    definition.apply(painter, self)
            elif filter_.has_value():
                definition = filter_.definition()
                if definition is not None:
                    definition.apply(painter, self)
            else:
                self.set_context(painter)
                self.render_children(painter)
                self.clear_context(painter)
        finally:
            painter.restore()

    def set_context(self, painter: "Painter") -> None:
        pass

    def clear_context(self, painter: "Painter") -> None:
        pass

    def render_children(self, painter: "Painter") -> None:
        for child in self.children:
            child.render(painter)


class UnknownElement(Element):
    """Stands in for an unsupported tag; its subtree is dropped."""

    def _add_children(self, node: Any) -> None:
        pass


class RenderedElement(Element):
    """An element whose styles feed the painter before its content draws."""

    def _literal_paint(self, prop: Property) -> str:
        value = prop.value
        if value == "currentColor":
            value = self.style("color").value
        if value == "none":
            return TRANSPARENT
        return value

    def _apply_paint(self, painter: "Painter", name: str) -> None:
        paint = self.style(name)
        opacity = self.style(f"{name}-opacity")
        attr = "fill_style" if name == "fill" else "stroke_style"

        if paint.is_url_definition():
            resolved = resolve_paint_server(paint, self, opacity)
            if resolved is not None:
                setattr(painter, attr, resolved)
            return

        base: Any = "#000000" if name == "fill" else TRANSPARENT
        if paint.has_value():
            value = self._literal_paint(paint)
            if value != "inherit":
                setattr(painter, attr, value)
                base = value
            else:
                base = getattr(painter, attr)
        if opacity.has_value() and isinstance(base, str):
            setattr(painter, attr, Property(name, base).add_opacity(opacity).value)

    def set_context(self, painter: "Painter") -> None:
        self._apply_paint(painter, "fill")
        self._apply_paint(painter, "stroke")

        stroke_width = self.style("stroke-width")
        if stroke_width.has_value():
            width = stroke_width.to_pixels()
            painter.line_width = 0.001 if width == 0 else width
        if self.style("stroke-linecap").has_value():
            painter.line_cap = self.style("stroke-linecap").value
        if self.style("stroke-linejoin").has_value():
            painter.line_join = self.style("stroke-linejoin").value
        if self.style("stroke-miterlimit").has_value():
            painter.miter_limit = self.style("stroke-miterlimit").value
        dasharray = self.style("stroke-dasharray")
        if dasharray.has_value() and dasharray.value != "none":
            painter.set_line_dash(to_number_array(dasharray.value))
            painter.line_dash_offset = self.style("stroke-dashoffset").num_value_or_default(1)

        font_size = self.style("font-size")
        painter.font = str(
            create_font(
                self.style("font-style").value,
                self.style("font-variant").value,
                self.style("font-weight").value,
                f"{font_size.to_pixels()}px" if font_size.has_value() else "",
                self.style("font-family").value,
                painter.font,
            )
        )

        transform = self.style("transform", skip_ancestors=True)
        if transform.has_value():
            Transform(transform.value).apply(painter)

        clip = self.style("clip-path", skip_ancestors=True)
        if clip.has_value():
            definition = clip.definition()
            if definition is not None:
                definition.apply(painter)

        opacity = self.style("opacity")
        if opacity.has_value():
            painter.global_alpha = opacity.num_value()


class PathElement(RenderedElement):
    """A geometry-bearing element: draws its path, fills, strokes, adds markers."""

    def path(self, painter: Optional["Painter"] = None, recording: bool = False) -> BoundingBox:
        """Emit the geometry into ``painter`` (if any) and return its bounding box.

        With ``recording`` set the geometry is appended to the current path
        instead of starting a new one; clip paths build one region this way.
        """
        if painter is not None and not recording:
            painter.begin_path()
        return BoundingBox()

    def bounding_box(self) -> BoundingBox:
        return self.path()

    def markers(self) -> Optional[list[Marker]]:
        return None

    def render_children(self, painter: "Painter") -> None:
        self.path(painter)
        self.session.mouse.check_path(self, painter)

        fill_rule = self.style("fill-rule")
        if fill_rule.value_or_default("inherit") != "inherit":
            painter.fill(fill_rule.value)
        else:
            painter.fill()
        painter.stroke()

        markers = self.markers()
        if not markers:
            return
        for name, selected in (
            ("marker-start", markers[:1]),
            ("marker-mid", markers[1:-1]),
            ("marker-end", markers[-1:]),
        ):
            prop = self.style(name)
            if not prop.is_url_definition():
                continue
            marker = prop.definition()
            if marker is None or not hasattr(marker, "render_marker"):
                logger.debug("Unresolved %s %r", name, prop.value)
                continue
            for point, angle in selected:
                marker.render_marker(painter, point, angle)
