"""Text layout — text, tspan, tref, a — and SVG fonts with custom glyphs."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Optional, Union

from svgraster.engine.events import CLICK, MOUSEMOVE
from svgraster.engine.registry import element
from svgraster.svg.elements.base import Element, RenderedElement
from svgraster.svg.elements.path import PathDataElement
from svgraster.svg.elements.structure import GroupElement
from svgraster.svg.properties import DEFAULT_EM, Property, parse_font
from svgraster.utils.geometry import BoundingBox
from svgraster.utils.math_helpers import compress_spaces, parse_float, to_number_array

if TYPE_CHECKING:
    from svgraster.engine.context import RenderSession
    from svgraster.engine.events import PointerEvent
    from svgraster.engine.painter import Painter

logger = logging.getLogger(__name__)


def _painter_font_size(session: "RenderSession") -> float:
    size = parse_float(parse_font(session.current_font()).get("font_size", ""))
    return DEFAULT_EM if math.isnan(size) else size


def _painter_font_style(session: "RenderSession") -> str:
    return parse_font(session.current_font()).get("font_style", "normal")


# ── SVG fonts ──


@element("font-face")
class FontFaceElement(Element):
    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        self.ascent = self.attribute("ascent").value
        self.descent = self.attribute("descent").value
        units = self.attribute("units-per-em").num_value_or_default(1000)
        self.units_per_em = units if units > 0 else 1000.0


@element("glyph")
class GlyphElement(PathDataElement):
    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        self.horiz_adv_x = self.attribute("horiz-adv-x").num_value()
        self.unicode = self.attribute("unicode").value
        self.arabic_form = self.attribute("arabic-form").value


@element("missing-glyph")
class MissingGlyphElement(PathDataElement):
    horiz_adv_x = 0.0


@element("font")
class FontElement(Element):
    """An SVG font: a glyph table keyed by character, registered under its family."""

    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        self.horiz_adv_x = self.attribute("horiz-adv-x").num_value()
        self.is_rtl = False
        self.is_arabic = False
        self.font_face: Optional[FontFaceElement] = None
        self.missing_glyph: Optional[MissingGlyphElement] = None
        self.glyphs: dict[str, Union[GlyphElement, dict[str, GlyphElement]]] = {}

        for child in self.children:
            if isinstance(child, FontFaceElement):
                self.font_face = child
                family = child.style("font-family")
                if family.has_value():
                    session.definitions[family.value] = self
            elif isinstance(child, MissingGlyphElement):
                self.missing_glyph = child
            elif isinstance(child, GlyphElement):
                if child.arabic_form:
                    self.is_rtl = self.is_arabic = True
                    forms = self.glyphs.setdefault(child.unicode, {})
                    if isinstance(forms, dict):
                        forms[child.arabic_form] = child
                else:
                    self.glyphs[child.unicode] = child

    def glyph(self, text: str, i: int) -> Optional[PathDataElement]:
        """The glyph for ``text[i]``, choosing the arabic form from its neighbours."""
        c = text[i]
        found: Optional[PathDataElement] = None
        entry = self.glyphs.get(c)
        if self.is_arabic:
            form = "isolated"
            if (i == 0 or text[i - 1] == " ") and i < len(text) - 2 and text[i + 1] != " ":
                form = "terminal"
            if i > 0 and text[i - 1] != " " and i < len(text) - 2 and text[i + 1] != " ":
                form = "medial"
            if i > 0 and text[i - 1] != " " and (i == len(text) - 1 or text[i + 1] == " "):
                form = "initial"
            if isinstance(entry, dict):
                found = entry.get(form)
            elif entry is not None:
                found = entry
        elif isinstance(entry, GlyphElement):
            found = entry
        return found or self.missing_glyph

    def render(self, painter: "Painter") -> None:
        pass


# ── text ──


class TextContentElement(RenderedElement):
    """A run of text positioned by its enclosing ``text`` element."""

    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        self.x = 0.0
        self.y = 0.0

    def get_text(self) -> str:
        return ""

    def _font_owner(self) -> Element:
        return self.parent if self.parent is not None else self

    def custom_font(self) -> Optional[FontElement]:
        font = self._font_owner().style("font-family").definition()
        if isinstance(font, FontElement) and font.font_face is not None:
            return font
        return None

    def _glyph_text(self, font: FontElement) -> str:
        text = self.get_text()
        return text[::-1] if font.is_rtl else text

    def _advance(self, font: FontElement, glyph: Optional[PathDataElement], font_size: float) -> float:
        horiz_adv_x = getattr(glyph, "horiz_adv_x", 0.0) or font.horiz_adv_x
        if math.isnan(horiz_adv_x):
            horiz_adv_x = 0.0
        return font_size * horiz_adv_x / font.font_face.units_per_em

    def render_children(self, painter: "Painter") -> None:
        font = self.custom_font()
        if font is not None:
            self._render_glyphs(painter, font)
            return

        text = compress_spaces(self.get_text())
        painter.fill_text(text, self.x, self.y)
        painter.stroke_text(text, self.x, self.y)

    def _render_glyphs(self, painter: "Painter", font: FontElement) -> None:
        owner = self._font_owner()
        font_size = owner.style("font-size").num_value_or_default(_painter_font_size(self.session))
        if not font_size > 0:
            return
        font_style = owner.style("font-style").value_or_default(_painter_font_style(self.session))
        units_per_em = font.font_face.units_per_em
        text = self._glyph_text(font)
        dx = to_number_array(owner.attribute("dx").value)

        for i in range(len(text)):
            glyph = font.glyph(text, i)
            scale = font_size / units_per_em
            painter.save()
            painter.translate(self.x, self.y)
            painter.scale(scale, -scale)
            painter.line_width = painter.line_width * units_per_em / font_size
            if font_style == "italic":
                painter.transform(1, 0, 0.4, 1, 0, 0)
            if glyph is not None:
                glyph.render(painter)
            painter.restore()

            self.x += self._advance(font, glyph, font_size)
            if i < len(dx) and not math.isnan(dx[i]):
                self.x += dx[i]

    def measure_text_recursive(self, painter: "Painter") -> float:
        width = self.measure_text(painter)
        for child in self.children:
            if isinstance(child, TextContentElement):
                width += child.measure_text_recursive(painter)
        return width

    def measure_text(self, painter: "Painter") -> float:
        font = self.custom_font()
        if font is not None:
            owner = self._font_owner()
            font_size = owner.style("font-size").num_value_or_default(_painter_font_size(self.session))
            text = self._glyph_text(font)
            dx = to_number_array(owner.attribute("dx").value)
            measure = 0.0
            for i in range(len(text)):
                measure += self._advance(font, font.glyph(text, i), font_size)
                if i < len(dx) and not math.isnan(dx[i]):
                    measure += dx[i]
            return measure

        text = compress_spaces(self.get_text())
        if not text:
            return 0.0
        painter.save()
        try:
            self.set_context(painter)
            return painter.measure_text(text)
        finally:
            painter.restore()


@element("text")
class TextElement(RenderedElement):
    """Lays out its runs left to right, honouring x/y/dx/dy and text-anchor."""

    capture_text_nodes = True

    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        self.x = 0.0
        self.y = 0.0

    def set_context(self, painter: "Painter") -> None:
        super().set_context(painter)
        baseline = self.style("dominant-baseline").to_text_baseline()
        if baseline is None:
            baseline = self.style("alignment-baseline").to_text_baseline()
        if baseline is not None:
            painter.text_baseline = baseline

    def bounding_box(self) -> BoundingBox:
        x = self.attribute("x").to_pixels("x")
        y = self.attribute("y").to_pixels("y")
        owner = self.parent if self.parent is not None else self
        font_size = owner.style("font-size").num_value_or_default(_painter_font_size(self.session))
        first = self.children[0] if self.children else None
        length = len(first.get_text()) if isinstance(first, TextContentElement) else 0
        return BoundingBox(x, y - font_size, x + math.floor(font_size * 2.0 / 3.0) * length, y)

    def render_children(self, painter: "Painter") -> None:
        self.x = self.attribute("x").to_pixels("x")
        self.y = self.attribute("y").to_pixels("y")
        if self.attribute("dx").has_value():
            self.x += self.attribute("dx").to_pixels("x")
        if self.attribute("dy").has_value():
            self.y += self.attribute("dy").to_pixels("y")
        self.x += self.anchor_delta(painter, self, 0)
        for i in range(len(self.children)):
            self.render_child(painter, self, i)

    def anchor_delta(self, painter: "Painter", parent: Element, start: int) -> float:
        anchor = self.style("text-anchor").value_or_default("start")
        if anchor == "start":
            return 0.0
        width = 0.0
        for i in range(start, len(parent.children)):
            child = parent.children[i]
            if i > start and child.attribute("x").has_value():
                # a new chunk starts here
                break
            if isinstance(child, TextContentElement):
                width += child.measure_text_recursive(painter)
        return -width if anchor == "end" else -width / 2.0

    def render_child(self, painter: "Painter", parent: Any, i: int) -> None:
        child = parent.children[i]
        if not isinstance(child, TextContentElement):
            child.render(painter)
            return

        if child.attribute("x").has_value():
            child.x = child.attribute("x").to_pixels("x") + self.anchor_delta(painter, parent, i)
            if child.attribute("dx").has_value():
                child.x += child.attribute("dx").to_pixels("x")
        else:
            if child.attribute("dx").has_value():
                parent.x += child.attribute("dx").to_pixels("x")
            child.x = parent.x
        parent.x = child.x + child.measure_text(painter)

        if child.attribute("y").has_value():
            child.y = child.attribute("y").to_pixels("y")
            if child.attribute("dy").has_value():
                child.y += child.attribute("dy").to_pixels("y")
        else:
            if child.attribute("dy").has_value():
                parent.y += child.attribute("dy").to_pixels("y")
            child.y = parent.y
        parent.y = child.y

        child.render(painter)

        for j in range(len(child.children)):
            self.render_child(painter, child, j)


@element("tspan")
class TSpanElement(TextContentElement):
    capture_text_nodes = True

    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        self.text = ""
        if node is not None:
            self.text = compress_spaces("".join(node.etree_element.itertext()))

    @classmethod
    def from_text(cls, session: "RenderSession", text: str) -> "TSpanElement":
        """An anonymous span for a bare text node."""
        span = cls(session)
        span.type = "tspan"
        span.text = compress_spaces(text)
        return span

    def get_text(self) -> str:
        # children own the text when there are any
        if self.children:
            return ""
        return self.text


@element("tref")
class TRefElement(TextContentElement):
    def get_text(self) -> str:
        referenced = self.href_attribute().definition()
        if referenced is None or not referenced.children:
            return ""
        first = referenced.children[0]
        return first.get_text() if isinstance(first, TextContentElement) else ""


@element("a")
class AnchorElement(TextContentElement):
    """A hyperlink: renders as text or as a group, follows its href on click."""

    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        self.has_text = False
        self.text = ""
        if node is not None:
            etree_element = node.etree_element
            self.has_text = len(etree_element) == 0 and bool(etree_element.text)
            self.text = etree_element.text if self.has_text else ""

    def get_text(self) -> str:
        return self.text

    def _inside_text(self) -> bool:
        node = self.parent
        while node is not None:
            if isinstance(node, TextElement):
                return True
            node = node.parent
        return False

    def render_children(self, painter: "Painter") -> None:
        if self.has_text:
            super().render_children(painter)
            font_size = Property("fontSize", _painter_font_size(self.session), self.session).to_pixels("y")
            self.session.mouse.check_bounding_box(
                self,
                BoundingBox(self.x, self.y - font_size, self.x + self.measure_text(painter), self.y),
            )
        elif self.children and not self._inside_text():
            group = GroupElement(self.session)
            group.type = "g"
            group.children = self.children
            group.parent = self
            group.render(painter)

    def handle_event(self, event: "PointerEvent") -> None:
        super().handle_event(event)
        if event.kind == MOUSEMOVE:
            self.session.cursor = "pointer"
        elif event.kind == CLICK:
            href = self.href_attribute().value
            handler = self.session.options.link_handler
            if handler is not None:
                handler(href)
            else:
                logger.info("Link activated: %s", href)
