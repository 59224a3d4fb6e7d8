"""Document loading — markup, bytes, trees, paths and URLs into an element graph."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import replace
from typing import Any, Optional, Union

import cssselect2

from svgraster.engine.config import RenderOptions
from svgraster.engine.context import RenderSession
from svgraster.engine.resources import read_bytes, svg_text
from svgraster.svg.elements import register_elements
from svgraster.svg.elements.base import Element, create_element

logger = logging.getLogger(__name__)

Source = Union[str, bytes, os.PathLike, ET.ElementTree, ET.Element]


class SvgLoadError(Exception):
    """The input could not be read or is not an SVG document."""


class Document:
    """A loaded document: its session and root ``svg`` element."""

    def __init__(self, session: RenderSession, root: Element) -> None:
        self.session = session
        self.root = root

    @property
    def width(self) -> Optional[float]:
        width = self.root.attribute("width")
        return width.to_pixels("x") if width.has_value() else None

    @property
    def height(self) -> Optional[float]:
        height = self.root.attribute("height")
        return height.to_pixels("y") if height.has_value() else None

    def get_element_by_id(self, element_id: str) -> Optional[Element]:
        return self.session.get_element_by_id(element_id)

    def close(self) -> None:
        self.session.close()


def parse_markup(markup: Union[str, bytes]) -> ET.Element:
    try:
        return ET.fromstring(markup)
    except ET.ParseError as e:
        raise SvgLoadError(f"Malformed SVG: {e}") from e


def _etree_root(source: Source, options: RenderOptions) -> ET.Element:
    if isinstance(source, ET.ElementTree):
        return source.getroot()
    if isinstance(source, ET.Element):
        return source
    if isinstance(source, bytes):
        return parse_markup(svg_text(source))
    if isinstance(source, str) and source.lstrip().startswith("<"):
        return parse_markup(source)

    href = os.fspath(source)
    if options.base_url is None:
        options.base_url = href
    try:
        data = read_bytes(href)
    except (OSError, ValueError) as e:
        raise SvgLoadError(f"Cannot read {href}: {e}") from e
    return parse_markup(svg_text(data))


def build_tree(session: RenderSession, etree_root: ET.Element) -> Element:
    register_elements()
    wrapper = cssselect2.ElementWrapper.from_xml_root(etree_root)
    return create_element(session, wrapper)


def load_document(source: Source, options: Optional[RenderOptions] = None) -> Document:
    """Parse ``source`` and build its element graph in a fresh session.

    Raises SvgLoadError when the input cannot be read, is not well-formed XML,
    or its root is not an ``svg`` element.
    """
    options = replace(options) if options is not None else RenderOptions()
    etree_root = _etree_root(source, options)
    if etree_root.tag.rpartition("}")[2] != "svg":
        raise SvgLoadError(f"Root element is <{etree_root.tag}>, not <svg>")

    session = RenderSession(options)
    root = build_tree(session, etree_root)
    root.root = True
    session.root = root
    logger.debug(
        "Loaded document: %d definitions, %d animations, %d pending resources",
        len(session.definitions),
        len(session.animations),
        len(session.images) + len(session.pending_fonts),
    )
    return Document(session, root)


def register_loaded_fonts(session: RenderSession) -> int:
    """Register settled ``@font-face`` SVG fonts under their family names.

    Returns how many fonts were registered. Pending loads stay queued.
    """
    from svgraster.svg.elements.text import FontElement

    registered = 0
    remaining = []
    for family, pending in session.pending_fonts:
        if not pending.loaded:
            remaining.append((family, pending))
            continue
        markup: Any = pending.value
        if markup is None:
            continue
        try:
            font_root = build_tree(session, parse_markup(markup))
        except SvgLoadError as e:
            logger.warning("Font %r: %s", family, e)
            continue
        font = next((el for el in font_root.iter() if isinstance(el, FontElement)), None)
        if font is None:
            logger.warning("Font document for %r has no <font> element", family)
            continue
        session.definitions.setdefault(family, font)
        registered += 1
    session.pending_fonts = remaining
    return registered
