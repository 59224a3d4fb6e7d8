"""Paint resolution — colours, opacity folding, gradient/pattern references."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from tinycss2.color3 import parse_color as _css_parse_color

from svgraster.utils.math_helpers import format_number

if TYPE_CHECKING:
    from svgraster.engine.painter import Painter
    from svgraster.svg.elements.base import Element
    from svgraster.svg.properties import Property

logger = logging.getLogger(__name__)

TRANSPARENT = "rgba(0,0,0,0)"

RGBA = tuple[float, float, float, float]


def parse_color(value: object) -> Optional[RGBA]:
    """Parse a CSS colour into (r, g, b, a) floats in [0, 1]. None when invalid."""
    if not isinstance(value, str):
        return None
    parsed = _css_parse_color(value.strip())
    # currentColor comes back as a keyword string
    if parsed is None or isinstance(parsed, str):
        return None
    return (parsed.red, parsed.green, parsed.blue, parsed.alpha)


def to_rgb_ints(color: RGBA) -> tuple[int, int, int]:
    return (round(color[0] * 255), round(color[1] * 255), round(color[2] * 255))


def rgba_string(color: RGBA, alpha: Optional[float] = None) -> str:
    r, g, b = to_rgb_ints(color)
    a = color[3] if alpha is None else alpha
    return f"rgba({r}, {g}, {b}, {format_number(a)})"


def resolve_paint_server(prop: "Property", element: "Element", opacity: "Property"):
    """Resolve a ``url(#id)`` fill/stroke to a gradient or pattern paint.

    Returns a cairo pattern, a colour string (degenerate gradient), or None
    when the reference does not resolve to a paint server.
    """
    definition = prop.definition()
    session = element.session

    if definition is not None and hasattr(definition, "create_gradient"):
        return definition.create_gradient(session.painter, element, opacity)

    if definition is not None and hasattr(definition, "create_pattern"):
        href = definition.href_attribute()
        if href.has_value():
            pattern_transform = definition.attribute("patternTransform")
            referenced = href.definition()
            if referenced is not None:
                definition = referenced
                if pattern_transform.has_value():
                    definition.attribute("patternTransform", True).value = pattern_transform.value
        return definition.create_pattern(session.painter, element)

    if definition is None:
        logger.debug("Unresolved paint reference %r", prop.value)
    return None
