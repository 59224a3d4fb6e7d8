"""Property — a named raw attribute/style value with unit-aware views.

Every numeric view is derived lazily from ``value`` and, for lengths, from
the session's viewport stack and the active painter font.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from svgraster.utils.math_helpers import compress_spaces, parse_float

if TYPE_CHECKING:
    from svgraster.engine.context import RenderSession

logger = logging.getLogger(__name__)

DEFAULT_FONT = "12px sans-serif"
DEFAULT_EM = 12.0
DPI = 96.0

_DEFINITION_RE = re.compile(r"#([^)'\"]+)")
_UNIT_STRIP_RE = re.compile(r"[0-9.\-]")

_TEXT_BASELINES = {
    "baseline": "alphabetic",
    "before-edge": "top",
    "text-before-edge": "top",
    "middle": "middle",
    "central": "middle",
    "after-edge": "bottom",
    "text-after-edge": "bottom",
    "ideographic": "ideographic",
    "alphabetic": "alphabetic",
    "hanging": "hanging",
    "mathematical": "alphabetic",
}


class Property:
    """A name/value pair. ``value`` is usually a string but may be a number."""

    __slots__ = ("name", "value", "session")

    def __init__(self, name: str, value: Any, session: Optional["RenderSession"] = None) -> None:
        self.name = name
        self.value = value
        self.session = session

    def __repr__(self) -> str:
        return f"Property({self.name!r}, {self.value!r})"

    def has_value(self) -> bool:
        return self.value is not None and self.value != ""

    def num_value(self) -> float:
        if not self.has_value():
            return 0.0
        n = parse_float(self.value)
        if str(self.value).endswith("%"):
            n = n / 100.0
        return n

    def value_or_default(self, default: Any) -> Any:
        if self.has_value():
            return self.value
        return default

    def num_value_or_default(self, default: float) -> float:
        if self.has_value():
            return self.num_value()
        return default

    def units(self) -> str:
        return _UNIT_STRIP_RE.sub("", str(self.value))

    # ── colours ──

    def add_opacity(self, opacity: "Property") -> "Property":
        """Fold ``opacity`` into this colour's alpha. Non-colours pass through."""
        from svgraster.svg.paint import parse_color, rgba_string

        new_value = self.value
        if opacity.has_value() and isinstance(self.value, str):
            color = parse_color(self.value)
            if color is not None:
                new_value = rgba_string(color, color[3] * opacity.num_value())
        return Property(self.name, new_value, self.session)

    # ── definitions ──

    def definition(self):
        """Look up ``url(#id)``, ``#id`` or a bare id in the definitions registry."""
        if self.session is None or not self.has_value():
            return None
        text = str(self.value)
        match = _DEFINITION_RE.search(text)
        name = match.group(1) if match else text
        return self.session.definitions.get(name)

    def is_url_definition(self) -> bool:
        return str(self.value if self.value is not None else "").startswith("url(")

    # ── lengths ──

    def _em(self, axis: Any) -> float:
        em = DEFAULT_EM
        font = self.session.current_font() if self.session is not None else DEFAULT_FONT
        font_size = Property("fontSize", parse_font(font).get("font_size"), self.session)
        if font_size.has_value():
            em = font_size.to_pixels(axis)
        return em

    def _compute_size(self, axis: Any) -> float:
        if self.session is None:
            return 0.0
        return self.session.viewport.compute_size(axis)

    def to_pixels(self, axis: Any = None, process_percent: bool = False) -> float:
        """Resolve a length to user-space pixels.

        ``axis`` is ``'x'``, ``'y'`` or None (diagonal) for percentage lengths.
        """
        if not self.has_value():
            return 0.0
        s = str(self.value)
        if s.endswith("em"):
            return self.num_value() * self._em(axis)
        if s.endswith("ex"):
            return self.num_value() * self._em(axis) / 2.0
        if s.endswith("px"):
            return self.num_value()
        if s.endswith("pt"):
            return self.num_value() * DPI * (1.0 / 72.0)
        if s.endswith("pc"):
            return self.num_value() * 15
        if s.endswith("cm"):
            return self.num_value() * DPI / 2.54
        if s.endswith("mm"):
            return self.num_value() * DPI / 25.4
        if s.endswith("in"):
            return self.num_value() * DPI
        if s.endswith("%"):
            return self.num_value() * self._compute_size(axis)
        n = self.num_value()
        if process_percent and n < 1.0:
            return n * self._compute_size(axis)
        return n

    # ── time / angle ──

    def to_milliseconds(self) -> float:
        if not self.has_value():
            return 0.0
        s = str(self.value)
        if s.endswith("ms"):
            return self.num_value()
        if s.endswith("s"):
            return self.num_value() * 1000
        return self.num_value()

    def to_radians(self) -> float:
        if not self.has_value():
            return 0.0
        s = str(self.value)
        if s.endswith("deg"):
            return self.num_value() * (math.pi / 180.0)
        if s.endswith("grad"):
            return self.num_value() * (math.pi / 200.0)
        if s.endswith("rad"):
            return self.num_value()
        return self.num_value() * (math.pi / 180.0)

    # ── text ──

    def to_text_baseline(self) -> Optional[str]:
        if not self.has_value():
            return None
        return _TEXT_BASELINES.get(self.value)


EMPTY_PROPERTY = Property("EMPTY", "")


# ── font shorthand ──

_FONT_STYLES = {"normal", "italic", "oblique", "inherit"}
_FONT_VARIANTS = {"normal", "small-caps", "inherit"}
_FONT_WEIGHTS = {
    "normal", "bold", "bolder", "lighter",
    "100", "200", "300", "400", "500", "600", "700", "800", "900",
    "inherit",
}


@dataclass
class FontSpec:
    font_style: str = ""
    font_variant: str = ""
    font_weight: str = ""
    font_size: str = ""
    font_family: str = ""

    def __str__(self) -> str:
        return " ".join(
            [self.font_style, self.font_variant, self.font_weight, self.font_size, self.font_family]
        )


def parse_font(s: Optional[str]) -> dict[str, str]:
    """Split a CSS font shorthand into its parts. Missing parts are absent."""
    parts = compress_spaces(s or "").strip().split(" ")
    font: dict[str, str] = {}
    seen_style = seen_variant = seen_weight = seen_size = False
    family: list[str] = []
    for part in parts:
        if not part:
            continue
        if not seen_style and part in _FONT_STYLES:
            if part != "inherit":
                font["font_style"] = part
            seen_style = True
        elif not seen_variant and part in _FONT_VARIANTS:
            if part != "inherit":
                font["font_variant"] = part
            seen_style = seen_variant = True
        elif not seen_weight and part in _FONT_WEIGHTS:
            if part != "inherit":
                font["font_weight"] = part
            seen_style = seen_variant = seen_weight = True
        elif not seen_size:
            if part != "inherit":
                font["font_size"] = part.split("/")[0]
            seen_style = seen_variant = seen_weight = seen_size = True
        elif part != "inherit":
            family.append(part)
    if family:
        font["font_family"] = " ".join(family)
    return font


def create_font(
    font_style: Optional[str],
    font_variant: Optional[str],
    font_weight: Optional[str],
    font_size: Optional[str],
    font_family: Optional[str],
    inherit: str,
) -> FontSpec:
    """Build a font from explicit parts, filling blanks from ``inherit``."""
    base = parse_font(inherit)
    return FontSpec(
        font_style=font_style or base.get("font_style", ""),
        font_variant=font_variant or base.get("font_variant", ""),
        font_weight=font_weight or base.get("font_weight", ""),
        font_size=font_size or base.get("font_size", ""),
        font_family=font_family or base.get("font_family", ""),
    )
