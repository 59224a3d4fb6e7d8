"""Viewport stack and preserveAspectRatio math."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from svgraster.utils.math_helpers import compress_spaces

if TYPE_CHECKING:
    from svgraster.engine.context import RenderSession
    from svgraster.engine.painter import Painter

_DEFER_RE = re.compile(r"^defer\s")


@dataclass
class ViewportFrame:
    width: float
    height: float


class ViewPort:
    """Stack of (width, height) frames used to resolve percentage lengths."""

    def __init__(self) -> None:
        self.viewports: list[ViewportFrame] = []

    def clear(self) -> None:
        self.viewports = []

    def set_current(self, width: float, height: float) -> None:
        self.viewports.append(ViewportFrame(width, height))

    def remove_current(self) -> None:
        if self.viewports:
            self.viewports.pop()

    def current(self) -> ViewportFrame:
        if not self.viewports:
            return ViewportFrame(0.0, 0.0)
        return self.viewports[-1]

    def width(self) -> float:
        return self.current().width

    def height(self) -> float:
        return self.current().height

    def compute_size(self, d: Any = None) -> float:
        if isinstance(d, (int, float)) and not isinstance(d, bool):
            return d
        if d == "x":
            return self.width()
        if d == "y":
            return self.height()
        return math.sqrt(self.width() ** 2 + self.height() ** 2) / math.sqrt(2)


def apply_aspect_ratio(
    session: "RenderSession",
    painter: "Painter",
    aspect_ratio: Optional[str],
    width: float,
    desired_width: float,
    height: float,
    desired_height: float,
    min_x: Optional[float] = None,
    min_y: Optional[float] = None,
    ref_x: Any = None,
    ref_y: Any = None,
) -> None:
    """Fit a ``desired_width`` x ``desired_height`` box into ``width`` x ``height``.

    Follows preserveAspectRatio: ``[defer] <align> [meet|slice]``.
    """
    from svgraster.svg.properties import Property

    aspect_ratio = _DEFER_RE.sub("", compress_spaces(str(aspect_ratio or "")))
    parts = aspect_ratio.split(" ")
    align = parts[0] or "xMidYMid"
    meet_or_slice = (parts[1] if len(parts) > 1 else "") or "meet"

    scale_x = _safe_div(width, desired_width)
    scale_y = _safe_div(height, desired_height)
    scale_min = min(scale_x, scale_y)
    scale_max = max(scale_x, scale_y)
    if meet_or_slice == "meet":
        desired_width *= scale_min
        desired_height *= scale_min
    if meet_or_slice == "slice":
        desired_width *= scale_max
        desired_height *= scale_max

    ref_x_prop = Property("refX", ref_x, session)
    ref_y_prop = Property("refY", ref_y, session)
    if ref_x_prop.has_value() and ref_y_prop.has_value():
        painter.translate(-scale_min * ref_x_prop.to_pixels("x"), -scale_min * ref_y_prop.to_pixels("y"))
    else:
        fits_y = (meet_or_slice == "meet" and scale_min == scale_y) or (
            meet_or_slice == "slice" and scale_max == scale_y
        )
        fits_x = (meet_or_slice == "meet" and scale_min == scale_x) or (
            meet_or_slice == "slice" and scale_max == scale_x
        )
        if align.startswith("xMid") and fits_y:
            painter.translate(width / 2.0 - desired_width / 2.0, 0)
        if align.endswith("YMid") and fits_x:
            painter.translate(0, height / 2.0 - desired_height / 2.0)
        if align.startswith("xMax") and fits_y:
            painter.translate(width - desired_width, 0)
        if align.endswith("YMax") and fits_x:
            painter.translate(0, height - desired_height)

    if align == "none":
        painter.scale(scale_x, scale_y)
    elif meet_or_slice == "meet":
        painter.scale(scale_min, scale_min)
    elif meet_or_slice == "slice":
        painter.scale(scale_max, scale_max)

    painter.translate(0 if min_x is None else -min_x, 0 if min_y is None else -min_y)


def _safe_div(a: float, b: float) -> float:
    if b == 0:
        return math.inf if a > 0 else (math.nan if a == 0 else -math.inf)
    return a / b
