"""Painter — a 2D-canvas-style drawing facade over a cairo context.

Cairo has no notion of fill/stroke styles, global alpha or a font string, so
the painter keeps that canvas state on its own save/restore stack next to
cairo's. Calls that would push cairo into an error state (non-finite
coordinates, singular matrices, invalid dashes) are dropped or turn the
current state "degenerate", in which case drawing is a no-op until the
matching ``restore()``.
"""

from __future__ import annotations

import contextlib
import logging
import math
from dataclasses import dataclass, field, replace
from typing import Optional, Union

import cairocffi

from svgraster.engine.transforms import Matrix, invert, multiply
from svgraster.svg.paint import parse_color
from svgraster.svg.properties import DEFAULT_FONT, parse_font
from svgraster.utils import rasterizer
from svgraster.utils.math_helpers import is_finite, parse_float

logger = logging.getLogger(__name__)

Paint = Union[str, cairocffi.Pattern]

DEFAULT_CANVAS_WIDTH = 300
DEFAULT_CANVAS_HEIGHT = 150
DEFAULT_MAX_VIRTUAL_PIXELS = 30000

_LINE_CAPS = {
    "butt": cairocffi.LINE_CAP_BUTT,
    "round": cairocffi.LINE_CAP_ROUND,
    "square": cairocffi.LINE_CAP_SQUARE,
}
_LINE_JOINS = {
    "miter": cairocffi.LINE_JOIN_MITER,
    "round": cairocffi.LINE_JOIN_ROUND,
    "bevel": cairocffi.LINE_JOIN_BEVEL,
}
_OPERATORS = {
    "source-over": cairocffi.OPERATOR_OVER,
    "destination-in": cairocffi.OPERATOR_DEST_IN,
    "copy": cairocffi.OPERATOR_SOURCE,
}
_BOLD_WEIGHTS = {"bold", "bolder", "600", "700", "800", "900"}


@dataclass
class PaintState:
    fill_style: Paint = "#000000"
    stroke_style: Paint = "#000000"
    line_width: float = 1.0
    line_cap: str = "butt"
    line_join: str = "miter"
    miter_limit: float = 10.0
    line_dash: list[float] = field(default_factory=list)
    line_dash_offset: float = 0.0
    global_alpha: float = 1.0
    composite_operation: str = "source-over"
    font: str = DEFAULT_FONT
    text_baseline: str = "alphabetic"
    degenerate: bool = False


class Painter:
    """Canvas-like drawing API backed by ``cairocffi.Context``."""

    def __init__(self, canvas: "Canvas") -> None:
        self.canvas = canvas
        self.cr = cairocffi.Context(canvas.surface)
        self._state = PaintState()
        self._stack: list[PaintState] = []

    # ── state ──

    def save(self) -> None:
        self._stack.append(replace(self._state, line_dash=list(self._state.line_dash)))
        self.cr.save()

    def restore(self) -> None:
        if not self._stack:
            return
        self._state = self._stack.pop()
        self.cr.restore()

    @property
    def fill_style(self) -> Paint:
        return self._state.fill_style

    @fill_style.setter
    def fill_style(self, value: Paint) -> None:
        if self._valid_paint(value):
            self._state.fill_style = value

    @property
    def stroke_style(self) -> Paint:
        return self._state.stroke_style

    @stroke_style.setter
    def stroke_style(self, value: Paint) -> None:
        if self._valid_paint(value):
            self._state.stroke_style = value

    @staticmethod
    def _valid_paint(value: object) -> bool:
        if isinstance(value, cairocffi.Pattern):
            return True
        if parse_color(value) is None:
            logger.debug("Ignoring invalid paint %r", value)
            return False
        return True

    @property
    def line_width(self) -> float:
        return self._state.line_width

    @line_width.setter
    def line_width(self, value: float) -> None:
        value = parse_float(value)
        if math.isfinite(value) and value > 0:
            self._state.line_width = value

    @property
    def line_cap(self) -> str:
        return self._state.line_cap

    @line_cap.setter
    def line_cap(self, value: str) -> None:
        if value in _LINE_CAPS:
            self._state.line_cap = value

    @property
    def line_join(self) -> str:
        return self._state.line_join

    @line_join.setter
    def line_join(self, value: str) -> None:
        if value in _LINE_JOINS:
            self._state.line_join = value

    @property
    def miter_limit(self) -> float:
        return self._state.miter_limit

    @miter_limit.setter
    def miter_limit(self, value: float) -> None:
        value = parse_float(value)
        if math.isfinite(value) and value > 0:
            self._state.miter_limit = value

    def set_line_dash(self, segments: list[float]) -> None:
        if any(not math.isfinite(s) or s < 0 for s in segments):
            return
        if len(segments) % 2:
            segments = segments + segments
        self._state.line_dash = list(segments)

    def get_line_dash(self) -> list[float]:
        return list(self._state.line_dash)

    @property
    def line_dash_offset(self) -> float:
        return self._state.line_dash_offset

    @line_dash_offset.setter
    def line_dash_offset(self, value: float) -> None:
        value = parse_float(value)
        if math.isfinite(value):
            self._state.line_dash_offset = value

    @property
    def global_alpha(self) -> float:
        return self._state.global_alpha

    @global_alpha.setter
    def global_alpha(self, value: float) -> None:
        value = parse_float(value)
        if 0.0 <= value <= 1.0:
            self._state.global_alpha = value

    @property
    def global_composite_operation(self) -> str:
        return self._state.composite_operation

    @global_composite_operation.setter
    def global_composite_operation(self, value: str) -> None:
        if value in _OPERATORS:
            self._state.composite_operation = value
        else:
            logger.warning("Unsupported composite operation %r", value)

    @property
    def font(self) -> str:
        return self._state.font

    @font.setter
    def font(self, value: str) -> None:
        if parse_font(value).get("font_size"):
            self._state.font = " ".join(str(value).split())

    @property
    def text_baseline(self) -> str:
        return self._state.text_baseline

    @text_baseline.setter
    def text_baseline(self, value: str) -> None:
        self._state.text_baseline = value

    @property
    def is_degenerate(self) -> bool:
        return self._state.degenerate

    # ── transforms ──

    def get_matrix(self) -> Matrix:
        return self.cr.get_matrix().as_tuple()

    def transform(self, a: float, b: float, c: float, d: float, e: float, f: float) -> None:
        if self._state.degenerate:
            return
        if not is_finite(a, b, c, d, e, f) or invert(multiply(self.get_matrix(), (a, b, c, d, e, f))) is None:
            self._state.degenerate = True
            return
        self.cr.transform(cairocffi.Matrix(a, b, c, d, e, f))

    def set_transform(self, a: float, b: float, c: float, d: float, e: float, f: float) -> None:
        if not is_finite(a, b, c, d, e, f) or invert((a, b, c, d, e, f)) is None:
            self._state.degenerate = True
            return
        self._state.degenerate = False
        self.cr.set_matrix(cairocffi.Matrix(a, b, c, d, e, f))

    def translate(self, x: float, y: float) -> None:
        self.transform(1.0, 0.0, 0.0, 1.0, x, y)

    def scale(self, x: float, y: float) -> None:
        self.transform(x, 0.0, 0.0, y, 0.0, 0.0)

    def rotate(self, angle: float) -> None:
        if not math.isfinite(angle):
            self._state.degenerate = True
            return
        c, s = math.cos(angle), math.sin(angle)
        self.transform(c, s, -s, c, 0.0, 0.0)

    # ── paths ──

    def begin_path(self) -> None:
        self.cr.new_path()

    def close_path(self) -> None:
        if self.cr.has_current_point():
            self.cr.close_path()

    def move_to(self, x: float, y: float) -> None:
        if is_finite(x, y) and not self._state.degenerate:
            self.cr.move_to(x, y)

    def line_to(self, x: float, y: float) -> None:
        if not is_finite(x, y) or self._state.degenerate:
            return
        if not self.cr.has_current_point():
            self.cr.move_to(x, y)
        else:
            self.cr.line_to(x, y)

    def bezier_curve_to(self, cp1x, cp1y, cp2x, cp2y, x, y) -> None:
        if not is_finite(cp1x, cp1y, cp2x, cp2y, x, y) or self._state.degenerate:
            return
        if not self.cr.has_current_point():
            self.cr.move_to(cp1x, cp1y)
        self.cr.curve_to(cp1x, cp1y, cp2x, cp2y, x, y)

    def quadratic_curve_to(self, cpx, cpy, x, y) -> None:
        if not is_finite(cpx, cpy, x, y) or self._state.degenerate:
            return
        if not self.cr.has_current_point():
            self.cr.move_to(cpx, cpy)
        x0, y0 = self.cr.get_current_point()
        self.cr.curve_to(
            x0 + 2.0 / 3.0 * (cpx - x0),
            y0 + 2.0 / 3.0 * (cpy - y0),
            x + 2.0 / 3.0 * (cpx - x),
            y + 2.0 / 3.0 * (cpy - y),
            x,
            y,
        )

    def arc(self, x, y, radius, start, end, anticlockwise=False) -> None:
        if not is_finite(x, y, radius, start, end) or self._state.degenerate:
            return
        if radius < 0:
            logger.debug("Negative arc radius %s", radius)
            return
        tau = 2 * math.pi
        # a sweep of a full turn either way is the whole circle
        if abs(end - start) >= tau:
            end = start - tau if anticlockwise else start + tau
        if anticlockwise:
            self.cr.arc_negative(x, y, radius, start, end)
        else:
            self.cr.arc(x, y, radius, start, end)

    def ellipse_arc(self, cx, cy, rx, ry, rotation, start, sweep) -> None:
        """Arc of a rotated ellipse, drawn as a scaled unit-circle arc."""
        if not is_finite(cx, cy, rx, ry, rotation, start, sweep) or self._state.degenerate:
            return
        if rx <= 0 or ry <= 0:
            return
        saved = self.cr.get_matrix()
        self.cr.translate(cx, cy)
        self.cr.rotate(rotation)
        self.cr.scale(rx, ry)
        if sweep >= 0:
            self.cr.arc(0, 0, 1, start, start + sweep)
        else:
            self.cr.arc_negative(0, 0, 1, start, start + sweep)
        self.cr.set_matrix(saved)

    def rect(self, x, y, w, h) -> None:
        if is_finite(x, y, w, h) and not self._state.degenerate:
            self.cr.rectangle(x, y, w, h)

    # ── painting ──

    def _set_source(self, paint: Paint) -> float:
        """Install ``paint`` as the cairo source. Returns the alpha still to apply."""
        if isinstance(paint, cairocffi.Pattern):
            self.cr.set_source(paint)
            return self._state.global_alpha
        color = parse_color(paint) or (0.0, 0.0, 0.0, 0.0)
        self.cr.set_source_rgba(color[0], color[1], color[2], color[3] * self._state.global_alpha)
        return 1.0

    @staticmethod
    def _is_invisible(paint: Paint) -> bool:
        if isinstance(paint, cairocffi.Pattern):
            return False
        color = parse_color(paint)
        return color is None or color[3] == 0

    def _paint_with(self, paint: Paint, draw) -> None:
        self.cr.set_operator(_OPERATORS[self._state.composite_operation])
        alpha = self._set_source(paint)
        if alpha < 1.0:
            self.cr.push_group()
            self.cr.set_source(self.cr.get_source())
            draw()
            self.cr.pop_group_to_source()
            self.cr.paint_with_alpha(alpha)
        else:
            draw()

    def fill(self, fill_rule: Optional[str] = None) -> None:
        paint = self._state.fill_style
        if self._state.degenerate or (
            self._is_invisible(paint) and self._state.composite_operation == "source-over"
        ):
            return
        self.cr.set_fill_rule(
            cairocffi.FILL_RULE_EVEN_ODD if fill_rule == "evenodd" else cairocffi.FILL_RULE_WINDING
        )
        self._paint_with(paint, self.cr.fill_preserve)

    def stroke(self) -> None:
        paint = self._state.stroke_style
        if self._state.degenerate or self._is_invisible(paint):
            return
        self._apply_stroke_params()
        self._paint_with(paint, self.cr.stroke_preserve)

    def _apply_stroke_params(self) -> None:
        self.cr.set_line_width(self._state.line_width)
        self.cr.set_line_cap(_LINE_CAPS[self._state.line_cap])
        self.cr.set_line_join(_LINE_JOINS[self._state.line_join])
        self.cr.set_miter_limit(self._state.miter_limit)
        dash = self._state.line_dash
        if dash and sum(dash) > 0:
            self.cr.set_dash(dash, self._state.line_dash_offset)
        else:
            self.cr.set_dash([])

    def clip(self, fill_rule: Optional[str] = None) -> None:
        if self._state.degenerate:
            return
        self.cr.set_fill_rule(
            cairocffi.FILL_RULE_EVEN_ODD if fill_rule == "evenodd" else cairocffi.FILL_RULE_WINDING
        )
        self.cr.clip_preserve()

    def is_point_in_path(self, x: float, y: float) -> bool:
        """Hit-test a device-space point against the current path."""
        if self._state.degenerate or not is_finite(x, y):
            return False
        ux, uy = self.cr.device_to_user(x, y)
        return bool(self.cr.in_fill(ux, uy))

    @contextlib.contextmanager
    def _path_preserved(self):
        path = self.cr.copy_path()
        self.cr.new_path()
        try:
            yield
        finally:
            self.cr.new_path()
            self.cr.append_path(path)

    def fill_rect(self, x: float, y: float, w: float, h: float) -> None:
        if not is_finite(x, y, w, h) or self._state.degenerate:
            return
        with self._path_preserved():
            self.cr.rectangle(x, y, w, h)
            self.cr.set_fill_rule(cairocffi.FILL_RULE_WINDING)
            self._paint_with(self._state.fill_style, self.cr.fill)

    def clear_rect(self, x: float, y: float, w: float, h: float) -> None:
        if not is_finite(x, y, w, h) or self._state.degenerate:
            return
        with self._path_preserved():
            self.cr.save()
            self.cr.set_operator(cairocffi.OPERATOR_CLEAR)
            self.cr.rectangle(x, y, w, h)
            self.cr.fill()
            self.cr.restore()

    def draw_image(self, surface: cairocffi.ImageSurface, dx: float = 0.0, dy: float = 0.0) -> None:
        if not is_finite(dx, dy) or self._state.degenerate:
            return
        with self._path_preserved():
            self.cr.save()
            self.cr.set_operator(_OPERATORS[self._state.composite_operation])
            self.cr.set_source_surface(surface, dx, dy)
            self.cr.rectangle(dx, dy, surface.get_width(), surface.get_height())
            self.cr.clip()
            self.cr.paint_with_alpha(self._state.global_alpha)
            self.cr.restore()

    def draw_image_region(self, surface, sx, sy, sw, sh, dx, dy, dw, dh) -> None:
        if not is_finite(sx, sy, sw, sh, dx, dy, dw, dh) or self._state.degenerate:
            return
        if sw <= 0 or sh <= 0 or dw <= 0 or dh <= 0:
            return
        with self._path_preserved():
            self.cr.save()
            self.cr.translate(dx, dy)
            self.cr.scale(dw / sw, dh / sh)
            self.cr.set_source_surface(surface, -sx, -sy)
            self.cr.rectangle(0, 0, sw, sh)
            self.cr.clip()
            self.cr.paint_with_alpha(self._state.global_alpha)
            self.cr.restore()

    # ── gradients / patterns ──

    @staticmethod
    def create_linear_gradient(x1, y1, x2, y2) -> cairocffi.LinearGradient:
        return cairocffi.LinearGradient(x1, y1, x2, y2)

    @staticmethod
    def create_radial_gradient(x0, y0, r0, x1, y1, r1) -> cairocffi.RadialGradient:
        return cairocffi.RadialGradient(x0, y0, r0, x1, y1, r1)

    @staticmethod
    def add_color_stop(gradient: cairocffi.Gradient, offset: float, color: str) -> None:
        rgba = parse_color(color)
        if rgba is None:
            logger.debug("Ignoring stop with invalid colour %r", color)
            return
        gradient.add_color_stop_rgba(offset, *rgba)

    @staticmethod
    def create_pattern(canvas: "Canvas", repetition: str = "repeat") -> cairocffi.SurfacePattern:
        pattern = cairocffi.SurfacePattern(canvas.surface)
        pattern.set_extend(cairocffi.EXTEND_REPEAT if repetition == "repeat" else cairocffi.EXTEND_NONE)
        return pattern

    # ── text ──

    def _select_font(self) -> None:
        font = parse_font(self._state.font)
        family = font.get("font_family", "sans-serif").split(",")[0].strip("'\" ") or "sans-serif"
        size = font.get("font_size", "12px")
        px = parse_float(size)
        if size.endswith("pt"):
            px = px * 96.0 / 72.0
        if not math.isfinite(px) or px <= 0:
            px = 12.0
        slant = (
            cairocffi.FONT_SLANT_ITALIC
            if font.get("font_style") in ("italic", "oblique")
            else cairocffi.FONT_SLANT_NORMAL
        )
        weight = (
            cairocffi.FONT_WEIGHT_BOLD
            if font.get("font_weight") in _BOLD_WEIGHTS
            else cairocffi.FONT_WEIGHT_NORMAL
        )
        self.cr.select_font_face(family, slant, weight)
        self.cr.set_font_size(px)

    def _baseline_shift(self) -> float:
        ascent, descent = self.cr.font_extents()[:2]
        baseline = self._state.text_baseline
        if baseline == "top":
            return ascent
        if baseline == "hanging":
            return ascent * 0.8
        if baseline == "middle":
            return (ascent - descent) / 2.0
        if baseline == "bottom":
            return -descent
        return 0.0

    def measure_text(self, text: str) -> float:
        self._select_font()
        return self.cr.text_extents(text)[4]

    def fill_text(self, text: str, x: float, y: float) -> None:
        if not text or not is_finite(x, y) or self._state.degenerate:
            return
        if self._is_invisible(self._state.fill_style):
            return
        self._select_font()
        with self._path_preserved():
            self.cr.move_to(x, y + self._baseline_shift())
            self.cr.text_path(text)
            self.cr.set_fill_rule(cairocffi.FILL_RULE_WINDING)
            self._paint_with(self._state.fill_style, self.cr.fill)

    def stroke_text(self, text: str, x: float, y: float) -> None:
        if not text or not is_finite(x, y) or self._state.degenerate:
            return
        if self._is_invisible(self._state.stroke_style):
            return
        self._select_font()
        with self._path_preserved():
            self.cr.move_to(x, y + self._baseline_shift())
            self.cr.text_path(text)
            self._apply_stroke_params()
            self._paint_with(self._state.stroke_style, self.cr.stroke)


class Canvas:
    """An ARGB32 raster surface plus the painter currently drawing on it."""

    def __init__(
        self,
        width: float = DEFAULT_CANVAS_WIDTH,
        height: float = DEFAULT_CANVAS_HEIGHT,
        max_virtual_pixels: int = DEFAULT_MAX_VIRTUAL_PIXELS,
    ) -> None:
        self.max_virtual_pixels = max_virtual_pixels
        self.cursor = ""
        self._painter: Optional[Painter] = None
        self.width = 0
        self.height = 0
        self.surface: cairocffi.ImageSurface
        self.resize(width, height)

    def _clamp(self, value: float) -> int:
        value = parse_float(value)
        if not math.isfinite(value):
            return 1
        return max(1, min(int(value), self.max_virtual_pixels))

    def resize(self, width: float, height: float) -> None:
        """Replace the surface. Like a canvas element, resizing clears it."""
        self.width = self._clamp(width)
        self.height = self._clamp(height)
        self.surface = cairocffi.ImageSurface(cairocffi.FORMAT_ARGB32, self.width, self.height)
        self._painter = None

    @property
    def painter(self) -> Painter:
        if self._painter is None:
            self._painter = Painter(self)
        return self._painter

    def to_png(self, target=None):
        """Write PNG to a path or file object, or return the bytes when ``target`` is None."""
        self.surface.flush()
        return self.surface.write_to_png(target)

    def pixels(self):
        return rasterizer.surface_to_rgba(self.surface)

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        r, g, b, a = self.pixels()[int(y), int(x)]
        return (int(r), int(g), int(b), int(a))
