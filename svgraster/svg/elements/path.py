"""<path> — path-data tokenizer, command state machine, exact bounding boxes.

The tokenizer normalizes separators so ``d`` splits on single spaces; the
parser walks the tokens once per ``path()`` call, emitting geometry into a
painter (optional), accumulating a tight bounding box and recording marker
positions with their tangent angles.
"""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING, Any, Optional

from svgraster.engine.registry import element
from svgraster.svg.elements.base import Marker, PathElement
from svgraster.utils.geometry import BoundingBox, Point
from svgraster.utils.math_helpers import compress_spaces, parse_float, vector_angle, vector_ratio

if TYPE_CHECKING:
    from svgraster.engine.context import RenderSession
    from svgraster.engine.painter import Painter

logger = logging.getLogger(__name__)

_COMMANDS = "MmZzLlHhVvCcSsQqTtAa"
_COMMAND_SUFFIX_RE = re.compile(rf"([{_COMMANDS}])([^\s])")
_COMMAND_PREFIX_RE = re.compile(rf"([^\s])([{_COMMANDS}])")
_SIGN_RE = re.compile(r"([0-9])([+\-])")
_DOUBLE_DOT_RE = re.compile(r"(\.[0-9]*)(\.)")
_ARC_FLAGS_RE = re.compile(r"([Aa](\s+[0-9]+){3})\s+([01])\s*([01])")
_COMMAND_TOKEN_RE = re.compile(r"^[A-Za-z]$")

_RELATIVE = set("mlhvcsqtaz")
_CUBICS = set("cCsS")
_QUADRATICS = set("qQtT")


def tokenize(d: str) -> list[str]:
    """Normalize path data and split it into command and number tokens."""
    d = d.replace(",", " ")
    # a match can end where the next one starts, so these run twice
    for _ in range(2):
        d = _COMMAND_SUFFIX_RE.sub(r"\1 \2", d)
    d = _COMMAND_PREFIX_RE.sub(r"\1 \2", d)
    d = _SIGN_RE.sub(r"\1 \2", d)
    for _ in range(2):
        d = _DOUBLE_DOT_RE.sub(r"\1 \2", d)
    d = _ARC_FLAGS_RE.sub(r"\1 \3 \4 ", d)
    return compress_spaces(d).strip().split(" ")


class PathParser:
    """Cursor over path tokens plus the drawing state of the current command."""

    def __init__(self, d: str) -> None:
        self.tokens = tokenize(d)
        self.reset()

    def reset(self) -> None:
        self.i = -1
        self.command = ""
        self.previous_command = ""
        self.start = Point(0.0, 0.0)
        self.control = Point(0.0, 0.0)
        self.current = Point(0.0, 0.0)
        self.points: list[Point] = []
        self.angles: list[Optional[float]] = []

    def is_end(self) -> bool:
        return self.i >= len(self.tokens) - 1

    def is_command_or_end(self) -> bool:
        if self.is_end():
            return True
        return _COMMAND_TOKEN_RE.match(self.tokens[self.i + 1]) is not None

    def is_relative_command(self) -> bool:
        return self.command in _RELATIVE

    def get_token(self) -> str:
        self.i += 1
        if self.i >= len(self.tokens):
            return ""
        return self.tokens[self.i]

    def get_scalar(self) -> float:
        return parse_float(self.get_token())

    def next_command(self) -> None:
        self.previous_command = self.command
        self.command = self.get_token()

    def get_point(self) -> Point:
        p = Point(self.get_scalar(), self.get_scalar())
        return self.make_absolute(p)

    def get_as_control_point(self) -> Point:
        p = self.get_point()
        self.control = p
        return p

    def get_as_current_point(self) -> Point:
        p = self.get_point()
        self.current = p
        return p

    def get_reflected_control_point(self, family: set[str]) -> Point:
        """Mirror the last control point through the current point.

        Only a previous command from ``family`` leaves a control point to
        mirror; otherwise the current point is returned.
        """
        if self.previous_command not in family:
            return self.current
        return Point(2 * self.current.x - self.control.x, 2 * self.current.y - self.control.y)

    def make_absolute(self, p: Point) -> Point:
        if self.is_relative_command():
            p.x += self.current.x
            p.y += self.current.y
        return p

    def add_marker(self, p: Point, from_: Optional[Point] = None, prior_to: Optional[Point] = None) -> None:
        # the previous angle was unknown until this segment arrived
        if prior_to is not None and self.angles and self.angles[-1] is None:
            self.angles[-1] = self.points[-1].angle_to(prior_to)
        self.add_marker_angle(p, None if from_ is None else from_.angle_to(p))

    def add_marker_angle(self, p: Point, angle: Optional[float]) -> None:
        self.points.append(p)
        self.angles.append(angle)

    def marker_angles(self) -> list[Optional[float]]:
        """Angles with unknown entries back-filled from the next known one."""
        angles = list(self.angles)
        for i, angle in enumerate(angles):
            if angle is None:
                angles[i] = next((a for a in angles[i + 1 :] if a is not None), None)
        return angles


def _arc_center(
    curr: Point, cp: Point, rx: float, ry: float, phi: float, large_arc: float, sweep: float
) -> tuple[Point, float, float, float, float]:
    """Endpoint → center parameterization. Returns (center, rx, ry, theta1, dtheta)."""
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    x1p = cos_phi * (curr.x - cp.x) / 2.0 + sin_phi * (curr.y - cp.y) / 2.0
    y1p = -sin_phi * (curr.x - cp.x) / 2.0 + cos_phi * (curr.y - cp.y) / 2.0

    # scale up radii too small to reach the endpoint
    lam = x1p**2 / rx**2 + y1p**2 / ry**2
    if lam > 1:
        rx *= math.sqrt(lam)
        ry *= math.sqrt(lam)

    num = rx**2 * ry**2 - rx**2 * y1p**2 - ry**2 * x1p**2
    den = rx**2 * y1p**2 + ry**2 * x1p**2
    s = 0.0
    if den != 0 and num / den >= 0:
        s = (-1.0 if large_arc == sweep else 1.0) * math.sqrt(num / den)
    cxp = s * rx * y1p / ry
    cyp = s * -ry * x1p / rx
    center = Point(
        (curr.x + cp.x) / 2.0 + cos_phi * cxp - sin_phi * cyp,
        (curr.y + cp.y) / 2.0 + sin_phi * cxp + cos_phi * cyp,
    )

    u = ((x1p - cxp) / rx, (y1p - cyp) / ry)
    v = ((-x1p - cxp) / rx, (-y1p - cyp) / ry)
    theta1 = vector_angle((1.0, 0.0), u)
    dtheta = vector_angle(u, v)
    ratio = vector_ratio(u, v)
    if ratio <= -1:
        dtheta = math.pi
    if ratio >= 1:
        dtheta = 0.0
    if math.isnan(theta1):
        theta1 = 0.0
    if math.isnan(dtheta):
        dtheta = 0.0

    if not sweep and dtheta > 0:
        dtheta -= 2 * math.pi
    elif sweep and dtheta < 0:
        dtheta += 2 * math.pi
    return center, rx, ry, theta1, dtheta


def _ellipse_point(center: Point, rx: float, ry: float, phi: float, theta: float) -> Point:
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    return Point(
        center.x + rx * cos_phi * math.cos(theta) - ry * sin_phi * math.sin(theta),
        center.y + rx * sin_phi * math.cos(theta) + ry * cos_phi * math.sin(theta),
    )


def _ellipse_tangent(rx: float, ry: float, phi: float, theta: float, direction: float) -> float:
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    dx = -rx * math.sin(theta) * cos_phi - ry * math.cos(theta) * sin_phi
    dy = -rx * math.sin(theta) * sin_phi + ry * math.cos(theta) * cos_phi
    return math.atan2(direction * dy, direction * dx)


@element("path")
class PathDataElement(PathElement):
    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        self._parser: Optional[PathParser] = None
        self._parsed_d: Any = None

    @property
    def parser(self) -> PathParser:
        d = self.attribute("d").value
        if self._parser is None or d != self._parsed_d:
            self._parser = PathParser(str(d or ""))
            self._parsed_d = d
        return self._parser

    def path(self, painter: Optional["Painter"] = None, recording: bool = False) -> BoundingBox:
        pp = self.parser
        pp.reset()

        bb = BoundingBox()
        if painter is not None and not recording:
            painter.begin_path()
        while not pp.is_end():
            pp.next_command()
            command = pp.command
            if command in ("M", "m"):
                p = pp.get_as_current_point()
                pp.add_marker(p)
                bb.add_point(p.x, p.y)
                if painter is not None:
                    painter.move_to(p.x, p.y)
                pp.start = pp.current
                while not pp.is_command_or_end():
                    p = pp.get_as_current_point()
                    pp.add_marker(p, pp.start)
                    bb.add_point(p.x, p.y)
                    if painter is not None:
                        painter.line_to(p.x, p.y)
            elif command in ("L", "l"):
                while not pp.is_command_or_end():
                    c = pp.current
                    p = pp.get_as_current_point()
                    pp.add_marker(p, c)
                    bb.add_point(p.x, p.y)
                    if painter is not None:
                        painter.line_to(p.x, p.y)
            elif command in ("H", "h"):
                while not pp.is_command_or_end():
                    base = pp.current.x if pp.is_relative_command() else 0.0
                    new_p = Point(base + pp.get_scalar(), pp.current.y)
                    pp.add_marker(new_p, pp.current)
                    pp.current = new_p
                    bb.add_point(new_p.x, new_p.y)
                    if painter is not None:
                        painter.line_to(new_p.x, new_p.y)
            elif command in ("V", "v"):
                while not pp.is_command_or_end():
                    base = pp.current.y if pp.is_relative_command() else 0.0
                    new_p = Point(pp.current.x, base + pp.get_scalar())
                    pp.add_marker(new_p, pp.current)
                    pp.current = new_p
                    bb.add_point(new_p.x, new_p.y)
                    if painter is not None:
                        painter.line_to(new_p.x, new_p.y)
            elif command in ("C", "c"):
                while not pp.is_command_or_end():
                    curr = pp.current
                    p1 = pp.get_point()
                    cntrl = pp.get_as_control_point()
                    cp = pp.get_as_current_point()
                    pp.add_marker(cp, cntrl, p1)
                    bb.add_bezier_curve(curr.x, curr.y, p1.x, p1.y, cntrl.x, cntrl.y, cp.x, cp.y)
                    if painter is not None:
                        painter.bezier_curve_to(p1.x, p1.y, cntrl.x, cntrl.y, cp.x, cp.y)
            elif command in ("S", "s"):
                while not pp.is_command_or_end():
                    curr = pp.current
                    p1 = pp.get_reflected_control_point(_CUBICS)
                    cntrl = pp.get_as_control_point()
                    cp = pp.get_as_current_point()
                    pp.add_marker(cp, cntrl, p1)
                    bb.add_bezier_curve(curr.x, curr.y, p1.x, p1.y, cntrl.x, cntrl.y, cp.x, cp.y)
                    if painter is not None:
                        painter.bezier_curve_to(p1.x, p1.y, cntrl.x, cntrl.y, cp.x, cp.y)
                    # implicit repeats reflect off the segment just drawn
                    pp.previous_command = command
            elif command in ("Q", "q"):
                while not pp.is_command_or_end():
                    curr = pp.current
                    cntrl = pp.get_as_control_point()
                    cp = pp.get_as_current_point()
                    pp.add_marker(cp, cntrl, cntrl)
                    bb.add_quadratic_curve(curr.x, curr.y, cntrl.x, cntrl.y, cp.x, cp.y)
                    if painter is not None:
                        painter.quadratic_curve_to(cntrl.x, cntrl.y, cp.x, cp.y)
            elif command in ("T", "t"):
                while not pp.is_command_or_end():
                    curr = pp.current
                    cntrl = pp.get_reflected_control_point(_QUADRATICS)
                    pp.control = cntrl
                    cp = pp.get_as_current_point()
                    pp.add_marker(cp, cntrl, cntrl)
                    bb.add_quadratic_curve(curr.x, curr.y, cntrl.x, cntrl.y, cp.x, cp.y)
                    if painter is not None:
                        painter.quadratic_curve_to(cntrl.x, cntrl.y, cp.x, cp.y)
                    pp.previous_command = command
            elif command in ("A", "a"):
                while not pp.is_command_or_end():
                    self._arc(pp, bb, painter)
            elif command in ("Z", "z"):
                if painter is not None:
                    painter.close_path()
                pp.current = pp.start

        return bb

    @staticmethod
    def _arc(pp: PathParser, bb: BoundingBox, painter: Optional["Painter"]) -> None:
        curr = pp.current
        rx = abs(pp.get_scalar())
        ry = abs(pp.get_scalar())
        phi = pp.get_scalar() * (math.pi / 180.0)
        large_arc = pp.get_scalar()
        sweep = pp.get_scalar()
        cp = pp.get_as_current_point()

        if rx == 0 or ry == 0 or math.isnan(rx) or math.isnan(ry) or math.isnan(phi):
            pp.add_marker(cp, curr)
            bb.add_point(cp.x, cp.y)
            if painter is not None:
                painter.line_to(cp.x, cp.y)
            return

        center, rx, ry, theta1, dtheta = _arc_center(curr, cp, rx, ry, phi, large_arc, sweep)

        direction = 1.0 if dtheta >= 0 else -1.0
        half = theta1 + dtheta / 2.0
        pp.add_marker_angle(_ellipse_point(center, rx, ry, phi, half), _ellipse_tangent(rx, ry, phi, half, direction))
        pp.add_marker_angle(cp, _ellipse_tangent(rx, ry, phi, theta1 + dtheta, direction))

        bb.add_arc(center.x, center.y, rx, ry, phi, theta1, dtheta)
        if painter is not None:
            painter.ellipse_arc(center.x, center.y, rx, ry, phi, theta1, dtheta)

    def markers(self) -> list[Marker]:
        pp = self.parser
        return list(zip(pp.points, pp.marker_angles()))
