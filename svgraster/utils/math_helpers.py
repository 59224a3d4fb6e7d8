"""Math helpers — float parsing, vector angles. No engine imports."""

from __future__ import annotations

import math
import re

# Leading float in the style of JavaScript's parseFloat: optional sign,
# digits with optional fraction (or a bare fraction), optional exponent.
_LEADING_FLOAT_RE = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")

_WHITESPACE_RE = re.compile(r"[\s\r\t\n]+")


def parse_float(value: object) -> float:
    """Parse the leading float of ``value``. NaN when nothing parses."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return math.nan
    match = _LEADING_FLOAT_RE.match(str(value))
    if not match:
        return math.nan
    return float(match.group(1))


def compress_spaces(s: str) -> str:
    return _WHITESPACE_RE.sub(" ", s)


def to_number_array(s: object) -> list[float]:
    """Split a comma/space separated list into floats (NaN for junk)."""
    text = compress_spaces(str(s if s is not None else "").replace(",", " ")).strip()
    return [parse_float(part) for part in text.split(" ")]


def is_finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def magnitude(v: tuple[float, float]) -> float:
    return math.sqrt(v[0] ** 2 + v[1] ** 2)


def vector_ratio(u: tuple[float, float], v: tuple[float, float]) -> float:
    """Cosine of the angle between two vectors. NaN for a zero vector."""
    denom = magnitude(u) * magnitude(v)
    if denom == 0 or math.isnan(denom):
        return math.nan
    return (u[0] * v[0] + u[1] * v[1]) / denom


def vector_angle(u: tuple[float, float], v: tuple[float, float]) -> float:
    """Signed angle from u to v (radians), sign from the cross product."""
    ratio = vector_ratio(u, v)
    if math.isnan(ratio):
        return math.nan
    ratio = min(1.0, max(-1.0, ratio))
    sign = -1.0 if u[0] * v[1] < u[1] * v[0] else 1.0
    return sign * math.acos(ratio)


def format_number(n: float) -> str:
    """Shortest string that round-trips ``n``; integral values lose the ``.0``."""
    if math.isfinite(n) and float(n).is_integer():
        return str(int(n))
    return repr(float(n))
