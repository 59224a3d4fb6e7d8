"""SMIL-style animation: animate, animateColor, animateTransform.

Each animation is registered with the session when built and updated by the
scheduler every tick. It tweens its parent's attribute (or CSS property)
between ``from``/``to`` or across a ``values`` list. Past its end it loops,
freezes or restores the initial value, depending on repeatCount and fill.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Optional

from svgraster.engine.registry import element
from svgraster.svg.elements.base import Element
from svgraster.svg.paint import parse_color, to_rgb_ints
from svgraster.svg.properties import EMPTY_PROPERTY, Property
from svgraster.utils.math_helpers import format_number, to_number_array

if TYPE_CHECKING:
    from svgraster.engine.context import RenderSession

logger = logging.getLogger(__name__)


class Progress:
    __slots__ = ("value", "from_", "to")

    def __init__(self, value: float, from_: Property, to: Property) -> None:
        self.value = value
        self.from_ = from_
        self.to = to


class AnimationElement(Element):
    def __init__(self, session: "RenderSession", node: Any = None) -> None:
        super().__init__(session, node)
        session.animations.append(self)

        self.duration = 0.0
        self.begin = self.attribute("begin").to_milliseconds()
        self.max_duration = self.begin + self.attribute("dur").to_milliseconds()

        self.initial_value: Optional[Any] = None
        self.initial_units = ""
        self.frozen = False
        self.removed = False

        self.from_ = self.attribute("from")
        self.to = self.attribute("to")
        values = self.attribute("values")
        self.values: list[str] = [v.strip() for v in str(values.value).split(";")] if values.has_value() else []

    def target_property(self) -> Property:
        if self.parent is None:
            return EMPTY_PROPERTY
        name = self.attribute("attributeName").value
        if self.attribute("attributeType").value == "CSS":
            # own style entry, so an inherited ancestor value is never mutated
            return self.parent.style(name, create=True, skip_ancestors=True)
        return self.parent.attribute(name, create=True)

    def calc_value(self) -> str:
        return ""

    def update(self, delta: float) -> bool:
        """Advance by ``delta`` milliseconds. Returns whether the target changed."""
        if self.parent is None:
            return False
        prop = self.target_property()
        if self.initial_value is None:
            self.initial_value = prop.value
            self.initial_units = prop.units()

        if self.duration > self.max_duration:
            fill = self.attribute("fill").value_or_default("remove")
            if "indefinite" in (self.attribute("repeatCount").value, self.attribute("repeatDur").value):
                self.duration = 0.0
            elif fill == "freeze" and not self.frozen:
                self.frozen = True
                self.parent.animation_frozen = True
                self.parent.animation_frozen_value = prop.value
            elif fill == "remove" and not self.removed:
                self.removed = True
                prop.value = self.parent.animation_frozen_value if self.parent.animation_frozen else self.initial_value
                return True
            return False

        self.duration += delta

        if self.begin < self.duration:
            value = self.calc_value()
            kind = self.attribute("type")
            if kind.has_value():
                value = f"{kind.value}({value})"
            prop.value = value
            return True
        return False

    def progress(self) -> Progress:
        """Fraction of the active interval covered, bracketed by keyframes if ``values`` is set."""
        span = self.max_duration - self.begin
        p = 1.0 if span <= 0 else (self.duration - self.begin) / span
        p = min(1.0, max(0.0, p))
        if not self.values:
            return Progress(p, self.from_, self.to)

        scaled = p * (len(self.values) - 1)
        lb = math.floor(scaled)
        ub = math.ceil(scaled)
        fraction = 0.0 if ub == lb else (scaled - lb) / (ub - lb)
        return Progress(
            fraction,
            Property("from", self.values[lb], self.session),
            Property("to", self.values[ub], self.session),
        )

    def render(self, painter: Any) -> None:
        pass


@element("animate")
class AnimateElement(AnimationElement):
    def calc_value(self) -> str:
        p = self.progress()
        start = p.from_.num_value()
        value = start + (p.to.num_value() - start) * p.value
        return format_number(value) + self.initial_units


@element("animateColor")
class AnimateColorElement(AnimationElement):
    def calc_value(self) -> str:
        p = self.progress()
        start = parse_color(p.from_.value)
        end = parse_color(p.to.value)
        if start is None or end is None:
            return self.attribute("from").value
        r1, g1, b1 = to_rgb_ints(start)
        r2, g2, b2 = to_rgb_ints(end)
        r = int(r1 + (r2 - r1) * p.value)
        g = int(g1 + (g2 - g1) * p.value)
        b = int(b1 + (b2 - b1) * p.value)
        return f"rgb({r},{g},{b})"


@element("animateTransform")
class AnimateTransformElement(AnimationElement):
    def calc_value(self) -> str:
        p = self.progress()
        start = to_number_array(p.from_.value)
        end = to_number_array(p.to.value)
        parts = []
        for i, a in enumerate(start):
            b = end[i] if i < len(end) else math.nan
            parts.append(format_number(a + (b - a) * p.value))
        return " ".join(parts)
