"""Pointer events — queued per frame, hit-tested while drawing, dispatched after."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from svgraster.engine.painter import Painter
    from svgraster.svg.elements.base import Element
    from svgraster.utils.geometry import BoundingBox

logger = logging.getLogger(__name__)

CLICK = "click"
MOUSEMOVE = "mousemove"


@dataclass
class PointerEvent:
    kind: str
    x: float
    y: float
    target: Optional[Any] = None


class Mouse:
    """Pending pointer events and the topmost element hit by each.

    Elements are drawn back to front, so the last hit recorded for an event
    during a frame is the topmost one.
    """

    def __init__(self) -> None:
        self.events: list[PointerEvent] = []

    def has_events(self) -> bool:
        return bool(self.events)

    def on_click(self, x: float, y: float) -> None:
        self.events.append(PointerEvent(CLICK, x, y))

    def on_mousemove(self, x: float, y: float) -> None:
        self.events.append(PointerEvent(MOUSEMOVE, x, y))

    def check_path(self, element: "Element", painter: "Painter") -> None:
        for event in self.events:
            if painter.is_point_in_path(event.x, event.y):
                event.target = element

    def check_bounding_box(self, element: "Element", bb: "BoundingBox") -> None:
        for event in self.events:
            if bb.is_point_in_box(event.x, event.y):
                event.target = element

    def run_events(self, session: Any) -> list[PointerEvent]:
        """Fire every event on its target and each ancestor, then clear the queue."""
        session.cursor = ""
        dispatched = self.events
        self.events = []
        for event in dispatched:
            node = event.target
            while node is not None:
                node.handle_event(event)
                node = node.parent
        if dispatched:
            logger.debug("Dispatched %d pointer events", len(dispatched))
        return dispatched
