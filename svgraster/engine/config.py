"""Render options — per-render switches for the scheduler."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Optional

from svgraster.config import settings

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass
class RenderOptions:
    """Controls how a document is drawn and how often it is redrawn."""

    # Skip pointer hit-testing and event dispatch
    ignore_mouse: bool = False
    # Do not tick animations
    ignore_animation: bool = False
    # Keep the canvas size instead of taking the document's width/height
    ignore_dimensions: bool = False
    # Draw over existing pixels
    ignore_clear: bool = False

    # Draw offset in canvas pixels
    offset_x: Optional[float] = None
    offset_y: Optional[float] = None
    # Target size; the document is scaled to fit
    scale_width: Optional[float] = None
    scale_height: Optional[float] = None

    # Called once after the first frame
    render_callback: Optional[Callable[[], None]] = None
    # Polled every tick; True forces a redraw
    force_redraw: Optional[Callable[[], bool]] = None
    # Called with the href when an <a> is clicked
    link_handler: Optional[Callable[[str], None]] = None

    # http(s) loads are anonymous cross-origin requests that need CORS access
    use_cors: bool = False
    log: bool = False
    framerate: float = field(default_factory=lambda: settings.svgraster_framerate)
    base_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "RenderOptions":
        """Build options from snake_case or camelCase keys. Unknown keys are dropped."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = _CAMEL_RE.sub("_", key).lower()
            if name in known:
                kwargs[name] = value
        return cls(**kwargs)

    @property
    def frame_interval(self) -> float:
        """Seconds between ticks."""
        if not self.framerate or self.framerate <= 0:
            return 1.0 / 30.0
        return 1.0 / self.framerate
