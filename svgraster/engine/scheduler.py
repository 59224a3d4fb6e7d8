"""Render scheduler — draws a document and drives its animation / event loop.

One scheduler owns one document on one canvas. ``draw()`` renders a frame;
``tick()`` decides whether a redraw is due (images just loaded, pointer
events queued, an animation changed, or ``force_redraw``) and dispatches
pointer events after it; ``run()`` ticks at the configured framerate from an
asyncio loop until ``stop()``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Optional

from svgraster.engine.config import RenderOptions
from svgraster.engine.events import PointerEvent
from svgraster.engine.painter import Canvas
from svgraster.utils.math_helpers import format_number, to_number_array

if TYPE_CHECKING:
    from svgraster.engine.painter import Painter
    from svgraster.svg.parser import Document, Source

logger = logging.getLogger(__name__)


class RenderScheduler:
    def __init__(self, document: "Document", canvas: Canvas, options: Optional[RenderOptions] = None) -> None:
        self.document = document
        self.session = document.session
        self.canvas = canvas
        if options is not None:
            self.session.options = options
        self.options = self.session.options

        self.last_dispatched: list[PointerEvent] = []
        self._first_render = True
        self._waiting_for_images = True
        self._running = False
        # the root's own transform, before offset / scale are appended
        self._base_transform: Optional[str] = None
        self._fit: Optional[str] = None

    # ── input ──

    def on_click(self, x: float, y: float) -> None:
        if not self.options.ignore_mouse:
            self.session.mouse.on_click(x, y)

    def on_mousemove(self, x: float, y: float) -> None:
        if not self.options.ignore_mouse:
            self.session.mouse.on_mousemove(x, y)

    # ── drawing ──

    def _root_size(self, name: str, axis: str) -> Optional[float]:
        prop = self.document.root.style(name)
        return prop.to_pixels(axis) if prop.has_value() else None

    def _fit_transform(self) -> str:
        """Translate / scale appended to the root transform. Computed once."""
        if self._fit is not None:
            return self._fit
        options = self.options
        root = self.document.root
        parts = []
        if options.offset_x is not None or options.offset_y is not None:
            parts.append(f"translate({format_number(options.offset_x or 0)},{format_number(options.offset_y or 0)})")

        if options.scale_width is not None or options.scale_height is not None:
            view_box = to_number_array(root.attribute("viewBox").value)
            has_view_box = len(view_box) >= 4 and all(n == n for n in view_box[:4])
            width = height = None
            if root.attribute("width").has_value():
                width = root.attribute("width").to_pixels("x")
            elif has_view_box:
                width = view_box[2]
            if root.attribute("height").has_value():
                height = root.attribute("height").to_pixels("y")
            elif has_view_box:
                height = view_box[3]

            x_ratio = y_ratio = None
            if options.scale_width is not None and width and width > 0:
                x_ratio = width / options.scale_width
            if options.scale_height is not None and height and height > 0:
                y_ratio = height / options.scale_height
            if x_ratio is None:
                x_ratio = y_ratio
            if y_ratio is None:
                y_ratio = x_ratio

            if x_ratio and y_ratio:
                # a viewBox already maps the content onto the new size
                if not has_view_box:
                    parts.append(f"scale({format_number(1.0 / x_ratio)},{format_number(1.0 / y_ratio)})")
                scaled_width = options.scale_width if options.scale_width is not None else width / x_ratio
                scaled_height = options.scale_height if options.scale_height is not None else height / y_ratio
                root.set_attribute("width", scaled_width)
                root.set_attribute("height", scaled_height)
                root.styles.pop("width", None)
                root.styles.pop("height", None)
            else:
                logger.debug("Cannot scale a document without width, height or viewBox")

        self._fit = " ".join(parts)
        return self._fit

    def _apply_fit(self) -> None:
        fit = self._fit_transform()
        if not fit:
            return
        transform = self.document.root.style("transform", create=True, skip_ancestors=True)
        if self._base_transform is None:
            self._base_transform = str(transform.value or "")
        transform.value = f"{self._base_transform} {fit}".strip()

    def draw(self, painter: Optional["Painter"] = None) -> None:
        """Render one frame onto the canvas, or onto ``painter`` when given."""
        session = self.session
        options = self.options
        canvas = self.canvas
        root = self.document.root

        session.viewport.clear()
        session.viewport.set_current(canvas.width, canvas.height)
        self._apply_fit()

        if not options.ignore_dimensions:
            width = self._root_size("width", "x")
            height = self._root_size("height", "y")
            if (width is not None and width != canvas.width) or (height is not None and height != canvas.height):
                canvas.resize(width if width is not None else canvas.width, height if height is not None else canvas.height)

        view_width, view_height = canvas.width, canvas.height
        if options.ignore_dimensions:
            width = self._root_size("width", "x")
            height = self._root_size("height", "y")
            if width is not None and height is not None:
                view_width, view_height = width, height
        session.viewport.set_current(view_width, view_height)

        painter = painter or canvas.painter
        if not options.ignore_clear:
            painter.clear_rect(0, 0, view_width, view_height)

        with session.active_painter(painter):
            root.render(painter)

        if self._first_render:
            self._first_render = False
            if options.render_callback is not None:
                options.render_callback()

    def start(self) -> bool:
        """Draw the first frame if nothing is still loading."""
        if self.session.images_loaded():
            self._waiting_for_images = False
            self.draw()
            return True
        return False

    def tick(self) -> bool:
        """One scheduler step. Returns whether a frame was drawn."""
        from svgraster.svg.parser import register_loaded_fonts

        session = self.session
        options = self.options
        need_update = False

        if session.pending_fonts and register_loaded_fonts(session):
            need_update = True

        if self._waiting_for_images and session.images_loaded():
            self._waiting_for_images = False
            need_update = True

        if not options.ignore_mouse:
            need_update = need_update or session.mouse.has_events()

        if not options.ignore_animation:
            interval_ms = options.frame_interval * 1000.0
            for animation in session.animations:
                # every animation advances, whatever the others report
                need_update = animation.update(interval_ms) or need_update

        if options.force_redraw is not None and options.force_redraw():
            need_update = True

        if need_update:
            self.draw()
            self.last_dispatched = session.mouse.run_events(session)
            self.canvas.cursor = session.cursor
        return need_update

    async def run(self, frames: Optional[int] = None) -> None:
        """Tick at the framerate until ``stop()``, or for ``frames`` ticks."""
        self._running = True
        self.start()
        count = 0
        while self._running and (frames is None or count < frames):
            await asyncio.sleep(self.options.frame_interval)
            self.tick()
            count += 1
        self._running = False

    def stop(self) -> None:
        self._running = False


def render(
    source: "Source",
    width: Optional[float] = None,
    height: Optional[float] = None,
    options: Optional[RenderOptions] = None,
    canvas: Optional[Canvas] = None,
) -> Canvas:
    """Load ``source`` and draw its first frame once every image has loaded.

    ``width`` / ``height`` scale the document to that size.
    """
    from svgraster.svg.parser import load_document

    options = replace(options) if options is not None else RenderOptions()
    if width is not None:
        options.scale_width = width
    if height is not None:
        options.scale_height = height

    document = load_document(source, options)
    try:
        session = document.session
        if canvas is None:
            canvas = Canvas(max_virtual_pixels=session.max_virtual_pixels)
        scheduler = RenderScheduler(document, canvas)
        if not session.wait_for_images():
            logger.warning("Rendering before every resource loaded")
        if session.pending_fonts:
            from svgraster.svg.parser import register_loaded_fonts

            register_loaded_fonts(session)
        scheduler.draw()
    finally:
        document.close()
    return canvas
