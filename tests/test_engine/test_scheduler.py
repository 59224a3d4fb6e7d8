"""Tests for the render scheduler and the one-shot render helper."""

from __future__ import annotations

import asyncio

from svgraster.engine.config import RenderOptions
from svgraster.engine.painter import Canvas
from svgraster.engine.scheduler import RenderScheduler, render
from svgraster.svg.parser import load_document
from tests.conftest import ANIMATED_SVG, CLICKABLE_SVG, RED_RECT_SVG


def _scheduler(markup: str, **options) -> RenderScheduler:
    document = load_document(markup, RenderOptions(**options))
    return RenderScheduler(document, Canvas())


def test_start_draws_and_resizes():
    scheduler = _scheduler(RED_RECT_SVG)
    assert scheduler.start() is True
    assert (scheduler.canvas.width, scheduler.canvas.height) == (100, 100)
    assert scheduler.canvas.pixel(25, 25) == (255, 0, 0, 255)


def test_render_callback_fires_once():
    calls = []
    scheduler = _scheduler(RED_RECT_SVG, render_callback=lambda: calls.append(1))
    scheduler.start()
    scheduler.draw()
    assert calls == [1]


def test_idle_tick_does_not_redraw():
    scheduler = _scheduler(RED_RECT_SVG)
    scheduler.start()
    assert scheduler.tick() is False


def test_force_redraw():
    scheduler = _scheduler(RED_RECT_SVG, force_redraw=lambda: True)
    scheduler.start()
    assert scheduler.tick() is True


def test_tick_advances_animation():
    scheduler = _scheduler(ANIMATED_SVG, framerate=2)
    scheduler.start()
    assert scheduler.canvas.pixel(5, 5) == (0, 0, 0, 255)
    assert scheduler.tick() is True
    assert scheduler.canvas.pixel(55, 5) == (0, 0, 0, 255)
    assert scheduler.canvas.pixel(5, 5)[3] == 0


def test_ignore_animation():
    scheduler = _scheduler(ANIMATED_SVG, framerate=2, ignore_animation=True)
    scheduler.start()
    assert scheduler.tick() is False


def test_click_reaches_topmost_element_and_ancestors():
    scheduler = _scheduler(CLICKABLE_SVG)
    seen = []
    scheduler.document.get_element_by_id("group").on("click", lambda event: seen.append(event.target))
    scheduler.start()
    scheduler.on_click(50, 50)
    assert scheduler.tick() is True
    dot = scheduler.document.get_element_by_id("dot")
    assert scheduler.last_dispatched[0].target is dot
    assert seen == [dot]
    assert not scheduler.session.mouse.has_events()


def test_ignore_mouse_drops_events():
    scheduler = _scheduler(CLICKABLE_SVG, ignore_mouse=True)
    scheduler.start()
    scheduler.on_click(50, 50)
    assert scheduler.tick() is False


def test_run_ticks_until_frame_count():
    ticks = []

    def force() -> bool:
        ticks.append(1)
        return False

    scheduler = _scheduler(RED_RECT_SVG, framerate=1000, force_redraw=force)
    asyncio.run(scheduler.run(frames=3))
    assert len(ticks) == 3


def test_stop_ends_run():
    scheduler = _scheduler(RED_RECT_SVG, framerate=1000)
    scheduler.options.force_redraw = lambda: scheduler.stop() or False
    asyncio.run(scheduler.run())
    assert scheduler._running is False


def test_render_offset():
    canvas = render(RED_RECT_SVG, options=RenderOptions(offset_x=10, offset_y=10))
    assert canvas.pixel(5, 5)[3] == 0
    assert canvas.pixel(15, 15) == (255, 0, 0, 255)


def test_render_ignore_dimensions_keeps_canvas():
    canvas = render(RED_RECT_SVG, options=RenderOptions(ignore_dimensions=True), canvas=Canvas(20, 20))
    assert (canvas.width, canvas.height) == (20, 20)
    assert canvas.pixel(10, 10) == (255, 0, 0, 255)


def test_render_ignore_clear_keeps_pixels():
    canvas = Canvas(100, 100)
    canvas.painter.fill_style = "#0000ff"
    canvas.painter.fill_rect(0, 0, 100, 100)
    render(RED_RECT_SVG, options=RenderOptions(ignore_clear=True), canvas=canvas)
    assert canvas.pixel(25, 25) == (255, 0, 0, 255)
    assert canvas.pixel(75, 75) == (0, 0, 255, 255)


def test_redraw_is_stable_with_scaling():
    document = load_document(RED_RECT_SVG, RenderOptions(scale_width=50))
    scheduler = RenderScheduler(document, Canvas())
    scheduler.draw()
    scheduler.draw()
    assert (scheduler.canvas.width, scheduler.canvas.height) == (50, 50)
    assert scheduler.canvas.pixel(20, 20) == (255, 0, 0, 255)
    assert scheduler.canvas.pixel(30, 30)[3] == 0
