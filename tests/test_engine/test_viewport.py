"""Tests for the viewport stack and aspect-ratio fitting."""

from __future__ import annotations

import math

from svgraster.engine.painter import Canvas
from svgraster.engine.viewport import ViewPort, apply_aspect_ratio


def test_stack_and_diagonal():
    vp = ViewPort()
    assert vp.width() == 0
    vp.set_current(300, 400)
    vp.set_current(30, 40)
    assert vp.compute_size("x") == 30
    assert math.isclose(vp.compute_size(), 50 / math.sqrt(2))
    vp.remove_current()
    assert vp.height() == 400


def test_meet_centers_content(session):
    painter = Canvas(200, 100).painter
    apply_aspect_ratio(session, painter, None, 200, 10, 100, 10)
    # scale 10, centred horizontally
    assert painter.get_matrix() == (10.0, 0.0, 0.0, 10.0, 50.0, 0.0)


def test_none_stretches(session):
    painter = Canvas(200, 100).painter
    apply_aspect_ratio(session, painter, "none", 200, 10, 100, 10, min_x=1, min_y=2)
    assert painter.get_matrix() == (20.0, 0.0, 0.0, 10.0, -20.0, -20.0)


def test_slice_fills(session):
    painter = Canvas(200, 100).painter
    apply_aspect_ratio(session, painter, "xMinYMin slice", 200, 10, 100, 10)
    assert painter.get_matrix()[0] == 20.0
