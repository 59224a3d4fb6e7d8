"""Tests for points and bounding boxes."""

from __future__ import annotations

import math

from svgraster.utils.geometry import BoundingBox, Point


def _contains(bb: BoundingBox, x: float, y: float, eps: float = 1e-9) -> bool:
    return bb.x1 - eps <= x <= bb.x2 + eps and bb.y1 - eps <= y <= bb.y2 + eps


def test_empty_box_is_nan_until_first_point():
    bb = BoundingBox()
    assert bb.is_empty
    assert math.isnan(bb.x1)
    bb.add_point(3, 4)
    assert not bb.is_empty
    assert bb.as_tuple() == (3, 4, 3, 4)


def test_box_from_corners():
    bb = BoundingBox(0, 0, 50, 50)
    assert (bb.x, bb.y, bb.width, bb.height) == (0, 0, 50, 50)
    assert bb.is_point_in_box(25, 25)
    assert not bb.is_point_in_box(51, 25)


def test_add_bounding_box_ignores_none():
    bb = BoundingBox(0, 0, 1, 1)
    bb.add_bounding_box(None)
    bb.add_bounding_box(BoundingBox(-1, 2, 3, 4))
    assert bb.as_tuple() == (-1, 0, 3, 4)


def test_bezier_box_contains_sampled_points():
    p0, p1, p2, p3 = (0, 0), (10, -40), (60, 90), (50, 10)
    bb = BoundingBox()
    bb.add_bezier_curve(*p0, *p1, *p2, *p3)
    for i in range(201):
        t = i / 200
        mt = 1 - t
        x = mt**3 * p0[0] + 3 * mt**2 * t * p1[0] + 3 * mt * t**2 * p2[0] + t**3 * p3[0]
        y = mt**3 * p0[1] + 3 * mt**2 * t * p1[1] + 3 * mt * t**2 * p2[1] + t**3 * p3[1]
        assert _contains(bb, x, y)
    # tight: strictly inside the control polygon hull
    assert bb.y1 > -40
    assert bb.x2 < 60


def test_quadratic_box_contains_sampled_points():
    p0, p1, p2 = (0, 0), (50, 100), (100, 0)
    bb = BoundingBox()
    bb.add_quadratic_curve(*p0, *p1, *p2)
    for i in range(101):
        t = i / 100
        mt = 1 - t
        y = mt**2 * p0[1] + 2 * mt * t * p1[1] + t**2 * p2[1]
        x = mt**2 * p0[0] + 2 * mt * t * p1[0] + t**2 * p2[0]
        assert _contains(bb, x, y)
    assert math.isclose(bb.y2, 50.0, abs_tol=1e-9)


def test_arc_box_contains_sampled_points():
    cx, cy, rx, ry, phi = 10.0, 20.0, 30.0, 10.0, math.radians(30)
    theta1, dtheta = 0.3, 4.0
    bb = BoundingBox()
    bb.add_arc(cx, cy, rx, ry, phi, theta1, dtheta)
    for i in range(401):
        theta = theta1 + dtheta * i / 400
        x = cx + rx * math.cos(phi) * math.cos(theta) - ry * math.sin(phi) * math.sin(theta)
        y = cy + rx * math.sin(phi) * math.cos(theta) + ry * math.cos(phi) * math.sin(theta)
        assert _contains(bb, x, y, eps=1e-7)


def test_point_angle_and_transform():
    p = Point(0, 0)
    assert math.isclose(p.angle_to(Point(0, 1)), math.pi / 2)
    q = Point(1, 2)
    q.apply_transform((2, 0, 0, 3, 10, 20))
    assert (q.x, q.y) == (12, 26)
