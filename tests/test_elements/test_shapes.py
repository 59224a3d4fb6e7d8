"""Tests for basic shapes."""

from __future__ import annotations

from svgraster.engine.scheduler import render
from svgraster.svg.parser import load_document
from tests.conftest import RED_RECT_SVG

SVG_NS = 'xmlns="http://www.w3.org/2000/svg"'


def _first(markup: str, tag: str):
    document = load_document(f"<svg {SVG_NS} width=\"100\" height=\"100\">{markup}</svg>")
    document.session.viewport.set_current(100, 100)
    return next(el for el in document.root.iter() if el.type == tag)


def test_rect_bounding_box():
    rect = _first('<rect x="0" y="0" width="50" height="50"/>', "rect")
    assert rect.bounding_box().as_tuple() == (0, 0, 50, 50)


def test_rect_radii_copy_and_clamp():
    rect = _first('<rect width="40" height="100" rx="30"/>', "rect")
    assert rect.radii() == (20, 30)
    rect = _first('<rect width="40" height="40" ry="5"/>', "rect")
    assert rect.radii() == (5, 5)


def test_circle_and_ellipse_boxes():
    circle = _first('<circle cx="50" cy="40" r="10"/>', "circle")
    assert circle.bounding_box().as_tuple() == (40, 30, 60, 50)
    ellipse = _first('<ellipse cx="50" cy="50" rx="20" ry="5"/>', "ellipse")
    assert ellipse.bounding_box().as_tuple() == (30, 45, 70, 55)


def test_percent_lengths_resolve_against_viewport():
    rect = _first('<rect width="50%" height="25%"/>', "rect")
    assert rect.bounding_box().as_tuple() == (0, 0, 50, 25)


def test_line_markers_share_angle():
    line = _first('<line x1="0" y1="0" x2="0" y2="10"/>', "line")
    (start, a1), (end, a2) = line.markers()
    assert (start.x, start.y, end.x, end.y) == (0, 0, 0, 10)
    assert a1 == a2


def test_polyline_drops_dangling_coordinate():
    polyline = _first('<polyline points="0,0 10,0 10,10 5"/>', "polyline")
    assert len(polyline.points) == 3
    assert polyline.bounding_box().as_tuple() == (0, 0, 10, 10)
    assert len(polyline.markers()) == 3


def test_empty_polyline():
    polyline = _first('<polyline points=""/>', "polyline")
    assert polyline.bounding_box().is_empty
    assert polyline.markers() is None


def test_red_rect_renders():
    canvas = render(RED_RECT_SVG)
    assert (canvas.width, canvas.height) == (100, 100)
    assert canvas.pixel(25, 25) == (255, 0, 0, 255)
    assert canvas.pixel(75, 75)[3] == 0


def test_stroke_only_shape():
    canvas = render(
        f'<svg {SVG_NS} width="40" height="40">'
        '<rect x="10" y="10" width="20" height="20" fill="none" stroke="#0000ff" stroke-width="4"/></svg>'
    )
    assert canvas.pixel(10, 20) == (0, 0, 255, 255)
    assert canvas.pixel(20, 20)[3] == 0


def test_polygon_fills():
    canvas = render(f'<svg {SVG_NS} width="20" height="20"><polygon points="0,0 20,0 20,20 0,20" fill="#00ff00"/></svg>')
    assert canvas.pixel(10, 10) == (0, 255, 0, 255)


def test_display_none_skips_render():
    canvas = render(f'<svg {SVG_NS} width="20" height="20"><rect width="20" height="20" display="none"/></svg>')
    assert canvas.pixel(10, 10)[3] == 0


def test_fill_opacity():
    canvas = render(f'<svg {SVG_NS} width="10" height="10"><rect width="10" height="10" fill="#000" fill-opacity="0.5"/></svg>')
    assert 126 <= canvas.pixel(5, 5)[3] <= 129
