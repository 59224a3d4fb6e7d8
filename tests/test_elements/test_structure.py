"""Tests for viewports, use/symbol and images."""

from __future__ import annotations

import base64
import io

from PIL import Image

from svgraster.engine.painter import Canvas
from svgraster.engine.scheduler import RenderScheduler, render
from svgraster.svg.parser import load_document
from tests.conftest import RED_RECT_SVG, USE_SYMBOL_SVG, VIEWBOX_SVG

SVG_NS = 'xmlns="http://www.w3.org/2000/svg"'


def test_viewbox_scales_content():
    canvas = render(VIEWBOX_SVG)
    assert (canvas.width, canvas.height) == (200, 100)
    assert canvas.pixel(40, 40) == (0, 0, 255, 255)
    assert canvas.pixel(15, 15)[3] == 0
    assert canvas.pixel(70, 70)[3] == 0


def test_use_symbol_fills_requested_size():
    canvas = render(USE_SYMBOL_SVG)
    assert canvas.pixel(30, 30) == (0, 255, 0, 255)
    assert canvas.pixel(5, 5)[3] == 0
    assert canvas.pixel(55, 55)[3] == 0


def test_use_offsets_plain_element():
    canvas = render(
        f'<svg {SVG_NS} width="40" height="10">'
        '<rect id="a" width="10" height="10" fill="#ff0000"/><use href="#a" x="20"/></svg>'
    )
    assert canvas.pixel(25, 5) == (255, 0, 0, 255)
    assert canvas.pixel(15, 5)[3] == 0


def test_self_referencing_use_terminates():
    canvas = render(f'<svg {SVG_NS} width="10" height="10"><g id="loop"><use href="#loop"/></g></svg>')
    assert canvas.pixel(5, 5)[3] == 0


MUTUAL_USE_SVG = (
    f'<svg {SVG_NS} width="10" height="10">'
    '<g id="a"><use href="#b"/></g>'
    '<g id="b"><use href="#a"/><rect width="10" height="10" fill="#ff0000"/></g></svg>'
)


def test_mutual_use_cycle_bounding_box_terminates():
    document = load_document(MUTUAL_USE_SVG)
    assert document.root.children[0].bounding_box().as_tuple() == (0, 0, 10, 10)
    assert not document.session.active_uses


def test_mutual_use_cycle_render_terminates():
    canvas = render(MUTUAL_USE_SVG)
    assert canvas.pixel(5, 5) == (255, 0, 0, 255)


def test_use_of_svg_leaves_definition_size_alone():
    document = load_document(
        f'<svg {SVG_NS} width="40" height="20">'
        '<svg id="s" width="10" height="10"><rect width="100" height="100" fill="#ff0000"/></svg>'
        '<use href="#s" x="20" width="20" height="20"/></svg>'
    )
    scheduler = RenderScheduler(document, Canvas())
    scheduler.start()
    scheduler.draw()
    assert document.session.get_element_by_id("s").attribute("width").value == "10"
    assert scheduler.canvas.pixel(15, 5)[3] == 0
    assert scheduler.canvas.pixel(35, 15) == (255, 0, 0, 255)


def test_nested_svg_clips_to_its_box():
    canvas = render(
        f'<svg {SVG_NS} width="40" height="40">'
        '<svg x="10" y="10" width="10" height="10"><rect width="100" height="100" fill="#ff0000"/></svg></svg>'
    )
    assert canvas.pixel(15, 15) == (255, 0, 0, 255)
    assert canvas.pixel(25, 25)[3] == 0
    assert canvas.pixel(5, 5)[3] == 0


def test_scale_without_viewbox():
    canvas = render(RED_RECT_SVG, width=50)
    assert (canvas.width, canvas.height) == (50, 50)
    assert canvas.pixel(12, 12) == (255, 0, 0, 255)
    assert canvas.pixel(30, 30)[3] == 0


def test_scale_with_viewbox():
    canvas = render(VIEWBOX_SVG, width=100)
    assert (canvas.width, canvas.height) == (100, 50)
    assert canvas.pixel(20, 20) == (0, 0, 255, 255)
    assert canvas.pixel(35, 35)[3] == 0


def _data_url(mime: str, data: bytes) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode()}"


def test_raster_image():
    buf = io.BytesIO()
    Image.new("RGBA", (2, 2), (255, 0, 0, 255)).save(buf, format="PNG")
    href = _data_url("image/png", buf.getvalue())
    canvas = render(f'<svg {SVG_NS} width="20" height="20"><image href="{href}" width="10" height="10"/></svg>')
    assert canvas.pixel(5, 5) == (255, 0, 0, 255)
    assert canvas.pixel(15, 15)[3] == 0


def test_svg_image_is_scaled_into_its_box():
    href = _data_url("image/svg+xml", RED_RECT_SVG.encode())
    canvas = render(f'<svg {SVG_NS} width="100" height="100"><image href="{href}" width="50" height="50"/></svg>')
    assert canvas.pixel(10, 10) == (255, 0, 0, 255)
    assert canvas.pixel(40, 40)[3] == 0


def test_broken_image_is_skipped():
    canvas = render(f'<svg {SVG_NS} width="10" height="10"><image href="data:image/png;base64,AAAA" width="10" height="10"/></svg>')
    assert canvas.pixel(5, 5)[3] == 0
