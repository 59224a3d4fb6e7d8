"""Tests for text layout, SVG fonts and links."""

from __future__ import annotations

from svgraster.engine.config import RenderOptions
from svgraster.engine.painter import Canvas
from svgraster.engine.scheduler import RenderScheduler, render
from svgraster.svg.elements.text import FontElement, TextElement, TSpanElement
from svgraster.svg.parser import load_document
from tests.conftest import TEXT_SVG

SVG_NS = 'xmlns="http://www.w3.org/2000/svg"'

BLOCKY_FONT = (
    '<defs><font horiz-adv-x="10">'
    '<font-face font-family="Blocky" units-per-em="10"/>'
    '<missing-glyph d="M0 0 L1 0 L1 1 z"/>'
    '<glyph unicode="A" horiz-adv-x="10" d="M0 0 L10 0 L10 10 L0 10 z"/>'
    "</font></defs>"
)


def test_text_nodes_become_spans():
    document = load_document(TEXT_SVG)
    text = document.root.children[0]
    assert isinstance(text, TextElement)
    assert [type(c) for c in text.children] == [TSpanElement, TSpanElement, TSpanElement]
    hello, world, bang = text.children
    assert hello.get_text() == "Hello "
    # an element span hands its text to its own anonymous child
    assert world.get_text() == ""
    assert world.children[0].get_text() == "world"
    assert bang.get_text() == "!"


def test_text_renders_pixels():
    canvas = render(TEXT_SVG)
    alpha = canvas.pixels()[:, :, 3]
    assert alpha[5:40, :].max() > 0
    assert alpha[45:, :].max() == 0


def test_text_anchor_end_shifts_left():
    start = render(f'<svg {SVG_NS} width="200" height="40"><text x="100" y="30" font-size="20">Wide</text></svg>')
    end = render(
        f'<svg {SVG_NS} width="200" height="40"><text x="100" y="30" font-size="20" text-anchor="end">Wide</text></svg>'
    )
    assert start.pixels()[:, :100, 3].max() == 0
    assert end.pixels()[:, 100:, 3].max() == 0


def test_svg_font_registers_family():
    document = load_document(f"<svg {SVG_NS}>{BLOCKY_FONT}</svg>")
    font = document.session.definitions["Blocky"]
    assert isinstance(font, FontElement)
    assert font.font_face.units_per_em == 10
    assert font.glyph("A", 0).unicode == "A"
    assert font.glyph("B", 0) is font.missing_glyph


def test_svg_font_draws_glyphs():
    canvas = render(
        f'<svg {SVG_NS} width="40" height="30">{BLOCKY_FONT}'
        '<text x="0" y="20" font-family="Blocky" font-size="10">AA</text></svg>'
    )
    assert canvas.pixel(5, 15) == (0, 0, 0, 255)
    assert canvas.pixel(15, 15) == (0, 0, 0, 255)
    assert canvas.pixel(25, 15)[3] == 0
    assert canvas.pixel(5, 5)[3] == 0


def test_link_click_calls_handler():
    followed = []
    document = load_document(
        f'<svg {SVG_NS} width="100" height="100">'
        '<a href="https://example.com/"><rect width="50" height="50"/></a></svg>',
        RenderOptions(link_handler=followed.append),
    )
    scheduler = RenderScheduler(document, Canvas())
    scheduler.start()
    scheduler.on_click(10, 10)
    scheduler.tick()
    assert followed == ["https://example.com/"]

    scheduler.on_mousemove(10, 10)
    scheduler.tick()
    assert scheduler.canvas.cursor == "pointer"

    scheduler.on_mousemove(90, 90)
    scheduler.tick()
    assert scheduler.canvas.cursor == ""
    document.close()
