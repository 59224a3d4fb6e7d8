"""Tests for the stylesheet cascade."""

from __future__ import annotations

from svgraster.svg import styles
from svgraster.svg.parser import load_document
from tests.conftest import STYLED_SVG


def test_parse_declarations():
    assert styles.parse_declarations("fill: red; stroke-width:2px ;") == [
        ("fill", "red"),
        ("stroke-width", "2px"),
    ]


def test_specificity_orders_rules():
    document = load_document(STYLED_SVG)
    rects = [el for el in document.root.iter() if el.type == "rect"]
    assert [r.style("fill").value for r in rects] == ["#ff0000", "#0000ff", "#00ff00"]


def test_equal_specificity_first_rule_wins():
    document = load_document(
        '<svg xmlns="http://www.w3.org/2000/svg">'
        "<style>.a { fill: red } .b { fill: blue }</style>"
        '<rect class="a b"/></svg>'
    )
    rect = next(el for el in document.root.iter() if el.type == "rect")
    assert rect.style("fill").value == "red"


def test_inline_style_beats_sheet():
    document = load_document(
        '<svg xmlns="http://www.w3.org/2000/svg">'
        "<style>#r { fill: red }</style>"
        '<rect id="r" style="fill: green"/></svg>'
    )
    assert document.get_element_by_id("r").style("fill").value == "green"


def test_font_face_sources(session):
    faces = styles.add_stylesheet(
        session,
        '@font-face { font-family: "Glyphs"; src: url("fonts.svg#g") format("svg"), url(x.woff) format("woff") }',
    )
    family, urls = styles.svg_font_sources(faces[0])
    assert family == "Glyphs"
    assert urls == ["fonts.svg#g"]


def test_bad_selector_is_skipped(session):
    styles.add_stylesheet(session, "rect:::nonsense { fill: red } circle { fill: blue }")
    assert "circle" in session.styles
    assert all("nonsense" not in selector for selector in session.selectors)
