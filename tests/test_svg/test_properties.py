"""Tests for property unit conversion and colour folding."""

from __future__ import annotations

import math

import pytest

from svgraster.svg.properties import Property, create_font, parse_font


@pytest.mark.parametrize(
    "value, expected",
    [
        ("10", 10.0),
        ("10px", 10.0),
        ("1in", 96.0),
        ("72pt", 96.0),
        ("2.54cm", 96.0),
        ("1pc", 15.0),
        ("2em", 24.0),
        ("2ex", 12.0),
    ],
)
def test_to_pixels_units(session, value, expected):
    assert math.isclose(Property("len", value, session).to_pixels(), expected)


def test_percent_uses_viewport(session):
    session.viewport.set_current(200, 50)
    assert Property("w", "50%", session).to_pixels("x") == 100
    assert Property("h", "50%", session).to_pixels("y") == 25


def test_process_percent_fraction(session):
    assert Property("w", "0.5", session).to_pixels("x", process_percent=True) == 50


def test_empty_property():
    prop = Property("x", "")
    assert not prop.has_value()
    assert prop.to_pixels() == 0
    assert prop.num_value_or_default(7) == 7


def test_to_milliseconds():
    assert Property("t", "250ms").to_milliseconds() == 250
    assert Property("t", "2s").to_milliseconds() == 2000
    assert Property("t", "40").to_milliseconds() == 40


def test_to_radians():
    assert math.isclose(Property("a", "90").to_radians(), math.pi / 2)
    assert math.isclose(Property("a", "100grad").to_radians(), math.pi / 2)
    assert math.isclose(Property("a", "1rad").to_radians(), 1.0)


def test_add_opacity_multiplies_alpha():
    opaque = Property("fill", "#ff0000").add_opacity(Property("o", "0.5"))
    assert opaque.value == "rgba(255, 0, 0, 0.5)"
    translucent = Property("fill", "rgba(0,0,255,0.5)").add_opacity(Property("o", "0.5"))
    assert translucent.value == "rgba(0, 0, 255, 0.25)"


def test_add_opacity_ignores_non_colours():
    assert Property("fill", "url(#g)").add_opacity(Property("o", "0.5")).value == "url(#g)"


def test_definition_lookup(session):
    marker = object()
    session.definitions["grad"] = marker
    assert Property("fill", "url(#grad)", session).definition() is marker
    assert Property("fill", "url('#grad')", session).definition() is marker
    assert Property("href", "#grad", session).definition() is marker
    assert Property("fill", "url(#nope)", session).definition() is None


def test_parse_font_shorthand():
    font = parse_font("italic bold 12px/14px Arial, sans-serif")
    assert font == {
        "font_style": "italic",
        "font_weight": "bold",
        "font_size": "12px",
        "font_family": "Arial, sans-serif",
    }


def test_create_font_inherits_blanks():
    font = create_font("", "", "bold", "", "", "italic 20px serif")
    assert str(font).split() == ["italic", "bold", "20px", "serif"]


def test_text_baseline():
    assert Property("b", "central").to_text_baseline() == "middle"
    assert Property("b", "").to_text_baseline() is None
