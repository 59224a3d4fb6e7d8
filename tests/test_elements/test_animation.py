"""Tests for animate, animateColor and animateTransform."""

from __future__ import annotations

from svgraster.svg.parser import load_document
from tests.conftest import ANIMATED_SVG

SVG_NS = 'xmlns="http://www.w3.org/2000/svg"'


def _animated(animation: str, target: str = '<rect id="box" x="0" width="10" height="10">{}</rect>'):
    document = load_document(f'<svg {SVG_NS} width="100" height="100">{target.format(animation)}</svg>')
    return document, document.session.animations[0]


def test_animation_registers_with_session():
    document = load_document(ANIMATED_SVG)
    assert len(document.session.animations) == 1
    assert document.session.animations[0].parent is document.get_element_by_id("box")


def test_tweens_halfway():
    document = load_document(ANIMATED_SVG)
    animation = document.session.animations[0]
    assert animation.update(500) is True
    assert document.get_element_by_id("box").attribute("x").value == "50"


def test_freeze_holds_last_value():
    document = load_document(ANIMATED_SVG)
    animation = document.session.animations[0]
    box = document.get_element_by_id("box")
    for _ in range(3):
        animation.update(500)
    assert box.attribute("x").value == "100"
    assert animation.update(500) is False
    assert animation.frozen
    assert box.animation_frozen
    assert animation.update(500) is False
    assert box.attribute("x").value == "100"


def test_remove_restores_initial_value():
    document, animation = _animated('<animate attributeName="x" from="0" to="100" dur="1s"/>')
    box = document.get_element_by_id("box")
    for _ in range(3):
        animation.update(500)
    assert animation.update(500) is True
    assert animation.removed
    assert box.attribute("x").value == "0"
    assert animation.update(500) is False


def test_indefinite_repeat_loops():
    document, animation = _animated(
        '<animate attributeName="x" from="0" to="100" dur="1s" repeatCount="indefinite"/>'
    )
    box = document.get_element_by_id("box")
    for _ in range(3):
        animation.update(500)
    assert animation.update(500) is False
    assert animation.update(500) is True
    assert box.attribute("x").value == "50"


def test_begin_delays_start():
    document, animation = _animated('<animate attributeName="x" from="0" to="100" begin="1s" dur="1s"/>')
    assert animation.update(500) is False
    assert document.get_element_by_id("box").attribute("x").value == "0"
    animation.update(1000)
    assert document.get_element_by_id("box").attribute("x").value == "50"


def test_values_keyframes():
    document, animation = _animated('<animate attributeName="x" values="0;10;30" dur="1s"/>')
    box = document.get_element_by_id("box")
    animation.update(500)
    assert box.attribute("x").value == "10"
    animation.update(250)
    assert box.attribute("x").value == "20"


def test_keeps_units():
    document, animation = _animated(
        '<animate attributeName="x" from="0" to="10" dur="1s"/>',
        '<rect id="box" x="5px" width="10" height="10">{}</rect>',
    )
    animation.update(500)
    assert document.get_element_by_id("box").attribute("x").value == "5px"


def test_animate_color():
    document, animation = _animated(
        '<animateColor attributeName="fill" from="#ff0000" to="#0000ff" dur="1s"/>',
        '<rect id="box" fill="#ff0000" width="10" height="10">{}</rect>',
    )
    animation.update(500)
    assert document.get_element_by_id("box").attribute("fill").value == "rgb(127,0,127)"


def test_animate_transform():
    document, animation = _animated(
        '<animateTransform attributeName="transform" type="rotate" from="0 5 5" to="90 5 5" dur="1s"/>'
    )
    animation.update(500)
    assert document.get_element_by_id("box").attribute("transform").value == "rotate(45 5 5)"


def test_css_target_does_not_touch_ancestors():
    document, animation = _animated(
        '<animate attributeName="opacity" attributeType="CSS" from="0" to="1" dur="1s"/>',
        '<g id="group" opacity="0.3"><rect id="box" width="10" height="10">{}</rect></g>',
    )
    animation.update(500)
    assert document.get_element_by_id("box").style("opacity").value == "0.5"
    assert document.get_element_by_id("group").attribute("opacity").value == "0.3"


def test_css_target_leaves_rule_siblings_alone():
    document, animation = _animated(
        '<animate attributeName="opacity" attributeType="CSS" from="0" to="1" dur="1s"/>',
        '<style>.c { opacity: 1 }</style>'
        '<rect id="a" class="c" width="10" height="10">{}</rect>'
        '<rect id="b" class="c" width="10" height="10"/>',
    )
    animation.update(500)
    assert document.get_element_by_id("a").style("opacity").value == "0.5"
    assert document.get_element_by_id("b").style("opacity").value == "1"
