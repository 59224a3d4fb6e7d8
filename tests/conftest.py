"""Shared test fixtures."""

from __future__ import annotations

import pytest

from svgraster.engine.config import RenderOptions
from svgraster.engine.context import RenderSession
from svgraster.engine.painter import Canvas
from svgraster.svg.elements import register_elements

register_elements()


RED_RECT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">
  <rect id="r" x="0" y="0" width="50" height="50" fill="#ff0000"/>
</svg>'''

VIEWBOX_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="200" height="100" viewBox="0 0 100 50">
  <rect x="10" y="10" width="20" height="20" fill="#0000ff"/>
</svg>'''

USE_SYMBOL_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" width="100" height="100">
  <defs>
    <symbol id="sq" viewBox="0 0 10 10">
      <rect width="10" height="10" fill="#00ff00"/>
    </symbol>
  </defs>
  <use xlink:href="#sq" x="10" y="10" width="40" height="40"/>
</svg>'''

STYLED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="60" height="20">
  <style>
    rect { fill: #ff0000; }
    .blue { fill: #0000ff; }
    #green { fill: #00ff00; }
  </style>
  <rect x="0" y="0" width="20" height="20"/>
  <rect class="blue" x="20" y="0" width="20" height="20"/>
  <rect id="green" class="blue" x="40" y="0" width="20" height="20"/>
</svg>'''

GRADIENT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="100" height="10">
  <defs>
    <linearGradient id="g">
      <stop offset="0" stop-color="#ff0000"/>
      <stop offset="1" stop-color="#0000ff"/>
    </linearGradient>
  </defs>
  <rect width="100" height="10" fill="url(#g)"/>
</svg>'''

ANIMATED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">
  <rect id="box" x="0" y="0" width="10" height="10" fill="#000000">
    <animate attributeName="x" from="0" to="100" dur="1000ms" begin="0s" fill="freeze"/>
  </rect>
</svg>'''

CLICKABLE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">
  <g id="group">
    <rect id="back" x="0" y="0" width="100" height="100" fill="#cccccc"/>
    <circle id="dot" cx="50" cy="50" r="10" fill="#ff0000"/>
  </g>
</svg>'''

TEXT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="200" height="50">
  <text x="10" y="30" font-size="20" fill="#000000">Hello <tspan fill="#ff0000">world</tspan>!</text>
</svg>'''


@pytest.fixture
def session() -> RenderSession:
    s = RenderSession(RenderOptions())
    s.viewport.set_current(100, 100)
    yield s
    s.close()


@pytest.fixture
def canvas() -> Canvas:
    return Canvas(100, 100)


@pytest.fixture
def red_rect_svg() -> str:
    return RED_RECT_SVG
