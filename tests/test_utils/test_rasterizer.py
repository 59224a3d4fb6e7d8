"""Tests for pixel conversion and filters."""

from __future__ import annotations

import cairocffi
import numpy as np
from PIL import Image

from svgraster.utils import rasterizer


def _solid(width: int, height: int, rgba: tuple[float, float, float, float]) -> cairocffi.ImageSurface:
    surface = cairocffi.ImageSurface(cairocffi.FORMAT_ARGB32, width, height)
    cr = cairocffi.Context(surface)
    cr.set_source_rgba(*rgba)
    cr.paint()
    return surface


def test_surface_to_rgba_is_straight_alpha():
    surface = _solid(2, 2, (1.0, 0.0, 0.0, 0.5))
    rgba = rasterizer.surface_to_rgba(surface)
    r, g, b, a = rgba[0, 0]
    assert r >= 253 and g == 0 and b == 0
    assert 126 <= a <= 128


def test_identity_matrix_keeps_pixels():
    surface = _solid(3, 3, (0.2, 0.4, 0.6, 1.0))
    before = rasterizer.surface_to_rgba(surface).copy()
    rasterizer.apply_color_matrix(surface, rasterizer.IDENTITY_COLOR_MATRIX)
    after = rasterizer.surface_to_rgba(surface)
    assert np.abs(before.astype(int) - after.astype(int)).max() <= 1


def test_color_matrix_swaps_channels():
    surface = _solid(1, 1, (1.0, 0.0, 0.0, 1.0))
    swap = [
        0, 0, 0, 0, 0,
        0, 0, 0, 0, 0,
        1, 0, 0, 0, 0,
        0, 0, 0, 1, 0,
    ]
    rasterizer.apply_color_matrix(surface, swap)
    assert tuple(rasterizer.surface_to_rgba(surface)[0, 0]) == (0, 0, 255, 255)


def test_box_blur_spreads_coverage():
    surface = cairocffi.ImageSurface(cairocffi.FORMAT_ARGB32, 9, 9)
    cr = cairocffi.Context(surface)
    cr.set_source_rgba(0, 0, 0, 1)
    cr.rectangle(4, 4, 1, 1)
    cr.fill()
    rasterizer.box_blur(surface, 1)
    alpha = rasterizer.surface_to_rgba(surface)[:, :, 3]
    assert alpha[4, 4] < 255
    assert alpha[3, 3] > 0
    assert alpha[0, 0] == 0


def test_box_blur_zero_radius_is_noop():
    surface = _solid(2, 2, (0, 1, 0, 1))
    rasterizer.box_blur(surface, 0)
    assert tuple(rasterizer.surface_to_rgba(surface)[1, 1]) == (0, 255, 0, 255)


def test_image_to_surface():
    image = Image.new("RGBA", (4, 3), (10, 20, 30, 255))
    surface = rasterizer.image_to_surface(image)
    assert (surface.get_width(), surface.get_height()) == (4, 3)
    assert tuple(rasterizer.surface_to_rgba(surface)[2, 3]) == (10, 20, 30, 255)
