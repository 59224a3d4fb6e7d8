"""Rasterization utilities — cairo surface <-> numpy pixel grids, pixel filters.

Cairo stores ARGB32 as native-endian premultiplied words; canvas-style pixel
access wants straight-alpha RGBA bytes. Everything here converts between the
two so filter primitives can be written as plain numpy array math.
"""

from __future__ import annotations

import sys

import cairocffi
import numpy as np
from numpy.typing import NDArray
from PIL import Image
from scipy import ndimage

# Byte offsets of R, G, B, A inside one ARGB32 pixel.
_CHANNELS = (2, 1, 0, 3) if sys.byteorder == "little" else (1, 2, 3, 0)

# ITU-R BT.709 luminance weights used by luminanceToAlpha.
LUMINANCE_TO_ALPHA = [
    0, 0, 0, 0, 0,
    0, 0, 0, 0, 0,
    0, 0, 0, 0, 0,
    0.2125, 0.7154, 0.0721, 0, 0,
]

IDENTITY_COLOR_MATRIX = [
    1, 0, 0, 0, 0,
    0, 1, 0, 0, 0,
    0, 0, 1, 0, 0,
    0, 0, 0, 1, 0,
]


def _raw_view(surface: cairocffi.ImageSurface) -> NDArray[np.uint8]:
    """Writable (H, W, 4) byte view over the surface memory (native byte order)."""
    surface.flush()
    width = surface.get_width()
    height = surface.get_height()
    stride = surface.get_stride()
    return np.ndarray(
        shape=(height, width, 4),
        dtype=np.uint8,
        buffer=surface.get_data(),
        strides=(stride, 4, 1),
    )


def surface_to_rgba(surface: cairocffi.ImageSurface) -> NDArray[np.uint8]:
    """Copy a surface into an (H, W, 4) straight-alpha RGBA array."""
    raw = _raw_view(surface)
    rgba = raw[:, :, list(_CHANNELS)].astype(np.float64)
    alpha = rgba[:, :, 3:4]
    with np.errstate(divide="ignore", invalid="ignore"):
        rgb = np.where(alpha > 0, rgba[:, :, :3] * 255.0 / alpha, 0.0)
    out = np.empty_like(rgba)
    out[:, :, :3] = rgb
    out[:, :, 3] = rgba[:, :, 3]
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def rgba_to_surface(rgba: NDArray, surface: cairocffi.ImageSurface) -> None:
    """Write a straight-alpha RGBA array back into ``surface`` (premultiplying)."""
    raw = _raw_view(surface)
    data = np.clip(np.asarray(rgba, dtype=np.float64), 0, 255)
    alpha = data[:, :, 3:4]
    premultiplied = np.empty_like(data)
    premultiplied[:, :, :3] = data[:, :, :3] * alpha / 255.0
    premultiplied[:, :, 3] = data[:, :, 3]
    premultiplied = np.clip(np.rint(premultiplied), 0, 255).astype(np.uint8)
    for i, channel in enumerate(_CHANNELS):
        raw[:, :, channel] = premultiplied[:, :, i]
    surface.mark_dirty()


def apply_color_matrix(surface: cairocffi.ImageSurface, matrix: list[float]) -> None:
    """Run a 4x5 colour matrix over every pixel.

    Negative coefficients act on the inverted channel (``v - 255``), which
    keeps luminance-style matrices in range for 8-bit channels.
    """
    coefficients = np.zeros(20, dtype=np.float64)
    values = np.asarray(matrix[:20], dtype=np.float64)
    coefficients[: len(values)] = np.nan_to_num(values)
    m = coefficients.reshape(4, 5)

    rgba = surface_to_rgba(surface).astype(np.float64)
    h, w = rgba.shape[:2]
    v = np.concatenate([rgba, np.ones((h, w, 1))], axis=2)

    positive = np.einsum("ij,hwj->hwi", np.where(m >= 0, m, 0.0), v)
    negative = np.einsum("ij,hwj->hwi", np.where(m < 0, m, 0.0), v - 255.0)
    rgba_to_surface(positive + negative, surface)


def box_blur(surface: cairocffi.ImageSurface, radius: int) -> None:
    """Box-blur premultiplied pixels in place with a (2r+1)^2 kernel."""
    if radius <= 0:
        return
    raw = _raw_view(surface)
    size = 2 * radius + 1
    blurred = ndimage.uniform_filter(raw.astype(np.float64), size=(size, size, 1), mode="nearest")
    raw[:, :, :] = np.clip(np.rint(blurred), 0, 255).astype(np.uint8)
    surface.mark_dirty()


def image_to_surface(image: Image.Image) -> cairocffi.ImageSurface:
    """Convert a Pillow image into a new ARGB32 cairo surface."""
    rgba = np.asarray(image.convert("RGBA"))
    height, width = rgba.shape[:2]
    surface = cairocffi.ImageSurface(cairocffi.FORMAT_ARGB32, width, height)
    rgba_to_surface(rgba, surface)
    return surface
