"""Synthetic flag rasters rendered with numpy."""

import io
import math

import numpy as np
import pytest
from flag_checker.core.types import Raster
from PIL import Image

SAFFRON = (255, 153, 51)
WHITE = (255, 255, 255)
GREEN = (19, 136, 8)
NAVY = (0, 0, 128)


def render_flag(
    width: int = 900,
    height: int = 600,
    centre: tuple[int, int] | None = None,
    radius: int | None = None,
    spokes: int = 24,
    rim: int = 4,
    hub: int = 10,
    spoke_half_width: float = 2.0,
    colours: tuple = (SAFFRON, WHITE, GREEN, NAVY),
    pad: int = 0,
    background: tuple = WHITE,
) -> np.ndarray:
    """Three equal bands with a chakra (rim, hub, straight spokes), optionally padded."""
    top, middle, bottom, navy = colours
    img = np.zeros((height, width, 3), dtype=np.uint8)
    band = height // 3
    img[:band] = top
    img[band : 2 * band] = middle
    img[2 * band :] = bottom

    cx, cy = centre if centre is not None else (width // 2, height // 2)
    r = radius if radius is not None else int(band * 0.75 / 2)
    yy, xx = np.mgrid[0:height, 0:width]
    dx, dy = xx - cx, yy - cy
    d = np.hypot(dx, dy)
    theta = np.arctan2(dy, dx)

    chakra = ((d >= r - rim) & (d <= r)) | (d <= hub)
    for k in range(spokes):
        delta = theta - 2 * math.pi * k / spokes
        along = d * np.cos(delta)
        across = np.abs(d * np.sin(delta))
        chakra |= (d <= r) & (along > 0) & (across <= spoke_half_width)
    img[chakra] = navy

    if pad:
        padded = np.zeros((height + 2 * pad, width + 2 * pad, 3), dtype=np.uint8)
        padded[:] = background
        padded[pad : pad + height, pad : pad + width] = img
        img = padded
    return img


def encode_png(pixels: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format='PNG')
    return buf.getvalue()


@pytest.fixture
def make_flag():
    """Factory: make_flag(**kwargs) -> Raster."""

    def _make(**kwargs) -> Raster:
        return Raster(render_flag(**kwargs))

    return _make


@pytest.fixture
def flag() -> Raster:
    return Raster(render_flag())


@pytest.fixture
def flag_png(tmp_path):
    path = tmp_path / 'flag.png'
    path.write_bytes(encode_png(render_flag()))
    return path
