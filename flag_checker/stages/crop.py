"""Crop background margins around the flag before band analysis.

A pixel counts as flag-coloured when it is close (per channel) to one of the
chromatic references and is itself saturated enough. White is deliberately
not a crop colour: it cannot be told apart from a white page background.
"""

import logging

import numpy as np

from flag_checker.core.config import ValidationConfig
from flag_checker.core.palette import REFERENCE, chroma, reference_rgb
from flag_checker.core.types import Raster

logger = logging.getLogger(__name__)


def _chromatic_references(min_chroma: int) -> list[tuple[int, int, int]]:
    refs = [reference_rgb(name) for name in REFERENCE]
    return [rgb for rgb in refs if chroma(rgb) >= min_chroma]


def flag_pixel_mask(raster: Raster, config: ValidationConfig) -> np.ndarray:
    """Boolean H×W mask of flag-coloured pixels."""
    pixels = raster.pixels.astype(np.int16)
    saturation = pixels.max(axis=2) - pixels.min(axis=2)
    mask = np.zeros(pixels.shape[:2], dtype=bool)
    for rgb in _chromatic_references(config.crop_min_chroma):
        target = np.array(rgb, dtype=np.int16)
        mask |= np.all(np.abs(pixels - target) <= config.crop_channel_threshold, axis=2)
    return mask & (saturation >= config.crop_min_chroma)


def content_box(raster: Raster, config: ValidationConfig) -> tuple[int, int, int, int] | None:
    """Tight (x1, y1, x2, y2) box of flag-coloured pixels, exclusive right/bottom. None if there are none."""
    mask = flag_pixel_mask(raster, config)
    rows = np.flatnonzero(mask.any(axis=1))
    cols = np.flatnonzero(mask.any(axis=0))
    if len(rows) == 0 or len(cols) == 0:
        return None
    return (int(cols[0]), int(rows[0]), int(cols[-1]) + 1, int(rows[-1]) + 1)


def crop_to_content(raster: Raster, config: ValidationConfig) -> tuple[Raster, tuple[int, int, int, int] | None]:
    """Return (raster, box). `box` is None when no crop was applied."""
    box = content_box(raster, config)
    if box is None:
        logger.debug('no flag-coloured pixels, leaving %dx%d uncropped', raster.width, raster.height)
        return raster, None

    x1, y1, x2, y2 = box
    covers_w = (x2 - x1) / raster.width >= config.crop_full_coverage
    covers_h = (y2 - y1) / raster.height >= config.crop_full_coverage
    if covers_w and covers_h:
        return raster, None

    m = config.crop_margin
    box = (max(0, x1 - m), max(0, y1 - m), min(raster.width, x2 + m), min(raster.height, y2 + m))
    logger.debug('cropping %dx%d to %s', raster.width, raster.height, box)
    return raster.crop(box), box
