"""Coarse colour-presence gate run before any geometry.

Samples up to presence_max_samples pixels on a regular stride and measures
the share of each band reference colour (per-channel match). An image where
none of saffron, white or green reaches presence_min_fraction is not a flag.
"""

import logging

import numpy as np

from flag_checker.core.config import ValidationConfig
from flag_checker.core.errors import NotTargetImageError
from flag_checker.core.palette import BAND_COLOURS, reference_rgb
from flag_checker.core.types import Raster

logger = logging.getLogger(__name__)


def _sample(raster: Raster, max_samples: int) -> np.ndarray:
    pixels = raster.pixels.reshape(-1, 3)
    stride = max(1, len(pixels) // max(1, max_samples))
    return pixels[::stride].astype(np.int16)


def colour_presence(raster: Raster, config: ValidationConfig) -> dict[str, float]:
    """Fraction of sampled pixels within the per-channel threshold of each band colour."""
    pixels = _sample(raster, config.presence_max_samples)
    if len(pixels) == 0:
        return {name: 0.0 for name in BAND_COLOURS.values()}
    presence = {}
    for name in BAND_COLOURS.values():
        target = np.array(reference_rgb(name), dtype=np.int16)
        match = np.all(np.abs(pixels - target) <= config.presence_channel_threshold, axis=1)
        presence[name] = float(match.mean())
    return presence


def ensure_flag_colours(raster: Raster, config: ValidationConfig) -> dict[str, float]:
    """Raise NotTargetImageError unless at least one band colour is present."""
    presence = colour_presence(raster, config)
    logger.debug('colour presence: %s', {k: round(v, 4) for k, v in presence.items()})
    if all(share < config.presence_min_fraction for share in presence.values()):
        raise NotTargetImageError('Not a flag image: none of saffron, white or green were found.')
    return presence
