"""Estimate the number of spokes in the located emblem.

Rings at spoke_ring_fractions × radius (inside the rim, outside the hub) are
sampled every spoke_angle_step degrees. Each spoke crossing a ring shows up
as one rising edge (background -> emblem colour), counted circularly so a
spoke straddling 0° is not counted twice. The median over rings is the raw
estimate, which then gets a bounded correction:

  - a count near double the expected value (each spoke seen as two edges,
    e.g. anti-aliased outlines) is halved;
  - a count near half (spokes thinner than the angular step) is doubled;
  - anything within twice `spoke_band` of the expected count is clamped
    into expected ± spoke_band.

A halved or doubled estimate is flagged as rescaled. Strict spoke checking
does not accept it, since a chakra with 12 or 48 spokes rescales to 24.
"""

import logging

import numpy as np

from flag_checker.core.config import ValidationConfig
from flag_checker.core.types import EmblemGeometry, SpokeEstimate
from flag_checker.stages.emblem import ring_offsets, sample_mask

logger = logging.getLogger(__name__)


def ring_transitions(mask: np.ndarray, cx: float, cy: float, radius: float, angle_step: float) -> int:
    """Circular count of off -> on transitions along one ring."""
    dx, dy = ring_offsets(radius, angle_step)
    on = sample_mask(mask, cx + dx, cy + dy)
    return int(np.count_nonzero(on & ~np.roll(on, 1)))


def rescale_factor(raw: int, expected: int, band: int) -> float:
    """0.5 for a count that looks doubled, 2.0 for one that looks halved, else 1.0."""
    lo, hi = max(1, expected - band), expected + band
    if raw > hi and lo <= raw / 2 <= hi:
        return 0.5
    if 0 < raw < lo and lo <= raw * 2 <= hi:
        return 2.0
    return 1.0


def correct_spoke_count(raw: int, expected: int, band: int) -> int:
    if raw <= 0:
        return 0
    lo, hi = max(1, expected - band), expected + band
    estimate = int(round(raw * rescale_factor(raw, expected, band)))
    if abs(estimate - expected) <= 2 * band:
        estimate = min(max(estimate, lo), hi)
    return estimate


def count_spokes(mask: np.ndarray, emblem: EmblemGeometry, config: ValidationConfig) -> SpokeEstimate:
    counts = tuple(
        ring_transitions(mask, emblem.center_x, emblem.center_y, emblem.radius * f, config.spoke_angle_step)
        for f in config.spoke_ring_fractions
    )
    raw = int(round(float(np.median(counts)))) if counts else 0
    detected = correct_spoke_count(raw, config.expected_spokes, config.spoke_band)
    rescaled = raw > 0 and rescale_factor(raw, config.expected_spokes, config.spoke_band) != 1.0
    logger.debug('spoke rings %s -> raw %d, corrected %d%s', counts, raw, detected, ' (rescaled)' if rescaled else '')
    return SpokeEstimate(ring_counts=counts, raw=raw, detected=detected, rescaled=rescaled)
