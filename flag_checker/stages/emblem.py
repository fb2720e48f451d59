"""Locate the emblem (Ashoka Chakra) inside the middle band.

The response surface (ring hits per candidate centre) is flat-topped and
noisy, so this is an explicit grid search rather than an optimiser:

1. Coarse pass: candidate centres every `search_step` px over the central
   30%-70% of the width and of the band height. Each candidate samples a
   set of concentric rings every search_angle_step degrees, one ring every
   search_ring_step px across the radii DIAMETER_TOLERANCE allows. The
   candidate's score is the best ring's count of emblem-coloured samples,
   so a rim anywhere inside tolerance can be found. The centre is the mean
   of every candidate sharing the top score.
2. Refinement: the same search at step 1 within ±search_step of the
   coarse centre.

The radius is then measured by casting rays from the centre and taking the
median of the outermost emblem-coloured sample on each ray. Samples that
fall outside the image are skipped.
"""

import logging
import math

import numpy as np

from flag_checker.core.config import ValidationConfig
from flag_checker.core.errors import DetectionFailure
from flag_checker.core.palette import EMBLEM_COLOUR, reference_rgb
from flag_checker.core.types import BandTriple, EmblemGeometry, Raster

logger = logging.getLogger(__name__)


def emblem_mask(raster: Raster, config: ValidationConfig) -> np.ndarray:
    """Boolean H×W mask of pixels within the per-channel emblem threshold."""
    target = np.array(reference_rgb(EMBLEM_COLOUR), dtype=np.int16)
    threshold = np.array(config.emblem_channel_threshold, dtype=np.int16)
    return np.all(np.abs(raster.pixels.astype(np.int16) - target) < threshold, axis=2)


def ring_offsets(radius: float, angle_step: float) -> tuple[np.ndarray, np.ndarray]:
    angles = np.deg2rad(np.arange(0.0, 360.0, angle_step))
    return radius * np.cos(angles), radius * np.sin(angles)


def sample_mask(mask: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Look up mask values at rounded (x, y) positions. Out of bounds reads as False."""
    px = np.rint(xs).astype(np.int64)
    py = np.rint(ys).astype(np.int64)
    h, w = mask.shape
    valid = (px >= 0) & (px < w) & (py >= 0) & (py < h)
    out = np.zeros(px.shape, dtype=bool)
    out[valid] = mask[py[valid], px[valid]]
    return out


def search_radii(expected_radius: float, config: ValidationConfig) -> np.ndarray:
    """Ring radii covering every rim size inside DIAMETER_TOLERANCE."""
    step = max(0.5, float(config.search_ring_step))
    spread = config.diameter_tolerance / 100.0
    # start one step inside the smallest rim so a thin rim is still crossed
    lo = max(1.0, expected_radius * (1.0 - spread) - step)
    hi = expected_radius * (1.0 + spread)
    return np.arange(lo, hi + step / 2, step)


def _grid_search(
    mask: np.ndarray, xs: np.ndarray, ys: np.ndarray, dx: np.ndarray, dy: np.ndarray
) -> tuple[int, float, float]:
    """Return (best score, mean x, mean y) over all candidates tied at the best score.

    dx and dy have shape (rings, samples); a candidate scores its best ring.
    """
    best = -1
    tied_x: list[float] = []
    tied_y: list[float] = []
    for cy in ys:
        sx, sy = np.broadcast_arrays(xs[:, None, None] + dx[None], cy + dy[None])
        scores = sample_mask(mask, sx, sy).sum(axis=2).max(axis=1)
        row_best = int(scores.max())
        if row_best < best:
            continue
        winners = xs[scores == row_best]
        if row_best > best:
            best = row_best
            tied_x, tied_y = [], []
        tied_x.extend(float(x) for x in winners)
        tied_y.extend([float(cy)] * len(winners))
    if best < 0:
        return 0, math.nan, math.nan
    return best, float(np.mean(tied_x)), float(np.mean(tied_y))


def measure_radius(mask: np.ndarray, cx: float, cy: float, max_radius: float, angle_step: float) -> float | None:
    """Median distance to the outermost emblem pixel along rays from (cx, cy)."""
    angles = np.deg2rad(np.arange(0.0, 360.0, angle_step))
    r = np.arange(0, int(math.ceil(max_radius)) + 1, dtype=np.float64)
    xs = cx + np.cos(angles)[:, None] * r[None, :]
    ys = cy + np.sin(angles)[:, None] * r[None, :]
    hits = sample_mask(mask, xs, ys)
    has_hit = hits.any(axis=1)
    if not has_hit.any():
        return None
    outermost = hits.shape[1] - 1 - np.argmax(hits[:, ::-1], axis=1)
    return float(np.median(r[outermost[has_hit]]))


def locate_emblem(
    raster: Raster, bands: BandTriple, config: ValidationConfig, mask: np.ndarray | None = None
) -> EmblemGeometry:
    """Find the emblem centre and radius within the middle band. Raises DetectionFailure."""
    if mask is None:
        mask = emblem_mask(raster, config)

    band = bands.middle
    band_h = band.height
    w = raster.width

    x_lo, x_hi = (int(w * f) for f in config.search_x_range)
    y_lo, y_hi = (int(band.start + band_h * f) for f in config.search_y_range)
    step = max(1, int(config.search_step))
    xs = np.arange(x_lo, x_hi, step, dtype=np.float64)
    ys = np.arange(y_lo, y_hi, step, dtype=np.float64)
    if len(xs) == 0 or len(ys) == 0:
        raise DetectionFailure('White band too small to search for the chakra.')

    expected_radius = band_h * config.expected_diameter_ratio / 2.0
    radii = search_radii(expected_radius, config)
    dx, dy = ring_offsets(1.0, config.search_angle_step)
    dx, dy = radii[:, None] * dx[None, :], radii[:, None] * dy[None, :]
    samples = dx.shape[1]

    score, cx, cy = _grid_search(mask, xs, ys, dx, dy)
    if score < samples * config.search_min_hit_fraction:
        raise DetectionFailure(f'Chakra not found in the white band (best ring score {score}/{samples}).')

    if config.search_refine and step > 1:
        fine_xs = np.arange(round(cx) - step, round(cx) + step + 1, dtype=np.float64)
        fine_ys = np.arange(round(cy) - step, round(cy) + step + 1, dtype=np.float64)
        fine_score, fine_cx, fine_cy = _grid_search(mask, fine_xs, fine_ys, dx, dy)
        if fine_score >= score:
            score, cx, cy = fine_score, fine_cx, fine_cy

    radius = measure_radius(mask, cx, cy, band_h / 2.0, config.radius_angle_step)
    if radius is None or radius <= 0:
        raise DetectionFailure('Chakra rim could not be measured.')

    geometry = EmblemGeometry(
        center_x=cx,
        center_y=cy,
        radius=radius,
        offset_x=cx - w / 2.0,
        offset_y=cy - (band.start + band_h / 2.0),
        ring_hits=score,
        ring_samples=samples,
    )
    logger.debug('emblem at (%.1f, %.1f) r=%.1f score %d/%d', cx, cy, radius, score, samples)
    return geometry
