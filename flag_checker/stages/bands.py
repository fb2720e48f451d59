"""Row classification into band labels, run compression and band location.

Each row is reduced to the mean colour of its central slice (25%-75% of the
width, so edge artefacts and most of the emblem are ignored) and labelled
with the nearest band reference. Ties go to top, then bottom, else middle.
Adjacent equal labels merge into runs; the best top/middle/bottom triple of
consecutive runs is the detected flag.
"""

import logging
from collections.abc import Sequence

import numpy as np

from flag_checker.core.config import ValidationConfig
from flag_checker.core.palette import BAND_COLOURS, MAX_DISTANCE, reference_rgb
from flag_checker.core.types import BAND_ORDER, BandLabel, BandTriple, Raster, Run

logger = logging.getLogger(__name__)


def row_means(raster: Raster, slice_range: tuple[float, float] = (0.25, 0.75)) -> np.ndarray:
    """Mean RGB of the central horizontal slice of every row, shape (H, 3)."""
    w = raster.width
    x0 = min(w - 1, max(0, int(w * slice_range[0])))
    x1 = min(w - 1, max(x0, int(w * slice_range[1])))
    return raster.pixels[:, x0 : x1 + 1, :].astype(np.float64).mean(axis=1)


def classify_colours(colours: np.ndarray) -> list[BandLabel]:
    """Label each (r, g, b) row colour with its nearest band reference."""
    colours = np.asarray(colours, dtype=np.float64).reshape(-1, 3)
    dist = {}
    for label, name in BAND_COLOURS.items():
        target = np.array(reference_rgb(name), dtype=np.float64)
        dist[label] = np.linalg.norm(colours - target, axis=1) / MAX_DISTANCE * 100.0

    d_top, d_mid, d_bot = dist['top'], dist['middle'], dist['bottom']
    is_top = (d_top <= d_mid) & (d_top <= d_bot)
    is_bottom = ~is_top & (d_bot <= d_top) & (d_bot <= d_mid)
    labels = np.where(is_top, 'top', np.where(is_bottom, 'bottom', 'middle'))
    return [str(label) for label in labels]


def classify_rows(raster: Raster, config: ValidationConfig) -> list[BandLabel]:
    return classify_colours(row_means(raster, config.row_slice))


def compress_runs(labels: Sequence[BandLabel]) -> list[Run]:
    """Merge adjacent equal labels into maximal runs in a single pass."""
    runs: list[Run] = []
    if not labels:
        return runs
    current = labels[0]
    start = 0
    for y in range(1, len(labels)):
        if labels[y] != current:
            runs.append(Run(label=current, start=start, end=y - 1))
            current = labels[y]
            start = y
    runs.append(Run(label=current, start=start, end=len(labels) - 1))
    return runs


def expand_runs(runs: Sequence[Run]) -> list[BandLabel]:
    """Inverse of compress_runs: one label per row."""
    labels: list[BandLabel] = []
    for run in runs:
        labels.extend([run.label] * run.height)
    return labels


def locate_bands(runs: Sequence[Run]) -> BandTriple | None:
    """Best consecutive (top, middle, bottom) triple by total height.

    On equal totals the first triple found wins. None when no triple exists.
    """
    best: BandTriple | None = None
    for i in range(len(runs) - 2):
        a, b, c = runs[i], runs[i + 1], runs[i + 2]
        if (a.label, b.label, c.label) != BAND_ORDER:
            continue
        candidate = BandTriple(top=a, middle=b, bottom=c)
        if best is None or candidate.total > best.total:
            best = candidate
    return best


def detect_bands(raster: Raster, config: ValidationConfig) -> tuple[list[Run], BandTriple | None]:
    runs = compress_runs(classify_rows(raster, config))
    bands = locate_bands(runs)
    logger.debug('%d runs, bands=%s', len(runs), bands)
    return runs, bands
