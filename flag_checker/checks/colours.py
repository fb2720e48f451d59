"""Colour accuracy of the three bands and the chakra.

Band colour: mean of colour_columns evenly spaced samples per row across
5%-95% of the width, over the band's rows minus 5% at each edge. The middle
band skips a central window (half-width 0.5 × band height) so the chakra
does not drag the white towards blue.

Chakra colour: mean of a small square window (half-size max(3, 1% of
min(width, band height))) at the image's horizontal centre and the white
band's vertical centre.

Each colour is compared with its reference by deviation% (RGB distance /
max distance × 100). Pass at or below COLOR_TOLERANCE; a failure is
'major' above COLOR_MAJOR_THRESHOLD, otherwise 'minor'.

Example:
    flag-tool validate flag.jpg --set COLOR_TOLERANCE=8
"""

import numpy as np

from flag_checker.checks._common import BANDS_MISSING, FLAT_FLAG_TIP, colour_label
from flag_checker.core.config import ValidationConfig
from flag_checker.core.palette import (
    BAND_COLOURS,
    COLOUR_TIPS,
    EMBLEM_COLOUR,
    Color,
    deviation,
    reference_rgb,
    rgb_to_hex,
)
from flag_checker.core.report import ReportBuilder
from flag_checker.core.types import AnalysisContext, BandTriple, Check, Fail, Pass, Raster, Run

check = Check(
    name='colours',
    slots=('saffron', 'white', 'green', 'chakra_blue'),
    help='Band and chakra colours against #FF9933 / #FFFFFF / #138808 / #000080.',
    order=20,
)


def _mean_colour(block: np.ndarray) -> Color:
    mean = block.reshape(-1, 3).astype(np.float64).mean(axis=0)
    return (int(round(mean[0])), int(round(mean[1])), int(round(mean[2])))


def band_colour(raster: Raster, run: Run, config: ValidationConfig, exclude_centre: bool = False) -> Color:
    """Mean colour of one band, sampled at several points per row."""
    w = raster.width
    lo, hi = config.colour_span
    cols = np.unique(np.linspace(w * lo, (w - 1) * hi, config.colour_columns).astype(int))
    if exclude_centre:
        keep = np.abs(cols - w / 2.0) > run.height * config.middle_exclusion
        if keep.any():
            cols = cols[keep]

    trim = int(run.height * config.colour_edge_trim)
    y0, y1 = run.start + trim, run.end - trim
    if y1 < y0:
        y0, y1 = run.start, run.end
    return _mean_colour(raster.pixels[y0 : y1 + 1][:, cols, :])


def emblem_window_colour(raster: Raster, bands: BandTriple) -> Color:
    """Mean colour of the small window at the middle of the white band."""
    band = bands.middle
    y_mid = (band.start + band.end) // 2
    x_mid = raster.width // 2
    win = max(3, int(min(raster.width, band.height) * 0.01))
    y0, y1 = max(0, y_mid - win), min(raster.height - 1, y_mid + win)
    x0, x1 = max(0, x_mid - win), min(raster.width - 1, x_mid + win)
    return _mean_colour(raster.pixels[y0 : y1 + 1, x0 : x1 + 1])


def colour_result(name: str, rgb: Color, config: ValidationConfig) -> Pass | Fail:
    dev = deviation(rgb, reference_rgb(name))
    label = colour_label(name)
    details = {'deviation': f'{dev}%'}
    if dev <= config.color_tolerance:
        return Pass(message=f'{label} colour is within {config.color_tolerance:g}% tolerance.', details=details)
    return Fail(
        message=f'{label} colour {rgb_to_hex(rgb)} deviates by {dev}%.',
        reason=f'{label} colour deviation is too high.',
        severity='major' if dev > config.color_major_threshold else 'minor',
        details=details,
        tip=COLOUR_TIPS[name],
    )


@check.run
def run(ctx: AnalysisContext, report: ReportBuilder) -> None:
    if ctx.bands is None:
        for name in check.slots:
            label = colour_label(name)
            report.add(
                name,
                Fail(
                    message=f'Bands not detected; {label.lower()} colour not measured.',
                    reason=f'{label} colour could not be measured: {BANDS_MISSING}.',
                    details={'deviation': '-'},
                    tip=FLAT_FLAG_TIP,
                ),
            )
        return

    for label, run_ in zip(('top', 'middle', 'bottom'), ctx.bands.runs()):
        name = BAND_COLOURS[label]
        rgb = band_colour(ctx.raster, run_, ctx.config, exclude_centre=label == 'middle')
        report.add(name, colour_result(name, rgb, ctx.config))

    rgb = emblem_window_colour(ctx.raster, ctx.bands)
    report.add(EMBLEM_COLOUR, colour_result(EMBLEM_COLOUR, rgb, ctx.config))
