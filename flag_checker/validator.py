"""Validation pipeline: load -> pre-check -> crop -> bands -> emblem -> spokes -> checks -> report.

Fatal errors (DecodeError, NotTargetImageError) short-circuit to an all-fail
report with a single reason. Everything else is compartmentalised: a failed
detection only fails the criteria that depend on it, and a check that raises
only fails its own slots. No exception escapes validate().
"""

import logging
import os

from flag_checker import registry
from flag_checker.checks._common import BANDS_MISSING
from flag_checker.core.config import ValidationConfig
from flag_checker.core.errors import DecodeError, DetectionFailure, NotTargetImageError
from flag_checker.core.loader import load_raster
from flag_checker.core.report import ReportBuilder, empty_details, failed_report
from flag_checker.core.types import AnalysisContext, Fail, Raster, ValidationReport
from flag_checker.stages.bands import detect_bands
from flag_checker.stages.crop import crop_to_content
from flag_checker.stages.emblem import emblem_mask, locate_emblem
from flag_checker.stages.presence import ensure_flag_colours
from flag_checker.stages.spokes import count_spokes

logger = logging.getLogger(__name__)


def validate(
    source: str | os.PathLike | bytes, config: ValidationConfig | None = None, fmt: str | None = None
) -> ValidationReport:
    """Validate an image file path or encoded buffer."""
    config = config or ValidationConfig()
    try:
        raster = load_raster(source, fmt=fmt, svg_dpi=config.svg_dpi)
    except DecodeError as e:
        logger.warning('decode failed: %s', e)
        return failed_report(
            reason='Image could not be decoded.',
            message=f'Image could not be decoded: {e}',
            tip='Upload a valid JPEG, PNG, SVG or WEBP image.',
        )
    return validate_raster(raster, config)


def analyse(raster: Raster, config: ValidationConfig) -> AnalysisContext:
    """Run the detection stages and collect their outputs (or errors) in a context."""
    raster, box = crop_to_content(raster, config)
    ctx = AnalysisContext(raster=raster, config=config, crop_box=box)

    _runs, ctx.bands = detect_bands(raster, config)
    if ctx.bands is None:
        ctx.bands_error = ctx.emblem_error = ctx.spokes_error = BANDS_MISSING
        return ctx

    mask = emblem_mask(raster, config)
    try:
        ctx.emblem = locate_emblem(raster, ctx.bands, config, mask=mask)
    except DetectionFailure as e:
        ctx.emblem_error = ctx.spokes_error = str(e).rstrip('.')
        return ctx
    except Exception:
        logger.exception('emblem search failed')
        ctx.emblem_error = ctx.spokes_error = 'chakra detection failed'
        return ctx

    try:
        ctx.spokes = count_spokes(mask, ctx.emblem, config)
    except Exception:
        logger.exception('spoke count failed')
        ctx.spokes_error = 'spoke analysis failed'
    return ctx


def validate_raster(raster: Raster, config: ValidationConfig | None = None) -> ValidationReport:
    """Validate an already-decoded raster."""
    config = config or ValidationConfig()
    try:
        ensure_flag_colours(raster, config)
    except NotTargetImageError as e:
        logger.warning('%s', e)
        return failed_report(
            reason=str(e),
            message='Not a flag image.',
            tip='Upload an image of the flag: saffron, white and green bands with a navy chakra.',
        )

    ctx = analyse(raster, config)
    report = ReportBuilder()
    for chk in registry.ordered_checks():
        try:
            chk.execute(ctx, report)
        except Exception:
            logger.exception('check %s failed', chk.name)
            for slot in chk.slots:
                if not report.has(slot):
                    report.add(
                        slot,
                        Fail(
                            message=f'Internal error while evaluating {chk.name}.',
                            reason=f'{slot.replace("_", " ").capitalize()} could not be evaluated.',
                            details=empty_details(slot),
                        ),
                    )
    return report.build()
