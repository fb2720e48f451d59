"""Aspect ratio: width / height against 3:2.

Passes when the ratio of the (cropped) image is within RATIO_TOLERANCE
percent of 1.5. Runs regardless of every other check.

Example:
    flag-tool validate flag.png --set RATIO_TOLERANCE=2
"""

from flag_checker.checks._common import within_tolerance
from flag_checker.core.report import ReportBuilder
from flag_checker.core.types import AnalysisContext, Check, Fail, Pass

check = Check(
    name='aspect_ratio',
    slots=('aspect_ratio',),
    help='Width:height must be 3:2 within RATIO_TOLERANCE percent.',
    order=10,
)


@check.run
def run(ctx: AnalysisContext, report: ReportBuilder) -> None:
    cfg = ctx.config
    actual = ctx.raster.width / ctx.raster.height
    details = {'actual': f'{actual:.2f}'}

    if within_tolerance(actual, cfg.target_ratio, cfg.ratio_tolerance):
        message = f'Aspect ratio is within {cfg.ratio_tolerance:g}% of 3:2.'
        report.add('aspect_ratio', Pass(message=message, details=details))
        return

    report.add(
        'aspect_ratio',
        Fail(
            message=f'Aspect ratio is {actual:.2f} (should be {cfg.target_ratio:.2f}).',
            reason=f'Aspect ratio is not 3:2 (±{cfg.ratio_tolerance:g}%).',
            severity='major',
            details=details,
            tip='Crop or resize the image so width:height is exactly 3:2.',
        ),
    )
