"""Stripe proportions: each band should be one third of the flag height.

Uses the best saffron -> white -> green run triple found by the band
locator. Each band height / image height must be within STRIPE_TOLERANCE
percent of 1/3; all three must pass.

Example:
    flag-tool validate flag.png --json
"""

from flag_checker.checks._common import BANDS_MISSING, FLAT_FLAG_TIP, within_tolerance
from flag_checker.core.report import ReportBuilder, empty_details
from flag_checker.core.types import AnalysisContext, Check, Fail, Pass

check = Check(
    name='stripe_proportion',
    slots=('stripe_proportion',),
    help='Each band must be 1/3 of the height within STRIPE_TOLERANCE percent.',
    order=30,
)


@check.run
def run(ctx: AnalysisContext, report: ReportBuilder) -> None:
    if ctx.bands is None:
        report.add(
            'stripe_proportion',
            Fail(
                message='Could not detect saffron/white/green bands in order.',
                reason=f'Stripe heights could not be measured: {BANDS_MISSING}.',
                details=empty_details('stripe_proportion'),
                tip=FLAT_FLAG_TIP,
            ),
        )
        return

    height = ctx.raster.height
    top, middle, bottom = (run.height / height for run in ctx.bands.runs())
    details = {'top': f'{top:.2f}', 'middle': f'{middle:.2f}', 'bottom': f'{bottom:.2f}'}
    tol = ctx.config.stripe_tolerance

    if all(within_tolerance(p, 1 / 3, tol) for p in (top, middle, bottom)):
        report.add('stripe_proportion', Pass(message='Each stripe is 1/3 of the flag height.', details=details))
        return

    report.add(
        'stripe_proportion',
        Fail(
            message='Each stripe should be exactly 1/3 of the flag height.',
            reason='Stripe heights are not in 1/3 proportion.',
            details=details,
            tip='Resize/crop so each band is one-third of total height.',
        ),
    )
