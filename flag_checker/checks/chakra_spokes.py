"""Chakra spoke count.

The spoke counter reports a corrected estimate (median over three rings,
see flag_checker.stages.spokes). What counts as a pass is configurable:

  SPOKE_CHECK=strict    pass only when the estimate equals EXPECTED_SPOKES (24)
                        without halving or doubling (12 or 48 spokes fail)
  SPOKE_CHECK=advisory  always pass, the count is reported for information

A chakra that could not be located fails in both modes.

Example:
    flag-tool validate flag.png --spokes advisory
"""

from flag_checker.core.report import ReportBuilder
from flag_checker.core.types import AnalysisContext, Check, Fail, Pass

check = Check(
    name='chakra_spokes',
    slots=('chakra_spokes',),
    help='Spoke count of the chakra (strict: exactly 24; advisory: report only).',
    order=50,
)


@check.run
def run(ctx: AnalysisContext, report: ReportBuilder) -> None:
    expected = ctx.config.expected_spokes
    if ctx.spokes is None:
        why = ctx.spokes_error or ctx.emblem_error or 'chakra not detected'
        report.add(
            'chakra_spokes',
            Fail(
                message=f'Spoke count not determined: {why}.',
                reason='Chakra spokes could not be counted.',
                details={'detected': 0},
            ),
        )
        return

    detected = ctx.spokes.detected
    details = {'detected': detected}

    if ctx.config.spoke_check == 'advisory':
        report.add(
            'chakra_spokes',
            Pass(message=f'Chakra shows {detected} spokes (advisory; expected {expected}).', details=details),
        )
    elif detected == expected and not ctx.spokes.rescaled:
        report.add('chakra_spokes', Pass(message=f'Chakra has exactly {expected} spokes.', details=details))
    else:
        if ctx.spokes.rescaled:
            message = (
                f'Chakra shows {ctx.spokes.raw} spoke edges, corrected to {detected}; '
                f'strict mode needs exactly {expected} without correction.'
            )
        else:
            message = f'Chakra has {detected} spokes (should be {expected}).'
        report.add(
            'chakra_spokes',
            Fail(
                message=message,
                reason=f'Chakra does not have {expected} spokes.',
                details=details,
                tip=f'Ensure exactly {expected} evenly spaced spokes.',
            ),
        )
