"""Chakra position and size.

The chakra must sit at the horizontal centre of the image and the vertical
centre of the white band, and its diameter must be 3/4 of the white band
height.

  |offset_x| <= CENTER_TOLERANCE % of image width
  |offset_y| <= CENTER_TOLERANCE % of white band height
  diameter within DIAMETER_TOLERANCE % of 0.75 × white band height

Offsets and diameter are reported in pixels of the analysed (cropped) image,
together with the detected spoke count.

Example:
    flag-tool validate flag.svg --set CENTER_TOLERANCE=3 --set DIAMETER_TOLERANCE=12
"""

from flag_checker.checks._common import within_tolerance
from flag_checker.core.report import ReportBuilder, empty_details
from flag_checker.core.types import AnalysisContext, Check, Fail, Pass

check = Check(
    name='chakra_position',
    slots=('chakra_position',),
    help='Chakra centred in the white band with diameter 3/4 of its height.',
    order=40,
)

POSITION_TIP = 'Chakra must be centered in the white band; diameter = 3/4 of white band height.'


@check.run
def run(ctx: AnalysisContext, report: ReportBuilder) -> None:
    emblem = ctx.emblem
    if emblem is None or ctx.bands is None:
        why = ctx.emblem_error or 'not detected'
        report.add(
            'chakra_position',
            Fail(
                message=f'Chakra detection failed: {why}.',
                reason='Chakra position could not be checked: chakra not detected.',
                details=empty_details('chakra_position'),
                tip='Ensure the chakra is clearly visible and navy blue.',
            ),
        )
        return

    cfg = ctx.config
    band_h = ctx.bands.middle.height
    expected_dia = band_h * cfg.expected_diameter_ratio
    dia_ok = within_tolerance(emblem.diameter, expected_dia, cfg.diameter_tolerance)
    x_ok = abs(emblem.offset_x) <= ctx.raster.width * cfg.center_tolerance / 100.0
    y_ok = abs(emblem.offset_y) <= band_h * cfg.center_tolerance / 100.0

    details = {
        'offset_x': f'{round(abs(emblem.offset_x))}px',
        'offset_y': f'{round(abs(emblem.offset_y))}px',
        'diameter': f'{round(emblem.diameter)}px',
        'detected': ctx.spokes.detected if ctx.spokes is not None else '-',
    }

    if dia_ok and x_ok and y_ok:
        report.add('chakra_position', Pass(message='Chakra is centered and sized correctly.', details=details))
        return

    problems = []
    if not (x_ok and y_ok):
        problems.append(f'off-centre by ({emblem.offset_x:+.0f}, {emblem.offset_y:+.0f}) px')
    if not dia_ok:
        problems.append(f'diameter {emblem.diameter:.0f}px, expected {expected_dia:.0f}px')
    report.add(
        'chakra_position',
        Fail(
            message=f'Chakra is not centered and/or diameter is off: {"; ".join(problems)}.',
            reason='Chakra is not centered or sized correctly.',
            details=details,
            tip=POSITION_TIP,
        ),
    )
