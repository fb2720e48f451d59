"""Report builder — assembles the ValidationReport, renders text and JSON output."""

import json
from typing import Any

from flag_checker.core.types import CriterionResult, Fail, Summary, ValidationReport

PASS_TIP = 'Your flag image is BIS-compliant!'
FAIL_TIP = 'Fix the issues listed above per BIS specifications.'

COLOUR_SLOTS = ('saffron', 'white', 'green', 'chakra_blue')
SLOTS = ('aspect_ratio', *COLOUR_SLOTS, 'stripe_proportion', 'chakra_position', 'chakra_spokes')

# Placeholder values for each slot when nothing could be measured
_EMPTY_DETAILS: dict[str, dict[str, Any]] = {
    'aspect_ratio': {'actual': '-'},
    'stripe_proportion': {'top': '0.00', 'middle': '0.00', 'bottom': '0.00'},
    'chakra_position': {'offset_x': '-', 'offset_y': '-', 'diameter': '-', 'detected': '-'},
    'chakra_spokes': {'detected': 0},
    **{name: {'deviation': '-'} for name in COLOUR_SLOTS},
}


def empty_details(slot: str) -> dict[str, Any]:
    return dict(_EMPTY_DETAILS[slot])


class ReportBuilder:
    """Collects one CriterionResult per slot during a single validation call."""

    def __init__(self) -> None:
        self._results: dict[str, CriterionResult] = {}
        self._reasons: list[str] = []

    def add(self, slot: str, result: CriterionResult) -> None:
        if slot not in SLOTS:
            raise KeyError(f'Unknown report slot: {slot}')
        if slot in self._results:
            raise ValueError(f'Slot {slot} already recorded')
        self._results[slot] = result
        if isinstance(result, Fail):
            self._reasons.append(result.reason)

    def has(self, slot: str) -> bool:
        return slot in self._results

    def build(self) -> ValidationReport:
        missing = [s for s in SLOTS if s not in self._results]
        if missing:
            raise ValueError(f'Report incomplete, missing: {", ".join(missing)}')
        passed = not self._reasons
        r = self._results
        return ValidationReport(
            summary=Summary(
                status='pass' if passed else 'fail',
                reasons=tuple(self._reasons),
                tip=PASS_TIP if passed else FAIL_TIP,
            ),
            aspect_ratio=r['aspect_ratio'],
            colors={name: r[name] for name in COLOUR_SLOTS},
            stripe_proportion=r['stripe_proportion'],
            chakra_position=r['chakra_position'],
            chakra_spokes=r['chakra_spokes'],
        )


def failed_report(reason: str, message: str, tip: str | None = None) -> ValidationReport:
    """All-fail report for a fatal error. The summary carries only `reason`."""
    results = {slot: Fail(message=message, reason=reason, details=empty_details(slot), tip=tip) for slot in SLOTS}
    return ValidationReport(
        summary=Summary(status='fail', reasons=(reason,), tip=FAIL_TIP),
        aspect_ratio=results['aspect_ratio'],
        colors={name: results[name] for name in COLOUR_SLOTS},
        stripe_proportion=results['stripe_proportion'],
        chakra_position=results['chakra_position'],
        chakra_spokes=results['chakra_spokes'],
    )


def _detail_text(name: str, data: dict[str, Any]) -> str:
    if name == 'aspect_ratio':
        return f'actual {data.get("actual")}'
    if name.startswith('colors.'):
        return f'deviation {data.get("deviation")}'
    if name == 'stripe_proportion':
        return f'top {data.get("top")}  middle {data.get("middle")}  bottom {data.get("bottom")}'
    if name == 'chakra_position':
        return (
            f'offset ({data.get("offset_x")}, {data.get("offset_y")})  '
            f'diameter {data.get("diameter")}  spokes {data.get("detected")}'
        )
    if name == 'chakra_spokes':
        return f'detected {data.get("detected")}'
    return ''


def format_text(report: ValidationReport, image_path: str | None = None) -> str:
    """Format report as human-readable text."""
    lines = []
    verdict = report.summary.status.upper()
    lines.append(f'flag-tool: {image_path} \u2014 {verdict}' if image_path else f'flag-tool: {verdict}')
    lines.append('')

    for name, result in report.criteria():
        data = result.to_dict()
        mark = '\u2713' if result.passed else '\u2717'
        lines.append(f'{mark} {name:<22} {_detail_text(name, data)}')
        lines.append(f'    {result.message}')
        if not result.passed and data.get('tip'):
            lines.append(f'    tip: {data["tip"]}')

    lines.append('')
    if report.summary.reasons:
        lines.append('Reasons:')
        for reason in report.summary.reasons:
            lines.append(f'  - {reason}')
    lines.append(report.summary.tip)
    return '\n'.join(lines)


def format_json(report: ValidationReport, image_path: str | None = None) -> str:
    """Format report as JSON."""
    obj = report.to_dict()
    if image_path:
        obj = {'image': image_path, **obj}
    return json.dumps(obj, indent=2)
