"""flag-tool — conformance checks for images of the Indian national flag.

Usage: flag-tool validate <image> [options]

Checks are auto-discovered from flag_checker/checks/.
Each check module's docstring is its documentation.
Run `flag-tool help <check>` for full module docs.

Settings:
  Tolerances come from a profile (strict by default), then FLAG_<NAME>
  environment variables, then --set NAME=VALUE on the command line; the
  later source wins.

Environment variables / .env settings:
  FLAG_* variables in the OS environment always win over a .env file.
  The .env file is looked for starting from the current directory and
  walking up, stopping at the nearest .git boundary.
  Use --env-file to override the .env location explicitly.
"""

import argparse
import importlib
import logging
import os
import sys

from flag_checker import registry
from flag_checker.core.config import OVERRIDABLE, PROFILES, ValidationConfig, from_env, parse_assignments
from flag_checker.core.env import load_settings
from flag_checker.core.errors import ConfigError
from flag_checker.core.report import format_json, format_text
from flag_checker.validator import validate

EXIT_OK = 0
EXIT_FAIL = 1
EXIT_CONFIG = 2


def _load_check_module(name: str) -> object:
    """Load the raw module for a check (for docstring access)."""
    return importlib.import_module(f'flag_checker.checks.{name}')


def _short_doc(name: str) -> str:
    doc = (_load_check_module(name).__doc__ or '').strip()
    return doc.splitlines()[0] if doc else registry.get(name).help


def _build_parser() -> argparse.ArgumentParser:
    epilog = (
        'Examples:\n'
        '  flag-tool validate flag.png\n'
        '  flag-tool validate flag.svg --json\n'
        '  flag-tool validate photo.jpg --profile lenient --spokes advisory\n'
        '  flag-tool validate flag.png --set COLOR_TOLERANCE=7 --fail-exit\n'
        '  flag-tool help colours\n'
        '  flag-tool profiles\n'
        '\n'
        'Settings env vars (set in .env or environment):\n'
        '  FLAG_PROFILE=strict|lenient\n'
        '  FLAG_COLOR_TOLERANCE, FLAG_RATIO_TOLERANCE, FLAG_STRIPE_TOLERANCE,\n'
        '  FLAG_CENTER_TOLERANCE, FLAG_DIAMETER_TOLERANCE, FLAG_SPOKE_CHECK, ...\n'
    )
    parser = argparse.ArgumentParser(
        prog='flag-tool',
        description='Validate an image of the Indian national flag against its construction rules.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    # Global options before the subcommand
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Log pipeline stages to stderr')
    sub = parser.add_subparsers(dest='command', help='Command to run')

    p = sub.add_parser('validate', help='Validate one flag image (JPEG, PNG, SVG or WEBP)')
    p.add_argument('image', help='Path to the image')
    p.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')
    p.add_argument(
        '-p',
        '--profile',
        choices=sorted(PROFILES),
        default=None,
        help='Tolerance profile (default: FLAG_PROFILE or strict)',
    )
    p.add_argument(
        '--spokes',
        choices=('strict', 'advisory'),
        default=None,
        help='strict: exactly 24 spokes to pass; advisory: report the count only',
    )
    p.add_argument(
        '-s',
        '--set',
        action='append',
        default=[],
        metavar='NAME=VALUE',
        help=f'Override a setting, repeatable. Names: {", ".join(OVERRIDABLE)}',
    )
    p.add_argument(
        '--fail-exit',
        action='store_true',
        help='Exit 1 when the image does not pass (CI gating)',
    )

    # `help` subcommand prints the full module docstring for a check
    help_parser = sub.add_parser('help', help='Print full docs for a check')
    help_parser.add_argument('check', nargs='?', help='Check name')

    sub.add_parser('profiles', help='List tolerance profiles')

    return parser


def _print_help(check: str | None) -> int:
    """Print full module docstring for a check."""
    checks = registry.discover()

    if check is None:
        print('Available checks:\n')
        for name in checks:
            print(f'  {name:<18} {_short_doc(name)}')
        print('\nRun: flag-tool help <check> for full docs.')
        return EXIT_OK

    if check not in checks:
        print(f'Unknown check: {check}', file=sys.stderr)
        print(f'Available: {", ".join(checks)}', file=sys.stderr)
        return EXIT_FAIL

    doc = (_load_check_module(check).__doc__ or '').strip()
    print(doc or f'(No module docs for {check!r})')
    return EXIT_OK


def _print_profiles() -> int:
    for name, cfg in PROFILES.items():
        print(
            f'{name:<8} colour {cfg.color_tolerance:g}% (major >{cfg.color_major_threshold:g}%)  '
            f'ratio {cfg.ratio_tolerance:g}%  stripe {cfg.stripe_tolerance:g}%  '
            f'centre {cfg.center_tolerance:g}%  diameter {cfg.diameter_tolerance:g}%'
        )
    return EXIT_OK


def _resolve_config(args: argparse.Namespace, settings: dict[str, str]) -> ValidationConfig:
    """Profile -> FLAG_* settings (.env, then environment) -> command line, later wins."""
    config = from_env(settings, profile=args.profile)
    overrides = parse_assignments(args.set)
    if args.spokes:
        overrides['SPOKE_CHECK'] = args.spokes
    return config.with_overrides(overrides) if overrides else config


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(name)s: %(message)s',
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        return EXIT_FAIL

    if args.command == 'help':
        return _print_help(args.check)

    if args.command == 'profiles':
        return _print_profiles()

    try:
        settings, env_path = load_settings(env_file=args.env_file)
        config = _resolve_config(args, settings)
    except ConfigError as e:
        print(f'flag-tool: {e}', file=sys.stderr)
        return EXIT_CONFIG
    if env_path:
        print(f'flag-tool: loaded {env_path}', file=sys.stderr)

    if not os.path.isfile(args.image):
        print(f'Error: image not found: {args.image}', file=sys.stderr)
        return EXIT_FAIL

    report = validate(args.image, config=config)

    if args.json:
        print(format_json(report, image_path=args.image))
    else:
        print(format_text(report, image_path=args.image))

    # CI gate runs after output so the report is visible even on failure
    if args.fail_exit and not report.passed:
        return EXIT_FAIL
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
