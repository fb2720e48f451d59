"""FLAG_* settings gathered from a .env file and the process environment.

flag-tool reads its settings (FLAG_PROFILE, FLAG_COLOR_TOLERANCE, ...) from
two places, later wins:
  1. a .env file: the --env-file path if given, otherwise the first .env
     found walking up from the working directory, stopping at the .git
     boundary so a file outside the checkout never applies;
  2. the process environment.

Only FLAG_* keys are kept; a shared .env with other tools' keys is fine.
Nothing is written back to os.environ, the merged mapping is handed to
config.from_env.
"""

import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path

from flag_checker.core.config import ENV_PREFIX, OVERRIDABLE
from flag_checker.core.errors import ConfigError

logger = logging.getLogger(__name__)

KNOWN_KEYS = frozenset({f'{ENV_PREFIX}PROFILE', *(f'{ENV_PREFIX}{name}' for name in OVERRIDABLE)})

_LINE = re.compile(r'^(?:export\s+)?(?P<key>[A-Za-z_][A-Za-z0-9_]*)\s*=\s*(?P<value>.*)$')


def find_dotenv(start: Path) -> Path | None:
    """First .env at or above start. A .git dir or file ends the walk."""
    for directory in (start.resolve(), *start.resolve().parents):
        candidate = directory / '.env'
        if candidate.is_file():
            return candidate
        if (directory / '.git').exists():
            break
    return None


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in '"\'':
        return value[1:-1]
    # unquoted values may carry a trailing comment
    return value.split(' #', 1)[0].strip()


def read_dotenv(path: Path) -> dict[str, str]:
    """FLAG_* assignments in a .env file. Other keys, comments and junk lines are skipped."""
    settings: dict[str, str] = {}
    for lineno, line in enumerate(path.read_text(encoding='utf-8').splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        match = _LINE.match(line)
        if match is None:
            logger.debug('%s:%d: not an assignment, skipped', path, lineno)
            continue
        key = match['key']
        if key.startswith(ENV_PREFIX):
            settings[key] = _unquote(match['value'].strip())
    return settings


def flag_settings(environ: Mapping[str, str]) -> dict[str, str]:
    """The FLAG_* subset of an environment mapping."""
    return {key: value for key, value in environ.items() if key.startswith(ENV_PREFIX)}


def load_settings(
    env_file: str | None = None,
    environ: Mapping[str, str] | None = None,
    start: Path | None = None,
) -> tuple[dict[str, str], Path | None]:
    """Merge .env and environment FLAG_* settings.

    Returns (settings, path of the .env used or None). An explicit env_file
    that does not exist raises ConfigError.
    """
    if env_file:
        path: Path | None = Path(env_file)
        if not path.is_file():
            raise ConfigError(f'env file not found: {env_file}')
    else:
        path = find_dotenv(start or Path.cwd())

    settings = read_dotenv(path) if path else {}
    settings.update(flag_settings(os.environ if environ is None else environ))

    for key in sorted(set(settings) - KNOWN_KEYS):
        logger.warning('ignoring unknown setting %s', key)
    return {key: value for key, value in settings.items() if key in KNOWN_KEYS}, path
