"""Validation tolerances and tuning knobs, grouped into named profiles.

Every threshold the pipeline uses lives on ValidationConfig, which is passed
explicitly into every stage. Tolerances are overridable by their upper-case
names (COLOR_TOLERANCE, RATIO_TOLERANCE, STRIPE_TOLERANCE, CENTER_TOLERANCE,
DIAMETER_TOLERANCE, ...), either programmatically, through FLAG_<NAME>
environment variables, or on the command line with --set NAME=VALUE.

Profiles:
  strict   the published tolerances (colour 5%, ratio 1%, stripe 2%,
           centre 2%, diameter 10%)
  lenient  for photographed or re-encoded flags (colour 8%, ratio 2%,
           stripe 5%, centre 5%, diameter 15%)
"""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from flag_checker.core.errors import ConfigError

SpokeMode = Literal['strict', 'advisory']

ENV_PREFIX = 'FLAG_'


@dataclass(frozen=True)
class ValidationConfig:
    # Percent tolerances
    color_tolerance: float = 5.0
    color_major_threshold: float = 10.0
    ratio_tolerance: float = 1.0
    stripe_tolerance: float = 2.0
    center_tolerance: float = 2.0
    diameter_tolerance: float = 10.0

    # Flag geometry
    target_ratio: float = 1.5
    expected_diameter_ratio: float = 0.75  # emblem diameter / middle band height
    expected_spokes: int = 24

    # Loader
    svg_dpi: int = 300

    # Colour pre-check
    presence_channel_threshold: int = 60
    presence_min_fraction: float = 0.001
    presence_max_samples: int = 40000

    # Cropper
    crop_channel_threshold: int = 60
    crop_min_chroma: int = 40
    crop_full_coverage: float = 0.98
    crop_margin: int = 2

    # Band classifier / colour scorer
    row_slice: tuple[float, float] = (0.25, 0.75)
    colour_columns: int = 64
    colour_span: tuple[float, float] = (0.05, 0.95)
    colour_edge_trim: float = 0.05
    middle_exclusion: float = 0.5  # half-width of the central window, as a fraction of band height

    # Emblem locator
    emblem_channel_threshold: tuple[int, int, int] = (40, 40, 80)
    search_step: int = 2
    search_refine: bool = True
    search_x_range: tuple[float, float] = (0.3, 0.7)
    search_y_range: tuple[float, float] = (0.3, 0.7)
    search_ring_step: float = 2.0  # px between concentric search rings
    search_angle_step: float = 10.0
    search_min_hit_fraction: float = 0.5
    radius_angle_step: float = 5.0

    # Spoke counter
    spoke_ring_fractions: tuple[float, ...] = (0.85, 0.88, 0.91)
    spoke_angle_step: float = 1.0
    spoke_band: int = 4
    spoke_check: SpokeMode = 'strict'

    def with_overrides(self, overrides: Mapping[str, Any]) -> ValidationConfig:
        """Return a copy with fields replaced, addressed by upper- or lower-case name."""
        fields = {f.name: f for f in dataclasses.fields(self)}
        changes: dict[str, Any] = {}
        for key, raw in overrides.items():
            name = key.lower()
            if name not in fields:
                raise ConfigError(f'Unknown setting: {key}. Available: {", ".join(sorted(OVERRIDABLE))}')
            changes[name] = _coerce(name, raw, getattr(self, name))
        return dataclasses.replace(self, **changes)


# Names exposed as overridable parameters
OVERRIDABLE = (
    'COLOR_TOLERANCE',
    'COLOR_MAJOR_THRESHOLD',
    'RATIO_TOLERANCE',
    'STRIPE_TOLERANCE',
    'CENTER_TOLERANCE',
    'DIAMETER_TOLERANCE',
    'EXPECTED_SPOKES',
    'SEARCH_STEP',
    'SPOKE_CHECK',
    'SVG_DPI',
)

PROFILES: dict[str, ValidationConfig] = {
    'strict': ValidationConfig(),
    'lenient': ValidationConfig(
        color_tolerance=8.0,
        color_major_threshold=15.0,
        ratio_tolerance=2.0,
        stripe_tolerance=5.0,
        center_tolerance=5.0,
        diameter_tolerance=15.0,
    ),
}


def _coerce(name: str, raw: Any, current: Any) -> Any:
    if name == 'spoke_check':
        value = str(raw).strip().lower()
        if value not in ('strict', 'advisory'):
            raise ConfigError(f'SPOKE_CHECK must be strict or advisory, got {raw!r}')
        return value
    if isinstance(current, bool):
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() in ('1', 'true', 'yes', 'on')
    if isinstance(current, tuple):
        if isinstance(raw, str):
            raw = [part for part in raw.split(',') if part.strip()]
        try:
            return tuple(type(current[0])(v) for v in raw) if current else tuple(raw)
        except (TypeError, ValueError) as e:
            raise ConfigError(f'{name.upper()} expects a comma-separated list, got {raw!r}') from e
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f'{name.upper()} must be a number, got {raw!r}') from e
    if isinstance(current, int):
        if not value.is_integer():
            raise ConfigError(f'{name.upper()} must be a whole number, got {raw!r}')
        value = int(value)
    if value < 0:
        raise ConfigError(f'{name.upper()} must not be negative, got {raw!r}')
    if name == 'search_step' and value < 1:
        raise ConfigError('SEARCH_STEP must be at least 1')
    return value


def get_profile(name: str) -> ValidationConfig:
    if name not in PROFILES:
        raise ConfigError(f'Unknown profile: {name}. Available: {", ".join(sorted(PROFILES))}')
    return PROFILES[name]


def from_env(environ: Mapping[str, str] | None = None, profile: str | None = None) -> ValidationConfig:
    """Build a config from FLAG_PROFILE and FLAG_<NAME> variables.

    An explicit `profile` argument beats FLAG_PROFILE.
    """
    env = os.environ if environ is None else environ
    base = get_profile(profile or env.get(f'{ENV_PREFIX}PROFILE') or 'strict')
    overrides = {name: env[f'{ENV_PREFIX}{name}'] for name in OVERRIDABLE if f'{ENV_PREFIX}{name}' in env}
    return base.with_overrides(overrides) if overrides else base


def parse_assignments(items: list[str] | None) -> dict[str, str]:
    """Parse ['COLOR_TOLERANCE=7', ...] from the command line."""
    result: dict[str, str] = {}
    for item in items or []:
        key, sep, value = item.partition('=')
        if not sep or not key.strip():
            raise ConfigError(f'Expected NAME=VALUE, got {item!r}')
        result[key.strip().upper()] = value.strip()
    return result
