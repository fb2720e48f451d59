"""Helpers shared by the check modules."""

BANDS_MISSING = 'bands not detected in order'
FLAT_FLAG_TIP = 'Use a flat flag with clear horizontal bands (no folds/filters).'


def within_tolerance(actual: float, expected: float, percent: float) -> bool:
    """True when actual is within `percent` % of expected (relative)."""
    return abs(actual - expected) <= abs(expected) * (percent / 100.0) + 1e-9


def colour_label(name: str) -> str:
    return 'Chakra blue' if name == 'chakra_blue' else name.capitalize()
