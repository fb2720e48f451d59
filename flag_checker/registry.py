"""Check auto-discovery and registration.

Scans flag_checker/checks/ for modules that define a `check` object of type
Check. Collects them into a dict keyed by name, ordered by Check.order.

Handles both normal Python (pkgutil.iter_modules) and frozen PyInstaller
binaries (where iter_modules returns nothing, so it falls back to explicit
imports from checks/__init__.py).
"""

import importlib
import pkgutil

from flag_checker.core.types import Check

_registry: dict[str, Check] = {}

# Known check module names, the fallback for frozen binaries
_CHECK_MODULES = [
    'aspect_ratio',
    'chakra_position',
    'chakra_spokes',
    'colours',
    'stripe_proportion',
]


def discover() -> dict[str, Check]:
    """Import all check modules and return the registry, in evaluation order."""
    if _registry:
        return _registry

    import flag_checker.checks as pkg

    found_modules = [
        modname for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__) if not modname.startswith('_')
    ]
    if not found_modules:
        found_modules = _CHECK_MODULES

    found: list[Check] = []
    for modname in found_modules:
        module = importlib.import_module(f'flag_checker.checks.{modname}')
        chk = getattr(module, 'check', None)
        if isinstance(chk, Check):
            found.append(chk)

    # Filled in one update so a concurrent caller never sees a partial registry
    _registry.update({chk.name: chk for chk in sorted(found, key=lambda c: (c.order, c.name))})
    return _registry


def get(name: str) -> Check:
    """Get a check by name."""
    reg = discover()
    if name not in reg:
        raise KeyError(f'Unknown check: {name}. Available: {", ".join(reg)}')
    return reg[name]


def ordered_checks() -> list[Check]:
    """All registered checks in evaluation order."""
    return list(discover().values())
