"""Auto-discovery of check modules.

Every .py file in this package that defines a `check` object is
auto-registered by flag_checker.registry.discover(). Checks run in
ascending `order`, which is also the order of reasons in the summary.

The explicit imports below keep these modules in frozen binaries, where
pkgutil.iter_modules cannot find them at runtime.
"""

# PyInstaller hidden imports: keep this list in sync with the check modules
import flag_checker.checks.aspect_ratio as _aspect_ratio  # noqa: F401
import flag_checker.checks.chakra_position as _chakra_position  # noqa: F401
import flag_checker.checks.chakra_spokes as _chakra_spokes  # noqa: F401
import flag_checker.checks.colours as _colours  # noqa: F401
import flag_checker.checks.stripe_proportion as _stripe_proportion  # noqa: F401
