"""Error taxonomy for flag-tool.

DecodeError and NotTargetImageError are fatal: the pipeline stops and returns
an all-fail report. DetectionFailure is compartmentalised: only the criteria
that depend on the missing detection fail.
"""


class FlagCheckError(Exception):
    """Base class for every error raised by flag_checker."""


class DecodeError(FlagCheckError):
    """The input is not a readable image in a supported format."""


class NotTargetImageError(FlagCheckError):
    """None of the required band colours appear anywhere in the image."""


class DetectionFailure(FlagCheckError):
    """A band triple or the emblem could not be located."""


class ConfigError(FlagCheckError):
    """Unknown profile, unknown override name, or a value that is not a number."""
