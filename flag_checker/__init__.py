"""flag-tool — conformance checks for images of the Indian national flag."""

from flag_checker.core.config import PROFILES, ValidationConfig, get_profile
from flag_checker.core.errors import ConfigError, DecodeError, DetectionFailure, FlagCheckError, NotTargetImageError
from flag_checker.core.loader import load_raster
from flag_checker.core.types import Fail, Pass, Raster, ValidationReport
from flag_checker.validator import validate, validate_raster

__all__ = [
    'PROFILES',
    'ConfigError',
    'DecodeError',
    'DetectionFailure',
    'Fail',
    'FlagCheckError',
    'NotTargetImageError',
    'Pass',
    'Raster',
    'ValidationConfig',
    'ValidationReport',
    'get_profile',
    'load_raster',
    'validate',
    'validate_raster',
]
