"""Core domain types and logic."""

from .config import Config, ConfigError, load_config, resolve_config
from .errors import ErrorCode
from .policy import StagePolicy
from .release import Credentials, ReleaseContext, ReleaseMetadata
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    "resolve_config",
    # errors
    "ErrorCode",
    # policy
    "StagePolicy",
    # release
    "Credentials",
    "ReleaseContext",
    "ReleaseMetadata",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
