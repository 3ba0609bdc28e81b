"""Core domain types and logic."""

from .config import Config, ConfigError, load_config, load_config_or_default
from .errors import ErrorCode
from .profile import ArtifactRole, ReleaseProfile
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    # errors
    "ErrorCode",
    # profile
    "ArtifactRole",
    "ReleaseProfile",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
