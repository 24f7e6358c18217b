"""Core domain types and logic."""

from .config import CauldronConfig, Config, ConfigError, load_config, load_config_or_default
from .errors import ErrorCode
from .result import Err, Ok, Result, collect, is_err, is_ok

__all__ = [
    # config
    "CauldronConfig",
    "Config",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "collect",
    "is_err",
    "is_ok",
]
