"""多ソースのオプション解決エンジン。"""

from cmdconf.config._convert import convert_size
from cmdconf.config._errors import (
    CommandInvalidError,
    CommandRequiredError,
    ConfigError,
    FileMissingError,
    FileOpenError,
    FormatError,
    OptionInvalidError,
    OptionInvalidValueError,
    OptionRequiredError,
    ParamInvalidError,
    PathMissingError,
)
from cmdconf.config._resolver import resolve_config
from cmdconf.config._validator import normalize_path

__all__ = [
    "CommandInvalidError",
    "CommandRequiredError",
    "ConfigError",
    "FileMissingError",
    "FileOpenError",
    "FormatError",
    "OptionInvalidError",
    "OptionInvalidValueError",
    "OptionRequiredError",
    "ParamInvalidError",
    "PathMissingError",
    "convert_size",
    "normalize_path",
    "resolve_config",
]
