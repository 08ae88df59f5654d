"""ドメインモデル。"""

from cmdconf.models.config import (
    OptionSource,
    OptionValue,
    ResolvedConfig,
    ResolvedOption,
    ResolvedOptionValue,
)
from cmdconf.models.exit_code import ExitCode
from cmdconf.models.option import (
    AllowRange,
    CommandDefinition,
    OptionCommand,
    OptionDefinition,
    OptionDepend,
    OptionGroupDefinition,
    OptionSection,
    OptionType,
    SchemaDefinition,
)

__all__ = [
    "AllowRange",
    "CommandDefinition",
    "ExitCode",
    "OptionCommand",
    "OptionDefinition",
    "OptionDepend",
    "OptionGroupDefinition",
    "OptionSection",
    "OptionSource",
    "OptionType",
    "OptionValue",
    "ResolvedConfig",
    "ResolvedOption",
    "ResolvedOptionValue",
    "SchemaDefinition",
]
