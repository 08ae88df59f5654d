"""オプションスキーマ定義モデル。

OptionType（値の種別）、OptionSection（記述可能な場所）、OptionDefinition（オプション定義）、
OptionGroupDefinition（グループ定義）、CommandDefinition（コマンド定義）、
SchemaDefinition（スキーマ全体）を定義する。
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Final, Self

from pydantic import Field, field_validator, model_validator

from cmdconf.models._base import CmdconfBaseModel

NAME_PATTERN: Final[str] = r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$"
"""オプション名・コマンド名・グループ接頭辞の形式。"""

_NAME_RE: Final[re.Pattern[str]] = re.compile(NAME_PATTERN)

DEFAULT_ROLE: Final[str] = "default"
"""ロール未指定時のコマンドロール。"""

_BOOLEAN_DEPEND_VALUES: Final[dict[str, str]] = {
    "y": "1",
    "n": "0",
    "1": "1",
    "0": "0",
}


# =============================================================================
# 列挙型
# =============================================================================


class OptionType(StrEnum):
    """オプション値の種別。"""

    BOOLEAN = "boolean"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    SIZE = "size"
    PATH = "path"
    LIST = "list"
    MAP = "map"


class OptionSection(StrEnum):
    """オプションを記述できる場所。

    COMMAND_LINE: コマンドラインと環境変数のみ（設定ファイル不可）。
    GLOBAL: 設定ファイルの全セクション。
    STANZA: 設定ファイルのスタンザセクションのみ。
    """

    COMMAND_LINE = "command-line"
    GLOBAL = "global"
    STANZA = "stanza"


# =============================================================================
# オプション定義
# =============================================================================


class AllowRange(CmdconfBaseModel):
    """数値オプションの許容範囲（両端を含む）。"""

    min: float
    max: float

    @model_validator(mode="after")
    def validate_bounds(self) -> Self:
        if self.min > self.max:
            raise ValueError(f"allow_range min {self.min} exceeds max {self.max}")
        return self


class OptionDepend(CmdconfBaseModel):
    """他オプションへの依存。

    values が空の場合は依存先に値があれば解決済みとみなす。
    真偽値の依存先に対する値は y/n/1/0 で記述でき、
    依存先の型を知るスキーマ構築時に "1"/"0" へ正規化される。
    """

    option: str = Field(min_length=1)
    values: tuple[str, ...] = ()

    def normalized_for_boolean(self) -> OptionDepend:
        """values を真偽値の比較用センチネル "1"/"0" に変換したコピーを返す。"""
        converted: list[str] = []
        for value in self.values:
            sentinel = _BOOLEAN_DEPEND_VALUES.get(value.lower())
            if sentinel is None:
                raise ValueError(
                    f"boolean dependency value '{value}' on option "
                    f"'{self.option}' must be 'y' or 'n'"
                )
            converted.append(sentinel)
        return self.model_copy(update={"values": tuple(converted)})


class OptionCommand(CmdconfBaseModel):
    """コマンド単位の上書き設定。None の項目はオプション本体の設定を使う。"""

    default: str | None = None
    required: bool | None = None
    depend: OptionDepend | None = None
    allow_list: tuple[str, ...] | None = None


class OptionDefinition(CmdconfBaseModel):
    """単一オプションの定義。

    グループに属するオプションの name は「グループ接頭辞-残り」の形式をとる
    （例: repo グループの repo-path）。
    commands が None の場合は全コマンドで有効。
    """

    name: str
    type: OptionType
    section: OptionSection = OptionSection.GLOBAL
    multi: bool | None = None
    group: str | None = None
    secure: bool = False
    negate: bool | None = None
    reset: bool | None = None
    required: bool = False
    default: str | None = None
    allow_list: tuple[str, ...] | None = None
    allow_range: AllowRange | None = None
    depend: OptionDepend | None = None
    commands: dict[str, OptionCommand] | None = None
    deprecated_names: tuple[str, ...] = ()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not _NAME_RE.fullmatch(v):
            raise ValueError(f"Invalid option name '{v}': must match {NAME_PATTERN}")
        return v

    @model_validator(mode="after")
    def validate_type_settings(self) -> Self:
        if self.allow_range is not None and self.type not in (
            OptionType.INTEGER,
            OptionType.FLOAT,
            OptionType.SIZE,
        ):
            raise ValueError(
                f"Option '{self.name}': allow_range requires a numeric type, "
                f"got {self.type}"
            )
        if self.secure and self.section is OptionSection.COMMAND_LINE:
            raise ValueError(
                f"Option '{self.name}': secure options cannot be command-line only"
            )
        return self

    @property
    def is_multi(self) -> bool:
        """複数回指定できるか。未指定なら list/map 型のみ True。"""
        if self.multi is not None:
            return self.multi
        return self.type in (OptionType.LIST, OptionType.MAP)

    @property
    def allows_negate(self) -> bool:
        """--no- 形式を受け付けるか。未指定なら真偽値型のみ True。"""
        if self.negate is not None:
            return self.negate
        return self.type is OptionType.BOOLEAN

    @property
    def allows_reset(self) -> bool:
        """--reset- 形式を受け付けるか。未指定ならコマンドライン専用以外で True。"""
        if self.reset is not None:
            return self.reset
        return self.section is not OptionSection.COMMAND_LINE

    @property
    def takes_value(self) -> bool:
        return self.type is not OptionType.BOOLEAN

    def valid_for(self, command: str) -> bool:
        return self.commands is None or command in self.commands

    def _command_override(self, command: str) -> OptionCommand | None:
        if self.commands is None:
            return None
        return self.commands.get(command)

    def default_for(self, command: str) -> str | None:
        override = self._command_override(command)
        if override is not None and override.default is not None:
            return override.default
        return self.default

    def required_for(self, command: str) -> bool:
        override = self._command_override(command)
        if override is not None and override.required is not None:
            return override.required
        return self.required

    def depend_for(self, command: str) -> OptionDepend | None:
        override = self._command_override(command)
        if override is not None and override.depend is not None:
            return override.depend
        return self.depend

    def allow_list_for(self, command: str) -> tuple[str, ...] | None:
        override = self._command_override(command)
        if override is not None and override.allow_list is not None:
            return override.allow_list
        return self.allow_list


# =============================================================================
# グループ・コマンド・スキーマ定義
# =============================================================================


class OptionGroupDefinition(CmdconfBaseModel):
    """複数インスタンスを持てるオプショングループの定義。

    prefix が "repo" で index_max が 4 の場合、repo1-path から repo4-path までの
    名前が使える。
    """

    name: str
    prefix: str
    index_max: int = Field(default=1, gt=0, le=256)

    @field_validator("name", "prefix")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        if not _NAME_RE.fullmatch(v):
            raise ValueError(f"Invalid group identifier '{v}': must match {NAME_PATTERN}")
        return v


class CommandDefinition(CmdconfBaseModel):
    """コマンド定義。

    parse_options が False のコマンド（help, version）は
    環境変数・設定ファイル・検証の各フェーズを実行しない。
    """

    name: str
    parameter_allowed: bool = False
    roles: tuple[str, ...] = (DEFAULT_ROLE,)
    parse_options: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not _NAME_RE.fullmatch(v):
            raise ValueError(f"Invalid command name '{v}': must match {NAME_PATTERN}")
        return v


class SchemaDefinition(CmdconfBaseModel):
    """スキーマ全体の定義。TOML ファイルの内容に対応する。

    project はプロジェクト名で、環境変数の接頭辞（PROJECT_）と
    旧来の設定ファイルパス（/etc/<project>.conf）の導出に使う。
    """

    project: str
    commands: tuple[CommandDefinition, ...] = Field(min_length=1)
    groups: tuple[OptionGroupDefinition, ...] = ()
    options: tuple[OptionDefinition, ...] = ()

    @field_validator("project")
    @classmethod
    def validate_project(cls, v: str) -> str:
        if not _NAME_RE.fullmatch(v):
            raise ValueError(f"Invalid project name '{v}': must match {NAME_PATTERN}")
        return v
