"""依存関係・型の検証。

スキーマの解決順序（依存先が常に先）でオプションを1周し、
依存条件の確認・型変換・値の検証を行って ResolvedConfig を構築する。
"""

from __future__ import annotations

from cmdconf.config._context import ResolveContext
from cmdconf.config._convert import (
    convert_boolean,
    convert_float,
    convert_integer,
    convert_size,
    split_key_value,
)
from cmdconf.config._errors import (
    OptionInvalidError,
    OptionInvalidValueError,
    OptionRequiredError,
)
from cmdconf.config._occurrence import OptionOccurrence
from cmdconf.models.config import (
    OptionSource,
    OptionValue,
    ResolvedConfig,
    ResolvedOption,
    ResolvedOptionValue,
)
from cmdconf.models.option import (
    OptionDefinition,
    OptionDepend,
    OptionSection,
    OptionType,
)
from cmdconf.schema import SchemaError

_DEPEND_TRUE = "1"
_DEPEND_FALSE = "0"

_NUMERIC_TYPES = (OptionType.INTEGER, OptionType.FLOAT, OptionType.SIZE)


def normalize_path(value: str, option_name: str) -> str:
    """パス値を検証し、末尾の / を1つ取り除く（値が / のみの場合を除く）。

    Raises:
        OptionInvalidValueError: 空、/ で始まらない、// を含む場合。
    """
    if not value:
        raise OptionInvalidValueError(
            f"'{value}' must be >= 1 character for '{option_name}' option"
        )
    if not value.startswith("/"):
        raise OptionInvalidValueError(
            f"'{value}' must begin with / for '{option_name}' option"
        )
    if "//" in value:
        raise OptionInvalidValueError(
            f"'{value}' cannot contain // for '{option_name}' option"
        )
    if value.endswith("/") and len(value) != 1:
        return value[:-1]
    return value


def _convert_numeric(option_type: OptionType, value: str) -> int | float:
    if option_type is OptionType.INTEGER:
        return convert_integer(value)
    if option_type is OptionType.SIZE:
        return convert_size(value)
    return convert_float(value)


def _coerce_set_value(
    definition: OptionDefinition,
    occurrence: OptionOccurrence,
    option_name: str,
    command: str,
) -> OptionValue:
    """明示的に設定された値を型変換・検証する。

    Raises:
        OptionInvalidError: map の要素に = がない場合。
        OptionInvalidValueError: 数値変換の失敗、範囲外、パス形式の誤り、
            許可リスト外の値の場合。
    """
    if definition.type is OptionType.BOOLEAN:
        return not occurrence.negate

    if definition.type is OptionType.MAP:
        result: dict[str, str] = {}
        for pair in occurrence.values:
            try:
                key, value = split_key_value(pair)
            except ValueError:
                raise OptionInvalidError(
                    f"key/value '{pair}' not valid for '{option_name}' option"
                ) from None
            result[key] = value
        return result

    if definition.type is OptionType.LIST:
        return tuple(occurrence.values)

    raw = occurrence.values[0]
    typed: OptionValue = raw

    if definition.type in _NUMERIC_TYPES:
        try:
            number = _convert_numeric(definition.type, raw)
        except ValueError:
            raise OptionInvalidValueError(
                f"'{raw}' is not valid for '{option_name}' option"
            ) from None
        allow_range = definition.allow_range
        if allow_range is not None and not (allow_range.min <= number <= allow_range.max):
            raise OptionInvalidValueError(
                f"'{raw}' is out of range for '{option_name}' option"
            )
        typed = number
    elif definition.type is OptionType.PATH:
        raw = normalize_path(raw, option_name)
        typed = raw

    allow_list = definition.allow_list_for(command)
    if allow_list is not None and raw not in allow_list:
        raise OptionInvalidValueError(f"'{raw}' is not allowed for '{option_name}' option")

    return typed


def _coerce_default(definition: OptionDefinition, default: str) -> OptionValue:
    """スキーマのデフォルト値を型変換する。

    Raises:
        SchemaError: デフォルト値が型に合わない場合。
    """
    try:
        match definition.type:
            case OptionType.BOOLEAN:
                return convert_boolean(default)
            case OptionType.INTEGER:
                return convert_integer(default)
            case OptionType.FLOAT:
                return convert_float(default)
            case OptionType.SIZE:
                return convert_size(default)
            case OptionType.LIST:
                return tuple(default.split(":"))
            case OptionType.MAP:
                return dict(split_key_value(pair) for pair in default.split(":"))
            case _:
                return default
    except ValueError as e:
        raise SchemaError(
            f"Invalid default '{default}' for option '{definition.name}': {e}"
        ) from e


class _Validator:
    """1回の検証パスの状態。"""

    def __init__(self, ctx: ResolveContext, groups: dict[str, tuple[int, ...]]) -> None:
        self._ctx = ctx
        self._schema = ctx.schema
        self._command = ctx.active_command
        self._groups = groups
        self._resolved: dict[str, ResolvedOption] = {}

    def run(self) -> ResolvedConfig:
        for name in self._schema.resolve_order:
            self._resolve_option(self._schema.option(name))

        # 解決順ではなく定義順で公開する
        options = {
            option.name: self._resolved[option.name] for option in self._schema.options()
        }
        return ResolvedConfig(
            command=self._command,
            role=self._ctx.role,
            help=self._ctx.help,
            params=tuple(self._ctx.params),
            options=options,
            groups=dict(self._groups),
        )

    def _resolve_option(self, definition: OptionDefinition) -> None:
        name = definition.name
        if not definition.valid_for(self._command):
            if self._ctx.occurrences.set_on_command_line(name):
                raise OptionInvalidError(
                    f"option '{name}' not valid for command '{self._command}'"
                )
            self._resolved[name] = ResolvedOption(
                name=name, valid=False, group=definition.group
            )
            return

        indexes = self._groups[definition.group] if definition.group is not None else (0,)
        values = tuple(
            self._resolve_index(definition, dense, sparse)
            for dense, sparse in enumerate(indexes)
        )
        self._resolved[name] = ResolvedOption(
            name=name, valid=True, group=definition.group, values=values
        )

    def _resolve_index(
        self, definition: OptionDefinition, dense: int, sparse: int
    ) -> ResolvedOptionValue:
        occurrence = self._ctx.occurrences.get(definition.name, sparse) or OptionOccurrence()
        option_name = self._schema.option_index_name(definition.name, sparse)

        option_set = (
            occurrence.found
            and (definition.type is OptionType.BOOLEAN or not occurrence.negate)
            and not occurrence.reset
        )

        depend = definition.depend_for(self._command)
        if depend is not None and not self._depend_resolved(
            definition, depend, dense, sparse, option_name, occurrence, option_set
        ):
            # 設定ファイル・環境変数由来の値は他コマンド用のことがあるため黙って値なしにする
            return ResolvedOptionValue(negate=occurrence.negate, reset=occurrence.reset)

        if option_set:
            return ResolvedOptionValue(
                value=_coerce_set_value(definition, occurrence, option_name, self._command),
                source=occurrence.source,
                negate=occurrence.negate,
            )

        if occurrence.reset:
            return ResolvedOptionValue(source=occurrence.source, reset=True)

        if occurrence.negate:
            return ResolvedOptionValue(source=occurrence.source, negate=True)

        default = definition.default_for(self._command)
        if default is not None:
            return ResolvedOptionValue(
                value=_coerce_default(definition, default), source=OptionSource.DEFAULT
            )

        if definition.required_for(self._command) and not self._ctx.help:
            hint = (
                "\nHINT: does this stanza exist?"
                if definition.section is OptionSection.STANZA
                else ""
            )
            raise OptionRequiredError(
                f"{self._command} command requires option: {option_name}{hint}"
            )

        return ResolvedOptionValue()

    def _depend_value(
        self, definition: OptionDefinition, depend: OptionDepend, dense: int
    ) -> str | None:
        """依存先の解決済み値を比較用の文字列で返す。値がなければ None。"""
        resolved = self._resolved.get(depend.option)
        if resolved is None or not resolved.valid:
            return None

        depend_definition = self._schema.option(depend.option)
        index = (
            dense
            if depend_definition.group is not None
            and depend_definition.group == definition.group
            else 0
        )
        if index >= len(resolved.values):
            return None

        value = resolved.values[index].value
        if value is None:
            return None
        if depend_definition.type is OptionType.BOOLEAN:
            return _DEPEND_TRUE if value else _DEPEND_FALSE
        return str(value)

    def _depend_resolved(
        self,
        definition: OptionDefinition,
        depend: OptionDepend,
        dense: int,
        sparse: int,
        option_name: str,
        occurrence: OptionOccurrence,
        option_set: bool,
    ) -> bool:
        """依存条件を満たすか判定する。

        コマンドラインで指定された値が依存条件を満たさない場合はエラー。

        Raises:
            OptionInvalidError: コマンドライン由来の値の依存条件が満たされない場合。
        """
        depend_value = self._depend_value(definition, depend, dense)
        if depend_value is not None and (
            not depend.values or depend_value in depend.values
        ):
            return True

        if option_set and occurrence.source is OptionSource.PARAM:
            depend_definition = self._schema.option(depend.option)
            depend_index = (
                sparse
                if depend_definition.group is not None
                and depend_definition.group == definition.group
                else 0
            )
            depend_name = self._schema.option_index_name(depend.option, depend_index)
            detail = ""
            if depend_value is not None and depend.values:
                if depend_definition.type is OptionType.BOOLEAN:
                    if _DEPEND_FALSE in depend.values:
                        depend_name = f"no-{depend_name}"
                else:
                    quoted = [f"'{value}'" for value in depend.values]
                    if len(quoted) == 1:
                        detail = f" = {quoted[0]}"
                    elif len(quoted) > 1:
                        detail = f" in ({', '.join(quoted)})"
            raise OptionInvalidError(
                f"option '{option_name}' not valid without option '{depend_name}'{detail}"
            )

        return False


def validate_options(
    ctx: ResolveContext, groups: dict[str, tuple[int, ...]]
) -> ResolvedConfig:
    """検証フェーズ: 全オプションを解決順に検証し ResolvedConfig を構築する。

    Args:
        ctx: 全ての入力フェーズを終えた解決コンテキスト。
        groups: compact_group_indexes() の結果。

    Returns:
        不変の解決済み設定。

    Raises:
        OptionInvalidError: コマンドで無効なオプションのコマンドライン指定、
            コマンドライン由来の値の依存条件の不成立、map 形式の誤りの場合。
        OptionInvalidValueError: 値の変換・検証に失敗した場合。
        OptionRequiredError: 必須オプションに値もデフォルトもない場合。
        SchemaError: スキーマのデフォルト値が型に合わない場合。
    """
    return _Validator(ctx, groups).run()
