"""引数トークナイザー。

引数列をコマンド・コマンドパラメーター・オプション出現に分類し、
コマンドラインフェーズとして ResolveContext に反映する。
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from cmdconf.config._context import HELP_COMMAND, ResolveContext
from cmdconf.config._errors import (
    CommandInvalidError,
    CommandRequiredError,
    OptionInvalidError,
    ParamInvalidError,
)
from cmdconf.models.option import DEFAULT_ROLE, CommandDefinition
from cmdconf.schema import OptionKey, Schema

_OPTION_PREFIX = "--"
_END_OF_OPTIONS = "--"
_ROLE_SEPARATOR = ":"


@dataclass(frozen=True)
class CommandToken:
    text: str


@dataclass(frozen=True)
class ParamToken:
    text: str


@dataclass(frozen=True)
class OptionToken:
    """オプション出現。value は値を取らない形式では None。"""

    text: str
    key: OptionKey
    value: str | None = None


Token = CommandToken | ParamToken | OptionToken


def tokenize_args(args: Sequence[str], schema: Schema) -> list[Token]:
    """引数列をトークン列に分類する。

    最初の非オプション引数がコマンド、以降はコマンドパラメーター。
    ただし最初のコマンドが help の場合は次の非オプション引数もコマンドとして扱う
    （help backup のようなコマンド別ヘルプ）。

    Args:
        args: 実行ファイル名を含まない引数列。
        schema: オプション名の検索に使うスキーマ。

    Returns:
        分類済みトークン列。

    Raises:
        OptionInvalidError: 未知のオプション、値を取らないオプションへの値指定、
            値が必要なオプションの値不足の場合。
    """
    tokens: list[Token] = []
    positional: list[str] = []
    options_ended = False
    position = 0

    while position < len(args):
        arg = args[position]
        position += 1

        if options_ended or arg == "-" or not arg.startswith("-"):
            positional.append(arg)
            tokens.append(_classify_positional(positional))
            continue

        if arg == _END_OF_OPTIONS:
            options_ended = True
            continue

        if not arg.startswith(_OPTION_PREFIX):
            raise OptionInvalidError(f"invalid option '{arg}'")

        name, separator, inline_value = arg[len(_OPTION_PREFIX) :].partition("=")
        key = schema.find_key(name)
        if key is None:
            raise OptionInvalidError(f"invalid option '{arg}'")

        takes_value = (
            schema.option(key.option).takes_value and not key.negate and not key.reset
        )
        if not takes_value:
            if separator:
                raise OptionInvalidError(f"invalid option '{arg}'")
            tokens.append(OptionToken(arg, key))
            continue

        if separator:
            value = inline_value
        elif position < len(args):
            value = args[position]
            position += 1
        else:
            raise OptionInvalidError(f"option '{arg}' requires argument")
        tokens.append(OptionToken(arg, key, value))

    return tokens


def _classify_positional(positional: list[str]) -> Token:
    text = positional[-1]
    if len(positional) == 1:
        return CommandToken(text)
    if len(positional) == 2 and positional[0] == HELP_COMMAND:
        return CommandToken(text)
    return ParamToken(text)


def _resolve_command(schema: Schema, text: str) -> tuple[CommandDefinition, str]:
    """コマンド文字列（command または command:role）を解決する。

    Raises:
        CommandInvalidError: 未知のコマンド、またはコマンドに定義されていないロール。
    """
    command = schema.command(text)
    if command is not None:
        return command, DEFAULT_ROLE

    parts = text.split(_ROLE_SEPARATOR)
    if len(parts) == 2:
        command = schema.command(parts[0])
        if command is not None:
            if parts[1] not in command.roles:
                raise CommandInvalidError(
                    f"invalid command role '{parts[1]}' for command '{command.name}'"
                )
            return command, parts[1]

    raise CommandInvalidError(f"invalid command '{text}'")


def parse_command_line(ctx: ResolveContext, args: Sequence[str]) -> None:
    """コマンドラインフェーズ: コマンド・パラメーター・オプションを ctx に記録する。

    Args:
        ctx: 解決コンテキスト。
        args: 実行ファイル名を含まない引数列。

    Raises:
        CommandInvalidError: 未知のコマンドの場合。
        CommandRequiredError: 引数があるのにコマンドがない場合。
        ParamInvalidError: パラメーターを受け付けないコマンドにパラメーターを渡した場合。
        OptionInvalidError: オプションの指定に誤りがある場合。
    """
    tokens = tokenize_args(args, ctx.schema)

    for token in tokens:
        if isinstance(token, CommandToken):
            command, role = _resolve_command(ctx.schema, token.text)
            ctx.command = command.name
            ctx.role = role
            if command.name == HELP_COMMAND:
                ctx.help = True
        elif isinstance(token, ParamToken):
            ctx.params.append(token.text)
        else:
            ctx.occurrences.record_command_line(token.key, token.value)

    if ctx.command is None:
        if tokens:
            raise CommandRequiredError("no command found")
        # 引数なしはヘルプ要求
        ctx.command = HELP_COMMAND
        ctx.help = True

    if ctx.params and not ctx.help:
        command = ctx.schema.command(ctx.active_command)
        if command is None or not command.parameter_allowed:
            raise ParamInvalidError("command does not allow parameters")
