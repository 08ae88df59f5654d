"""設定リゾルバー。

コマンドライン > 環境変数 > 設定ファイル > デフォルト値 の優先順で
オプションを解決し ResolvedConfig を構築する。

フェーズは一方向に進み、後のフェーズの結果を前のフェーズが参照することはない:
1. コマンドライン（_tokenizer）
2. 環境変数（_environment）
3. 設定ファイル（_locator → _loader → _section）
4. グループインデックスの圧縮（_group）
5. 依存関係・型の検証（_validator）
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence

from cmdconf.config._context import ResolveContext
from cmdconf.config._environment import apply_environment
from cmdconf.config._group import compact_group_indexes
from cmdconf.config._ini import parse_ini
from cmdconf.config._loader import load_config_text
from cmdconf.config._locator import plan_config_files
from cmdconf.config._section import apply_config_file
from cmdconf.config._tokenizer import parse_command_line
from cmdconf.config._validator import validate_options
from cmdconf.models.config import ResolvedConfig, ResolvedOption
from cmdconf.schema import Schema, load_builtin_schema

logger = logging.getLogger(__name__)


def _unparsed_config(ctx: ResolveContext) -> ResolvedConfig:
    """オプションを解析しないコマンド（help, version）の設定を構築する。"""
    return ResolvedConfig(
        command=ctx.active_command,
        role=ctx.role,
        help=ctx.help,
        params=tuple(ctx.params),
        options={
            option.name: ResolvedOption(name=option.name, valid=False, group=option.group)
            for option in ctx.schema.options()
        },
        groups={group.name: () for group in ctx.schema.groups},
    )


def _apply_config_files(ctx: ResolveContext) -> None:
    plan = plan_config_files(ctx)
    if plan is None:
        return
    text = load_config_text(ctx.storage, plan)
    if text is None:
        logger.debug("no configuration files loaded")
        return
    apply_config_file(ctx, parse_ini(text))


def resolve_config(
    args: Sequence[str],
    schema: Schema | None = None,
    environ: Mapping[str, str] | None = None,
) -> ResolvedConfig:
    """引数・環境変数・設定ファイル・デフォルト値から設定を解決する。

    Args:
        args: 実行ファイル名を含まない引数列。
        schema: オプションスキーマ。None の場合はビルトインスキーマ。
        environ: 環境変数。None の場合は os.environ。

    Returns:
        不変の解決済み設定。

    Raises:
        ConfigError: 引数・設定ファイル・オプション値のいずれかに誤りがある場合。
        SchemaError: スキーマに不整合がある場合。
    """
    effective_schema = schema if schema is not None else load_builtin_schema()
    effective_environ = environ if environ is not None else os.environ

    ctx = ResolveContext.create(effective_schema)

    parse_command_line(ctx, args)
    command = effective_schema.command(ctx.active_command)
    if command is None or not command.parse_options:
        return _unparsed_config(ctx)

    apply_environment(ctx, effective_environ)
    _apply_config_files(ctx)
    groups = compact_group_indexes(ctx)
    return validate_options(ctx, groups)
