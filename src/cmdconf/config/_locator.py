"""設定ファイルの場所の決定。

--config / --config-path / --config-include-path / --no-config の指定状況から、
メイン設定ファイルとインクルードディレクトリのどちらを読み込むか、
それぞれが必須かどうかを決定する。

規則:
- 何も指定しない: 既定のメイン設定ファイル（なければ旧来の既定パス）と
  既定のインクルードディレクトリを、存在すれば読み込む。
- --config のみ: 指定ファイルのみを必須として読み込み、インクルードディレクトリは見ない。
- --config と --config-path: 指定ファイルを必須、<config-path>/conf.d を任意で読み込む。
- --config-include-path のみ: ディレクトリを必須、既定のメイン設定ファイルを任意で読み込む。
- --config-include-path と --config-path: ディレクトリを必須、
  <config-path>/<既定ファイル名> を任意で読み込む。
- --config と --config-include-path: 両方必須、かつインクルードファイルが1つ以上必要。
- --no-config と --config-include-path: ディレクトリのみを必須として読み込む。
- --no-config と --config-path: <config-path>/conf.d のみを任意で読み込む。
- --no-config のみ: 何も読み込まない。
- --config-path のみ: 既定パスの基点を変えるだけで、いずれも任意。
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Final

from cmdconf.config._context import ResolveContext

CONFIG_OPTION: Final[str] = "config"
CONFIG_PATH_OPTION: Final[str] = "config-path"
CONFIG_INCLUDE_PATH_OPTION: Final[str] = "config-include-path"
CONFIG_INCLUDE_DIR_NAME: Final[str] = "conf.d"


@dataclass(frozen=True)
class ConfigFilePlan:
    """読み込む設定ファイルの計画。

    Attributes:
        load_config: メイン設定ファイルを読み込むか。
        config_file: メイン設定ファイルのパス。
        config_required: メイン設定ファイルの不在をエラーとするか。
        config_fallback: メイン設定ファイルが既定パスで不在の場合に試す旧来のパス。
        load_include: インクルードディレクトリを読み込むか。
        include_path: インクルードディレクトリのパス。
        include_required: インクルードディレクトリの不在をエラーとするか。
        include_file_required: インクルードファイルが1つもない場合をエラーとするか。
    """

    load_config: bool
    config_file: str
    config_required: bool
    config_fallback: str | None
    load_include: bool
    include_path: str
    include_required: bool
    include_file_required: bool


def _explicit_value(ctx: ResolveContext, option: str) -> str | None:
    """コマンドラインまたは環境変数で明示された値を返す。"""
    if not ctx.schema.has_option(option):
        return None
    occurrence = ctx.occurrences.get(option)
    if occurrence is None or not occurrence.found or not occurrence.values:
        return None
    return occurrence.values[0]


def _default_value(ctx: ResolveContext, option: str) -> str | None:
    if not ctx.schema.has_option(option):
        return None
    return ctx.schema.option(option).default_for(ctx.active_command)


def plan_config_files(ctx: ResolveContext) -> ConfigFilePlan | None:
    """現在のコマンドライン・環境変数の状態から読み込み計画を決定する。

    Args:
        ctx: コマンドラインと環境変数のフェーズを終えた解決コンテキスト。

    Returns:
        読み込み計画。スキーマに config オプションの既定値がない場合は None。
    """
    config_default_current = _default_value(ctx, CONFIG_OPTION)
    if config_default_current is None:
        return None
    config_default = config_default_current
    include_default = _default_value(ctx, CONFIG_INCLUDE_PATH_OPTION) or str(
        PurePosixPath(config_default).parent / CONFIG_INCLUDE_DIR_NAME
    )

    config_value = _explicit_value(ctx, CONFIG_OPTION)
    config_path_value = _explicit_value(ctx, CONFIG_PATH_OPTION)
    include_value = _explicit_value(ctx, CONFIG_INCLUDE_PATH_OPTION)

    config_required = config_value is not None
    include_required = include_value is not None
    load_config = True
    load_include = True

    # --config-path は両方の既定パスの基点を置き換える
    if config_path_value is not None:
        base = PurePosixPath(config_path_value)
        config_default = str(base / PurePosixPath(config_default).name)
        include_default = str(base / CONFIG_INCLUDE_DIR_NAME)

    config_occurrence = ctx.occurrences.get(CONFIG_OPTION)
    if config_occurrence is not None and config_occurrence.negate:
        load_config = False
        config_required = False
        if config_path_value is None and not include_required:
            load_include = False

    # --config のみの指定ではインクルードディレクトリを見ない
    if config_required and not (config_path_value is not None or include_required):
        load_include = False
        include_required = False

    config_file = config_value if config_required and config_value else config_default
    config_fallback = (
        ctx.schema.legacy_config_path
        if not config_required and config_file == config_default_current
        else None
    )

    return ConfigFilePlan(
        load_config=load_config,
        config_file=config_file,
        config_required=config_required,
        config_fallback=config_fallback,
        load_include=load_include,
        include_path=include_value if include_value is not None else include_default,
        include_required=include_required,
        include_file_required=config_required and include_required,
    )
