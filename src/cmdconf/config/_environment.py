"""環境変数マッパー。

接頭辞付きの環境変数（例: CMDCONF_LOG_LEVEL_CONSOLE）をオプションに対応付ける。
コマンドラインで指定済みのオプションは上書きしない。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Final

from cmdconf.config._context import ResolveContext
from cmdconf.config._errors import OptionInvalidValueError
from cmdconf.models.config import OptionSource
from cmdconf.models.option import OptionType

logger = logging.getLogger(__name__)

BOOLEAN_TRUE: Final[str] = "y"
BOOLEAN_FALSE: Final[str] = "n"
VALUE_SEPARATOR: Final[str] = ":"


def environment_key_to_option_name(key: str, prefix: str) -> str:
    """環境変数名から接頭辞を除き、オプション名の綴りに変換する。

    例: CMDCONF_REPO1_PATH → repo1-path
    """
    return key[len(prefix) :].lower().replace("_", "-")


def apply_environment(ctx: ResolveContext, environ: Mapping[str, str]) -> None:
    """環境変数フェーズ: 接頭辞付き環境変数をオプション出現として記録する。

    未知のキーや --no-/--reset- 形式に相当するキーは警告して無視する。
    有効なコマンドで使えないオプションは黙って無視する。

    Args:
        ctx: 解決コンテキスト。
        environ: 環境変数の対応。

    Raises:
        OptionInvalidValueError: 値が空の場合、または真偽値が y/n 以外の場合。
    """
    prefix = ctx.schema.env_prefix

    for env_key, value in environ.items():
        if not env_key.startswith(prefix):
            continue

        name = environment_key_to_option_name(env_key, prefix)
        key = ctx.schema.find_key(name)

        if key is None:
            logger.warning("environment contains invalid option '%s'", name)
            continue
        if key.negate:
            logger.warning("environment contains invalid negate option '%s'", name)
            continue
        if key.reset:
            logger.warning("environment contains invalid reset option '%s'", name)
            continue

        if not ctx.option_valid(key.option):
            continue

        if not value:
            raise OptionInvalidValueError(
                f"environment variable '{name}' must have a value"
            )

        # コマンドラインが優先
        occurrence = ctx.occurrences.get_or_create(key.option, key.index)
        if occurrence.found:
            continue

        definition = ctx.schema.option(key.option)
        occurrence.found = True
        occurrence.source = OptionSource.CONFIG

        if definition.type is OptionType.BOOLEAN:
            if value == BOOLEAN_FALSE:
                occurrence.negate = True
            elif value != BOOLEAN_TRUE:
                raise OptionInvalidValueError(
                    f"environment boolean option '{name}' must be 'y' or 'n'"
                )
        elif definition.type in (OptionType.LIST, OptionType.MAP):
            occurrence.values = value.split(VALUE_SEPARATOR)
        else:
            occurrence.values = [value]
