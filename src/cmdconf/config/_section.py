"""設定ファイルのセクション解決。

スタンザとコマンドから検索するセクションを具体的な順に並べ、
最初に見つかったセクションの値を採用する。すでに値を持つオプションは
「解決済みならスキップ」のガードで明示的に飛ばす。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from cmdconf.config._context import ResolveContext
from cmdconf.config._errors import OptionInvalidError, OptionInvalidValueError
from cmdconf.config._ini import IniDocument
from cmdconf.models.config import OptionSource
from cmdconf.models.option import OptionSection, OptionType

logger = logging.getLogger(__name__)

GLOBAL_SECTION: Final[str] = "global"
BOOLEAN_TRUE: Final[str] = "y"
BOOLEAN_FALSE: Final[str] = "n"


@dataclass(frozen=True)
class SectionSpec:
    """検索対象セクション。

    Attributes:
        name: セクション名。
        command_qualified: <name>:<command> 形式かどうか。
        is_global: global または global:<command> かどうか。
    """

    name: str
    command_qualified: bool
    is_global: bool


def build_section_list(stanza: str | None, command: str) -> list[SectionSpec]:
    """検索するセクションを具体的な順に返す。

    <stanza>:<command>, <stanza>, global:<command>, global の順。
    スタンザ未指定の場合、スタンザのセクションは含めない。
    """
    sections: list[SectionSpec] = []
    if stanza is not None:
        sections.append(SectionSpec(f"{stanza}:{command}", True, False))
        sections.append(SectionSpec(stanza, False, False))
    sections.append(SectionSpec(f"{GLOBAL_SECTION}:{command}", True, True))
    sections.append(SectionSpec(GLOBAL_SECTION, False, True))
    return sections


def apply_config_file(ctx: ResolveContext, ini: IniDocument) -> None:
    """設定ファイルフェーズ: 検索対象セクションのキーをオプション出現として記録する。

    Args:
        ctx: 解決コンテキスト。
        ini: 連結済み設定テキストのパース結果。

    Raises:
        OptionInvalidError: 同一セクション内で同じオプションが別の綴りで重複している場合、
            または multi でないオプションがリストとして指定された場合。
        OptionInvalidValueError: 値が空の場合、または真偽値が y/n 以外の場合。
    """
    command = ctx.active_command

    for section in build_section_list(ctx.stanza, command):
        keys = ini.section_keys(section.name)
        if keys:
            logger.debug("searching section '%s'", section.name)
        claimed: dict[tuple[str, int], str] = {}

        for key_name in keys:
            key = ctx.schema.find_key(key_name)

            if key is None:
                logger.warning("configuration file contains invalid option '%s'", key_name)
                continue
            if key.negate:
                logger.warning("configuration file contains negate option '%s'", key_name)
                continue
            if key.reset:
                logger.warning("configuration file contains reset option '%s'", key_name)
                continue

            definition = ctx.schema.option(key.option)

            if definition.section is OptionSection.COMMAND_LINE:
                logger.warning(
                    "configuration file contains command-line only option '%s'", key_name
                )
                continue

            claimed_name = claimed.get((key.option, key.index))
            if claimed_name is not None:
                raise OptionInvalidError(
                    f"configuration file contains duplicate options ('{key_name}', "
                    f"'{claimed_name}') in section '[{section.name}]'"
                )
            claimed[(key.option, key.index)] = key_name

            # global セクションは他コマンド用のオプションを含んでよい
            if not definition.valid_for(command):
                if section.command_qualified:
                    logger.warning(
                        "configuration file contains option '%s' invalid for section '%s'",
                        key_name,
                        section.name,
                    )
                continue

            if definition.section is OptionSection.STANZA and section.is_global:
                logger.warning(
                    "configuration file contains stanza-only option '%s' in global "
                    "section '%s'",
                    key_name,
                    section.name,
                )
                continue

            # コマンドライン・環境変数・より具体的なセクションで解決済み
            occurrence = ctx.occurrences.get_or_create(key.option, key.index)
            if occurrence.found:
                continue

            display_name = ctx.schema.option_index_name(key.option, key.index)

            if ini.is_list(section.name, key_name):
                if not definition.is_multi:
                    raise OptionInvalidError(
                        f"option '{display_name}' cannot be set multiple times"
                    )
                values = list(ini.get_list(section.name, key_name))
                negate = False
            else:
                value = ini.get(section.name, key_name)
                if not value:
                    raise OptionInvalidValueError(
                        f"section '{section.name}', key '{key_name}' must have a value"
                    )
                values, negate = _scalar_values(definition.type, key_name, value)

            occurrence.found = True
            occurrence.source = OptionSource.CONFIG
            occurrence.negate = negate
            occurrence.values = values


def _scalar_values(
    option_type: OptionType, key_name: str, value: str
) -> tuple[list[str], bool]:
    """単一値を (値リスト, negate) に変換する。真偽値は y/n のみ受け付ける。"""
    if option_type is OptionType.BOOLEAN:
        if value == BOOLEAN_FALSE:
            return [], True
        if value != BOOLEAN_TRUE:
            raise OptionInvalidValueError(f"boolean option '{key_name}' must be 'y' or 'n'")
        return [], False
    return [value], False
