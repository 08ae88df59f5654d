"""INI テキストパーサー。

[section] 見出し、key=value 行、# コメントを扱う。
同一セクション内で同じキーが複数回現れた場合、そのキーはリストとして扱う。
同名セクションが複数回現れた場合は1つのセクションにまとめる。
"""

from __future__ import annotations

from cmdconf.config._errors import FormatError

_COMMENT_PREFIX = "#"


class IniDocument:
    """セクション → キー → 値（列）の順序付き対応。"""

    def __init__(self) -> None:
        self._sections: dict[str, dict[str, list[str]]] = {}

    def _add(self, section: str, key: str, value: str) -> None:
        self._sections.setdefault(section, {}).setdefault(key, []).append(value)

    def _touch(self, section: str) -> None:
        self._sections.setdefault(section, {})

    def sections(self) -> list[str]:
        return list(self._sections)

    def section_keys(self, section: str) -> list[str]:
        """セクション内のキーを出現順に返す。セクションがなければ空リスト。"""
        return list(self._sections.get(section, {}))

    def is_list(self, section: str, key: str) -> bool:
        return len(self._sections[section][key]) > 1

    def get(self, section: str, key: str) -> str:
        """単一値を返す。

        Raises:
            KeyError: セクションまたはキーが存在しない場合。
        """
        return self._sections[section][key][0]

    def get_list(self, section: str, key: str) -> tuple[str, ...]:
        return tuple(self._sections[section][key])


def parse_ini(text: str, source: str | None = None) -> IniDocument:
    """INI テキストをパースする。

    Args:
        text: INI テキスト。
        source: エラーメッセージに含めるファイル名（任意）。

    Returns:
        パース結果。

    Raises:
        FormatError: 構文が不正な場合。
    """
    document = IniDocument()
    section: str | None = None
    where = f" in '{source}'" if source is not None else ""

    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith(_COMMENT_PREFIX):
            continue

        if line.startswith("["):
            if not line.endswith("]"):
                raise FormatError(
                    f"ini section should end with ] at line {line_no}{where}: {line}"
                )
            section = line[1:-1].strip()
            if not section:
                raise FormatError(f"ini section is empty at line {line_no}{where}")
            document._touch(section)
            continue

        if section is None:
            raise FormatError(
                f"key/value found outside of section at line {line_no}{where}: {line}"
            )

        key, separator, value = line.partition("=")
        if not separator:
            raise FormatError(
                f"missing '=' in key/value at line {line_no}{where}: {line}"
            )
        key = key.strip()
        if not key:
            raise FormatError(f"key is zero-length at line {line_no}{where}: {line}")
        document._add(section, key, value.strip())

    return document
