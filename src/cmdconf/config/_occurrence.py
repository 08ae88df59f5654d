"""オプション出現ストア。

コマンドライン・環境変数・設定ファイルの各フェーズで見つかったオプションを
オプション名 × 疎インデックス単位で記録する。最初に found となったソースが勝ち、
以降のフェーズは found のエントリを上書きしない。
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cmdconf.config._errors import OptionInvalidError
from cmdconf.models.config import OptionSource
from cmdconf.schema import OptionKey, Schema


@dataclass
class OptionOccurrence:
    """単一オプション・単一インデックスの出現記録。

    values は list/map 型または multi オプションの場合のみ複数要素を持つ。
    """

    found: bool = False
    negate: bool = False
    reset: bool = False
    source: OptionSource | None = None
    values: list[str] = field(default_factory=list)


class OccurrenceStore:
    """1回の解決処理の間だけ存在する出現記録の集合。"""

    def __init__(self, schema: Schema) -> None:
        self._schema = schema
        self._occurrences: dict[tuple[str, int], OptionOccurrence] = {}

    def get(self, option: str, index: int = 0) -> OptionOccurrence | None:
        return self._occurrences.get((option, index))

    def get_or_create(self, option: str, index: int = 0) -> OptionOccurrence:
        key = (option, index)
        occurrence = self._occurrences.get(key)
        if occurrence is None:
            occurrence = OptionOccurrence()
            self._occurrences[key] = occurrence
        return occurrence

    def found(self, option: str, index: int = 0) -> bool:
        occurrence = self._occurrences.get((option, index))
        return occurrence is not None and occurrence.found

    def found_indexes(self, option: str) -> list[int]:
        """found となった疎インデックスを昇順で返す。"""
        return sorted(
            index
            for (name, index), occurrence in self._occurrences.items()
            if name == option and occurrence.found
        )

    def set_on_command_line(self, option: str) -> bool:
        """いずれかのインデックスがコマンドラインで指定されたか。"""
        return any(
            occurrence.found and occurrence.source is OptionSource.PARAM
            for (name, _), occurrence in self._occurrences.items()
            if name == option
        )

    def record_command_line(self, key: OptionKey, value: str | None) -> None:
        """コマンドラインでのオプション出現を記録する。

        Args:
            key: 解決済みのオプションキー。
            value: オプション値。値を取らない形式（フラグ・--no-・--reset-）は None。

        Raises:
            OptionInvalidError: secure オプションの指定、否定・リセットの重複や併用、
                multi でないオプションの重複指定の場合。
        """
        definition = self._schema.option(key.option)
        display_name = self._schema.option_index_name(key.option, key.index)

        if definition.secure:
            raise OptionInvalidError(
                f"option '{display_name}' is not allowed on the command-line\n"
                "HINT: this option could expose secrets in the process list.\n"
                "HINT: specify the option in a configuration file or an environment "
                "variable instead."
            )

        occurrence = self.get_or_create(key.option, key.index)

        if not occurrence.found:
            occurrence.found = True
            occurrence.negate = key.negate
            occurrence.reset = key.reset
            occurrence.source = OptionSource.PARAM
            if value is not None:
                occurrence.values = [value]
            return

        if occurrence.negate and key.negate:
            raise OptionInvalidError(f"option '{display_name}' is negated multiple times")
        if occurrence.reset and key.reset:
            raise OptionInvalidError(f"option '{display_name}' is reset multiple times")
        if (occurrence.reset and key.negate) or (occurrence.negate and key.reset):
            raise OptionInvalidError(f"option '{display_name}' cannot be negated and reset")
        if occurrence.negate != key.negate:
            raise OptionInvalidError(f"option '{display_name}' cannot be set and negated")
        if occurrence.reset != key.reset:
            raise OptionInvalidError(f"option '{display_name}' cannot be set and reset")

        if value is not None and definition.is_multi:
            occurrence.values.append(value)
        else:
            raise OptionInvalidError(
                f"option '{display_name}' cannot be set multiple times"
            )
