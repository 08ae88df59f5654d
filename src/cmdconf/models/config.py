"""解決済み設定モデル。

全フェーズの完了後に一度だけ構築される不変の ResolvedConfig と、
その構成要素を定義する。
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from cmdconf.models._base import CmdconfBaseModel

OptionValue = bool | int | float | str | tuple[str, ...] | dict[str, str]
"""型変換済みのオプション値。"""


class OptionSource(StrEnum):
    """オプション値の出所。優先順位の判定にのみ使う。

    PARAM: コマンドライン。
    CONFIG: 環境変数または設定ファイル。
    DEFAULT: スキーマのデフォルト値。
    """

    PARAM = "param"
    CONFIG = "config"
    DEFAULT = "default"


class ResolvedOptionValue(CmdconfBaseModel):
    """単一インデックスの解決済み値。

    value が None の場合は値なし（未設定・否定・リセット・依存未解決）。
    source が None の場合はどのソースからも値が与えられていない。
    """

    value: OptionValue | None = None
    source: OptionSource | None = None
    negate: bool = False
    reset: bool = False


class ResolvedOption(CmdconfBaseModel):
    """単一オプションの解決結果。values は密インデックス順。"""

    name: str
    valid: bool
    group: str | None = None
    values: tuple[ResolvedOptionValue, ...] = ()


class ResolvedConfig(CmdconfBaseModel):
    """1回の起動に対する最終的な設定。

    groups はグループ名から、密インデックス順に並べた疎インデックスのタプルへの対応。
    """

    command: str
    role: str
    help: bool = False
    params: tuple[str, ...] = ()
    options: dict[str, ResolvedOption] = Field(default_factory=dict)
    groups: dict[str, tuple[int, ...]] = Field(default_factory=dict)

    def _option_value(self, name: str, index: int) -> ResolvedOptionValue | None:
        option = self.options.get(name)
        if option is None:
            raise KeyError(f"Unknown option '{name}'")
        if not option.valid:
            raise KeyError(f"Option '{name}' is not valid for command '{self.command}'")
        if index >= len(option.values):
            return None
        return option.values[index]

    def option_value(self, name: str, index: int = 0) -> OptionValue | None:
        """オプション値を返す。値がない場合は None。

        Raises:
            KeyError: 未知のオプション、またはコマンドで無効なオプションの場合。
        """
        resolved = self._option_value(name, index)
        return resolved.value if resolved is not None else None

    def option_source(self, name: str, index: int = 0) -> OptionSource | None:
        resolved = self._option_value(name, index)
        return resolved.source if resolved is not None else None

    def option_test(self, name: str, index: int = 0) -> bool:
        """オプションが有効かつ値を持つかどうか。"""
        option = self.options.get(name)
        if option is None or not option.valid:
            return False
        return self.option_value(name, index) is not None

    def option_valid(self, name: str) -> bool:
        option = self.options.get(name)
        return option is not None and option.valid

    def group_index_total(self, group: str) -> int:
        return len(self.groups.get(group, ()))

    def group_index_key(self, group: str, index: int) -> int:
        """密インデックスに対応する表示用のキー番号（疎インデックス + 1）を返す。"""
        return self.groups[group][index] + 1
