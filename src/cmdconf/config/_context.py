"""ResolveContext: 1回の解決処理の状態。

全フェーズに参照渡しされ、解決処理の終了とともに破棄される。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from cmdconf.config._occurrence import OccurrenceStore
from cmdconf.config._storage import LocalStorage
from cmdconf.models.option import DEFAULT_ROLE
from cmdconf.schema import Schema

HELP_COMMAND: Final[str] = "help"
STANZA_OPTION: Final[str] = "stanza"


@dataclass
class ResolveContext:
    """解決処理の可変状態。

    Attributes:
        schema: オプションスキーマ。
        occurrences: オプション出現ストア。
        storage: ファイルシステムアクセサー。
        command: 有効なコマンド名。コマンド未確定の間は None。
        role: コマンドロール。
        help: ヘルプ要求かどうか。
        params: コマンドパラメーター。
    """

    schema: Schema
    occurrences: OccurrenceStore
    storage: LocalStorage = field(default_factory=LocalStorage)
    command: str | None = None
    role: str = DEFAULT_ROLE
    help: bool = False
    params: list[str] = field(default_factory=list)

    @classmethod
    def create(cls, schema: Schema) -> ResolveContext:
        return cls(schema=schema, occurrences=OccurrenceStore(schema))

    @property
    def active_command(self) -> str:
        """確定済みのコマンド名。

        Raises:
            RuntimeError: コマンドライン解析前に参照した場合。
        """
        if self.command is None:
            raise RuntimeError("command has not been parsed yet")
        return self.command

    @property
    def stanza(self) -> str | None:
        """コマンドラインまたは環境変数で指定されたスタンザ名。"""
        if not self.schema.has_option(STANZA_OPTION):
            return None
        occurrence = self.occurrences.get(STANZA_OPTION)
        if occurrence is None or not occurrence.found or not occurrence.values:
            return None
        return occurrence.values[0]

    def option_valid(self, option: str) -> bool:
        """オプションが有効なコマンドで使えるか。"""
        return self.schema.option(option).valid_for(self.active_command)
