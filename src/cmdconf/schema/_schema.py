"""実行時スキーマ。

SchemaDefinition を検証し、オプション名の検索表と依存関係に基づく解決順序を構築する。
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Final, TypeVar

from cmdconf.models.option import (
    CommandDefinition,
    OptionCommand,
    OptionDefinition,
    OptionDepend,
    OptionGroupDefinition,
    OptionType,
    SchemaDefinition,
)

NEGATE_PREFIX: Final[str] = "no-"
RESET_PREFIX: Final[str] = "reset-"


class SchemaError(Exception):
    """スキーマ定義の不整合。

    依存関係の循環や未知のオプションへの参照など、スキーマ読み込み時に検出される。
    """


@dataclass(frozen=True)
class OptionKey:
    """オプション名の1つの綴りが指す対象。

    Attributes:
        name: 綴り（--no- や --reset- を含む、先頭の -- を除いた名前）。
        option: オプション定義名。
        index: グループ内の疎インデックス。グループに属さないオプションは 0。
        negate: --no- 形式かどうか。
        reset: --reset- 形式かどうか。
        deprecated: 旧名・別名による綴りかどうか。
    """

    name: str
    option: str
    index: int = 0
    negate: bool = False
    reset: bool = False
    deprecated: bool = False


class Schema:
    """検証済みのスキーマ。

    Raises:
        SchemaError: 定義に不整合がある場合（コンストラクタ）。
    """

    def __init__(self, definition: SchemaDefinition) -> None:
        self._definition = definition
        self._commands: dict[str, CommandDefinition] = _index_unique(
            definition.commands, "command"
        )
        self._groups: dict[str, OptionGroupDefinition] = _index_unique(
            definition.groups, "group"
        )
        raw_options = _index_unique(definition.options, "option")
        self._options: dict[str, OptionDefinition] = {
            name: self._normalize_option(option, raw_options)
            for name, option in raw_options.items()
        }
        self._keys: dict[str, OptionKey] = {}
        for option in self._options.values():
            self._register_keys(option)
        self._resolve_order: tuple[str, ...] = self._build_resolve_order()

    # ------------------------------------------------------------------
    # 構築
    # ------------------------------------------------------------------

    def _normalize_option(
        self,
        option: OptionDefinition,
        options: dict[str, OptionDefinition],
    ) -> OptionDefinition:
        """参照先を検証し、真偽値への依存値を正規化したオプション定義を返す。"""
        if option.group is not None:
            group = self._groups.get(option.group)
            if group is None:
                raise SchemaError(
                    f"Option '{option.name}' refers to unknown group '{option.group}'"
                )
            if not option.name.startswith(f"{group.prefix}-"):
                raise SchemaError(
                    f"Option '{option.name}' in group '{group.name}' must start "
                    f"with '{group.prefix}-'"
                )

        update: dict[str, object] = {}
        if option.depend is not None:
            update["depend"] = self._normalize_depend(option, option.depend, options)

        if option.commands is not None:
            commands: dict[str, OptionCommand] = {}
            for command_name, override in option.commands.items():
                if command_name not in self._commands:
                    raise SchemaError(
                        f"Option '{option.name}' refers to unknown command "
                        f"'{command_name}'"
                    )
                if override.depend is not None:
                    override = override.model_copy(
                        update={
                            "depend": self._normalize_depend(
                                option, override.depend, options
                            )
                        }
                    )
                commands[command_name] = override
            update["commands"] = commands

        return option.model_copy(update=update) if update else option

    @staticmethod
    def _normalize_depend(
        option: OptionDefinition,
        depend: OptionDepend,
        options: dict[str, OptionDefinition],
    ) -> OptionDepend:
        target = options.get(depend.option)
        if target is None:
            raise SchemaError(
                f"Option '{option.name}' depends on unknown option '{depend.option}'"
            )
        if target.name == option.name:
            raise SchemaError(f"Option '{option.name}' cannot depend on itself")
        if target.type is OptionType.BOOLEAN:
            try:
                return depend.normalized_for_boolean()
            except ValueError as e:
                raise SchemaError(str(e)) from e
        return depend

    def _register_keys(self, option: OptionDefinition) -> None:
        spellings: list[tuple[str, int, bool]] = []
        if option.group is not None:
            group = self._groups[option.group]
            for index in range(group.index_max):
                spellings.append((self.option_index_name(option.name, index), index, False))
            # 番号なしの綴りはインデックス 0 の別名
            spellings.append((option.name, 0, True))
        else:
            spellings.append((option.name, 0, False))
        for alias in option.deprecated_names:
            spellings.append((alias, 0, True))

        for spelling, index, deprecated in spellings:
            self._add_key(OptionKey(spelling, option.name, index, deprecated=deprecated))
            if option.allows_negate:
                self._add_key(
                    OptionKey(
                        NEGATE_PREFIX + spelling,
                        option.name,
                        index,
                        negate=True,
                        deprecated=deprecated,
                    )
                )
            if option.allows_reset:
                self._add_key(
                    OptionKey(
                        RESET_PREFIX + spelling,
                        option.name,
                        index,
                        reset=True,
                        deprecated=deprecated,
                    )
                )

    def _add_key(self, key: OptionKey) -> None:
        existing = self._keys.get(key.name)
        if existing is not None:
            raise SchemaError(
                f"Option name '{key.name}' is ambiguous between options "
                f"'{existing.option}' and '{key.option}'"
            )
        self._keys[key.name] = key

    def _dependencies(self, option: OptionDefinition) -> list[str]:
        result: list[str] = []
        if option.depend is not None:
            result.append(option.depend.option)
        for override in (option.commands or {}).values():
            if override.depend is not None and override.depend.option not in result:
                result.append(override.depend.option)
        return result

    def _build_resolve_order(self) -> tuple[str, ...]:
        """依存先が常に依存元より先に来る安定なトポロジカル順を構築する。

        同順位のオプションは定義順を保つ。

        Raises:
            SchemaError: 依存関係が循環している場合。
        """
        pending = {
            name: self._dependencies(option) for name, option in self._options.items()
        }
        order: list[str] = []
        placed: set[str] = set()
        while pending:
            ready = [
                name
                for name, depends in pending.items()
                if all(depend in placed for depend in depends)
            ]
            if not ready:
                cycle = ", ".join(sorted(pending))
                raise SchemaError(f"Option dependencies form a cycle among: {cycle}")
            for name in ready:
                order.append(name)
                placed.add(name)
                del pending[name]
        return tuple(order)

    # ------------------------------------------------------------------
    # 参照
    # ------------------------------------------------------------------

    @property
    def project(self) -> str:
        return self._definition.project

    @property
    def env_prefix(self) -> str:
        """環境変数の接頭辞（例: CMDCONF_）。"""
        return self._definition.project.upper().replace("-", "_") + "_"

    @property
    def legacy_config_path(self) -> str:
        """旧来の既定設定ファイルパス。"""
        return f"/etc/{self._definition.project}.conf"

    @property
    def resolve_order(self) -> tuple[str, ...]:
        return self._resolve_order

    @property
    def groups(self) -> tuple[OptionGroupDefinition, ...]:
        return tuple(self._groups.values())

    def options(self) -> Iterator[OptionDefinition]:
        """定義順にオプションを返す。"""
        return iter(self._options.values())

    def commands(self) -> Iterator[CommandDefinition]:
        return iter(self._commands.values())

    def option(self, name: str) -> OptionDefinition:
        """オプション定義を返す。

        Raises:
            KeyError: 未知のオプション名の場合。
        """
        return self._options[name]

    def has_option(self, name: str) -> bool:
        return name in self._options

    def command(self, name: str) -> CommandDefinition | None:
        return self._commands.get(name)

    def group(self, name: str) -> OptionGroupDefinition:
        return self._groups[name]

    def find_key(self, name: str) -> OptionKey | None:
        """綴りからオプションキーを検索する。見つからなければ None。"""
        return self._keys.get(name)

    def option_index_name(self, name: str, index: int = 0) -> str:
        """インデックス付きの表示名を返す（例: repo-path, 1 → repo2-path）。"""
        option = self._options[name]
        if option.group is None:
            return name
        prefix = self._groups[option.group].prefix
        return f"{prefix}{index + 1}{name[len(prefix):]}"


T = TypeVar("T", CommandDefinition, OptionGroupDefinition, OptionDefinition)


def _index_unique(
    items: tuple[T, ...], kind: str
) -> dict[str, T]:
    """name をキーとした辞書を構築する。重複名は SchemaError。"""
    result: dict[str, T] = {}
    for item in items:
        if item.name in result:
            raise SchemaError(f"Duplicate {kind} name '{item.name}'")
        result[item.name] = item
    return result
