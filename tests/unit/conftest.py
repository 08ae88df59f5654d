"""テスト共通フィクスチャ・ヘルパー。"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

import pytest

from cmdconf.config import resolve_config
from cmdconf.models.config import ResolvedConfig
from cmdconf.models.option import SchemaDefinition
from cmdconf.schema import Schema, load_builtin_schema

SchemaFactory = Callable[..., Schema]
Resolver = Callable[..., ResolvedConfig]

_CONFIG_OPTIONS: list[dict[str, object]] = [
    {
        "name": "config",
        "type": "path",
        "section": "command-line",
        "negate": True,
        "default": "/etc/cmdconf/cmdconf.conf",
    },
    {
        "name": "config-path",
        "type": "path",
        "section": "command-line",
        "default": "/etc/cmdconf",
    },
    {
        "name": "config-include-path",
        "type": "path",
        "section": "command-line",
        "default": "/etc/cmdconf/conf.d",
    },
    {"name": "stanza", "type": "string", "section": "command-line"},
]

_DEFAULT_COMMANDS: list[dict[str, object]] = [
    {"name": "backup"},
    {"name": "archive-push", "parameter_allowed": True, "roles": ["default", "async"]},
    {"name": "help", "parameter_allowed": True, "parse_options": False},
    {"name": "version", "parse_options": False},
]


def build_schema(
    options: Sequence[Mapping[str, object]] = (),
    *,
    commands: Sequence[Mapping[str, object]] | None = None,
    groups: Sequence[Mapping[str, object]] = (),
    with_config_options: bool = True,
) -> Schema:
    """テスト用のスキーマを構築する。config 系と stanza のオプションは既定で含む。"""
    data = {
        "project": "cmdconf",
        "commands": list(commands if commands is not None else _DEFAULT_COMMANDS),
        "groups": list(groups),
        "options": [*(_CONFIG_OPTIONS if with_config_options else []), *options],
    }
    return Schema(SchemaDefinition.model_validate(data))


@pytest.fixture
def make_schema() -> SchemaFactory:
    """build_schema を返すフィクスチャ。"""
    return build_schema


@pytest.fixture(scope="session")
def builtin_schema() -> Schema:
    """ビルトインスキーマ。"""
    return load_builtin_schema()


@pytest.fixture
def resolve(tmp_path: Path) -> Resolver:
    """tmp_path を設定ファイルの基点とし、環境変数を空にして解決する関数を返す。

    実環境の /etc 配下の設定ファイルを読まないよう --config-path=tmp_path を付加する。
    """

    def _resolve(
        args: Sequence[str],
        schema: Schema,
        environ: Mapping[str, str] | None = None,
    ) -> ResolvedConfig:
        return resolve_config(
            [*args, f"--config-path={tmp_path}"],
            schema=schema,
            environ=environ if environ is not None else {},
        )

    return _resolve


def write_file(path: Path, content: str) -> Path:
    """親ディレクトリを作成してファイルを書き込み、パスを返す。"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def write() -> Callable[[Path, str], Path]:
    """write_file を返すフィクスチャ。"""
    return write_file
