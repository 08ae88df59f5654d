"""スキーマローダー。

TOML 形式のスキーマ定義ファイルを読み込み、Schema として構築する。
ビルトインスキーマはパッケージリソースから読み込む。
"""

from __future__ import annotations

import tomllib
from importlib.resources import as_file, files
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from cmdconf.models.option import SchemaDefinition
from cmdconf.schema._schema import Schema, SchemaError

BUILTIN_SCHEMA_FILENAME: Final[str] = "schema.toml"
"""ビルトインスキーマのファイル名。"""


def load_schema(path: Path) -> Schema:
    """TOML ファイルからスキーマを読み込む。

    Args:
        path: スキーマ定義ファイルのパス。

    Returns:
        検証済みのスキーマ。

    Raises:
        SchemaError: TOML 構文エラー、定義のバリデーションエラー、
            依存関係の循環などの不整合がある場合。
        OSError: ファイルが存在しない場合やアクセスエラーの場合。
    """
    with path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise SchemaError(f"Invalid schema file '{path}': {e}") from e
    try:
        definition = SchemaDefinition.model_validate(data)
    except ValidationError as e:
        raise SchemaError(f"Invalid schema file '{path}': {e}") from e
    return Schema(definition)


def load_builtin_schema() -> Schema:
    """ビルトインスキーマをパッケージリソースから読み込む。

    Raises:
        FileNotFoundError: ビルトインスキーマが見つからない場合。
        SchemaError: ビルトインスキーマに不整合がある場合。
    """
    resource = files("cmdconf.schema._builtin").joinpath(BUILTIN_SCHEMA_FILENAME)
    with as_file(resource) as path:
        return load_schema(path)
