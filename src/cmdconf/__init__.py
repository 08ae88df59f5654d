"""cmdconf: コマンドラインツールのオプション解決ライブラリ。

コマンドライン・環境変数・INI 設定ファイル・スキーマ既定値の順に
オプション値を解決し、不変の ResolvedConfig を返す。
"""

from cmdconf.config import ConfigError, resolve_config
from cmdconf.models.config import OptionSource, ResolvedConfig
from cmdconf.schema import Schema, load_builtin_schema, load_schema

__all__ = [
    "ConfigError",
    "OptionSource",
    "ResolvedConfig",
    "Schema",
    "load_builtin_schema",
    "load_schema",
    "main",
    "resolve_config",
]


def main() -> None:
    """`python -m` やプログラムからの起動用。処理は cli.main() に委譲する。"""
    from cmdconf.cli import main as cli_main

    cli_main()
