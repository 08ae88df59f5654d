"""設定解決エラー。

すべてのハードエラーは ConfigError を継承し、プロセス終了コードを持つ。
警告はエラーとして送出せず、各モジュールのロガーに出力する。
"""

from __future__ import annotations

from typing import ClassVar

from cmdconf.models.exit_code import ExitCode


class ConfigError(Exception):
    """設定解決の中断を伴うエラーの基底クラス。"""

    exit_code: ClassVar[ExitCode] = ExitCode.OPTION_ERROR


class CommandInvalidError(ConfigError):
    """未知のコマンド・ロール。"""

    exit_code = ExitCode.COMMAND_ERROR


class CommandRequiredError(ConfigError):
    """引数はあるがコマンドが見つからない。"""

    exit_code = ExitCode.COMMAND_ERROR


class ParamInvalidError(ConfigError):
    """パラメーターを受け付けないコマンドへのパラメーター指定。"""

    exit_code = ExitCode.PARAM_ERROR


class OptionInvalidError(ConfigError):
    """オプションの指定方法の誤り（未知・重複・否定とリセットの併用など）。"""

    exit_code = ExitCode.OPTION_ERROR


class OptionInvalidValueError(ConfigError):
    """オプション値の誤り（型変換・範囲・許可リスト・パス形式）。"""

    exit_code = ExitCode.OPTION_VALUE_ERROR


class OptionRequiredError(ConfigError):
    """必須オプションに値もデフォルトもない。"""

    exit_code = ExitCode.OPTION_ERROR


class FormatError(ConfigError):
    """設定ファイルの構文エラー。"""

    exit_code = ExitCode.FILE_ERROR


class FileMissingError(ConfigError):
    """必須の設定ファイルが存在しない。"""

    exit_code = ExitCode.FILE_ERROR


class PathMissingError(ConfigError):
    """必須の設定ディレクトリが存在しない。"""

    exit_code = ExitCode.FILE_ERROR


class FileOpenError(ConfigError):
    """設定ファイル・ディレクトリの読み取り失敗（権限など、不在以外の理由）。"""

    exit_code = ExitCode.FILE_ERROR
