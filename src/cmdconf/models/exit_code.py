"""ExitCode: 終了コードの定義。"""

from enum import IntEnum


class ExitCode(IntEnum):
    """プロセス終了コード。

    1-5 は設定解決エラーの種別に対応し、6 はスキーマ定義の不備。
    """

    SUCCESS = 0
    COMMAND_ERROR = 1
    PARAM_ERROR = 2
    OPTION_ERROR = 3
    OPTION_VALUE_ERROR = 4
    FILE_ERROR = 5
    SCHEMA_ERROR = 6
