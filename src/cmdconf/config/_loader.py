"""設定ファイルローダー。

ConfigFilePlan に従ってメイン設定ファイルとインクルードファイルを読み込み、
1つのテキストに連結する。各ファイルは連結前に個別に INI としてパースし、
不正な内容を早期に検出する（この時点では内容をマージしない）。
"""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath
from typing import Final

from cmdconf.config._errors import FileMissingError
from cmdconf.config._ini import parse_ini
from cmdconf.config._locator import ConfigFilePlan
from cmdconf.config._storage import LocalStorage

logger = logging.getLogger(__name__)

INCLUDE_FILE_PATTERN: Final[re.Pattern[str]] = re.compile(r".+\.conf")
"""インクルードディレクトリで読み込むファイル名。"""


def _append(result: str | None, part: str) -> str:
    # 直前のファイルが改行で終わっていない場合に備えて改行を挟む
    return f"{result if result is not None else ''}\n{part}"


def load_config_text(storage: LocalStorage, plan: ConfigFilePlan) -> str | None:
    """計画に従って設定ファイルを読み込み、連結したテキストを返す。

    Args:
        storage: ファイルシステムアクセサー。
        plan: 読み込み計画。

    Returns:
        連結済みの設定テキスト。何も読み込まなかった場合は None。

    Raises:
        FileMissingError: 必須のファイルが存在しない場合、または必須のインクルード
            ファイルが1つもない場合。
        PathMissingError: 必須のインクルードディレクトリが存在しない場合。
        FormatError: いずれかのファイルの INI 構文が不正な場合。
    """
    result: str | None = None

    if plan.load_config:
        result = storage.read(plan.config_file, ignore_missing=not plan.config_required)
        source = plan.config_file
        if result is None and plan.config_fallback is not None:
            result = storage.read(plan.config_fallback, ignore_missing=True)
            source = plan.config_fallback
        if result is not None:
            parse_ini(result, source)
            logger.debug("using configuration file '%s'", source)

    if plan.load_include:
        names = storage.list_dir(
            plan.include_path,
            pattern=INCLUDE_FILE_PATTERN,
            error_on_missing=plan.include_required,
        )
        loaded = 0
        # 順序に意味はなく、再現性のためだけにソートする
        for name in sorted(names or ()):
            path = str(PurePosixPath(plan.include_path) / name)
            part = storage.read(path, ignore_missing=True)
            if part is None:
                continue
            loaded += 1
            if part:
                parse_ini(part, path)
                result = _append(result, part)
                logger.debug("using configuration include file '%s'", path)

        if plan.include_file_required and loaded == 0:
            raise FileMissingError(
                f"no configuration files found in include path '{plan.include_path}'"
            )

    return result
