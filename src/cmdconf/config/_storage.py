"""ローカルファイルシステムアクセサー。

ファイル読み込みとパターン付きディレクトリ一覧のみを提供する。
同一パスの読み込みは1回の解決処理中に1度だけ行う。
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from cmdconf.config._errors import FileMissingError, FileOpenError, PathMissingError

logger = logging.getLogger(__name__)


class LocalStorage:
    """読み込み結果をパス単位でキャッシュするファイルシステムアクセサー。"""

    def __init__(self) -> None:
        self._read_cache: dict[str, str | None] = {}

    def read(self, path: str, *, ignore_missing: bool) -> str | None:
        """ファイル全体をテキストとして読み込む。

        Args:
            path: ファイルパス。
            ignore_missing: True の場合、ファイル不在時に None を返す。

        Returns:
            ファイル内容。不在かつ ignore_missing の場合は None。

        Raises:
            FileMissingError: ファイルが存在せず ignore_missing が False の場合。
            FileOpenError: 権限不足などで読み込めない場合、または UTF-8 として復号できない場合。
        """
        if path in self._read_cache:
            content = self._read_cache[path]
        else:
            try:
                content = Path(path).read_text(encoding="utf-8")
                logger.debug("loaded '%s'", path)
            except FileNotFoundError:
                content = None
            except OSError as e:
                raise FileOpenError(f"unable to open file '{path}' for read: {e}") from e
            except UnicodeDecodeError as e:
                raise FileOpenError(f"unable to decode file '{path}' as UTF-8: {e}") from e
            self._read_cache[path] = content

        if content is None and not ignore_missing:
            raise FileMissingError(f"unable to open missing file '{path}' for read")
        return content

    def list_dir(
        self,
        path: str,
        *,
        pattern: re.Pattern[str],
        error_on_missing: bool,
    ) -> list[str] | None:
        """ディレクトリ直下でパターンに一致する名前を返す（非再帰、順不同）。

        Args:
            path: ディレクトリパス。
            pattern: 名前全体に一致させる正規表現。
            error_on_missing: True の場合、ディレクトリ不在をエラーとする。

        Returns:
            一致した名前のリスト。ディレクトリ不在かつ error_on_missing が
            False の場合は None。

        Raises:
            PathMissingError: ディレクトリが存在せず error_on_missing が True の場合。
            FileOpenError: 権限不足などで一覧を取得できない場合。
        """
        try:
            with os.scandir(path) as entries:
                return [entry.name for entry in entries if pattern.fullmatch(entry.name)]
        except FileNotFoundError:
            if error_on_missing:
                raise PathMissingError(
                    f"unable to list file info for missing path '{path}'"
                ) from None
            return None
        except OSError as e:
            raise FileOpenError(f"unable to list file info for path '{path}': {e}") from e
