"""オプション値の文字列変換。

数値・サイズ・パスの各形式を検証して型付きの値に変換する。
"""

from __future__ import annotations

import re
from typing import Final

SIZE_MULTIPLIERS: Final[dict[str, int]] = {
    "b": 1,
    "k": 1 << 10,
    "m": 1 << 20,
    "g": 1 << 30,
    "t": 1 << 40,
    "p": 1 << 50,
}

_SIZE_RE: Final[re.Pattern[str]] = re.compile(r"([0-9]+)(?:([kmgtp])b?|b)?")
_INTEGER_RE: Final[re.Pattern[str]] = re.compile(r"[-+]?[0-9]+")
_FLOAT_RE: Final[re.Pattern[str]] = re.compile(r"[-+]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")

_BOOLEAN_LITERALS: Final[dict[str, bool]] = {
    "y": True,
    "n": False,
    "1": True,
    "0": False,
}


def convert_size(value: str) -> int:
    """サイズ文字列をバイト数に変換する。

    単位（b, k, m, g, t, p。大文字小文字は区別しない。k 以上は末尾の b を省略可）は
    1024 の累乗を掛ける。例: "10m" → 10485760, "1kb" → 1024, "100" → 100。

    Raises:
        ValueError: 形式が不正な場合。
    """
    match = _SIZE_RE.fullmatch(value.lower())
    if match is None:
        raise ValueError(f"value '{value}' is not valid")
    number, qualifier = match.groups()
    return int(number) * SIZE_MULTIPLIERS[qualifier or "b"]


def convert_integer(value: str) -> int:
    """整数文字列を変換する。

    Raises:
        ValueError: 形式が不正な場合。
    """
    if _INTEGER_RE.fullmatch(value) is None:
        raise ValueError(f"value '{value}' is not a valid integer")
    return int(value)


def convert_float(value: str) -> float:
    """小数文字列を変換する。指数表記・inf・nan は受け付けない。

    Raises:
        ValueError: 形式が不正な場合。
    """
    if _FLOAT_RE.fullmatch(value) is None:
        raise ValueError(f"value '{value}' is not a valid float")
    return float(value)


def convert_boolean(value: str) -> bool:
    """y/n（または 1/0）を真偽値に変換する。

    Raises:
        ValueError: いずれでもない場合。
    """
    try:
        return _BOOLEAN_LITERALS[value.lower()]
    except KeyError:
        raise ValueError(f"value '{value}' is not a valid boolean") from None


def split_key_value(pair: str) -> tuple[str, str]:
    """最初の = でキーと値に分割する。

    Raises:
        ValueError: = を含まない場合。
    """
    key, separator, value = pair.partition("=")
    if not separator:
        raise ValueError(f"key/value '{pair}' has no '='")
    return key, value
