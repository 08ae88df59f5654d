"""値変換のテスト。"""

from __future__ import annotations

import pytest

from cmdconf.config import convert_size, normalize_path
from cmdconf.config._convert import (
    convert_boolean,
    convert_float,
    convert_integer,
    split_key_value,
)
from cmdconf.config._errors import OptionInvalidValueError


class TestConvertSize:
    """サイズ文字列の変換。"""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("100", 100),
            ("100b", 100),
            ("1k", 1024),
            ("1kb", 1024),
            ("10m", 10 * 1024**2),
            ("10MB", 10 * 1024**2),
            ("2g", 2 * 1024**3),
            ("1t", 1024**4),
            ("1p", 1024**5),
            ("0", 0),
        ],
    )
    def test_valid(self, value: str, expected: int) -> None:
        assert convert_size(value) == expected

    @pytest.mark.parametrize("value", ["", "k", "1.5m", "10x", "1bb", "-1", " 1k"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError, match="is not valid"):
            convert_size(value)


class TestConvertNumbers:
    """整数・小数の変換。"""

    @pytest.mark.parametrize(("value", "expected"), [("42", 42), ("-3", -3), ("+7", 7)])
    def test_integer_valid(self, value: str, expected: int) -> None:
        assert convert_integer(value) == expected

    @pytest.mark.parametrize("value", ["", "4.0", "0x10", "1e3", "four"])
    def test_integer_invalid(self, value: str) -> None:
        with pytest.raises(ValueError, match="not a valid integer"):
            convert_integer(value)

    @pytest.mark.parametrize(
        ("value", "expected"), [("1.5", 1.5), ("2", 2.0), (".5", 0.5), ("-0.25", -0.25)]
    )
    def test_float_valid(self, value: str, expected: float) -> None:
        assert convert_float(value) == expected

    @pytest.mark.parametrize("value", ["", "1e3", "inf", "nan", "1.2.3"])
    def test_float_invalid(self, value: str) -> None:
        with pytest.raises(ValueError, match="not a valid float"):
            convert_float(value)


class TestConvertBoolean:
    """真偽値リテラル。"""

    @pytest.mark.parametrize(
        ("value", "expected"), [("y", True), ("n", False), ("Y", True), ("1", True), ("0", False)]
    )
    def test_valid(self, value: str, expected: bool) -> None:
        assert convert_boolean(value) is expected

    def test_invalid(self) -> None:
        with pytest.raises(ValueError, match="not a valid boolean"):
            convert_boolean("yes")


class TestSplitKeyValue:
    def test_splits_on_first_equals(self) -> None:
        assert split_key_value("a=b=c") == ("a", "b=c")

    def test_empty_value(self) -> None:
        assert split_key_value("a=") == ("a", "")

    def test_missing_equals(self) -> None:
        with pytest.raises(ValueError, match="has no '='"):
            split_key_value("a")


class TestNormalizePath:
    """パス値の検証と正規化。"""

    def test_strips_one_trailing_slash(self) -> None:
        assert normalize_path("/var/lib/", "repo1-path") == "/var/lib"

    def test_root_kept(self) -> None:
        assert normalize_path("/", "repo1-path") == "/"

    def test_unchanged(self) -> None:
        assert normalize_path("/var/lib", "repo1-path") == "/var/lib"

    def test_empty(self) -> None:
        with pytest.raises(OptionInvalidValueError, match="must be >= 1 character"):
            normalize_path("", "repo1-path")

    def test_relative(self) -> None:
        with pytest.raises(
            OptionInvalidValueError, match="'var/lib' must begin with / for 'repo1-path'"
        ):
            normalize_path("var/lib", "repo1-path")

    def test_double_slash(self) -> None:
        with pytest.raises(OptionInvalidValueError, match="cannot contain //"):
            normalize_path("/var//lib", "repo1-path")

    def test_trailing_double_slash(self) -> None:
        """末尾の // は除去ではなくエラー。"""
        with pytest.raises(OptionInvalidValueError, match="cannot contain //"):
            normalize_path("/var/lib//", "repo1-path")
