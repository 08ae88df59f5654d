"""解決済み設定モデルのテスト。"""

from __future__ import annotations

import pytest

from cmdconf.models.config import (
    OptionSource,
    ResolvedConfig,
    ResolvedOption,
    ResolvedOptionValue,
)


@pytest.fixture
def config() -> ResolvedConfig:
    return ResolvedConfig(
        command="backup",
        role="default",
        options={
            "process-max": ResolvedOption(
                name="process-max",
                valid=True,
                values=(ResolvedOptionValue(value=4, source=OptionSource.PARAM),),
            ),
            "delta": ResolvedOption(name="delta", valid=True, values=(ResolvedOptionValue(),)),
            "repo-path": ResolvedOption(
                name="repo-path",
                valid=True,
                group="repo",
                values=(
                    ResolvedOptionValue(value="/a", source=OptionSource.CONFIG),
                    ResolvedOptionValue(value="/c", source=OptionSource.DEFAULT),
                ),
            ),
            "archive-async": ResolvedOption(name="archive-async", valid=False),
        },
        groups={"repo": (0, 2)},
    )


class TestOptionAccess:
    def test_value_and_source(self, config: ResolvedConfig) -> None:
        assert config.option_value("process-max") == 4
        assert config.option_source("process-max") is OptionSource.PARAM

    def test_indexed_value(self, config: ResolvedConfig) -> None:
        assert config.option_value("repo-path", 1) == "/c"
        assert config.option_source("repo-path", 1) is OptionSource.DEFAULT

    def test_index_beyond_values(self, config: ResolvedConfig) -> None:
        assert config.option_value("repo-path", 2) is None
        assert config.option_source("repo-path", 2) is None

    def test_unknown_option(self, config: ResolvedConfig) -> None:
        with pytest.raises(KeyError, match="Unknown option 'bogus'"):
            config.option_value("bogus")

    def test_invalid_option(self, config: ResolvedConfig) -> None:
        with pytest.raises(KeyError, match="not valid for command 'backup'"):
            config.option_source("archive-async")

    def test_option_test(self, config: ResolvedConfig) -> None:
        assert config.option_test("process-max")
        assert not config.option_test("delta")
        assert not config.option_test("archive-async")
        assert not config.option_test("bogus")

    def test_option_valid(self, config: ResolvedConfig) -> None:
        assert config.option_valid("delta")
        assert not config.option_valid("archive-async")
        assert not config.option_valid("bogus")


class TestGroupAccess:
    def test_group_index_total(self, config: ResolvedConfig) -> None:
        assert config.group_index_total("repo") == 2
        assert config.group_index_total("pg") == 0

    def test_group_index_key(self, config: ResolvedConfig) -> None:
        """密インデックス 1 は疎インデックス 2、表示番号 3。"""
        assert config.group_index_key("repo", 0) == 1
        assert config.group_index_key("repo", 1) == 3


class TestSerialization:
    def test_json_round_trip_keeps_types(self, config: ResolvedConfig) -> None:
        restored = ResolvedConfig.model_validate_json(config.model_dump_json())
        assert restored.option_value("process-max") == 4
        assert restored.option_source("repo-path", 0) is OptionSource.CONFIG
