"""実行時スキーマのテスト。

名前の検索表（グループ番号・否定・リセット・旧名）、参照の検証、
依存関係に基づく解決順序と循環検出を検証する。
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from cmdconf.schema import OptionKey, Schema, SchemaError

REPO_GROUP = {"name": "repo", "prefix": "repo", "index_max": 4}


# =============================================================================
# 名前の検索表
# =============================================================================


class TestFindKey:
    """綴りからのオプションキー検索。"""

    @pytest.fixture
    def schema(self, make_schema: Callable[..., Schema]) -> Schema:
        return make_schema(
            [
                {"name": "online", "type": "boolean"},
                {"name": "log-level-console", "type": "string", "deprecated_names": ["log-level"]},
                {"name": "repo-path", "type": "path", "group": "repo"},
            ],
            groups=[REPO_GROUP],
        )

    def test_plain(self, schema: Schema) -> None:
        assert schema.find_key("online") == OptionKey("online", "online")

    def test_negate_and_reset(self, schema: Schema) -> None:
        negate = schema.find_key("no-online")
        reset = schema.find_key("reset-online")
        assert negate is not None and negate.negate and negate.option == "online"
        assert reset is not None and reset.reset

    def test_negate_not_registered_for_non_boolean(self, schema: Schema) -> None:
        assert schema.find_key("no-log-level-console") is None

    def test_reset_not_registered_for_command_line(self, schema: Schema) -> None:
        assert schema.find_key("reset-config-path") is None

    def test_negate_registered_when_enabled(self, schema: Schema) -> None:
        """config は path 型だが negate が有効。"""
        key = schema.find_key("no-config")
        assert key is not None
        assert key.negate

    def test_group_indexes(self, schema: Schema) -> None:
        key = schema.find_key("repo3-path")
        assert key == OptionKey("repo3-path", "repo-path", index=2)
        assert schema.find_key("reset-repo4-path") is not None
        assert schema.find_key("repo5-path") is None
        assert schema.find_key("repo0-path") is None

    def test_unindexed_group_name_is_deprecated_alias(self, schema: Schema) -> None:
        key = schema.find_key("repo-path")
        assert key is not None
        assert key.index == 0
        assert key.deprecated

    def test_deprecated_name(self, schema: Schema) -> None:
        key = schema.find_key("log-level")
        assert key is not None
        assert key.option == "log-level-console"
        assert key.deprecated

    def test_unknown(self, schema: Schema) -> None:
        assert schema.find_key("bogus") is None

    def test_option_index_name(self, schema: Schema) -> None:
        assert schema.option_index_name("repo-path", 0) == "repo1-path"
        assert schema.option_index_name("repo-path", 3) == "repo4-path"
        assert schema.option_index_name("online", 0) == "online"


class TestSchemaProperties:
    def test_env_prefix_and_legacy_path(self, make_schema: Callable[..., Schema]) -> None:
        schema = make_schema()
        assert schema.env_prefix == "CMDCONF_"
        assert schema.legacy_config_path == "/etc/cmdconf.conf"

    def test_boolean_depend_values_normalized(self, make_schema: Callable[..., Schema]) -> None:
        schema = make_schema(
            [
                {"name": "archive-async", "type": "boolean"},
                {
                    "name": "spool-path",
                    "type": "path",
                    "depend": {"option": "archive-async", "values": ["y"]},
                    "commands": {
                        "archive-push": {"depend": {"option": "archive-async", "values": ["n"]}},
                    },
                },
            ]
        )
        option = schema.option("spool-path")
        assert option.depend is not None
        assert option.depend.values == ("1",)
        depend = option.depend_for("archive-push")
        assert depend is not None
        assert depend.values == ("0",)


# =============================================================================
# 定義の検証
# =============================================================================


class TestSchemaValidation:
    """スキーマ構築時の不整合検出。"""

    def test_duplicate_option(self, make_schema: Callable[..., Schema]) -> None:
        with pytest.raises(SchemaError, match="Duplicate option name 'a'"):
            make_schema([{"name": "a", "type": "string"}, {"name": "a", "type": "path"}])

    def test_unknown_group(self, make_schema: Callable[..., Schema]) -> None:
        with pytest.raises(SchemaError, match="unknown group 'repo'"):
            make_schema([{"name": "repo-path", "type": "path", "group": "repo"}])

    def test_group_prefix_mismatch(self, make_schema: Callable[..., Schema]) -> None:
        with pytest.raises(SchemaError, match="must start with 'repo-'"):
            make_schema([{"name": "path", "type": "path", "group": "repo"}], groups=[REPO_GROUP])

    def test_unknown_depend(self, make_schema: Callable[..., Schema]) -> None:
        with pytest.raises(SchemaError, match="depends on unknown option 'b'"):
            make_schema([{"name": "a", "type": "string", "depend": {"option": "b"}}])

    def test_self_depend(self, make_schema: Callable[..., Schema]) -> None:
        with pytest.raises(SchemaError, match="cannot depend on itself"):
            make_schema([{"name": "a", "type": "string", "depend": {"option": "a"}}])

    def test_unknown_command(self, make_schema: Callable[..., Schema]) -> None:
        with pytest.raises(SchemaError, match="unknown command 'bogus'"):
            make_schema([{"name": "a", "type": "string", "commands": {"bogus": {}}}])

    def test_invalid_boolean_depend_value(self, make_schema: Callable[..., Schema]) -> None:
        with pytest.raises(SchemaError, match="must be 'y' or 'n'"):
            make_schema(
                [
                    {"name": "a", "type": "boolean"},
                    {"name": "b", "type": "string", "depend": {"option": "a", "values": ["on"]}},
                ]
            )

    def test_ambiguous_spelling(self, make_schema: Callable[..., Schema]) -> None:
        """旧名が他のオプションの綴りと衝突する。"""
        with pytest.raises(SchemaError, match="Option name 'log-path' is ambiguous"):
            make_schema(
                [
                    {"name": "log-path", "type": "path"},
                    {"name": "log-dir", "type": "path", "deprecated_names": ["log-path"]},
                ]
            )


# =============================================================================
# 解決順序
# =============================================================================


class TestResolveOrder:
    """依存先が常に依存元より先に来る。"""

    def test_dependency_first(self, make_schema: Callable[..., Schema]) -> None:
        schema = make_schema(
            [
                {"name": "c", "type": "string", "depend": {"option": "b"}},
                {"name": "b", "type": "string", "depend": {"option": "a"}},
                {"name": "a", "type": "string"},
            ],
            with_config_options=False,
        )
        assert schema.resolve_order == ("a", "b", "c")

    def test_definition_order_kept_for_independent_options(
        self, make_schema: Callable[..., Schema]
    ) -> None:
        schema = make_schema(
            [
                {"name": "z", "type": "string"},
                {"name": "y", "type": "string", "depend": {"option": "x"}},
                {"name": "x", "type": "string"},
            ],
            with_config_options=False,
        )
        order = schema.resolve_order
        assert order.index("z") < order.index("x") < order.index("y")

    def test_command_override_dependency_counted(
        self, make_schema: Callable[..., Schema]
    ) -> None:
        schema = make_schema(
            [
                {
                    "name": "b",
                    "type": "string",
                    "commands": {"backup": {"depend": {"option": "a"}}},
                },
                {"name": "a", "type": "string"},
            ],
            with_config_options=False,
        )
        assert schema.resolve_order == ("a", "b")

    def test_cycle(self, make_schema: Callable[..., Schema]) -> None:
        with pytest.raises(SchemaError, match="cycle among: a, b"):
            make_schema(
                [
                    {"name": "a", "type": "string", "depend": {"option": "b"}},
                    {"name": "b", "type": "string", "depend": {"option": "a"}},
                    {"name": "c", "type": "string"},
                ],
                with_config_options=False,
            )

    def test_builtin_order_respects_dependencies(self, builtin_schema: Schema) -> None:
        order = builtin_schema.resolve_order
        for name in order:
            option = builtin_schema.option(name)
            if option.depend is not None:
                assert order.index(option.depend.option) < order.index(name)
