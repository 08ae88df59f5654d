"""設定ファイルの場所の決定のテスト。

--config / --config-path / --config-include-path / --no-config の組み合わせごとの計画を検証する。
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from cmdconf.config._context import ResolveContext
from cmdconf.config._locator import ConfigFilePlan, plan_config_files
from cmdconf.config._tokenizer import parse_command_line
from cmdconf.schema import Schema


@pytest.fixture
def schema(make_schema: Callable[..., Schema]) -> Schema:
    return make_schema()


def _plan(schema: Schema, *options: str) -> ConfigFilePlan:
    ctx = ResolveContext.create(schema)
    parse_command_line(ctx, ["backup", *options])
    plan = plan_config_files(ctx)
    assert plan is not None
    return plan


class TestPlanDefaults:
    """オプション指定なし。"""

    def test_nothing_given(self, schema: Schema) -> None:
        plan = _plan(schema)
        assert plan == ConfigFilePlan(
            load_config=True,
            config_file="/etc/cmdconf/cmdconf.conf",
            config_required=False,
            config_fallback="/etc/cmdconf.conf",
            load_include=True,
            include_path="/etc/cmdconf/conf.d",
            include_required=False,
            include_file_required=False,
        )

    def test_no_config_option_in_schema(self, make_schema: Callable[..., Schema]) -> None:
        """config オプションを持たないスキーマでは設定ファイルを読まない。"""
        ctx = ResolveContext.create(make_schema(with_config_options=False))
        parse_command_line(ctx, ["backup"])
        assert plan_config_files(ctx) is None


class TestPlanExplicit:
    """明示指定の組み合わせ。"""

    def test_config_only(self, schema: Schema) -> None:
        """--config のみ: 指定ファイルのみ必須、インクルードは見ない。"""
        plan = _plan(schema, "--config=/custom.conf")
        assert plan.load_config
        assert plan.config_file == "/custom.conf"
        assert plan.config_required
        assert plan.config_fallback is None
        assert not plan.load_include
        assert not plan.include_required

    def test_config_and_config_path(self, schema: Schema) -> None:
        plan = _plan(schema, "--config=/custom.conf", "--config-path=/alt")
        assert plan.config_file == "/custom.conf"
        assert plan.config_required
        assert plan.load_include
        assert plan.include_path == "/alt/conf.d"
        assert not plan.include_required

    def test_include_path_only(self, schema: Schema) -> None:
        plan = _plan(schema, "--config-include-path=/inc")
        assert plan.load_config
        assert plan.config_file == "/etc/cmdconf/cmdconf.conf"
        assert not plan.config_required
        assert plan.config_fallback == "/etc/cmdconf.conf"
        assert plan.include_path == "/inc"
        assert plan.include_required
        assert not plan.include_file_required

    def test_include_path_and_config_path(self, schema: Schema) -> None:
        """--config-path は既定ファイル名の基点を置き換え、旧来パスは試さない。"""
        plan = _plan(schema, "--config-include-path=/inc", "--config-path=/alt")
        assert plan.config_file == "/alt/cmdconf.conf"
        assert not plan.config_required
        assert plan.config_fallback is None
        assert plan.include_path == "/inc"
        assert plan.include_required

    def test_config_and_include_path(self, schema: Schema) -> None:
        """両方明示: 両方必須かつインクルードファイルが1つ以上必要。"""
        plan = _plan(schema, "--config=/custom.conf", "--config-include-path=/inc")
        assert plan.config_required
        assert plan.include_required
        assert plan.include_file_required

    def test_config_path_only(self, schema: Schema) -> None:
        plan = _plan(schema, "--config-path=/alt")
        assert plan.config_file == "/alt/cmdconf.conf"
        assert not plan.config_required
        assert plan.config_fallback is None
        assert plan.include_path == "/alt/conf.d"
        assert not plan.include_required


class TestPlanNoConfig:
    """--no-config との組み合わせ。"""

    def test_no_config_alone(self, schema: Schema) -> None:
        plan = _plan(schema, "--no-config")
        assert not plan.load_config
        assert not plan.load_include

    def test_no_config_with_include_path(self, schema: Schema) -> None:
        plan = _plan(schema, "--no-config", "--config-include-path=/inc")
        assert not plan.load_config
        assert plan.load_include
        assert plan.include_path == "/inc"
        assert plan.include_required

    def test_no_config_with_config_path(self, schema: Schema) -> None:
        plan = _plan(schema, "--no-config", "--config-path=/alt")
        assert not plan.load_config
        assert plan.load_include
        assert plan.include_path == "/alt/conf.d"
        assert not plan.include_required
