"""CliApp: Typer アプリケーション定義。

resolve サブコマンドで任意のコマンドライン（コマンド・パラメーター・オプション）を
解決し、結果を stdout に出力する。警告とエラーは stderr に出力する。
"""

from __future__ import annotations

import importlib.metadata
import logging
import sys
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from cmdconf.config import ConfigError, resolve_config
from cmdconf.models.config import OptionValue, ResolvedConfig
from cmdconf.models.exit_code import ExitCode
from cmdconf.schema import Schema, SchemaError, load_builtin_schema, load_schema

_LOG_FORMAT = "%(levelname)s: %(message)s"


class OutputFormat(StrEnum):
    """resolve の出力形式。"""

    TEXT = "text"
    JSON = "json"


class LogLevel(StrEnum):
    """診断ログのレベル。"""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


app = typer.Typer(
    name="cmdconf",
    help=(
        "Resolve the configuration of a command-line invocation from arguments, "
        "environment variables, configuration files and defaults."
    ),
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    """--version 指定時にバージョン番号を出力して終了する。"""
    if value:
        print(importlib.metadata.version("cmdconf"))
        raise typer.Exit()


def main() -> None:
    """CLI エントリポイント。pyproject.toml の [project.scripts] から呼び出される。"""
    app()


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
    log_level: Annotated[
        LogLevel,
        typer.Option("--log-level", case_sensitive=False, help="Diagnostic log level."),
    ] = LogLevel.WARNING,
) -> None:
    """Configure diagnostics shared by all subcommands."""
    logging.basicConfig(level=log_level.value, format=_LOG_FORMAT, stream=sys.stderr)


def _load_schema(schema_file: Path | None) -> Schema:
    """スキーマを読み込む。失敗時はエラーを stderr に出力して終了する。"""
    try:
        if schema_file is None:
            return load_builtin_schema()
        return load_schema(schema_file)
    except SchemaError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.SCHEMA_ERROR) from None
    except OSError as e:
        print(
            f"Error: Cannot read schema file: {e}\n"
            "Check the path given with --schema.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.SCHEMA_ERROR) from None


@app.command(
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
    }
)
def resolve(
    ctx: typer.Context,
    schema_file: Annotated[
        Path | None,
        typer.Option("--schema", help="Option schema TOML file (default: builtin)."),
    ] = None,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", help="Output format: text or json.")
    ] = OutputFormat.TEXT,
) -> None:
    """Resolve COMMAND[:ROLE] [PARAMS...] [--OPTION...] and print the result.

    Put '--' before the command line when it starts with an option.
    """
    schema = _load_schema(schema_file)
    try:
        config = resolve_config(ctx.args, schema=schema)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=e.exit_code) from None
    except SchemaError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.SCHEMA_ERROR) from None

    if output_format is OutputFormat.JSON:
        print(config.model_dump_json(indent=2))
    else:
        print(format_text(config, schema))


@app.command()
def options(
    command: Annotated[
        str | None, typer.Argument(help="Only list options valid for this command.")
    ] = None,
    schema_file: Annotated[
        Path | None,
        typer.Option("--schema", help="Option schema TOML file (default: builtin)."),
    ] = None,
) -> None:
    """List schema options in resolve order."""
    schema = _load_schema(schema_file)
    if command is not None and schema.command(command) is None:
        print(
            f"Error: Unknown command '{command}'.\n"
            "Run 'cmdconf options' to list options of every command.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.COMMAND_ERROR)

    table = Table(title=f"{schema.project} options")
    table.add_column("Option", style="bold")
    table.add_column("Type")
    table.add_column("Section")
    table.add_column("Group")
    table.add_column("Default")
    table.add_column("Depends on")

    for name in schema.resolve_order:
        option = schema.option(name)
        if command is not None and not option.valid_for(command):
            continue
        default = option.default_for(command) if command is not None else option.default
        depend = option.depend_for(command) if command is not None else option.depend
        depend_text = ""
        if depend is not None:
            depend_text = depend.option
            if depend.values:
                depend_text += f" in ({', '.join(depend.values)})"
        table.add_row(
            name,
            option.type.value,
            option.section.value,
            option.group or "",
            default or "",
            depend_text,
        )

    Console().print(table)


# --- resolve 出力ヘルパー ---


def _format_value(value: OptionValue) -> str:
    if isinstance(value, bool):
        return "y" if value else "n"
    if isinstance(value, tuple):
        return ", ".join(value)
    if isinstance(value, dict):
        return ", ".join(f"{key}={item}" for key, item in value.items())
    return str(value)


def format_text(config: ResolvedConfig, schema: Schema) -> str:
    """解決済み設定を1行1オプションのテキストに整形する。

    値もソースも持たないオプションは出力しない。
    """
    lines = [f"command: {config.command}", f"role: {config.role}"]
    if config.help:
        lines.append("help: y")
    if config.params:
        lines.append(f"params: {' '.join(config.params)}")

    for option in config.options.values():
        if not option.valid:
            continue
        for dense, resolved in enumerate(option.values):
            if resolved.source is None:
                continue
            sparse = config.groups[option.group][dense] if option.group is not None else 0
            display_name = schema.option_index_name(option.name, sparse)
            if resolved.value is None:
                state = "reset" if resolved.reset else "negated"
                lines.append(f"{display_name} <{state}> ({resolved.source.value})")
            else:
                lines.append(
                    f"{display_name} = {_format_value(resolved.value)} "
                    f"({resolved.source.value})"
                )
    return "\n".join(lines)
