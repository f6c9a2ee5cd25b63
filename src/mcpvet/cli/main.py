"""CLI entry point - Click commands for mcpvet."""

from __future__ import annotations

import sys

import click

from mcpvet import __version__
from mcpvet.cli._output import (
    format_human,
    format_json,
    format_rules_json,
    format_rules_text,
    format_sarif,
)
from mcpvet.core._types import Category, Severity
from mcpvet.core.config import (
    OUTPUT_FORMATS,
    ConfigError,
    ValidatorConfig,
    load_config,
    parse_rule_value,
)
from mcpvet.core.loader import LoadError, load_tools
from mcpvet.core.validator import validate
from mcpvet.rules import ALL_RULES, REGISTRY


def _parse_rule_overrides(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> dict[str, object]:
    overrides: dict[str, object] = {}
    for value in values:
        rule_id, sep, setting = value.partition("=")
        if not sep or not rule_id.strip():
            msg = f"{value!r} is not in RULE-ID=SETTING form"
            raise click.BadParameter(msg, ctx=ctx, param=param)
        try:
            overrides[rule_id.strip()] = parse_rule_value(setting)
        except ConfigError as exc:
            raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc
    return overrides


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", message="mcpvet %(version)s")
def cli() -> None:
    """mcpvet - MCP tool definition validator."""


@cli.command()
@click.argument("file", required=False, type=click.Path(dir_okay=False))
@click.option(
    "-s",
    "--server",
    default=None,
    metavar="URL|COMMAND",
    help="Validate the tools a live MCP server advertises (http(s) URL or stdio command).",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=30.0,
    show_default=True,
    help="Seconds allowed for the --server round-trip.",
)
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format. Defaults to the config file's format, else human.",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=False),
    help="Path to a config file. Auto-detected from the current directory when omitted.",
)
@click.option(
    "-r",
    "--rule",
    "rule_overrides",
    multiple=True,
    callback=_parse_rule_overrides,
    metavar="ID=SETTING",
    help="Override a rule: RULE-ID=on|off|error|warning|suggestion. Repeatable.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show suggestions under each issue.")
@click.option("-q", "--quiet", is_flag=True, help="Only show errors.")
@click.option("--no-color", is_flag=True, envvar="NO_COLOR", help="Disable ANSI colors.")
def check(
    file: str | None,
    server: str | None,
    timeout: float,
    fmt: str | None,
    config_path: str | None,
    rule_overrides: dict[str, object],
    verbose: bool,
    quiet: bool,
    no_color: bool,
) -> None:
    """Validate the tool definitions in FILE (JSON or YAML) or from --server.

    Exits 0 when no error-severity issue is found, 1 when validation
    fails, and 2 when the tools or the config cannot be loaded.
    """
    if file is not None and server is not None:
        msg = "Provide either FILE or --server, not both"
        raise click.UsageError(msg)
    if file is None and server is None:
        msg = "Missing FILE or --server"
        raise click.UsageError(msg)

    try:
        config: ValidatorConfig = load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Error: invalid config: {exc}", err=True)
        sys.exit(2)

    try:
        if server is not None:
            from mcpvet.core.server import load_server_tools

            tools = load_server_tools(server, timeout=timeout)
        else:
            tools = load_tools(str(file))
    except LoadError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    result = validate(tools, config=config.with_rules(rule_overrides))

    fmt = fmt or config.format
    if fmt == "json":
        click.echo(format_json(result))
    elif fmt == "sarif":
        click.echo(format_sarif(result, REGISTRY))
    else:
        click.echo(
            format_human(
                result,
                verbose=verbose or config.verbose,
                quiet=quiet,
                no_color=no_color or not config.color,
            )
        )

    if not result.valid:
        sys.exit(1)


@cli.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.option("--no-color", is_flag=True, envvar="NO_COLOR", help="Disable ANSI colors.")
@click.option(
    "--category",
    default=None,
    type=click.Choice([str(c) for c in Category]),
    help="Filter by category.",
)
@click.option(
    "--severity",
    "sev",
    default=None,
    type=click.Choice([str(s) for s in Severity]),
    help="Filter by default severity.",
)
def rules(fmt: str, no_color: bool, category: str | None, sev: str | None) -> None:
    """List all validation rules."""
    filtered = list(ALL_RULES)
    if category is not None:
        filtered = [r for r in filtered if r.category == Category(category)]
    if sev is not None:
        severity = Severity(sev)
        filtered = [r for r in filtered if r.severity == severity]

    total = len(ALL_RULES) if (category is not None or sev is not None) else None

    if fmt == "json":
        click.echo(format_rules_json(filtered))
    else:
        click.echo(format_rules_text(filtered, no_color=no_color, total=total))
