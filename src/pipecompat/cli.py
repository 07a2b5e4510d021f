# src/pipecompat/cli.py
"""pipecompat Command Line Interface.

Entry point for the pipecompat CLI tool.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

import typer
import yaml
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from pipecompat import __version__
from pipecompat.api import check_compatibility
from pipecompat.compat.rules import RuleRegistry, default_registry
from pipecompat.contracts import RuleCategory, Severity, UnknownRuleError
from pipecompat.core.config import CompatibilitySettings, build_registry, load_settings

__all__ = [
    "app",
]

# Exit codes
EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_USAGE = 2

NO_ISSUES_MESSAGE = "No compatibility issues found."

app = typer.Typer(
    name="pipecompat",
    help="pipecompat: compatibility checks for stream pipeline configurations.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pipecompat version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """pipecompat: compatibility checks for stream pipeline configurations."""
    # Configure logging at entry point (before any subcommands run)
    from pipecompat.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(json_output=json_logs, level=log_level)


def _load_compat_settings(settings: str | None) -> CompatibilitySettings:
    """Load settings, or defaults when no file is given. Exits 2 on bad settings."""
    if settings is None:
        return CompatibilitySettings()

    try:
        return load_settings(Path(settings).expanduser())
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings}: {e.problem}", err=True)
        raise typer.Exit(EXIT_USAGE) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(EXIT_USAGE) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(EXIT_USAGE) from None


def _build_registry_or_exit(config: CompatibilitySettings) -> RuleRegistry:
    try:
        return build_registry(config)
    except UnknownRuleError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(EXIT_USAGE) from None


def _load_pipeline(pipeline: Path) -> Any:
    """Decode a pipeline YAML/JSON file. Exits 2 when it cannot be read."""
    try:
        text = pipeline.read_text(encoding="utf-8")
    except FileNotFoundError:
        typer.echo(f"Error: Pipeline file not found: {pipeline}", err=True)
        raise typer.Exit(EXIT_USAGE) from None
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(f"Error: Cannot read pipeline file {pipeline}: {e}", err=True)
        raise typer.Exit(EXIT_USAGE) from None

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        typer.echo(f"YAML syntax error in {pipeline}: {e}", err=True)
        raise typer.Exit(EXIT_USAGE) from None


@app.command()
def check(
    pipeline: Path = typer.Argument(
        ...,
        help="Path to the pipeline YAML or JSON file.",
    ),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to pipecompat settings YAML file.",
    ),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
    fail_on: Literal["error", "warning", "never"] = typer.Option(
        "error",
        "--fail-on",
        help="Exit with status 1 when a warning of this severity or worse is found.",
    ),
) -> None:
    """Check a pipeline configuration for compatibility issues."""
    config = _load_compat_settings(settings)
    registry = _build_registry_or_exit(config)
    raw = _load_pipeline(pipeline.expanduser())

    result = check_compatibility(raw, registry=registry, min_severity=config.min_severity)

    if output_format == "json":
        typer.echo(json.dumps(result, indent=2))
    else:
        typer.echo(result.get("report", NO_ISSUES_MESSAGE))

    if fail_on != "never":
        threshold = Severity(fail_on)
        if any(Severity(w["severity"]).at_least(threshold) for w in result["warnings"]):
            raise typer.Exit(EXIT_FINDINGS)


@app.command("rules")
def rules_list(
    category: str | None = typer.Option(
        None,
        "--category",
        "-c",
        help="Only list rules of this category.",
    ),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to pipecompat settings YAML file (applies disabled_rules).",
    ),
) -> None:
    """List the compatibility rules that would be evaluated."""
    from rich.console import Console
    from rich.table import Table

    valid_categories = [c.value for c in RuleCategory]
    if category is not None and category not in valid_categories:
        typer.echo(f"Error: Invalid category '{category}'.", err=True)
        typer.echo(f"Valid categories: {', '.join(valid_categories)}", err=True)
        raise typer.Exit(EXIT_USAGE)

    registry = default_registry() if settings is None else _build_registry_or_exit(_load_compat_settings(settings))
    selected = [rule for rule in registry if category is None or rule.category == category]

    table = Table(show_header=True, header_style="bold")
    table.add_column("Rule")
    table.add_column("Severity")
    table.add_column("Category")
    table.add_column("Name")
    for rule in selected:
        table.add_row(rule.id, rule.severity.value, rule.category.value, rule.name)

    # Wide console so ids are never truncated when piped
    Console(width=200).print(table)
    typer.echo(f"{len(selected)} rule(s)")


if __name__ == "__main__":
    app()
