"""CLI interface for formrules using Typer framework."""

import json as jsonlib
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from formrules import __description__, __version__
from formrules.compiler import CompiledForm, compile_forms
from formrules.config import FormrulesConfig, OutputFormat, load_config
from formrules.declarations import load_declarations
from formrules.errors import FormBuildError, FormBuildErrors
from formrules.models.result import ValidationResult

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_BUILD_ERROR = 2

_LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

app = typer.Typer(
    name="formrules",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"formrules version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """formrules - Declarative form-validation compiler."""


def _setup(config_path: Optional[Path], output_format: Optional[str]) -> tuple[FormrulesConfig, str]:
    try:
        config = load_config(config_path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_BUILD_ERROR)

    logging.basicConfig(
        level=_LOG_LEVELS.get(config.logging.level, logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )

    output_format = output_format or config.output.format
    valid_formats = [f.value for f in OutputFormat]
    if output_format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{output_format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(EXIT_BUILD_ERROR)

    return config, output_format


def _compile(declarations_path: Path, config: FormrulesConfig, output_format: str) -> dict[str, CompiledForm]:
    try:
        declarations = load_declarations(declarations_path)
        return compile_forms(declarations, config)
    except FormBuildError as e:
        _print_build_error(e, output_format)
        raise typer.Exit(EXIT_BUILD_ERROR)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_BUILD_ERROR)


def _print_build_error(error: FormBuildError, output_format: str) -> None:
    if output_format == OutputFormat.JSON.value:
        typer.echo(jsonlib.dumps(error.to_dict(), indent=2))
        return

    errors = error.errors if isinstance(error, FormBuildErrors) else [error]
    table = Table(title="Build Errors")
    table.add_column("Error", style="red")
    table.add_column("Form", style="cyan")
    table.add_column("Field", style="cyan")
    table.add_column("Attribute", style="dim")
    table.add_column("Message", style="white")
    for item in errors:
        table.add_row(type(item).__name__, item.form or "", item.field or "", item.attribute or "", item.detail)
    console.print(table)


@app.command()
def check(
    declarations: Annotated[
        Path,
        typer.Argument(help="JSON or YAML file with form declarations")
    ],
    format: Annotated[
        Optional[str],
        typer.Option("--format", "-f", help="Output format: table, json (default: from config)")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .formrules.json)")
    ] = None,
) -> None:
    """Compile form declarations and list the resulting rules."""
    formrules_config, output_format = _setup(config, format)
    compiled = _compile(declarations, formrules_config, output_format)

    if output_format == OutputFormat.JSON.value:
        typer.echo(jsonlib.dumps({"forms": [form.spec.to_dict() for form in compiled.values()]}, indent=2))
        return

    for form in compiled.values():
        spec = form.spec
        table = Table(title=f"{spec.name}")
        table.add_column("Field", style="cyan")
        table.add_column("Type", style="white")
        table.add_column("Rules", style="white")
        for field_spec in spec.fields:
            rules = ", ".join(rule.describe() for rule in field_spec.rules) or "[dim]none[/dim]"
            table.add_row(field_spec.name, str(field_spec.type) + (" (optional)" if field_spec.optional else ""), rules)
        console.print(table)

        patterns = spec.registry.declared()
        if patterns:
            console.print("[blue]Patterns:[/blue] " + ", ".join(f"{p.identifier} = {p.pattern!r}" for p in patterns))

    console.print(f"\n[green]Compiled {len(compiled)} form(s)[/green]")


@app.command("validate")
def validate_command(
    declarations: Annotated[
        Path,
        typer.Argument(help="JSON or YAML file with form declarations")
    ],
    instance: Annotated[
        Path,
        typer.Argument(help="JSON file holding the instance to validate")
    ],
    form_name: Annotated[
        Optional[str],
        typer.Option("--form", help="Form to validate against (required when several are declared)")
    ] = None,
    format: Annotated[
        Optional[str],
        typer.Option("--format", "-f", help="Output format: table, json (default: from config)")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .formrules.json)")
    ] = None,
) -> None:
    """Validate a JSON instance against a declared form."""
    formrules_config, output_format = _setup(config, format)
    compiled = _compile(declarations, formrules_config, output_format)

    if form_name is None:
        if len(compiled) != 1:
            console.print(f"[red]Error:[/red] Several forms declared, use --form: {', '.join(compiled)}")
            raise typer.Exit(EXIT_BUILD_ERROR)
        form_name = next(iter(compiled))
    if form_name not in compiled:
        console.print(f"[red]Error:[/red] Form '{form_name}' not found. Available forms: {', '.join(compiled)}")
        raise typer.Exit(EXIT_BUILD_ERROR)

    try:
        with open(instance, encoding="utf-8") as f:
            data = jsonlib.load(f)
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] Instance file not found: {instance}")
        raise typer.Exit(EXIT_BUILD_ERROR)
    except jsonlib.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] Invalid JSON in instance file {instance}: {e}")
        raise typer.Exit(EXIT_BUILD_ERROR)

    if not isinstance(data, dict):
        console.print("[red]Error:[/red] Instance must be a JSON object")
        raise typer.Exit(EXIT_BUILD_ERROR)

    result = compiled[form_name].validate(data)
    _print_result(result, compiled[form_name], output_format, formrules_config.output.show_passing)
    raise typer.Exit(EXIT_VALID if result.ok else EXIT_INVALID)


def _print_result(result: ValidationResult, form: CompiledForm, output_format: str,
                  show_passing: bool) -> None:
    if output_format == OutputFormat.JSON.value:
        typer.echo(jsonlib.dumps(result.to_dict(), indent=2))
        return

    if result.ok:
        console.print(f"[green]{result.form}: valid[/green]")
    else:
        table = Table(title=f"{result.form}: {len(result.errors)} error(s)")
        table.add_column("Field", style="cyan")
        table.add_column("Rule", style="white")
        table.add_column("Message", style="red")
        for error in result.errors:
            table.add_row(error.field, error.rule.value, error.message)
        console.print(table)

    if show_passing:
        failed = set(result.failed_fields)
        passing = [name for name in form.spec.field_names if name not in failed]
        console.print(f"[dim]Passing fields:[/dim] {', '.join(passing) or 'none'}")
