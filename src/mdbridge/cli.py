"""CLI entrypoints for checking Markdown settings against real input."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import MarkdownSettings, load_settings
from .errors import ConfigurationError
from .markdown import enabled_extensions
from .service import MarkdownService

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(help="Markdown/HTML conversion with module settings.")

SettingsOption = Annotated[
    Optional[Path],
    typer.Option("--settings", "-s", help="Path to a YAML settings file or a directory holding mdbridge.yml."),
]
OutputOption = Annotated[
    Optional[Path],
    typer.Option("--output", "-o", help="Write the result to this file instead of stdout."),
]
SourceArgument = Annotated[
    Optional[Path],
    typer.Argument(help="Input file; reads stdin when omitted.", exists=True, dir_okay=False),
]


@app.command()
def render(
    source: SourceArgument = None,
    settings_path: SettingsOption = None,
    output: OutputOption = None,
) -> None:
    """Convert Markdown to HTML."""
    service = MarkdownService(_load(settings_path))
    _emit(service.to_html(_read(source)), output)


@app.command()
def unrender(
    source: SourceArgument = None,
    settings_path: SettingsOption = None,
    output: OutputOption = None,
) -> None:
    """Convert HTML back to Markdown."""
    service = MarkdownService(_load(settings_path))
    _emit(service.to_markdown(_read(source)), output)


@app.command()
def settings(settings_path: SettingsOption = None) -> None:
    """Show the effective settings and the extensions they enable."""
    effective = _load(settings_path)
    table = Table(title="Markdown settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in _flatten(effective.as_mapping()):
        table.add_row(key, repr(value))
    console.print(table)
    console.print(f"[bold blue]Extensions[/]: {', '.join(enabled_extensions(effective))}")


def _load(path: Path | None) -> MarkdownSettings:
    if path is None:
        return MarkdownSettings()
    try:
        return load_settings(path)
    except FileNotFoundError as exc:
        err_console.print(f"[bold red]Settings file not found[/]: {path}")
        raise typer.Exit(code=1) from exc
    except ConfigurationError as exc:
        err_console.print(f"[bold red]Invalid settings[/]: {exc}")
        raise typer.Exit(code=1) from exc


def _read(source: Path | None) -> str:
    if source is None:
        return sys.stdin.read()
    return source.read_text(encoding="utf-8")


def _emit(text: str, output: Path | None) -> None:
    if output is None:
        typer.echo(text, nl=not text.endswith("\n"))
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    console.print(f"[bold green]Wrote[/] {output}")


def _flatten(mapping: dict[str, Any], prefix: str = "") -> list[tuple[str, Any]]:
    rows: list[tuple[str, Any]] = []
    for key, value in mapping.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            rows.extend(_flatten(value, prefix=f"{name}."))
        else:
            rows.append((name, value))
    return rows


if __name__ == "__main__":
    app()
