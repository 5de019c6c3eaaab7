"""
Vaulty CLI
Main entry point for the command-line interface

Usage:
    vaulty audit report             # Report the issues of the project
    vaulty audit fix                # Fix the fixable issues
    vaulty templates write          # Write every template output
    vaulty tokens save name:value   # Save a token to the store
    vaulty render '.env.vaulty'     # Print a rendered template
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel
from rich.table import Table

from vaulty import __version__
from vaulty.cli.commands import audit, config, projects, secrets, store, templates, tokens
from vaulty.cli.commands.helpers.runner import console, parse_token_pairs
from vaulty.context import CommandOptions
from vaulty.shared.infrastructure.logging import configure_logging

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")

app = typer.Typer(
    name="vaulty",
    help="Vaulty - render secrets from Vault into project files and audit them",
    add_completion=False,
    no_args_is_help=True,
)

app.add_typer(audit.app, name="audit")
app.add_typer(templates.app, name="templates")
app.add_typer(tokens.app, name="tokens")
app.add_typer(secrets.app, name="secrets")
app.add_typer(store.app, name="store")
app.add_typer(config.app, name="config")
app.add_typer(projects.app, name="projects")
app.command("render")(templates.render)


def _validate_log_level(value: str) -> str:
    value = value.lower()
    if value not in LOG_LEVELS:
        raise typer.BadParameter(f"Expected one of {', '.join(LOG_LEVELS)}")
    return value


@app.callback()
def main_callback(
    ctx: typer.Context,
    cwd: Optional[Path] = typer.Option(None, "--cwd", help="Working directory used to find the project"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path of the configuration file"),
    force: bool = typer.Option(False, "--force", help="Skip confirmations"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be done without doing it"),
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        help=f"Log level: {', '.join(LOG_LEVELS)}",
        callback=_validate_log_level,
    ),
    token: Optional[list[str]] = typer.Option(
        None,
        "--token",
        help="Token as NAME:VALUE, used instead of the stored one (repeatable)",
    ),
):
    """Global options shared by every command."""
    configure_logging(log_level)
    ctx.obj = CommandOptions(
        cwd=cwd or Path.cwd(),
        config=config_path,
        dry_run=dry_run,
        force=force,
        log_level=log_level,
        tokens=parse_token_pairs(token),
    )


@app.command()
def version():
    """Show Vaulty version info."""
    table = Table(show_header=False, box=None)
    table.add_row("Vaulty", f"[bold green]v{__version__}[/bold green]")
    table.add_row("Python", sys.version.split()[0])
    table.add_row("Platform", sys.platform)

    console.print(Panel(table, title="[bold blue]Vaulty[/bold blue]", expand=False))


def main():
    """Entry point for setuptools."""
    app()


if __name__ == "__main__":
    app()
