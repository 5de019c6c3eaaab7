"""
Command runner.

Builds the run context from the global options, runs the async command body
and turns fatal issues into a printed report and exit code 1.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from rich.console import Console

from vaulty.context import CommandOptions, RunContext
from vaulty.issues.application.collector import IssuesCollectorError
from vaulty.issues.application.report import print_issues
from vaulty.issues.domain.enums import IssueSeverity
from vaulty.shared.domain.exceptions import VaultyError
from vaulty.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

console = Console()
err_console = Console(stderr=True)

T = TypeVar("T")


def get_options(ctx: typer.Context) -> CommandOptions:
    """Return the global options stored by the root callback."""
    obj = ctx.find_root().obj
    return obj if isinstance(obj, CommandOptions) else CommandOptions()


def parse_token_pairs(values: list[str] | None) -> dict[str, str]:
    """
    Parse ``name:value`` arguments; the value may itself contain colons.

    Raises:
        typer.BadParameter: On a missing name or value.
    """
    tokens: dict[str, str] = {}
    for item in values or []:
        name, separator, value = item.partition(":")
        if not separator or not name.strip() or not value.strip():
            raise typer.BadParameter(f"Expected NAME:VALUE, got '{item}'")
        tokens[name.strip()] = value.strip()
    return tokens


def confirm(message: str, options: CommandOptions) -> bool:
    """Ask for confirmation unless ``--force`` was given."""
    if options.force:
        return True
    return typer.confirm(message, default=False)


def fail_on_errors(run_ctx: RunContext) -> None:
    """Print the error issues of the run and exit 1 if there are any."""
    if run_ctx.issues.counts(severity=IssueSeverity.ERROR).errors:
        err_console.print()
        print_issues(run_ctx.issues, err_console, severity=IssueSeverity.ERROR)
        raise typer.Exit(1)


def run_command(ctx: typer.Context, handler: Callable[[RunContext], Awaitable[T]]) -> T:
    """
    Run ``handler`` with a fresh run context.

    Raises:
        typer.Exit: With code 1 when the handler raised a fatal issue or a
            Vaulty error.
    """
    run_ctx = RunContext(get_options(ctx))

    async def main() -> T:
        try:
            return await handler(run_ctx)
        finally:
            await run_ctx.aclose()

    try:
        return asyncio.run(main())
    except IssuesCollectorError as e:
        logger.debug("command_failed", command=ctx.command_path, errors=e.collection.counts.errors)
        err_console.print()
        print_issues(run_ctx.issues, err_console, severity=IssueSeverity.ERROR)
        raise typer.Exit(1)
    except VaultyError as e:
        logger.debug("command_failed", command=ctx.command_path, error=str(e))
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    except (typer.Exit, typer.Abort):
        raise
    except Exception as e:
        logger.warning("command_crashed", command=ctx.command_path, error=str(e) or type(e).__name__)
        run_ctx.issues.add_error(e)
        err_console.print()
        print_issues(run_ctx.issues, err_console, severity=IssueSeverity.ERROR)
        raise typer.Exit(1)
