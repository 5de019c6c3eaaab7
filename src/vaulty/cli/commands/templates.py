"""
Template commands.

- vaulty templates list [PATTERNS]: List template files
- vaulty templates write [PATTERNS]: Write template outputs
- vaulty templates delete [PATTERNS]: Delete template outputs
- vaulty render [PATTERNS]: Print rendered templates without writing them

Patterns are globs; prefix one with ``!`` to exclude, and quote them so the
shell does not expand them: ``vaulty templates write '**/*.{js,json}.* !src/**'``.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.markup import escape
from rich.rule import Rule

from vaulty.cli.commands.helpers.runner import console, fail_on_errors, get_options, run_command
from vaulty.context import RunContext
from vaulty.issues.application.report import pluralize

app = typer.Typer(name="templates", help="List, write and delete template outputs", no_args_is_help=True)

PATTERNS_ARGUMENT = typer.Argument(None, help="Glob patterns filtering the templates (prefix with ! to exclude)")


@app.command("list")
def list_templates(ctx: typer.Context, patterns: Optional[list[str]] = PATTERNS_ARGUMENT):
    """List template files."""

    async def handler(run_ctx: RunContext) -> None:
        templates = await run_ctx.templates.find_templates(patterns)
        if not templates:
            console.print("[dim]No template found[/dim]")
            return
        for template in templates:
            console.print(escape(template))

    run_command(ctx, handler)


@app.command("write")
def write(ctx: typer.Context, patterns: Optional[list[str]] = PATTERNS_ARGUMENT):
    """Write template outputs."""
    options = get_options(ctx)

    async def handler(run_ctx: RunContext) -> None:
        if not await run_ctx.templates.find_templates(patterns):
            console.print("[dim]No templates found[/dim]")
            return

        written = await run_ctx.templates.write_templates(patterns, dry_run=options.dry_run)
        if written:
            console.print(f"[green]✔[/green] {pluralize(written, 'output')} written")
        else:
            console.print("[dim]No outputs written[/dim]")
        fail_on_errors(run_ctx)

    run_command(ctx, handler)


@app.command("delete")
def delete(ctx: typer.Context, patterns: Optional[list[str]] = PATTERNS_ARGUMENT):
    """Delete template outputs. Templates are never deleted."""
    options = get_options(ctx)

    async def handler(run_ctx: RunContext) -> None:
        deleted = await run_ctx.templates.delete_templates(patterns, dry_run=options.dry_run)
        if deleted:
            console.print(f"[green]✔[/green] {pluralize(deleted, 'output')} deleted")
        else:
            console.print("[dim]No outputs deleted[/dim]")
        fail_on_errors(run_ctx)

    run_command(ctx, handler)


def render(ctx: typer.Context, patterns: Optional[list[str]] = PATTERNS_ARGUMENT):
    """Render templates to the terminal without writing outputs."""

    async def handler(run_ctx: RunContext) -> None:
        templates = await run_ctx.templates.find_templates(patterns)
        if not templates:
            console.print("[dim]No templates found[/dim]")
            return

        for template in templates:
            content = await run_ctx.templates.render(template)
            if len(templates) > 1:
                console.print(Rule(escape(template), align="left"))
            console.print(content, markup=False, highlight=False, end="")

    run_command(ctx, handler)
