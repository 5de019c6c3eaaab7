"""
Project commands.

- vaulty projects current: Print the current project root
- vaulty projects list: List the projects saved in the store
- vaulty projects delete: Remove the current project from the store
"""

from __future__ import annotations

import typer
from rich.markup import escape

from vaulty.cli.commands.helpers.runner import confirm, console, get_options, run_command
from vaulty.context import RunContext

app = typer.Typer(name="projects", help="Manage the projects saved in the store", no_args_is_help=True)


@app.command("current")
def current(ctx: typer.Context):
    """Print the root of the current project."""

    async def handler(run_ctx: RunContext) -> None:
        config = await run_ctx.config.get_config()
        console.print(escape(str(config.project_root)), highlight=False)

    run_command(ctx, handler)


@app.command("list")
def list_projects(ctx: typer.Context):
    """List the projects saved in the store."""

    async def handler(run_ctx: RunContext) -> None:
        projects = await run_ctx.store.list_projects()
        if not projects:
            console.print("[dim]No projects found[/dim]")
            return
        for project in projects:
            console.print(escape(project), highlight=False)

    run_command(ctx, handler)


@app.command("delete")
def delete(ctx: typer.Context):
    """Remove the current project from the store. No file on disk is deleted."""
    options = get_options(ctx)

    async def handler(run_ctx: RunContext) -> None:
        config = await run_ctx.config.get_config()
        if await run_ctx.store.get_project() is None:
            console.print("[dim]The project is not stored[/dim]")
            return

        console.print("[bold]You are about to delete the following project from the store.[/bold]")
        console.print(f"[cyan]{escape(str(config.project_root))}[/cyan]")
        if not confirm("Continue?", options):
            raise typer.Abort()

        await run_ctx.store.remove_project()
        console.print("[green]✔[/green] Project deleted")

    run_command(ctx, handler)
