"""
Store commands.

- vaulty store show: Show the store content
- vaulty store source: Print the store file path
- vaulty store delete: Delete the store file
- vaulty store reset: Delete the store file and recreate it empty
"""

from __future__ import annotations

import typer
from rich.markup import escape

from vaulty.cli.commands.helpers.runner import confirm, console, get_options, run_command
from vaulty.context import RunContext

app = typer.Typer(name="store", help="Manage the local token store", no_args_is_help=True)


@app.command("show")
def show(ctx: typer.Context):
    """Show the store content."""

    async def handler(run_ctx: RunContext) -> None:
        store = await run_ctx.store.get_store()
        if not store.exists or not store.data.projects:
            console.print("[dim]The store is empty[/dim]")
            return
        console.print_json(data=store.data.model_dump(mode="json"))

    run_command(ctx, handler)


@app.command("source")
def source(ctx: typer.Context):
    """Print the store file path."""

    async def handler(run_ctx: RunContext) -> None:
        console.print(escape(str(run_ctx.store.source)), highlight=False)

    run_command(ctx, handler)


@app.command("delete")
def delete(ctx: typer.Context):
    """Delete the store file and every token it holds."""
    options = get_options(ctx)

    async def handler(run_ctx: RunContext) -> None:
        if not run_ctx.store.source.exists():
            console.print("[dim]The store does not exist[/dim]")
            return
        console.print(f"[bold]You are about to delete the store[/bold] [cyan]{escape(str(run_ctx.store.source))}[/cyan]")
        if not confirm("Every saved token of every project will be lost. Continue?", options):
            raise typer.Abort()
        await run_ctx.store.delete_store()
        console.print("[green]✔[/green] Store deleted")

    run_command(ctx, handler)


@app.command("reset")
def reset(ctx: typer.Context):
    """Delete the store file and recreate it empty."""
    options = get_options(ctx)

    async def handler(run_ctx: RunContext) -> None:
        console.print(f"[bold]You are about to reset the store[/bold] [cyan]{escape(str(run_ctx.store.source))}[/cyan]")
        if not confirm("Every saved token of every project will be lost. Continue?", options):
            raise typer.Abort()
        await run_ctx.store.reset_store()
        console.print("[green]✔[/green] Store reset")

    run_command(ctx, handler)
