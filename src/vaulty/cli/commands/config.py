"""
Config commands.

- vaulty config show: Show the configuration of the project
- vaulty config source: Print where the configuration comes from
- vaulty config default: Show the default configuration
"""

from __future__ import annotations

import typer
from rich.markup import escape

from vaulty.cli.commands.helpers.runner import console, fail_on_errors, run_command
from vaulty.context import RunContext

app = typer.Typer(name="config", help="Inspect the project configuration", no_args_is_help=True)


@app.command("show")
def show(ctx: typer.Context):
    """Show the configuration of the project."""

    async def handler(run_ctx: RunContext) -> None:
        config = await run_ctx.config.get_config()
        console.print_json(data=config.to_display())
        fail_on_errors(run_ctx)

    run_command(ctx, handler)


@app.command("source")
def source(ctx: typer.Context):
    """Print the configuration file path, or "default" when there is none."""

    async def handler(run_ctx: RunContext) -> None:
        config = await run_ctx.config.get_config()
        console.print(escape(config.source), highlight=False)

    run_command(ctx, handler)


@app.command("default")
def default(ctx: typer.Context):
    """
    Show the default configuration.

    Properties missing from a project configuration take these values.
    """

    async def handler(run_ctx: RunContext) -> None:
        loader = run_ctx.config
        config = loader.get_default_config(loader.find_config_file())
        console.print_json(data=config.to_display())

    run_command(ctx, handler)
