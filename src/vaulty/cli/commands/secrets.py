"""
Secret commands.

- vaulty secrets show [NAMES]: Show the values of secrets
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.markup import escape
from rich.rule import Rule

from vaulty.cli.commands.helpers.runner import console, run_command
from vaulty.context import RunContext

app = typer.Typer(name="secrets", help="Inspect the secrets of the project", no_args_is_help=True)


@app.command("show")
def show(
    ctx: typer.Context,
    names: Optional[list[str]] = typer.Argument(None, help="Secret names (all secrets when omitted)"),
):
    """Show the values of secrets."""

    async def handler(run_ctx: RunContext) -> None:
        secrets = await run_ctx.secrets.get_secrets(names)
        if not secrets:
            console.print("[dim]No secrets found[/dim]")
            return

        for secret in secrets:
            console.print(Rule(f"[bold]{escape(secret.key)}[/bold]", align="left"))
            console.print_json(data=secret.data, default=str)

    run_command(ctx, handler)
