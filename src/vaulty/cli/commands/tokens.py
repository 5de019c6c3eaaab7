"""
Token commands.

- vaulty tokens list: List the project's tokens
- vaulty tokens save NAME:VALUE...: Save tokens to the store
- vaulty tokens lookup [NAMES]: Show the lease information of tokens
- vaulty tokens renew [NAMES]: Renew token leases
- vaulty tokens delete [NAMES]: Delete tokens from the store (does not revoke them)
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from vaulty.cli.commands.helpers.runner import confirm, console, get_options, parse_token_pairs, run_command
from vaulty.context import RunContext
from vaulty.issues.application.report import pluralize

app = typer.Typer(name="tokens", help="Manage the tokens of the project", no_args_is_help=True)

NAMES_ARGUMENT = typer.Argument(None, help="Token names (all tokens when omitted)")


@app.command("list")
def list_tokens(
    ctx: typer.Context,
    show_values: bool = typer.Option(False, "--show-values", help="Print token values in clear"),
):
    """List the tokens of the project."""

    async def handler(run_ctx: RunContext) -> None:
        tokens = await run_ctx.tokens.get_tokens()
        if not tokens:
            console.print("[dim]No tokens found[/dim]")
            return

        table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
        table.add_column("Name", style="bold")
        table.add_column("Value")
        table.add_column("Expires")
        table.add_column("Source", style="dim")
        for token in tokens:
            display = token.to_display(show_value=show_values)
            table.add_row(
                escape(token.key),
                f"[green]{escape(display['value'])}[/green]",
                display["expire_time"] or "n/a",
                "Store" if token.from_store else "Option",
            )
        console.print(table)

    run_command(ctx, handler)


@app.command("save")
def save(ctx: typer.Context, tokens: list[str] = typer.Argument(..., help="Tokens as NAME:VALUE")):
    """Save tokens to the store. Existing tokens with the same name are overwritten."""
    pairs = parse_token_pairs(tokens)

    async def handler(run_ctx: RunContext) -> None:
        await run_ctx.tokens.add_tokens_to_store(pairs)
        console.print(f"[green]✔[/green] {pluralize(len(pairs), 'token')} saved")

    run_command(ctx, handler)


@app.command("lookup")
def lookup(ctx: typer.Context, names: Optional[list[str]] = NAMES_ARGUMENT):
    """Show the lease information of tokens."""

    async def handler(run_ctx: RunContext) -> None:
        tokens = await run_ctx.tokens.get_tokens(names)
        if not tokens:
            console.print("[dim]No tokens found[/dim]")
            return

        for token in tokens:
            console.print(Rule(f"[bold]{escape(token.key)}[/bold]", align="left"))
            if token.metadata is None:
                console.print("[dim]No metadata found[/dim]")
                continue
            console.print_json(data=token.metadata.model_dump(mode="json"))

    run_command(ctx, handler)


@app.command("renew")
def renew(ctx: typer.Context, names: Optional[list[str]] = NAMES_ARGUMENT):
    """
    Renew token leases.

    Renewal is skipped for tokens without a lease or not renewable.
    """

    async def handler(run_ctx: RunContext) -> None:
        tokens = await run_ctx.tokens.get_tokens(names)
        skipped = [token.key for token in tokens if not token.is_renewable]

        if skipped:
            console.print(
                "[bold yellow]The following tokens are not renewable and will not be renewed:[/bold yellow]"
            )
            for key in skipped:
                console.print(f"[yellow]- {escape(key)}[/yellow]")

        if len(skipped) == len(tokens):
            console.print("[dim]No tokens to renew[/dim]")
            return

        renewals = await run_ctx.tokens.renew_tokens(names)
        console.print(f"[green]✔[/green] {pluralize(len(renewals), 'token')} renewed")

    run_command(ctx, handler)


@app.command("delete")
def delete(ctx: typer.Context, names: Optional[list[str]] = NAMES_ARGUMENT):
    """Delete tokens from the store. Tokens are not revoked."""
    options = get_options(ctx)

    async def handler(run_ctx: RunContext) -> None:
        known = await run_ctx.tokens.list_names()
        selected = [name for name in known if name in names] if names else known
        if not selected:
            console.print("[dim]No tokens found[/dim]")
            return

        config = await run_ctx.config.get_config()
        console.print(f"[bold]You are about to delete {pluralize(len(selected), 'token')} from the store:[/bold]")
        console.print(f"[cyan]{escape(', '.join(selected))}[/cyan]")
        console.print(f"[bold]From the project[/bold] [cyan]{escape(str(config.project_root))}[/cyan]")
        if not confirm("Continue?", options):
            raise typer.Abort()

        await run_ctx.tokens.remove_tokens_from_store(selected)
        console.print(f"[green]✔[/green] {pluralize(len(selected), 'token')} deleted")

    run_command(ctx, handler)
