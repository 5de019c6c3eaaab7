"""
Audit commands.

- vaulty audit report [--json]: Report every issue of the project
- vaulty audit fix: Apply the fixes of the fixable issues
"""

from __future__ import annotations

import typer

from vaulty.audit.orchestrator import run_audit, run_fixes
from vaulty.cli.commands.helpers.runner import confirm, console, get_options, run_command
from vaulty.context import RunContext
from vaulty.issues.application.report import print_issues
from vaulty.issues.domain.models import Issue

app = typer.Typer(name="audit", help="Audit the project and fix issues", no_args_is_help=True)


@app.command("report")
def report(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print the issues and counts as JSON"),
):
    """Report audit issues."""

    async def handler(run_ctx: RunContext) -> None:
        collector = await run_audit(run_ctx)
        if as_json:
            console.print_json(data=collector.get().to_dict())
        else:
            print_issues(collector, console)

    run_command(ctx, handler)


@app.command("fix")
def fix(ctx: typer.Context):
    """
    Fix all issues that can be resolved.

    The fixable issues are the ones marked with "⚒" in the audit report.
    """
    options = get_options(ctx)

    def confirm_destructive(issues: list[Issue]) -> bool:
        for issue in issues:
            console.print(f"[yellow]- {issue.message.splitlines()[0]}[/yellow] [dim]({issue.fix.describe()})[/dim]")
        return confirm("These fixes delete the saved tokens of every project. Continue?", options)

    async def handler(run_ctx: RunContext) -> None:
        fix_report = await run_fixes(run_ctx, dry_run=options.dry_run, confirm_destructive=confirm_destructive)

        if not (fix_report.applied or fix_report.skipped or fix_report.failed):
            console.print("[dim]Nothing to fix[/dim]")
            return

        verb = "Would apply" if fix_report.dry_run else "Applied"
        for issue in fix_report.applied:
            console.print(f"[green]✔[/green] {verb}: {issue.fix.describe()}")
        for issue in fix_report.skipped:
            console.print(f"[dim]- Skipped: {issue.fix.describe()}[/dim]")
        for issue, error in fix_report.failed:
            console.print(f"[red]✖[/red] Failed: {issue.fix.describe()} [dim]({error})[/dim]")

        console.print(f"\n{fix_report.summary}")
        if fix_report.failed:
            raise typer.Exit(1)

    run_command(ctx, handler)
