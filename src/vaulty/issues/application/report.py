"""
Issue report rendering with rich.

Rows are sorted errors first, then by scope. The counts line and the fix
hint are derived from the same filtered collection.
"""

from rich.console import Console
from rich.table import Table

from vaulty.issues.application.collector import IssuesCollector
from vaulty.issues.domain.enums import IssueScope, IssueSeverity
from vaulty.issues.domain.models import IssuesCollection, IssuesCounts

FIX_COMMAND = "vaulty audit fix"


def pluralize(count: int, word: str, plural: str | None = None) -> str:
    return f"{count} {word if count == 1 else (plural or word + 's')}"


def format_counts(counts: IssuesCounts) -> str:
    """
    Format the summary line.

    Examples:
        >>> format_counts(IssuesCounts(total=3, errors=1, warnings=2, fixes=2))
        '✖ 3 issues (1 error, 2 warnings)'
    """
    icon = "✖" if counts.errors else "⚠"
    return (
        f"{icon} {pluralize(counts.total, 'issue')} "
        f"({pluralize(counts.errors, 'error')}, {pluralize(counts.warnings, 'warning')})"
    )


def build_table(collection: IssuesCollection) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column(" ", width=1)
    table.add_column("Scope", style="dim")
    table.add_column("Severity", width=8)
    table.add_column("Message", max_width=60, overflow="fold")
    table.add_column("Source", style="dim", max_width=50, overflow="fold")

    for issue in collection.sorted():
        color = "red" if issue.severity is IssueSeverity.ERROR else "yellow"
        table.add_row(
            "[dim]⚒[/dim]" if issue.fix else " ",
            issue.scope.value,
            f"[{color}]{issue.severity.value}[/{color}]",
            issue.message,
            issue.source or "n/a",
        )
    return table


def print_issues(
    collector: IssuesCollector,
    console: Console,
    scope=None,
    severity=None,
) -> IssuesCounts:
    """Print the (filtered) issues of ``collector`` and return their counts."""
    collection = collector.get(scope=scope, severity=severity)
    counts = collection.counts
    style = "bold red" if counts.errors else "bold yellow"

    if counts.total == 0:
        console.print("[dim]No issues found[/dim]")
        return counts

    console.print(f"[{style}]The following issues were found.[/{style}]\n")
    console.print(build_table(collection))
    console.print(f"\n[{style}]{format_counts(counts)}[/{style}]")

    if counts.fixes:
        console.print(
            f"[{style}]⚒ {pluralize(counts.fixes, 'fix', 'fixes')} available with \"[italic]{FIX_COMMAND}[/italic]\"[/{style}]"
        )

    unknown = collector.counts(scope=IssueScope.UNKNOWN)
    if unknown.total:
        console.print(
            f"\n[{style}]{pluralize(unknown.total, 'unknown issue')} found. "
            f"Please report them with the output of --log-level debug.[/{style}]"
        )

    return counts
