"""
Audit orchestrator.

Runs every service of a project side by side so each one reports what it
can detect, then optionally applies the fixes attached to the issues.
A service raising does not stop the others.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from vaulty.issues.application.collector import IssuesCollector
from vaulty.issues.application.fixer import FixReport
from vaulty.issues.domain.fixes import is_destructive
from vaulty.issues.domain.models import Issue
from vaulty.shared.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from vaulty.context import RunContext

logger = get_logger(__name__)


def _audit_steps(ctx: RunContext) -> dict[str, Callable[[], Awaitable[object]]]:
    return {
        "config": ctx.config.get_config,
        "store": ctx.store.get_store,
        "tokens": ctx.tokens.get_tokens,
        "project": ctx.store.get_project,
        "secrets": ctx.secrets.get_secrets,
        "templates": ctx.templates.get_templates,
    }


async def run_audit(ctx: RunContext) -> IssuesCollector:
    """
    Run every service and return the shared collector.

    Issues raised by a collector are already recorded; anything else is
    recorded as an unknown error.
    """

    async def run_step(name: str, step: Callable[[], Awaitable[object]]) -> None:
        try:
            await step()
        except Exception as e:
            logger.debug("audit_step_failed", step=name, error=str(e) or type(e).__name__)
            ctx.issues.add_error(e)

    steps = _audit_steps(ctx)
    await asyncio.gather(*(run_step(name, step) for name, step in steps.items()))

    counts = ctx.issues.counts()
    logger.info("audit_complete", issues=counts.total, errors=counts.errors, fixes=counts.fixes)
    return ctx.issues


async def run_fixes(
    ctx: RunContext,
    dry_run: bool = False,
    confirm_destructive: Callable[[list[Issue]], bool] | None = None,
) -> FixReport:
    """
    Audit the project, then apply every available fix.

    ``confirm_destructive`` is asked once with the issues whose fix is
    destructive; when it returns False those fixes are skipped. Without it
    destructive fixes run.
    """
    collector = await run_audit(ctx)
    issues = collector.get().issues

    allow_destructive = True
    destructive = [issue for issue in issues if is_destructive(issue.fix)]
    if destructive and confirm_destructive is not None and not dry_run:
        allow_destructive = confirm_destructive(destructive)

    return await ctx.fixer.run(issues, dry_run=dry_run, allow_destructive=allow_destructive)
