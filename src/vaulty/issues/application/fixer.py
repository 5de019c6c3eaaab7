"""
Fix executor.

Interprets the fix attached to an issue. Fixes of one batch run concurrently
and independently: a failing fix is recorded and the others still run.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from vaulty.issues.domain.fixes import Chmod, DeleteToken, Fix, RenderTemplate, ResetStore, is_destructive
from vaulty.issues.domain.models import Issue
from vaulty.shared.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from vaulty.context import RunContext

logger = get_logger(__name__)


@dataclass
class FixReport:
    """Result of a fix pass."""

    applied: list[Issue] = field(default_factory=list)
    skipped: list[Issue] = field(default_factory=list)
    failed: list[tuple[Issue, str]] = field(default_factory=list)
    dry_run: bool = False

    @property
    def summary(self) -> str:
        return f"{len(self.applied)} applied / {len(self.skipped)} skipped / {len(self.failed)} failed"


class FixExecutor:
    """Dispatches fixes to the services of a run."""

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    async def apply(self, fix: Fix) -> None:
        if isinstance(fix, RenderTemplate):
            await self.ctx.templates.write_template_output(fix.template)
        elif isinstance(fix, DeleteToken):
            await self.ctx.tokens.remove_tokens_from_store([fix.name])
        elif isinstance(fix, ResetStore):
            await self.ctx.store.reset_store()
        elif isinstance(fix, Chmod):
            await self.ctx.store.set_permissions(Path(fix.path), fix.mode)
        else:
            raise TypeError(f"Unknown fix: {fix!r}")

    async def run(
        self,
        issues: list[Issue],
        dry_run: bool = False,
        allow_destructive: bool = True,
    ) -> FixReport:
        """
        Apply the fix of every issue that has one.

        Args:
            issues: Issues to fix; those without a fix are ignored
            dry_run: List the fixes without applying them
            allow_destructive: When False, destructive fixes are skipped

        Returns:
            FixReport with applied, skipped and failed issues
        """
        report = FixReport(dry_run=dry_run)
        fixable: list[Issue] = []
        for issue in issues:
            if issue.fix is not None and all(issue.fix != other.fix for other in fixable):
                fixable.append(issue)

        if not fixable:
            logger.info("fix_nothing_to_fix", total=len(issues))
            return report

        async def run_one(issue: Issue) -> None:
            if not allow_destructive and is_destructive(issue.fix):
                logger.info("fix_skipped", fix=issue.fix.describe(), reason="destructive")
                report.skipped.append(issue)
                return
            if dry_run:
                logger.info("fix_dry_run", fix=issue.fix.describe())
                report.applied.append(issue)
                return
            try:
                await self.apply(issue.fix)
            except Exception as e:
                logger.warning("fix_failed", fix=issue.fix.describe(), error=str(e))
                report.failed.append((issue, str(e) or type(e).__name__))
                return
            logger.debug("fix_applied", fix=issue.fix.describe())
            report.applied.append(issue)

        await asyncio.gather(*(run_one(issue) for issue in fixable))

        logger.info(
            "fix_complete",
            applied=len(report.applied),
            skipped=len(report.skipped),
            failed=len(report.failed),
            dry_run=dry_run,
        )
        return report
