"""
Issue domain models.

An issue's ``id`` is the content hash of its scope, severity, message and
source. The attached fix is excluded from the hash, so the same problem
reported twice collapses to one entry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from vaulty.issues.domain.enums import IssueScope, IssueSeverity
from vaulty.issues.domain.fixes import Fix
from vaulty.shared.utils.hasher import ContentHasher


@dataclass(frozen=True)
class Issue:
    """A single detected problem."""

    scope: IssueScope
    severity: IssueSeverity
    message: str
    source: str | None = None
    fix: Fix | None = field(default=None, compare=False)

    @property
    def id(self) -> str:
        return ContentHasher.calculate_hash(self.identity())

    def identity(self) -> dict[str, Any]:
        """Serializable fields the id is derived from."""
        return {
            "scope": self.scope.value,
            "severity": self.severity.value,
            "message": self.message,
            "source": self.source,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            **self.identity(),
            "fix": self.fix.describe() if self.fix else None,
        }


@dataclass(frozen=True)
class IssuesCounts:
    """Totals derived from a list of issues."""

    total: int = 0
    errors: int = 0
    warnings: int = 0
    fixes: int = 0

    @classmethod
    def from_issues(cls, issues: list[Issue]) -> IssuesCounts:
        return cls(
            total=len(issues),
            errors=sum(1 for i in issues if i.severity is IssueSeverity.ERROR),
            warnings=sum(1 for i in issues if i.severity is IssueSeverity.WARN),
            fixes=sum(1 for i in issues if i.fix is not None),
        )


@dataclass(frozen=True)
class IssuesCollection:
    """Issues plus their counts. Counts are always computed, never stored apart."""

    issues: list[Issue] = field(default_factory=list)

    @property
    def counts(self) -> IssuesCounts:
        return IssuesCounts.from_issues(self.issues)

    def sorted(self) -> list[Issue]:
        """Errors first, then by scope, message and source."""
        scope_order = list(IssueScope)
        return sorted(
            self.issues,
            key=lambda i: (i.severity.rank, scope_order.index(i.scope), i.message, i.source or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        counts = self.counts
        return {
            "issues": [issue.to_dict() for issue in self.sorted()],
            "counts": {
                "total": counts.total,
                "errors": counts.errors,
                "warnings": counts.warnings,
                "fixes": counts.fixes,
            },
        }
