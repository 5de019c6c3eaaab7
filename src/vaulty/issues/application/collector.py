"""
Issues collector.

One registry is shared by every service of a run. Services obtain a scoped
view (``collector.scoped(scope=..., source=...)``) whose ``add`` fills in
those defaults. Fatal problems are raised with ``raise view.add(...).error()``
so the caller unwinds while the issue stays recorded.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from vaulty.issues.domain.enums import IssueScope, IssueSeverity
from vaulty.issues.domain.fixes import Fix
from vaulty.issues.domain.models import Issue, IssuesCollection, IssuesCounts
from vaulty.shared.domain.exceptions import VaultyError
from vaulty.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"


class IssuesCollectorError(VaultyError):
    """Raised to stop a command. Carries the collection at the time of raising."""

    def __init__(self, collection: IssuesCollection):
        super().__init__("Issues encountered", context={"counts": collection.counts})
        self.collection = collection


class _Registry:
    """Append-only, deduplicated issue list. ``add`` is atomic per call."""

    def __init__(self) -> None:
        self._issues: list[Issue] = []
        self._ids: set[str] = set()
        self._lock = threading.Lock()

    def add(self, issue: Issue) -> bool:
        issue_id = issue.id
        with self._lock:
            if issue_id in self._ids:
                return False
            self._ids.add(issue_id)
            self._issues.append(issue)
            return True

    def snapshot(self) -> list[Issue]:
        with self._lock:
            return list(self._issues)


def _as_set(value) -> set:
    if value is None:
        return set()
    if isinstance(value, (str, IssueScope, IssueSeverity)):
        return {value}
    return set(value)


class IssuesCollector:
    """
    Registry view with default issue fields.

    Never fails itself: it is where every other component's failures end up.
    """

    def __init__(
        self,
        scope: IssueScope = IssueScope.UNKNOWN,
        source: str | None = None,
        registry: _Registry | None = None,
    ):
        self.scope = IssueScope(scope)
        self.source = source
        self._registry = registry or _Registry()

    def scoped(self, scope: IssueScope | str | None = None, source: str | None = None) -> IssuesCollector:
        """Return a view sharing this registry with other default fields."""
        return IssuesCollector(
            scope=IssueScope(scope) if scope is not None else self.scope,
            source=source if source is not None else self.source,
            registry=self._registry,
        )

    def gen(
        self,
        message: str = UNKNOWN_ERROR_MESSAGE,
        severity: IssueSeverity | str = IssueSeverity.ERROR,
        scope: IssueScope | str | None = None,
        source: str | None = None,
        fix: Fix | None = None,
    ) -> Issue:
        """Build an issue with this view's defaults without registering it."""
        return Issue(
            scope=IssueScope(scope) if scope is not None else self.scope,
            severity=IssueSeverity(severity),
            message=message,
            source=source if source is not None else self.source,
            fix=fix,
        )

    def add(
        self,
        message: str = UNKNOWN_ERROR_MESSAGE,
        severity: IssueSeverity | str = IssueSeverity.ERROR,
        scope: IssueScope | str | None = None,
        source: str | None = None,
        fix: Fix | None = None,
    ) -> IssuesCollector:
        """Register an issue. Adding an equal issue twice keeps the first one."""
        issue = self.gen(message=message, severity=severity, scope=scope, source=source, fix=fix)
        if self._registry.add(issue):
            logger.debug(
                "issue_added",
                scope=issue.scope.value,
                severity=issue.severity.value,
                issue_message=issue.message,
                source=issue.source,
                fixable=issue.fix is not None,
            )
        return self

    def add_error(self, error: BaseException | object) -> IssuesCollector:
        """
        Register an unexpected error as an ``error`` issue.

        Errors raised by a collector are already recorded and are skipped.
        """
        if isinstance(error, IssuesCollectorError):
            return self

        message = str(error) if isinstance(error, BaseException) else repr(error)
        return self.add(message=message or type(error).__name__, severity=IssueSeverity.ERROR)

    def _filter(self, scope=None, severity=None) -> list[Issue]:
        scopes = {IssueScope(s) for s in _as_set(scope)}
        severities = {IssueSeverity(s) for s in _as_set(severity)}
        return [
            issue
            for issue in self._registry.snapshot()
            if (not scopes or issue.scope in scopes) and (not severities or issue.severity in severities)
        ]

    def get(
        self,
        scope: IssueScope | str | Iterable | None = None,
        severity: IssueSeverity | str | Iterable | None = None,
    ) -> IssuesCollection:
        """Return the issues collection, optionally filtered by scope(s) and severity(ies)."""
        return IssuesCollection(issues=self._filter(scope, severity))

    def counts(
        self,
        scope: IssueScope | str | Iterable | None = None,
        severity: IssueSeverity | str | Iterable | None = None,
    ) -> IssuesCounts:
        """Return total, errors, warnings and fixes of the filtered issues."""
        return IssuesCounts.from_issues(self._filter(scope, severity))

    def error(
        self,
        scope: IssueScope | str | Iterable | None = None,
        severity: IssueSeverity | str | Iterable | None = None,
    ) -> IssuesCollectorError:
        """Return an exception wrapping the current collection, ready to raise."""
        return IssuesCollectorError(self.get(scope, severity))
