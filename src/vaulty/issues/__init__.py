"""
Issues module - issue collection, fixes and reporting.

Every service of a run reports into one IssuesCollector; fatal problems are
raised as IssuesCollectorError, self-healing ones carry a Fix.
"""

from vaulty.issues.application.collector import IssuesCollector, IssuesCollectorError
from vaulty.issues.domain.enums import IssueScope, IssueSeverity
from vaulty.issues.domain.fixes import Chmod, DeleteToken, Fix, RenderTemplate, ResetStore
from vaulty.issues.domain.models import Issue, IssuesCollection, IssuesCounts

__all__ = [
    "Issue",
    "IssuesCollection",
    "IssuesCounts",
    "IssuesCollector",
    "IssuesCollectorError",
    "IssueScope",
    "IssueSeverity",
    "Fix",
    "RenderTemplate",
    "DeleteToken",
    "ResetStore",
    "Chmod",
]
