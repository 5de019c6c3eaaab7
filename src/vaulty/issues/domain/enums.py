"""Issue enums."""

from enum import Enum


class IssueScope(str, Enum):
    """Subsystem an issue originates from."""

    STORE = "store"
    CONFIG = "config"
    SECRET = "secret"
    TOKEN = "token"
    TEMPLATE = "template"
    REMOTE = "remote"
    UNKNOWN = "unknown"


class IssueSeverity(str, Enum):
    """
    Issue severity.

    WARN issues are self-healing and carry a fix, ERROR issues stop the
    current command.
    """

    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return 0 if self is IssueSeverity.ERROR else 1
