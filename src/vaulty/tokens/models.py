"""Token model and expiry parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone

from vaulty.vault.models import TokenMetadata

_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_expire_time(value: str | None) -> datetime | None:
    """
    Parse an RFC 3339 timestamp as returned by the token lookup.

    The server sends nanosecond fractions, which ``datetime`` cannot hold;
    they are truncated to microseconds. Naive values are taken as UTC.

    Examples:
        >>> parse_expire_time("2024-01-02T03:04:05.123456789Z").isoformat()
        '2024-01-02T03:04:05.123456+00:00'
    """
    if not value:
        return None

    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@dataclass
class Token:
    """A token value resolved for the current project."""

    key: str
    value: str
    address: str = ""
    metadata: TokenMetadata | None = None
    from_store: bool = True

    @property
    def expire_at(self) -> datetime | None:
        return parse_expire_time(self.metadata.expire_time) if self.metadata else None

    @property
    def is_expired(self) -> bool:
        expire_at = self.expire_at
        return expire_at is not None and expire_at < datetime.now(timezone.utc)

    @property
    def is_renewable(self) -> bool:
        return bool(self.metadata and self.metadata.renewable and self.metadata.lease_id)

    def to_display(self, show_value: bool = False) -> dict:
        return {
            "key": self.key,
            "value": self.value if show_value else mask(self.value),
            "address": self.address,
            "expire_time": self.metadata.expire_time if self.metadata else None,
            "renewable": self.metadata.renewable if self.metadata else None,
            "from_store": self.from_store,
        }


def mask(value: str, visible: int = 4) -> str:
    """
    Hide all but the last characters of a credential.

    Examples:
        >>> mask("hvs.abcdefgh")
        '********efgh'
    """
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
