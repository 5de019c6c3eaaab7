"""Resolved secret model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from vaulty.tokens.models import Token
from vaulty.vault.models import SecretMetadata


@dataclass
class Secret:
    """A secret read from the secrets manager with the token that read it."""

    key: str
    address: str
    path: str
    token: Token
    namespace: str | None = None
    metadata: SecretMetadata = field(default_factory=SecretMetadata)
    data: dict[str, Any] = field(default_factory=dict)
