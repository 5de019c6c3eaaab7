"""Secrets manager response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SecretMetadata(BaseModel):
    """Version metadata of a KV v2 secret."""

    model_config = ConfigDict(extra="allow")

    created_time: str | None = None
    custom_metadata: Any = None
    deletion_time: str | None = None
    destroyed: bool = False
    version: int | None = None


class VaultSecret(BaseModel):
    """The ``data`` block of a KV v2 read."""

    model_config = ConfigDict(extra="allow")

    data: dict[str, Any] | None = None
    metadata: SecretMetadata = Field(default_factory=SecretMetadata)


class TokenMetadata(BaseModel):
    """Result of a token self lookup, with the lease id merged in."""

    model_config = ConfigDict(extra="allow")

    lease_id: str = ""
    renewable: bool = False
    expire_time: str | None = None
    ttl: int | None = None
    display_name: str | None = None
    policies: list[str] = Field(default_factory=list)


class TokenRenewal(BaseModel):
    """Response of a token self renewal."""

    model_config = ConfigDict(extra="allow")

    request_id: str | None = None
    lease_id: str = ""
    renewable: bool = False
    lease_duration: int = 0
    auth: dict[str, Any] | None = None
    warnings: list[str] | None = None
