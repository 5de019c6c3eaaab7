"""
Configuration models.

``ConfigInput`` is what a project config file may contain; unknown keys are
rejected. ``Config`` is the resolved configuration every service reads.
"""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vaulty.shared.infrastructure.config import settings

DEFAULT_IGNORE_FILES = ["**/.gitignore", "**/.vaultyignore"]

_EXTENSION_RE = re.compile(r"^\.[a-z0-9\-_]+$")


def normalize_extension(value: str) -> str:
    """
    Normalize a template extension.

    Examples:
        >>> normalize_extension(" Secret ")
        '.secret'
    """
    value = re.sub(r"\s", "", value)
    value = value if value.startswith(".") else f".{value}"
    value = value.lower()
    if not _EXTENSION_RE.match(value):
        raise ValueError("The extension name must be a valid file extension.")
    return value


def normalize_address(value: str) -> str:
    """Validate an http(s) URL and return it without trailing slash."""
    parts = urlsplit(value.strip())
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        raise ValueError("Invalid URL format")
    return urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path.rstrip("/"), parts.query, parts.fragment)
    )


class SecretConfig(BaseModel):
    """Where a secret lives and which token name reads it."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    address: str = Field(description="The Vault address.")
    namespace: str | None = Field(default=None, description="The namespace in the Vault where the secret is stored")
    path: str = Field(description="The secret path.")
    token: str = Field(description="The token key to use.")

    @field_validator("address")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        return normalize_address(value)


class ConfigInput(BaseModel):
    """Contents of a project configuration file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    extension: str | None = Field(default=None, description="The extension of the template files.")
    gitignore: bool | None = Field(default=None, description="Whether to respect .gitignore files.")
    ignore_files: list[str] | None = Field(
        default=None,
        alias="ignoreFiles",
        description="Glob patterns selecting ignore files.",
    )
    secrets: dict[str, SecretConfig] | None = Field(default=None, description="The secrets configuration.")

    @field_validator("extension")
    @classmethod
    def _validate_extension(cls, value: str | None) -> str | None:
        return None if value is None else normalize_extension(value)


class Config(BaseModel):
    """Resolved configuration of the current project."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    cwd: Path
    project_root: Path | None = None
    extension: str = Field(default_factory=lambda: settings.default_extension)
    gitignore: bool = True
    ignore_files: list[str] = Field(default_factory=lambda: list(DEFAULT_IGNORE_FILES), alias="ignoreFiles")
    secrets: dict[str, SecretConfig] = Field(default_factory=dict)
    source: str = "default"

    @field_validator("extension")
    @classmethod
    def _validate_extension(cls, value: str) -> str:
        return normalize_extension(value)

    def secrets_using_token(self, token: str) -> dict[str, SecretConfig]:
        return {name: secret for name, secret in self.secrets.items() if secret.token == token}

    def to_display(self) -> dict:
        return {
            "cwd": str(self.cwd),
            "project": str(self.project_root) if self.project_root else "",
            "extension": self.extension,
            "gitignore": self.gitignore,
            "ignoreFiles": self.ignore_files,
            "secrets": {name: secret.model_dump(exclude_none=True) for name, secret in self.secrets.items()},
            "source": self.source,
        }
