"""Store models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class StoreProject(BaseModel):
    """Tokens saved for one project."""

    model_config = ConfigDict(extra="forbid")

    tokens: dict[str, str] = Field(default_factory=dict, description="The project tokens.")


class StoreData(BaseModel):
    """Contents of the store file, keyed by absolute project root."""

    model_config = ConfigDict(extra="forbid")

    projects: dict[str, StoreProject] = Field(default_factory=dict, description="The store projects.")


@dataclass
class Store:
    """The store file and what was read from it."""

    source: Path
    exists: bool
    data: StoreData
