"""
Fix actions attached to issues.

Fixes are plain data interpreted by ``FixExecutor``; they can be compared,
logged and listed in a dry run without executing anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class RenderTemplate:
    """Render ``template`` (relative to the project root) to its output."""

    template: str

    def describe(self) -> str:
        return f"render {self.template}"


@dataclass(frozen=True)
class DeleteToken:
    """Remove token ``name`` from the current project in the store."""

    name: str

    def describe(self) -> str:
        return f"delete token {self.name} from the store"


@dataclass(frozen=True)
class ResetStore:
    """Delete the store file and recreate it empty. Destructive."""

    destructive = True

    def describe(self) -> str:
        return "reset the store"


@dataclass(frozen=True)
class Chmod:
    """Set the permission bits of ``path`` to ``mode``."""

    path: str
    mode: int

    def describe(self) -> str:
        return f"chmod {self.mode:o} {self.path}"


Fix = Union[RenderTemplate, DeleteToken, ResetStore, Chmod]


def is_destructive(fix: Fix | None) -> bool:
    return bool(getattr(fix, "destructive", False))
