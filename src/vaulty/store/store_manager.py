"""
Store manager.

The store is a YAML file in the home directory holding token values per
project root. Only raw token values are persisted. Every write rewrites the
whole file with mode 0600. Updates within one run are serialized;
concurrent CLI invocations are last-writer-wins.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from vaulty.config.config_loader import format_validation_error
from vaulty.issues.domain.enums import IssueScope, IssueSeverity
from vaulty.issues.domain.fixes import Chmod, ResetStore
from vaulty.shared.infrastructure.config import settings
from vaulty.shared.infrastructure.logging import get_logger
from vaulty.shared.utils.path_utils import get_file_mode
from vaulty.store.models import Store, StoreData, StoreProject

if TYPE_CHECKING:
    from vaulty.context import RunContext

logger = get_logger(__name__)

_STORE_KEY = ("store",)


class StoreManager:
    """Reads and writes the store for one run."""

    def __init__(self, ctx: RunContext):
        self.ctx = ctx
        self._lock = asyncio.Lock()

    @property
    def source(self) -> Path:
        return Path.home() / settings.store_filename

    @property
    def file_mode(self) -> int:
        return settings.store_file_mode

    async def get_store(self) -> Store:
        """Read the store once per run (concurrent callers share the read)."""
        return await self.ctx.memoize(_STORE_KEY, self._load)

    async def _load(self) -> Store:
        source = self.source
        exists = source.is_file()
        issues = self.ctx.issues.scoped(scope=IssueScope.STORE, source=str(source))

        mode = get_file_mode(source)
        if exists and mode != self.file_mode:
            issues.add(
                message=f"Permissions are not valid ({mode:o} instead of {self.file_mode:o})",
                severity=IssueSeverity.WARN,
                fix=Chmod(path=str(source), mode=self.file_mode),
            )

        raw = self._read(source) if exists else None
        if exists and raw is None:
            issues.add(
                message="Problem reading the store file",
                severity=IssueSeverity.WARN,
                fix=ResetStore(),
            )

        try:
            data = StoreData.model_validate(raw or {})
        except ValidationError as e:
            issues.add(
                message=f"Invalid store file\n{format_validation_error(e)}",
                severity=IssueSeverity.WARN,
                fix=ResetStore(),
            )
            data = StoreData()

        logger.debug("store_loaded", source=str(source), exists=exists, projects=len(data.projects))
        return Store(source=source, exists=exists, data=data)

    @staticmethod
    def _read(source: Path) -> Any:
        try:
            with open(source, encoding="utf-8") as f:
                return yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            logger.warning("store_read_failed", source=str(source), error=str(e))
            return None

    async def write_store(self, data: StoreData) -> None:
        """Rewrite the entire store file with the configured mode."""
        source = self.source
        content = yaml.safe_dump(data.model_dump(), sort_keys=True, default_flow_style=False, width=float("inf"))

        fd = os.open(source, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self.file_mode)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(source, self.file_mode)

        self.ctx.forget(_STORE_KEY)
        logger.info("store_written", source=str(source), projects=len(data.projects))

    async def delete_store(self) -> None:
        """Delete the store file. A missing file is not an error."""
        source = self.source
        if source.exists():
            source.unlink()
            logger.info("store_deleted", source=str(source))
        self.ctx.forget(_STORE_KEY)

    async def reset_store(self) -> None:
        """Delete the store and recreate it empty."""
        async with self._lock:
            await self.delete_store()
            await self.write_store(StoreData())

    async def set_permissions(self, path: Path | None = None, mode: int | None = None) -> None:
        target = path or self.source
        async with self._lock:
            os.chmod(target, self.file_mode if mode is None else mode)
        logger.info("store_permissions_set", source=str(target))

    async def _project_key(self, project_root: Path | str | None = None) -> str:
        if project_root is None:
            config = await self.ctx.config.get_config()
            project_root = config.project_root
        return str(project_root)

    async def get_project(self, project_root: Path | str | None = None) -> StoreProject | None:
        """Return the stored entry of a project (the current one by default)."""
        store = await self.get_store()
        return store.data.projects.get(await self._project_key(project_root))

    async def list_projects(self) -> list[str]:
        store = await self.get_store()
        return sorted(store.data.projects)

    async def remove_project(self, project_root: Path | str | None = None) -> bool:
        """Remove a project from the store. Returns False when it was not stored."""
        async with self._lock:
            store = await self.get_store()
            key = await self._project_key(project_root)
            if key not in store.data.projects:
                return False

            projects = {name: project for name, project in store.data.projects.items() if name != key}
            await self.write_store(StoreData(projects=projects))
            return True

    async def add_tokens(self, tokens: dict[str, str]) -> None:
        """Save token values for the current project, overwriting same names."""
        async with self._lock:
            store = await self.get_store()
            key = await self._project_key()
            project = store.data.projects.get(key) or StoreProject()

            projects = dict(store.data.projects)
            projects[key] = StoreProject(tokens={**project.tokens, **tokens})
            await self.write_store(StoreData(projects=projects))

    async def remove_tokens(self, names: list[str]) -> None:
        """Remove token values of the current project."""
        async with self._lock:
            store = await self.get_store()
            key = await self._project_key()
            project = store.data.projects.get(key) or StoreProject()

            projects = dict(store.data.projects)
            projects[key] = StoreProject(tokens={k: v for k, v in project.tokens.items() if k not in names})
            await self.write_store(StoreData(projects=projects))
