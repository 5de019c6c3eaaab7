"""
Run context.

Everything a single CLI invocation shares lives here instead of in module
globals: the options, the issues registry, the secrets-manager client, the
memo table and the lazily built services. Tests build one per case.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING, Any

from vaulty.issues.application.collector import IssuesCollector
from vaulty.shared.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from vaulty.config.config_loader import ConfigLoader
    from vaulty.issues.application.fixer import FixExecutor
    from vaulty.secrets.secret_resolver import SecretResolver
    from vaulty.store.store_manager import StoreManager
    from vaulty.templates.template_service import TemplateService
    from vaulty.tokens.token_manager import TokenManager
    from vaulty.vault.client import VaultClient

logger = get_logger(__name__)


@dataclass
class CommandOptions:
    """Global options shared by every command."""

    cwd: Path = field(default_factory=Path.cwd)
    config: Path | None = None
    dry_run: bool = False
    force: bool = False
    log_level: str = "warning"
    tokens: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.cwd = Path(self.cwd).resolve()
        if self.config is not None:
            self.config = Path(self.config)
            if not self.config.is_absolute():
                self.config = (self.cwd / self.config).resolve()


class RunContext:
    """Request-scoped state of one command invocation."""

    def __init__(self, options: CommandOptions | None = None, vault: VaultClient | None = None):
        self.options = options or CommandOptions()
        self.issues = IssuesCollector()
        self._vault = vault
        self._memo: dict[Hashable, asyncio.Future] = {}

    def memoize(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> asyncio.Future:
        """
        Return the in-flight (or settled) task for ``key``, starting it once.

        Awaiting the result from several coroutines shares one execution.
        """
        task = self._memo.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._memo[key] = task
        return task

    def forget(self, key: Hashable) -> None:
        """Drop a memoized result so the next call recomputes it."""
        self._memo.pop(key, None)

    @property
    def vault(self) -> VaultClient:
        if self._vault is None:
            from vaulty.vault.client import VaultClient

            self._vault = VaultClient()
        return self._vault

    @cached_property
    def config(self) -> ConfigLoader:
        from vaulty.config.config_loader import ConfigLoader

        return ConfigLoader(self)

    @cached_property
    def store(self) -> StoreManager:
        from vaulty.store.store_manager import StoreManager

        return StoreManager(self)

    @cached_property
    def tokens(self) -> TokenManager:
        from vaulty.tokens.token_manager import TokenManager

        return TokenManager(self)

    @cached_property
    def secrets(self) -> SecretResolver:
        from vaulty.secrets.secret_resolver import SecretResolver

        return SecretResolver(self)

    @cached_property
    def templates(self) -> TemplateService:
        from vaulty.templates.template_service import TemplateService

        return TemplateService(self)

    @cached_property
    def fixer(self) -> FixExecutor:
        from vaulty.issues.application.fixer import FixExecutor

        return FixExecutor(self)

    async def aclose(self) -> None:
        if self._vault is not None:
            await self._vault.aclose()
