"""
Secret resolver.

A secret name from the configuration maps to an address, an optional
namespace, a path and a token name. Names are restricted to letters and
digits because templates address them as ``secrets.<name>``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from vaulty.issues.domain.enums import IssueScope
from vaulty.secrets.local_cache import read_local_secrets
from vaulty.secrets.models import Secret
from vaulty.shared.infrastructure.logging import get_logger
from vaulty.shared.utils.async_utils import gather_all

if TYPE_CHECKING:
    from vaulty.context import RunContext

logger = get_logger(__name__)

SECRET_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")

INVALID_NAME_MESSAGE = (
    "Invalid secret name. Please ensure the secret name contains only letters and numbers, "
    "and does not include any spaces."
)


class SecretResolver:
    """Fetches configured secrets for one run."""

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    async def get_secret(self, name: str) -> Secret:
        return await self.ctx.memoize(("secret", name), lambda: self._resolve(name))

    async def _resolve(self, name: str) -> Secret:
        config = await self.ctx.config.get_config()
        issues = self.ctx.issues.scoped(scope=IssueScope.SECRET, source=name)

        secret_config = config.secrets.get(name)
        if secret_config is None:
            raise issues.add(message="Secret not found").error()

        if not SECRET_NAME_PATTERN.match(name):
            raise issues.add(message=INVALID_NAME_MESSAGE).error()

        token = await self.ctx.tokens.get_token(secret_config.token)

        vault_secret = await self.ctx.vault.fetch_secret(
            secret_config.address,
            secret_config.path,
            token.value,
            issues,
            namespace=secret_config.namespace,
        )

        if vault_secret is None or vault_secret.data is None:
            raise issues.add(message="Vault returned no data").error()

        if vault_secret.metadata.destroyed:
            raise issues.add(message="Secret has been destroyed").error()

        logger.debug("secret_resolved", secret=name, version=vault_secret.metadata.version)
        return Secret(
            key=name,
            address=secret_config.address,
            namespace=secret_config.namespace,
            path=secret_config.path,
            token=token,
            metadata=vault_secret.metadata,
            data=vault_secret.data,
        )

    async def get_secrets(self, names: list[str] | None = None) -> list[Secret]:
        """
        Resolve every configured secret (or ``names``) concurrently.

        All resolutions run to completion so each one reports its own issues;
        the first failure is raised afterwards.
        """
        if not names:
            config = await self.ctx.config.get_config()
            names = list(config.secrets)

        return await gather_all(self.get_secret(name) for name in names)

    async def get_local_secrets(self) -> dict[str, str]:
        config = await self.ctx.config.get_config()
        return read_local_secrets(config.project_root)
