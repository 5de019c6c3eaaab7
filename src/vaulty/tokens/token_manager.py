"""
Token manager.

Token values come from the store (per project) and from ``--token`` options;
options win. A token is only usable when every secret referencing it agrees
on the server address and the server reports it as not expired. The expiry
check runs before any secret is fetched with the token.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from vaulty.issues.domain.enums import IssueScope, IssueSeverity
from vaulty.issues.domain.fixes import DeleteToken
from vaulty.shared.infrastructure.logging import get_logger
from vaulty.shared.utils.async_utils import gather_all
from vaulty.tokens.models import Token
from vaulty.vault.models import TokenRenewal

if TYPE_CHECKING:
    from vaulty.context import RunContext

logger = get_logger(__name__)


class TokenManager:
    """Resolves, renews and stores tokens for one run."""

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    async def _known_tokens(self) -> tuple[dict[str, str], dict[str, str]]:
        project = await self.ctx.store.get_project()
        stored = dict(project.tokens) if project else {}
        return stored, dict(self.ctx.options.tokens)

    async def list_names(self) -> list[str]:
        """Names of every token of the project, stored ones first."""
        stored, overrides = await self._known_tokens()
        return list(dict.fromkeys([*stored, *overrides]))

    async def get_token(self, name: str) -> Token:
        """Resolve a token once per run."""
        return await self.ctx.memoize(("token", name), lambda: self._resolve(name))

    async def _resolve(self, name: str) -> Token:
        config = await self.ctx.config.get_config()
        stored, overrides = await self._known_tokens()
        issues = self.ctx.issues.scoped(scope=IssueScope.TOKEN, source=name)

        value = {**stored, **overrides}.get(name) or ""
        if not value:
            raise issues.add(message="Token not found").error()

        from_store = not overrides.get(name)
        secrets = config.secrets_using_token(name)

        if not secrets:
            issues.add(message="Token is not used", severity=IssueSeverity.WARN, fix=DeleteToken(name=name))
            return Token(key=name, value=value, from_store=from_store)

        addresses = list(dict.fromkeys(secret.address for secret in secrets.values()))
        if len(addresses) > 1:
            raise issues.add(message="Token have inconsistent addresses\n- " + "\n- ".join(addresses)).error()

        address = addresses[0]
        metadata = await self.ctx.vault.lookup_token(address, value, issues)
        token = Token(key=name, value=value, address=address, metadata=metadata, from_store=from_store)

        if token.is_expired:
            logger.info("token_expired", token_name=name, expire_time=metadata.expire_time)
            raise issues.add(message="Token has expired").error()

        logger.debug("token_resolved", token_name=name, address=address, from_store=from_store)
        return token

    async def get_tokens(self, names: list[str] | None = None) -> list[Token]:
        """Resolve every known token, or only ``names``, concurrently."""
        known = await self.list_names()
        selected = [name for name in known if name in names] if names else known
        return await gather_all(self.get_token(name) for name in selected)

    async def renew_token(self, name: str) -> TokenRenewal | None:
        """
        Renew one token.

        Tokens without a renewable lease are reported and skipped; ``None``
        is returned for them.
        """
        token = await self.get_token(name)
        issues = self.ctx.issues.scoped(scope=IssueScope.TOKEN, source=name)

        if not token.is_renewable:
            issues.add(message="Token is not renewable", severity=IssueSeverity.WARN)
            return None

        renewal = await self.ctx.vault.renew_token(token.address, token.value, issues)
        logger.info("token_renewed", token_name=name, lease_duration=renewal.lease_duration if renewal else None)
        return renewal

    async def renew_tokens(self, names: list[str] | None = None) -> dict[str, TokenRenewal]:
        """Renew every renewable token. Partial success is the normal outcome."""
        tokens = await self.get_tokens(names)
        renewals = await asyncio.gather(*(self.renew_token(token.key) for token in tokens))
        return {token.key: renewal for token, renewal in zip(tokens, renewals) if renewal is not None}

    async def add_tokens_to_store(self, tokens: dict[str, str]) -> None:
        await self.ctx.store.add_tokens(tokens)
        for name in tokens:
            self.ctx.forget(("token", name))
        logger.info("tokens_saved", tokens=sorted(tokens))

    async def remove_tokens_from_store(self, names: list[str]) -> None:
        await self.ctx.store.remove_tokens(names)
        for name in names:
            self.ctx.forget(("token", name))
        logger.info("tokens_removed", tokens=sorted(names))
