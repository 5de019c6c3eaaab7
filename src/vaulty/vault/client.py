"""
Vault HTTP client.

Three endpoints are used: the KV v2 read, token self lookup and token self
renewal, all authenticated with the ``X-Vault-Token`` header. Results are
memoized per client for the same address, namespace, path and token, so a
secret referenced by many templates is fetched once. Every call is bounded
by ``settings.vault_timeout_seconds``.
"""

from __future__ import annotations

import asyncio
import posixpath
from collections.abc import Awaitable, Callable, Hashable
from typing import Any

import httpx

from vaulty.issues.application.collector import IssuesCollector
from vaulty.shared.domain.exceptions import RemoteTimeoutError
from vaulty.shared.infrastructure.config import settings
from vaulty.shared.infrastructure.logging import get_logger
from vaulty.shared.infrastructure.resilience import with_timeout_async
from vaulty.vault.models import TokenMetadata, TokenRenewal, VaultSecret

logger = get_logger(__name__)

TOKEN_HEADER = "X-Vault-Token"


def build_url(address: str, *segments: str) -> str:
    """
    Join API path segments onto the server address.

    Examples:
        >>> build_url("https://vault.example.com", "v1", "team", "data", "app/db")
        'https://vault.example.com/v1/team/data/app/db'
    """
    pathname = posixpath.join("/", *(segment.strip("/") for segment in segments if segment))
    return str(httpx.URL(address).join(pathname))


def _errors_from_response(response: httpx.Response) -> list[str]:
    try:
        body = response.json()
    except ValueError:
        return []
    errors = body.get("errors") if isinstance(body, dict) else None
    return [str(error) for error in errors] if errors else []


class VaultClient:
    """Async client for the secrets manager."""

    def __init__(
        self,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.timeout_seconds = settings.vault_timeout_seconds if timeout_seconds is None else timeout_seconds
        self._transport = transport
        self._headers = headers or {}
        self._client: httpx.AsyncClient | None = None
        self._memo: dict[Hashable, asyncio.Future] = {}

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(transport=self._transport, timeout=self.timeout_seconds)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _memoize(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> asyncio.Future:
        task = self._memo.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._memo[key] = task
        return task

    async def _request(self, method: str, url: str, token: str, issues: IssuesCollector) -> dict[str, Any]:
        """
        Send one request and return the decoded body.

        Transport failures, HTTP errors and bodies carrying ``errors`` are
        registered as one issue and raised.
        """
        errors: list[str] = []
        body: Any = {}

        try:
            response = await with_timeout_async(
                self._get_client().request(method, url, headers={**self._headers, TOKEN_HEADER: token}),
                self.timeout_seconds,
                f"{method} {httpx.URL(url).path}",
            )
            response.raise_for_status()
            body = response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            errors = _errors_from_response(e.response)
            # A missing KV path answers 404 with an empty error list
            if not errors and e.response.status_code != httpx.codes.NOT_FOUND:
                errors = [str(e)]
        except (httpx.HTTPError, RemoteTimeoutError, ValueError) as e:
            errors = [str(e) or type(e).__name__]

        if not errors and isinstance(body, dict) and body.get("errors"):
            errors = [str(error) for error in body["errors"]]

        if errors:
            logger.warning("vault_request_failed", method=method, url=url, errors=len(errors))
            raise issues.add(message="Vault returned errors\n- " + "\n- ".join(errors), source=url).error()

        logger.debug("vault_request_succeeded", method=method, url=url)
        return body if isinstance(body, dict) else {}

    async def fetch_secret(
        self,
        address: str,
        path: str,
        token: str,
        issues: IssuesCollector,
        namespace: str | None = None,
    ) -> VaultSecret | None:
        """Read a KV v2 secret: ``GET {address}/v1/{namespace}/data/{path}``."""
        url = build_url(address, "v1", namespace or "", "data", path)

        async def fetch() -> VaultSecret | None:
            body = await self._request("GET", url, token, issues)
            return VaultSecret.model_validate(body["data"]) if body.get("data") else None

        return await self._memoize(("secret", url, token), fetch)

    async def lookup_token(self, address: str, token: str, issues: IssuesCollector) -> TokenMetadata | None:
        """Look up the token's own lease: ``GET {address}/v1/auth/token/lookup-self``."""
        url = build_url(address, "v1", "auth/token/lookup-self")

        async def lookup() -> TokenMetadata | None:
            body = await self._request("GET", url, token, issues)
            if not body.get("data"):
                return None
            return TokenMetadata.model_validate({**body["data"], "lease_id": body.get("lease_id") or ""})

        return await self._memoize(("lookup", url, token), lookup)

    async def renew_token(self, address: str, token: str, issues: IssuesCollector) -> TokenRenewal | None:
        """Renew the token's lease: ``POST {address}/v1/auth/token/renew-self``."""
        url = build_url(address, "v1", "auth/token/renew-self")

        async def renew() -> TokenRenewal | None:
            body = await self._request("POST", url, token, issues)
            return TokenRenewal.model_validate(body) if body else None

        return await self._memoize(("renew", url, token), renew)
