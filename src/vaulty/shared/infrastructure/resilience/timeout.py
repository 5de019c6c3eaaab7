"""Timeout Resilience Pattern."""

import asyncio
from typing import Any

from vaulty.shared.domain.exceptions import RemoteTimeoutError
from vaulty.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


async def with_timeout_async(
    coro,
    timeout_seconds: float | None,
    operation_name: str = "operation",
) -> Any:
    """Execute a coroutine with a timeout. ``None`` waits forever."""
    if timeout_seconds is None:
        return await coro
    try:
        return await asyncio.wait_for(coro, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning(
            "operation_timeout",
            operation=operation_name,
            timeout=timeout_seconds,
        )
        raise RemoteTimeoutError(operation_name, timeout_seconds)

