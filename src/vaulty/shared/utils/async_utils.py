"""Async helpers."""

import asyncio
from collections.abc import Awaitable, Iterable
from typing import Any


async def gather_all(aws: Iterable[Awaitable[Any]]) -> list[Any]:
    """
    Await every awaitable to completion, then raise the first failure.

    Unlike a plain ``asyncio.gather`` no sibling is left running when one
    fails, so every sibling has reported its own issues by the time the
    failure propagates.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)
