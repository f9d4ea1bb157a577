"""
Helpers for running groups of coroutines.
"""

import asyncio
from typing import Any, Awaitable, Iterable, List


async def gather_fail_fast(aws: Iterable[Awaitable[Any]]) -> List[Any]:
    """
    Runs all awaitables concurrently and returns their results in order.

    The first failure cancels every sibling that is still running and is then
    re-raised, so no work continues in the background after an error.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
