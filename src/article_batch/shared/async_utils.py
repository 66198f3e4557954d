"""Async helpers for running blocking extraction code off the event loop.

newspaper4k downloads and parses synchronously. These helpers push that work
onto a thread executor so the batch scheduler's event loop keeps admitting and
completing other extractions while one is blocked on the network.
"""

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

T = TypeVar('T')


async def run_in_executor(
    func: Callable[..., T],
    *args,
    executor: Optional[ThreadPoolExecutor] = None,
    **kwargs
) -> T:
    """Run a sync function in an executor from async context.

    Args:
        func: Synchronous function to execute
        *args: Positional arguments for the function
        executor: Optional executor to use (default: the loop's executor)
        **kwargs: Keyword arguments for the function

    Returns:
        Result of the function execution
    """
    loop = asyncio.get_running_loop()

    if kwargs:
        partial_func = functools.partial(func, **kwargs)
        return await loop.run_in_executor(executor, partial_func, *args)
    else:
        return await loop.run_in_executor(executor, func, *args)


async def run_in_executor_with_timeout(
    func: Callable[..., T],
    *args,
    timeout: float,
    **kwargs
) -> T:
    """Run a sync function in the default executor, bounded by ``timeout``.

    The worker thread cannot be interrupted; on timeout the awaiting task
    stops waiting and the thread finishes in the background.

    Raises:
        asyncio.TimeoutError: When the call does not finish within ``timeout``
    """
    return await asyncio.wait_for(
        run_in_executor(func, *args, **kwargs),
        timeout=timeout
    )


__all__ = [
    'run_in_executor',
    'run_in_executor_with_timeout'
]
