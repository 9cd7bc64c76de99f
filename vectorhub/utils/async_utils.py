"""Async utility functions."""

import asyncio
from typing import Awaitable, List, TypeVar

T = TypeVar('T')


async def gather_with_concurrency(
    tasks: List[Awaitable[T]],
    max_concurrency: int = 10,
) -> List[T]:
    """Run multiple coroutines with limited concurrency, preserving input order."""
    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def _run_with_semaphore(task: Awaitable[T]) -> T:
        async with semaphore:
            return await task

    # Wrap all tasks with semaphore
    limited_tasks = [_run_with_semaphore(task) for task in tasks]

    return await asyncio.gather(*limited_tasks)
