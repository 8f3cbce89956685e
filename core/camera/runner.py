"""Bounded-concurrency task runner."""

import asyncio
from typing import Awaitable, Callable, Sequence

Task = Callable[[], Awaitable[None]]


async def run_bounded(tasks: Sequence[Task], concurrency: int) -> None:
    """
    Run zero-argument async tasks with at most ``concurrency`` in flight.

    Workers share an index cursor. Claiming an index (read then increment)
    happens without a suspension point in between, so no two workers can claim
    the same task. Each worker awaits its task before claiming the next one.

    Args:
        tasks: Ordered task factories; each is called exactly once
        concurrency: Maximum number of tasks running at the same time
    """
    cursor = 0

    async def worker() -> None:
        nonlocal cursor
        while True:
            index = cursor
            cursor += 1
            if index >= len(tasks):
                return
            await tasks[index]()

    await asyncio.gather(*(worker() for _ in range(max(1, concurrency))))
