"""Per-target serialization lock.

Usage:
    lock = ActorLock()
    result = await lock.run_exclusive(target_id, lambda: engine.reconcile(target))

Tasks queued under the same key run one at a time in FIFO order; tasks under
different keys run concurrently with no ordering between them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from typing import TypeVar

T = TypeVar("T")


class ActorLock:
    """FIFO execution queue keyed by actor identity.

    Each key maps to the tail of a chain of futures. A task waits for the
    future of the task queued before it, runs, then resolves its own future.
    Futures are only ever resolved with a result, so a failing task never
    breaks the chain: its exception is raised to its own caller only.
    """

    def __init__(self) -> None:
        self._tails: dict[Hashable, asyncio.Future[None]] = {}

    async def run_exclusive(self, key: Hashable, task: Callable[[], Awaitable[T]]) -> T:
        """Run ``task()`` after every task previously queued under ``key``.

        Args:
            key: Actor identity to serialize on.
            task: Zero-argument callable returning an awaitable.

        Returns:
            The task's result.

        Raises:
            Whatever ``task`` raises. Later tasks still run.
        """
        loop = asyncio.get_running_loop()
        previous = self._tails.get(key)
        current: asyncio.Future[None] = loop.create_future()
        self._tails[key] = current
        try:
            if previous is not None:
                await asyncio.shield(previous)
            return await task()
        finally:
            self._release(key, previous, current)

    def _release(
        self,
        key: Hashable,
        previous: asyncio.Future[None] | None,
        current: asyncio.Future[None],
    ) -> None:
        if previous is not None and not previous.done():
            # Cancelled while queued: hand over only once the predecessor finishes
            previous.add_done_callback(lambda _: self._release(key, None, current))
            return
        if not current.done():
            current.set_result(None)
        if self._tails.get(key) is current:
            del self._tails[key]

    def is_busy(self, key: Hashable) -> bool:
        """Check if any task is running or queued under ``key``."""
        return key in self._tails

    def __len__(self) -> int:
        """Number of keys with running or queued tasks."""
        return len(self._tails)
