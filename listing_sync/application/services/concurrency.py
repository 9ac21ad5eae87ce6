import asyncio
from collections.abc import AsyncIterator, Awaitable, Hashable, Iterable
from contextlib import asynccontextmanager
from typing import TypeVar

T = TypeVar("T")


class KeyedLock:
    """
    One asyncio.Lock per key, created on demand and dropped once unused.

    Serialises work on a single (product_id, platform_id) pair inside this
    process while leaving other pairs free to run in parallel.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()


async def gather_in_order(aws: Iterable[Awaitable[T]], limit: int | None = None) -> list[T]:
    """Run awaitables concurrently; results come back in input order.

    ``limit`` caps how many run at once.
    """
    if limit is None:
        return list(await asyncio.gather(*aws))

    semaphore = asyncio.Semaphore(limit)

    async def _bounded(aw: Awaitable[T]) -> T:
        async with semaphore:
            return await aw

    return list(await asyncio.gather(*(_bounded(aw) for aw in aws)))
