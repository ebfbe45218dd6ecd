"""Live (re-emitting) query primitives.

A `LiveQuery` wraps an async fetch function. Iterating it yields the
current value and then a fresh value every time its `ChangeNotifier`
fires. Stores call `notify()` after each mutation so that every open
subscription re-reads.

All of this runs on a single event loop; `notify()` must be called
from that loop.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Awaitable, Callable, Generic, Optional, Set, TypeVar

T = TypeVar("T")

_MISSING = object()


class ChangeNotifier:
    """Version counter that wakes up waiting subscribers."""

    def __init__(self):
        self._version = 0
        self._waiters: Set[asyncio.Event] = set()

    @property
    def version(self) -> int:
        return self._version

    def notify(self) -> None:
        self._version += 1
        for event in list(self._waiters):
            event.set()

    async def wait_for_change(self, seen: int) -> int:
        """Wait until the version moves past `seen` and return the new one."""
        while self._version == seen:
            event = asyncio.Event()
            self._waiters.add(event)
            try:
                await event.wait()
            finally:
                self._waiters.discard(event)
        return self._version


class LiveQuery(Generic[T]):
    """Async iterable that re-runs `fetch` whenever `notifier` fires."""

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        notifier: Optional[ChangeNotifier] = None,
        distinct: bool = False,
    ):
        self._fetch = fetch
        self._notifier = notifier
        self._distinct = distinct

    def __aiter__(self) -> AsyncIterator[T]:
        return self._run()

    async def first(self) -> T:
        """Point-in-time read, without subscribing."""
        return await self._fetch()

    async def _run(self) -> AsyncIterator[T]:
        last = _MISSING
        while True:
            # Read the version before fetching so a change made while the
            # fetch is running still causes another round.
            version = self._notifier.version if self._notifier else 0
            value = await self._fetch()
            if not (self._distinct and value == last):
                last = value
                yield value
            if self._notifier is None:
                return
            await self._notifier.wait_for_change(version)
