"""Airport search driven by the live text query.

`QueryDebouncer` turns raw keystrokes into search events. Every new input
cancels the lookup still running for the previous one, so only the most
recent query can ever deliver results.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Coroutine, List, Optional, Union

from models import Airport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryCleared:
    """The query became blank."""


@dataclass(frozen=True)
class QueryStarted:
    """A lookup for `query` is about to start."""
    query: str


@dataclass(frozen=True)
class QueryResults:
    query: str
    airports: List[Airport]


SearchEvent = Union[QueryCleared, QueryStarted, QueryResults]


class QueryDebouncer:
    """Cancel-on-supersede airport lookups.

    Args:
        catalog: object with `search(fragment)` returning a live sequence
        preferences: object with async `set_last_query(text)`
        listener: called with each SearchEvent, on the event loop
        spawn: starts a lookup coroutine and returns its task; defaults to
            `asyncio.ensure_future`
    """

    def __init__(
        self,
        catalog,
        preferences,
        listener: Callable[[SearchEvent], None],
        spawn: Optional[Callable[[Coroutine], Optional[asyncio.Task]]] = None,
    ):
        self._catalog = catalog
        self._preferences = preferences
        self._listener = listener
        self._spawn = spawn or asyncio.ensure_future
        self._query = ""
        self._lookup: Optional[asyncio.Task] = None
        self._generation = 0
        self._unsaved: Optional[str] = None
        self._writer: Optional[asyncio.Task] = None

    @property
    def current_query(self) -> str:
        return self._query

    def on_input(self, text: Optional[str], persist: bool = True) -> None:
        text = text or ""
        self._query = text
        if persist:
            self._save(text)

        self.cancel()
        if not text.strip():
            self._listener(QueryCleared())
            return

        self._listener(QueryStarted(text))
        # The listener may have cancelled again (state change), so read the
        # generation only now.
        self._lookup = self._spawn(self._lookup_airports(text, self._generation))

    def cancel(self) -> None:
        """Drop the in-flight lookup, if any."""
        self._generation += 1
        if self._lookup is not None:
            self._lookup.cancel()
            self._lookup = None

    async def flush(self) -> None:
        """Wait for pending query writes to reach storage."""
        while self._writer is not None and not self._writer.done():
            await self._writer

    async def _lookup_airports(self, text: str, generation: int) -> None:
        logger.debug(f"Searching airports for {text!r}")
        try:
            async for airports in self._catalog.search(text):
                if generation != self._generation:
                    return
                logger.debug(f"Found {len(airports)} airports for {text!r}")
                self._listener(QueryResults(text, list(airports)))
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Airport search failed for {text!r}")
            if generation == self._generation:
                self._listener(QueryResults(text, []))

    def _save(self, text: str) -> None:
        self._unsaved = text
        if self._writer is None or self._writer.done():
            self._writer = asyncio.ensure_future(self._write_preferences())

    async def _write_preferences(self) -> None:
        # Single writer: always persists the newest text, in order.
        while self._unsaved is not None:
            text, self._unsaved = self._unsaved, None
            try:
                await self._preferences.set_last_query(text)
            except Exception:
                logger.warning("Could not persist search query", exc_info=True)
