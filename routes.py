"""Route composition for the flights view.

`RouteComposer.compose(departure)` follows the destination list for the
departure airport and pairs each destination with a live favorite flag.
The result is consumed as a stream of updates:

    async with composer.compose(airport) as updates:
        async for update in updates:
            ...

- `RoutesReplaced` carries the full list (first emission, or after the
  destination set changed). Flags start out False for new routes and are
  corrected as the favorite store answers.
- `RouteChanged` carries a single route whose flag flipped.
- `RoutesFailed` reports that the destination lookup broke; the stream
  ends after it.

One favorite subscription is kept per live route, keyed by route, and
only added/removed routes subscribe/unsubscribe when the destination set
changes. Leaving the `async with` block tears all of them down.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from models import Airport, Route, RouteKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoutesReplaced:
    routes: List[Route]


@dataclass(frozen=True)
class RouteChanged:
    index: int
    route: Route


@dataclass(frozen=True)
class RoutesFailed:
    error: Exception


RouteUpdate = Union[RoutesReplaced, RouteChanged, RoutesFailed]

_END = object()


class RouteComposition:
    """Live routes from one departure airport."""

    def __init__(self, departure: Airport, catalog, favorites):
        self.departure = departure
        self.routes: List[Route] = []
        self._catalog = catalog
        self._favorites = favorites
        self._positions: Dict[RouteKey, int] = {}
        self._watchers: Dict[RouteKey, asyncio.Task] = {}
        self._updates: asyncio.Queue = asyncio.Queue()
        self._destinations: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def watched_keys(self) -> List[RouteKey]:
        return list(self._watchers)

    def start(self) -> None:
        if self._destinations is None and not self._closed:
            self._destinations = asyncio.get_running_loop().create_task(self._follow_destinations())

    def close(self) -> None:
        """Cancel the destination subscription and every favorite watcher."""
        if self._closed:
            return
        self._closed = True
        if self._destinations is not None:
            self._destinations.cancel()
        for task in self._watchers.values():
            task.cancel()
        self._watchers.clear()
        self._updates.put_nowait(_END)

    async def __aenter__(self) -> "RouteComposition":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __aiter__(self) -> "RouteComposition":
        return self

    async def __anext__(self) -> RouteUpdate:
        if self._closed and self._updates.empty():
            raise StopAsyncIteration
        update = await self._updates.get()
        if update is _END:
            raise StopAsyncIteration
        return update

    async def _follow_destinations(self) -> None:
        code = self.departure.iata
        try:
            async for destinations in self._catalog.destinations_from(code):
                logger.debug(f"Found {len(destinations)} destinations from {code}")
                self._apply_destinations(destinations)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"Destination lookup failed for {code}")
            self._updates.put_nowait(RoutesFailed(e))
            self._destinations = None
            self.close()

    def _apply_destinations(self, destinations: List[Airport]) -> None:
        previous = {route.key: route for route in self.routes}

        routes: List[Route] = []
        for destination in destinations:
            if destination.iata == self.departure.iata:
                continue
            key = (self.departure.iata, destination.iata)
            known = previous.get(key)
            # Surviving routes keep their flag; their watcher only reports flips.
            routes.append(Route(self.departure, destination, known.is_favorite if known else False))

        self.routes = routes
        self._positions = {route.key: i for i, route in enumerate(routes)}
        self._updates.put_nowait(RoutesReplaced(list(routes)))

        for key in [k for k in self._watchers if k not in self._positions]:
            self._watchers.pop(key).cancel()

        loop = asyncio.get_running_loop()
        for key in self._positions:
            if key not in self._watchers:
                self._watchers[key] = loop.create_task(self._watch_favorite(key))

    async def _watch_favorite(self, key: RouteKey) -> None:
        try:
            async for is_favorite in self._favorites.is_favorite(*key):
                self._patch(key, is_favorite)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning(f"Favorite status unavailable for {key[0]}->{key[1]}", exc_info=True)

    def _patch(self, key: RouteKey, is_favorite: bool) -> None:
        index = self._positions.get(key)
        if index is None or self._closed:
            return
        route = self.routes[index]
        if route.is_favorite == is_favorite:
            return
        route.is_favorite = is_favorite
        self._updates.put_nowait(RouteChanged(index, route))


class RouteComposer:
    """Builds live route lists from the catalog and the favorite store."""

    def __init__(self, catalog, favorites):
        self._catalog = catalog
        self._favorites = favorites

    def compose(self, departure: Airport) -> RouteComposition:
        return RouteComposition(departure, self._catalog, self._favorites)
