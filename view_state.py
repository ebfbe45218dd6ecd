"""
View state machine.

Owns the one displayed list and the current DisplayState, and decides which
producer may write to the list:

- FAVORITES: the favorite store's live list, hydrated with catalog airports
- SEARCH_RESULTS: the query debouncer's latest results
- FLIGHTS: the route composer for the selected airport

Entering a state cancels the previous state's producers, clears the list
and starts the new producers in a fresh ProducerScope. Back navigation
from SEARCH_RESULTS or FLIGHTS always returns to FAVORITES; from FAVORITES
it asks the app to exit.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Union

from models import Airport, DisplayState, FavoriteRecord, RouteKey
from routes import RouteChanged, RouteComposer, RoutesFailed, RoutesReplaced
from scopes import ProducerScope
from search import QueryCleared, QueryDebouncer, QueryResults, QueryStarted, SearchEvent

logger = logging.getLogger(__name__)

NO_RESULTS = "No airports found"
NO_FAVORITES = "No favorite routes yet"

HEADINGS = {
    DisplayState.FAVORITES: "Favorite routes",
    DisplayState.SEARCH_RESULTS: "Search results",
}


@dataclass(frozen=True)
class StateChanged:
    state: DisplayState
    heading: str


@dataclass(frozen=True)
class ListReset:
    items: List[Any]
    empty_message: Optional[str] = None


@dataclass(frozen=True)
class ItemChanged:
    index: int
    item: Any


ViewEvent = Union[StateChanged, ListReset, ItemChanged]


class ViewStateMachine:
    """Coordinates the three display modes over one shared list."""

    def __init__(
        self,
        catalog,
        favorites,
        preferences,
        composer: Optional[RouteComposer] = None,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self._catalog = catalog
        self._favorites = favorites
        self._preferences = preferences
        self._composer = composer or RouteComposer(catalog, favorites)
        self._notify = notify or (lambda message: logger.info(f"Notification: {message}"))
        self._listeners: List[Callable[[ViewEvent], None]] = []

        self.state = DisplayState.FAVORITES
        self.heading = HEADINGS[DisplayState.FAVORITES]
        self.items: List[Any] = []
        self.empty_message: Optional[str] = None

        self._scope = ProducerScope(DisplayState.FAVORITES.value)
        self._debouncer = QueryDebouncer(
            catalog,
            preferences,
            self._on_search_event,
            spawn=lambda coro: self._scope.launch(coro),
        )

    @property
    def query(self) -> str:
        return self._debouncer.current_query

    def add_listener(self, listener: Callable[[ViewEvent], None]) -> None:
        self._listeners.append(listener)

    async def start(self) -> None:
        """Restore the last query and show the matching view."""
        try:
            query = await self._preferences.get_last_query()
        except Exception:
            logger.warning("Could not restore last search query", exc_info=True)
            query = ""
        self._debouncer.on_input(query, persist=False)

    async def close(self) -> None:
        """Cancel every producer, wait for them to stop and flush the query."""
        scope = self._scope
        scope.cancel()
        self._debouncer.cancel()
        await scope.join()
        await self._debouncer.flush()

    # Transitions

    def on_query(self, text: str) -> None:
        self._debouncer.on_input(text)

    def show_favorites(self) -> None:
        scope = self._enter(DisplayState.FAVORITES)
        scope.launch(self._collect_favorites(scope))

    def select_airport(self, airport: Airport) -> bool:
        if self.state is not DisplayState.SEARCH_RESULTS:
            logger.warning(f"Ignoring selection of {airport.iata} outside search results")
            return False
        logger.info(f"Loading flights from {airport.iata}")
        scope = self._enter(DisplayState.FLIGHTS, f"Flights from {airport.iata}")
        scope.launch(self._collect_flights(scope, airport))
        return True

    def back(self) -> bool:
        """Handle back navigation. Returns True when the app should exit."""
        if self.state is DisplayState.FAVORITES:
            return True
        self.show_favorites()
        return False

    def patch_route(self, key: RouteKey, is_favorite: bool) -> bool:
        """Set the flag of the displayed route with `key` in place.

        Returns True if such a route is displayed. A row re-render is only
        emitted when the flag actually changes.
        """
        index = self._route_index(key)
        if index is None:
            return False
        item = self.items[index]
        if item.is_favorite != is_favorite:
            item.is_favorite = is_favorite
            self._emit(ItemChanged(index, item))
        return True

    # Internals

    def _route_index(self, key: RouteKey) -> Optional[int]:
        if self.state is not DisplayState.FLIGHTS:
            return None
        for index, item in enumerate(self.items):
            if item.key == key:
                return index
        return None

    def _enter(self, state: DisplayState, heading: Optional[str] = None) -> ProducerScope:
        self._scope.cancel()
        self._debouncer.cancel()
        self._scope = ProducerScope(state.value)

        self.state = state
        self.heading = heading or HEADINGS[state]
        self._emit(StateChanged(state, self.heading))
        self._reset([])
        return self._scope

    def _reset(self, items: List[Any], empty_message: Optional[str] = None) -> None:
        self.items = list(items)
        self.empty_message = empty_message
        self._emit(ListReset(list(self.items), empty_message))

    def _emit(self, event: ViewEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"View listener failed on {type(event).__name__}")

    def _on_search_event(self, event: SearchEvent) -> None:
        if isinstance(event, QueryCleared):
            self.show_favorites()
        elif isinstance(event, QueryStarted):
            if self.state is not DisplayState.SEARCH_RESULTS:
                self._enter(DisplayState.SEARCH_RESULTS)
        elif isinstance(event, QueryResults):
            if self.state is DisplayState.SEARCH_RESULTS and self._scope.active:
                self._reset(event.airports, None if event.airports else NO_RESULTS)

    async def _collect_favorites(self, scope: ProducerScope) -> None:
        try:
            async for records in self._favorites.all():
                hydrated = await self._hydrate(records)
                if not scope.active:
                    return
                self._reset(hydrated, None if hydrated else NO_FAVORITES)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Error loading favorites")
            if scope.active:
                self._reset([], NO_FAVORITES)

    async def _hydrate(self, records: List[FavoriteRecord]) -> List[FavoriteRecord]:
        hydrated = []
        for record in records:
            departure = await self._catalog.by_code(record.departure_code)
            destination = await self._catalog.by_code(record.destination_code)
            if departure is None or destination is None:
                # TODO: decide with product whether orphaned favorites should be shown or purged
                logger.warning(
                    f"Skipping favorite {record.departure_code}->{record.destination_code}: "
                    f"airport missing from catalog"
                )
                continue
            hydrated.append(record.hydrated(departure, destination))
        return hydrated

    async def _collect_flights(self, scope: ProducerScope, departure: Airport) -> None:
        try:
            async with self._composer.compose(departure) as updates:
                async for update in updates:
                    if not scope.active:
                        return
                    if isinstance(update, RoutesFailed):
                        raise update.error
                    if isinstance(update, RoutesReplaced):
                        self._reset(update.routes)
                    elif isinstance(update, RouteChanged):
                        # The composition already flipped the shared Route object.
                        index = self._route_index(update.route.key)
                        if index is not None:
                            self._emit(ItemChanged(index, self.items[index]))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error loading flights from {departure.iata}: {e}")
            if scope.active:
                self._reset([])
                self._notify(f"Error loading flights: {e}")
