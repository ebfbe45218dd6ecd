"""Favorite toggling for displayed routes."""

import asyncio
import logging
from typing import Dict

from models import FavoriteRecord, Route, RouteKey

logger = logging.getLogger(__name__)


class FavoriteToggleController:
    """Adds/removes favorites and patches the displayed route in place.

    Toggles on the same route run one at a time, so a quick double tap
    flips the route twice instead of racing two inserts or two deletes.
    """

    def __init__(self, favorites, view):
        self._favorites = favorites
        self._view = view
        self._locks: Dict[RouteKey, asyncio.Lock] = {}
        self._pending: Dict[RouteKey, int] = {}

    async def toggle(self, route: Route) -> bool:
        """Flip the route's favorite membership and return the new flag."""
        key = route.key
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._pending[key] = self._pending.get(key, 0) + 1
        try:
            async with lock:
                return await self._flip(route)
        finally:
            self._pending[key] -= 1
            if not self._pending[key]:
                del self._pending[key]
                self._locks.pop(key, None)

    async def delete(self, favorite: FavoriteRecord) -> None:
        """Remove a favorite from the favorites view.

        The favorites list re-emits on its own once the row is gone.
        """
        try:
            await self._favorites.delete(favorite)
        except Exception:
            logger.exception(f"Could not delete favorite {favorite.departure_code}->{favorite.destination_code}")

    async def _flip(self, route: Route) -> bool:
        departure, destination = route.key
        try:
            if await self._favorites.is_favorite_now(departure, destination):
                await self._favorites.remove(departure, destination)
                is_favorite = False
            else:
                await self._favorites.add(departure, destination)
                is_favorite = True
        except Exception:
            logger.exception(f"Could not toggle favorite {departure}->{destination}")
            return route.is_favorite

        # The caller's route may be the displayed object: patch the view first.
        self._view.patch_route(route.key, is_favorite)
        route.is_favorite = is_favorite
        return is_favorite
