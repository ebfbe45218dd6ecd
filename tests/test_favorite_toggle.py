import asyncio

from favorite_toggle import FavoriteToggleController
from models import Route


class _RecordingView:
    def __init__(self):
        self.patches = []

    def patch_route(self, key, is_favorite):
        self.patches.append((key, is_favorite))
        return True


class _BrokenStore:
    async def is_favorite_now(self, departure_code, destination_code):
        raise RuntimeError("database is locked")


def test_toggle_twice_leaves_membership_unchanged(favorites, airports):
    route = Route(airports["JFK"], airports["LAX"])
    view = _RecordingView()
    toggles = FavoriteToggleController(favorites, view)

    async def run():
        first = await toggles.toggle(route)
        second = await toggles.toggle(route)
        return first, second, await favorites.is_favorite_now("JFK", "LAX")

    assert asyncio.run(run()) == (True, False, False)
    assert view.patches == [(("JFK", "LAX"), True), (("JFK", "LAX"), False)]
    assert route.is_favorite is False


def test_concurrent_toggles_on_one_route_are_serialized(favorites, airports):
    route = Route(airports["JFK"], airports["ORD"])
    toggles = FavoriteToggleController(favorites, _RecordingView())

    async def run():
        results = await asyncio.gather(toggles.toggle(route), toggles.toggle(route), toggles.toggle(route))
        return results, await favorites.is_favorite_now("JFK", "ORD")

    results, member = asyncio.run(run())
    assert results == [True, False, True]
    assert member is True
    assert toggles._locks == {}


def test_toggle_reads_store_not_the_displayed_flag(favorites, airports):
    route = Route(airports["JFK"], airports["LAX"], is_favorite=True)
    toggles = FavoriteToggleController(favorites, _RecordingView())

    assert asyncio.run(toggles.toggle(route)) is True
    assert asyncio.run(favorites.is_favorite_now("JFK", "LAX")) is True


def test_toggle_failure_keeps_the_flag(airports):
    route = Route(airports["JFK"], airports["LAX"])
    view = _RecordingView()
    toggles = FavoriteToggleController(_BrokenStore(), view)

    assert asyncio.run(toggles.toggle(route)) is False
    assert view.patches == []
