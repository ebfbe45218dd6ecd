import asyncio

import pytest

from favorites import FavoriteStore, StorageInitError
from models import FavoriteRecord


def test_add_then_remove_round_trip(favorites):
    async def run():
        await favorites.add("JFK", "LAX")
        added = await favorites.is_favorite("JFK", "LAX").first()
        await favorites.remove("JFK", "LAX")
        removed = await favorites.is_favorite("JFK", "LAX").first()
        return added, removed

    assert asyncio.run(run()) == (True, False)


def test_add_is_idempotent_and_direction_matters(favorites):
    async def run():
        await favorites.add("JFK", "LAX")
        await favorites.add("JFK", "LAX")
        return await favorites.all().first(), await favorites.is_favorite_now("LAX", "JFK")

    records, reverse = asyncio.run(run())
    assert [r.key for r in records] == [("JFK", "LAX")]
    assert reverse is False


def test_all_reemits_after_changes(favorites):
    async def run():
        it = favorites.all().__aiter__()
        seen = [await it.__anext__()]

        await favorites.add("JFK", "LAX")
        seen.append(await asyncio.wait_for(it.__anext__(), 1))

        await favorites.delete(FavoriteRecord("JFK", "LAX"))
        seen.append(await asyncio.wait_for(it.__anext__(), 1))
        await it.aclose()
        return seen

    seen = asyncio.run(run())
    assert [[r.key for r in records] for records in seen] == [[], [("JFK", "LAX")], []]


def test_is_favorite_emits_only_on_flips(favorites):
    async def run():
        it = favorites.is_favorite("JFK", "ORD").__aiter__()
        assert await it.__anext__() is False

        # unrelated change: no emission for this route
        await favorites.add("JFK", "LAX")
        pending = asyncio.ensure_future(it.__anext__())
        await asyncio.sleep(0.05)
        assert not pending.done()

        await favorites.add("JFK", "ORD")
        assert await asyncio.wait_for(pending, 1) is True
        await it.aclose()

    asyncio.run(run())


def test_favorites_survive_reopening(db_path):
    asyncio.run(FavoriteStore(db_path).add("JFK", "LAX"))

    reopened = FavoriteStore(db_path)
    assert asyncio.run(reopened.is_favorite_now("JFK", "LAX")) is True


def test_unopenable_database_raises_init_error(tmp_path):
    with pytest.raises(StorageInitError):
        FavoriteStore(str(tmp_path / "missing" / "flight_search.db"))


def test_unrelated_change_does_not_reread_watched_route(favorites, monkeypatch):
    reads = []
    exists = favorites._exists

    def counting_exists(departure_code, destination_code):
        reads.append((departure_code, destination_code))
        return exists(departure_code, destination_code)

    monkeypatch.setattr(favorites, "_exists", counting_exists)

    async def run():
        it = favorites.is_favorite("JFK", "ORD").__aiter__()
        assert await it.__anext__() is False

        await favorites.add("JFK", "LAX")
        await favorites.add("LAX", "ORD")
        await asyncio.sleep(0.05)
        assert reads == [("JFK", "ORD")]

        await favorites.add("JFK", "ORD")
        assert await asyncio.wait_for(it.__anext__(), 1) is True
        await it.aclose()

    asyncio.run(run())
    assert reads == [("JFK", "ORD"), ("JFK", "ORD")]
