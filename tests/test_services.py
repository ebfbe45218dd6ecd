import asyncio
from pathlib import Path

import pytest

from config import LoadedConfig
from favorites import StorageInitError
from models import DisplayState
from services import open_services


def _config(db_path, airports_path=None) -> LoadedConfig:
    return LoadedConfig(
        db_path=Path(db_path),
        airports_path=airports_path,
        log_level='INFO',
        port=8080,
        loaded_from=None,
    )


def test_open_services_loads_bundled_catalog(db_path):
    services = open_services(_config(db_path))

    assert services.catalog.db.get_airport("LHR") is not None
    assert len(services.catalog.db) == 16


def test_new_view_shares_the_stores(db_path):
    services = open_services(_config(db_path))
    view, toggles = services.new_view()

    async def run():
        await view.start()
        await view.close()
        return view.state

    assert asyncio.run(run()) is DisplayState.FAVORITES


def test_unopenable_database_is_fatal(tmp_path):
    with pytest.raises(StorageInitError):
        open_services(_config(tmp_path / "nope" / "flight_search.db"))


def test_missing_airport_seed_is_fatal(db_path, tmp_path):
    with pytest.raises(StorageInitError):
        open_services(_config(db_path, tmp_path / "missing_airports.json"))


def test_malformed_airport_seed_is_fatal(db_path, tmp_path):
    seed = tmp_path / "airports.json"
    seed.write_text('{"iata": "JFK"}')

    with pytest.raises(StorageInitError):
        open_services(_config(db_path, seed))
