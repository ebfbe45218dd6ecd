"""
Shared fixtures: a three-airport catalog and stores backed by a temp SQLite file.
"""

import asyncio

import pytest

from airports import AirportCatalog, AirportDB
from favorites import FavoriteStore
from models import Airport
from preferences import PreferencesStore

JFK = Airport(id=1, iata="JFK", name="John F. Kennedy International Airport")
LAX = Airport(id=2, iata="LAX", name="Los Angeles International Airport")
ORD = Airport(id=3, iata="ORD", name="O'Hare International Airport")
SFO = Airport(id=4, iata="SFO", name="San Francisco International Airport")


async def _wait_until(predicate, timeout: float = 2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def wait_until():
    return _wait_until


@pytest.fixture
def airports():
    return {a.iata: a for a in (JFK, LAX, ORD, SFO)}


@pytest.fixture
def catalog():
    return AirportCatalog(AirportDB([JFK, LAX, ORD]))


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "flight_search.db")


@pytest.fixture
def favorites(db_path):
    return FavoriteStore(db_path)


@pytest.fixture
def preferences(db_path):
    return PreferencesStore(db_path)
