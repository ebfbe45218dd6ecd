"""Airport catalog.

This module provides `load_airport_db()`, which reads the airport table
from `airports.json`, and `AirportCatalog`, the async view over it that
the rest of the app consumes:
- search airports by code or name fragment
- point lookup by IATA code
- every possible destination from a departure airport

Data source: `airports.json` in the project root or the configured path.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from live import ChangeNotifier, LiveQuery
from models import Airport


def _resource_path(filename: str) -> Path:
    """Return a path to a data file bundled next to the sources."""
    return Path(__file__).parent / filename


class AirportDB:
    """In-memory airport table loaded from airports.json."""

    def __init__(self, airports: Iterable[Airport]):
        self._by_iata: Dict[str, Airport] = {}
        for a in airports:
            code = (a.iata or "").strip().upper()
            if len(code) != 3:
                continue
            # keep first occurrence
            self._by_iata.setdefault(code, a)

    def __len__(self) -> int:
        return len(self._by_iata)

    def get_airport(self, iata: str) -> Optional[Airport]:
        code = (iata or "").strip().upper()
        return self._by_iata.get(code)

    def search(self, fragment: str) -> List[Airport]:
        """Case-insensitive substring match on code or name.

        Airports whose code starts with the fragment come first; both groups
        keep catalog order.
        """
        needle = (fragment or "").strip().lower()
        if not needle:
            return []

        prefix, rest = [], []
        for a in self._by_iata.values():
            code = a.iata.lower()
            if code.startswith(needle):
                prefix.append(a)
            elif needle in code or needle in a.name.lower():
                rest.append(a)
        return prefix + rest

    def destinations_from(self, iata: str) -> List[Airport]:
        code = (iata or "").strip().upper()
        return [a for a in self._by_iata.values() if a.iata != code]


class AirportCatalog:
    """Async, live view over an AirportDB."""

    def __init__(self, db: AirportDB):
        self._db = db
        self._changes = ChangeNotifier()

    @property
    def db(self) -> AirportDB:
        return self._db

    def reload(self, db: AirportDB) -> None:
        """Swap the data set; open search/destination sequences re-emit."""
        self._db = db
        self._changes.notify()

    def search(self, fragment: str) -> LiveQuery[List[Airport]]:
        return LiveQuery(
            lambda: asyncio.to_thread(self._db.search, fragment),
            self._changes,
        )

    async def by_code(self, code: str) -> Optional[Airport]:
        return self._db.get_airport(code)

    def destinations_from(self, code: str) -> LiveQuery[List[Airport]]:
        return LiveQuery(
            lambda: asyncio.to_thread(self._db.destinations_from, code),
            self._changes,
        )


def _load_airports_json(path: Path) -> List[Airport]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError("airports.json must contain a JSON list")

    airports: List[Airport] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            airport_id = int(item.get("id"))
        except (TypeError, ValueError):
            continue
        airports.append(
            Airport(
                id=airport_id,
                iata=str(item.get("iata") or "").strip().upper(),
                name=str(item.get("name") or "").strip(),
                passengers=int(item.get("passengers") or 0),
            )
        )
    return airports


def load_airport_db(path: Optional[Path] = None) -> AirportDB:
    """Load an AirportDB from `path` (default: the bundled airports.json)."""
    path = Path(path) if path else _resource_path("airports.json")
    if not path.exists():
        # fallback: try current working directory
        cwd_path = Path.cwd() / path.name
        if cwd_path.exists():
            path = cwd_path

    if not path.exists():
        raise FileNotFoundError(f"airports.json not found at {path}")

    return AirportDB(_load_airports_json(path))
