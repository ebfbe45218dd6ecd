'''
Favorite routes store.
Uses SQLite for lightweight disk-based persistence and exposes live
(re-emitting) queries over it.
'''

import asyncio
import logging
import sqlite3
import threading
import weakref
from pathlib import Path
from typing import List

from live import ChangeNotifier, LiveQuery
from models import FavoriteRecord, RouteKey

logger = logging.getLogger(__name__)


class StorageInitError(RuntimeError):
    '''The local database could not be opened at startup.'''


class FavoriteStore:
    '''Persisted set of favorite routes.'''

    def __init__(self, db_path: str = "flight_search.db"):
        '''
        Initialize the store.

        Args:
            db_path: Path to SQLite database file

        Raises:
            StorageInitError: if the database cannot be created or opened
        '''
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self._changes = ChangeNotifier()
        # One notifier per watched route; dropped once no query holds it.
        self._route_changes: "weakref.WeakValueDictionary[RouteKey, ChangeNotifier]" = weakref.WeakValueDictionary()
        try:
            self._init_db()
        except sqlite3.Error as e:
            raise StorageInitError(f"Cannot open favorites database at {self.db_path}: {e}") from e

    def _init_db(self):
        '''Initialize the database schema.'''
        with sqlite3.connect(self.db_path) as conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS favorite (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    departure_code TEXT NOT NULL,
                    destination_code TEXT NOT NULL,
                    UNIQUE (departure_code, destination_code)
                )
            ''')
            conn.commit()

    # Blocking helpers, run in a worker thread.

    def _fetch_all(self) -> List[FavoriteRecord]:
        with self._lock, sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                'SELECT id, departure_code, destination_code FROM favorite ORDER BY id'
            )
            return [
                FavoriteRecord(id=row[0], departure_code=row[1], destination_code=row[2])
                for row in cursor.fetchall()
            ]

    def _exists(self, departure_code: str, destination_code: str) -> bool:
        with self._lock, sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                'SELECT 1 FROM favorite WHERE departure_code = ? AND destination_code = ?',
                (departure_code, destination_code)
            )
            return cursor.fetchone() is not None

    def _insert(self, departure_code: str, destination_code: str) -> bool:
        with self._lock, sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                'INSERT OR IGNORE INTO favorite (departure_code, destination_code) VALUES (?, ?)',
                (departure_code, destination_code)
            )
            conn.commit()
            return cursor.rowcount > 0

    def _delete(self, departure_code: str, destination_code: str) -> bool:
        with self._lock, sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                'DELETE FROM favorite WHERE departure_code = ? AND destination_code = ?',
                (departure_code, destination_code)
            )
            conn.commit()
            return cursor.rowcount > 0

    # Live queries

    def all(self) -> LiveQuery[List[FavoriteRecord]]:
        '''All favorites in insertion order; re-emits after every change.'''
        return LiveQuery(lambda: asyncio.to_thread(self._fetch_all), self._changes)

    def is_favorite(self, departure_code: str, destination_code: str) -> LiveQuery[bool]:
        '''Favorite flag for one route; emits only when the flag flips.'''
        return LiveQuery(
            lambda: asyncio.to_thread(self._exists, departure_code, destination_code),
            self._route_notifier((departure_code, destination_code)),
            distinct=True,
        )

    async def is_favorite_now(self, departure_code: str, destination_code: str) -> bool:
        return await self.is_favorite(departure_code, destination_code).first()

    # Mutations

    async def add(self, departure_code: str, destination_code: str) -> None:
        inserted = await asyncio.to_thread(self._insert, departure_code, destination_code)
        if inserted:
            logger.info(f"Added favorite {departure_code}->{destination_code}")
            self._notify_change((departure_code, destination_code))

    async def remove(self, departure_code: str, destination_code: str) -> None:
        deleted = await asyncio.to_thread(self._delete, departure_code, destination_code)
        if deleted:
            logger.info(f"Removed favorite {departure_code}->{destination_code}")
            self._notify_change((departure_code, destination_code))

    async def delete(self, record: FavoriteRecord) -> None:
        await self.remove(record.departure_code, record.destination_code)

    def _route_notifier(self, key: RouteKey) -> ChangeNotifier:
        notifier = self._route_changes.get(key)
        if notifier is None:
            notifier = ChangeNotifier()
            self._route_changes[key] = notifier
        return notifier

    def _notify_change(self, key: RouteKey) -> None:
        self._changes.notify()
        notifier = self._route_changes.get(key)
        if notifier is not None:
            notifier.notify()
