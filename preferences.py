'''
Persisted key/value preferences (currently just the last search query).
'''

import asyncio
import sqlite3
import threading
from pathlib import Path
from typing import Optional

from favorites import StorageInitError

LAST_QUERY_KEY = "last_query"


class PreferencesStore:
    '''Key/value settings stored in the app's SQLite file.'''

    def __init__(self, db_path: str = "flight_search.db"):
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute('''
                    CREATE TABLE IF NOT EXISTS preferences (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                ''')
                conn.commit()
        except sqlite3.Error as e:
            raise StorageInitError(f"Cannot open preferences at {self.db_path}: {e}") from e

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock, sqlite3.connect(self.db_path) as conn:
            row = conn.execute('SELECT value FROM preferences WHERE key = ?', (key,)).fetchone()
            return row[0] if row else default

    def set(self, key: str, value: str):
        with self._lock, sqlite3.connect(self.db_path) as conn:
            conn.execute(
                'INSERT OR REPLACE INTO preferences (key, value) VALUES (?, ?)',
                (key, value)
            )
            conn.commit()

    async def get_last_query(self) -> str:
        return await asyncio.to_thread(self.get, LAST_QUERY_KEY, "") or ""

    async def set_last_query(self, query: str) -> None:
        await asyncio.to_thread(self.set, LAST_QUERY_KEY, query)
