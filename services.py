"""Wiring of the catalog, the stores and the per-client view objects."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from airports import AirportCatalog, load_airport_db
from config import LoadedConfig
from favorite_toggle import FavoriteToggleController
from favorites import FavoriteStore, StorageInitError
from preferences import PreferencesStore
from view_state import ViewStateMachine

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    config: LoadedConfig
    catalog: AirportCatalog
    favorites: FavoriteStore
    preferences: PreferencesStore

    def new_view(
        self, notify: Optional[Callable[[str], None]] = None
    ) -> Tuple[ViewStateMachine, FavoriteToggleController]:
        view = ViewStateMachine(self.catalog, self.favorites, self.preferences, notify=notify)
        return view, FavoriteToggleController(self.favorites, view)


def open_services(cfg: LoadedConfig) -> AppServices:
    """Open the airport catalog and the local database.

    Raises:
        StorageInitError: if either cannot be opened; the app cannot run.
    """
    logger.info("Initializing dependencies")
    try:
        db = load_airport_db(cfg.airports_path)
    except (OSError, ValueError) as e:
        raise StorageInitError(f"Cannot load airport catalog: {e}") from e
    logger.info(f"Airport catalog loaded: {len(db)} airports")

    favorites = FavoriteStore(str(cfg.db_path))
    preferences = PreferencesStore(str(cfg.db_path))
    logger.info(f"Database initialized at {cfg.db_path}")

    return AppServices(
        config=cfg,
        catalog=AirportCatalog(db),
        favorites=favorites,
        preferences=preferences,
    )
