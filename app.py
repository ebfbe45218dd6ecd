"""
Flight Search - Main Application
Search airports, browse every route from a departure airport and keep a list of favorite routes.
"""
import logging
import sys
from typing import Any, Dict, Optional

from nicegui import Client, ui, app as nicegui_app

from config import config_diagnostics, load_config
from favorites import StorageInitError
from models import Airport, FavoriteRecord, Route
from services import AppServices, open_services
from view_state import ItemChanged, ListReset, StateChanged, ViewEvent

logger = logging.getLogger(__name__)

services: Optional[AppServices] = None


def item_title(item: Any) -> str:
    """Primary text for a row of the displayed list."""
    if isinstance(item, Airport):
        return item.iata
    if isinstance(item, Route):
        return f"{item.departure.iata} → {item.destination.iata}"
    if isinstance(item, FavoriteRecord):
        return f"{item.departure_code} → {item.destination_code}"
    return str(item)


def item_subtitle(item: Any) -> str:
    if isinstance(item, Airport):
        return item.name
    if isinstance(item, Route):
        return f"{item.departure.name} to {item.destination.name}"
    if isinstance(item, FavoriteRecord) and item.departure_airport and item.destination_airport:
        return f"{item.departure_airport.name} to {item.destination_airport.name}"
    return ""


class FlightSearchApp:
    """Main application controller (one per browser tab)."""

    def __init__(self, app_services: AppServices):
        self.view, self.toggles = app_services.new_view(notify=self._notify)
        self.view.add_listener(self._on_view_event)

        # UI refs
        self.search_input = None
        self.heading_label = None
        self.empty_label = None
        self.back_button = None
        self.list_container = None
        self._rows: Dict[int, Any] = {}

    def create_ui(self):
        """Build the complete UI."""
        with ui.column().classes('w-full max-w-2xl mx-auto'):
            with ui.row().classes('w-full items-center'):
                self.back_button = ui.button(icon='arrow_back', on_click=self._on_back).props('flat round')
                self.heading_label = ui.label(self.view.heading).classes('text-xl font-bold')

            self.search_input = ui.input(
                label='Enter departure airport',
                placeholder='Code or name, e.g. JFK',
                on_change=self._on_query_change,
            ).props('clearable outlined').classes('w-full')

            self.empty_label = ui.label('').classes('text-grey')
            self.list_container = ui.column().classes('w-full gap-0')

    async def start(self):
        await self.view.start()
        self.search_input.value = self.view.query

    async def close(self):
        await self.view.close()

    def _notify(self, message: str):
        ui.notify(message, type='negative')

    def _on_query_change(self, e):
        text = e.value or ''
        if text != self.view.query:
            self.view.on_query(text)

    def _on_back(self):
        if self.view.back():
            logger.info("Back pressed on favorites, shutting down")
            nicegui_app.shutdown()

    def _on_view_event(self, event: ViewEvent):
        if isinstance(event, StateChanged):
            self.heading_label.set_text(event.heading)
        elif isinstance(event, ListReset):
            self._render_list(event.items, event.empty_message)
        elif isinstance(event, ItemChanged):
            row = self._rows.get(event.index)
            if row is not None:
                row.clear()
                with row:
                    self._render_item(event.item)

    def _render_list(self, items, empty_message: Optional[str]):
        self.empty_label.set_text(empty_message or '')
        self.empty_label.set_visibility(bool(empty_message))
        self.list_container.clear()
        self._rows = {}
        with self.list_container:
            for index, item in enumerate(items):
                row = ui.row().classes('w-full items-center justify-between py-2 border-b')
                with row:
                    self._render_item(item)
                self._rows[index] = row

    def _render_item(self, item):
        with ui.column().classes('gap-0'):
            ui.label(item_title(item)).classes('font-mono font-bold')
            ui.label(item_subtitle(item)).classes('text-sm text-grey')

        if isinstance(item, Airport):
            ui.button(icon='flight_takeoff', on_click=lambda a=item: self.view.select_airport(a)).props('flat round')
        elif isinstance(item, Route):
            ui.button(
                icon='star' if item.is_favorite else 'star_border',
                on_click=lambda r=item: self.toggles.toggle(r),
            ).props('flat round color=amber')
        elif isinstance(item, FavoriteRecord):
            ui.button(icon='delete', on_click=lambda f=item: self.toggles.delete(f)).props('flat round')


@ui.page('/')
async def index(client: Client):
    """Main page route."""
    app_instance = FlightSearchApp(services)
    app_instance.create_ui()
    client.on_disconnect(app_instance.close)
    await client.connected()
    await app_instance.start()


def main():
    global services

    cfg = load_config()
    logging.basicConfig(level=getattr(logging, cfg.log_level, logging.INFO))
    logger.debug(config_diagnostics())

    try:
        services = open_services(cfg)
    except StorageInitError as e:
        logger.error(f"Error initializing app: {e}")
        print(f"Error initializing app: {e}")
        sys.exit(1)

    ui.run(
        title='Flight Search',
        favicon='✈️',
        dark=True,
        reload=False,
        port=cfg.port,
    )


if __name__ in {'__main__', '__mp_main__'}:
    main()
