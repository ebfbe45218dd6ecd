"""
Data models for the flight search application.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

RouteKey = Tuple[str, str]


@dataclass(frozen=True)
class Airport:
    """Represents an airport from the catalog."""
    id: int
    iata: str
    name: str
    passengers: int = 0

    def __repr__(self) -> str:
        return f"Airport({self.iata})"


@dataclass
class Route:
    """A departure/destination pair with its live favorite flag."""
    departure: Airport
    destination: Airport
    is_favorite: bool = False

    def __post_init__(self):
        if self.departure.iata == self.destination.iata:
            raise ValueError(f"Route cannot depart and arrive at {self.departure.iata}")

    @property
    def key(self) -> RouteKey:
        return (self.departure.iata, self.destination.iata)

    def __repr__(self) -> str:
        star = "*" if self.is_favorite else ""
        return f"Route({self.departure.iata}→{self.destination.iata}{star})"


@dataclass
class FavoriteRecord:
    """A persisted favorite route.

    Only the two codes are stored. The airports are filled in on read
    and never written back.
    """
    departure_code: str
    destination_code: str
    id: Optional[int] = None
    departure_airport: Optional[Airport] = field(default=None, compare=False, repr=False)
    destination_airport: Optional[Airport] = field(default=None, compare=False, repr=False)

    @property
    def key(self) -> RouteKey:
        return (self.departure_code, self.destination_code)

    def hydrated(self, departure: Airport, destination: Airport) -> "FavoriteRecord":
        return replace(self, departure_airport=departure, destination_airport=destination)


class DisplayState(Enum):
    FAVORITES = "favorites"
    SEARCH_RESULTS = "search_results"
    FLIGHTS = "flights"
