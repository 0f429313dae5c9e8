"""City suggestions for the search box, with debounced recomputation."""
import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_CITY_LIST = os.path.join(BASE_DIR, "cities.json")

MIN_QUERY_LENGTH = 2
MAX_SUGGESTIONS = 6
DEBOUNCE_SECONDS = 0.3

T = TypeVar("T")


@dataclass(frozen=True)
class City:
    """One entry of an OpenWeather-style city list."""
    id: int
    name: str
    country: str
    lat: float
    lon: float
    state: str = ""

    @property
    def label(self) -> str:
        region = f"{self.state}, {self.country}" if self.state else self.country
        return f"{self.name} ({region})"


def load_city_list(path: str = DEFAULT_CITY_LIST) -> List[City]:
    """
    Load cities from a JSON file in the OpenWeather ``city.list.json`` shape.

    Each item needs ``id``, ``name``, ``country`` and ``coord.lat/lon``;
    ``state`` is optional.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    cities = [
        City(
            id=int(item["id"]),
            name=item["name"],
            country=item.get("country", ""),
            lat=float(item["coord"]["lat"]),
            lon=float(item["coord"]["lon"]),
            state=item.get("state", ""),
        )
        for item in raw
    ]
    logging.info(f"Loaded {len(cities)} cities from {path}")
    return cities


def suggest(query: str, cities: Sequence[City], limit: int = MAX_SUGGESTIONS) -> List[City]:
    """Cities whose name contains the query (case-insensitive), in list order."""
    if len(query) < MIN_QUERY_LENGTH:
        return []
    q = query.lower()
    matches = []
    for city in cities:
        if q in city.name.lower():
            matches.append(city)
            if len(matches) >= limit:
                break
    return matches


class Debouncer(Generic[T]):
    """
    Hold back a value until it has been stable for a quiet interval.

    Every ``submit`` restarts the interval. ``poll`` hands the value out once
    the interval has elapsed since the last submit, and only once.
    """

    def __init__(self, quiet_interval: float = DEBOUNCE_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.quiet_interval = quiet_interval
        self._clock = clock
        self._pending: Optional[T] = None
        self._has_pending = False
        self._last_submit = 0.0

    def submit(self, value: T) -> None:
        self._pending = value
        self._has_pending = True
        self._last_submit = self._clock()

    def poll(self) -> Optional[T]:
        """Return the settled value, or None if nothing is ready."""
        if not self._has_pending:
            return None
        if self._clock() - self._last_submit < self.quiet_interval:
            return None
        self._has_pending = False
        return self._pending


class CitySearch:
    """Debounced suggestion lookup over a fixed city list."""

    def __init__(self, cities: Sequence[City], debouncer: Optional[Debouncer] = None):
        self.cities = list(cities)
        self.debouncer = debouncer or Debouncer()
        self.suggestions: List[City] = []

    def on_input(self, query: str) -> None:
        """Record a keystroke; suggestions are recomputed once input settles."""
        self.debouncer.submit(query)

    def update(self) -> List[City]:
        """Recompute suggestions if the input has settled, and return them."""
        query = self.debouncer.poll()
        if query is not None:
            self.suggestions = suggest(query, self.cities)
            logging.debug(f"Suggestions for '{query}': {[c.name for c in self.suggestions]}")
        return self.suggestions

    def lookup(self, query: str) -> Optional[City]:
        """Immediate lookup (Enter pressed): the first suggestion, if any."""
        matches = suggest(query, self.cities, limit=1)
        return matches[0] if matches else None
