"""Dashboard controller - fetches weather for a session and keeps its state consistent."""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

import session
from geolocation import (
    GeolocationProviderBase,
    LocationDeniedError,
    LocationError,
    LocationTimeoutError,
    LocationUnavailableError,
)
from forecast_summary import window_hourly
from history_store import HistoryStoreBase, add_to_history
from image_provider import ImageProviderBase
from session import SessionState, WeatherRequest
from weather_data import METRIC, SearchHistoryEntry
from weather_provider import (
    NetworkUnavailableError,
    NotFoundError,
    ProviderTimeoutError,
    RateLimitedError,
    WeatherProviderError,
)
from weather_service import WeatherService

OFFLINE_MESSAGE = "No internet connection. Please check your network and try again."
GENERIC_ERROR_MESSAGE = "Failed to fetch weather data. Please try again."
LOCATION_TIMEOUT_MS = 10000


def error_message(error: Exception) -> str:
    """Map a provider or location error to the message shown to the user."""
    if isinstance(error, RateLimitedError):
        return "Rate limit exceeded. Please wait a moment and try again."
    if isinstance(error, NotFoundError):
        return "City not found. Please check the spelling and try again."
    if isinstance(error, ProviderTimeoutError):
        return "Request timed out. Please check your connection and try again."
    if isinstance(error, NetworkUnavailableError):
        return "Network error. Please check your internet connection."
    if isinstance(error, LocationDeniedError):
        return "Location permission denied. Please search for a city manually."
    if isinstance(error, LocationUnavailableError):
        return "Your location is unavailable. Please search for a city manually."
    if isinstance(error, LocationTimeoutError):
        return "Getting your location timed out. Please search for a city manually."
    if isinstance(error, LocationError):
        return "Failed to get your location. Please search manually."
    return GENERIC_ERROR_MESSAGE


class WeatherDashboard:
    """
    One user session of the weather dashboard.

    Current weather and the forecast are fetched concurrently and applied
    together once both have finished; the hourly view is the first slots of
    that forecast. Every fetch is numbered;
    a response that arrives after a newer fetch was issued is discarded.
    A failing forecast leaves the daily and hourly views unavailable while
    current weather is still shown.
    """

    def __init__(
        self,
        weather_service: WeatherService,
        image_provider: ImageProviderBase,
        history_store: HistoryStoreBase,
        geolocation: Optional[GeolocationProviderBase] = None,
        units: str = METRIC,
    ):
        """
        Initialize the dashboard.

        Args:
            weather_service: Cached, retrying access to the weather provider
            image_provider: Background image lookup
            history_store: Persistence for the search history
            geolocation: Source for "use my location" (optional)
            units: Initial unit system
        """
        self.weather_service = weather_service
        self.image_provider = image_provider
        self.history_store = history_store
        self.geolocation = geolocation

        self._lock = threading.Lock()
        self._background = ThreadPoolExecutor(max_workers=2, thread_name_prefix="weather-fetch")
        self.state = SessionState(units=units, history=tuple(history_store.load()))

    def close(self) -> None:
        self._background.shutdown(wait=True)

    # User actions

    def search_city(self, lat: float, lon: float, city: str, country: str) -> SessionState:
        """Fetch weather for a city the user picked; adds it to the history."""
        return self.fetch_weather(lat, lon, city=city, country=country)

    def submit_search(self, lat: float, lon: float, city: str = "", country: str = "") -> Future:
        """Like search_city but runs in the background; the future yields the final state."""
        request = self._begin(lat, lon, city, country, silent=False)
        if request is None:
            future: Future = Future()
            future.set_result(self.state)
            return future
        return self._background.submit(self._run, request)

    def use_current_location(self, timeout_ms: int = LOCATION_TIMEOUT_MS) -> SessionState:
        """Fetch weather for the current position. Not added to the history."""
        if self.geolocation is None:
            self._update(lambda s: session.receive_failure(s, s.last_seq, error_message(LocationDeniedError())))
            return self.state
        try:
            lat, lon = self.geolocation.get_current_position(timeout_ms)
        except LocationError as e:
            logging.warning(f"Geolocation failed: {e}")
            self._update(lambda s: session.receive_failure(s, s.last_seq, error_message(e)))
            return self.state
        return self.fetch_weather(lat, lon)

    def refresh(self, silent: bool = True) -> SessionState:
        """Re-fetch the location currently shown, bypassing the cache."""
        current = self.state.current
        if current is None:
            return self.state
        self.weather_service.invalidate()
        location = current.location
        return self.fetch_weather(location.lat, location.lon, silent=silent)

    def retry(self) -> SessionState:
        """Repeat the last request after an error."""
        request = self.state.request
        if request is None:
            return self.state
        return self.fetch_weather(request.lat, request.lon, request.city, request.country)

    def toggle_units(self, units: str) -> SessionState:
        return self._update(lambda s: session.toggle_units(s, units))

    def select_tab(self, tab: str) -> SessionState:
        return self._update(lambda s: session.select_tab(s, tab))

    def set_online(self, online: bool) -> SessionState:
        logging.info("Connection %s", "restored" if online else "lost")
        return self._update(lambda s: session.set_online(s, online))

    def dismiss_error(self) -> SessionState:
        return self._update(session.dismiss_error)

    def clear_history(self) -> SessionState:
        self.history_store.clear()
        return self._update(lambda s: session.set_history(s, []))

    # Fetching

    def fetch_weather(
        self,
        lat: float,
        lon: float,
        city: str = "",
        country: str = "",
        silent: bool = False,
    ) -> SessionState:
        """Fetch and apply weather for a position; returns the resulting state."""
        request = self._begin(lat, lon, city, country, silent)
        if request is None:
            return self.state
        return self._run(request)

    def _begin(self, lat, lon, city, country, silent) -> Optional[WeatherRequest]:
        with self._lock:
            if not self.state.online:
                logging.warning("Offline, not fetching weather")
                self.state = session.receive_failure(self.state, self.state.last_seq, OFFLINE_MESSAGE)
                return None
            self.state, request = session.begin_request(self.state, lat, lon, city, country, silent)
        logging.info(f"Request {request.seq}: weather for {city or 'position'} ({lat}, {lon}) in {request.units}")
        return request

    def _run(self, request: WeatherRequest) -> SessionState:
        try:
            current, forecast, hourly = self._fetch_all(request)
        except WeatherProviderError as e:
            logging.error(f"Request {request.seq} failed: {e}")
            return self._update(lambda s: session.receive_failure(s, request.seq, error_message(e)))

        with self._lock:
            if not session.is_current(self.state, request.seq):
                logging.info(f"Request {request.seq} superseded, discarding response")
                return self.state
            self.state = session.receive_weather(self.state, request.seq, current, forecast, hourly)
            if request.is_city_selection:
                self._remember(request)

        location = current.location
        image_url = self.image_provider.search(
            request.city or location.name,
            request.country or location.country,
            current.sample.condition.main,
        )
        return self._update(lambda s: session.set_image(s, request.seq, image_url))

    def _fetch_all(self, request: WeatherRequest):
        """
        Fetch current and forecast concurrently and wait for both.

        The hourly view is cut from that same forecast, so it is None
        whenever the forecast is.
        """
        args = (request.lat, request.lon, request.units)
        with ThreadPoolExecutor(max_workers=2) as pool:
            current_future = pool.submit(self.weather_service.get_current, *args)
            forecast_future = pool.submit(self.weather_service.get_forecast, *args)

        current = current_future.result()
        forecast = self._optional_result(forecast_future, "forecast")
        hourly = window_hourly(forecast) if forecast is not None else None
        return current, forecast, hourly

    @staticmethod
    def _optional_result(future: Future, name: str):
        try:
            return future.result()
        except WeatherProviderError as e:
            logging.warning(f"{name.capitalize()} unavailable: {e}")
            return None

    def _remember(self, request: WeatherRequest) -> None:
        entry = SearchHistoryEntry.for_location(request.city, request.country, request.lat, request.lon)
        entries = add_to_history(self.state.history, entry)
        self.history_store.save(entries)
        self.state = session.set_history(self.state, entries)

    def _update(self, transition: Callable[[SessionState], SessionState]) -> SessionState:
        with self._lock:
            self.state = transition(self.state)
            return self.state
