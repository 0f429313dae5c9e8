"""Tests for the dashboard controller."""
import threading
import time

import pytest
from dashboard import GENERIC_ERROR_MESSAGE, OFFLINE_MESSAGE, WeatherDashboard, error_message
from geolocation import (
    ConfiguredGeolocationProvider,
    GeolocationProviderBase,
    LocationDeniedError,
    LocationTimeoutError,
)
from history_store import MemoryHistoryStore
from image_provider import ImageProviderBase
from weather_data import Location, SearchHistoryEntry
from weather_provider import (
    NetworkUnavailableError,
    NotFoundError,
    ProviderTimeoutError,
    RateLimitedError,
    WeatherProviderBase,
    WeatherProviderError,
)
from weather_service import WeatherService

LONDON = (51.51, -0.13)
PARIS = (48.85, 2.35)


class FakeProvider(WeatherProviderBase):
    """Provider answering from per-position tables."""

    def __init__(self, make_current, make_sample):
        self._make_current = make_current
        self._make_sample = make_sample
        self.temps = {LONDON: 9.0, PARIS: 18.0}
        self.names = {LONDON: ("London", "GB"), PARIS: ("Paris", "FR")}
        self.current_error = None
        self.forecast_error = None
        self.gates = {}  # position -> threading.Event the fetch waits on
        self.calls = []
        self._lock = threading.Lock()

    def _wait(self, lat, lon):
        gate = self.gates.get((lat, lon))
        if gate is not None:
            gate.wait(timeout=5)

    def get_current(self, lat, lon, units):
        with self._lock:
            self.calls.append(("current", lat, lon, units))
        self._wait(lat, lon)
        if self.current_error:
            raise self.current_error
        name, country = self.names.get((lat, lon), ("Somewhere", "XX"))
        location = Location(name=name, country=country, lat=lat, lon=lon)
        return self._make_current(location=location, temp=self.temps.get((lat, lon), 15.0), units=units)

    def get_forecast(self, lat, lon, units):
        with self._lock:
            self.calls.append(("forecast", lat, lon, units))
        self._wait(lat, lon)
        if self.forecast_error:
            raise self.forecast_error
        temp = self.temps.get((lat, lon), 15.0)
        return tuple(
            self._make_sample(timestamp=1704067200 + 10800 * i, temp=temp, units=units)
            for i in range(16)
        )


class FakeImages(ImageProviderBase):
    def __init__(self):
        self.searches = []

    def search(self, city, country, condition=""):
        self.searches.append((city, country, condition))
        return f"https://images.example/{city}.jpg"


class FakeGeolocation(GeolocationProviderBase):
    def __init__(self, position=None, error=None):
        self.position = position
        self.error = error

    def get_current_position(self, timeout_ms=10000):
        if self.error:
            raise self.error
        return self.position


@pytest.fixture
def provider(make_current, make_sample):
    return FakeProvider(make_current, make_sample)


@pytest.fixture
def images():
    return FakeImages()


@pytest.fixture
def history():
    return MemoryHistoryStore()


@pytest.fixture
def dashboard(provider, images, history):
    service = WeatherService(provider, cache_ttl_seconds=240, max_retries=1)
    board = WeatherDashboard(service, images, history)
    yield board
    board.close()


def test_search_city_shows_weather(dashboard, images):
    state = dashboard.search_city(*LONDON, "London", "GB")

    assert state.current.sample.temp == 9.0
    assert state.current.location.name == "London"
    assert len(state.forecast) == 16
    assert len(state.hourly) == 8
    assert state.daily
    assert state.loading is False
    assert state.error == ""
    assert state.image_url == "https://images.example/London.jpg"
    assert images.searches == [("London", "GB", "Clear")]


def test_fetch_requests_forecast_once(dashboard, provider):
    state = dashboard.search_city(*LONDON, "London", "GB")

    kinds = [call[0] for call in provider.calls]
    assert kinds.count("current") == 1
    assert kinds.count("forecast") == 1
    assert state.hourly == state.forecast[:8]


def test_hourly_comes_from_the_stored_forecast(provider, images, history, make_sample):
    """A slow provider that answers differently on every forecast call."""
    counter = {"n": 0}

    def slow_forecast(lat, lon, units):
        with provider._lock:
            counter["n"] += 1
            base = 10.0 * counter["n"]
            provider.calls.append(("forecast", lat, lon, units))
        time.sleep(0.2)
        return tuple(make_sample(timestamp=1704067200 + 10800 * i, temp=base + i, units=units) for i in range(16))

    provider.get_forecast = slow_forecast
    board = WeatherDashboard(WeatherService(provider, max_retries=1), images, history)
    try:
        state = board.fetch_weather(1.0, 2.0)
    finally:
        board.close()

    assert counter["n"] == 1
    assert state.hourly == state.forecast[:8]
    assert len(state.hourly) == 8


def test_search_city_adds_history(dashboard, history):
    dashboard.search_city(*LONDON, "London", "GB")
    state = dashboard.search_city(*PARIS, "Paris", "FR")

    assert [e.name for e in state.history] == ["Paris", "London"]
    assert [e.name for e in history.load()] == ["Paris", "London"]


def test_repeat_search_moves_city_to_front(dashboard):
    dashboard.search_city(*LONDON, "London", "GB")
    dashboard.search_city(*PARIS, "Paris", "FR")
    state = dashboard.search_city(*LONDON, "London", "GB")

    assert [e.name for e in state.history] == ["London", "Paris"]


def test_history_loaded_on_start(provider, images):
    saved = SearchHistoryEntry(id="Oslo-1", name="Oslo", country="NO", lat=59.9, lon=10.7, saved_at=1)
    board = WeatherDashboard(WeatherService(provider), images, MemoryHistoryStore([saved]))
    try:
        assert board.state.history == (saved,)
    finally:
        board.close()


def test_clear_history(dashboard, history):
    dashboard.search_city(*LONDON, "London", "GB")
    state = dashboard.clear_history()

    assert state.history == ()
    assert history.load() == []


def test_current_location_not_added_to_history(provider, images, history):
    geo = FakeGeolocation(position=PARIS)
    board = WeatherDashboard(WeatherService(provider), images, history, geolocation=geo)
    try:
        state = board.use_current_location()
    finally:
        board.close()

    assert state.current.location.name == "Paris"
    assert state.history == ()
    assert history.load() == []
    # image search falls back to the name the provider reported
    assert state.image_url == "https://images.example/Paris.jpg"


def test_current_location_denied(provider, images, history):
    geo = FakeGeolocation(error=LocationDeniedError("denied"))
    board = WeatherDashboard(WeatherService(provider), images, history, geolocation=geo)
    try:
        state = board.use_current_location()
    finally:
        board.close()

    assert state.current is None
    assert state.error == "Location permission denied. Please search for a city manually."
    assert provider.calls == []


def test_current_location_without_provider(dashboard):
    state = dashboard.use_current_location()
    assert "Location permission denied" in state.error


def test_current_location_from_configuration(provider, images, history):
    geo = ConfiguredGeolocationProvider(lat="51.51", lon="-0.13")
    board = WeatherDashboard(WeatherService(provider), images, history, geolocation=geo)
    try:
        state = board.use_current_location()
    finally:
        board.close()

    assert state.current.location.name == "London"


def test_forecast_failure_keeps_current(dashboard, provider):
    provider.forecast_error = NetworkUnavailableError("Network error: forecast down")

    state = dashboard.search_city(*LONDON, "London", "GB")

    assert state.current.sample.temp == 9.0
    assert state.forecast is None
    assert state.hourly is None
    assert state.daily is None
    assert state.error == ""


def test_current_failure_sets_error(dashboard, provider):
    provider.current_error = NotFoundError("city not found")

    state = dashboard.search_city(*LONDON, "London", "GB")

    assert state.current is None
    assert state.loading is False
    assert state.error == "City not found. Please check the spelling and try again."
    assert state.history == ()


def test_retry_after_failure(dashboard, provider):
    provider.current_error = ProviderTimeoutError("timed out")
    dashboard.search_city(*LONDON, "London", "GB")

    provider.current_error = None
    state = dashboard.retry()

    assert state.error == ""
    assert state.current.location.name == "London"
    assert [e.name for e in state.history] == ["London"]


def test_offline_blocks_fetch(dashboard, provider):
    dashboard.set_online(False)

    state = dashboard.search_city(*LONDON, "London", "GB")

    assert state.error == OFFLINE_MESSAGE
    assert state.online is False
    assert provider.calls == []

    dashboard.set_online(True)
    state = dashboard.search_city(*LONDON, "London", "GB")
    assert state.current is not None


def test_toggle_units_converts_shown_data(dashboard):
    dashboard.search_city(*PARIS, "Paris", "FR")

    state = dashboard.toggle_units("imperial")

    assert state.units == "imperial"
    assert state.current.sample.temp == 64  # 18°C
    assert all(d.units == "imperial" for d in state.daily)


def test_fetch_after_toggle_uses_new_units(dashboard, provider):
    dashboard.toggle_units("imperial")
    state = dashboard.search_city(*LONDON, "London", "GB")

    assert all(call[3] == "imperial" for call in provider.calls)
    assert state.current.units == "imperial"


def test_refresh_is_silent_and_bypasses_cache(dashboard, provider):
    dashboard.search_city(*LONDON, "London", "GB")
    calls_before = len(provider.calls)
    provider.temps[LONDON] = 11.0

    state = dashboard.refresh()

    assert len(provider.calls) > calls_before
    assert state.current.sample.temp == 11.0
    assert state.request.silent is True
    assert state.loading is False
    assert [e.name for e in state.history] == ["London"]


def test_refresh_without_data_does_nothing(dashboard, provider):
    dashboard.refresh()
    assert provider.calls == []


def test_stale_response_is_discarded(dashboard, provider):
    """London is requested first but answers after Paris; Paris must win."""
    gate = threading.Event()
    provider.gates[LONDON] = gate

    london_future = dashboard.submit_search(*LONDON, "London", "GB")
    paris_state = dashboard.search_city(*PARIS, "Paris", "FR")
    assert paris_state.current.location.name == "Paris"

    gate.set()
    final = london_future.result(timeout=10)

    assert final.current.location.name == "Paris"
    assert dashboard.state.current.location.name == "Paris"
    assert dashboard.state.image_url == "https://images.example/Paris.jpg"
    assert [e.name for e in dashboard.state.history] == ["Paris"]


def test_submit_search_while_offline(dashboard):
    dashboard.set_online(False)
    state = dashboard.submit_search(*LONDON, "London", "GB").result(timeout=5)
    assert state.error == OFFLINE_MESSAGE


def test_select_tab_and_dismiss_error(dashboard, provider):
    provider.current_error = NotFoundError("city not found")
    dashboard.search_city(*LONDON, "London", "GB")

    state = dashboard.dismiss_error()
    assert state.error == ""

    state = dashboard.select_tab("hourly")
    assert state.active_tab == "hourly"


@pytest.mark.parametrize("error, expected", [
    (RateLimitedError("429"), "Rate limit exceeded. Please wait a moment and try again."),
    (NotFoundError("404"), "City not found. Please check the spelling and try again."),
    (ProviderTimeoutError("slow"), "Request timed out. Please check your connection and try again."),
    (NetworkUnavailableError("down"), "Network error. Please check your internet connection."),
    (LocationTimeoutError("slow"), "Getting your location timed out. Please search for a city manually."),
    (WeatherProviderError("500"), GENERIC_ERROR_MESSAGE),
])
def test_error_message(error, expected):
    assert error_message(error) == expected
