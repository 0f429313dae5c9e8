"""Dashboard session state - one immutable record plus a transition per user action."""
import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

from aggregator import ForecastAggregator
from weather_data import (
    METRIC,
    UNIT_SYSTEMS,
    CurrentWeather,
    DailySummary,
    ForecastSeries,
    SearchHistoryEntry,
    WeatherSample,
)

TABS = ("current", "hourly", "forecast")


@dataclass(frozen=True)
class WeatherRequest:
    """A fetch the session issued; ``seq`` increases with every request."""
    seq: int
    lat: float
    lon: float
    units: str
    city: str = ""
    country: str = ""
    silent: bool = False  # background refresh, no loading indicator

    @property
    def is_city_selection(self) -> bool:
        return bool(self.city and self.country) and not self.silent


@dataclass(frozen=True)
class SessionState:
    """Everything the dashboard shows for one user session."""
    units: str = METRIC
    current: Optional[CurrentWeather] = None
    forecast: Optional[ForecastSeries] = None  # None = unavailable
    hourly: Optional[Tuple[WeatherSample, ...]] = None
    daily: Optional[Tuple[DailySummary, ...]] = None
    image_url: str = ""
    loading: bool = False
    error: str = ""
    history: Tuple[SearchHistoryEntry, ...] = ()
    active_tab: str = "current"
    online: bool = True
    request: Optional[WeatherRequest] = None  # latest request issued

    @property
    def last_seq(self) -> int:
        return self.request.seq if self.request else 0


def begin_request(
    state: SessionState,
    lat: float,
    lon: float,
    city: str = "",
    country: str = "",
    silent: bool = False,
) -> Tuple[SessionState, WeatherRequest]:
    """Issue a new request; any request still in flight becomes stale."""
    request = WeatherRequest(
        seq=state.last_seq + 1,
        lat=lat,
        lon=lon,
        units=state.units,
        city=city,
        country=country,
        silent=silent,
    )
    new_state = replace(
        state,
        request=request,
        loading=state.loading if silent else True,
        error="",
    )
    return new_state, request


def is_current(state: SessionState, seq: int) -> bool:
    return seq == state.last_seq


def receive_weather(
    state: SessionState,
    seq: int,
    current: CurrentWeather,
    forecast: Optional[ForecastSeries],
    hourly: Optional[Sequence[WeatherSample]],
) -> SessionState:
    """
    Store the result of request ``seq``.

    Results of superseded requests are dropped. Results fetched in another
    unit system than the session's (the unit was toggled mid-flight) are
    retargeted first.
    """
    if not is_current(state, seq):
        logging.info(f"Discarding stale response for request {seq} (latest is {state.last_seq})")
        return state

    aggregator = ForecastAggregator()
    hourly = tuple(hourly) if hourly is not None else None
    if current.units != state.units:
        current, forecast, hourly = aggregator.retarget(current, forecast, hourly, state.units)

    daily = tuple(aggregator.summarize_daily(forecast)) if forecast is not None else None
    return replace(
        state,
        current=current,
        forecast=forecast,
        hourly=hourly,
        daily=daily,
        loading=False,
        error="",
    )


def receive_failure(state: SessionState, seq: int, message: str) -> SessionState:
    """Record a failed request; stale failures are ignored."""
    if not is_current(state, seq):
        logging.info(f"Discarding stale failure for request {seq} (latest is {state.last_seq})")
        return state
    return replace(state, loading=False, error=message)


def toggle_units(state: SessionState, units: str) -> SessionState:
    """Switch unit system, converting everything already fetched exactly once."""
    if units not in UNIT_SYSTEMS:
        raise ValueError(f"Unsupported unit system: {units}")
    if units == state.units:
        return state
    if state.current is None:
        return replace(state, units=units)

    aggregator = ForecastAggregator()
    current, forecast, hourly = aggregator.retarget(state.current, state.forecast, state.hourly, units)
    daily = tuple(aggregator.summarize_daily(forecast)) if forecast is not None else None
    return replace(state, units=units, current=current, forecast=forecast, hourly=hourly, daily=daily)


def select_tab(state: SessionState, tab: str) -> SessionState:
    if tab not in TABS:
        raise ValueError(f"Unknown tab: {tab}")
    return replace(state, active_tab=tab)


def set_online(state: SessionState, online: bool) -> SessionState:
    return replace(state, online=online)


def set_history(state: SessionState, entries: Sequence[SearchHistoryEntry]) -> SessionState:
    return replace(state, history=tuple(entries))


def set_image(state: SessionState, seq: int, image_url: str) -> SessionState:
    if not is_current(state, seq):
        return state
    return replace(state, image_url=image_url)


def dismiss_error(state: SessionState) -> SessionState:
    return replace(state, error="")
