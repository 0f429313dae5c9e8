"""Text rendering for the dashboard tabs - pure functions for testability."""
import time
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

from aggregator import ForecastAggregator
from session import SessionState
from units import round_half_up, temperature_symbol, wind_speed_label
from weather_data import CurrentWeather, DailySummary, WeatherCondition, WeatherSample

WEATHER_ICONS = {
    "01d": "☀️", "01n": "🌙", "02d": "⛅", "02n": "☁️",
    "03d": "☁️", "03n": "☁️", "04d": "☁️", "04n": "☁️",
    "09d": "🌧️", "09n": "🌧️", "10d": "🌦️", "10n": "🌦️",
    "11d": "⛈️", "11n": "⛈️", "13d": "❄️", "13n": "❄️",
    "50d": "🌫️", "50n": "🌫️",
}
DEFAULT_ICON = "🌤️"
UNAVAILABLE = "Forecast unavailable"


def get_weather_icon(icon_code: str) -> str:
    """Emoji for an OpenWeather icon code (e.g. "10d")."""
    return WEATHER_ICONS.get(icon_code, DEFAULT_ICON)


def get_condition_text(condition: WeatherCondition) -> str:
    """
    Get short text representation of weather condition.

    Args:
        condition: Weather condition

    Returns:
        Short condition string (e.g., "Cloudy", "Rain", "Clear")
    """
    main = condition.main.lower()

    # Map common conditions to short display strings
    condition_map = {
        "clear": "Clear",
        "clouds": "Cloudy",
        "rain": "Rain",
        "drizzle": "Drizzle",
        "thunderstorm": "Storm",
        "snow": "Snow",
        "mist": "Mist",
        "fog": "Fog",
        "haze": "Haze",
    }

    return condition_map.get(main, condition.main.capitalize())


def format_time(timestamp: int, timezone_offset: int = 0) -> str:
    """Wall-clock time (HH:MM) at a location ``timezone_offset`` seconds from UTC."""
    local = datetime.fromtimestamp(timestamp, tz=timezone(timedelta(seconds=timezone_offset)))
    return local.strftime("%H:%M")


def city_datetime(timezone_offset: int, now: Optional[float] = None) -> Tuple[str, str]:
    """
    Current date and time at a location.

    Returns:
        Tuple of (date, time), e.g. ("Monday, January 01, 2024", "09:30:00 AM")
    """
    if now is None:
        now = time.time()
    local = datetime.fromtimestamp(now, tz=timezone(timedelta(seconds=timezone_offset)))
    return local.strftime("%A, %B %d, %Y"), local.strftime("%I:%M:%S %p")


def format_temperature(value: float, units: str) -> str:
    return f"{int(round_half_up(value))}{temperature_symbol(units)}"


def format_wind(value: float, units: str) -> str:
    return f"{value:.1f} {wind_speed_label(units)}"


def render_current(current: CurrentWeather, alert: bool = False, now: Optional[float] = None) -> List[str]:
    """Lines for the "current" tab."""
    sample = current.sample
    location = current.location
    units = sample.units
    date_text, time_text = city_datetime(location.timezone_offset, now)

    lines = [
        f"{location.name}, {location.country}",
        f"{date_text}  {time_text}",
    ]
    if alert:
        lines.append("⚠️  Extreme weather alert")
    lines.append(
        f"{get_weather_icon(sample.condition.icon_code)} {format_temperature(sample.temp, units)}  "
        f"{sample.condition.description.capitalize()}"
    )
    lines.append(
        f"H {format_temperature(sample.temp_max, units)}  L {format_temperature(sample.temp_min, units)}  "
        f"Feels like {format_temperature(sample.feels_like, units)}"
    )
    lines.append(f"Humidity {sample.humidity}%  Wind {format_wind(sample.wind_speed, units)}  Pressure {sample.pressure} hPa")
    if sample.visibility is not None:
        lines.append(f"Visibility {sample.visibility / 1000:.1f} km")
    if current.sunrise and current.sunset:
        lines.append(
            f"Sunrise {format_time(current.sunrise, location.timezone_offset)}  "
            f"Sunset {format_time(current.sunset, location.timezone_offset)}"
        )
    return lines


def render_hourly(hourly: Optional[Sequence[WeatherSample]], timezone_offset: int = 0) -> List[str]:
    """Lines for the "hourly" tab; the first slot is labelled "Now"."""
    if hourly is None:
        return [UNAVAILABLE]
    lines = []
    for index, sample in enumerate(hourly):
        label = "Now" if index == 0 else format_time(sample.timestamp, timezone_offset)
        lines.append(
            f"{label:>5}  {get_weather_icon(sample.condition.icon_code)} "
            f"{format_temperature(sample.temp, sample.units):>6}  {get_condition_text(sample.condition)}"
        )
    return lines


def render_daily(daily: Optional[Sequence[DailySummary]], aggregator: Optional[ForecastAggregator] = None) -> List[str]:
    """Lines for the "forecast" (5-day) tab."""
    if daily is None:
        return [UNAVAILABLE]
    aggregator = aggregator or ForecastAggregator()
    lines = []
    for day in daily:
        units = day.units
        marker = " ⚠️" if aggregator.classify_alerts(day) else ""
        lines.append(
            f"{day.day_name_short:<4} {get_weather_icon(day.dominant_condition.icon_code)} "
            f"{format_temperature(day.avg_temp, units):>6}  "
            f"H {format_temperature(day.max_temp, units)} L {format_temperature(day.min_temp, units)}  "
            f"{int(round_half_up(day.avg_humidity))}%  {format_wind(day.avg_wind_speed, units)}  "
            f"{get_condition_text(day.dominant_condition)}{marker}"
        )
    return lines


def render_state(state: SessionState, now: Optional[float] = None) -> List[str]:
    """Lines for whatever the session currently shows."""
    if state.loading:
        return ["Loading..."]
    if state.error:
        return [f"Error: {state.error}"]
    if state.current is None:
        return ["Search for a city to see the weather."]

    if state.active_tab == "hourly":
        return render_hourly(state.hourly, state.current.location.timezone_offset)
    if state.active_tab == "forecast":
        return render_daily(state.daily)
    alert = ForecastAggregator().classify_alerts(state.current)
    return render_current(state.current, alert=alert, now=now)


def render_history(state: SessionState) -> List[str]:
    if not state.history:
        return ["No recent searches."]
    return [f"{entry.name}, {entry.country}  ({entry.lat:.2f}, {entry.lon:.2f})" for entry in state.history]
