"""Weather domain model - pure data structures independent of any API."""
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple

METRIC = "metric"
IMPERIAL = "imperial"
UNIT_SYSTEMS = (METRIC, IMPERIAL)


@dataclass(frozen=True)
class WeatherCondition:
    """Weather condition label as reported by the provider."""
    main: str  # e.g., "Clouds", "Rain", "Clear"
    description: str  # e.g., "broken clouds", "light rain"
    icon_code: str = ""  # e.g., "04d"


@dataclass(frozen=True)
class WeatherSample:
    """
    One observation (or forecast slot) at a point in time.

    All temperature fields and wind_speed are expressed in the unit system
    named by ``units``: Celsius and m/s for "metric", Fahrenheit and mph
    for "imperial".
    """
    timestamp: int  # UNIX timestamp (UTC)
    temp: float
    feels_like: float
    temp_min: float
    temp_max: float
    humidity: int  # percentage
    pressure: int  # hPa
    wind_speed: float
    condition: WeatherCondition
    units: str = METRIC

    # Not reported for every sample
    cloudiness: Optional[int] = None  # percentage
    visibility: Optional[int] = None  # meters


@dataclass(frozen=True)
class Location:
    """Where a set of samples was observed."""
    name: str
    country: str
    lat: float
    lon: float
    timezone_offset: int = 0  # Offset from UTC in seconds


@dataclass(frozen=True)
class CurrentWeather:
    """Current conditions together with the location they belong to."""
    sample: WeatherSample
    location: Location
    sunrise: Optional[int] = None  # UNIX timestamp (UTC)
    sunset: Optional[int] = None

    @property
    def units(self) -> str:
        return self.sample.units

    def is_stale(self, max_age_seconds: int = 900) -> bool:
        """Check if this data is stale (older than max_age_seconds)."""
        age = int(time.time()) - self.sample.timestamp
        return age > max_age_seconds


# Forecast samples at a 3-hour cadence, ordered by timestamp (at most 40)
ForecastSeries = Tuple[WeatherSample, ...]


@dataclass(frozen=True)
class DailySummary:
    """Aggregate of one calendar day of forecast samples."""
    date: date
    day_name_long: str  # e.g., "Monday"
    day_name_short: str  # e.g., "Mon"
    avg_temp: float
    max_temp: float
    min_temp: float
    dominant_condition: WeatherCondition
    avg_humidity: float
    avg_wind_speed: float
    units: str = METRIC


@dataclass(frozen=True)
class SearchHistoryEntry:
    """A city the user explicitly searched for."""
    id: str
    name: str
    country: str
    lat: float
    lon: float
    saved_at: int = field(default_factory=lambda: int(time.time()))

    @property
    def key(self) -> Tuple[str, str]:
        return (self.name, self.country)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "country": self.country,
            "lat": self.lat,
            "lon": self.lon,
            "saved_at": self.saved_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SearchHistoryEntry":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            country=data.get("country", ""),
            lat=float(data["lat"]),
            lon=float(data["lon"]),
            saved_at=int(data.get("saved_at", 0)),
        )

    @classmethod
    def for_location(cls, name: str, country: str, lat: float, lon: float) -> "SearchHistoryEntry":
        """Create a new entry stamped with the current time."""
        now = int(time.time())
        return cls(id=f"{name}-{now}", name=name, country=country, lat=lat, lon=lon, saved_at=now)
