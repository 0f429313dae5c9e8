"""Geolocation - where "use my location" points to."""
import logging
import os
from abc import ABC, abstractmethod
from typing import Optional, Tuple


class LocationError(Exception):
    """Exception raised when the current position cannot be determined."""
    pass


class LocationDeniedError(LocationError):
    """Access to the position was refused or is not configured."""


class LocationUnavailableError(LocationError):
    """The position could not be determined."""


class LocationTimeoutError(LocationError):
    """Determining the position took longer than allowed."""


class GeolocationProviderBase(ABC):
    """Abstract base class for position sources."""

    @abstractmethod
    def get_current_position(self, timeout_ms: int = 10000) -> Tuple[float, float]:
        """
        Determine the current position.

        Returns:
            Tuple of (lat, lon)

        Raises:
            LocationError: If the position cannot be determined in time
        """
        pass


class ConfiguredGeolocationProvider(GeolocationProviderBase):
    """Reads the position from WEATHER_LAT / WEATHER_LON (or explicit values)."""

    def __init__(self, lat: Optional[str] = None, lon: Optional[str] = None):
        self.lat = lat if lat is not None else os.getenv("WEATHER_LAT")
        self.lon = lon if lon is not None else os.getenv("WEATHER_LON")

    def get_current_position(self, timeout_ms: int = 10000) -> Tuple[float, float]:
        if not self.lat or not self.lon:
            raise LocationDeniedError("Location access denied: set WEATHER_LAT/WEATHER_LON to share your position")

        try:
            lat_val = float(self.lat)
            lon_val = float(self.lon)
        except ValueError as exc:
            raise LocationUnavailableError(f"Invalid coordinates: {exc}") from exc

        if not (-90 <= lat_val <= 90 and -180 <= lon_val <= 180):
            raise LocationUnavailableError(f"Coordinates out of range: {lat_val}, {lon_val}")

        logging.info("Using configured position: lat=%s lon=%s", lat_val, lon_val)
        return lat_val, lon_val
