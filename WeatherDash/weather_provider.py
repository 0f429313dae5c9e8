"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from weather_data import CurrentWeather, ForecastSeries


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def get_current(self, lat: float, lon: float, units: str) -> CurrentWeather:
        """
        Fetch current weather data.

        Args:
            lat: Latitude (-90 to 90)
            lon: Longitude (-180 to 180)
            units: "metric" or "imperial"

        Returns:
            CurrentWeather: Current weather and the location it belongs to

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass

    @abstractmethod
    def get_forecast(self, lat: float, lon: float, units: str) -> ForecastSeries:
        """
        Fetch the 5-day forecast at a 3-hour cadence.

        Returns:
            ForecastSeries: Forecast samples ordered by timestamp

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""
    retryable = False


class RateLimitedError(WeatherProviderError):
    """Provider refused the request because of rate limiting (HTTP 429)."""
    retryable = True


class NotFoundError(WeatherProviderError):
    """Requested location does not exist (HTTP 404)."""


class ProviderTimeoutError(WeatherProviderError):
    """Request to the provider timed out."""
    retryable = True


class NetworkUnavailableError(WeatherProviderError):
    """Provider could not be reached."""
    retryable = True
