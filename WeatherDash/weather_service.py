"""Weather service with caching and retry/backoff."""
import logging
import time
from typing import Any, Callable, Dict, Tuple
from forecast_summary import window_hourly
from weather_provider import RateLimitedError, WeatherProviderBase, WeatherProviderError
from weather_data import CurrentWeather, ForecastSeries


class WeatherService:
    """
    Service that wraps a weather provider with caching and retries.

    Responses are cached per (kind, lat, lon, units); get_hourly called after
    get_forecast reuses the cached forecast. Concurrent calls for the same key
    are not merged, so callers needing both should cut the hourly window from
    the forecast they already hold.
    Transient failures (rate limits, timeouts, network) are retried with
    increasing backoff; anything else is raised to the caller unchanged.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        cache_ttl_seconds: int = 240,  # shorter than the 5 minute auto-refresh
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0
    ):
        """
        Initialize weather service.

        Args:
            provider: Weather provider to use
            cache_ttl_seconds: How long to cache results before fetching new data
            max_retries: Maximum number of attempts on transient errors
            retry_delay_seconds: Base delay between retries
        """
        self.provider = provider
        self.cache_ttl_seconds = cache_ttl_seconds
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

        self._cache: Dict[Tuple, Tuple[float, Any]] = {}

    def get_current(self, lat: float, lon: float, units: str) -> CurrentWeather:
        """
        Get current weather, using cache if still fresh.

        Raises:
            WeatherProviderError: If the fetch fails after all retries
        """
        return self._get(("current", lat, lon, units), lambda: self.provider.get_current(lat, lon, units))

    def get_forecast(self, lat: float, lon: float, units: str) -> ForecastSeries:
        """
        Get the 5-day forecast, using cache if still fresh.

        Raises:
            WeatherProviderError: If the fetch fails after all retries
        """
        return self._get(("forecast", lat, lon, units), lambda: self.provider.get_forecast(lat, lon, units))

    def get_hourly(self, lat: float, lon: float, units: str) -> ForecastSeries:
        """Get the next 24 hours, derived from the forecast."""
        return window_hourly(self.get_forecast(lat, lon, units))

    def invalidate(self) -> None:
        """Drop every cached response."""
        self._cache.clear()

    def _get(self, key: Tuple, fetch: Callable[[], Any]) -> Any:
        current_time = time.time()

        cached = self._cache.get(key)
        if cached is not None:
            cache_age = current_time - cached[0]
            if cache_age < self.cache_ttl_seconds:
                logging.debug(f"Using cached {key[0]} data (age: {cache_age:.1f}s, TTL: {self.cache_ttl_seconds}s)")
                return cached[1]
            logging.info(f"Cache expired for {key[0]} (age: {cache_age:.1f}s > TTL: {self.cache_ttl_seconds}s), fetching new data")

        data = self._fetch_with_retry(key[0], fetch)
        self._cache[key] = (current_time, data)
        return data

    def _fetch_with_retry(self, kind: str, fetch: Callable[[], Any]) -> Any:
        logging.info(f"Fetching {kind} weather data from provider...")
        for attempt in range(self.max_retries):
            try:
                logging.debug(f"Weather fetch attempt {attempt + 1}/{self.max_retries}")
                data = fetch()
                logging.info(f"Weather fetch successful: {kind}")
                return data
            except WeatherProviderError as e:
                logging.warning(f"Weather fetch attempt {attempt + 1} failed: {e}")
                # Don't retry on not found, auth or parse errors
                if not e.retryable:
                    logging.error("Non-retryable error, stopping retries")
                    raise
                if attempt == self.max_retries - 1:
                    logging.error(f"Failed to fetch {kind} weather after {self.max_retries} attempts")
                    raise
                retry_delay = self.retry_delay_seconds * (attempt + 1)
                if isinstance(e, RateLimitedError):
                    # Rate limit - wait longer
                    retry_delay *= 2
                logging.info(f"Retrying in {retry_delay}s...")
                time.sleep(retry_delay)
