"""OpenWeather Current Weather and 5 day / 3 hour Forecast API provider implementation."""
import logging
import requests
from typing import Any, Dict
from weather_provider import (
    NetworkUnavailableError,
    NotFoundError,
    ProviderTimeoutError,
    RateLimitedError,
    WeatherProviderBase,
    WeatherProviderError,
)
from weather_data import CurrentWeather, ForecastSeries, Location, WeatherCondition, WeatherSample


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using the free OpenWeather 2.5 APIs.

    Current conditions: https://openweathermap.org/current
    Forecast (5 days, 3 hour steps, 40 slots): https://openweathermap.org/forecast5
    """

    BASE_URL = "https://api.openweathermap.org/data/2.5"

    def __init__(
        self,
        api_key: str,
        lang: str = "en",
        timeout: int = 10
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key
            lang: Language code for descriptions (e.g., "en", "de")
            timeout: HTTP request timeout in seconds
        """
        self.api_key = api_key
        self.lang = lang
        self.timeout = timeout

    def get_current(self, lat: float, lon: float, units: str) -> CurrentWeather:
        """
        Fetch current weather from the Current Weather API.

        Returns:
            CurrentWeather: Current weather information

        Raises:
            WeatherProviderError: If the API request fails
        """
        data = self._request("weather", lat, lon, units)
        try:
            sample = self._parse_sample(data, units)
            sys_data = data.get("sys", {})
            coord = data.get("coord", {})
            location = Location(
                name=data.get("name", ""),
                country=sys_data.get("country", ""),
                lat=coord.get("lat", lat),
                lon=coord.get("lon", lon),
                timezone_offset=data.get("timezone", 0),  # Note: Current API uses "timezone" not "timezone_offset"
            )
            current = CurrentWeather(
                sample=sample,
                location=location,
                sunrise=sys_data.get("sunrise"),
                sunset=sys_data.get("sunset"),
            )
        except (KeyError, ValueError, TypeError) as e:
            logging.error(f"Failed to parse API response: {e}", exc_info=True)
            raise WeatherProviderError(f"Failed to parse response: {str(e)}") from e

        logging.info(f"Successfully parsed current weather for {location.name}: {sample.temp} {units}, {sample.condition.main}")
        return current

    def get_forecast(self, lat: float, lon: float, units: str) -> ForecastSeries:
        """
        Fetch the 5 day / 3 hour forecast.

        Returns:
            ForecastSeries: Forecast samples ordered by timestamp

        Raises:
            WeatherProviderError: If the API request fails
        """
        data = self._request("forecast", lat, lon, units)
        items = data.get("list")
        if items is None:
            logging.error("Response missing 'list' array")
            raise WeatherProviderError("Response missing 'list' array")

        try:
            series = tuple(self._parse_sample(item, units) for item in items)
        except (KeyError, ValueError, TypeError) as e:
            logging.error(f"Failed to parse API response: {e}", exc_info=True)
            raise WeatherProviderError(f"Failed to parse response: {str(e)}") from e

        logging.info(f"Successfully parsed forecast: {len(series)} samples")
        return tuple(sorted(series, key=lambda s: s.timestamp))

    def _request(self, endpoint: str, lat: float, lon: float, units: str) -> Dict[str, Any]:
        url = f"{self.BASE_URL}/{endpoint}"
        params = {
            "lat": lat,
            "lon": lon,
            "appid": self.api_key,
            "units": units,
            "lang": self.lang,
        }

        try:
            logging.info(f"Making OpenWeather API request: {url}")
            logging.debug(f"Request parameters: lat={lat}, lon={lon}, units={units}, lang={self.lang}")

            response = requests.get(url, params=params, timeout=self.timeout)

            logging.info(f"API response status: {response.status_code}")

            if not response.ok:
                logging.error(f"API request failed with status {response.status_code}")
                self._handle_error_response(response)

            data = response.json()
            logging.debug(f"API response (truncated): {str(data)[:500]}...")
            return data

        except requests.exceptions.Timeout as e:
            logging.error(f"Timeout during API request: {e}")
            raise ProviderTimeoutError(f"Request timed out: {str(e)}") from e
        except requests.exceptions.ConnectionError as e:
            logging.error(f"Network error during API request: {e}")
            raise NetworkUnavailableError(f"Network error: {str(e)}") from e
        except ValueError as e:
            logging.error(f"Failed to decode API response: {e}")
            raise WeatherProviderError(f"Failed to parse response: {str(e)}") from e
        except requests.exceptions.RequestException as e:
            logging.error(f"Request error during API request: {e}")
            raise WeatherProviderError(f"Network error: {str(e)}") from e

    @staticmethod
    def _parse_sample(data: Dict[str, Any], units: str) -> WeatherSample:
        """Map one current-weather payload or forecast list item to a WeatherSample."""
        weather_array = data.get("weather", [])
        if not weather_array:
            logging.error("Response missing 'weather' array")
            raise WeatherProviderError("Response missing 'weather' array")
        weather = weather_array[0]

        main_data = data.get("main", {})
        if not main_data:
            raise WeatherProviderError("Response missing 'main' block")

        wind_data = data.get("wind", {})
        clouds_data = data.get("clouds", {})
        temp = main_data["temp"]

        return WeatherSample(
            timestamp=int(data.get("dt", 0)),
            temp=temp,
            feels_like=main_data.get("feels_like", temp),
            temp_min=main_data.get("temp_min", temp),
            temp_max=main_data.get("temp_max", temp),
            humidity=int(main_data.get("humidity", 0)),
            pressure=int(main_data.get("pressure", 0)),
            wind_speed=wind_data.get("speed", 0.0) if wind_data else 0.0,
            condition=WeatherCondition(
                main=weather.get("main", "Unknown"),
                description=weather.get("description", ""),
                icon_code=weather.get("icon", ""),
            ),
            units=units,
            cloudiness=clouds_data.get("all") if clouds_data else None,
            visibility=data.get("visibility"),
        )

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from OpenWeather error response."""
        error_cls = WeatherProviderError
        if response.status_code == 429:
            error_cls = RateLimitedError
        elif response.status_code == 404:
            error_cls = NotFoundError

        try:
            error_data = response.json()
        except ValueError:
            # Not JSON, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            raise error_cls(f"HTTP {response.status_code}: {response.text[:200]}")

        cod = error_data.get("cod", response.status_code)
        message = error_data.get("message", "Unknown error")
        logging.error(f"OpenWeather API error response: {error_data}")
        raise error_cls(f"OpenWeather API error {cod}: {message}")
