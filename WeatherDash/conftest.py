"""Shared fixtures for the test suite."""
import pytest

from weather_data import METRIC, CurrentWeather, Location, WeatherCondition, WeatherSample


@pytest.fixture
def make_sample():
    """Factory for WeatherSample with sensible defaults."""
    def _make(
        timestamp=1704099600,
        temp=20.0,
        condition="Clear",
        humidity=60,
        wind_speed=5.0,
        units=METRIC,
        icon_code="01d",
        **kwargs
    ):
        fields = dict(
            timestamp=timestamp,
            temp=temp,
            feels_like=kwargs.pop("feels_like", temp - 1),
            temp_min=kwargs.pop("temp_min", temp - 2),
            temp_max=kwargs.pop("temp_max", temp + 2),
            humidity=humidity,
            pressure=kwargs.pop("pressure", 1013),
            wind_speed=wind_speed,
            condition=WeatherCondition(condition, kwargs.pop("description", condition.lower()), icon_code),
            units=units,
        )
        fields.update(kwargs)
        return WeatherSample(**fields)
    return _make


@pytest.fixture
def sample_location():
    return Location(name="London", country="GB", lat=51.51, lon=-0.13, timezone_offset=0)


@pytest.fixture
def make_current(make_sample, sample_location):
    """Factory for CurrentWeather around a sample."""
    def _make(location=None, **kwargs):
        return CurrentWeather(
            sample=make_sample(**kwargs),
            location=location or sample_location,
            sunrise=1704096000,
            sunset=1704124800,
        )
    return _make
