"""Aggregation facade used by the dashboard: summaries, windows, unit retargeting, alerts."""
import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple, Union

from extreme_weather import is_extreme
from forecast_summary import bucket_by_day, summarize_daily, window_hourly
from units import convert_temperature, convert_wind_speed, fahrenheit_to_celsius, mph_to_mps
from weather_data import (
    IMPERIAL,
    UNIT_SYSTEMS,
    CurrentWeather,
    DailySummary,
    ForecastSeries,
    WeatherSample,
)


class ForecastAggregator:
    """
    Entry point for turning fetched weather into what the dashboard shows.

    Every operation is pure: inputs are never mutated and new values are
    returned. Unit retargeting relies on the ``units`` tag each sample
    carries, so asking for the system the data is already in is a no-op.
    """

    def summarize_daily(self, series: Sequence[WeatherSample]) -> List[DailySummary]:
        """Bucket the series by calendar day and summarize up to five days."""
        return summarize_daily(bucket_by_day(series))

    def window_hourly(self, series: Sequence[WeatherSample]) -> Tuple[WeatherSample, ...]:
        """First 24 hours (8 samples) of the series."""
        return window_hourly(series)

    def retarget(
        self,
        current: Optional[CurrentWeather],
        forecast: Optional[ForecastSeries],
        hourly: Optional[Sequence[WeatherSample]],
        target_units: str,
    ) -> Tuple[Optional[CurrentWeather], Optional[ForecastSeries], Optional[Tuple[WeatherSample, ...]]]:
        """
        Convert current weather, forecast and hourly window in one step.

        Any of the three may be None (e.g. the forecast fetch failed) and is
        passed through as None.

        Args:
            current: Current conditions
            forecast: Forecast samples
            hourly: Hourly window samples
            target_units: "metric" or "imperial"

        Returns:
            Tuple of (current, forecast, hourly) in target_units

        Raises:
            ValueError: If target_units is not a supported unit system
        """
        if target_units not in UNIT_SYSTEMS:
            raise ValueError(f"Unsupported unit system: {target_units}")

        new_current = None
        if current is not None:
            new_current = replace(current, sample=self._retarget_sample(current.sample, target_units))
        new_forecast = None
        if forecast is not None:
            new_forecast = tuple(self._retarget_sample(s, target_units) for s in forecast)
        new_hourly = None
        if hourly is not None:
            new_hourly = tuple(self._retarget_sample(s, target_units) for s in hourly)

        logging.info(f"Retargeted weather data to {target_units}")
        return new_current, new_forecast, new_hourly

    @staticmethod
    def _retarget_sample(sample: WeatherSample, target_units: str) -> WeatherSample:
        if sample.units == target_units:
            logging.debug(f"Sample at {sample.timestamp} already in {target_units}, leaving unchanged")
            return sample
        return replace(
            sample,
            temp=convert_temperature(sample.temp, target_units),
            feels_like=convert_temperature(sample.feels_like, target_units),
            temp_min=convert_temperature(sample.temp_min, target_units),
            temp_max=convert_temperature(sample.temp_max, target_units),
            wind_speed=convert_wind_speed(sample.wind_speed, target_units),
            units=target_units,
        )

    def classify_alerts(self, weather: Union[CurrentWeather, DailySummary]) -> bool:
        """
        Check current conditions or a daily summary for extreme weather.

        Imperial values are normalized to Celsius and m/s before the
        thresholds are applied.
        """
        if isinstance(weather, CurrentWeather):
            condition = weather.sample.condition.main
            temp = weather.sample.temp
            wind = weather.sample.wind_speed
        else:
            condition = weather.dominant_condition.main
            temp = weather.avg_temp
            wind = weather.avg_wind_speed

        if weather.units == IMPERIAL:
            temp = fahrenheit_to_celsius(temp)
            wind = mph_to_mps(wind)
        return is_extreme(condition, temp, wind)
