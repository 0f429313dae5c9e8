"""Unit conversion between metric (Celsius, m/s) and imperial (Fahrenheit, mph)."""
import math

from weather_data import METRIC, IMPERIAL

MPS_TO_MPH = 2.237


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves towards positive infinity (2.5 -> 3, -2.5 -> -2)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def fahrenheit_to_celsius(value: float) -> float:
    return (value - 32) * 5 / 9


def celsius_to_fahrenheit(value: float) -> float:
    return value * 9 / 5 + 32


def mph_to_mps(value: float) -> float:
    return value / MPS_TO_MPH


def mps_to_mph(value: float) -> float:
    return value * MPS_TO_MPH


def convert_temperature(value: float, target_units: str) -> float:
    """
    Convert a temperature into the target unit system.

    This is a toggle: the source system is implied to be the other one.
    Converting twice in the same direction corrupts the value.

    Args:
        value: Temperature in the system opposite to target_units
        target_units: "metric" or "imperial" (anything else is a no-op)

    Returns:
        Converted temperature rounded to the nearest integer
    """
    if target_units == METRIC:
        return round_half_up(fahrenheit_to_celsius(value))
    if target_units == IMPERIAL:
        return round_half_up(celsius_to_fahrenheit(value))
    return value


def convert_wind_speed(value: float, target_units: str) -> float:
    """
    Convert a wind speed into the target unit system (mph <-> m/s).

    Same toggle semantics as convert_temperature; result is rounded to
    one decimal place.
    """
    if target_units == METRIC:
        return round_half_up(mph_to_mps(value), 1)
    if target_units == IMPERIAL:
        return round_half_up(mps_to_mph(value), 1)
    return value


def temperature_symbol(units: str) -> str:
    return "°F" if units == IMPERIAL else "°C"


def wind_speed_label(units: str) -> str:
    return "mph" if units == IMPERIAL else "m/s"
