"""Extreme weather classification."""

EXTREME_CONDITIONS = frozenset({"Thunderstorm", "Snow", "Tornado", "Hurricane"})

MAX_SAFE_TEMP_C = 40
MIN_SAFE_TEMP_C = -10
MAX_SAFE_WIND_MPS = 20


def is_extreme(condition_main: str, temp_c: float, wind_mps: float) -> bool:
    """
    Decide whether conditions warrant an extreme weather alert.

    Thresholds are in Celsius and m/s; callers must normalize imperial
    values first.

    Args:
        condition_main: Condition label (case-sensitive, e.g. "Thunderstorm")
        temp_c: Temperature in Celsius
        wind_mps: Wind speed in m/s

    Returns:
        True if the condition, temperature or wind is extreme
    """
    if condition_main in EXTREME_CONDITIONS:
        return True
    if temp_c > MAX_SAFE_TEMP_C or temp_c < MIN_SAFE_TEMP_C:
        return True
    return wind_mps > MAX_SAFE_WIND_MPS
