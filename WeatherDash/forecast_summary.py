"""Forecast aggregation - daily buckets, daily summaries and the hourly window."""
from collections import OrderedDict
from datetime import date, datetime
from typing import Dict, Iterable, List, Sequence, Tuple

from weather_data import DailySummary, WeatherSample

MAX_DAYS = 5
HOURLY_WINDOW_SIZE = 8  # 24 hours at a 3-hour cadence


def bucket_by_day(series: Iterable[WeatherSample]) -> "OrderedDict[date, List[WeatherSample]]":
    """
    Group samples by calendar day.

    The day is taken from each sample's timestamp in the local timezone of
    the running process, not the forecast location's timezone. Buckets keep
    the order in which their first sample appeared; samples keep input order.
    """
    buckets: "OrderedDict[date, List[WeatherSample]]" = OrderedDict()
    for sample in series:
        day = datetime.fromtimestamp(sample.timestamp).date()
        buckets.setdefault(day, []).append(sample)
    return buckets


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def summarize_day(samples: Sequence[WeatherSample]) -> DailySummary:
    """
    Summarize one non-empty day bucket.

    The dominant condition is the most frequent ``condition.main``; on a tie
    the label seen first wins. The emitted condition is the first sample's
    condition carrying that label.
    """
    temps = [s.temp for s in samples]

    counts: Dict[str, int] = {}
    for sample in samples:
        counts[sample.condition.main] = counts.get(sample.condition.main, 0) + 1
    dominant = None
    for label, count in counts.items():
        if dominant is None or count > counts[dominant]:
            dominant = label
    condition = next(s.condition for s in samples if s.condition.main == dominant)

    first = datetime.fromtimestamp(samples[0].timestamp)
    return DailySummary(
        date=first.date(),
        day_name_long=first.strftime("%A"),
        day_name_short=first.strftime("%a"),
        avg_temp=_mean(temps),
        max_temp=max(temps),
        min_temp=min(temps),
        dominant_condition=condition,
        avg_humidity=_mean([s.humidity for s in samples]),
        avg_wind_speed=_mean([s.wind_speed for s in samples]),
        units=samples[0].units,
    )


def summarize_daily(buckets: "OrderedDict[date, List[WeatherSample]]", max_days: int = MAX_DAYS) -> List[DailySummary]:
    """Summarize the first ``max_days`` buckets in order. Never pads."""
    days = list(buckets.items())[:max_days]
    return [summarize_day(samples) for _, samples in days if samples]


def window_hourly(series: Sequence[WeatherSample], size: int = HOURLY_WINDOW_SIZE) -> Tuple[WeatherSample, ...]:
    """Return the first ``size`` samples (or all of them if fewer), unchanged."""
    return tuple(series[:size])
