"""Collapse sub-daily forecast samples into one record per UTC calendar day."""

from __future__ import annotations

import math
from datetime import date, timezone
from typing import Iterable

from weathercompare.models import ForecastSample, WeatherRecord


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` decimals with halves going towards +infinity."""

    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def utc_day(sample: ForecastSample) -> date:
    valid_time = sample.valid_time
    if valid_time.tzinfo is not None:
        valid_time = valid_time.astimezone(timezone.utc)
    return valid_time.date()


def circular_mean(degrees: Iterable[float]) -> float | None:
    """Mean direction in [0, 360) or None for no input."""

    values = list(degrees)
    if not values:
        return None
    sin_sum = sum(math.sin(math.radians(value)) for value in values)
    cos_sum = sum(math.cos(math.radians(value)) for value in values)
    mean = round_half_up(math.degrees(math.atan2(sin_sum, cos_sum))) % 360
    return float(mean)


def aggregate_daily(samples: Iterable[ForecastSample]) -> list[WeatherRecord]:
    """Group samples by UTC date and reduce each group to a daily record.

    Temperature, wind speed and humidity are averaged. Precipitation is a
    rate sampled through the day, so it is summed to approximate the daily
    accumulation.
    """

    groups: dict[date, list[ForecastSample]] = {}
    for sample in samples:
        groups.setdefault(utc_day(sample), []).append(sample)

    daily: list[WeatherRecord] = []
    for day, points in groups.items():
        count = len(points)
        daily.append(
            WeatherRecord(
                date=day,
                temperature=round_half_up(sum(p.temperature for p in points) / count, 1),
                wind_speed=round_half_up(sum(p.wind_speed for p in points) / count, 1),
                humidity=round_half_up(sum(p.humidity for p in points) / count),
                precipitation=round_half_up(sum(p.precipitation for p in points), 1),
                wind_direction=circular_mean(
                    p.wind_direction for p in points if p.wind_direction is not None
                ),
            )
        )

    return sorted(daily, key=lambda record: record.date)


__all__ = ["aggregate_daily", "circular_mean", "round_half_up", "utc_day"]
