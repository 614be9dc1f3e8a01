"""Derive comparison insights from two aligned daily series."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from weathercompare.core.config import settings
from weathercompare.models import (
    Insight,
    InsightKind,
    LocationSeries,
    RainQualifier,
    TrendDirection,
    WeatherRecord,
    WindQualifier,
)
from weathercompare.services.aggregation import round_half_up
from weathercompare.services.metrics import record_insight

logger = logging.getLogger(__name__)

ICON_THERMOMETER = "\U0001F321️"
ICON_SUN = "☀️"
ICON_CHART_UP = "\U0001F4C8"
ICON_CHART_DOWN = "\U0001F4C9"
ICON_COLD_FACE = "\U0001F976"

MS_TO_KMH = 3.6


@dataclass(frozen=True)
class InsightThresholds:
    """Gates that decide whether an insight is emitted at all."""

    temp_diff_c: float = 1.0
    trend_change_c: float = 2.0
    wind_chill_gap_c: float = 3.0
    wind_chill_max_temp_c: float = 10.0
    wind_chill_min_wind_kmh: float = 4.8
    ideal_temp_c: float = 15.0
    light_wind_limit_mps: float = 5.0

    @classmethod
    def from_settings(cls) -> "InsightThresholds":
        return cls(
            temp_diff_c=settings.insight_temp_diff_threshold_c,
            trend_change_c=settings.insight_trend_change_threshold_c,
            wind_chill_gap_c=settings.insight_wind_chill_gap_c,
            wind_chill_max_temp_c=settings.insight_wind_chill_max_temp_c,
            wind_chill_min_wind_kmh=settings.insight_wind_chill_min_wind_kmh,
            ideal_temp_c=settings.insight_ideal_temp_c,
            light_wind_limit_mps=settings.insight_light_wind_limit_mps,
        )


def compute_wind_chill(
    temperature_c: float,
    wind_speed_mps: float,
    thresholds: InsightThresholds | None = None,
) -> float | None:
    """Wind chill in °C, or None outside the formula's validity range."""

    limits = thresholds or InsightThresholds.from_settings()
    wind_kmh = wind_speed_mps * MS_TO_KMH
    if temperature_c > limits.wind_chill_max_temp_c or wind_kmh < limits.wind_chill_min_wind_kmh:
        return None
    v_exp = math.pow(wind_kmh, 0.16)
    return 13.12 + 0.6215 * temperature_c - 11.37 * v_exp + 0.3965 * temperature_c * v_exp


def linear_regression_slope(values: Sequence[float]) -> float:
    """Least-squares slope of ``values`` against their index; 0 below two points."""

    n = len(values)
    if n < 2:
        return 0.0
    sum_x = sum_y = sum_xy = sum_x2 = 0.0
    for i, value in enumerate(values):
        sum_x += i
        sum_y += value
        sum_xy += i * value
        sum_x2 += i * i
    return (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)


def outdoor_score(record: WeatherRecord, ideal_temp_c: float = 15.0) -> float:
    return 10 - abs(record.temperature - ideal_temp_c) - record.wind_speed - record.precipitation * 10


def find_biggest_temperature_difference(
    series_a: LocationSeries, series_b: LocationSeries, thresholds: InsightThresholds
) -> Insight | None:
    records_a = series_a.records
    records_b = series_b.records
    length = min(len(records_a), len(records_b))
    if length == 0:
        return None

    max_diff = 0.0
    max_idx = 0
    for i in range(length):
        diff = abs(records_a[i].temperature - records_b[i].temperature)
        if diff > max_diff:
            max_diff = diff
            max_idx = i

    if max_diff < thresholds.temp_diff_c:
        return None

    warmer = (
        series_a.location_name
        if records_a[max_idx].temperature >= records_b[max_idx].temperature
        else series_b.location_name
    )
    return Insight(
        kind=InsightKind.TEMPERATURE_DIFFERENCE,
        icon=ICON_THERMOMETER,
        headline_key="insights.tempDiff.headline",
        headline_params={
            "date": records_a[max_idx].date,
            "warmer_location": warmer,
            "diff": round_half_up(max_diff, 1),
        },
        description_key="insights.tempDiff.description",
    )


def find_best_outdoor_day(
    series_a: LocationSeries, series_b: LocationSeries, thresholds: InsightThresholds
) -> Insight | None:
    best_score = -math.inf
    best_record: WeatherRecord | None = None
    best_location = ""

    # Series A is scanned first and only a strictly better score replaces the pick.
    for series in (series_a, series_b):
        for record in series.records:
            score = outdoor_score(record, thresholds.ideal_temp_c)
            if score > best_score:
                best_score = score
                best_record = record
                best_location = series.location_name

    if best_record is None:
        return None

    wind = (
        WindQualifier.LIGHT
        if best_record.wind_speed < thresholds.light_wind_limit_mps
        else WindQualifier.MODERATE
    )
    rain = RainQualifier.NONE if best_record.precipitation == 0 else RainQualifier.SOME
    return Insight(
        kind=InsightKind.BEST_OUTDOOR_DAY,
        icon=ICON_SUN,
        headline_key="insights.bestDay.headline",
        headline_params={"date": best_record.date, "location": best_location},
        description_key="insights.bestDay.description",
        description_params={
            "temperature": round_half_up(best_record.temperature, 1),
            "wind": wind,
            "rain": rain,
        },
    )


def detect_temperature_trend(
    series_a: LocationSeries, series_b: LocationSeries, thresholds: InsightThresholds
) -> Insight | None:
    temps_a = [record.temperature for record in series_a.records]
    temps_b = [record.temperature for record in series_b.records]
    slope_a = linear_regression_slope(temps_a)
    slope_b = linear_regression_slope(temps_b)
    change_a = abs(slope_a * (len(temps_a) - 1))
    change_b = abs(slope_b * (len(temps_b) - 1))

    if change_a >= change_b:
        slope, change, location = slope_a, change_a, series_a.location_name
    else:
        slope, change, location = slope_b, change_b, series_b.location_name

    if change < thresholds.trend_change_c:
        return None

    direction = TrendDirection.WARMING if slope > 0 else TrendDirection.COOLING
    return Insight(
        kind=InsightKind.TEMPERATURE_TREND,
        icon=ICON_CHART_UP if direction is TrendDirection.WARMING else ICON_CHART_DOWN,
        headline_key="insights.tempTrend.headline",
        headline_params={"location": location, "direction": direction},
        description_key=f"insights.tempTrend.{direction.value}",
        description_params={"change": round_half_up(change, 1)},
    )


def find_wind_chill_alert(
    series_a: LocationSeries, series_b: LocationSeries, thresholds: InsightThresholds
) -> Insight | None:
    worst: tuple[float, WeatherRecord, float, str] | None = None

    for series in (series_a, series_b):
        for record in series.records:
            feels_like = compute_wind_chill(record.temperature, record.wind_speed, thresholds)
            if feels_like is None:
                continue
            gap = record.temperature - feels_like
            if worst is None or gap > worst[0]:
                worst = (gap, record, feels_like, series.location_name)

    if worst is None or worst[0] < thresholds.wind_chill_gap_c:
        return None

    _gap, record, feels_like, location = worst
    return Insight(
        kind=InsightKind.WIND_CHILL,
        icon=ICON_COLD_FACE,
        headline_key="insights.windChill.headline",
        headline_params={
            "date": record.date,
            "location": location,
            "feels_like": round_half_up(feels_like, 1),
        },
        description_key="insights.windChill.description",
        description_params={"actual": round_half_up(record.temperature, 1)},
    )


def generate_insights(
    series_a: LocationSeries,
    series_b: LocationSeries,
    thresholds: InsightThresholds | None = None,
) -> list[Insight]:
    """Return up to four insights in a fixed order.

    Records are compared by index; callers are expected to pass series that
    cover the same days.
    """

    limits = thresholds or InsightThresholds.from_settings()
    candidates = [
        find_biggest_temperature_difference(series_a, series_b, limits),
        find_best_outdoor_day(series_a, series_b, limits),
        detect_temperature_trend(series_a, series_b, limits),
        find_wind_chill_alert(series_a, series_b, limits),
    ]
    insights = [insight for insight in candidates if insight is not None]
    for insight in insights:
        record_insight(insight.kind.value)
    logger.debug(
        "Generated %d insights for %s vs %s",
        len(insights),
        series_a.location_name,
        series_b.location_name,
    )
    return insights


__all__ = [
    "InsightThresholds",
    "compute_wind_chill",
    "detect_temperature_trend",
    "find_best_outdoor_day",
    "find_biggest_temperature_difference",
    "find_wind_chill_alert",
    "generate_insights",
    "linear_regression_slope",
    "outdoor_score",
]
