"""Tests for the insight engine."""

from datetime import date, timedelta

import pytest

from weathercompare.models import InsightKind, RainQualifier, TrendDirection, WindQualifier
from weathercompare.services.insights import (
    InsightThresholds,
    compute_wind_chill,
    detect_temperature_trend,
    find_best_outdoor_day,
    find_biggest_temperature_difference,
    find_wind_chill_alert,
    generate_insights,
    linear_regression_slope,
)
from tests.conftest import make_record, make_series

D1 = date(2024, 3, 10)
D2 = D1 + timedelta(days=1)
D3 = D1 + timedelta(days=2)

THRESHOLDS = InsightThresholds()


@pytest.fixture
def scenario():
    series_a = make_series(
        "Alpha",
        [
            make_record(D1, 10, 2, 80, 0),
            make_record(D2, 12, 1, 75, 0),
            make_record(D3, 9, 3, 90, 2),
        ],
    )
    series_b = make_series(
        "Beta",
        [
            make_record(D1, 15, 1, 60, 0),
            make_record(D2, 11, 1, 65, 0),
            make_record(D3, 8, 2, 85, 0),
        ],
    )
    return series_a, series_b


class TestScenario:
    def test_insight_kinds_in_fixed_order(self, scenario):
        insights = generate_insights(*scenario, thresholds=THRESHOLDS)

        assert [i.kind for i in insights] == [
            InsightKind.TEMPERATURE_DIFFERENCE,
            InsightKind.BEST_OUTDOOR_DAY,
            InsightKind.TEMPERATURE_TREND,
        ]

    def test_temperature_difference(self, scenario):
        insight = find_biggest_temperature_difference(*scenario, THRESHOLDS)

        assert insight.headline_params == {"date": D1, "warmer_location": "Beta", "diff": 5.0}

    def test_best_outdoor_day(self, scenario):
        insight = find_best_outdoor_day(*scenario, THRESHOLDS)

        assert insight.headline_params == {"date": D1, "location": "Beta"}
        assert insight.description_params == {
            "temperature": 15.0,
            "wind": WindQualifier.LIGHT,
            "rain": RainQualifier.NONE,
        }

    def test_trend_picks_larger_change(self, scenario):
        insight = detect_temperature_trend(*scenario, THRESHOLDS)

        # Beta: slope -3.5 over two steps
        assert insight.headline_params == {"location": "Beta", "direction": TrendDirection.COOLING}
        assert insight.description_key == "insights.tempTrend.cooling"
        assert insight.description_params == {"change": 7.0}

    def test_wind_chill_gap_below_threshold(self, scenario):
        assert find_wind_chill_alert(*scenario, THRESHOLDS) is None


class TestTemperatureDifference:
    def test_exactly_threshold_is_emitted(self):
        a = make_series("A", [make_record(D1, 11.0)])
        b = make_series("B", [make_record(D1, 10.0)])
        assert find_biggest_temperature_difference(a, b, THRESHOLDS) is not None

    def test_gate_uses_unrounded_difference(self):
        a = make_series("A", [make_record(D1, 10.96)])
        b = make_series("B", [make_record(D1, 10.0)])
        # 0.96 displays as "1.0" but is below the gate
        assert find_biggest_temperature_difference(a, b, THRESHOLDS) is None

    def test_tie_favors_first_series(self):
        a = make_series("A", [make_record(D1, 3.0), make_record(D2, 8.0)])
        b = make_series("B", [make_record(D1, 3.0), make_record(D2, 8.0)])
        custom = InsightThresholds(temp_diff_c=0.0)
        insight = find_biggest_temperature_difference(a, b, custom)
        assert insight.headline_params["warmer_location"] == "A"

    def test_truncates_to_shorter_series(self):
        a = make_series("A", [make_record(D1, 0.0), make_record(D2, 0.0)])
        b = make_series("B", [make_record(D1, 2.0)])
        insight = find_biggest_temperature_difference(a, b, THRESHOLDS)
        assert insight.headline_params["diff"] == 2.0

    def test_empty_series(self):
        assert find_biggest_temperature_difference(make_series("A", []), make_series("B", []), THRESHOLDS) is None


class TestBestOutdoorDay:
    def test_tie_keeps_first_record_of_first_series(self):
        a = make_series("A", [make_record(D1, 15.0), make_record(D2, 15.0)])
        b = make_series("B", [make_record(D1, 15.0)])
        insight = find_best_outdoor_day(a, b, THRESHOLDS)
        assert insight.headline_params == {"date": D1, "location": "A"}

    def test_qualifiers(self):
        a = make_series("A", [make_record(D1, 15.0, wind_speed=5.0, precipitation=0.1)])
        insight = find_best_outdoor_day(a, make_series("B", []), THRESHOLDS)
        assert insight.description_params["wind"] is WindQualifier.MODERATE
        assert insight.description_params["rain"] is RainQualifier.SOME

    def test_none_without_records(self):
        assert find_best_outdoor_day(make_series("A", []), make_series("B", []), THRESHOLDS) is None


class TestTrend:
    def test_slope(self):
        assert linear_regression_slope([1.0, 2.0, 3.0, 4.0]) == pytest.approx(1.0)
        assert linear_regression_slope([5.0]) == 0.0
        assert linear_regression_slope([]) == 0.0

    def test_warming(self):
        a = make_series("A", [make_record(D1 + timedelta(days=i), t) for i, t in enumerate([1, 2, 3, 4])])
        b = make_series("B", [make_record(D1 + timedelta(days=i), 5.0) for i in range(4)])
        insight = detect_temperature_trend(a, b, THRESHOLDS)
        assert insight.headline_params["direction"] is TrendDirection.WARMING
        assert insight.description_params["change"] == 3.0

    def test_below_threshold(self):
        a = make_series("A", [make_record(D1, 5.0), make_record(D2, 6.5)])
        b = make_series("B", [make_record(D1, 5.0), make_record(D2, 4.0)])
        assert detect_temperature_trend(a, b, THRESHOLDS) is None


class TestWindChill:
    def test_formula(self):
        # 10 m/s = 36 km/h at 0 °C
        assert compute_wind_chill(0.0, 10.0, THRESHOLDS) == pytest.approx(-7.05, abs=0.02)

    def test_undefined_above_max_temperature(self):
        assert compute_wind_chill(10.1, 20.0, THRESHOLDS) is None

    def test_undefined_below_min_wind(self):
        # 1.3 m/s = 4.68 km/h
        assert compute_wind_chill(-10.0, 1.3, THRESHOLDS) is None

    def test_defined_at_bounds(self):
        assert compute_wind_chill(10.0, 4.8 / 3.6 + 1e-9, THRESHOLDS) is not None

    def test_alert(self):
        a = make_series("A", [make_record(D1, 0.0, wind_speed=10.0)])
        b = make_series("B", [make_record(D1, 20.0, wind_speed=10.0)])
        insight = find_wind_chill_alert(a, b, THRESHOLDS)
        assert insight.kind is InsightKind.WIND_CHILL
        assert insight.headline_params["location"] == "A"
        assert insight.headline_params["feels_like"] == pytest.approx(-7.1)
        assert insight.description_params == {"actual": 0.0}

    def test_custom_gap_threshold(self):
        a = make_series("A", [make_record(D1, 0.0, wind_speed=10.0)])
        strict = InsightThresholds(wind_chill_gap_c=8.0)
        assert find_wind_chill_alert(a, make_series("B", []), strict) is None


def test_insight_serializes_to_plain_values(scenario):
    [first, *_rest] = generate_insights(*scenario, thresholds=THRESHOLDS)
    payload = first.to_dict()
    assert payload["kind"] == "temp_diff"
    assert payload["headline_params"]["date"] == "2024-03-10"
