"""Render structured insights as English or Swedish text."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from weathercompare.models import Insight

SUPPORTED_LANGUAGES = ("en", "sv")

_MONTHS = {
    "en": ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"],
    "sv": ["jan", "feb", "mar", "apr", "maj", "jun", "jul", "aug", "sep", "okt", "nov", "dec"],
}

_TEMPLATES: dict[str, dict[str, str]] = {
    "en": {
        "insights.tempDiff.headline": "Biggest difference on {date}: {warmer_location} is {diff}°C warmer",
        "insights.tempDiff.description": "The largest temperature gap between the two locations.",
        "insights.bestDay.headline": "Best day for outdoor activities: {date} in {location}",
        "insights.bestDay.description": "{temperature}°C with {wind} and {rain}.",
        "insights.tempTrend.headline": "{location} is {direction} over the period",
        "insights.tempTrend.warming": "Temperatures rise by about {change}°C across the forecast.",
        "insights.tempTrend.cooling": "Temperatures drop by about {change}°C across the forecast.",
        "insights.windChill.headline": "Wind chill alert on {date} in {location}: feels like {feels_like}°C",
        "insights.windChill.description": "The actual temperature is {actual}°C, but wind makes it feel colder.",
        "wind.light": "light wind",
        "wind.moderate": "moderate wind",
        "rain.none": "no rain",
        "rain.some": "some rain",
        "direction.warming": "warming up",
        "direction.cooling": "cooling down",
    },
    "sv": {
        "insights.tempDiff.headline": "Störst skillnad {date}: {warmer_location} är {diff}°C varmare",
        "insights.tempDiff.description": "Den största temperaturskillnaden mellan platserna.",
        "insights.bestDay.headline": "Bästa dagen för utomhusaktiviteter: {date} i {location}",
        "insights.bestDay.description": "{temperature}°C med {wind} och {rain}.",
        "insights.tempTrend.headline": "{location} blir {direction} under perioden",
        "insights.tempTrend.warming": "Temperaturen stiger med ungefär {change}°C under prognosen.",
        "insights.tempTrend.cooling": "Temperaturen sjunker med ungefär {change}°C under prognosen.",
        "insights.windChill.headline": "Varning för vindkyla {date} i {location}: känns som {feels_like}°C",
        "insights.windChill.description": "Den faktiska temperaturen är {actual}°C, men vinden gör att det känns kallare.",
        "wind.light": "svag vind",
        "wind.moderate": "måttlig vind",
        "rain.none": "inget regn",
        "rain.some": "lite regn",
        "direction.warming": "varmare",
        "direction.cooling": "kallare",
    },
}


def format_day(day: date, language: str = "en") -> str:
    month = _MONTHS[language][day.month - 1]
    if language == "sv":
        return f"{day.day} {month}"
    return f"{month} {day.day}"


def _render_value(name: str, value: Any, language: str) -> str:
    if isinstance(value, date):
        return format_day(value, language)
    if isinstance(value, Enum):
        return _TEMPLATES[language][f"{name}.{value.value}"]
    if isinstance(value, float):
        return f"{value:.1f}"
    return str(value)


def _render(key: str, params: dict[str, Any], language: str) -> str:
    template = _TEMPLATES[language].get(key)
    if template is None:
        return key
    values = {name: _render_value(name, value, language) for name, value in params.items()}
    return template.format(**values)


def render_insight(insight: Insight, language: str = "en") -> dict[str, str]:
    """Return ``{"headline", "description"}`` text for ``insight``."""

    if language not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language: {language}")
    return {
        "headline": _render(insight.headline_key, insight.headline_params, language),
        "description": _render(insight.description_key, insight.description_params, language),
    }


__all__ = ["SUPPORTED_LANGUAGES", "format_day", "render_insight"]
