"""Structured, language-neutral insight shapes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class InsightKind(str, Enum):
    TEMPERATURE_DIFFERENCE = "temp_diff"
    BEST_OUTDOOR_DAY = "best_day"
    TEMPERATURE_TREND = "temp_trend"
    WIND_CHILL = "wind_chill"


class WindQualifier(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"


class RainQualifier(str, Enum):
    NONE = "none"
    SOME = "some"


class TrendDirection(str, Enum):
    WARMING = "warming"
    COOLING = "cooling"


@dataclass
class Insight:
    """A single finding derived from two aligned daily series.

    ``headline_params`` and ``description_params`` keep insertion order so a
    formatter can substitute them positionally or by name.
    """

    kind: InsightKind
    icon: str
    headline_key: str
    headline_params: dict[str, Any] = field(default_factory=dict)
    description_key: str = ""
    description_params: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "icon": self.icon,
            "headline_key": self.headline_key,
            "headline_params": _jsonable(self.headline_params),
            "description_key": self.description_key,
            "description_params": _jsonable(self.description_params),
        }


def _jsonable(params: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in params.items():
        if isinstance(value, Enum):
            result[key] = value.value
        elif hasattr(value, "isoformat"):
            result[key] = value.isoformat()
        else:
            result[key] = value
    return result


__all__ = [
    "Insight",
    "InsightKind",
    "RainQualifier",
    "TrendDirection",
    "WindQualifier",
]
