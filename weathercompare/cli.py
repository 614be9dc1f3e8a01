"""Command-line comparison of two locations."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Sequence

from weathercompare.models import Coordinates, LocationSeries, NamedLocation
from weathercompare.services.comparison import ComparisonSession
from weathercompare.services.formatting import SUPPORTED_LANGUAGES, render_insight
from weathercompare.services.geocoding import GeocodingClient, GeocodingError, is_within_sweden

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare the weather forecast for two locations.")
    parser.add_argument(
        "locations",
        nargs="*",
        help="NAME LAT LON NAME LAT LON (omit when using --geocode)",
    )
    parser.add_argument(
        "--geocode",
        nargs=2,
        metavar="NAME",
        help="Resolve two place names with Nominatim instead of passing coordinates.",
    )
    parser.add_argument(
        "--historical",
        action="store_true",
        help="Also fetch last year's observations for the same days.",
    )
    parser.add_argument("--language", choices=SUPPORTED_LANGUAGES, default="en")
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON.")
    return parser.parse_args(argv)


def locations_from_args(values: Sequence[str]) -> tuple[NamedLocation, NamedLocation]:
    if len(values) != 6:
        raise ValueError("Expected NAME LAT LON NAME LAT LON")
    parsed = []
    for offset in (0, 3):
        name, lat, lon = values[offset : offset + 3]
        parsed.append(
            NamedLocation(name=name, coordinates=Coordinates(latitude=float(lat), longitude=float(lon)))
        )
    return parsed[0], parsed[1]


async def _geocode_pair(names: Sequence[str]) -> tuple[NamedLocation, NamedLocation]:
    client = GeocodingClient()
    resolved = []
    for name in names:
        result = await client.geocode(name)
        if result is None:
            raise ValueError(f"No location found for {name!r}")
        if not is_within_sweden(result.coordinates):
            logger.warning("%s is outside the SMHI forecast area", result.display_name)
        resolved.append(result.to_location())
    return resolved[0], resolved[1]


def _print_series(series: LocationSeries, title: str) -> None:
    print(f"{title}: {series.location_name}")
    for record in series.records:
        print(
            f"  {record.date.isoformat()}  {record.temperature:6.1f}°C  "
            f"{record.wind_speed:5.1f} m/s  {record.humidity:5.0f}%  {record.precipitation:5.1f} mm"
        )


async def run(args: argparse.Namespace) -> int:
    try:
        if args.geocode:
            location_a, location_b = await _geocode_pair(args.geocode)
        else:
            location_a, location_b = locations_from_args(args.locations)
    except (ValueError, GeocodingError) as exc:
        logger.error("%s", exc)
        return 2

    session = ComparisonSession()
    result = await session.run(location_a, location_b)
    if result is None:
        logger.error("Comparison failed: %s", session.error)
        return 1

    historical = await session.load_historical() if args.historical else None
    rendered = [render_insight(insight, args.language) for insight in result.insights]

    if args.json:
        payload = {
            "location_a": result.series_a.to_dict(),
            "location_b": result.series_b.to_dict(),
            "insights": [insight.to_dict() for insight in result.insights],
            "insight_text": rendered,
        }
        if historical is not None:
            payload["historical"] = [
                series.to_dict() if series is not None else None for series in historical
            ]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    _print_series(result.series_a, "Forecast")
    _print_series(result.series_b, "Forecast")
    if historical is not None:
        for series in historical:
            if series is not None:
                _print_series(series, "Last year")
    for insight, text in zip(result.insights, rendered):
        print(f"{insight.icon} {text['headline']}")
        if text["description"]:
            print(f"   {text['description']}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    args = parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
