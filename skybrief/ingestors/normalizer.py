"""Normalize aviationweather.gov METAR/TAF records into canonical models."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import re
from typing import Any, Iterable, Optional

from skybrief.domain import FlightCategory
from skybrief.models.weather import (
    CloudLayer,
    CurrentObservation,
    Forecast,
    ForecastPeriod,
)

logger = logging.getLogger("skybrief.ingestors.normalizer")

HPA_TO_INHG = 0.02953
CEILING_COVERS = {"BKN", "OVC"}
DEFAULT_VISIBILITY_SM = 10.0

_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+))")


def _value(raw: dict[str, Any], key: str, default: Any) -> Any:
    """Return ``raw[key]`` unless it is missing or null."""

    value = raw.get(key)
    return default if value is None else value


def find_ceiling(layers: Iterable[CloudLayer]) -> Optional[int]:
    """Return the lowest BKN or OVC base, or None when there is no ceiling."""

    bases = [
        layer.base_ft
        for layer in layers
        if layer.cover in CEILING_COVERS and layer.base_ft is not None
    ]
    return min(bases) if bases else None


def parse_visibility(visib: str) -> float:
    """Parse a provider visibility such as ``"10+"`` or ``"1.5"`` into SM.

    Only the leading number is read; empty or unparseable values default to
    10 SM.
    """

    if not visib:
        return DEFAULT_VISIBILITY_SM
    match = _LEADING_NUMBER.match(visib.replace("+", ""))
    if match is None:
        return DEFAULT_VISIBILITY_SM
    return float(match.group(1))


def derive_flight_category(visibility: float, ceiling: Optional[int]) -> str:
    """Derive the FAA flight category from visibility and ceiling."""

    if (ceiling is not None and ceiling < 500) or visibility < 1:
        return FlightCategory.LIFR.value
    if (ceiling is not None and ceiling < 1000) or visibility < 3:
        return FlightCategory.IFR.value
    if (ceiling is not None and ceiling < 3000) or visibility <= 5:
        return FlightCategory.MVFR.value
    return FlightCategory.VFR.value


def hpa_to_inhg(hpa: float) -> float:
    return hpa * HPA_TO_INHG


def epoch_to_iso(epoch: float) -> str:
    """Convert UNIX epoch seconds to an ISO-8601 UTC string."""

    moment = datetime.fromtimestamp(epoch, tz=timezone.utc)
    return moment.isoformat().replace("+00:00", "Z")


def _parse_clouds(raw_clouds: list[dict[str, Any]] | None) -> list[CloudLayer]:
    return [
        CloudLayer(cover=cloud.get("cover") or "", base_ft=cloud.get("base"))
        for cloud in raw_clouds or []
    ]


def normalize_metar(raw: dict[str, Any]) -> CurrentObservation:
    """Convert a raw METAR record into a ``CurrentObservation``."""

    clouds = _parse_clouds(raw.get("clouds"))
    ceiling = find_ceiling(clouds)
    visibility = parse_visibility(str(_value(raw, "visib", "10+")))

    altimeter = float(_value(raw, "altim", 0))
    # Values above 100 can only be hPa.
    if altimeter > 100:
        altimeter = hpa_to_inhg(altimeter)

    observation = CurrentObservation(
        station=_value(raw, "icaoId", ""),
        flight_category=_value(raw, "fltCat", None)
        or derive_flight_category(visibility, ceiling),
        raw_text=_value(raw, "rawOb", ""),
        temperature_c=_value(raw, "temp", 0),
        dewpoint_c=_value(raw, "dewp", 0),
        wind_direction=_value(raw, "wdir", "VRB"),
        wind_speed_kt=_value(raw, "wspd", 0),
        wind_gust_kt=raw.get("wgst"),
        visibility_sm=visibility,
        ceiling_ft=ceiling,
        altimeter_inhg=round(altimeter, 2),
        present_weather=raw.get("wxString"),
        observation_time=_value(
            raw, "reportTime", datetime.now(timezone.utc).isoformat()
        ),
        cloud_layers=clouds,
    )
    logger.debug("Normalized METAR for %s: %s", observation.station, observation)
    return observation


def normalize_taf(raw: dict[str, Any]) -> Forecast:
    """Convert a raw TAF record into a ``Forecast``.

    Period flight categories are always derived, since the provider does not
    supply them for forecasts.
    """

    periods: list[ForecastPeriod] = []
    for fcst in raw.get("fcsts") or []:
        clouds = _parse_clouds(fcst.get("clouds"))
        ceiling = find_ceiling(clouds)
        visibility = parse_visibility(str(_value(fcst, "visib", "6+")))

        periods.append(
            ForecastPeriod(
                time_from=epoch_to_iso(fcst["timeFrom"]),
                time_to=epoch_to_iso(fcst["timeTo"]),
                wind_speed_kt=_value(fcst, "wspd", 0),
                wind_gust_kt=fcst.get("wgst"),
                visibility_sm=visibility,
                ceiling_ft=ceiling,
                flight_category=derive_flight_category(visibility, ceiling),
                wx_string=fcst.get("wxString"),
            )
        )

    return Forecast(raw_text=_value(raw, "rawTAF", ""), periods=periods)


__all__ = [
    "derive_flight_category",
    "epoch_to_iso",
    "find_ceiling",
    "hpa_to_inhg",
    "normalize_metar",
    "normalize_taf",
    "parse_visibility",
]
