"""METAR/TAF ingestion from the aviationweather.gov data API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Any, Optional

import httpx

from skybrief.config import settings
from skybrief.ingestors.normalizer import normalize_metar, normalize_taf
from skybrief.models.weather import CurrentObservation, Forecast

logger = logging.getLogger("skybrief.ingestors.weather")


class WeatherServiceError(RuntimeError):
    """Raised when the upstream weather service cannot be used."""


@dataclass
class StationWeather:
    """Current observation and optional forecast for one station."""

    observation: CurrentObservation
    forecast: Optional[Forecast] = None


def normalize_station(icao: str) -> Optional[str]:
    """Upper-case and strip an identifier; None unless it is 3-4 characters."""

    station = (icao or "").strip().upper()
    if len(station) < 3 or len(station) > 4:
        return None
    return station


class AviationWeatherIngestor:
    """Fetch and normalize METAR and TAF data for airport identifiers."""

    def __init__(self, *, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or settings.weather_base_url).rstrip("/")
        self.timeout = timeout or settings.weather_timeout

    async def _fetch_records(
        self, client: httpx.AsyncClient, product: str, station: str
    ) -> list[dict[str, Any]]:
        url = f"{self.base_url}/{product}"
        params = {"ids": station, "format": "json"}

        try:
            response = await client.get(
                url, params=params, headers={"Accept": "application/json"}
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("%s request for %s timed out: %s", product.upper(), station, exc)
            raise WeatherServiceError("Weather service timeout") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "%s service returned error: status=%s body=%s",
                product.upper(),
                exc.response.status_code,
                exc.response.text,
            )
            raise WeatherServiceError("Weather service error") from exc
        except httpx.RequestError as exc:
            logger.error("%s request for %s failed: %s", product.upper(), station, exc)
            raise WeatherServiceError("Weather request failed") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("%s response for %s is not JSON", product.upper(), station)
            raise WeatherServiceError("Weather response format invalid") from exc

        if not isinstance(payload, list):
            return []
        return payload

    async def get_metar(
        self, station: str, *, client: httpx.AsyncClient | None = None
    ) -> Optional[CurrentObservation]:
        if client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as own_client:
                return await self.get_metar(station, client=own_client)

        records = await self._fetch_records(client, "metar", station)
        if not records:
            return None
        return normalize_metar(records[0])

    async def get_taf(
        self, station: str, *, client: httpx.AsyncClient | None = None
    ) -> Optional[Forecast]:
        if client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as own_client:
                return await self.get_taf(station, client=own_client)

        records = await self._fetch_records(client, "taf", station)
        if not records:
            return None
        return normalize_taf(records[0])

    async def get_weather(self, icao: str) -> Optional[StationWeather]:
        """Fetch METAR and TAF concurrently.

        The METAR is required; a missing or failed TAF only drops the
        forecast. Returns None for invalid identifiers or when no METAR can
        be obtained.
        """

        station = normalize_station(icao)
        if station is None:
            logger.warning('Invalid ICAO identifier: "%s"', icao)
            return None

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            metar_result, taf_result = await asyncio.gather(
                self.get_metar(station, client=client),
                self.get_taf(station, client=client),
                return_exceptions=True,
            )

        if isinstance(metar_result, BaseException) or metar_result is None:
            logger.error(
                "METAR fetch failed for %s: %s",
                station,
                metar_result if metar_result is not None else "no data",
            )
            return None

        forecast: Optional[Forecast] = None
        if isinstance(taf_result, BaseException):
            logger.warning("TAF fetch failed for %s: %s", station, taf_result)
        else:
            forecast = taf_result

        logger.debug("Weather ingested for %s (forecast=%s)", station, forecast is not None)
        return StationWeather(observation=metar_result, forecast=forecast)


__all__ = [
    "AviationWeatherIngestor",
    "StationWeather",
    "WeatherServiceError",
    "normalize_station",
]
