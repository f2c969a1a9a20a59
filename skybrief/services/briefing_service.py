"""Fetch weather for stations, evaluate briefings and record the outcome."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date
import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from skybrief.config import settings
from skybrief.ingestors import AviationWeatherIngestor, normalize_station
from skybrief.models.briefing import BriefingSummary
from skybrief.models.weather import CurrentObservation, Forecast
from skybrief.services.briefing_engine import evaluate
from skybrief.services.history import record_briefing

logger = logging.getLogger("skybrief.briefing_service")


@dataclass
class StationBriefing:
    """Briefing for one station plus the weather it was built from."""

    station: str
    observation: CurrentObservation
    forecast: Optional[Forecast]
    briefing: BriefingSummary


@dataclass
class BatchBriefingResult:
    """Outcome of a multi-station briefing run."""

    results: list[StationBriefing] = field(default_factory=list)
    success_count: int = 0
    failure_count: int = 0


def build_subject(
    station: str, observation: CurrentObservation, *, today: date | None = None
) -> str:
    """Plain-text subject line for a delivered briefing."""

    today = today or date.today()
    date_str = f"{today:%a}, {today:%b} {today.day}"
    return f"SkyBrief: {station} is {observation.flight_category} - {date_str}"


class BriefingService:
    """Orchestrates weather ingestion, evaluation and history persistence."""

    def __init__(self, ingestor: Optional[AviationWeatherIngestor] = None) -> None:
        self.ingestor = ingestor or AviationWeatherIngestor()

    async def brief_station(
        self, station: str, db: Session | None = None
    ) -> Optional[StationBriefing]:
        """Build a briefing for one station; None when no weather is available."""

        weather = await self.ingestor.get_weather(station)
        if weather is None:
            logger.warning("No weather data available for %s", station)
            return None

        ident = normalize_station(station) or station
        briefing = evaluate(weather.observation, weather.forecast)

        if db is not None and settings.persist_briefings:
            record_briefing(db, ident, weather.observation, briefing)

        logger.info(
            "Briefing generated for %s: category=%s recommendation=%s hazards=%s",
            ident,
            weather.observation.flight_category,
            briefing.recommendation.value,
            len(briefing.hazards),
        )
        return StationBriefing(
            station=ident,
            observation=weather.observation,
            forecast=weather.forecast,
            briefing=briefing,
        )

    async def brief_stations(
        self, stations: Iterable[str], db: Session | None = None
    ) -> BatchBriefingResult:
        """Brief many stations, one concurrent batch at a time.

        Per-station failures are logged and counted, never raised.
        """

        pending = [station for station in stations if station]
        batch_size = max(settings.briefing_batch_size, 1)
        outcome = BatchBriefingResult()

        for start in range(0, len(pending), batch_size):
            batch = pending[start : start + batch_size]
            results = await asyncio.gather(
                *(self.brief_station(station, db=db) for station in batch),
                return_exceptions=True,
            )

            for station, result in zip(batch, results):
                if isinstance(result, StationBriefing):
                    outcome.results.append(result)
                    outcome.success_count += 1
                else:
                    outcome.failure_count += 1
                    if isinstance(result, BaseException):
                        logger.error("Briefing failed for %s: %s", station, result)

        logger.info(
            "Batch briefing complete: %s succeeded, %s failed out of %s stations",
            outcome.success_count,
            outcome.failure_count,
            len(pending),
        )
        return outcome


_default_service: BriefingService | None = None


def get_briefing_service() -> BriefingService:
    """Return the shared briefing service."""

    global _default_service
    if _default_service is None:
        _default_service = BriefingService()
    return _default_service


__all__ = [
    "BatchBriefingResult",
    "BriefingService",
    "StationBriefing",
    "build_subject",
    "get_briefing_service",
]
