"""Pydantic models for the SkyBrief backend."""

from .briefing import (
    BriefingHistoryEntry,
    BriefingRequest,
    BriefingSummary,
    StationBriefingResponse,
)
from .weather import CloudLayer, CurrentObservation, Forecast, ForecastPeriod

__all__ = [
    "BriefingHistoryEntry",
    "BriefingRequest",
    "BriefingSummary",
    "CloudLayer",
    "CurrentObservation",
    "Forecast",
    "ForecastPeriod",
    "StationBriefingResponse",
]
