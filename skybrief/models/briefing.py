"""Briefing request and response models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from skybrief.domain import GoNoGo, Recommendation
from skybrief.models.weather import CurrentObservation, Forecast


class BriefingSummary(BaseModel):
    """Outcome of a briefing evaluation."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    summary: str = Field(..., description="Space-joined briefing narrative")
    hazards: tuple[str, ...] = Field(
        default=(), description="Hazards in the order the rules fired",
    )
    recommendation: Recommendation = Field(..., description="Overall recommendation")
    go_no_go: GoNoGo = Field(..., description="Go/no-go verdict")


class BriefingRequest(BaseModel):
    """Payload for evaluating caller-supplied weather records."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    observation: CurrentObservation = Field(..., description="Current observation")
    forecast: Optional[Forecast] = Field(
        default=None, description="Optional forecast for trend analysis",
    )


class StationBriefingResponse(BaseModel):
    """Briefing for a station along with the weather it was built from."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    station: str = Field(..., description="Airport identifier")
    observation: CurrentObservation
    forecast: Optional[Forecast] = None
    briefing: BriefingSummary


class BriefingHistoryEntry(BaseModel):
    """Stored briefing outcome for a station."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True
    )

    id: int
    station: str
    flight_category: str
    recommendation: Recommendation
    go_no_go: GoNoGo
    summary: str
    hazards: list[str] = Field(default_factory=list)
    created_at: datetime


__all__ = [
    "BriefingHistoryEntry",
    "BriefingRequest",
    "BriefingSummary",
    "StationBriefingResponse",
]
