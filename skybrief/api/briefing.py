import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from skybrief.db import get_db
from skybrief.ingestors import normalize_station
from skybrief.models.briefing import (
    BriefingHistoryEntry,
    BriefingRequest,
    BriefingSummary,
    StationBriefingResponse,
)
from skybrief.services import (
    BriefingService,
    evaluate,
    get_briefing_service,
    list_history,
)

router = APIRouter(prefix="/api/v1", tags=["briefing"])

logger = logging.getLogger("skybrief.api.briefing")


@router.post(
    "/briefing/evaluate",
    response_model=BriefingSummary,
    summary="Evaluate a briefing from supplied weather records",
)
async def evaluate_briefing(request: BriefingRequest) -> BriefingSummary:
    """Run the rule engine against caller-supplied observation and forecast."""

    return evaluate(request.observation, request.forecast)


@router.get(
    "/briefing/{station}",
    response_model=StationBriefingResponse,
    summary="Fetch current weather for a station and brief it",
)
async def get_station_briefing(
    station: str,
    db: Session = Depends(get_db),
    service: BriefingService = Depends(get_briefing_service),
) -> StationBriefingResponse:
    result = await service.brief_station(station, db=db)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No weather data available for {station}",
        )

    return StationBriefingResponse(
        station=result.station,
        observation=result.observation,
        forecast=result.forecast,
        briefing=result.briefing,
    )


@router.get(
    "/briefing/{station}/history",
    response_model=list[BriefingHistoryEntry],
    summary="List recent briefings for a station",
)
async def get_briefing_history(
    station: str,
    limit: int = Query(default=20, ge=1, le=100, description="Maximum rows returned"),
    db: Session = Depends(get_db),
) -> list[BriefingHistoryEntry]:
    ident = normalize_station(station)
    if ident is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid station identifier: {station}",
        )

    records = list_history(db, ident, limit=limit)
    logger.info("Briefing history requested: station=%s rows=%s", ident, len(records))
    return [
        BriefingHistoryEntry(
            id=record.id,
            station=record.station,
            flight_category=record.flight_category,
            recommendation=record.recommendation,
            go_no_go=record.go_no_go,
            summary=record.summary,
            hazards=record.hazards or [],
            created_at=record.created_at,
        )
        for record in records
    ]
