"""Briefing history persistence."""

from __future__ import annotations

from datetime import datetime
import logging

from sqlalchemy.orm import Session

from skybrief import db_models
from skybrief.db import maybe_cleanup_old_records
from skybrief.models.briefing import BriefingSummary
from skybrief.models.weather import CurrentObservation

logger = logging.getLogger("skybrief.history")


def record_briefing(
    db: Session,
    station: str,
    observation: CurrentObservation,
    briefing: BriefingSummary,
) -> db_models.BriefingRecord:
    """Store a briefing outcome and run retention cleanup when due."""

    record = db_models.BriefingRecord(
        station=station,
        flight_category=observation.flight_category,
        recommendation=briefing.recommendation.value,
        go_no_go=briefing.go_no_go.value,
        summary=briefing.summary,
        hazards=list(briefing.hazards),
        created_at=datetime.utcnow(),
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info(
        "Recorded briefing for %s: %s/%s",
        station,
        record.recommendation,
        record.go_no_go,
    )
    maybe_cleanup_old_records(db)
    return record


def list_history(db: Session, station: str, *, limit: int = 20) -> list[db_models.BriefingRecord]:
    """Return the most recent briefings for a station, newest first."""

    return (
        db.query(db_models.BriefingRecord)
        .filter(db_models.BriefingRecord.station == station)
        .order_by(
            db_models.BriefingRecord.created_at.desc(),
            db_models.BriefingRecord.id.desc(),
        )
        .limit(limit)
        .all()
    )


__all__ = ["list_history", "record_briefing"]
