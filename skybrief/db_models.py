"""SQLAlchemy ORM models for the SkyBrief backend."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from skybrief.db import Base


class BriefingRecord(Base):
    """Delivered briefing outcome for a station."""

    __tablename__ = "briefing_history"
    __table_args__ = (
        Index("ix_briefing_history_station_created", "station", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    station: Mapped[str] = mapped_column(String(8), index=True, nullable=False)
    flight_category: Mapped[str] = mapped_column(String(8), nullable=False)
    recommendation: Mapped[str] = mapped_column(String(16), nullable=False)
    go_no_go: Mapped[str] = mapped_column(String(16), nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    hazards: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, index=True, nullable=False
    )
