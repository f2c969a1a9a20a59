"""Database configuration and helpers for the SkyBrief backend."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, func
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from skybrief.config import settings

DATABASE_URL = os.getenv("SKYBRIEF_DB_URL", "sqlite:///./skybrief.db")
CLEANUP_STATE_FILE = Path(
    os.getenv("SKYBRIEF_RETENTION_STATE_FILE", "./.skybrief_retention_state")
)

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

logger = logging.getLogger("skybrief.db")


def _load_last_cleanup_date() -> date | None:
    """Load the last cleanup date from disk if present."""

    try:
        if not CLEANUP_STATE_FILE.exists():
            return None

        stored = CLEANUP_STATE_FILE.read_text().strip()
        if not stored:
            return None

        return date.fromisoformat(stored)
    except (OSError, ValueError) as exc:
        logger.warning(
            "Failed to load last cleanup date from %s: %s", CLEANUP_STATE_FILE, exc
        )
        return None


def _persist_last_cleanup_date(value: date) -> None:
    """Persist the last cleanup date to disk for reuse across restarts."""

    try:
        CLEANUP_STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
        CLEANUP_STATE_FILE.write_text(value.isoformat())
    except OSError as exc:
        logger.warning(
            "Failed to persist cleanup date to %s: %s", CLEANUP_STATE_FILE, exc
        )


_last_cleanup_date: date | None = _load_last_cleanup_date()


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def get_db() -> Generator:
    """Yield a SQLAlchemy session and ensure it is closed."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create database tables if they do not exist."""

    import skybrief.db_models  # noqa: F401 - models are imported for side effects

    Base.metadata.create_all(bind=engine)


def maybe_cleanup_old_records(db: Session) -> None:
    """
    Delete briefing history rows older than the retention window.

    - Only run at most once per UTC day.
    - Use date-based comparison, ignoring time-of-day.
    - Fail-soft: log on error but never break the caller's normal write.
    """

    global _last_cleanup_date

    try:
        today = _utc_today()
        if _last_cleanup_date == today:
            return

        retention_days = max(settings.retention_days, 1)
        cutoff_str = (today - timedelta(days=retention_days)).isoformat()

        import skybrief.db_models as models

        deleted = (
            db.query(models.BriefingRecord)
            .filter(func.date(models.BriefingRecord.created_at) < cutoff_str)
            .delete(synchronize_session=False)
        )
        db.commit()
        if deleted:
            logger.info("Retention cleanup removed %s briefing rows", deleted)

        _last_cleanup_date = today
        _persist_last_cleanup_date(today)
    except Exception as exc:  # pragma: no cover - defensive logging
        db.rollback()
        logger.warning("Retention cleanup failed: %s", exc)
