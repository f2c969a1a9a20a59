"""Service-layer helpers for the SkyBrief backend."""

from .briefing_engine import (
    BRIEFING_STAGES,
    BriefingContext,
    analyze_forecast_trend,
    analyze_wind,
    evaluate,
)
from .briefing_service import (
    BatchBriefingResult,
    BriefingService,
    StationBriefing,
    build_subject,
    get_briefing_service,
)
from .history import list_history, record_briefing

__all__ = [
    "BRIEFING_STAGES",
    "BatchBriefingResult",
    "BriefingContext",
    "BriefingService",
    "StationBriefing",
    "analyze_forecast_trend",
    "analyze_wind",
    "build_subject",
    "evaluate",
    "get_briefing_service",
    "list_history",
    "record_briefing",
]
