"""Flight category and briefing outcome definitions."""

from __future__ import annotations

from enum import Enum


class FlightCategory(str, Enum):
    """FAA flight categories derived from ceiling and visibility."""

    VFR = "VFR"
    MVFR = "MVFR"
    IFR = "IFR"
    LIFR = "LIFR"


class Recommendation(str, Enum):
    """Overall briefing recommendation."""

    FAVORABLE = "FAVORABLE"
    CAUTION = "CAUTION"
    UNFAVORABLE = "UNFAVORABLE"


class GoNoGo(str, Enum):
    """Pilot-facing go/no-go verdict."""

    GO = "go"
    MARGINAL = "marginal"
    NOGO = "nogo"


GO_NO_GO_FOR: dict[Recommendation, GoNoGo] = {
    Recommendation.FAVORABLE: GoNoGo.GO,
    Recommendation.CAUTION: GoNoGo.MARGINAL,
    Recommendation.UNFAVORABLE: GoNoGo.NOGO,
}

# Higher is better; unknown categories rank as VFR.
CATEGORY_RANK: dict[str, int] = {
    FlightCategory.VFR.value: 4,
    FlightCategory.MVFR.value: 3,
    FlightCategory.IFR.value: 2,
    FlightCategory.LIFR.value: 1,
}

__all__ = [
    "CATEGORY_RANK",
    "FlightCategory",
    "GO_NO_GO_FOR",
    "GoNoGo",
    "Recommendation",
]
