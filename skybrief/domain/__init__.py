"""Domain enumerations for SkyBrief."""

from .categories import (
    CATEGORY_RANK,
    GO_NO_GO_FOR,
    FlightCategory,
    GoNoGo,
    Recommendation,
)

__all__ = [
    "CATEGORY_RANK",
    "FlightCategory",
    "GO_NO_GO_FOR",
    "GoNoGo",
    "Recommendation",
]
