"""Rule-based weather briefing engine.

Turns a normalized METAR observation and an optional TAF into a pilot-facing
briefing with itemized hazards and a go/no-go recommendation. Evaluation is a
fixed, ordered list of rule stages that share a per-call ``BriefingContext``.
The engine performs no I/O and no input validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
import logging
import math
from typing import Callable, Optional

from skybrief.domain import (
    CATEGORY_RANK,
    GO_NO_GO_FOR,
    FlightCategory,
    Recommendation,
)
from skybrief.models.briefing import BriefingSummary
from skybrief.models.weather import CurrentObservation, Forecast

logger = logging.getLogger("skybrief.briefing_engine")

FORECAST_WINDOW = timedelta(hours=6)
LOW_ALTIMETER_INHG = 29.80

CATEGORY_NARRATIVES: dict[str, str] = {
    FlightCategory.VFR.value: (
        "Conditions are VFR - good visibility and ceilings for visual flight."
    ),
    FlightCategory.MVFR.value: (
        "Conditions are Marginal VFR - ceiling and/or visibility are borderline. "
        "Extra vigilance required."
    ),
    FlightCategory.IFR.value: (
        "Conditions are IFR - you need an instrument rating and IFR clearance. "
        "VFR flight is NOT authorized."
    ),
    FlightCategory.LIFR.value: (
        "Conditions are Low IFR - extremely restricted visibility and/or ceiling. "
        "Even for IFR operations, this is challenging."
    ),
}

# Order matters: phrases are reported in table order.
WEATHER_PHENOMENA: tuple[tuple[str, str], ...] = (
    ("RA", "rain"),
    ("SN", "snow"),
    ("FG", "fog"),
    ("BR", "mist"),
    ("HZ", "haze"),
    ("TS", "thunderstorms"),
    ("FZ", "freezing precipitation"),
    ("FZRA", "freezing rain"),
    ("FZSN", "freezing snow"),
    ("GR", "hail"),
    ("SQ", "squalls"),
    ("FC", "funnel cloud"),
    ("DZ", "drizzle"),
    ("FZDZ", "freezing drizzle"),
    ("SH", "showers"),
)


@dataclass
class BriefingContext:
    """Mutable accumulator scoped to a single evaluation."""

    now: datetime
    hazards: list[str] = field(default_factory=list)
    parts: list[str] = field(default_factory=list)
    no_go: bool = False
    high_caution: bool = False
    recommendation: Recommendation = Recommendation.FAVORABLE

    def latch_no_go(self) -> None:
        self.no_go = True

    def latch_high_caution(self) -> None:
        self.high_caution = True


@dataclass
class WindAnalysis:
    description: str
    warning: Optional[str] = None
    high_caution: bool = False


@dataclass
class ForecastTrend:
    """Outcome of scanning the upcoming forecast periods."""

    description: str
    warning: Optional[str]
    deteriorating: bool


BriefingStage = Callable[
    [CurrentObservation, Optional[Forecast], BriefingContext], None
]


def _format_number(value: float) -> str:
    """Render a number without a trailing ``.0`` for integral values."""

    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _format_fixed(value: float, digits: int) -> str:
    """Fixed-point rendering with ties rounded away from zero."""

    if not math.isfinite(value):
        return f"{value:.{digits}f}"
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def _format_thousands(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value:,}"


def _parse_timestamp(ts: str) -> Optional[datetime]:
    if ts.endswith("Z"):
        ts = ts[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(ts)
    except ValueError:
        logger.debug("Unparseable forecast timestamp: %s", ts)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def assess_flight_category(category: str) -> str:
    """Return the canned narrative for a flight category."""

    return CATEGORY_NARRATIVES.get(category, f"Current flight category: {category}.")


def analyze_wind(observation: CurrentObservation) -> WindAnalysis:
    """Describe the wind and flag gust or strong-wind hazards."""

    speed = observation.wind_speed_kt
    if speed == 0:
        return WindAnalysis(description="Winds are calm.")

    direction = observation.wind_direction
    if direction in ("VRB", "variable") or direction == 0:
        dir_desc = "variable"
    else:
        dir_desc = f"from {str(direction).zfill(3)} degrees"

    desc = f"Winds {dir_desc} at {speed} kts"
    warning: Optional[str] = None
    high_caution = False

    gust = observation.wind_gust_kt
    if gust:
        gust_spread = gust - speed
        desc = f"{desc}, gusting {gust} kts"

        if gust > 35:
            warning = (
                f"STRONG GUSTS to {gust} kts - Approach and landing will be challenging"
            )
            high_caution = True
        elif gust > 25 or gust_spread > 15:
            warning = (
                f"Gusty winds ({gust_spread} kt gust spread) - Expect bumpy approach, use caution"
            )
        elif gust_spread > 10:
            warning = f"Moderate gusts ({gust_spread} kt spread) - Stay alert on approach"
    elif speed > 25:
        warning = (
            f"Strong sustained winds at {speed} kts - Crosswind component may be significant"
        )

    return WindAnalysis(
        description=f"{desc}.", warning=warning, high_caution=high_caution
    )


def describe_weather_phenomena(wx: str) -> Optional[str]:
    """Translate coded present weather into a prose sentence."""

    found = [desc for code, desc in WEATHER_PHENOMENA if code in wx]
    if not found:
        return None
    return f"Reporting {', '.join(found)} in the vicinity."


def analyze_forecast_trend(
    forecast: Forecast, current_category: str, now: datetime
) -> Optional[ForecastTrend]:
    """Compare the next six hours of forecast against current conditions.

    Returns ``None`` when no forecast period starts within the window.
    """

    horizon = now + FORECAST_WINDOW
    upcoming = []
    for period in forecast.periods:
        starts_at = _parse_timestamp(period.time_from)
        if starts_at is not None and starts_at <= horizon:
            upcoming.append(period)

    if not upcoming:
        return None

    current_rank = CATEGORY_RANK.get(current_category, 4)
    worst_rank = current_rank
    worst_category = current_category
    has_thunderstorms = False
    has_freezing_precip = False

    for period in upcoming:
        rank = CATEGORY_RANK.get(period.flight_category, 4)
        if rank < worst_rank:
            worst_rank = rank
            worst_category = period.flight_category

        if period.wx_string:
            wx = period.wx_string.upper()
            if "TS" in wx:
                has_thunderstorms = True
            if "FZ" in wx:
                has_freezing_precip = True

    deteriorating = worst_rank < current_rank

    warning: Optional[str] = None
    if has_thunderstorms:
        warning = "TAF forecasts THUNDERSTORMS within the next 6 hours"
    elif has_freezing_precip:
        warning = "TAF forecasts FREEZING PRECIPITATION within the next 6 hours"
    elif deteriorating:
        warning = (
            f"Conditions forecast to deteriorate to {worst_category} within the next 6 hours"
        )

    if deteriorating:
        description = (
            f"FORECAST TREND: Conditions expected to worsen from {current_category} "
            f"to {worst_category} in the next 6 hours."
        )
    elif worst_rank > current_rank:
        description = (
            f"FORECAST TREND: Conditions expected to improve to {worst_category} "
            "in the next 6 hours."
        )
    else:
        description = (
            f"FORECAST TREND: Conditions expected to remain {current_category} "
            "for the next 6 hours."
        )

    return ForecastTrend(
        description=description, warning=warning, deteriorating=deteriorating
    )


# ===== Rule stages =====


def _critical_weather(
    observation: CurrentObservation, forecast: Optional[Forecast], ctx: BriefingContext
) -> None:
    if not observation.present_weather:
        return
    wx = observation.present_weather.upper()

    if "TS" in wx:
        ctx.hazards.append("THUNDERSTORMS PRESENT OR IN VICINITY - DO NOT FLY")
        ctx.parts.append(
            "THUNDERSTORMS are active in the area. This is a no-go situation."
        )
        ctx.latch_no_go()

    if "FZRA" in wx or "FZDZ" in wx:
        ctx.hazards.append("FREEZING RAIN/DRIZZLE - Severe icing conditions")
        ctx.parts.append(
            "Freezing precipitation is falling - extremely hazardous for non-FIKI aircraft."
        )
        ctx.latch_no_go()

    if "FC" in wx or "SQ" in wx:
        ctx.hazards.append("FUNNEL CLOUD or SQUALLS reported")
        ctx.latch_no_go()


def _flight_category(
    observation: CurrentObservation, forecast: Optional[Forecast], ctx: BriefingContext
) -> None:
    if not ctx.no_go:
        ctx.parts.append(assess_flight_category(observation.flight_category))


def _wind(
    observation: CurrentObservation, forecast: Optional[Forecast], ctx: BriefingContext
) -> None:
    analysis = analyze_wind(observation)
    if analysis.warning:
        ctx.hazards.append(analysis.warning)
        if analysis.high_caution:
            ctx.latch_high_caution()
    ctx.parts.append(analysis.description)


def _visibility(
    observation: CurrentObservation, forecast: Optional[Forecast], ctx: BriefingContext
) -> None:
    visibility = observation.visibility_sm
    vis_desc = _format_number(visibility)
    if visibility < 1:
        ctx.hazards.append(f"VERY LOW VISIBILITY at {vis_desc} SM - IFR conditions")
        if observation.flight_category == FlightCategory.LIFR.value:
            ctx.latch_no_go()
    elif visibility < 3:
        ctx.hazards.append(f"Low visibility at {vis_desc} SM - Reduced VFR margins")


def _fog_risk(
    observation: CurrentObservation, forecast: Optional[Forecast], ctx: BriefingContext
) -> None:
    # Spread stays signed; not clamped at zero.
    spread = observation.temperature_c - observation.dewpoint_c
    if spread <= 1:
        ctx.hazards.append(
            f"Temp/dewpoint spread {_format_fixed(spread, 1)} C - FOG FORMING NOW or imminent"
        )
        ctx.latch_high_caution()
    elif spread <= 2:
        ctx.hazards.append(
            f"Temp/dewpoint spread {_format_fixed(spread, 1)} C - Monitor closely for fog development"
        )


def _ceiling(
    observation: CurrentObservation, forecast: Optional[Forecast], ctx: BriefingContext
) -> None:
    ceiling = observation.ceiling_ft
    if ceiling is None:
        ctx.parts.append("Skies are clear to scattered.")
        return

    if ceiling < 500:
        ctx.hazards.append(
            f"EXTREMELY LOW CEILING at {ceiling} ft AGL - LIFR conditions"
        )
        ctx.latch_no_go()
    elif ceiling < 1000:
        ctx.hazards.append(
            f"Low ceiling at {ceiling} ft AGL - Requires high proficiency"
        )
        ctx.latch_high_caution()
    elif ceiling < 3000:
        layer = next(
            (layer for layer in observation.cloud_layers if layer.base_ft == ceiling),
            None,
        )
        cover_type = "overcast" if layer is not None and layer.cover == "OVC" else "broken"
        ctx.parts.append(f"Ceiling {_format_thousands(ceiling)} ft {cover_type}.")
    else:
        ctx.parts.append(f"Good ceiling at {_format_thousands(ceiling)} ft.")


def _present_weather(
    observation: CurrentObservation, forecast: Optional[Forecast], ctx: BriefingContext
) -> None:
    wx = observation.present_weather
    if not wx or ctx.no_go:
        return

    description = describe_weather_phenomena(wx)
    if description:
        ctx.parts.append(description)
    if "RA" in wx or "SN" in wx:
        ctx.hazards.append(f"Active precipitation: {wx}")


def _altimeter(
    observation: CurrentObservation, forecast: Optional[Forecast], ctx: BriefingContext
) -> None:
    # Flat threshold, independent of field elevation.
    if observation.altimeter_inhg < LOW_ALTIMETER_INHG:
        ctx.hazards.append(
            f"Low altimeter setting {_format_fixed(observation.altimeter_inhg, 2)} inHg - "
            "Density altitude concerns"
        )


def _forecast_trend(
    observation: CurrentObservation, forecast: Optional[Forecast], ctx: BriefingContext
) -> None:
    if forecast is None or not forecast.periods:
        return

    trend = analyze_forecast_trend(forecast, observation.flight_category, ctx.now)
    if trend is None:
        return

    if trend.warning:
        ctx.hazards.append(trend.warning)
    if trend.deteriorating:
        ctx.latch_high_caution()
    ctx.parts.append(trend.description)


def _final_recommendation(
    observation: CurrentObservation, forecast: Optional[Forecast], ctx: BriefingContext
) -> None:
    category = observation.flight_category

    if ctx.no_go:
        ctx.recommendation = Recommendation.UNFAVORABLE
        ctx.parts.append(
            "RECOMMENDATION: DO NOT FLY. These conditions are too hazardous."
        )
    elif ctx.high_caution or category in (
        FlightCategory.IFR.value,
        FlightCategory.LIFR.value,
    ):
        ctx.recommendation = Recommendation.UNFAVORABLE
        ctx.parts.append(
            "RECOMMENDATION: Stay on the ground unless you are highly proficient and current."
        )
    elif category == FlightCategory.MVFR.value or len(ctx.hazards) >= 2:
        ctx.recommendation = Recommendation.CAUTION
        ctx.parts.append(
            "RECOMMENDATION: Proceed with caution. Monitor conditions closely."
        )
    elif len(ctx.hazards) == 1:
        ctx.recommendation = Recommendation.CAUTION
        ctx.parts.append("RECOMMENDATION: Acceptable for flight, but stay alert.")
    else:
        ctx.recommendation = Recommendation.FAVORABLE
        ctx.parts.append("RECOMMENDATION: Good conditions for VFR flight.")


BRIEFING_STAGES: tuple[BriefingStage, ...] = (
    _critical_weather,
    _flight_category,
    _wind,
    _visibility,
    _fog_risk,
    _ceiling,
    _present_weather,
    _altimeter,
    _forecast_trend,
    _final_recommendation,
)


def evaluate(
    observation: CurrentObservation,
    forecast: Optional[Forecast] = None,
    *,
    now: Optional[datetime] = None,
) -> BriefingSummary:
    """Run every rule stage in order and build the briefing.

    ``now`` anchors the six-hour forecast window and defaults to the current
    UTC time.
    """

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    ctx = BriefingContext(now=now)
    for stage in BRIEFING_STAGES:
        stage(observation, forecast, ctx)

    briefing = BriefingSummary(
        summary=" ".join(ctx.parts),
        hazards=tuple(ctx.hazards),
        recommendation=ctx.recommendation,
        go_no_go=GO_NO_GO_FOR[ctx.recommendation],
    )
    logger.debug(
        "Briefing evaluated: station=%s recommendation=%s hazards=%s",
        observation.station,
        briefing.recommendation.value,
        len(briefing.hazards),
    )
    return briefing


__all__ = [
    "BRIEFING_STAGES",
    "BriefingContext",
    "ForecastTrend",
    "WindAnalysis",
    "analyze_forecast_trend",
    "analyze_wind",
    "assess_flight_category",
    "describe_weather_phenomena",
    "evaluate",
]
