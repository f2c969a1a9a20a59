"""Normalized weather records consumed by the briefing engine."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WeatherModel(BaseModel):
    """Base model accepting both snake_case names and camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CloudLayer(WeatherModel):
    """A single reported cloud layer."""

    cover: str = Field(..., description="Layer cover code (FEW, SCT, BKN, OVC, ...)")
    base_ft: Optional[int] = Field(
        default=None, description="Layer base in feet AGL; None for CLR/SKC",
    )


class CurrentObservation(WeatherModel):
    """Canonical METAR observation produced by the normalizer."""

    station: str = Field(..., description="Airport identifier")
    flight_category: str = Field(..., description="VFR, MVFR, IFR or LIFR")
    raw_text: str = Field(default="", description="Original report text, verbatim")
    temperature_c: float = Field(default=0, description="Air temperature in Celsius")
    dewpoint_c: float = Field(default=0, description="Dewpoint in Celsius")
    wind_direction: Union[int, str] = Field(
        default="VRB", description="Wind direction in degrees or VRB",
    )
    wind_speed_kt: int = Field(default=0, description="Sustained wind speed in knots")
    wind_gust_kt: Optional[int] = Field(
        default=None, description="Gust speed in knots",
    )
    visibility_sm: float = Field(
        default=10, description="Visibility in statute miles (10 means 10 or more)",
    )
    ceiling_ft: Optional[int] = Field(
        default=None, description="Lowest BKN/OVC base in feet AGL; None when no ceiling",
    )
    altimeter_inhg: float = Field(
        default=0, alias="altimeterInHg", description="Altimeter setting in inHg",
    )
    present_weather: Optional[str] = Field(
        default=None, description="Coded present weather, e.g. +TSRA",
    )
    observation_time: str = Field(..., description="ISO-8601 observation timestamp")
    cloud_layers: list[CloudLayer] = Field(
        default_factory=list, description="Reported cloud layers, lowest first",
    )


class ForecastPeriod(WeatherModel):
    """One TAF forecast period."""

    time_from: str = Field(..., description="Period start, ISO-8601")
    time_to: str = Field(..., description="Period end, ISO-8601")
    wind_speed_kt: int = Field(default=0)
    wind_gust_kt: Optional[int] = Field(default=None)
    visibility_sm: float = Field(default=6)
    ceiling_ft: Optional[int] = Field(default=None)
    flight_category: str = Field(..., description="Derived flight category")
    wx_string: Optional[str] = Field(default=None, description="Coded forecast weather")


class Forecast(WeatherModel):
    """Terminal aerodrome forecast as an ordered sequence of periods."""

    raw_text: str = Field(default="", description="Original TAF text")
    periods: list[ForecastPeriod] = Field(default_factory=list)


__all__ = [
    "CloudLayer",
    "CurrentObservation",
    "Forecast",
    "ForecastPeriod",
    "WeatherModel",
]
