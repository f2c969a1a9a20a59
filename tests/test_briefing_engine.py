from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from skybrief.domain import GoNoGo, Recommendation
from skybrief.models.weather import (
    CloudLayer,
    CurrentObservation,
    Forecast,
    ForecastPeriod,
)
from skybrief.services.briefing_engine import (
    BRIEFING_STAGES,
    analyze_wind,
    describe_weather_phenomena,
    evaluate,
)

NOW = datetime(2026, 2, 18, 12, 0, 0, tzinfo=timezone.utc)


def make_observation(**overrides) -> CurrentObservation:
    fields = {
        "station": "KJFK",
        "flight_category": "VFR",
        "raw_text": "KJFK 181200Z 00000KT 10SM CLR 20/05 A3010",
        "temperature_c": 20,
        "dewpoint_c": 5,
        "wind_direction": 0,
        "wind_speed_kt": 0,
        "wind_gust_kt": None,
        "visibility_sm": 10,
        "ceiling_ft": None,
        "altimeter_inhg": 30.10,
        "present_weather": None,
        "observation_time": "2026-02-18T12:00:00Z",
        "cloud_layers": [],
    }
    fields.update(overrides)
    return CurrentObservation(**fields)


def make_period(hours_from_now: float, category: str, wx: str | None = None) -> ForecastPeriod:
    start = NOW + timedelta(hours=hours_from_now)
    return ForecastPeriod(
        time_from=start.isoformat().replace("+00:00", "Z"),
        time_to=(start + timedelta(hours=3)).isoformat().replace("+00:00", "Z"),
        wind_speed_kt=5,
        visibility_sm=6,
        flight_category=category,
        wx_string=wx,
    )


def test_runs_ten_stages():
    assert len(BRIEFING_STAGES) == 10


def test_benign_vfr_is_favorable():
    result = evaluate(make_observation(), None, now=NOW)

    assert result.hazards == ()
    assert result.recommendation == Recommendation.FAVORABLE
    assert result.go_no_go == GoNoGo.GO
    assert result.summary == (
        "Conditions are VFR - good visibility and ceilings for visual flight. "
        "Winds are calm. Skies are clear to scattered. "
        "RECOMMENDATION: Good conditions for VFR flight."
    )


def test_thunderstorm_is_no_go_regardless_of_other_fields():
    result = evaluate(make_observation(present_weather="TSRA"), now=NOW)

    assert result.hazards[0] == "THUNDERSTORMS PRESENT OR IN VICINITY - DO NOT FLY"
    assert result.recommendation == Recommendation.UNFAVORABLE
    assert result.go_no_go == GoNoGo.NOGO
    # Narrative stages stay silent once grounded.
    assert result.summary.startswith("THUNDERSTORMS are active in the area.")
    assert "Conditions are VFR" not in result.summary
    assert "Reporting" not in result.summary
    assert not any(h.startswith("Active precipitation") for h in result.hazards)
    assert result.summary.endswith(
        "RECOMMENDATION: DO NOT FLY. These conditions are too hazardous."
    )


def test_present_weather_match_is_case_insensitive():
    result = evaluate(make_observation(present_weather="vcts"), now=NOW)

    assert result.hazards[0] == "THUNDERSTORMS PRESENT OR IN VICINITY - DO NOT FLY"
    assert result.go_no_go == GoNoGo.NOGO


def test_critical_checks_fire_independently():
    result = evaluate(make_observation(present_weather="+TSRA SQ FZRA"), now=NOW)

    assert list(result.hazards) == [
        "THUNDERSTORMS PRESENT OR IN VICINITY - DO NOT FLY",
        "FREEZING RAIN/DRIZZLE - Severe icing conditions",
        "FUNNEL CLOUD or SQUALLS reported",
    ]


def test_freezing_drizzle_is_no_go():
    result = evaluate(make_observation(present_weather="-FZDZ"), now=NOW)

    assert result.hazards == ("FREEZING RAIN/DRIZZLE - Severe icing conditions",)
    assert "extremely hazardous for non-FIKI aircraft" in result.summary
    assert result.recommendation == Recommendation.UNFAVORABLE


def test_extremely_low_ceiling_is_no_go():
    result = evaluate(
        make_observation(
            ceiling_ft=450, cloud_layers=[CloudLayer(cover="OVC", base_ft=450)]
        ),
        now=NOW,
    )

    assert "EXTREMELY LOW CEILING at 450 ft AGL - LIFR conditions" in result.hazards
    assert result.go_no_go == GoNoGo.NOGO
    assert "DO NOT FLY" in result.summary


def test_hazards_follow_stage_order():
    result = evaluate(
        make_observation(present_weather="TS", ceiling_ft=300, wind_speed_kt=30),
        now=NOW,
    )

    ts_index = result.hazards.index("THUNDERSTORMS PRESENT OR IN VICINITY - DO NOT FLY")
    wind_index = next(
        i for i, h in enumerate(result.hazards) if h.startswith("Strong sustained winds")
    )
    ceiling_index = next(
        i for i, h in enumerate(result.hazards) if h.startswith("EXTREMELY LOW CEILING")
    )
    assert ts_index < wind_index < ceiling_index


def test_fog_forming_escalates_to_unfavorable():
    result = evaluate(make_observation(temperature_c=10, dewpoint_c=9.5), now=NOW)

    assert result.hazards == ("Temp/dewpoint spread 0.5 C - FOG FORMING NOW or imminent",)
    # High caution outranks the single-hazard caution branch even in VFR.
    assert result.recommendation == Recommendation.UNFAVORABLE
    assert result.go_no_go == GoNoGo.NOGO
    assert "Stay on the ground unless you are highly proficient and current." in result.summary


def test_fog_monitor_band_does_not_latch():
    result = evaluate(make_observation(temperature_c=12, dewpoint_c=10), now=NOW)

    assert result.hazards == (
        "Temp/dewpoint spread 2.0 C - Monitor closely for fog development",
    )
    assert result.recommendation == Recommendation.CAUTION
    assert result.go_no_go == GoNoGo.MARGINAL
    assert "Acceptable for flight, but stay alert." in result.summary


def test_negative_spread_still_warns_of_fog():
    # Dewpoint above temperature is not clamped.
    result = evaluate(make_observation(temperature_c=5, dewpoint_c=8), now=NOW)

    assert result.hazards == (
        "Temp/dewpoint spread -3.0 C - FOG FORMING NOW or imminent",
    )
    assert result.go_no_go == GoNoGo.NOGO


def test_deteriorating_forecast_sets_high_caution():
    forecast = Forecast(periods=[make_period(2, "LIFR")])

    result = evaluate(make_observation(), forecast, now=NOW)

    assert result.hazards == (
        "Conditions forecast to deteriorate to LIFR within the next 6 hours",
    )
    assert (
        "FORECAST TREND: Conditions expected to worsen from VFR to LIFR in the next 6 hours."
        in result.summary
    )
    assert result.recommendation == Recommendation.UNFAVORABLE
    assert result.go_no_go == GoNoGo.NOGO


def test_forecast_thunderstorms_take_hazard_priority():
    forecast = Forecast(periods=[make_period(1, "IFR", "TSRA"), make_period(3, "VFR", "FZDZ")])

    result = evaluate(make_observation(), forecast, now=NOW)

    assert result.hazards == ("TAF forecasts THUNDERSTORMS within the next 6 hours",)
    assert "worsen from VFR to IFR" in result.summary
    assert result.go_no_go == GoNoGo.NOGO


def test_forecast_freezing_precip_without_deterioration():
    forecast = Forecast(periods=[make_period(1, "VFR", "-FZRA")])

    result = evaluate(make_observation(), forecast, now=NOW)

    assert result.hazards == (
        "TAF forecasts FREEZING PRECIPITATION within the next 6 hours",
    )
    assert (
        "FORECAST TREND: Conditions expected to remain VFR for the next 6 hours."
        in result.summary
    )
    assert result.recommendation == Recommendation.CAUTION


def test_forecast_outside_window_is_ignored():
    forecast = Forecast(periods=[make_period(7, "LIFR", "TS")])

    result = evaluate(make_observation(), forecast, now=NOW)

    assert result.hazards == ()
    assert "FORECAST TREND" not in result.summary
    assert result.recommendation == Recommendation.FAVORABLE


def test_forecast_window_includes_boundary():
    forecast = Forecast(periods=[make_period(6, "MVFR")])

    result = evaluate(make_observation(), forecast, now=NOW)

    assert "worsen from VFR to MVFR" in result.summary


def test_forecast_unknown_category_ranks_as_vfr():
    forecast = Forecast(periods=[make_period(1, "UNKN")])

    result = evaluate(make_observation(flight_category="MVFR"), forecast, now=NOW)

    assert "expected to remain MVFR" in result.summary
    assert result.hazards == ()


def test_naive_now_is_treated_as_utc():
    forecast = Forecast(periods=[make_period(2, "IFR")])

    result = evaluate(make_observation(), forecast, now=NOW.replace(tzinfo=None))

    assert "worsen from VFR to IFR" in result.summary


def test_empty_forecast_is_skipped():
    result = evaluate(make_observation(), Forecast(periods=[]), now=NOW)

    assert "FORECAST TREND" not in result.summary


@pytest.mark.parametrize(
    "speed,gust,expected",
    [
        (20, 40, "STRONG GUSTS to 40 kts - Approach and landing will be challenging"),
        (20, 28, "Gusty winds (8 kt gust spread) - Expect bumpy approach, use caution"),
        (5, 22, "Gusty winds (17 kt gust spread) - Expect bumpy approach, use caution"),
        (10, 22, "Moderate gusts (12 kt spread) - Stay alert on approach"),
        (10, 18, None),
        (30, None, "Strong sustained winds at 30 kts - Crosswind component may be significant"),
        (30, 0, "Strong sustained winds at 30 kts - Crosswind component may be significant"),
    ],
)
def test_wind_warnings(speed, gust, expected):
    analysis = analyze_wind(
        make_observation(wind_direction=270, wind_speed_kt=speed, wind_gust_kt=gust)
    )

    assert analysis.warning == expected
    assert analysis.high_caution == (gust is not None and gust > 35)


def test_wind_description_formats_direction():
    assert (
        analyze_wind(make_observation(wind_direction=90, wind_speed_kt=8)).description
        == "Winds from 090 degrees at 8 kts."
    )
    assert (
        analyze_wind(make_observation(wind_direction="VRB", wind_speed_kt=4)).description
        == "Winds variable at 4 kts."
    )
    assert (
        analyze_wind(make_observation(wind_direction=0, wind_speed_kt=4)).description
        == "Winds variable at 4 kts."
    )
    assert (
        analyze_wind(
            make_observation(wind_direction=310, wind_speed_kt=12, wind_gust_kt=20)
        ).description
        == "Winds from 310 degrees at 12 kts, gusting 20 kts."
    )


def test_strong_gusts_ground_the_flight():
    result = evaluate(
        make_observation(wind_direction=270, wind_speed_kt=20, wind_gust_kt=40), now=NOW
    )

    assert result.go_no_go == GoNoGo.NOGO
    assert "Winds from 270 degrees at 20 kts, gusting 40 kts." in result.summary


def test_very_low_visibility_grounds_only_in_lifr():
    lifr = evaluate(make_observation(flight_category="LIFR", visibility_sm=0.5), now=NOW)
    vfr = evaluate(make_observation(visibility_sm=0.5), now=NOW)

    assert lifr.hazards == ("VERY LOW VISIBILITY at 0.5 SM - IFR conditions",)
    assert "DO NOT FLY" in lifr.summary
    assert vfr.hazards == ("VERY LOW VISIBILITY at 0.5 SM - IFR conditions",)
    assert vfr.recommendation == Recommendation.CAUTION


def test_low_visibility_renders_whole_numbers_plainly():
    result = evaluate(make_observation(visibility_sm=2.0), now=NOW)

    assert result.hazards == ("Low visibility at 2 SM - Reduced VFR margins",)


def test_low_ceiling_sets_high_caution():
    result = evaluate(make_observation(ceiling_ft=800), now=NOW)

    assert result.hazards == ("Low ceiling at 800 ft AGL - Requires high proficiency",)
    assert result.go_no_go == GoNoGo.NOGO


@pytest.mark.parametrize(
    "ceiling,layers,expected",
    [
        (1500, [CloudLayer(cover="OVC", base_ft=1500)], "Ceiling 1,500 ft overcast."),
        (
            2200,
            [CloudLayer(cover="SCT", base_ft=900), CloudLayer(cover="BKN", base_ft=2200)],
            "Ceiling 2,200 ft broken.",
        ),
        (1200, [], "Ceiling 1,200 ft broken."),
        (5000, [CloudLayer(cover="OVC", base_ft=5000)], "Good ceiling at 5,000 ft."),
    ],
)
def test_ceiling_narrative(ceiling, layers, expected):
    result = evaluate(make_observation(ceiling_ft=ceiling, cloud_layers=layers), now=NOW)

    assert expected in result.summary
    assert result.hazards == ()


def test_light_rain_adds_precipitation_hazard():
    result = evaluate(make_observation(present_weather="-RA"), now=NOW)

    assert "Reporting rain in the vicinity." in result.summary
    assert result.hazards == ("Active precipitation: -RA",)
    assert result.recommendation == Recommendation.CAUTION


def test_mist_is_narrated_without_hazard():
    result = evaluate(make_observation(present_weather="BR"), now=NOW)

    assert "Reporting mist in the vicinity." in result.summary
    assert result.hazards == ()


def test_describe_weather_phenomena_uses_table_order():
    assert describe_weather_phenomena("-SHRA") == "Reporting rain, showers in the vicinity."
    assert (
        describe_weather_phenomena("FZFG")
        == "Reporting fog, freezing precipitation in the vicinity."
    )
    assert describe_weather_phenomena("UP") is None


def test_low_altimeter_hazard():
    result = evaluate(make_observation(altimeter_inhg=29.75), now=NOW)

    assert result.hazards == (
        "Low altimeter setting 29.75 inHg - Density altitude concerns",
    )


def test_mvfr_without_hazards_is_caution():
    result = evaluate(make_observation(flight_category="MVFR"), now=NOW)

    assert result.hazards == ()
    assert result.recommendation == Recommendation.CAUTION
    assert result.summary.startswith("Conditions are Marginal VFR")
    assert "Proceed with caution. Monitor conditions closely." in result.summary


def test_ifr_is_unfavorable_without_hazards():
    result = evaluate(make_observation(flight_category="IFR"), now=NOW)

    assert result.hazards == ()
    assert result.go_no_go == GoNoGo.NOGO


def test_two_hazards_in_vfr_is_caution():
    result = evaluate(
        make_observation(present_weather="-RA", altimeter_inhg=29.70), now=NOW
    )

    assert len(result.hazards) == 2
    assert result.recommendation == Recommendation.CAUTION
    assert "Proceed with caution" in result.summary


def test_unknown_category_falls_back_to_generic_text():
    result = evaluate(make_observation(flight_category="UNKN"), now=NOW)

    assert result.summary.startswith("Current flight category: UNKN.")
    assert result.recommendation == Recommendation.FAVORABLE


@pytest.mark.parametrize(
    "overrides",
    [
        {"present_weather": "TS"},
        {"present_weather": "+FZRA"},
        {"present_weather": "FC"},
        {"ceiling_ft": 200},
        {"flight_category": "LIFR", "visibility_sm": 0.25},
    ],
)
def test_no_go_conditions_always_ground(overrides):
    result = evaluate(make_observation(**overrides), now=NOW)

    assert result.recommendation == Recommendation.UNFAVORABLE
    assert result.go_no_go == GoNoGo.NOGO


def test_evaluation_is_repeatable():
    observation = make_observation(present_weather="-RA", wind_speed_kt=12, wind_gust_kt=24)
    forecast = Forecast(periods=[make_period(2, "MVFR")])

    first = evaluate(observation, forecast, now=NOW)
    second = evaluate(observation, forecast, now=NOW)

    assert first == second
    assert first.model_dump_json() == second.model_dump_json()


def test_nan_values_do_not_raise():
    result = evaluate(
        make_observation(temperature_c=float("nan"), altimeter_inhg=float("nan")), now=NOW
    )

    assert result.recommendation == Recommendation.FAVORABLE


def test_summary_is_immutable_and_serializes_camel_case():
    result = evaluate(make_observation(), now=NOW)

    with pytest.raises(ValidationError):
        result.summary = "changed"

    payload = result.model_dump(mode="json", by_alias=True)
    assert payload["goNoGo"] == "go"
    assert payload["recommendation"] == "FAVORABLE"
    assert payload["hazards"] == []


@pytest.mark.parametrize(
    "overrides,hazards,recommendation",
    [
        (
            {"ceiling_ft": 499},
            ("EXTREMELY LOW CEILING at 499 ft AGL - LIFR conditions",),
            Recommendation.UNFAVORABLE,
        ),
        (
            {"ceiling_ft": 500},
            ("Low ceiling at 500 ft AGL - Requires high proficiency",),
            Recommendation.UNFAVORABLE,
        ),
        (
            {"ceiling_ft": 999},
            ("Low ceiling at 999 ft AGL - Requires high proficiency",),
            Recommendation.UNFAVORABLE,
        ),
        ({"ceiling_ft": 1000}, (), Recommendation.FAVORABLE),
        (
            {"visibility_sm": 0.99},
            ("VERY LOW VISIBILITY at 0.99 SM - IFR conditions",),
            Recommendation.CAUTION,
        ),
        (
            {"visibility_sm": 1},
            ("Low visibility at 1 SM - Reduced VFR margins",),
            Recommendation.CAUTION,
        ),
        (
            {"visibility_sm": 2.99},
            ("Low visibility at 2.99 SM - Reduced VFR margins",),
            Recommendation.CAUTION,
        ),
        ({"visibility_sm": 3}, (), Recommendation.FAVORABLE),
        (
            {"temperature_c": 10, "dewpoint_c": 9},
            ("Temp/dewpoint spread 1.0 C - FOG FORMING NOW or imminent",),
            Recommendation.UNFAVORABLE,
        ),
        (
            {"temperature_c": 10, "dewpoint_c": 8},
            ("Temp/dewpoint spread 2.0 C - Monitor closely for fog development",),
            Recommendation.CAUTION,
        ),
        ({"temperature_c": 10, "dewpoint_c": 7.5}, (), Recommendation.FAVORABLE),
        (
            {"wind_direction": 270, "wind_speed_kt": 20, "wind_gust_kt": 36},
            ("STRONG GUSTS to 36 kts - Approach and landing will be challenging",),
            Recommendation.UNFAVORABLE,
        ),
        (
            {"wind_direction": 270, "wind_speed_kt": 20, "wind_gust_kt": 35},
            ("Gusty winds (15 kt gust spread) - Expect bumpy approach, use caution",),
            Recommendation.CAUTION,
        ),
        (
            {"wind_direction": 270, "wind_speed_kt": 20, "wind_gust_kt": 26},
            ("Gusty winds (6 kt gust spread) - Expect bumpy approach, use caution",),
            Recommendation.CAUTION,
        ),
        (
            {"wind_direction": 270, "wind_speed_kt": 20, "wind_gust_kt": 25},
            (),
            Recommendation.FAVORABLE,
        ),
        (
            {"wind_direction": 270, "wind_speed_kt": 4, "wind_gust_kt": 20},
            ("Gusty winds (16 kt gust spread) - Expect bumpy approach, use caution",),
            Recommendation.CAUTION,
        ),
        (
            {"wind_direction": 270, "wind_speed_kt": 5, "wind_gust_kt": 20},
            ("Moderate gusts (15 kt spread) - Stay alert on approach",),
            Recommendation.CAUTION,
        ),
        (
            {"wind_direction": 270, "wind_speed_kt": 9, "wind_gust_kt": 20},
            ("Moderate gusts (11 kt spread) - Stay alert on approach",),
            Recommendation.CAUTION,
        ),
        (
            {"wind_direction": 270, "wind_speed_kt": 10, "wind_gust_kt": 20},
            (),
            Recommendation.FAVORABLE,
        ),
        (
            {"wind_direction": 270, "wind_speed_kt": 26},
            ("Strong sustained winds at 26 kts - Crosswind component may be significant",),
            Recommendation.CAUTION,
        ),
        ({"wind_direction": 270, "wind_speed_kt": 25}, (), Recommendation.FAVORABLE),
        ({"altimeter_inhg": 29.80}, (), Recommendation.FAVORABLE),
        (
            {"altimeter_inhg": 29.79},
            ("Low altimeter setting 29.79 inHg - Density altitude concerns",),
            Recommendation.CAUTION,
        ),
    ],
)
def test_rule_thresholds(overrides, hazards, recommendation):
    result = evaluate(make_observation(**overrides), now=NOW)

    assert result.hazards == hazards
    assert result.recommendation == recommendation


@pytest.mark.parametrize(
    "ceiling,expected",
    [
        (2999, "Ceiling 2,999 ft broken."),
        (3000, "Good ceiling at 3,000 ft."),
    ],
)
def test_ceiling_narrative_threshold(ceiling, expected):
    result = evaluate(make_observation(ceiling_ft=ceiling), now=NOW)

    assert result.hazards == ()
    assert expected in result.summary


@pytest.mark.parametrize(
    "temperature,dewpoint,expected",
    [
        (10.25, 10.0, "Temp/dewpoint spread 0.3 C - FOG FORMING NOW or imminent"),
        (9.75, 10.0, "Temp/dewpoint spread -0.3 C - FOG FORMING NOW or imminent"),
        (11.75, 10.0, "Temp/dewpoint spread 1.8 C - Monitor closely for fog development"),
    ],
)
def test_spread_rounds_ties_away_from_zero(temperature, dewpoint, expected):
    result = evaluate(
        make_observation(temperature_c=temperature, dewpoint_c=dewpoint), now=NOW
    )

    assert result.hazards[0] == expected


def test_altimeter_rounds_ties_up():
    result = evaluate(make_observation(altimeter_inhg=29.125), now=NOW)

    assert result.hazards == (
        "Low altimeter setting 29.13 inHg - Density altitude concerns",
    )
