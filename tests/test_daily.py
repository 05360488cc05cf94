"""Tests for building the daily AQI timeline."""
from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from custom_components.bosnia_air.waqi_api.daily import build_daily_timeline
from custom_components.bosnia_air.waqi_api.model import (
    AqiCategory,
    City,
    Pollutant,
    SnapshotRecord,
)

SARAJEVO_TZ = ZoneInfo("Europe/Sarajevo")
TODAY = date(2024, 1, 15)


def make_snapshot(aqi: int, day: int, hour: int = 12) -> SnapshotRecord:
    created_at = datetime(2024, 1, day, hour, tzinfo=timezone.utc)
    return SnapshotRecord(
        city=City.TUZLA,
        station_id="@8739",
        observed_at=created_at,
        aqi=aqi,
        dominant_pollutant=Pollutant.PM10,
        concentrations={Pollutant.PM10: 50.0},
        created_at=created_at,
    )


class TestBuildDailyTimeline:
    """Test suite for build_daily_timeline."""

    def test_fallback_only(self):
        days = build_daily_timeline([], TODAY, SARAJEVO_TZ, 77)

        assert [d.day for d in days] == [date(2024, 1, d) for d in range(9, 16)]
        assert {d.aqi for d in days} == {77}
        assert {d.category for d in days} == {AqiCategory.MODERATE}

    def test_average_rounds_half_up(self):
        days = build_daily_timeline(
            [make_snapshot(90, 15, 8), make_snapshot(93, 15, 9)],
            TODAY,
            SARAJEVO_TZ,
            10,
        )

        assert days[-1].aqi == 92

    def test_snapshots_outside_window_ignored(self):
        days = build_daily_timeline(
            [make_snapshot(300, 8), make_snapshot(30, 10), make_snapshot(400, 16)],
            TODAY,
            SARAJEVO_TZ,
            5,
        )

        assert [d.aqi for d in days] == [5, 30, 30, 30, 30, 30, 30]

    def test_custom_length(self):
        days = build_daily_timeline([], TODAY, SARAJEVO_TZ, 1, days=3)

        assert [d.day.day for d in days] == [13, 14, 15]
        assert days[-1].short_day == "Mon"
        assert days[-1].day_name == "Monday"
