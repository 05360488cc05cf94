"""
Pytest configuration for BosniaAir tests.

Provides in-memory doubles for the WAQI API and the persisted store, a
controllable clock and a representative station feed.
"""
from __future__ import annotations

import asyncio
import copy
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from custom_components.bosnia_air.waqi_api.cache import FreshnessCache
from custom_components.bosnia_air.waqi_api.exceptions import (
    PersistenceError,
    WaqiApiConnectionError,
)
from custom_components.bosnia_air.waqi_api.model import (
    AirQualitySettings,
    City,
    SnapshotRecord,
    StoredForecast,
)
from custom_components.bosnia_air.waqi_api.service import AirQualityService

# 10:00 in Sarajevo
NOW = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)


def make_station_payload() -> dict[str, Any]:
    """Create a WAQI feed for Sarajevo with PM2.5 30 and PM10 100."""
    return {
        "aqi": 89,
        "idx": 10557,
        "city": {
            "name": "Sarajevo, Bosnia and Herzegovina",
            "geo": [43.8563, 18.4131],
            "url": "https://aqicn.org/city/sarajevo",
        },
        "dominentpol": "pm25",
        "iaqi": {
            "pm25": {"v": 30},
            "pm10": {"v": 100},
            "t": {"v": 3.5},
            "h": {"v": 80},
        },
        "time": {
            "s": "2024-01-15 10:00:00",
            "tz": "+01:00",
            "v": 1705309200,
            "iso": "2024-01-15T10:00:00+01:00",
        },
        "forecast": {
            "daily": {
                "pm25": [
                    {"avg": 40, "day": "2024-01-14", "max": 60, "min": 20},
                    {"avg": 55.5, "day": "2024-01-15", "max": 70, "min": 30},
                    {"avg": 20, "day": "2024-01-16", "max": 35, "min": 10},
                ],
                "pm10": [
                    {"avg": 30, "day": "2024-01-15", "max": 45, "min": 15},
                    {"avg": 25, "day": "2024-01-17", "max": 40, "min": 12},
                ],
                "o3": [
                    {"avg": 5, "day": "2024-01-15", "max": 8, "min": 2},
                ],
                "uvi": [
                    {"avg": 1, "day": "2024-01-15", "max": 2, "min": 0},
                ],
            }
        },
    }


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self) -> None:
        self.value = 1000.0

    def __call__(self) -> float:
        return self.value

    def advance(self, delta: timedelta) -> None:
        self.value += delta.total_seconds()


class FakeNow:
    """Wall clock advanced by hand."""

    def __init__(self, value: datetime = NOW) -> None:
        self.value = value

    def __call__(self) -> datetime:
        return self.value

    def advance(self, delta: timedelta) -> None:
        self.value += delta


class FakeApi:
    """WAQI API double counting its calls.

    Attributes:
        payload -- Feed returned by every call.
        error   -- Raised instead of returning the payload when set.
        gate    -- Calls wait for this event when set.
        failing -- Stations that cannot be reached.
    """

    def __init__(self, payload: dict[str, Any]) -> None:
        self.payload = payload
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.failing: set[str] = set()
        self.station_ids: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.station_ids)

    async def async_fetch_station(self, station_id: str) -> dict[str, Any]:
        self.station_ids.append(station_id)

        if self.gate:
            await self.gate.wait()

        if self.error:
            raise self.error

        if station_id in self.failing:
            raise WaqiApiConnectionError("Unable to reach WAQI API", station_id)

        return copy.deepcopy(self.payload)


class FakeStore:
    """In-memory store, failing every operation when fail is set."""

    def __init__(self) -> None:
        self.snapshots: dict[City, list[SnapshotRecord]] = {}
        self.forecasts: dict[City, StoredForecast] = {}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise PersistenceError("disk full")

    async def async_append_snapshot(self, record: SnapshotRecord) -> None:
        self._check()
        self.snapshots.setdefault(record.city, []).append(record)

    async def async_upsert_forecast(
        self, city: City, payload: str, timestamp: datetime
    ) -> None:
        self._check()
        self.forecasts[city] = StoredForecast(city=city, payload=payload, timestamp=timestamp)

    async def async_get_latest_snapshot(self, city: City) -> SnapshotRecord | None:
        self._check()
        snapshots = self.snapshots.get(city)
        return snapshots[-1] if snapshots else None

    async def async_get_snapshots(self, city: City) -> list[SnapshotRecord]:
        self._check()
        return list(self.snapshots.get(city, []))

    async def async_get_forecast(self, city: City) -> StoredForecast | None:
        self._check()
        return self.forecasts.get(city)


@pytest.fixture
def station_payload() -> dict[str, Any]:
    """Fixture providing a Sarajevo station feed."""
    return make_station_payload()


@pytest.fixture
def fake_api(station_payload) -> FakeApi:
    """Fixture providing a WAQI API double."""
    return FakeApi(station_payload)


@pytest.fixture
def fake_store() -> FakeStore:
    """Fixture providing an in-memory store."""
    return FakeStore()


@pytest.fixture
def clock() -> FakeClock:
    """Fixture providing a cache clock."""
    return FakeClock()


@pytest.fixture
def now() -> FakeNow:
    """Fixture providing the service wall clock."""
    return FakeNow()


@pytest.fixture
def settings() -> AirQualitySettings:
    """Fixture providing default settings."""
    return AirQualitySettings()


@pytest.fixture
def service(fake_api, fake_store, clock, now, settings) -> AirQualityService:
    """Fixture providing a service wired to the doubles."""
    return AirQualityService(
        fake_api, settings, cache=FreshnessCache(clock), store=fake_store, now=now
    )
