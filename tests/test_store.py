"""Tests for the BosniaAir storage."""
from __future__ import annotations

from datetime import timedelta

import pytest

from custom_components.bosnia_air.store import BosniaAirStore
from custom_components.bosnia_air.waqi_api.exceptions import PersistenceError
from custom_components.bosnia_air.waqi_api.model import (
    City,
    Pollutant,
    SnapshotRecord,
)

from .conftest import NOW

STORAGE_KEY = "bosnia_air.entry1"


def make_snapshot(aqi: int, minutes: int = 0, city: City = City.SARAJEVO) -> SnapshotRecord:
    created_at = NOW + timedelta(minutes=minutes)
    return SnapshotRecord(
        city=city,
        station_id=city.station_id,
        observed_at=created_at,
        aqi=aqi,
        dominant_pollutant=Pollutant.PM25,
        concentrations={Pollutant.PM25: 30.0},
        created_at=created_at,
    )


class TestBosniaAirStore:
    """Test suite for BosniaAirStore."""

    async def test_empty(self, hass):
        store = BosniaAirStore(hass, "entry1")
        await store.async_load()

        assert await store.async_get_latest_snapshot(City.SARAJEVO) is None
        assert await store.async_get_snapshots(City.SARAJEVO) == []
        assert await store.async_get_forecast(City.SARAJEVO) is None

    async def test_append_and_latest(self, hass):
        store = BosniaAirStore(hass, "entry1")
        await store.async_append_snapshot(make_snapshot(40))
        await store.async_append_snapshot(make_snapshot(60, minutes=10))
        await store.async_append_snapshot(make_snapshot(99, city=City.TUZLA))

        latest = await store.async_get_latest_snapshot(City.SARAJEVO)

        assert latest == make_snapshot(60, minutes=10)
        assert [s.aqi for s in await store.async_get_snapshots(City.SARAJEVO)] == [
            40,
            60,
        ]

    async def test_snapshots_trimmed(self, hass):
        store = BosniaAirStore(hass, "entry1", max_snapshots=3)
        for minutes in range(5):
            await store.async_append_snapshot(make_snapshot(minutes, minutes=minutes))

        snapshots = await store.async_get_snapshots(City.SARAJEVO)

        assert [s.aqi for s in snapshots] == [2, 3, 4]

    async def test_forecast_upsert_replaces(self, hass):
        store = BosniaAirStore(hass, "entry1")
        await store.async_upsert_forecast(City.MOSTAR, '{"days": []}', NOW)
        await store.async_upsert_forecast(
            City.MOSTAR, '{"days": [1]}', NOW + timedelta(hours=1)
        )

        stored = await store.async_get_forecast(City.MOSTAR)

        assert stored.city is City.MOSTAR
        assert stored.payload == '{"days": [1]}'
        assert stored.timestamp == NOW + timedelta(hours=1)

    async def test_saved_to_storage(self, hass, hass_storage):
        store = BosniaAirStore(hass, "entry1")
        await store.async_append_snapshot(make_snapshot(40))
        await store.async_upsert_forecast(City.SARAJEVO, "{}", NOW)

        data = hass_storage[STORAGE_KEY]["data"]

        assert data["snapshots"]["sarajevo"][0]["aqi"] == 40
        assert data["snapshots"]["sarajevo"][0]["concentrations"] == {"pm25": 30.0}
        assert data["forecasts"]["sarajevo"] == {
            "payload": "{}",
            "timestamp": NOW.isoformat(),
        }

    async def test_survives_reload(self, hass):
        store = BosniaAirStore(hass, "entry1")
        await store.async_append_snapshot(make_snapshot(40))

        reloaded = BosniaAirStore(hass, "entry1")
        await reloaded.async_load()

        assert await reloaded.async_get_latest_snapshot(City.SARAJEVO) == make_snapshot(
            40
        )

    async def test_entries_are_separate(self, hass):
        await BosniaAirStore(hass, "entry1").async_append_snapshot(make_snapshot(40))

        other = BosniaAirStore(hass, "entry2")

        assert await other.async_get_latest_snapshot(City.SARAJEVO) is None

    async def test_invalid_stored_snapshot(self, hass, hass_storage):
        hass_storage[STORAGE_KEY] = {
            "version": 1,
            "minor_version": 1,
            "key": STORAGE_KEY,
            "data": {
                "snapshots": {"sarajevo": [{"city": "sarajevo", "aqi": "lots"}]},
                "forecasts": {"sarajevo": {"payload": "{}", "timestamp": "noon"}},
            },
        }
        store = BosniaAirStore(hass, "entry1")

        with pytest.raises(PersistenceError):
            await store.async_get_latest_snapshot(City.SARAJEVO)

        with pytest.raises(PersistenceError):
            await store.async_get_forecast(City.SARAJEVO)

    async def test_remove(self, hass, hass_storage):
        store = BosniaAirStore(hass, "entry1")
        await store.async_append_snapshot(make_snapshot(40))

        await store.async_remove()

        assert STORAGE_KEY not in hass_storage
        assert await store.async_get_latest_snapshot(City.SARAJEVO) is None

    @pytest.mark.parametrize("data", [["garbage"], {"snapshots": []}, "text"])
    async def test_invalid_layout(self, hass, hass_storage, data):
        hass_storage[STORAGE_KEY] = {
            "version": 1,
            "minor_version": 1,
            "key": STORAGE_KEY,
            "data": data,
        }
        store = BosniaAirStore(hass, "entry1")

        with pytest.raises(PersistenceError):
            await store.async_load()

    async def test_reset_replaces_invalid_data(self, hass, hass_storage):
        hass_storage[STORAGE_KEY] = {
            "version": 1,
            "minor_version": 1,
            "key": STORAGE_KEY,
            "data": ["garbage"],
        }
        store = BosniaAirStore(hass, "entry1")

        await store.async_reset()
        await store.async_append_snapshot(make_snapshot(40))

        assert [s.aqi for s in await store.async_get_snapshots(City.SARAJEVO)] == [40]
        assert hass_storage[STORAGE_KEY]["data"]["forecasts"] == {}
