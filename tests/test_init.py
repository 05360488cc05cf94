"""Tests for setting up and unloading BosniaAir."""
from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

import pytest
from pytest_homeassistant_custom_component.common import (
    MockConfigEntry,
    async_fire_time_changed,
)

from homeassistant.config_entries import ConfigEntryState
from homeassistant.util import dt as dt_util

from custom_components.bosnia_air.const import DOMAIN
from custom_components.bosnia_air.waqi_api.exceptions import WaqiApiConnectionError

FETCH_STATION = "custom_components.bosnia_air.waqi_api.api.WaqiApi.async_fetch_station"

CONFIG = {
    "api_token": "token",
    "cities": ["sarajevo"],
    "warm_cities": ["sarajevo"],
    "refresh_interval": 10,
    "live_ttl": 10,
    "forecast_ttl": 120,
}


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable loading the integration from custom_components."""
    yield


@pytest.fixture
def config_entry(hass) -> MockConfigEntry:
    """Fixture providing a BosniaAir config entry."""
    entry = MockConfigEntry(domain=DOMAIN, unique_id=DOMAIN, data=CONFIG)
    entry.add_to_hass(hass)
    return entry


async def test_setup_and_unload(hass, config_entry, station_payload):
    with patch(FETCH_STATION, return_value=station_payload) as fetch:
        assert await hass.config_entries.async_setup(config_entry.entry_id)
        await hass.async_block_till_done()

        assert config_entry.state is ConfigEntryState.LOADED

        state = hass.states.get("sensor.sarajevo_air_quality_index")
        assert state.state == "89"
        assert state.attributes["category"] == "Moderate"
        assert state.attributes["dominant_pollutant"] == "PM2.5"
        assert state.attributes["sub_indices"] == {"PM2.5": 89, "PM10": 73}
        assert state.attributes["station"] == "Sarajevo, Bosnia and Herzegovina"
        assert [d["aqi"] for d in state.attributes["daily"]] == [89] * 7
        assert state.attributes["health_advice"]["athletes"]["risk_level"] == "low"
        assert state.attributes["health_advice"]["children"]["risk_level"] == "moderate"

        assert await hass.config_entries.async_unload(config_entry.entry_id)
        await hass.async_block_till_done()

        calls = fetch.await_count
        async_fire_time_changed(hass, dt_util.utcnow() + timedelta(minutes=30))
        await hass.async_block_till_done()

        assert fetch.await_count == calls

    assert config_entry.state is ConfigEntryState.NOT_LOADED
    assert config_entry.entry_id not in hass.data[DOMAIN]


async def test_refreshes_every_interval(hass, config_entry, station_payload):
    with patch(FETCH_STATION, return_value=station_payload) as fetch:
        assert await hass.config_entries.async_setup(config_entry.entry_id)
        await hass.async_block_till_done()

        calls = fetch.await_count
        station_payload["iaqi"]["pm10"] = {"v": 40}
        station_payload["iaqi"]["pm25"] = {"v": 1}
        async_fire_time_changed(hass, dt_util.utcnow() + timedelta(minutes=11))
        await hass.async_block_till_done()

        assert fetch.await_count > calls
        assert hass.states.get("sensor.sarajevo_air_quality_index").state == "37"

        assert await hass.config_entries.async_unload(config_entry.entry_id)
        await hass.async_block_till_done()


async def test_setup_retried_without_data(hass, config_entry):
    with patch(
        FETCH_STATION,
        side_effect=WaqiApiConnectionError("Unable to reach WAQI API", "url"),
    ):
        assert not await hass.config_entries.async_setup(config_entry.entry_id)
        await hass.async_block_till_done()

        assert config_entry.state is ConfigEntryState.SETUP_RETRY
        assert hass.states.get("sensor.sarajevo_air_quality_index") is None

        assert await hass.config_entries.async_unload(config_entry.entry_id)
        await hass.async_block_till_done()

    assert config_entry.state is ConfigEntryState.NOT_LOADED


async def test_invalid_storage_discarded(
    hass, hass_storage, config_entry, station_payload, caplog
):
    key = f"{DOMAIN}.{config_entry.entry_id}"
    hass_storage[key] = {
        "version": 1,
        "minor_version": 1,
        "key": key,
        "data": ["not", "a", "mapping"],
    }

    with patch(FETCH_STATION, return_value=station_payload):
        assert await hass.config_entries.async_setup(config_entry.entry_id)
        await hass.async_block_till_done()

        assert config_entry.state is ConfigEntryState.LOADED
        assert hass.states.get("sensor.sarajevo_air_quality_index").state == "89"
        assert "Discarding stored air quality data" in caplog.text
        assert hass_storage[key]["data"]["snapshots"]["sarajevo"][0]["aqi"] == 89

        assert await hass.config_entries.async_unload(config_entry.entry_id)
        await hass.async_block_till_done()
