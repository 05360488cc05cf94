"""The BosniaAir integration."""
from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.util import dt as dt_util

from .const import DOMAIN
from .coordinator import BosniaAirDataUpdateCoordinator
from .model import BosniaAirConfigEntry, BosniaAirDomainData
from .store import BosniaAirStore
from .waqi_api.api import WaqiApi
from .waqi_api.exceptions import PersistenceError
from .waqi_api.service import AirQualityService

PLATFORMS = [Platform.SENSOR]

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass: HomeAssistant, config_entry: ConfigEntry) -> bool:
    """Set up BosniaAir from a config entry."""

    config = BosniaAirConfigEntry.from_data(config_entry.data)
    time_zone = dt_util.get_time_zone(hass.config.time_zone) or dt_util.DEFAULT_TIME_ZONE
    settings = config.to_settings(time_zone)

    store = BosniaAirStore(hass, config_entry.entry_id)
    try:
        await store.async_load()
    except PersistenceError as error:
        _LOGGER.error("Discarding stored air quality data: %s", error)
        await store.async_reset()

    api = WaqiApi(async_get_clientsession(hass), config.api_token)
    service = AirQualityService(api, settings, store=store, now=dt_util.utcnow)
    coordinator = BosniaAirDataUpdateCoordinator(
        service,
        config.get_cities(),
        hass,
        _LOGGER,
        config_entry=config_entry,
        name=DOMAIN,
        update_interval=settings.refresh_interval,
    )

    await coordinator.async_config_entry_first_refresh()

    hass.data.setdefault(DOMAIN, {})[config_entry.entry_id] = BosniaAirDomainData(
        config=config, service=service, coordinator=coordinator, store=store
    )

    config_entry.async_on_unload(coordinator.async_shutdown)
    config_entry.async_on_unload(config_entry.add_update_listener(_async_update_listener))

    try:
        await hass.config_entries.async_forward_entry_setups(config_entry, PLATFORMS)
    except Exception:
        hass.data[DOMAIN].pop(config_entry.entry_id)
        await coordinator.async_shutdown()
        raise

    return True


async def async_unload_entry(hass: HomeAssistant, config_entry: ConfigEntry) -> bool:
    """Unload a config entry."""

    unload_ok = await hass.config_entries.async_unload_platforms(config_entry, PLATFORMS)

    if unload_ok:
        hass.data[DOMAIN].pop(config_entry.entry_id)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, config_entry: ConfigEntry) -> None:
    """Remove stored air quality data when the entry is removed."""

    _LOGGER.debug("removing stored data for entry %s", config_entry.entry_id)
    await BosniaAirStore(hass, config_entry.entry_id).async_remove()


async def _async_update_listener(hass: HomeAssistant, config_entry: ConfigEntry) -> None:
    await hass.config_entries.async_reload(config_entry.entry_id)
