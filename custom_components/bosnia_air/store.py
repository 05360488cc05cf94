"""Persisted snapshots and forecasts for BosniaAir, kept in Home Assistant storage."""
from __future__ import annotations

import asyncio
from datetime import datetime
import logging
from typing import Any, TypedDict

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from .const import DOMAIN, MAX_SNAPSHOTS_PER_CITY, STORAGE_VERSION
from .waqi_api.exceptions import PersistenceError
from .waqi_api.model import City, SnapshotRecord, StoredForecast

_LOGGER = logging.getLogger(__name__)


class StoredForecastData(TypedDict):
    """Forecast row as saved to storage."""

    payload: str
    timestamp: str


class StoreData(TypedDict):
    """Layout of the storage file."""

    snapshots: dict[str, list[dict[str, Any]]]
    forecasts: dict[str, StoredForecastData]


class BosniaAirStore:
    """
    Keep live snapshots and the latest forecast per city.

    Snapshots are appended and trimmed to the most recent max_snapshots per
    city. Forecasts are replaced per city. Every change is saved right away.
    """

    hass: HomeAssistant
    max_snapshots: int
    _data: StoreData | None
    _lock: asyncio.Lock
    _store: Store[StoreData]

    def __init__(
        self,
        hass: HomeAssistant,
        entry_id: str,
        max_snapshots: int = MAX_SNAPSHOTS_PER_CITY,
    ) -> None:
        """Create a new store for a config entry."""

        self.hass = hass
        self.max_snapshots = max_snapshots
        self._data = None
        self._lock = asyncio.Lock()
        self._store = Store(hass, STORAGE_VERSION, f"{DOMAIN}.{entry_id}")

    async def async_load(self) -> None:
        """Load saved data, starting empty if nothing was saved."""

        async with self._lock:
            await self._async_ensure_loaded()

    async def async_append_snapshot(self, record: SnapshotRecord) -> None:
        """Append a live snapshot."""

        async with self._lock:
            data = await self._async_ensure_loaded()
            snapshots = data["snapshots"].setdefault(record.city.key, [])
            snapshots.append(record.as_dict())
            del snapshots[: -self.max_snapshots]

            await self._async_save(data)

        _LOGGER.debug("(%s): stored snapshot with AQI %s", record.city.key, record.aqi)

    async def async_upsert_forecast(
        self, city: City, payload: str, timestamp: datetime
    ) -> None:
        """Insert or replace the serialized forecast of a city."""

        async with self._lock:
            data = await self._async_ensure_loaded()
            data["forecasts"][city.key] = {
                "payload": payload,
                "timestamp": timestamp.isoformat(),
            }

            await self._async_save(data)

        _LOGGER.debug("(%s): stored forecast from %s", city.key, timestamp)

    async def async_get_latest_snapshot(self, city: City) -> SnapshotRecord | None:
        """Get the most recent snapshot of a city."""

        async with self._lock:
            data = await self._async_ensure_loaded()

        snapshots = data["snapshots"].get(city.key)
        if not snapshots:
            return None

        try:
            return SnapshotRecord.from_dict(snapshots[-1])
        except (KeyError, TypeError, ValueError) as err:
            raise PersistenceError(f"Stored snapshot for {city.key} is invalid") from err

    async def async_get_snapshots(self, city: City) -> list[SnapshotRecord]:
        """Get the stored snapshots of a city, oldest first."""

        async with self._lock:
            data = await self._async_ensure_loaded()

        try:
            return [
                SnapshotRecord.from_dict(s) for s in data["snapshots"].get(city.key, [])
            ]
        except (KeyError, TypeError, ValueError) as err:
            raise PersistenceError(f"Stored snapshots for {city.key} are invalid") from err

    async def async_get_forecast(self, city: City) -> StoredForecast | None:
        """Get the stored forecast of a city."""

        async with self._lock:
            data = await self._async_ensure_loaded()

        if not (stored := data["forecasts"].get(city.key)):
            return None

        try:
            return StoredForecast(
                city=city,
                payload=stored["payload"],
                timestamp=datetime.fromisoformat(stored["timestamp"]),
            )
        except (KeyError, TypeError, ValueError) as err:
            raise PersistenceError(f"Stored forecast for {city.key} is invalid") from err

    async def async_remove(self) -> None:
        """Remove the storage file."""

        async with self._lock:
            await self._store.async_remove()
            self._data = None

    async def async_reset(self) -> None:
        """Start from empty data, replacing the storage file on the next save."""

        async with self._lock:
            self._data = _empty_data()

    async def _async_ensure_loaded(self) -> StoreData:
        if self._data is None:
            try:
                loaded = await self._store.async_load()
            except HomeAssistantError as err:
                raise PersistenceError("Unable to load stored air quality data") from err

            if loaded is None:
                loaded = _empty_data()
            elif not (
                isinstance(loaded, dict)
                and isinstance(loaded.get("snapshots"), dict)
                and isinstance(loaded.get("forecasts"), dict)
            ):
                raise PersistenceError("Stored air quality data is invalid")

            self._data = loaded
            _LOGGER.debug(
                "loaded stored data for %s cities", len(self._data["snapshots"])
            )

        return self._data

    async def _async_save(self, data: StoreData) -> None:
        try:
            await self._store.async_save(data)
        except (HomeAssistantError, OSError) as err:
            raise PersistenceError("Unable to save air quality data") from err


def _empty_data() -> StoreData:
    return {"snapshots": {}, "forecasts": {}}
