"""Fetch-and-refresh service serving air quality data from the cache or WAQI."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import partial
import json
import logging
from typing import Any, Callable, Iterable, Protocol

from .aqi import compute_aqi
from .cache import FreshnessCache
from .const import (
    DATA_KIND_DAILY,
    DATA_KIND_FORECAST,
    DATA_KIND_LIVE,
    DATA_KINDS,
    SNAPSHOT_DEDUP_WINDOW,
)
from .daily import build_daily_timeline
from .exceptions import (
    AirQualityError,
    DataUnavailableError,
    InvalidArgumentError,
    UpstreamFailureError,
    WaqiApiError,
)
from .health import build_health_advice
from .model import (
    AirQualitySettings,
    CacheKey,
    City,
    CityComparisonEntry,
    CompleteResult,
    DailyAqiResult,
    ForecastResult,
    HealthAdviceResult,
    LiveResult,
    SnapshotRecord,
    StoredForecast,
)
from .responses import WaqiData
from .util import build_forecast_result, build_live_result, build_measurements

_LOGGER = logging.getLogger(__name__)


class StationApi(Protocol):
    """Define the protocol an upstream client must implement."""

    async def async_fetch_station(self, station_id: str) -> WaqiData:
        """Fetch the feed of a station."""
        ...


class SnapshotStore(Protocol):
    """Define the protocol a persisted store must implement."""

    async def async_append_snapshot(self, record: SnapshotRecord) -> None:
        """Append a live snapshot."""
        ...

    async def async_upsert_forecast(
        self, city: City, payload: str, timestamp: datetime
    ) -> None:
        """Insert or replace the serialized forecast of a city."""
        ...

    async def async_get_latest_snapshot(self, city: City) -> SnapshotRecord | None:
        """Get the most recent snapshot of a city."""
        ...

    async def async_get_snapshots(self, city: City) -> list[SnapshotRecord]:
        """Get the snapshots of a city, oldest first."""
        ...

    async def async_get_forecast(self, city: City) -> StoredForecast | None:
        """Get the stored forecast of a city."""
        ...


@dataclass
class _InflightFetch:
    """An upstream fetch shared by every caller waiting on the same city."""

    task: asyncio.Task[WaqiData]
    waiters: int = field(default=0)
    abandoned: bool = field(default=False)


class AirQualityService:
    """
    Serve live and forecast data for cities.

    Lookups are answered from the freshness cache while the entry is younger
    than the TTL of its kind. Otherwise WAQI is asked, the result is computed,
    cached and persisted. Concurrent lookups for the same city share a single
    upstream request.
    """

    api: StationApi
    settings: AirQualitySettings
    cache: FreshnessCache
    store: SnapshotStore | None
    _now: Callable[[], datetime]
    _inflight: dict[City, _InflightFetch]

    def __init__(
        self,
        api: StationApi,
        settings: AirQualitySettings,
        *,
        cache: FreshnessCache | None = None,
        store: SnapshotStore | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        """Create a new AirQualityService."""

        self.api = api
        self.settings = settings
        self.cache = cache if cache is not None else FreshnessCache()
        self.store = store
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._inflight = {}

    def local_now(self) -> datetime:
        """Get the current time in the configured time zone."""
        return self._now().astimezone(self.settings.time_zone)

    async def async_get_live(
        self, city: City | str, force_fresh: bool = False
    ) -> LiveResult:
        """
        Get live data for a city.

        Raises a DataUnavailableError when WAQI fails and no usable data exists.
        """

        return await self._async_get(City.parse(city), DATA_KIND_LIVE, force_fresh)

    async def async_get_forecast(
        self, city: City | str, force_fresh: bool = False
    ) -> ForecastResult:
        """
        Get the forecast for a city.

        Raises a DataUnavailableError when WAQI fails and no usable data exists.
        """

        return await self._async_get(City.parse(city), DATA_KIND_FORECAST, force_fresh)

    async def async_get_complete(
        self, city: City | str, force_fresh: bool = False
    ) -> CompleteResult:
        """
        Get live data and forecast for a city.

        Both share one upstream request. A missing forecast is replaced by an
        empty one, while a live failure is raised.
        """

        city = City.parse(city)
        live, forecast = await asyncio.gather(
            self.async_get_live(city, force_fresh),
            self.async_get_forecast(city, force_fresh),
            return_exceptions=True,
        )

        if isinstance(live, BaseException):
            raise live

        if isinstance(forecast, DataUnavailableError):
            _LOGGER.info(
                "No forecast for %s, returning live data only", city.display_name
            )
            forecast = ForecastResult(city=city, days=(), retrieved_at=self.local_now())
        elif isinstance(forecast, BaseException):
            raise forecast

        return CompleteResult(live=live, forecast=forecast, retrieved_at=self.local_now())

    async def async_get_daily(self, city: City | str) -> DailyAqiResult:
        """
        Get the average AQI of each of the last seven days for a city.

        Days are built from the stored snapshots, a day without snapshots
        repeats the day before. Days before the first snapshot use the most
        recent stored AQI, or the live AQI when nothing is stored. Raises a
        DataUnavailableError when neither exists.
        """

        city = City.parse(city)
        snapshots = await self._async_read_snapshots(city)

        if snapshots:
            fallback_aqi = snapshots[-1].aqi
        else:
            try:
                live = await self.async_get_live(city)
            except DataUnavailableError as err:
                raise DataUnavailableError(city, DATA_KIND_DAILY) from err

            fallback_aqi = live.overall_aqi

        local_now = self.local_now()
        days = build_daily_timeline(
            snapshots, local_now.date(), self.settings.time_zone, fallback_aqi
        )
        return DailyAqiResult(city=city, days=days, retrieved_at=local_now)

    async def async_get_health_advice(self, city: City | str) -> HealthAdviceResult:
        """
        Get health advice per group for the current AQI of a city.

        Raises a DataUnavailableError when no live data is available.
        """

        live = await self.async_get_live(city)
        return build_health_advice(live.city, live.overall_aqi, self.local_now())

    async def async_refresh_city(
        self, city: City | str
    ) -> dict[str, AirQualityError | None]:
        """
        Force a refresh of live data and forecast for a city.

        Returns the error per data kind, None for each kind that was refreshed.
        Cached or stored data is never served in place of a failed refresh.
        """

        city = City.parse(city)
        results = await asyncio.gather(
            self._async_get(city, DATA_KIND_LIVE, True, fallback=False),
            self._async_get(city, DATA_KIND_FORECAST, True, fallback=False),
            return_exceptions=True,
        )

        errors: dict[str, AirQualityError | None] = {}
        for kind, result in zip(DATA_KINDS, results):
            if isinstance(result, AirQualityError):
                errors[kind] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                errors[kind] = None

        return errors

    async def async_compare_cities(
        self, cities: Iterable[City | str]
    ) -> list[CityComparisonEntry]:
        """
        Compare fresh live data across cities.

        Names are de-duplicated case insensitively and Sarajevo is used when
        none are given. Unknown cities and failures are reported as entries with
        an error rather than raised.
        """

        requested: dict[City | str, None] = {}
        for name in cities:
            name = name if isinstance(name, City) else str(name).strip()
            if not name:
                continue

            try:
                requested[City.parse(name)] = None
            except InvalidArgumentError:
                requested[name.lower()] = None

        if not requested:
            requested[City.SARAJEVO] = None

        async def compare(city: City | str) -> CityComparisonEntry:
            if not isinstance(city, City):
                return CityComparisonEntry(city=city, error=f"Unknown city: {city}")

            try:
                live = await self.async_get_live(city, force_fresh=True)
            except AirQualityError as err:
                return CityComparisonEntry(city=city.display_name, error=err.message)

            return CityComparisonEntry(
                city=city.display_name,
                aqi=live.overall_aqi,
                category=live.category,
                dominant_pollutant=live.dominant_pollutant,
                observed_at=live.observed_at,
            )

        return list(await asyncio.gather(*(compare(c) for c in requested)))

    async def _async_get(
        self, city: City, kind: str, force_fresh: bool, fallback: bool = True
    ) -> Any:
        key = CacheKey(city, kind)

        if not force_fresh:
            payload, found = self.cache.get(key, self._ttl(kind))
            if found:
                _LOGGER.debug("(%s): serving cached %s data", city.display_name, kind)
                return payload

        try:
            data = await self._async_fetch(city)
            result = self._build_result(city, kind, data)
        except UpstreamFailureError as err:
            _LOGGER.warning("Unable to fetch %s data: %s", kind, err)
            if not fallback:
                raise

            return await self._async_fallback(city, kind, err)

        self.cache.set(key, result)
        await self._async_persist(city, kind, result)
        return result

    async def _async_fetch(self, city: City) -> WaqiData:
        inflight = self._inflight.get(city)
        if inflight is None or inflight.abandoned:
            task = asyncio.create_task(
                self._async_fetch_upstream(city), name=f"waqi fetch {city.key}"
            )
            inflight = self._inflight[city] = _InflightFetch(task)
            task.add_done_callback(partial(self._fetch_done, city, inflight))
        else:
            _LOGGER.debug("(%s): joining in-flight fetch", city.display_name)

        inflight.waiters += 1
        try:
            return await asyncio.shield(inflight.task)
        finally:
            inflight.waiters -= 1
            if not inflight.waiters and not inflight.task.done():
                _LOGGER.debug(
                    "(%s): all callers cancelled, cancelling fetch", city.display_name
                )
                inflight.abandoned = True
                inflight.task.cancel()

    async def _async_fetch_upstream(self, city: City) -> WaqiData:
        try:
            return await self.api.async_fetch_station(city.station_id)
        except WaqiApiError as err:
            raise UpstreamFailureError(city, err) from err

    def _fetch_done(
        self, city: City, inflight: _InflightFetch, task: asyncio.Task[WaqiData]
    ) -> None:
        if self._inflight.get(city) is inflight:
            del self._inflight[city]

        # retrieved here so a fetch nobody awaits anymore is not reported
        if not task.cancelled():
            task.exception()

    def _build_result(self, city: City, kind: str, data: WaqiData) -> Any:
        now = self._now()
        tz = self.settings.time_zone

        try:
            if kind == DATA_KIND_LIVE:
                return build_live_result(city, data, tz, now)

            return build_forecast_result(city, data, tz, now)
        except WaqiApiError as err:
            raise UpstreamFailureError(city, err) from err

    async def _async_fallback(
        self, city: City, kind: str, err: UpstreamFailureError
    ) -> Any:
        # a forced refresh may still have a fresh entry to fall back on
        payload, found = self.cache.get(CacheKey(city, kind), self._ttl(kind))
        if found:
            _LOGGER.info("(%s): serving cached %s data", city.display_name, kind)
            return payload

        restored = await self._async_restore(city, kind)
        if restored is not None:
            _LOGGER.info("(%s): serving stored %s data", city.display_name, kind)
            return restored

        raise DataUnavailableError(city, kind) from err

    async def _async_restore(self, city: City, kind: str) -> Any:
        if self.store is None:
            return None

        try:
            if kind == DATA_KIND_LIVE:
                record = await self.store.async_get_latest_snapshot(city)
                return self._live_from_snapshot(record) if record else None

            stored = await self.store.async_get_forecast(city)
            return self._forecast_from_stored(stored) if stored else None
        except Exception:  # pylint: disable=broad-except
            _LOGGER.exception(
                "Unable to read stored %s data for %s", kind, city.display_name
            )
            return None

    async def _async_read_snapshots(self, city: City) -> list[SnapshotRecord]:
        if self.store is None:
            return []

        try:
            return await self.store.async_get_snapshots(city)
        except Exception:  # pylint: disable=broad-except
            _LOGGER.exception(
                "Unable to read stored snapshots for %s", city.display_name
            )
            return []

    def _live_from_snapshot(self, record: SnapshotRecord) -> LiveResult:
        concentrations = dict(record.concentrations)
        return LiveResult(
            city=record.city,
            result=compute_aqi(concentrations),
            measurements=build_measurements(concentrations),
            observed_at=record.observed_at.astimezone(self.settings.time_zone),
            provider_aqi=record.aqi,
            provider_dominant=record.dominant_pollutant,
        )

    def _forecast_from_stored(self, stored: StoredForecast) -> ForecastResult:
        forecast = ForecastResult.from_dict(json.loads(stored.payload))
        today = self.local_now().date()
        return ForecastResult(
            city=forecast.city,
            days=tuple(d for d in forecast.days if d.day >= today),
            retrieved_at=forecast.retrieved_at,
        )

    async def _async_persist(self, city: City, kind: str, result: Any) -> None:
        if self.store is None:
            return

        try:
            if kind == DATA_KIND_LIVE:
                await self._async_persist_snapshot(self.store, result)
            else:
                await self.store.async_upsert_forecast(
                    city, json.dumps(result.as_dict()), result.retrieved_at
                )
        except Exception:  # pylint: disable=broad-except
            _LOGGER.exception(
                "Unable to persist %s data for %s", kind, city.display_name
            )

    async def _async_persist_snapshot(
        self, store: SnapshotStore, live: LiveResult
    ) -> None:
        created_at = self.local_now()
        latest = await store.async_get_latest_snapshot(live.city)
        if (
            latest
            and latest.aqi == live.overall_aqi
            and created_at - latest.created_at < SNAPSHOT_DEDUP_WINDOW
        ):
            _LOGGER.debug(
                "(%s): skipping snapshot, AQI unchanged since %s",
                live.city.display_name,
                latest.created_at,
            )
            return

        await store.async_append_snapshot(
            SnapshotRecord(
                city=live.city,
                station_id=live.city.station_id,
                observed_at=live.observed_at,
                aqi=live.overall_aqi,
                dominant_pollutant=live.dominant_pollutant,
                concentrations=live.concentrations(),
                created_at=created_at,
            )
        )

    def _ttl(self, kind: str) -> timedelta:
        if kind == DATA_KIND_LIVE:
            return self.settings.live_ttl

        return self.settings.forecast_ttl
