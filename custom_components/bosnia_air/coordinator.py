"""Data update coordinator keeping BosniaAir data refreshed."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .model import BosniaAirCityData
from .waqi_api.exceptions import DataUnavailableError
from .waqi_api.model import City
from .waqi_api.service import AirQualityService

_LOGGER = logging.getLogger(__name__)


class BosniaAirDataUpdateCoordinator(
    DataUpdateCoordinator[Dict[City, BosniaAirCityData]]
):
    """
    Refresh the warm cities and collect the data of every sensor city.

    Each refresh forces a new WAQI fetch for the warm cities, then reads the
    sensor cities one by one through the service cache. The next refresh is
    scheduled once the current one finishes, so refreshes never overlap.
    """

    service: AirQualityService
    cities: tuple[City, ...]
    _unavailable: set[City]

    def __init__(
        self, service: AirQualityService, cities: Iterable[City], *args, **kwargs
    ):
        """Create a new BosniaAirDataUpdateCoordinator.

        The "update_method" keyword argument will be ignored as this will call the
        service directly.
        """

        super().__init__(*args, **kwargs)

        self.service = service
        self.cities = tuple(dict.fromkeys(cities))
        self._unavailable = set()

    @property
    def warm_cities(self) -> tuple[City, ...]:
        """Get the cities refreshed from WAQI on every update."""
        return self.service.settings.warm_cities

    async def _async_update_data(self) -> dict[City, BosniaAirCityData]:
        await self._async_refresh_warm_cities()

        data = {city: await self._async_get_city_data(city) for city in self.cities}

        if not any(d.complete for d in data.values()):
            raise UpdateFailed(
                "No air quality data available for "
                + ", ".join(c.display_name for c in self.cities)
            )

        return data

    async def _async_refresh_warm_cities(self) -> None:
        results = await asyncio.gather(
            *(self.service.async_refresh_city(c) for c in self.warm_cities),
            return_exceptions=True,
        )

        for city, result in zip(self.warm_cities, results):
            if isinstance(result, asyncio.CancelledError):
                raise result

            if isinstance(result, BaseException):
                _LOGGER.error(
                    "Unexpected error refreshing %s: %s", city.display_name, result
                )
                continue

            for kind, error in result.items():
                if error:
                    _LOGGER.warning(
                        "Refresh of %s %s data failed: %s",
                        city.display_name,
                        kind,
                        error,
                    )

    async def _async_get_city_data(self, city: City) -> BosniaAirCityData:
        try:
            complete = await self.service.async_get_complete(city)
            health_advice = await self.service.async_get_health_advice(city)
            daily = await self.service.async_get_daily(city)
        except DataUnavailableError as error:
            if city not in self._unavailable:
                _LOGGER.warning(
                    "BosniaAir data for %s is unavailable: %s",
                    city.display_name,
                    error.message,
                )
                self._unavailable.add(city)

            return BosniaAirCityData()

        if city in self._unavailable:
            _LOGGER.info("BosniaAir data for %s is available again", city.display_name)
            self._unavailable.discard(city)

        return BosniaAirCityData(
            complete=complete, daily=daily, health_advice=health_advice
        )
