"""Typing definitions for BosniaAir integration."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import timedelta, tzinfo
from typing import TYPE_CHECKING, Any, Mapping

from .const import (
    CONF_CITIES,
    CONF_FORECAST_TTL,
    CONF_LIVE_TTL,
    CONF_REFRESH_INTERVAL,
    CONF_WARM_CITIES,
    DEFAULT_FORECAST_TTL,
    DEFAULT_LIVE_TTL,
    DEFAULT_REFRESH_INTERVAL,
)
from .waqi_api.model import (
    AirQualitySettings,
    City,
    CompleteResult,
    DailyAqiResult,
    HealthAdviceResult,
)

if TYPE_CHECKING:
    from .coordinator import BosniaAirDataUpdateCoordinator
    from .store import BosniaAirStore
    from .waqi_api.service import AirQualityService


@dataclass
class BosniaAirConfigEntry:
    """Class describing the BosniaAir configuration.

    Attributes:
    - api_token (str):
          WAQI API token.
    - cities (list[str]):
          Keys of the cities to create sensors for.
    - warm_cities (list[str]):
          Keys of the cities refreshed in the background.
    - refresh_interval (int):
          Minutes between background refreshes.
    - live_ttl (int):
          Minutes live data stays fresh.
    - forecast_ttl (int):
          Minutes forecast data stays fresh.
    """

    api_token: str
    cities: list[str] = field(default_factory=lambda: [City.SARAJEVO.key])
    warm_cities: list[str] = field(default_factory=lambda: [City.SARAJEVO.key])
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    live_ttl: int = DEFAULT_LIVE_TTL
    forecast_ttl: int = DEFAULT_FORECAST_TTL

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> BosniaAirConfigEntry:
        """Create an entry from config entry data, ignoring unknown keys."""
        return cls(
            api_token=data["api_token"],
            cities=list(data.get(CONF_CITIES) or [City.SARAJEVO.key]),
            warm_cities=list(data.get(CONF_WARM_CITIES) or [City.SARAJEVO.key]),
            refresh_interval=int(
                data.get(CONF_REFRESH_INTERVAL, DEFAULT_REFRESH_INTERVAL)
            ),
            live_ttl=int(data.get(CONF_LIVE_TTL, DEFAULT_LIVE_TTL)),
            forecast_ttl=int(data.get(CONF_FORECAST_TTL, DEFAULT_FORECAST_TTL)),
        )

    def asdict(self) -> dict:
        """Return the entry as a dict."""
        return asdict(self)

    def get_cities(self) -> list[City]:
        """Get the configured cities, in configuration order."""
        return list(dict.fromkeys(City.parse(c) for c in self.cities))

    def to_settings(self, time_zone: tzinfo) -> AirQualitySettings:
        """Create the air quality service settings for this entry."""
        return AirQualitySettings(
            live_ttl=timedelta(minutes=self.live_ttl),
            forecast_ttl=timedelta(minutes=self.forecast_ttl),
            refresh_interval=timedelta(minutes=self.refresh_interval),
            warm_cities=tuple(City.parse(c) for c in self.warm_cities),
            time_zone=time_zone,
        )


@dataclass
class BosniaAirDomainData:
    """Provides access to the objects of a config entry stored in the DOMAIN data dict.

    Attributes:
    - config (BosniaAirConfigEntry):
          The parsed configuration of the entry.
    - service (AirQualityService):
          The service the sensors read data from.
    - coordinator (BosniaAirDataUpdateCoordinator):
          The coordinator refreshing the warm cities and feeding the sensors.
    - store (BosniaAirStore):
          The persisted store of snapshots and forecasts.
    """

    config: BosniaAirConfigEntry
    service: AirQualityService
    coordinator: BosniaAirDataUpdateCoordinator
    store: BosniaAirStore


@dataclass(frozen=True)
class BosniaAirCityData:
    """Data the coordinator provides for a city.

    Attributes:
    - complete (CompleteResult | None):
          Live data and forecast, None while no live data is available.
    - daily (DailyAqiResult | None):
          Average AQI of the last seven days.
    - health_advice (HealthAdviceResult | None):
          Advice per health group at the current AQI.
    """

    complete: CompleteResult | None = None
    daily: DailyAqiResult | None = None
    health_advice: HealthAdviceResult | None = None
