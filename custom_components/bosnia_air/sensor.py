"""Sensor entities for BosniaAir data for Home Assistant."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Final

from homeassistant.components.sensor import SensorEntity
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import ATTRIBUTION, DOMAIN
from .model import BosniaAirCityData
from .sensor_descriptions import POLLUTANT_SENSOR_DESCRIPTIONS, AqiSensorDescription
from .waqi_api.model import City

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity import Entity
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import BosniaAirDataUpdateCoordinator
    from .model import BosniaAirDomainData
    from .sensor_descriptions import BosniaAirSensorDescription
    from .waqi_api.model import LiveResult

PARALLEL_UPDATES = 0


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_schedule_add_entities: AddEntitiesCallback,
):
    """Create air quality sensors for every configured city."""

    domain_data: BosniaAirDomainData = hass.data[DOMAIN][config_entry.entry_id]
    coordinator = domain_data.coordinator

    entities: list[Entity] = []
    for city in coordinator.cities:
        entities.append(BosniaAirAqiSensor(coordinator, city))

        for sensor_description in POLLUTANT_SENSOR_DESCRIPTIONS:
            entities.append(
                BosniaAirPollutantSensor(coordinator, city, sensor_description)
            )

    async_schedule_add_entities(entities, False)


class BosniaAirSensorBase(CoordinatorEntity[Dict[City, BosniaAirCityData]]):
    """Provides the base for BosniaAir sensors."""

    _attr_attribution: Final = ATTRIBUTION

    city: City
    entity_description: BosniaAirSensorDescription

    def __init__(
        self,
        coordinator: BosniaAirDataUpdateCoordinator,
        city: City,
        entity_description: BosniaAirSensorDescription,
    ) -> None:
        """Initialize the base sensor."""

        super().__init__(coordinator)

        self.city = city
        self.entity_description = entity_description

        self._attr_name = f"{city.display_name} {entity_description.name}"
        self._attr_unique_id = f"{city.key}_{entity_description.key}"

    def _get_city_data(self) -> BosniaAirCityData | None:
        return self.coordinator.data.get(self.city) if self.coordinator.data else None

    def _get_live(self) -> LiveResult | None:
        city_data = self._get_city_data()
        return city_data.complete.live if city_data and city_data.complete else None

    @property
    def available(self) -> bool:
        """Get the availability of the sensor."""
        return super().available and self.native_value is not None


class BosniaAirAqiSensor(BosniaAirSensorBase, SensorEntity):
    """Provides the AQI value for a city."""

    def __init__(self, coordinator: BosniaAirDataUpdateCoordinator, city: City) -> None:
        """Initialize the AQI sensor."""
        super().__init__(coordinator, city, AqiSensorDescription)

    @property
    def native_value(self) -> int | None:
        """Get the AQI value."""

        live = self._get_live()
        return live.overall_aqi if live else None

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        """Get the category, pollutant details, forecast, history and advice."""

        city_data = self._get_city_data()
        if not city_data or not city_data.complete:
            return None

        live = city_data.complete.live
        dominant = live.dominant_pollutant

        attributes: dict[str, Any] = {
            "category": live.category.display_name,
            "color": live.category.color,
            "health_message": live.category.health_message,
            "dominant_pollutant": dominant.display_name if dominant else None,
            "sub_indices": {
                p.display_name: index for p, index in live.result.sub_indices.items()
            },
            "observed_at": live.observed_at.isoformat(),
            "provider_aqi": live.provider_aqi,
            "station": live.station_name,
            "forecast": [d.as_dict() for d in city_data.complete.forecast.days],
        }

        if city_data.daily:
            attributes["daily"] = [d.as_dict() for d in city_data.daily.days]

        if city_data.health_advice:
            attributes["health_advice"] = {
                a.group.value: a.as_dict() for a in city_data.health_advice.groups
            }

        return attributes


class BosniaAirPollutantSensor(BosniaAirSensorBase, SensorEntity):
    """Provide a sensor with the reported concentration of a pollutant."""

    @property
    def native_value(self) -> float | None:
        """Get the concentration."""

        live = self._get_live()
        if not live or not self.entity_description.pollutant:
            return None

        return live.concentrations().get(self.entity_description.pollutant)
