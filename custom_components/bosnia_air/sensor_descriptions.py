"""Defines sensor entity descriptions for BosniaAir sensors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.const import (
    CONCENTRATION_MICROGRAMS_PER_CUBIC_METER,
    CONCENTRATION_PARTS_PER_BILLION,
    CONCENTRATION_PARTS_PER_MILLION,
)

from .waqi_api.model import Pollutant


@dataclass(frozen=True, kw_only=True)
class BosniaAirSensorDescription(SensorEntityDescription):
    """Extra properties."""

    pollutant: Pollutant | None = None


AqiSensorDescription = BosniaAirSensorDescription(
    key="air_quality_index",
    name="Air Quality Index",
    icon="mdi:weather-hazy",
    device_class=SensorDeviceClass.AQI,
    state_class=SensorStateClass.MEASUREMENT,
    native_unit_of_measurement=None,
    entity_registry_enabled_default=True,
)

# O3, NO2 and SO2 device classes require µg/m³, so those sensors have none
POLLUTANT_SENSOR_DESCRIPTIONS: Final = [
    BosniaAirSensorDescription(
        key="pm25",
        name="PM 2.5",
        icon="mdi:blur",
        device_class=SensorDeviceClass.PM25,
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=CONCENTRATION_MICROGRAMS_PER_CUBIC_METER,
        entity_registry_enabled_default=False,
        pollutant=Pollutant.PM25,
    ),
    BosniaAirSensorDescription(
        key="pm10",
        name="PM 10",
        icon="mdi:blur",
        device_class=SensorDeviceClass.PM10,
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=CONCENTRATION_MICROGRAMS_PER_CUBIC_METER,
        entity_registry_enabled_default=False,
        pollutant=Pollutant.PM10,
    ),
    BosniaAirSensorDescription(
        key="o3",
        name="Ozone",
        icon="mdi:molecule",
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=CONCENTRATION_PARTS_PER_MILLION,
        entity_registry_enabled_default=False,
        pollutant=Pollutant.O3,
    ),
    BosniaAirSensorDescription(
        key="no2",
        name="Nitrogen Dioxide",
        icon="mdi:molecule",
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=CONCENTRATION_PARTS_PER_BILLION,
        entity_registry_enabled_default=False,
        pollutant=Pollutant.NO2,
    ),
    BosniaAirSensorDescription(
        key="so2",
        name="Sulphur Dioxide",
        icon="mdi:molecule",
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=CONCENTRATION_PARTS_PER_BILLION,
        entity_registry_enabled_default=False,
        pollutant=Pollutant.SO2,
    ),
    BosniaAirSensorDescription(
        key="co",
        name="Carbon Monoxide",
        icon="mdi:molecule-co",
        device_class=SensorDeviceClass.CO,
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=CONCENTRATION_PARTS_PER_MILLION,
        entity_registry_enabled_default=False,
        pollutant=Pollutant.CO,
    ),
]
