"""Constants for the BosniaAir integration."""
from __future__ import annotations

from typing import Final

DOMAIN: Final = "bosnia_air"

ATTRIBUTION: Final = "Data provided by the World Air Quality Index Project"

CONF_CITIES: Final = "cities"
CONF_WARM_CITIES: Final = "warm_cities"
CONF_REFRESH_INTERVAL: Final = "refresh_interval"
CONF_LIVE_TTL: Final = "live_ttl"
CONF_FORECAST_TTL: Final = "forecast_ttl"

# minutes
DEFAULT_REFRESH_INTERVAL: Final = 10
DEFAULT_LIVE_TTL: Final = 10
DEFAULT_FORECAST_TTL: Final = 120

STORAGE_VERSION: Final = 1

# seven days of snapshots taken every 5 minutes
MAX_SNAPSHOTS_PER_CITY: Final = 2016
