"""Config flow for BosniaAir integration."""

from __future__ import annotations

from collections import defaultdict
import logging
from typing import TYPE_CHECKING, Any

import voluptuous as vol

from homeassistant.config_entries import HANDLERS, ConfigFlow
from homeassistant.const import CONF_API_TOKEN
from homeassistant.helpers import config_validation
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .const import (
    CONF_CITIES,
    CONF_FORECAST_TTL,
    CONF_LIVE_TTL,
    CONF_REFRESH_INTERVAL,
    CONF_WARM_CITIES,
    DEFAULT_FORECAST_TTL,
    DEFAULT_LIVE_TTL,
    DEFAULT_REFRESH_INTERVAL,
    DOMAIN,
)
from .model import BosniaAirConfigEntry
from .waqi_api.api import WaqiApi
from .waqi_api.exceptions import (
    WaqiApiBusinessError,
    WaqiApiConnectionError,
    WaqiApiInvalidResponseError,
    WaqiApiStatusError,
)
from .waqi_api.model import City

if TYPE_CHECKING:
    from homeassistant.data_entry_flow import FlowResult

_LOGGER = logging.getLogger(__name__)

CITY_OPTIONS = {city.key: city.display_name for city in City}


@HANDLERS.register(DOMAIN)
class BosniaAirConfigFlow(ConfigFlow):
    """Configuration flow for setting up BosniaAir."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Handle setup user flow."""

        await self.async_set_unique_id(DOMAIN)
        self._abort_if_unique_id_configured()

        errors: dict[str, str] = {}
        if user_input is not None:
            (config, errors) = await self._get_config(user_input)

            if config and not errors:
                return self.async_create_entry(title="BosniaAir", data=config.asdict())

        data = vol_data_dict(
            {
                CONF_CITIES: [City.SARAJEVO.key],
                CONF_WARM_CITIES: [City.SARAJEVO.key],
                CONF_REFRESH_INTERVAL: DEFAULT_REFRESH_INTERVAL,
                CONF_LIVE_TTL: DEFAULT_LIVE_TTL,
                CONF_FORECAST_TTL: DEFAULT_FORECAST_TTL,
            },
            user_input,
        )
        data_schema = vol.Schema(
            {
                vol.Required(CONF_API_TOKEN, default=data[CONF_API_TOKEN]): str,
                vol.Required(
                    CONF_CITIES, default=data[CONF_CITIES]
                ): config_validation.multi_select(CITY_OPTIONS),
                vol.Required(
                    CONF_WARM_CITIES, default=data[CONF_WARM_CITIES]
                ): config_validation.multi_select(CITY_OPTIONS),
                vol.Required(
                    CONF_REFRESH_INTERVAL, default=data[CONF_REFRESH_INTERVAL]
                ): vol.All(vol.Coerce(int), vol.Range(min=1)),
                vol.Required(CONF_LIVE_TTL, default=data[CONF_LIVE_TTL]): vol.All(
                    vol.Coerce(int), vol.Range(min=1)
                ),
                vol.Required(
                    CONF_FORECAST_TTL, default=data[CONF_FORECAST_TTL]
                ): vol.All(vol.Coerce(int), vol.Range(min=1)),
            }
        )

        return self.async_show_form(
            step_id="user", data_schema=data_schema, errors=errors
        )

    async def _get_config(
        self, user_input: dict[str, Any]
    ) -> tuple[BosniaAirConfigEntry | None, dict[str, str]]:
        """Create a new BosniaAirConfigEntry from the user input."""

        errors: dict[str, str] = {}

        try:
            api_token = config_validation.string(user_input.get(CONF_API_TOKEN)).strip()
        except vol.Invalid:
            api_token = ""

        if not api_token:
            errors[CONF_API_TOKEN] = "api_token_missing"

        if not user_input.get(CONF_CITIES):
            errors[CONF_CITIES] = "cities_missing"

        if not user_input.get(CONF_WARM_CITIES):
            errors[CONF_WARM_CITIES] = "warm_cities_missing"

        if errors:
            return (None, errors)

        try:
            api = WaqiApi(async_get_clientsession(self.hass), api_token)
            await api.async_fetch_station(City.SARAJEVO.station_id)

            config = BosniaAirConfigEntry.from_data({**user_input, "api_token": api_token})

            _LOGGER.debug("got configuration for cities: %s", config.cities)
            return (config, errors)
        except WaqiApiBusinessError as error:
            _LOGGER.debug("WAQI rejected the token: %s", error.reason)
            errors[CONF_API_TOKEN] = "invalid_token"
        except (WaqiApiConnectionError, WaqiApiStatusError):
            errors["base"] = "cannot_connect"
        except WaqiApiInvalidResponseError:
            errors["base"] = "invalid_response"
        except Exception as error:  # pylint: disable=broad-except
            _LOGGER.exception(
                "An unknown error occurred while setting up BosniaAir",
                exc_info=error,
            )
            errors["base"] = "unknown"

        return (None, errors)


def vol_data_dict(*args: Any) -> dict[str, Any]:
    """Create a helpful data dictionary for voluptuous schemas.

    The underlying dictionary will return vol.UNDEFINED for any unset key. The
    *args parameter will update the dictionary with the provided dictionaries in a
    left to right order.

    Example:
    >>> d = vol_data_dict(None, {"api_token": "abc123", "cities": ["tuzla"]})
    >>> d["cities"]
    ['tuzla']
    >>> type(d["live_ttl"])
    <class 'voluptuous.schema_builder.Undefined'>
    """
    return defaultdict(
        lambda: vol.UNDEFINED,
        {k: v for i in args if i is not None for k, v in i.items() if v is not None},
    )
