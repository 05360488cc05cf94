"""WAQI feed API."""

from __future__ import annotations

import asyncio
from http import HTTPStatus
import logging
from typing import cast

from aiohttp import ClientError, ClientSession, ClientTimeout

from .const import API_STATUS_OK, API_TIMEOUT, URL_API_BASE, URL_API_FEED
from .exceptions import (
    WaqiApiBusinessError,
    WaqiApiConnectionError,
    WaqiApiInvalidResponseError,
    WaqiApiStatusError,
)
from .responses import WaqiData, WaqiResponse

_LOGGER = logging.getLogger(__name__)


class WaqiApi:
    """Provides access to the WAQI station feed API."""

    session: ClientSession
    base_url: str
    _api_token: str
    _timeout: ClientTimeout

    def __init__(
        self,
        session: ClientSession,
        api_token: str,
        base_url: str = URL_API_BASE,
        timeout: float = API_TIMEOUT,
    ) -> None:
        """Create a new instance of the WAQI API."""

        self.session = session
        self.base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._timeout = ClientTimeout(total=timeout)

        _LOGGER.debug("Created WAQI API instance for %s", self.base_url)

    async def async_fetch_station(self, station_id: str) -> WaqiData:
        """
        Fetch the feed of a station, ie: "@10557".

        Raises a WaqiApiConnectionError when the API cannot be reached, a
        WaqiApiStatusError for non-success HTTP responses, a
        WaqiApiInvalidResponseError for unparsable bodies and a
        WaqiApiBusinessError when WAQI rejects the request.
        """

        # never includes the token
        url = URL_API_FEED.format(base_url=self.base_url, station_id=station_id)
        params = {"token": self._api_token}

        _LOGGER.debug("calling api %s", url)

        try:
            async with self.session.get(
                url, params=params, timeout=self._timeout
            ) as resp:
                if resp.status != HTTPStatus.OK:
                    text = await resp.text()
                    raise WaqiApiStatusError(url, resp.status, text)

                try:
                    raw_data = await resp.json(content_type=None)
                except ValueError as err:
                    raise WaqiApiInvalidResponseError(
                        f"WAQI API returned invalid JSON for {url}", None
                    ) from err
        except (ClientError, asyncio.TimeoutError) as err:
            raise WaqiApiConnectionError(
                f"Unable to reach WAQI API at {url}: {type(err).__name__}", url
            ) from err

        _LOGGER.debug("raw data: %s", raw_data)

        if not isinstance(raw_data, dict) or "status" not in raw_data:
            raise WaqiApiInvalidResponseError(
                f"WAQI API returned an unexpected payload for {url}", raw_data
            )

        response = cast(WaqiResponse, raw_data)
        if response["status"] != API_STATUS_OK:
            raise WaqiApiBusinessError(str(response["status"]), response.get("data"))

        data = response.get("data")
        if not isinstance(data, dict):
            raise WaqiApiInvalidResponseError(
                f"WAQI API returned no station data for {url}", raw_data
            )

        return cast(WaqiData, data)
