"""Tests for the WAQI feed client."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from aiohttp import ClientConnectionError
import pytest

from custom_components.bosnia_air.waqi_api.api import WaqiApi
from custom_components.bosnia_air.waqi_api.exceptions import (
    WaqiApiBusinessError,
    WaqiApiConnectionError,
    WaqiApiInvalidResponseError,
    WaqiApiStatusError,
)

TOKEN = "s3cr3t-token"


class FakeResponse:
    """Minimal aiohttp response double."""

    def __init__(
        self,
        status: int = 200,
        json_data: Any = None,
        text: str = "",
        json_error: Exception | None = None,
    ) -> None:
        self.status = status
        self._json_data = json_data
        self._text = text
        self._json_error = json_error

    async def json(self, content_type: str | None = "application/json") -> Any:
        if self._json_error:
            raise self._json_error
        return self._json_data

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None


class FakeSession:
    """Minimal aiohttp session double recording requests."""

    def __init__(
        self, response: FakeResponse | None = None, error: BaseException | None = None
    ) -> None:
        self.response = response
        self.error = error
        self.requests: list[tuple[str, dict[str, str]]] = []

    def get(self, url: str, params: dict[str, str], timeout: Any = None) -> FakeResponse:
        self.requests.append((url, params))
        if self.error:
            raise self.error
        assert self.response
        return self.response


class TestWaqiApi:
    """Test suite for WaqiApi."""

    async def test_fetch_station(self, station_payload):
        session = FakeSession(FakeResponse(json_data={"status": "ok", "data": station_payload}))
        api = WaqiApi(session, TOKEN)

        data = await api.async_fetch_station("@10557")

        assert data == station_payload
        assert session.requests == [
            ("https://api.waqi.info/feed/@10557/", {"token": TOKEN})
        ]

    async def test_custom_base_url(self, station_payload):
        session = FakeSession(FakeResponse(json_data={"status": "ok", "data": station_payload}))
        api = WaqiApi(session, TOKEN, base_url="http://localhost:8080/")

        await api.async_fetch_station("@8739")

        assert session.requests[0][0] == "http://localhost:8080/feed/@8739/"

    async def test_business_error(self):
        session = FakeSession(
            FakeResponse(json_data={"status": "error", "data": "Invalid key"})
        )

        with pytest.raises(WaqiApiBusinessError) as error:
            await WaqiApi(session, TOKEN).async_fetch_station("@10557")

        assert error.value.status == "error"
        assert error.value.reason == "Invalid key"
        assert TOKEN not in str(error.value)

    async def test_http_error(self):
        session = FakeSession(FakeResponse(status=503, text="Service Unavailable"))

        with pytest.raises(WaqiApiStatusError) as error:
            await WaqiApi(session, TOKEN).async_fetch_station("@10557")

        assert error.value.status == 503
        assert error.value.text == "Service Unavailable"
        assert TOKEN not in str(error.value)

    async def test_invalid_json(self):
        session = FakeSession(
            FakeResponse(json_error=json.JSONDecodeError("Expecting value", "<html>", 0))
        )

        with pytest.raises(WaqiApiInvalidResponseError):
            await WaqiApi(session, TOKEN).async_fetch_station("@10557")

    @pytest.mark.parametrize(
        "payload",
        [["not", "a", "dict"], {"data": {}}, {"status": "ok", "data": "nothing"}],
    )
    async def test_unexpected_payload(self, payload):
        session = FakeSession(FakeResponse(json_data=payload))

        with pytest.raises(WaqiApiInvalidResponseError):
            await WaqiApi(session, TOKEN).async_fetch_station("@10557")

    @pytest.mark.parametrize(
        "error", [ClientConnectionError("refused"), asyncio.TimeoutError()]
    )
    async def test_connection_error(self, error):
        session = FakeSession(error=error)

        with pytest.raises(WaqiApiConnectionError) as raised:
            await WaqiApi(session, TOKEN).async_fetch_station("@10557")

        assert raised.value.url == "https://api.waqi.info/feed/@10557/"
        assert TOKEN not in str(raised.value)

    async def test_cancellation_is_not_translated(self):
        session = FakeSession(error=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await WaqiApi(session, TOKEN).async_fetch_station("@10557")

    async def test_token_never_logged(self, station_payload, caplog):
        session = FakeSession(FakeResponse(json_data={"status": "ok", "data": station_payload}))

        with caplog.at_level(logging.DEBUG):
            await WaqiApi(session, TOKEN).async_fetch_station("@10557")

        assert "feed/@10557" in caplog.text
        assert TOKEN not in caplog.text
