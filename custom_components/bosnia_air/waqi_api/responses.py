"""Typed response dictionaries for WAQI feed response data."""

from __future__ import annotations

from typing import Any, TypedDict


class WaqiResponse(TypedDict):
    """Envelope of every WAQI API response."""

    status: str
    data: Any


class WaqiValue(TypedDict):
    """Individual pollutant value in the "iaqi" object."""

    v: float


class WaqiTime(TypedDict, total=False):
    """Observation time of a station reading."""

    s: str
    tz: str
    v: int
    iso: str


class WaqiCity(TypedDict, total=False):
    """Station location data."""

    name: str
    geo: list[float]
    url: str


class WaqiForecastEntry(TypedDict, total=False):
    """Daily forecast entry for one pollutant."""

    avg: float
    day: str
    max: float
    min: float


class WaqiForecast(TypedDict, total=False):
    """Forecast object, only "daily" is used."""

    daily: dict[str, list[WaqiForecastEntry]]


class WaqiData(TypedDict, total=False):
    """Station feed data of a successful response."""

    aqi: int | str
    idx: int
    city: WaqiCity
    dominentpol: str
    iaqi: dict[str, WaqiValue]
    time: WaqiTime
    forecast: WaqiForecast
