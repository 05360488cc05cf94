"""Provides air quality data for Bosnian cities from the WAQI service."""
from __future__ import annotations

from .api import WaqiApi
from .aqi import category_from_aqi, compute_aqi
from .cache import FreshnessCache
from .exceptions import (
    AirQualityError,
    DataUnavailableError,
    InvalidArgumentError,
    PersistenceError,
    UpstreamFailureError,
    WaqiApiError,
)
from .model import (
    AirQualitySettings,
    AqiCategory,
    AqiResult,
    City,
    CompleteResult,
    DailyAqiResult,
    ForecastResult,
    HealthAdviceResult,
    LiveResult,
    Pollutant,
)
from .service import AirQualityService, SnapshotStore, StationApi

__all__ = [
    "AirQualityError",
    "AirQualityService",
    "AirQualitySettings",
    "AqiCategory",
    "AqiResult",
    "City",
    "CompleteResult",
    "DailyAqiResult",
    "DataUnavailableError",
    "ForecastResult",
    "FreshnessCache",
    "HealthAdviceResult",
    "InvalidArgumentError",
    "LiveResult",
    "PersistenceError",
    "Pollutant",
    "SnapshotStore",
    "StationApi",
    "UpstreamFailureError",
    "WaqiApi",
    "WaqiApiError",
    "category_from_aqi",
    "compute_aqi",
]
