"""Provides utility functions for turning WAQI feed data into results."""
from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
import logging
import math
from numbers import Real
from typing import Any, Mapping

from .aqi import category_from_aqi, compute_aqi, round_half_away_from_zero
from .const import FORECAST_POLLUTANTS
from .exceptions import InvalidArgumentError, WaqiApiInvalidResponseError
from .model import (
    City,
    ForecastDay,
    ForecastResult,
    LiveResult,
    Measurement,
    Pollutant,
    PollutantRange,
)
from .responses import WaqiData, WaqiTime

_LOGGER = logging.getLogger(__name__)


def build_live_result(
    city: City, data: WaqiData, tz: tzinfo, now: datetime
) -> LiveResult:
    """
    Build the live result for a city from its station feed.

    Raises a WaqiApiInvalidResponseError when the feed carries no usable
    pollutant readings.
    """

    concentrations = extract_concentrations(city, data)
    if not concentrations:
        raise WaqiApiInvalidResponseError(
            f"WAQI feed for {city.display_name} has no pollutant readings",
            data.get("iaqi"),
        )

    result = compute_aqi(concentrations)
    observed_at = parse_observation_time(data.get("time"), tz, now)

    station = data.get("city")
    station_name = station.get("name") if isinstance(station, dict) else None

    _LOGGER.debug(
        "(%s): computed AQI %s from %s observed at %s",
        city.display_name,
        result.aqi,
        concentrations,
        observed_at,
    )

    return LiveResult(
        city=city,
        result=result,
        measurements=build_measurements(concentrations),
        observed_at=observed_at,
        provider_aqi=parse_provider_aqi(data.get("aqi")),
        provider_dominant=map_dominant_pollutant(data.get("dominentpol")),
        station_name=str(station_name) if station_name else None,
    )


def build_forecast_result(
    city: City, data: WaqiData, tz: tzinfo, now: datetime
) -> ForecastResult:
    """
    Build the forecast result for a city from its station feed.

    Raises a WaqiApiInvalidResponseError when the feed carries no daily forecast.
    """

    forecast = data.get("forecast")
    daily = forecast.get("daily") if isinstance(forecast, dict) else None
    if not isinstance(daily, dict):
        raise WaqiApiInvalidResponseError(
            f"WAQI feed for {city.display_name} has no daily forecast", forecast
        )

    local_now = now.astimezone(tz)
    days = build_forecast_days(daily, local_now.date())

    _LOGGER.debug("(%s): built %s forecast days", city.display_name, len(days))
    return ForecastResult(city=city, days=days, retrieved_at=local_now)


def build_forecast_days(
    daily: Mapping[str, Any], today: date
) -> tuple[ForecastDay, ...]:
    """
    Merge the per-pollutant daily forecast lists into days.

    Only PM2.5, PM10 and O3 are used. Entries with an unparsable day or without
    a numeric average are skipped, as are days before today. The representative
    AQI of a day is the average of the first pollutant present in the order
    PM2.5, PM10, O3.
    """

    merged: dict[date, dict[Pollutant, PollutantRange]] = {}

    for name in FORECAST_POLLUTANTS:
        pollutant = Pollutant(name)
        entries = daily.get(name)
        if not isinstance(entries, list):
            continue

        for entry in entries:
            if not isinstance(entry, dict):
                continue

            day = _parse_day(entry.get("day"))
            avg = _as_number(entry.get("avg"))
            if day is None or avg is None:
                _LOGGER.debug("skipping forecast entry for %s: %s", name, entry)
                continue

            if day < today:
                continue

            low = _as_number(entry.get("min"))
            high = _as_number(entry.get("max"))
            merged.setdefault(day, {})[pollutant] = PollutantRange(
                avg=round_half_away_from_zero(avg),
                min=round_half_away_from_zero(avg if low is None else low),
                max=round_half_away_from_zero(avg if high is None else high),
            )

    days: list[ForecastDay] = []
    for day in sorted(merged):
        pollutants = merged[day]
        aqi = next(
            (
                pollutants[Pollutant(name)].avg
                for name in FORECAST_POLLUTANTS
                if Pollutant(name) in pollutants
            ),
            0,
        )
        days.append(
            ForecastDay(
                day=day, aqi=aqi, category=category_from_aqi(aqi), pollutants=pollutants
            )
        )

    return tuple(days)


def build_measurements(
    concentrations: Mapping[Pollutant, float]
) -> tuple[Measurement, ...]:
    """Build measurements, in pollutant order, from concentrations."""

    return tuple(
        Measurement(pollutant=p, value=concentrations[p], unit=p.unit)
        for p in Pollutant
        if p in concentrations
    )


def extract_concentrations(city: City, data: WaqiData) -> dict[Pollutant, float]:
    """
    Read the pollutant concentrations from the "iaqi" object of a feed.

    Values that are missing or not numbers are ignored; negative values are
    dropped with a warning.
    """

    iaqi = data.get("iaqi")
    if not isinstance(iaqi, dict):
        return {}

    concentrations: dict[Pollutant, float] = {}
    for pollutant in Pollutant:
        entry = iaqi.get(pollutant.value)
        value = _as_number(entry.get("v")) if isinstance(entry, dict) else None
        if value is None:
            continue

        if value < 0:
            _LOGGER.warning(
                "WAQI reported a negative %s concentration (%s) for %s, ignoring",
                pollutant.display_name,
                value,
                city.display_name,
            )
            continue

        concentrations[pollutant] = value

    return concentrations


def map_dominant_pollutant(name: Any) -> Pollutant | None:
    """Map the WAQI "dominentpol" value to a pollutant, if known."""

    if not name:
        return None

    try:
        return Pollutant.parse(str(name))
    except InvalidArgumentError:
        _LOGGER.debug("unknown dominant pollutant: %s", name)
        return None


def parse_observation_time(
    time_data: WaqiTime | None, tz: tzinfo, now: datetime
) -> datetime:
    """
    Resolve the observation time of a reading in the given time zone.

    The ISO-8601 "iso" field is preferred, naive values being treated as UTC.
    The epoch "v" field is used next, and now as a last resort.
    """

    if isinstance(time_data, dict):
        iso = time_data.get("iso")
        if isinstance(iso, str) and iso:
            try:
                observed = datetime.fromisoformat(iso)
            except ValueError:
                _LOGGER.debug("unparsable observation time: %s", iso)
            else:
                if observed.tzinfo is None:
                    observed = observed.replace(tzinfo=timezone.utc)
                return observed.astimezone(tz)

        epoch = _as_number(time_data.get("v"))
        if epoch is not None and epoch > 0:
            try:
                return datetime.fromtimestamp(epoch, tz)
            except (OverflowError, OSError, ValueError):
                _LOGGER.debug("epoch observation time out of range: %s", epoch)

    return now.astimezone(tz)


def parse_provider_aqi(value: Any) -> int | None:
    """Parse the headline AQI reported by WAQI, which is "-" when unknown."""

    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return None
        return int(value)

    number = _as_number(value)
    return round_half_away_from_zero(number) if number is not None else None


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, Real):
        return None

    value = float(value)
    return value if math.isfinite(value) else None


def _parse_day(value: Any) -> date | None:
    if not isinstance(value, str):
        return None

    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None
