"""Models for the WAQI API and the air quality service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum, IntEnum
from typing import Any, Mapping, NamedTuple
from zoneinfo import ZoneInfo

from .const import (
    CATEGORY_COLORS,
    CATEGORY_DISPLAY_NAMES,
    CATEGORY_HEALTH_MESSAGES,
    DEFAULT_FORECAST_TTL,
    DEFAULT_LIVE_TTL,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_TIME_ZONE,
    HEALTH_GROUP_ASTHMATICS,
    HEALTH_GROUP_ATHLETES,
    HEALTH_GROUP_CHILDREN,
    HEALTH_GROUP_DISPLAY_NAMES,
    HEALTH_GROUP_ELDERLY,
    HEALTH_GROUP_RECOMMENDATIONS,
    HEALTH_GROUP_THRESHOLDS,
    POLLUTANT_ALIASES,
    POLLUTANT_CO,
    POLLUTANT_DISPLAY_NAMES,
    POLLUTANT_NO2,
    POLLUTANT_O3,
    POLLUTANT_PM10,
    POLLUTANT_PM25,
    POLLUTANT_SO2,
    POLLUTANT_UNITS,
)
from .exceptions import InvalidArgumentError


class Pollutant(str, Enum):
    """Pollutants that take part in the AQI calculation."""

    PM25 = POLLUTANT_PM25
    PM10 = POLLUTANT_PM10
    O3 = POLLUTANT_O3
    NO2 = POLLUTANT_NO2
    SO2 = POLLUTANT_SO2
    CO = POLLUTANT_CO

    @property
    def display_name(self) -> str:
        """Get the human readable pollutant name, ie: PM2.5."""
        return POLLUTANT_DISPLAY_NAMES[self.value]

    @property
    def unit(self) -> str:
        """Get the canonical concentration unit used by the breakpoint tables."""
        return POLLUTANT_UNITS[self.value]

    @classmethod
    def parse(cls, value: Pollutant | str) -> Pollutant:
        """
        Get the pollutant for an enum member or a name such as "PM2.5" or "pm2_5".

        Raises an InvalidArgumentError for unknown pollutants.
        """

        if isinstance(value, Pollutant):
            return value

        if isinstance(value, str):
            name = value.strip().lower()
            name = POLLUTANT_ALIASES.get(name, name)
            for pollutant in cls:
                if pollutant.value == name:
                    return pollutant

        raise InvalidArgumentError(f"Unknown pollutant: {value!r}", value)


class AqiCategory(IntEnum):
    """Ordered AQI severity levels."""

    GOOD = 0
    MODERATE = 1
    UNHEALTHY_FOR_SENSITIVE_GROUPS = 2
    UNHEALTHY = 3
    VERY_UNHEALTHY = 4
    HAZARDOUS = 5

    @property
    def display_name(self) -> str:
        """Get the human readable category name."""
        return CATEGORY_DISPLAY_NAMES[self.value]

    @property
    def color(self) -> str:
        """Get the hex color associated with the category."""
        return CATEGORY_COLORS[self.value]

    @property
    def health_message(self) -> str:
        """Get the health guidance for the category."""
        return CATEGORY_HEALTH_MESSAGES[self.value]


class City(Enum):
    """Supported cities, valued by their WAQI station number."""

    SARAJEVO = 10557
    TUZLA = 8739
    ZENICA = 8740
    MOSTAR = 8741
    TRAVNIK = 8742
    BIHAC = 8743

    @property
    def display_name(self) -> str:
        """Get the human readable city name."""
        return _CITY_DISPLAY_NAMES[self]

    @property
    def station_id(self) -> str:
        """Get the WAQI station identifier used in feed URLs."""
        return f"@{self.value}"

    @property
    def key(self) -> str:
        """Get the lower case key used in configuration and storage."""
        return self.name.lower()

    @classmethod
    def parse(cls, value: City | str) -> City:
        """
        Get the city for an enum member, a key ("sarajevo") or a display name.

        Matching is case insensitive. Raises an InvalidArgumentError otherwise.
        """

        if isinstance(value, City):
            return value

        if isinstance(value, str):
            name = value.strip().lower()
            for city in cls:
                if name in (city.key, city.display_name.lower()):
                    return city

        raise InvalidArgumentError(f"Unknown city: {value!r}", value)


_CITY_DISPLAY_NAMES = {
    City.SARAJEVO: "Sarajevo",
    City.TUZLA: "Tuzla",
    City.ZENICA: "Zenica",
    City.MOSTAR: "Mostar",
    City.TRAVNIK: "Travnik",
    City.BIHAC: "Bihać",
}


class CacheKey(NamedTuple):
    """Key of a freshness cache entry."""

    city: City
    kind: str


@dataclass(frozen=True)
class AqiBreakpoint:
    """Describes a breakpoint for calculating AQI.

    Attributes:
        concentration_low  -- The low end of the concentration range
        concentration_high -- The high end of the concentration range
        index_low          -- The low end of the calculated AQI
        index_high         -- The high end of the calculated AQI
    """

    concentration_low: float
    concentration_high: float
    index_low: int
    index_high: int


@dataclass(frozen=True)
class AqiResult:
    """Result of an AQI computation.

    Attributes:
        aqi         -- Overall index, the highest sub-index or 0.
        category    -- Category derived from the overall index.
        sub_indices -- Sub-index per supplied pollutant.
    """

    aqi: int
    category: AqiCategory
    sub_indices: Mapping[Pollutant, int] = field(default_factory=dict)

    @property
    def dominant_pollutant(self) -> Pollutant | None:
        """Get the pollutant driving the overall index, if any."""

        if not self.sub_indices:
            return None

        # first pollutant in enum order wins ties
        return max(Pollutant, key=lambda p: self.sub_indices.get(p, -1))


@dataclass(frozen=True)
class Measurement:
    """A single pollutant reading."""

    pollutant: Pollutant
    value: float
    unit: str


@dataclass(frozen=True)
class LiveResult:
    """Live air quality for a city.

    Attributes:
        city                  -- The city the reading belongs to.
        result                -- The AQI computed from the reported concentrations.
        measurements          -- The reported concentrations.
        observed_at           -- Observation time in the deployment time zone.
        provider_aqi          -- Headline AQI as reported by WAQI, if any.
        provider_dominant     -- Dominant pollutant as reported by WAQI, if any.
        station_name          -- Name of the WAQI station, if reported.
    """

    city: City
    result: AqiResult
    measurements: tuple[Measurement, ...]
    observed_at: datetime
    provider_aqi: int | None = None
    provider_dominant: Pollutant | None = None
    station_name: str | None = None

    @property
    def overall_aqi(self) -> int:
        """Get the overall AQI."""
        return self.result.aqi

    @property
    def category(self) -> AqiCategory:
        """Get the AQI category."""
        return self.result.category

    @property
    def dominant_pollutant(self) -> Pollutant | None:
        """Get the dominant pollutant, preferring the computed one."""
        return self.result.dominant_pollutant or self.provider_dominant

    def concentrations(self) -> dict[Pollutant, float]:
        """Get the measured concentrations keyed by pollutant."""
        return {m.pollutant: m.value for m in self.measurements}


@dataclass(frozen=True)
class PollutantRange:
    """Daily forecast range for a pollutant."""

    avg: int
    min: int
    max: int


@dataclass(frozen=True)
class ForecastDay:
    """Forecast for a single calendar day.

    Attributes:
        day        -- The calendar day.
        aqi        -- Representative AQI for the day.
        category   -- Category derived from the representative AQI.
        pollutants -- Per-pollutant ranges reported for the day.
    """

    day: date
    aqi: int
    category: AqiCategory
    pollutants: Mapping[Pollutant, PollutantRange] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Return the day as a JSON compatible dict."""
        return {
            "date": self.day.isoformat(),
            "aqi": self.aqi,
            "category": self.category.name,
            "pollutants": {
                p.value: {"avg": r.avg, "min": r.min, "max": r.max}
                for p, r in self.pollutants.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ForecastDay:
        """Create a day from the output of as_dict."""
        return cls(
            day=date.fromisoformat(data["date"]),
            aqi=int(data["aqi"]),
            category=AqiCategory[data["category"]],
            pollutants={
                Pollutant.parse(name): PollutantRange(
                    avg=int(r["avg"]), min=int(r["min"]), max=int(r["max"])
                )
                for name, r in data.get("pollutants", {}).items()
            },
        )


@dataclass(frozen=True)
class ForecastResult:
    """Forecast for a city."""

    city: City
    days: tuple[ForecastDay, ...]
    retrieved_at: datetime

    def as_dict(self) -> dict[str, Any]:
        """Return the forecast as a JSON compatible dict."""
        return {
            "city": self.city.key,
            "retrieved_at": self.retrieved_at.isoformat(),
            "days": [d.as_dict() for d in self.days],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ForecastResult:
        """Create a forecast from the output of as_dict."""
        return cls(
            city=City.parse(data["city"]),
            retrieved_at=datetime.fromisoformat(data["retrieved_at"]),
            days=tuple(ForecastDay.from_dict(d) for d in data.get("days", [])),
        )


@dataclass(frozen=True)
class CompleteResult:
    """Live data paired with the forecast for a city."""

    live: LiveResult
    forecast: ForecastResult
    retrieved_at: datetime


@dataclass(frozen=True)
class DailyAqiEntry:
    """Average AQI of a single calendar day."""

    day: date
    aqi: int
    category: AqiCategory

    @property
    def day_name(self) -> str:
        """Get the weekday name, ie: Monday."""
        return self.day.strftime("%A")

    @property
    def short_day(self) -> str:
        """Get the abbreviated weekday name, ie: Mon."""
        return self.day.strftime("%a")

    def as_dict(self) -> dict[str, Any]:
        """Return the entry as a JSON compatible dict."""
        return {
            "date": self.day.isoformat(),
            "day_name": self.day_name,
            "short_day": self.short_day,
            "aqi": self.aqi,
            "category": self.category.name,
            "color": self.category.color,
        }


@dataclass(frozen=True)
class DailyAqiResult:
    """Daily AQI timeline of a city, oldest day first."""

    city: City
    days: tuple[DailyAqiEntry, ...]
    retrieved_at: datetime


class HealthGroup(Enum):
    """Population groups health advice is given for."""

    ATHLETES = HEALTH_GROUP_ATHLETES
    CHILDREN = HEALTH_GROUP_CHILDREN
    ELDERLY = HEALTH_GROUP_ELDERLY
    ASTHMATICS = HEALTH_GROUP_ASTHMATICS

    @property
    def display_name(self) -> str:
        """Get the human readable group name."""
        return HEALTH_GROUP_DISPLAY_NAMES[self.value]

    @property
    def threshold(self) -> int:
        """Get the highest moderate AQI the group is still at low risk for."""
        return HEALTH_GROUP_THRESHOLDS[self.value]

    def recommendation(self, category: AqiCategory) -> str:
        """Get the recommendation for the group in an AQI category."""
        return HEALTH_GROUP_RECOMMENDATIONS[self.value][category.value]


class RiskLevel(str, Enum):
    """Health risk of a group at a given AQI."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very-high"


@dataclass(frozen=True)
class GroupAdvice:
    """Health advice for a single group."""

    group: HealthGroup
    risk_level: RiskLevel
    recommendation: str

    def as_dict(self) -> dict[str, Any]:
        """Return the advice as a JSON compatible dict."""
        return {
            "group": self.group.display_name,
            "risk_level": self.risk_level.value,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class HealthAdviceResult:
    """Health advice for every group at the current AQI of a city.

    Attributes:
        city         -- The city the advice is for.
        aqi          -- The overall AQI the advice is based on.
        category     -- Category derived from the AQI.
        groups       -- Advice per group.
        retrieved_at -- Time the advice was built.
    """

    city: City
    aqi: int
    category: AqiCategory
    groups: tuple[GroupAdvice, ...]
    retrieved_at: datetime


@dataclass(frozen=True)
class CityComparisonEntry:
    """A city in a comparison, with error populated when its data was unavailable."""

    city: str
    aqi: int | None = None
    category: AqiCategory | None = None
    dominant_pollutant: Pollutant | None = None
    observed_at: datetime | None = None
    error: str | None = None


@dataclass(frozen=True)
class SnapshotRecord:
    """A persisted live snapshot.

    Attributes:
        city               -- The city of the snapshot.
        station_id         -- WAQI station identifier.
        observed_at        -- Observation time of the reading.
        aqi                -- Overall computed AQI.
        dominant_pollutant -- Dominant pollutant, if any.
        concentrations     -- Reported concentrations.
        created_at         -- Time the snapshot was created.
    """

    city: City
    station_id: str
    observed_at: datetime
    aqi: int
    dominant_pollutant: Pollutant | None
    concentrations: Mapping[Pollutant, float]
    created_at: datetime

    def as_dict(self) -> dict[str, Any]:
        """Return the record as a JSON compatible dict."""
        return {
            "city": self.city.key,
            "station_id": self.station_id,
            "observed_at": self.observed_at.isoformat(),
            "aqi": self.aqi,
            "dominant_pollutant": (
                self.dominant_pollutant.value if self.dominant_pollutant else None
            ),
            "concentrations": {p.value: v for p, v in self.concentrations.items()},
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SnapshotRecord:
        """Create a record from the output of as_dict."""
        dominant = data.get("dominant_pollutant")
        return cls(
            city=City.parse(data["city"]),
            station_id=str(data["station_id"]),
            observed_at=datetime.fromisoformat(data["observed_at"]),
            aqi=int(data["aqi"]),
            dominant_pollutant=Pollutant.parse(dominant) if dominant else None,
            concentrations={
                Pollutant.parse(name): float(value)
                for name, value in data.get("concentrations", {}).items()
            },
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass(frozen=True)
class StoredForecast:
    """A serialized forecast as kept by a store."""

    city: City
    payload: str
    timestamp: datetime


@dataclass(frozen=True)
class AirQualitySettings:
    """Settings for the air quality service.

    Attributes:
      live_ttl:
          Maximum age of cached live data.
      forecast_ttl:
          Maximum age of cached forecast data.
      refresh_interval:
          Time between background refreshes of the warm cities.
      warm_cities:
          Cities the background refresh keeps warm.
      time_zone:
          Deployment time zone used for observation times and "today".
    """

    live_ttl: timedelta = DEFAULT_LIVE_TTL
    forecast_ttl: timedelta = DEFAULT_FORECAST_TTL
    refresh_interval: timedelta = DEFAULT_REFRESH_INTERVAL
    warm_cities: tuple[City, ...] = (City.SARAJEVO,)
    time_zone: tzinfo = field(default_factory=lambda: ZoneInfo(DEFAULT_TIME_ZONE))

    def __post_init__(self) -> None:
        """Validate the settings."""

        for name in ("live_ttl", "forecast_ttl", "refresh_interval"):
            value = getattr(self, name)
            if not isinstance(value, timedelta) or value <= timedelta(0):
                raise InvalidArgumentError(f"{name} must be a positive duration", value)

        if not self.warm_cities:
            raise InvalidArgumentError("warm_cities must not be empty", self.warm_cities)

        # accept names in the warm set, store unique members
        object.__setattr__(
            self,
            "warm_cities",
            tuple(dict.fromkeys(City.parse(c) for c in self.warm_cities)),
        )
