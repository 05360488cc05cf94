"""Contains errors that can be raised by the WAQI API and the air quality service."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .model import City


class AirQualityError(Exception):
    """Raised when an air quality operation cannot be completed.

    Attributes:
        message -- An explanation of the error.
    """

    def __init__(self, message: str) -> None:
        """Create a new AirQualityError."""
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        """Return a string representation of this error."""
        return f"[{self.__class__.__name__}]: {self.message}"


class InvalidArgumentError(AirQualityError):
    """Raised when malformed input reaches a public operation.

    Attributes:
        message -- An explanation of the error.
        value   -- The rejected value.
    """

    def __init__(self, message: str, value: Any = None) -> None:
        """Create a new InvalidArgumentError."""

        super().__init__(message)
        self.value = value


class DataUnavailableError(AirQualityError):
    """Raised when no fresh data exists and the upstream fetch failed.

    Attributes:
        city -- The city the data was requested for.
        kind -- The requested data kind, "live" or "forecast".
    """

    def __init__(self, city: City, kind: str) -> None:
        """Create a new DataUnavailableError."""

        super().__init__(f"No {kind} data available for {city.display_name}")
        self.city = city
        self.kind = kind


class UpstreamFailureError(AirQualityError):
    """Raised when talking to the upstream provider failed for a city.

    Attributes:
        city  -- The city being fetched.
        cause -- The underlying WaqiApiError.
    """

    def __init__(self, city: City, cause: WaqiApiError) -> None:
        """Create a new UpstreamFailureError."""

        super().__init__(f"Upstream fetch failed for {city.display_name}: {cause}")
        self.city = city
        self.cause = cause


class PersistenceError(AirQualityError):
    """Raised by stores when a snapshot or forecast cannot be read or written."""


class WaqiApiError(AirQualityError):
    """Raised when an error with the WAQI API is encountered."""


class WaqiApiConnectionError(WaqiApiError):
    """Raised when the WAQI API cannot be reached.

    Attributes:
        url -- The URL (without token) that was requested.
    """

    def __init__(self, message: str, url: str) -> None:
        """Create a new WaqiApiConnectionError."""

        super().__init__(message)
        self.url = url


class WaqiApiStatusError(WaqiApiError):
    """Raised when the WAQI API returns a non-success HTTP status.

    Attributes:
        url    -- The URL (without token) that caused the error.
        status -- Status code returned from the server.
        text   -- Any data returned in the body of the error from the server.
    """

    def __init__(self, url: str, status: int, text: str) -> None:
        """Create a new WaqiApiStatusError."""

        super().__init__(f"WAQI API returned HTTP {status} for {url}")
        self.url = url
        self.status = status
        self.text = text


class WaqiApiInvalidResponseError(WaqiApiError):
    """Raised when the data from WAQI cannot be parsed.

    Attributes:
        message -- An explanation of the error.
        data    -- Data returned from the API call that could not be recognized.
    """

    def __init__(self, message: str, data: Any) -> None:
        """Create a new WaqiApiInvalidResponseError."""

        super().__init__(message)
        self.data = data


class WaqiApiBusinessError(WaqiApiError):
    """Raised when WAQI answers with a status other than "ok".

    Attributes:
        status -- The status string of the payload.
        reason -- The "data" field of the payload, usually a reason such as "Invalid key".
    """

    def __init__(self, status: str, reason: Any) -> None:
        """Create a new WaqiApiBusinessError."""

        super().__init__(f"WAQI API rejected the request ({status}): {reason}")
        self.status = status
        self.reason = reason
