"""AQI calculation over the breakpoint tables."""
from __future__ import annotations

from decimal import ROUND_DOWN, Decimal
import logging
import math
from numbers import Real
from typing import Mapping

from .aqi_breakpoints import AQI_BREAKPOINTS
from .const import CATEGORY_BANDS, POLLUTANT_TRUNCATION
from .exceptions import InvalidArgumentError
from .model import AqiCategory, AqiResult, Pollutant

_LOGGER = logging.getLogger(__name__)


def compute_aqi(concentrations: Mapping[Pollutant | str, float | None]) -> AqiResult:
    """
    Compute the overall AQI from pollutant concentrations.

    Pollutants mapped to None are treated as not supplied and left out of the
    sub-indices. The overall index is the highest sub-index, or 0 (Good) when
    nothing was supplied. Raises an InvalidArgumentError for unknown pollutants
    and for negative or non-finite concentrations.
    """

    values = validate_concentrations(concentrations)
    sub_indices = {
        pollutant: calc_sub_index(pollutant, value)
        for pollutant, value in values.items()
    }

    aqi = max(sub_indices.values(), default=0)
    return AqiResult(aqi=aqi, category=category_from_aqi(aqi), sub_indices=sub_indices)


def calc_sub_index(pollutant: Pollutant, concentration: float) -> int:
    """
    Calculate the sub-index for a single non-negative concentration.

    The concentration is truncated to the precision of the pollutant's table and
    interpolated linearly within the breakpoint containing it. Values above the
    highest breakpoint are clamped to its upper index.
    """

    table = AQI_BREAKPOINTS[pollutant]
    ceiling = table[-1]

    if concentration > ceiling.concentration_high:
        _LOGGER.debug(
            "%s concentration %s exceeds the table ceiling, clamping to %s",
            pollutant.display_name,
            concentration,
            ceiling.index_high,
        )
        return ceiling.index_high

    value = truncate_concentration(pollutant, concentration)
    aqi_bp = next(bp for bp in table if value <= bp.concentration_high)

    aqi_range = aqi_bp.index_high - aqi_bp.index_low
    c_range = aqi_bp.concentration_high - aqi_bp.concentration_low
    if not c_range:
        return aqi_bp.index_high

    aqi_c = value - aqi_bp.concentration_low
    index = round_half_away_from_zero((aqi_range / c_range) * aqi_c + aqi_bp.index_low)

    # truncated tables leave small gaps between ranges
    return min(max(index, aqi_bp.index_low), aqi_bp.index_high)


def category_from_aqi(aqi: int) -> AqiCategory:
    """Get the category for an overall index."""

    for category, upper in zip(AqiCategory, CATEGORY_BANDS):
        if aqi <= upper:
            return category

    return AqiCategory.HAZARDOUS


def truncate_concentration(pollutant: Pollutant, value: float) -> float:
    """Truncate (not round) a concentration to the precision of its breakpoint table."""

    quantum = Decimal(1).scaleb(-POLLUTANT_TRUNCATION[pollutant.value])
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_DOWN))


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def validate_concentrations(
    concentrations: Mapping[Pollutant | str, float | None]
) -> dict[Pollutant, float]:
    """
    Validate raw concentrations and key them by Pollutant.

    None values are dropped. Raises an InvalidArgumentError if a pollutant is
    unknown or given twice, or if a value is not a finite, non-negative number.
    """

    values: dict[Pollutant, float] = {}
    for key, value in concentrations.items():
        pollutant = Pollutant.parse(key)

        if value is None:
            continue

        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidArgumentError(
                f"{pollutant.display_name} concentration must be a number", value
            )

        if not math.isfinite(value) or value < 0:
            raise InvalidArgumentError(
                f"{pollutant.display_name} concentration must be finite and "
                f"non-negative, got {value}",
                value,
            )

        if pollutant in values:
            raise InvalidArgumentError(
                f"{pollutant.display_name} concentration supplied twice", key
            )

        values[pollutant] = float(value)

    return values
