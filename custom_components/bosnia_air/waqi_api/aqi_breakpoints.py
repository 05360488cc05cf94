"""Define AQI breakpoints."""
# required to prevent circular dependency
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Sequence

from .model import AqiBreakpoint, Pollutant

# US EPA breakpoints (40 CFR 58, Appendix G) in canonical units, lowest range first.
_RAW_BREAKPOINTS = {
    Pollutant.PM25: [
        AqiBreakpoint(concentration_low=0.0, concentration_high=12.0, index_low=0, index_high=50),
        AqiBreakpoint(concentration_low=12.1, concentration_high=35.4, index_low=51, index_high=100),
        AqiBreakpoint(concentration_low=35.5, concentration_high=55.4, index_low=101, index_high=150),
        AqiBreakpoint(concentration_low=55.5, concentration_high=150.4, index_low=151, index_high=200),
        AqiBreakpoint(concentration_low=150.5, concentration_high=250.4, index_low=201, index_high=300),
        AqiBreakpoint(concentration_low=250.5, concentration_high=350.4, index_low=301, index_high=400),
        AqiBreakpoint(concentration_low=350.5, concentration_high=500.4, index_low=401, index_high=500),
    ],
    Pollutant.PM10: [
        AqiBreakpoint(concentration_low=0, concentration_high=54, index_low=0, index_high=50),
        AqiBreakpoint(concentration_low=55, concentration_high=154, index_low=51, index_high=100),
        AqiBreakpoint(concentration_low=155, concentration_high=254, index_low=101, index_high=150),
        AqiBreakpoint(concentration_low=255, concentration_high=354, index_low=151, index_high=200),
        AqiBreakpoint(concentration_low=355, concentration_high=424, index_low=201, index_high=300),
        AqiBreakpoint(concentration_low=425, concentration_high=504, index_low=301, index_high=400),
        AqiBreakpoint(concentration_low=505, concentration_high=604, index_low=401, index_high=500),
    ],
    # 8-hour ranges up to 300, 1-hour ranges above
    Pollutant.O3: [
        AqiBreakpoint(concentration_low=0.000, concentration_high=0.054, index_low=0, index_high=50),
        AqiBreakpoint(concentration_low=0.055, concentration_high=0.070, index_low=51, index_high=100),
        AqiBreakpoint(concentration_low=0.071, concentration_high=0.085, index_low=101, index_high=150),
        AqiBreakpoint(concentration_low=0.086, concentration_high=0.105, index_low=151, index_high=200),
        AqiBreakpoint(concentration_low=0.106, concentration_high=0.200, index_low=201, index_high=300),
        AqiBreakpoint(concentration_low=0.201, concentration_high=0.504, index_low=301, index_high=400),
        AqiBreakpoint(concentration_low=0.505, concentration_high=0.604, index_low=401, index_high=500),
    ],
    Pollutant.NO2: [
        AqiBreakpoint(concentration_low=0, concentration_high=53, index_low=0, index_high=50),
        AqiBreakpoint(concentration_low=54, concentration_high=100, index_low=51, index_high=100),
        AqiBreakpoint(concentration_low=101, concentration_high=360, index_low=101, index_high=150),
        AqiBreakpoint(concentration_low=361, concentration_high=649, index_low=151, index_high=200),
        AqiBreakpoint(concentration_low=650, concentration_high=1249, index_low=201, index_high=300),
        AqiBreakpoint(concentration_low=1250, concentration_high=1649, index_low=301, index_high=400),
        AqiBreakpoint(concentration_low=1650, concentration_high=2049, index_low=401, index_high=500),
    ],
    # 1-hour ranges up to 200, 24-hour ranges above
    Pollutant.SO2: [
        AqiBreakpoint(concentration_low=0, concentration_high=35, index_low=0, index_high=50),
        AqiBreakpoint(concentration_low=36, concentration_high=75, index_low=51, index_high=100),
        AqiBreakpoint(concentration_low=76, concentration_high=185, index_low=101, index_high=150),
        AqiBreakpoint(concentration_low=186, concentration_high=304, index_low=151, index_high=200),
        AqiBreakpoint(concentration_low=305, concentration_high=604, index_low=201, index_high=300),
        AqiBreakpoint(concentration_low=605, concentration_high=804, index_low=301, index_high=400),
        AqiBreakpoint(concentration_low=805, concentration_high=1004, index_low=401, index_high=500),
    ],
    Pollutant.CO: [
        AqiBreakpoint(concentration_low=0.0, concentration_high=4.4, index_low=0, index_high=50),
        AqiBreakpoint(concentration_low=4.5, concentration_high=9.4, index_low=51, index_high=100),
        AqiBreakpoint(concentration_low=9.5, concentration_high=12.4, index_low=101, index_high=150),
        AqiBreakpoint(concentration_low=12.5, concentration_high=15.4, index_low=151, index_high=200),
        AqiBreakpoint(concentration_low=15.5, concentration_high=30.4, index_low=201, index_high=300),
        AqiBreakpoint(concentration_low=30.5, concentration_high=40.4, index_low=301, index_high=400),
        AqiBreakpoint(concentration_low=40.5, concentration_high=50.4, index_low=401, index_high=500),
    ],
}


def validate_breakpoints(pollutant: Pollutant, table: Sequence[AqiBreakpoint]) -> None:
    """
    Check a breakpoint table is usable for interpolation.

    Each range must be well formed and the ranges must be ordered, start at zero
    and not overlap. Raises a ValueError describing the first problem found.
    """

    if not table:
        raise ValueError(f"{pollutant.display_name}: empty breakpoint table")

    if table[0].concentration_low != 0:
        raise ValueError(f"{pollutant.display_name}: table does not start at 0")

    previous: AqiBreakpoint | None = None
    for bp in table:
        if bp.concentration_low > bp.concentration_high:
            raise ValueError(f"{pollutant.display_name}: inverted range {bp}")

        if bp.index_low > bp.index_high:
            raise ValueError(f"{pollutant.display_name}: inverted index {bp}")

        if previous and (
            bp.concentration_low <= previous.concentration_high
            or bp.index_low <= previous.index_high
        ):
            raise ValueError(f"{pollutant.display_name}: {bp} overlaps {previous}")

        previous = bp


def _load_breakpoints() -> Mapping[Pollutant, tuple[AqiBreakpoint, ...]]:
    for pollutant, table in _RAW_BREAKPOINTS.items():
        validate_breakpoints(pollutant, table)

    return MappingProxyType(
        {pollutant: tuple(table) for pollutant, table in _RAW_BREAKPOINTS.items()}
    )


AQI_BREAKPOINTS = _load_breakpoints()
