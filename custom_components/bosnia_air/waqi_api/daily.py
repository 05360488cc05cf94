"""Builds the daily AQI timeline from stored live snapshots."""
from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta, tzinfo
from typing import Iterable

from .aqi import category_from_aqi, round_half_away_from_zero
from .const import DAILY_DAYS
from .model import DailyAqiEntry, SnapshotRecord


def build_daily_timeline(
    snapshots: Iterable[SnapshotRecord],
    today: date,
    tz: tzinfo,
    fallback_aqi: int,
    days: int = DAILY_DAYS,
) -> tuple[DailyAqiEntry, ...]:
    """
    Build one entry per day for the given number of days ending with today.

    Snapshots are grouped by the local day they were created on and each day
    gets the rounded average of its snapshots. Days without snapshots repeat the
    last known value, starting from fallback_aqi.
    """

    first_day = today - timedelta(days=days - 1)

    by_day: dict[date, list[int]] = defaultdict(list)
    for snapshot in snapshots:
        day = snapshot.created_at.astimezone(tz).date()
        if first_day <= day <= today:
            by_day[day].append(snapshot.aqi)

    entries = []
    last_known = fallback_aqi
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        values = by_day.get(day)
        if values:
            last_known = round_half_away_from_zero(sum(values) / len(values))

        entries.append(
            DailyAqiEntry(
                day=day, aqi=last_known, category=category_from_aqi(last_known)
            )
        )

    return tuple(entries)
