"""Health advice per population group for an AQI value."""
from __future__ import annotations

from datetime import datetime

from .aqi import category_from_aqi
from .model import City, GroupAdvice, HealthAdviceResult, HealthGroup, RiskLevel


def calc_risk_level(aqi: int, group: HealthGroup) -> RiskLevel:
    """Calculate the risk level of a group at an AQI."""

    if aqi <= 50:
        return RiskLevel.LOW

    if aqi <= 100:
        return RiskLevel.LOW if aqi <= group.threshold else RiskLevel.MODERATE

    if aqi <= 150:
        return RiskLevel.MODERATE

    if aqi <= 200:
        return RiskLevel.HIGH

    return RiskLevel.VERY_HIGH


def build_health_advice(
    city: City, aqi: int, retrieved_at: datetime
) -> HealthAdviceResult:
    """Build the advice for every health group at an AQI."""

    category = category_from_aqi(aqi)
    return HealthAdviceResult(
        city=city,
        aqi=aqi,
        category=category,
        groups=tuple(
            GroupAdvice(
                group=group,
                risk_level=calc_risk_level(aqi, group),
                recommendation=group.recommendation(category),
            )
            for group in HealthGroup
        ),
        retrieved_at=retrieved_at,
    )
