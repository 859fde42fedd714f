"""Monthly energy usage policies.

Every policy degrades to the configured fallback constant when its data
source fails; ``compute_usage`` never raises.
"""

import logging
import math
import random
from collections.abc import Callable
from datetime import date
from typing import Any

from app.config import settings
from app.errors import EstimateError, UsageFallback
from app.models.address import ResolvedAddress
from app.models.estimate import EnergyUsage
from app.services.estimator import canonical_region
from app.services.http import get_json

logger = logging.getLogger(__name__)

DEFAULT_BASE_USAGE = 850.0

# kWh per month for a typical home; electric heating pushes QC/MB/NB/NL up.
REGION_BASE_USAGE: dict[str, float] = {
    "Ontario": 750.0,
    "Quebec": 1400.0,
    "British Columbia": 900.0,
    "Alberta": 600.0,
    "Manitoba": 1300.0,
    "Saskatchewan": 700.0,
    "Nova Scotia": 850.0,
    "New Brunswick": 1200.0,
    "Newfoundland and Labrador": 1400.0,
    "Prince Edward Island": 700.0,
}

SEASONAL_FACTORS: dict[int, float] = {
    1: 1.30,
    2: 1.25,
    3: 1.10,
    4: 0.95,
    5: 0.85,
    6: 0.90,
    7: 1.05,
    8: 1.05,
    9: 0.90,
    10: 0.95,
    11: 1.10,
    12: 1.25,
}

TREND_BOUNDS = (0.8, 1.2)
JITTER_BAND = (0.9, 1.1)

HEATING_THRESHOLD_C = 0.0
COOLING_THRESHOLD_C = 25.0


def fallback_usage(monthly: float | None = None) -> EnergyUsage:
    value = settings.fallback_monthly_kwh if monthly is None else monthly
    return EnergyUsage(monthly=round(value, 2), source="fallback", fallback=True)


def region_base_usage(region: str) -> float:
    name = canonical_region(region)
    return REGION_BASE_USAGE.get(name, DEFAULT_BASE_USAGE) if name else DEFAULT_BASE_USAGE


def latitude_multiplier(latitude: float) -> float:
    return 1 + max(0.0, abs(latitude) - 45) * 0.01


def _numeric_values(data: Any) -> list[float]:
    if not isinstance(data, dict):
        raise UsageFallback("Energy data unavailable")
    response = data.get("response")
    rows = response.get("data") if isinstance(response, dict) else None
    if not isinstance(rows, list):
        raise UsageFallback("Energy data unavailable")

    values: list[float] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            values.append(float(row.get("value")))
        except (TypeError, ValueError):
            continue
    values = [v for v in values if math.isfinite(v)]
    if not values:
        raise UsageFallback("Energy data contained no numeric values")
    return values


async def fetch_energy_series() -> list[float]:
    """Last 12 monthly values from the energy statistics API, newest first."""
    data = await get_json(
        settings.energy_data_endpoint,
        params={
            "frequency": "monthly",
            "data[0]": "value",
            "sort[0][column]": "period",
            "sort[0][direction]": "desc",
            "offset": 0,
            "length": 12,
            "api_key": settings.energy_api_key,
        },
        provider="Energy data service",
    )
    return _numeric_values(data)


async def fetch_current_weather(latitude: float, longitude: float) -> dict[str, float]:
    data = await get_json(
        settings.weather_endpoint,
        params={
            "latitude": latitude,
            "longitude": longitude,
            "current": "temperature_2m,relative_humidity_2m,wind_speed_10m",
        },
        provider="Weather service",
    )
    current = data.get("current") if isinstance(data, dict) else None
    if not isinstance(current, dict):
        raise UsageFallback("Weather data unavailable")
    try:
        return {
            "temperature_c": float(current["temperature_2m"]),
            "humidity_pct": float(current["relative_humidity_2m"]),
            "wind_kph": float(current["wind_speed_10m"]),
        }
    except (KeyError, TypeError, ValueError) as exc:
        raise UsageFallback("Weather data incomplete") from exc


class UsagePolicy:
    name: str = ""

    def __init__(self, fallback_monthly: float | None = None):
        self.fallback_monthly = fallback_monthly

    async def _compute(self, address: ResolvedAddress, rng: random.Random) -> EnergyUsage:
        raise NotImplementedError

    async def compute_usage(
        self, address: ResolvedAddress, rng: random.Random | None = None
    ) -> EnergyUsage:
        try:
            return await self._compute(address, rng or random.Random())
        except EstimateError as exc:
            logger.warning(
                "usage_fallback policy=%s kind=%s reason=%s",
                self.name,
                exc.kind.value,
                exc.message,
            )
            return fallback_usage(self.fallback_monthly)
        except Exception as exc:
            logger.warning(
                "usage_fallback policy=%s kind=%s reason=%s",
                self.name,
                type(exc).__name__,
                exc,
                exc_info=True,
            )
            return fallback_usage(self.fallback_monthly)


class StatisticsUsagePolicy(UsagePolicy):
    """Mean of the last 12 monthly energy statistics."""

    name = "statistics"

    async def _compute(self, address: ResolvedAddress, rng: random.Random) -> EnergyUsage:
        values = await fetch_energy_series()
        monthly = sum(values) / len(values)
        if not monthly:
            raise UsageFallback("Energy data averaged to zero")
        return EnergyUsage(monthly=round(monthly, 2), source=self.name)


class SeasonalUsagePolicy(UsagePolicy):
    """Regional base usage shaped by month, latitude and the national trend."""

    name = "seasonal"

    def __init__(
        self,
        fallback_monthly: float | None = None,
        today: Callable[[], date] = date.today,
    ):
        super().__init__(fallback_monthly)
        self.today = today

    async def _compute(self, address: ResolvedAddress, rng: random.Random) -> EnergyUsage:
        values = await fetch_energy_series()
        mean = sum(values) / len(values)
        if not mean:
            raise UsageFallback("Energy data averaged to zero")
        low, high = TREND_BOUNDS
        trend = min(high, max(low, values[0] / mean))

        monthly = (
            region_base_usage(address.region)
            * SEASONAL_FACTORS[self.today().month]
            * latitude_multiplier(address.latitude)
            * trend
            * rng.uniform(*JITTER_BAND)
        )
        return EnergyUsage(monthly=round(monthly, 2), source=self.name)


def weather_load(base: float, temperature_c: float) -> float:
    if temperature_c < HEATING_THRESHOLD_C:
        return base * (1 + (HEATING_THRESHOLD_C - temperature_c) * 0.03)
    if temperature_c > COOLING_THRESHOLD_C:
        return base * (1 + (temperature_c - COOLING_THRESHOLD_C) * 0.04)
    return base


class WeatherUsagePolicy(UsagePolicy):
    """Current conditions drive a heating/cooling load on the regional base."""

    name = "weather"

    async def _compute(self, address: ResolvedAddress, rng: random.Random) -> EnergyUsage:
        weather = await fetch_current_weather(address.latitude, address.longitude)

        monthly = weather_load(region_base_usage(address.region), weather["temperature_c"])
        monthly *= 1 + max(0.0, weather["humidity_pct"] - 60) * 0.005
        monthly *= 1 + weather["wind_kph"] * 0.002
        monthly *= latitude_multiplier(address.latitude)

        return EnergyUsage(monthly=round(monthly, 2), source=self.name, **weather)


USAGE_POLICIES: dict[str, type[UsagePolicy]] = {
    StatisticsUsagePolicy.name: StatisticsUsagePolicy,
    SeasonalUsagePolicy.name: SeasonalUsagePolicy,
    WeatherUsagePolicy.name: WeatherUsagePolicy,
}


async def compute_usage(
    address: ResolvedAddress,
    policy: UsagePolicy | None = None,
    rng: random.Random | None = None,
) -> EnergyUsage:
    policy = policy or USAGE_POLICIES[settings.usage_policy]()
    return await policy.compute_usage(address, rng)
