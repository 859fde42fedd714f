"""House size and window count heuristics.

Two interchangeable policies:

- ``regional``: two-level base-size table (region -> city -> region default),
  neighbourhood keyword tiers, a latitude climate factor and a random jitter.
  Window count comes from a randomly drawn architectural style.
- ``coordinate``: the sine/cosine formula of the first page prototype,
  deterministic and driven by coordinates only.

Randomness is always drawn from the ``random.Random`` passed in, so a seeded
generator reproduces an estimate exactly.
"""

import math
import random
from typing import Protocol

from app.config import settings
from app.models.address import ResolvedAddress
from app.models.estimate import HouseEstimate

DEFAULT_BASE_SIZE = 1800

# Square feet, by province then city.
BASE_SIZES: dict[str, dict[str, int]] = {
    "Ontario": {
        "Toronto": 1800,
        "Ottawa": 2000,
        "Mississauga": 2200,
        "Hamilton": 1900,
        "London": 1850,
        "default": 1900,
    },
    "Quebec": {
        "Montreal": 1500,
        "Quebec City": 1700,
        "Laval": 1800,
        "Gatineau": 1750,
        "default": 1650,
    },
    "British Columbia": {
        "Vancouver": 1600,
        "Victoria": 1700,
        "Surrey": 2100,
        "Burnaby": 1650,
        "Kelowna": 2000,
        "default": 1850,
    },
    "Alberta": {"Calgary": 2100, "Edmonton": 2000, "default": 2100},
    "Manitoba": {"Winnipeg": 1700, "default": 1650},
    "Saskatchewan": {"Saskatoon": 1700, "Regina": 1650, "default": 1600},
    "Nova Scotia": {"Halifax": 1600, "default": 1550},
    "New Brunswick": {"Moncton": 1550, "default": 1500},
    "Newfoundland and Labrador": {"St. John's": 1550, "default": 1500},
    "Prince Edward Island": {"Charlottetown": 1500, "default": 1450},
}

REGION_CODES: dict[str, str] = {
    "ON": "Ontario",
    "QC": "Quebec",
    "BC": "British Columbia",
    "AB": "Alberta",
    "MB": "Manitoba",
    "SK": "Saskatchewan",
    "NS": "Nova Scotia",
    "NB": "New Brunswick",
    "NL": "Newfoundland and Labrador",
    "PE": "Prince Edward Island",
}

LOWER_TIER_KEYWORDS = ("downtown", "centre", "center", "apartment", "condo", "village", "old town")
UPPER_TIER_KEYWORDS = ("heights", "estates", "hills", "ridge", "park", "acres", "meadows")
LOWER_TIER_FACTOR = 0.8
UPPER_TIER_FACTOR = 1.2

JITTER_BAND = (0.85, 1.15)

# Square feet per window.
WINDOW_DENSITY: dict[str, int] = {"modern": 100, "traditional": 150}
MIN_WINDOWS = 4


class EstimationPolicy(Protocol):
    name: str

    def estimate(self, address: ResolvedAddress, rng: random.Random) -> HouseEstimate: ...


def canonical_region(region: str) -> str | None:
    key = region.strip()
    if key.upper() in REGION_CODES:
        return REGION_CODES[key.upper()]
    for name in BASE_SIZES:
        if name.casefold() == key.casefold():
            return name
    return None


def base_size(region: str, city: str) -> int:
    name = canonical_region(region)
    if name is None:
        return DEFAULT_BASE_SIZE
    cities = BASE_SIZES[name]
    for candidate, size in cities.items():
        if candidate != "default" and candidate.casefold() == city.strip().casefold():
            return size
    return cities["default"]


def neighbourhood_factor(neighbourhood: str) -> float:
    """Lower tier is checked first, so a name matching both tiers scales down."""
    text = neighbourhood.lower()
    if any(keyword in text for keyword in LOWER_TIER_KEYWORDS):
        return LOWER_TIER_FACTOR
    if any(keyword in text for keyword in UPPER_TIER_KEYWORDS):
        return UPPER_TIER_FACTOR
    return 1.0


def climate_factor(latitude: float) -> float:
    return 1 + (abs(latitude) - 45) * 0.005


def _size_range(size: int) -> str:
    return f"{round(size * 0.9):,}-{round(size * 1.1):,} sq ft"


class RegionalEstimationPolicy:
    name = "regional"

    def estimate(self, address: ResolvedAddress, rng: random.Random) -> HouseEstimate:
        size = base_size(address.region, address.city)
        size *= neighbourhood_factor(address.neighbourhood)
        size *= climate_factor(address.latitude)
        size *= rng.uniform(*JITTER_BAND)
        size = round(size)

        style = rng.choice(sorted(WINDOW_DENSITY))
        windows = max(MIN_WINDOWS, round(size / WINDOW_DENSITY[style]))

        return HouseEstimate(
            size=size,
            windows=windows,
            style=style,
            size_range=_size_range(size),
            policy=self.name,
        )


class CoordinateEstimationPolicy:
    name = "coordinate"

    def estimate(self, address: ResolvedAddress, rng: random.Random) -> HouseEstimate:
        size = round(1200 + abs(math.sin(address.latitude) * 500))
        windows = round(10 + abs(math.cos(address.longitude) * 10))
        return HouseEstimate(size=size, windows=windows, policy=self.name)


ESTIMATION_POLICIES: dict[str, type] = {
    RegionalEstimationPolicy.name: RegionalEstimationPolicy,
    CoordinateEstimationPolicy.name: CoordinateEstimationPolicy,
}


def estimate(
    address: ResolvedAddress,
    rng: random.Random | None = None,
    policy: EstimationPolicy | None = None,
) -> HouseEstimate:
    policy = policy or ESTIMATION_POLICIES[settings.estimation_policy]()
    return policy.estimate(address, rng or random.Random())
