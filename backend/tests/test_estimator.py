import random

import pytest

from app.config import settings
from app.models.address import ResolvedAddress
from app.services.estimator import (
    DEFAULT_BASE_SIZE,
    CoordinateEstimationPolicy,
    RegionalEstimationPolicy,
    base_size,
    canonical_region,
    climate_factor,
    estimate,
    neighbourhood_factor,
)


def _address(**overrides) -> ResolvedAddress:
    fields = {
        "latitude": 45.0,
        "longitude": -75.7,
        "region": "Ontario",
        "city": "Ottawa",
        "country": "Canada",
    }
    fields.update(overrides)
    return ResolvedAddress(**fields)


# --- tables ---

def test_base_size_city_entry():
    assert base_size("Ontario", "Toronto") == 1800


def test_base_size_region_default():
    assert base_size("Ontario", "Kingston") == 1900


def test_base_size_unknown_region():
    assert base_size("Unknown", "Toronto") == DEFAULT_BASE_SIZE


def test_base_size_case_insensitive():
    assert base_size("british columbia", "VANCOUVER") == 1600


def test_canonical_region_accepts_province_code():
    assert canonical_region("qc") == "Quebec"
    assert canonical_region("Nowhere") is None


# --- neighbourhood tiers ---

def test_neighbourhood_lower_tier():
    assert neighbourhood_factor("Downtown Yonge") == 0.8


def test_neighbourhood_upper_tier():
    assert neighbourhood_factor("Forest Hills") == 1.2


def test_neighbourhood_no_match():
    assert neighbourhood_factor("Leslieville") == 1.0


def test_neighbourhood_both_tiers_lower_wins():
    assert neighbourhood_factor("Downtown Heights") == 0.8


def test_downtown_heights_scales_base_2000_to_1600(fixed_rng):
    # Ottawa has base 2000; latitude 45 makes the climate factor exactly 1.
    house = estimate(_address(neighbourhood="Downtown Heights"), fixed_rng)
    assert house.size == 1600


# --- climate ---

def test_climate_factor_is_linear_in_abs_latitude():
    assert climate_factor(45.0) == 1.0
    assert climate_factor(55.0) == pytest.approx(1.05)
    assert climate_factor(-55.0) == climate_factor(55.0)


# --- regional policy ---

def test_regional_estimate_with_fixed_jitter(fixed_rng, toronto):
    house = RegionalEstimationPolicy().estimate(toronto, fixed_rng)
    assert house.size == round(1800 * climate_factor(43.6532))
    assert house.size == 1788
    assert house.style == "modern"
    assert house.windows == 18
    assert house.size_range == "1,609-1,967 sq ft"
    assert house.policy == "regional"


def test_regional_estimate_jitter_band(toronto):
    base = 1800 * climate_factor(toronto.latitude)
    for seed in range(50):
        house = estimate(toronto, random.Random(seed))
        assert round(base * 0.85) <= house.size <= round(base * 1.15)


def test_regional_estimate_reproducible_with_same_seed(toronto):
    first = estimate(toronto, random.Random(1234))
    second = estimate(toronto, random.Random(1234))
    assert first == second


def test_regional_estimate_varies_across_seeds(toronto):
    sizes = {estimate(toronto, random.Random(seed)).size for seed in range(10)}
    assert len(sizes) > 1


def test_traditional_style_uses_sparser_windows(toronto):
    class TraditionalRandom(random.Random):
        def uniform(self, a, b):
            return 1.0

        def choice(self, seq):
            return seq[-1]

    house = estimate(toronto, TraditionalRandom())
    assert house.style == "traditional"
    assert house.windows == round(1788 / 150)


# --- coordinate policy ---

def test_coordinate_policy_is_deterministic(toronto):
    policy = CoordinateEstimationPolicy()
    first = policy.estimate(toronto, random.Random(1))
    second = policy.estimate(toronto, random.Random(2))
    assert first == second
    assert first.policy == "coordinate"
    assert first.style is None


def test_coordinate_policy_bounds():
    policy = CoordinateEstimationPolicy()
    for lat, lon in [(0.0, 0.0), (43.65, -79.38), (-33.9, 151.2)]:
        house = policy.estimate(ResolvedAddress(latitude=lat, longitude=lon), random.Random())
        assert 1200 <= house.size <= 1700
        assert 10 <= house.windows <= 20


def test_estimate_uses_configured_policy(monkeypatch, toronto):
    monkeypatch.setattr(settings, "estimation_policy", "coordinate")

    house = estimate(toronto, random.Random(1))
    assert house.policy == "coordinate"
