"""
Shared fixtures for fitai_food tests.
"""

from typing import Callable, List

import pytest

from fitai_food.domain.food.models import (
    DishObservation,
    ExternalNutritionRecord,
    NutritionValues,
)
from fitai_food.infrastructure.cache.ttl_cache import TTLCache


class FakeClock:
    """Manually advanced time source for cache tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ═══════════════════════════════════════════════════════════
# INFRASTRUCTURE FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def clock() -> FakeClock:
    """Controllable clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def cache_factory(clock: FakeClock) -> Callable[[float], TTLCache]:
    """Build TTL caches sharing the fake clock."""

    def factory(ttl: float = 60.0) -> TTLCache:
        return TTLCache(default_ttl_seconds=ttl, clock=clock, name="test")

    return factory


# ═══════════════════════════════════════════════════════════
# DOMAIN MODEL FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def biryani_per_100g() -> NutritionValues:
    """Reference biryani profile per 100g."""
    return NutritionValues(
        calories=200, protein=8, carbs=35, fat=4, fiber=2, sugar=2, sodium=450
    )


@pytest.fixture
def biryani_observation() -> DishObservation:
    """Confident vision detection of a 200g biryani."""
    return DishObservation(name="Biryani", estimated_grams=200, confidence=85)


@pytest.fixture
def three_dish_meal() -> List[DishObservation]:
    """Biryani, an unknown stew and a dosa."""
    return [
        DishObservation(name="biryani", estimated_grams=200, confidence=85),
        DishObservation(
            name="mystery stew",
            estimated_grams=180,
            calories=120,
            protein=8,
            carbs=10,
            fat=5,
            confidence=75,
        ),
        DishObservation(name="dosa", estimated_grams=90, confidence=90),
    ]


@pytest.fixture
def usda_record() -> ExternalNutritionRecord:
    """Plausible USDA record: 150 kcal at confidence 80."""
    return ExternalNutritionRecord(
        nutrition=NutritionValues(
            calories=150, protein=10, carbs=20, fat=3.5, fiber=2, sodium=300
        ),
        source="USDA",
        confidence=80,
        canonical_name="Lentil stew",
    )


@pytest.fixture
def off_record() -> ExternalNutritionRecord:
    """Plausible OpenFoodFacts record: 170 kcal at confidence 60."""
    return ExternalNutritionRecord(
        nutrition=NutritionValues(
            calories=170, protein=10, carbs=22, fat=5, fiber=3, sodium=400
        ),
        source="OpenFoodFacts",
        confidence=60,
        canonical_name="Lentil stew, canned",
    )
