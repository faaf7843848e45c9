"""
Unit tests for FoodEnhancementService.

External lookups are mocked; reference matches never reach them.
"""

from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from fitai_food.application.food.enhancement_service import (
    FoodEnhancementService,
    detect_cooking_method,
    detect_spice_level,
    merge_ingredients,
    select_portion,
    vision_guess,
)
from fitai_food.domain.food.matcher import match_dish
from fitai_food.domain.food.models import (
    CookingMethod,
    Cuisine,
    DishObservation,
    EnhancementSource,
    ExternalNutritionRecord,
    FoodCategory,
    Region,
    ServingType,
    SpiceLevel,
)
from fitai_food.domain.shared.errors import EnrichmentError


def _lookup(record: Optional[ExternalNutritionRecord] = None) -> MagicMock:
    """NutritionLookupService stand-in."""
    lookup = MagicMock()
    lookup.lookup = AsyncMock(return_value=record)
    return lookup


class TestEnhanceDish:
    """Test single-dish enhancement."""

    @pytest.mark.asyncio
    async def test_reference_biryani(self, biryani_observation: DishObservation) -> None:
        """Exact reference match with north/baked/medium corrections."""
        lookup = _lookup()
        service = FoodEnhancementService(lookup=lookup)

        food = await service.enhance_dish(biryani_observation)

        assert food.enhancement_source is EnhancementSource.REFERENCE_DB
        assert food.cuisine is Cuisine.INDIAN
        assert food.region is Region.NORTH
        assert food.cooking_method is CookingMethod.BAKED
        assert food.spice_level is SpiceLevel.MEDIUM
        assert food.category is FoodCategory.MAIN
        assert food.portion.estimated_grams == 200
        assert food.portion.serving_type is ServingType.LARGE
        # 200 * 1.15 * 1.1 * 1.02 * 2
        assert food.nutrition.calories == 516
        assert food.nutrition.fat == pytest.approx(12.0)
        assert food.nutrition.protein == pytest.approx(16.0)
        assert food.confidence == 95
        assert food.id.startswith("food_")
        assert food.name == "Biryani"
        assert food.local_name == "बिरयानी"
        assert "saffron" in food.ingredients
        lookup.lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_region_hint_bonus(self) -> None:
        """A region hint should add the regional bonus."""
        service = FoodEnhancementService()
        food = await service.enhance_dish(
            DishObservation(name="Dosa", cuisine="south indian", estimated_grams=90, confidence=70)
        )
        assert food.region is Region.SOUTH
        assert food.confidence == 95

    @pytest.mark.asyncio
    async def test_confidence_ceiling(self, biryani_observation: DishObservation) -> None:
        """Confidence should never exceed the configured ceiling."""
        food = await FoodEnhancementService(confidence_ceiling=90).enhance_dish(
            biryani_observation
        )
        assert food.confidence == 90

    @pytest.mark.asyncio
    async def test_external_record(self, usda_record: ExternalNutritionRecord) -> None:
        """Unmatched general dishes should use the external record uncorrected."""
        lookup = _lookup(usda_record)
        service = FoodEnhancementService(lookup=lookup)

        food = await service.enhance_dish(
            DishObservation(name="Caesar Salad", estimated_grams=150, confidence=60)
        )

        assert food.enhancement_source is EnhancementSource.EXTERNAL_API
        assert food.cuisine is Cuisine.INTERNATIONAL
        assert food.region is None
        assert food.cooking_method is None
        assert food.spice_level is SpiceLevel.MILD
        assert food.category is FoodCategory.SIDE
        assert food.nutrition.calories == 225
        assert food.confidence == 80
        lookup.lookup.assert_awaited_once_with("caesar salad")

    @pytest.mark.asyncio
    async def test_blended_record(
        self, usda_record: ExternalNutritionRecord
    ) -> None:
        """Aggregated records should be tagged blended."""
        blended = usda_record.model_copy(update={"source": "USDA + OpenFoodFacts"})
        service = FoodEnhancementService(lookup=_lookup(blended))

        food = await service.enhance_dish(DishObservation(name="Caesar Salad"))

        assert food.enhancement_source is EnhancementSource.BLENDED

    @pytest.mark.asyncio
    async def test_vision_guess_fallback(self, three_dish_meal: List[DishObservation]) -> None:
        """Without external data a plausible vision guess is used."""
        stew = three_dish_meal[1]
        food = await FoodEnhancementService().enhance_dish(stew)

        assert food.enhancement_source is EnhancementSource.VISION_ONLY
        assert food.nutrition.calories == 216
        assert food.confidence == 75

    @pytest.mark.asyncio
    async def test_placeholder_fallback(self) -> None:
        """No data at all should still produce a positive estimate."""
        food = await FoodEnhancementService(lookup=_lookup()).enhance_dish(
            DishObservation(name="Mystery Stew", estimated_grams=100)
        )
        assert food.enhancement_source is EnhancementSource.VISION_ONLY
        assert food.nutrition.calories == 150

    @pytest.mark.asyncio
    async def test_failure_wrapped(self) -> None:
        """Unexpected failures should surface as EnrichmentError."""
        lookup = MagicMock()
        lookup.lookup = AsyncMock(side_effect=RuntimeError("socket closed"))
        service = FoodEnhancementService(lookup=lookup)

        with pytest.raises(EnrichmentError) as exc_info:
            await service.enhance_dish(DishObservation(name="Mystery Stew"))
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestEnhanceDishes:
    """Test multi-dish orchestration."""

    @pytest.mark.asyncio
    async def test_partial_failure_degrades_one_dish(
        self, three_dish_meal: List[DishObservation]
    ) -> None:
        """A failing dish should degrade without affecting the others."""

        async def flaky_lookup(name: str) -> Optional[ExternalNutritionRecord]:
            if name == "mystery stew":
                raise RuntimeError("lookup crashed")
            return None

        lookup = MagicMock()
        lookup.lookup = AsyncMock(side_effect=flaky_lookup)
        service = FoodEnhancementService(lookup=lookup)

        foods = await service.enhance_dishes(three_dish_meal)

        assert [f.name for f in foods] == ["biryani", "mystery stew", "dosa"]
        assert foods[0].enhancement_source is EnhancementSource.REFERENCE_DB
        assert foods[2].enhancement_source is EnhancementSource.REFERENCE_DB

        degraded = foods[1]
        assert degraded.enhancement_source is EnhancementSource.VISION_ONLY
        assert degraded.id.startswith("basic_")
        assert degraded.confidence == 60
        assert degraded.cuisine is Cuisine.INDIAN
        assert degraded.nutrition.calories == 216
        assert all(f.confidence <= 95 for f in foods)

    @pytest.mark.asyncio
    async def test_empty(self) -> None:
        """No observations should give no foods."""
        assert await FoodEnhancementService().enhance_dishes([]) == []


class TestPipelineSteps:
    """Test individual pipeline helpers."""

    def test_vision_guess_derives_calories(self) -> None:
        """Missing calories should come from 4/4/9."""
        guess = vision_guess(DishObservation(name="x", protein=10, carbs=20, fat=5))
        assert guess.calories == 165

    def test_vision_guess_absent(self) -> None:
        """No macros means no guess."""
        assert vision_guess(DishObservation(name="x")) is None

    def test_portion_prefers_confident_vision(self) -> None:
        """Confident vision grams should win for specialised dishes."""
        obs = DishObservation(name="biryani", estimated_grams=400, confidence=90)
        portion = select_portion(
            obs, match_dish("biryani"), Region.NORTH, FoodCategory.MAIN, True, "biryani"
        )
        assert portion.estimated_grams == 400
        assert portion.serving_type is ServingType.TRADITIONAL

    def test_portion_reference_serving(self) -> None:
        """Unsure vision grams should yield to the reference serving."""
        obs = DishObservation(name="biryani", estimated_grams=400, confidence=60)
        portion = select_portion(
            obs, match_dish("biryani"), Region.NORTH, FoodCategory.MAIN, True, "biryani"
        )
        assert portion.estimated_grams == 200
        assert portion.confidence == 85

    def test_portion_traditional_table(self) -> None:
        """Unmatched specialised dishes should use the serving table."""
        obs = DishObservation(name="aloo kulcha")
        portion = select_portion(obs, None, Region.NORTH, FoodCategory.MAIN, True, "aloo kulcha")
        assert portion.estimated_grams == 80
        assert portion.confidence == 75

    def test_portion_category_default(self) -> None:
        """General dishes without grams should use the category default."""
        obs = DishObservation(name="crisps", estimated_grams=0)
        portion = select_portion(obs, None, None, FoodCategory.SNACK, False, "crisps")
        assert portion.estimated_grams == 50
        assert portion.confidence == 50

    def test_cooking_method(self) -> None:
        """Keywords first, then match, then curry for specialised dishes."""
        assert detect_cooking_method("paneer tikka", None, None, True) is CookingMethod.GRILLED
        assert detect_cooking_method("veg thali", "deep fried", None, True) is CookingMethod.FRIED
        assert detect_cooking_method("idli", None, match_dish("idli"), True) is CookingMethod.STEAMED
        assert detect_cooking_method("veg thali", None, None, True) is CookingMethod.CURRY
        assert detect_cooking_method("pasta", None, None, False) is None

    def test_spice_level(self) -> None:
        """Keywords first, then match, then the regional default."""
        assert detect_spice_level("pasta arrabbiata hot", None, None, False) is SpiceLevel.MILD
        assert detect_spice_level("chicken vindaloo", None, Region.WEST, True) is SpiceLevel.EXTRA_HOT
        assert detect_spice_level("dosa", match_dish("dosa"), Region.SOUTH, True) is SpiceLevel.MILD
        assert detect_spice_level("kootu", None, Region.SOUTH, True) is SpiceLevel.HOT

    def test_merge_ingredients(self) -> None:
        """Vision, dish and regional ingredients merged without duplicates."""
        obs = DishObservation(name="biryani", ingredients=["Basmati Rice", "chicken"])
        ingredients = merge_ingredients(obs, "biryani", match_dish("biryani"), None)
        assert ingredients[:2] == ["Basmati Rice", "chicken"]
        assert "saffron" in ingredients
        assert sum(1 for i in ingredients if i.lower() == "basmati rice") == 1
