"""
Unit tests for nutrition plausibility checks.
"""

import pytest

from fitai_food.domain.food.models import NutritionValues
from fitai_food.domain.nutrition.validation import is_plausible, validation_errors


class TestPlausibility:
    """Test per-100g plausibility rules."""

    def test_plausible_record(self, biryani_per_100g: NutritionValues) -> None:
        """Consistent records should pass."""
        assert validation_errors(biryani_per_100g) == []
        assert is_plausible(biryani_per_100g)

    def test_reject_calories_above_900(self) -> None:
        """2000 kcal per 100g is physically impossible."""
        nutrition = NutritionValues(calories=2000, protein=10, carbs=20, fat=5)
        assert not is_plausible(nutrition)
        assert any("calories out of range" in e for e in validation_errors(nutrition))

    def test_accept_pure_fat(self) -> None:
        """900 kcal of pure fat is the upper bound."""
        assert is_plausible(NutritionValues(calories=900, protein=0, carbs=0, fat=100))

    def test_reject_zero_calories(self) -> None:
        """Zero-calorie records should be rejected."""
        nutrition = NutritionValues(calories=0, protein=0, carbs=0, fat=0)
        assert "calories must be positive" in validation_errors(nutrition)

    @pytest.mark.parametrize("field", ["protein", "carbs", "fat"])
    def test_reject_macro_above_100(self, field: str) -> None:
        """No macro can exceed 100g per 100g."""
        values = {"calories": 500, "protein": 10, "carbs": 10, "fat": 10}
        values[field] = 120
        assert not is_plausible(NutritionValues(**values))

    def test_reject_fiber_above_50(self) -> None:
        """Fiber above 50g per 100g should be rejected."""
        nutrition = NutritionValues(calories=200, protein=5, carbs=40, fat=1, fiber=60)
        assert not is_plausible(nutrition)


class TestCalorieDivergence:
    """Test macro/calorie agreement."""

    def test_reject_unexplained_calories(self) -> None:
        """Calories with no macros behind them should be rejected."""
        nutrition = NutritionValues(calories=100, protein=0, carbs=0, fat=0)
        assert not is_plausible(nutrition)

    def test_divergence_at_tolerance_rejected(self) -> None:
        """A 50% divergence should be rejected."""
        nutrition = NutritionValues(calories=100, protein=0, carbs=12.5, fat=0)
        assert not is_plausible(nutrition)

    def test_divergence_below_tolerance_accepted(self) -> None:
        """A 49% divergence should pass."""
        nutrition = NutritionValues(calories=100, protein=0, carbs=12.75, fat=0)
        assert is_plausible(nutrition)
