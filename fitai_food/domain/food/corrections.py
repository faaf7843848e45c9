"""
Correction & scaling engine.

Turns a per-100g baseline into a portion estimate through an ordered
pipeline of pure functions:

    region → cooking method → spice level → portion scaling → rounding

Region and cooking method adjust calories and fat, spice level adjusts
calories only. Multipliers compose, so the order is fixed.

The spice multiplier approximates tempering oil; it is a heuristic, not
a nutritional measurement.
"""

from __future__ import annotations

import math
from typing import Dict, Optional

from fitai_food.domain.food.models import (
    CookingMethod,
    EnhancedFood,
    NutritionValues,
    PortionSize,
    Region,
    SpiceLevel,
    determine_serving_type,
)
from fitai_food.domain.food.reference_data import (
    PLACEHOLDER_NUTRITION_PER_100G,
    REGIONAL_CUISINE_DATA,
)
from fitai_food.domain.shared.errors import InvalidQuantityError

# (calories, fat)
COOKING_METHOD_MULTIPLIERS: Dict[CookingMethod, tuple[float, float]] = {
    CookingMethod.FRIED: (1.3, 1.5),
    CookingMethod.BAKED: (1.1, 1.2),
    CookingMethod.GRILLED: (1.05, 1.1),
    CookingMethod.STEAMED: (0.95, 0.9),
    CookingMethod.CURRY: (1.1, 1.15),
    CookingMethod.RAW: (1.0, 1.0),
    CookingMethod.BOILED: (1.0, 1.0),
}

# Calories only
SPICE_LEVEL_MULTIPLIERS: Dict[SpiceLevel, float] = {
    SpiceLevel.MILD: 1.0,
    SpiceLevel.MEDIUM: 1.02,
    SpiceLevel.HOT: 1.05,
    SpiceLevel.EXTRA_HOT: 1.08,
}


def _with(nutrition: NutritionValues, calories: float, fat: float) -> NutritionValues:
    return nutrition.model_copy(update={"calories": calories, "fat": fat})


def apply_region_correction(nutrition: NutritionValues, region: Optional[Region]) -> NutritionValues:
    """Scale calories and fat by the region's multipliers."""
    if region is None:
        return nutrition
    profile = REGIONAL_CUISINE_DATA[region]
    return _with(
        nutrition,
        calories=nutrition.calories * profile.calorie_multiplier,
        fat=nutrition.fat * profile.fat_multiplier,
    )


def apply_cooking_correction(
    nutrition: NutritionValues, method: Optional[CookingMethod]
) -> NutritionValues:
    """Scale calories and fat by the cooking-method multipliers."""
    if method is None:
        return nutrition
    calorie_multiplier, fat_multiplier = COOKING_METHOD_MULTIPLIERS[method]
    return _with(
        nutrition,
        calories=nutrition.calories * calorie_multiplier,
        fat=nutrition.fat * fat_multiplier,
    )


def apply_spice_correction(nutrition: NutritionValues, spice: Optional[SpiceLevel]) -> NutritionValues:
    """Scale calories by the spice-level multiplier."""
    if spice is None:
        return nutrition
    return nutrition.model_copy(
        update={"calories": nutrition.calories * SPICE_LEVEL_MULTIPLIERS[spice]}
    )


def validate_grams(grams: float) -> float:
    """
    Reject non-positive or non-finite portion sizes.

    Raises:
        InvalidQuantityError: If grams <= 0 or not finite
    """
    if grams is None or not math.isfinite(grams) or grams <= 0:
        raise InvalidQuantityError(f"Portion must be a positive number of grams: {grams}")
    return float(grams)


def scale_to_portion(nutrition: NutritionValues, grams: float) -> NutritionValues:
    """
    Scale a per-100g profile to a portion, without rounding.

    Raises:
        InvalidQuantityError: If grams <= 0
    """
    return nutrition.scaled(validate_grams(grams) / 100.0)


def correct_and_scale(
    per_100g: Optional[NutritionValues],
    grams: float,
    region: Optional[Region] = None,
    cooking_method: Optional[CookingMethod] = None,
    spice_level: Optional[SpiceLevel] = None,
) -> NutritionValues:
    """
    Run the full correction pipeline.

    A missing baseline is replaced by PLACEHOLDER_NUTRITION_PER_100G so
    a recognised dish always yields an estimate.

    Args:
        per_100g: Baseline per 100g, or None
        grams: Target portion in grams (> 0)
        region: Region tag (None skips the step)
        cooking_method: Cooking method (None skips the step)
        spice_level: Spice level (None skips the step)

    Returns:
        Rounded nutrition for the portion

    Raises:
        InvalidQuantityError: If grams <= 0

    Example:
        >>> base = NutritionValues(calories=200, protein=8, carbs=35, fat=4, fiber=2)
        >>> correct_and_scale(base, 200).calories
        400.0
    """
    validate_grams(grams)
    corrected = correct_per_100g(per_100g, region, cooking_method, spice_level)
    return scale_to_portion(corrected, grams).rounded()


def correct_per_100g(
    per_100g: Optional[NutritionValues],
    region: Optional[Region] = None,
    cooking_method: Optional[CookingMethod] = None,
    spice_level: Optional[SpiceLevel] = None,
) -> NutritionValues:
    """Corrected per-100g baseline (steps before portion scaling)."""
    nutrition = per_100g if per_100g is not None else PLACEHOLDER_NUTRITION_PER_100G
    nutrition = apply_region_correction(nutrition, region)
    nutrition = apply_cooking_correction(nutrition, cooking_method)
    return apply_spice_correction(nutrition, spice_level)


def update_portion(food: EnhancedFood, grams: float) -> EnhancedFood:
    """
    Rescale an enhanced food to a user-specified portion.

    Nutrition is recomputed from the stored corrected per-100g baseline,
    never from the current totals, so repeated updates do not drift.

    Raises:
        InvalidQuantityError: If grams <= 0
    """
    grams = validate_grams(grams)
    nutrition = scale_to_portion(food.nutrition_per_100g, grams).rounded()
    portion = PortionSize(
        estimated_grams=grams,
        confidence=food.portion.confidence,
        serving_type=determine_serving_type(grams),
    )
    return food.model_copy(
        update={"nutrition": nutrition, "portion": portion, "user_overridden": True}
    )
