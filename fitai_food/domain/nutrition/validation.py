"""
Plausibility checks for per-100g nutrition records.

External databases and the vision model are untrusted: records outside
physical bounds, or whose macros do not explain the stated calories, are
discarded before aggregation.
"""

from __future__ import annotations

from typing import List

import structlog

from fitai_food.domain.food.models import NutritionValues

logger = structlog.get_logger(__name__)

MAX_CALORIES_PER_100G = 900.0  # Pure fat
MAX_MACRO_PER_100G = 100.0
MAX_FIBER_PER_100G = 50.0
# Relative divergence allowed between stated and 4/4/9 implied calories
CALORIE_TOLERANCE = 0.5


def validation_errors(nutrition: NutritionValues) -> List[str]:
    """
    List plausibility violations of a per-100g profile.

    Returns:
        Empty list if the record is plausible
    """
    errors = []
    if not 0 <= nutrition.calories <= MAX_CALORIES_PER_100G:
        errors.append(f"calories out of range: {nutrition.calories}")
    for field in ("protein", "carbs", "fat"):
        value = getattr(nutrition, field)
        if not 0 <= value <= MAX_MACRO_PER_100G:
            errors.append(f"{field} out of range: {value}")
    if not 0 <= nutrition.fiber <= MAX_FIBER_PER_100G:
        errors.append(f"fiber out of range: {nutrition.fiber}")

    if nutrition.calories <= 0:
        errors.append("calories must be positive")
    else:
        divergence = abs(nutrition.calories - nutrition.implied_calories) / nutrition.calories
        if divergence >= CALORIE_TOLERANCE:
            errors.append(f"macro/calorie divergence {divergence:.0%}")
    return errors


def is_plausible(nutrition: NutritionValues) -> bool:
    """
    True if the profile passes all plausibility checks.

    Example:
        >>> is_plausible(NutritionValues(calories=2000, protein=10, carbs=20, fat=5))
        False
    """
    errors = validation_errors(nutrition)
    if errors:
        logger.debug("nutrition_rejected", errors=errors)
        return False
    return True
