"""
Cuisine/region classifier.

Decides whether a dish belongs to the specialised (Indian) cuisine and,
if so, which sub-region, using the ordered keyword tables in
`fitai_food.domain.food.rules`. Pure and synchronous; never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from fitai_food.domain.food.models import Cuisine, FoodCategory, Region
from fitai_food.domain.food.rules import (
    CATEGORY_RULES,
    DEFAULT_CATEGORY,
    DEFAULT_REGION,
    INDIAN_DISH_KEYWORDS,
    NAME_STANDARDISATION,
    REGION_RULES,
    evaluate,
    first_match,
)
from fitai_food.domain.shared.value_objects import normalize_food_name

KEYWORD_CONFIDENCE = 80
HINT_CONFIDENCE = 100


@dataclass(frozen=True, slots=True)
class RegionClassification:
    """Region decision with its confidence (0 when defaulted)."""

    region: Region
    confidence: int
    matched_keyword: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.confidence == 0


def standardize_dish_name(name: str) -> str:
    """
    Normalise a dish name and fix common alternate spellings.

    Example:
        >>> standardize_dish_name("  Chicken  Biriyani ")
        'chicken biryani'
    """
    normalized = normalize_food_name(name)
    words = normalized.split(" ")
    replacements = dict(NAME_STANDARDISATION)
    return " ".join(replacements.get(word, word) for word in words)


def _region_from_hint(hint: Optional[str]) -> Optional[Region]:
    if not hint:
        return None
    value = normalize_food_name(hint).replace("-", "_").replace(" ", "_")
    # "north_indian" / "south indian" style hints
    value = value.removesuffix("_indian")
    try:
        region = Region(value)
    except ValueError:
        return None
    return region if region is not Region.GENERAL else None


def classify_region(dish_name: str, hint: Optional[str] = None) -> RegionClassification:
    """
    Classify a dish into a region.

    A hint naming a known region wins outright. Otherwise REGION_RULES
    are tested in order and the first keyword contained in the name
    decides. With no hit the default region is returned with
    confidence 0.

    Args:
        dish_name: Dish name (normalised internally)
        hint: Optional region hint from the vision model or caller

    Returns:
        RegionClassification

    Example:
        >>> classify_region("masala dosa").region
        <Region.SOUTH: 'south'>
    """
    hinted = _region_from_hint(hint)
    if hinted is not None:
        return RegionClassification(region=hinted, confidence=HINT_CONFIDENCE)

    name = normalize_food_name(dish_name)
    rule = first_match(REGION_RULES, name)
    if rule is None:
        return RegionClassification(region=DEFAULT_REGION, confidence=0)
    return RegionClassification(
        region=rule.result,
        confidence=KEYWORD_CONFIDENCE,
        matched_keyword=rule.matching_keyword(name),
    )


def is_indian_dish(dish_name: str) -> bool:
    """True if the name contains any specialised-cuisine keyword."""
    name = standardize_dish_name(dish_name)
    return any(keyword in name for keyword in INDIAN_DISH_KEYWORDS)


def _cuisine_from_hint(hint: Optional[str]) -> Optional[Cuisine]:
    if not hint:
        return None
    value = normalize_food_name(hint)
    if "indian" in value or _region_from_hint(value) is not None:
        return Cuisine.INDIAN
    if value in ("international", "general", "western"):
        return Cuisine.INTERNATIONAL
    return None


def classify_dish_cuisine(dish_name: str, hint: Optional[str] = None) -> Cuisine:
    """Cuisine of a single dish, honouring a recognisable hint first."""
    hinted = _cuisine_from_hint(hint)
    if hinted is not None:
        return hinted
    return Cuisine.INDIAN if is_indian_dish(dish_name) else Cuisine.INTERNATIONAL


def classify_meal_cuisine(dish_names: Sequence[str], hint: Optional[str] = None) -> Cuisine:
    """
    Majority vote across the dishes of one photo.

    The meal is tagged Indian only if strictly more than half of the
    dishes hit a specialised-cuisine keyword.

    Example:
        >>> classify_meal_cuisine(["dosa", "sambar", "coffee"])
        <Cuisine.INDIAN: 'indian'>
        >>> classify_meal_cuisine(["dal", "pizza"])
        <Cuisine.INTERNATIONAL: 'international'>
    """
    hinted = _cuisine_from_hint(hint)
    if hinted is not None:
        return hinted
    if not dish_names:
        return Cuisine.INTERNATIONAL
    indian = sum(1 for name in dish_names if is_indian_dish(name))
    return Cuisine.INDIAN if indian * 2 > len(dish_names) else Cuisine.INTERNATIONAL


def categorize_dish(dish_name: str) -> FoodCategory:
    """Category by keyword, defaulting to main."""
    return evaluate(CATEGORY_RULES, normalize_food_name(dish_name), DEFAULT_CATEGORY)
