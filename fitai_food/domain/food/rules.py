"""
Keyword rule tables.

Each table is an ordered list of (keywords → result) rules evaluated by
containment against a lowercased dish name. The first rule with a hit
wins, so list order is the tie-break contract:

- REGION_RULES: north → south → east → west
- COOKING_METHOD_RULES: fried → steamed → baked → grilled → curry
- SPICE_LEVEL_RULES: extra_hot → hot → mild
- CATEGORY_RULES: main → side → snack → sweet → beverage

Changing the order of a table changes classification results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, Sequence, Tuple, TypeVar

from fitai_food.domain.food.models import CookingMethod, FoodCategory, Region, SpiceLevel
from fitai_food.domain.food.reference_data import REFERENCE_DISHES

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class KeywordRule(Generic[T]):
    """Keyword set mapped to a result."""

    result: T
    keywords: Tuple[str, ...]

    def matching_keyword(self, text: str) -> Optional[str]:
        """First keyword contained in text, if any."""
        for keyword in self.keywords:
            if keyword in text:
                return keyword
        return None


def first_match(rules: Sequence[KeywordRule[T]], text: str) -> Optional[KeywordRule[T]]:
    """
    Evaluate rules in order against text.

    Args:
        rules: Ordered rule list
        text: Lowercased text to test

    Returns:
        First rule with a keyword contained in text, or None
    """
    for rule in rules:
        if rule.matching_keyword(text) is not None:
            return rule
    return None


def evaluate(rules: Sequence[KeywordRule[T]], text: str, default: T) -> T:
    """Result of the first matching rule, or default."""
    rule = first_match(rules, text)
    return rule.result if rule is not None else default


# ═══════════════════════════════════════════════════════════
# REGION
# ═══════════════════════════════════════════════════════════

REGION_RULES: Tuple[KeywordRule[Region], ...] = (
    KeywordRule(
        Region.NORTH,
        ("naan", "tandoori", "butter", "paneer", "rajma", "chole", "kulcha", "paratha"),
    ),
    KeywordRule(
        Region.SOUTH,
        ("dosa", "idli", "sambar", "rasam", "vada", "uttapam", "coconut", "curry leaf"),
    ),
    KeywordRule(
        Region.EAST,
        ("fish", "prawn", "mishti", "doi", "rosogolla", "rasgulla", "bengali"),
    ),
    KeywordRule(
        Region.WEST,
        ("dhokla", "thepla", "pav bhaji", "vada pav", "gujarati", "undhiyu"),
    ),
)

# Most common region for the target population
DEFAULT_REGION = Region.NORTH

# Keywords marking a dish as part of the specialised cuisine
INDIAN_DISH_KEYWORDS: Tuple[str, ...] = tuple(
    dict.fromkeys(
        [
            *REFERENCE_DISHES.keys(),
            *(keyword for rule in REGION_RULES for keyword in rule.keywords),
            "curry",
            "masala",
            "dal",
            "tikka",
            "korma",
            "pakora",
            "sabji",
            "raita",
            "chapati",
            "halwa",
            "laddu",
        ]
    )
)


# ═══════════════════════════════════════════════════════════
# COOKING METHOD
# ═══════════════════════════════════════════════════════════

COOKING_METHOD_RULES: Tuple[KeywordRule[CookingMethod], ...] = (
    KeywordRule(CookingMethod.FRIED, ("fried", "pakora", "bhaji", "samosa", "kachori")),
    KeywordRule(CookingMethod.STEAMED, ("steamed", "idli", "dhokla", "modak")),
    KeywordRule(CookingMethod.BAKED, ("tandoori", "baked", "naan", "kulcha")),
    KeywordRule(CookingMethod.GRILLED, ("grilled", "tikka", "kebab", "seekh")),
    KeywordRule(CookingMethod.CURRY, ("curry", "gravy", "masala", "dal", "sabji")),
)

DEFAULT_COOKING_METHOD = CookingMethod.CURRY


# ═══════════════════════════════════════════════════════════
# SPICE LEVEL
# ═══════════════════════════════════════════════════════════

SPICE_LEVEL_RULES: Tuple[KeywordRule[SpiceLevel], ...] = (
    KeywordRule(SpiceLevel.EXTRA_HOT, ("vindaloo", "madras", "chettinad")),
    KeywordRule(SpiceLevel.HOT, ("pepper", "chili", "spicy", "hot")),
    KeywordRule(SpiceLevel.MILD, ("korma", "malai", "makhani", "shahi")),
)


# ═══════════════════════════════════════════════════════════
# CATEGORY
# ═══════════════════════════════════════════════════════════

CATEGORY_RULES: Tuple[KeywordRule[FoodCategory], ...] = (
    KeywordRule(FoodCategory.MAIN, ("biryani", "curry", "dal", "sabji", "rice", "roti", "naan")),
    KeywordRule(FoodCategory.SIDE, ("raita", "pickle", "chutney", "papad", "salad")),
    KeywordRule(FoodCategory.SNACK, ("samosa", "pakora", "chaat", "bhaji", "tikki")),
    KeywordRule(
        FoodCategory.SWEET,
        ("sweet", "dessert", "halwa", "kheer", "gulab", "jalebi", "laddu"),
    ),
    KeywordRule(FoodCategory.BEVERAGE, ("lassi", "chai", "juice", "drink", "water")),
)

DEFAULT_CATEGORY = FoodCategory.MAIN


# ═══════════════════════════════════════════════════════════
# INGREDIENT ENRICHMENT
# ═══════════════════════════════════════════════════════════

# Typical spices/components added when the dish name contains the key
DISH_SPICE_INGREDIENTS: Tuple[KeywordRule[Tuple[str, ...]], ...] = (
    KeywordRule(
        ("basmati rice", "saffron", "cardamom", "cinnamon", "bay leaves", "fried onions"),
        ("biryani",),
    ),
    KeywordRule(("lentils", "turmeric", "cumin", "mustard seeds", "curry leaves"), ("dal",)),
    KeywordRule(("onions", "tomatoes", "ginger", "garlic", "garam masala"), ("curry",)),
    KeywordRule(
        ("yogurt", "red chili powder", "tandoori masala", "lemon juice"),
        ("tandoori",),
    ),
)

# Name standardisation applied before matching
NAME_STANDARDISATION: Tuple[Tuple[str, str], ...] = (
    ("biriyani", "biryani"),
    ("daal", "dal"),
)
