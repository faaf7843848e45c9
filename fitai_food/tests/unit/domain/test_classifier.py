"""
Unit tests for cuisine/region classification and keyword rules.

Rule order is part of the contract, so several tests pin tie-breaks.
"""

import pytest

from fitai_food.domain.food.classifier import (
    categorize_dish,
    classify_dish_cuisine,
    classify_meal_cuisine,
    classify_region,
    is_indian_dish,
    standardize_dish_name,
)
from fitai_food.domain.food.models import CookingMethod, Cuisine, FoodCategory, Region, SpiceLevel
from fitai_food.domain.food.rules import (
    COOKING_METHOD_RULES,
    DEFAULT_COOKING_METHOD,
    REGION_RULES,
    SPICE_LEVEL_RULES,
    KeywordRule,
    evaluate,
    first_match,
)


class TestKeywordRules:
    """Test ordered rule evaluation."""

    def test_region_order(self) -> None:
        """Region rules should be north, south, east, west."""
        assert [r.result for r in REGION_RULES] == [
            Region.NORTH,
            Region.SOUTH,
            Region.EAST,
            Region.WEST,
        ]

    def test_first_match_wins(self) -> None:
        """Earlier rules should win over later ones."""
        rules = (KeywordRule("a", ("fish",)), KeywordRule("b", ("fish curry",)))
        assert evaluate(rules, "fish curry", "default") == "a"

    def test_no_match(self) -> None:
        """Should return default without a hit."""
        assert first_match(REGION_RULES, "pizza") is None
        assert evaluate(COOKING_METHOD_RULES, "pizza", DEFAULT_COOKING_METHOD) is CookingMethod.CURRY

    def test_fried_before_curry(self) -> None:
        """'fried' should outrank 'masala'."""
        assert evaluate(COOKING_METHOD_RULES, "fried masala fish", None) is CookingMethod.FRIED

    def test_extra_hot_before_hot(self) -> None:
        """'vindaloo' should outrank 'spicy'."""
        assert evaluate(SPICE_LEVEL_RULES, "spicy vindaloo", None) is SpiceLevel.EXTRA_HOT

    def test_matching_keyword(self) -> None:
        """Should report the keyword that hit."""
        assert REGION_RULES[1].matching_keyword("masala dosa") == "dosa"


class TestClassifyRegion:
    """Test region classification."""

    @pytest.mark.parametrize(
        "name,region",
        [
            ("Butter Naan", Region.NORTH),
            ("masala dosa", Region.SOUTH),
            ("bengali fish curry", Region.EAST),
            ("pav bhaji", Region.WEST),
        ],
    )
    def test_keyword_hit(self, name: str, region: Region) -> None:
        """Should classify by keyword with confidence 80."""
        result = classify_region(name)
        assert result.region is region
        assert result.confidence == 80

    def test_tie_break_north_before_south(self) -> None:
        """A name with north and south keywords should be north."""
        assert classify_region("paneer dosa").region is Region.NORTH

    def test_tie_break_south_before_east(self) -> None:
        """'coconut' (south) should beat 'fish' (east)."""
        assert classify_region("coconut fish curry").region is Region.SOUTH

    def test_default_region(self) -> None:
        """Should default to north with confidence 0."""
        result = classify_region("biryani")
        assert result.region is Region.NORTH
        assert result.confidence == 0
        assert result.is_default

    def test_hint_wins(self) -> None:
        """A known region hint should win with confidence 100."""
        result = classify_region("butter chicken", hint="South Indian")
        assert result.region is Region.SOUTH
        assert result.confidence == 100

    def test_unknown_hint_ignored(self) -> None:
        """Unknown hints should fall through to keywords."""
        assert classify_region("idli", hint="italian").region is Region.SOUTH


class TestCuisine:
    """Test cuisine classification."""

    def test_standardize_name(self) -> None:
        """Should fix alternate spellings."""
        assert standardize_dish_name("  Chicken  Biriyani ") == "chicken biryani"
        assert standardize_dish_name("Daal Tadka") == "dal tadka"

    def test_is_indian(self) -> None:
        """Should detect specialised dishes by keyword."""
        assert is_indian_dish("Chicken Biriyani")
        assert is_indian_dish("masala dosa")
        assert not is_indian_dish("caesar salad")

    def test_dish_cuisine_hint(self) -> None:
        """Recognisable hints should win."""
        assert classify_dish_cuisine("pasta", hint="indian") is Cuisine.INDIAN
        assert classify_dish_cuisine("dal", hint="international") is Cuisine.INTERNATIONAL
        assert classify_dish_cuisine("pasta", hint="italian") is Cuisine.INTERNATIONAL

    def test_meal_majority(self) -> None:
        """More than half the dishes must be Indian."""
        assert classify_meal_cuisine(["dosa", "sambar", "coffee"]) is Cuisine.INDIAN

    def test_meal_exact_half_is_not_majority(self) -> None:
        """Exactly half should not tag the meal."""
        assert classify_meal_cuisine(["dal", "pizza"]) is Cuisine.INTERNATIONAL

    def test_meal_empty(self) -> None:
        """Empty meals should be international."""
        assert classify_meal_cuisine([]) is Cuisine.INTERNATIONAL


class TestCategorize:
    """Test category rules."""

    @pytest.mark.parametrize(
        "name,category",
        [
            ("veg biryani", FoodCategory.MAIN),
            ("mint chutney", FoodCategory.SIDE),
            ("samosa", FoodCategory.SNACK),
            ("gulab jamun", FoodCategory.SWEET),
            ("mango lassi", FoodCategory.BEVERAGE),
            ("mystery", FoodCategory.MAIN),
        ],
    )
    def test_categories(self, name: str, category: FoodCategory) -> None:
        """Should categorise by keyword."""
        assert categorize_dish(name) is category
