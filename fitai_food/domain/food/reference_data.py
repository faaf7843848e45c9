"""
Reference data store.

Static culinary tables:
- REFERENCE_DISHES: dish-name keyed nutrition per 100g
  (curated from ICMR/NIN and traditional nutrition sources)
- REGIONAL_CUISINE_DATA: per-region fat/calorie multipliers and
  common ingredients
- TRADITIONAL_SERVING_SIZES: typical grams per dish keyword with
  regional overrides

Pure data plus read-only accessors. Insertion order of every table is
significant: lookups that scan a table return the first hit.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from fitai_food.domain.food.models import (
    CookingMethod,
    FoodCategory,
    NutritionValues,
    ReferenceDish,
    Region,
    SpiceLevel,
)


def _dish(
    name: str,
    region: Region,
    category: FoodCategory,
    spice: SpiceLevel,
    method: CookingMethod,
    nutrition: Tuple[float, float, float, float, float, float, float],
    ingredients: Tuple[str, ...],
    serving_g: float,
    tags: Tuple[str, ...],
    hindi_name: Optional[str] = None,
    regional_name: Optional[str] = None,
) -> ReferenceDish:
    calories, protein, carbs, fat, fiber, sugar, sodium = nutrition
    return ReferenceDish(
        name=name,
        hindi_name=hindi_name,
        regional_name=regional_name,
        region=region,
        category=category,
        spice_level=spice,
        cooking_method=method,
        nutrition_per_100g=NutritionValues(
            calories=calories,
            protein=protein,
            carbs=carbs,
            fat=fat,
            fiber=fiber,
            sugar=sugar,
            sodium=sodium,
        ),
        common_ingredients=ingredients,
        traditional_serving_g=serving_g,
        tags=tags,
    )


_N, _S, _E, _W, _P = Region.NORTH, Region.SOUTH, Region.EAST, Region.WEST, Region.PAN_INDIAN
_MAIN, _SNACK, _SWEET, _BEV = (
    FoodCategory.MAIN,
    FoodCategory.SNACK,
    FoodCategory.SWEET,
    FoodCategory.BEVERAGE,
)
_MILD, _MED, _HOT = SpiceLevel.MILD, SpiceLevel.MEDIUM, SpiceLevel.HOT
_FRIED, _STEAMED, _BAKED, _CURRY, _GRILLED, _RAW, _BOILED = (
    CookingMethod.FRIED,
    CookingMethod.STEAMED,
    CookingMethod.BAKED,
    CookingMethod.CURRY,
    CookingMethod.GRILLED,
    CookingMethod.RAW,
    CookingMethod.BOILED,
)


# ═══════════════════════════════════════════════════════════
# DISHES (nutrition per 100g: kcal, protein, carbs, fat, fiber, sugar, sodium mg)
# ═══════════════════════════════════════════════════════════

_DISHES: Dict[str, ReferenceDish] = {
    # North Indian mains
    "biryani": _dish(
        "Biryani", _N, _MAIN, _MED, _BAKED,
        (200, 8, 35, 4, 2, 2, 450),
        ("basmati rice", "meat/chicken", "saffron", "fried onions", "yogurt", "spices"),
        200, ("rice", "festive", "non-veg", "aromatic"),
        hindi_name="बिरयानी",
    ),
    "chicken biryani": _dish(
        "Chicken Biryani", _N, _MAIN, _MED, _BAKED,
        (220, 12, 30, 6, 2, 2, 480),
        ("basmati rice", "chicken", "saffron", "fried onions", "yogurt", "garam masala"),
        250, ("rice", "non-veg", "protein-rich", "festive"),
        hindi_name="चिकन बिरयानी",
    ),
    "butter chicken": _dish(
        "Butter Chicken", _N, _MAIN, _MILD, _CURRY,
        (180, 15, 8, 12, 1, 6, 520),
        ("chicken", "tomatoes", "cream", "butter", "cashews", "spices"),
        150, ("curry", "non-veg", "creamy", "mild"),
        hindi_name="बटर चिकन", regional_name="Murgh Makhani",
    ),
    "dal makhani": _dish(
        "Dal Makhani", _N, _MAIN, _MILD, _CURRY,
        (140, 8, 18, 4, 6, 3, 400),
        ("black dal", "kidney beans", "cream", "butter", "tomatoes", "spices"),
        120, ("dal", "vegetarian", "protein-rich", "creamy"),
        hindi_name="दाल मखनी",
    ),
    "rajma": _dish(
        "Rajma", _N, _MAIN, _MED, _CURRY,
        (120, 9, 22, 1, 8, 2, 380),
        ("kidney beans", "onions", "tomatoes", "ginger-garlic", "spices"),
        150, ("beans", "vegetarian", "protein-rich", "fiber-rich"),
        hindi_name="राजमा",
    ),
    "chole": _dish(
        "Chole", _N, _MAIN, _MED, _CURRY,
        (130, 8, 20, 3, 7, 3, 420),
        ("chickpeas", "onions", "tomatoes", "chole masala", "ginger-garlic"),
        150, ("chickpeas", "vegetarian", "protein-rich", "spicy"),
        hindi_name="छोले", regional_name="Chana Masala",
    ),
    "paneer butter masala": _dish(
        "Paneer Butter Masala", _N, _MAIN, _MILD, _CURRY,
        (190, 12, 10, 14, 2, 5, 450),
        ("paneer", "tomatoes", "cream", "butter", "cashews", "spices"),
        120, ("paneer", "vegetarian", "creamy", "protein-rich"),
        hindi_name="पनीर बटर मसाला",
    ),
    # South Indian
    "dosa": _dish(
        "Dosa", _S, _MAIN, _MILD, _GRILLED,
        (165, 4, 32, 2, 1, 1, 350),
        ("rice", "urad dal", "fenugreek seeds", "salt"),
        80, ("fermented", "vegetarian", "crispy", "healthy"),
        hindi_name="डोसा",
    ),
    "idli": _dish(
        "Idli", _S, _MAIN, _MILD, _STEAMED,
        (156, 4, 30, 1, 2, 1, 280),
        ("rice", "urad dal", "fenugreek seeds", "salt"),
        60, ("steamed", "vegetarian", "fermented", "low-fat"),
        hindi_name="इडली",
    ),
    "sambar": _dish(
        "Sambar", _S, _MAIN, _MED, _BOILED,
        (85, 4, 12, 2, 4, 3, 420),
        ("toor dal", "tamarind", "vegetables", "sambar powder", "curry leaves"),
        150, ("dal", "vegetarian", "tangy", "vegetables"),
        hindi_name="सांबर",
    ),
    "rasam": _dish(
        "Rasam", _S, _MAIN, _HOT, _BOILED,
        (45, 2, 8, 1, 1, 2, 350),
        ("tamarind", "tomatoes", "rasam powder", "curry leaves", "coriander"),
        200, ("soup", "vegetarian", "tangy", "digestive"),
        hindi_name="रसम",
    ),
    "vada": _dish(
        "Vada", _S, _SNACK, _MED, _FRIED,
        (245, 8, 30, 10, 4, 2, 380),
        ("urad dal", "ginger", "green chilies", "curry leaves", "oil"),
        50, ("fried", "vegetarian", "crispy", "snack"),
        hindi_name="वडा",
    ),
    # East Indian
    "fish curry": _dish(
        "Fish Curry", _E, _MAIN, _MED, _CURRY,
        (110, 18, 5, 3, 1, 2, 420),
        ("fish", "mustard oil", "turmeric", "onions", "tomatoes", "spices"),
        150, ("fish", "non-veg", "protein-rich", "bengali"),
        hindi_name="मछली करी", regional_name="Maacher Jhol",
    ),
    "mishti doi": _dish(
        "Mishti Doi", _E, _SWEET, _MILD, _RAW,
        (140, 4, 22, 4, 0, 20, 50),
        ("milk", "sugar", "yogurt culture", "cardamom"),
        100, ("sweet", "vegetarian", "dessert", "bengali"),
        hindi_name="मिष्टि दोई",
    ),
    # West Indian
    "dhokla": _dish(
        "Dhokla", _W, _SNACK, _MILD, _STEAMED,
        (160, 6, 28, 3, 2, 4, 380),
        ("gram flour", "yogurt", "ginger", "green chilies", "mustard seeds"),
        80, ("steamed", "vegetarian", "healthy", "gujarati"),
        hindi_name="ढोकला",
    ),
    "pav bhaji": _dish(
        "Pav Bhaji", _W, _MAIN, _MED, _CURRY,
        (180, 5, 25, 7, 3, 5, 520),
        ("mixed vegetables", "pav bhaji masala", "butter", "bread", "onions"),
        200, ("street food", "vegetarian", "spicy", "mumbai"),
        hindi_name="पाव भाजी",
    ),
    # Breads
    "roti": _dish(
        "Roti", _P, _MAIN, _MILD, _GRILLED,
        (280, 9, 58, 2, 8, 2, 5),
        ("whole wheat flour", "water", "salt"),
        40, ("bread", "vegetarian", "fiber-rich", "staple"),
        hindi_name="रोटी", regional_name="Chapati",
    ),
    "naan": _dish(
        "Naan", _N, _MAIN, _MILD, _BAKED,
        (310, 9, 55, 6, 3, 4, 480),
        ("refined flour", "yogurt", "ghee", "yeast", "salt"),
        80, ("bread", "vegetarian", "tandoori", "soft"),
        hindi_name="नान",
    ),
    "paratha": _dish(
        "Paratha", _N, _MAIN, _MILD, _GRILLED,
        (320, 8, 50, 10, 6, 2, 420),
        ("whole wheat flour", "ghee", "salt", "water"),
        60, ("bread", "vegetarian", "ghee", "layered"),
        hindi_name="पराठा",
    ),
    # Rice
    "pulao": _dish(
        "Pulao", _P, _MAIN, _MILD, _BOILED,
        (185, 4, 38, 3, 1, 2, 380),
        ("basmati rice", "vegetables", "whole spices", "ghee"),
        150, ("rice", "vegetarian", "aromatic", "mild"),
        hindi_name="पुलाव",
    ),
    "jeera rice": _dish(
        "Jeera Rice", _P, _MAIN, _MILD, _BOILED,
        (170, 3, 35, 2, 1, 1, 320),
        ("basmati rice", "cumin seeds", "ghee", "salt"),
        150, ("rice", "vegetarian", "simple", "aromatic"),
        hindi_name="जीरा राइस",
    ),
    # Street food
    "samosa": _dish(
        "Samosa", _P, _SNACK, _MED, _FRIED,
        (308, 6, 35, 15, 3, 2, 450),
        ("refined flour", "potatoes", "peas", "spices", "oil"),
        50, ("fried", "vegetarian", "snack", "crispy"),
        hindi_name="समोसा",
    ),
    "chaat": _dish(
        "Chaat", _N, _SNACK, _MED, _RAW,
        (180, 5, 25, 8, 4, 6, 520),
        ("sev", "chutneys", "yogurt", "onions", "tomatoes", "spices"),
        100, ("street food", "vegetarian", "tangy", "crunchy"),
        hindi_name="चाट",
    ),
    # Sweets
    "gulab jamun": _dish(
        "Gulab Jamun", _P, _SWEET, _MILD, _FRIED,
        (387, 6, 55, 16, 1, 50, 45),
        ("milk powder", "flour", "sugar syrup", "cardamom", "ghee"),
        30, ("sweet", "vegetarian", "dessert", "festive"),
        hindi_name="गुलाब जामुन",
    ),
    "jalebi": _dish(
        "Jalebi", _P, _SWEET, _MILD, _FRIED,
        (416, 3, 68, 15, 0, 60, 25),
        ("refined flour", "sugar syrup", "saffron", "cardamom", "ghee"),
        40, ("sweet", "vegetarian", "crispy", "syrupy"),
        hindi_name="जलेबी",
    ),
    "kheer": _dish(
        "Kheer", _P, _SWEET, _MILD, _BOILED,
        (180, 4, 28, 6, 0, 25, 55),
        ("milk", "rice", "sugar", "cardamom", "nuts"),
        100, ("sweet", "vegetarian", "creamy", "dessert"),
        hindi_name="खीर",
    ),
    # Beverages
    "lassi": _dish(
        "Lassi", _N, _BEV, _MILD, _RAW,
        (89, 3, 12, 3, 0, 11, 45),
        ("yogurt", "water", "sugar", "salt", "mint"),
        200, ("drink", "vegetarian", "cooling", "probiotic"),
        hindi_name="लस्सी",
    ),
    "chai": _dish(
        "Chai", _P, _BEV, _MILD, _BOILED,
        (45, 2, 7, 1, 0, 6, 15),
        ("tea leaves", "milk", "sugar", "cardamom", "ginger"),
        150, ("drink", "vegetarian", "hot", "spiced"),
        hindi_name="चाय",
    ),
    # Vegetables (sabji)
    "aloo gobi": _dish(
        "Aloo Gobi", _N, _MAIN, _MED, _CURRY,
        (90, 3, 15, 3, 4, 3, 380),
        ("potatoes", "cauliflower", "onions", "tomatoes", "spices"),
        120, ("vegetarian", "vegetables", "dry curry", "healthy"),
        hindi_name="आलू गोभी",
    ),
    "palak paneer": _dish(
        "Palak Paneer", _N, _MAIN, _MILD, _CURRY,
        (145, 9, 8, 10, 3, 3, 420),
        ("spinach", "paneer", "onions", "tomatoes", "cream", "spices"),
        120, ("vegetarian", "paneer", "spinach", "protein-rich"),
        hindi_name="पालक पनीर",
    ),
}

REFERENCE_DISHES: Mapping[str, ReferenceDish] = MappingProxyType(_DISHES)


# ═══════════════════════════════════════════════════════════
# REGIONAL CHARACTERISTICS
# ═══════════════════════════════════════════════════════════


class RegionProfile(BaseModel):
    """Cooking characteristics of a region."""

    model_config = ConfigDict(frozen=True)

    calorie_multiplier: float
    fat_multiplier: float
    common_ingredients: Tuple[str, ...] = ()
    default_spice_level: SpiceLevel = SpiceLevel.MEDIUM


REGIONAL_CUISINE_DATA: Mapping[Region, RegionProfile] = MappingProxyType(
    {
        # More ghee/cream
        Region.NORTH: RegionProfile(
            calorie_multiplier=1.15,
            fat_multiplier=1.25,
            common_ingredients=("ghee", "cream", "cashews", "cardamom"),
        ),
        # Coconut oil
        Region.SOUTH: RegionProfile(
            calorie_multiplier=1.05,
            fat_multiplier=1.1,
            common_ingredients=("coconut", "curry leaves", "tamarind", "mustard seeds"),
            default_spice_level=SpiceLevel.HOT,
        ),
        # Baseline
        Region.EAST: RegionProfile(
            calorie_multiplier=1.0,
            fat_multiplier=1.0,
            common_ingredients=("mustard oil", "panch phoron", "poppy seeds"),
        ),
        # Some fried items
        Region.WEST: RegionProfile(
            calorie_multiplier=1.08,
            fat_multiplier=1.15,
            common_ingredients=("jaggery", "kokum", "peanuts", "sesame seeds"),
        ),
        Region.PAN_INDIAN: RegionProfile(calorie_multiplier=1.0, fat_multiplier=1.0),
        Region.GENERAL: RegionProfile(
            calorie_multiplier=1.0,
            fat_multiplier=1.0,
            default_spice_level=SpiceLevel.MILD,
        ),
    }
)


# ═══════════════════════════════════════════════════════════
# TRADITIONAL SERVING SIZES (grams)
# ═══════════════════════════════════════════════════════════

TRADITIONAL_SERVING_SIZES: Mapping[Region, Mapping[str, float]] = MappingProxyType(
    {
        Region.NORTH: MappingProxyType(
            {
                "chole": 150,
                "rajma": 150,
                "paneer": 120,
                "kulcha": 80,
                "naan": 90,
                "paratha": 80,
            }
        ),
        Region.SOUTH: MappingProxyType(
            {
                "masala dosa": 150,
                "dosa": 100,
                "idli": 120,
                "uttapam": 120,
                "vada": 50,
                "sambar": 150,
                "rasam": 150,
            }
        ),
        Region.EAST: MappingProxyType(
            {
                "fish": 150,
                "mishti doi": 100,
                "rosogolla": 50,
                "rasgulla": 50,
            }
        ),
        Region.WEST: MappingProxyType(
            {
                "pav bhaji": 250,
                "vada pav": 130,
                "dhokla": 100,
                "thepla": 60,
                "undhiyu": 150,
            }
        ),
        Region.GENERAL: MappingProxyType(
            {
                "biryani": 250,
                "pulao": 150,
                "rice": 150,
                "dal": 150,
                "curry": 150,
                "sabji": 100,
                "roti": 40,
                "chapati": 40,
                "naan": 80,
                "paratha": 60,
                "samosa": 50,
                "lassi": 250,
                "chai": 150,
            }
        ),
    }
)

# Category defaults when no table entry applies
CATEGORY_DEFAULT_SERVINGS: Mapping[FoodCategory, float] = MappingProxyType(
    {
        FoodCategory.MAIN: 150,
        FoodCategory.SIDE: 75,
        FoodCategory.SNACK: 50,
        FoodCategory.SWEET: 75,
        FoodCategory.BEVERAGE: 250,
    }
)

# Used when no baseline nutrition is available at all
PLACEHOLDER_NUTRITION_PER_100G = NutritionValues(
    calories=150,
    protein=8,
    carbs=20,
    fat=5,
    fiber=3,
    sugar=2,
    sodium=400,
)


# ═══════════════════════════════════════════════════════════
# ACCESSORS
# ═══════════════════════════════════════════════════════════


def traditional_serving_for(dish_name: str, region: Optional[Region] = None) -> Optional[float]:
    """
    Typical grams for a dish keyword.

    The region's table is scanned first, then the general table; the
    first keyword contained in the name wins.

    Example:
        >>> traditional_serving_for("masala dosa", Region.SOUTH)
        150
        >>> traditional_serving_for("veg pulao")
        150
    """
    name = dish_name.strip().lower()
    tables = []
    if region is not None and region in TRADITIONAL_SERVING_SIZES:
        tables.append(TRADITIONAL_SERVING_SIZES[region])
    if region is not Region.GENERAL:
        tables.append(TRADITIONAL_SERVING_SIZES[Region.GENERAL])
    for table in tables:
        for keyword, grams in table.items():
            if keyword in name:
                return grams
    return None
