"""
Food recognition domain models.

Inputs from the vision collaborator, immutable reference data,
external nutrition records and the enhanced output records.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Region(str, Enum):
    """Culinary region of a dish."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    PAN_INDIAN = "pan_indian"
    GENERAL = "general"  # Non-regional / international baseline


class Cuisine(str, Enum):
    """Cuisine tag attached to enhanced foods."""

    INDIAN = "indian"  # Specialised regional cuisine
    INTERNATIONAL = "international"


class FoodCategory(str, Enum):
    """Dish category."""

    MAIN = "main"
    SIDE = "side"
    SNACK = "snack"
    SWEET = "sweet"
    BEVERAGE = "beverage"


class SpiceLevel(str, Enum):
    """Perceived spice level."""

    MILD = "mild"
    MEDIUM = "medium"
    HOT = "hot"
    EXTRA_HOT = "extra_hot"


class CookingMethod(str, Enum):
    """Dominant cooking method."""

    FRIED = "fried"
    STEAMED = "steamed"
    BAKED = "baked"
    CURRY = "curry"
    GRILLED = "grilled"
    RAW = "raw"
    BOILED = "boiled"


class ServingType(str, Enum):
    """Portion size class derived from grams."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    TRADITIONAL = "traditional"


class EnhancementSource(str, Enum):
    """
    Provenance of the base nutrition of an enhanced food.

    Every EnhancedFood carries one of these values.
    """

    REFERENCE_DB = "reference_db"  # Curated reference table
    EXTERNAL_API = "external_api"  # Single external nutrition database
    BLENDED = "blended"  # Several external databases aggregated
    VISION_ONLY = "vision_only"  # Raw vision guess, no enhancement


class MealType(str, Enum):
    """Meal slot the photo was taken for."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round half away from zero for non-negative values.

    Nutrition values are never negative, so this matches the
    "round .5 up" behaviour users expect instead of banker's rounding.

    Example:
        >>> round_half_up(158.5)
        159.0
        >>> round_half_up(2.25, 1)
        2.3
    """
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


class NutritionValues(BaseModel):
    """
    Macro profile, either per 100g or for an actual portion.

    Sodium is expressed in mg, everything else in grams
    (calories in kcal).

    Example:
        >>> per_100g = NutritionValues(
        ...     calories=200, protein=8, carbs=35, fat=4, fiber=2
        ... )
        >>> per_100g.scaled(2.0).calories
        400.0
    """

    model_config = ConfigDict(frozen=True)

    calories: float = Field(..., ge=0, description="Energy in kcal")
    protein: float = Field(..., ge=0, description="Protein in g")
    carbs: float = Field(..., ge=0, description="Carbohydrates in g")
    fat: float = Field(..., ge=0, description="Total fat in g")
    fiber: float = Field(0.0, ge=0, description="Fiber in g")
    sugar: Optional[float] = Field(None, ge=0, description="Sugar in g")
    sodium: Optional[float] = Field(None, ge=0, description="Sodium in mg")

    @property
    def implied_calories(self) -> float:
        """Calories implied by macros (4/4/9 kcal per gram)."""
        return self.protein * 4 + self.carbs * 4 + self.fat * 9

    def scaled(self, factor: float) -> NutritionValues:
        """Multiply every field by factor, without rounding."""
        return NutritionValues(
            calories=self.calories * factor,
            protein=self.protein * factor,
            carbs=self.carbs * factor,
            fat=self.fat * factor,
            fiber=self.fiber * factor,
            sugar=self.sugar * factor if self.sugar is not None else None,
            sodium=self.sodium * factor if self.sodium is not None else None,
        )

    def rounded(self) -> NutritionValues:
        """
        Round to display precision.

        Calories and sodium to whole units, the rest to one decimal.
        """
        return NutritionValues(
            calories=round_half_up(self.calories),
            protein=round_half_up(self.protein, 1),
            carbs=round_half_up(self.carbs, 1),
            fat=round_half_up(self.fat, 1),
            fiber=round_half_up(self.fiber, 1),
            sugar=round_half_up(self.sugar, 1) if self.sugar is not None else None,
            sodium=round_half_up(self.sodium) if self.sodium is not None else None,
        )


class DishObservation(BaseModel):
    """
    Single dish reported by the vision collaborator.

    Nutrition fields are the model's rough per-100g guess.

    Attributes:
        name: Free-text dish name
        category: Optional category guess
        cuisine: Optional cuisine hint from the model
        estimated_grams: Optional portion guess
        confidence: Recognition confidence (0-100)
        notes: Optional analysis notes (cooking hints)
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=200, description="Dish name")
    local_name: Optional[str] = Field(None, description="Local/native name")
    category: Optional[FoodCategory] = Field(None, description="Category guess")
    cuisine: Optional[str] = Field(None, description="Cuisine hint")
    estimated_grams: Optional[float] = Field(None, ge=0, description="Portion guess")

    calories: Optional[float] = Field(None, ge=0)
    protein: Optional[float] = Field(None, ge=0)
    carbs: Optional[float] = Field(None, ge=0)
    fat: Optional[float] = Field(None, ge=0)
    fiber: Optional[float] = Field(None, ge=0)
    sugar: Optional[float] = Field(None, ge=0)
    sodium: Optional[float] = Field(None, ge=0)

    ingredients: List[str] = Field(default_factory=list)
    confidence: Optional[float] = Field(None, ge=0, le=100)
    notes: Optional[str] = Field(None, description="Analysis notes")

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        """Ensure not just whitespace."""
        if not v.strip():
            raise ValueError("Dish name cannot be empty or whitespace")
        return v.strip()

    def has_nutrition_guess(self) -> bool:
        """True if the model supplied at least one macro value."""
        return any(
            value is not None for value in (self.calories, self.protein, self.carbs, self.fat)
        )


class ReferenceDish(BaseModel):
    """
    Curated reference entry for a dish.

    Loaded once at import time, never mutated.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    hindi_name: Optional[str] = None
    regional_name: Optional[str] = None
    region: Region
    category: FoodCategory
    spice_level: SpiceLevel
    cooking_method: CookingMethod
    nutrition_per_100g: NutritionValues
    common_ingredients: Tuple[str, ...] = ()
    traditional_serving_g: float = Field(..., gt=0)
    tags: Tuple[str, ...] = ()


class ExternalNutritionRecord(BaseModel):
    """
    Per-100g profile returned by an external nutrition database.

    Attributes:
        nutrition: Per-100g macros
        source: Source identifier ("USDA", "OpenFoodFacts", "USDA + OpenFoodFacts")
        confidence: Name-similarity match confidence (0-100)
        canonical_name: Product/food name the database answered with
    """

    model_config = ConfigDict(frozen=True)

    nutrition: NutritionValues
    source: str = Field(..., min_length=1)
    confidence: int = Field(..., ge=0, le=100)
    canonical_name: Optional[str] = None

    @property
    def is_blended(self) -> bool:
        """True if several sources contributed."""
        return " + " in self.source


class PortionSize(BaseModel):
    """Portion estimate for an enhanced food."""

    model_config = ConfigDict(frozen=True)

    estimated_grams: float = Field(..., gt=0)
    confidence: int = Field(..., ge=0, le=100)
    serving_type: ServingType


def determine_serving_type(grams: float) -> ServingType:
    """
    Classify a portion by weight.

    Example:
        >>> determine_serving_type(200)
        <ServingType.LARGE: 'large'>
    """
    if grams < 75:
        return ServingType.SMALL
    if grams < 150:
        return ServingType.MEDIUM
    if grams < 250:
        return ServingType.LARGE
    return ServingType.TRADITIONAL


class EnhancedFood(BaseModel):
    """
    Finished per-dish nutrition record.

    `nutrition` is scaled to the portion; `nutrition_per_100g` is the
    corrected baseline kept so portions can be changed later without
    re-running corrections.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    local_name: Optional[str] = None
    regional_name: Optional[str] = None
    category: FoodCategory
    cuisine: Cuisine
    region: Optional[Region] = None
    spice_level: Optional[SpiceLevel] = None
    cooking_method: Optional[CookingMethod] = None
    portion: PortionSize
    nutrition: NutritionValues
    nutrition_per_100g: NutritionValues
    ingredients: List[str] = Field(default_factory=list)
    confidence: int = Field(..., ge=0, le=100)
    enhancement_source: EnhancementSource
    user_overridden: bool = False


class MealTotals(BaseModel):
    """Summed nutrition across all foods of a meal."""

    model_config = ConfigDict(frozen=True)

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0

    @classmethod
    def from_foods(cls, foods: List[EnhancedFood]) -> MealTotals:
        """Sum portion nutrition of the given foods."""
        return cls(
            calories=round_half_up(sum(f.nutrition.calories for f in foods)),
            protein=round_half_up(sum(f.nutrition.protein for f in foods), 1),
            carbs=round_half_up(sum(f.nutrition.carbs for f in foods), 1),
            fat=round_half_up(sum(f.nutrition.fat for f in foods), 1),
            fiber=round_half_up(sum(f.nutrition.fiber for f in foods), 1),
        )


class RecognitionResult(BaseModel):
    """
    Envelope handed to the UI and logging collaborators.

    `success=False` carries a user-facing `error`.
    """

    success: bool
    foods: List[EnhancedFood] = Field(default_factory=list)
    meal_type: Optional[MealType] = None
    cuisine: Optional[Cuisine] = None
    totals: MealTotals = Field(default_factory=MealTotals)
    total_calories: float = 0.0
    overall_confidence: int = Field(0, ge=0, le=100)
    processing_time_ms: int = Field(0, ge=0)
    error: Optional[str] = None
