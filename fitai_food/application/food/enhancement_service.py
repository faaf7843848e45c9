"""
Food Enhancement Service.

Drives the enhancement pipeline for every dish of one recognition call:

    normalise → classify → match → portion → cooking/spice detection
    → baseline (reference > external > vision guess) → correct & scale
    → ingredients → confidence

Dishes are enhanced concurrently and independently. A dish whose
enhancement fails degrades to a vision-only record instead of aborting
the meal.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Optional, Sequence

import structlog

from fitai_food.application.nutrition.lookup_service import NutritionLookupService
from fitai_food.domain.food.classifier import (
    RegionClassification,
    categorize_dish,
    classify_dish_cuisine,
    classify_meal_cuisine,
    classify_region,
    standardize_dish_name,
)
from fitai_food.domain.food.corrections import correct_per_100g, scale_to_portion
from fitai_food.domain.food.matcher import DishMatch, match_dish
from fitai_food.domain.food.models import (
    CookingMethod,
    Cuisine,
    DishObservation,
    EnhancedFood,
    EnhancementSource,
    ExternalNutritionRecord,
    FoodCategory,
    NutritionValues,
    PortionSize,
    Region,
    SpiceLevel,
    determine_serving_type,
    round_half_up,
)
from fitai_food.domain.food.reference_data import (
    CATEGORY_DEFAULT_SERVINGS,
    PLACEHOLDER_NUTRITION_PER_100G,
    REGIONAL_CUISINE_DATA,
    traditional_serving_for,
)
from fitai_food.domain.food.rules import (
    COOKING_METHOD_RULES,
    DEFAULT_COOKING_METHOD,
    DISH_SPICE_INGREDIENTS,
    SPICE_LEVEL_RULES,
    first_match,
)
from fitai_food.domain.nutrition.aggregation import DEFAULT_CONFIDENCE_CEILING
from fitai_food.domain.nutrition.validation import is_plausible
from fitai_food.domain.shared.errors import EnrichmentError
from fitai_food.domain.shared.value_objects import FoodId

logger = structlog.get_logger(__name__)

DEFAULT_VISION_CONFIDENCE = 70
HIGH_VISION_CONFIDENCE = 80
REFERENCE_MATCH_BONUS = 20
REGIONAL_CLASSIFICATION_BONUS = 5
DEGRADED_CONFIDENCE_CAP = 60
DEGRADED_DEFAULT_GRAMS = 100.0

# Portion confidence by where the grams came from
REFERENCE_PORTION_CONFIDENCE = 85
TABLE_PORTION_CONFIDENCE = 75
CATEGORY_PORTION_CONFIDENCE = 50


@dataclass(frozen=True, slots=True)
class _Baseline:
    per_100g: NutritionValues
    source: EnhancementSource
    external: Optional[ExternalNutritionRecord] = None


def _dedupe(items: Sequence[str]) -> List[str]:
    seen = set()
    unique = []
    for item in items:
        key = item.strip().lower()
        if key and key not in seen:
            seen.add(key)
            unique.append(item.strip())
    return unique


def vision_guess(observation: DishObservation) -> Optional[NutritionValues]:
    """
    Per-100g profile from the vision model's guess, or None.

    Missing calories are derived from the macros (4/4/9).
    """
    if not observation.has_nutrition_guess():
        return None
    protein = observation.protein or 0.0
    carbs = observation.carbs or 0.0
    fat = observation.fat or 0.0
    calories = observation.calories
    if calories is None:
        calories = protein * 4 + carbs * 4 + fat * 9
    return NutritionValues(
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        fiber=observation.fiber or 0.0,
        sugar=observation.sugar,
        sodium=observation.sodium,
    )


def select_portion(
    observation: DishObservation,
    match: Optional[DishMatch],
    region: Optional[Region],
    category: FoodCategory,
    specialised: bool,
    name: str,
) -> PortionSize:
    """
    Choose the portion in grams.

    For specialised dishes the traditional serving is preferred over the
    vision guess unless the model is confident (>= 80). Missing or zero
    guesses fall back to the reference serving, the traditional serving
    table, then the category default.
    """
    vision_grams = observation.estimated_grams if observation.estimated_grams else None
    vision_confidence = (
        observation.confidence
        if observation.confidence is not None
        else DEFAULT_VISION_CONFIDENCE
    )

    def portion(grams: float, confidence: float) -> PortionSize:
        return PortionSize(
            estimated_grams=grams,
            confidence=int(round_half_up(confidence)),
            serving_type=determine_serving_type(grams),
        )

    if vision_grams and (not specialised or vision_confidence >= HIGH_VISION_CONFIDENCE):
        return portion(vision_grams, vision_confidence)

    if specialised:
        if match is not None:
            return portion(match.dish.traditional_serving_g, REFERENCE_PORTION_CONFIDENCE)
        table_grams = traditional_serving_for(name, region)
        if table_grams is not None:
            return portion(table_grams, TABLE_PORTION_CONFIDENCE)
        if vision_grams:
            return portion(vision_grams, vision_confidence)

    return portion(CATEGORY_DEFAULT_SERVINGS[category], CATEGORY_PORTION_CONFIDENCE)


def detect_cooking_method(
    name: str, notes: Optional[str], match: Optional[DishMatch], specialised: bool
) -> Optional[CookingMethod]:
    """
    Cooking method from name and notes keywords.

    Falls back to the matched dish's method, then to curry for
    specialised dishes. General dishes without a keyword get None
    (no cooking correction).
    """
    text = f"{name} {notes or ''}".lower()
    rule = first_match(COOKING_METHOD_RULES, text)
    if rule is not None:
        return rule.result
    if match is not None:
        return match.dish.cooking_method
    return DEFAULT_COOKING_METHOD if specialised else None


def detect_spice_level(
    name: str, match: Optional[DishMatch], region: Optional[Region], specialised: bool
) -> SpiceLevel:
    """Spice level from name keywords, matched dish, then regional default."""
    if not specialised:
        return SpiceLevel.MILD
    rule = first_match(SPICE_LEVEL_RULES, name)
    if rule is not None:
        return rule.result
    if match is not None:
        return match.dish.spice_level
    if region is None:
        return SpiceLevel.MEDIUM
    return REGIONAL_CUISINE_DATA[region].default_spice_level


def merge_ingredients(
    observation: DishObservation,
    name: str,
    match: Optional[DishMatch],
    region: Optional[Region],
) -> List[str]:
    """
    Vision ingredients plus typical dish spices and regional staples.

    Order is preserved and duplicates are dropped case-insensitively.
    """
    items: List[str] = list(observation.ingredients)
    if not items and match is not None:
        items.extend(match.dish.common_ingredients)
    for rule in DISH_SPICE_INGREDIENTS:
        if rule.matching_keyword(name) is not None:
            items.extend(rule.result)
    if region is not None:
        items.extend(REGIONAL_CUISINE_DATA[region].common_ingredients)
    return _dedupe(items)


class FoodEnhancementService:
    """
    Enhancement orchestrator.

    Dependencies:
    - lookup: NutritionLookupService for dishes without a reference
      match (optional; without it the vision guess is the fallback)

    Example:
        >>> service = FoodEnhancementService(lookup=lookup_service)
        >>> foods = await service.enhance_dishes(observations)
        >>> [f.enhancement_source for f in foods]
        [<EnhancementSource.REFERENCE_DB: 'reference_db'>]
    """

    def __init__(
        self,
        lookup: Optional[NutritionLookupService] = None,
        confidence_ceiling: int = DEFAULT_CONFIDENCE_CEILING,
        best_partial_match: bool = False,
    ) -> None:
        """
        Initialize service.

        Args:
            lookup: External nutrition lookup
            confidence_ceiling: Cap for food confidence
            best_partial_match: Use best-score partial matching
        """
        self.lookup = lookup
        self.confidence_ceiling = confidence_ceiling
        self.best_partial_match = best_partial_match

    async def enhance_dishes(
        self,
        observations: Sequence[DishObservation],
        cuisine_hint: Optional[str] = None,
    ) -> List[EnhancedFood]:
        """
        Enhance every dish, preserving input order.

        Args:
            observations: Dishes from the vision model
            cuisine_hint: Optional cuisine/region hint for the whole meal

        Returns:
            One EnhancedFood per observation
        """
        meal_cuisine = classify_meal_cuisine([o.name for o in observations], cuisine_hint)
        results = await asyncio.gather(
            *(self.enhance_dish(o, cuisine_hint) for o in observations),
            return_exceptions=True,
        )

        foods: List[EnhancedFood] = []
        for observation, result in zip(observations, results):
            if isinstance(result, EnhancedFood):
                foods.append(result)
                continue
            if not isinstance(result, Exception):
                raise result
            logger.warning(
                "dish_enhancement_failed",
                dish=observation.name,
                error_type=type(result.__cause__ or result).__name__,
                error=str(result.__cause__ or result),
            )
            foods.append(self.vision_only_food(observation, meal_cuisine))

        logger.info(
            "dishes_enhanced",
            count=len(foods),
            cuisine=meal_cuisine.value,
            degraded=sum(1 for f in foods if f.enhancement_source is EnhancementSource.VISION_ONLY),
        )
        return foods

    async def enhance_dish(
        self, observation: DishObservation, cuisine_hint: Optional[str] = None
    ) -> EnhancedFood:
        """
        Enhance a single dish.

        Raises:
            EnrichmentError: If any pipeline step fails
        """
        try:
            return await self._enhance(observation, cuisine_hint)
        except EnrichmentError:
            raise
        except Exception as e:
            raise EnrichmentError(f"Enhancement failed for '{observation.name}'") from e

    async def _enhance(
        self, observation: DishObservation, cuisine_hint: Optional[str]
    ) -> EnhancedFood:
        name = standardize_dish_name(observation.name)
        hint = observation.cuisine or cuisine_hint
        cuisine = classify_dish_cuisine(name, hint)
        match = match_dish(name, best_partial=self.best_partial_match)
        if match is not None:
            cuisine = Cuisine.INDIAN
        specialised = cuisine is Cuisine.INDIAN

        region: Optional[Region] = None
        classification: Optional[RegionClassification] = None
        if specialised:
            classification = classify_region(name, hint)
            region = classification.region
            if classification.is_default and match is not None:
                region = match.dish.region

        category = (
            observation.category
            or (match.dish.category if match is not None else None)
            or categorize_dish(name)
        )
        portion = select_portion(observation, match, region, category, specialised, name)
        cooking_method = detect_cooking_method(name, observation.notes, match, specialised)
        spice_level = detect_spice_level(name, match, region, specialised)

        baseline = await self._choose_baseline(name, observation, match)
        per_100g = correct_per_100g(baseline.per_100g, region, cooking_method, spice_level)
        nutrition = scale_to_portion(per_100g, portion.estimated_grams).rounded()

        confidence = self._confidence(observation, match, classification, baseline)

        logger.debug(
            "dish_enhanced",
            dish=name,
            match=match.key if match else None,
            match_strength=match.strength.value if match else None,
            region=region.value if region else None,
            source=baseline.source.value,
            grams=portion.estimated_grams,
            confidence=confidence,
        )

        return EnhancedFood(
            id=FoodId.generate().value,
            name=observation.name,
            local_name=observation.local_name or (match.dish.hindi_name if match else None),
            regional_name=match.dish.regional_name if match else None,
            category=category,
            cuisine=cuisine,
            region=region,
            spice_level=spice_level,
            cooking_method=cooking_method,
            portion=portion,
            nutrition=nutrition,
            nutrition_per_100g=per_100g,
            ingredients=merge_ingredients(observation, name, match, region),
            confidence=confidence,
            enhancement_source=baseline.source,
        )

    async def _choose_baseline(
        self, name: str, observation: DishObservation, match: Optional[DishMatch]
    ) -> _Baseline:
        if match is not None:
            return _Baseline(match.dish.nutrition_per_100g, EnhancementSource.REFERENCE_DB)

        if self.lookup is not None:
            external = await self.lookup.lookup(name)
            if external is not None:
                source = (
                    EnhancementSource.BLENDED
                    if external.is_blended
                    else EnhancementSource.EXTERNAL_API
                )
                return _Baseline(external.nutrition, source, external)

        guess = vision_guess(observation)
        if guess is not None and is_plausible(guess):
            return _Baseline(guess, EnhancementSource.VISION_ONLY)

        logger.info("placeholder_nutrition_used", dish=name)
        return _Baseline(PLACEHOLDER_NUTRITION_PER_100G, EnhancementSource.VISION_ONLY)

    def _confidence(
        self,
        observation: DishObservation,
        match: Optional[DishMatch],
        classification: Optional[RegionClassification],
        baseline: _Baseline,
    ) -> int:
        vision = (
            observation.confidence
            if observation.confidence is not None
            else DEFAULT_VISION_CONFIDENCE
        )
        boosted = vision
        if match is not None:
            boosted += REFERENCE_MATCH_BONUS
        if classification is not None and not classification.is_default:
            boosted += REGIONAL_CLASSIFICATION_BONUS
        if baseline.external is not None:
            boosted = max(boosted, baseline.external.confidence)
        return int(min(self.confidence_ceiling, round_half_up(boosted)))

    def vision_only_food(
        self, observation: DishObservation, cuisine: Cuisine = Cuisine.INTERNATIONAL
    ) -> EnhancedFood:
        """
        Minimal record built from the raw vision guess.

        Used when enhancement of a dish fails. Confidence is capped at 60.
        """
        grams = observation.estimated_grams or DEGRADED_DEFAULT_GRAMS
        per_100g = vision_guess(observation) or PLACEHOLDER_NUTRITION_PER_100G
        vision = (
            observation.confidence
            if observation.confidence is not None
            else DEFAULT_VISION_CONFIDENCE
        )
        confidence = int(min(DEGRADED_CONFIDENCE_CAP, self.confidence_ceiling, round_half_up(vision)))

        return EnhancedFood(
            id=FoodId.generate(prefix="basic").value,
            name=observation.name,
            local_name=observation.local_name,
            category=observation.category or FoodCategory.MAIN,
            cuisine=cuisine,
            portion=PortionSize(
                estimated_grams=grams,
                confidence=confidence,
                serving_type=determine_serving_type(grams),
            ),
            nutrition=scale_to_portion(per_100g, grams).rounded(),
            nutrition_per_100g=per_100g,
            ingredients=_dedupe(observation.ingredients),
            confidence=confidence,
            enhancement_source=EnhancementSource.VISION_ONLY,
        )
