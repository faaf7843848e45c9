"""
Food Recognition Service.

Entry point for the UI, meal-logging and feedback collaborators:

- recognize(): image → vision model → enhancement → meal envelope,
  memoised for 24h by image + meal type
- enhance_observations(): enhancement of already-detected dishes
- update_portion(): user portion override
- submit_feedback(): pass-through to the feedback collaborator

Design Pattern: Service Layer + Dependency Injection (ports)
"""

from __future__ import annotations

import hashlib
import time
from typing import List, Optional, Sequence

import structlog

from fitai_food.application.food.enhancement_service import FoodEnhancementService
from fitai_food.domain.feedback.models import (
    FeedbackSubmission,
    FoodFeedback,
    compute_feedback_stats,
    improvement_suggestions,
)
from fitai_food.domain.food import corrections
from fitai_food.domain.food.classifier import classify_meal_cuisine
from fitai_food.domain.food.models import (
    DishObservation,
    EnhancedFood,
    MealTotals,
    MealType,
    RecognitionResult,
    round_half_up,
)
from fitai_food.domain.food.ports import IFeedbackSink, IVisionProvider
from fitai_food.domain.shared.errors import RecognitionError, ValidationError
from fitai_food.infrastructure.cache.ttl_cache import TTLCache

logger = structlog.get_logger(__name__)

RECOGNITION_CACHE_TTL_SECONDS = 24 * 3600
NO_FOOD_DETECTED = "No food items detected in the photo"
RECOGNITION_FAILED = "Food recognition failed, please try again"


def validate_image(image: str) -> None:
    """
    Accept base64 data URLs and http(s) URLs only.

    Raises:
        ValidationError: If the payload is empty or of another kind
    """
    if not isinstance(image, str) or not image.strip():
        raise ValidationError("Image payload is empty")
    value = image.strip()
    if value.startswith("data:image/"):
        if "," not in value or not value.split(",", 1)[1]:
            raise ValidationError("Image data URL has no content")
        return
    if value.startswith(("http://", "https://")):
        return
    raise ValidationError("Invalid image format. Expected base64 data URL (data:image/...)")


def recognition_cache_key(image: str, meal_type: MealType) -> str:
    """sha256 of the image payload plus meal type."""
    digest = hashlib.sha256(image.encode("utf-8")).hexdigest()
    return f"{digest}:{meal_type.value}"


class FoodRecognitionService:
    """
    Food recognition facade.

    Dependencies (injected via Ports/Interfaces):
    - vision_provider: IVisionProvider - black-box vision model
    - enhancer: FoodEnhancementService - per-dish pipeline
    - feedback_sink: IFeedbackSink - feedback collaborator (optional)
    - cache: TTLCache for recognition results (24h)

    Example:
        >>> service = FoodRecognitionService(vision_provider=provider)
        >>> result = await service.recognize(image, MealType.LUNCH)
        >>> result.total_calories
        612.0
    """

    def __init__(
        self,
        vision_provider: Optional[IVisionProvider] = None,
        enhancer: Optional[FoodEnhancementService] = None,
        feedback_sink: Optional[IFeedbackSink] = None,
        cache: Optional[TTLCache[RecognitionResult]] = None,
    ) -> None:
        self.vision_provider = vision_provider
        self.enhancer = enhancer if enhancer is not None else FoodEnhancementService()
        self.feedback_sink = feedback_sink
        self.cache = (
            cache
            if cache is not None
            else TTLCache(default_ttl_seconds=RECOGNITION_CACHE_TTL_SECONDS, name="recognition")
        )

    async def recognize(
        self,
        image: str,
        meal_type: MealType,
        cuisine_hint: Optional[str] = None,
    ) -> RecognitionResult:
        """
        Recognise and enhance the dishes in a meal photo.

        Args:
            image: Base64 data URL or http(s) URL
            meal_type: Meal slot
            cuisine_hint: Optional cuisine/region hint

        Returns:
            RecognitionResult; `success=False` with a user-facing error
            when the model fails or sees no food

        Raises:
            ValidationError: If the image payload is malformed
        """
        validate_image(image)
        if self.vision_provider is None:
            raise RecognitionError("No vision provider configured")

        key = recognition_cache_key(image, meal_type)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info("recognition_cache_hit", meal_type=meal_type.value)
            return cached

        started = time.perf_counter()
        try:
            observations = await self.vision_provider.recognize(image, meal_type)
        except RecognitionError as e:
            logger.error("recognition_failed", meal_type=meal_type.value, error=str(e))
            return RecognitionResult(
                success=False,
                meal_type=meal_type,
                processing_time_ms=self._elapsed_ms(started),
                error=RECOGNITION_FAILED,
            )

        if not observations:
            logger.info("recognition_empty", meal_type=meal_type.value)
            return RecognitionResult(
                success=False,
                meal_type=meal_type,
                processing_time_ms=self._elapsed_ms(started),
                error=NO_FOOD_DETECTED,
            )

        result = await self._enhance(observations, meal_type, cuisine_hint, started)
        self.cache.set(key, result)
        return result

    async def enhance_observations(
        self,
        observations: Sequence[DishObservation],
        meal_type: MealType,
        cuisine_hint: Optional[str] = None,
    ) -> RecognitionResult:
        """
        Enhance already-detected dishes, skipping the vision call.

        Raises:
            ValidationError: If `observations` is empty
        """
        if not observations:
            raise ValidationError("At least one dish observation is required")
        return await self._enhance(observations, meal_type, cuisine_hint, time.perf_counter())

    async def _enhance(
        self,
        observations: Sequence[DishObservation],
        meal_type: MealType,
        cuisine_hint: Optional[str],
        started: float,
    ) -> RecognitionResult:
        foods = await self.enhancer.enhance_dishes(observations, cuisine_hint)
        totals = MealTotals.from_foods(foods)
        overall = round_half_up(sum(f.confidence for f in foods) / len(foods)) if foods else 0

        result = RecognitionResult(
            success=True,
            foods=foods,
            meal_type=meal_type,
            cuisine=classify_meal_cuisine([o.name for o in observations], cuisine_hint),
            totals=totals,
            total_calories=totals.calories,
            overall_confidence=int(overall),
            processing_time_ms=self._elapsed_ms(started),
        )
        logger.info(
            "recognition_complete",
            meal_type=meal_type.value,
            foods=len(foods),
            total_calories=result.total_calories,
            overall_confidence=result.overall_confidence,
            processing_time_ms=result.processing_time_ms,
        )
        return result

    def update_portion(self, food: EnhancedFood, grams: float) -> EnhancedFood:
        """
        Rescale a food to a user-specified portion.

        Raises:
            InvalidQuantityError: If grams <= 0
        """
        updated = corrections.update_portion(food, grams)
        logger.info(
            "portion_updated",
            food_id=food.id,
            grams=updated.portion.estimated_grams,
            calories=updated.nutrition.calories,
        )
        return updated

    async def submit_feedback(
        self,
        meal_id: str,
        feedback: List[FoodFeedback],
        foods: Sequence[EnhancedFood] = (),
    ) -> FeedbackSubmission:
        """
        Forward feedback to the feedback collaborator.

        Args:
            meal_id: Meal the feedback refers to
            feedback: One record per rated dish
            foods: Enhanced foods of the meal, for grouped statistics

        Returns:
            FeedbackSubmission with summary statistics

        Raises:
            ValidationError: If `feedback` is empty
        """
        if not feedback:
            raise ValidationError("Feedback list is empty")

        if self.feedback_sink is not None:
            await self.feedback_sink.submit(meal_id, list(feedback))

        stats = compute_feedback_stats(feedback, foods)
        submission = FeedbackSubmission(
            meal_id=meal_id,
            feedback=list(feedback),
            stats=stats,
            suggestions=improvement_suggestions(stats),
        )
        logger.info(
            "feedback_submitted",
            meal_id=meal_id,
            count=stats.total,
            accuracy=stats.accuracy,
            average_rating=stats.average_rating,
        )
        return submission

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return max(0, int((time.perf_counter() - started) * 1000))
