"""
Unit tests for FoodRecognitionService.

The vision provider is an AsyncMock; enhancement runs for real
against the reference table.
"""

from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest

from fitai_food.application.food.recognition_service import (
    NO_FOOD_DETECTED,
    RECOGNITION_FAILED,
    FoodRecognitionService,
    recognition_cache_key,
    validate_image,
)
from fitai_food.domain.feedback.models import FoodFeedback
from fitai_food.domain.food.models import Cuisine, DishObservation, MealType
from fitai_food.domain.shared.errors import (
    InvalidQuantityError,
    RecognitionError,
    ValidationError,
)
from fitai_food.infrastructure.feedback.in_memory_feedback_sink import InMemoryFeedbackSink

IMAGE = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="


@pytest.fixture
def vision(three_dish_meal: List[DishObservation]) -> MagicMock:
    """Vision provider returning the three-dish meal."""
    provider = MagicMock()
    provider.recognize = AsyncMock(return_value=three_dish_meal)
    return provider


@pytest.fixture
def service(vision: MagicMock, cache_factory) -> FoodRecognitionService:
    return FoodRecognitionService(
        vision_provider=vision,
        feedback_sink=InMemoryFeedbackSink(),
        cache=cache_factory(ttl=86400),
    )


class TestValidateImage:
    """Test image payload validation."""

    @pytest.mark.parametrize(
        "image",
        [IMAGE, "data:image/png;base64,iVBORw0KGgo=", "https://cdn.example.com/meal.jpg"],
    )
    def test_accepted(self, image: str) -> None:
        """Data URLs and http(s) URLs should pass."""
        validate_image(image)

    @pytest.mark.parametrize(
        "image",
        ["", "   ", "/9j/4AAQSkZJRg==", "data:image/jpeg;base64,", "data:text/plain;base64,aGk=", "ftp://x/y.jpg"],
    )
    def test_rejected(self, image: str) -> None:
        """Anything else should raise ValidationError."""
        with pytest.raises(ValidationError):
            validate_image(image)

    def test_cache_key_includes_meal_type(self) -> None:
        """Same image for different meals should not share results."""
        assert recognition_cache_key(IMAGE, MealType.LUNCH) != recognition_cache_key(
            IMAGE, MealType.DINNER
        )
        assert recognition_cache_key(IMAGE, MealType.LUNCH).endswith(":lunch")


class TestRecognize:
    """Test photo recognition flow."""

    @pytest.mark.asyncio
    async def test_success(self, service: FoodRecognitionService) -> None:
        """Should enhance every detected dish and total the meal."""
        result = await service.recognize(IMAGE, MealType.LUNCH)

        assert result.success
        assert result.error is None
        assert [f.name for f in result.foods] == ["biryani", "mystery stew", "dosa"]
        assert result.cuisine is Cuisine.INDIAN
        assert result.meal_type is MealType.LUNCH
        assert result.total_calories == sum(f.nutrition.calories for f in result.foods)
        assert result.totals.calories == result.total_calories
        assert 0 < result.overall_confidence <= 95

    @pytest.mark.asyncio
    async def test_cache_hit(self, service: FoodRecognitionService, vision: MagicMock) -> None:
        """Same image and meal type should reuse the result."""
        first = await service.recognize(IMAGE, MealType.LUNCH)
        second = await service.recognize(IMAGE, MealType.LUNCH)
        await service.recognize(IMAGE, MealType.DINNER)

        assert second is first
        assert vision.recognize.await_count == 2

    @pytest.mark.asyncio
    async def test_cache_expires(
        self, service: FoodRecognitionService, vision: MagicMock, clock
    ) -> None:
        """Results older than 24h should be recomputed."""
        await service.recognize(IMAGE, MealType.LUNCH)
        clock.advance(86400)
        await service.recognize(IMAGE, MealType.LUNCH)

        assert vision.recognize.await_count == 2

    @pytest.mark.asyncio
    async def test_stale_results_do_not_accumulate(
        self, service: FoodRecognitionService, clock
    ) -> None:
        """Results for photos never seen again should be swept on later writes."""
        for i in range(10):
            await service.recognize(f"https://cdn.example.com/meal-{i}.jpg", MealType.DINNER)
            clock.advance(2 * 86400)

        assert service.cache.size() <= 1

    @pytest.mark.asyncio
    async def test_no_food_detected(self, service: FoodRecognitionService, vision: MagicMock) -> None:
        """Empty detections should fail softly and not be cached."""
        vision.recognize.return_value = []

        result = await service.recognize(IMAGE, MealType.SNACK)
        await service.recognize(IMAGE, MealType.SNACK)

        assert not result.success
        assert result.error == NO_FOOD_DETECTED
        assert result.foods == []
        assert vision.recognize.await_count == 2

    @pytest.mark.asyncio
    async def test_provider_failure(self, service: FoodRecognitionService, vision: MagicMock) -> None:
        """Vision errors should become a user-facing failure."""
        vision.recognize.side_effect = RecognitionError("invalid JSON")

        result = await service.recognize(IMAGE, MealType.DINNER)

        assert not result.success
        assert result.error == RECOGNITION_FAILED

    @pytest.mark.asyncio
    async def test_invalid_image(self, service: FoodRecognitionService, vision: MagicMock) -> None:
        """Malformed images should be rejected before the vision call."""
        with pytest.raises(ValidationError):
            await service.recognize("not-an-image", MealType.LUNCH)
        vision.recognize.assert_not_awaited()


class TestEnhanceObservations:
    """Test enhancement of pre-detected dishes."""

    @pytest.mark.asyncio
    async def test_enhance(
        self, service: FoodRecognitionService, biryani_observation: DishObservation
    ) -> None:
        """Should enhance without calling the vision provider."""
        result = await service.enhance_observations([biryani_observation], MealType.LUNCH)

        assert result.success
        assert result.total_calories == 516
        assert result.overall_confidence == 95
        service.vision_provider.recognize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty(self, service: FoodRecognitionService) -> None:
        """An empty observation list is a caller error."""
        with pytest.raises(ValidationError):
            await service.enhance_observations([], MealType.LUNCH)


class TestUpdatePortion:
    """Test portion overrides through the facade."""

    @pytest.mark.asyncio
    async def test_update(
        self, service: FoodRecognitionService, biryani_observation: DishObservation
    ) -> None:
        """Halving the portion should halve calories."""
        result = await service.enhance_observations([biryani_observation], MealType.LUNCH)
        food = result.foods[0]

        updated = service.update_portion(food, 100)

        assert updated.nutrition.calories == 258
        assert updated.user_overridden
        assert service.update_portion(updated, 200).nutrition == food.nutrition

    @pytest.mark.asyncio
    async def test_reject_zero(
        self, service: FoodRecognitionService, biryani_observation: DishObservation
    ) -> None:
        """Zero grams should be rejected."""
        result = await service.enhance_observations([biryani_observation], MealType.LUNCH)
        with pytest.raises(InvalidQuantityError):
            service.update_portion(result.foods[0], 0)


class TestSubmitFeedback:
    """Test feedback pass-through."""

    @pytest.mark.asyncio
    async def test_submit(
        self, service: FoodRecognitionService, biryani_observation: DishObservation
    ) -> None:
        """Feedback should reach the sink and come back with stats."""
        result = await service.enhance_observations([biryani_observation], MealType.LUNCH)
        food = result.foods[0]
        feedback = [FoodFeedback(dish_id=food.id, was_correct=True, accuracy_rating=4)]

        submission = await service.submit_feedback("meal-1", feedback, result.foods)

        assert submission.meal_id == "meal-1"
        assert submission.stats.accuracy == 100.0
        assert submission.stats.by_source["reference_db"].total == 1
        assert submission.suggestions == []
        assert service.feedback_sink.get("meal-1") == feedback

    @pytest.mark.asyncio
    async def test_empty_feedback(self, service: FoodRecognitionService) -> None:
        """Empty feedback lists should be rejected."""
        with pytest.raises(ValidationError):
            await service.submit_feedback("meal-1", [])
