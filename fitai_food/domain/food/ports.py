"""
Ports (Interfaces) for the enhancement pipeline.

Abstract interfaces for the external collaborators used by the
application services: nutrition databases, the vision model and the
feedback store.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from fitai_food.domain.feedback.models import FoodFeedback
from fitai_food.domain.food.models import DishObservation, ExternalNutritionRecord, MealType


@runtime_checkable
class INutritionSource(Protocol):
    """
    Port for a third-party nutrition database.

    Implementations return the per-100g profile of the best hit for a
    name. Confidence scoring against the query is done by the caller.
    """

    @property
    def name(self) -> str:
        """Source identifier used as provenance ("USDA", "OpenFoodFacts")."""
        ...

    def is_available(self) -> bool:
        """False if the source is not configured (e.g. missing API key)."""
        ...

    async def search(self, food_name: str) -> Optional[ExternalNutritionRecord]:
        """
        Look up a food by name.

        Args:
            food_name: Normalised food name

        Returns:
            Record with `canonical_name` set to the database's name for
            the hit, or None if nothing usable was found

        Raises:
            ExternalServiceError: On transport or API failures
        """
        ...

    async def lookup_barcode(self, barcode: str) -> Optional[ExternalNutritionRecord]:
        """
        Look up a packaged product by barcode.

        Sources without barcode support return None.
        """
        ...


@runtime_checkable
class IVisionProvider(Protocol):
    """
    Port for the vision-language model.

    The model is a black box returning the dishes it sees with rough
    per-100g nutrition guesses and a confidence.
    """

    async def recognize(self, image: str, meal_type: MealType) -> List[DishObservation]:
        """
        Detect dishes in a meal photo.

        Args:
            image: Base64 data URL or http(s) image URL
            meal_type: Meal slot, used as prompt context

        Returns:
            Detected dishes (possibly empty)

        Raises:
            RecognitionError: If the model call fails or answers garbage
        """
        ...


@runtime_checkable
class IFeedbackSink(Protocol):
    """Port for the feedback collaborator (storage/learning is external)."""

    async def submit(self, meal_id: str, feedback: List[FoodFeedback]) -> None:
        """Persist or forward feedback records for a meal."""
        ...
