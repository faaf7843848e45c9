"""
OpenAI vision provider - Implements IVisionProvider port.

Sends the meal photo to a vision-capable chat model in JSON mode and
maps the answer to DishObservation objects. Nutrition is requested per
100g so it can be scaled and corrected downstream.
"""

from __future__ import annotations

import json
import math
from typing import Any, Dict, List, Optional

import structlog
from circuitbreaker import CircuitBreakerError, circuit
from openai import APIConnectionError, APIError, APITimeoutError, AsyncOpenAI
from pydantic import ValidationError as PydanticValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from fitai_food.domain.food.models import DishObservation, FoodCategory, MealType
from fitai_food.domain.shared.errors import RecognitionError

logger = structlog.get_logger(__name__)

_TRANSIENT_ERRORS = (APIConnectionError, APITimeoutError)

SYSTEM_PROMPT = "You are an expert nutritionist. Answer with a single JSON object."


def build_recognition_prompt(meal_type: MealType) -> str:
    """Prompt asking for every visible dish with per-100g nutrition."""
    return f"""Analyze this {meal_type.value} image and identify all visible food items.

Return JSON: {{"foods": [ ... ]}} where each item has:
- "name": specific dish name (e.g. "Chicken Biryani", not just "rice")
- "local_name": native/regional name if applicable, else null
- "category": one of main, side, snack, sweet, beverage
- "cuisine": cuisine type, plus region for Indian food (e.g. "south indian")
- "estimated_grams": portion weight estimated from visual size
- "calories", "protein", "carbs", "fat", "fiber": values PER 100 GRAMS
- "ingredients": visible or typical main ingredients
- "confidence": 0-100, below 50 if unsure
- "notes": cooking style hints (fried, steamed, gravy, tandoor...)

Common portion references: small bowl ~150g, medium bowl ~250g,
1 roti ~30-40g, 1 cup cooked rice ~180g, palm-sized meat ~100g.
Return {{"foods": []}} if no food is visible."""


_NUMERIC_FIELDS = (
    "estimated_grams",
    "calories",
    "protein",
    "carbs",
    "fat",
    "fiber",
    "sugar",
    "sodium",
)
_TEXT_FIELDS = ("local_name", "cuisine", "notes")


def _non_negative(value: Any) -> Optional[float]:
    """Finite non-negative number, or None."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def _clean_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """Reset unusable optional fields to None so the dish itself survives."""
    data = dict(item)
    if data.get("category") not in {c.value for c in FoodCategory}:
        data["category"] = None
    for field in _NUMERIC_FIELDS:
        data[field] = _non_negative(data.get(field))
    confidence = _non_negative(data.get("confidence"))
    data["confidence"] = confidence if confidence is not None and confidence <= 100 else None
    for field in _TEXT_FIELDS:
        if not isinstance(data.get(field), str):
            data[field] = None
    ingredients = data.get("ingredients")
    data["ingredients"] = (
        [i for i in ingredients if isinstance(i, str)] if isinstance(ingredients, list) else []
    )
    return data


def parse_observations(payload: Dict[str, Any]) -> List[DishObservation]:
    """
    Map the model's JSON answer to observations.

    Invalid optional fields are dropped; an item is skipped only when it
    has no usable name. A payload without a `foods` list raises
    RecognitionError.
    """
    foods = payload.get("foods")
    if not isinstance(foods, list):
        raise RecognitionError("Vision model response has no 'foods' list")

    observations = []
    for index, item in enumerate(foods):
        if not isinstance(item, dict):
            logger.warning("vision_item_skipped", index=index, reason="not an object")
            continue
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            logger.warning("vision_item_skipped", index=index, reason="missing name")
            continue
        try:
            observations.append(DishObservation.model_validate(_clean_item(item)))
        except PydanticValidationError as e:
            logger.warning("vision_item_skipped", index=index, errors=e.error_count())
    return observations


class OpenAIVisionProvider:
    """
    IVisionProvider backed by OpenAI chat completions.

    Example:
        >>> provider = OpenAIVisionProvider(api_key="sk-...")
        >>> dishes = await provider.recognize(image_url, MealType.LUNCH)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        timeout: float = 30,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        """
        Initialize provider.

        Args:
            api_key: OpenAI API key
            model: Vision-capable model
            timeout: Request timeout in seconds
            client: Optional pre-configured AsyncOpenAI client (for testing)

        Raises:
            ValueError: If neither api_key nor client is given
        """
        if client is None and not api_key:
            raise ValueError("OPENAI_API_KEY not configured")
        self.model = model
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    async def close(self) -> None:
        await self._client.close()

    @circuit(
        failure_threshold=5,
        recovery_timeout=60,
        expected_exception=_TRANSIENT_ERRORS,
        name="openai_vision",
    )
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True,
    )
    async def _complete(self, messages: List[Dict[str, Any]]) -> str:
        completion = await self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            response_format={"type": "json_object"},
            temperature=0.3,
            max_tokens=2000,
        )
        return completion.choices[0].message.content or ""

    async def recognize(self, image: str, meal_type: MealType) -> List[DishObservation]:
        """
        Detect dishes in a meal photo.

        Raises:
            RecognitionError: On API failure or invalid JSON
        """
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": build_recognition_prompt(meal_type)},
                    {"type": "image_url", "image_url": {"url": image}},
                ],
            },
        ]

        try:
            content = await self._complete(messages)
        except CircuitBreakerError as e:
            raise RecognitionError("Vision service temporarily unavailable") from e
        except APIError as e:
            logger.error("vision_api_failed", model=self.model, error=str(e))
            raise RecognitionError(f"Vision model call failed: {e}") from e

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            raise RecognitionError("Vision model returned invalid JSON") from e
        if not isinstance(payload, dict):
            raise RecognitionError("Vision model returned invalid JSON")

        observations = parse_observations(payload)
        logger.info(
            "vision_recognized",
            model=self.model,
            meal_type=meal_type.value,
            dishes=len(observations),
        )
        return observations
