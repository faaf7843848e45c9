"""
USDA FoodData Central API client - Implements INutritionSource port.

Key Features:
- Name search against /foods/search (Foundation, SR Legacy, Survey)
- Circuit breaker (5 transport failures → 60s open)
- Retry logic (exponential backoff) on timeouts and connection errors
- Nutrient extraction by USDA nutrient number
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
import structlog
from circuitbreaker import CircuitBreakerError, circuit
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fitai_food.domain.food.models import ExternalNutritionRecord, NutritionValues
from fitai_food.domain.nutrition.aggregation import match_confidence
from fitai_food.domain.shared.errors import (
    ExternalServiceError,
    RateLimitError,
    ServiceUnavailableError,
    TimeoutError,
)

logger = structlog.get_logger(__name__)

# USDA nutrient numbers → NutritionValues fields
NUTRIENT_NUMBERS: Dict[str, str] = {
    "208": "calories",  # Energy (kcal)
    "203": "protein",
    "205": "carbs",
    "204": "fat",
    "291": "fiber",
    "269": "sugar",
    "307": "sodium",  # mg
}

_TRANSPORT_ERRORS = (asyncio.TimeoutError, aiohttp.ClientConnectionError)


def extract_nutrients(food: Dict[str, Any]) -> Dict[str, float]:
    """
    Map a USDA food's `foodNutrients` list to NutritionValues fields.

    Search results carry `nutrientNumber`/`value`; detail responses nest
    the number under `nutrient.number` with `amount`. Both are accepted.

    Example:
        >>> extract_nutrients({"foodNutrients": [{"nutrientNumber": "208", "value": 89}]})
        {'calories': 89.0}
    """
    values: Dict[str, float] = {}
    for entry in food.get("foodNutrients") or []:
        number = entry.get("nutrientNumber")
        if number is None and isinstance(entry.get("nutrient"), dict):
            number = entry["nutrient"].get("number")
        field = NUTRIENT_NUMBERS.get(str(number)) if number is not None else None
        amount = entry.get("value", entry.get("amount"))
        if field is None or amount is None:
            continue
        try:
            values.setdefault(field, float(amount))
        except (TypeError, ValueError):
            continue
    return values


class USDAClient:
    """
    USDA FoodData Central client implementing INutritionSource.

    Without an API key the client reports itself unavailable and the
    lookup service skips it.

    Example:
        >>> async with USDAClient(api_key="...") as client:
        ...     record = await client.search("chicken curry")
    """

    BASE_URL = "https://api.nal.usda.gov/fdc/v1"
    DATA_TYPES = "Foundation,SR Legacy,Survey (FNDDS)"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout_seconds: float = 10,
        page_size: int = 5,
    ) -> None:
        """
        Initialize USDA client.

        API documentation: https://fdc.nal.usda.gov/api-guide

        Args:
            api_key: USDA FoodData Central API key
            timeout_seconds: Per-request timeout
            page_size: Results requested per search
        """
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.page_size = page_size
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def name(self) -> str:
        return "USDA"

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def __aenter__(self) -> USDAClient:
        """Async context manager entry."""
        self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    @circuit(
        failure_threshold=5,
        recovery_timeout=60,
        expected_exception=_TRANSPORT_ERRORS,
        name="usda_search",
    )
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(_TRANSPORT_ERRORS),
        reraise=True,
    )
    async def _search_foods(self, query: str) -> List[Dict[str, Any]]:
        params: Dict[str, str] = {
            "query": query,
            "dataType": self.DATA_TYPES,
            "pageSize": str(self.page_size),
            "api_key": self.api_key or "",
        }
        async with self._get_session().get(
            f"{self.BASE_URL}/foods/search",
            params=params,
            timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
        ) as response:
            if response.status == 429:
                raise RateLimitError("USDA API rate limit exceeded")
            if response.status >= 400:
                raise ExternalServiceError(f"USDA API error: {response.status}")
            data = await response.json()

        foods = data.get("foods", []) if isinstance(data, dict) else []
        return foods if isinstance(foods, list) else []

    async def search(self, food_name: str) -> Optional[ExternalNutritionRecord]:
        """
        Search USDA and map the first usable hit.

        Args:
            food_name: Food name to search for

        Returns:
            Per-100g record or None if nothing usable was found

        Raises:
            ServiceUnavailableError: If unconfigured or circuit open
            TimeoutError: If the request keeps timing out
            RateLimitError: On HTTP 429
            ExternalServiceError: On other API errors
        """
        if not self.is_available():
            raise ServiceUnavailableError("USDA API key not configured")

        try:
            foods = await self._search_foods(food_name)
        except CircuitBreakerError as e:
            raise ServiceUnavailableError("USDA circuit open") from e
        except asyncio.TimeoutError as e:
            raise TimeoutError("USDA API timeout") from e
        except (aiohttp.ClientError, RetryError) as e:
            raise ExternalServiceError(f"USDA API client error: {e}") from e

        for food in foods:
            nutrients = extract_nutrients(food)
            if "calories" not in nutrients:
                continue
            description = food.get("description") or ""
            record = ExternalNutritionRecord(
                nutrition=NutritionValues(
                    calories=nutrients["calories"],
                    protein=nutrients.get("protein", 0.0),
                    carbs=nutrients.get("carbs", 0.0),
                    fat=nutrients.get("fat", 0.0),
                    fiber=nutrients.get("fiber", 0.0),
                    sugar=nutrients.get("sugar"),
                    sodium=nutrients.get("sodium"),
                ),
                source=self.name,
                confidence=match_confidence(food_name, description),
                canonical_name=description or None,
            )
            logger.debug(
                "usda_food_found",
                query=food_name,
                description=description,
                fdc_id=food.get("fdcId"),
                confidence=record.confidence,
            )
            return record

        logger.info("usda_no_usable_result", query=food_name, results=len(foods))
        return None

    async def lookup_barcode(self, barcode: str) -> Optional[ExternalNutritionRecord]:
        """Barcode lookup is served by OpenFoodFacts."""
        return None
