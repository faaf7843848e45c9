"""
OpenFoodFacts API client - Implements INutritionSource port.

Handles name search (legacy cgi search endpoint) and barcode lookup
(v2 product endpoint). No API key required.
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
    ServiceUnavailableError,
    TimeoutError,
)
from fitai_food.domain.shared.value_objects import Barcode

logger = structlog.get_logger(__name__)

BARCODE_CONFIDENCE = 90
BARCODE_SOURCE = "OpenFoodFacts_Barcode"
# Sodium is 40% of salt by mass
SALT_TO_SODIUM = 1 / 2.5

_TRANSPORT_ERRORS = (asyncio.TimeoutError, aiohttp.ClientConnectionError)

_NUTRIMENT_KEYS = (
    "energy-kcal_100g",
    "energy_100g",
    "proteins_100g",
    "carbohydrates_100g",
    "fat_100g",
    "fiber_100g",
    "sugars_100g",
    "sodium_100g",
    "salt_100g",
)


def parse_nutriments(nutriments: Dict[str, Any]) -> Optional[NutritionValues]:
    """
    Map OpenFoodFacts `nutriments` (per 100g) to NutritionValues.

    Sodium is reported in mg: taken from `sodium_100g` (grams) when
    present, otherwise derived from `salt_100g`.

    Returns:
        NutritionValues, or None if energy is missing or any value is
        negative
    """

    def number(key: str) -> Optional[float]:
        value = nutriments.get(key)
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    negative = [key for key in _NUTRIMENT_KEYS if (number(key) or 0.0) < 0]
    if negative:
        logger.warning("off_negative_nutriments", fields=negative)
        return None

    calories = number("energy-kcal_100g")
    if calories is None:
        energy_kj = number("energy_100g")
        calories = energy_kj / 4.184 if energy_kj is not None else None
    if calories is None:
        return None

    sodium_g = number("sodium_100g")
    if sodium_g is None:
        salt_g = number("salt_100g")
        sodium_g = salt_g * SALT_TO_SODIUM if salt_g is not None else None

    return NutritionValues(
        calories=calories,
        protein=number("proteins_100g") or 0.0,
        carbs=number("carbohydrates_100g") or 0.0,
        fat=number("fat_100g") or 0.0,
        fiber=number("fiber_100g") or 0.0,
        sugar=number("sugars_100g"),
        sodium=sodium_g * 1000 if sodium_g is not None else None,
    )


class OpenFoodFactsClient:
    """OpenFoodFacts API client."""

    BASE_URL = "https://world.openfoodfacts.org"
    USER_AGENT = "FitAI-Food/1.0"

    def __init__(
        self,
        timeout_seconds: float = 10,
        page_size: int = 5,
    ) -> None:
        """Initialize API client.

        Args:
            timeout_seconds: Request timeout
            page_size: Products requested per search
        """
        self.timeout_seconds = timeout_seconds
        self.page_size = page_size
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def name(self) -> str:
        return "OpenFoodFacts"

    def is_available(self) -> bool:
        return True

    async def __aenter__(self) -> OpenFoodFactsClient:
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(headers={"User-Agent": self.USER_AGENT})
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
            self._session = aiohttp.ClientSession(headers={"User-Agent": self.USER_AGENT})
        return self._session

    @circuit(
        failure_threshold=5,
        recovery_timeout=60,
        expected_exception=_TRANSPORT_ERRORS,
        name="openfoodfacts_get",
    )
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(_TRANSPORT_ERRORS),
        reraise=True,
    )
    async def _get_json(
        self, url: str, params: Optional[Dict[str, str]] = None
    ) -> Optional[Dict[str, Any]]:
        async with self._get_session().get(
            url,
            params=params,
            timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
        ) as response:
            if response.status == 404:
                return None
            if response.status >= 400:
                raise ExternalServiceError(f"OpenFoodFacts API error: {response.status}")
            data = await response.json()
        return data if isinstance(data, dict) else None

    async def _fetch(
        self, url: str, params: Optional[Dict[str, str]] = None
    ) -> Optional[Dict[str, Any]]:
        try:
            return await self._get_json(url, params)
        except CircuitBreakerError as e:
            raise ServiceUnavailableError("OpenFoodFacts circuit open") from e
        except asyncio.TimeoutError as e:
            raise TimeoutError("OpenFoodFacts API timeout") from e
        except (aiohttp.ClientError, RetryError) as e:
            raise ExternalServiceError(f"OpenFoodFacts API client error: {e}") from e

    async def search(self, food_name: str) -> Optional[ExternalNutritionRecord]:
        """
        Search products by name and map the first one with energy data.

        Raises:
            TimeoutError: If request times out
            ExternalServiceError: If API error
        """
        data = await self._fetch(
            f"{self.BASE_URL}/cgi/search.pl",
            params={
                "search_terms": food_name,
                "search_simple": "1",
                "action": "process",
                "json": "1",
                "page_size": str(self.page_size),
            },
        )
        products: List[Dict[str, Any]] = (data or {}).get("products") or []

        for product in products:
            nutrition = parse_nutriments(product.get("nutriments") or {})
            if nutrition is None:
                continue
            product_name = product.get("product_name") or ""
            logger.debug(
                "off_product_found",
                query=food_name,
                product_name=product_name,
                code=product.get("code"),
            )
            return ExternalNutritionRecord(
                nutrition=nutrition,
                source=self.name,
                confidence=match_confidence(food_name, product_name),
                canonical_name=product_name or None,
            )

        logger.info("off_no_usable_result", query=food_name, results=len(products))
        return None

    async def lookup_barcode(self, barcode: str) -> Optional[ExternalNutritionRecord]:
        """
        Get a packaged product by barcode.

        Args:
            barcode: 8-13 digit product barcode

        Returns:
            Record with fixed confidence 90, or None if not found

        Raises:
            pydantic.ValidationError: If the barcode is malformed
            TimeoutError: If request times out
            ExternalServiceError: If API error
        """
        code = Barcode.from_string(barcode)
        data = await self._fetch(f"{self.BASE_URL}/api/v2/product/{code.value}")
        if not data or data.get("status") != 1 or not data.get("product"):
            logger.info("off_barcode_not_found", barcode=code.value)
            return None

        product = data["product"]
        nutrition = parse_nutriments(product.get("nutriments") or {})
        if nutrition is None:
            logger.info("off_barcode_without_nutrition", barcode=code.value)
            return None

        logger.info(
            "off_barcode_found",
            barcode=code.value,
            name=product.get("product_name"),
        )
        return ExternalNutritionRecord(
            nutrition=nutrition,
            source=BARCODE_SOURCE,
            confidence=BARCODE_CONFIDENCE,
            canonical_name=product.get("product_name") or None,
        )
