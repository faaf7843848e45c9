"""
External Nutrition Lookup Service.

Fans a food name out to every configured nutrition source, validates
the answers and aggregates them into one confidence-weighted record.

Flow:
1. Check cache (normalised name)
2. Query all available sources concurrently, each under a timeout
3. Discard implausible records
4. Aggregate survivors and cache the result

Source failures are logged and absorbed: one slow or failing database
lowers confidence, never availability.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

import structlog

from fitai_food.domain.food.models import ExternalNutritionRecord
from fitai_food.domain.food.ports import INutritionSource
from fitai_food.domain.nutrition.aggregation import DEFAULT_CONFIDENCE_CEILING, aggregate_records
from fitai_food.domain.nutrition.validation import is_plausible
from fitai_food.domain.shared.value_objects import normalize_food_name
from fitai_food.infrastructure.cache.ttl_cache import TTLCache

logger = structlog.get_logger(__name__)

NUTRITION_CACHE_TTL_SECONDS = 7 * 24 * 3600


class NutritionLookupService:
    """
    Multi-source nutrition lookup with aggregation and caching.

    Example:
        >>> service = NutritionLookupService([usda_client, off_client])
        >>> record = await service.lookup("dal makhani")
        >>> record.source if record else None
        'USDA + OpenFoodFacts'
    """

    def __init__(
        self,
        sources: Sequence[INutritionSource],
        cache: Optional[TTLCache[ExternalNutritionRecord]] = None,
        timeout_seconds: float = 10.0,
        confidence_ceiling: int = DEFAULT_CONFIDENCE_CEILING,
    ) -> None:
        """Initialize service.

        Args:
            sources: Nutrition sources, queried concurrently
            cache: Lookup cache (new 7-day TTLCache if None)
            timeout_seconds: Per-source timeout
            confidence_ceiling: Cap for aggregated confidence
        """
        self.sources = list(sources)
        self.cache = (
            cache
            if cache is not None
            else TTLCache(default_ttl_seconds=NUTRITION_CACHE_TTL_SECONDS, name="nutrition")
        )
        self.timeout_seconds = timeout_seconds
        self.confidence_ceiling = confidence_ceiling
        self._requests = 0
        self._successes = 0

    def _available_sources(self) -> List[INutritionSource]:
        return [source for source in self.sources if source.is_available()]

    async def _query_source(
        self, source: INutritionSource, food_name: str
    ) -> Optional[ExternalNutritionRecord]:
        return await asyncio.wait_for(source.search(food_name), timeout=self.timeout_seconds)

    def _collect(
        self,
        sources: Sequence[INutritionSource],
        results: Sequence[Any],
        food_name: str,
    ) -> List[ExternalNutritionRecord]:
        records = []
        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "nutrition_source_failed",
                    source=source.name,
                    query=food_name,
                    error_type=type(result).__name__,
                    error=str(result),
                )
                continue
            if result is None:
                continue
            if not is_plausible(result.nutrition):
                logger.info(
                    "nutrition_record_discarded",
                    source=source.name,
                    query=food_name,
                    calories=result.nutrition.calories,
                )
                continue
            records.append(result)
        return records

    async def lookup(self, food_name: str) -> Optional[ExternalNutritionRecord]:
        """
        Aggregated per-100g record for a food name.

        Args:
            food_name: Dish or food name

        Returns:
            Aggregated record, or None if no source produced a valid one
        """
        key = normalize_food_name(food_name)
        if not key:
            return None

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("nutrition_lookup_cached", query=key, source=cached.source)
            return cached

        sources = self._available_sources()
        if not sources:
            logger.debug("nutrition_lookup_no_sources", query=key)
            return None

        self._requests += 1
        results = await asyncio.gather(
            *(self._query_source(source, key) for source in sources),
            return_exceptions=True,
        )
        records = self._collect(sources, results, key)

        aggregated = aggregate_records(records, ceiling=self.confidence_ceiling)
        if aggregated is None:
            logger.info("nutrition_lookup_empty", query=key, sources=len(sources))
            return None

        self._successes += 1
        self.cache.set(key, aggregated)
        logger.info(
            "nutrition_lookup_complete",
            query=key,
            source=aggregated.source,
            confidence=aggregated.confidence,
            calories=aggregated.nutrition.calories,
        )
        return aggregated

    async def lookup_barcode(self, barcode: str) -> Optional[ExternalNutritionRecord]:
        """
        Per-100g record for a packaged product barcode.

        The first source answering with a plausible record wins.
        """
        code = barcode.strip()
        key = f"barcode:{code}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        self._requests += 1
        for source in self._available_sources():
            try:
                record = await asyncio.wait_for(
                    source.lookup_barcode(code), timeout=self.timeout_seconds
                )
            except Exception as e:
                logger.warning(
                    "barcode_source_failed",
                    source=source.name,
                    barcode=code,
                    error=str(e),
                )
                continue
            if record is not None and is_plausible(record.nutrition):
                self._successes += 1
                self.cache.set(key, record)
                logger.info("barcode_lookup_complete", barcode=code, source=record.source)
                return record

        logger.info("barcode_not_found", barcode=code)
        return None

    def clear_cache(self) -> None:
        """Drop all cached lookups."""
        self.cache.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Lookup statistics.

        Returns:
            Dict with:
            - cache_size: Cached entries
            - requests: Lookups that reached the sources
            - successes: Lookups that produced a record
            - success_rate: successes / requests in percent
        """
        rate = 100.0 * self._successes / self._requests if self._requests else 0.0
        return {
            "cache_size": self.cache.size(),
            "requests": self._requests,
            "successes": self._successes,
            "success_rate": round(rate, 1),
            "sources": [source.name for source in self._available_sources()],
        }
